from __future__ import annotations

import asyncio

from typer.testing import CliRunner

from filehost.admin import app
from filehost.database import Database
from filehost.repositories import SqlApiKeyRepository

runner = CliRunner()


def test_create_key_then_list(database_url: str) -> None:
    created = runner.invoke(
        app,
        ["create-key", "--owner", "carol", "--days", "10", "--key", "carol-key", "--database-url", database_url],
    )
    assert created.exit_code == 0, created.output
    assert "carol-key" in created.output

    listed = runner.invoke(app, ["list-keys", "--database-url", database_url])
    assert listed.exit_code == 0, listed.output
    assert "carol" in listed.output
    assert "active" in listed.output


def test_generated_key_is_stored(database_url: str) -> None:
    result = runner.invoke(app, ["create-key", "--owner", "dave", "--database-url", database_url])
    assert result.exit_code == 0, result.output

    async def lookup():
        db = Database(database_url)
        try:
            return await SqlApiKeyRepository(db).list()
        finally:
            await db.dispose()

    keys = asyncio.run(lookup())
    assert len(keys) == 1
    assert keys[0].owner_label == "dave"
    assert keys[0].secret_value in result.output


def test_init_db(database_url: str) -> None:
    result = runner.invoke(app, ["init-db", "--database-url", database_url])
    assert result.exit_code == 0, result.output
    assert "Schema created" in result.output
