from __future__ import annotations

import asyncio
import secrets
from datetime import timedelta
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import get_settings
from .database import Database
from .models import utcnow
from .repositories import SqlApiKeyRepository

app = typer.Typer(help="filehost administration: schema setup and API key provisioning")
console = Console()


def _database(url: Optional[str]) -> Database:
    return Database(url or get_settings().DATABASE_URL)


async def _init_db(db: Database) -> None:
    try:
        await db.create_all()
    finally:
        await db.dispose()


async def _create_key(db: Database, owner: str, secret: str, days: int):
    try:
        await db.create_all()
        return await SqlApiKeyRepository(db).create(owner, secret, utcnow() + timedelta(days=days))
    finally:
        await db.dispose()


async def _list_keys(db: Database):
    try:
        return await SqlApiKeyRepository(db).list()
    finally:
        await db.dispose()


@app.command("init-db")
def init_db(database_url: Optional[str] = typer.Option(None, "--database-url", help="Override DATABASE_URL")):
    """Create the apikeys and files tables."""
    asyncio.run(_init_db(_database(database_url)))
    console.print("[green]Schema created[/green]")


@app.command("create-key")
def create_key(
    owner: str = typer.Option(..., "--owner", help="Label of the party the key is issued to"),
    days: int = typer.Option(365, "--days", min=1, help="Days until the key expires"),
    key: Optional[str] = typer.Option(None, "--key", help="Use this secret instead of a random one"),
    database_url: Optional[str] = typer.Option(None, "--database-url", help="Override DATABASE_URL"),
):
    """Issue a new API key."""
    secret = key or secrets.token_urlsafe(32)
    api_key = asyncio.run(_create_key(_database(database_url), owner, secret, days))
    console.print(f"Issued key #{api_key.id} for [bold]{api_key.owner_label}[/bold]")
    console.print(f"X-API-Key: {api_key.secret_value}")
    console.print(f"Expires:   {api_key.expires_at.isoformat()}")


@app.command("list-keys")
def list_keys(database_url: Optional[str] = typer.Option(None, "--database-url", help="Override DATABASE_URL")):
    """Show issued keys and whether they are still valid."""
    keys = asyncio.run(_list_keys(_database(database_url)))
    now = utcnow()
    table = Table(title="API Keys")
    table.add_column("ID")
    table.add_column("Owner")
    table.add_column("Expires")
    table.add_column("Status")
    for key in keys:
        status = "[red]expired[/red]" if key.is_expired(now) else "[green]active[/green]"
        table.add_row(str(key.id), key.owner_label, key.expires_at.isoformat(), status)
    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
