from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from filehost.auth import KeyValidator
from filehost.errors import InternalError, Unauthenticated
from filehost.repositories import InMemoryApiKeyRepository

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _validator_with(*keys) -> KeyValidator:
    repo = InMemoryApiKeyRepository()

    async def seed() -> None:
        for owner, secret, expires_at in keys:
            await repo.create(owner, secret, expires_at)

    asyncio.run(seed())
    return KeyValidator(repo, clock=lambda: NOW)


def test_valid_key_returns_identity() -> None:
    validator = _validator_with(("alice", "k-alice", NOW + timedelta(days=1)))
    identity = asyncio.run(validator.validate("k-alice"))
    assert identity.key_id == 1
    assert identity.owner_label == "alice"


def test_unknown_key_rejected() -> None:
    validator = _validator_with(("alice", "k-alice", NOW + timedelta(days=1)))
    with pytest.raises(Unauthenticated) as excinfo:
        asyncio.run(validator.validate("k-mallory"))
    assert excinfo.value.status_code == 401


@pytest.mark.parametrize("offset", [timedelta(0), timedelta(seconds=-1), timedelta(days=-30)])
def test_expired_key_rejected(offset: timedelta) -> None:
    validator = _validator_with(("bob", "k-bob", NOW + offset))
    with pytest.raises(Unauthenticated):
        asyncio.run(validator.validate("k-bob"))


def test_expired_and_unknown_keys_look_the_same() -> None:
    validator = _validator_with(("bob", "k-bob", NOW - timedelta(days=1)))
    with pytest.raises(Unauthenticated) as expired:
        asyncio.run(validator.validate("k-bob"))
    with pytest.raises(Unauthenticated) as unknown:
        asyncio.run(validator.validate("k-nobody"))
    assert expired.value.detail == unknown.value.detail


@pytest.mark.parametrize("presented", [None, ""])
def test_missing_key_rejected(presented) -> None:
    validator = _validator_with()
    with pytest.raises(Unauthenticated) as excinfo:
        asyncio.run(validator.validate(presented))
    assert "X-API-Key" in excinfo.value.detail


def test_store_failure_is_not_reported_as_bad_key() -> None:
    class BrokenRepository(InMemoryApiKeyRepository):
        async def get_by_secret(self, secret_value: str):
            raise InternalError("connection refused")

    validator = KeyValidator(BrokenRepository(), clock=lambda: NOW)
    with pytest.raises(InternalError):
        asyncio.run(validator.validate("k-alice"))
