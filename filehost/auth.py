from __future__ import annotations

import hmac
import logging
from datetime import datetime
from typing import Callable, Optional

from .errors import Unauthenticated
from .models import ValidatedIdentity, utcnow
from .repositories import ApiKeyRepository

log = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"


class KeyValidator:
    """
    Checks a presented API key against the key store.

    Unknown and expired keys fail identically. Store failures surface as
    ``InternalError`` from the repository and are not turned into 401s.
    """

    def __init__(self, keys: ApiKeyRepository, clock: Callable[[], datetime] = utcnow) -> None:
        self.keys = keys
        self.clock = clock

    async def validate(self, presented_key: Optional[str]) -> ValidatedIdentity:
        if not presented_key:
            raise Unauthenticated(f"Missing `{API_KEY_HEADER}` header")

        key = await self.keys.get_by_secret(presented_key)
        if key is None or not hmac.compare_digest(key.secret_value.encode(), presented_key.encode()):
            raise Unauthenticated()
        if key.is_expired(self.clock()):
            log.info("Rejected expired API key %s (%s)", key.id, key.owner_label)
            raise Unauthenticated()
        return ValidatedIdentity(key_id=key.id, owner_label=key.owner_label)
