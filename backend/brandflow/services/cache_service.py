# /brandflow/services/cache_service.py

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import structlog

from brandflow.config.settings import settings
from brandflow.flows.errors import PersistenceError
from brandflow.models.domain import CacheEntry
from brandflow.services.document_store import DocumentStore
from brandflow.utils.metrics import cache_operations

# Cache gateway for flow results. Entries live in the document store keyed by a
# normalized fingerprint of the flow input; freshness is decided here against a
# fixed TTL. Stale entries are never deleted, only overwritten by the next store().
# There is no locking: concurrent regenerations of one key race and the last
# write wins.

log = structlog.get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def make_cache_key(prefix: str, identifying_value: str) -> str:
    """`make_cache_key("brand", "Acme  Corp")` -> `"brand_acme_corp"`."""
    normalized = _WHITESPACE.sub("_", identifying_value.strip().lower())
    return f"{prefix}_{normalized}"


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class CacheService:
    def __init__(
        self,
        store: DocumentStore,
        ttl: timedelta,
        collection: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.document_store = store
        self.ttl = ttl
        self.collection = collection or settings.cache_collection
        self.clock = clock

    def is_fresh(self, cached_at: datetime) -> bool:
        # Inclusive: an entry exactly `ttl` old is still served.
        return self.clock() - _as_aware(cached_at) <= self.ttl

    async def lookup(self, key: str) -> Optional[CacheEntry]:
        """Returns the cached entry for `key`, or None on a miss, a stale entry or a read failure."""
        try:
            document = await self.document_store.get(self.collection, key)
        except PersistenceError as e:
            cache_operations.labels(operation="get", status="error").inc()
            log.warning("cache_read_failed", cache_key=key, error=str(e))
            return None

        cached_at = (document or {}).get("cachedAt")
        if not document or not isinstance(cached_at, datetime) or "payload" not in document:
            cache_operations.labels(operation="get", status="miss").inc()
            return None

        if not self.is_fresh(cached_at):
            cache_operations.labels(operation="get", status="stale").inc()
            return None

        cache_operations.labels(operation="get", status="hit").inc()
        return CacheEntry(key=key, payload=document["payload"], cached_at=_as_aware(cached_at))

    async def store(self, key: str, payload: Dict[str, Any], flow_input: Optional[Dict[str, Any]] = None) -> bool:
        """Best-effort write; returns False instead of raising when the store is unavailable."""
        document: Dict[str, Any] = {"payload": payload}
        if flow_input is not None:
            document["input"] = flow_input
        try:
            await self.document_store.set(self.collection, key, document, timestamp_field="cachedAt")
        except PersistenceError as e:
            cache_operations.labels(operation="set", status="error").inc()
            log.warning("cache_write_failed", cache_key=key, error=str(e))
            return False
        cache_operations.labels(operation="set", status="success").inc()
        return True
