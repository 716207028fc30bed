"""
Progress Store

Latest progress snapshot per jurisdiction, written by orchestrators and read
by pollers. Snapshots are overwritten whole, never merged.
"""
import json
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

import redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from config.settings import Settings, settings as default_settings
from src.tenement_sync.models.progress import SyncProgress, SyncStatus
from src.tenement_sync.models.tenement import ALL_JURISDICTIONS, Jurisdiction
from src.tenement_sync.utils.logger import get_logger

logger = get_logger(__name__)


def now_ms() -> float:
    return time.time() * 1000


def estimated_time_remaining(snapshot: SyncProgress, now: float) -> Optional[float]:
    """
    Milliseconds left at the current throughput.

    Args:
        snapshot: Progress snapshot
        now: Current time in epoch milliseconds

    Returns:
        Rounded estimate, or None unless the run is syncing with records processed
    """
    if snapshot.status != SyncStatus.SYNCING or snapshot.current_record <= 0:
        return None
    elapsed = now - snapshot.start_time
    if snapshot.start_time <= 0 or elapsed <= 0:
        return None
    remaining = max(snapshot.total_records - snapshot.current_record, 0)
    return float(round(elapsed / snapshot.current_record * remaining))


def _key(jurisdiction: Any) -> str:
    return Jurisdiction.parse(jurisdiction).value


class ProgressStore(ABC):
    """
    Keyed snapshot store.

    ``get`` of a jurisdiction that has never been written returns the idle
    default. Reads attach a fresh ETA to syncing snapshots.
    """

    def __init__(self, clock: Callable[[], float] = now_ms):
        self.clock = clock

    @abstractmethod
    def _load(self, key: str) -> Optional[SyncProgress]:
        """Stored snapshot for a key, or None."""

    @abstractmethod
    def _save(self, key: str, snapshot: SyncProgress) -> None:
        """Replace the stored snapshot for a key."""

    def get(self, jurisdiction: Any) -> SyncProgress:
        snapshot = self._load(_key(jurisdiction))
        if snapshot is None:
            return SyncProgress.idle()

        eta = estimated_time_remaining(snapshot, self.clock())
        if eta is not None:
            snapshot = snapshot.model_copy(update={"estimated_time_remaining": eta})
        return snapshot

    def set(self, jurisdiction: Any, snapshot: SyncProgress) -> None:
        self._save(_key(jurisdiction), snapshot)

    def all(self) -> Dict[str, SyncProgress]:
        return {j.value: self.get(j) for j in ALL_JURISDICTIONS}

    def publish(self, jurisdiction: Any, payload: Dict[str, Any]) -> SyncProgress:
        """
        Store a snapshot posted by an external writer.

        The start time is owned by the store: a run entering ``syncing``
        from any other state starts now, otherwise the existing start time
        is kept (or now when there is none).

        Raises:
            UnknownJurisdictionError: if the jurisdiction code is unsupported
            pydantic.ValidationError: if the payload is malformed
        """
        key = _key(jurisdiction)
        snapshot = SyncProgress.model_validate(payload)
        existing = self._load(key)
        now = self.clock()

        if snapshot.status == SyncStatus.SYNCING and (existing is None or existing.status != SyncStatus.SYNCING):
            start_time = now
        elif existing is not None and existing.start_time:
            start_time = existing.start_time
        else:
            start_time = now

        snapshot = snapshot.model_copy(update={"start_time": start_time})
        self._save(key, snapshot)
        return snapshot


class InMemoryProgressStore(ProgressStore):
    """Process-local store guarded by a lock."""

    def __init__(self, clock: Callable[[], float] = now_ms):
        super().__init__(clock)
        self._snapshots: Dict[str, SyncProgress] = {}
        self._lock = threading.Lock()

    def _load(self, key: str) -> Optional[SyncProgress]:
        with self._lock:
            return self._snapshots.get(key)

    def _save(self, key: str, snapshot: SyncProgress) -> None:
        with self._lock:
            self._snapshots[key] = snapshot

    def clear(self) -> None:
        with self._lock:
            self._snapshots.clear()


class RedisProgressStore(ProgressStore):
    """
    Store shared by every API worker, one JSON value per jurisdiction.

    Progress is advisory: a Redis failure is logged and never fails a run.
    Reads that fail report the idle default.
    """

    def __init__(
        self,
        client: redis.Redis,
        ttl_seconds: int = 86400,
        key_prefix: str = "tenement_sync:progress",
        clock: Callable[[], float] = now_ms,
    ):
        super().__init__(clock)
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix

    def _redis_key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    def _load(self, key: str) -> Optional[SyncProgress]:
        try:
            raw = self.client.get(self._redis_key(key))
        except RedisError as e:
            logger.warning("progress_store_read_failed", jurisdiction=key, error=str(e))
            return None

        if raw is None:
            return None
        try:
            return SyncProgress.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.warning("progress_store_read_failed", jurisdiction=key, error=str(e))
            return None

    def _save(self, key: str, snapshot: SyncProgress) -> None:
        payload = json.dumps(snapshot.model_dump(mode="json", by_alias=True))
        try:
            self.client.setex(self._redis_key(key), self.ttl_seconds, payload)
        except RedisError as e:
            logger.warning("progress_store_write_failed", jurisdiction=key, error=str(e))


def create_progress_store(settings: Optional[Settings] = None) -> ProgressStore:
    """
    Build the configured progress store.

    Args:
        settings: Settings instance (defaults to the module singleton)

    Returns:
        InMemoryProgressStore or RedisProgressStore
    """
    settings = settings or default_settings
    backend = settings.progress_backend.lower()

    if backend == "redis":
        client = redis.Redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        logger.info("progress_store_created", backend="redis")
        return RedisProgressStore(client, ttl_seconds=settings.progress_ttl_seconds)

    if backend != "memory":
        raise ValueError(f"Unknown progress backend: {settings.progress_backend}")

    logger.info("progress_store_created", backend="memory")
    return InMemoryProgressStore()
