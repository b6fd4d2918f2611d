"""
Snapshot stores - Audit Scoring Engine
audit_scoring/services/snapshot_store.py

Persistence collaborators for session snapshots
({tree, global_result, global_template, template_type, timestamp}).
The engine only defines the snapshot shape; durability is up to the store.

  JsonFileSnapshotStore   one JSON file per audit in a local directory
  RedisSnapshotStore      one key per audit, with TTL
  InMemorySnapshotStore   process-local dict (embedding hosts, tests)
"""
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

import redis
from pydantic import ValidationError

from audit_scoring.config import settings
from audit_scoring.core.exceptions import SnapshotStoreException
from audit_scoring.models.results import AuditSnapshot
from audit_scoring.services.redis_cache import RedisCache, get_cache

logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    def save(self, snapshot: AuditSnapshot) -> None:
        ...

    def load(self, audit_id: str) -> Optional[AuditSnapshot]:
        ...


class JsonFileSnapshotStore:
    """Stores snapshots as ``audit_<id>.json`` files."""

    backend = "file"

    def __init__(self, directory: Optional[str] = None):
        self.directory = Path(directory or settings.SNAPSHOT_DIR)

    def path_for(self, audit_id: str) -> Path:
        return self.directory / f"audit_{audit_id}.json"

    def save(self, snapshot: AuditSnapshot) -> None:
        path = self.path_for(snapshot.audit_id)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise SnapshotStoreException(self.backend, snapshot.audit_id, str(e)) from e
        logger.debug(f"Saved snapshot for audit {snapshot.audit_id} to {path}")

    def load(self, audit_id: str) -> Optional[AuditSnapshot]:
        path = self.path_for(audit_id)
        if not path.exists():
            return None
        try:
            return AuditSnapshot.model_validate_json(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise SnapshotStoreException(self.backend, audit_id, str(e)) from e
        except ValidationError as e:
            logger.error(f"Discarding unreadable snapshot {path}: {e.error_count()} error(s)")
            return None


class RedisSnapshotStore:
    """Stores snapshots under ``audit:snapshot:<id>`` with a TTL."""

    backend = "redis"

    def __init__(self, cache: RedisCache, ttl_seconds: Optional[int] = None):
        self.cache = cache
        self.ttl_seconds = ttl_seconds or settings.CACHE_TTL_SNAPSHOT

    @staticmethod
    def key_for(audit_id: str) -> str:
        return f"audit:snapshot:{audit_id}"

    def save(self, snapshot: AuditSnapshot) -> None:
        try:
            self.cache.set(self.key_for(snapshot.audit_id), snapshot, self.ttl_seconds)
        except redis.RedisError as e:
            raise SnapshotStoreException(self.backend, snapshot.audit_id, str(e)) from e

    def load(self, audit_id: str) -> Optional[AuditSnapshot]:
        try:
            return self.cache.get(self.key_for(audit_id), AuditSnapshot)
        except redis.RedisError as e:
            raise SnapshotStoreException(self.backend, audit_id, str(e)) from e
        except ValidationError as e:
            logger.error(f"Discarding unreadable snapshot for audit {audit_id}: {e.error_count()} error(s)")
            return None


class InMemorySnapshotStore:
    backend = "memory"

    def __init__(self):
        self.snapshots: Dict[str, str] = {}

    def save(self, snapshot: AuditSnapshot) -> None:
        self.snapshots[snapshot.audit_id] = snapshot.model_dump_json()

    def load(self, audit_id: str) -> Optional[AuditSnapshot]:
        data = self.snapshots.get(audit_id)
        return AuditSnapshot.model_validate_json(data) if data else None


def get_snapshot_store() -> SnapshotStore:
    """Store selected by SNAPSHOT_BACKEND; falls back to files without Redis."""
    if settings.SNAPSHOT_BACKEND == "redis":
        cache = get_cache()
        if cache is not None:
            return RedisSnapshotStore(cache)
        logger.warning("Redis unavailable, using file snapshot store")
    return JsonFileSnapshotStore()
