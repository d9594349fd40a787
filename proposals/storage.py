# =============================================================================
# GOVERNANCE PROPOSAL WATCHER - PROPOSAL STORE
# =============================================================================
#
# The store is the ONLY source of truth for "have we seen this proposal".
# It is used as an opaque key existence / get / set service.
#
# KEYS:   "proposal:" + proposal_id
# VALUES: Proposal serialized as JSON, no TTL, never deleted
#
# BACKENDS:
# - RedisProposalStore: EXISTS / SET (no expiry) / GET on a Redis database
# - FileProposalStore:  one JSON file mapping key -> record
#
# CONCURRENCY CONSTRAINT:
# exists() followed by put() is NOT atomic. This is safe only because the
# watcher runs a single reconciliation worker. Processing proposals in
# parallel would need per-key mutual exclusion around the exists/put pair.
#
# =============================================================================

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

import redis

from shared.exceptions import StoreError
from .models import Proposal

logger = logging.getLogger(__name__)

KEY_PREFIX = "proposal:"


def proposal_key(proposal_id: str) -> str:
    """Namespaced store key for a proposal ID."""
    return KEY_PREFIX + proposal_id


class ProposalStore(ABC):
    """Key-value persistence for proposals."""

    description = "proposal store"

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check whether a record exists under key."""

    @abstractmethod
    def put(self, key: str, proposal: Proposal) -> None:
        """Upsert a proposal under key (overwrite, no TTL)."""

    @abstractmethod
    def get(self, key: str) -> Optional[Proposal]:
        """Read the proposal stored under key, None if absent."""

    @abstractmethod
    def ping(self) -> None:
        """Verify the store is reachable. Raises StoreError if not."""

    def close(self) -> None:
        """Release resources held by the store."""


# =============================================================================
# REDIS BACKEND
# =============================================================================

class RedisProposalStore(ProposalStore):
    """
    Proposal store backed by a Redis database.

    All redis-py errors are converted to StoreError so the reconciler
    never sees backend-specific exceptions.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        password: Optional[str] = None,
        db: int = 0,
        socket_timeout: Optional[float] = None,
        client: Optional[redis.Redis] = None,
    ):
        """
        Initialize the Redis store.

        Args:
            host: Redis host
            port: Redis port
            password: Redis password (empty/None for no auth)
            db: Database index
            socket_timeout: Optional socket timeout in seconds
            client: Pre-built client (used by tests)
        """
        if client is None:
            client = redis.Redis(
                host=host,
                port=port,
                password=password or None,
                db=db,
                socket_timeout=socket_timeout,
            )
        self.client = client
        self.description = f"redis://{host}:{port}/{db}"

    def exists(self, key: str) -> bool:
        try:
            return self.client.exists(key) > 0
        except redis.exceptions.RedisError as e:
            raise StoreError(f"Redis EXISTS {key} failed: {e}")

    def put(self, key: str, proposal: Proposal) -> None:
        payload = proposal.to_json()
        try:
            self.client.set(key, payload)
        except redis.exceptions.RedisError as e:
            raise StoreError(f"Redis SET {key} failed: {e}", proposal_id=proposal.proposal_id)

    def get(self, key: str) -> Optional[Proposal]:
        try:
            raw = self.client.get(key)
        except redis.exceptions.RedisError as e:
            raise StoreError(f"Redis GET {key} failed: {e}")
        if raw is None:
            return None
        return Proposal.from_json(raw)

    def ping(self) -> None:
        try:
            self.client.ping()
        except redis.exceptions.RedisError as e:
            raise StoreError(f"Cannot connect to {self.description}: {e}")

    def close(self) -> None:
        try:
            self.client.close()
        except redis.exceptions.RedisError as e:
            logger.warning(f"Error closing Redis client: {e}")


# =============================================================================
# FILE BACKEND
# =============================================================================

class FileProposalStore(ProposalStore):
    """
    Proposal store backed by a single JSON file.

    The file maps store keys to proposal records. It is read once and
    rewritten atomically (temp file + rename) on every put.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize the file store.

        Args:
            path: Path to the JSON file (created on first write)
        """
        self.path = Path(path)
        self.description = str(self.path)
        self._records: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self._records is not None:
            return self._records

        if not self.path.exists():
            self._records = {}
            return self._records

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Could not read store file {self.path}: {e}")

        if not isinstance(data, dict):
            raise StoreError(f"Store file {self.path} does not contain a JSON object")

        self._records = data
        logger.debug(f"Loaded {len(data)} records from {self.path}")
        return self._records

    def _save(self, records: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def exists(self, key: str) -> bool:
        return key in self._load()

    def put(self, key: str, proposal: Proposal) -> None:
        records = self._load()
        record = json.loads(proposal.to_json())
        previous = records.get(key)
        records[key] = record
        try:
            self._save(records)
        except OSError as e:
            # Keep memory in line with disk
            if previous is None:
                records.pop(key, None)
            else:
                records[key] = previous
            raise StoreError(
                f"Could not write store file {self.path}: {e}",
                proposal_id=proposal.proposal_id,
            )

    def get(self, key: str) -> Optional[Proposal]:
        record = self._load().get(key)
        if record is None:
            return None
        return Proposal.from_json(json.dumps(record))

    def ping(self) -> None:
        self._load()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Store directory not writable: {e}")


def open_store(storage_settings, redis_settings) -> ProposalStore:
    """
    Build the configured proposal store.

    Args:
        storage_settings: shared.config.StorageSettings
        redis_settings: shared.config.RedisSettings

    Returns:
        ProposalStore instance (not yet pinged)

    Raises:
        StoreError: If the backend is unknown
    """
    if storage_settings.backend == "redis":
        return RedisProposalStore(
            host=redis_settings.host,
            port=redis_settings.port,
            password=redis_settings.password,
            db=redis_settings.db_index,
        )
    if storage_settings.backend == "file":
        return FileProposalStore(storage_settings.path)
    raise StoreError(f"Unknown storage backend: {storage_settings.backend}")


__all__ = [
    "KEY_PREFIX",
    "proposal_key",
    "ProposalStore",
    "RedisProposalStore",
    "FileProposalStore",
    "open_store",
]
