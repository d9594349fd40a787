# =============================================================================
# GOVERNANCE PROPOSAL WATCHER - Proposal Store Unit Tests
# =============================================================================
#
# Tests cover:
# - Key namespacing
# - Redis backend: commands issued, no TTL, error mapping
# - File backend: upsert, persistence across instances, corrupt files
#
# =============================================================================

import json
from unittest.mock import MagicMock, patch

import pytest
import redis

from proposals.models import Proposal
from proposals.storage import (
    FileProposalStore,
    RedisProposalStore,
    open_store,
    proposal_key,
)
from shared.config import RedisSettings, StorageSettings
from shared.exceptions import StoreError


def test_proposal_key():
    assert proposal_key("1") == "proposal:1"
    assert proposal_key("abc-42") == "proposal:abc-42"


class TestRedisProposalStore:
    def setup_method(self):
        self.client = MagicMock()
        self.store = RedisProposalStore(client=self.client)

    def test_exists(self):
        self.client.exists.return_value = 1
        assert self.store.exists("proposal:1") is True
        self.client.exists.return_value = 0
        assert self.store.exists("proposal:1") is False
        self.client.exists.assert_called_with("proposal:1")

    def test_put_sets_json_without_expiry(self):
        p = Proposal("1", "T1", "D1")
        self.store.put("proposal:1", p)

        self.client.set.assert_called_once_with("proposal:1", p.to_json())
        args, kwargs = self.client.set.call_args
        assert "ex" not in kwargs and "px" not in kwargs

    def test_get(self):
        self.client.get.return_value = Proposal("1", "T1", "D1").to_json()
        assert self.store.get("proposal:1") == Proposal("1", "T1", "D1")
        self.client.get.return_value = None
        assert self.store.get("proposal:2") is None

    @pytest.mark.parametrize("method,args", [
        ("exists", ("proposal:1",)),
        ("put", ("proposal:1", Proposal("1"))),
        ("get", ("proposal:1",)),
        ("ping", ()),
    ])
    def test_redis_errors_become_store_errors(self, method, args):
        getattr(self.client, "set" if method == "put" else method).side_effect = (
            redis.exceptions.ConnectionError("Connection refused")
        )
        with pytest.raises(StoreError):
            getattr(self.store, method)(*args)

    def test_builds_client_from_settings(self):
        with patch("proposals.storage.redis.Redis") as mock_redis:
            store = open_store(
                StorageSettings(backend="redis"),
                RedisSettings(addr="cache.internal:6380", password="", db_index=3),
            )
        mock_redis.assert_called_once_with(
            host="cache.internal", port=6380, password=None, db=3, socket_timeout=None
        )
        assert isinstance(store, RedisProposalStore)
        assert store.description == "redis://cache.internal:6380/3"


class TestFileProposalStore:
    def test_put_then_exists(self, tmp_path):
        store = FileProposalStore(tmp_path / "proposals.json")
        assert store.exists("proposal:1") is False

        store.put("proposal:1", Proposal("1", "T1", "D1"))

        assert store.exists("proposal:1") is True
        assert store.get("proposal:1") == Proposal("1", "T1", "D1")

    def test_put_overwrites(self, tmp_path):
        store = FileProposalStore(tmp_path / "proposals.json")
        store.put("proposal:1", Proposal("1", "T1", "D1"))
        store.put("proposal:1", Proposal("1", "T1", "D2"))
        assert store.get("proposal:1").description == "D2"

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "nested" / "proposals.json"
        FileProposalStore(path).put("proposal:9", Proposal("9", "T", "D"))

        reopened = FileProposalStore(path)
        assert reopened.exists("proposal:9")
        on_disk = json.loads(path.read_text(encoding="utf-8"))
        assert on_disk == {
            "proposal:9": {"proposal_id": "9", "content": {"title": "T", "description": "D"}}
        }

    def test_corrupt_file_raises_store_error(self, tmp_path):
        path = tmp_path / "proposals.json"
        path.write_text("{broken", encoding="utf-8")
        store = FileProposalStore(path)
        with pytest.raises(StoreError):
            store.exists("proposal:1")
        with pytest.raises(StoreError):
            store.ping()

    def test_write_failure_raises_store_error(self, tmp_path):
        store = FileProposalStore(tmp_path / "proposals.json")
        with patch("proposals.storage.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StoreError) as exc_info:
                store.put("proposal:1", Proposal("1"))
        assert exc_info.value.proposal_id == "1"
        assert store.exists("proposal:1") is False
        assert list(tmp_path.iterdir()) == []

    def test_open_store_file_backend(self, tmp_path):
        store = open_store(
            StorageSettings(backend="file", path=str(tmp_path / "p.json")),
            RedisSettings(),
        )
        assert isinstance(store, FileProposalStore)
