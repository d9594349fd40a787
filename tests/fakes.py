"""In-memory collaborators for reconciler/scheduler tests."""
from typing import Dict, List, Optional, Set

from proposals.models import Proposal
from proposals.storage import ProposalStore
from shared.exceptions import FetchError, NotifyError, StoreError


class FakeSource:
    """Returns queued batches; an Exception in the queue is raised instead."""

    def __init__(self, *batches):
        self.batches = list(batches)
        self.calls = 0

    def fetch(self) -> List[Proposal]:
        self.calls += 1
        if not self.batches:
            return []
        batch = self.batches.pop(0) if len(self.batches) > 1 else self.batches[0]
        if isinstance(batch, Exception):
            raise batch
        return list(batch)


class MemoryStore(ProposalStore):
    """Dict-backed store with per-key failure injection."""

    def __init__(self):
        self.records: Dict[str, bytes] = {}
        self.fail_exists: Set[str] = set()
        self.fail_put: Set[str] = set()
        self.puts: List[str] = []

    def exists(self, key: str) -> bool:
        if key in self.fail_exists:
            raise StoreError(f"exists failed for {key}")
        return key in self.records

    def put(self, key: str, proposal: Proposal) -> None:
        if key in self.fail_put:
            raise StoreError(f"put failed for {key}")
        self.records[key] = proposal.to_json()
        self.puts.append(key)

    def get(self, key: str) -> Optional[Proposal]:
        raw = self.records.get(key)
        return Proposal.from_json(raw) if raw is not None else None

    def ping(self) -> None:
        pass


class RecordingNotifier:
    """Records notified proposals; IDs in fail_ids raise NotifyError."""

    def __init__(self, fail_ids=()):
        self.sent: List[Proposal] = []
        self.fail_ids = set(fail_ids)

    def notify(self, proposal: Proposal) -> None:
        if proposal.proposal_id in self.fail_ids:
            raise NotifyError("chat not found")
        self.sent.append(proposal)

    @property
    def sent_ids(self) -> List[str]:
        return [p.proposal_id for p in self.sent]


def fetch_failure(message: str = "connection refused") -> FetchError:
    return FetchError(message)
