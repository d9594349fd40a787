# =============================================================================
# GOVERNANCE PROPOSAL WATCHER - RECONCILIATION ENGINE
# =============================================================================
#
# One cycle:
# 1. Fetch the current proposal set from the feed
# 2. For each proposal, in feed order:
#    a. exists(key)  - was it seen before?
#    b. put(key, p)  - always upsert (refresh on poll)
#    c. notify(p)    - only if (a) said "absent"
#
# ERROR POLICY (shared/exceptions.py):
# - FetchError / ParseError   -> abort the cycle, nothing stored or sent
# - StoreError / EncodeError  -> skip this proposal, continue with the next
# - NotifyError               -> log only, proposal stays stored
#
# The engine owns no state; the store is the only memory of what was seen.
#
# =============================================================================

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from shared.enums import ErrorPolicy, ProposalOutcome, RunState
from shared.exceptions import NotifyError, StoreError, WatcherError, policy_for
from proposals.models import Proposal
from proposals.storage import proposal_key

logger = logging.getLogger(__name__)


@dataclass
class ProposalResult:
    """Result of reconciling a single proposal."""
    proposal_id: str
    outcome: ProposalOutcome
    notified: bool = False
    error: Optional[WatcherError] = None


@dataclass
class CycleResult:
    """Result of a full reconciliation cycle."""
    state: RunState
    started_at: str
    finished_at: str = ""
    duration_seconds: float = 0.0
    fetched: int = 0
    results: List[ProposalResult] = field(default_factory=list)
    error: Optional[WatcherError] = None

    def add(self, item: ProposalResult):
        self.results.append(item)
        if item.outcome == ProposalOutcome.SKIPPED and self.state == RunState.OK:
            self.state = RunState.DEGRADED

    def _count(self, outcome: ProposalOutcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    @property
    def new_count(self) -> int:
        return self._count(ProposalOutcome.NEW)

    @property
    def refreshed_count(self) -> int:
        return self._count(ProposalOutcome.REFRESHED)

    @property
    def skipped_count(self) -> int:
        return self._count(ProposalOutcome.SKIPPED)

    @property
    def notified_count(self) -> int:
        return sum(1 for r in self.results if r.notified)

    @property
    def summary(self) -> dict:
        return {
            "state": self.state.value,
            "fetched": self.fetched,
            "new": self.new_count,
            "refreshed": self.refreshed_count,
            "skipped": self.skipped_count,
            "notified": self.notified_count,
            "duration_seconds": round(self.duration_seconds, 3),
        }


class Reconciler:
    """
    Runs reconciliation cycles over a source, a store and a notifier.

    Collaborators are built once at startup and passed in. The engine
    processes proposals strictly one at a time; the exists/put pair is
    not atomic, so only one Reconciler may write to a store at a time.
    """

    def __init__(self, source, store, notifier):
        """
        Initialize the reconciler.

        Args:
            source: Object with fetch() -> List[Proposal]
            store: proposals.storage.ProposalStore
            notifier: Object with notify(proposal)
        """
        self.source = source
        self.store = store
        self.notifier = notifier

    def run_cycle(self) -> CycleResult:
        """
        Execute one fetch -> reconcile -> notify pass.

        Never raises for expected errors; the outcome is in the result.

        Returns:
            CycleResult with per-proposal details
        """
        start = time.perf_counter()
        result = CycleResult(
            state=RunState.OK,
            started_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info("=== Cycle START ===")

        try:
            proposals = self.source.fetch()
        except WatcherError as e:
            self._handle_error(e, "fetch")
            result.state = RunState.FAIL
            result.error = e
            return self._finish(result, start)

        result.fetched = len(proposals)

        for proposal in proposals:
            item = self.reconcile(proposal)
            if item.error is not None:
                self._handle_error(item.error, item.proposal_id)
            result.add(item)

        return self._finish(result, start)

    def reconcile(self, proposal: Proposal) -> ProposalResult:
        """
        Reconcile one proposal against the store.

        Args:
            proposal: Fetched proposal

        Returns:
            ProposalResult (errors are returned, not raised)
        """
        key = proposal_key(proposal.proposal_id)

        try:
            seen = self.store.exists(key)
            self.store.put(key, proposal)
        except StoreError as e:
            if e.proposal_id is None:
                e.proposal_id = proposal.proposal_id
            return ProposalResult(proposal.proposal_id, ProposalOutcome.SKIPPED, error=e)

        if seen:
            logger.debug(f"Refreshed proposal {proposal.proposal_id}")
            return ProposalResult(proposal.proposal_id, ProposalOutcome.REFRESHED)

        logger.info(f"New proposal: {proposal.proposal_id} ({proposal.title[:60]})")
        try:
            self.notifier.notify(proposal)
        except NotifyError as e:
            return ProposalResult(proposal.proposal_id, ProposalOutcome.NEW, error=e)

        return ProposalResult(proposal.proposal_id, ProposalOutcome.NEW, notified=True)

    def _handle_error(self, error: WatcherError, context: str) -> None:
        """Log an error according to its policy."""
        policy = policy_for(error)
        name = type(error).__name__

        if policy == ErrorPolicy.ABORT_CYCLE:
            logger.error(f"Cycle aborted ({context}): {name}: {error}")
        elif policy == ErrorPolicy.SKIP_PROPOSAL:
            logger.error(f"Skipping proposal {context}: {name}: {error}")
        elif policy == ErrorPolicy.LOG_ONLY:
            logger.warning(f"Notification failed for proposal {context}: {name}: {error}")
        else:
            # FATAL errors are startup-only; reaching this is a bug in a collaborator
            logger.critical(f"Unexpected fatal error during cycle ({context}): {name}: {error}")

    def _finish(self, result: CycleResult, start: float) -> CycleResult:
        result.duration_seconds = time.perf_counter() - start
        result.finished_at = datetime.now(timezone.utc).isoformat()
        s = result.summary
        logger.info(
            f"=== Cycle END === state={s['state']} fetched={s['fetched']} "
            f"new={s['new']} refreshed={s['refreshed']} skipped={s['skipped']} "
            f"notified={s['notified']} duration={s['duration_seconds']:.2f}s"
        )
        return result
