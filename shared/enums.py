# =============================================================================
# GOVERNANCE PROPOSAL WATCHER - SHARED ENUMS
# =============================================================================
#
# These enums define the shared vocabulary across the watcher:
# how errors are handled, what happened to each proposal in a cycle,
# and how a whole cycle ended.
#
# =============================================================================

from enum import Enum


class ErrorPolicy(Enum):
    """
    Reaction to an error kind.

    FATAL:         Terminate the process (startup only).
    ABORT_CYCLE:   Stop the current cycle; the next cycle starts from scratch.
    SKIP_PROPOSAL: Skip the current proposal; the cycle continues.
    LOG_ONLY:      Log and carry on; no effect on the cycle or the store.
    """
    FATAL = "FATAL"
    ABORT_CYCLE = "ABORT_CYCLE"
    SKIP_PROPOSAL = "SKIP_PROPOSAL"
    LOG_ONLY = "LOG_ONLY"


class ProposalOutcome(Enum):
    """
    What a cycle did with one fetched proposal.

    NEW:       Key was absent; proposal stored and a notification attempted.
    REFRESHED: Key existed; stored content overwritten, no notification.
    SKIPPED:   A store operation failed; nothing else happened.
    """
    NEW = "NEW"
    REFRESHED = "REFRESHED"
    SKIPPED = "SKIPPED"


class RunState(Enum):
    """Cycle run state."""
    OK = "OK"
    DEGRADED = "DEGRADED"
    FAIL = "FAIL"
