# =============================================================================
# GOVERNANCE PROPOSAL WATCHER - APPLICATION
# =============================================================================
#
# Reconciliation engine (one cycle) and the scheduler that repeats it.
#
# =============================================================================

from .reconciler import Reconciler, CycleResult, ProposalResult
from .scheduler import Scheduler

__all__ = [
    "Reconciler",
    "CycleResult",
    "ProposalResult",
    "Scheduler",
]
