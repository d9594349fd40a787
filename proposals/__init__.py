# =============================================================================
# GOVERNANCE PROPOSAL WATCHER - PROPOSALS
# =============================================================================
#
# Proposal data model and the key-value store that remembers which
# proposals have been seen.
#
# =============================================================================

from proposals.models import Proposal
from proposals.storage import (
    KEY_PREFIX,
    proposal_key,
    ProposalStore,
    RedisProposalStore,
    FileProposalStore,
    open_store,
)

__all__ = [
    "Proposal",
    "KEY_PREFIX",
    "proposal_key",
    "ProposalStore",
    "RedisProposalStore",
    "FileProposalStore",
    "open_store",
]
