# =============================================================================
# GOVERNANCE PROPOSAL WATCHER
# Module: collector/__init__.py
# Purpose: Proposal feed intake (fetch + decode, NO state)
# =============================================================================
#
# STRICT SEPARATION:
# This module ONLY fetches and decodes the proposal feed.
# It does NOT touch the store and does NOT send notifications.
#
# =============================================================================

from .client import ProposalFeedClient

__all__ = [
    "ProposalFeedClient",
]
