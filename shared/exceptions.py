# =============================================================================
# GOVERNANCE PROPOSAL WATCHER - EXCEPTIONS
# =============================================================================
#
# EXCEPTION HIERARCHY:
#
# WatcherError (base)
# ├── ConfigError     - FATAL: configuration could not be loaded (startup only)
# ├── FetchError      - Feed could not be reached (aborts the cycle)
# ├── ParseError      - Feed body has the wrong shape (aborts the cycle)
# ├── StoreError      - Store read/write failed (skips the proposal)
# │   └── EncodeError - Proposal could not be serialized (skips the proposal)
# └── NotifyError     - Notification delivery failed (logged only)
#
# The reaction to each error kind lives in ERROR_POLICY below. Callers look
# the policy up instead of deciding ad hoc.
#
# =============================================================================

from typing import Dict, Optional, Type

from .enums import ErrorPolicy


class WatcherError(Exception):
    """
    Base class for all watcher errors.

    All errors raised by the collaborators inherit from this class,
    so one except block catches every expected failure.
    """

    def __init__(self, message: str, proposal_id: Optional[str] = None):
        """
        Initialize watcher error.

        Args:
            message: Error description
            proposal_id: Optional proposal ID for context
        """
        self.message = message
        self.proposal_id = proposal_id
        super().__init__(message)

    def __str__(self) -> str:
        if self.proposal_id:
            return f"[{self.proposal_id}] {self.message}"
        return self.message


class ConfigError(WatcherError):
    """Configuration file missing, unreadable or invalid."""


class FetchError(WatcherError):
    """Network/transport failure while fetching the proposal feed."""


class ParseError(WatcherError):
    """Feed response could not be decoded into proposals."""


class StoreError(WatcherError):
    """Proposal store unreachable or the operation failed."""


class EncodeError(StoreError):
    """Proposal could not be serialized for the store."""


class NotifyError(WatcherError):
    """Notification could not be delivered."""


# =============================================================================
# POLICY TABLE
# =============================================================================

ERROR_POLICY: Dict[Type[WatcherError], ErrorPolicy] = {
    ConfigError: ErrorPolicy.FATAL,
    FetchError: ErrorPolicy.ABORT_CYCLE,
    ParseError: ErrorPolicy.ABORT_CYCLE,
    StoreError: ErrorPolicy.SKIP_PROPOSAL,
    EncodeError: ErrorPolicy.SKIP_PROPOSAL,
    NotifyError: ErrorPolicy.LOG_ONLY,
}


def policy_for(error: BaseException) -> ErrorPolicy:
    """
    Look up how the watcher reacts to an error.

    Walks the class hierarchy so subclasses inherit the policy of their
    closest registered ancestor. Anything unregistered is FATAL.

    Args:
        error: The raised exception

    Returns:
        ErrorPolicy for this error kind
    """
    for cls in type(error).__mro__:
        if cls in ERROR_POLICY:
            return ERROR_POLICY[cls]
    return ErrorPolicy.FATAL
