# =============================================================================
# GOVERNANCE PROPOSAL WATCHER - SHARED MODULE
# =============================================================================
#
# This module contains ONLY shared utilities. No business logic lives here.
#
# CONTENTS:
# - Enums (error policy, outcomes, run state)
# - Exceptions + error policy table
# - Configuration loading
# - Logging setup
#
# =============================================================================

from .enums import ErrorPolicy, ProposalOutcome, RunState
from .exceptions import (
    WatcherError,
    ConfigError,
    FetchError,
    ParseError,
    StoreError,
    EncodeError,
    NotifyError,
    ERROR_POLICY,
    policy_for,
)
from .config import AppConfig, load_config, parse_duration
from .logging_config import setup_logging

__all__ = [
    "ErrorPolicy",
    "ProposalOutcome",
    "RunState",
    "WatcherError",
    "ConfigError",
    "FetchError",
    "ParseError",
    "StoreError",
    "EncodeError",
    "NotifyError",
    "ERROR_POLICY",
    "policy_for",
    "AppConfig",
    "load_config",
    "parse_duration",
    "setup_logging",
]
