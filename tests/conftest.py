"""Global test fixtures."""
import logging

import pytest

from proposals.models import Proposal
from tests.fakes import MemoryStore, RecordingNotifier


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real secrets from the developer's shell out of the tests."""
    for name in ("TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID", "REDIS_PASSWORD"):
        monkeypatch.delenv(name, raising=False)
    yield
    _remove_watcher_handlers()


def _remove_watcher_handlers():
    """Drop handlers installed by setup_logging (pytest's own handlers stay)."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def proposal():
    return Proposal(proposal_id="1", title="T1", description="D1")
