# =============================================================================
# GOVERNANCE PROPOSAL WATCHER - CLI Integration Tests
# =============================================================================
#
# Runs main.main() end to end with the file store, a mocked feed and a
# mocked Telegram API. Covers startup exit codes and --once.
#
# =============================================================================

import json
from unittest.mock import MagicMock, patch

import pytest

import main as watcher_main
from collector.client import ProposalFeedClient
from notifications.telegram import TelegramNotifier
from shared.exceptions import StoreError


CONFIG_TEMPLATE = """
api:
  url: https://lcd.example.org/proposals
explorer:
  url: https://explorer.example.org/proposals
storage:
  backend: file
  path: {store_path}
telegram:
  bot_token: "123:abc"
  chat_id: 42
ticker:
  interval: 1m
logging:
  file: false
"""

FEED = {
    "proposals": [
        {"proposal_id": "1", "content": {"title": "T1", "description": "D1"}},
        {"proposal_id": "2", "content": {"title": "T2", "description": "D2"}},
    ]
}


def http_response(payload, status=200):
    resp = MagicMock()
    resp.ok = 200 <= status < 300
    resp.status_code = status
    resp.content = json.dumps(payload).encode("utf-8")
    resp.text = resp.content.decode("utf-8")
    resp.json.return_value = payload
    return resp


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        CONFIG_TEMPLATE.format(store_path=(tmp_path / "proposals.json").as_posix()),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def telegram_session():
    session = MagicMock()
    session.get.return_value = http_response({"ok": True, "result": {"username": "gov_bot"}})
    session.post.return_value = http_response({"ok": True, "result": {"message_id": 1}})
    return session


@pytest.fixture
def feed_session():
    session = MagicMock()
    session.get.return_value = http_response(FEED)
    return session


def run_main(args, telegram_session, feed_session):
    def feed_client(api_url, timeout):
        return ProposalFeedClient(api_url, timeout=timeout, session=feed_session)

    def telegram_notifier(**kwargs):
        return TelegramNotifier(session=telegram_session, **kwargs)

    with patch("main.ProposalFeedClient", side_effect=feed_client), \
         patch("main.TelegramNotifier", side_effect=telegram_notifier):
        return watcher_main.main(args)


class TestStartup:
    def test_missing_config_exits_1(self, tmp_path, telegram_session, feed_session):
        code = run_main(["--config", str(tmp_path / "missing.yaml"), "--once"],
                        telegram_session, feed_session)
        assert code == 1
        feed_session.get.assert_not_called()

    def test_store_unreachable_exits_1(self, config_path, telegram_session, feed_session):
        with patch("proposals.storage.FileProposalStore.ping",
                   side_effect=StoreError("unreachable")):
            code = run_main(["--config", str(config_path), "--once"],
                            telegram_session, feed_session)
        assert code == 1
        telegram_session.get.assert_not_called()

    def test_rejected_bot_token_exits_1(self, config_path, telegram_session, feed_session):
        telegram_session.get.return_value = http_response(
            {"ok": False, "description": "Unauthorized"}, status=401
        )
        code = run_main(["--config", str(config_path), "--once"],
                        telegram_session, feed_session)
        assert code == 1
        feed_session.get.assert_not_called()


class TestOnce:
    def test_first_run_stores_and_notifies(self, tmp_path, config_path,
                                           telegram_session, feed_session):
        code = run_main(["--config", str(config_path), "--once"],
                        telegram_session, feed_session)

        assert code == 0
        stored = json.loads((tmp_path / "proposals.json").read_text(encoding="utf-8"))
        assert sorted(stored) == ["proposal:1", "proposal:2"]
        assert telegram_session.post.call_count == 2
        texts = [c[1]["json"]["text"] for c in telegram_session.post.call_args_list]
        assert "Explorer: https://explorer.example.org/proposals/1" in texts[0]
        assert "Explorer: https://explorer.example.org/proposals/2" in texts[1]

    def test_second_run_sends_nothing(self, config_path, telegram_session, feed_session):
        run_main(["--config", str(config_path), "--once"], telegram_session, feed_session)
        telegram_session.post.reset_mock()

        code = run_main(["--config", str(config_path), "--once"],
                        telegram_session, feed_session)

        assert code == 0
        telegram_session.post.assert_not_called()

    def test_feed_failure_still_exits_0(self, tmp_path, config_path,
                                        telegram_session, feed_session):
        feed_session.get.return_value = http_response({"error": "down"}, status=503)

        code = run_main(["--config", str(config_path), "--once"],
                        telegram_session, feed_session)

        assert code == 0
        telegram_session.post.assert_not_called()
        assert not (tmp_path / "proposals.json").exists()


class TestLoop:
    def test_scheduler_built_with_configured_interval(self, config_path,
                                                      telegram_session, feed_session):
        with patch("main.Scheduler") as mock_scheduler, \
             patch("main.signal.signal"):
            code = run_main(["--config", str(config_path)], telegram_session, feed_session)

        assert code == 0
        assert mock_scheduler.call_args[1]["interval_seconds"] == 60.0
        mock_scheduler.return_value.run.assert_called_once()
