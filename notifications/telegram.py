# =============================================================================
# TELEGRAM NOTIFICATIONS
# =============================================================================
import logging
from typing import Any, Dict, Optional, Union

import requests

from proposals.models import Proposal
from shared.exceptions import NotifyError

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org/bot{token}"
DEFAULT_TIMEOUT = 10
MAX_MESSAGE_LENGTH = 4096
TRUNCATION_SUFFIX = "..."


def _shorten(text: str, limit: int) -> str:
    """Cut text to at most limit characters, marking the cut when there is room."""
    if len(text) <= limit:
        return text
    if limit <= len(TRUNCATION_SUFFIX):
        return text[:max(limit, 0)]
    return text[:limit - len(TRUNCATION_SUFFIX)] + TRUNCATION_SUFFIX


def format_proposal_message(proposal: Proposal, explorer_base_url: str) -> str:
    """
    Build the plain-text notification for a new proposal.

    An over-long message is shortened so it fits into one Telegram
    message: the description gives way first, then the title. The ID
    and the explorer link are always kept.
    """
    NL = chr(10)
    head = "New Proposal:" + NL + "ID: " + proposal.proposal_id + NL
    tail = NL + "Explorer: " + explorer_base_url + "/" + proposal.proposal_id

    room = MAX_MESSAGE_LENGTH - len(head) - len(tail) - len("Title: " + NL + "Description: ")
    title = proposal.title
    description = _shorten(proposal.description, max(room - len(title), 0))
    title = _shorten(title, max(room - len(description), 0))

    return head + "Title: " + title + NL + "Description: " + description + tail


class TelegramNotifier:
    """
    Sends proposal notifications to one Telegram chat.

    Built once at startup; verify() authenticates the bot token.
    notify() raises NotifyError and never retries.
    """

    def __init__(
        self,
        bot_token: str,
        chat_id: Union[int, str],
        explorer_base_url: str,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.chat_id = chat_id
        self.explorer_base_url = explorer_base_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self._api_base = TELEGRAM_API_BASE.format(token=bot_token)

    def _call(self, method: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self._api_base}/{method}"
        try:
            if payload is None:
                resp = self.session.get(url, timeout=self.timeout)
            else:
                resp = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise NotifyError(f"Telegram {method}: timeout after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            # The exception text may contain the URL (and therefore the token)
            raise NotifyError(f"Telegram {method}: request failed ({type(e).__name__})")

        if not resp.ok:
            raise NotifyError(f"Telegram API error {resp.status_code}: {resp.text[:100]}")

        try:
            data = resp.json()
        except ValueError:
            raise NotifyError(f"Telegram {method}: response is not JSON")

        if not isinstance(data, dict) or not data.get("ok"):
            description = data.get("description") if isinstance(data, dict) else None
            raise NotifyError(f"Telegram {method} rejected: {description or 'unknown error'}")

        return data.get("result") or {}

    def verify(self) -> Dict[str, Any]:
        """
        Authenticate the bot token (getMe).

        Returns:
            Bot account info

        Raises:
            NotifyError: If the token is rejected or Telegram is unreachable
        """
        me = self._call("getMe")
        logger.info(f"Telegram: authorized as @{me.get('username', '?')}")
        return me

    def notify(self, proposal: Proposal) -> None:
        """
        Send a notification for a new proposal.

        Raises:
            NotifyError: If delivery failed
        """
        text = format_proposal_message(proposal, self.explorer_base_url)
        payload = {
            "chat_id": self.chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        try:
            self._call("sendMessage", payload)
        except NotifyError as e:
            e.proposal_id = proposal.proposal_id
            raise
        logger.debug(f"Telegram: notification sent for {proposal.proposal_id}")

    def close(self) -> None:
        self.session.close()
