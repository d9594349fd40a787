# =============================================================================
# GOVERNANCE PROPOSAL WATCHER
# Module: collector/client.py
# Purpose: HTTP client for the governance proposal feed
# =============================================================================
#
# DESIGN:
# - One GET per call, NO retry, NO pagination
# - The next poll cycle is the only retry mechanism
# - Transport problems -> FetchError, shape problems -> ParseError
#
# RESPONSE SHAPE:
# {"proposals": [{"proposal_id": "...", "content": {"title": "...",
#                                                   "description": "..."}}]}
# Unknown fields are ignored. A missing "proposals" field is an empty feed.
#
# =============================================================================

import json
import logging
from typing import List, Optional

import requests

from proposals.models import Proposal
from shared.exceptions import FetchError, ParseError

logger = logging.getLogger(__name__)


class ProposalFeedClient:
    """
    HTTP client for the proposal feed.

    Features:
    - Single attempt per fetch
    - Configurable timeout
    - Clear error classification
    """

    DEFAULT_TIMEOUT = 30  # seconds
    USER_AGENT = "GovProposalWatcher/1.0"

    def __init__(
        self,
        api_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the feed client.

        Args:
            api_url: Full URL of the proposal feed
            timeout: Request timeout in seconds
            session: Optional requests session (connection reuse, tests)
        """
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self) -> List[Proposal]:
        """
        Fetch the current proposal set.

        Returns:
            Proposals in feed order

        Raises:
            FetchError: On network/transport failure or non-2xx status
            ParseError: If the body cannot be decoded into proposals
        """
        logger.debug(f"GET {self.api_url}")
        try:
            response = self.session.get(
                self.api_url,
                headers={
                    "User-Agent": self.USER_AGENT,
                    "Accept": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            raise FetchError(f"Timeout after {self.timeout}s fetching {self.api_url}")
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Request to {self.api_url} failed: {e}")

        if not response.ok:
            raise FetchError(
                f"HTTP error {response.status_code} from {self.api_url}: "
                f"{response.text[:100]}"
            )

        return self.parse(response.content)

    @staticmethod
    def parse(body: bytes) -> List[Proposal]:
        """
        Decode a feed response body.

        Args:
            body: Raw response body

        Returns:
            Proposals in feed order (items without an ID are dropped)

        Raises:
            ParseError: If the body has the wrong shape
        """
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Response is not valid JSON: {e}")

        if not isinstance(data, dict):
            raise ParseError(f"Expected a JSON object, got {type(data).__name__}")

        items = data.get("proposals")
        if items is None:
            logger.warning("Response has no 'proposals' field, treating as empty")
            return []
        if not isinstance(items, list):
            raise ParseError(f"Field 'proposals' must be a list, got {type(items).__name__}")

        proposals = []
        for index, item in enumerate(items):
            proposal = Proposal.from_feed(item)
            # An empty ID would key every such item as the bare "proposal:" prefix
            if not proposal.proposal_id:
                logger.warning(f"Skipping proposal at index {index}: missing proposal_id")
                continue
            proposals.append(proposal)

        logger.info(f"Fetched {len(proposals)} proposals")
        return proposals

    def close(self) -> None:
        self.session.close()
