# =============================================================================
# GOVERNANCE PROPOSAL WATCHER - PROPOSAL DATA MODEL
# =============================================================================
#
# A Proposal is one governance item as reported by the feed. Two records
# with the same proposal_id are the same logical proposal; later fetches
# overwrite earlier stored content.
#
# WIRE / STORAGE SHAPE:
# {
#     "proposal_id": "<string>",
#     "content": {"title": "<string>", "description": "<string>"}
# }
# Unknown fields are ignored on input.
#
# =============================================================================

import json
from dataclasses import dataclass
from typing import Any, Dict, Union

from shared.exceptions import EncodeError, ParseError, StoreError


def _string_field(data: Dict[str, Any], name: str, proposal_id: str = None) -> str:
    """Read an optional string field; null/missing become ''."""
    value = data.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ParseError(
            f"Field '{name}' must be a string, got {type(value).__name__}",
            proposal_id=proposal_id,
        )
    return value


@dataclass(frozen=True)
class Proposal:
    """
    A governance proposal.

    Immutable: a re-fetched proposal is a new Proposal object, never an
    in-place edit of the stored one.
    """
    proposal_id: str
    title: str = ""
    description: str = ""

    @classmethod
    def from_feed(cls, item: Any) -> "Proposal":
        """
        Build a Proposal from one feed item.

        Args:
            item: Decoded JSON object from the "proposals" list

        Returns:
            Proposal

        Raises:
            ParseError: If the item does not have the expected shape
        """
        if not isinstance(item, dict):
            raise ParseError(f"Proposal item must be an object, got {type(item).__name__}")

        proposal_id = _string_field(item, "proposal_id")

        content = item.get("content")
        if content is None:
            content = {}
        elif not isinstance(content, dict):
            raise ParseError(
                f"Field 'content' must be an object, got {type(content).__name__}",
                proposal_id=proposal_id or None,
            )

        return cls(
            proposal_id=proposal_id,
            title=_string_field(content, "title", proposal_id or None),
            description=_string_field(content, "description", proposal_id or None),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the feed/storage shape."""
        return {
            "proposal_id": self.proposal_id,
            "content": {
                "title": self.title,
                "description": self.description,
            },
        }

    def to_json(self) -> bytes:
        """
        Serialize for the store.

        Raises:
            EncodeError: If the record cannot be encoded
        """
        try:
            return json.dumps(self.to_dict(), ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError, UnicodeEncodeError) as e:
            raise EncodeError(f"Could not encode proposal: {e}", proposal_id=self.proposal_id)

    @classmethod
    def from_json(cls, raw: Union[bytes, str]) -> "Proposal":
        """
        Deserialize a stored record.

        Raises:
            StoreError: If the stored record is corrupt
        """
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            return cls.from_feed(json.loads(raw))
        except (UnicodeDecodeError, json.JSONDecodeError, ParseError) as e:
            raise StoreError(f"Corrupt stored proposal: {e}")
