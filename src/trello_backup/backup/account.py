"""
Account queries for the authenticated Trello member.

This module looks up the member's username and the boards they belong to.
"""

from typing import Any, Dict, List, Optional
import logging
from dataclasses import dataclass

from ..utils.api_client import TrelloAPIClient
from ..exceptions import RemoteFormatError

USERNAME_PATH = "/1/members/me?fields=username"
BOARDS_PATH = "/1/Members/me/boards"


@dataclass(frozen=True)
class Board:
    """Snapshot of a board as listed by the API."""
    id: str
    short_link: str
    short_url: str
    name: str
    closed: bool = False

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Board":
        """
        Build a Board from an API board object.

        Raises:
            RemoteFormatError: If a required field is missing
        """
        try:
            return cls(
                id=data["id"],
                short_link=data.get("shortLink", ""),
                short_url=data["shortUrl"],
                name=data.get("name", ""),
                closed=bool(data.get("closed", False)),
            )
        except (KeyError, TypeError) as e:
            raise RemoteFormatError(f"board object is missing field {e}") from e


class AccountQuery:
    """Reads the current member's identity and board list."""

    def __init__(self, api_client: TrelloAPIClient, logger: Optional[logging.Logger] = None):
        """
        Initialize account query.

        Args:
            api_client: Authenticated Trello client
            logger: Logger instance
        """
        self.api_client = api_client
        self.logger = logger or logging.getLogger(__name__)

    def get_username(self) -> str:
        """
        Fetch the username of the logged in member.

        Raises:
            UnexpectedStatusError: If the session is not accepted
            DecodeError: If the answer is not JSON
            RemoteFormatError: If the answer has no username
        """
        data = self.api_client.get_json(USERNAME_PATH)
        username = data.get("username") if isinstance(data, dict) else None
        if not username:
            raise RemoteFormatError("response has no username")
        return username

    def get_boards(self) -> List[Board]:
        """
        Fetch every board the member belongs to, archived ones included.

        Returns:
            List of Board snapshots in API order
        """
        data = self.api_client.get_json(BOARDS_PATH)
        if not isinstance(data, list):
            raise RemoteFormatError("expected a list of boards")

        boards = [Board.from_api(item) for item in data]
        self.logger.debug(f"Found {len(boards)} boards")
        return boards
