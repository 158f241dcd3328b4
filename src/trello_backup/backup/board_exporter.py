"""
Board export retrieval and persistence.

A board's full export is fetched from ``<shortUrl>.json`` and written to
disk byte for byte. The document is never parsed here.
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Optional
import logging

from .account import Board
from ..utils.api_client import TrelloAPIClient

BOARD_NAME_DISALLOWED = re.compile(r"[^a-zA-Z0-9_)(-]+")
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M"


def sanitize_board_name(name: str) -> str:
    """Strip every character outside ``[a-zA-Z0-9_)(-]`` from a board name."""
    return BOARD_NAME_DISALLOWED.sub("", name)


def export_filename(board: Board, username: str, run_time: datetime) -> str:
    """
    Build the export file name for a board.

    Args:
        board: Board being exported
        username: Logged in member
        run_time: Start time of the backup run

    Returns:
        ``trello_<YYYY-MM-DD_HH-MM>_<username>_<boardID>_<sanitizedName>.json``
    """
    return "trello_{}_{}_{}_{}.json".format(
        run_time.strftime(TIMESTAMP_FORMAT),
        username,
        board.id,
        sanitize_board_name(board.name),
    )


class BoardExporter:
    """Downloads board exports and saves them to the output directory."""

    def __init__(
        self,
        api_client: TrelloAPIClient,
        output_dir: Path,
        logger: Optional[logging.Logger] = None
    ):
        self.api_client = api_client
        self.output_dir = Path(output_dir)
        self.logger = logger or logging.getLogger(__name__)

    def export(self, board: Board) -> bytes:
        """
        Fetch the full JSON export of an open board.

        Raises:
            ValueError: If the board is closed
            TransportError: If the export cannot be fetched
        """
        if board.closed:
            raise ValueError(f"Board {board.id} is closed and is not exported")
        return self.api_client.get_bytes(f"{board.short_url}.json")

    def save(self, board: Board, username: str, document: bytes, run_time: datetime) -> Path:
        """Write the export verbatim and return the file path."""
        path = self.output_dir / export_filename(board, username, run_time)
        path.write_bytes(document)
        self.logger.debug(f"Saved {len(document)} bytes to {path}")
        return path
