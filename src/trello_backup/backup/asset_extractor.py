"""
Asset URL extraction from board exports.

Exports are scanned as text rather than parsed: only the ``url`` fields that
point into Trello's attachment and background storage are of interest, and
the rest of the export schema is left opaque.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Union


class AssetKind(Enum):
    """Kinds of files referenced from a board export."""
    ATTACHMENTS = "attachments"
    BACKGROUNDS = "backgrounds"

    @property
    def singular(self) -> str:
        return self.value.rstrip("s")

    @property
    def pattern(self) -> "re.Pattern[str]":
        host = re.escape(f"trello-{self.value}.s3.amazonaws.com")
        return re.compile(r'"url": ?"(https?://' + host + r'/[^"]+)"')


@dataclass(frozen=True)
class AssetReference:
    """A single asset URL found in an export."""
    kind: AssetKind
    url: str


class AssetExtractor:
    """Finds asset URLs in raw export documents."""

    def extract(self, document: Union[bytes, str], kind: AssetKind) -> Iterator[AssetReference]:
        """
        Yield every asset URL of the given kind, in document order.

        Duplicates are yielded as often as they occur. The returned iterator
        is lazy and can only be consumed once.

        Args:
            document: Raw export body
            kind: Which storage host to look for
        """
        if isinstance(document, bytes):
            document = document.decode("utf-8", errors="replace")

        for match in kind.pattern.finditer(document):
            yield AssetReference(kind=kind, url=match.group(1))
