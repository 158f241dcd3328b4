"""
Incremental download of attachment and background files.

Each asset is stored under a directory named after its kind, using the URL
path with slashes replaced by underscores as file name. An existing file is
taken as a completed download and is never fetched again.
"""

from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit
import logging

import requests

from .asset_extractor import AssetReference
from ..utils.api_client import TrelloAPIClient
from ..exceptions import LocalIOError, TransportError


def asset_filename(url: str) -> str:
    """Flatten the URL path into a single file name."""
    return unquote(urlsplit(url).path).replace("/", "_")


class AssetDownloader:
    """
    Downloads assets into ``<output_dir>/<kind>/``.

    Nothing is removed when a copy fails halfway; the truncated file is
    then treated as downloaded by later runs.
    """

    def __init__(
        self,
        api_client: TrelloAPIClient,
        output_dir: Path,
        chunk_size: int = 65536,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize asset downloader.

        Args:
            api_client: Authenticated Trello client
            output_dir: Root directory holding the kind directories
            chunk_size: Bytes per streamed chunk
            logger: Logger instance
        """
        self.api_client = api_client
        self.output_dir = Path(output_dir)
        self.chunk_size = chunk_size
        self.logger = logger or logging.getLogger(__name__)
        self.downloaded = 0
        self.skipped = 0

    def target_path(self, reference: AssetReference) -> Path:
        return self.output_dir / reference.kind.value / asset_filename(reference.url)

    def download(self, reference: AssetReference) -> bool:
        """
        Download an asset unless it is already on disk.

        Returns:
            True if the file was fetched, False if it already existed

        Raises:
            TransportError: If the asset cannot be fetched or read
            LocalIOError: If the directory or file cannot be written
        """
        path = self.target_path(reference)
        if path.exists():
            self.skipped += 1
            self.logger.debug(f"Already downloaded: {path}")
            return False

        self.logger.info(f"    Downloading {reference.kind.singular} {reference.url}")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LocalIOError(f"could not create directory {path.parent}: {e}") from e

        response = self.api_client.open_stream(reference.url)
        try:
            try:
                handle = open(path, "wb")
            except OSError as e:
                raise LocalIOError(f"could not create file for {reference.kind.singular}: {e}") from e

            with handle:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        handle.write(chunk)
        except requests.RequestException as e:
            raise TransportError(f"could not download {reference.kind.singular}: {e}") from e
        except OSError as e:
            raise LocalIOError(f"could not write {path}: {e}") from e
        finally:
            response.close()

        self.downloaded += 1
        return True
