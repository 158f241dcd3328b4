"""
Main backup orchestration manager.

This module runs a complete backup: log in once, list the member's boards
once, then export every open board and download the files it references.
Everything runs sequentially and the first failure ends the run.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .account import AccountQuery, Board
from .asset_downloader import AssetDownloader
from .asset_extractor import AssetExtractor, AssetKind
from .authenticator import SessionAuthenticator
from .board_exporter import BoardExporter
from ..utils.api_client import TrelloAPIClient, create_trello_client
from ..utils.logger import setup_logger, ProgressLogger
from ..config import BackupConfig
from ..exceptions import TrelloBackupError, error_context


class TrelloBackupManager:
    """
    Main backup orchestration class.

    Owns the HTTP client (and with it the session cookie jar) for the run
    and hands it to every component.
    """

    def __init__(
        self,
        config: BackupConfig,
        authenticator: SessionAuthenticator,
        api_client: Optional[TrelloAPIClient] = None
    ):
        """
        Initialize backup manager.

        Args:
            config: Backup configuration
            authenticator: Login strategy for this run
            api_client: Client to use (a fresh one is created if None)
        """
        self.config = config
        self.logger = setup_logger(
            name="trello_backup",
            log_level=config.log_level,
            log_file=config.log_file,
            log_max_size=config.log_max_size,
            log_backup_count=config.log_backup_count,
            verbose=config.verbose,
            debug=config.debug
        )
        self.progress_logger = ProgressLogger(self.logger)

        self.api_client = api_client or create_trello_client(
            base_url=config.base_url,
            logger=self.logger
        )
        self.authenticator = authenticator

        self.account_query = AccountQuery(self.api_client, self.logger)
        self.board_exporter = BoardExporter(self.api_client, config.output_dir, self.logger)
        self.asset_extractor = AssetExtractor()
        self.asset_downloader = AssetDownloader(
            self.api_client,
            config.output_dir,
            chunk_size=config.download_chunk_size,
            logger=self.logger
        )

        # Run state
        self.username: Optional[str] = None
        self.boards: List[Board] = []
        self.export_files: List[Path] = []
        self.skipped_boards: List[Board] = []

    def start_backup(self, run_time: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Run the complete backup.

        Args:
            run_time: Timestamp embedded in export file names (defaults to now)

        Returns:
            Run statistics, see get_backup_stats()

        Raises:
            TrelloBackupError: On the first failing step
        """
        run_time = run_time or datetime.now()

        try:
            self._authenticate()

            with error_context("could not get username"):
                self.username = self.account_query.get_username()
            self.logger.info(f"Logged in as {self.username}")

            self.logger.info("Getting boards")
            with error_context("could not get boards"):
                self.boards = self.account_query.get_boards()

            self.progress_logger.start_operation("Backup", len(self.boards))

            for i, board in enumerate(self.boards, 1):
                if board.closed:
                    self.logger.info(f"Skipping closed board {board.name} ({board.short_link}) (id: {board.id})")
                    self.skipped_boards.append(board)
                    continue

                self.progress_logger.log_progress("Boards", i, len(self.boards), board.name)
                self._backup_board(board, run_time)

            self.progress_logger.complete_operation(
                "Backup",
                len(self.boards),
                len(self.export_files),
                len(self.skipped_boards)
            )
            return self.get_backup_stats()

        except TrelloBackupError as e:
            self.logger.debug(f"Backup failed: {e}")
            raise

    def _authenticate(self) -> None:
        """Run the configured login strategy against the owned client."""
        with error_context("could not log in with " + self.authenticator.description):
            self.authenticator.establish(self.api_client)

    def _backup_board(self, board: Board, run_time: datetime) -> None:
        """Export one open board and fetch its assets."""
        self.logger.info(f"Backing up {board.name} ({board.short_link}) (id: {board.id})")

        self.logger.info("--> Saving JSON")
        with error_context("could not get board JSON (the export format may have changed)"):
            document = self.board_exporter.export(board)

        with error_context("could not save file"):
            path = self.board_exporter.save(board, self.username, document, run_time)
        self.export_files.append(path)

        for kind in AssetKind:
            self.logger.info(f"--> Downloading {kind.value}")
            with error_context(f"could not get {kind.singular}"):
                for reference in self.asset_extractor.extract(document, kind):
                    self.asset_downloader.download(reference)

    def get_backup_stats(self) -> Dict[str, Any]:
        """
        Get backup statistics.

        Returns:
            Dictionary with backup statistics
        """
        return {
            "username": self.username,
            "boards_found": len(self.boards),
            "boards_backed_up": len(self.export_files),
            "boards_skipped": len(self.skipped_boards),
            "export_files": [str(path) for path in self.export_files],
            "assets_downloaded": self.asset_downloader.downloaded,
            "assets_skipped": self.asset_downloader.skipped,
            "api_stats": self.api_client.get_stats(),
        }
