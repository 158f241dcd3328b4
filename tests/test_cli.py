"""
Test suite for the command-line interface.

Tests argument count handling, exit codes, and error reporting with the
backup manager replaced by a mock.
"""

import pytest
from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

# Add src to path for imports
import sys
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from trello_backup.cli.backup_cli import backup_app
from trello_backup.backup.authenticator import CredentialAuthenticator, TokenCookieAuthenticator
from trello_backup.exceptions import TransportError

runner = CliRunner()

STATS = {
    "username": "alice",
    "boards_found": 2,
    "boards_backed_up": 1,
    "boards_skipped": 1,
    "export_files": [],
    "assets_downloaded": 3,
    "assets_skipped": 0,
    "api_stats": {"total_requests": 7, "total_errors": 0, "error_rate": 0.0},
}


class TestBackupCLI:
    """Test the backup command."""

    @pytest.mark.parametrize("arguments", [[], ["a", "b", "c", "d"]])
    def test_wrong_argument_count(self, arguments):
        with patch("trello_backup.cli.backup_cli.TrelloBackupManager") as mock_manager:
            result = runner.invoke(backup_app, arguments)

        assert result.exit_code == 1
        assert "Usage: trello-backup (TOKEN_COOKIE | USERNAME PASSWORD [TOTP_SECRET])" in result.output
        assert "Atlassian" in result.output
        mock_manager.assert_not_called()

    def test_successful_token_cookie_run(self, tmp_path):
        with patch("trello_backup.cli.backup_cli.TrelloBackupManager") as mock_manager:
            mock_manager.return_value.start_backup.return_value = STATS
            result = runner.invoke(backup_app, ["cookie-value", "--output-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "Successfully backed up Trello data" in result.output
        config, authenticator = mock_manager.call_args.args
        assert config.output_dir == tmp_path
        assert isinstance(authenticator, TokenCookieAuthenticator)
        mock_manager.return_value.api_client.close.assert_called_once()

    def test_credentials_select_credential_login(self, tmp_path):
        with patch("trello_backup.cli.backup_cli.TrelloBackupManager") as mock_manager:
            mock_manager.return_value.start_backup.return_value = STATS
            result = runner.invoke(backup_app, ["alice", "hunter2", "--output-dir", str(tmp_path)])

        assert result.exit_code == 0
        authenticator = mock_manager.call_args.args[1]
        assert isinstance(authenticator, CredentialAuthenticator)
        assert authenticator.credentials.username == "alice"

    def test_fatal_error_exits_non_zero(self, tmp_path):
        error = TransportError("connection refused", context="could not get login token")

        with patch("trello_backup.cli.backup_cli.TrelloBackupManager") as mock_manager:
            mock_manager.return_value.start_backup.side_effect = error
            result = runner.invoke(backup_app, ["alice", "hunter2", "--output-dir", str(tmp_path)])

        assert result.exit_code == 1
        assert "Successfully" not in result.output
        mock_manager.return_value.api_client.close.assert_called_once()

    def test_password_starting_with_dash(self, tmp_path):
        with patch("trello_backup.cli.backup_cli.TrelloBackupManager") as mock_manager:
            mock_manager.return_value.start_backup.return_value = STATS
            result = runner.invoke(backup_app, ["alice", "-secret", "--output-dir", str(tmp_path)])

        assert result.exit_code == 0
        authenticator = mock_manager.call_args.args[1]
        assert isinstance(authenticator, CredentialAuthenticator)
        assert authenticator.credentials.password == "-secret"

    @pytest.mark.parametrize("arguments", [["-tok3n-lv"], ["--", "-tok3n-lv"]])
    def test_token_cookie_starting_with_dash(self, arguments, tmp_path):
        with patch("trello_backup.cli.backup_cli.TrelloBackupManager") as mock_manager:
            mock_manager.return_value.start_backup.return_value = STATS
            result = runner.invoke(backup_app, ["--output-dir", str(tmp_path)] + arguments)

        assert result.exit_code == 0
        authenticator = mock_manager.call_args.args[1]
        assert isinstance(authenticator, TokenCookieAuthenticator)
        assert authenticator._token == "-tok3n-lv"
