"""
Test suite for utility functions.

Tests the HTTP client wrapper, logging setup, configuration loading and
the exception helpers.
"""

import pytest
import logging
import logging.handlers
from pathlib import Path
from unittest.mock import Mock

import requests

# Add src to path for imports
import sys
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from trello_backup.utils.api_client import TrelloAPIClient
from trello_backup.utils.logger import setup_logger, APICallLogger, ProgressLogger
from trello_backup.config import BackupConfig, get_backup_config
from trello_backup.exceptions import (
    DecodeError,
    LocalIOError,
    TokenNotFound,
    TransportError,
    UnexpectedStatusError,
    error_context,
)


def _response(status_code=200, json_data=None, text="", content=b"", url="https://trello.com/x"):
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.url = url
    response.text = text
    response.content = content
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


class TestTrelloAPIClient:
    """Test the HTTP client wrapper."""

    @pytest.fixture
    def mock_session(self):
        return Mock(spec=requests.Session)

    @pytest.fixture
    def client(self, mock_session):
        return TrelloAPIClient(session=mock_session)

    def test_url_resolution(self, client):
        assert client.url("/1/members/me") == "https://trello.com/1/members/me"
        assert client.url("https://trello.com/b/AbCd.json") == "https://trello.com/b/AbCd.json"
        assert client.domain == "trello.com"

    def test_base_url_trailing_slash(self, mock_session):
        client = TrelloAPIClient(base_url="http://localhost:8080/", session=mock_session)
        assert client.url("/login") == "http://localhost:8080/login"
        assert client.domain == "localhost"

    def test_transport_error_translated(self, client, mock_session):
        mock_session.request.side_effect = requests.ConnectionError("DNS failure")

        with pytest.raises(TransportError, match="DNS failure"):
            client.get_text("/login")

        assert client.get_stats()["total_errors"] == 1
        assert client.get_stats()["total_requests"] == 0

    def test_get_text_ignores_status(self, client, mock_session):
        mock_session.request.return_value = _response(status_code=403, text='dsc="abc"')

        assert client.get_text("/login") == 'dsc="abc"'
        mock_session.request.assert_called_once_with("GET", "https://trello.com/login")

    def test_get_json(self, client, mock_session):
        mock_session.request.return_value = _response(json_data={"username": "alice"})

        assert client.get_json("/1/members/me?fields=username") == {"username": "alice"}
        assert client.get_stats()["total_requests"] == 1

    def test_get_json_rejected_status(self, client, mock_session):
        mock_session.request.return_value = _response(status_code=401, url="https://trello.com/1/members/me")

        with pytest.raises(UnexpectedStatusError) as exc_info:
            client.get_json("/1/members/me")

        assert exc_info.value.status_code == 401
        assert isinstance(exc_info.value, TransportError)

    def test_get_json_malformed_body(self, client, mock_session):
        mock_session.request.return_value = _response(json_data=ValueError("Expecting value"))

        with pytest.raises(DecodeError, match="decode json"):
            client.get_json("/1/Members/me/boards")

    def test_get_bytes(self, client, mock_session):
        mock_session.request.return_value = _response(content=b'{"id":"b1"}')

        assert client.get_bytes("https://trello.com/b/AbCd.json") == b'{"id":"b1"}'

    def test_post_form_discards_answer(self, client, mock_session):
        response = _response(status_code=500)
        mock_session.request.return_value = response

        client.post_form("/1/authorization/session", {"authentication": "c", "dsc": "t"})

        mock_session.request.assert_called_once_with(
            "POST",
            "https://trello.com/1/authorization/session",
            data={"authentication": "c", "dsc": "t"}
        )
        response.close.assert_called_once()

    def test_post_form_json_decodes_error_answers(self, client, mock_session):
        mock_session.request.return_value = _response(status_code=401, json_data={"error": "INVALID_PASSWORD"})

        assert client.post_form_json("/1/authentication", {}) == {"error": "INVALID_PASSWORD"}

    def test_open_stream(self, client, mock_session):
        response = _response()
        mock_session.request.return_value = response

        assert client.open_stream("https://trello-attachments.s3.amazonaws.com/a/b") is response
        mock_session.request.assert_called_once_with(
            "GET", "https://trello-attachments.s3.amazonaws.com/a/b", stream=True
        )

    def test_open_stream_rejected_status_closes_response(self, client, mock_session):
        response = _response(status_code=404)
        mock_session.request.return_value = response

        with pytest.raises(UnexpectedStatusError):
            client.open_stream("https://trello-attachments.s3.amazonaws.com/a/b")

        response.close.assert_called_once()

    def test_credentials_are_not_logged(self, mock_session):
        logger = Mock(spec=logging.Logger)
        client = TrelloAPIClient(session=mock_session, logger=logger)
        mock_session.request.return_value = _response(json_data={"code": "c"})

        client.post_form_json("/1/authentication", {"factors[password]": "hunter2"})

        logged = " ".join(str(call) for call in logger.mock_calls)
        assert "hunter2" not in logged


class TestLogger:
    """Test logging setup."""

    def test_setup_logger_console_only(self):
        logger = setup_logger("trello_backup_test_console", log_level="WARNING")

        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_setup_logger_debug_overrides_level(self):
        logger = setup_logger("trello_backup_test_debug", log_level="ERROR", debug=True)
        assert logger.level == logging.DEBUG

    def test_console_shows_plain_progress_lines(self):
        logger = setup_logger("trello_backup_test_plain")
        console_handler = logger.handlers[0]

        record = logging.LogRecord("x", logging.INFO, __file__, 1, "Backing up Roadmap", None, None)
        assert console_handler.format(record) == "Backing up Roadmap"

    def test_verbose_shows_http_calls_without_source_locations(self):
        logger = setup_logger("trello_backup_test_verbose", verbose=True)

        assert logger.level == logging.DEBUG
        assert logger.handlers[0].formatter._fmt == "%(message)s"

    def test_debug_console_uses_detailed_format(self):
        logger = setup_logger("trello_backup_test_detailed", debug=True)
        assert "%(funcName)s" in logger.handlers[0].formatter._fmt

    def test_setup_logger_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "backup.log"
        logger = setup_logger("trello_backup_test_file", log_file=str(log_file))

        logger.info("Backing up Roadmap")
        for handler in logger.handlers:
            handler.flush()

        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers)
        assert "Backing up Roadmap" in log_file.read_text(encoding="utf-8")

        for handler in logger.handlers:
            handler.close()

    def test_api_call_logger_levels(self):
        logger = Mock(spec=logging.Logger)
        api_logger = APICallLogger(logger)

        api_logger.log_response("GET", "https://trello.com/login", 200, 0.1)
        api_logger.log_response("GET", "https://trello.com/1/members/me", 401, 0.1)

        levels = [call.args[0] for call in logger.log.call_args_list]
        assert levels == [logging.DEBUG, logging.WARNING]

    def test_progress_logger(self):
        logger = Mock(spec=logging.Logger)
        progress = ProgressLogger(logger)

        progress.start_operation("Backup", 3)
        progress.log_progress("Boards", 1, 3, "Roadmap")
        progress.complete_operation("Backup", 3, 2, 1)

        messages = [call.args[0] for call in logger.info.call_args_list]
        assert messages[0] == "Starting Backup (3 items)"
        assert messages[1] == "Boards: 1/3 (33.3%) - Roadmap"
        assert messages[2].startswith("Completed Backup: 2/3 processed, 1 skipped")


class TestConfig:
    """Test configuration loading."""

    def test_defaults(self, monkeypatch):
        for name in ("TRELLO_BASE_URL", "TRELLO_BACKUP_OUTPUT_DIR", "DOWNLOAD_CHUNK_SIZE"):
            monkeypatch.delenv(name, raising=False)

        config = BackupConfig()

        assert config.base_url == "https://trello.com"
        assert config.output_dir == Path(".")
        assert config.download_chunk_size == 65536

    def test_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TRELLO_BACKUP_OUTPUT_DIR", str(tmp_path))
        monkeypatch.setenv("DOWNLOAD_CHUNK_SIZE", "1024")

        config = BackupConfig()

        assert config.output_dir == tmp_path
        assert config.download_chunk_size == 1024

    def test_overrides(self, tmp_path):
        config = get_backup_config(output_dir=str(tmp_path), verbose=True)

        assert config.output_dir == tmp_path
        assert config.verbose is True

    def test_unknown_override(self):
        with pytest.raises(ValueError, match="Unknown configuration key"):
            get_backup_config(api_key="x")

    def test_invalid_values(self):
        with pytest.raises(ValueError, match="TRELLO_BASE_URL"):
            BackupConfig(base_url="ftp://trello.com")

        with pytest.raises(ValueError, match="DOWNLOAD_CHUNK_SIZE"):
            BackupConfig(download_chunk_size=0)


class TestErrorContext:
    """Test step context handling."""

    def test_context_in_message(self):
        error = TokenNotFound("could not find dsc", context="could not get login token")
        assert str(error) == "could not get login token: could not find dsc"

    def test_innermost_context_wins(self):
        with pytest.raises(TransportError) as exc_info:
            with error_context("outer step"):
                with error_context("inner step"):
                    raise TransportError("timed out")

        assert str(exc_info.value) == "inner step: timed out"

    def test_os_error_becomes_local_io_error(self):
        with pytest.raises(LocalIOError) as exc_info:
            with error_context("could not save file"):
                raise PermissionError("read-only file system")

        assert exc_info.value.context == "could not save file"
        assert isinstance(exc_info.value.__cause__, PermissionError)
