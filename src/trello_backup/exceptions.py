"""
Exception hierarchy for Trello backup operations.

Every error raised by the backup pipeline is terminal. Errors carry an
optional context string naming the step that failed, which the orchestrator
attaches before the error reaches the command line.
"""

from contextlib import contextmanager
from typing import Iterator, Optional


class TrelloBackupError(Exception):
    """Base exception for all backup failures."""

    def __init__(self, message: str, context: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            return f"{self.context}: {self.message}"
        return self.message


class UsageError(TrelloBackupError):
    """Raised when the command line arguments are invalid."""


class TransportError(TrelloBackupError):
    """Raised on network, DNS or TLS failures."""


class UnexpectedStatusError(TransportError):
    """Raised when the server answers with a non-success status code."""

    def __init__(self, status_code: int, url: str, context: Optional[str] = None):
        super().__init__(f"response status {status_code} for {url}", context)
        self.status_code = status_code
        self.url = url


class RemoteFormatError(TrelloBackupError):
    """Raised when an expected pattern or field is missing from a response."""


class TokenNotFound(RemoteFormatError):
    """Raised when the login page no longer contains the login token."""


class AuthenticationError(TrelloBackupError):
    """Raised when Trello refuses the supplied credentials."""


class SecondFactorRequired(AuthenticationError):
    """Raised when two-factor authentication is required but no TOTP secret was given."""


class AuthenticationRejected(AuthenticationError):
    """Raised when the authentication endpoint reports an error."""


class LocalIOError(TrelloBackupError):
    """Raised when a file or directory cannot be created or written."""


class DecodeError(TrelloBackupError):
    """Raised when a response body is not valid JSON."""


@contextmanager
def error_context(description: str) -> Iterator[None]:
    """
    Attach a step description to errors raised inside the block.

    Backup errors keep the innermost description. File system errors
    become LocalIOError.
    """
    try:
        yield
    except TrelloBackupError as e:
        if not e.context:
            e.context = description
        raise
    except OSError as e:
        raise LocalIOError(str(e), context=description) from e
