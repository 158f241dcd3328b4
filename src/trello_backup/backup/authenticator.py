"""
Session establishment for Trello.

Two login strategies share one interface: installing an existing ``token``
cookie, or exchanging a username and password (plus an optional TOTP code)
for a fresh session. Both leave the result in the client's cookie jar.
"""

import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Union
import logging

import pyotp

from ..utils.api_client import TrelloAPIClient
from ..exceptions import (
    AuthenticationError,
    AuthenticationRejected,
    DecodeError,
    SecondFactorRequired,
    TokenNotFound,
    UsageError,
    error_context,
)

LOGIN_PAGE_PATH = "/login"
AUTHENTICATION_PATH = "/1/authentication"
SESSION_PATH = "/1/authorization/session"

TOKEN_COOKIE_NAME = "token"
TOKEN_COOKIE_LIFETIME = 3600

LOGIN_TOKEN_PATTERN = re.compile(r'dsc="([a-zA-Z0-9]+)"')
SECOND_FACTOR_MISSING = "TWO_FACTOR_MISSING"


def compute_time_based_code(secret: str, for_time: Optional[Union[int, float]] = None) -> str:
    """
    Compute the RFC 6238 one-time code for a base32 TOTP secret.

    Args:
        secret: Base32 encoded shared secret
        for_time: Unix timestamp to compute the code for (defaults to now)

    Returns:
        The six digit code

    Raises:
        AuthenticationError: If the secret is not valid base32
    """
    if for_time is None:
        for_time = time.time()
    try:
        return pyotp.TOTP(secret).at(for_time)
    except (ValueError, TypeError) as e:
        raise AuthenticationError(f"invalid TOTP secret: {e}") from e


@dataclass
class Credentials:
    """Trello account credentials; secrets are kept out of repr()."""
    username: str
    password: str = field(repr=False)
    totp_secret: Optional[str] = field(default=None, repr=False)


class AuthState(Enum):
    """Progress of the credential exchange."""
    START = "start"
    TOKEN_FETCHED = "token_fetched"
    AUTHENTICATED = "authenticated"
    SESSION_ESTABLISHED = "session_established"


class SessionAuthenticator(ABC):
    """Strategy that turns a bare client into an authenticated one."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    @abstractmethod
    def establish(self, api_client: TrelloAPIClient) -> None:
        """Authenticate the client's session or raise a TrelloBackupError."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human readable name of the login method."""


class TokenCookieAuthenticator(SessionAuthenticator):
    """
    Log in by installing an existing session token cookie.

    This needs no network round-trip; an invalid token only shows up when
    the first API call is rejected.
    """

    def __init__(self, token: str, logger: Optional[logging.Logger] = None):
        super().__init__(logger)
        self._token = token

    @property
    def description(self) -> str:
        return "token cookie"

    def establish(self, api_client: TrelloAPIClient) -> None:
        self.logger.info("Logging in with token cookie")
        api_client.set_cookie(TOKEN_COOKIE_NAME, self._token, expires_in=TOKEN_COOKIE_LIFETIME)


class CredentialAuthenticator(SessionAuthenticator):
    """
    Log in with a Trello username and password.

    The exchange runs through three steps, tracked in ``state``:
    scrape the login token from the login page, trade the credentials for
    an authentication code (answering a second-factor challenge with a TOTP
    code when a secret is available), and finally bind the code to the
    session together with the login token.
    """

    def __init__(self, credentials: Credentials, logger: Optional[logging.Logger] = None):
        super().__init__(logger)
        self.credentials = credentials
        self.state = AuthState.START
        self._login_token: Optional[str] = None
        self._authentication_code: Optional[str] = None

    @property
    def description(self) -> str:
        return "Trello account"

    def establish(self, api_client: TrelloAPIClient) -> None:
        self.logger.info("Logging in with Trello account")

        self.logger.info("Getting login token")
        with error_context("could not get login token"):
            self._login_token = self.fetch_login_token(api_client)
        self.state = AuthState.TOKEN_FETCHED

        self.logger.info("Authenticating")
        with error_context("could not authenticate"):
            self._authentication_code = self.authenticate(api_client)
        self.state = AuthState.AUTHENTICATED

        self.logger.info("Updating session info")
        with error_context("could not update session info"):
            self.update_session(api_client, self._authentication_code, self._login_token)
        self.state = AuthState.SESSION_ESTABLISHED

    def fetch_login_token(self, api_client: TrelloAPIClient) -> str:
        """
        Scrape the login token from the login page.

        Raises:
            TokenNotFound: If the page no longer embeds the token
        """
        page = api_client.get_text(LOGIN_PAGE_PATH)
        match = LOGIN_TOKEN_PATTERN.search(page)
        if not match:
            raise TokenNotFound(
                "could not find dsc on the login page (the login page format may have changed)"
            )
        return match.group(1)

    def authenticate(self, api_client: TrelloAPIClient) -> str:
        """
        Exchange the credentials for an authentication code.

        Returns:
            The authentication code

        Raises:
            SecondFactorRequired: If Trello asks for a TOTP code and no secret was given
            AuthenticationRejected: If Trello reports any other error
        """
        code, error = self._submit_credentials(api_client, totp_code=None)

        if error and SECOND_FACTOR_MISSING in error:
            if not self.credentials.totp_secret:
                raise SecondFactorRequired("second factor required")
            self.logger.info("Second factor required, submitting TOTP code")
            totp_code = compute_time_based_code(self.credentials.totp_secret)
            code, error = self._submit_credentials(api_client, totp_code=totp_code)

        if error:
            raise AuthenticationRejected(f"api error: {error}")
        return code

    def _submit_credentials(self, api_client: TrelloAPIClient, totp_code: Optional[str]):
        form = {
            "factors[user]": self.credentials.username,
            "factors[password]": self.credentials.password,
            "method": "password",
        }
        if totp_code:
            form["factors[totp][password]"] = totp_code

        payload = api_client.post_form_json(AUTHENTICATION_PATH, form)
        if not isinstance(payload, dict):
            raise DecodeError("decode json: expected an object from the authentication endpoint")
        return str(payload.get("code") or ""), str(payload.get("error") or "")

    def update_session(self, api_client: TrelloAPIClient, authentication: str, login_token: str) -> None:
        """Bind the authentication code to the session; the answer is not inspected."""
        api_client.post_form(SESSION_PATH, {
            "authentication": authentication,
            "dsc": login_token,
        })


USAGE = "Usage: trello-backup (TOKEN_COOKIE | USERNAME PASSWORD [TOTP_SECRET])"


def create_authenticator(arguments: Sequence[str], logger: Optional[logging.Logger] = None) -> SessionAuthenticator:
    """
    Pick the login strategy from the positional command line arguments.

    Args:
        arguments: Either a token cookie, or username, password and optional TOTP secret

    Returns:
        The matching authenticator

    Raises:
        UsageError: If the number of arguments matches neither form
    """
    if len(arguments) == 1:
        return TokenCookieAuthenticator(arguments[0], logger)
    if len(arguments) in (2, 3):
        totp_secret = arguments[2] if len(arguments) == 3 else None
        return CredentialAuthenticator(
            Credentials(username=arguments[0], password=arguments[1], totp_secret=totp_secret or None),
            logger
        )
    raise UsageError(USAGE)
