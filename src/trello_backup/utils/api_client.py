"""
Trello HTTP client wrapper with error translation and call logging.

This module wraps a requests.Session, which holds the cookie jar for the
whole run. One client is created per run and passed to every component;
there is no module-level session.
"""

import time
from http.cookiejar import Cookie
from typing import Any, Dict, Optional
from urllib.parse import urlsplit
import logging

import requests

from .logger import APICallLogger
from ..config import TRELLO_BASE_URL
from ..exceptions import DecodeError, TransportError, UnexpectedStatusError


class TrelloAPIClient:
    """
    Thin Trello client around a single requests.Session.

    Failures are translated into the backup exception hierarchy and are
    never retried: a transport error surfaces as TransportError, a rejected
    status as UnexpectedStatusError and a malformed body as DecodeError.
    """

    def __init__(
        self,
        base_url: str = TRELLO_BASE_URL,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize Trello API client.

        Args:
            base_url: Service root, e.g. https://trello.com
            session: HTTP session to use (a new one is created if None)
            logger: Logger instance
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.api_logger = APICallLogger(logger)
        self._request_count = 0
        self._error_count = 0

    @property
    def domain(self) -> str:
        """Host name the session cookies are scoped to."""
        return urlsplit(self.base_url).hostname or ""

    def url(self, path: str) -> str:
        """Resolve a service path against the base URL; absolute URLs pass through."""
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}{path}"

    def request(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Send a request and translate transport failures.

        Args:
            method: HTTP method
            path: Service path or absolute URL
            **kwargs: Passed through to requests

        Returns:
            The response, whatever its status code

        Raises:
            TransportError: If the request could not be completed
        """
        url = self.url(path)
        self.api_logger.log_request(method, url)
        start_time = time.time()

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            self._error_count += 1
            self.api_logger.log_error(e, f"{method} {url}")
            raise TransportError(str(e)) from e

        self._request_count += 1
        self.api_logger.log_response(
            method=method,
            url=url,
            status_code=response.status_code,
            response_time=time.time() - start_time
        )
        return response

    def _check_status(self, response: requests.Response) -> None:
        if not 200 <= response.status_code < 300:
            self._error_count += 1
            response.close()
            raise UnexpectedStatusError(response.status_code, response.url)

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"decode json: {e}") from e

    # Request helpers used by the backup components

    def get_text(self, path: str) -> str:
        """GET a page and return its body as text, whatever the status."""
        return self.request("GET", path).text

    def get_bytes(self, path: str) -> bytes:
        """GET a resource and return its raw body; a non-2xx status is an error."""
        response = self.request("GET", path)
        self._check_status(response)
        return response.content

    def get_json(self, path: str) -> Any:
        """GET a resource and decode it as JSON; a non-2xx status is an error."""
        response = self.request("GET", path)
        self._check_status(response)
        return self._decode(response)

    def post_form(self, path: str, data: Dict[str, str]) -> None:
        """POST a form and discard the response."""
        response = self.request("POST", path, data=data)
        response.close()

    def post_form_json(self, path: str, data: Dict[str, str]) -> Any:
        """POST a form and decode the JSON answer, whatever the status."""
        return self._decode(self.request("POST", path, data=data))

    def open_stream(self, url: str) -> requests.Response:
        """
        Open a streamed GET for a file download.

        The caller owns the returned response and must close it.

        Raises:
            TransportError: On transport failure or non-2xx status
        """
        response = self.request("GET", url, stream=True)
        self._check_status(response)
        return response

    def set_cookie(self, name: str, value: str, expires_in: int = 3600) -> Cookie:
        """
        Install a cookie for the service domain directly into the jar.

        Args:
            name: Cookie name
            value: Cookie value
            expires_in: Lifetime in seconds from now

        Returns:
            The cookie that was stored
        """
        return self.session.cookies.set(
            name,
            value,
            domain=self.domain,
            path="/",
            expires=int(time.time()) + expires_in
        )

    # Utility methods

    def get_stats(self) -> Dict[str, Any]:
        """
        Get client statistics.

        Returns:
            Dictionary with client statistics
        """
        return {
            "total_requests": self._request_count,
            "total_errors": self._error_count,
            "error_rate": self._error_count / max(1, self._request_count),
        }

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()


def create_trello_client(
    base_url: str = TRELLO_BASE_URL,
    logger: Optional[logging.Logger] = None
) -> TrelloAPIClient:
    """
    Create a Trello client with a fresh session.

    Args:
        base_url: Service root URL
        logger: Logger instance

    Returns:
        Configured TrelloAPIClient instance
    """
    return TrelloAPIClient(base_url=base_url, logger=logger)
