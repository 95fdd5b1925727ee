"""
HTTP Request Handling for the Freebox API Client
================================================

This module sends API requests and maps transport failures onto the
library's exception hierarchy.

"""

import logging
from typing import Any, Callable, Optional, TypeVar, Union
from urllib.parse import urlsplit

import requests

from freebox_api.client.parser import decode_envelope, decode_json_body
from freebox_api.exceptions import FreeboxConnectionError, FreeboxHTTPError, FreeboxTimeoutError, wrap_connection_error
from freebox_api.http_session import create_freebox_session

logger = logging.getLogger("freebox-api")

AUTH_HEADER = "X-Fbx-App-Auth"

T = TypeVar("T")


class FreeboxRequestHandler:
    """Sends single-shot API requests relative to a base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: tuple = (3, 12),
        verify: Union[bool, str] = True,
    ):
        """
        Initialize the request handler.

        Args:
            base_url: Versioned API base URL, ending with "/"
            timeout: Request timeout (connect, read)
            verify: TLS verification flag or CA bundle path
        """
        self.base_url = base_url
        self.timeout = timeout
        self.verify = verify

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    def call(
        self,
        method: str,
        endpoint: str,
        result_parser: Optional[Callable[[Any], T]] = None,
        payload: Optional[dict[str, Any]] = None,
        session_token: Optional[str] = None,
    ) -> Optional[T]:
        """
        Call an API endpoint and decode its envelope.

        Args:
            method: "GET" or "POST"
            endpoint: Endpoint path relative to the base URL
            result_parser: Converts the envelope's result payload
            payload: JSON request body
            session_token: Session token for authenticated endpoints

        Returns:
            Parsed result, or None when result_parser is None
        """
        response = self._send(method, endpoint, payload, session_token)
        return decode_envelope(response.text, endpoint, result_parser, response.status_code)

    def fetch_json(self, endpoint: str) -> Any:
        """
        GET an endpoint that answers with bare JSON rather than an envelope.

        Without an envelope there is no error contract in the body, so any
        error status is raised even when the body decodes.

        Raises:
            FreeboxHTTPError: Response status is 400 or above
        """
        response = self._send("GET", endpoint)
        if response.status_code >= 400:
            raise FreeboxHTTPError(
                f"HTTP {response.status_code} error for {endpoint}",
                status_code=response.status_code,
                details={"operation": endpoint, "response_text": str(response.text)[:500]},
            )
        return decode_json_body(response.text, endpoint, response.status_code)

    def _send(
        self,
        method: str,
        endpoint: str,
        payload: Optional[dict[str, Any]] = None,
        session_token: Optional[str] = None,
    ) -> requests.Response:
        url = self.url_for(endpoint)
        headers = {"Content-Type": "application/json; charset=utf-8"}
        if session_token:
            headers[AUTH_HEADER] = session_token

        logger.debug(f"📤 {method} {url}")

        try:
            with create_freebox_session(self.verify) as session:
                if method == "GET":
                    response = session.get(url, headers=headers, timeout=self.timeout)
                else:
                    response = session.post(url, json=payload, headers=headers, timeout=self.timeout)

        except requests.exceptions.Timeout as e:
            raise FreeboxTimeoutError(
                f"Request to {endpoint} timed out",
                details={"operation": endpoint, "timeout": self.timeout},
            ) from e

        except requests.exceptions.ConnectionError as e:
            parts = urlsplit(url)
            raise wrap_connection_error(e, parts.hostname or url, parts.port) from e

        except requests.exceptions.RequestException as e:
            raise FreeboxConnectionError(
                f"Request to {endpoint} failed",
                details={"operation": endpoint, "error_type": type(e).__name__, "original_error": str(e)},
            ) from e

        logger.debug(f"📥 HTTP {response.status_code}: {len(response.text or '')} chars")
        return response
