"""Dropbox API v2 RPC client."""

from __future__ import annotations

import json
import logging
from http.client import HTTPException
from typing import Any
from urllib import request as urllib_request
from urllib.error import HTTPError, URLError

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.dropboxapi.com/2"
DEFAULT_TIMEOUT_SECONDS = 100.0


class DropboxError(Exception):
    """Base class for Dropbox failures."""


class DropboxAuthError(DropboxError):
    """Raised when the refresh-token exchange does not return an access token."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Dropbox token exchange failed {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class DropboxApiError(DropboxError):
    """Raised when a Dropbox RPC endpoint returns a non-2xx response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Dropbox API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class DropboxTransportError(DropboxError):
    """Raised when a request fails before an HTTP response is received."""


def error_detail(raw: bytes, fallback: str) -> str:
    """Extract a readable message from a Dropbox error body.

    RPC errors are JSON with an ``error_summary`` field; 400 responses are
    plain text.
    """
    text = raw.decode("utf-8", errors="replace").strip()
    try:
        payload = json.loads(text)
    except ValueError:
        return text or fallback
    if isinstance(payload, dict) and payload.get("error_summary"):
        return str(payload["error_summary"])
    return text or fallback


class DropboxClient:
    """Bearer-authenticated client for Dropbox RPC endpoints."""

    def __init__(self, access_token: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        """Initialise the client.

        Args:
            access_token: Short-lived bearer token from the token exchange.
            timeout: Socket timeout in seconds applied to every request.
        """
        self._access_token = access_token
        self._timeout = timeout

    def __repr__(self) -> str:
        return f"DropboxClient(timeout={self._timeout!r})"

    def post(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON body to an RPC endpoint.

        Args:
            endpoint: Path relative to API_BASE_URL (e.g. "/files/list_folder").
            payload: JSON-serializable request arguments.

        Returns:
            Parsed JSON response body as a dict.

        Raises:
            DropboxApiError: If the API returns a non-2xx status code.
            DropboxTransportError: On network failure or timeout.
        """
        url = f"{API_BASE_URL}{endpoint}"
        req = urllib_request.Request(
            url,
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Authorization": f"Bearer {self._access_token}",
                "Content-Type": "application/json",
            },
            method="POST",
        )
        try:
            with urllib_request.urlopen(req, timeout=self._timeout) as resp:
                status = resp.status
                body = resp.read()
        except HTTPError as exc:
            detail = error_detail(exc.read(), str(exc.reason))
            logger.debug("[post] request failed; endpoint:%s;status:%d", endpoint, exc.code)
            raise DropboxApiError(exc.code, detail) from exc
        except (URLError, HTTPException, OSError) as exc:
            # Covers failures while reading the body, which urllib does not wrap.
            raise DropboxTransportError(f"Dropbox request to {endpoint} failed: {exc}") from exc

        try:
            parsed = json.loads(body)
        except ValueError as exc:
            raise DropboxApiError(status, f"non-JSON response from {endpoint}") from exc
        if not isinstance(parsed, dict):
            raise DropboxApiError(status, f"unexpected response shape from {endpoint}")
        return parsed
