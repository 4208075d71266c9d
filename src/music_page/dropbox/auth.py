"""Refresh-token exchange for a short-lived Dropbox access token."""

from __future__ import annotations

import base64
import json
import logging
from http.client import HTTPException
from urllib import request as urllib_request
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode

from music_page.dropbox.client import (
    DEFAULT_TIMEOUT_SECONDS,
    DropboxAuthError,
    DropboxTransportError,
)

logger = logging.getLogger(__name__)

TOKEN_URL = "https://api.dropbox.com/oauth2/token"


def _basic_auth(app_key: str, app_secret: str) -> str:
    credentials = f"{app_key}:{app_secret}".encode("ascii")
    return base64.b64encode(credentials).decode("ascii")


def exchange_refresh_token(
    app_key: str,
    app_secret: str,
    refresh_token: str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> str:
    """Exchange a long-lived refresh token for an access token.

    The token is fetched once per run and is neither cached nor refreshed.

    Args:
        app_key: Dropbox app key.
        app_secret: Dropbox app secret.
        refresh_token: Long-lived refresh token issued to the app.
        timeout: Socket timeout in seconds.

    Returns:
        Access token string.

    Raises:
        ValueError: If any credential is empty.
        DropboxAuthError: If Dropbox returns a non-2xx status or no access token.
        DropboxTransportError: On network failure or timeout.
    """
    for name, value in (
        ("app_key", app_key),
        ("app_secret", app_secret),
        ("refresh_token", refresh_token),
    ):
        if not value or not value.strip():
            raise ValueError(f"{name} must not be empty")

    req = urllib_request.Request(
        TOKEN_URL,
        data=urlencode({"grant_type": "refresh_token", "refresh_token": refresh_token}).encode(
            "ascii"
        ),
        headers={
            "Authorization": f"Basic {_basic_auth(app_key, app_secret)}",
            "Content-Type": "application/x-www-form-urlencoded",
        },
        method="POST",
    )
    try:
        with urllib_request.urlopen(req, timeout=timeout) as resp:
            status = resp.status
            body = resp.read().decode("utf-8", errors="replace")
    except HTTPError as exc:
        body = exc.read().decode("utf-8", errors="replace")
        logger.error("[exchange_refresh_token] token exchange rejected; status:%d", exc.code)
        raise DropboxAuthError(exc.code, body) from exc
    except (URLError, HTTPException, OSError) as exc:
        raise DropboxTransportError(f"Dropbox token exchange failed: {exc}") from exc

    try:
        token = json.loads(body).get("access_token")
    except (ValueError, AttributeError):
        token = None
    if not token:
        logger.error("[exchange_refresh_token] response carried no access token; status:%d", status)
        raise DropboxAuthError(status, body)
    return str(token)
