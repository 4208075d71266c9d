"""Share-link resolution: reuse an existing public link or create one."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from music_page.dropbox.client import DropboxClient, DropboxError
from music_page.dropbox.models import FIELD_LINKS, FIELD_URL

logger = logging.getLogger(__name__)

LIST_SHARED_LINKS_ENDPOINT = "/sharing/list_shared_links"
CREATE_SHARED_LINK_ENDPOINT = "/sharing/create_shared_link_with_settings"

PREVIEW_PARAM = "dl"
PREVIEW_VALUE = "0"


def to_preview_url(shared_url: str) -> str:
    """Normalize a share link to its open-in-browser form.

    Any ``dl`` parameter is removed and ``dl=0`` appended, keeping other
    query parameters (such as ``rlkey``) in order. Idempotent.
    """
    parts = urlsplit(shared_url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key != PREVIEW_PARAM
    ]
    query.append((PREVIEW_PARAM, PREVIEW_VALUE))
    return urlunsplit(parts._replace(query=urlencode(query)))


class LinkStrategy(Protocol):
    """One step of the resolution chain; returns a URL or None to fall through."""

    name: str

    def resolve(self, path_lower: str) -> str | None: ...


class ExistingLinkStrategy:
    """Reuse the first direct shared link already bound to the path."""

    name = "existing"

    def __init__(self, client: DropboxClient) -> None:
        self._client = client

    def resolve(self, path_lower: str) -> str | None:
        try:
            response = self._client.post(
                LIST_SHARED_LINKS_ENDPOINT, {"path": path_lower, "direct_only": True}
            )
        except DropboxError as exc:
            # Indistinguishable from "no link" for the caller; creation is attempted next.
            logger.warning("[existing_link] lookup failed; path:%s;error:%s", path_lower, exc)
            return None

        for link in response.get(FIELD_LINKS) or []:
            url = link.get(FIELD_URL) if isinstance(link, dict) else None
            if isinstance(url, str) and url:
                return url
        logger.debug("[existing_link] no existing link; path:%s", path_lower)
        return None


class CreateLinkStrategy:
    """Create a new public shared link for the path."""

    name = "create"

    def __init__(self, client: DropboxClient) -> None:
        self._client = client

    def resolve(self, path_lower: str) -> str | None:
        try:
            response = self._client.post(
                CREATE_SHARED_LINK_ENDPOINT,
                {"path": path_lower, "settings": {"requested_visibility": "public"}},
            )
        except DropboxError as exc:
            logger.warning("[create_link] link creation failed; path:%s;error:%s", path_lower, exc)
            return None

        url = response.get(FIELD_URL)
        if not isinstance(url, str) or not url:
            return None
        logger.info("[create_link] created shared link; path:%s", path_lower)
        return url


class LinkResolver:
    """Evaluates link strategies in order until one yields a URL."""

    def __init__(
        self,
        client: DropboxClient,
        strategies: Sequence[LinkStrategy] | None = None,
    ) -> None:
        """Initialise the resolver.

        Args:
            client: Authenticated DropboxClient.
            strategies: Ordered strategies; defaults to reuse-then-create so
                repeated runs converge on one link per file.
        """
        if strategies is None:
            strategies = (ExistingLinkStrategy(client), CreateLinkStrategy(client))
        self._strategies = tuple(strategies)

    def resolve(self, path_lower: str) -> str | None:
        """Return the canonical preview URL for a file, or None if unresolvable.

        Never raises for Dropbox failures.
        """
        for strategy in self._strategies:
            url = strategy.resolve(path_lower)
            if url:
                logger.debug(
                    "[resolve] link resolved; path:%s;strategy:%s", path_lower, strategy.name
                )
                return to_preview_url(url)
        return None
