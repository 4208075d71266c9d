"""Recursive, paginated Dropbox folder enumeration."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from music_page.dropbox.client import DropboxClient, DropboxError
from music_page.dropbox.models import (
    FIELD_CURSOR,
    FIELD_ENTRIES,
    FIELD_HAS_MORE,
    FIELD_TAG,
    TAG_FILE,
    FileEntry,
    ListingCursor,
    ListingPage,
    NotStarted,
    Resuming,
)

logger = logging.getLogger(__name__)

LIST_FOLDER_ENDPOINT = "/files/list_folder"
LIST_FOLDER_CONTINUE_ENDPOINT = "/files/list_folder/continue"


class EnumerationError(DropboxError):
    """Raised when a folder page cannot be fetched; aborts the enumeration."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FolderEnumerator:
    """Walks a Dropbox folder tree one list_folder page at a time."""

    def __init__(self, client: DropboxClient) -> None:
        self._client = client

    def fetch_page(self, folder_path: str, state: ListingCursor) -> ListingPage:
        """Fetch a single page for the given listing state.

        NotStarted calls list_folder with the folder path; Resuming calls
        list_folder/continue with the cursor.

        Raises:
            EnumerationError: On any failed request or malformed response.
        """
        if isinstance(state, Resuming):
            endpoint = LIST_FOLDER_CONTINUE_ENDPOINT
            payload: dict[str, Any] = {"cursor": state.cursor}
        else:
            endpoint = LIST_FOLDER_ENDPOINT
            payload = {
                "path": folder_path,
                "recursive": True,
                "include_non_downloadable_files": False,
            }

        try:
            response = self._client.post(endpoint, payload)
        except DropboxError as exc:
            status = getattr(exc, "status_code", None)
            raise EnumerationError(
                f"Dropbox list_folder failed for {folder_path!r}: {exc}", status
            ) from exc

        try:
            raw_entries = response[FIELD_ENTRIES]
            has_more = bool(response[FIELD_HAS_MORE])
            entries = tuple(
                FileEntry.from_api(raw) for raw in raw_entries if raw.get(FIELD_TAG) == TAG_FILE
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise EnumerationError(f"Malformed list_folder response: {exc}") from exc

        return ListingPage(entries=entries, has_more=has_more, cursor=response.get(FIELD_CURSOR))

    def iter_pages(self, folder_path: str) -> Iterator[tuple[FileEntry, ...]]:
        """Yield the file entries of each page until has_more is false.

        Folder and deleted entries are dropped. A failure after some pages
        have been yielded still raises; yielded pages are not rolled back.

        Args:
            folder_path: Dropbox folder to list recursively ("" for root).

        Yields:
            Tuple of FileEntry objects per page, in server order.

        Raises:
            EnumerationError: If any page fetch fails.
        """
        state: ListingCursor | None = NotStarted()
        page_count = 0
        while state is not None:
            page = self.fetch_page(folder_path, state)
            page_count += 1
            logger.debug(
                "[iter_pages] fetched page; page:%d;file_count:%d;has_more:%s",
                page_count,
                len(page.entries),
                page.has_more,
            )
            yield page.entries

            if not page.has_more:
                state = None
            elif page.cursor:
                state = Resuming(page.cursor)
            else:
                raise EnumerationError("list_folder reported has_more without a cursor")

        logger.info("[iter_pages] listing complete; folder:%s;pages:%d", folder_path, page_count)

    def iter_files(self, folder_path: str) -> Iterator[FileEntry]:
        """Yield every file entry under folder_path across all pages."""
        for entries in self.iter_pages(folder_path):
            yield from entries
