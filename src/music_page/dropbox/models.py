"""Data models for Dropbox folder entries and listing state."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

# Dropbox API JSON field names
FIELD_TAG = ".tag"
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_PATH_LOWER = "path_lower"
FIELD_SIZE = "size"
FIELD_CLIENT_MODIFIED = "client_modified"
FIELD_ENTRIES = "entries"
FIELD_HAS_MORE = "has_more"
FIELD_CURSOR = "cursor"
FIELD_LINKS = "links"
FIELD_URL = "url"

TAG_FILE = "file"


@dataclass(frozen=True)
class NotStarted:
    """Listing state before the first page has been requested."""


@dataclass(frozen=True)
class Resuming:
    """Listing state after the server issued a continuation cursor."""

    cursor: str


ListingCursor = NotStarted | Resuming


@dataclass(frozen=True)
class FileEntry:
    """A single file from a Dropbox folder listing.

    Attributes:
        id: Stable Dropbox file id (e.g. "id:abc123").
        name: Display name including extension.
        path_lower: Canonical lowercase path, used as the share-link key.
        size: Size in bytes.
        client_modified: Last-modified instant, timezone-aware UTC.
    """

    id: str
    name: str
    path_lower: str
    size: int
    client_modified: datetime

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> FileEntry:
        """Map a raw file-tagged list_folder entry to a FileEntry."""
        size = int(raw.get(FIELD_SIZE, 0))
        if size < 0:
            raise ValueError(f"Negative file size for {raw.get(FIELD_NAME, '')!r}: {size}")
        return cls(
            id=raw.get(FIELD_ID, ""),
            name=raw.get(FIELD_NAME, ""),
            path_lower=raw.get(FIELD_PATH_LOWER, ""),
            size=size,
            client_modified=parse_timestamp(raw[FIELD_CLIENT_MODIFIED]),
        )


@dataclass(frozen=True)
class ListingPage:
    """One page of a list_folder response, reduced to file entries."""

    entries: tuple[FileEntry, ...]
    has_more: bool
    cursor: str | None = None


def parse_timestamp(value: str) -> datetime:
    """Parse a Dropbox ISO 8601 timestamp ("2024-05-01T10:00:00Z") as aware UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
