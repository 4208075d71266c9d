"""Records handed from the pipeline to the page renderer."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TrackRecord:
    """One linked audio file as shown on the page.

    Attributes:
        name: File display name.
        url: Canonical preview share link.
        size: Size in bytes.
        modified: Last-modified instant (timezone-aware UTC).
    """

    name: str
    url: str
    size: int
    modified: datetime


def sort_newest_first(records: Iterable[TrackRecord]) -> list[TrackRecord]:
    """Order records by modified time, most recent first."""
    return sorted(records, key=lambda record: record.modified, reverse=True)
