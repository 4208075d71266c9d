"""Unit tests for dropbox/listing.py — FolderEnumerator pagination."""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from music_page.dropbox.client import DropboxApiError, DropboxTransportError
from music_page.dropbox.listing import (
    LIST_FOLDER_CONTINUE_ENDPOINT,
    LIST_FOLDER_ENDPOINT,
    EnumerationError,
    FolderEnumerator,
)
from music_page.dropbox.models import NotStarted, Resuming

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _file(
    name: str, size: int = 100, modified: str = "2024-05-01T10:00:00Z"
) -> dict:  # type: ignore[type-arg]
    return {
        ".tag": "file",
        "id": f"id:{name}",
        "name": name,
        "path_lower": f"/music/{name.lower()}",
        "size": size,
        "client_modified": modified,
    }


def _folder(name: str) -> dict:  # type: ignore[type-arg]
    return {".tag": "folder", "id": f"id:{name}", "name": name, "path_lower": f"/music/{name}"}


def _deleted(name: str) -> dict:  # type: ignore[type-arg]
    return {".tag": "deleted", "name": name, "path_lower": f"/music/{name}"}


def _page(
    entries: list,  # type: ignore[type-arg]
    has_more: bool = False,
    cursor: str | None = "cur",
) -> dict:  # type: ignore[type-arg]
    page = {"entries": entries, "has_more": has_more}
    if cursor is not None:
        page["cursor"] = cursor
    return page


def _make_enumerator(*responses: object) -> tuple[FolderEnumerator, MagicMock]:
    mock_client = MagicMock()
    mock_client.post.side_effect = list(responses)
    return FolderEnumerator(mock_client), mock_client


# ---------------------------------------------------------------------------
# fetch_page tests
# ---------------------------------------------------------------------------


class TestFetchPage:
    def test_not_started_calls_list_folder_with_path(self) -> None:
        enumerator, mock_client = _make_enumerator(_page([]))

        enumerator.fetch_page("/Public/Music", NotStarted())

        mock_client.post.assert_called_once_with(
            LIST_FOLDER_ENDPOINT,
            {
                "path": "/Public/Music",
                "recursive": True,
                "include_non_downloadable_files": False,
            },
        )

    def test_resuming_calls_continue_with_cursor(self) -> None:
        enumerator, mock_client = _make_enumerator(_page([]))

        enumerator.fetch_page("/Public/Music", Resuming("cursor-42"))

        mock_client.post.assert_called_once_with(
            LIST_FOLDER_CONTINUE_ENDPOINT, {"cursor": "cursor-42"}
        )

    def test_keeps_only_file_tagged_entries(self) -> None:
        enumerator, _ = _make_enumerator(
            _page([_file("a.mp3"), _folder("sub"), _deleted("old.mp3"), _file("b.txt")])
        )

        page = enumerator.fetch_page("/music", NotStarted())

        assert [e.name for e in page.entries] == ["a.mp3", "b.txt"]

    def test_maps_raw_fields_to_file_entry(self) -> None:
        enumerator, _ = _make_enumerator(
            _page([_file("Song.MP3", size=1048576, modified="2024-03-02T08:15:00Z")])
        )

        entry = enumerator.fetch_page("/music", NotStarted()).entries[0]

        assert entry.id == "id:Song.MP3"
        assert entry.path_lower == "/music/song.mp3"
        assert entry.size == 1048576
        assert entry.client_modified == datetime(2024, 3, 2, 8, 15, tzinfo=UTC)

    def test_wraps_api_error_as_enumeration_error(self) -> None:
        enumerator, _ = _make_enumerator(DropboxApiError(409, "path/not_found/"))

        with pytest.raises(EnumerationError) as exc_info:
            enumerator.fetch_page("/missing", NotStarted())

        assert exc_info.value.status_code == 409

    def test_wraps_transport_error_as_enumeration_error(self) -> None:
        enumerator, _ = _make_enumerator(DropboxTransportError("timed out"))

        with pytest.raises(EnumerationError) as exc_info:
            enumerator.fetch_page("/music", NotStarted())

        assert exc_info.value.status_code is None

    def test_non_dict_entry_raises_enumeration_error(self) -> None:
        enumerator, _ = _make_enumerator(_page([_file("a.mp3"), "garbage"]))

        with pytest.raises(EnumerationError, match="Malformed"):
            enumerator.fetch_page("/music", NotStarted())

    def test_malformed_response_raises_enumeration_error(self) -> None:
        enumerator, _ = _make_enumerator({"cursor": "c"})

        with pytest.raises(EnumerationError, match="Malformed"):
            enumerator.fetch_page("/music", NotStarted())


# ---------------------------------------------------------------------------
# iter_pages / iter_files tests
# ---------------------------------------------------------------------------


class TestIterPages:
    def test_single_page_stops_when_has_more_false(self) -> None:
        enumerator, mock_client = _make_enumerator(_page([_file("a.mp3")], has_more=False))

        pages = list(enumerator.iter_pages("/music"))

        assert len(pages) == 1
        assert mock_client.post.call_count == 1

    def test_ignores_lingering_cursor_when_has_more_false(self) -> None:
        enumerator, mock_client = _make_enumerator(
            _page([_file("a.mp3")], has_more=False, cursor="still-here")
        )

        list(enumerator.iter_pages("/music"))

        mock_client.post.assert_called_once()
        assert mock_client.post.call_args[0][0] == LIST_FOLDER_ENDPOINT

    def test_follows_cursor_across_pages(self) -> None:
        enumerator, mock_client = _make_enumerator(
            _page([_file("a.mp3")], has_more=True, cursor="c1"),
            _page([_file("b.mp3")], has_more=True, cursor="c2"),
            _page([_file("c.mp3")], has_more=False, cursor="c3"),
        )

        names = [e.name for e in enumerator.iter_files("/music")]

        assert names == ["a.mp3", "b.mp3", "c.mp3"]
        calls = mock_client.post.call_args_list
        assert calls[0][0][0] == LIST_FOLDER_ENDPOINT
        assert calls[1][0] == (LIST_FOLDER_CONTINUE_ENDPOINT, {"cursor": "c1"})
        assert calls[2][0] == (LIST_FOLDER_CONTINUE_ENDPOINT, {"cursor": "c2"})

    def test_each_file_yielded_once_regardless_of_page_boundaries(self) -> None:
        files = [_file(f"track{i}.mp3") for i in range(7)]
        for split in range(len(files) + 1):
            enumerator, _ = _make_enumerator(
                _page(files[:split], has_more=True, cursor="next"),
                _page(files[split:], has_more=False),
            )
            names = [e.name for e in enumerator.iter_files("/music")]
            assert names == [f["name"] for f in files]

    def test_empty_pages_are_followed(self) -> None:
        enumerator, _ = _make_enumerator(
            _page([], has_more=True, cursor="c1"),
            _page([_file("late.flac")], has_more=False),
        )

        names = [e.name for e in enumerator.iter_files("/music")]

        assert names == ["late.flac"]

    def test_failure_after_pages_raises_instead_of_truncating(self) -> None:
        enumerator, _ = _make_enumerator(
            _page([_file("a.mp3")], has_more=True, cursor="c1"),
            _page([_file("b.mp3")], has_more=True, cursor="c2"),
            DropboxApiError(500, "internal"),
        )

        seen: list[str] = []
        with pytest.raises(EnumerationError):
            for entry in enumerator.iter_files("/music"):
                seen.append(entry.name)

        assert seen == ["a.mp3", "b.mp3"]

    def test_has_more_without_cursor_raises(self) -> None:
        enumerator, _ = _make_enumerator(_page([_file("a.mp3")], has_more=True, cursor=None))

        with pytest.raises(EnumerationError, match="without a cursor"):
            list(enumerator.iter_pages("/music"))

    def test_pages_fetched_lazily(self) -> None:
        enumerator, mock_client = _make_enumerator(
            _page([_file("a.mp3")], has_more=True, cursor="c1"),
            _page([_file("b.mp3")], has_more=False),
        )

        pages = enumerator.iter_pages("/music")
        next(pages)

        assert mock_client.post.call_count == 1
