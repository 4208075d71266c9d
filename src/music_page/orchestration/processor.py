"""Music library processor — orchestrates folder enumeration, link resolution and publishing."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from music_page.dropbox.auth import exchange_refresh_token
from music_page.dropbox.client import DropboxClient
from music_page.dropbox.links import LinkResolver
from music_page.dropbox.listing import FolderEnumerator
from music_page.page.models import TrackRecord, sort_newest_first
from music_page.page.renderer import render_page

if TYPE_CHECKING:
    from music_page.config import AppConfig
    from music_page.page.publisher import PagePublisher

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = (".mp3", ".flac", ".wav", ".aiff", ".m4a", ".ogg")


def is_audio_file(name: str) -> bool:
    """Case-insensitive match of the file name against AUDIO_EXTENSIONS."""
    return name.lower().endswith(AUDIO_EXTENSIONS)


@dataclass
class PublishResult:
    """Outcome of a full publish run."""

    track_count: int
    location: str
    skipped: list[str] = field(default_factory=list)


class MusicLibraryProcessor:
    """Turns a Dropbox folder into linked track records."""

    def __init__(
        self,
        enumerator: FolderEnumerator,
        resolver: LinkResolver,
        folder_path: str,
        on_skip: Callable[[str], None] | None = None,
    ) -> None:
        """Initialise the processor.

        Args:
            enumerator: FolderEnumerator used to page through the folder.
            resolver: LinkResolver used to find or create a share link per file.
            folder_path: Dropbox folder to publish.
            on_skip: Optional callback invoked once per file that has no link,
                with a human-readable message naming the file.
        """
        self._enumerator = enumerator
        self._resolver = resolver
        self._folder_path = folder_path
        self._on_skip = on_skip
        self.skipped: list[str] = []

    @property
    def folder_path(self) -> str:
        return self._folder_path

    def iter_tracks(self) -> Iterator[TrackRecord]:
        """Lazily yield a TrackRecord per audio file with a resolvable link.

        Records come out in enumeration order, not sorted. Files without a
        link are skipped and reported through on_skip; enumeration failures
        propagate.

        Yields:
            TrackRecord for each linked audio file.

        Raises:
            EnumerationError: If a folder page cannot be fetched.
        """
        for entries in self._enumerator.iter_pages(self._folder_path):
            for entry in entries:
                if not is_audio_file(entry.name):
                    continue

                url = self._resolver.resolve(entry.path_lower)
                if not url:
                    self.skipped.append(entry.name)
                    logger.debug("[iter_tracks] no link, skipping; name:%s", entry.name)
                    if self._on_skip is not None:
                        self._on_skip(f"No link for {entry.name}")
                    continue

                yield TrackRecord(
                    name=entry.name,
                    url=url,
                    size=entry.size,
                    modified=entry.client_modified,
                )

    def collect_tracks(self) -> list[TrackRecord]:
        """Run iter_tracks to completion and return the records unsorted."""
        self.skipped = []
        tracks = list(self.iter_tracks())
        logger.info(
            "[collect_tracks] collected tracks; folder:%s;track_count:%d;skipped_count:%d",
            self._folder_path,
            len(tracks),
            len(self.skipped),
        )
        return tracks


def publish_music_page(
    processor: MusicLibraryProcessor,
    publisher: PagePublisher,
    *,
    title: str,
    intro_html: str | None = None,
    home_url: str = "",
    stylesheets: tuple[str, ...] = (),
    timezone_name: str = "Europe/London",
) -> PublishResult:
    """Run the full folder-to-page pipeline.

    Steps:
        1. Collect linked tracks from the folder.
        2. Sort them newest-modified first.
        3. Render the HTML page.
        4. Publish the document.

    Nothing is published unless every page of the folder was listed.

    Returns:
        PublishResult with the track count, skipped file names and location.
    """
    logger.info("[publish_music_page] listing folder; folder:%s", processor.folder_path)
    tracks = sort_newest_first(processor.collect_tracks())
    document = render_page(
        tracks,
        title,
        intro_html,
        home_url=home_url,
        stylesheets=stylesheets,
        timezone_name=timezone_name,
    )
    location = publisher.publish(document)
    logger.info(
        "[publish_music_page] pipeline complete; location:%s;track_count:%d",
        location,
        len(tracks),
    )
    return PublishResult(
        track_count=len(tracks), location=location, skipped=list(processor.skipped)
    )


def music_processor_from_config(
    config: AppConfig,
    on_skip: Callable[[str], None] | None = None,
) -> MusicLibraryProcessor:
    """Construct a MusicLibraryProcessor from application configuration.

    Exchanges the refresh token for an access token (one per run), then
    wires a DropboxClient into the enumerator and resolver.

    Args:
        config: Application configuration instance.
        on_skip: Optional callback for files without a link.

    Returns:
        Configured MusicLibraryProcessor instance.

    Raises:
        DropboxAuthError: If the token exchange fails.
    """
    access_token = exchange_refresh_token(
        config.app_key,
        config.app_secret,
        config.refresh_token,
        timeout=config.request_timeout,
    )
    client = DropboxClient(access_token, timeout=config.request_timeout)
    return MusicLibraryProcessor(
        enumerator=FolderEnumerator(client),
        resolver=LinkResolver(client),
        folder_path=config.folder_path,
        on_skip=on_skip,
    )


def publish_from_config(
    config: AppConfig,
    publisher: PagePublisher,
    on_skip: Callable[[str], None] | None = None,
) -> PublishResult:
    """Build a processor from config and publish the page through publisher."""
    processor = music_processor_from_config(config, on_skip=on_skip)
    return publish_music_page(
        processor,
        publisher,
        title=config.page_title,
        intro_html=config.page_intro,
        home_url=config.home_url,
        stylesheets=config.stylesheets,
        timezone_name=config.display_timezone,
    )
