"""Destinations for the rendered page: local directory or Azure Blob Storage."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from azure.core.exceptions import ResourceExistsError
from azure.storage.blob import BlobServiceClient, ContentSettings

from music_page.config import MissingConfigurationError

if TYPE_CHECKING:
    from music_page.config import AppConfig

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
DEFAULT_FILENAME = "index.html"


class PagePublisher(Protocol):
    """Writes a rendered document and returns where it was written."""

    def publish(self, document: str) -> str: ...


class LocalPublisher:
    """Writes the page to a file in a local directory."""

    def __init__(self, output_dir: str | Path, filename: str = DEFAULT_FILENAME) -> None:
        self._output_dir = Path(output_dir)
        self._filename = filename

    def publish(self, document: str) -> str:
        self._output_dir.mkdir(parents=True, exist_ok=True)
        path = self._output_dir / self._filename
        path.write_text(document, encoding="utf-8")
        logger.info("[local_publish] wrote page; path:%s;bytes:%d", path, len(document))
        return str(path)


class BlobPublisher:
    """Uploads the page to an Azure Blob Storage container.

    The default ``$web`` container is the one served by Azure Storage
    static websites.
    """

    def __init__(self, storage_connection_string: str, container: str, blob_name: str) -> None:
        """Initialise the publisher.

        Args:
            storage_connection_string: Azure Storage connection string.
            container: Blob container to upload into.
            blob_name: Blob path for the page (e.g. "music/index.html").
        """
        self._blob_service = BlobServiceClient.from_connection_string(storage_connection_string)
        self._container = container
        self._blob_name = blob_name

    def publish(self, document: str) -> str:
        container_client = self._blob_service.get_container_client(self._container)
        try:
            container_client.create_container()
            logger.info("[blob_publish] created blob container; container:%s", self._container)
        except ResourceExistsError:
            pass

        blob_client = container_client.get_blob_client(self._blob_name)
        blob_client.upload_blob(
            document.encode("utf-8"),
            overwrite=True,
            content_settings=ContentSettings(content_type=HTML_CONTENT_TYPE),
        )
        logger.info(
            "[blob_publish] uploaded page; container:%s;blob:%s", self._container, self._blob_name
        )
        return f"{self._container}/{self._blob_name}"


def blob_publisher_from_config(config: AppConfig) -> BlobPublisher:
    """Construct a BlobPublisher from application configuration.

    Raises:
        MissingConfigurationError: If no storage connection string is configured.
    """
    if not config.storage_connection_string:
        raise MissingConfigurationError("AzureWebJobsStorage")
    return BlobPublisher(
        storage_connection_string=config.storage_connection_string,
        container=config.output_container,
        blob_name=config.output_blob,
    )
