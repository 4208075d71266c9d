"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass

DEFAULT_FOLDER_PATH = "/Public/Music"
DEFAULT_OUTPUT_DIR = "out"
DEFAULT_PAGE_TITLE = "Music"
DEFAULT_PAGE_INTRO = "A rolling list of tracks, hosted on Dropbox."
DEFAULT_TIMEZONE = "Europe/London"
DEFAULT_TIMEOUT_SECONDS = 100.0
DEFAULT_OUTPUT_CONTAINER = "$web"
DEFAULT_OUTPUT_BLOB = "music/index.html"


class MissingConfigurationError(KeyError):
    """Raised when a required environment variable is absent or blank."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Missing environment variable: {self.name}"


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults; load_config() raises
    MissingConfigurationError before any network call if one is missing.
    """

    # Required — no defaults, fail at startup if missing
    app_key: str
    app_secret: str
    refresh_token: str

    # Defaults provided, overridable via env
    folder_path: str = DEFAULT_FOLDER_PATH
    output_dir: str = DEFAULT_OUTPUT_DIR
    page_title: str = DEFAULT_PAGE_TITLE
    page_intro: str = DEFAULT_PAGE_INTRO
    display_timezone: str = DEFAULT_TIMEZONE
    home_url: str = ""
    stylesheets: tuple[str, ...] = ()
    request_timeout: float = DEFAULT_TIMEOUT_SECONDS

    # Azure Functions host only
    storage_connection_string: str | None = None
    output_container: str = DEFAULT_OUTPUT_CONTAINER
    output_blob: str = DEFAULT_OUTPUT_BLOB

    def __repr__(self) -> str:
        return (
            f"AppConfig(folder_path={self.folder_path!r}, output_dir={self.output_dir!r},"
            f" output_container={self.output_container!r}, output_blob={self.output_blob!r})"
        )


def _required(name: str) -> str:
    value = os.environ.get(name, "")
    if not value.strip():
        raise MissingConfigurationError(name)
    return value.strip()


def _split_list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        DROPBOX_APP_KEY: Dropbox app key.
        DROPBOX_APP_SECRET: Dropbox app secret.
        DROPBOX_REFRESH_TOKEN: Long-lived refresh token for the app.

    Optional environment variables (with defaults):
        DROPBOX_FOLDER: Folder to publish (default: /Public/Music).
        OUTPUT_DIR: Local output directory for the CLI (default: out).
        MUSIC_PAGE_TITLE: Page title (default: Music).
        MUSIC_PAGE_INTRO: Intro blurb HTML shown under the title.
        MUSIC_PAGE_TIMEZONE: IANA zone used to display timestamps (default: Europe/London).
        MUSIC_PAGE_HOME_URL: Optional back link shown in the page header.
        MUSIC_PAGE_STYLESHEETS: Comma-separated stylesheet URLs linked from the page.
        MUSIC_PAGE_TIMEOUT_SECONDS: Per-request timeout (default: 100).
        AzureWebJobsStorage: Storage connection string for blob publishing.
        MUSIC_PAGE_CONTAINER: Blob container for the page (default: $web).
        MUSIC_PAGE_BLOB: Blob name for the page (default: music/index.html).

    Returns:
        Configured AppConfig instance.

    Raises:
        MissingConfigurationError: If a required variable is absent or blank.
    """
    return AppConfig(
        app_key=_required("DROPBOX_APP_KEY"),
        app_secret=_required("DROPBOX_APP_SECRET"),
        refresh_token=_required("DROPBOX_REFRESH_TOKEN"),
        folder_path=os.environ.get("DROPBOX_FOLDER") or DEFAULT_FOLDER_PATH,
        output_dir=os.environ.get("OUTPUT_DIR") or DEFAULT_OUTPUT_DIR,
        page_title=os.environ.get("MUSIC_PAGE_TITLE") or DEFAULT_PAGE_TITLE,
        page_intro=os.environ.get("MUSIC_PAGE_INTRO", DEFAULT_PAGE_INTRO),
        display_timezone=os.environ.get("MUSIC_PAGE_TIMEZONE") or DEFAULT_TIMEZONE,
        home_url=os.environ.get("MUSIC_PAGE_HOME_URL", ""),
        stylesheets=_split_list(os.environ.get("MUSIC_PAGE_STYLESHEETS", "")),
        request_timeout=float(
            os.environ.get("MUSIC_PAGE_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
        ),
        storage_connection_string=os.environ.get("AzureWebJobsStorage") or None,  # noqa: SIM112
        output_container=os.environ.get("MUSIC_PAGE_CONTAINER") or DEFAULT_OUTPUT_CONTAINER,
        output_blob=os.environ.get("MUSIC_PAGE_BLOB") or DEFAULT_OUTPUT_BLOB,
    )
