"""Command-line worker: publish the music page to a local directory."""

import logging
import os
import sys

from music_page.config import load_config
from music_page.orchestration.processor import publish_from_config
from music_page.page.publisher import LocalPublisher

logger = logging.getLogger("music_page")


def main() -> int:
    """Run one publish cycle; return the process exit code (0 ok, 1 failed)."""
    level_name = os.environ.get("MUSIC_PAGE_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    if logging.getLevelName(level) != level_name:
        logger.warning("[main] unknown log level, using INFO; level:%s", level_name)

    try:
        config = load_config()
        logger.info("[main] listing folder; folder:%s", config.folder_path)
        result = publish_from_config(
            config,
            LocalPublisher(config.output_dir),
            on_skip=lambda message: logger.warning("[main] %s", message),
        )
        logger.info(
            "[main] wrote page; path:%s;track_count:%d", result.location, result.track_count
        )
        return 0

    except Exception:
        logger.exception("[main] publish failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
