"""Timer trigger blueprint — scheduled entry point for republishing the music page."""

import logging

import azure.functions as func

from music_page.config import load_config
from music_page.orchestration.processor import publish_from_config
from music_page.page.publisher import blob_publisher_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()


@bp.timer_trigger(
    schedule="0 0 * * * *",
    arg_name="timer",
    run_on_startup=False,
)
def timer_trigger(timer: func.TimerRequest) -> None:
    """Scheduled trigger that republishes the music page.

    Runs hourly. Lists the Dropbox folder, resolves share links and uploads
    the rendered page to blob storage.
    """
    logger.info("Timer trigger fired")

    try:
        if timer.past_due:
            logger.warning("Timer trigger is past due")

        config = load_config()
        publisher = blob_publisher_from_config(config)
        result = publish_from_config(config, publisher)
        for name in result.skipped:
            logger.warning("Skipped track without link: %s", name)
        logger.info(
            "Music page published to %s — %d track(s)", result.location, result.track_count
        )

    except Exception:
        logger.exception("Timer trigger failed")
        raise
