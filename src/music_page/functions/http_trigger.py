"""HTTP trigger blueprint — health check and manual publish endpoints."""

import json
import logging

import azure.functions as func

from music_page import __version__
from music_page.config import load_config
from music_page.orchestration.processor import publish_from_config
from music_page.page.publisher import blob_publisher_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()


@bp.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint returning service status and version."""
    logger.info("[health_check] health check requested")

    try:
        body = json.dumps({"status": "ok", "version": __version__})
        return func.HttpResponse(body, status_code=200, mimetype="application/json")

    except Exception:
        logger.error("[health_check] health check failed", exc_info=True)
        error_body = json.dumps({"status": "error", "message": "Internal server error"})
        return func.HttpResponse(error_body, status_code=500, mimetype="application/json")


@bp.route(route="publish", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def manual_publish(req: func.HttpRequest) -> func.HttpResponse:
    """Manual publish endpoint — runs the pipeline on demand.

    Requires a function key. Executes the same logic as the timer trigger
    but returns the outcome in the HTTP response.
    """
    logger.info("[manual_publish] manual publish requested")

    try:
        config = load_config()
        publisher = blob_publisher_from_config(config)
        result = publish_from_config(config, publisher)
        logger.info(
            "[manual_publish] publish complete; location:%s;track_count:%d;skipped_count:%d",
            result.location,
            result.track_count,
            len(result.skipped),
        )

        body = json.dumps(
            {
                "status": "ok",
                "tracks_published": result.track_count,
                "skipped": result.skipped,
                "location": result.location,
            }
        )
        return func.HttpResponse(body, status_code=200, mimetype="application/json")

    except Exception:
        logger.error("[manual_publish] manual publish failed", exc_info=True)
        error_body = json.dumps({"status": "error", "message": "Internal server error"})
        return func.HttpResponse(error_body, status_code=500, mimetype="application/json")
