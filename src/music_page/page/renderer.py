"""Static HTML rendering of the track listing."""

from __future__ import annotations

import html
import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from music_page.page.models import TrackRecord

logger = logging.getLogger(__name__)

_KB = 1024
_MB = 1024 * _KB
_GB = 1024 * _MB

_STYLE = """
.music-list { padding:0; list-style:none; }
.music-list li { padding:10px 0; border-bottom:1px solid #ddd; }
.meta { color:#666; font-size:0.95em; }
"""


def format_size(size: int) -> str:
    """Human-readable size with up to two decimals (1536 -> "1.5 KB")."""
    for unit_size, unit in ((_GB, "GB"), (_MB, "MB"), (_KB, "KB")):
        if size >= unit_size:
            return f"{_trim(size / unit_size)} {unit}"
    return f"{size} B"


def _trim(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def resolve_timezone(name: str) -> tzinfo:
    """Look up an IANA zone, falling back to UTC when it is unknown."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("[resolve_timezone] unknown timezone, using UTC; timezone:%s", name)
        return UTC


def format_local_time(moment: datetime, zone: tzinfo) -> str:
    """Format an instant as "YYYY-MM-DD HH:MM <abbr>" in the given zone."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    local = moment.astimezone(zone)
    return f"{local:%Y-%m-%d %H:%M} {local.tzname()}"


def render_page(
    records: Iterable[TrackRecord],
    title: str,
    intro_html: str | None = None,
    *,
    home_url: str = "",
    stylesheets: Sequence[str] = (),
    timezone_name: str = "Europe/London",
    generated_at: datetime | None = None,
) -> str:
    """Render the track listing as a standalone HTML document.

    Records are rendered in the order given; callers sort them first.

    Args:
        records: Tracks to list.
        title: Page title, escaped.
        intro_html: Optional trusted HTML blurb shown under the title.
        home_url: Optional back link shown above the title.
        stylesheets: Stylesheet URLs linked in the document head, in order.
        timezone_name: IANA zone for per-track timestamps.
        generated_at: Footer timestamp; defaults to now.

    Returns:
        The HTML document as a string.
    """
    zone = resolve_timezone(timezone_name)
    generated_at = generated_at or datetime.now(tz=UTC)
    safe_title = html.escape(title)

    parts: list[str] = [
        '<!doctype html><html lang="en"><head><meta charset="utf-8">',
        '<meta name="viewport" content="width=device-width, initial-scale=1">',
        f"<title>{safe_title}</title>",
    ]
    for href in stylesheets:
        parts.append(f'<link rel="stylesheet" href="{html.escape(href)}">')
    parts.append(f"<style>{_STYLE}</style>")
    parts.append('</head><body class="albums-page">')
    parts.append("<header>")
    if home_url:
        parts.append(
            f'<div class="site-nav"><a href="{html.escape(home_url)}">&larr; Home</a></div>'
        )
    parts.append(f"<h1>{safe_title}</h1>")
    if intro_html and intro_html.strip():
        parts.append(f'<div class="blurb">{intro_html}</div>')
    parts.append("</header><main>")

    parts.append('<ul class="music-list">')
    for record in records:
        updated = format_local_time(record.modified, zone)
        parts.append("<li>")
        parts.append(
            f'<div><a href="{html.escape(record.url)}" target="_blank">'
            f"{html.escape(record.name)}</a></div>"
        )
        parts.append(f'<div class="meta">{format_size(record.size)} — updated {updated}</div>')
        parts.append("</li>")
    parts.append("</ul>")

    footer = f"{generated_at.astimezone(UTC):%Y-%m-%d %H:%M} UTC"
    parts.append(f'</main><div class="footer">Last updated: {footer}</div>')
    parts.append("</body></html>")
    return "\n".join(parts)
