"""
Refresh-check endpoint used by the background polling script.

The client passes the view it is showing and the IDs currently on screen;
the response says whether the first page changed and carries fresh scores.
"""

import json
import logging
from typing import Mapping, NamedTuple, Optional

from hn_aggregator.hn import ACTIVE_VIEW, VIEW_ENDPOINTS
from hn_aggregator.workflow import RISING_VIEW, FeedService

logger = logging.getLogger(__name__)

DEFAULT_VIEW = "top"
DEFAULT_THRESHOLD = 5

KNOWN_VIEWS = frozenset(VIEW_ENDPOINTS) | {ACTIVE_VIEW, RISING_VIEW}


class RefreshResponse(NamedTuple):
    status: int
    body: str
    content_type: str = "application/json"


def parse_ids(raw: Optional[str]) -> list[int]:
    """
    Parse a comma-separated ID list.

    A list with any unparseable entry is treated as an empty window.
    """
    if not raw or not raw.strip():
        return []
    try:
        return [int(part.strip()) for part in raw.split(",") if part.strip()]
    except ValueError:
        logger.debug("Ignoring malformed id list %r", raw)
        return []


def _parse_threshold(raw: Optional[str]) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return DEFAULT_THRESHOLD


def handle_refresh(feed: FeedService, params: Mapping[str, str]) -> RefreshResponse:
    """
    Answer a refresh check.

    Args:
        feed: Feed service backing the check
        params: Query parameters: tab, ids, minc and minp

    Returns:
        200 with {"listChanged": ..., "scores": {...}} on success, or 500 with
        {"error": ...} when the check raised unexpectedly
    """
    view = params.get("tab") or DEFAULT_VIEW
    if view not in KNOWN_VIEWS:
        view = DEFAULT_VIEW
    client_ids = parse_ids(params.get("ids"))
    min_comments = _parse_threshold(params.get("minc"))
    min_points = _parse_threshold(params.get("minp"))

    try:
        report = feed.check_for_changes(
            view,
            client_ids,
            min_comments=min_comments,
            min_points=min_points,
        )
    except Exception as exc:
        logger.exception("Refresh check for %s failed", view)
        return RefreshResponse(500, json.dumps({"error": str(exc)}))

    return RefreshResponse(200, report.model_dump_json(by_alias=True))
