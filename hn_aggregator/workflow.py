"""
Workflow module for views derived from the Hacker News lists: the rising
view and the refresh check that tells a client whether its list is stale.
"""

import logging
from typing import Optional, Sequence

from hn_aggregator.cache import CacheKey
from hn_aggregator.hn import HackerNewsAPI, HNContext
from hn_aggregator.models import ChangeReport, Item

logger = logging.getLogger(__name__)

RISING_VIEW = "rising"


def is_rising(item: Item, min_comments: int, min_points: int) -> bool:
    """
    Decide whether an item passes the rising thresholds.

    Thresholds are OR-combined and a zero threshold disables its criterion;
    with both at zero every item passes.
    """
    if min_comments <= 0 and min_points <= 0:
        return True
    if min_comments > 0 and item.descendants >= min_comments:
        return True
    return min_points > 0 and item.score >= min_points


class FeedService:
    """
    Coordinates the ranked lists, the rising view and refresh checks.
    """

    def __init__(
        self,
        context: HNContext,
        rising_candidates: int = 200,
        first_page_size: int = 20,
        score_fetch_cap: int = 30,
    ):
        """
        Initialize the feed service with a context object.

        Args:
            context: The HN context containing all dependencies
            rising_candidates: Number of "new" IDs scanned for the rising view
            first_page_size: Number of leading IDs compared by refresh checks
            score_fetch_cap: Default bound on scores resolved per refresh check
        """
        self.context = context
        self.hn_api = HackerNewsAPI(context)
        self.rising_candidates = rising_candidates
        self.first_page_size = first_page_size
        self.score_fetch_cap = score_fetch_cap

    def get_rising_ids(
        self,
        min_comments: int = 5,
        min_points: int = 5,
        candidate_window: Optional[int] = None,
    ) -> list[int]:
        """
        Build the rising view from the head of the "new" list.

        Args:
            min_comments: Keep items with at least this many comments (0 disables)
            min_points: Keep items with at least this score (0 disables)
            candidate_window: Number of "new" IDs to scan

        Returns:
            The IDs of live candidates that pass either threshold, in "new" order
        """
        min_comments = max(0, min_comments)
        min_points = max(0, min_points)
        if candidate_window is None:
            candidate_window = self.rising_candidates
        candidate_window = max(0, candidate_window)

        key = CacheKey("ids", RISING_VIEW, (min_comments, min_points, candidate_window))
        cached = self.context.cache.get(key)
        if cached is not None:
            return list(cached)

        candidates = self.hn_api.get_ids("new")[:candidate_window]
        if not candidates:
            return []

        # fetch_items keeps input order, so zipping restores each candidate's position
        items = self.hn_api.fetch_items(candidates)
        rising = [
            item_id
            for item_id, item in zip(candidates, items)
            if item is not None and item.is_live and is_rising(item, min_comments, min_points)
        ]
        logger.debug(
            "Rising view kept %d of %d candidates (min_comments=%d, min_points=%d)",
            len(rising), len(candidates), min_comments, min_points,
        )

        if all(item is None for item in items):
            logger.warning("No rising candidate resolved; not caching the empty view")
            return rising

        self.context.cache.set(key, tuple(rising), self.context.policy.list_ttl)
        return rising

    def get_view_ids(self, view: str, min_comments: int = 5, min_points: int = 5) -> list[int]:
        """
        Retrieve the ID list behind any view, including "rising".

        Args:
            view: A list view name or "rising"
            min_comments: Rising comment threshold
            min_points: Rising score threshold

        Returns:
            The view's IDs in display order
        """
        if view == RISING_VIEW:
            return self.get_rising_ids(min_comments, min_points)
        return self.hn_api.get_ids(view)

    def get_scores(self, item_ids: Sequence[int]) -> dict[int, int]:
        """Resolve the current score of each ID that still resolves."""
        return {
            item.id: item.score
            for item in self.hn_api.fetch_items(list(item_ids))
            if item is not None
        }

    def check_for_changes(
        self,
        view: str,
        client_ids: Sequence[int],
        score_ids_cap: Optional[int] = None,
        min_comments: int = 5,
        min_points: int = 5,
    ) -> ChangeReport:
        """
        Compare a client's displayed IDs against the view's current first page.

        The change check and the score lookup run independently; when either
        raises, the other is still attempted before the error is re-raised.

        Args:
            view: The view the client is showing
            client_ids: The IDs the client is displaying, in display order
            score_ids_cap: Bound on the number of scores resolved
            min_comments: Rising comment threshold
            min_points: Rising score threshold

        Returns:
            Whether the first page differs and the current score of shown items
        """
        if score_ids_cap is None:
            score_ids_cap = self.score_fetch_cap
        score_ids_cap = max(0, score_ids_cap)
        client_ids = list(client_ids)
        errors: list[Exception] = []

        first_page: list[int] = []
        list_changed = False
        try:
            first_page = self.get_view_ids(view, min_comments, min_points)[:self.first_page_size]
            list_changed = first_page != client_ids
        except Exception as exc:
            logger.exception("Change check for %s failed", view)
            errors.append(exc)

        scores: dict[int, int] = {}
        try:
            score_ids = client_ids or first_page
            scores = self.get_scores(score_ids[:score_ids_cap])
        except Exception as exc:
            logger.exception("Score lookup for %s failed", view)
            errors.append(exc)

        if errors:
            raise errors[0]
        return ChangeReport(list_changed=list_changed, scores=scores)
