#!/usr/bin/env python3
"""
Command-line interface for HN Aggregator.
"""

import logging
from typing import Any, Dict, Optional

import fire  # type: ignore

from hn_aggregator.config import load_config
from hn_aggregator.context import HNContextProvider
from hn_aggregator.hn import HNContext, page_count
from hn_aggregator.models import Item
from hn_aggregator.refresh import handle_refresh
from hn_aggregator.workflow import FeedService


def _setup(config_path: str) -> tuple[Dict[str, Any], HNContext, FeedService]:
    config = load_config(config_path)
    logging.basicConfig(
        level=config["logging"]["level"],
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )
    context = HNContextProvider.get_context_from_config(config)
    return config, context, HNContextProvider.get_feed_service(context, config)


def _print_item(item: Item, rank: Optional[int] = None) -> None:
    prefix = f"{rank:>3}. " if rank is not None else ""
    title = item.title or (item.text or "")[:60]
    domain = f" ({item.domain})" if item.domain else ""
    print(f"{prefix}{title}{domain}")
    print(f"     {item.score} points by {item.by or '[deleted]'} {item.time_ago} | {item.descendants} comments")


def ids(view: str = "top", config_path: str = "") -> None:
    """
    Print the ID list behind a view.

    Args:
        view: top, new, best, ask, show, jobs, active or rising
        config_path: Path to the TOML configuration file
    """
    config, context, feed = _setup(config_path)
    try:
        settings = config["feed"]
        view_ids = feed.get_view_ids(view, settings["min_comments"], settings["min_points"])
        print(",".join(str(item_id) for item_id in view_ids))
    finally:
        context.close()


def page(view: str = "top", page: int = 1, config_path: str = "") -> None:
    """
    Print one page of a view.

    Args:
        view: top, new, best, ask, show, jobs, active or rising
        page: 1-based page number
        config_path: Path to the TOML configuration file
    """
    config, context, feed = _setup(config_path)
    try:
        settings = config["feed"]
        page_size = settings["page_size"]
        view_ids = feed.get_view_ids(view, settings["min_comments"], settings["min_points"])
        page = max(1, page)
        items = feed.hn_api.get_page(view_ids, page, page_size)

        print(f"{view} - page {page} of {page_count(len(view_ids), page_size)}")
        start_rank = (page - 1) * page_size + 1
        for offset, item in enumerate(items):
            _print_item(item, start_rank + offset)
    finally:
        context.close()


def item(item_id: int, config_path: str = "") -> None:
    """
    Print a single item.

    Args:
        item_id: The item's ID
        config_path: Path to the TOML configuration file
    """
    _, context, feed = _setup(config_path)
    try:
        found = feed.hn_api.get_item(item_id)
        if found is None:
            print(f"Item {item_id} is unavailable")
            return
        _print_item(found)
        print(f"     {found.display_url}")
    finally:
        context.close()


def user(handle: str, config_path: str = "") -> None:
    """
    Print a user profile.

    Args:
        handle: The user's handle
        config_path: Path to the TOML configuration file
    """
    _, context, feed = _setup(config_path)
    try:
        profile = feed.hn_api.get_user(handle)
        if profile is None:
            print(f"User {handle} is unavailable")
            return
        print(f"{profile.id}: {profile.karma:,} karma, member since {profile.member_since}")
        print(f"  {len(profile.submitted)} submissions")
        if profile.about:
            print(f"  {profile.about}")
    finally:
        context.close()


def comments(item_id: int, max_depth: Optional[int] = None, config_path: str = "") -> None:
    """
    Print the comment tree of an item.

    Args:
        item_id: The ID of the story, poll or comment
        max_depth: Deepest level to include (0 = direct replies only)
        config_path: Path to the TOML configuration file
    """
    config, context, feed = _setup(config_path)
    try:
        if max_depth is None:
            max_depth = config["feed"]["max_comment_depth"]
        root = feed.hn_api.get_item(item_id)
        nodes = feed.hn_api.get_comment_tree(root, max_depth)
        print(f"Found {len(nodes)} comments")

        for node in nodes:
            indent = "  " * node.depth
            print(f"{indent}- {node.item.by}: {(node.item.text or '')[:50]}... (reply to {node.parent_id})")
    finally:
        context.close()


def rising(min_comments: int = 5, min_points: int = 5, candidates: Optional[int] = None, config_path: str = "") -> None:
    """
    Print the rising view.

    Args:
        min_comments: Keep stories with at least this many comments (0 disables)
        min_points: Keep stories with at least this score (0 disables)
        candidates: Number of "new" stories to scan
        config_path: Path to the TOML configuration file
    """
    _, context, feed = _setup(config_path)
    try:
        rising_ids = feed.get_rising_ids(min_comments, min_points, candidates)
        for rank, story in enumerate(feed.hn_api.get_page(rising_ids, 1, len(rising_ids) or 1), start=1):
            _print_item(story, rank)
    finally:
        context.close()


def check(view: str = "top", ids: str = "", minc: str = "", minp: str = "", config_path: str = "") -> None:
    """
    Run a refresh check and print the JSON response.

    Args:
        view: The view the client is showing
        ids: Comma-separated IDs the client is displaying
        minc: Rising comment threshold
        minp: Rising score threshold
        config_path: Path to the TOML configuration file
    """
    _, context, feed = _setup(config_path)
    try:
        # fire turns "1,2,3" into a tuple
        raw_ids = ",".join(str(i) for i in ids) if isinstance(ids, (list, tuple)) else str(ids)
        response = handle_refresh(feed, {"tab": view, "ids": raw_ids, "minc": str(minc), "minp": str(minp)})
        print(response.status, response.body)
    finally:
        context.close()


def maxitem(config_path: str = "") -> None:
    """
    Print the current largest item ID.

    Args:
        config_path: Path to the TOML configuration file
    """
    _, context, feed = _setup(config_path)
    try:
        print(feed.hn_api.get_max_item_id())
    finally:
        context.close()


def main() -> None:
    fire.Fire(
        {
            "ids": ids,
            "page": page,
            "item": item,
            "user": user,
            "comments": comments,
            "rising": rising,
            "check": check,
            "maxitem": maxitem,
        }
    )


if __name__ == "__main__":
    main()
