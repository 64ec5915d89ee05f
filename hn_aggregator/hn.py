import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional, Protocol, Sequence
from urllib.parse import quote

import requests
from pydantic import TypeAdapter

from hn_aggregator.cache import CacheKey, CachePolicy, CacheStore
from hn_aggregator.models import ActiveUpdates, CommentNode, Item, UserProfile

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://hacker-news.firebaseio.com/v0"
DEFAULT_USER_AGENT = "hn-aggregator/0.1"

# Ranked story lists and the endpoint each one is read from
VIEW_ENDPOINTS = {
    "top": "topstories.json",
    "new": "newstories.json",
    "best": "beststories.json",
    "ask": "askstories.json",
    "show": "showstories.json",
    "jobs": "jobstories.json",
}
ACTIVE_VIEW = "active"

_ID_LIST = TypeAdapter(list[int])
_MAX_ITEM = TypeAdapter(int)


class ApiClient(Protocol):
    """Protocol defining the interface for an API client."""

    def get(self, url: str) -> Any:
        """Make a GET request to the specified URL and return the decoded JSON."""
        ...


class RequestsClient:
    """
    Implementation of ApiClient using the requests library.

    One instance holds a single session for the lifetime of the process so
    every unit of work reuses its connection pool.
    """

    def __init__(self, timeout: float = 10.0, user_agent: str = DEFAULT_USER_AGENT):
        """
        Initialize the client.

        Args:
            timeout: Seconds to wait on each outbound request
            user_agent: Value of the User-Agent header
        """
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["User-Agent"] = user_agent

    def get(self, url: str) -> Any:
        """Make a GET request to the specified URL."""
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def close(self) -> None:
        self.session.close()


class HNContext:
    """
    Context object for Hacker News API operations.
    Contains all dependencies needed by the API client.
    """

    def __init__(
        self,
        api_client: Optional[ApiClient] = None,
        cache: Optional[CacheStore] = None,
        policy: Optional[CachePolicy] = None,
        base_url: str = DEFAULT_BASE_URL,
        max_workers: int = 16,
        breadth_cap: int = 10,
    ):
        """
        Initialize the Hacker News context.

        Args:
            api_client: Client for making HTTP requests
            cache: Cache store shared by every provider
            policy: Time-to-live for each cached entity class
            base_url: Base URL for the Hacker News API
            max_workers: Upper bound on concurrent fetches within one batch
            breadth_cap: Number of child comments expanded per comment
        """
        self.api_client = api_client or RequestsClient()
        self.cache = cache if cache is not None else CacheStore()
        self.policy = policy or CachePolicy()
        self.base_url = base_url.rstrip("/")
        self.max_workers = max_workers
        self.breadth_cap = breadth_cap

    def close(self) -> None:
        """Release the transport's pooled connections."""
        close = getattr(self.api_client, "close", None)
        if close is not None:
            close()


def page_count(total: int, page_size: int) -> int:
    """Number of pages needed to show ``total`` entries."""
    if total <= 0 or page_size <= 0:
        return 0
    return math.ceil(total / page_size)


class HackerNewsAPI:
    """
    Cache-aside client for the Hacker News API.

    Every upstream failure (transport, HTTP status, malformed payload or a
    null body) is reported as None for entities and as an empty list for ID
    lists; nothing upstream-related is raised to callers.
    """

    def __init__(self, context: Optional[HNContext] = None) -> None:
        """
        Initialize the HackerNews API client.

        Args:
            context: Context object containing dependencies
        """
        self.context = context or HNContext()

    def _fetch(self, path: str) -> Any:
        """GET a path under the base URL, returning None on any failure."""
        url = f"{self.context.base_url}/{path}"
        try:
            return self.context.api_client.get(url)
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Request for %s failed: %s", url, exc)
            return None

    # -- ID lists --------------------------------------------------------

    def get_ids(self, view: str) -> list[int]:
        """
        Retrieve the ranked ID list for a view.

        Args:
            view: One of "top", "new", "best", "ask", "show", "jobs" or "active"

        Returns:
            The IDs in upstream order, or an empty list if they could not be fetched
        """
        if view == ACTIVE_VIEW:
            return self.get_active_ids()
        if view not in VIEW_ENDPOINTS:
            raise ValueError(f"Unknown view={view}, must be one of {sorted(VIEW_ENDPOINTS) + [ACTIVE_VIEW]}")

        key = CacheKey("ids", view)
        cached = self.context.cache.get(key)
        if cached is not None:
            return list(cached)

        payload = self._fetch(VIEW_ENDPOINTS[view])
        try:
            ids = _ID_LIST.validate_python(payload)
        except ValueError:
            logger.warning("Discarding malformed %s list", view)
            return []

        self.context.cache.set(key, tuple(ids), self.context.policy.list_ttl)
        return ids

    def get_active_ids(self) -> list[int]:
        """Retrieve the IDs of recently updated items from the updates feed."""
        key = CacheKey("ids", ACTIVE_VIEW)
        cached = self.context.cache.get(key)
        if cached is not None:
            return list(cached)

        payload = self._fetch("updates.json")
        try:
            updates = ActiveUpdates.model_validate(payload)
        except ValueError:
            logger.warning("Discarding malformed updates feed")
            return []

        self.context.cache.set(key, tuple(updates.items), self.context.policy.list_ttl)
        return list(updates.items)

    def get_max_item_id(self) -> int:
        """Retrieve the current largest item ID, or 0 if it is unavailable."""
        key = CacheKey("maxitem")
        cached = self.context.cache.get(key)
        if cached is not None:
            return cached

        payload = self._fetch("maxitem.json")
        try:
            max_id = _MAX_ITEM.validate_python(payload)
        except ValueError:
            return 0

        self.context.cache.set(key, max_id, self.context.policy.maxitem_ttl)
        return max_id

    # -- Items and users -------------------------------------------------

    def get_item(self, item_id: int) -> Optional[Item]:
        """
        Retrieve an item (story, comment, etc.) from the HackerNews API.

        Args:
            item_id: The ID of the item to retrieve

        Returns:
            The item, or None if it doesn't exist or could not be fetched
        """
        key = CacheKey("item", item_id)
        cached = self.context.cache.get(key)
        if cached is not None:
            return cached

        payload = self._fetch(f"item/{item_id}.json")
        if not payload:
            logger.debug("Item %s is absent", item_id)
            return None
        try:
            item = Item.model_validate(payload)
        except ValueError as exc:
            logger.warning("Discarding malformed item %s: %s", item_id, exc)
            return None

        self.context.cache.set(key, item, self.context.policy.item_ttl)
        return item

    def get_user(self, handle: str) -> Optional[UserProfile]:
        """
        Retrieve a user profile by handle.

        Args:
            handle: The user's handle

        Returns:
            The profile, or None if it doesn't exist or could not be fetched
        """
        if not handle:
            return None

        key = CacheKey("user", handle)
        cached = self.context.cache.get(key)
        if cached is not None:
            return cached

        payload = self._fetch(f"user/{quote(handle, safe='')}.json")
        if not payload:
            logger.debug("User %s is absent", handle)
            return None
        try:
            user = UserProfile.model_validate(payload)
        except ValueError as exc:
            logger.warning("Discarding malformed user %s: %s", handle, exc)
            return None

        self.context.cache.set(key, user, self.context.policy.user_ttl)
        return user

    def fetch_items(self, item_ids: Sequence[int]) -> list[Optional[Item]]:
        """
        Retrieve a batch of items concurrently.

        Args:
            item_ids: The IDs to resolve

        Returns:
            One entry per input ID, in input order, None where an item is absent
        """
        if not item_ids:
            return []
        workers = min(len(item_ids), self.context.max_workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self.get_item, item_ids))

    # -- Aggregations ----------------------------------------------------

    def get_page(self, ids: Sequence[int], page_number: int = 1, page_size: int = 20) -> list[Item]:
        """
        Retrieve one page of live items from an ID list.

        Args:
            ids: Full ordered list of IDs
            page_number: 1-based page number, clamped to at least 1
            page_size: Number of IDs per page

        Returns:
            The resolved items of the page in list order; absent, deleted and
            dead entries are dropped, so a page may hold fewer than page_size
        """
        page_number = max(1, page_number)
        page_size = max(0, page_size)
        start = (page_number - 1) * page_size
        page_ids = list(ids[start:start + page_size])
        return [item for item in self.fetch_items(page_ids) if item is not None and item.is_live]

    def get_comment_tree(self, root: Optional[Item], max_depth: int = 4) -> list[CommentNode]:
        """
        Collect the comment tree under an item, one level at a time.

        The result is flat: every depth-0 comment in upstream order, then every
        depth-1 comment, and so on. Nesting is recovered from each node's
        parent_id. Each comment's children are capped to the context's
        breadth_cap before they are expanded.

        Args:
            root: The story, poll or comment whose replies to collect
            max_depth: Deepest level to include (0 = direct children only)

        Returns:
            The live comments of the tree, annotated with their depth
        """
        if root is None or not root.kids:
            return []

        nodes: list[CommentNode] = []
        level_ids = list(root.kids)
        depth = 0
        while level_ids:
            comments = [item for item in self.fetch_items(level_ids) if item is not None and item.is_live]
            nodes.extend(CommentNode(item=comment, depth=depth) for comment in comments)
            if depth >= max_depth:
                break

            level_ids = []
            for comment in comments:
                # Slicing copies; cached items keep their full kids
                level_ids.extend(comment.kids[:self.context.breadth_cap])
            depth += 1

        return nodes
