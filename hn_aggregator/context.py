from typing import Any, Dict, Optional

from hn_aggregator.cache import CachePolicy, CacheStore
from hn_aggregator.config import load_config
from hn_aggregator.hn import DEFAULT_BASE_URL, HNContext, RequestsClient
from hn_aggregator.workflow import FeedService


class HNContextProvider:
    """
    Service locator/provider for Hacker News contexts.
    Follows the patterns in "Architecture Patterns with Python".
    """

    @staticmethod
    def get_context_from_config(config: Dict[str, Any]) -> HNContext:
        """
        Create a context from an already loaded configuration dictionary.

        Args:
            config: Configuration as returned by load_config

        Returns:
            A configured HNContext
        """
        api = config["api"]
        cache = config["cache"]
        feed = config["feed"]

        policy = CachePolicy(
            maxitem_ttl=cache["maxitem_ttl"],
            list_ttl=cache["list_ttl"],
            item_ttl=cache["item_ttl"],
            user_ttl=cache["user_ttl"],
        )

        return HNContext(
            api_client=RequestsClient(timeout=api["timeout"], user_agent=api["user_agent"]),
            cache=CacheStore(maxsize=cache.get("maxsize")),
            policy=policy,
            base_url=api["base_url"],
            max_workers=feed["max_workers"],
            breadth_cap=feed["breadth_cap"],
        )

    @staticmethod
    def get_default_context(config_path: str = "") -> HNContext:
        """
        Factory method to create a default context with standard configuration.

        Args:
            config_path: Path to the configuration file. If not provided,
                         the function will search for a config file in standard locations.

        Returns:
            A configured HNContext
        """
        return HNContextProvider.get_context_from_config(load_config(config_path))

    @staticmethod
    def get_context_from_params(
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        maxsize: Optional[int] = None,
        policy: Optional[CachePolicy] = None,
        max_workers: int = 16,
        breadth_cap: int = 10,
    ) -> HNContext:
        """
        Alternative factory method that creates a context using parameter values directly.

        Args:
            base_url: Base URL for the Hacker News API
            timeout: Seconds to wait on each outbound request
            maxsize: Optional bound on cache entries (unbounded when None)
            policy: Cache time-to-live policy
            max_workers: Upper bound on concurrent fetches within one batch
            breadth_cap: Number of child comments expanded per comment

        Returns:
            A configured HNContext
        """
        return HNContext(
            api_client=RequestsClient(timeout=timeout),
            cache=CacheStore(maxsize=maxsize),
            policy=policy,
            base_url=base_url,
            max_workers=max_workers,
            breadth_cap=breadth_cap,
        )

    @staticmethod
    def get_feed_service(context: HNContext, config: Optional[Dict[str, Any]] = None) -> FeedService:
        """
        Create the feed service for a context.

        Args:
            context: The HN context to build on
            config: Configuration whose "feed" section sizes the service

        Returns:
            A configured FeedService
        """
        feed = (config or load_config())["feed"]
        return FeedService(
            context,
            rising_candidates=feed["rising_candidates"],
            first_page_size=feed["page_size"],
            score_fetch_cap=feed["score_fetch_cap"],
        )
