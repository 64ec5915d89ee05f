"""
Pytest configuration and fixtures for HN Aggregator tests.
"""

import threading
import time
from typing import Any, Dict, List, Optional

import pytest

from hn_aggregator.cache import CachePolicy, CacheStore
from hn_aggregator.hn import HNContext
from hn_aggregator.workflow import FeedService

BASE_URL = "https://hacker-news.firebaseio.com/v0"


def item_url(item_id: int) -> str:
    return f"{BASE_URL}/item/{item_id}.json"


def list_url(endpoint: str) -> str:
    return f"{BASE_URL}/{endpoint}.json"


class MockApiClient:
    """Mock API client for testing."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None, delays: Optional[Dict[str, float]] = None):
        """Initialize with predefined responses and optional per-URL delays in seconds."""
        self.responses = responses or {}
        self.delays = delays or {}
        self.get_calls: List[str] = []
        self.completed: List[str] = []
        self._lock = threading.Lock()

    def get(self, url: str) -> Any:
        """
        Return a predefined response for the URL or a default empty dict.
        A response that is an exception instance is raised instead.
        """
        with self._lock:
            self.get_calls.append(url)
        if url in self.delays:
            time.sleep(self.delays[url])
        with self._lock:
            self.completed.append(url)
        response = self.responses.get(url, {})
        if isinstance(response, Exception):
            raise response
        return response

    def calls_to(self, url: str) -> int:
        return self.get_calls.count(url)


class FakeClock:
    """Controllable monotonic clock for the cache store."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def mock_api_client() -> MockApiClient:
    """Return a mock API client."""
    return MockApiClient()


@pytest.fixture
def clock() -> FakeClock:
    """Return a fake clock."""
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> CacheStore:
    """Return a cache store driven by the fake clock."""
    return CacheStore(timer=clock)


@pytest.fixture
def mock_context(mock_api_client: MockApiClient, cache: CacheStore) -> HNContext:
    """Return a mock HN context."""
    return HNContext(
        api_client=mock_api_client,
        cache=cache,
        policy=CachePolicy(),
        base_url=BASE_URL,
        max_workers=4,
    )


@pytest.fixture
def feed(mock_context: HNContext) -> FeedService:
    """Return a feed service over the mock context."""
    return FeedService(mock_context)


@pytest.fixture
def sample_item() -> Dict[str, Any]:
    """Return a sample HN item (story)."""
    return {
        "id": 12345,
        "type": "story",
        "title": "Test Story",
        "by": "testuser",
        "time": 1617235200,
        "url": "https://www.example.com/article",
        "score": 42,
        "descendants": 3,
        "kids": [1001, 1002, 1003],
    }


@pytest.fixture
def sample_comments() -> List[Dict[str, Any]]:
    """Return a list of sample comments."""
    return [
        {
            "id": 1001,
            "type": "comment",
            "parent": 12345,
            "by": "user1",
            "time": 1617235300,
            "text": "Comment 1",
        },
        {
            "id": 1002,
            "type": "comment",
            "parent": 12345,
            "by": "user2",
            "time": 1617235400,
            "text": "Comment 2",
        },
        {
            "id": 1003,
            "type": "comment",
            "parent": 12345,
            "by": "user3",
            "time": 1617235500,
            "text": "Comment 3",
        },
    ]


def story(item_id: int, score: int = 1, descendants: int = 0, **fields: Any) -> Dict[str, Any]:
    """Build a story payload."""
    payload = {
        "id": item_id,
        "type": "story",
        "by": "author",
        "time": 1617235200,
        "title": f"Story {item_id}",
        "score": score,
        "descendants": descendants,
    }
    payload.update(fields)
    return payload


def comment(item_id: int, parent: Optional[int], kids: Optional[List[int]] = None, **fields: Any) -> Dict[str, Any]:
    """Build a comment payload."""
    payload = {
        "id": item_id,
        "type": "comment",
        "by": "commenter",
        "time": 1617235300,
        "text": f"Comment {item_id}",
        "parent": parent,
    }
    if kids is not None:
        payload["kids"] = kids
    payload.update(fields)
    return payload
