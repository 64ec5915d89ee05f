"""
Tests for the models module.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from hn_aggregator.models import ChangeReport, CommentNode, Item, UserProfile, relative_age

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestItem:
    """Tests for the Item model."""

    def test_from_api_payload(self, sample_item):
        """An API payload maps onto the model and unknown fields are ignored."""
        item = Item.model_validate({**sample_item, "unknown_field": "x"})
        assert item.id == 12345
        assert item.is_story
        assert item.kids == (1001, 1002, 1003)
        assert item.score == 42
        assert item.is_live

    def test_null_collections_and_counts(self):
        """Null kids, parts, score and descendants read as empty or zero."""
        item = Item.model_validate(
            {"id": 1, "type": "story", "kids": None, "parts": None, "score": None, "descendants": None}
        )
        assert item.kids == ()
        assert item.parts == ()
        assert item.score == 0
        assert item.descendants == 0

    def test_rejects_unknown_type(self):
        """An item type outside the API's vocabulary is malformed."""
        with pytest.raises(ValidationError):
            Item.model_validate({"id": 1, "type": "banner"})

    def test_is_frozen(self, sample_item):
        """Items cannot be modified after construction."""
        item = Item.model_validate(sample_item)
        with pytest.raises(ValidationError):
            item.score = 100

    def test_display_url(self):
        """Link posts use their URL, text posts their item page."""
        assert Item(id=1, url="https://example.com/a").display_url == "https://example.com/a"
        assert Item(id=7).display_url == "https://news.ycombinator.com/item?id=7"

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://www.example.com/path", "example.com"),
            ("http://blog.example.org", "blog.example.org"),
            ("https://EXAMPLE.com", "example.com"),
            (None, ""),
            ("not a url", ""),
        ],
    )
    def test_domain(self, url, expected):
        """The bare host is extracted with any www. prefix removed."""
        assert Item(id=1, url=url).domain == expected

    def test_type_predicates(self):
        """Each type predicate matches only its own type."""
        assert Item(id=1, type="comment").is_comment
        assert Item(id=1, type="job").is_job
        assert Item(id=1, type="poll").is_poll
        assert Item(id=1, type="pollopt").is_poll_option
        assert not Item(id=1, type="job").is_story

    def test_is_live(self):
        """Deleted and dead items are not live."""
        assert not Item(id=1, deleted=True).is_live
        assert not Item(id=1, dead=True).is_live

    def test_created_at(self):
        assert Item(id=1, time=0).created_at is None
        assert Item(id=1, time=1704067200).created_at == NOW


class TestRelativeAge:
    """Tests for relative_age."""

    @pytest.mark.parametrize(
        "delta, expected",
        [
            (timedelta(seconds=30), "just now"),
            (timedelta(minutes=5), "5 minutes ago"),
            (timedelta(hours=3), "3 hours ago"),
            (timedelta(days=2), "2 days ago"),
            (timedelta(days=65), "2 months ago"),
            (timedelta(days=800), "2 years ago"),
        ],
    )
    def test_buckets(self, delta, expected):
        timestamp = int((NOW - delta).timestamp())
        assert relative_age(timestamp, now=NOW) == expected

    def test_missing_timestamp(self):
        assert relative_age(None) == ""
        assert relative_age(0) == ""


class TestUserProfile:
    """Tests for the UserProfile model."""

    def test_from_api_payload(self):
        user = UserProfile.model_validate(
            {"id": "pg", "created": 1160418092, "karma": 155111, "about": "Bug fixer.", "submitted": [1, 2]}
        )
        assert user.id == "pg"
        assert user.karma == 155111
        assert user.submitted == (1, 2)
        assert user.member_since == "October 2006"

    def test_minimal_payload(self):
        user = UserProfile.model_validate({"id": "newbie", "submitted": None})
        assert user.submitted == ()
        assert user.member_since == ""


class TestCommentNode:
    """Tests for the CommentNode model."""

    def test_parent_id(self):
        node = CommentNode(item=Item(id=2, type="comment", parent=1), depth=0)
        assert node.parent_id == 1

    def test_missing_parent_is_zero(self):
        """A comment without a parent nests under 0."""
        node = CommentNode(item=Item(id=2, type="comment"), depth=1)
        assert node.parent_id == 0


class TestChangeReport:
    """Tests for the ChangeReport model."""

    def test_json_shape(self):
        report = ChangeReport(list_changed=True, scores={1: 10, 2: 20})
        assert report.model_dump(by_alias=True) == {"listChanged": True, "scores": {1: 10, 2: 20}}
        assert report.model_dump_json(by_alias=True) == '{"listChanged":true,"scores":{"1":10,"2":20}}'
