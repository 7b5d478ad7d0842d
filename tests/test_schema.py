"""Tests for the declarative schema definition."""

import pytest
from pydantic import ValidationError

from event_db.schema import (
    COLLECTIONS,
    INDEXES,
    SCHEMA_STEPS,
    IndexSpec,
    describe_index_info,
    users_email_index,
)


def test_persisted_layout() -> None:
    """The three indexes match the layout clients rely on."""
    layout = {(s.collection, s.name): (s.key_document(), s.unique) for s in INDEXES}
    assert layout == {
        ("users", "users_email_unique"): ([("email", 1)], True),
        ("events", "events_starts_at"): ([("starts_at", 1)], False),
        ("events", "events_reg_ids"): ([("registration_ids", 1)], False),
    }
    assert COLLECTIONS == ("users", "events")


def test_collections_come_before_their_indexes() -> None:
    """Every index step follows the step that ensures its collection."""
    seen = set()
    for step in SCHEMA_STEPS:
        if isinstance(step, IndexSpec):
            assert step.collection in seen
        else:
            seen.add(step)
    assert len(SCHEMA_STEPS) == 5


def test_rejects_invalid_direction() -> None:
    """Directions other than 1 and -1 are refused."""
    with pytest.raises(ValidationError):
        IndexSpec(collection="users", keys=[("email", 2)], name="bad")


def test_rejects_empty_keys_and_names() -> None:
    """An index needs at least one key and a name."""
    with pytest.raises(ValidationError):
        IndexSpec(collection="users", keys=[], name="empty")
    with pytest.raises(ValidationError):
        IndexSpec(collection="users", keys=[("email", 1)], name="")


def test_matches_normalizes_server_values() -> None:
    """Directions reported as floats still match; missing unique means false."""
    assert users_email_index.matches({"key": [("email", 1.0)], "unique": True, "v": 2})
    assert not users_email_index.matches({"key": [("email", 1)], "v": 2})
    assert not users_email_index.matches({"key": [("email", -1)], "unique": True})


def test_key_order_is_significant() -> None:
    """A compound key in another order is a different index."""
    spec = IndexSpec(collection="events", keys=[("a", 1), ("b", 1)], name="a_b")
    assert spec.same_keys({"key": [("a", 1), ("b", 1)]})
    assert not spec.same_keys({"key": [("b", 1), ("a", 1)]})


def test_describe_index_info_keeps_special_index_types() -> None:
    """Text and hashed keys are reported as-is."""
    assert describe_index_info({"key": [("title", "text")]}) == {
        "key": {"title": "text"},
        "unique": False,
    }


def test_describe_index_info_reports_definition_options() -> None:
    """Options that narrow an index show up; unset or false ones do not."""
    described = describe_index_info(
        {
            "key": [("email", 1)],
            "unique": True,
            "sparse": True,
            "partialFilterExpression": {"verified": True},
            "expireAfterSeconds": 0,
            "v": 2,
        }
    )
    assert described == {
        "key": {"email": 1},
        "unique": True,
        "sparse": True,
        "partialFilterExpression": {"verified": True},
        "expireAfterSeconds": 0,
    }
    assert describe_index_info({"key": [("email", 1)], "sparse": False}) == {
        "key": {"email": 1},
        "unique": False,
    }


def test_matches_rejects_extra_definition_options() -> None:
    """A collated or TTL email index is not the desired definition."""
    base = {"key": [("email", 1)], "unique": True}
    assert not users_email_index.matches({**base, "collation": {"locale": "en", "strength": 2}})
    assert not users_email_index.matches({**base, "expireAfterSeconds": 3600})
