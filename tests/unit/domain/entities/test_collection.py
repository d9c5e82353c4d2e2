"""Unit tests for Collection, Field and FieldConnection entities."""

import pytest

from schemacanvas.domain.entities import (
    Collection,
    Field,
    FieldConnection,
    organize_fields,
    timestamp_tail_start,
)


def test_collection_requires_id():
    """Test that a collection needs an id."""
    with pytest.raises(ValueError, match="Collection ID is required"):
        Collection(id="", name="User")


def test_organize_fields_moves_timestamps_to_tail():
    """Test timestamps go last, createdAt first, other fields keep their order."""
    fields = [
        Field.primary_key(),
        Field.timestamp("updatedAt"),
        Field(name="b", type="string"),
        Field.timestamp("createdAt"),
        Field(name="a", type="string"),
    ]

    organized = organize_fields(fields)

    assert [f.name for f in organized] == ["_id", "b", "a", "createdAt", "updatedAt"]
    assert timestamp_tail_start(organized) == 3


def test_timestamp_tail_start_without_timestamps():
    """Test the tail is empty when there are no timestamps."""
    assert timestamp_tail_start([Field.primary_key()]) == 1


def test_copy_is_deep():
    """Test collection copies share no field objects."""
    collection = Collection(id="c1", name="User", fields=[Field.primary_key()])

    duplicate = collection.copy()
    duplicate.fields[0].connections.append("k1")

    assert collection.fields[0].connections == []


def test_field_lookup():
    """Test field access by name."""
    collection = Collection(
        id="c1", name="User", fields=[Field.primary_key(), Field(name="email", type="string")]
    )

    assert collection.field_index("email") == 1
    assert collection.get_field("missing") is None
    assert collection.has_field("_id")
    assert collection.field_names == ["_id", "email"]


def test_connection_endpoints():
    """Test endpoint helpers on a connection."""
    connection = FieldConnection(
        id="k1",
        source_collection_id="p1",
        source_field_name="author",
        target_collection_id="u1",
        target_field_name="_id",
    )

    assert connection.touches("p1", "author")
    assert connection.touches("u1", "_id")
    assert not connection.touches("p1", "_id")
    assert connection.other_endpoint("p1", "author") == ("u1", "_id")
    assert connection.other_endpoint("u1", "_id") == ("p1", "author")
    assert connection.other_endpoint("x", "y") is None
    assert connection.involves_collection("u1")
