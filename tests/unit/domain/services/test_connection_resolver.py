"""Unit tests for ConnectionResolver."""

from schemacanvas.domain.entities import Collection, Field, FieldConnection
from schemacanvas.domain.services import (
    ConnectionResolver,
    rebuild_connection_index,
    resolve_reference,
)


def _collection(collection_id: str, name: str, *fields: Field) -> Collection:
    return Collection(id=collection_id, name=name, fields=[Field.primary_key(), *fields])


def _user_and_post() -> tuple[Collection, Collection]:
    user = _collection("u1", "User")
    post = _collection(
        "p1",
        "Post",
        Field(name="author", type="objectId"),
        Field(name="editor", type="objectId"),
        Field(name="title", type="string"),
    )
    return user, post


def _author_connection() -> FieldConnection:
    return FieldConnection(
        id="c1",
        source_collection_id="p1",
        source_field_name="author",
        target_collection_id="u1",
        target_field_name="_id",
    )


class TestCanConnect:
    """Tests for the relationship rules."""

    def test_object_id_to_id_allowed(self):
        """Test a reference field can point at another collection's _id."""
        user, post = _user_and_post()
        resolver = ConnectionResolver([user, post], [])

        assert resolver.can_connect(post, post.get_field("author"), user, user.fields[0]) is True

    def test_non_object_id_rejected(self):
        """Test string fields cannot be connected."""
        user, post = _user_and_post()
        resolver = ConnectionResolver([user, post], [])

        assert resolver.can_connect(post, post.get_field("title"), user, user.fields[0]) is False

    def test_id_to_id_rejected(self):
        """Test _id cannot be linked to _id."""
        user, post = _user_and_post()
        resolver = ConnectionResolver([user, post], [])

        assert resolver.can_connect(post, post.fields[0], user, user.fields[0]) is False

    def test_field_to_itself_rejected(self):
        """Test a field cannot be linked to itself."""
        _, post = _user_and_post()
        resolver = ConnectionResolver([post], [])
        author = post.get_field("author")

        assert resolver.can_connect(post, author, post, author) is False

    def test_connected_field_rejected(self):
        """Test a non-_id field already in a connection is refused."""
        user, post = _user_and_post()
        resolver = ConnectionResolver([user, post], [_author_connection()])

        assert resolver.can_connect(post, post.get_field("author"), user, user.fields[0]) is False

    def test_connected_id_still_accepted(self):
        """Test _id may take part in several connections."""
        user, post = _user_and_post()
        resolver = ConnectionResolver([user, post], [_author_connection()])

        assert resolver.can_connect(post, post.get_field("editor"), user, user.fields[0]) is True


class TestResolveReference:
    """Tests for reference target resolution."""

    def test_explicit_ref_by_id_wins(self):
        """Test an explicit ref beats a connection."""
        user, post = _user_and_post()
        account = _collection("a1", "Account")
        post.get_field("author").ref = "a1"
        resolver = ConnectionResolver([user, post, account], [_author_connection()])

        assert resolver.resolve_reference(post, post.get_field("author")) is account

    def test_explicit_ref_by_name(self):
        """Test a ref holding a collection name still resolves."""
        user, post = _user_and_post()
        post.get_field("editor").ref = "User"

        target = resolve_reference(post, post.get_field("editor"), [user, post], [])

        assert target is user

    def test_connection_used_without_ref(self):
        """Test the connection's other end is used when there is no ref."""
        user, post = _user_and_post()
        resolver = ConnectionResolver([user, post], [_author_connection()])

        assert resolver.resolve_reference(post, post.get_field("author")) is user

    def test_unknown_ref_falls_back_to_connection(self):
        """Test a dangling ref does not hide a connection."""
        user, post = _user_and_post()
        post.get_field("author").ref = "gone"
        resolver = ConnectionResolver([user, post], [_author_connection()])

        assert resolver.resolve_reference(post, post.get_field("author")) is user

    def test_no_reference(self):
        """Test unresolvable fields yield None."""
        user, post = _user_and_post()
        resolver = ConnectionResolver([user, post], [])

        assert resolver.resolve_reference(post, post.get_field("editor")) is None

    def test_incoming_references(self):
        """Test the referenced collection sees every referencing field."""
        user, post = _user_and_post()
        post.get_field("editor").ref = "u1"
        resolver = ConnectionResolver([user, post], [_author_connection()])

        incoming = resolver.incoming_references(user)

        assert [(c.name, f.name) for c, f in incoming] == [("Post", "author"), ("Post", "editor")]


def test_rebuild_connection_index():
    """Test every field's index is recomputed from the connection list."""
    user, post = _user_and_post()
    post.get_field("title").connections = ["stale"]

    rebuild_connection_index([user, post], [_author_connection()])

    assert user.fields[0].connections == ["c1"]
    assert post.get_field("author").connections == ["c1"]
    assert post.get_field("title").connections == []


def test_connections_for_collection():
    """Test collection-level lookup includes both ends."""
    user, post = _user_and_post()
    resolver = ConnectionResolver([user, post], [_author_connection()])

    assert [c.id for c in resolver.connections_for_collection(user)] == ["c1"]
    assert [c.id for c in resolver.connections_for_collection(post)] == ["c1"]
