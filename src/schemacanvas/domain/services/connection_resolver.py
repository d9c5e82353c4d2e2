"""Connection resolver: relationship rules and reference lookups.

The resolver is a read-only view over a list of collections and connections.
It is built on demand by the schema model and by the code generators, so the
relationship logic lives in exactly one place.
"""

from schemacanvas.domain.entities import (
    Collection,
    Field,
    FieldConnection,
    FieldType,
)


class ConnectionResolver:
    """Answers connection and reference questions about a schema.

    Example:
        resolver = ConnectionResolver(collections, connections)
        if resolver.can_connect(post, post.get_field("author"), user, user.fields[0]):
            ...
        target = resolver.resolve_reference(post, post.get_field("author"))
    """

    def __init__(
        self, collections: list[Collection], connections: list[FieldConnection]
    ) -> None:
        """Initialize the resolver.

        Args:
            collections: All collections of the schema.
            connections: All connections of the schema, in insertion order.
        """
        self.collections = collections
        self.connections = connections
        self._by_id = {c.id: c for c in collections}

    def get_collection(self, collection_id: str) -> Collection | None:
        return self._by_id.get(collection_id)

    def connections_for_field(
        self, collection: Collection, field_name: str
    ) -> list[FieldConnection]:
        """Connections touching (collection, field), in insertion order."""
        return [c for c in self.connections if c.touches(collection.id, field_name)]

    def connections_for_collection(self, collection: Collection) -> list[FieldConnection]:
        """Connections with the collection at either end, in insertion order."""
        return [c for c in self.connections if c.involves_collection(collection.id)]

    def can_connect(
        self,
        source_collection: Collection,
        source_field: Field,
        target_collection: Collection,
        target_field: Field,
    ) -> bool:
        """Decide whether a new connection between two fields is allowed.

        Rules:
        - both fields must be objectId fields
        - `_id` may not be linked to `_id`
        - a field may not be linked to itself
        - a field other than `_id` takes part in at most one connection

        Never raises.
        """
        if not (source_field.is_object_id and target_field.is_object_id):
            return False

        if source_field.is_id and target_field.is_id:
            return False

        if source_collection.id == target_collection.id and source_field.name == target_field.name:
            return False

        for collection, field in (
            (source_collection, source_field),
            (target_collection, target_field),
        ):
            if field.is_id:
                continue
            if self.connections_for_field(collection, field.name):
                return False

        return True

    def resolve_reference(self, collection: Collection, field: Field) -> Collection | None:
        """Determine which collection a field refers to in generated code.

        Precedence:
        1. the explicit `ref`, matched by collection id, then by collection name
        2. the single connection touching the field, resolved to the other end
        3. no reference

        Returns:
            The referenced collection, or None.
        """
        if field.ref:
            target = self._by_id.get(field.ref)
            if target is None:
                target = next((c for c in self.collections if c.name == field.ref), None)
            if target is not None:
                return target

        for connection in self.connections_for_field(collection, field.name):
            other = connection.other_endpoint(collection.id, field.name)
            if other is None:
                continue
            target = self._by_id.get(other[0])
            if target is not None:
                return target

        return None

    def incoming_references(self, collection: Collection) -> list[tuple[Collection, Field]]:
        """Every (collection, field) whose reference resolves to `collection`.

        Only scalar objectId fields other than `_id` count; the result follows
        collection order, then field order.
        """
        incoming = []
        for source in self.collections:
            for field in source.fields:
                if field.is_id or field.type != FieldType.OBJECT_ID.value:
                    continue
                target = self.resolve_reference(source, field)
                if target is not None and target.id == collection.id:
                    incoming.append((source, field))
        return incoming


def resolve_reference(
    collection: Collection,
    field: Field,
    all_collections: list[Collection],
    all_connections: list[FieldConnection],
) -> Collection | None:
    """Resolve the collection `field` refers to. See ConnectionResolver.resolve_reference."""
    return ConnectionResolver(all_collections, all_connections).resolve_reference(
        collection, field
    )


def rebuild_connection_index(
    collections: list[Collection], connections: list[FieldConnection]
) -> None:
    """Recompute every field's `connections` list from the connection list."""
    for collection in collections:
        for field in collection.fields:
            field.connections = [
                c.id for c in connections if c.touches(collection.id, field.name)
            ]
