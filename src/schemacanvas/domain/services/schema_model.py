"""Schema model: the single source of truth for a schema document.

All mutation of collections, fields and connections goes through SchemaModel
so that its invariants hold after every operation:

- every collection starts with a required objectId `_id` field, which can
  be neither moved, removed nor changed in name, type or required-ness
- system timestamp fields stay at the tail, createdAt before updatedAt
- a field other than `_id` takes part in at most one connection
- each field's `connections` list equals the connections touching it

Mutations that reference a missing collection, field index or connection
are no-ops. Malformed input raises ValidationError and leaves the model
untouched.
"""

import functools
import threading
import uuid
from typing import Any, Callable

from schemacanvas.core.config import Settings, get_settings
from schemacanvas.core.logging import get_logger
from schemacanvas.domain.entities import (
    CONNECTION_TYPE_REFERENCE,
    CREATED_AT_FIELD_NAME,
    ID_FIELD_NAME,
    UPDATED_AT_FIELD_NAME,
    Collection,
    Field,
    FieldConnection,
    Position,
    organize_fields,
    timestamp_tail_start,
)
from schemacanvas.domain.exceptions import NotFoundError, SchemaValidationError, ValidationError
from schemacanvas.domain.services.connection_resolver import (
    ConnectionResolver,
    rebuild_connection_index,
)
from schemacanvas.domain.services.schema_validator import SchemaValidator

logger = get_logger(__name__)


def _synchronized(method: Callable) -> Callable:
    """Run the wrapped method while holding the model's lock."""

    @functools.wraps(method)
    def wrapper(self: "SchemaModel", *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


def _default_collection_id() -> str:
    return str(uuid.uuid4())


def _default_connection_id() -> str:
    return f"connection-{uuid.uuid4().hex[:16]}"


class SchemaModel:
    """In-memory schema document with invariant-enforcing operations.

    One instance represents one document for the lifetime of a session. Every
    public operation holds a per-instance re-entrant lock, so the model can be
    shared between threads; queries return copies.

    Example:
        model = SchemaModel()
        user = model.add_collection("User")
        post = model.add_collection("Post", include_timestamps=True)
        model.add_field(post.id, Field(name="author", type="objectId"))
        model.add_connection(post.id, "author", user.id, "_id")
        text = model.export_schema()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        collection_id_factory: Callable[[], str] | None = None,
        connection_id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize an empty schema.

        Args:
            settings: Optional settings instance. Loaded from environment if omitted.
            collection_id_factory: Optional generator of collection ids.
            connection_id_factory: Optional generator of connection ids.
        """
        self.settings = settings or get_settings()
        self._collections: list[Collection] = []
        self._connections: list[FieldConnection] = []
        self._extra: dict[str, Any] = {}
        self._lock = threading.RLock()
        self._new_collection_id = collection_id_factory or _default_collection_id
        self._new_connection_id = connection_id_factory or _default_connection_id

    # --- Queries ---

    @property
    @_synchronized
    def collections(self) -> list[Collection]:
        """Copies of all collections, in creation order."""
        return [c.copy() for c in self._collections]

    @property
    @_synchronized
    def connections(self) -> list[FieldConnection]:
        """Copies of all connections, in insertion order."""
        return [c.copy() for c in self._connections]

    @_synchronized
    def get_collection(self, collection_id: str) -> Collection | None:
        collection = self._find(collection_id)
        return collection.copy() if collection else None

    @_synchronized
    def get_collection_by_name(self, name: str) -> Collection | None:
        for collection in self._collections:
            if collection.name == name:
                return collection.copy()
        return None

    def require_collection_by_name(self, name: str) -> Collection:
        """Look up a collection by name for callers that need it to exist.

        Raises:
            NotFoundError: If no collection has that name.
        """
        collection = self.get_collection_by_name(name)
        if collection is None:
            raise NotFoundError(f"Collection '{name}' not found")
        return collection

    @_synchronized
    def resolver(self) -> ConnectionResolver:
        """A connection resolver over a snapshot of the schema."""
        return ConnectionResolver(self.collections, self.connections)

    @_synchronized
    def get_field_connections(self, collection_name: str, field_name: str) -> list[FieldConnection]:
        """Connections touching the named field, in insertion order."""
        ids = {c.id for c in self._collections if c.name == collection_name}
        return [
            conn.copy()
            for conn in self._connections
            if any(conn.touches(collection_id, field_name) for collection_id in ids)
        ]

    @_synchronized
    def validate(self) -> list[SchemaValidationError]:
        """Audit the schema's invariants. Empty when consistent."""
        return SchemaValidator.audit(self._collections, self._connections)

    # --- Collections ---

    @_synchronized
    def add_collection(
        self,
        name: str,
        include_timestamps: bool = False,
        include_created_at: bool = True,
        include_updated_at: bool = True,
    ) -> Collection:
        """Create a collection with an `_id` field and optional timestamps.

        Args:
            name: Collection name, unique within the schema.
            include_timestamps: Whether to add system timestamp fields at all.
            include_created_at: Add `createdAt` when timestamps are included.
            include_updated_at: Add `updatedAt` when timestamps are included.

        Returns:
            A copy of the created collection.

        Raises:
            ValidationError: If the name is empty, malformed or already taken.
        """
        self._check_collection_name(name)

        fields = [Field.primary_key()]
        if include_timestamps:
            if include_created_at:
                fields.append(Field.timestamp(CREATED_AT_FIELD_NAME))
            if include_updated_at:
                fields.append(Field.timestamp(UPDATED_AT_FIELD_NAME))

        collection = Collection(
            id=self._new_collection_id(),
            name=name,
            fields=organize_fields(fields),
            position=Position(
                x=self.settings.grid_origin_x + len(self._collections) * self.settings.grid_spacing,
                y=self.settings.grid_origin_y,
            ),
        )
        self._collections.append(collection)

        logger.info(
            "Collection added",
            collection_id=collection.id,
            collection_name=name,
            field_count=len(collection.fields),
        )
        return collection.copy()

    @_synchronized
    def remove_collection(self, collection_id: str) -> None:
        """Remove a collection together with every connection touching it."""
        collection = self._find(collection_id)
        if collection is None:
            logger.debug("Remove skipped, collection not found", collection_id=collection_id)
            return

        dropped = [c for c in self._connections if c.involves_collection(collection_id)]
        self._collections = [c for c in self._collections if c.id != collection_id]
        self._connections = [c for c in self._connections if not c.involves_collection(collection_id)]
        self._reindex()

        logger.info(
            "Collection removed",
            collection_id=collection_id,
            collection_name=collection.name,
            connections_removed=len(dropped),
        )

    @_synchronized
    def duplicate_collection(self, collection_id: str) -> Collection | None:
        """Copy a collection under a new id and a free "<name> Copy" name.

        The copy owns no connections, so its fields start with an empty
        connection index.

        Returns:
            A copy of the new collection, or None if the source does not exist.
        """
        source = self._find(collection_id)
        if source is None:
            return None

        duplicate = source.copy()
        duplicate.id = self._new_collection_id()
        duplicate.name = self._free_copy_name(source.name)
        for f in duplicate.fields:
            f.connections = []
        duplicate.fields = organize_fields(duplicate.fields)

        offset = self.settings.duplicate_offset
        if source.position is not None:
            duplicate.position = Position(
                x=source.position.x + offset,
                y=source.position.y + offset,
                extra=dict(source.position.extra),
            )
        else:
            duplicate.position = Position(
                x=self.settings.grid_origin_x + offset, y=self.settings.grid_origin_y + offset
            )

        self._collections.append(duplicate)
        logger.info(
            "Collection duplicated",
            source_id=collection_id,
            collection_id=duplicate.id,
            collection_name=duplicate.name,
        )
        return duplicate.copy()

    @_synchronized
    def update_collection(self, collection_id: str, name: str) -> None:
        """Rename a collection. Connections are id-based and keep working.

        Raises:
            ValidationError: If the new name is empty, malformed or taken.
        """
        collection = self._find(collection_id)
        if collection is None or collection.name == name:
            return

        self._check_collection_name(name, exclude_id=collection_id)
        old_name = collection.name
        collection.name = name
        logger.info(
            "Collection renamed",
            collection_id=collection_id,
            old_name=old_name,
            new_name=name,
        )

    @_synchronized
    def move_collection(self, collection_id: str, x: float, y: float) -> None:
        """Store a new canvas position for a collection."""
        collection = self._find(collection_id)
        if collection is None:
            return
        if collection.position is None:
            collection.position = Position(x=x, y=y)
        else:
            collection.position.x = x
            collection.position.y = y

    # --- Fields ---

    @_synchronized
    def add_field(self, collection_id: str, field: Field) -> Field | None:
        """Append a field ahead of the system timestamp tail.

        Returns:
            A copy of the stored field, or None if the collection does not exist.

        Raises:
            ValidationError: If the field is malformed or its name is taken.
        """
        collection = self._find(collection_id)
        if collection is None:
            return None

        new_field = field.copy()
        new_field.connections = []
        errors = SchemaValidator.validate_field(new_field, len(collection.fields))
        if collection.has_field(new_field.name):
            errors.append(
                SchemaValidationError(
                    field=f"fields[{len(collection.fields)}].name",
                    message=f"Duplicate field name '{new_field.name}'",
                    code="field_name_duplicate",
                )
            )
        if errors:
            logger.warning(
                "Field rejected",
                collection_id=collection_id,
                field_name=new_field.name,
                codes=[e.code for e in errors],
            )
            raise ValidationError(errors)

        collection.fields = organize_fields(collection.fields + [new_field])
        logger.info(
            "Field added",
            collection_id=collection_id,
            field_name=new_field.name,
            field_type=new_field.type,
        )
        return new_field.copy()

    @_synchronized
    def remove_field(self, collection_id: str, index: int) -> None:
        """Remove the field at `index` and every connection touching it.

        Raises:
            ValidationError: If the field is `_id`.
        """
        collection = self._find(collection_id)
        if collection is None or not 0 <= index < len(collection.fields):
            return

        removed = collection.fields[index]
        if removed.is_id:
            raise ValidationError.single(
                f"fields[{index}]", "The '_id' field cannot be removed", "id_field_immutable"
            )

        del collection.fields[index]
        before = len(self._connections)
        self._connections = [
            c for c in self._connections if not c.touches(collection_id, removed.name)
        ]
        self._reindex()

        logger.info(
            "Field removed",
            collection_id=collection_id,
            field_name=removed.name,
            connections_removed=before - len(self._connections),
        )

    @_synchronized
    def update_field(self, collection_id: str, index: int, field: Field) -> Field | None:
        """Replace the field at `index`.

        A rename is carried over to the field's connections; changing the type
        away from objectId drops them.

        Returns:
            A copy of the stored field, or None if nothing was replaced.

        Raises:
            ValidationError: If `_id` would change name, type or required-ness,
                or the replacement is malformed or clashes with another field.
        """
        collection = self._find(collection_id)
        if collection is None or not 0 <= index < len(collection.fields):
            return None

        current = collection.fields[index]
        replacement = field.copy()
        replacement.connections = []

        if current.is_id and (
            replacement.name != current.name
            or replacement.type != current.type
            or replacement.required != current.required
        ):
            raise ValidationError.single(
                f"fields[{index}]",
                "The '_id' field cannot change name, type or required",
                "id_field_immutable",
            )

        errors = SchemaValidator.validate_field(replacement, index)
        if replacement.name != current.name and collection.has_field(replacement.name):
            errors.append(
                SchemaValidationError(
                    field=f"fields[{index}].name",
                    message=f"Duplicate field name '{replacement.name}'",
                    code="field_name_duplicate",
                )
            )
        if errors:
            raise ValidationError(errors)

        if replacement.name != current.name:
            for conn in self._connections:
                if conn.source_collection_id == collection_id and conn.source_field_name == current.name:
                    conn.source_field_name = replacement.name
                if conn.target_collection_id == collection_id and conn.target_field_name == current.name:
                    conn.target_field_name = replacement.name

        if not replacement.is_object_id:
            self._connections = [
                c for c in self._connections if not c.touches(collection_id, replacement.name)
            ]

        collection.fields[index] = replacement
        collection.fields = organize_fields(collection.fields)
        self._reindex()

        logger.info(
            "Field updated",
            collection_id=collection_id,
            old_name=current.name,
            field_name=replacement.name,
            field_type=replacement.type,
        )
        stored = collection.get_field(replacement.name)
        return stored.copy() if stored else None

    @_synchronized
    def reorder_fields(self, collection_id: str, from_index: int, to_index: int) -> None:
        """Move a field to a new position.

        Raises:
            ValidationError: If the move touches `_id` or the timestamp tail.
        """
        collection = self._find(collection_id)
        if collection is None:
            return
        size = len(collection.fields)
        if not (0 <= from_index < size and 0 <= to_index < size) or from_index == to_index:
            return

        moving = (collection.fields[from_index].name, collection.fields[to_index].name)
        if 0 in (from_index, to_index) or ID_FIELD_NAME in moving:
            raise ValidationError.single(
                "fields", "The '_id' field must stay first", "field_order_pinned"
            )

        tail = timestamp_tail_start(collection.fields)
        if from_index >= tail or to_index >= tail:
            raise ValidationError.single(
                "fields",
                "System timestamp fields cannot be reordered",
                "field_order_system",
            )

        moved = collection.fields.pop(from_index)
        collection.fields.insert(to_index, moved)
        logger.debug(
            "Fields reordered",
            collection_id=collection_id,
            field_name=moved.name,
            from_index=from_index,
            to_index=to_index,
        )

    # --- Connections ---

    @_synchronized
    def add_connection(
        self,
        source_collection_id: str,
        source_field_name: str,
        target_collection_id: str,
        target_field_name: str,
        connection_type: str = CONNECTION_TYPE_REFERENCE,
    ) -> FieldConnection | None:
        """Connect two objectId fields.

        Returns:
            A copy of the new connection, or None if an endpoint does not exist.

        Raises:
            ValidationError: If the connection breaks a relationship rule.
        """
        source = self._find(source_collection_id)
        target = self._find(target_collection_id)
        source_field = source.get_field(source_field_name) if source else None
        target_field = target.get_field(target_field_name) if target else None
        if source_field is None or target_field is None:
            logger.debug(
                "Connection skipped, endpoint not found",
                source_collection_id=source_collection_id,
                source_field=source_field_name,
                target_collection_id=target_collection_id,
                target_field=target_field_name,
            )
            return None

        resolver = ConnectionResolver(self._collections, self._connections)
        if not resolver.can_connect(source, source_field, target, target_field):
            logger.warning(
                "Connection rejected",
                source=f"{source.name}.{source_field_name}",
                target=f"{target.name}.{target_field_name}",
            )
            raise ValidationError.single(
                "connection",
                f"Cannot connect '{source.name}.{source_field_name}' to "
                f"'{target.name}.{target_field_name}'",
                "connection_rejected",
            )

        connection = FieldConnection(
            id=self._new_connection_id(),
            source_collection_id=source_collection_id,
            source_field_name=source_field_name,
            target_collection_id=target_collection_id,
            target_field_name=target_field_name,
            type=connection_type,
        )
        self._connections.append(connection)
        self._reindex()

        logger.info(
            "Connection added",
            connection_id=connection.id,
            source=f"{source.name}.{source_field_name}",
            target=f"{target.name}.{target_field_name}",
        )
        return connection.copy()

    @_synchronized
    def remove_connection(self, connection_id: str) -> None:
        if not any(c.id == connection_id for c in self._connections):
            return
        self._connections = [c for c in self._connections if c.id != connection_id]
        self._reindex()
        logger.info("Connection removed", connection_id=connection_id)

    # --- Document ---

    @_synchronized
    def export_schema(self) -> str:
        """Serialize the whole schema to the JSON document format."""
        from schemacanvas.infrastructure.serialization import SchemaSerializer

        return SchemaSerializer(self.settings).export_document(
            self._collections, self._connections, self._extra
        )

    @_synchronized
    def import_schema(self, text: str) -> None:
        """Replace the whole schema with the content of a JSON document.

        The replacement is all-or-nothing: on error the model is unchanged.

        Raises:
            InvalidSchemaFormatError: If the document fails structural checks.
        """
        from schemacanvas.infrastructure.serialization import SchemaSerializer

        parsed = SchemaSerializer(self.settings).parse_document(text)
        self._collections = parsed.collections
        self._connections = parsed.connections
        self._extra = parsed.extra
        logger.info(
            "Schema imported",
            collection_count=len(parsed.collections),
            connection_count=len(parsed.connections),
            version=parsed.version,
            issue_count=len(parsed.issues),
        )

    @_synchronized
    def clear_canvas(self) -> None:
        """Drop every collection and connection. Not undoable."""
        self._collections = []
        self._connections = []
        self._extra = {}
        logger.info("Canvas cleared")

    @_synchronized
    def generate_code(self, generator_key: str, collection_id: str) -> str:
        """Generate source text for one collection with a registered generator.

        Raises:
            UnsupportedGeneratorError: If the generator key is not registered.
            NotFoundError: If the collection does not exist.
        """
        from schemacanvas.infrastructure.codegen import generate_code

        collection = self._find(collection_id)
        if collection is None:
            raise NotFoundError(f"Collection '{collection_id}' not found")
        return generate_code(generator_key, collection, self._collections, self._connections)

    # --- Internals ---

    def _find(self, collection_id: str) -> Collection | None:
        for collection in self._collections:
            if collection.id == collection_id:
                return collection
        return None

    def _check_collection_name(self, name: str, exclude_id: str | None = None) -> None:
        existing = [c.name for c in self._collections if c.id != exclude_id]
        errors = SchemaValidator.validate_collection_name(name, existing)
        if errors:
            logger.warning(
                "Collection name rejected",
                collection_name=name,
                codes=[e.code for e in errors],
            )
            raise ValidationError(errors)

    def _free_copy_name(self, name: str) -> str:
        """Unused "<name> Copy" or "<name> Copy N" name, shortening `name` to fit."""
        taken = {c.name for c in self._collections}
        counter = 1
        while True:
            suffix = self.settings.duplicate_suffix
            if counter > 1:
                suffix = f"{suffix} {counter}"
            base = name[: max(SchemaValidator.MAX_NAME_LENGTH - len(suffix), 1)].rstrip()
            candidate = f"{base}{suffix}"
            if candidate not in taken:
                return candidate
            counter += 1

    def _reindex(self) -> None:
        rebuild_connection_index(self._collections, self._connections)
