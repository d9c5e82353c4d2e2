"""Export and import of the whole schema as a versioned JSON document.

Export writes every persisted attribute (including canvas positions and
unknown keys picked up on import). Import validates the document structure
with pydantic, resolves connection endpoints and rebuilds the derived
per-field connection index. Per-field invariants are audited and logged but
not enforced, so hand-edited documents still load.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from schemacanvas.core.config import Settings, get_settings
from schemacanvas.core.logging import get_logger
from schemacanvas.domain.entities import (
    Collection,
    Field,
    FieldConnection,
    Position,
)
from schemacanvas.domain.exceptions import InvalidSchemaFormatError, SchemaValidationError
from schemacanvas.domain.services.connection_resolver import rebuild_connection_index
from schemacanvas.domain.services.schema_validator import SchemaValidator
from schemacanvas.infrastructure.serialization.document_schemas import (
    CollectionPayload,
    ConnectionPayload,
    FieldPayload,
    SchemaDocument,
)

logger = get_logger(__name__)

# Top-level keys the document format owns; anything else is carried verbatim
DOCUMENT_KEYS = frozenset({"collections", "connections", "exportedAt", "version"})


@dataclass
class ParsedSchema:
    """Result of parsing a schema document.

    Attributes:
        collections: Collections in document order.
        connections: Connections in document order, with the field index rebuilt.
        extra: Unknown top-level keys.
        version: Document version, if present.
        issues: Invariant violations found in the document.
    """

    collections: list[Collection]
    connections: list[FieldConnection]
    extra: dict[str, Any] = field(default_factory=dict)
    version: str | None = None
    issues: list[SchemaValidationError] = field(default_factory=list)


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SchemaSerializer:
    """Converts between the in-memory schema and the JSON document format."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    # --- Export ---

    @staticmethod
    def field_to_dict(f: Field) -> dict[str, Any]:
        data: dict[str, Any] = {"name": f.name, "type": f.type, "required": f.required}
        if f.unique is not None:
            data["unique"] = f.unique
        if f.index is not None:
            data["index"] = f.index
        if f.default_value is not None:
            data["defaultValue"] = f.default_value
        if f.ref is not None:
            data["ref"] = f.ref
        if f.array_type is not None:
            data["arrayType"] = f.array_type
        if f.connections:
            data["connections"] = list(f.connections)
        for key, value in f.extra.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def collection_to_dict(cls, collection: Collection) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": collection.id,
            "name": collection.name,
            "fields": [cls.field_to_dict(f) for f in collection.fields],
        }
        if collection.position is not None:
            position = {"x": collection.position.x, "y": collection.position.y}
            for key, value in collection.position.extra.items():
                position.setdefault(key, value)
            data["position"] = position
        for key, value in collection.extra.items():
            data.setdefault(key, value)
        return data

    @staticmethod
    def connection_to_dict(
        connection: FieldConnection, names: dict[str, str]
    ) -> dict[str, Any]:
        """Serialize a connection with both collection ids and display names."""
        data: dict[str, Any] = {
            "id": connection.id,
            "sourceCollectionId": connection.source_collection_id,
            "sourceCollectionName": names.get(connection.source_collection_id),
            "sourceFieldName": connection.source_field_name,
            "targetCollectionId": connection.target_collection_id,
            "targetCollectionName": names.get(connection.target_collection_id),
            "targetFieldName": connection.target_field_name,
            "type": connection.type,
        }
        for key, value in connection.extra.items():
            data.setdefault(key, value)
        return data

    def to_document(
        self,
        collections: list[Collection],
        connections: list[FieldConnection],
        extra: dict[str, Any] | None = None,
        exported_at: str | None = None,
    ) -> dict[str, Any]:
        """Build the document as plain Python data."""
        names = {c.id: c.name for c in collections}
        document: dict[str, Any] = {
            "collections": [self.collection_to_dict(c) for c in collections],
            "connections": [self.connection_to_dict(c, names) for c in connections],
            "exportedAt": exported_at or utc_timestamp(),
            "version": self.settings.schema_version,
        }
        for key, value in (extra or {}).items():
            if key not in DOCUMENT_KEYS:
                document[key] = value
        return document

    def export_document(
        self,
        collections: list[Collection],
        connections: list[FieldConnection],
        extra: dict[str, Any] | None = None,
        exported_at: str | None = None,
    ) -> str:
        """Serialize the schema to pretty-printed JSON text."""
        document = self.to_document(collections, connections, extra, exported_at)
        logger.debug(
            "Schema exported",
            collection_count=len(collections),
            connection_count=len(connections),
        )
        return json.dumps(document, indent=self.settings.export_indent, ensure_ascii=False)

    # --- Import ---

    @staticmethod
    def field_from_payload(payload: FieldPayload) -> Field:
        return Field(
            name=payload.name,
            type=payload.type,
            required=payload.required,
            unique=payload.unique,
            index=payload.index,
            default_value=payload.default_value,
            ref=payload.ref,
            array_type=payload.array_type,
            extra=dict(payload.model_extra or {}),
        )

    @classmethod
    def collection_from_payload(cls, payload: CollectionPayload) -> Collection:
        position = None
        if payload.position is not None:
            position = Position(
                x=payload.position.x,
                y=payload.position.y,
                extra=dict(payload.position.model_extra or {}),
            )
        return Collection(
            id=payload.id,
            name=payload.name,
            fields=[cls.field_from_payload(f) for f in payload.fields],
            position=position,
            extra=dict(payload.model_extra or {}),
        )

    @staticmethod
    def _resolve_endpoint(
        collections: list[Collection],
        collection_id: str | None,
        collection_name: str | None,
        connection_id: str,
        side: str,
    ) -> str:
        """Find the collection id of one connection endpoint.

        Ids win; documents that only carry names are matched by name.

        Raises:
            InvalidSchemaFormatError: If neither id nor name matches a collection.
        """
        if collection_id is not None and any(c.id == collection_id for c in collections):
            return collection_id
        if collection_name is not None:
            for c in collections:
                if c.name == collection_name:
                    return c.id
        raise InvalidSchemaFormatError(
            f"Invalid schema format: connection '{connection_id}' {side} collection "
            f"'{collection_id or collection_name}' does not exist"
        )

    @classmethod
    def connection_from_payload(
        cls, payload: ConnectionPayload, collections: list[Collection]
    ) -> FieldConnection:
        return FieldConnection(
            id=payload.id,
            source_collection_id=cls._resolve_endpoint(
                collections,
                payload.source_collection_id,
                payload.source_collection_name,
                payload.id,
                "source",
            ),
            source_field_name=payload.source_field_name,
            target_collection_id=cls._resolve_endpoint(
                collections,
                payload.target_collection_id,
                payload.target_collection_name,
                payload.id,
                "target",
            ),
            target_field_name=payload.target_field_name,
            type=payload.type,
            extra=dict(payload.model_extra or {}),
        )

    @staticmethod
    def _check_unique_ids(kind: str, ids: list[str]) -> None:
        """Reject documents that reuse an id, since ids join every relationship.

        Raises:
            InvalidSchemaFormatError: If any id appears more than once.
        """
        seen: set[str] = set()
        for entity_id in ids:
            if entity_id in seen:
                raise InvalidSchemaFormatError(
                    f"Invalid schema format: duplicate {kind} id '{entity_id}'"
                )
            seen.add(entity_id)

    def parse_document(self, text: str) -> ParsedSchema:
        """Parse and structurally validate a schema document.

        Args:
            text: JSON text of the document.

        Returns:
            ParsedSchema: Collections, connections and carried-over keys.

        Raises:
            InvalidSchemaFormatError: If the text is not a valid schema document.
        """
        try:
            raw = json.loads(text)
        except (TypeError, ValueError) as e:
            raise InvalidSchemaFormatError(f"Invalid schema format: {e}") from e

        if not isinstance(raw, dict):
            raise InvalidSchemaFormatError("Invalid schema format: expected a JSON object")

        if not isinstance(raw.get("collections"), list):
            raise InvalidSchemaFormatError(
                "Invalid schema format: 'collections' must be an array"
            )

        try:
            document = SchemaDocument.model_validate(raw)
        except PydanticValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise InvalidSchemaFormatError(f"Invalid schema format: {details}") from e

        self._check_unique_ids("collection", [c.id for c in document.collections])
        self._check_unique_ids("connection", [c.id for c in document.connections or []])

        collections = [self.collection_from_payload(c) for c in document.collections]
        connections = [
            self.connection_from_payload(c, collections) for c in document.connections or []
        ]
        rebuild_connection_index(collections, connections)

        issues = SchemaValidator.audit(collections, connections)
        if issues:
            logger.warning(
                "Imported schema violates invariants",
                issue_count=len(issues),
                codes=sorted({i.code for i in issues}),
            )

        extra = {k: v for k, v in raw.items() if k not in DOCUMENT_KEYS}
        return ParsedSchema(
            collections=collections,
            connections=connections,
            extra=extra,
            version=document.version,
            issues=issues,
        )
