"""JSON export/import of schema documents."""

from schemacanvas.infrastructure.serialization.schema_serializer import (
    ParsedSchema,
    SchemaSerializer,
)

__all__ = ["ParsedSchema", "SchemaSerializer"]
