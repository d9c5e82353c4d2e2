"""Domain entities for SchemaCanvas.

Entities are plain Python dataclasses that describe a document schema.
They have no dependencies on infrastructure or external frameworks.
"""

from schemacanvas.domain.entities.collection import (
    Collection,
    Position,
    organize_fields,
    timestamp_tail_start,
)
from schemacanvas.domain.entities.connection import (
    CONNECTION_TYPE_REFERENCE,
    FieldConnection,
)
from schemacanvas.domain.entities.field import (
    ARRAY_ELEMENT_TYPES,
    CREATED_AT_FIELD_NAME,
    ID_FIELD_NAME,
    TIMESTAMP_FIELD_NAMES,
    UPDATED_AT_FIELD_NAME,
    Field,
    FieldType,
)

__all__ = [
    "ARRAY_ELEMENT_TYPES",
    "CONNECTION_TYPE_REFERENCE",
    "CREATED_AT_FIELD_NAME",
    "Collection",
    "Field",
    "FieldConnection",
    "FieldType",
    "ID_FIELD_NAME",
    "Position",
    "TIMESTAMP_FIELD_NAMES",
    "UPDATED_AT_FIELD_NAME",
    "organize_fields",
    "timestamp_tail_start",
]
