"""Field entity: one named, typed property of a collection document."""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldType(str, Enum):
    """Supported field types for collection schemas."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    ARRAY = "array"
    OBJECT = "object"
    OBJECT_ID = "objectId"


# Element types allowed for array fields
ARRAY_ELEMENT_TYPES = frozenset(t.value for t in FieldType if t is not FieldType.ARRAY)

ID_FIELD_NAME = "_id"
CREATED_AT_FIELD_NAME = "createdAt"
UPDATED_AT_FIELD_NAME = "updatedAt"

# Ordered: createdAt always precedes updatedAt at the tail of a collection
TIMESTAMP_FIELD_NAMES = (CREATED_AT_FIELD_NAME, UPDATED_AT_FIELD_NAME)


@dataclass
class Field:
    """Field entity.

    Attributes:
        name: Field name, unique within its collection.
        type: Field type tag (a FieldType value for fields created through the model).
        required: Whether the field is required.
        unique: Optional uniqueness hint for generators.
        index: Optional index hint for generators.
        default_value: Optional default value, not type-checked.
        ref: Optional explicit target collection id for objectId fields.
        array_type: Optional element type tag for array fields.
        connections: Ids of the connections touching this field. Derived by
            the schema model; never edited directly.
        extra: Unknown attributes carried through import/export untouched.
    """

    name: str
    type: str
    required: bool = False
    unique: bool | None = None
    index: bool | None = None
    default_value: Any = None
    ref: str | None = None
    array_type: str | None = None
    connections: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_id(self) -> bool:
        """Whether this is the pinned primary key field."""
        return self.name == ID_FIELD_NAME

    @property
    def is_timestamp(self) -> bool:
        """Whether this is a system-managed timestamp field."""
        return self.name in TIMESTAMP_FIELD_NAMES

    @property
    def is_object_id(self) -> bool:
        return self.type == FieldType.OBJECT_ID.value

    def copy(self) -> "Field":
        """Return a deep copy of this field."""
        return copy.deepcopy(self)

    @classmethod
    def primary_key(cls) -> "Field":
        """Build the `_id` field every collection starts with."""
        return cls(name=ID_FIELD_NAME, type=FieldType.OBJECT_ID.value, required=True)

    @classmethod
    def timestamp(cls, name: str) -> "Field":
        """Build a system timestamp field."""
        return cls(name=name, type=FieldType.DATE.value, required=True)
