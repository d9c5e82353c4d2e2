"""Collection entity for document schema definitions.

A collection is a named, ordered sequence of fields. Field order is meaningful:
it drives generated code and canvas layout. `_id` is pinned first and the
system timestamp fields are kept at the tail.
"""

import copy
from dataclasses import dataclass, field
from typing import Any

from schemacanvas.domain.entities.field import (
    CREATED_AT_FIELD_NAME,
    TIMESTAMP_FIELD_NAMES,
    Field,
)


@dataclass
class Position:
    """Canvas position of a collection. Presentation only."""

    x: float = 0
    y: float = 0
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class Collection:
    """Collection entity.

    Attributes:
        id: Opaque identifier (UUID string), stable for the document's lifetime.
        name: Collection name.
        fields: Ordered fields.
        position: Canvas position, preserved through export/import.
        extra: Unknown attributes carried through import/export untouched.
    """

    id: str
    name: str
    fields: list[Field] = field(default_factory=list)
    position: Position | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate collection data after initialization."""
        if not self.id:
            raise ValueError("Collection ID is required")

    def field_index(self, name: str) -> int | None:
        """Position of the field called `name`, or None."""
        for i, f in enumerate(self.fields):
            if f.name == name:
                return i
        return None

    def get_field(self, name: str) -> Field | None:
        index = self.field_index(name)
        return self.fields[index] if index is not None else None

    def has_field(self, name: str) -> bool:
        return self.field_index(name) is not None

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def copy(self) -> "Collection":
        """Return a deep copy of this collection."""
        return copy.deepcopy(self)


def organize_fields(fields: list[Field]) -> list[Field]:
    """Move system timestamp fields to the tail, createdAt before updatedAt.

    The relative order of every other field is preserved.
    """
    regular = [f for f in fields if not f.is_timestamp]
    timestamps = [f for f in fields if f.is_timestamp]
    timestamps.sort(key=lambda f: 0 if f.name == CREATED_AT_FIELD_NAME else 1)
    return regular + timestamps


def timestamp_tail_start(fields: list[Field]) -> int:
    """Index of the first system timestamp field in an organized field list."""
    index = len(fields)
    while index > 0 and fields[index - 1].name in TIMESTAMP_FIELD_NAMES:
        index -= 1
    return index
