"""Connection entity: a directed reference between two objectId fields.

Collections are referenced by id so renaming a collection never orphans a
connection. Fields are referenced by name; the schema model rewrites the
name when a connected field is renamed.
"""

import copy
from dataclasses import dataclass, field
from typing import Any

CONNECTION_TYPE_REFERENCE = "reference"


@dataclass
class FieldConnection:
    """Connection entity.

    Attributes:
        id: Unique connection identifier.
        source_collection_id: Id of the collection holding the referencing field.
        source_field_name: Name of the referencing field.
        target_collection_id: Id of the referenced collection.
        target_field_name: Name of the referenced field (usually `_id`).
        type: Connection kind. Only "reference" exists today.
        extra: Unknown attributes carried through import/export untouched.
    """

    id: str
    source_collection_id: str
    source_field_name: str
    target_collection_id: str
    target_field_name: str
    type: str = CONNECTION_TYPE_REFERENCE
    extra: dict[str, Any] = field(default_factory=dict)

    def touches(self, collection_id: str, field_name: str) -> bool:
        """Whether (collection_id, field_name) is either endpoint."""
        return (
            self.source_collection_id == collection_id and self.source_field_name == field_name
        ) or (
            self.target_collection_id == collection_id and self.target_field_name == field_name
        )

    def copy(self) -> "FieldConnection":
        """Return a deep copy of this connection."""
        return copy.deepcopy(self)

    def involves_collection(self, collection_id: str) -> bool:
        return collection_id in (self.source_collection_id, self.target_collection_id)

    def other_endpoint(self, collection_id: str, field_name: str) -> tuple[str, str] | None:
        """The endpoint opposite to (collection_id, field_name).

        Returns:
            Tuple of (collection_id, field_name), or None if the pair is not
            an endpoint of this connection.
        """
        if self.source_collection_id == collection_id and self.source_field_name == field_name:
            return self.target_collection_id, self.target_field_name
        if self.target_collection_id == collection_id and self.target_field_name == field_name:
            return self.source_collection_id, self.source_field_name
        return None
