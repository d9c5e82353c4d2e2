"""Domain services for SchemaCanvas.

Services contain the schema logic: validation, relationship resolution and
the invariant-enforcing schema model.
"""

from schemacanvas.domain.services.schema_validator import SchemaValidator
from schemacanvas.domain.services.connection_resolver import (
    ConnectionResolver,
    rebuild_connection_index,
    resolve_reference,
)
from schemacanvas.domain.services.schema_model import SchemaModel

__all__ = [
    "ConnectionResolver",
    "SchemaModel",
    "SchemaValidator",
    "rebuild_connection_index",
    "resolve_reference",
]
