"""Schema validation service for collection names, fields and whole schemas.

Mutation operations use the per-name/per-field checks to reject bad input;
`audit` walks a complete schema and reports every broken invariant, which is
what the permissive import and the CLI `validate` command rely on.
"""

import re

from schemacanvas.domain.entities import (
    ARRAY_ELEMENT_TYPES,
    ID_FIELD_NAME,
    Collection,
    Field,
    FieldConnection,
    FieldType,
)
from schemacanvas.domain.exceptions import SchemaValidationError

# Pattern for valid field names
FIELD_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SchemaValidator:
    """Validator for collections, fields and complete schemas."""

    MAX_NAME_LENGTH = 64
    MAX_FIELD_NAME_LENGTH = 64

    @classmethod
    def validate_collection_name(
        cls, name: str, existing_names: list[str] | None = None
    ) -> list[SchemaValidationError]:
        """Validate a collection name.

        Args:
            name: The collection name to validate.
            existing_names: Names already taken by other collections.

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []

        if not name or not name.strip():
            errors.append(
                SchemaValidationError(
                    field="name",
                    message="Collection name is required",
                    code="name_required",
                )
            )
            return errors

        if name != name.strip():
            errors.append(
                SchemaValidationError(
                    field="name",
                    message="Collection name must not start or end with whitespace",
                    code="name_invalid_format",
                )
            )

        if len(name) > cls.MAX_NAME_LENGTH:
            errors.append(
                SchemaValidationError(
                    field="name",
                    message=f"Collection name must be at most {cls.MAX_NAME_LENGTH} characters",
                    code="name_too_long",
                )
            )

        if existing_names and name in existing_names:
            errors.append(
                SchemaValidationError(
                    field="name",
                    message=f"Collection '{name}' already exists",
                    code="name_duplicate",
                )
            )

        return errors

    @classmethod
    def validate_field_name(cls, name: str, field_index: int) -> list[SchemaValidationError]:
        """Validate a field name.

        Args:
            name: The field name to validate.
            field_index: Index of the field (for error paths).

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []
        field_path = f"fields[{field_index}].name"

        if not name:
            errors.append(
                SchemaValidationError(
                    field=field_path,
                    message="Field name is required",
                    code="field_name_required",
                )
            )
            return errors

        if len(name) > cls.MAX_FIELD_NAME_LENGTH:
            errors.append(
                SchemaValidationError(
                    field=field_path,
                    message=f"Field name must be at most {cls.MAX_FIELD_NAME_LENGTH} characters",
                    code="field_name_too_long",
                )
            )

        if not FIELD_NAME_PATTERN.match(name):
            errors.append(
                SchemaValidationError(
                    field=field_path,
                    message="Field name must start with a letter or underscore and contain only alphanumeric characters and underscores",
                    code="field_name_invalid_format",
                )
            )

        return errors

    @classmethod
    def validate_field_type(cls, field_type: str, field_index: int) -> list[SchemaValidationError]:
        """Validate a field type tag against the closed type set."""
        errors = []
        field_path = f"fields[{field_index}].type"

        if not field_type:
            errors.append(
                SchemaValidationError(
                    field=field_path,
                    message="Field type is required",
                    code="field_type_required",
                )
            )
            return errors

        valid_types = [t.value for t in FieldType]
        if field_type not in valid_types:
            errors.append(
                SchemaValidationError(
                    field=field_path,
                    message=f"Invalid field type '{field_type}'. Valid types: {', '.join(valid_types)}",
                    code="field_type_invalid",
                )
            )

        return errors

    @classmethod
    def validate_array_type(cls, field: Field, field_index: int) -> list[SchemaValidationError]:
        """Validate the element type of an array field."""
        if field.array_type is None:
            return []

        field_path = f"fields[{field_index}].array_type"
        if field.type != FieldType.ARRAY.value:
            return [
                SchemaValidationError(
                    field=field_path,
                    message="Element type is only allowed on array fields",
                    code="array_type_not_allowed",
                )
            ]
        if field.array_type not in ARRAY_ELEMENT_TYPES:
            return [
                SchemaValidationError(
                    field=field_path,
                    message=f"Invalid array element type '{field.array_type}'. Valid types: {', '.join(sorted(ARRAY_ELEMENT_TYPES))}",
                    code="array_type_invalid",
                )
            ]
        return []

    @classmethod
    def validate_field(cls, field: Field, field_index: int) -> list[SchemaValidationError]:
        """Validate a single field definition."""
        errors = []
        errors.extend(cls.validate_field_name(field.name, field_index))
        errors.extend(cls.validate_field_type(field.type, field_index))
        errors.extend(cls.validate_array_type(field, field_index))

        if field.ref is not None and field.type != FieldType.OBJECT_ID.value:
            is_object_id_array = (
                field.type == FieldType.ARRAY.value
                and field.array_type == FieldType.OBJECT_ID.value
            )
            if not is_object_id_array:
                errors.append(
                    SchemaValidationError(
                        field=f"fields[{field_index}].ref",
                        message="Only objectId fields may reference another collection",
                        code="ref_not_allowed",
                    )
                )

        return errors

    @classmethod
    def validate_collection(cls, collection: Collection) -> list[SchemaValidationError]:
        """Validate the fields of one collection, including the `_id` invariant."""
        errors = []

        if not collection.fields or collection.fields[0].name != ID_FIELD_NAME:
            errors.append(
                SchemaValidationError(
                    field="fields[0]",
                    message="The first field must be '_id'",
                    code="id_field_missing",
                )
            )
        else:
            id_field = collection.fields[0]
            if id_field.type != FieldType.OBJECT_ID.value or not id_field.required:
                errors.append(
                    SchemaValidationError(
                        field="fields[0]",
                        message="The '_id' field must be a required objectId",
                        code="id_field_invalid",
                    )
                )

        seen_names: set[str] = set()
        for i, field in enumerate(collection.fields):
            errors.extend(cls.validate_field(field, i))

            if field.name and field.name in seen_names:
                errors.append(
                    SchemaValidationError(
                        field=f"fields[{i}].name",
                        message=f"Duplicate field name '{field.name}'",
                        code="field_name_duplicate",
                    )
                )
            seen_names.add(field.name)

        return errors

    @classmethod
    def audit(
        cls, collections: list[Collection], connections: list[FieldConnection]
    ) -> list[SchemaValidationError]:
        """Check every invariant of a complete schema.

        Args:
            collections: All collections.
            connections: All connections.

        Returns:
            List of problems found (empty if the schema is consistent).
        """
        errors = []
        by_id = {c.id: c for c in collections}
        seen_names: set[str] = set()
        seen_ids: set[str] = set()

        for ci, collection in enumerate(collections):
            prefix = f"collections[{ci}]"
            if collection.id in seen_ids:
                errors.append(
                    SchemaValidationError(
                        field=f"{prefix}.id",
                        message=f"Collection id '{collection.id}' is used more than once",
                        code="id_duplicate",
                    )
                )
            seen_ids.add(collection.id)
            if collection.name in seen_names:
                errors.append(
                    SchemaValidationError(
                        field=f"{prefix}.name",
                        message=f"Collection '{collection.name}' already exists",
                        code="name_duplicate",
                    )
                )
            seen_names.add(collection.name)

            for error in cls.validate_collection(collection):
                errors.append(
                    SchemaValidationError(
                        field=f"{prefix}.{error.field}",
                        message=error.message,
                        code=error.code,
                    )
                )

        usage: dict[tuple[str, str], int] = {}
        for ki, connection in enumerate(connections):
            prefix = f"connections[{ki}]"
            endpoints = (
                (connection.source_collection_id, connection.source_field_name),
                (connection.target_collection_id, connection.target_field_name),
            )
            for collection_id, field_name in endpoints:
                collection = by_id.get(collection_id)
                if collection is None or not collection.has_field(field_name):
                    errors.append(
                        SchemaValidationError(
                            field=prefix,
                            message=f"Connection '{connection.id}' points at a missing field '{field_name}'",
                            code="connection_dangling",
                        )
                    )
                    continue
                usage[(collection_id, field_name)] = usage.get((collection_id, field_name), 0) + 1

        for (collection_id, field_name), count in usage.items():
            if field_name != ID_FIELD_NAME and count > 1:
                errors.append(
                    SchemaValidationError(
                        field=f"{by_id[collection_id].name}.{field_name}",
                        message=f"Field takes part in {count} connections; at most one is allowed",
                        code="connection_cardinality",
                    )
                )

        return errors
