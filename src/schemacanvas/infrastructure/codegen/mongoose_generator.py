"""Mongoose schema module generator.

Builds one ES module per collection: the schema definition, an index block
and the model export. Output is deterministic for identical input.
"""

import json
from typing import Any

from schemacanvas.domain.entities import (
    ARRAY_ELEMENT_TYPES,
    Collection,
    Field,
    FieldConnection,
    FieldType,
)
from schemacanvas.domain.services.connection_resolver import ConnectionResolver
from schemacanvas.infrastructure.codegen.naming import (
    emitted_fields,
    JS_RESERVED_WORDS,
    is_identifier,
    to_binding_name,
    uses_auto_timestamps,
)

OBJECT_ID_TYPE = "mongoose.Schema.Types.ObjectId"
MIXED_TYPE = "mongoose.Schema.Types.Mixed"

# The module imports `mongoose`, so a model may not be bound to that name either
RESERVED_MODEL_NAMES = JS_RESERVED_WORDS | {"mongoose"}

# Mongoose type for each field type
MONGOOSE_TYPE_MAPPING = {
    FieldType.STRING.value: "String",
    FieldType.NUMBER.value: "Number",
    FieldType.BOOLEAN.value: "Boolean",
    FieldType.DATE.value: "Date",
    FieldType.OBJECT_ID.value: OBJECT_ID_TYPE,
    FieldType.ARRAY.value: "Array",
    FieldType.OBJECT.value: MIXED_TYPE,
}


def js_string(value: str) -> str:
    """Single-quoted JavaScript string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
    return f"'{escaped}'"


def js_key(name: str) -> str:
    return name if is_identifier(name) else js_string(name)


class MongooseGenerator:
    """Generates Mongoose schema modules from collections."""

    INDENT = "  "

    @classmethod
    def map_type(cls, field_type: str | None) -> str:
        """Mongoose type token for a field type, Mixed when unknown."""
        return MONGOOSE_TYPE_MAPPING.get(field_type or "", MIXED_TYPE)

    @classmethod
    def render_default(cls, field: Field) -> str | None:
        """Render a default value as a JavaScript literal.

        Returns:
            The literal, or None when there is nothing to render.
        """
        value: Any = field.default_value
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return json.dumps(value)
        if isinstance(value, (list, dict)):
            return json.dumps(value, sort_keys=True)

        text = str(value)
        if field.type == FieldType.DATE.value and text.lower() in ("now", "date.now"):
            return "Date.now"
        if field.type == FieldType.BOOLEAN.value and text.lower() in ("true", "false"):
            return text.lower()
        if field.type == FieldType.NUMBER.value:
            try:
                return json.dumps(float(text) if "." in text else int(text))
            except ValueError:
                pass
        return js_string(text)

    @classmethod
    def build_field_definition(
        cls, collection: Collection, field: Field, resolver: ConnectionResolver
    ) -> str:
        """Build the definition of one field.

        Args:
            collection: The collection the field belongs to.
            field: The field.
            resolver: Resolver over the whole schema, for reference targets.

        Returns:
            The definition, indented one level, without a trailing comma.
        """
        options: list[str] = []

        if field.type == FieldType.ARRAY.value:
            element_type = field.array_type if field.array_type in ARRAY_ELEMENT_TYPES else None
            element = cls.map_type(element_type)
            if element_type == FieldType.OBJECT_ID.value:
                target = resolver.resolve_reference(collection, field)
                if target is not None:
                    element = f"{{ type: {OBJECT_ID_TYPE}, ref: {js_string(target.name)} }}"
            type_token = f"[{element}]"
        else:
            type_token = cls.map_type(field.type)
            if field.type == FieldType.OBJECT_ID.value:
                target = resolver.resolve_reference(collection, field)
                if target is not None:
                    options.append(f"ref: {js_string(target.name)}")

        if field.required:
            options.append("required: true")
        default = cls.render_default(field)
        if default is None and field.is_timestamp and field.type == FieldType.DATE.value:
            default = "Date.now"
        if default is not None:
            options.append(f"default: {default}")

        key = js_key(field.name)
        if field.type == FieldType.ARRAY.value and not options:
            return f"{cls.INDENT}{key}: {type_token}"

        inner = cls.INDENT * 2
        lines = [f"{inner}type: {type_token}"] + [f"{inner}{option}" for option in options]
        body = ",\n".join(lines)
        return f"{cls.INDENT}{key}: {{\n{body}\n{cls.INDENT}}}"

    @classmethod
    def build_indexes(cls, model_name: str, fields: list[Field]) -> str:
        """Build the index block, one statement per unique or indexed field."""
        statements = []
        for field in fields:
            key = js_key(field.name)
            if field.unique:
                statements.append(f"{model_name}Schema.index({{ {key}: 1 }}, {{ unique: true }});")
            elif field.index:
                statements.append(f"{model_name}Schema.index({{ {key}: 1 }});")
        return "\n".join(statements) if statements else "// No additional indexes"

    @classmethod
    def generate(
        cls,
        collection: Collection,
        all_collections: list[Collection],
        connections: list[FieldConnection] | None = None,
    ) -> str:
        """Generate the Mongoose module for one collection.

        Args:
            collection: The collection to render.
            all_collections: Every collection of the schema (reference targets).
            connections: Every connection of the schema.

        Returns:
            The module source text.
        """
        resolver = ConnectionResolver(all_collections, connections or [])
        model_name = to_binding_name(collection.name, RESERVED_MODEL_NAMES)
        auto_timestamps = uses_auto_timestamps(collection)
        fields = emitted_fields(collection, auto_timestamps)

        definitions = [cls.build_field_definition(collection, f, resolver) for f in fields]
        schema_body = "{\n" + ",\n".join(definitions) + "\n}" if definitions else "{}"

        schema_options = []
        if auto_timestamps:
            schema_options.append("timestamps: true")
        schema_options.append(f"collection: {js_string(collection.name.lower())}")
        options_body = ",\n".join(f"{cls.INDENT}{option}" for option in schema_options)

        return (
            "import mongoose from 'mongoose';\n"
            "\n"
            f"const {model_name}Schema = new mongoose.Schema({schema_body}, {{\n"
            f"{options_body}\n"
            "});\n"
            "\n"
            "// Indexes\n"
            f"{cls.build_indexes(model_name, fields)}\n"
            "\n"
            f"const {model_name} = mongoose.model({js_string(collection.name)}, {model_name}Schema);\n"
            "\n"
            f"export default {model_name};\n"
        )


def generate_mongoose_schema(
    collection: Collection,
    all_collections: list[Collection],
    connections: list[FieldConnection] | None = None,
) -> str:
    """Generate a Mongoose schema module. See MongooseGenerator.generate."""
    return MongooseGenerator.generate(collection, all_collections, connections)
