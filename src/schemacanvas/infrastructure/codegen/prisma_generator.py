"""Prisma model block generator for the MongoDB connector.

Each collection becomes one `model` block. Prisma has no implicit primary
key, so every model gets the standard MongoDB `id` line mapped to `_id`.
Reference fields become a scalar ObjectId column plus a relation field, and
referenced models receive the matching back-relation list that Prisma
requires on both sides.
"""

import json

from schemacanvas.domain.entities import (
    ARRAY_ELEMENT_TYPES,
    CREATED_AT_FIELD_NAME,
    UPDATED_AT_FIELD_NAME,
    Collection,
    Field,
    FieldConnection,
    FieldType,
)
from schemacanvas.domain.services.connection_resolver import ConnectionResolver
from schemacanvas.infrastructure.codegen.naming import (
    emitted_fields,
    lower_first,
    to_identifier,
    upper_first,
    uses_auto_timestamps,
)

ID_COLUMN = ("id", "String", '@id @default(auto()) @map("_id") @db.ObjectId')
CATCH_ALL_TYPE = "String"

# Prisma scalar type for each field type
PRISMA_TYPE_MAPPING = {
    FieldType.STRING.value: "String",
    FieldType.NUMBER.value: "Float",
    FieldType.BOOLEAN.value: "Boolean",
    FieldType.DATE.value: "DateTime",
    FieldType.OBJECT_ID.value: "String",
    FieldType.OBJECT.value: "Json",
}

# Column types that cannot carry @@unique / @@index
UNINDEXABLE_TYPES = frozenset({"Json"})


class PrismaGenerator:
    """Generates Prisma model blocks from collections."""

    INDENT = "  "

    @classmethod
    def map_type(cls, field_type: str | None) -> str:
        """Prisma scalar for a field type, String when unknown."""
        return PRISMA_TYPE_MAPPING.get(field_type or "", CATCH_ALL_TYPE)

    @classmethod
    def relation_name(cls, source: Collection, field: Field) -> str:
        return f"{to_identifier(source.name)}{upper_first(to_identifier(field.name, 'field'))}"

    @classmethod
    def relation_field_name(cls, field: Field, taken: set[str]) -> str:
        """Name of the relation field that accompanies an ObjectId column.

        `authorId` becomes `author`; anything else gets a `Ref` suffix.
        """
        base = to_identifier(field.name, "field")
        if base.endswith("Id") and len(base) > 2:
            candidate = base[:-2]
        else:
            candidate = f"{base}Ref"
        while candidate in taken:
            candidate = f"{candidate}Ref"
        return candidate

    @classmethod
    def column_names(cls, fields: list[Field]) -> dict[str, str]:
        """Map each field name to a unique column identifier.

        The primary key owns `id`; a clashing field gets trailing underscores
        and is mapped back to its stored name.
        """
        taken = {ID_COLUMN[0]}
        columns = {}
        for field in fields:
            column = to_identifier(field.name, "field")
            while column in taken:
                column = f"{column}_"
            taken.add(column)
            columns[field.name] = column
        return columns

    @classmethod
    def render_default(cls, field: Field) -> str | None:
        """Render a default as a Prisma `@default(...)` attribute, if supported."""
        value = field.default_value
        if value is None or value == "":
            return None
        if field.type == FieldType.DATE.value:
            if str(value).lower() in ("now", "date.now", "now()"):
                return "@default(now())"
            return None
        if isinstance(value, bool):
            return f"@default({'true' if value else 'false'})"
        if isinstance(value, (int, float)):
            return f"@default({json.dumps(value)})"
        if isinstance(value, str):
            if field.type == FieldType.BOOLEAN.value and value.lower() in ("true", "false"):
                return f"@default({value.lower()})"
            if field.type == FieldType.NUMBER.value:
                try:
                    return f"@default({json.dumps(float(value) if '.' in value else int(value))})"
                except ValueError:
                    return None
            if field.type == FieldType.STRING.value:
                return f"@default({json.dumps(value)})"
        return None

    @classmethod
    def build_columns(
        cls, collection: Collection, resolver: ConnectionResolver
    ) -> tuple[list[tuple[str, str, str]], list[str]]:
        """Build the field rows of a model and its block attributes.

        Returns:
            Tuple of (rows of (name, type, attributes), block attribute lines).
        """
        auto_timestamps = uses_auto_timestamps(collection)
        fields = emitted_fields(collection, auto_timestamps=False)
        model_name = to_identifier(collection.name)

        rows: list[tuple[str, str, str]] = [ID_COLUMN]
        block: list[str] = []
        columns = cls.column_names(fields)
        taken = {ID_COLUMN[0]} | set(columns.values())

        for field in fields:
            column = columns[field.name]
            attributes: list[str] = []
            indexable = True

            if auto_timestamps and field.name == CREATED_AT_FIELD_NAME:
                rows.append((column, "DateTime", "@default(now())"))
                continue
            if auto_timestamps and field.name == UPDATED_AT_FIELD_NAME:
                rows.append((column, "DateTime", "@updatedAt"))
                continue

            relation_target = None
            if field.type == FieldType.ARRAY.value:
                element_type = field.array_type if field.array_type in ARRAY_ELEMENT_TYPES else None
                if element_type == FieldType.OBJECT.value:
                    column_type = "Json[]"
                else:
                    column_type = f"{cls.map_type(element_type)}[]"
                if element_type == FieldType.OBJECT_ID.value:
                    attributes.append("@db.ObjectId")
                indexable = False
            else:
                column_type = cls.map_type(field.type)
                if field.type == FieldType.OBJECT_ID.value:
                    attributes.append("@db.ObjectId")
                    relation_target = resolver.resolve_reference(collection, field)
                if not field.required:
                    column_type += "?"
                default = cls.render_default(field)
                if default is not None:
                    attributes.insert(0, default)
                if column_type.rstrip("?") in UNINDEXABLE_TYPES:
                    indexable = False

            if column != field.name:
                attributes.insert(0, f'@map("{field.name}")')
            rows.append((column, column_type, " ".join(attributes)))

            if relation_target is not None:
                relation_field = cls.relation_field_name(field, taken)
                taken.add(relation_field)
                relation = (
                    f'@relation("{cls.relation_name(collection, field)}", '
                    f"fields: [{column}], references: [id]"
                )
                if relation_target.id == collection.id:
                    relation += ", onDelete: NoAction, onUpdate: NoAction"
                relation += ")"
                target_type = to_identifier(relation_target.name)
                if not field.required:
                    target_type += "?"
                rows.append((relation_field, target_type, relation))

            if indexable and field.unique:
                block.append(f"@@unique([{column}])")
            elif indexable and field.index:
                block.append(f"@@index([{column}])")

        for source, field in resolver.incoming_references(collection):
            relation = cls.relation_name(source, field)
            back_name = f"{lower_first(relation)}s"
            while back_name in taken:
                back_name = f"{back_name}Ref"
            taken.add(back_name)
            rows.append((back_name, f"{to_identifier(source.name)}[]", f'@relation("{relation}")'))

        if model_name != collection.name:
            block.append(f'@@map("{collection.name}")')

        return rows, block

    @classmethod
    def format_rows(cls, rows: list[tuple[str, str, str]]) -> list[str]:
        """Align rows into columns the way `prisma format` does."""
        name_width = max(len(r[0]) for r in rows)
        type_width = max(len(r[1]) for r in rows)
        return [
            f"{cls.INDENT}{name.ljust(name_width)} {column_type.ljust(type_width)} {attributes}".rstrip()
            for name, column_type, attributes in rows
        ]

    @classmethod
    def generate(
        cls,
        collection: Collection,
        all_collections: list[Collection],
        connections: list[FieldConnection] | None = None,
    ) -> str:
        """Generate the Prisma model block for one collection.

        Args:
            collection: The collection to render.
            all_collections: Every collection of the schema (relation targets).
            connections: Every connection of the schema.

        Returns:
            The model block source text.
        """
        resolver = ConnectionResolver(all_collections, connections or [])
        rows, block = cls.build_columns(collection, resolver)

        lines = [f"model {to_identifier(collection.name)} {{"]
        lines.extend(cls.format_rows(rows))
        if block:
            lines.append("")
            lines.extend(f"{cls.INDENT}{attribute}" for attribute in block)
        lines.append("}")
        return "\n".join(lines) + "\n"


def generate_prisma_schema(
    collection: Collection,
    all_collections: list[Collection],
    connections: list[FieldConnection] | None = None,
) -> str:
    """Generate a Prisma model block. See PrismaGenerator.generate."""
    return PrismaGenerator.generate(collection, all_collections, connections)
