"""Naming and field-selection helpers shared by the code generators."""

import re

from schemacanvas.domain.entities import (
    CREATED_AT_FIELD_NAME,
    UPDATED_AT_FIELD_NAME,
    Collection,
    Field,
    FieldType,
)

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_WORD_SPLIT = re.compile(r"[^A-Za-z0-9_]+")

# Words that cannot name a JavaScript binding in an ES module
JS_RESERVED_WORDS = frozenset(
    {
        "arguments", "await", "break", "case", "catch", "class", "const", "continue",
        "debugger", "default", "delete", "do", "else", "enum", "eval", "export",
        "extends", "false", "finally", "for", "function", "if", "implements", "import",
        "in", "instanceof", "interface", "let", "new", "null", "package", "private",
        "protected", "public", "return", "static", "super", "switch", "this", "throw",
        "true", "try", "typeof", "undefined", "var", "void", "while", "with", "yield",
    }
)


def to_identifier(name: str, fallback: str = "Model") -> str:
    """Turn a free-form name into a source-code identifier.

    Words separated by spaces or punctuation are joined with their first
    letter upper-cased; a leading digit gets an underscore prefix.

    Examples:
        >>> to_identifier("User Copy 2")
        'UserCopy2'
        >>> to_identifier("order-items")
        'orderItems'
    """
    words = [w for w in _WORD_SPLIT.split(name) if w]
    if not words:
        return fallback
    identifier = words[0] + "".join(upper_first(w) for w in words[1:])
    if identifier[0].isdigit():
        identifier = f"_{identifier}"
    return identifier


def to_binding_name(name: str, reserved: frozenset[str] = JS_RESERVED_WORDS) -> str:
    """Identifier for a top-level binding, suffixed with `Model` when reserved.

    Examples:
        >>> to_binding_name("new")
        'newModel'
    """
    identifier = to_identifier(name)
    if identifier in reserved:
        identifier = f"{identifier}Model"
    return identifier


def upper_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def lower_first(value: str) -> str:
    return value[:1].lower() + value[1:]


def is_identifier(name: str) -> bool:
    return bool(IDENTIFIER_PATTERN.match(name))


def uses_auto_timestamps(collection: Collection) -> bool:
    """Whether both system timestamps are present as required date fields.

    In that case generators emit the framework's timestamp option instead of
    explicit definitions.
    """
    found = 0
    for name in (CREATED_AT_FIELD_NAME, UPDATED_AT_FIELD_NAME):
        f = collection.get_field(name)
        if f is not None and f.type == FieldType.DATE.value and f.required:
            found += 1
    return found == 2


def emitted_fields(collection: Collection, auto_timestamps: bool) -> list[Field]:
    """Fields rendered as explicit definitions, in field order.

    `_id` is always implicit; timestamps are dropped when handled by the
    framework's timestamp option.
    """
    return [
        f
        for f in collection.fields
        if not f.is_id and not (auto_timestamps and f.is_timestamp)
    ]
