"""Exceptions raised by the schema model, serializer and generator registry."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SchemaValidationError:
    """A single schema validation problem.

    Attributes:
        field: Path of the offending value (e.g. 'fields[2].name').
        message: Human-readable error message.
        code: Machine-readable error code.
    """

    field: str
    message: str
    code: str


class SchemaCanvasError(Exception):
    """Base class for all SchemaCanvas errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(SchemaCanvasError):
    """Raised when a mutation is handed a malformed name, type or layout change."""

    def __init__(self, errors: list[SchemaValidationError]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in errors))

    @classmethod
    def single(cls, field: str, message: str, code: str) -> "ValidationError":
        """Build an error carrying exactly one validation problem."""
        return cls([SchemaValidationError(field=field, message=message, code=code)])

    @property
    def codes(self) -> list[str]:
        """Machine-readable codes of all carried errors."""
        return [e.code for e in self.errors]


class NotFoundError(SchemaCanvasError):
    """Raised when a caller explicitly requires an entity that does not exist."""


class UnsupportedGeneratorError(SchemaCanvasError):
    """Raised when code generation is requested for an unregistered generator key."""

    def __init__(self, key: str, available: list[str] | None = None) -> None:
        self.key = key
        self.available = available or []
        message = f"Unsupported generator '{key}'"
        if self.available:
            message += f". Available generators: {', '.join(self.available)}"
        super().__init__(message)


class InvalidSchemaFormatError(SchemaCanvasError):
    """Raised when an imported schema document fails structural checks."""
