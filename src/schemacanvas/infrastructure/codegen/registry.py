"""Generator registry - maps generator keys to code generators.

Adding a target framework means registering one more key; neither the schema
model nor its callers change.

Example:
    registry = GeneratorRegistry()
    registry.register(
        "mongoose",
        generate=generate_mongoose_schema,
        label="Mongoose",
        language="javascript",
        file_extension=".js",
    )
    code = registry.generate("mongoose", collection, collections, connections)
"""

from dataclasses import dataclass
from typing import Callable

from schemacanvas.core.logging import get_logger
from schemacanvas.domain.entities import Collection, FieldConnection
from schemacanvas.domain.exceptions import UnsupportedGeneratorError
from schemacanvas.infrastructure.codegen.mongoose_generator import generate_mongoose_schema
from schemacanvas.infrastructure.codegen.naming import to_identifier
from schemacanvas.infrastructure.codegen.prisma_generator import generate_prisma_schema

logger = get_logger(__name__)

GenerateFunction = Callable[[Collection, list[Collection], list[FieldConnection]], str]


@dataclass(frozen=True)
class CodeGenerator:
    """A registered code generator.

    Attributes:
        key: Registry key (e.g. "mongoose").
        generate: Pure function (collection, all collections, connections) -> text.
        label: Display label.
        language: Source-language tag for syntax highlighting.
        file_extension: Extension of generated files, including the dot.
    """

    key: str
    generate: GenerateFunction
    label: str
    language: str
    file_extension: str


class GeneratorRegistry:
    """Registry of code generators, in registration order."""

    def __init__(self) -> None:
        self._generators: dict[str, CodeGenerator] = {}

    def register(
        self,
        key: str,
        generate: GenerateFunction,
        label: str,
        language: str,
        file_extension: str,
    ) -> CodeGenerator:
        """Register (or replace) the generator for `key`."""
        generator = CodeGenerator(
            key=key,
            generate=generate,
            label=label,
            language=language,
            file_extension=file_extension,
        )
        if key in self._generators:
            logger.warning("Replacing registered generator", generator=key)
        self._generators[key] = generator
        return generator

    def unregister(self, key: str) -> bool:
        """Remove a generator. Returns True if it was registered."""
        return self._generators.pop(key, None) is not None

    def get(self, key: str) -> CodeGenerator:
        """Look up a generator.

        Raises:
            UnsupportedGeneratorError: If `key` is not registered.
        """
        generator = self._generators.get(key)
        if generator is None:
            raise UnsupportedGeneratorError(key, self.keys())
        return generator

    def keys(self) -> list[str]:
        return list(self._generators)

    def items(self) -> list[CodeGenerator]:
        return list(self._generators.values())

    def __contains__(self, key: object) -> bool:
        return key in self._generators

    def generate(
        self,
        key: str,
        collection: Collection,
        all_collections: list[Collection],
        connections: list[FieldConnection] | None = None,
    ) -> str:
        """Generate source text for one collection.

        Raises:
            UnsupportedGeneratorError: If `key` is not registered.
        """
        generator = self.get(key)
        code = generator.generate(collection, all_collections, connections or [])
        logger.debug(
            "Code generated",
            generator=key,
            collection_name=collection.name,
            length=len(code),
        )
        return code

    def output_filename(self, key: str, collection: Collection) -> str:
        """File name for a collection's generated code, e.g. `User.js`."""
        return f"{to_identifier(collection.name)}{self.get(key).file_extension}"


def create_default_registry() -> GeneratorRegistry:
    """Registry holding the built-in Mongoose and Prisma generators."""
    registry = GeneratorRegistry()
    registry.register(
        "mongoose",
        generate=generate_mongoose_schema,
        label="Mongoose",
        language="javascript",
        file_extension=".js",
    )
    registry.register(
        "prisma",
        generate=generate_prisma_schema,
        label="Prisma",
        language="prisma",
        file_extension=".prisma",
    )
    return registry


CODE_GENERATORS = create_default_registry()


def generate_code(
    key: str,
    collection: Collection,
    all_collections: list[Collection],
    connections: list[FieldConnection] | None = None,
) -> str:
    """Generate code with the default registry.

    Raises:
        UnsupportedGeneratorError: If `key` is not registered.
    """
    return CODE_GENERATORS.generate(key, collection, all_collections, connections)
