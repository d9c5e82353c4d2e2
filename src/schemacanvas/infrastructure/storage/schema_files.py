"""Local filesystem storage for schema documents and generated code."""

from datetime import date
from pathlib import Path

from schemacanvas.core.config import Settings, get_settings
from schemacanvas.core.logging import get_logger
from schemacanvas.domain.entities import Collection, FieldConnection
from schemacanvas.domain.services.schema_model import SchemaModel
from schemacanvas.infrastructure.codegen.registry import CODE_GENERATORS, GeneratorRegistry

logger = get_logger(__name__)


def export_filename(prefix: str | None = None, day: date | None = None) -> str:
    """Default export file name, e.g. `mongodb-schema-2024-05-01.json`."""
    if prefix is None:
        prefix = get_settings().export_filename_prefix
    return f"{prefix}-{(day or date.today()).isoformat()}.json"


class SchemaFileStore:
    """Reads and writes schema documents and generated code on local disk."""

    def __init__(
        self,
        settings: Settings | None = None,
        registry: GeneratorRegistry | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.registry = registry or CODE_GENERATORS

    def load(self, path: str | Path) -> SchemaModel:
        """Load a schema document into a new model.

        Raises:
            InvalidSchemaFormatError: If the file is not a valid schema document.
        """
        text = Path(path).read_text(encoding="utf-8")
        model = SchemaModel(settings=self.settings)
        model.import_schema(text)
        logger.info("Schema file loaded", path=str(path))
        return model

    def save(self, model: SchemaModel, path: str | Path) -> Path:
        """Write the model's export document to `path`.

        A directory path gets the default dated file name.
        """
        target = Path(path)
        if target.is_dir():
            target = target / export_filename(self.settings.export_filename_prefix)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(model.export_schema(), encoding="utf-8")
        logger.info("Schema file saved", path=str(target))
        return target

    def write_generated_code(
        self,
        generator_key: str,
        collections: list[Collection],
        connections: list[FieldConnection],
        output_dir: str | Path,
        only: list[Collection] | None = None,
    ) -> list[Path]:
        """Write one `<CollectionName><ext>` file per collection.

        Args:
            generator_key: Registered generator key.
            collections: Every collection of the schema.
            connections: Every connection of the schema.
            output_dir: Directory to write into; created if missing.
            only: Restrict output to these collections.

        Returns:
            Paths of the written files, in collection order.

        Raises:
            UnsupportedGeneratorError: If the generator key is not registered.
        """
        self.registry.get(generator_key)
        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)

        written = []
        for collection in only if only is not None else collections:
            code = self.registry.generate(generator_key, collection, collections, connections)
            target = directory / self.registry.output_filename(generator_key, collection)
            target.write_text(code, encoding="utf-8")
            written.append(target)

        logger.info(
            "Generated code written",
            generator=generator_key,
            file_count=len(written),
            output_dir=str(directory),
        )
        return written
