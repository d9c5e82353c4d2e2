"""Command-line interface for SchemaCanvas.

This module provides commands to inspect exported schema documents and
generate ORM code from them.
"""

from typing import NoReturn

import click

from schemacanvas import __version__
from schemacanvas.core.config import Settings, get_settings
from schemacanvas.core.logging import configure_logging, get_logger
from schemacanvas.domain.exceptions import (
    InvalidSchemaFormatError,
    NotFoundError,
    UnsupportedGeneratorError,
)
from schemacanvas.infrastructure.codegen import CODE_GENERATORS
from schemacanvas.infrastructure.storage import SchemaFileStore


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="SchemaCanvas")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides SCHEMACANVAS_LOG_LEVEL)",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """SchemaCanvas - MongoDB schema designer toolkit.

    Works on schema documents exported from the designer canvas.
    """
    settings = get_settings()
    if log_level is not None:
        settings = settings.model_copy(update={"log_level": log_level})
    configure_logging(settings)
    ctx.obj = settings


@cli.command()
def generators() -> None:
    """List the registered code generators."""
    for generator in CODE_GENERATORS.items():
        click.echo(
            f"{generator.key:<10} {generator.label:<10} "
            f"{generator.language:<12} {generator.file_extension}"
        )


@cli.command()
@click.argument("schema_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--generator",
    "-g",
    "generator_key",
    type=str,
    default=None,
    help="Generator key (defaults to SCHEMACANVAS_DEFAULT_GENERATOR)",
)
@click.option(
    "--collection",
    "-c",
    "collection_names",
    multiple=True,
    help="Only generate these collections (repeatable)",
)
@click.option(
    "--out",
    "-o",
    "output_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Write one file per collection into this directory instead of stdout",
)
@click.pass_obj
def generate(
    settings: Settings,
    schema_file: str,
    generator_key: str | None,
    collection_names: tuple[str, ...],
    output_dir: str | None,
) -> None:
    """Generate ORM code from an exported schema document."""
    logger = get_logger(__name__)
    key = generator_key or settings.default_generator
    store = SchemaFileStore(settings=settings)

    try:
        CODE_GENERATORS.get(key)
        model = store.load(schema_file)
        collections = model.collections
        connections = model.connections
        selected = (
            [model.require_collection_by_name(name) for name in collection_names]
            if collection_names
            else collections
        )

        if output_dir is not None:
            paths = store.write_generated_code(
                key, collections, connections, output_dir, only=selected
            )
            for path in paths:
                click.echo(str(path))
            return

        outputs = [
            CODE_GENERATORS.generate(key, collection, collections, connections)
            for collection in selected
        ]
        click.echo("\n".join(outputs), nl=False)
    except (InvalidSchemaFormatError, UnsupportedGeneratorError, NotFoundError) as e:
        logger.error("Code generation failed", schema_file=schema_file, error=e.message)
        _fail(e.message)


@cli.command()
@click.argument("schema_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def validate(settings: Settings, schema_file: str) -> None:
    """Check an exported schema document against the schema invariants."""
    try:
        model = SchemaFileStore(settings=settings).load(schema_file)
    except InvalidSchemaFormatError as e:
        _fail(e.message)

    issues = model.validate()
    if not issues:
        click.echo(
            f"OK: {len(model.collections)} collections, {len(model.connections)} connections"
        )
        return

    for issue in issues:
        click.echo(f"{issue.field}: {issue.message} [{issue.code}]", err=True)
    _fail(f"{len(issues)} problem(s) found")


@cli.command()
@click.pass_obj
def info(settings: Settings) -> None:
    """Display SchemaCanvas configuration."""
    click.echo(f"""
SchemaCanvas v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Generator:    {settings.default_generator}
  Generators:   {', '.join(CODE_GENERATORS.keys())}

Export:
  Version:      {settings.schema_version}
  Indent:       {settings.export_indent}
  File prefix:  {settings.export_filename_prefix}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `schemacanvas` command is run
    or when using `python -m schemacanvas`.
    """
    cli()


if __name__ == "__main__":
    main()
