"""Local file storage for schema documents and generated code."""

from schemacanvas.infrastructure.storage.schema_files import SchemaFileStore, export_filename

__all__ = ["SchemaFileStore", "export_filename"]
