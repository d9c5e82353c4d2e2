"""Unit tests for SchemaFileStore."""

import json
from datetime import date

import pytest

from schemacanvas.domain.exceptions import InvalidSchemaFormatError, UnsupportedGeneratorError
from schemacanvas.infrastructure.storage import SchemaFileStore, export_filename


@pytest.fixture
def store(settings) -> SchemaFileStore:
    return SchemaFileStore(settings=settings)


def test_export_filename():
    """Test the dated default file name."""
    assert export_filename("mongodb-schema", date(2024, 5, 1)) == "mongodb-schema-2024-05-01.json"


def test_load(store, blog_schema_file):
    """Test loading a document file into a model."""
    model = store.load(blog_schema_file)

    assert [c.name for c in model.collections] == ["User", "Post"]
    assert len(model.connections) == 1


def test_load_invalid_file(store, tmp_path):
    """Test invalid documents raise InvalidSchemaFormatError."""
    path = tmp_path / "broken.json"
    path.write_text('{"not":"valid"}', encoding="utf-8")

    with pytest.raises(InvalidSchemaFormatError):
        store.load(path)


def test_save_to_directory_uses_dated_name(store, blog_model, tmp_path):
    """Test saving into a directory picks the default file name."""
    target = store.save(blog_model, tmp_path)

    assert target.parent == tmp_path
    assert target.name.startswith("mongodb-schema-")
    assert target.suffix == ".json"
    assert json.loads(target.read_text(encoding="utf-8"))["version"] == "1.0"


def test_save_then_load(store, blog_model, tmp_path):
    """Test a saved schema loads back unchanged."""
    target = store.save(blog_model, tmp_path / "nested" / "schema.json")

    restored = store.load(target)

    assert restored.collections == blog_model.collections
    assert restored.connections == blog_model.connections


def test_write_generated_code(store, blog_model, tmp_path):
    """Test one file is written per collection."""
    out = tmp_path / "models"

    paths = store.write_generated_code(
        "mongoose", blog_model.collections, blog_model.connections, out
    )

    assert [p.name for p in paths] == ["User.js", "Post.js"]
    assert "ref: 'User'" in (out / "Post.js").read_text(encoding="utf-8")


def test_write_generated_code_subset(store, blog_model, tmp_path):
    """Test output can be limited to selected collections."""
    collections = blog_model.collections

    paths = store.write_generated_code(
        "prisma", collections, blog_model.connections, tmp_path, only=[collections[1]]
    )

    assert [p.name for p in paths] == ["Post.prisma"]


def test_write_generated_code_unknown_generator(store, blog_model, tmp_path):
    """Test nothing is written for an unknown generator."""
    out = tmp_path / "models"

    with pytest.raises(UnsupportedGeneratorError):
        store.write_generated_code("typeorm", blog_model.collections, blog_model.connections, out)

    assert not out.exists()
