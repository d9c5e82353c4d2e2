"""Pytest configuration for all tests."""

import itertools
import json
from typing import Any, Generator

import pytest
import structlog

from schemacanvas.core.config import Settings, get_settings
from schemacanvas.domain.entities import Field
from schemacanvas.domain.services import SchemaModel


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """Drop any logging configuration a test installed (e.g. via the CLI)."""
    yield
    structlog.reset_defaults()
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings for tests, independent of the caller's environment."""
    return Settings(
        _env_file=None,
        environment="testing",
        log_format="console",
        log_level="WARNING",
    )


@pytest.fixture
def model(settings: Settings) -> SchemaModel:
    """Empty schema model with predictable ids (col-1, col-2, conn-1, ...)."""
    collection_ids = itertools.count(1)
    connection_ids = itertools.count(1)
    return SchemaModel(
        settings=settings,
        collection_id_factory=lambda: f"col-{next(collection_ids)}",
        connection_id_factory=lambda: f"conn-{next(connection_ids)}",
    )


@pytest.fixture
def blog_model(model: SchemaModel) -> SchemaModel:
    """User and Post collections with Post.author connected to User._id."""
    user = model.add_collection("User")
    post = model.add_collection("Post", include_timestamps=True)
    model.add_field(user.id, Field(name="email", type="string", required=True, unique=True))
    model.add_field(post.id, Field(name="title", type="string", required=True))
    model.add_field(post.id, Field(name="author", type="objectId", required=True))
    model.add_connection(post.id, "author", user.id, "_id")
    return model


@pytest.fixture
def blog_document() -> dict[str, Any]:
    """Exported document equivalent to the blog_model fixture."""
    return {
        "collections": [
            {
                "id": "col-1",
                "name": "User",
                "fields": [
                    {"name": "_id", "type": "objectId", "required": True, "connections": ["conn-1"]},
                    {"name": "email", "type": "string", "required": True, "unique": True},
                ],
                "position": {"x": 100, "y": 100},
            },
            {
                "id": "col-2",
                "name": "Post",
                "fields": [
                    {"name": "_id", "type": "objectId", "required": True},
                    {"name": "title", "type": "string", "required": True},
                    {
                        "name": "author",
                        "type": "objectId",
                        "required": True,
                        "connections": ["conn-1"],
                    },
                    {"name": "createdAt", "type": "date", "required": True},
                    {"name": "updatedAt", "type": "date", "required": True},
                ],
                "position": {"x": 320, "y": 100},
            },
        ],
        "connections": [
            {
                "id": "conn-1",
                "sourceCollectionId": "col-2",
                "sourceCollectionName": "Post",
                "sourceFieldName": "author",
                "targetCollectionId": "col-1",
                "targetCollectionName": "User",
                "targetFieldName": "_id",
                "type": "reference",
            }
        ],
        "exportedAt": "2024-05-01T12:00:00.000Z",
        "version": "1.0",
    }


@pytest.fixture
def blog_schema_file(tmp_path, blog_document: dict[str, Any]):
    """The blog document written to a temporary file."""
    path = tmp_path / "blog.json"
    path.write_text(json.dumps(blog_document), encoding="utf-8")
    return path
