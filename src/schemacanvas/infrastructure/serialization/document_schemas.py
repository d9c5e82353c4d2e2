"""Pydantic schemas for the JSON schema document.

The document keeps the camelCase keys of the canvas export format. Unknown
keys are allowed everywhere so newer documents survive a round trip.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PositionPayload(BaseModel):
    """Canvas position of a collection."""

    model_config = ConfigDict(extra="allow")

    x: int | float = 0
    y: int | float = 0


class FieldPayload(BaseModel):
    """Definition of a single field in a collection."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(..., description="Field name")
    type: str = Field(..., description="Field type tag")
    required: bool = Field(default=False, description="Whether the field is required")
    unique: bool | None = Field(default=None, description="Uniqueness hint")
    index: bool | None = Field(default=None, description="Index hint")
    default_value: Any = Field(default=None, alias="defaultValue")
    ref: str | None = Field(default=None, description="Referenced collection id")
    array_type: str | None = Field(default=None, alias="arrayType")
    connections: list[str] = Field(default_factory=list)


class CollectionPayload(BaseModel):
    """A collection and its ordered fields."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., min_length=1, description="Collection id")
    name: str = Field(..., description="Collection name")
    fields: list[FieldPayload] = Field(default_factory=list)
    position: PositionPayload | None = None


class ConnectionPayload(BaseModel):
    """A field-to-field reference.

    Documents written by older versions identify collections by name only;
    the ids are optional so those documents still import.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., min_length=1)
    source_collection_id: str | None = Field(default=None, alias="sourceCollectionId")
    source_collection_name: str | None = Field(default=None, alias="sourceCollectionName")
    source_field_name: str = Field(..., alias="sourceFieldName")
    target_collection_id: str | None = Field(default=None, alias="targetCollectionId")
    target_collection_name: str | None = Field(default=None, alias="targetCollectionName")
    target_field_name: str = Field(..., alias="targetFieldName")
    type: str = "reference"


class SchemaDocument(BaseModel):
    """Top-level schema document."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    collections: list[CollectionPayload]
    connections: list[ConnectionPayload] | None = None
    exported_at: str | None = Field(default=None, alias="exportedAt")
    version: str | None = None
