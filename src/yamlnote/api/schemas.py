"""API request/response Pydantic schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from yamlnote.models.errors import ValidationError
from yamlnote.models.patch import EditOpKind


class ParseRequest(BaseModel):
    """Request body for POST /parse."""

    text: str = Field(description="YAML document text")


class ParseResponse(BaseModel):
    """Response body for POST /parse."""

    success: bool
    content: Any = None
    errors: list[ValidationError] = []


class SerializeRequest(BaseModel):
    """Request body for POST /serialize."""

    content: Any = Field(description="Value tree as JSON data")


class SerializeResponse(BaseModel):
    """Response body for POST /serialize."""

    success: bool
    text: str | None = None
    errors: list[ValidationError] = []


class ValidateRequest(BaseModel):
    """Request body for POST /validate."""

    text: str = Field(description="YAML document text to validate")
    schema_text: str = Field(description="YAML schema text")


class SchemaCompileRequest(BaseModel):
    """Request body for POST /schema/compile."""

    schema_text: str = Field(description="YAML schema text")


class MarkdownRequest(BaseModel):
    """Request body for POST /frontmatter/validate and POST /convert/to-tree."""

    markdown: str


class TreeResponse(BaseModel):
    """Response body for POST /convert/to-tree."""

    tree: Any
    yaml: str


class TreeRequest(BaseModel):
    """Request body for POST /convert/to-markdown."""

    tree: Any = Field(description="Heading tree as JSON data")


class MarkdownResponse(BaseModel):
    """Response body for POST /convert/to-markdown."""

    markdown: str


class DiffRequest(BaseModel):
    """Request body for POST /diff and POST /conflicts."""

    base: str
    edited: str


class EditOpModel(BaseModel):
    """One edit operation as exchanged over the wire."""

    op: EditOpKind
    path: str = Field(description="JSON Pointer to the target node")
    value: Any = None


class DiffResponse(BaseModel):
    """Response body for POST /diff."""

    patch: list[EditOpModel] = []


class PatchRequest(BaseModel):
    """Request body for POST /patch."""

    text: str
    patch: list[EditOpModel] = []


class PatchResponse(BaseModel):
    """Response body for POST /patch."""

    text: str


class ConflictDetail(BaseModel):
    path: str
    value: Any = None


class ConflictResponse(BaseModel):
    """Response body for POST /conflicts."""

    model_config = ConfigDict(populate_by_name=True)

    has_conflict: bool = Field(alias="hasConflict")
    conflicts: list[ConflictDetail] = []


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    status: str
    version: str
