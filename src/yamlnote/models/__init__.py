"""Domain models for the yamlnote document engine."""

from yamlnote.models.errors import (
    DocumentParseError,
    ErrorKind,
    FrontmatterError,
    SourceSpan,
    ValidationError,
    ValidationResult,
    YAMLSafetyError,
)
from yamlnote.models.frontmatter import Frontmatter
from yamlnote.models.patch import (
    Conflict,
    ConflictReport,
    EditOp,
    EditOpKind,
    Patch,
    PatchFormatError,
)
from yamlnote.models.path import Path, from_pointer, to_pointer
from yamlnote.models.value import (
    BoolValue,
    MappingValue,
    NullValue,
    NumberValue,
    SequenceValue,
    StringValue,
    Value,
    ValueKind,
)

__all__ = [
    "BoolValue",
    "Conflict",
    "ConflictReport",
    "DocumentParseError",
    "EditOp",
    "EditOpKind",
    "ErrorKind",
    "Frontmatter",
    "FrontmatterError",
    "MappingValue",
    "NullValue",
    "NumberValue",
    "Patch",
    "PatchFormatError",
    "Path",
    "SequenceValue",
    "SourceSpan",
    "StringValue",
    "ValidationError",
    "ValidationResult",
    "Value",
    "ValueKind",
    "YAMLSafetyError",
    "from_pointer",
    "to_pointer",
]
