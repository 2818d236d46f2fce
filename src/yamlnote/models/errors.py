"""Structured error models with source position tracking."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field, model_validator


class ErrorKind(StrEnum):
    """Closed taxonomy of engine failures."""

    PARSE = "ParseError"
    SCHEMA_COMPILE = "SchemaCompileError"
    FRONTMATTER_PARSE = "FrontmatterParseError"
    FRONTMATTER_VALIDATION = "FrontmatterValidationError"
    SCHEMA_VALIDATION = "SchemaValidationError"
    UNKNOWN = "Unknown"


class SourceSpan(BaseModel):
    """Points to a 1-based location in the source text."""

    line: int
    column: int


class ValidationError(BaseModel):
    """A single reportable problem.  ``line == 0`` means unlocatable."""

    line: int = Field(default=0, ge=0)
    message: str
    path: str = ""
    code: ErrorKind = ErrorKind.UNKNOWN


class ValidationResult(BaseModel):
    """Outcome of a validating operation: success exactly when no errors."""

    success: bool
    errors: list[ValidationError] = []

    @model_validator(mode="after")
    def _success_matches_errors(self) -> ValidationResult:
        if self.success == bool(self.errors):
            raise ValueError("success must be true exactly when errors is empty")
        return self

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(success=True, errors=[])

    @classmethod
    def from_errors(cls, errors: list[ValidationError]) -> ValidationResult:
        return cls(success=not errors, errors=list(errors))

    @classmethod
    def single(
        cls, code: ErrorKind, message: str, *, line: int = 0, path: str = ""
    ) -> ValidationResult:
        return cls(
            success=False,
            errors=[ValidationError(line=line, message=message, path=path, code=code)],
        )


# ---------------------------------------------------------------------------
# Internal exceptions, translated into ValidationResult before they leave
# the engine.
# ---------------------------------------------------------------------------


class DocumentParseError(Exception):
    """Raised when surface text is not a well-formed document."""

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        self.message = message
        self.line = line
        self.column = column
        super().__init__(message)

    def to_error(self, code: ErrorKind = ErrorKind.PARSE, line_offset: int = 0) -> ValidationError:
        line = self.line + line_offset if self.line else 0
        return ValidationError(line=line, message=self.message, path="", code=code)


class YAMLSafetyError(DocumentParseError):
    """Raised when input violates size, depth or node-count limits.

    Distinct from syntax errors: these indicate oversized or hostile input
    (e.g. alias expansion bombs, excessive nesting).
    """


class FrontmatterError(Exception):
    """Raised when a frontmatter block was attempted but is malformed."""

    def __init__(self, kind: ErrorKind, message: str, line: int = 0, path: str = "") -> None:
        self.kind = kind
        self.message = message
        self.line = line
        self.path = path
        super().__init__(message)

    def to_error(self) -> ValidationError:
        return ValidationError(line=self.line, message=self.message, path=self.path, code=self.kind)
