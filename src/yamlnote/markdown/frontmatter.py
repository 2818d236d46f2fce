"""Frontmatter extraction: the ``---`` delimited YAML block heading a markdown file."""

from __future__ import annotations

from dataclasses import dataclass

from yamlnote.models.errors import (
    DocumentParseError,
    ErrorKind,
    FrontmatterError,
    ValidationError,
    ValidationResult,
)
from yamlnote.models.frontmatter import SCHEMA_PATH_KEY, VALIDATED_KEY, Frontmatter
from yamlnote.models.path import to_pointer
from yamlnote.models.value import BoolValue, MappingValue, NullValue, StringValue, describe
from yamlnote.parser.loader import SourceMap, TrackedLoader

FRONTMATTER_MARKER = "---"


@dataclass(frozen=True)
class _Block:
    raw: str
    body: str
    line_count: int


def _is_marker(line: str) -> bool:
    return line.rstrip() == FRONTMATTER_MARKER


def split_block(markdown: str) -> _Block | None:
    """Locate the frontmatter block.  It must open on the very first line.

    Returns ``None`` when the document does not start with a marker and
    raises ``FrontmatterError`` when the opening marker is never closed.
    """
    lines = markdown.split("\n")
    if not lines or not _is_marker(lines[0]):
        return None
    for i in range(1, len(lines)):
        if _is_marker(lines[i]):
            raw = "\n".join(line.rstrip("\r") for line in lines[1:i])
            body = "\n".join(lines[i + 1 :])
            return _Block(raw=raw, body=body, line_count=i + 1)
    raise FrontmatterError(
        ErrorKind.FRONTMATTER_VALIDATION,
        "Frontmatter block is not terminated by a closing '---' line",
        line=1,
    )


class FrontmatterExtractor:
    """Parses frontmatter blocks with the tracked YAML loader."""

    def __init__(self, loader: TrackedLoader | None = None) -> None:
        self._loader = loader or TrackedLoader()

    def _load_fields(self, block: _Block) -> tuple[MappingValue, SourceMap]:
        try:
            value, source_map = self._loader.load_string(block.raw)
        except DocumentParseError as exc:
            # Block content starts on markdown line 2.
            raise FrontmatterError(
                ErrorKind.FRONTMATTER_PARSE,
                f"Frontmatter is not valid YAML: {exc.message}",
                line=exc.line + 1 if exc.line else 0,
            ) from exc
        source_map = source_map.shifted(1)
        match value:
            case MappingValue():
                return value, source_map
            case NullValue():
                return MappingValue(), source_map
            case _:
                raise FrontmatterError(
                    ErrorKind.FRONTMATTER_VALIDATION,
                    f"Frontmatter must be a mapping of keys to values, got {describe(value)}",
                    line=2,
                )

    @staticmethod
    def _read_fields(
        fields: MappingValue, source_map: SourceMap
    ) -> tuple[str | None, bool, list[ValidationError]]:
        """Interpret the recognized keys, collecting every problem."""
        errors: list[ValidationError] = []

        def _fail(key: str, message: str) -> None:
            errors.append(
                ValidationError(
                    line=source_map.line_for((key,)),
                    message=message,
                    path=to_pointer((key,)),
                    code=ErrorKind.FRONTMATTER_VALIDATION,
                )
            )

        schema_path: str | None = None
        match fields.get(SCHEMA_PATH_KEY):
            case None:
                pass
            case StringValue(value=text) if text.strip():
                schema_path = text
            case StringValue() | NullValue():
                _fail(SCHEMA_PATH_KEY, "'schema_path' is empty")
            case other:
                _fail(SCHEMA_PATH_KEY, f"'schema_path' must be a string, got {describe(other)}")

        validated = True
        match fields.get(VALIDATED_KEY):
            case None:
                pass
            case BoolValue(value=flag):
                validated = flag
            case other:
                _fail(
                    VALIDATED_KEY,
                    f"'validated' must be the boolean literal true or false, got {describe(other)}",
                )

        return schema_path, validated, errors

    def extract(self, markdown: str) -> Frontmatter | None:
        """Return the document's frontmatter, or ``None`` when it has none.

        Raises ``FrontmatterError`` for a block that was attempted but is
        malformed (unterminated, not YAML, not a mapping, bad field values).
        """
        block = split_block(markdown)
        if block is None:
            return None
        fields, source_map = self._load_fields(block)
        schema_path, validated, errors = self._read_fields(fields, source_map)
        if errors:
            first = errors[0]
            raise FrontmatterError(first.code, first.message, line=first.line, path=first.path)
        return Frontmatter(
            schema_path=schema_path,
            validated=validated,
            fields=fields,
            raw=block.raw,
            body=block.body,
            line_count=block.line_count,
        )

    def parse_and_validate(self, markdown: str) -> ValidationResult:
        """Check the frontmatter block, reporting every problem found.

        A document without a block is a ``FrontmatterParseError``; a block
        without ``schema_path`` is valid.
        """
        try:
            block = split_block(markdown)
            if block is None:
                return ValidationResult.single(
                    ErrorKind.FRONTMATTER_PARSE,
                    "Frontmatter block not found: the document must start with a '---' line",
                )
            fields, source_map = self._load_fields(block)
        except FrontmatterError as exc:
            return ValidationResult.from_errors([exc.to_error()])
        _schema_path, _validated, errors = self._read_fields(fields, source_map)
        return ValidationResult.from_errors(errors)


_default_extractor = FrontmatterExtractor()


def extract_frontmatter(markdown: str) -> Frontmatter | None:
    return _default_extractor.extract(markdown)


def parse_and_validate_frontmatter(markdown: str) -> ValidationResult:
    return _default_extractor.parse_and_validate(markdown)
