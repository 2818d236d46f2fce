"""Document engine: the one object callers hold to run every operation.

Each public method translates internal failures into a structured result
so nothing raised inside the parser, validator or patch code reaches the
caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from yamlnote import __version__
from yamlnote.diff.conflicts import detect_conflicts as _detect_conflicts
from yamlnote.diff.engine import apply_patch as _apply_patch
from yamlnote.diff.engine import diff as _diff
from yamlnote.markdown.converter import StructuredConverter
from yamlnote.markdown.frontmatter import FrontmatterExtractor
from yamlnote.models.errors import (
    DocumentParseError,
    ErrorKind,
    FrontmatterError,
    ValidationError,
    ValidationResult,
)
from yamlnote.models.frontmatter import Frontmatter
from yamlnote.models.patch import ConflictReport, Patch
from yamlnote.models.value import MappingValue, Value
from yamlnote.parser.loader import SourceMap, TrackedLoader
from yamlnote.parser.serializer import serialize
from yamlnote.schema.cache import SchemaCache
from yamlnote.schema.validator import validate as _validate
from yamlnote.settings import Settings

logger = logging.getLogger("yamlnote.engine")


@dataclass
class ParseOutcome:
    """Result of ``DocumentEngine.parse``: a tree, or the errors that prevented one."""

    value: Value | None = None
    source_map: SourceMap = field(default_factory=SourceMap)
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.value is not None and not self.errors

    def to_result(self) -> ValidationResult:
        return ValidationResult.from_errors(self.errors)


def _unexpected(operation: str, exc: Exception) -> ValidationError:
    return ValidationError(
        line=0,
        message=f"Unexpected error during {operation}: {exc}",
        path="",
        code=ErrorKind.UNKNOWN,
    )


class DocumentEngine:
    """Parsing, validation, conversion and diffing behind one handle.

    Thread-safe: the loader builds a fresh YAML instance per call and the
    schema cache guards itself with a lock.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._loader = TrackedLoader(
            max_document_size=self._settings.max_document_size,
            max_node_count=self._settings.max_node_count,
            max_depth=self._settings.max_depth,
        )
        self._schemas = SchemaCache(self._settings.schema_cache_size, loader=self._loader)
        self._extractor = FrontmatterExtractor(self._loader)
        self._converter = StructuredConverter(self._extractor)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def schema_cache(self) -> SchemaCache:
        return self._schemas

    # -- documents -----------------------------------------------------------

    def parse(self, text: str) -> ParseOutcome:
        logger.debug("parse (%d chars)", len(text))
        try:
            value, source_map = self._loader.load_string(text)
        except DocumentParseError as exc:
            return ParseOutcome(errors=[exc.to_error(ErrorKind.PARSE)])
        except Exception as exc:
            logger.exception("parse failed unexpectedly")
            return ParseOutcome(errors=[_unexpected("parse", exc)])
        return ParseOutcome(value=value, source_map=source_map)

    def serialize(self, value: Value) -> str:
        return serialize(value)

    # -- schemas -------------------------------------------------------------

    def compile_schema(self, schema_text: str) -> ValidationResult:
        logger.debug("compile_schema (%d chars)", len(schema_text))
        try:
            _compiled, errors = self._schemas.get_or_compile(schema_text)
            return ValidationResult.from_errors(errors)
        except Exception as exc:
            logger.exception("compile_schema failed unexpectedly")
            return ValidationResult.from_errors([_unexpected("schema compilation", exc)])

    def validate(self, text: str, schema_text: str) -> ValidationResult:
        logger.debug("validate (%d chars against %d-char schema)", len(text), len(schema_text))
        try:
            return _validate(text, schema_text, loader=self._loader, cache=self._schemas)
        except Exception as exc:
            logger.exception("validate failed unexpectedly")
            return ValidationResult.from_errors([_unexpected("validation", exc)])

    # -- markdown ------------------------------------------------------------

    def extract_frontmatter(self, markdown: str) -> Frontmatter | None:
        """Return the frontmatter, or ``None`` when absent or malformed."""
        try:
            return self._extractor.extract(markdown)
        except FrontmatterError as exc:
            logger.debug("Ignoring malformed frontmatter: %s", exc.message)
            return None
        except Exception:
            logger.exception("extract_frontmatter failed unexpectedly")
            return None

    def parse_and_validate_frontmatter(self, markdown: str) -> ValidationResult:
        logger.debug("parse_and_validate_frontmatter (%d chars)", len(markdown))
        try:
            return self._extractor.parse_and_validate(markdown)
        except Exception as exc:
            logger.exception("parse_and_validate_frontmatter failed unexpectedly")
            return ValidationResult.from_errors([_unexpected("frontmatter validation", exc)])

    def structured_to_tree(self, markdown: str) -> MappingValue:
        logger.debug("structured_to_tree (%d chars)", len(markdown))
        try:
            return self._converter.to_tree(markdown)
        except Exception:
            logger.exception("structured_to_tree failed unexpectedly")
            return MappingValue()

    def tree_to_structured(self, tree: Value) -> str:
        try:
            return self._converter.to_markdown(tree)
        except Exception:
            logger.exception("tree_to_structured failed unexpectedly")
            return ""

    # -- diff / patch --------------------------------------------------------

    def diff(self, base_text: str, edited_text: str) -> Patch:
        logger.debug("diff (%d -> %d chars)", len(base_text), len(edited_text))
        try:
            return _diff(base_text, edited_text, loader=self._loader)
        except Exception:
            logger.exception("diff failed unexpectedly")
            return []

    def apply_patch(self, text: str, patch: Patch | str) -> str:
        logger.debug("apply_patch (%d chars)", len(text))
        try:
            return _apply_patch(text, patch, loader=self._loader)
        except Exception:
            logger.exception("apply_patch failed unexpectedly")
            return text

    def detect_conflicts(self, left_text: str, right_text: str) -> ConflictReport:
        logger.debug("detect_conflicts (%d / %d chars)", len(left_text), len(right_text))
        try:
            return _detect_conflicts(left_text, right_text, loader=self._loader)
        except Exception:
            logger.exception("detect_conflicts failed unexpectedly")
            return ConflictReport.empty()

    # -- misc ----------------------------------------------------------------

    def version(self) -> str:
        return __version__
