"""Text-in/text-out bindings over ``DocumentEngine``.

Every operation takes strings and returns a string, so hosts that can only
exchange text (foreign-function callers, message queues, the CLI) drive
the engine without touching Python objects.  Failures are reported as::

    {"success": false, "errors": [{"line", "message", "path", "code"}]}

No binding raises.
"""

from __future__ import annotations

import json
import logging

from yamlnote.models.errors import ErrorKind, ValidationError, ValidationResult
from yamlnote.models.patch import patch_to_json
from yamlnote.models.value import from_python, to_python
from yamlnote.service.engine import DocumentEngine

logger = logging.getLogger("yamlnote.bindings")


def _failure(errors: list[ValidationError]) -> str:
    return ValidationResult.from_errors(errors).model_dump_json()


def _single_failure(code: ErrorKind, message: str) -> str:
    return ValidationResult.single(code, message).model_dump_json()


class TextBindings:
    """String-only façade used by non-Python hosts."""

    def __init__(self, engine: DocumentEngine | None = None) -> None:
        self._engine = engine or DocumentEngine()

    @property
    def engine(self) -> DocumentEngine:
        return self._engine

    def parse(self, text: str) -> str:
        """``{"success": true, "content": <tree>}`` or the failure payload."""
        outcome = self._engine.parse(text)
        if outcome.value is None:
            return _failure(outcome.errors)
        return json.dumps({"success": True, "content": to_python(outcome.value)}, ensure_ascii=False)

    def serialize(self, tree_json: str) -> str:
        """Render a JSON-encoded tree as YAML text."""
        try:
            value = from_python(json.loads(tree_json))
        except (ValueError, TypeError) as exc:
            # JSONDecodeError is a ValueError, as is an over-long integer literal.
            return _single_failure(ErrorKind.PARSE, f"Tree is not valid JSON: {exc}")
        except RecursionError:
            return _single_failure(ErrorKind.PARSE, "Tree is nested too deeply")
        try:
            return self._engine.serialize(value)
        except Exception as exc:
            logger.exception("serialize failed unexpectedly")
            return _single_failure(ErrorKind.UNKNOWN, f"Unexpected error during serialization: {exc}")

    def validate(self, text: str, schema_text: str) -> str:
        return self._engine.validate(text, schema_text).model_dump_json()

    def compile_schema(self, schema_text: str) -> str:
        return self._engine.compile_schema(schema_text).model_dump_json()

    def parse_and_validate_frontmatter(self, markdown: str) -> str:
        return self._engine.parse_and_validate_frontmatter(markdown).model_dump_json()

    def structured_to_tree(self, markdown: str) -> str:
        """Convert markdown to the YAML text of its heading tree."""
        return self._engine.serialize(self._engine.structured_to_tree(markdown))

    def tree_to_structured(self, tree_text: str) -> str:
        """Convert the YAML text of a heading tree back to markdown."""
        outcome = self._engine.parse(tree_text)
        if outcome.value is None:
            return _failure(outcome.errors)
        return self._engine.tree_to_structured(outcome.value)

    def diff(self, base_text: str, edited_text: str) -> str:
        return patch_to_json(self._engine.diff(base_text, edited_text))

    def apply_patch(self, text: str, patch_json: str) -> str:
        return self._engine.apply_patch(text, patch_json)

    def detect_conflicts(self, left_text: str, right_text: str) -> str:
        report = self._engine.detect_conflicts(left_text, right_text)
        return json.dumps(report.to_dict(), ensure_ascii=False)

    def version(self) -> str:
        return self._engine.version()
