"""Document validation against a compiled schema.

Validation runs ``jsonschema``'s Draft 7 validator over the plain Python
form of the document.  Every violation is reported in one pass, each with
the structural path of the offending node and, when the source map knows
it, its line.  Errors come back in document order.
"""

from __future__ import annotations

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError as SchemaViolation

from yamlnote.models.errors import DocumentParseError, ErrorKind, ValidationError, ValidationResult
from yamlnote.models.path import Path, to_pointer
from yamlnote.models.value import Value, to_python
from yamlnote.parser.loader import SourceMap, TrackedLoader
from yamlnote.schema.cache import SchemaCache
from yamlnote.schema.compiler import load_schema


class SchemaValidator:
    """Validates a value tree with a compiled ``Draft7Validator``."""

    def validate(
        self,
        value: Value,
        schema: Draft7Validator,
        source_map: SourceMap | None = None,
    ) -> list[ValidationError]:
        errors: list[ValidationError] = []
        reported: set[tuple[Path, str]] = set()
        for violation in schema.iter_errors(to_python(value)):
            for path, message in self._locate(violation, reported):
                errors.append(
                    ValidationError(
                        line=source_map.line_for(path) if source_map else 0,
                        message=message,
                        path=to_pointer(path),
                        code=ErrorKind.SCHEMA_VALIDATION,
                    )
                )
        errors.sort(key=lambda e: e.line)
        return errors

    @staticmethod
    def _locate(
        violation: SchemaViolation, reported: set[tuple[Path, str]]
    ) -> list[tuple[Path, str]]:
        """Paths and messages for one violation.

        Object-level keywords point at the offending key instead of its
        parent: a missing ``required`` property names the field, and each
        disallowed additional property gets its own entry.
        """
        path: Path = tuple(violation.absolute_path)
        match violation.validator:
            case "required":
                # One violation per missing name, in ``required`` order.
                for name in violation.validator_value:
                    if name not in violation.instance and (path, name) not in reported:
                        reported.add((path, name))
                        return [(path + (name,), violation.message)]
            case "additionalProperties" if violation.validator_value is False:
                defined = violation.schema.get("properties", {})
                return [
                    (path + (key,), _unexpected_property(key))
                    for key in violation.instance
                    if key not in defined
                ]
        return [(path, violation.message)]


def _unexpected_property(key: str) -> str:
    return f"Additional properties are not allowed ('{key}' was unexpected)"


_default_loader = TrackedLoader()
_default_validator = SchemaValidator()


def validate(
    document_text: str,
    schema_text: str,
    *,
    loader: TrackedLoader | None = None,
    cache: SchemaCache | None = None,
) -> ValidationResult:
    """Parse *document_text* and check it against *schema_text*.

    A document that does not parse yields a single ``ParseError``; a schema
    that does not compile yields its ``SchemaCompileError`` list.
    """
    loader = loader or _default_loader
    try:
        document, source_map = loader.load_string(document_text)
    except DocumentParseError as exc:
        return ValidationResult.from_errors([exc.to_error(ErrorKind.PARSE)])

    if cache is not None:
        compiled, errors = cache.get_or_compile(schema_text)
    else:
        compiled, errors = load_schema(schema_text, loader)
    if compiled is None:
        return ValidationResult.from_errors(errors)

    return ValidationResult.from_errors(_default_validator.validate(document, compiled, source_map))
