"""Schema self-validation: turns a schema value tree into a Draft 7 validator.

A schema is written in the same YAML surface as documents and uses the
JSON Schema Draft 7 vocabulary.  The schema is first checked against the
Draft 7 metaschema with ``jsonschema``; on top of that a stricter set of
structural rules applies (every subschema declares ``type``, objects list
``properties``, arrays give ``items``, ``required`` names only defined
properties).  Compilation never raises on bad input: every problem is
reported as a ``SchemaCompileError`` so callers can tell a broken schema
apart from a document that fails a good one.
"""

from __future__ import annotations

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError

from yamlnote.models.errors import DocumentParseError, ErrorKind, ValidationError, ValidationResult
from yamlnote.models.path import ROOT, Path, to_pointer
from yamlnote.models.value import (
    BoolValue,
    MappingValue,
    NumberValue,
    SequenceValue,
    StringValue,
    Value,
    describe,
    to_python,
)
from yamlnote.parser.loader import SourceMap, TrackedLoader

COMPILE_ERROR_PREFIX = "Schema compile error: "

VALID_TYPES = ("object", "array", "string", "number", "integer", "boolean", "null")

_STRING_KEYWORDS = frozenset({"pattern", "minLength", "maxLength"})
_OBJECT_KEYWORDS = frozenset({"properties", "required", "additionalProperties"})
_ARRAY_KEYWORDS = frozenset({"items", "minItems", "maxItems"})
_NUMERIC_KEYWORDS = frozenset({"minimum", "maximum"})
_GENERIC_KEYWORDS = frozenset({"type", "enum"})
# Accepted for documentation purposes only; they never constrain a document.
_ANNOTATION_KEYWORDS = frozenset(
    {"$schema", "$id", "$comment", "title", "description", "default", "examples", "format"}
)
RECOGNIZED_KEYWORDS = (
    _STRING_KEYWORDS
    | _OBJECT_KEYWORDS
    | _ARRAY_KEYWORDS
    | _NUMERIC_KEYWORDS
    | _GENERIC_KEYWORDS
    | _ANNOTATION_KEYWORDS
)

_KEYWORD_TYPES: list[tuple[frozenset[str], tuple[str, ...]]] = [
    (_STRING_KEYWORDS, ("string",)),
    (_OBJECT_KEYWORDS, ("object",)),
    (_ARRAY_KEYWORDS, ("array",)),
    (_NUMERIC_KEYWORDS, ("number", "integer")),
]

_BOUNDS = (("minLength", "maxLength"), ("minItems", "maxItems"), ("minimum", "maximum"))

# Same metaschema check as ``Draft7Validator.check_schema``, but iterated so
# every problem is reported instead of the first.  The format checker makes
# ``pattern`` compile as a regular expression.
_META_VALIDATOR = Draft7Validator(
    Draft7Validator.META_SCHEMA, format_checker=Draft7Validator.FORMAT_CHECKER
)


class SchemaCompiler:
    """Checks a schema tree is well-formed and builds its validator."""

    def compile(
        self, schema: Value, source_map: SourceMap | None = None
    ) -> tuple[Draft7Validator | None, list[ValidationError]]:
        """Return ``(validator, errors)``; ``validator`` is ``None`` when errors exist."""
        raw = to_python(schema)
        errors = [
            self._schema_error(SchemaError.create_from(error), source_map)
            for error in _META_VALIDATOR.iter_errors(raw)
        ]
        self._check_node(schema, ROOT, errors, source_map)
        if errors:
            errors.sort(key=lambda e: e.line)
            return None, errors
        return Draft7Validator(raw), errors

    # -- helpers -------------------------------------------------------------

    @staticmethod
    def _schema_error(error: SchemaError, source_map: SourceMap | None) -> ValidationError:
        path = tuple(error.absolute_path)
        return ValidationError(
            line=source_map.line_for(path) if source_map else 0,
            message=f"{COMPILE_ERROR_PREFIX}{error.message}",
            path=to_pointer(path),
            code=ErrorKind.SCHEMA_COMPILE,
        )

    @staticmethod
    def _error(
        errors: list[ValidationError],
        path: Path,
        message: str,
        source_map: SourceMap | None,
    ) -> None:
        errors.append(
            ValidationError(
                line=source_map.line_for(path) if source_map else 0,
                message=f"{COMPILE_ERROR_PREFIX}{message}",
                path=to_pointer(path),
                code=ErrorKind.SCHEMA_COMPILE,
            )
        )

    # -- structural rules ----------------------------------------------------
    #
    # The metaschema already reports malformed keyword values; the rules
    # below only cover what Draft 7 allows but a note schema does not.

    def _check_node(
        self,
        node: Value,
        path: Path,
        errors: list[ValidationError],
        source_map: SourceMap | None,
    ) -> None:
        if isinstance(node, BoolValue):
            # Draft 7 allows boolean schemas; a note schema must spell out its type.
            self._error(errors, path, f"schema must be a mapping, got {describe(node)}", source_map)
            return
        if not isinstance(node, MappingValue):
            return

        for keyword in node.keys():
            if keyword not in RECOGNIZED_KEYWORDS:
                self._error(
                    errors,
                    path + (keyword,),
                    f"'{keyword}' is not a recognized schema keyword",
                    source_map,
                )

        types = _declared_types(node.get("type"))
        if "type" not in node:
            self._error(errors, path, "schema requires a 'type' field", source_map)
        elif types is not None:
            self._check_keyword_consistency(node, types, path, errors, source_map)
            if "object" in types and "properties" not in node:
                self._error(errors, path, "type 'object' requires 'properties'", source_map)
            if "array" in types and "items" not in node:
                self._error(errors, path, "type 'array' requires 'items'", source_map)

        properties = node.get("properties")
        if isinstance(properties, MappingValue):
            for name, sub in properties.items():
                self._check_node(sub, path + ("properties", name), errors, source_map)
        self._check_required(node, path, errors, source_map)

        match node.get("items"):
            case MappingValue() | BoolValue() as items:
                self._check_node(items, path + ("items",), errors, source_map)
            case SequenceValue():
                self._error(
                    errors, path + ("items",), "'items' must be a single schema", source_map
                )
            case _:
                pass

        additional = node.get("additionalProperties")
        if isinstance(additional, MappingValue):
            self._check_node(additional, path + ("additionalProperties",), errors, source_map)

        enum = node.get("enum")
        if isinstance(enum, SequenceValue) and len(enum) == 0:
            self._error(errors, path + ("enum",), "'enum' must be a non-empty list", source_map)

        for low_name, high_name in _BOUNDS:
            low, high = node.get(low_name), node.get(high_name)
            if not (isinstance(low, NumberValue) and isinstance(high, NumberValue)):
                continue
            if low.value > high.value:
                self._error(
                    errors,
                    path + (low_name,),
                    f"'{low_name}' ({low.value}) is greater than '{high_name}' ({high.value})",
                    source_map,
                )

    def _check_keyword_consistency(
        self,
        node: MappingValue,
        types: tuple[str, ...],
        path: Path,
        errors: list[ValidationError],
        source_map: SourceMap | None,
    ) -> None:
        for keyword in node.keys():
            for keywords, applies_to in _KEYWORD_TYPES:
                if keyword in keywords and not any(t in types for t in applies_to):
                    self._error(
                        errors,
                        path + (keyword,),
                        f"'{keyword}' does not apply to type {_type_label(types)}",
                        source_map,
                    )

    def _check_required(
        self,
        node: MappingValue,
        path: Path,
        errors: list[ValidationError],
        source_map: SourceMap | None,
    ) -> None:
        required = node.get("required")
        properties = node.get("properties")
        if not isinstance(required, SequenceValue) or not isinstance(properties, MappingValue):
            return
        for i, item in enumerate(required):
            if isinstance(item, StringValue) and item.value not in properties:
                self._error(
                    errors,
                    path + ("required", i),
                    f"required property '{item.value}' is not defined in 'properties'",
                    source_map,
                )


def _declared_types(raw: Value | None) -> tuple[str, ...] | None:
    """Type names of a ``type`` keyword, or ``None`` when the metaschema rejects it."""
    match raw:
        case StringValue(value=name) if name in VALID_TYPES:
            return (name,)
        case SequenceValue(items=items) if items:
            names = tuple(item.value for item in items if isinstance(item, StringValue))
            if len(names) == len(items) and all(n in VALID_TYPES for n in names):
                return names
    return None


def _type_label(types: tuple[str, ...]) -> str:
    if len(types) == 1:
        return f"'{types[0]}'"
    return "[" + ", ".join(f"'{t}'" for t in types) + "]"


_default_loader = TrackedLoader()
_default_compiler = SchemaCompiler()


def load_schema(
    schema_text: str, loader: TrackedLoader | None = None
) -> tuple[Draft7Validator | None, list[ValidationError]]:
    """Parse and compile schema text.  Parse failures become compile errors."""
    try:
        schema, source_map = (loader or _default_loader).load_string(schema_text)
    except DocumentParseError as exc:
        return None, [
            ValidationError(
                line=exc.line,
                message=f"{COMPILE_ERROR_PREFIX}schema is not valid YAML - {exc.message}",
                path="",
                code=ErrorKind.SCHEMA_COMPILE,
            )
        ]
    return _default_compiler.compile(schema, source_map)


def compile_schema(schema_text: str, loader: TrackedLoader | None = None) -> ValidationResult:
    """Check that *schema_text* is a well-formed schema."""
    _compiled, errors = load_schema(schema_text, loader)
    return ValidationResult.from_errors(errors)
