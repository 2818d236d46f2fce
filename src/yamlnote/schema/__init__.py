"""Schema compilation, caching and document validation."""

from yamlnote.schema.cache import SchemaCache
from yamlnote.schema.compiler import SchemaCompiler, compile_schema, load_schema
from yamlnote.schema.validator import SchemaValidator, validate

__all__ = [
    "SchemaCache",
    "SchemaCompiler",
    "SchemaValidator",
    "compile_schema",
    "load_schema",
    "validate",
]
