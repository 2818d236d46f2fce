"""YAML parsing with line fidelity, and canonical serialization."""

from yamlnote.parser.loader import SourceMap, TrackedLoader, parse
from yamlnote.parser.serializer import serialize

__all__ = [
    "SourceMap",
    "TrackedLoader",
    "parse",
    "serialize",
]
