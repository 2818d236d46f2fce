"""Canonical YAML rendering of value trees."""

from __future__ import annotations

from io import StringIO
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.scalarstring import DoubleQuotedScalarString, LiteralScalarString

from yamlnote.models.value import (
    BoolValue,
    MappingValue,
    NullValue,
    NumberValue,
    SequenceValue,
    StringValue,
    Value,
)

# Wide enough that ruamel never folds long scalars across lines.
_LINE_WIDTH = 1 << 30

# Line breaks a YAML reader normalizes or folds away unless escaped.
_UNSAFE_BREAKS = frozenset("\r\x85\u2028\u2029")


def _new_yaml() -> YAML:
    yaml = YAML()
    yaml.default_flow_style = False
    yaml.indent(mapping=2, sequence=4, offset=2)
    yaml.width = _LINE_WIDTH
    yaml.allow_unicode = True
    return yaml


def _is_printable(ch: str) -> bool:
    """YAML 1.2 printable set, minus the characters in ``_UNSAFE_BREAKS``."""
    if ch in _UNSAFE_BREAKS:
        return False
    return (
        ch in "\t\n"
        or "\x20" <= ch <= "\x7e"
        or "\xa0" <= ch <= "\ud7ff"
        or "\ue000" <= ch <= "\ufffd"
        or ch >= "\U00010000"
    )


def _needs_escapes(text: str) -> bool:
    """True when *text* only survives a round trip as a double-quoted scalar."""
    return not all(_is_printable(ch) for ch in text)


def _to_node(value: Value) -> Any:
    """Convert a value tree into ruamel.yaml round-trip nodes."""
    match value:
        case NullValue():
            return None
        case BoolValue(value=v) | NumberValue(value=v):
            return v
        case StringValue(value=v):
            if _needs_escapes(v):
                return DoubleQuotedScalarString(v)
            # Multi-line text reads best as a literal block.
            if "\n" in v.rstrip("\n"):
                return LiteralScalarString(v)
            return v
        case SequenceValue(items=items):
            seq = CommentedSeq()
            seq.extend(_to_node(item) for item in items)
            return seq
        case MappingValue(entries=entries):
            node = CommentedMap()
            for key, item in entries:
                if _needs_escapes(key):
                    key = DoubleQuotedScalarString(key)
                node[key] = _to_node(item)
            return node
    raise TypeError(f"Not a value node: {type(value).__name__}")


def serialize(value: Value) -> str:
    """Render *value* as block-style YAML.

    ``parse(serialize(v)) == v`` holds for trees built by ``parse`` or
    ``from_python``: strings that would resolve to another type are quoted
    by the representer, and text with control characters or Unicode line
    separators is written double-quoted with escapes.
    """
    stream = StringIO()
    _new_yaml().dump(_to_node(value), stream)
    return stream.getvalue()
