"""YAML loader with position tracking for rich error reporting."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import MarkedYAMLError, YAMLError
from ruamel.yaml.scalarbool import ScalarBoolean

from yamlnote.models.errors import DocumentParseError, SourceSpan, YAMLSafetyError
from yamlnote.models.path import ROOT, Path, format_path
from yamlnote.models.value import (
    NULL,
    BoolValue,
    MappingValue,
    NumberValue,
    SequenceValue,
    StringValue,
    Value,
)

# ---------------------------------------------------------------------------
# Safety limits
# ---------------------------------------------------------------------------

_MAX_DOCUMENT_SIZE = 5_000_000  # 5M characters
_MAX_NODE_COUNT = 50_000
_MAX_DEPTH = 64


@dataclass
class SourceMap:
    """Maps structural paths to their source positions for error reporting."""

    _positions: dict[Path, SourceSpan] = field(default_factory=dict)

    def add(self, path: Path, span: SourceSpan) -> None:
        self._positions[path] = span

    def line_for(self, path: Path) -> int:
        """Line of *path*, or of its nearest recorded ancestor; 0 if unknown."""
        current = tuple(path)
        while True:
            span = self._positions.get(current)
            if span is not None:
                return span.line
            if not current:
                return 0
            current = current[:-1]

    def shifted(self, line_offset: int) -> SourceMap:
        """Copy with every line moved by *line_offset* (embedded documents)."""
        return SourceMap(
            {
                path: SourceSpan(line=span.line + line_offset, column=span.column)
                for path, span in self._positions.items()
            }
        )


@dataclass
class _WalkState:
    nodes: int = 0


class TrackedLoader:
    """YAML loader that produces value trees plus a source position map.

    Uses ruamel.yaml's round-trip loader, which keeps line/column info on
    every parsed collection.  A fresh ``YAML`` instance is built per call
    so one loader can be shared across threads.
    """

    def __init__(
        self,
        max_document_size: int = _MAX_DOCUMENT_SIZE,
        max_node_count: int = _MAX_NODE_COUNT,
        max_depth: int = _MAX_DEPTH,
    ) -> None:
        self._max_document_size = max_document_size
        self._max_node_count = max_node_count
        self._max_depth = max_depth

    @staticmethod
    def _new_yaml() -> YAML:
        yaml = YAML()
        yaml.preserve_quotes = True
        return yaml

    # -- safety checks -------------------------------------------------------

    def _check_document_size(self, content: str) -> None:
        if len(content) > self._max_document_size:
            raise YAMLSafetyError(
                f"YAML document exceeds maximum size "
                f"({len(content):,} chars > {self._max_document_size:,} limit)"
            )

    # -- public loading API --------------------------------------------------

    def load_string(self, content: str) -> tuple[Value, SourceMap]:
        """Parse YAML text into a value tree and its source map.

        Raises ``DocumentParseError`` (or its ``YAMLSafetyError`` subclass).
        An empty document yields a null value.
        """
        self._check_document_size(content)
        try:
            data = self._new_yaml().load(content)
        except MarkedYAMLError as exc:
            raise _parse_error(exc) from exc
        except YAMLError as exc:
            raise DocumentParseError(f"YAML parse error: {exc}") from exc
        except ValueError as exc:
            # e.g. an out-of-range timestamp such as 2024-13-01
            raise DocumentParseError(f"YAML parse error: {exc}") from exc
        except RecursionError as exc:
            # Flow collections nested past the interpreter stack, e.g. "[[[[...".
            raise YAMLSafetyError(
                f"YAML document exceeds maximum nesting depth ({self._max_depth})"
            ) from exc

        source_map = SourceMap()
        if data is None:
            return NULL, source_map
        root_span = _collection_span(data)
        if root_span is not None:
            source_map.add(ROOT, root_span)
        value = self._convert(data, ROOT, 0, source_map, _WalkState())
        return value, source_map

    # -- conversion ----------------------------------------------------------

    def _convert(
        self,
        data: Any,
        path: Path,
        depth: int,
        source_map: SourceMap,
        state: _WalkState,
    ) -> Value:
        """Recursively convert ruamel.yaml nodes, recording positions.

        Node count and depth are enforced here, which also bounds alias
        expansion and self-referencing aliases.
        """
        state.nodes += 1
        if state.nodes > self._max_node_count:
            raise YAMLSafetyError(
                f"YAML document exceeds maximum node count ({self._max_node_count:,})"
            )
        if depth > self._max_depth:
            raise YAMLSafetyError(
                f"YAML document exceeds maximum nesting depth ({self._max_depth})"
            )

        if isinstance(data, dict):
            entries: list[tuple[str, Value]] = []
            seen: set[str] = set()
            for key, item in data.items():
                key_text = _key_text(key, path)
                key_path = path + (key_text,)
                span = _key_span(data, key)
                if key_text in seen:
                    raise DocumentParseError(
                        f"Duplicate mapping key '{key_text}' in {format_path(path)}",
                        line=span.line if span else 0,
                        column=span.column if span else 0,
                    )
                seen.add(key_text)
                if span is not None:
                    source_map.add(key_path, span)
                entries.append(
                    (key_text, self._convert(item, key_path, depth + 1, source_map, state))
                )
            return MappingValue(tuple(entries))

        if isinstance(data, list):
            items: list[Value] = []
            for i, item in enumerate(data):
                item_path = path + (i,)
                span = _item_span(data, i)
                if span is not None:
                    source_map.add(item_path, span)
                items.append(self._convert(item, item_path, depth + 1, source_map, state))
            return SequenceValue(tuple(items))

        return _scalar(data, path)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_error(exc: MarkedYAMLError) -> DocumentParseError:
    mark = exc.problem_mark or exc.context_mark
    line = mark.line + 1 if mark is not None else 0
    column = mark.column + 1 if mark is not None else 0
    problem = exc.problem or exc.context or str(exc)
    if line:
        message = f"YAML parse error: {problem} (line {line}, column {column})"
    else:
        message = f"YAML parse error: {problem}"
    return DocumentParseError(message, line=line, column=column)


def _scalar(data: Any, path: Path) -> Value:
    if data is None:
        return NULL
    # ScalarBoolean is an int subclass; check booleans first
    if isinstance(data, bool | ScalarBoolean):
        return BoolValue(bool(data))
    if isinstance(data, int):
        return NumberValue(int(data))
    if isinstance(data, float):
        return NumberValue(float(data))
    if isinstance(data, str):
        return StringValue(str(data))
    if isinstance(data, datetime.date):
        return StringValue(data.isoformat())
    raise DocumentParseError(
        f"Unsupported YAML node type '{type(data).__name__}' at {format_path(path)}"
    )


def _key_text(key: Any, path: Path) -> str:
    """Render a mapping key as the string the value tree uses."""
    if key is None:
        return "null"
    if isinstance(key, bool | ScalarBoolean):
        return "true" if key else "false"
    if isinstance(key, int):
        return str(int(key))
    if isinstance(key, float):
        return repr(float(key))
    if isinstance(key, str):
        return str(key)
    if isinstance(key, datetime.date):
        return key.isoformat()
    raise DocumentParseError(
        f"Unsupported mapping key type '{type(key).__name__}' in {format_path(path)}"
    )


def _collection_span(data: Any) -> SourceSpan | None:
    try:
        lc = data.lc
        return SourceSpan(line=lc.line + 1, column=lc.col + 1)
    except (AttributeError, TypeError):
        return None


def _key_span(data: Any, key: Any) -> SourceSpan | None:
    try:
        position = data.lc.key(key)
        if position:
            line, col = position
            return SourceSpan(line=line + 1, column=col + 1)
    except (AttributeError, KeyError, TypeError):
        pass
    return _collection_span(data)


def _item_span(data: Any, index: int) -> SourceSpan | None:
    try:
        position = data.lc.item(index)
        if position:
            line, col = position
            return SourceSpan(line=line + 1, column=col + 1)
    except (AttributeError, KeyError, TypeError):
        pass
    return None


def parse(content: str) -> Value:
    """Parse YAML text into a value tree (raises ``DocumentParseError``)."""
    value, _ = TrackedLoader().load_string(content)
    return value
