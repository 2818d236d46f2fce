"""Immutable value tree shared by every engine component.

A parsed document is a closed union of six node types.  Consumers match on
the node classes exhaustively; nothing relies on Python's implicit
truthiness or numeric coercion between booleans and numbers.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ValueKind(StrEnum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


@dataclass(frozen=True)
class NullValue:
    """The YAML ``null`` / empty scalar."""

    @property
    def kind(self) -> ValueKind:
        return ValueKind.NULL


@dataclass(frozen=True)
class BoolValue:
    value: bool

    @property
    def kind(self) -> ValueKind:
        return ValueKind.BOOLEAN


@dataclass(frozen=True)
class NumberValue:
    """An integer or float scalar.  ``1`` and ``1.0`` compare equal."""

    value: int | float

    @property
    def kind(self) -> ValueKind:
        return ValueKind.NUMBER

    @property
    def is_integral(self) -> bool:
        if isinstance(self.value, int):
            return True
        return self.value.is_integer()


@dataclass(frozen=True)
class StringValue:
    value: str

    @property
    def kind(self) -> ValueKind:
        return ValueKind.STRING


@dataclass(frozen=True)
class SequenceValue:
    """Ordered list of values, compared element by element."""

    items: tuple[Value, ...] = ()

    @property
    def kind(self) -> ValueKind:
        return ValueKind.SEQUENCE

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __getitem__(self, index: int) -> Value:
        return self.items[index]

    def with_item(self, index: int, value: Value) -> SequenceValue:
        """Return a copy with the element at *index* replaced."""
        items = list(self.items)
        items[index] = value
        return SequenceValue(tuple(items))

    def inserted(self, index: int, value: Value) -> SequenceValue:
        items = list(self.items)
        items.insert(index, value)
        return SequenceValue(tuple(items))

    def appended(self, value: Value) -> SequenceValue:
        return SequenceValue(self.items + (value,))

    def without(self, index: int) -> SequenceValue:
        return SequenceValue(self.items[:index] + self.items[index + 1 :])


@dataclass(frozen=True, eq=False)
class MappingValue:
    """Ordered mapping with unique string keys.

    Entry order is kept for serialization only: two mappings holding the
    same keys and values are equal regardless of order.
    """

    entries: tuple[tuple[str, Value], ...] = ()
    _index: dict[str, int] = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self) -> None:
        index = {key: i for i, (key, _) in enumerate(self.entries)}
        if len(index) != len(self.entries):
            raise ValueError("Mapping keys must be unique")
        object.__setattr__(self, "_index", index)

    @property
    def kind(self) -> ValueKind:
        return ValueKind.MAPPING

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MappingValue):
            return NotImplemented
        return dict(self.entries) == dict(other.entries)

    def __hash__(self) -> int:
        return hash(frozenset(self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def get(self, key: str, default: Value | None = None) -> Value | None:
        i = self._index.get(key)
        if i is None:
            return default
        return self.entries[i][1]

    def keys(self) -> list[str]:
        return [key for key, _ in self.entries]

    def items(self) -> list[tuple[str, Value]]:
        return list(self.entries)

    def with_entry(self, key: str, value: Value) -> MappingValue:
        """Return a copy with *key* set; existing keys keep their position."""
        i = self._index.get(key)
        if i is None:
            return MappingValue(self.entries + ((key, value),))
        entries = list(self.entries)
        entries[i] = (key, value)
        return MappingValue(tuple(entries))

    def without(self, key: str) -> MappingValue:
        return MappingValue(tuple((k, v) for k, v in self.entries if k != key))


Value = NullValue | BoolValue | NumberValue | StringValue | SequenceValue | MappingValue

NULL = NullValue()


# ---------------------------------------------------------------------------
# Conversion to and from plain Python data (the JSON edge)
# ---------------------------------------------------------------------------


def from_python(data: Any) -> Value:
    """Build a value tree from JSON-compatible Python data.

    Raises ``TypeError`` for objects with no value-tree counterpart.
    """
    if data is None:
        return NULL
    # bool before int: bool is an int subclass
    if isinstance(data, bool):
        return BoolValue(data)
    if isinstance(data, int | float):
        return NumberValue(data)
    if isinstance(data, str):
        return StringValue(data)
    if isinstance(data, dict):
        entries: list[tuple[str, Value]] = []
        for key, item in data.items():
            if not isinstance(key, str):
                raise TypeError(f"Mapping keys must be strings, got {type(key).__name__}")
            entries.append((key, from_python(item)))
        return MappingValue(tuple(entries))
    if isinstance(data, list | tuple):
        return SequenceValue(tuple(from_python(item) for item in data))
    raise TypeError(f"Unsupported value type: {type(data).__name__}")


def to_python(value: Value) -> Any:
    """Convert a value tree into plain dict/list/scalar data."""
    match value:
        case NullValue():
            return None
        case BoolValue(value=v) | NumberValue(value=v) | StringValue(value=v):
            return v
        case SequenceValue(items=items):
            return [to_python(item) for item in items]
        case MappingValue(entries=entries):
            return {key: to_python(item) for key, item in entries}
    raise TypeError(f"Not a value node: {type(value).__name__}")


def identical(a: Value, b: Value) -> bool:
    """Like ``==``, but ``1`` and ``1.0`` differ.  Mapping order is still ignored."""
    match a, b:
        case NumberValue(value=x), NumberValue(value=y):
            return type(x) is type(y) and x == y
        case SequenceValue(items=xs), SequenceValue(items=ys):
            return len(xs) == len(ys) and all(identical(x, y) for x, y in zip(xs, ys))
        case MappingValue(), MappingValue():
            if len(a) != len(b):
                return False
            for key, item in a.items():
                other = b.get(key)
                if other is None or not identical(item, other):
                    return False
            return True
    return a == b


def iter_nodes(
    value: Value, path: tuple[str | int, ...] = ()
) -> Iterator[tuple[tuple[str | int, ...], Value]]:
    """Yield ``(path, node)`` for every node, depth-first, parents first."""
    yield path, value
    match value:
        case SequenceValue(items=items):
            for i, item in enumerate(items):
                yield from iter_nodes(item, path + (i,))
        case MappingValue(entries=entries):
            for key, item in entries:
                yield from iter_nodes(item, path + (key,))
        case _:
            return


def describe(value: Value) -> str:
    """Short human-readable rendering used in error messages."""
    match value:
        case NullValue():
            return "null"
        case BoolValue(value=v):
            return "true" if v else "false"
        case NumberValue(value=v):
            return repr(v)
        case StringValue(value=v):
            text = v if len(v) <= 40 else v[:37] + "..."
            return repr(text)
        case SequenceValue():
            return f"a sequence of {len(value)} item(s)"
        case MappingValue():
            return f"a mapping of {len(value)} key(s)"
    return type(value).__name__
