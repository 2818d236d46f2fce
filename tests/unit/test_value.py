"""Tests for the value tree and structural paths."""

from __future__ import annotations

import pytest

from yamlnote.models.path import format_path, from_pointer, parse_index, to_pointer
from yamlnote.models.value import (
    NULL,
    BoolValue,
    MappingValue,
    NumberValue,
    SequenceValue,
    StringValue,
    ValueKind,
    describe,
    from_python,
    identical,
    iter_nodes,
    to_python,
)


class TestEquality:
    def test_mapping_equality_ignores_order(self) -> None:
        a = MappingValue((("x", NumberValue(1)), ("y", NumberValue(2))))
        b = MappingValue((("y", NumberValue(2)), ("x", NumberValue(1))))
        assert a == b
        assert hash(a) == hash(b)

    def test_sequence_equality_respects_order(self) -> None:
        assert SequenceValue((NumberValue(1), NumberValue(2))) != SequenceValue(
            (NumberValue(2), NumberValue(1))
        )

    def test_bool_is_not_a_number(self) -> None:
        assert BoolValue(True) != NumberValue(1)
        assert BoolValue(False) != NumberValue(0)

    def test_integral_float_equals_int(self) -> None:
        assert NumberValue(1) == NumberValue(1.0)
        assert NumberValue(1.0).is_integral
        assert not NumberValue(1.5).is_integral

    def test_identical_tells_int_from_float(self) -> None:
        assert not identical(NumberValue(1), NumberValue(1.0))
        assert not identical(from_python({"a": [1]}), from_python({"a": [1.0]}))
        assert identical(from_python({"a": 1, "b": [2.5]}), from_python({"b": [2.5], "a": 1}))
        assert not identical(BoolValue(True), NumberValue(1))

    def test_duplicate_keys_rejected(self) -> None:
        with pytest.raises(ValueError, match="unique"):
            MappingValue((("a", NULL), ("a", NULL)))


class TestTransformations:
    def test_with_entry_keeps_position(self) -> None:
        m = MappingValue((("a", NumberValue(1)), ("b", NumberValue(2))))
        updated = m.with_entry("a", NumberValue(9))
        assert updated.keys() == ["a", "b"]
        assert updated.get("a") == NumberValue(9)
        assert m.get("a") == NumberValue(1)

    def test_with_entry_appends_new_key(self) -> None:
        m = MappingValue((("a", NULL),))
        assert m.with_entry("b", NULL).keys() == ["a", "b"]

    def test_mapping_without(self) -> None:
        m = MappingValue((("a", NULL), ("b", NULL)))
        assert m.without("a").keys() == ["b"]

    def test_sequence_operations(self) -> None:
        s = SequenceValue((StringValue("a"), StringValue("c")))
        assert s.inserted(1, StringValue("b")) == from_python(["a", "b", "c"])
        assert s.appended(StringValue("d")) == from_python(["a", "c", "d"])
        assert s.with_item(0, StringValue("z")) == from_python(["z", "c"])
        assert s.without(0) == from_python(["c"])


class TestPythonConversion:
    def test_from_python_nested(self) -> None:
        value = from_python({"title": "T", "tags": ["a", "b"], "draft": True, "n": None})
        assert isinstance(value, MappingValue)
        assert value.get("title") == StringValue("T")
        assert value.get("tags") == SequenceValue((StringValue("a"), StringValue("b")))
        assert value.get("draft") == BoolValue(True)
        assert value.get("n") == NULL

    def test_bool_checked_before_int(self) -> None:
        assert from_python(True) == BoolValue(True)
        assert from_python(1) == NumberValue(1)

    def test_to_python_round_trip(self) -> None:
        data = {"a": [1, 2.5, "x", None, False], "b": {"c": {}}}
        assert to_python(from_python(data)) == data

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError):
            from_python({1, 2})

    def test_non_string_key(self) -> None:
        with pytest.raises(TypeError, match="keys"):
            from_python({1: "a"})


class TestInspection:
    def test_kinds(self) -> None:
        assert NULL.kind is ValueKind.NULL
        assert BoolValue(True).kind is ValueKind.BOOLEAN
        assert NumberValue(2).kind is ValueKind.NUMBER
        assert StringValue("").kind is ValueKind.STRING
        assert SequenceValue().kind is ValueKind.SEQUENCE
        assert MappingValue().kind is ValueKind.MAPPING

    def test_iter_nodes_depth_first(self) -> None:
        value = from_python({"a": [1, {"b": 2}]})
        paths = [path for path, _ in iter_nodes(value)]
        assert paths == [(), ("a",), ("a", 0), ("a", 1), ("a", 1, "b")]

    def test_describe(self) -> None:
        assert describe(NULL) == "null"
        assert describe(BoolValue(False)) == "false"
        assert describe(StringValue("hi")) == "'hi'"
        assert describe(from_python([1, 2])) == "a sequence of 2 item(s)"


class TestPaths:
    def test_root_pointer(self) -> None:
        assert to_pointer(()) == ""
        assert from_pointer("") == ()

    def test_pointer_rendering(self) -> None:
        assert to_pointer(("sections", 0, "heading")) == "/sections/0/heading"

    def test_pointer_escaping(self) -> None:
        assert to_pointer(("a/b", "c~d")) == "/a~1b/c~0d"
        assert from_pointer("/a~1b/c~0d") == ("a/b", "c~d")

    def test_tokens_stay_strings(self) -> None:
        assert from_pointer("/items/0") == ("items", "0")

    def test_pointer_must_start_with_slash(self) -> None:
        with pytest.raises(ValueError, match="must start"):
            from_pointer("title")

    def test_parse_index(self) -> None:
        assert parse_index("0", 2) == 0
        assert parse_index(1, 2) == 1
        assert parse_index("2", 2) is None
        assert parse_index("2", 2, allow_end=True) == 2
        assert parse_index("-", 2, allow_end=True) == 2
        assert parse_index("-", 2) is None
        assert parse_index("01", 5) is None
        assert parse_index("x", 5) is None

    def test_format_path(self) -> None:
        assert format_path(()) == "<root>"
        assert format_path(("sections", 0, "heading")) == "sections[0].heading"
