"""Tests for TrackedLoader, SourceMap and the serializer."""

from __future__ import annotations

import pytest

from yamlnote.models.errors import DocumentParseError, YAMLSafetyError
from yamlnote.models.value import (
    NULL,
    BoolValue,
    MappingValue,
    NumberValue,
    SequenceValue,
    StringValue,
    from_python,
)
from yamlnote.parser.loader import TrackedLoader, parse
from yamlnote.parser.serializer import serialize
from tests.conftest import SAMPLE_NOTE_YAML


class TestLoadString:
    def test_sample_note(self, loader: TrackedLoader) -> None:
        value, _ = loader.load_string(SAMPLE_NOTE_YAML)
        assert isinstance(value, MappingValue)
        assert value.get("title") == StringValue("Weekly planning")
        assert value.get("content") == StringValue("Review open issues.\nPlan the next release.\n")
        assert value.get("tags") == SequenceValue((StringValue("planning"), StringValue("release_2")))

    def test_scalar_typing(self, loader: TrackedLoader) -> None:
        value, _ = loader.load_string(
            "b: true\nn: 3\nf: 2.5\ns: hello\nz: null\ne:\nq: 'true'\n"
        )
        assert isinstance(value, MappingValue)
        assert value.get("b") == BoolValue(True)
        assert value.get("n") == NumberValue(3)
        assert value.get("f") == NumberValue(2.5)
        assert value.get("s") == StringValue("hello")
        assert value.get("z") == NULL
        assert value.get("e") == NULL
        assert value.get("q") == StringValue("true")

    def test_timestamp_becomes_string(self, loader: TrackedLoader) -> None:
        value, _ = loader.load_string("created: 2024-01-15\n")
        assert isinstance(value, MappingValue)
        created = value.get("created")
        assert isinstance(created, StringValue)
        assert created.value.startswith("2024-01-15")

    def test_non_string_keys_are_stringified(self, loader: TrackedLoader) -> None:
        value, _ = loader.load_string("1: a\ntrue: b\nnull: c\n")
        assert isinstance(value, MappingValue)
        assert value.keys() == ["1", "true", "null"]

    def test_empty_document_is_null(self, loader: TrackedLoader) -> None:
        assert loader.load_string("")[0] == NULL
        assert loader.load_string("# just a comment\n")[0] == NULL

    def test_anchors_are_expanded(self, loader: TrackedLoader) -> None:
        value, _ = loader.load_string("base: &b\n  x: 1\nother: *b\n")
        assert isinstance(value, MappingValue)
        assert value.get("other") == value.get("base")

    def test_parse_helper(self) -> None:
        assert parse("- 1\n- 2\n") == from_python([1, 2])


class TestParseErrors:
    def test_syntax_error_has_line(self, loader: TrackedLoader) -> None:
        with pytest.raises(DocumentParseError) as exc_info:
            loader.load_string("a: 1\n b: 2\n")
        assert exc_info.value.line == 2
        assert "line 2" in exc_info.value.message

    def test_duplicate_key(self, loader: TrackedLoader) -> None:
        with pytest.raises(DocumentParseError) as exc_info:
            loader.load_string("a: 1\na: 2\n")
        assert exc_info.value.line == 2
        assert "duplicate" in exc_info.value.message

    def test_stringified_key_collision(self, loader: TrackedLoader) -> None:
        with pytest.raises(DocumentParseError, match="Duplicate mapping key '1'"):
            loader.load_string("1: a\n'1': b\n")

    def test_multi_document_stream_rejected(self, loader: TrackedLoader) -> None:
        with pytest.raises(DocumentParseError):
            loader.load_string("a: 1\n---\nb: 2\n")

    def test_to_error(self, loader: TrackedLoader) -> None:
        with pytest.raises(DocumentParseError) as exc_info:
            loader.load_string("a: [1, 2\n")
        error = exc_info.value.to_error()
        assert error.code == "ParseError"
        assert error.path == ""


class TestSafetyLimits:
    def test_document_size(self) -> None:
        loader = TrackedLoader(max_document_size=10)
        with pytest.raises(YAMLSafetyError, match="maximum size"):
            loader.load_string("title: " + "x" * 20)

    def test_depth(self) -> None:
        loader = TrackedLoader(max_depth=3)
        with pytest.raises(YAMLSafetyError, match="depth"):
            loader.load_string("a:\n  b:\n    c:\n      d:\n        e: 1\n")

    def test_node_count(self) -> None:
        loader = TrackedLoader(max_node_count=10)
        items = "".join(f"- {i}\n" for i in range(20))
        with pytest.raises(YAMLSafetyError, match="node count"):
            loader.load_string(items)

    def test_alias_expansion_bomb(self, loader: TrackedLoader) -> None:
        yaml = "a: &a ['lol','lol','lol','lol','lol']\n"
        prev = "a"
        for name in "bcdefghi":
            refs = ",".join([f"*{prev}"] * 5)
            yaml += f"{name}: &{name} [{refs}]\n"
            prev = name
        with pytest.raises(YAMLSafetyError, match="node count"):
            loader.load_string(yaml)

    def test_flow_nesting_past_the_stack(self, loader: TrackedLoader) -> None:
        with pytest.raises(YAMLSafetyError, match="depth"):
            loader.load_string("[" * 1000 + "]" * 1000)

    def test_safety_error_is_parse_error(self) -> None:
        assert issubclass(YAMLSafetyError, DocumentParseError)


class TestSourceMap:
    def test_key_and_item_lines(self, loader: TrackedLoader) -> None:
        _, smap = loader.load_string("a: 1\nb:\n  - x\n  - y\n")
        assert smap.line_for(("a",)) == 1
        assert smap.line_for(("b",)) == 2
        assert smap.line_for(("b", 0)) == 3
        assert smap.line_for(("b", 1)) == 4

    def test_line_for_falls_back_to_ancestor(self, loader: TrackedLoader) -> None:
        _, smap = loader.load_string("a: 1\nb:\n  c: 2\n")
        assert smap.line_for(("b", "missing")) == 2
        assert smap.line_for(("nowhere",)) == 1

    def test_shifted(self, loader: TrackedLoader) -> None:
        _, smap = loader.load_string("a: 1\n")
        assert smap.shifted(4).line_for(("a",)) == 5


class TestSerialize:
    def test_block_style(self) -> None:
        value = from_python({"title": "T", "tags": ["a", "b"], "meta": {"n": 1}})
        assert serialize(value) == "title: T\ntags:\n  - a\n  - b\nmeta:\n  n: 1\n"

    def test_multiline_string_is_literal_block(self) -> None:
        text = serialize(from_python({"content": "line one\nline two\n"}))
        assert text == "content: |\n  line one\n  line two\n"

    @pytest.mark.parametrize(
        "data",
        [
            {"s": "true"},
            {"s": "123"},
            {"s": ""},
            {"s": "null"},
            {"s": "a: b"},
            {"a/b": "~"},
            {"n": 1.5, "b": False, "z": None},
            {"text": "no trailing newline\nsecond"},
            {"nested": [[1, 2], {"x": []}, {}]},
            {"s": "line1\n\x07line2"},
            {"s": "nul\x00"},
            {"s": "\x85a"},
            {"s": "\u2028x\ny"},
            {"s": "a\u2029b"},
            {"s": "carriage\r\nreturn"},
            {"s": "tab\there\nand there"},
            {"bell\x07key": "v"},
        ],
    )
    def test_round_trip(self, data: dict) -> None:
        value = from_python(data)
        assert parse(serialize(value)) == value

    def test_round_trip_sample(self, loader: TrackedLoader) -> None:
        value, _ = loader.load_string(SAMPLE_NOTE_YAML)
        assert parse(serialize(value)) == value

    def test_control_characters_are_escaped(self) -> None:
        text = serialize(from_python({"s": "line1\n\x07line2"}))
        assert text == 's: "line1\\n\\aline2"\n'

    def test_line_separator_is_escaped(self) -> None:
        assert serialize(from_python({"s": "\x85a"})) == 's: "\\Na"\n'
