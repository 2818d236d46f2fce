"""Tests for the text-in/text-out bindings."""

from __future__ import annotations

import json

from yamlnote import __version__
from yamlnote.service.bindings import TextBindings
from tests.conftest import FRONTMATTER_MARKDOWN, SAMPLE_MARKDOWN, SIMPLE_SCHEMA_YAML


class TestParseAndSerialize:
    def test_parse_success(self, bindings: TextBindings) -> None:
        payload = json.loads(bindings.parse("title: T\ntags: [a]\n"))
        assert payload == {"success": True, "content": {"title": "T", "tags": ["a"]}}

    def test_parse_failure_payload(self, bindings: TextBindings) -> None:
        payload = json.loads(bindings.parse("a: [1\n"))
        assert payload["success"] is False
        error = payload["errors"][0]
        assert set(error) == {"line", "message", "path", "code"}
        assert error["code"] == "ParseError"

    def test_serialize(self, bindings: TextBindings) -> None:
        assert bindings.serialize('{"a": [1, "x"]}') == "a:\n  - 1\n  - x\n"

    def test_serialize_bad_json(self, bindings: TextBindings) -> None:
        payload = json.loads(bindings.serialize("{nope"))
        assert payload["success"] is False
        assert payload["errors"][0]["code"] == "ParseError"

    def test_serialize_too_deep(self, bindings: TextBindings) -> None:
        payload = json.loads(bindings.serialize("[" * 100000 + "]" * 100000))
        assert payload["success"] is False
        assert payload["errors"][0]["code"] == "ParseError"

    def test_serialize_oversized_integer(self, bindings: TextBindings) -> None:
        payload = json.loads(bindings.serialize("1" * 5000))
        assert payload["errors"][0]["code"] == "ParseError"


class TestValidation:
    def test_validate(self, bindings: TextBindings) -> None:
        payload = json.loads(bindings.validate("count: x\n", SIMPLE_SCHEMA_YAML))
        assert payload["success"] is False
        assert {e["path"] for e in payload["errors"]} == {"/title", "/count"}
        assert {e["code"] for e in payload["errors"]} == {"SchemaValidationError"}

    def test_compile_schema(self, bindings: TextBindings) -> None:
        assert json.loads(bindings.compile_schema(SIMPLE_SCHEMA_YAML)) == {
            "success": True,
            "errors": [],
        }
        payload = json.loads(bindings.compile_schema("type: object\n"))
        assert payload["errors"][0]["code"] == "SchemaCompileError"

    def test_frontmatter(self, bindings: TextBindings) -> None:
        assert json.loads(bindings.parse_and_validate_frontmatter(FRONTMATTER_MARKDOWN))["success"]
        payload = json.loads(bindings.parse_and_validate_frontmatter("---\nvalidated: 1\n---\n"))
        assert payload["errors"][0]["code"] == "FrontmatterValidationError"
        assert payload["errors"][0]["line"] == 2


class TestConversion:
    def test_round_trip_through_text(self, bindings: TextBindings) -> None:
        tree_yaml = bindings.structured_to_tree(SAMPLE_MARKDOWN)
        assert tree_yaml.startswith("title: Project notes\n")
        assert bindings.tree_to_structured(tree_yaml) == SAMPLE_MARKDOWN

    def test_tree_to_structured_bad_yaml(self, bindings: TextBindings) -> None:
        payload = json.loads(bindings.tree_to_structured("title: [oops\n"))
        assert payload["success"] is False


class TestDiffBindings:
    def test_diff_and_apply(self, bindings: TextBindings) -> None:
        patch_json = bindings.diff("title: A\ncontent: X\n", "title: B\ncontent: X\n")
        assert json.loads(patch_json) == [{"op": "replace", "path": "/title", "value": "B"}]
        assert bindings.apply_patch("title: A\ncontent: X\n", patch_json) == "title: B\ncontent: X\n"

    def test_diff_of_unparseable(self, bindings: TextBindings) -> None:
        assert json.loads(bindings.diff("a: [1\n", "a: 1\n")) == []

    def test_apply_patch_to_unparseable(self, bindings: TextBindings) -> None:
        assert bindings.apply_patch("a: [1\n", "[]") == "a: [1\n"

    def test_conflicts(self, bindings: TextBindings) -> None:
        payload = json.loads(bindings.detect_conflicts("a: 1\n", "a: 2\n"))
        assert payload == {"hasConflict": True, "conflicts": [{"path": "/a", "value": 2}]}


def test_version(bindings: TextBindings) -> None:
    assert bindings.version() == __version__
