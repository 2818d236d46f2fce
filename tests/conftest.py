"""Shared test fixtures for yamlnote."""

from __future__ import annotations

from pathlib import Path

import pytest

from yamlnote.parser.loader import TrackedLoader
from yamlnote.service.bindings import TextBindings
from yamlnote.service.engine import DocumentEngine
from yamlnote.settings import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"
NOTE_SCHEMA_PATH = FIXTURES_DIR / "note.schema.yaml"


@pytest.fixture
def loader() -> TrackedLoader:
    return TrackedLoader()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def engine(settings: Settings) -> DocumentEngine:
    return DocumentEngine(settings)


@pytest.fixture
def bindings(engine: DocumentEngine) -> TextBindings:
    return TextBindings(engine)


@pytest.fixture
def note_schema_text() -> str:
    return NOTE_SCHEMA_PATH.read_text(encoding="utf-8")


SAMPLE_NOTE_YAML = """\
id: note-001
title: Weekly planning
content: |
  Review open issues.
  Plan the next release.
tags:
  - planning
  - release_2
metadata:
  author: Ada
  version: 2
  status: draft
"""

INVALID_NOTE_YAML = """\
id: note-002
title: ""
tags:
  - ok
  - not valid!
metadata:
  status: deleted
"""

SIMPLE_SCHEMA_YAML = """\
type: object
properties:
  title:
    type: string
  count:
    type: integer
required:
  - title
"""

SAMPLE_MARKDOWN = """\
# Project notes

Intro paragraph.

## Goals

Ship the parser.

### Stretch

Add a cache.

## Risks

None yet.
"""

FRONTMATTER_MARKDOWN = """\
---
schema_path: ./schemas/note.schema.yaml
validated: true
owner: ada
---
# Title

Body text.
"""
