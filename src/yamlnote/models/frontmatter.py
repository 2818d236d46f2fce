"""Frontmatter metadata extracted from the head of a markdown document."""

from __future__ import annotations

from dataclasses import dataclass, field

from yamlnote.models.value import MappingValue

SCHEMA_PATH_KEY = "schema_path"
VALIDATED_KEY = "validated"


@dataclass(frozen=True)
class Frontmatter:
    """Recognized keys plus every key of the block, unknown ones untouched."""

    schema_path: str | None = None
    validated: bool = True
    fields: MappingValue = field(default_factory=MappingValue)
    raw: str = ""
    body: str = ""
    line_count: int = 0

    @property
    def extra_keys(self) -> list[str]:
        return [k for k in self.fields.keys() if k not in (SCHEMA_PATH_KEY, VALIDATED_KEY)]
