"""Edit scripts (patches) and conflict reports."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from yamlnote.models.path import Path, format_path, from_pointer, to_pointer
from yamlnote.models.value import Value, from_python, to_python

logger = logging.getLogger("yamlnote.patch")


class EditOpKind(StrEnum):
    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"


class PatchFormatError(ValueError):
    """Raised when patch text is not a JSON array of edit operations."""


@dataclass(frozen=True)
class EditOp:
    """One step of an edit script.  ``value`` is ``None`` for removals."""

    op: EditOpKind
    path: Path
    value: Value | None = None

    @property
    def pointer(self) -> str:
        return to_pointer(self.path)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"op": self.op.value, "path": self.pointer}
        if self.op is not EditOpKind.REMOVE and self.value is not None:
            out["value"] = to_python(self.value)
        return out

    def __str__(self) -> str:
        return f"{self.op.value} {format_path(self.path)}"


Patch = list[EditOp]


def patch_to_json(patch: Patch) -> str:
    """Serialize a patch as a JSON array of ``{op, path, value}`` objects."""
    return json.dumps([op.to_dict() for op in patch], ensure_ascii=False)


def edit_op_from_dict(raw: Any) -> EditOp:
    """Build an ``EditOp`` from a decoded JSON object.

    Raises ``ValueError``/``TypeError`` on malformed entries.
    """
    if not isinstance(raw, dict):
        raise TypeError("edit operation must be an object")
    op = EditOpKind(raw.get("op"))
    pointer = raw.get("path")
    if not isinstance(pointer, str):
        raise TypeError("edit operation 'path' must be a string")
    path = from_pointer(pointer)
    if op is EditOpKind.REMOVE:
        return EditOp(op=op, path=path)
    if "value" not in raw:
        raise ValueError(f"'{op.value}' operation requires a 'value'")
    return EditOp(op=op, path=path, value=from_python(raw["value"]))


def patch_from_json(text: str) -> Patch:
    """Decode patch text.  Malformed entries are dropped, not fatal.

    Raises ``PatchFormatError`` when the text is not a JSON array at all.
    """
    try:
        raw = json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise PatchFormatError(f"Patch is not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise PatchFormatError("Patch must be a JSON array of edit operations")

    patch: Patch = []
    for i, entry in enumerate(raw):
        try:
            patch.append(edit_op_from_dict(entry))
        except (TypeError, ValueError) as exc:
            logger.debug("Dropping malformed edit operation #%d: %s", i, exc)
    return patch


@dataclass(frozen=True)
class Conflict:
    """A location where the two copies disagree, with the edited side's value."""

    path: Path
    value: Value | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": to_pointer(self.path),
            "value": to_python(self.value) if self.value is not None else None,
        }


@dataclass
class ConflictReport:
    has_conflict: bool = False
    conflicts: list[Conflict] = field(default_factory=list)

    @classmethod
    def empty(cls) -> ConflictReport:
        return cls(has_conflict=False, conflicts=[])

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasConflict": self.has_conflict,
            "conflicts": [c.to_dict() for c in self.conflicts],
        }
