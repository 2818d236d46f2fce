"""Conflict detection between two diverged copies of a document."""

from __future__ import annotations

import logging

from yamlnote.diff.engine import diff_values
from yamlnote.models.errors import DocumentParseError
from yamlnote.models.patch import Conflict, ConflictReport, EditOpKind
from yamlnote.parser.loader import TrackedLoader

logger = logging.getLogger("yamlnote.diff")

_default_loader = TrackedLoader()


def detect_conflicts(
    left_text: str,
    right_text: str,
    *,
    loader: TrackedLoader | None = None,
) -> ConflictReport:
    """Report every path where *right_text* departs from *left_text*.

    Each conflict carries the right-hand value at that path (``None`` where
    the right side removed it).  Deciding whether two edits against a
    common ancestor overlap is left to the caller.
    """
    loader = loader or _default_loader
    try:
        left, _ = loader.load_string(left_text)
        right, _ = loader.load_string(right_text)
    except DocumentParseError as exc:
        logger.debug("Not checking unparseable document for conflicts: %s", exc.message)
        return ConflictReport.empty()

    conflicts = [
        Conflict(path=op.path, value=None if op.op is EditOpKind.REMOVE else op.value)
        for op in diff_values(left, right)
    ]
    return ConflictReport(has_conflict=bool(conflicts), conflicts=conflicts)
