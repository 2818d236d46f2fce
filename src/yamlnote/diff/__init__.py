"""Structural diff, patch application and conflict detection."""

from yamlnote.diff.conflicts import detect_conflicts
from yamlnote.diff.engine import apply_edit_ops, apply_patch, diff, diff_values

__all__ = [
    "apply_edit_ops",
    "apply_patch",
    "detect_conflicts",
    "diff",
    "diff_values",
]
