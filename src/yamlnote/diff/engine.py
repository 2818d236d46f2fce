"""Structural diff between value trees, and patch application.

``diff_values`` walks both trees in lock-step and emits the ops in an
order that ``apply_edit_ops`` can replay against the base: within a
sequence, removals run from the highest index down and additions run
upwards, so no op invalidates the index of a later one.
"""

from __future__ import annotations

import logging

from yamlnote.models.errors import DocumentParseError
from yamlnote.models.patch import EditOp, EditOpKind, Patch, PatchFormatError, patch_from_json
from yamlnote.models.path import ROOT, Path, PathToken, format_path, is_index_token, parse_index
from yamlnote.models.value import MappingValue, SequenceValue, Value, identical
from yamlnote.parser.loader import TrackedLoader
from yamlnote.parser.serializer import serialize

logger = logging.getLogger("yamlnote.diff")


class _SkippedOp(Exception):
    """An op that does not fit the tree it is applied to."""


# -- diff ---------------------------------------------------------------------


def diff_values(base: Value, edited: Value, path: Path = ROOT) -> Patch:
    """Return the edit script turning *base* into *edited*."""
    ops: Patch = []
    _diff(base, edited, path, ops)
    return ops


def _diff(base: Value, edited: Value, path: Path, ops: Patch) -> None:
    # ``1`` -> ``1.0`` is an edit even though the two values compare equal.
    if identical(base, edited):
        return
    match base, edited:
        case MappingValue(), MappingValue():
            for key, item in base.items():
                other = edited.get(key)
                if other is not None:
                    _diff(item, other, path + (key,), ops)
            for key in base.keys():
                if key not in edited:
                    ops.append(EditOp(EditOpKind.REMOVE, path + (key,)))
            for key, item in edited.items():
                if key not in base:
                    ops.append(EditOp(EditOpKind.ADD, path + (key,), item))
        case SequenceValue(), SequenceValue():
            common = min(len(base), len(edited))
            for i in range(common):
                _diff(base[i], edited[i], path + (i,), ops)
            for i in range(len(base) - 1, common - 1, -1):
                ops.append(EditOp(EditOpKind.REMOVE, path + (i,)))
            for i in range(common, len(edited)):
                ops.append(EditOp(EditOpKind.ADD, path + (i,), edited[i]))
        case _:
            ops.append(EditOp(EditOpKind.REPLACE, path, edited))


# -- apply --------------------------------------------------------------------


def _empty_container(next_token: PathToken) -> Value:
    return SequenceValue() if is_index_token(next_token) else MappingValue()


def _add(node: Value, path: Path, new: Value) -> Value:
    if not path:
        return new
    token, rest = path[0], path[1:]
    match node:
        case MappingValue():
            key = str(token)
            if not rest:
                return node.with_entry(key, new)
            child = node.get(key)
            if child is None:
                child = _empty_container(rest[0])
            return node.with_entry(key, _add(child, rest, new))
        case SequenceValue():
            index = parse_index(token, len(node), allow_end=True)
            if index is None:
                raise _SkippedOp(f"index {token!r} is out of range for {len(node)} item(s)")
            if not rest:
                return node.inserted(index, new)
            if index == len(node):
                return node.appended(_add(_empty_container(rest[0]), rest, new))
            return node.with_item(index, _add(node[index], rest, new))
        case _:
            raise _SkippedOp(f"cannot add below a {node.kind} value")


def _child(node: Value, token: PathToken) -> tuple[Value, PathToken]:
    """Resolve one existing step, returning the child and its normalized token."""
    match node:
        case MappingValue():
            key = str(token)
            child = node.get(key)
            if child is None:
                raise _SkippedOp(f"key {key!r} does not exist")
            return child, key
        case SequenceValue():
            index = parse_index(token, len(node))
            if index is None:
                raise _SkippedOp(f"index {token!r} is out of range for {len(node)} item(s)")
            return node[index], index
        case _:
            raise _SkippedOp(f"a {node.kind} value has no children")


def _set_child(node: Value, token: PathToken, value: Value) -> Value:
    match node:
        case MappingValue():
            return node.with_entry(str(token), value)
        case SequenceValue():
            return node.with_item(int(token), value)
    raise _SkippedOp(f"a {node.kind} value has no children")


def _remove(node: Value, path: Path) -> Value:
    token, rest = path[0], path[1:]
    child, token = _child(node, token)
    if rest:
        return _set_child(node, token, _remove(child, rest))
    match node:
        case MappingValue():
            return node.without(str(token))
        case SequenceValue():
            return node.without(int(token))
    raise _SkippedOp(f"a {node.kind} value has no children")


def _replace(node: Value, path: Path, new: Value) -> Value:
    if not path:
        return new
    token, rest = path[0], path[1:]
    child, token = _child(node, token)
    return _set_child(node, token, _replace(child, rest, new))


def apply_edit_op(value: Value, op: EditOp) -> Value:
    """Apply one op.  Raises ``_SkippedOp`` when it does not fit *value*."""
    match op.op:
        case EditOpKind.ADD:
            if op.value is None:
                raise _SkippedOp("add without a value")
            return _add(value, op.path, op.value)
        case EditOpKind.REMOVE:
            if not op.path:
                raise _SkippedOp("the document root cannot be removed")
            return _remove(value, op.path)
        case EditOpKind.REPLACE:
            if op.value is None:
                raise _SkippedOp("replace without a value")
            return _replace(value, op.path, op.value)
    raise _SkippedOp(f"unknown op {op.op!r}")


def apply_edit_ops(value: Value, patch: Patch) -> Value:
    """Apply *patch* in order, skipping ops that do not fit."""
    for op in patch:
        try:
            value = apply_edit_op(value, op)
        except _SkippedOp as exc:
            logger.debug("Skipping %s at %s: %s", op.op.value, format_path(op.path), exc)
    return value


# -- text entry points --------------------------------------------------------

_default_loader = TrackedLoader()


def diff(base_text: str, edited_text: str, *, loader: TrackedLoader | None = None) -> Patch:
    """Diff two documents.  Either failing to parse yields an empty patch."""
    loader = loader or _default_loader
    try:
        base, _ = loader.load_string(base_text)
        edited, _ = loader.load_string(edited_text)
    except DocumentParseError as exc:
        logger.debug("Not diffing unparseable document: %s", exc.message)
        return []
    return diff_values(base, edited)


def apply_patch(
    document_text: str,
    patch: Patch | str,
    *,
    loader: TrackedLoader | None = None,
) -> str:
    """Apply *patch* (ops or patch JSON) to a document and re-serialize it.

    A document that does not parse is returned unchanged.
    """
    loader = loader or _default_loader
    try:
        document, _ = loader.load_string(document_text)
    except DocumentParseError as exc:
        logger.debug("Not patching unparseable document: %s", exc.message)
        return document_text

    if isinstance(patch, str):
        try:
            patch = patch_from_json(patch)
        except PatchFormatError as exc:
            logger.debug("Ignoring undecodable patch: %s", exc)
            patch = []

    return serialize(apply_edit_ops(document, patch))
