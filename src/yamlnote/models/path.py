"""Structural paths and their JSON Pointer (RFC 6901) rendering."""

from __future__ import annotations

PathToken = str | int
Path = tuple[PathToken, ...]

ROOT: Path = ()


def _escape(token: PathToken) -> str:
    return str(token).replace("~", "~0").replace("/", "~1")


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def to_pointer(path: Path) -> str:
    """Render a path as a JSON Pointer: ``()`` → ``""``, ``("a", 0)`` → ``"/a/0"``."""
    return "".join(f"/{_escape(token)}" for token in path)


def from_pointer(pointer: str) -> Path:
    """Parse a JSON Pointer into a path of string tokens.

    Tokens stay strings; whether ``"0"`` addresses a sequence index or a
    mapping key is decided when the path is resolved against a tree.
    """
    if pointer == "":
        return ROOT
    if not pointer.startswith("/"):
        raise ValueError(f'Invalid JSON Pointer (must start with "/"): {pointer!r}')
    return tuple(_unescape(token) for token in pointer.split("/")[1:])


def parse_index(token: PathToken, length: int, *, allow_end: bool = False) -> int | None:
    """Interpret *token* as a sequence index, or ``None`` if it is not one.

    ``"-"`` (and ``length`` itself) address the slot past the last element
    and are only accepted when *allow_end* is set.
    """
    if isinstance(token, int):
        index = token
    elif token == "-":
        index = length
    elif token.isascii() and token.isdigit() and (token == "0" or not token.startswith("0")):
        index = int(token)
    else:
        return None
    limit = length if allow_end else length - 1
    if index < 0 or index > limit:
        return None
    return index


def is_index_token(token: PathToken) -> bool:
    """True when *token* looks like a sequence position (used for ``add``)."""
    if isinstance(token, int):
        return True
    return token == "-" or (token.isascii() and token.isdigit())


def format_path(path: Path) -> str:
    """Dotted rendering for log and error messages: ``sections[0].heading``."""
    out = ""
    for token in path:
        if isinstance(token, int):
            out += f"[{token}]"
        else:
            out = f"{out}.{token}" if out else token
    return out or "<root>"
