"""Dependency injection for FastAPI: the DocumentEngine singleton."""

from __future__ import annotations

from yamlnote.service.engine import DocumentEngine

_engine: DocumentEngine | None = None


def init_engine(engine: DocumentEngine) -> None:
    """Set the global DocumentEngine (called at app startup)."""
    global _engine  # noqa: PLW0603
    _engine = engine


def get_engine() -> DocumentEngine:
    """FastAPI ``Depends`` provider for DocumentEngine."""
    if _engine is None:
        raise RuntimeError("DocumentEngine not initialised, call init_engine() first")
    return _engine


def reset_engine() -> None:
    """Clear the global DocumentEngine (for tests)."""
    global _engine  # noqa: PLW0603
    _engine = None
