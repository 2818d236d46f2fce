"""Engine handle and text bindings."""

from yamlnote.service.bindings import TextBindings
from yamlnote.service.engine import DocumentEngine, ParseOutcome

__all__ = ["DocumentEngine", "ParseOutcome", "TextBindings"]
