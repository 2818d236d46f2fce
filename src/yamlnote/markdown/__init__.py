"""Markdown handling: frontmatter blocks and heading-structured documents."""

from yamlnote.markdown.converter import StructuredConverter, structured_to_tree, tree_to_structured
from yamlnote.markdown.frontmatter import (
    FrontmatterExtractor,
    extract_frontmatter,
    parse_and_validate_frontmatter,
)

__all__ = [
    "FrontmatterExtractor",
    "StructuredConverter",
    "extract_frontmatter",
    "parse_and_validate_frontmatter",
    "structured_to_tree",
    "tree_to_structured",
]
