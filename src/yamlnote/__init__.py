"""yamlnote: structured YAML documents with schemas, frontmatter and diffs."""

__version__ = "0.1.0"
