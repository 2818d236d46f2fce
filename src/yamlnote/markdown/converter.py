"""Heading-structured markdown ⇄ value tree conversion.

Tree shape::

    frontmatter: {...}          # only when the document has a block
    title: <first "# " heading>
    content: <body text outside any section>
    sections:
      - heading: <"## " heading>
        content: <body text>
        subsections:
          - heading: <"### " heading>
            content: <body text>

``title``, document ``content``, ``sections`` and ``subsections`` are
omitted when empty; sections and subsections always carry ``content``.
Headings inside fenced code blocks, setext headings and levels 4-6 are
plain body text.  Conversion never fails: any text yields a tree.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from yamlnote.markdown.frontmatter import FRONTMATTER_MARKER, FrontmatterExtractor
from yamlnote.models.errors import FrontmatterError
from yamlnote.models.value import MappingValue, SequenceValue, StringValue, Value
from yamlnote.parser.serializer import serialize

TITLE_KEY = "title"
CONTENT_KEY = "content"
SECTIONS_KEY = "sections"
SUBSECTIONS_KEY = "subsections"
HEADING_KEY = "heading"
FRONTMATTER_KEY = "frontmatter"

_ATX_HEADING_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?(?:[ \t]+#+)?[ \t]*$")
_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")


@dataclass
class _Block:
    heading: str = ""
    lines: list[str] = field(default_factory=list)
    children: list[_Block] = field(default_factory=list)


def _heading(line: str) -> tuple[int, str] | None:
    m = _ATX_HEADING_RE.match(line)
    if m is None:
        return None
    return len(m.group(1)), (m.group(2) or "").strip()


def _join_body(lines: list[str]) -> str:
    """Join body lines, dropping leading and trailing blank lines."""
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(lines[start:end])


class StructuredConverter:
    """Maps heading-structured markdown to a value tree and back."""

    def __init__(self, extractor: FrontmatterExtractor | None = None) -> None:
        self._extractor = extractor or FrontmatterExtractor()

    # -- markdown → tree -----------------------------------------------------

    def to_tree(self, markdown: str) -> MappingValue:
        text = markdown.replace("\r\n", "\n").replace("\r", "\n")

        frontmatter: MappingValue | None = None
        try:
            extracted = self._extractor.extract(text)
        except FrontmatterError:
            extracted = None
        if extracted is not None:
            frontmatter = extracted.fields
            text = extracted.body

        title: str | None = None
        document = _Block()
        sections: list[_Block] = []
        fence: str | None = None

        for line in text.split("\n"):
            current = sections[-1].children[-1] if sections and sections[-1].children else None
            container = current or (sections[-1] if sections else document)

            if fence is not None:
                container.lines.append(line)
                if line.strip().startswith(fence) and not line.strip().strip(fence[0]):
                    fence = None
                continue
            fence_match = _FENCE_RE.match(line)
            if fence_match is not None:
                fence = fence_match.group(1)
                container.lines.append(line)
                continue

            heading = _heading(line)
            if heading is not None:
                level, heading_text = heading
                if level == 1 and title is None:
                    title = heading_text
                    continue
                if level == 2:
                    sections.append(_Block(heading=heading_text))
                    continue
                if level == 3 and sections:
                    sections[-1].children.append(_Block(heading=heading_text))
                    continue
            container.lines.append(line)

        entries: list[tuple[str, Value]] = []
        if frontmatter is not None:
            entries.append((FRONTMATTER_KEY, frontmatter))
        if title is not None:
            entries.append((TITLE_KEY, StringValue(title)))
        body = _join_body(document.lines)
        if body:
            entries.append((CONTENT_KEY, StringValue(body)))
        if sections:
            entries.append(
                (SECTIONS_KEY, SequenceValue(tuple(self._section_value(s) for s in sections)))
            )
        return MappingValue(tuple(entries))

    def _section_value(self, block: _Block) -> MappingValue:
        entries: list[tuple[str, Value]] = [
            (HEADING_KEY, StringValue(block.heading)),
            (CONTENT_KEY, StringValue(_join_body(block.lines))),
        ]
        if block.children:
            entries.append(
                (SUBSECTIONS_KEY, SequenceValue(tuple(self._section_value(c) for c in block.children)))
            )
        return MappingValue(tuple(entries))

    # -- tree → markdown -----------------------------------------------------

    def to_markdown(self, tree: Value) -> str:
        """Render a tree back to heading markup.  Ill-typed fields are skipped."""
        if not isinstance(tree, MappingValue):
            return ""
        chunks: list[str] = []

        frontmatter = tree.get(FRONTMATTER_KEY)
        if isinstance(frontmatter, MappingValue):
            block = serialize(frontmatter)
            chunks.append(f"{FRONTMATTER_MARKER}\n{block}{FRONTMATTER_MARKER}")

        title = tree.get(TITLE_KEY)
        if isinstance(title, StringValue):
            chunks.append(f"# {title.value}".rstrip())

        content = tree.get(CONTENT_KEY)
        if isinstance(content, StringValue) and content.value:
            chunks.append(content.value)

        sections = tree.get(SECTIONS_KEY)
        if isinstance(sections, SequenceValue):
            for section in sections:
                chunks.extend(self._render_section(section, "##"))

        if not chunks:
            return ""
        text = "\n\n".join(chunks) + "\n"
        if not isinstance(frontmatter, MappingValue) and text.split("\n", 1)[0].rstrip() == FRONTMATTER_MARKER:
            # Keep leading body text from being read as a frontmatter block.
            text = "\n" + text
        return text

    def _render_section(self, section: Value, marker: str) -> list[str]:
        if not isinstance(section, MappingValue):
            return []
        heading = section.get(HEADING_KEY)
        heading_text = heading.value if isinstance(heading, StringValue) else ""
        out = [f"{marker} {heading_text}".rstrip()]
        content = section.get(CONTENT_KEY)
        if isinstance(content, StringValue) and content.value:
            out.append(content.value)
        subsections = section.get(SUBSECTIONS_KEY)
        if marker == "##" and isinstance(subsections, SequenceValue):
            for sub in subsections:
                out.extend(self._render_section(sub, "###"))
        return out


_default_converter = StructuredConverter()


def structured_to_tree(markdown: str) -> MappingValue:
    """Convert heading-structured markdown to a value tree (total)."""
    return _default_converter.to_tree(markdown)


def tree_to_structured(tree: Value) -> str:
    """Render a value tree produced by ``structured_to_tree`` back to markdown."""
    return _default_converter.to_markdown(tree)
