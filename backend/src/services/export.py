"""Markdown to DOCX export.

The conversion is flat: markdown is rendered to HTML and every block element
(heading, paragraph, list item, table row, code line) becomes one plain
paragraph. Heading levels, nesting and inline formatting are lost.
"""

from __future__ import annotations

import re
from io import BytesIO
from typing import Iterator, List

import markdown
from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from docx import Document

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]

_TEXT_BLOCKS = {"h1", "h2", "h3", "h4", "h5", "h6", "p", "dt", "dd"}
_CONTAINERS = {"blockquote", "div", "section", "article", "dl"}
_LISTS = {"ul", "ol"}


def _clean(text: str) -> str:
    return " ".join(text.split())


def _list_items(node: Tag) -> Iterator[str]:
    ordered = node.name == "ol"
    start = int(node.get("start", 1)) if ordered else 1
    for index, item in enumerate(node.find_all("li", recursive=False)):
        nested = []
        parts = []
        for child in item.children:
            if isinstance(child, Tag) and child.name in _LISTS:
                nested.append(child)
            elif isinstance(child, Tag):
                parts.append(child.get_text())
            else:
                parts.append(str(child))
        text = _clean("".join(parts))
        if text:
            yield f"{start + index}. {text}" if ordered else text
        for sub in nested:
            yield from _list_items(sub)


def _blocks(node: Tag) -> Iterator[str]:
    for child in node.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            text = _clean(str(child))
            if text:
                yield text
            continue
        if not isinstance(child, Tag) or child.name == "hr":
            continue
        if child.name in _TEXT_BLOCKS:
            text = _clean(child.get_text())
            if text:
                yield text
        elif child.name in _LISTS:
            yield from _list_items(child)
        elif child.name == "pre":
            for line in child.get_text().splitlines():
                if line.strip():
                    yield line.rstrip()
        elif child.name == "table":
            for row in child.find_all("tr"):
                cells = [_clean(cell.get_text()) for cell in row.find_all(["th", "td"])]
                if any(cells):
                    yield "\t".join(cells)
        elif child.name in _CONTAINERS:
            yield from _blocks(child)
        else:
            text = _clean(child.get_text())
            if text:
                yield text


def markdown_to_paragraphs(text: str) -> List[str]:
    """Flatten markdown into plain paragraph strings.

    Ordered list items keep their number, table rows become tab-separated
    cells and fenced code keeps one paragraph per non-blank line.
    """
    html = markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)
    soup = BeautifulSoup(html, "html.parser")
    return list(_blocks(soup))


def build_docx(title: str, content: str) -> bytes:
    """Package a record as a .docx file and return its bytes."""
    document = Document()
    if title.strip():
        document.add_heading(title.strip(), level=0)
    for paragraph in markdown_to_paragraphs(content):
        document.add_paragraph(paragraph)

    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def export_filename(title: str) -> str:
    """Filesystem-safe download name derived from the record title."""
    slug = re.sub(r"[^A-Za-z0-9._-]+", "-", title.strip()).strip("-.")
    return f"{slug or 'document'}.docx"


__all__ = ["DOCX_MEDIA_TYPE", "markdown_to_paragraphs", "build_docx", "export_filename"]
