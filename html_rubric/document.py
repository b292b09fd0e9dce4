"""Parsed HTML document provider.

Documents are parsed with BeautifulSoup's ``html.parser`` builder, which keeps
the markup as written instead of inserting missing ``html``/``head``/``body``
elements the way browsers do. Rules rely on that: a missing ``<body>`` must
stay missing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

logger = logging.getLogger(__name__)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
LANDMARK_TAGS = ("header", "nav", "main", "aside", "footer")
VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)


class DocumentParseError(ValueError):
    """Raised when raw text cannot be turned into a usable tree."""


@dataclass(frozen=True, slots=True)
class NodeRef:
    """Handle to an element of a parsed document.

    ``path`` holds element-child indices from the document root, so a ref stays
    meaningful (and serializable) after the tree itself is discarded.
    """

    tag: str
    path: tuple[int, ...]
    line: int | None
    fragment: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "tag": self.tag,
            "path": list(self.path),
            "line": self.line,
            "fragment": self.fragment,
        }


class Document:
    """Navigable tree for one analyzed source text."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self.soup = soup
        self._positions = {id(tag): index for index, tag in enumerate(soup.find_all(True))}

    def find_all(self, *names: str) -> list[Tag]:
        """Return elements with any of ``names`` in document order."""
        return list(self.soup.find_all(list(names)))

    def first(self, name: str) -> Tag | None:
        found = self.soup.find(name)
        return found if isinstance(found, Tag) else None

    def with_attribute(self, attribute: str) -> list[Tag]:
        """Return every element carrying ``attribute`` (any value)."""
        return list(self.soup.find_all(attrs={attribute: True}))

    def position(self, tag: Tag) -> int:
        """Document-order index of ``tag``; -1 for nodes of another tree."""
        return self._positions.get(id(tag), -1)

    def ref(self, tag: Tag) -> NodeRef:
        return NodeRef(
            tag=tag.name,
            path=_element_path(tag),
            line=getattr(tag, "sourceline", None),
            fragment=opening_fragment(tag),
        )

    def refs(self, tags: Iterable[Tag]) -> tuple[NodeRef, ...]:
        return tuple(self.ref(tag) for tag in tags if self.position(tag) >= 0)


def parse(raw_text: str) -> Document:
    """Parse raw HTML text into a :class:`Document`.

    Raises ``DocumentParseError`` for blank input, markup rejected by the
    parser, or text that contains no elements at all.
    """
    if not raw_text or not raw_text.strip():
        raise DocumentParseError("Document is empty; there is no HTML to analyze.")
    try:
        soup = BeautifulSoup(raw_text, "html.parser")
    except ParserRejectedMarkup as exc:
        raise DocumentParseError(f"HTML could not be parsed: {exc}") from exc

    if soup.find(True) is None:
        raise DocumentParseError("No HTML elements found in the document.")
    logger.debug("Parsed document with %d elements.", len(soup.find_all(True)))
    return Document(soup)


def heading_level(tag: Tag) -> int | None:
    """Return 1-6 for ``h1``..``h6`` elements, otherwise ``None``."""
    if tag.name in HEADING_TAGS:
        return int(tag.name[1])
    return None


def element_children(tag: Tag) -> list[Tag]:
    """Direct element children, skipping text and comments."""
    return [child for child in tag.children if isinstance(child, Tag)]


def parent_element(tag: Tag) -> Tag | None:
    """Direct parent element; ``None`` at the document root."""
    parent = tag.parent
    if parent is None or isinstance(parent, BeautifulSoup):
        return None
    return parent


def opening_fragment(tag: Tag) -> str:
    """Serialize only the opening tag, e.g. ``<img src="a.png" alt="">``."""
    parts = [tag.name]
    for key, value in tag.attrs.items():
        if isinstance(value, list):
            value = " ".join(value)
        parts.append(f'{key}="{value}"')
    return "<" + " ".join(parts) + ">"


def _element_path(tag: Tag) -> tuple[int, ...]:
    path: list[int] = []
    node = tag
    while node.parent is not None:
        siblings = element_children(node.parent)
        path.append(next(index for index, item in enumerate(siblings) if item is node))
        node = node.parent
    return tuple(reversed(path))
