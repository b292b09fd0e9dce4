"""Document head metadata rules."""

from __future__ import annotations

import re

from bs4 import Tag

from html_rubric.document import Document
from html_rubric.rules.base import Outcome

_UTF8_CONTENT = re.compile(r"charset\s*=\s*[\"']?utf-8", re.IGNORECASE)


class DocumentTitlePresentRule:
    """Requires a non-empty <title> inside <head>."""

    rule_id = "document-title-present"
    description = "Document title"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -2

    def detect(self, document: Document, raw_text: str) -> Outcome:
        head = document.first("head")
        title = head.find("title") if head is not None else None

        if not isinstance(title, Tag):
            return Outcome(
                passed=False,
                message="No <title> element found in <head>.",
                suggestion="Add a <title> element inside <head> with the document title.",
            )
        text = title.get_text().strip()
        if not text:
            return Outcome(
                passed=False,
                message="The <title> element is empty.",
                suggestion="The <title> must contain text describing the document content.",
                matches=document.refs([title]),
            )
        return Outcome(
            passed=True,
            message=f'The document has a valid title: "{text}".',
            matches=document.refs([title]),
        )


class Utf8DeclaredRule:
    """Requires a UTF-8 character encoding declaration."""

    rule_id = "utf8-declared"
    description = "UTF-8 encoding"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -2

    def detect(self, document: Document, raw_text: str) -> Outcome:
        declaration = _utf8_declaration(document)
        if declaration is not None:
            return Outcome(
                passed=True,
                message="Found a UTF-8 encoding declaration.",
                matches=document.refs([declaration]),
            )
        return Outcome(
            passed=False,
            message="No UTF-8 encoding declaration found.",
            suggestion='Add <meta charset="UTF-8"> at the start of the <head> element.',
        )


class ViewportPresentRule:
    """Requires a responsive viewport meta tag."""

    rule_id = "viewport-present"
    description = "Viewport meta for responsive design"
    severity = "warning"
    points_on_pass = 1
    points_on_fail = -1

    def detect(self, document: Document, raw_text: str) -> Outcome:
        viewport = next(
            (meta for meta in document.find_all("meta") if _lower(meta, "name") == "viewport"),
            None,
        )
        if viewport is None:
            return Outcome(
                passed=False,
                message="The viewport meta tag is missing.",
                suggestion=(
                    'Add <meta name="viewport" content="width=device-width, initial-scale=1.0"> '
                    "to <head> for responsive design."
                ),
            )
        content = viewport.get("content")
        if not isinstance(content, str) or "width=device-width" not in content:
            return Outcome(
                passed=False,
                message="The viewport meta tag has no responsive configuration.",
                suggestion=(
                    'Use content="width=device-width, initial-scale=1.0" on the viewport meta.'
                ),
                matches=document.refs([viewport]),
            )
        return Outcome(
            passed=True,
            message="The viewport meta tag is configured for responsive design.",
            matches=document.refs([viewport]),
        )


def _utf8_declaration(document: Document) -> Tag | None:
    metas = document.find_all("meta")
    charset_meta = next((meta for meta in metas if meta.has_attr("charset")), None)
    if charset_meta is not None and _lower(charset_meta, "charset") == "utf-8":
        return charset_meta

    for meta in metas:
        if _lower(meta, "http-equiv") != "content-type":
            continue
        content = meta.get("content")
        if isinstance(content, str) and _UTF8_CONTENT.search(content):
            return meta
    return None


def _lower(tag: Tag, name: str) -> str:
    value = tag.get(name)
    return value.strip().lower() if isinstance(value, str) else ""
