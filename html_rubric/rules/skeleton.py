"""Document skeleton and tag closure rules.

Both rules look at the raw text as well as the tree: ``html.parser`` quietly
tolerates unclosed tags, so balance problems only show up in the source.
"""

from __future__ import annotations

import re
from functools import lru_cache

from html_rubric.document import VOID_ELEMENTS, Document
from html_rubric.rules.base import Outcome

DOCTYPE = "<!doctype html>"
COUNT_TOLERANCE = 2
MAX_LISTED_MISMATCHES = 3
CLOSURE_CHECKED_TAGS = (
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "p",
    "div",
    "span",
    "a",
    "header",
    "nav",
    "main",
    "footer",
    "section",
    "article",
    "aside",
    "ul",
    "ol",
    "li",
)

_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_OPEN_TAG = re.compile(r"<([a-zA-Z][a-zA-Z0-9-]*)[^>]*>")
_CLOSE_TAG = re.compile(r"</[^>]+>")


class DoctypeAndSkeletonRule:
    """Requires a doctype and a well-formed html/head/body skeleton."""

    rule_id = "doctype-and-skeleton"
    description = "Valid basic HTML structure"
    severity = "error"
    points_on_pass = 2
    points_on_fail = -5

    def detect(self, document: Document, raw_text: str) -> Outcome:
        issues: list[str] = []

        if not raw_text.strip().lower().startswith(DOCTYPE):
            issues.append("missing <!DOCTYPE html> declaration")

        html = document.first("html")
        head = document.first("head")
        body = document.first("body")
        for name, element in (("html", html), ("head", head), ("body", body)):
            if element is None:
                issues.append(f"missing <{name}> element")

        if head is not None and body is not None:
            if document.position(head) > document.position(body):
                issues.append("<head> must come before <body>")

        if abs(count_closing_drift(raw_text)) > COUNT_TOLERANCE:
            issues.append("possible malformed or unclosed tags")

        if not issues:
            return Outcome(
                passed=True,
                message="The basic HTML structure is valid.",
                matches=document.refs(item for item in (html, head, body) if item is not None),
            )
        return Outcome(
            passed=False,
            message=f"Critical error: {', '.join(issues)}.",
            suggestion=(
                "Make sure the document is well formed, with <!DOCTYPE html>, <html>, <head> "
                "and <body> correctly structured."
            ),
        )


class TagClosureBalanceRule:
    """Requires commonly misused tags to be opened and closed the same number of times."""

    rule_id = "tag-closure-balance"
    description = "Correctly closed tags"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -3

    def detect(self, document: Document, raw_text: str) -> Outcome:
        source = strip_comments(raw_text)
        mismatches: list[str] = []
        for tag in CLOSURE_CHECKED_TAGS:
            opened, closed = tag_balance(source, tag)
            if opened != closed:
                mismatches.append(f"<{tag}>: {opened} opened, {closed} closed")

        if not mismatches:
            return Outcome(passed=True, message="Tags are correctly closed.")

        listed = ", ".join(mismatches[:MAX_LISTED_MISMATCHES])
        ellipsis = "..." if len(mismatches) > MAX_LISTED_MISMATCHES else ""
        return Outcome(
            passed=False,
            message=f"Badly closed tags - {listed}{ellipsis}.",
            suggestion=(
                "Check that every opening tag has its matching closing tag. An editor with "
                "syntax highlighting helps spot these errors."
            ),
        )


def strip_comments(raw_text: str) -> str:
    return _COMMENT.sub("", raw_text)


def count_closing_drift(raw_text: str) -> int:
    """Closing tags found minus closing tags expected from the opening tags.

    Void elements and explicitly self-closed tags expect no closing tag.
    """
    source = strip_comments(raw_text)
    expected = 0
    for match in _OPEN_TAG.finditer(source):
        if match.group(1).lower() in VOID_ELEMENTS or match.group(0).endswith("/>"):
            continue
        expected += 1
    return len(_CLOSE_TAG.findall(source)) - expected


def tag_balance(source: str, tag: str) -> tuple[int, int]:
    """Return (non-self-closing open count, close count) for ``tag``."""
    open_pattern, self_closing_pattern, close_pattern = _tag_patterns(tag)
    opened = len(open_pattern.findall(source)) - len(self_closing_pattern.findall(source))
    return (opened, len(close_pattern.findall(source)))


@lru_cache(maxsize=None)
def _tag_patterns(tag: str) -> tuple[re.Pattern[str], re.Pattern[str], re.Pattern[str]]:
    name = re.escape(tag)
    return (
        re.compile(rf"<{name}(?=[\s/>])[^>]*>", re.IGNORECASE),
        re.compile(rf"<{name}(?=[\s/>])[^>]*/>", re.IGNORECASE),
        re.compile(rf"</{name}\s*>", re.IGNORECASE),
    )
