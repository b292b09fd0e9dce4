"""Top-level heading uniqueness rule."""

from __future__ import annotations

from html_rubric.document import Document
from html_rubric.rules.base import Outcome


class UniqueTopHeadingRule:
    """Requires exactly one <h1> per document."""

    rule_id = "unique-top-heading"
    description = "Exactly one <h1> per document"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -2

    def detect(self, document: Document, raw_text: str) -> Outcome:
        h1_elements = document.find_all("h1")
        count = len(h1_elements)

        if count == 0:
            return Outcome(
                passed=False,
                message="No <h1> element found. The document must have exactly one <h1>.",
                suggestion="Add an <h1> element holding the main title of the document.",
            )
        if count == 1:
            return Outcome(
                passed=True,
                message="The document has exactly one <h1> element.",
                matches=document.refs(h1_elements),
            )
        return Outcome(
            passed=False,
            message=f"Found {count} <h1> elements; only one is allowed.",
            suggestion=(
                "Use <h2>, <h3> and lower levels for subtitles. The <h1> must be unique "
                "and hold the main title."
            ),
            matches=document.refs(h1_elements),
        )
