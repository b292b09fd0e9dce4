"""Element vocabulary rules: forbidden markup and semantic landmarks."""

from __future__ import annotations

from html_rubric.document import Document
from html_rubric.rules.base import Outcome

TABLE_TAGS = ("table", "thead", "tbody", "tfoot", "tr", "td", "th")
PRESENTATIONAL_TAGS = ("u", "b", "i")
GENERIC_TAGS = ("div", "span")
SEMANTIC_TAGS = (
    "header",
    "nav",
    "main",
    "section",
    "article",
    "aside",
    "footer",
    "figure",
    "figcaption",
)
REQUIRED_LANDMARKS = ("header", "nav", "main", "footer")

# A handful of generic containers is always fine; past that, at least 3 semantic
# elements per 10 generic ones are expected.
GENERIC_ALLOWANCE = 3
MIN_SEMANTIC_RATIO = 0.3
MAX_GENERIC_MATCHES = 5


class NoTabularMarkupRule:
    """Forbids table elements for layout."""

    rule_id = "no-tabular-markup"
    description = "Tables are not allowed"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -2

    def detect(self, document: Document, raw_text: str) -> Outcome:
        elements = document.find_all(*TABLE_TAGS)
        if not elements:
            return Outcome(passed=True, message="No table elements used.")
        return Outcome(
            passed=False,
            message=f"Found {len(elements)} forbidden table elements.",
            suggestion=(
                "Use CSS Grid or Flexbox for layout. Tables are only meant for real tabular data."
            ),
            matches=document.refs(elements),
        )


class NoPresentationalMarkupRule:
    """Forbids the legacy <u>, <b> and <i> styling elements."""

    rule_id = "no-presentational-markup"
    description = "Avoid presentational tags"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -2

    def detect(self, document: Document, raw_text: str) -> Outcome:
        elements = document.find_all(*PRESENTATIONAL_TAGS)
        if not elements:
            return Outcome(passed=True, message="No presentational tags (<u>, <b>, <i>) used.")
        return Outcome(
            passed=False,
            message=f"Found {len(elements)} forbidden presentational tags.",
            suggestion=(
                "Style with CSS and use semantic tags: <strong> instead of <b>, <em> instead "
                "of <i>, CSS text-decoration for underlines."
            ),
            matches=document.refs(elements),
        )


class SemanticRatioRule:
    """Prefers HTML5 semantic elements over generic containers."""

    rule_id = "semantic-ratio"
    description = "Prefer HTML5 semantic elements"
    severity = "warning"
    points_on_pass = 1
    points_on_fail = -1

    def detect(self, document: Document, raw_text: str) -> Outcome:
        divs = document.find_all("div")
        generic_count = len(document.find_all(*GENERIC_TAGS))
        semantic = document.find_all(*SEMANTIC_TAGS)
        semantic_count = len(semantic)
        ratio = semantic_count / generic_count if generic_count > 0 else 1.0

        if generic_count <= GENERIC_ALLOWANCE or ratio >= MIN_SEMANTIC_RATIO:
            return Outcome(
                passed=True,
                message=(
                    f"Good use of semantic elements ({semantic_count} semantic vs "
                    f"{generic_count} generic)."
                ),
                matches=document.refs(semantic),
            )
        return Outcome(
            passed=False,
            message=(
                f"Excessive use of DIV/SPAN ({generic_count}) with few semantic elements "
                f"({semantic_count})."
            ),
            suggestion=(
                "Replace some <div> elements with semantic ones: <header>, <nav>, <main>, "
                "<section>, <article>, <aside>, <footer>."
            ),
            matches=document.refs(divs[:MAX_GENERIC_MATCHES]),
        )


class RequiredLandmarksRule:
    """Requires header, nav, main and footer landmarks."""

    rule_id = "required-landmarks"
    description = "Minimum required structure"
    severity = "error"
    points_on_pass = 2
    points_on_fail = -3

    def detect(self, document: Document, raw_text: str) -> Outcome:
        found = []
        missing: list[str] = []
        for name in REQUIRED_LANDMARKS:
            element = document.first(name)
            if element is None:
                missing.append(name)
            else:
                found.append(element)

        if not missing:
            return Outcome(
                passed=True,
                message="The document contains all required structural elements.",
                matches=document.refs(found),
            )
        return Outcome(
            passed=False,
            message=f"Missing structural elements: {', '.join(missing)}.",
            suggestion=(
                f"Add the missing elements: {', '.join(f'<{name}>' for name in missing)}. "
                "They are mandatory for a correct semantic structure."
            ),
            matches=document.refs(found),
        )
