"""Heading hierarchy and landmark order rule."""

from __future__ import annotations

from dataclasses import dataclass, field

from bs4 import Tag

from html_rubric.document import (
    HEADING_TAGS,
    LANDMARK_TAGS,
    Document,
    element_children,
    heading_level,
)
from html_rubric.rules.base import Outcome

LOWER_HEADING_TAGS = HEADING_TAGS[1:]


@dataclass(slots=True)
class _Issues:
    messages: list[str] = field(default_factory=list)
    elements: list[Tag] = field(default_factory=list)

    def add(self, message: str, *elements: Tag) -> None:
        self.messages.append(message)
        for element in elements:
            if not any(element is seen for seen in self.elements):
                self.elements.append(element)


class HeadingLandmarkSequenceRule:
    """Checks heading levels, landmark contents and landmark order together."""

    rule_id = "heading-and-landmark-sequence"
    description = "Heading hierarchy and landmark order"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -2

    def detect(self, document: Document, raw_text: str) -> Outcome:
        issues = _Issues()
        check_heading_sequence(document.find_all(*HEADING_TAGS), issues)
        for header in document.find_all("header"):
            check_header_headings(header, issues)
        for nav in document.find_all("nav"):
            check_nav_contents(nav, issues)
        body = document.first("body")
        if body is not None:
            check_landmark_order(body, issues)

        if not issues.messages:
            return Outcome(
                passed=True,
                message="Headings and landmarks follow a valid sequence.",
            )
        elements = sorted(issues.elements, key=document.position)
        return Outcome(
            passed=False,
            message=(
                f"Found {len(issues.messages)} heading/landmark sequence issues: "
                f"{'; '.join(issues.messages)}."
            ),
            suggestion=(
                "Start with a single <h1>, descend one heading level at a time, keep headings "
                "out of <nav>, and order landmarks header, nav, main, footer."
            ),
            matches=document.refs(elements),
        )


def check_heading_sequence(headings: list[Tag], issues: _Issues) -> None:
    previous: int | None = None
    seen_h1 = False
    for index, heading in enumerate(headings):
        level = heading_level(heading) or 1
        if index == 0 and level != 1:
            issues.add(f"first heading is <h{level}>, expected <h1>", heading)
        elif level > 1 and not seen_h1:
            issues.add(f"<h{level}> appears before any <h1>", heading)
        if level == 1 and index > 0 and not seen_h1:
            issues.add("<h1> is not the first heading", heading)
        if previous is not None and level > previous + 1:
            issues.add(f"heading level jumps from <h{previous}> to <h{level}>", heading)
        seen_h1 = seen_h1 or level == 1
        previous = level


def check_header_headings(header: Tag, issues: _Issues) -> None:
    top = header.find_all("h1")
    lower = header.find_all(list(LOWER_HEADING_TAGS))
    if lower and not top:
        issues.add("<header> contains lower-level headings without an <h1>", header, *lower)
    elif lower and top:
        issues.add("<header> mixes <h1> with other heading levels", header, *lower)
    if len(top) > 1:
        issues.add("<header> contains more than one <h1>", header, *top[1:])


def check_nav_contents(nav: Tag, issues: _Issues) -> None:
    headings = nav.find_all(list(HEADING_TAGS))
    if headings:
        issues.add("<nav> must not contain headings", nav, *headings)

    loose_items = [child for child in element_children(nav) if child.name == "li"]
    if loose_items:
        issues.add("<li> placed directly inside <nav>", nav, *loose_items)
    if nav.find("li") is not None and nav.find(["ul", "ol"]) is None:
        issues.add("<nav> has list items but no list", nav)


def check_landmark_order(body: Tag, issues: _Issues) -> None:
    landmarks = [child for child in element_children(body) if child.name in LANDMARK_TAGS]
    names = [landmark.name for landmark in landmarks]

    if "main" in names:
        main_index = names.index("main")
        later = [
            landmark
            for landmark in landmarks[main_index + 1 :]
            if landmark.name in ("header", "nav")
        ]
        if later:
            issues.add("<main> comes before <header> or <nav>", landmarks[main_index], *later)

    if "footer" in names:
        footer_index = names.index("footer")
        trailing = [
            landmark for landmark in landmarks[footer_index + 1 :] if landmark.name != "aside"
        ]
        if trailing:
            issues.add("<footer> is not the last landmark", landmarks[footer_index], *trailing)
