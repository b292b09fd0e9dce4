"""Parent/child nesting rules for lists, buttons and navigation."""

from __future__ import annotations

from bs4 import Tag

from html_rubric.document import Document, element_children, parent_element
from html_rubric.rules.base import Outcome

NAV_MISSING_LIST = "has no <ul> as a direct child"
NAV_LOOSE_ITEM = "has <li> items outside a <ul>"
NAV_ITEM_WITHOUT_LINK = "has <li> items without a direct <a> child"
NAV_DIRECT_LINK = "has <a> links as direct children (they belong inside <li>)"
NAV_STRAY_LINK = "has <a> links outside the ul > li structure"


class ListItemParentageRule:
    """Requires every <li> to be a direct child of a <ul>."""

    rule_id = "list-item-parentage"
    description = "<li> inside <ul>"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -2

    def detect(self, document: Document, raw_text: str) -> Outcome:
        items = document.find_all("li")
        invalid = [item for item in items if not _parent_is(item, "ul")]

        if not invalid:
            return Outcome(
                passed=True,
                message=f"All <li> elements ({len(items)}) are inside <ul> elements.",
                matches=document.refs(items),
            )
        return Outcome(
            passed=False,
            message=f"{len(invalid)} <li> elements are not direct children of a <ul>.",
            suggestion=(
                "Wrap every <li> in a <ul>. List items must not be loose or placed inside <ol>."
            ),
            matches=document.refs(invalid),
        )


class ButtonsRequireFormAncestorRule:
    """Requires every <button> to live somewhere inside a <form>."""

    rule_id = "buttons-require-form-ancestor"
    description = "Buttons inside forms"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -2

    def detect(self, document: Document, raw_text: str) -> Outcome:
        buttons = document.find_all("button")
        invalid = [button for button in buttons if button.find_parent("form") is None]

        if not invalid:
            return Outcome(
                passed=True,
                message=f"All buttons ({len(buttons)}) are inside forms.",
                matches=document.refs(buttons),
            )
        return Outcome(
            passed=False,
            message=f"{len(invalid)} buttons are not inside a <form> element.",
            suggestion=(
                "Place every <button> inside a <form>, or use <a> elements for navigation actions."
            ),
            matches=document.refs(invalid),
        )


class NavLinkStructureRule:
    """Requires navigation links to follow nav > ul > li > a."""

    rule_id = "nav-link-structure"
    description = "NAV > UL > LI > A structure"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -2

    def detect(self, document: Document, raw_text: str) -> Outcome:
        navs = document.find_all("nav")
        if not navs:
            return Outcome(passed=True, message="No <nav> elements to validate.")

        invalid: list[Tag] = []
        reasons: list[str] = []
        for nav in navs:
            nav_reasons = nav_structure_issues(nav)
            if nav_reasons:
                invalid.append(nav)
                reasons.extend(nav_reasons)

        if not invalid:
            return Outcome(
                passed=True,
                message=f"All <nav> elements ({len(navs)}) follow the nav > ul > li > a structure.",
                matches=document.refs(navs),
            )
        return Outcome(
            passed=False,
            message=(
                f"{len(invalid)} of {len(navs)} <nav> elements do not follow the correct "
                f"structure: {'; '.join(reasons)}."
            ),
            suggestion=(
                'Navigation must follow <nav><ul><li><a href="...">Link</a></li></ul></nav>. '
                "Do not put links directly inside <nav>."
            ),
            matches=document.refs(invalid),
        )


def nav_structure_issues(nav: Tag) -> list[str]:
    """Return one reason per violation found inside ``nav``.

    Identical reasons are kept once per offending element.
    """
    reasons: list[str] = []
    children = element_children(nav)

    if not any(child.name == "ul" for child in children):
        reasons.append(NAV_MISSING_LIST)

    for item in nav.find_all("li"):
        if not _parent_is(item, "ul"):
            reasons.append(NAV_LOOSE_ITEM)
            continue
        if not any(child.name == "a" for child in element_children(item)):
            reasons.append(NAV_ITEM_WITHOUT_LINK)

    for child in children:
        if child.name == "a":
            reasons.append(NAV_DIRECT_LINK)

    for link in nav.find_all("a"):
        item = parent_element(link)
        listing = parent_element(item) if item is not None else None
        if item is None or item.name != "li" or listing is None or listing.name != "ul":
            reasons.append(NAV_STRAY_LINK)
    return reasons


def _parent_is(tag: Tag, name: str) -> bool:
    parent = parent_element(tag)
    return parent is not None and parent.name == name
