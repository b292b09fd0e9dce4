"""Referenced file naming rules."""

from __future__ import annotations

import re

from html_rubric.document import Document
from html_rubric.rules.base import Outcome

VALID_FILENAME = re.compile(r"^[a-z0-9._-]+$")
_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


class FilenameCharsetRule:
    """Requires lowercase ASCII names for locally referenced files."""

    rule_id = "filename-charset"
    description = "Valid file names"
    severity = "warning"
    points_on_pass = 1
    points_on_fail = -1

    def detect(self, document: Document, raw_text: str) -> Outcome:
        invalid = []
        for element in document.soup.find_all(_references_file):
            reference = _attr(element, "href") or _attr(element, "src")
            if not is_local_reference(reference):
                continue
            filename = reference_filename(reference)
            if filename and not VALID_FILENAME.match(filename):
                invalid.append(element)

        if not invalid:
            return Outcome(passed=True, message="All file names are valid.")
        return Outcome(
            passed=False,
            message=f"{len(invalid)} files with invalid names.",
            suggestion=(
                "File names must use only lowercase letters, digits, hyphens (-), dots (.) "
                "and underscores (_). No spaces, accents or special characters."
            ),
            matches=document.refs(invalid),
        )


class DocumentNameCharsetRule:
    """Requires lowercase ASCII names for linked local HTML documents."""

    rule_id = "document-name-charset"
    description = "Valid HTML document names"
    severity = "warning"
    points_on_pass = 1
    points_on_fail = -1

    def detect(self, document: Document, raw_text: str) -> Outcome:
        invalid = []
        for link in document.find_all("a", "link"):
            href = _attr(link, "href")
            if not href.endswith(".html") or not is_local_reference(href):
                continue
            if not VALID_FILENAME.match(reference_filename(href)):
                invalid.append(link)

        if not invalid:
            return Outcome(passed=True, message="All HTML document names are valid.")
        return Outcome(
            passed=False,
            message=f"{len(invalid)} HTML documents with invalid names.",
            suggestion=(
                "HTML file names follow the same rules: only lowercase letters, digits, "
                "hyphens and dots."
            ),
            matches=document.refs(invalid),
        )


def is_local_reference(reference: str) -> bool:
    """False for empty, absolute (any scheme or ``//``) and fragment-only references."""
    if not reference:
        return False
    if reference.startswith(("//", "#")):
        return False
    return _SCHEME.match(reference) is None


def reference_filename(reference: str) -> str:
    """Last path segment of a reference without query string or fragment."""
    return reference.split("/")[-1].split("?", 1)[0].split("#", 1)[0]


def _references_file(tag) -> bool:
    return tag.has_attr("href") or tag.has_attr("src")


def _attr(tag, name: str) -> str:
    value = tag.get(name)
    return value.strip() if isinstance(value, str) else ""
