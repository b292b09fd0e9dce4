"""Pre-parse structural sanity checks.

The parser repairs broken markup silently, so these regex probes run on the
untouched source text to surface what the tree would otherwise hide.
"""

from __future__ import annotations

import re

from html_rubric.rules.base import Finding, Outcome, make_finding

SANITY_SUGGESTION = (
    "Review the HTML structure and make sure tags are correctly closed and nested."
)


class SanityProbe:
    """Synthetic rule backed by a single regex over the raw text."""

    description = "Malformed HTML detected"
    severity = "error"
    points_on_pass = 0
    points_on_fail = -5

    def __init__(self, rule_id: str, pattern: str, problem: str) -> None:
        self.rule_id = rule_id
        self.pattern = re.compile(pattern, re.IGNORECASE)
        self.problem = problem

    def scan(self, raw_text: str) -> Outcome | None:
        """Return a failing outcome when the pattern fires, else ``None``."""
        if self.pattern.search(raw_text) is None:
            return None
        return Outcome(
            passed=False,
            message=f"Critical error: {self.problem}.",
            suggestion=SANITY_SUGGESTION,
        )


SANITY_PROBES: tuple[SanityProbe, ...] = (
    SanityProbe(
        "malformed-headers",
        r"<h[1-6][^>]*>\s*<h[1-6][^>]*>",
        "nested or unclosed heading tags",
    ),
    SanityProbe(
        "malformed-nesting",
        r"<(div|p|span)(?=[\s/>])[^>]*>\s*<\1(?=[\s/>])[^>]*>",
        "duplicated or badly nested tags",
    ),
    SanityProbe(
        "malformed-closing",
        r"</[^>]+>\s*</[^>]+>",
        "multiple consecutive closing tags",
    ),
)


def check(raw_text: str) -> list[Finding]:
    """Run every probe; each one that fires yields exactly one failing finding."""
    findings: list[Finding] = []
    for probe in SANITY_PROBES:
        outcome = probe.scan(raw_text)
        if outcome is not None:
            findings.append(make_finding(probe, outcome))
    return findings
