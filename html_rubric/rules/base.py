"""Base rule protocol, outcome and finding models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

from html_rubric.document import Document, NodeRef

Severity = Literal["error", "warning"]


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of running one rule once, before it is joined with the rule."""

    passed: bool
    message: str
    suggestion: str | None = None
    matches: tuple[NodeRef, ...] = ()

    def __post_init__(self) -> None:
        if not self.message:
            raise ValueError("Outcome message must not be empty")


@dataclass(frozen=True, slots=True)
class Finding:
    """An outcome joined with the rule that produced it."""

    rule_id: str
    description: str
    severity: Severity
    points_on_pass: int
    points_on_fail: int
    passed: bool
    message: str
    suggestion: str | None
    matches: tuple[NodeRef, ...] = ()

    @property
    def points(self) -> int:
        return self.points_on_pass if self.passed else self.points_on_fail


class Rule(Protocol):
    """Protocol for deterministic document rules."""

    rule_id: str
    description: str
    severity: Severity
    points_on_pass: int
    points_on_fail: int

    def detect(self, document: Document, raw_text: str) -> Outcome:
        """Inspect the parsed tree and raw text and return an outcome."""


class ImageProbe(Protocol):
    """Reports the byte size of a referenced resource."""

    async def content_length(self, url: str) -> int | None:
        """Return the size in bytes, ``None`` when the size is not reported."""


class AsyncRule(Rule, Protocol):
    """Rule whose real verdict needs out-of-process evidence.

    ``detect`` returns an optimistic placeholder; ``resolve`` computes the
    final outcome.
    """

    async def resolve(self, document: Document, raw_text: str, probe: ImageProbe) -> Outcome:
        """Compute the final outcome, replacing the placeholder."""


def make_finding(rule: Rule, outcome: Outcome) -> Finding:
    """Join an outcome with its rule."""
    return Finding(
        rule_id=rule.rule_id,
        description=rule.description,
        severity=rule.severity,
        points_on_pass=rule.points_on_pass,
        points_on_fail=rule.points_on_fail,
        passed=outcome.passed,
        message=outcome.message,
        suggestion=outcome.suggestion,
        matches=outcome.matches,
    )


def is_async_rule(rule: Rule) -> bool:
    return callable(getattr(rule, "resolve", None))
