"""Rule execution with per-rule failure isolation.

Execution is two-phase. ``execute_rules`` runs every rule synchronously and
always terminates with a complete, usable board; async-backed rules contribute
an optimistic placeholder there. ``refine_async_rules`` then resolves those
rules concurrently and each task overwrites only its own board entry.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from html_rubric.document import Document
from html_rubric.rules.base import Finding, ImageProbe, Outcome, Rule, is_async_rule, make_finding

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal error while running this rule."
INTERNAL_ERROR_SUGGESTION = "Contact the instructor if this error persists."


class FindingBoard:
    """Ordered findings keyed by rule id."""

    def __init__(self, findings: Iterable[Finding] = ()) -> None:
        self._findings: dict[str, Finding] = {}
        for finding in findings:
            self.add(finding)

    def add(self, finding: Finding) -> None:
        if finding.rule_id in self._findings:
            raise ValueError(f"Duplicate finding for rule '{finding.rule_id}'")
        self._findings[finding.rule_id] = finding

    def replace(self, finding: Finding) -> None:
        """Overwrite an existing entry in place, keeping its position."""
        if finding.rule_id not in self._findings:
            raise KeyError(finding.rule_id)
        self._findings[finding.rule_id] = finding

    def get(self, rule_id: str) -> Finding | None:
        return self._findings.get(rule_id)

    def snapshot(self) -> list[Finding]:
        return list(self._findings.values())


def execute_rules(
    rules: Iterable[Rule],
    document: Document,
    raw_text: str,
    *,
    board: FindingBoard | None = None,
) -> FindingBoard:
    """Run ``detect`` for every rule in order, isolating failures per rule."""
    target = board if board is not None else FindingBoard()
    for rule in rules:
        try:
            outcome = rule.detect(document, raw_text)
        except Exception:
            logger.exception("Rule %s failed during detection.", rule.rule_id)
            outcome = internal_error_outcome()
        target.add(make_finding(rule, outcome))
    return target


async def refine_async_rules(
    board: FindingBoard,
    rules: Iterable[Rule],
    document: Document,
    raw_text: str,
    probe: ImageProbe,
) -> FindingBoard:
    """Resolve async-backed rules and replace their placeholder findings.

    Cancelling the caller cancels every in-flight resolution; the board then
    keeps whatever placeholders were not yet replaced.
    """
    pending = [
        rule for rule in rules if is_async_rule(rule) and board.get(rule.rule_id) is not None
    ]
    if pending:
        await asyncio.gather(
            *(_resolve_into(board, rule, document, raw_text, probe) for rule in pending)
        )
    return board


async def _resolve_into(
    board: FindingBoard,
    rule: Rule,
    document: Document,
    raw_text: str,
    probe: ImageProbe,
) -> None:
    try:
        outcome = await rule.resolve(document, raw_text, probe)  # type: ignore[attr-defined]
    except Exception:
        logger.exception("Rule %s failed during async resolution.", rule.rule_id)
        outcome = internal_error_outcome()
    board.replace(make_finding(rule, outcome))


def internal_error_outcome() -> Outcome:
    return Outcome(
        passed=False,
        message=INTERNAL_ERROR_MESSAGE,
        suggestion=INTERNAL_ERROR_SUGGESTION,
    )
