"""Tests for rule execution, failure isolation and async refinement."""

from __future__ import annotations

import asyncio

import pytest

from html_rubric.document import Document, parse
from html_rubric.executor import (
    INTERNAL_ERROR_MESSAGE,
    INTERNAL_ERROR_SUGGESTION,
    FindingBoard,
    execute_rules,
    refine_async_rules,
)
from html_rubric.rules.base import ImageProbe, Outcome, make_finding
from html_rubric.rules.headings import UniqueTopHeadingRule

RAW = "<h1>Title</h1><p>x</p>"


def test_execute_rules_keeps_registration_order() -> None:
    rules = [_StaticRule("first", passed=True), UniqueTopHeadingRule(), _StaticRule("last")]
    board = execute_rules(rules, parse(RAW), RAW)
    assert [finding.rule_id for finding in board.snapshot()] == [
        "first",
        "unique-top-heading",
        "last",
    ]


def test_raising_rule_becomes_internal_error_finding() -> None:
    rules = [_ExplodingRule(), UniqueTopHeadingRule()]
    findings = execute_rules(rules, parse(RAW), RAW).snapshot()

    broken, healthy = findings
    assert broken.rule_id == "exploding"
    assert broken.passed is False
    assert broken.message == INTERNAL_ERROR_MESSAGE
    assert broken.suggestion == INTERNAL_ERROR_SUGGESTION
    assert broken.points == -2
    assert healthy.passed is True


def test_execute_rules_appends_to_seeded_board() -> None:
    seed = make_finding(_StaticRule("seed"), Outcome(passed=False, message="seeded"))
    board = execute_rules([UniqueTopHeadingRule()], parse(RAW), RAW, board=FindingBoard([seed]))
    assert [finding.rule_id for finding in board.snapshot()] == ["seed", "unique-top-heading"]


def test_board_rejects_duplicates_and_unknown_replacements() -> None:
    rule = _StaticRule("dup")
    finding = make_finding(rule, Outcome(passed=True, message="ok"))
    board = FindingBoard([finding])

    with pytest.raises(ValueError, match="Duplicate finding"):
        board.add(finding)
    with pytest.raises(KeyError):
        board.replace(make_finding(_StaticRule("other"), Outcome(passed=True, message="ok")))
    assert len(board.snapshot()) == 1


def test_refinement_replaces_placeholder_in_place() -> None:
    rules = [_StaticRule("before"), _AsyncRule("slow"), _StaticRule("after")]
    document = parse(RAW)
    board = execute_rules(rules, document, RAW)
    assert board.get("slow").message == "pending"

    asyncio.run(refine_async_rules(board, rules, document, RAW, _NullProbe()))

    findings = board.snapshot()
    assert [finding.rule_id for finding in findings] == ["before", "slow", "after"]
    assert findings[1].passed is False
    assert findings[1].message == "resolved"


def test_refinement_failure_is_isolated() -> None:
    rules = [_AsyncRule("broken", fail=True), _AsyncRule("fine")]
    document = parse(RAW)
    board = execute_rules(rules, document, RAW)

    asyncio.run(refine_async_rules(board, rules, document, RAW, _NullProbe()))

    assert board.get("broken").message == INTERNAL_ERROR_MESSAGE
    assert board.get("fine").message == "resolved"


def test_cancelled_refinement_keeps_placeholders() -> None:
    rule = _BlockingRule()
    document = parse(RAW)
    board = execute_rules([rule], document, RAW)

    async def scenario() -> None:
        task = asyncio.create_task(refine_async_rules(board, [rule], document, RAW, _NullProbe()))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert board.get("blocking").message == "pending"
    assert board.get("blocking").passed is True


class _StaticRule:
    description = "Static"
    severity = "warning"
    points_on_pass = 1
    points_on_fail = -1

    def __init__(self, rule_id: str, passed: bool = True) -> None:
        self.rule_id = rule_id
        self.passed = passed

    def detect(self, document: Document, raw_text: str) -> Outcome:
        return Outcome(passed=self.passed, message="static")


class _ExplodingRule:
    rule_id = "exploding"
    description = "Always raises"
    severity = "error"
    points_on_pass = 1
    points_on_fail = -2

    def detect(self, document: Document, raw_text: str) -> Outcome:
        raise RuntimeError("boom")


class _AsyncRule(_StaticRule):
    def __init__(self, rule_id: str, fail: bool = False) -> None:
        super().__init__(rule_id)
        self.fail = fail

    def detect(self, document: Document, raw_text: str) -> Outcome:
        return Outcome(passed=True, message="pending")

    async def resolve(self, document: Document, raw_text: str, probe: ImageProbe) -> Outcome:
        await asyncio.sleep(0)
        if self.fail:
            raise RuntimeError("probe exploded")
        return Outcome(passed=False, message="resolved")


class _BlockingRule(_AsyncRule):
    def __init__(self) -> None:
        super().__init__("blocking")

    async def resolve(self, document: Document, raw_text: str, probe: ImageProbe) -> Outcome:
        await asyncio.Event().wait()
        return Outcome(passed=False, message="unreachable")


class _NullProbe:
    async def content_length(self, url: str) -> int | None:
        return None
