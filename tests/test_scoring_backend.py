"""Tests for score aggregation and classification."""

from __future__ import annotations

import pytest

from html_rubric.rules.base import Finding
from html_rubric.scoring_backend import classify, score_findings


def test_mixed_findings_aggregate() -> None:
    summary = score_findings([_finding("a", passed=True), _finding("b", passed=False)])
    assert summary.total_score == -1
    assert summary.passed_count == 1
    assert summary.failed_count == 1
    assert summary.percentage == 50.0
    assert summary.status == "improvable"


def test_all_passing_findings_score_full_marks() -> None:
    summary = score_findings([_finding(str(index), passed=True) for index in range(4)])
    assert summary.total_score == 4
    assert summary.percentage == 100.0
    assert summary.status == "passed"


def test_percentage_is_clamped_for_heavy_penalties() -> None:
    findings = [
        _finding(str(index), passed=False, points_on_fail=-5) for index in range(10)
    ]
    summary = score_findings(findings)
    assert summary.total_score == -50
    assert summary.percentage == 0.0
    assert summary.status == "failed"


def test_percentage_is_clamped_for_generous_rules() -> None:
    summary = score_findings([_finding("a", passed=True, points_on_pass=2)])
    assert summary.percentage == 100.0


def test_empty_findings_score_zero() -> None:
    summary = score_findings([])
    assert summary.total_score == 0
    assert summary.percentage == 0.0
    assert summary.status == "failed"


@pytest.mark.parametrize(
    ("percentage", "expected"),
    [
        (100.0, "passed"),
        (60.0, "passed"),
        (59.9, "improvable"),
        (30.0, "improvable"),
        (29.9, "failed"),
    ],
)
def test_classify_thresholds(percentage: float, expected: str) -> None:
    assert classify(percentage) == expected


def test_summary_to_dict_keys() -> None:
    payload = score_findings([_finding("a", passed=True)]).to_dict()
    assert set(payload) == {"total_score", "passed_count", "failed_count", "percentage", "status"}


def _finding(
    rule_id: str,
    *,
    passed: bool,
    points_on_pass: int = 1,
    points_on_fail: int = -2,
) -> Finding:
    return Finding(
        rule_id=rule_id,
        description=rule_id,
        severity="error",
        points_on_pass=points_on_pass,
        points_on_fail=points_on_fail,
        passed=passed,
        message="message",
        suggestion=None,
    )
