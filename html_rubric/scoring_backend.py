"""Score aggregation over rule findings.

Every finding is normalized onto a nominal spread of +1 for a pass and -2 for
a failure, whatever the rule's own point values, so the percentage stays
comparable between documents that trigger different rules.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from html_rubric.rules.base import Finding

PASSING_THRESHOLD = 60.0
DEFAULT_SUCCESS_POINTS = 1
DEFAULT_ERROR_POINTS = -2

Status = Literal["passed", "improvable", "failed"]


@dataclass(frozen=True, slots=True)
class ScoreSummary:
    """Aggregate score for one analysis run."""

    total_score: int
    passed_count: int
    failed_count: int
    percentage: float
    status: Status

    def to_dict(self) -> dict[str, object]:
        return {
            "total_score": self.total_score,
            "passed_count": self.passed_count,
            "failed_count": self.failed_count,
            "percentage": self.percentage,
            "status": self.status,
        }


def score_findings(findings: Sequence[Finding]) -> ScoreSummary:
    """Sum finding points and derive a clamped 0-100 percentage."""
    total_score = sum(finding.points for finding in findings)
    passed_count = sum(1 for finding in findings if finding.passed)
    failed_count = len(findings) - passed_count

    if findings:
        normalized = total_score + failed_count * abs(DEFAULT_ERROR_POINTS)
        raw_percentage = normalized / (len(findings) * DEFAULT_SUCCESS_POINTS) * 100
    else:
        raw_percentage = 0.0
    percentage = _clamp(raw_percentage, lower=0.0, upper=100.0)

    return ScoreSummary(
        total_score=total_score,
        passed_count=passed_count,
        failed_count=failed_count,
        percentage=percentage,
        status=classify(percentage),
    )


def classify(percentage: float) -> Status:
    if percentage >= PASSING_THRESHOLD:
        return "passed"
    if percentage >= PASSING_THRESHOLD / 2:
        return "improvable"
    return "failed"


def _clamp(value: float, *, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
