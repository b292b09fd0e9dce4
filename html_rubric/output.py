"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import click

from html_rubric import __version__
from html_rubric.document import NodeRef
from html_rubric.rules.base import Finding
from html_rubric.scoring import AnalysisRun

LINE_SEARCH_PREFIX = 20

STATUS_LABELS = {
    "passed": ("PASSED", "green"),
    "improvable": ("IMPROVABLE", "yellow"),
    "failed": ("FAILED", "red"),
}


def render_human(run: AnalysisRun, raw_text: str = "") -> str:
    """Render a compact colorized summary, failures first."""
    label, color = STATUS_LABELS[run.status]
    lines: list[str] = [
        click.style(
            f"Score: {run.percentage:.1f}% ({label}), {run.total_score} points",
            fg=color,
            bold=True,
        ),
        f"{run.passed_count} rules passed, {run.failed_count} failed.",
    ]
    if run.provisional:
        lines.append(click.style("Async checks still pending; results are provisional.", dim=True))

    if run.findings:
        lines.append(click.style("Findings:", bold=True))
    for finding in _sorted_for_display(run.findings):
        badge = _badge(finding)
        line_number = approximate_line(finding.matches[0], raw_text) if finding.matches else None
        location = f" (line {line_number})" if line_number is not None else ""
        points = f"+{finding.points}" if finding.points >= 0 else str(finding.points)
        lines.append(f"{badge} [{finding.rule_id}] {points} {finding.description}{location}")
        lines.append(f"   {finding.message}")
        if finding.suggestion and not finding.passed:
            lines.append(f"   suggestion: {finding.suggestion}")
    return "\n".join(lines)


def render_json(run: AnalysisRun, *, input_source: str) -> str:
    """Render stable JSON output for CI and automation."""
    return json.dumps(build_json_payload(run, input_source=input_source), sort_keys=True)


def build_json_payload(run: AnalysisRun, *, input_source: str) -> dict[str, Any]:
    """Build a timestamped summary plus per-rule results."""
    return {
        "timestamp": datetime.now(tz=UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
        "summary": run.summary.to_dict(),
        "results": [_serialize_finding(item) for item in run.findings],
        "meta": {
            "input_source": input_source,
            "provisional": run.provisional,
            "version": __version__,
        },
    }


def render_transcript(run: AnalysisRun, *, generated_at: datetime | None = None) -> str:
    """Plain-text feedback meant to be pasted back to the document's author."""
    stamp = generated_at or datetime.now(tz=UTC)
    label, _ = STATUS_LABELS[run.status]
    lines = [
        "HTML REVIEW",
        "===========",
        "",
        "SUMMARY:",
        f"- Score: {run.total_score} points",
        f"- Percentage: {run.percentage:.1f}%",
        f"- Status: {label}",
        f"- Rules passed: {run.passed_count}",
        f"- Rules failed: {run.failed_count}",
        "",
        "DETAILED FINDINGS:",
        "==================",
        "",
    ]
    for index, finding in enumerate(run.findings, start=1):
        points = f"+{finding.points}" if finding.points >= 0 else str(finding.points)
        lines.append(f"{index}. [{_badge(finding)}] {finding.description} ({points} pts)")
        lines.append(f"   {finding.message}")
        if finding.suggestion:
            lines.append(f"   Suggestion: {finding.suggestion}")
        lines.append("")
    lines.append(f"Generated by: html-rubric {__version__}")
    lines.append(f"Date: {stamp.strftime('%Y-%m-%d %H:%M:%S %Z').rstrip()}")
    return "\n".join(lines)


def approximate_line(ref: NodeRef, raw_text: str) -> int | None:
    """Best-effort 1-based source line for ``ref``.

    Falls back to searching the first characters of the opening fragment when
    the parser did not report a line; ambiguous or missing matches give None.
    """
    if ref.line is not None:
        return ref.line
    needle = ref.fragment[:LINE_SEARCH_PREFIX]
    if not needle or not raw_text:
        return None
    hits = [index for index, line in enumerate(raw_text.split("\n"), start=1) if needle in line]
    if len(hits) != 1:
        return None
    return hits[0]


def _serialize_finding(finding: Finding) -> dict[str, Any]:
    return {
        "rule_id": finding.rule_id,
        "description": finding.description,
        "severity": finding.severity,
        "passed": finding.passed,
        "message": finding.message,
        "suggestion": finding.suggestion,
        "points": finding.points,
        "matches": [ref.to_dict() for ref in finding.matches],
    }


def _sorted_for_display(findings: list[Finding]) -> list[Finding]:
    return sorted(
        findings,
        key=lambda item: (item.passed, 0 if item.severity == "error" else 1),
    )


def _badge(finding: Finding) -> str:
    if finding.passed:
        return "OK"
    return finding.severity.upper()
