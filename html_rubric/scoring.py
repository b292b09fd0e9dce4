"""Analysis orchestration: raw text in, AnalysisRun out."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from html_rubric import sanity
from html_rubric.config import ImagesConfig
from html_rubric.document import Document, parse
from html_rubric.executor import FindingBoard, execute_rules, refine_async_rules
from html_rubric.probe import HttpHeadProbe
from html_rubric.rules import build_rules
from html_rubric.rules.base import Finding, ImageProbe, Rule
from html_rubric.scoring_backend import ScoreSummary, score_findings


@dataclass(slots=True)
class AnalysisRun:
    """All findings for one submitted document plus the aggregate score."""

    findings: list[Finding]
    summary: ScoreSummary
    provisional: bool = False

    @property
    def total_score(self) -> int:
        return self.summary.total_score

    @property
    def percentage(self) -> float:
        return self.summary.percentage

    @property
    def passed_count(self) -> int:
        return self.summary.passed_count

    @property
    def failed_count(self) -> int:
        return self.summary.failed_count

    @property
    def status(self) -> str:
        return self.summary.status


class Analysis:
    """An analysis whose synchronous phase is done.

    ``result()`` can be read at any time; until ``refine()`` completes it shows
    the optimistic placeholders of async-backed rules.
    """

    def __init__(
        self,
        *,
        raw_text: str,
        document: Document,
        rules: list[Rule],
        board: FindingBoard,
    ) -> None:
        self.raw_text = raw_text
        self.document = document
        self.rules = rules
        self.board = board
        self.refined = False

    def result(self) -> AnalysisRun:
        findings = self.board.snapshot()
        return AnalysisRun(
            findings=findings,
            summary=score_findings(findings),
            provisional=not self.refined,
        )

    async def refine(self, probe: ImageProbe) -> AnalysisRun:
        await refine_async_rules(self.board, self.rules, self.document, self.raw_text, probe)
        self.refined = True
        return self.result()


def start_analysis(raw_text: str, rules: list[Rule] | None = None) -> Analysis:
    """Run the pre-parse checks, parse, and execute every rule synchronously.

    Raises ``DocumentParseError`` before any rule runs when the text cannot be
    parsed.
    """
    active_rules = rules if rules is not None else build_rules()
    sanity_findings = sanity.check(raw_text)
    document = parse(raw_text)
    board = execute_rules(
        active_rules,
        document,
        raw_text,
        board=FindingBoard(sanity_findings),
    )
    return Analysis(raw_text=raw_text, document=document, rules=active_rules, board=board)


def analyze_text(raw_text: str, rules: list[Rule] | None = None) -> AnalysisRun:
    """Synchronous analysis; async-backed rules keep their placeholder outcome."""
    return start_analysis(raw_text, rules=rules).result()


async def analyze_text_async(
    raw_text: str,
    rules: list[Rule] | None = None,
    *,
    probe: ImageProbe | None = None,
    images: ImagesConfig | None = None,
    base_dir: Path | None = None,
) -> AnalysisRun:
    """Full analysis including async-backed rules.

    Without an explicit ``probe`` an ``HttpHeadProbe`` session is opened for the
    duration of the refinement.
    """
    image_settings = images or ImagesConfig()
    active_rules = rules if rules is not None else build_rules(images=image_settings)
    analysis = start_analysis(raw_text, rules=active_rules)
    if probe is not None:
        return await analysis.refine(probe)

    async with HttpHeadProbe(
        timeout_seconds=image_settings.timeout_seconds,
        base_dir=base_dir,
    ) as http_probe:
        return await analysis.refine(http_probe)
