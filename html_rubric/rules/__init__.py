"""Rules package."""

from collections.abc import Callable
from dataclasses import dataclass

from html_rubric.config import ImagesConfig
from html_rubric.rules.attributes import (
    HrefRestrictedToAnchorRule,
    ImageAltRequiredRule,
    MediaRequiresControlsRule,
    SrcRestrictedToImageRule,
)
from html_rubric.rules.base import Rule, is_async_rule
from html_rubric.rules.filenames import DocumentNameCharsetRule, FilenameCharsetRule
from html_rubric.rules.head import DocumentTitlePresentRule, Utf8DeclaredRule, ViewportPresentRule
from html_rubric.rules.headings import UniqueTopHeadingRule
from html_rubric.rules.image_size import ImageSizeRule
from html_rubric.rules.markup import (
    NoPresentationalMarkupRule,
    NoTabularMarkupRule,
    RequiredLandmarksRule,
    SemanticRatioRule,
)
from html_rubric.rules.nesting import (
    ButtonsRequireFormAncestorRule,
    ListItemParentageRule,
    NavLinkStructureRule,
)
from html_rubric.rules.sequence import HeadingLandmarkSequenceRule
from html_rubric.rules.skeleton import DoctypeAndSkeletonRule, TagClosureBalanceRule

KNOWN_CATEGORIES = {
    "structure",
    "semantics",
    "attributes",
    "head",
    "assets",
}


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing and selection."""

    rule_id: str
    name: str
    description: str
    category: str
    severity: str
    points_on_pass: int
    points_on_fail: int
    is_async: bool


@dataclass(frozen=True, slots=True)
class _RuleSpec:
    rule_id: str
    factory: Callable[[], Rule]
    name: str
    description: str
    category: str
    severity: str
    points_on_pass: int
    points_on_fail: int
    is_async: bool


def build_rules(
    *,
    enabled_rule_ids: list[str] | None = None,
    disabled_rule_ids: list[str] | None = None,
    images: ImagesConfig | None = None,
) -> list[Rule]:
    """Build rule instances applying enable/disable filters.

    Registration order is kept whatever order ``enabled_rule_ids`` lists.
    """
    specs = _ordered_rule_specs(images or ImagesConfig())
    registry = {spec.rule_id: spec for spec in specs}
    requested_ids = set(enabled_rule_ids or []) | set(disabled_rule_ids or [])

    unknown = [rule_id for rule_id in requested_ids if rule_id not in registry]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown rule ids: {joined}")

    enabled_set = set(enabled_rule_ids) if enabled_rule_ids is not None else set(registry)
    disabled_set = set(disabled_rule_ids or [])
    return [
        spec.factory()
        for spec in specs
        if spec.rule_id in enabled_set and spec.rule_id not in disabled_set
    ]


def list_rule_info() -> list[RuleInfo]:
    """Return metadata for all registered rules."""
    return [
        RuleInfo(
            rule_id=spec.rule_id,
            name=spec.name,
            description=spec.description,
            category=spec.category,
            severity=spec.severity,
            points_on_pass=spec.points_on_pass,
            points_on_fail=spec.points_on_fail,
            is_async=spec.is_async,
        )
        for spec in _ordered_rule_specs(ImagesConfig())
    ]


def _ordered_rule_specs(images: ImagesConfig) -> list[_RuleSpec]:
    return [
        _spec(UniqueTopHeadingRule, category="structure"),
        _spec(ListItemParentageRule, category="structure"),
        _spec(HrefRestrictedToAnchorRule, category="attributes"),
        _spec(SrcRestrictedToImageRule, category="attributes"),
        _spec(ButtonsRequireFormAncestorRule, category="structure"),
        _spec(NoTabularMarkupRule, category="semantics"),
        _spec(NoPresentationalMarkupRule, category="semantics"),
        _spec(SemanticRatioRule, category="semantics"),
        _spec(RequiredLandmarksRule, category="semantics"),
        _spec(FilenameCharsetRule, category="assets"),
        _spec(
            ImageSizeRule,
            category="assets",
            factory=lambda: ImageSizeRule(
                timeout_seconds=images.timeout_seconds,
                max_concurrency=images.max_concurrency,
            ),
        ),
        _spec(DocumentTitlePresentRule, category="head"),
        _spec(Utf8DeclaredRule, category="head"),
        _spec(MediaRequiresControlsRule, category="attributes"),
        _spec(DocumentNameCharsetRule, category="assets"),
        _spec(NavLinkStructureRule, category="structure"),
        _spec(DoctypeAndSkeletonRule, category="structure"),
        _spec(TagClosureBalanceRule, category="structure"),
        _spec(ViewportPresentRule, category="head"),
        _spec(HeadingLandmarkSequenceRule, category="structure"),
        _spec(ImageAltRequiredRule, category="attributes"),
    ]


def _spec(
    rule_cls: type,
    *,
    category: str,
    factory: Callable[[], Rule] | None = None,
) -> _RuleSpec:
    if category not in KNOWN_CATEGORIES:
        raise ValueError(f"Unknown rule category '{category}' for {rule_cls.__name__}")
    instance = rule_cls()
    return _RuleSpec(
        rule_id=instance.rule_id,
        factory=factory or rule_cls,
        name=rule_cls.__name__,
        description=instance.description,
        category=category,
        severity=instance.severity,
        points_on_pass=instance.points_on_pass,
        points_on_fail=instance.points_on_fail,
        is_async=is_async_rule(instance),
    )
