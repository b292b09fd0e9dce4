"""Tests for configuration loading and rule selection."""

from __future__ import annotations

from pathlib import Path

import pytest

from html_rubric.config import default_config_template, load_app_config
from html_rubric.rules import build_rules, list_rule_info
from html_rubric.rules.image_size import ImageSizeRule


def test_defaults_without_any_config_file(tmp_path: Path) -> None:
    config = load_app_config(tmp_path)
    assert config.format == "human"
    assert config.fail_below is None
    assert config.log_level == "WARNING"
    assert config.rule_enable is None
    assert config.rule_disable == []
    assert config.images.probe is True
    assert config.source is None


def test_dot_file_wins_over_pyproject(tmp_path: Path) -> None:
    _write(tmp_path / "pyproject.toml", ["[tool.html_rubric]", 'format = "text"'])
    _write(
        tmp_path / ".html-rubric.toml",
        [
            'format = "json"',
            "fail_below = 75",
            'log_level = "debug"',
            "",
            "[rules]",
            'disable = ["viewport-present"]',
            "",
            "[images]",
            "probe = false",
            "timeout_seconds = 2.5",
            "max_concurrency = 3",
        ],
    )

    config = load_app_config(tmp_path)
    assert config.format == "json"
    assert config.fail_below == 75
    assert config.log_level == "DEBUG"
    assert config.rule_disable == ["viewport-present"]
    assert config.images.probe is False
    assert config.images.timeout_seconds == 2.5
    assert config.images.max_concurrency == 3
    assert config.source == str(tmp_path / ".html-rubric.toml")


def test_pyproject_hyphenated_tool_key(tmp_path: Path) -> None:
    _write(
        tmp_path / "pyproject.toml",
        [
            '[tool."html-rubric"]',
            'format = "text"',
            "",
            '[tool."html-rubric".rules]',
            'enable = ["unique-top-heading"]',
        ],
    )
    config = load_app_config(tmp_path)
    assert config.format == "text"
    assert config.rule_enable == ["unique-top-heading"]
    assert config.source == str(tmp_path / "pyproject.toml")


def test_pyproject_without_tool_section_falls_back_to_defaults(tmp_path: Path) -> None:
    _write(tmp_path / "pyproject.toml", ["[project]", 'name = "site"'])
    assert load_app_config(tmp_path).source is None


def test_explicit_missing_config_path_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="does not exist"):
        load_app_config(tmp_path, config_path=Path("nope.toml"))


@pytest.mark.parametrize(
    ("lines", "message"),
    [
        (['format = "xml"'], "format must be one of"),
        (["fail_below = 150"], "fail_below must be between 0 and 100"),
        (["fail_below = true"], "fail_below must be an integer"),
        (['log_level = "loud"'], "log_level must be one of"),
        (["rules = 3"], "rules must be a table"),
        (["[rules]", "disable = [1]"], "Expected a list of strings"),
        (["[images]", "timeout_seconds = 0"], "images.timeout_seconds must be > 0"),
        (["[images]", 'probe = "yes"'], "images.probe must be a boolean"),
        (["format = "], "Invalid TOML"),
    ],
)
def test_invalid_values_are_rejected(tmp_path: Path, lines: list[str], message: str) -> None:
    _write(tmp_path / ".html-rubric.toml", lines)
    with pytest.raises(ValueError, match=message):
        load_app_config(tmp_path)


def test_default_template_is_loadable(tmp_path: Path) -> None:
    (tmp_path / ".html-rubric.toml").write_text(default_config_template(), encoding="utf-8")
    config = load_app_config(tmp_path)
    assert config.fail_below == 60
    assert config.rule_disable == ["document-name-charset"]
    build_rules(enabled_rule_ids=config.rule_enable, disabled_rule_ids=config.rule_disable)


def test_build_rules_keeps_registration_order_and_filters() -> None:
    rules = build_rules(
        enabled_rule_ids=["viewport-present", "unique-top-heading", "image-size"],
        disabled_rule_ids=["image-size"],
    )
    assert [rule.rule_id for rule in rules] == ["unique-top-heading", "viewport-present"]


def test_build_rules_rejects_unknown_ids() -> None:
    with pytest.raises(ValueError, match="Unknown rule ids: not-a-rule"):
        build_rules(disabled_rule_ids=["not-a-rule"])


def test_registry_ids_are_unique_and_metadata_matches_instances() -> None:
    infos = list_rule_info()
    rules = build_rules()
    assert len({info.rule_id for info in infos}) == len(infos) == len(rules) == 21
    for info, rule in zip(infos, rules):
        assert info.rule_id == rule.rule_id
        assert info.points_on_pass == rule.points_on_pass
        assert info.points_on_fail == rule.points_on_fail
    assert [info.rule_id for info in infos if info.is_async] == ["image-size"]


def test_image_settings_reach_the_image_rule(tmp_path: Path) -> None:
    _write(
        tmp_path / ".html-rubric.toml",
        ["[images]", "timeout_seconds = 1.5", "max_concurrency = 2"],
    )
    config = load_app_config(tmp_path)
    image_rule = next(
        rule for rule in build_rules(images=config.images) if isinstance(rule, ImageSizeRule)
    )
    assert image_rule.timeout_seconds == 1.5
    assert image_rule.max_concurrency == 2


def _write(path: Path, lines: list[str]) -> None:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
