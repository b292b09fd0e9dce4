"""Configuration loading for html-rubric.

Settings come from the first of ``.html-rubric.toml``, ``html-rubric.toml`` or a
``[tool.html_rubric]`` table in ``pyproject.toml`` found in the project
directory, unless an explicit file is given. Invalid values raise ``ValueError``
naming the offending key.
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

CONFIG_FILENAMES = (".html-rubric.toml", "html-rubric.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("html_rubric", "html-rubric")
OUTPUT_FORMATS = {"human", "json", "text"}
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(slots=True)
class ImagesConfig:
    """Image-size probing controls."""

    probe: bool = True
    timeout_seconds: float = 5.0
    max_concurrency: int = 8

    def to_dict(self) -> dict[str, Any]:
        return {
            "probe": self.probe,
            "timeout_seconds": self.timeout_seconds,
            "max_concurrency": self.max_concurrency,
        }


@dataclass(slots=True)
class AppConfig:
    """Resolved settings for one invocation."""

    format: str = "human"
    fail_below: int | None = None
    log_level: str = "WARNING"
    rule_enable: list[str] | None = None
    rule_disable: list[str] = field(default_factory=list)
    images: ImagesConfig = field(default_factory=ImagesConfig)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "fail_below": self.fail_below,
            "log_level": self.log_level,
            "rules": {
                "enable": None if self.rule_enable is None else list(self.rule_enable),
                "disable": list(self.rule_disable),
            },
            "images": self.images.to_dict(),
            "source": self.source,
        }


def load_app_config(project: Path, config_path: Path | None = None) -> AppConfig:
    """Resolve configuration for ``project``; defaults when nothing is found."""
    project = project.resolve()
    if config_path is not None:
        explicit = config_path if config_path.is_absolute() else project / config_path
        if not explicit.exists():
            raise ValueError(f"Config file does not exist: {explicit}")
        return _build_config(_read_settings(explicit), source=explicit)

    for candidate in _candidate_files(project):
        settings = _read_settings(candidate)
        if settings or candidate.name != PYPROJECT_FILENAME:
            return _build_config(settings, source=candidate)
    return AppConfig()


def default_config_template() -> str:
    """Return a starter config template to customize."""
    return """\
format = "human"
fail_below = 60
log_level = "WARNING"

[rules]
# enable = [
#   "unique-top-heading",
#   "doctype-and-skeleton",
# ]
disable = ["document-name-charset"]

[images]
probe = true
timeout_seconds = 5
max_concurrency = 8
"""


def _candidate_files(project: Path) -> Iterator[Path]:
    for name in (*CONFIG_FILENAMES, PYPROJECT_FILENAME):
        path = project / name
        if path.is_file():
            yield path


def _read_settings(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc

    tool_table = _tool_table(document)
    if tool_table is not None:
        return tool_table
    return {} if path.name == PYPROJECT_FILENAME else document


def _tool_table(document: dict[str, Any]) -> dict[str, Any] | None:
    tool = document.get("tool")
    if not isinstance(tool, dict):
        return None
    return next(
        (tool[key] for key in PYPROJECT_TOOL_KEYS if isinstance(tool.get(key), dict)),
        None,
    )


def _build_config(settings: dict[str, Any], *, source: Path) -> AppConfig:
    top = _Fields(settings)
    rules = top.table("rules")
    images = top.table("images")

    fail_below = top.integer("fail_below", default=None)
    if fail_below is not None and not 0 <= fail_below <= 100:
        raise ValueError("fail_below must be between 0 and 100")

    timeout = images.number("timeout_seconds", default=5.0)
    concurrency = images.integer("max_concurrency", default=8)
    if timeout <= 0:
        raise ValueError("images.timeout_seconds must be > 0")
    if concurrency <= 0:
        raise ValueError("images.max_concurrency must be > 0")

    return AppConfig(
        format=top.choice("format", OUTPUT_FORMATS, default="human"),
        fail_below=fail_below,
        log_level=top.choice("log_level", LOG_LEVELS, default="WARNING"),
        rule_enable=rules.strings("enable", default=None),
        rule_disable=rules.strings("disable", default=[]) or [],
        images=ImagesConfig(
            probe=images.flag("probe", default=True),
            timeout_seconds=timeout,
            max_concurrency=concurrency,
        ),
        source=str(source),
    )


class _Fields:
    """Typed accessors over one TOML table; errors carry the dotted key."""

    def __init__(self, values: dict[str, Any], prefix: str = "") -> None:
        self.values = values
        self.prefix = prefix

    def table(self, key: str) -> _Fields:
        value = self.values.get(key)
        if value is None:
            return _Fields({}, prefix=self._name(key) + ".")
        if not isinstance(value, dict):
            raise ValueError(f"{self._name(key)} must be a table/object")
        return _Fields(value, prefix=self._name(key) + ".")

    def strings(self, key: str, *, default: list[str] | None) -> list[str] | None:
        value = self.values.get(key)
        if value is None:
            return default
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise ValueError(f"{self._name(key)}: Expected a list of strings")
        return list(value)

    def choice(self, key: str, allowed: set[str], *, default: str) -> str:
        value = str(self.values.get(key, default))
        normalized = {item.lower(): item for item in allowed}.get(value.lower())
        if normalized is None:
            raise ValueError(f"{self._name(key)} must be one of: {', '.join(sorted(allowed))}")
        return normalized

    def integer(self, key: str, *, default: int | None) -> int | None:
        value = self.values.get(key, default)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{self._name(key)} must be an integer")
        return value

    def number(self, key: str, *, default: float) -> float:
        value = self.values.get(key, default)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{self._name(key)} must be a number")
        return float(value)

    def flag(self, key: str, *, default: bool) -> bool:
        value = self.values.get(key, default)
        if not isinstance(value, bool):
            raise ValueError(f"{self._name(key)} must be a boolean")
        return value

    def _name(self, key: str) -> str:
        return self.prefix + key
