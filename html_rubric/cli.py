"""CLI entrypoint for html-rubric."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Annotated, Any

import typer

from html_rubric import __version__
from html_rubric.config import (
    LOG_LEVELS,
    OUTPUT_FORMATS,
    AppConfig,
    default_config_template,
    load_app_config,
)
from html_rubric.document import DocumentParseError
from html_rubric.log import configure_logging
from html_rubric.output import render_human, render_json, render_transcript
from html_rubric.rules import build_rules, list_rule_info
from html_rubric.rules.base import Rule
from html_rubric.sanity import SANITY_PROBES
from html_rubric.scoring import AnalysisRun, analyze_text, analyze_text_async

app = typer.Typer(
    name="html-rubric",
    no_args_is_help=True,
    help="Grade HTML documents for structure, semantics and good practice.",
)

ProjectOption = Annotated[Path, typer.Option(help="Directory searched for html-rubric settings.")]
ConfigOption = Annotated[Path | None, typer.Option("--config", help="Explicit settings file.")]
ListingFormatOption = Annotated[str, typer.Option(help="Listing format: human|json.")]


def version_callback(value: bool) -> None:
    """Print the version and exit when --version is given."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Print the html-rubric version.", callback=version_callback),
    ] = False,
) -> None:
    """Grade HTML documents from the command line."""
    _ = version


@app.command("check")
def check_command(
    html_file: Annotated[Path | None, typer.Option(help="Path to the HTML document.")] = None,
    stdin: Annotated[bool, typer.Option(help="Read the HTML document from stdin.")] = False,
    project: ProjectOption = Path("."),
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json|text.", show_default="human")
    ] = None,
    fail_below: Annotated[
        int | None, typer.Option(help="Exit nonzero if the percentage is below this value.")
    ] = None,
    probe_images: Annotated[
        bool | None,
        typer.Option("--probe-images/--no-probe-images", help="Verify image sizes."),
    ] = None,
    log_level: Annotated[
        str | None, typer.Option(help="Logging level.", show_default="WARNING")
    ] = None,
    config_file: ConfigOption = None,
) -> None:
    """Analyze an HTML document and report findings plus a score."""
    app_config = _load_config_or_raise(project, config_file)
    output_format = _choice_or_default(
        value=format,
        default=app_config.format,
        allowed=OUTPUT_FORMATS,
        field_name="--format",
    )
    resolved_level = (log_level or app_config.log_level).upper()
    if resolved_level not in LOG_LEVELS:
        choices = ", ".join(sorted(LOG_LEVELS))
        raise typer.BadParameter(f"--log-level must be one of: {choices}", param_hint="--log-level")
    configure_logging(resolved_level)

    if html_file and stdin:
        raise typer.BadParameter("Use either --html-file or --stdin, not both.")
    if html_file is None and not stdin:
        raise typer.BadParameter("Provide --html-file or --stdin.")

    raw_text, input_source = _read_input(html_file=html_file, stdin=stdin)
    rules = _build_configured_rules_or_raise(app_config)
    should_probe = probe_images if probe_images is not None else app_config.images.probe

    try:
        if should_probe:
            run = asyncio.run(
                analyze_text_async(
                    raw_text,
                    rules,
                    images=app_config.images,
                    base_dir=html_file.resolve().parent if html_file is not None else None,
                )
            )
        else:
            run = analyze_text(raw_text, rules)
    except DocumentParseError as exc:
        raise typer.BadParameter(str(exc), param_hint="input") from exc

    typer.echo(_render(run, output_format=output_format, raw_text=raw_text, source=input_source))

    fail_threshold = fail_below if fail_below is not None else app_config.fail_below
    if fail_threshold is not None and run.percentage < fail_threshold:
        raise typer.Exit(code=1)


@app.command("rules")
def rules_command(
    project: ProjectOption = Path("."),
    format: ListingFormatOption = "human",
    config_file: ConfigOption = None,
) -> None:
    """List available rules and pre-parse checks."""
    output_format = _listing_format(format)
    app_config = _load_config_or_raise(project, config_file)
    active_ids = {rule.rule_id for rule in _build_configured_rules_or_raise(app_config)}

    if output_format == "json":
        payload = {
            "rules": [
                {
                    "rule_id": info.rule_id,
                    "name": info.name,
                    "description": info.description,
                    "category": info.category,
                    "severity": info.severity,
                    "points_on_pass": info.points_on_pass,
                    "points_on_fail": info.points_on_fail,
                    "async": info.is_async,
                    "enabled": info.rule_id in active_ids,
                }
                for info in list_rule_info()
            ],
            "sanity_checks": [
                {
                    "rule_id": probe.rule_id,
                    "description": probe.description,
                    "points_on_fail": probe.points_on_fail,
                }
                for probe in SANITY_PROBES
            ],
            "meta": {"config_source": app_config.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = ["Registered rules:"]
    for info in list_rule_info():
        state = "enabled" if info.rule_id in active_ids else "disabled"
        lines.append(
            f"- {info.rule_id} [{state}, {info.severity}, "
            f"+{info.points_on_pass}/{info.points_on_fail}] - {info.description}"
        )
    lines.append("Pre-parse checks:")
    lines.extend(
        f"- {probe.rule_id} [{probe.points_on_fail}] - {probe.problem}" for probe in SANITY_PROBES
    )
    typer.echo("\n".join(lines))


@app.command("config")
def config_command(
    project: ProjectOption = Path("."),
    format: ListingFormatOption = "human",
    config_file: ConfigOption = None,
) -> None:
    """Print the settings a check would run with."""
    output_format = _listing_format(format)
    app_config = _load_config_or_raise(project, config_file)
    payload = app_config.to_dict()
    payload["active_rule_ids"] = _active_rule_ids(app_config)
    _echo_settings(payload, output_format=output_format, title="Effective settings")


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Where to write the starter settings.")] = Path(
        ".html-rubric.toml"
    ),
    force: Annotated[bool, typer.Option("--force", help="Replace an existing file.")] = False,
) -> None:
    """Write a starter .html-rubric.toml."""
    target = out.resolve()
    if target.exists() and not force:
        raise typer.BadParameter(f"Refusing to overwrite {target}; pass --force to replace it.")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Created {target}")


@app.command("config-validate")
def config_validate_command(
    project: ProjectOption = Path("."),
    config_file: Annotated[
        Path, typer.Option("--config", help="Settings file to check.")
    ] = Path(".html-rubric.toml"),
    format: ListingFormatOption = "human",
) -> None:
    """Check a settings file, including its rule ids."""
    output_format = _listing_format(format)
    app_config = _load_config_or_raise(project, config_file)
    payload = {
        "ok": True,
        "source": app_config.source,
        "active_rule_ids": _active_rule_ids(app_config),
    }
    _echo_settings(payload, output_format=output_format, title="Settings are valid")


def main() -> None:
    """Console script entrypoint."""
    app()


def _read_input(*, html_file: Path | None, stdin: bool) -> tuple[str, str]:
    if html_file is None:
        return sys.stdin.read(), "stdin"
    try:
        return html_file.read_text(encoding="utf-8"), f"html_file:{html_file}"
    except (OSError, UnicodeDecodeError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--html-file") from exc


def _render(run: AnalysisRun, *, output_format: str, raw_text: str, source: str) -> str:
    if output_format == "json":
        return render_json(run, input_source=source)
    if output_format == "text":
        return render_transcript(run)
    return render_human(run, raw_text)


def _echo_settings(payload: dict[str, Any], *, output_format: str, title: str) -> None:
    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return
    lines = [f"{title}:"]
    for key, value in payload.items():
        if key == "ok":
            continue
        if key == "source" and value is None:
            value = "built-in defaults"
        lines.append(f"  {key} = {value}")
    typer.echo("\n".join(lines))


def _active_rule_ids(app_config: AppConfig) -> list[str]:
    return [rule.rule_id for rule in _build_configured_rules_or_raise(app_config)]


def _load_config_or_raise(project: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(project, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_configured_rules_or_raise(app_config: AppConfig) -> list[Rule]:
    try:
        return build_rules(
            enabled_rule_ids=app_config.rule_enable,
            disabled_rule_ids=app_config.rule_disable,
            images=app_config.images,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.rules") from exc


def _listing_format(value: str) -> str:
    return _choice_or_default(
        value=value, default="human", allowed={"human", "json"}, field_name="--format"
    )


def _choice_or_default(
    *, value: str | None, default: str, allowed: set[str], field_name: str
) -> str:
    picked = (value or default).lower()
    if picked in allowed:
        return picked
    raise typer.BadParameter(
        f"{field_name} must be one of: {', '.join(sorted(allowed))}", param_hint=field_name
    )
