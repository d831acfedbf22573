"""
CLI commands for running a single pipeline stage.

Each stage reads the artifacts the previous stage persisted, so stages
can be re-run on their own.  Thin wrappers over
``coursepack.core.services.pack_pipeline``.
"""

from __future__ import annotations

import json
import sys

import click

from coursepack.core.services.pack_pipeline import StageResult

_STATUS_STYLE = {
    "done": ("✅", "green"),
    "error": ("❌", "red"),
    "skipped": ("⏭️ ", "yellow"),
    "pending": ("•", "white"),
    "running": ("…", "white"),
}


def print_stage_result(sr: StageResult, verbose: bool = False) -> None:
    """One summary line per stage, plus its log lines when verbose or failed."""
    icon, color = _STATUS_STYLE.get(sr.status, ("•", "white"))
    timing = f" ({sr.duration_ms} ms)" if sr.status in ("done", "error") else ""
    click.secho(f"   {icon} {sr.label}{timing}", fg=color)

    if verbose or sr.status == "error":
        for line in sr.log_lines:
            click.echo(f"      {line}")
    elif sr.status == "done" and sr.log_lines:
        click.echo(f"      {sr.log_lines[-1]}")

    failed = sr.detail.get("failed") if sr.detail else None
    if failed:
        click.secho(f"      ⚠️  {failed} document(s) failed", fg="yellow")
    if sr.error:
        click.secho(f"      Error: {sr.error}", fg="red")


@click.group()
def stage() -> None:
    """Run one pipeline stage against the persisted artifacts."""


def _run_single(ctx: click.Context, name: str, as_json: bool, strict: bool = False) -> None:
    from coursepack.core.config.loader import ConfigError, load_config
    from coursepack.core.services.pack_pipeline import BuildContext, PIPELINE_STAGES, run_stage

    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    info, fn = next((i, f) for i, f in PIPELINE_STAGES if i.name == name)
    sr = run_stage(info, fn, BuildContext(config=config, strict_hubs=strict))

    if as_json:
        click.echo(json.dumps(sr.to_dict() | {"log": sr.log_lines}, indent=2))
    else:
        print_stage_result(sr, verbose=True)

    if sr.status != "done":
        sys.exit(1)


@stage.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def scan(ctx: click.Context, as_json: bool) -> None:
    """Scan the docs tree and write the registry."""
    _run_single(ctx, "scan", as_json)


@stage.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def export(ctx: click.Context, as_json: bool) -> None:
    """Clean rendered pages into <output>/docs/."""
    _run_single(ctx, "export", as_json)


@stage.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def hubs(ctx: click.Context, as_json: bool) -> None:
    """Generate hub pages and merge them into the registry."""
    _run_single(ctx, "hubs", as_json)


@stage.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def relations(ctx: click.Context, as_json: bool) -> None:
    """Compute prev/next/up links for units."""
    _run_single(ctx, "relations", as_json)


@stage.command()
@click.option("--strict", is_flag=True, help="Fail on hub references that do not resolve.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def manifest(ctx: click.Context, strict: bool, as_json: bool) -> None:
    """Assemble and validate index.json."""
    _run_single(ctx, "manifest", as_json, strict=strict)


@stage.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def pack(ctx: click.Context, as_json: bool) -> None:
    """Verify the output directory and write the release archive."""
    _run_single(ctx, "pack", as_json)
