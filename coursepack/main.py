"""
Course content pack builder — CLI entrypoint.

Usage:
    python -m coursepack.main --help
    python -m coursepack.main build
    python -m coursepack.main stage scan
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from coursepack import __version__
from coursepack.core.observability.logging_config import configure_from_env


@click.group()
@click.version_option(version=__version__, prog_name="coursepack")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to contentpack.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Build offline content packs from a rendered docs site."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = None

    configure_from_env(level, debug=debug)


@cli.command()
@click.option("--skip-archive", is_flag=True, help="Stop after writing the manifest.")
@click.option("--strict", is_flag=True, help="Fail on hub references that do not resolve.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def build(ctx: click.Context, skip_archive: bool, strict: bool, as_json: bool) -> None:
    """Run the full pipeline: scan, export, hubs, relations, manifest, pack."""
    from coursepack.core.use_cases.build_pack import build_pack
    from coursepack.ui.cli.stages import print_stage_result

    result = build_pack(
        config_path=ctx.obj.get("config_path"),
        skip_archive=skip_archive,
        strict_hubs=strict,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    pipeline = result.pipeline
    assert pipeline is not None  # set whenever config loaded
    quiet = ctx.obj.get("quiet", False)

    if not quiet:
        click.secho("\n📦 Building content pack", fg="cyan", bold=True)
    for sr in pipeline.stages:
        print_stage_result(sr, verbose=ctx.obj.get("verbose", False))

    click.echo()
    if pipeline.ok:
        click.secho(
            f"✅ Pack {pipeline.pack_version} built in {pipeline.total_duration_ms} ms",
            fg="green", bold=True,
        )
        click.echo(f"   Output: {pipeline.output_dir}")
        if pipeline.archive_path:
            click.echo(f"   Archive: {pipeline.archive_path}")
        click.echo()
    else:
        failed = pipeline.failed_stage
        click.secho(f"❌ Build failed at stage '{failed.name if failed else '?'}'", fg="red", bold=True)
        click.echo()
        sys.exit(1)


@cli.command()
@click.option("--strict", is_flag=True, help="Treat dangling hub references as errors.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def validate(ctx: click.Context, strict: bool, as_json: bool) -> None:
    """Re-validate an existing manifest and its documents."""
    from coursepack.core.use_cases.validate_pack import validate_pack

    result = validate_pack(config_path=ctx.obj.get("config_path"), strict_hubs=strict)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        click.secho("✅ Manifest is valid", fg="green", bold=True)
        click.echo(f"   Version: {result.pack_version}")
        click.echo(f"   Documents: {result.documents}")
    else:
        click.secho("❌ Manifest errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    click.echo()
    if not result.valid:
        sys.exit(1)


# ── Register sub-command groups from coursepack/ui/cli/ ──────────

from coursepack.ui.cli.stages import stage  # noqa: E402

cli.add_command(stage)


if __name__ == "__main__":
    cli()
