"""
Pack pipeline — run the build stages in order and collect their results.

Pipeline model
──────────────
Each stage is a generator over a shared ``BuildContext``:
  - it reads its input from the context, or from the persisted artifact
    of the previous stage when run on its own,
  - yields human-readable log lines as it goes,
  - leaves its output on the context, persists it, and records counters
    in ``ctx.detail[stage]``.

``run_pack_pipeline`` drives the stages in canonical order:

    scan → export → hubs → relations → manifest → pack

and stops at the first stage that raises, marking the rest ``skipped``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from coursepack.core.config.loader import PackConfig
from coursepack.core.errors import ContentPackError, DocumentFailure
from coursepack.core.models.manifest import Manifest, RelationGraph
from coursepack.core.models.registry import Registry
from coursepack.core.persistence.artifacts import (
    load_manifest_data,
    load_registry,
    load_relations,
    save_manifest,
    save_registry,
    save_relations,
)
from coursepack.core.services.exporter import dangling_footer_links, export_documents, plan_export
from coursepack.core.services.hubs import synthesize_hubs, write_hub_pages
from coursepack.core.services.manifest import assemble_manifest
from coursepack.core.services.packaging import archive_pack
from coursepack.core.services.registry_builder import build_registry
from coursepack.core.services.relations import build_related_links, build_relations

logger = logging.getLogger(__name__)


# ── Data Models ─────────────────────────────────────────────────────


@dataclass
class StageInfo:
    """Declaration of a pipeline stage (before execution)."""

    name: str                           # Machine name: "scan", "export", etc.
    label: str                          # Human label: "Export & Rewrite"
    description: str = ""


@dataclass
class StageResult:
    """Result of executing one pipeline stage."""

    name: str
    label: str
    status: str = "pending"             # "pending" | "running" | "done" | "error" | "skipped"
    duration_ms: int = 0
    log_lines: list[str] = field(default_factory=list)
    error: str = ""
    detail: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "label": self.label,
            "status": self.status,
            "duration_ms": self.duration_ms,
            "error": self.error,
            "detail": self.detail,
        }


@dataclass
class PipelineResult:
    """Result of a full pipeline execution."""

    stages: list[StageResult] = field(default_factory=list)
    ok: bool = False
    total_duration_ms: int = 0
    pack_version: str = ""
    output_dir: str = ""
    archive_path: str = ""

    @property
    def failed_stage(self) -> StageResult | None:
        return next((s for s in self.stages if s.status == "error"), None)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "total_duration_ms": self.total_duration_ms,
            "pack_version": self.pack_version,
            "output_dir": self.output_dir,
            "archive_path": self.archive_path or None,
            "stages": [s.to_dict() for s in self.stages],
        }


LogStream = Generator[str, None, None]
"""A generator that yields log line strings, one at a time."""


@dataclass
class BuildContext:
    """State threaded through the stages of one build."""

    config: PackConfig
    strict_hubs: bool = False
    now: datetime | None = None

    registry: Registry | None = None
    relations: RelationGraph | None = None
    manifest: Manifest | None = None
    archive: Path | None = None
    detail: dict[str, dict] = field(default_factory=dict)

    def current_registry(self) -> Registry:
        if self.registry is None:
            self.registry = load_registry(self.config.registry_path)
        return self.registry

    def current_relations(self) -> RelationGraph:
        if self.relations is None:
            self.relations = load_relations(self.config.relations_path)
        return self.relations


def _failure_lines(failures: list[DocumentFailure]) -> LogStream:
    for f in failures:
        yield f"  ⚠ {f.doc}: {f.reason}"


# ── Stages ──────────────────────────────────────────────────────────


def stage_scan(ctx: BuildContext) -> LogStream:
    cfg = ctx.config
    yield f"Scanning {cfg.docs_path}"
    result = build_registry(cfg.docs_path)
    ctx.registry = result.registry
    save_registry(result.registry, cfg.registry_path)
    ctx.detail["scan"] = result.to_dict()
    yield f"Registered {len(result.registry)} of {result.scanned} documents"
    yield from _failure_lines(result.failures)


def stage_export(ctx: BuildContext) -> LogStream:
    cfg = ctx.config
    registry = ctx.current_registry()
    yield f"Matching rendered pages in {cfg.rendered_path}"
    plan = plan_export(registry, cfg.rendered_path, cfg.route_base)

    relations = related = None
    if cfg.inject_navigation:
        # Hubs and relations as they will be once export succeeds
        preview = synthesize_hubs(plan.planned_registry(registry)).registry
        relations = build_relations(preview)
        related = build_related_links(preview)
        yield f"Navigation prepared for {len(relations.next_prev)} units"

    result = export_documents(
        registry,
        cfg.rendered_path,
        cfg.output_path,
        route_base=cfg.route_base,
        relations=relations,
        related=related,
        plan=plan,
    )
    ctx.registry = result.registry
    save_registry(result.registry, cfg.registry_path)
    dangling = dangling_footer_links(result, relations, related)
    ctx.detail["export"] = result.to_dict() | {"dangling_footer_links": len(dangling)}
    yield f"Exported {result.exported}/{result.attempted} documents ({result.unmatched} rendered files unmatched)"
    yield f"Links: {result.links_rewritten} rewritten, {result.links_unresolved} unresolved"
    yield from _failure_lines(result.failures)
    for doc_id, target in dangling:
        logger.warning("Footer of %s links to %s, which failed to export", doc_id, target)
        yield f"  ⚠ {doc_id}: footer links to unexported {target}"


def stage_hubs(ctx: BuildContext) -> LogStream:
    cfg = ctx.config
    synthesis = synthesize_hubs(ctx.current_registry())
    write_hub_pages(synthesis, cfg.output_path)
    ctx.registry = synthesis.registry
    save_registry(synthesis.registry, cfg.registry_path)
    ctx.detail["hubs"] = synthesis.to_dict()
    yield f"Generated {len(synthesis.pages)} hub pages"
    for doc_id in synthesis.skipped:
        yield f"  ⚠ {doc_id}: id taken by an authored document"


def stage_relations(ctx: BuildContext) -> LogStream:
    cfg = ctx.config
    graph = build_relations(ctx.current_registry())
    ctx.relations = graph
    save_relations(graph, cfg.relations_path)
    ctx.detail["relations"] = {"units": len(graph.next_prev)}
    yield f"Linked {len(graph.next_prev)} units"


def stage_manifest(ctx: BuildContext) -> LogStream:
    cfg = ctx.config
    manifest = assemble_manifest(
        ctx.current_registry(),
        ctx.current_relations(),
        now=ctx.now,
        strict_hubs=ctx.strict_hubs or cfg.strict_hubs,
    )
    ctx.manifest = manifest
    save_manifest(manifest, cfg.manifest_path)
    ctx.detail["manifest"] = {
        "pack_version": manifest.pack_version,
        "docs": len(manifest.docs),
        "nodes": len(manifest.tree),
    }
    yield f"Manifest {manifest.pack_version} written to {cfg.manifest_path}"


def stage_pack(ctx: BuildContext) -> LogStream:
    cfg = ctx.config
    if ctx.manifest is not None:
        version = ctx.manifest.pack_version
    else:
        data = load_manifest_data(cfg.manifest_path)
        version = str(data.get("packVersion") or _today(ctx))
    path = archive_pack(cfg.output_path, cfg.archive_path(version))
    ctx.archive = path
    ctx.detail["pack"] = {"archive": str(path)}
    yield f"Archive written to {path}"


def _today(ctx: BuildContext) -> str:
    return (ctx.now or datetime.now(UTC)).strftime("%Y.%m.%d")


StageFn = Callable[[BuildContext], LogStream]

PIPELINE_STAGES: list[tuple[StageInfo, StageFn]] = [
    (StageInfo("scan", "Scan Sources", "Build the document registry"), stage_scan),
    (StageInfo("export", "Export & Rewrite", "Clean rendered pages, rewrite links"), stage_export),
    (StageInfo("hubs", "Synthesize Hubs", "Generate notes, subject and semester hubs"), stage_hubs),
    (StageInfo("relations", "Build Relations", "Prev/next/up for units"), stage_relations),
    (StageInfo("manifest", "Assemble Manifest", "Docs map, tree and relations"), stage_manifest),
    (StageInfo("pack", "Archive Pack", "Verify and zip the output"), stage_pack),
]

STAGE_NAMES = [info.name for info, _fn in PIPELINE_STAGES]


def pipeline_stages(include_archive: bool = True) -> list[tuple[StageInfo, StageFn]]:
    if include_archive:
        return list(PIPELINE_STAGES)
    return [(info, fn) for info, fn in PIPELINE_STAGES if info.name != "pack"]


# ── Runner ──────────────────────────────────────────────────────────


def run_stage(info: StageInfo, fn: StageFn, ctx: BuildContext) -> StageResult:
    """Execute one stage, capturing its log lines, timing and error."""
    sr = StageResult(name=info.name, label=info.label, status="running")
    stage_start = time.monotonic()

    try:
        for line in fn(ctx):
            logger.debug("[%s] %s", info.name, line)
            sr.log_lines.append(line)
        sr.status = "done"
    except ContentPackError as e:
        sr.status = "error"
        sr.error = str(e)
    except Exception as e:
        logger.exception("Stage %s crashed", info.name)
        sr.status = "error"
        sr.error = f"Unexpected error: {e}"

    sr.duration_ms = int((time.monotonic() - stage_start) * 1000)
    sr.detail = ctx.detail.get(info.name, {})
    return sr


def run_pack_pipeline(
    config: PackConfig,
    include_archive: bool | None = None,
    strict_hubs: bool = False,
    now: datetime | None = None,
) -> PipelineResult:
    """Run every stage in order, stopping at the first failure.

    Returns:
        PipelineResult with one StageResult per declared stage.
    """
    if include_archive is None:
        include_archive = config.archive
    stages = pipeline_stages(include_archive)
    ctx = BuildContext(config=config, strict_hubs=strict_hubs, now=now)
    result = PipelineResult(output_dir=str(config.output_path))

    total_start = time.monotonic()
    all_ok = True

    for idx, (info, fn) in enumerate(stages):
        sr = run_stage(info, fn, ctx)
        result.stages.append(sr)

        # Stop pipeline on first error
        if sr.status == "error":
            all_ok = False
            logger.error("Stage %s failed: %s", info.name, sr.error)
            for rem, _fn in stages[idx + 1:]:
                result.stages.append(StageResult(name=rem.name, label=rem.label, status="skipped"))
            break

    result.ok = all_ok
    result.total_duration_ms = int((time.monotonic() - total_start) * 1000)
    if ctx.manifest is not None:
        result.pack_version = ctx.manifest.pack_version
    if ctx.archive is not None:
        result.archive_path = str(ctx.archive)
    return result
