"""
Content exporter — turn rendered HTML pages into clean offline documents.

Two passes:

  1. ``plan_export`` matches every rendered file to a registry entry
     (pure, touches no output).  The orchestrator uses the plan to
     preview hubs and relations before anything is written.
  2. ``export_documents`` cleans each matched page, rewrites its links
     to ``app://doc/<docId>``, optionally appends navigation, and writes
     ``<out>/docs/<docId>.html``.

A failure on one document is recorded and the batch moves on.  The
stage only fails when every attempted document failed.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path

from coursepack.core.errors import DocumentFailure, MissingArtifactError, StageFailedError
from coursepack.core.models.entry import DocEntry, html_path_for
from coursepack.core.models.manifest import RelationGraph
from coursepack.core.models.registry import Registry
from coursepack.core.persistence.artifacts import write_text_atomic
from coursepack.core.services.html_document import HtmlDocument, parse_html
from coursepack.core.services.identity import route_for_source
from coursepack.core.services.link_rewriter import HrefKind, LinkResolver, classify_href
from coursepack.core.services.page_templates import (
    RelatedLink,
    render_document,
    render_related,
    render_sequence_nav,
)

logger = logging.getLogger(__name__)

STAGE = "export"

RENDERED_SUFFIXES = (".html", ".htm")

# First match is the content region
CONTENT_SELECTORS = ("article", ".theme-doc-markdown", ".markdown", "main", "body")

# Site chrome stripped from the content region
CHROME_SELECTORS = (
    "nav",
    "footer",
    ".navbar",
    ".sidebar",
    ".pagination-nav",
    ".tocCollapsible",
    ".tableOfContents",
    ".theme-doc-toc-desktop",
    ".breadcrumbs",
)

# Page-level landmarks, stripped only when no content container matched.
# Inside an article, header holds the front-matter h1.
PAGE_CHROME_SELECTORS = ("header", "aside")

STRIPPED_TAGS = ("script", "noscript")

DEFAULT_TITLE = "Document"

# CSS-module class names, e.g. codeBlock_bY9V
_HASHED_CLASS_RE = re.compile(r"_[A-Za-z0-9-]{4,}")


# ── Rendered file discovery & matching ──────────────────────────────


def discover_rendered(rendered_root: Path) -> list[tuple[str, Path]]:
    """List rendered pages as sorted ``(route, path)`` pairs.

    ``a/b/index.html`` and ``a/b.html`` both publish route ``a/b``.
    """
    found: list[tuple[str, Path]] = []
    pending: deque[Path] = deque([rendered_root])

    while pending:
        current = pending.popleft()
        try:
            children = list(current.iterdir())
        except OSError as e:
            logger.warning("Skipping unreadable directory %s: %s", current, e)
            continue
        for child in children:
            if child.name.startswith("."):
                continue
            if child.is_dir():
                pending.append(child)
            elif child.suffix.lower() in RENDERED_SUFFIXES:
                rel = child.relative_to(rendered_root).as_posix()
                found.append((route_for_source(rel), child))

    found.sort(key=lambda pair: pair[1].relative_to(rendered_root).as_posix())
    return found


@dataclass(frozen=True)
class ExportPlanItem:
    doc_id: str
    route: str
    path: Path


@dataclass
class ExportPlan:
    """Which rendered file feeds which registry entry."""

    items: list[ExportPlanItem] = field(default_factory=list)
    unmatched: list[str] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)

    @property
    def doc_ids(self) -> list[str]:
        return [item.doc_id for item in self.items]

    def planned_registry(self, registry: Registry) -> Registry:
        """The registry the export would return if every page succeeds."""
        return registry.subset(self.doc_ids).replaced({
            doc_id: _exported_entry(registry[doc_id], doc_id) for doc_id in self.doc_ids
        })


def plan_export(
    registry: Registry,
    rendered_root: Path,
    route_base: str = "/docs",
    resolver: LinkResolver | None = None,
) -> ExportPlan:
    """Match rendered files to registry entries.

    Raises:
        MissingArtifactError: If ``rendered_root`` is not a directory.
    """
    if not rendered_root.is_dir():
        raise MissingArtifactError(f"Rendered output not found: {rendered_root}")

    resolver = resolver or LinkResolver(registry, route_base)
    plan = ExportPlan()
    claimed: set[str] = set()

    for route, path in discover_rendered(rendered_root):
        rel = path.relative_to(rendered_root).as_posix()
        doc_id = resolver.resolve_route(route)
        if doc_id is None:
            logger.debug("No registry entry for rendered file %s", rel)
            plan.unmatched.append(rel)
            continue
        if doc_id in claimed:
            logger.info("Rendered file %s also maps to %s; keeping the first", rel, doc_id)
            plan.duplicates.append(rel)
            continue
        claimed.add(doc_id)
        plan.items.append(ExportPlanItem(doc_id=doc_id, route=route, path=path))

    logger.info(
        "Export plan: %d matched, %d unmatched, %d duplicate",
        len(plan.items), len(plan.unmatched), len(plan.duplicates),
    )
    return plan


# ── Per-document cleaning ───────────────────────────────────────────


@dataclass
class CleanedDocument:
    title: str
    content_html: str
    rewritten: int = 0
    unresolved: list[str] = field(default_factory=list)


def _content_region(doc: HtmlDocument):
    """Return the content element and whether it is the whole page body."""
    for selector in CONTENT_SELECTORS:
        el = doc.select_one(selector)
        if el is not None:
            return el, selector == "body"
    return doc.root(), True


def _extract_title(doc: HtmlDocument, region) -> str:
    h1 = doc.select_one("h1", region)
    if h1 is not None:
        text = doc.text(h1)
        if text:
            return text
    title_el = doc.select_one("title")
    if title_el is not None:
        text = doc.text(title_el).split("|", 1)[0].strip()
        if text:
            return text
    return DEFAULT_TITLE


def _is_absolute_src(src: str) -> bool:
    src = src.strip()
    return src.startswith("/") or src.lower().startswith(("http://", "https://"))


def _strip_hashed_classes(value: str) -> str:
    return " ".join(tok for tok in value.split() if not _HASHED_CLASS_RE.search(tok))


def clean_document(markup: str, current_route: str, resolver: LinkResolver) -> CleanedDocument:
    """Extract and sanitize the content of one rendered page."""
    doc = parse_html(markup)
    region, whole_page = _content_region(doc)

    selectors = CHROME_SELECTORS + STRIPPED_TAGS
    if whole_page:
        selectors += PAGE_CHROME_SELECTORS
    for selector in selectors:
        for el in doc.select(selector, region):
            doc.remove(el)

    title = _extract_title(doc, region)
    result = CleanedDocument(title=title, content_html="")

    for a in doc.select("a[href]", region):
        href = doc.get_attr(a, "href") or ""
        if classify_href(href) != HrefKind.INTERNAL:
            continue
        target = resolver.rewrite(href, current_route)
        if target is None:
            result.unresolved.append(href)
            continue
        doc.set_attr(a, "href", target)
        result.rewritten += 1

    for img in doc.select("img", region):
        src = doc.get_attr(img, "src") or ""
        if _is_absolute_src(src):
            alt = (doc.get_attr(img, "alt") or "").strip() or "Image"
            doc.replace_with_new(img, "span", f"[{alt}]", {"class": "image-placeholder"})

    for el in doc.all_elements(region):
        for name in doc.attr_names(el):
            if name.lower().startswith("on"):
                doc.remove_attr(el, name)
        classes = doc.get_attr(el, "class")
        if classes is not None:
            kept = _strip_hashed_classes(classes)
            if kept:
                doc.set_attr(el, "class", kept)
            else:
                doc.remove_attr(el, "class")

    result.content_html = doc.inner_html(region)
    return result


# ── Batch export ────────────────────────────────────────────────────


@dataclass
class ExportResult:
    """Outcome of one export run."""

    registry: Registry
    attempted: int = 0
    unmatched: int = 0
    duplicates: int = 0
    links_rewritten: int = 0
    links_unresolved: int = 0
    failures: list[DocumentFailure] = field(default_factory=list)

    @property
    def exported(self) -> int:
        return len(self.registry)

    def to_dict(self) -> dict:
        return {
            "attempted": self.attempted,
            "exported": self.exported,
            "failed": len(self.failures),
            "unmatched": self.unmatched,
            "duplicates": self.duplicates,
            "links_rewritten": self.links_rewritten,
            "links_unresolved": self.links_unresolved,
            "failures": [f.to_dict() for f in self.failures],
        }


def _exported_entry(entry: DocEntry, doc_id: str) -> DocEntry:
    return entry.model_copy(update={"html": html_path_for(doc_id), "is_generated": False})


def _footer_for(
    doc_id: str,
    relations: RelationGraph | None,
    related: dict[str, list[RelatedLink]] | None,
) -> str:
    parts = []
    if related and related.get(doc_id):
        parts.append(render_related(related[doc_id]))
    relation = relations.get(doc_id) if relations else None
    if relation is not None:
        parts.append(render_sequence_nav(relation))
    return "\n".join(parts)


def export_documents(
    registry: Registry,
    rendered_root: Path,
    out_dir: Path,
    route_base: str = "/docs",
    relations: RelationGraph | None = None,
    related: dict[str, list[RelatedLink]] | None = None,
    plan: ExportPlan | None = None,
) -> ExportResult:
    """Export every rendered page that matches a registry entry.

    Returns the exported subset of ``registry`` with ``html`` set.

    Raises:
        MissingArtifactError: If the rendered directory is missing.
        StageFailedError: If documents were attempted and none exported.
    """
    resolver = LinkResolver(registry, route_base)
    if plan is None:
        plan = plan_export(registry, rendered_root, route_base, resolver=resolver)

    exported: dict[str, DocEntry] = {}
    failures: list[DocumentFailure] = []
    rewritten = 0
    unresolved = 0

    for item in plan.items:
        try:
            markup = item.path.read_text(encoding="utf-8")
            cleaned = clean_document(markup, item.route, resolver)
            footer = _footer_for(item.doc_id, relations, related)
            page = render_document(cleaned.title, cleaned.content_html, footer)
            write_text_atomic(out_dir / html_path_for(item.doc_id), page)
        except Exception as e:
            logger.warning("Export failed for %s: %s", item.doc_id, e)
            failures.append(DocumentFailure(doc=item.doc_id, stage=STAGE, reason=str(e)))
            continue

        for href in cleaned.unresolved:
            logger.info("Unresolved link in %s: %s", item.doc_id, href)
        rewritten += cleaned.rewritten
        unresolved += len(cleaned.unresolved)
        exported[item.doc_id] = _exported_entry(registry[item.doc_id], item.doc_id)

    attempted = len(plan.items)
    if attempted > 0 and not exported:
        raise StageFailedError(f"All {attempted} documents failed to export")
    if attempted == 0:
        logger.warning("No rendered documents matched the registry")

    # Keep registry order, not rendered-file order
    result_registry = Registry(entries={k: exported[k] for k in registry.ids() if k in exported})

    logger.info(
        "Exported %d/%d documents (%d links rewritten, %d unresolved)",
        len(exported), attempted, rewritten, unresolved,
    )
    return ExportResult(
        registry=result_registry,
        attempted=attempted,
        unmatched=len(plan.unmatched),
        duplicates=len(plan.duplicates),
        links_rewritten=rewritten,
        links_unresolved=unresolved,
        failures=failures,
    )


def dangling_footer_links(
    result: ExportResult,
    relations: RelationGraph | None,
    related: dict[str, list[RelatedLink]] | None,
) -> list[tuple[str, str]]:
    """``(doc_id, target)`` for footer links written to a page whose target failed to export.

    Footers are rendered from the planned registry before any page is
    written, so a failed page leaves its neighbours pointing at it.
    """
    failed = {f.doc for f in result.failures}
    if not failed:
        return []

    dangling: list[tuple[str, str]] = []
    for doc_id in result.registry.ids():
        targets: list[str | None] = []
        relation = relations.get(doc_id) if relations else None
        if relation is not None:
            targets += [relation.prev, relation.next, relation.up]
        if related:
            targets += [link.doc_id for link in related.get(doc_id, [])]
        dangling.extend((doc_id, target) for target in targets if target in failed)
    return dangling
