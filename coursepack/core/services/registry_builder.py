"""
Registry builder — scan the docs tree and mint an entry per document.

Traversal is an explicit work-list (no recursion) and the resulting
paths are sorted lexicographically, so ids, collision suffixes and
``order`` values come out the same on every run of an unchanged tree.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from coursepack.core.errors import DocumentFailure, MissingArtifactError
from coursepack.core.models.entry import UNGROUPED_SUBJECT, DocEntry
from coursepack.core.models.registry import Registry
from coursepack.core.services.classification import DocPath, classify, humanize
from coursepack.core.services.identity import IdAllocator, id_for_route, route_for_source

logger = logging.getLogger(__name__)

STAGE = "scan"

SOURCE_SUFFIXES = (".md", ".mdx")

# Directories never descended into
_SKIP_DIRS = {"node_modules", "__pycache__"}

_FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*(?:\n|$)", re.DOTALL)
_HEADING_RE = re.compile(r"^#\s+(.+?)\s*#*\s*$", re.MULTILINE)


@dataclass
class ScanResult:
    """Outcome of one registry scan."""

    registry: Registry
    scanned: int = 0
    failures: list[DocumentFailure] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "scanned": self.scanned,
            "registered": len(self.registry),
            "failed": len(self.failures),
            "failures": [f.to_dict() for f in self.failures],
        }


def discover_sources(docs_root: Path) -> list[str]:
    """List source documents under ``docs_root`` as sorted POSIX paths.

    Hidden entries and ``_``-prefixed partials are skipped.

    Raises:
        MissingArtifactError: If ``docs_root`` is not a readable directory.
    """
    if not docs_root.is_dir():
        raise MissingArtifactError(f"Docs directory not found: {docs_root}")

    found: list[str] = []
    pending: deque[Path] = deque([docs_root])

    while pending:
        current = pending.popleft()
        try:
            children = list(current.iterdir())
        except OSError as e:
            if current == docs_root:
                raise MissingArtifactError(f"Cannot read docs directory {docs_root}: {e}") from e
            logger.warning("Skipping unreadable directory %s: %s", current, e)
            continue

        for child in children:
            if child.name.startswith((".", "_")):
                continue
            if child.is_dir():
                if child.name not in _SKIP_DIRS:
                    pending.append(child)
            elif child.suffix.lower() in SOURCE_SUFFIXES:
                found.append(child.relative_to(docs_root).as_posix())

    return sorted(found)


def extract_title(text: str) -> str | None:
    """Title from front-matter ``title:``, else the first ``# `` heading."""
    m = _FRONTMATTER_RE.match(text)
    body = text
    if m:
        body = text[m.end():]
        try:
            meta = yaml.safe_load(m.group(1))
        except yaml.YAMLError as e:
            logger.debug("Ignoring malformed front matter: %s", e)
            meta = None
        if isinstance(meta, dict):
            title = meta.get("title")
            if title is not None and str(title).strip():
                return str(title).strip()

    heading = _HEADING_RE.search(body)
    if heading:
        return heading.group(1).strip()
    return None


def subject_for(p: DocPath, rel_path: str) -> str:
    """Humanised subject folder, or the ungrouped sentinel."""
    if p.semester == 0 or len(p.segments) < 3:
        return UNGROUPED_SUBJECT
    folder = rel_path.replace("\\", "/").split("/")[1]
    return humanize(folder) or UNGROUPED_SUBJECT


def build_registry(docs_root: Path) -> ScanResult:
    """Scan ``docs_root`` and build a fresh Registry.

    Raises:
        MissingArtifactError: If the docs root is missing or unreadable.
    """
    sources = discover_sources(docs_root)
    logger.info("Found %d source documents under %s", len(sources), docs_root)

    allocator = IdAllocator()
    entries: dict[str, DocEntry] = {}
    failures: list[DocumentFailure] = []

    group: tuple[int, str] | None = None
    order = 0

    for rel_path in sources:
        try:
            text = (docs_root / rel_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping unreadable document %s: %s", rel_path, e)
            failures.append(DocumentFailure(doc=rel_path, stage=STAGE, reason=str(e)))
            continue

        p = DocPath.parse(rel_path)
        semester = p.semester
        subject = subject_for(p, rel_path)
        verdict = classify(rel_path)
        route = route_for_source(rel_path)

        if (semester, subject) != group:
            group = (semester, subject)
            order = 0

        doc_id = allocator.allocate(id_for_route(route))
        if doc_id != id_for_route(route):
            logger.info("Id collision for %s, assigned %s", rel_path, doc_id)

        title = extract_title(text) or humanize(route.rsplit("/", 1)[-1]) or "Home"

        entries[doc_id] = DocEntry(
            title=title,
            semester=semester,
            subject=subject,
            category=verdict.category,
            unit=verdict.unit,
            is_hub=verdict.is_hub,
            order=order,
            source=rel_path,
        )
        order += 1

    logger.info("Registry built: %d entries, %d skipped", len(entries), len(failures))
    return ScanResult(
        registry=Registry(entries=entries),
        scanned=len(sources),
        failures=failures,
    )
