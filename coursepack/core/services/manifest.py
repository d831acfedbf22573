"""
Manifest assembler — docs map, navigation tree and relations in one file.

Tree shape::

    semester_1 (hub: semester hub)
    ├── subject_s1_c_programming (hub: subject hub)
    │   ├── Notes (hub: notes hub)
    │   │   ├── unit 1
    │   │   └── unit 2
    │   └── handout
    └── ...
    intro                       (semester 0: leaves only)

Folders come before leaves at every level; leaves are ordered by
``(order, docId)``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime

from coursepack.core.errors import IntegrityError
from coursepack.core.models.entry import UNGROUPED_SUBJECT, Category, DocEntry
from coursepack.core.models.manifest import Manifest, NavNode, NodeKind, RelationGraph
from coursepack.core.models.registry import Registry
from coursepack.core.services.identity import (
    derive_id,
    notes_hub_id,
    semester_hub_id,
    subject_hub_id,
)

logger = logging.getLogger(__name__)

STAGE = "manifest"

# Fields of a DocEntry exposed to the client
DOC_FIELDS = ("title", "category", "html", "semester", "subject", "unit", "isHub", "order")

INTRO_NODE_ID = "intro"
INTRO_TITLE = "Introduction"
NOTES_FOLDER_TITLE = "Notes"


def pack_version(now: datetime) -> str:
    """Date-stamped version, ``YYYY.MM.DD``."""
    return now.strftime("%Y.%m.%d")


def build_docs_map(registry: Registry) -> dict[str, dict]:
    docs = {}
    for doc_id, entry in registry.items():
        wire = entry.to_wire()
        docs[doc_id] = {key: wire.get(key) for key in DOC_FIELDS}
    return docs


# ── Tree ────────────────────────────────────────────────────────────


def _leaf(doc_id: str, entry: DocEntry) -> NavNode:
    return NavNode(
        kind=NodeKind.LEAF,
        id=doc_id,
        title=entry.title,
        doc_id=doc_id,
        category=str(entry.category),
    )


def _leaves(pairs: list[tuple[str, DocEntry]]) -> list[NavNode]:
    ordered = sorted(pairs, key=lambda pair: (pair[1].order, pair[0]))
    return [_leaf(doc_id, entry) for doc_id, entry in ordered]


def _first_authored(pairs: list[tuple[str, DocEntry]], category: Category) -> str | None:
    found = sorted((e.order, doc_id) for doc_id, e in pairs if e.category == category)
    return found[0][1] if found else None


def _hub_or_authored(
    registry: Registry, generated_id: str, pairs: list[tuple[str, DocEntry]], category: Category,
) -> str | None:
    if generated_id in registry:
        return generated_id
    return _first_authored(pairs, category)


def subject_node_id(semester: int, subject: str) -> str:
    return f"subject_s{semester}_{derive_id(subject)}"


def _subject_node(
    registry: Registry, semester: int, subject: str, pairs: list[tuple[str, DocEntry]],
) -> NavNode:
    node_id = subject_node_id(semester, subject)
    hub = _hub_or_authored(registry, subject_hub_id(semester, subject), pairs, Category.SUBJECT_INDEX)

    units = [(doc_id, e) for doc_id, e in pairs if e.category == Category.UNIT]
    folders: list[NavNode] = []
    referenced = {hub}

    if units:
        notes_hub = _hub_or_authored(
            registry, notes_hub_id(semester, subject), pairs, Category.NOTES_INDEX,
        )
        referenced.add(notes_hub)
        ordered_units = sorted(units, key=lambda pair: (pair[1].unit or 0, pair[0]))
        folders.append(NavNode(
            kind=NodeKind.FOLDER,
            id=f"{node_id}_notes",
            title=NOTES_FOLDER_TITLE,
            hub_doc_id=notes_hub,
            children=[_leaf(doc_id, e) for doc_id, e in ordered_units],
        ))

    rest = [
        (doc_id, e) for doc_id, e in pairs
        if e.category != Category.UNIT and doc_id not in referenced and not e.is_generated
    ]
    return NavNode(
        kind=NodeKind.SUBJECT,
        id=node_id,
        title=subject,
        hub_doc_id=hub,
        children=folders + _leaves(rest),
    )


def build_tree(registry: Registry) -> list[NavNode]:
    """Semester → subject → {Notes folder, leaves}."""
    semesters: dict[int, dict[str, list[tuple[str, DocEntry]]]] = {}
    for doc_id, entry in registry.items():
        semesters.setdefault(entry.semester, {}).setdefault(entry.subject, []).append((doc_id, entry))

    tree: list[NavNode] = []
    for semester in sorted(semesters):
        subjects = semesters[semester]

        if semester == 0:
            pairs = [pair for group in subjects.values() for pair in group]
            tree.append(NavNode(
                kind=NodeKind.SEMESTER,
                id=INTRO_NODE_ID,
                title=INTRO_TITLE,
                children=_leaves(pairs),
            ))
            continue

        loose = subjects.get(UNGROUPED_SUBJECT, [])
        hub = _hub_or_authored(registry, semester_hub_id(semester), loose, Category.SEMESTER_INDEX)
        subject_nodes = [
            _subject_node(registry, semester, subject, subjects[subject])
            for subject in sorted(s for s in subjects if s != UNGROUPED_SUBJECT)
        ]
        leftovers = [(doc_id, e) for doc_id, e in loose if doc_id != hub and not e.is_generated]

        tree.append(NavNode(
            kind=NodeKind.SEMESTER,
            id=f"semester_{semester}",
            title=f"Semester {semester}",
            hub_doc_id=hub,
            children=subject_nodes + _leaves(leftovers),
        ))

    return tree


# ── Validation ──────────────────────────────────────────────────────


@dataclass
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {"ok": self.ok, "errors": self.errors, "warnings": self.warnings}


def validate_manifest(
    docs: Mapping[str, object],
    tree: list[NavNode],
    relations: RelationGraph,
    strict_hubs: bool = False,
) -> ValidationReport:
    """Check every id the tree and relations reference against ``docs``.

    A missing leaf or relation target is an error.  A missing
    ``hubDocId`` is a warning unless ``strict_hubs`` is set.
    """
    report = ValidationReport()

    for root in tree:
        for node in root.walk():
            if node.kind == NodeKind.LEAF:
                if node.doc_id not in docs:
                    report.errors.append(f"Tree leaf {node.id} references missing doc {node.doc_id}")
            elif node.hub_doc_id and node.hub_doc_id not in docs:
                msg = f"Node {node.id} references missing hub {node.hub_doc_id}"
                (report.errors if strict_hubs else report.warnings).append(msg)

    for doc_id, rel in relations.next_prev.items():
        if doc_id not in docs:
            report.errors.append(f"Relation key {doc_id} is not in docs")
        for name in ("prev", "next", "up"):
            target = getattr(rel, name)
            if target and target not in docs:
                report.errors.append(f"Relation {doc_id}.{name} references missing doc {target}")

    return report


def assemble_manifest(
    registry: Registry,
    relations: RelationGraph,
    now: datetime | None = None,
    strict_hubs: bool = False,
) -> Manifest:
    """Build and validate the manifest.

    Raises:
        IntegrityError: If the tree or relations reference unknown ids.
    """
    now = now or datetime.now(UTC)
    docs = build_docs_map(registry)
    tree = build_tree(registry)

    report = validate_manifest(docs, tree, relations, strict_hubs=strict_hubs)
    for warning in report.warnings:
        logger.warning(warning)
    if not report.ok:
        for error in report.errors:
            logger.error(error)
        raise IntegrityError(report.errors)

    manifest = Manifest(
        pack_version=pack_version(now),
        generated_at=now.astimezone(UTC).isoformat(),
        docs=docs,
        tree=tree,
        relations=relations,
    )
    logger.info(
        "Manifest %s: %d docs, %d top-level nodes, %d relations",
        manifest.pack_version, len(docs), len(tree), len(relations.next_prev),
    )
    return manifest
