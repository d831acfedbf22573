"""
Relation builder — prev / next / up pointers for unit documents.
"""

from __future__ import annotations

import logging

from coursepack.core.models.entry import Category, DocEntry
from coursepack.core.models.manifest import Relation, RelationGraph
from coursepack.core.models.registry import Registry
from coursepack.core.services.identity import course_key, notes_hub_id, subject_hub_id
from coursepack.core.services.page_templates import RelatedLink

logger = logging.getLogger(__name__)

STAGE = "relations"

_NOTES_LANDING = (Category.NOTES_INDEX, Category.NOTES_HUB)


def units_by_course(registry: Registry) -> dict[str, list[tuple[str, DocEntry]]]:
    """course key → units sorted by ``(unit, docId)``."""
    courses: dict[str, list[tuple[str, DocEntry]]] = {}
    for doc_id, entry in registry.items():
        if entry.category != Category.UNIT:
            continue
        key = course_key(entry.semester, entry.subject)
        courses.setdefault(key, []).append((doc_id, entry))
    for units in courses.values():
        units.sort(key=lambda pair: (pair[1].unit or 0, pair[0]))
    return courses


def resolve_up(registry: Registry, semester: int, subject: str) -> str | None:
    """Notes landing page for a course.

    The generated notes hub wins; otherwise the authored notes index (or
    notes hub) of the same course with the lowest ``order``.
    """
    generated = notes_hub_id(semester, subject)
    if generated in registry:
        return generated

    candidates = sorted(
        (entry.order, doc_id)
        for doc_id, entry in registry.items()
        if entry.category in _NOTES_LANDING
        and entry.semester == semester
        and entry.subject == subject
    )
    return candidates[0][1] if candidates else None


def build_relations(registry: Registry) -> RelationGraph:
    """Chain every course's units in ordinal order."""
    next_prev: dict[str, Relation] = {}

    for key, units in sorted(units_by_course(registry).items()):
        first = units[0][1]
        up = resolve_up(registry, first.semester, first.subject)
        if up is None:
            logger.debug("Course %s has no notes landing page", key)

        ids = [doc_id for doc_id, _ in units]
        for i, doc_id in enumerate(ids):
            next_prev[doc_id] = Relation(
                prev=ids[i - 1] if i > 0 else None,
                next=ids[i + 1] if i + 1 < len(ids) else None,
                up=up,
            )

    logger.info("Built relations for %d units", len(next_prev))
    return RelationGraph(next_prev=next_prev)


def build_related_links(registry: Registry) -> dict[str, list[RelatedLink]]:
    """Related block for each unit: the course handout and the subject hub."""
    related: dict[str, list[RelatedLink]] = {}

    handouts: dict[tuple[int, str], tuple[int, str]] = {}
    for doc_id, entry in registry.items():
        if entry.category == Category.HANDOUT:
            group = (entry.semester, entry.subject)
            best = handouts.get(group)
            if best is None or (entry.order, doc_id) < best:
                handouts[group] = (entry.order, doc_id)

    for doc_id, entry in registry.items():
        if entry.category != Category.UNIT:
            continue
        links: list[RelatedLink] = []
        handout = handouts.get((entry.semester, entry.subject))
        if handout:
            handout_id = handout[1]
            links.append(RelatedLink(handout_id, registry[handout_id].title))
        hub = subject_hub_id(entry.semester, entry.subject)
        if hub in registry:
            links.append(RelatedLink(hub, f"{entry.subject} overview"))
        if links:
            related[doc_id] = links

    return related
