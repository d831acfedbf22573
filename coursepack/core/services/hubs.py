"""
Hub synthesizer — landing pages for groupings that have no source file.

For every (semester, subject) group the synthesizer may create:

  - a notes hub listing the group's units by ordinal,
  - a subject hub listing handout / notes / assignment-style pages,

and for every semester with at least one subject hub, a semester hub
listing those subject hubs.  Generated ids carry the ``__`` separator,
so they never collide with ids minted from source paths.

``synthesize_hubs`` is pure; ``write_hub_pages`` puts the pages on disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from coursepack.core.models.entry import UNGROUPED_SUBJECT, Category, DocEntry, html_path_for
from coursepack.core.models.registry import Registry
from coursepack.core.persistence.artifacts import write_text_atomic
from coursepack.core.services.identity import notes_hub_id, semester_hub_id, subject_hub_id
from coursepack.core.services.page_templates import (
    CATEGORY_ICONS,
    HubCard,
    RelatedLink,
    render_hub,
)

logger = logging.getLogger(__name__)

STAGE = "hubs"

# Categories that get a card on the subject hub
SUBJECT_CARD_CATEGORIES = (
    Category.HANDOUT,
    Category.NOTES_INDEX,
    Category.ASSIGNMENTS,
    Category.MISC,
    Category.PYQ,
    Category.PROJECTS,
)

SEMESTER_HUB_ORDER = 0
SUBJECT_HUB_ORDER = 0
NOTES_HUB_ORDER = 2

NOTES_CARD_TITLE = "Notes"


@dataclass
class HubSynthesis:
    """Registry with generated hubs merged in, plus the hub pages."""

    registry: Registry
    pages: dict[str, str] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)

    @property
    def created(self) -> list[str]:
        return list(self.pages)

    def to_dict(self) -> dict:
        return {
            "created": len(self.pages),
            "skipped": len(self.skipped),
            "hubs": self.created,
            "total_entries": len(self.registry),
        }


def group_by_course(registry: Registry) -> dict[int, dict[str, list[tuple[str, DocEntry]]]]:
    """semester → subject → authored entries, in registry order.

    Ungrouped entries and previously generated hubs are left out.
    """
    semesters: dict[int, dict[str, list[tuple[str, DocEntry]]]] = {}
    for doc_id, entry in registry.items():
        if entry.is_generated or not entry.is_grouped:
            continue
        semesters.setdefault(entry.semester, {}).setdefault(entry.subject, []).append((doc_id, entry))
    return semesters


def _hub_entry(
    title: str, semester: int, subject: str, category: Category, order: int, doc_id: str,
) -> DocEntry:
    return DocEntry(
        title=title,
        semester=semester,
        subject=subject,
        category=category,
        is_hub=True,
        is_generated=True,
        order=order,
        html=html_path_for(doc_id),
    )


class _HubCollector:
    """Accumulates generated entries without touching authored ones."""

    def __init__(self, registry: Registry):
        self.registry = registry
        self.entries: dict[str, DocEntry] = {}
        self.pages: dict[str, str] = {}
        self.skipped: list[str] = []

    def add(self, doc_id: str, entry: DocEntry, page: str) -> None:
        existing = self.registry.get(doc_id)
        if existing is not None and not existing.is_generated:
            logger.warning("Hub id %s is already an authored document; leaving it alone", doc_id)
            self.skipped.append(doc_id)
            return
        self.entries[doc_id] = entry
        self.pages[doc_id] = page
        logger.debug("Generated hub %s", doc_id)


def _subject_cards(docs: list[tuple[str, DocEntry]], notes_hub: str | None) -> list[HubCard]:
    ranked = [
        (entry.order, doc_id, HubCard(doc_id, entry.title, entry.category))
        for doc_id, entry in docs
        if entry.category in SUBJECT_CARD_CATEGORIES
    ]
    if notes_hub:
        ranked.append((NOTES_HUB_ORDER, notes_hub, HubCard(notes_hub, NOTES_CARD_TITLE, Category.NOTES_HUB)))
    ranked.sort(key=lambda r: (r[0], r[1]))
    return [card for _order, _id, card in ranked]


def synthesize_hubs(registry: Registry) -> HubSynthesis:
    """Derive notes, subject and semester hubs from ``registry``.

    Existing keys are never overwritten.  Running this on its own output
    yields the same registry.
    """
    collector = _HubCollector(registry)

    for semester, subjects in sorted(group_by_course(registry).items()):
        semester_label = f"Semester {semester}"
        sem_hub = semester_hub_id(semester)
        subject_cards: list[HubCard] = []

        for subject in sorted(subjects):
            docs = subjects[subject]
            subj_hub = subject_hub_id(semester, subject)

            units = sorted(
                ((doc_id, e) for doc_id, e in docs if e.category == Category.UNIT),
                key=lambda pair: (pair[1].unit or 0, pair[0]),
            )
            notes_hub = notes_hub_id(semester, subject) if units else None
            if notes_hub:
                page = render_hub(
                    title=f"Notes - {subject}",
                    heading=NOTES_CARD_TITLE,
                    subtitle=subject,
                    icon=CATEGORY_ICONS[Category.NOTES_HUB],
                    cards=[HubCard(doc_id, e.title, Category.UNIT) for doc_id, e in units],
                    back=RelatedLink(subj_hub, subject),
                )
                entry = _hub_entry(
                    f"Notes - {subject}", semester, subject,
                    Category.NOTES_HUB, NOTES_HUB_ORDER, notes_hub,
                )
                collector.add(notes_hub, entry, page)

            cards = _subject_cards(docs, notes_hub)
            if not cards:
                logger.debug("No hub cards for %s / %s", semester_label, subject)
                continue

            page = render_hub(
                title=subject,
                heading=subject,
                subtitle=semester_label,
                icon=CATEGORY_ICONS[Category.SUBJECT_HUB],
                cards=cards,
                back=RelatedLink(sem_hub, semester_label),
            )
            entry = _hub_entry(subject, semester, subject, Category.SUBJECT_HUB, SUBJECT_HUB_ORDER, subj_hub)
            collector.add(subj_hub, entry, page)
            subject_cards.append(HubCard(subj_hub, subject, Category.SUBJECT_HUB))

        if not subject_cards:
            continue

        page = render_hub(
            title=semester_label,
            heading=semester_label,
            subtitle="Course materials",
            icon=CATEGORY_ICONS[Category.SEMESTER_HUB],
            cards=subject_cards,
        )
        entry = _hub_entry(
            semester_label, semester, UNGROUPED_SUBJECT,
            Category.SEMESTER_HUB, SEMESTER_HUB_ORDER, sem_hub,
        )
        collector.add(sem_hub, entry, page)

    merged = registry.merged(collector.entries)
    logger.info("Synthesized %d hub pages (%d skipped)", len(collector.pages), len(collector.skipped))
    return HubSynthesis(registry=merged, pages=collector.pages, skipped=collector.skipped)


def write_hub_pages(synthesis: HubSynthesis, out_dir: Path) -> list[Path]:
    """Write every synthesized page to ``<out>/docs/<id>.html``."""
    written = []
    for doc_id, page in synthesis.pages.items():
        path = out_dir / html_path_for(doc_id)
        write_text_atomic(path, page)
        written.append(path)
    return written
