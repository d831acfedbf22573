"""
Document classification — ordered rule table.

Rules are evaluated top-down and the first match wins, so a file named
``handout_unit1.mdx`` is a unit, not a handout.  Each rule is a named
predicate over a ``DocPath`` so priority is visible in one list and
every rule can be tested on its own.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from coursepack.core.models.entry import AUTHORED_HUB_CATEGORIES, Category

_SEMESTER_RE = re.compile(r"^semester[\s_-]*(\d+)$", re.IGNORECASE)
_UNIT_RE = re.compile(r"unit[_-]?(\d+)", re.IGNORECASE)


@dataclass(frozen=True)
class DocPath:
    """A source path split into the pieces the rules look at.

    ``segments`` are the lower-cased folder names plus the file stem,
    e.g. ``semester_1/c_programming/notes/unit1.mdx`` →
    ``("semester_1", "c_programming", "notes", "unit1")``.
    """

    rel_path: str
    segments: tuple[str, ...]

    @classmethod
    def parse(cls, rel_path: str) -> DocPath:
        parts = [p for p in rel_path.replace("\\", "/").split("/") if p]
        if parts:
            stem = parts[-1]
            if "." in stem:
                stem = stem.rsplit(".", 1)[0]
            parts[-1] = stem
        return cls(rel_path=rel_path, segments=tuple(p.lower() for p in parts))

    @property
    def stem(self) -> str:
        return self.segments[-1] if self.segments else ""

    @property
    def folders(self) -> tuple[str, ...]:
        return self.segments[:-1]

    @property
    def is_index(self) -> bool:
        return self.stem == "index"

    @property
    def semester(self) -> int:
        """Semester number from a leading ``semester_N`` folder, else 0."""
        if len(self.segments) < 2:
            return 0
        m = _SEMESTER_RE.match(self.segments[0])
        return int(m.group(1)) if m else 0

    @property
    def unit_ordinal(self) -> int | None:
        # notes/unit3/index.mdx is published as notes/unit3
        name = self.folders[-1] if self.is_index and self.folders else self.stem
        m = _UNIT_RE.search(name)
        return int(m.group(1)) if m else None

    @property
    def local_segments(self) -> tuple[str, ...]:
        """Segments below the semester and subject folders.

        Keyword rules only look here, so a subject called
        "Project Management" does not turn every file into ``projects``.
        """
        if self.semester == 0:
            return self.segments
        if len(self.segments) >= 3:
            return self.segments[2:]
        return self.segments[1:]

    def mentions(self, keyword: str) -> bool:
        """True if a local segment (folder or stem) contains ``keyword``."""
        return any(keyword in seg for seg in self.local_segments)


# ── Predicates ──────────────────────────────────────────────────────


def is_unit(p: DocPath) -> bool:
    return p.unit_ordinal is not None


def is_handout(p: DocPath) -> bool:
    return p.mentions("handout")


def is_notes_index(p: DocPath) -> bool:
    return p.is_index and bool(p.folders) and p.folders[-1] == "notes"


def is_notes(p: DocPath) -> bool:
    return p.mentions("notes")


def is_assignments(p: DocPath) -> bool:
    return p.mentions("assignment")


def is_misc(p: DocPath) -> bool:
    return p.mentions("misc") or p.mentions("activities")


def is_pyq(p: DocPath) -> bool:
    return p.mentions("pyq")


def is_projects(p: DocPath) -> bool:
    return p.mentions("project")


def is_subject_index(p: DocPath) -> bool:
    return p.is_index and len(p.segments) == 3 and p.semester > 0


def is_semester_index(p: DocPath) -> bool:
    return p.is_index and len(p.segments) == 2 and p.semester > 0


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    predicate: Callable[[DocPath], bool]
    category: Category


# Priority order matters: first match wins.
CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("unit", is_unit, Category.UNIT),
    ClassificationRule("handout", is_handout, Category.HANDOUT),
    ClassificationRule("notes-index", is_notes_index, Category.NOTES_INDEX),
    ClassificationRule("notes", is_notes, Category.NOTES),
    ClassificationRule("assignments", is_assignments, Category.ASSIGNMENTS),
    ClassificationRule("misc", is_misc, Category.MISC),
    ClassificationRule("pyq", is_pyq, Category.PYQ),
    ClassificationRule("projects", is_projects, Category.PROJECTS),
    ClassificationRule("subject-index", is_subject_index, Category.SUBJECT_INDEX),
    ClassificationRule("semester-index", is_semester_index, Category.SEMESTER_INDEX),
)


@dataclass(frozen=True)
class Classification:
    category: Category
    unit: int | None = None
    rule: str = "fallback"

    @property
    def is_hub(self) -> bool:
        return self.category in AUTHORED_HUB_CATEGORIES


def classify(rel_path: str) -> Classification:
    """Classify a source path relative to the docs root."""
    p = DocPath.parse(rel_path)
    for rule in CLASSIFICATION_RULES:
        if rule.predicate(p):
            unit = p.unit_ordinal if rule.category == Category.UNIT else None
            return Classification(category=rule.category, unit=unit, rule=rule.name)
    return Classification(category=Category.CONTENT)


def humanize(token: str) -> str:
    """``c_programming`` / ``c-programming`` → ``C Programming``."""
    words = re.sub(r"[-_\s]+", " ", token).strip().split(" ")
    return " ".join(w[:1].upper() + w[1:] for w in words if w)
