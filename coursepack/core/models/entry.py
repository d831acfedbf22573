"""
DocEntry — one document of the content pack.

The wire format (registry file, manifest) uses camelCase keys; Python
code uses snake_case attributes.  ``populate_by_name`` lets both work.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# Subject sentinel for documents that belong to no subject group
UNGROUPED_SUBJECT = "General"


class Category(StrEnum):
    """Document classification.

    The first block is assigned by the registry builder; the hub block
    is reserved for pages synthesized by the hub stage.
    """

    UNIT = "unit"
    HANDOUT = "handout"
    NOTES = "notes"
    NOTES_INDEX = "notesIndex"
    ASSIGNMENTS = "assignments"
    MISC = "misc"
    PYQ = "pyq"
    PROJECTS = "projects"
    SUBJECT_INDEX = "subjectIndex"
    SEMESTER_INDEX = "semesterIndex"
    CONTENT = "content"

    NOTES_HUB = "notesHub"
    SUBJECT_HUB = "subjectHub"
    SEMESTER_HUB = "semesterHub"


# Authored landing pages: flagged isHub by the registry builder
AUTHORED_HUB_CATEGORIES = frozenset({
    Category.NOTES_INDEX,
    Category.SUBJECT_INDEX,
    Category.SEMESTER_INDEX,
})

GENERATED_HUB_CATEGORIES = frozenset({
    Category.NOTES_HUB,
    Category.SUBJECT_HUB,
    Category.SEMESTER_HUB,
})


def html_path_for(doc_id: str) -> str:
    """Relative output path of a cleaned document inside the pack."""
    return f"docs/{doc_id}.html"


class DocEntry(BaseModel):
    """Metadata for a single document, keyed by docId in a Registry."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str
    semester: int = Field(default=0, ge=0)
    subject: str = UNGROUPED_SUBJECT
    category: Category = Category.CONTENT
    unit: int | None = None
    is_hub: bool = Field(default=False, alias="isHub")
    is_generated: bool = Field(default=False, alias="isGenerated")
    order: int = 0
    source: str | None = None
    html: str | None = None

    @property
    def is_grouped(self) -> bool:
        """True when the entry belongs to a (semester, subject) group."""
        return self.semester > 0 and self.subject != UNGROUPED_SUBJECT

    def to_wire(self) -> dict:
        """Serialize with the camelCase keys used in JSON artifacts."""
        return self.model_dump(mode="json", by_alias=True)
