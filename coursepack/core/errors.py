"""
Error taxonomy for the pack pipeline.

Fatal conditions are exceptions; per-document problems are plain values
(``DocumentFailure``) collected on stage results so one bad file never
stops a batch.
"""

from __future__ import annotations

from dataclasses import dataclass


class ContentPackError(Exception):
    """Base class for every error raised by the pack builder."""


class MissingArtifactError(ContentPackError):
    """A required input (docs root, registry, rendered output) is absent."""


class StageFailedError(ContentPackError):
    """A stage attempted work and nothing succeeded."""


class IntegrityError(ContentPackError):
    """The manifest references ids that do not exist in ``docs``."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        preview = "; ".join(self.errors[:3])
        more = f" (+{len(self.errors) - 3} more)" if len(self.errors) > 3 else ""
        super().__init__(f"Manifest integrity check failed: {preview}{more}")


class PackagingError(ContentPackError):
    """Archive or output verification failed."""


@dataclass(frozen=True)
class DocumentFailure:
    """One document that a stage could not process."""

    doc: str            # docId, or the source/rendered path when no id exists
    stage: str
    reason: str

    def to_dict(self) -> dict:
        return {"doc": self.doc, "stage": self.stage, "reason": self.reason}
