"""
Registry — the immutable docId → DocEntry mapping passed between stages.

Every stage reads a Registry and returns a new one; nothing mutates an
existing instance.  Iteration order is insertion order, which the
registry builder makes lexicographic by source path.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from pydantic import BaseModel, ConfigDict, Field

from coursepack.core.models.entry import DocEntry


class Registry(BaseModel):
    """Immutable mapping of docId to DocEntry."""

    model_config = ConfigDict(frozen=True)

    entries: dict[str, DocEntry] = Field(default_factory=dict)

    # ── Mapping-style access ────────────────────────────────────

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self.entries

    def __getitem__(self, doc_id: str) -> DocEntry:
        return self.entries[doc_id]

    def get(self, doc_id: str) -> DocEntry | None:
        return self.entries.get(doc_id)

    def ids(self) -> list[str]:
        return list(self.entries)

    def items(self) -> Iterator[tuple[str, DocEntry]]:
        return iter(self.entries.items())

    # ── Derivation (always returns a new Registry) ──────────────

    def merged(self, extra: Mapping[str, DocEntry]) -> Registry:
        """Add entries whose ids are not taken yet; existing keys win."""
        combined = dict(self.entries)
        for doc_id, entry in extra.items():
            combined.setdefault(doc_id, entry)
        return Registry(entries=combined)

    def subset(self, doc_ids: Iterable[str]) -> Registry:
        """Keep only the given ids, preserving registry order."""
        wanted = set(doc_ids)
        return Registry(entries={k: v for k, v in self.entries.items() if k in wanted})

    def replaced(self, updates: Mapping[str, DocEntry]) -> Registry:
        """Swap in updated entries for ids that already exist."""
        return Registry(entries={k: updates.get(k, v) for k, v in self.entries.items()})

    # ── Wire format ─────────────────────────────────────────────

    def to_json_dict(self) -> dict[str, dict]:
        return {doc_id: entry.to_wire() for doc_id, entry in self.entries.items()}

    @classmethod
    def from_json_dict(cls, data: Mapping[str, Mapping]) -> Registry:
        return cls(entries={
            doc_id: DocEntry.model_validate(raw) for doc_id, raw in data.items()
        })
