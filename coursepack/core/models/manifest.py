"""
Manifest models — navigation tree, relation graph, final manifest.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class NodeKind(StrEnum):
    SEMESTER = "semester"
    SUBJECT = "subject"
    FOLDER = "folder"
    LEAF = "leaf"


class NavNode(BaseModel):
    """A node of the navigation forest.

    Non-leaf nodes may point at a hub page through ``hub_doc_id``;
    leaves always carry ``doc_id``.
    """

    model_config = ConfigDict(populate_by_name=True)

    kind: NodeKind
    id: str
    title: str
    hub_doc_id: str | None = Field(default=None, alias="hubDocId")
    doc_id: str | None = Field(default=None, alias="docId")
    category: str | None = None
    children: list[NavNode] = Field(default_factory=list)

    def walk(self):
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_wire(self) -> dict:
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if self.kind == NodeKind.LEAF:
            data.pop("children", None)
        return data


class Relation(BaseModel):
    """Sequential navigation pointers for one unit document."""

    model_config = ConfigDict(frozen=True)

    prev: str | None = None
    next: str | None = None
    up: str | None = None


class RelationGraph(BaseModel):
    """docId → Relation, defined only for unit documents."""

    model_config = ConfigDict(frozen=True)

    next_prev: dict[str, Relation] = Field(default_factory=dict)

    def get(self, doc_id: str) -> Relation | None:
        return self.next_prev.get(doc_id)

    def referenced_ids(self) -> set[str]:
        ids: set[str] = set()
        for doc_id, rel in self.next_prev.items():
            ids.add(doc_id)
            ids.update(x for x in (rel.prev, rel.next, rel.up) if x)
        return ids

    def to_wire(self) -> dict:
        return {"nextPrev": {k: v.model_dump(mode="json") for k, v in self.next_prev.items()}}

    @classmethod
    def from_wire(cls, data: dict) -> RelationGraph:
        raw = data.get("nextPrev", {})
        return cls(next_prev={k: Relation.model_validate(v) for k, v in raw.items()})


class Manifest(BaseModel):
    """Final artifact consumed by the offline client."""

    pack_version: str
    generated_at: str
    docs: dict[str, dict] = Field(default_factory=dict)
    tree: list[NavNode] = Field(default_factory=list)
    relations: RelationGraph = Field(default_factory=RelationGraph)

    def to_wire(self) -> dict:
        return {
            "packVersion": self.pack_version,
            "generatedAt": self.generated_at,
            "docs": self.docs,
            "tree": [node.to_wire() for node in self.tree],
            "relations": self.relations.to_wire(),
        }

    @classmethod
    def from_wire(cls, data: dict) -> Manifest:
        return cls(
            pack_version=data.get("packVersion", ""),
            generated_at=data.get("generatedAt", ""),
            docs=data.get("docs", {}),
            tree=[NavNode.model_validate(node) for node in data.get("tree", [])],
            relations=RelationGraph.from_wire(data.get("relations", {})),
        )
