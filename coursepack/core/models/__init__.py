"""
Domain models — Pydantic types for the pack pipeline.

All models are re-exported here for convenient access:

    from coursepack.core.models import DocEntry, Registry, Manifest
"""

from coursepack.core.models.entry import (
    AUTHORED_HUB_CATEGORIES,
    GENERATED_HUB_CATEGORIES,
    UNGROUPED_SUBJECT,
    Category,
    DocEntry,
    html_path_for,
)
from coursepack.core.models.manifest import (
    Manifest,
    NavNode,
    NodeKind,
    Relation,
    RelationGraph,
)
from coursepack.core.models.registry import Registry

__all__ = [
    "AUTHORED_HUB_CATEGORIES",
    "Category",
    "DocEntry",
    "GENERATED_HUB_CATEGORIES",
    "Manifest",
    "NavNode",
    "NodeKind",
    "Registry",
    "Relation",
    "RelationGraph",
    "UNGROUPED_SUBJECT",
    "html_path_for",
]
