"""
Document identity resolution.

``derive_id`` is the only place a path becomes a docId.  The registry
builder mints ids with it and the exporter recomputes link targets with
it, so the two stages agree without sharing a lookup table.

Output alphabet is ``[a-z0-9_]`` with no leading, trailing or doubled
underscores.  Generated hub ids contain ``__`` and therefore can never
collide with an id derived from a source path.
"""

from __future__ import annotations

import posixpath
import re

_UNSAFE_RE = re.compile(r"[^a-z0-9_]")
_UNDERSCORES_RE = re.compile(r"_+")

# Extensions stripped when turning a source or rendered path into a route
_ROUTE_SUFFIXES = (".mdx", ".md", ".html", ".htm")

# Id used when a route is empty (the docs root index)
ROOT_DOC_ID = "root"

# Separator reserved for generated ids
HUB_SEPARATOR = "__"


def derive_id(path: str) -> str:
    """Normalize a path into a URL- and filesystem-safe docId.

    >>> derive_id("Semester 1/C-Programming/notes/unit1")
    'semester_1_c_programming_notes_unit1'
    """
    lowered = path.lower().replace("\\", "/")
    token = _UNSAFE_RE.sub("_", lowered)
    token = _UNDERSCORES_RE.sub("_", token)
    return token.strip("_")


def route_for_source(rel_path: str) -> str:
    """Route a renderer publishes a document under.

    Drops the file extension and a trailing ``index`` segment, the way
    Docusaurus maps ``a/b/index.mdx`` to ``/a/b``.
    """
    route = rel_path.replace("\\", "/").strip("/")
    lower = route.lower()
    for suffix in _ROUTE_SUFFIXES:
        if lower.endswith(suffix):
            route = route[: -len(suffix)]
            break
    if route.lower() == "index":
        return ""
    if route.lower().endswith("/index"):
        route = route[: -len("/index")]
    return posixpath.normpath(route) if route else ""


def id_for_route(route: str) -> str:
    """docId for a route, mapping the empty route to ``root``."""
    return derive_id(route) or ROOT_DOC_ID


def course_key(semester: int, subject: str) -> str:
    """Semester+subject token shared by every unit of one course."""
    return derive_id(f"semester_{semester}/{subject}")


def notes_hub_id(semester: int, subject: str) -> str:
    return f"{course_key(semester, subject)}{HUB_SEPARATOR}notes_hub"


def subject_hub_id(semester: int, subject: str) -> str:
    return f"{course_key(semester, subject)}{HUB_SEPARATOR}hub"


def semester_hub_id(semester: int) -> str:
    return f"semester_{semester}{HUB_SEPARATOR}hub"


class IdAllocator:
    """Hands out unique ids, suffixing ``_1``, ``_2``, … on collision.

    Determinism depends on callers allocating in a stable order.
    """

    def __init__(self, taken: set[str] | None = None):
        self._taken: set[str] = set(taken or ())

    def allocate(self, base: str) -> str:
        candidate = base
        counter = 1
        while candidate in self._taken:
            candidate = f"{base}_{counter}"
            counter += 1
        self._taken.add(candidate)
        return candidate

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._taken
