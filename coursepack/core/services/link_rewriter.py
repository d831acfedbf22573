"""
Link resolution — map an authored href to the docId it points at.

Resolution order for internal paths:
  1. normalise the path to a route and re-derive the id with
     ``derive_id``; accept it if the registry has it;
  2. fall back to a route table built from each entry's ``source``
     (exact, lower-cased and percent-decoded variants);
  3. give up: the caller leaves the link as authored.
"""

from __future__ import annotations

import posixpath
import re
from enum import StrEnum
from urllib.parse import quote, unquote

from coursepack.core.models.registry import Registry
from coursepack.core.services.identity import id_for_route, route_for_source

APP_DOC_SCHEME = "app://doc/"

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")


class HrefKind(StrEnum):
    EMPTY = "empty"
    FRAGMENT = "fragment"       # "#section"
    EXTERNAL = "external"       # http(s)://, //host
    NON_NAVIGATIONAL = "scheme"  # mailto:, tel:, app:, javascript:, ...
    INTERNAL = "internal"


def classify_href(href: str) -> HrefKind:
    href = href.strip()
    if not href:
        return HrefKind.EMPTY
    if href.startswith("#"):
        return HrefKind.FRAGMENT
    if href.startswith("//") or href.lower().startswith(("http://", "https://")):
        return HrefKind.EXTERNAL
    if _SCHEME_RE.match(href):
        return HrefKind.NON_NAVIGATIONAL
    return HrefKind.INTERNAL


def split_fragment(href: str) -> tuple[str, str]:
    """Split into (path, fragment) keeping the ``#`` on the fragment."""
    idx = href.find("#")
    if idx == -1:
        return href, ""
    return href[:idx], href[idx:]


def app_link(doc_id: str, fragment: str = "") -> str:
    return f"{APP_DOC_SCHEME}{doc_id}{fragment}"


def normalize_target(path: str, current_route: str, route_base: str = "/docs") -> str | None:
    """Turn an internal href path into a route relative to the docs root.

    Returns None when the path climbs above the docs root.
    """
    path = path.split("?", 1)[0].strip()
    if not path:
        # "?tab=1" and "?x#frag" stay on the current page
        return current_route
    base = "/" + route_base.strip("/") if route_base.strip("/") else ""

    if path.startswith("/"):
        if base and (path == base or path.startswith(base + "/")):
            path = path[len(base):]
        candidate = path.lstrip("/")
    else:
        parent = posixpath.dirname(current_route)
        candidate = posixpath.join(parent, path) if parent else path

    if not candidate:
        return ""
    normalised = posixpath.normpath(candidate)
    if normalised == ".":
        return ""
    if normalised == ".." or normalised.startswith("../"):
        return None
    return route_for_source(normalised)


class LinkResolver:
    """Resolves hrefs against one registry.

    Reads the registry only; one resolver can serve every document of a
    batch.
    """

    def __init__(self, registry: Registry, route_base: str = "/docs"):
        self.registry = registry
        self.route_base = route_base
        self.route_table = build_route_table(registry)

    def resolve_route(self, route: str) -> str | None:
        """docId for a route, or None if nothing matches."""
        decoded = unquote(route)
        direct = id_for_route(decoded)
        if direct in self.registry:
            return direct

        for key in (route, route.lower(), decoded, decoded.lower()):
            doc_id = self.route_table.get(key)
            if doc_id is not None:
                return doc_id
        return None

    def rewrite(self, href: str, current_route: str) -> str | None:
        """``app://doc/`` form of an internal href, or None if unresolved."""
        path, fragment = split_fragment(href.strip())
        route = normalize_target(path, current_route, self.route_base)
        if route is None:
            return None
        doc_id = self.resolve_route(route)
        if doc_id is None:
            return None
        return app_link(doc_id, fragment)


def build_route_table(registry: Registry) -> dict[str, str]:
    """Map each entry's published route (and its variants) to its docId.

    First entry wins when two sources publish under the same route.
    """
    table: dict[str, str] = {}
    for doc_id, entry in registry.items():
        if not entry.source:
            continue
        route = route_for_source(entry.source)
        for key in (route, route.lower(), unquote(route), quote(route)):
            table.setdefault(key, doc_id)
    return table
