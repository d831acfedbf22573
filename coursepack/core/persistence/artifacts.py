"""
Artifact persistence — atomic read/write for the files passed between stages.

Every artifact is read whole and replaced whole.  Writes go to a temp
file in the target directory and are renamed into place, so a crash
mid-write never leaves a half-written registry behind.
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from pydantic import ValidationError

from coursepack.core.errors import ContentPackError, MissingArtifactError
from coursepack.core.models.manifest import Manifest, RelationGraph
from coursepack.core.models.registry import Registry

logger = logging.getLogger(__name__)


def write_text_atomic(path: Path, content: str) -> None:
    """Write text to ``path`` via temp-file-then-rename."""
    path.parent.mkdir(parents=True, exist_ok=True)

    _fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".pack_", suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        with open(_fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        tmp.replace(path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise


def write_json_atomic(path: Path, data: object) -> None:
    write_text_atomic(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def _read_json(path: Path, what: str) -> object:
    if not path.is_file():
        raise MissingArtifactError(f"{what} not found at {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ContentPackError(f"Cannot read {what} at {path}: {e}") from e


# ── Registry ────────────────────────────────────────────────────


def load_registry(path: Path) -> Registry:
    """Load the registry file.

    Raises:
        MissingArtifactError: If the file does not exist.
        ContentPackError: If it is unreadable or fails validation.
    """
    data = _read_json(path, "Registry")
    if not isinstance(data, dict):
        raise ContentPackError(f"Registry at {path} is not a JSON object")
    try:
        registry = Registry.from_json_dict(data)
    except ValidationError as e:
        raise ContentPackError(f"Invalid registry at {path}: {e}") from e
    logger.debug("Loaded %d registry entries from %s", len(registry), path)
    return registry


def save_registry(registry: Registry, path: Path) -> None:
    write_json_atomic(path, registry.to_json_dict())
    logger.debug("Registry saved to %s (%d entries)", path, len(registry))


# ── Relations ───────────────────────────────────────────────────


def load_relations(path: Path) -> RelationGraph:
    data = _read_json(path, "Relations file")
    if not isinstance(data, dict):
        raise ContentPackError(f"Relations file at {path} is not a JSON object")
    try:
        return RelationGraph.from_wire(data)
    except ValidationError as e:
        raise ContentPackError(f"Invalid relations file at {path}: {e}") from e


def save_relations(graph: RelationGraph, path: Path) -> None:
    write_json_atomic(path, graph.to_wire())


# ── Manifest ────────────────────────────────────────────────────


def load_manifest_data(path: Path) -> dict:
    """Load a manifest as raw wire-format data."""
    data = _read_json(path, "Manifest")
    if not isinstance(data, dict):
        raise ContentPackError(f"Manifest at {path} is not a JSON object")
    return data


def save_manifest(manifest: Manifest, path: Path) -> None:
    write_json_atomic(path, manifest.to_wire())
    logger.debug("Manifest saved to %s", path)
