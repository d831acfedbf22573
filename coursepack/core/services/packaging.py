"""
Pack assembler — check the output directory and zip it for release.
"""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path

from coursepack.core.errors import ContentPackError, MissingArtifactError, PackagingError
from coursepack.core.persistence.artifacts import load_manifest_data

logger = logging.getLogger(__name__)

STAGE = "pack"

MANIFEST_NAME = "index.json"


@dataclass
class PackCheck:
    pack_version: str = ""
    documents: int = 0
    missing: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "pack_version": self.pack_version,
            "documents": self.documents,
            "missing": self.missing,
        }


def verify_pack(out_dir: Path) -> PackCheck:
    """Confirm the manifest exists and every html file it lists is on disk."""
    manifest_path = out_dir / MANIFEST_NAME
    try:
        data = load_manifest_data(manifest_path)
    except MissingArtifactError:
        return PackCheck(missing=[MANIFEST_NAME])

    docs = data.get("docs", {})
    check = PackCheck(pack_version=str(data.get("packVersion", "")), documents=len(docs))
    for doc_id, meta in docs.items():
        html = (meta or {}).get("html")
        if not html:
            check.missing.append(f"{doc_id} (no html path)")
        elif not (out_dir / html).is_file():
            check.missing.append(html)
    return check


def archive_pack(out_dir: Path, archive_path: Path) -> Path:
    """Zip the verified output directory.

    Raises:
        PackagingError: If the pack is incomplete or the archive cannot
            be written.
    """
    try:
        check = verify_pack(out_dir)
    except ContentPackError as e:
        raise PackagingError(f"Cannot verify pack at {out_dir}: {e}") from e
    if not check.ok:
        preview = ", ".join(check.missing[:5])
        raise PackagingError(f"Pack is incomplete ({len(check.missing)} missing): {preview}")

    files = sorted(p for p in out_dir.rglob("*") if p.is_file() and not p.name.startswith("."))
    tmp = archive_path.with_name(f".{archive_path.name}.tmp")
    try:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(tmp, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for path in files:
                zf.write(path, path.relative_to(out_dir).as_posix())
        tmp.replace(archive_path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise PackagingError(f"Cannot write archive {archive_path}: {e}") from e

    logger.info("Archived %d files into %s", len(files), archive_path)
    return archive_path
