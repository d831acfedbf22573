"""
Validate use case — re-check an existing manifest and its output files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from coursepack.core.config.loader import ConfigError, load_config
from coursepack.core.errors import ContentPackError
from coursepack.core.models.manifest import Manifest
from coursepack.core.persistence.artifacts import load_manifest_data
from coursepack.core.services.manifest import validate_manifest
from coursepack.core.services.packaging import verify_pack


@dataclass
class ValidatePackResult:
    """Result of re-validating a built pack."""

    valid: bool = False
    manifest_path: Path | None = None
    pack_version: str = ""
    documents: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "manifest_path": str(self.manifest_path) if self.manifest_path else None,
            "pack_version": self.pack_version,
            "documents": self.documents,
            "errors": self.errors,
            "warnings": self.warnings,
        }


def validate_pack(config_path: Path | None = None, strict_hubs: bool = False) -> ValidatePackResult:
    """Check referential integrity of the manifest and that every page exists."""
    result = ValidatePackResult()

    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    result.manifest_path = config.manifest_path
    try:
        manifest = Manifest.from_wire(load_manifest_data(config.manifest_path))
    except ContentPackError as e:
        result.errors.append(str(e))
        return result
    except ValidationError as e:
        result.errors.append(f"Malformed manifest: {e}")
        return result

    result.pack_version = manifest.pack_version
    result.documents = len(manifest.docs)

    report = validate_manifest(
        manifest.docs,
        manifest.tree,
        manifest.relations,
        strict_hubs=strict_hubs or config.strict_hubs,
    )
    result.errors.extend(report.errors)
    result.warnings.extend(report.warnings)

    check = verify_pack(config.output_path)
    result.errors.extend(f"Missing file: {m}" for m in check.missing)

    result.valid = not result.errors
    return result
