"""
Configuration loader — reads contentpack.yml into a PackConfig.

The file is optional: without one every path falls back to its default,
resolved against the current directory.  Paths inside the file are
resolved against the directory that holds it.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from coursepack.core.errors import ContentPackError

logger = logging.getLogger(__name__)

# Default config filename
PACK_CONFIG_FILE = "contentpack.yml"


class ConfigError(ContentPackError):
    """Raised when pack configuration is invalid or unreadable."""


class PackConfig(BaseModel):
    """Locations and switches for one pack build."""

    model_config = ConfigDict(extra="forbid")

    root: Path = Path(".")

    docs_dir: Path = Path("website/docs")
    rendered_dir: Path = Path("website/build/docs")
    output_dir: Path = Path("content")
    registry_file: Path = Path("doc_registry.json")
    relations_file: Path = Path("relations.json")

    route_base: str = "/docs"
    inject_navigation: bool = True
    strict_hubs: bool = False
    archive: bool = True
    archive_name: str = "release_pack_{version}.zip"

    def resolve(self, path: Path) -> Path:
        """Resolve a configured path against the config root."""
        return path if path.is_absolute() else (self.root / path).resolve()

    @property
    def docs_path(self) -> Path:
        return self.resolve(self.docs_dir)

    @property
    def rendered_path(self) -> Path:
        return self.resolve(self.rendered_dir)

    @property
    def output_path(self) -> Path:
        return self.resolve(self.output_dir)

    @property
    def registry_path(self) -> Path:
        return self.resolve(self.registry_file)

    @property
    def relations_path(self) -> Path:
        return self.resolve(self.relations_file)

    @property
    def manifest_path(self) -> Path:
        return self.output_path / "index.json"

    def archive_path(self, version: str) -> Path:
        return self.root.resolve() / self.archive_name.format(version=version)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for contentpack.yml starting from the given directory, walking up.

    Returns:
        Path to contentpack.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / PACK_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path | None = None) -> PackConfig:
    """Load and validate pack configuration.

    Args:
        path: Explicit path to contentpack.yml. If None, searches upward
            and falls back to defaults rooted at the current directory.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found, using defaults", PACK_CONFIG_FILE)
        return PackConfig(root=Path.cwd())

    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return PackConfig(root=Path.cwd())

    logger.debug("Loading pack config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "pack" key or be flat
    pack_data = data.get("pack", data)
    if not isinstance(pack_data, dict):
        raise ConfigError(f"Expected 'pack' to be a mapping in {path}")

    try:
        config = PackConfig.model_validate({**pack_data, "root": path.parent.resolve()})
    except ValidationError as e:
        raise ConfigError(f"Invalid pack configuration: {e}") from e

    logger.info("Loaded pack config from %s", path)
    return config
