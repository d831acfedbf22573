"""
Build use case — load configuration and run the pack pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from coursepack.core.config.loader import ConfigError, PackConfig, load_config
from coursepack.core.services.pack_pipeline import PipelineResult, run_pack_pipeline


@dataclass
class BuildPackResult:
    """Outcome of a full build, or the config error that prevented it."""

    pipeline: PipelineResult | None = None
    config: PackConfig | None = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error and self.pipeline is not None and self.pipeline.ok

    def to_dict(self) -> dict:
        data: dict = {"ok": self.ok, "error": self.error or None}
        if self.pipeline is not None:
            data.update(self.pipeline.to_dict())
            data["ok"] = self.ok
        return data


def build_pack(
    config_path: Path | None = None,
    skip_archive: bool = False,
    strict_hubs: bool = False,
    now: datetime | None = None,
) -> BuildPackResult:
    """Run scan → export → hubs → relations → manifest → pack.

    Args:
        config_path: Optional explicit path to contentpack.yml.
        skip_archive: Stop after the manifest even if archiving is enabled.
        strict_hubs: Treat dangling hub references as errors.
        now: Build timestamp (defaults to the current UTC time).
    """
    result = BuildPackResult()
    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    result.config = config
    include_archive = config.archive and not skip_archive
    result.pipeline = run_pack_pipeline(
        config,
        include_archive=include_archive,
        strict_hubs=strict_hubs,
        now=now,
    )
    return result
