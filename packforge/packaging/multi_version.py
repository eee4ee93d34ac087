"""
Multi-Version Export - 多版本批量导出

对每个启用的 VersionConfig，用只改了 pack_format 的快照跑一遍完整导出。
调用方传入的 AssetModel 从不被修改，所以不需要"恢复原 format"。
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..config import TranscoderConfig
from ..model.assets import AssetModel, Edition, VersionConfig
from .export import export_pack

logger = logging.getLogger(__name__)


@dataclass
class VersionExport:
    version: str
    format: int
    path: Path


class MultiVersionExporter:
    """
    多版本导出器

    Usage:
        exporter = MultiVersionExporter(config)
        for item in exporter.export_all(pack, Path("dist")):
            print(item.version, item.path)
    """

    def __init__(self, config: Optional[TranscoderConfig] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.config = config or TranscoderConfig()
        self._sleep = sleep

    def enabled_versions(self, versions: Optional[Sequence[VersionConfig]] = None) -> List[VersionConfig]:
        return [v for v in (versions if versions is not None else self.config.version_configs) if v.enabled]

    def output_name(self, pack: AssetModel, version: VersionConfig, edition: Edition) -> str:
        suffix = "-bedrock" if edition is Edition.BEDROCK else ""
        return f"{pack.name or 'resource-pack'}-{version.format}{suffix}.zip"

    def export_all(
        self,
        pack: AssetModel,
        output_dir: Path,
        edition: Edition = Edition.JAVA,
        versions: Optional[Sequence[VersionConfig]] = None,
    ) -> List[VersionExport]:
        enabled = self.enabled_versions(versions)
        if not enabled:
            logger.warning("No enabled versions, nothing exported")
            return []

        output_dir = Path(output_dir)
        results: List[VersionExport] = []
        for i, version in enumerate(enabled):
            logger.info(f"Generating pack for {version.version} (format {version.format})")
            snapshot = pack.with_format(version.format)
            path = export_pack(snapshot, edition, output_dir / self.output_name(pack, version, edition), self.config)
            results.append(VersionExport(version.version, version.format, path))
            if self.config.version_delay > 0 and i < len(enabled) - 1:
                self._sleep(self.config.version_delay)

        logger.info(f"Generated {len(results)} version(s)")
        return results
