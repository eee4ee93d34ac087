"""
Export facade: pick the exporter for an edition and write the archive.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from ..config import TranscoderConfig
from ..model.assets import AssetModel, Edition
from .archive import ArchiveWriter
from .bedrock_export import BedrockPackExporter
from .java_export import JavaPackExporter

logger = logging.getLogger(__name__)


def exporter_for(edition: Edition, pack: AssetModel, config: Optional[TranscoderConfig] = None):
    if edition is Edition.BEDROCK:
        return BedrockPackExporter(pack, config)
    return JavaPackExporter(pack, config)


def build_pack(pack: AssetModel, edition: Union[Edition, str] = Edition.JAVA,
               config: Optional[TranscoderConfig] = None) -> ArchiveWriter:
    return exporter_for(Edition(edition), pack, config).build()


def default_archive_name(pack: AssetModel, edition: Edition) -> str:
    suffix = "-bedrock" if edition is Edition.BEDROCK else ""
    return f"{pack.name or 'resource-pack'}{suffix}.zip"


def export_pack(
    pack: AssetModel,
    edition: Union[Edition, str],
    output: Path,
    config: Optional[TranscoderConfig] = None,
) -> Path:
    """
    导出资源包

    Args:
        pack: 资源包模型（不会被修改）
        edition: java / bedrock
        output: 输出 zip 路径；是目录时使用默认文件名
        config: 运行配置

    Returns:
        实际写入的路径
    """
    edition = Edition(edition)
    output = Path(output)
    if output.is_dir():
        output = output / default_archive_name(pack, edition)
    path = build_pack(pack, edition, config).save(output)
    logger.info(f"Exported {edition.value} pack to {path}")
    return path
