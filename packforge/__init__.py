"""
packforge - Minecraft 资源包转换工具

Java / Bedrock 两种资源包的导出、导入、合并与多版本批量导出。
"""

from .config import TranscoderConfig, load_config
from .errors import PackError, PackIOError, StructuralParseError, Diagnostics
from .model import AssetModel, Edition, ModelDefinition, TextureAsset
from .packaging import (
    PackageImporter,
    MergeEngine,
    MultiVersionExporter,
    export_pack,
)

__version__ = "0.1.0"

__all__ = [
    'TranscoderConfig',
    'load_config',
    'PackError',
    'PackIOError',
    'StructuralParseError',
    'Diagnostics',
    'AssetModel',
    'Edition',
    'ModelDefinition',
    'TextureAsset',
    'PackageImporter',
    'MergeEngine',
    'MultiVersionExporter',
    'export_pack',
]
