"""
packforge Packaging Module
资源包编码 / 解析 / 合并

包含:
- archive: zip 读写
- codecs: 音效 / 语言文档编解码
- resolver: 纹理引用解析
- geometry: 通用网格 → Bedrock 几何体
- java_export / bedrock_export: 两种平台的导出器
- importer: 资源包导入
- merge: 多包合并
- multi_version: 多版本批量导出
- mapping: Geyser 映射
- mesh_import: 通用网格文档导入
"""

from .archive import (
    ArchiveReader,
    ArchiveWriter,
)

from .resolver import (
    TextureIndex,
    TextureResolver,
    ResolvedTexture,
    strip_namespace,
    strip_type_folder,
    texture_location,
    texture_reference,
)

from .geometry import (
    GeometryConverter,
    convert_to_bedrock,
)

from .java_export import JavaPackExporter
from .bedrock_export import BedrockPackExporter

from .export import (
    build_pack,
    export_pack,
)

from .importer import (
    ImportResult,
    ImportStats,
    PackageImporter,
    detect_edition,
    synthetic_identifier,
)

from .merge import (
    MergeEngine,
    MergeResult,
    renamed_path,
)

from .multi_version import (
    MultiVersionExporter,
    VersionExport,
)

from .mapping import (
    build_geyser_mapping,
    render_geyser_mapping,
)

from .mesh_import import (
    model_from_mesh,
    validate_mesh_document,
)

__all__ = [
    'ArchiveReader',
    'ArchiveWriter',
    'TextureIndex',
    'TextureResolver',
    'ResolvedTexture',
    'strip_namespace',
    'strip_type_folder',
    'texture_location',
    'texture_reference',
    'GeometryConverter',
    'convert_to_bedrock',
    'JavaPackExporter',
    'BedrockPackExporter',
    'build_pack',
    'export_pack',
    'ImportResult',
    'ImportStats',
    'PackageImporter',
    'detect_edition',
    'synthetic_identifier',
    'MergeEngine',
    'MergeResult',
    'renamed_path',
    'MultiVersionExporter',
    'VersionExport',
    'build_geyser_mapping',
    'render_geyser_mapping',
    'model_from_mesh',
    'validate_mesh_document',
]
