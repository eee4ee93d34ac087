"""
Java Pack Exporter - Java 版资源包导出

输出结构:
    pack.mcmeta / pack.png / README.md / geyser_mappings.json
    assets/minecraft/
    ├── items/{item}.json               # pack_format >= 48: range_dispatch
    ├── models/item/{item}.json         # pack_format < 48: overrides 列表
    ├── models/item/{model}.json        # 每个自定义模型一份
    ├── textures/{path}.png(.mcmeta)
    ├── font/{name}.json  (+ ttf/otf 源文件)
    ├── textures/font/*.png             # bitmap 源图
    ├── sounds.json + sounds/*
    ├── lang/{code}.json
    ├── particles/{name}.json + textures/particle/*.png
    └── shaders/{program|core}/*

导出不做校验：校验结果只供调用方参考，无效数据照样写出。
"""
from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..config import NAMESPACE, TranscoderConfig, minecraft_version_for, uses_dispatch_documents
from ..model.assets import (
    AssetModel,
    BitmapProvider,
    FontDefinition,
    FontProvider,
    ModelDefinition,
    SpaceProvider,
    TtfProvider,
    UnihexProvider,
)
from .archive import ArchiveWriter
from .codecs import sounds_to_java
from .mapping import exportable_models, render_geyser_mapping
from .resolver import texture_location

logger = logging.getLogger(__name__)

ASSETS_ROOT = f"assets/{NAMESPACE}"


# ============================================================================
# 物品选择文档
# ============================================================================

def sort_by_identifier(models: List[ModelDefinition]) -> List[ModelDefinition]:
    """按 custom_model_data 升序（稳定排序，相同值保持原顺序）"""
    return sorted(models, key=lambda m: m.custom_model_data)


def dispatch_document(item: str, models: List[ModelDefinition]) -> Dict[str, Any]:
    """range_dispatch：运行时取 threshold <= 探测值 的最大项"""
    return {
        'model': {
            'type': "minecraft:range_dispatch",
            'property': "minecraft:custom_model_data",
            'index': 0,
            'fallback': {'type': "minecraft:model", 'model': f"{NAMESPACE}:item/{item}"},
            'entries': [
                {
                    'threshold': m.custom_model_data,
                    'model': {'type': "minecraft:model", 'model': f"{NAMESPACE}:item/{m.name}"},
                }
                for m in sort_by_identifier(models)
            ],
        }
    }


def override_predicate(model: ModelDefinition) -> Dict[str, Any]:
    ext = model.extended
    # 只有 floats=[cmd] 的扩展值与整数等价，按整数写
    if ext is not None and not ext.is_empty and ext.to_predicate() != {'floats': [model.custom_model_data]}:
        return {'custom_model_data': ext.to_predicate()}
    return {'custom_model_data': model.custom_model_data}


def override_document(item: str, models: List[ModelDefinition]) -> Dict[str, Any]:
    """旧版 overrides：按相等匹配，第一个命中者生效"""
    return {
        'parent': "item/generated",
        'textures': {'layer0': f"{NAMESPACE}:item/{item}"},
        'overrides': [
            {'predicate': override_predicate(m), 'model': f"{NAMESPACE}:item/{m.name}"}
            for m in sort_by_identifier(models)
        ],
    }


# ============================================================================
# 模型文档
# ============================================================================

def qualify_texture(reference: str) -> str:
    """纹理引用 → 带命名空间的路径"""
    if ':' in reference:
        return reference
    return f"{NAMESPACE}:{texture_location(reference)}"


def model_document(model: ModelDefinition) -> Dict[str, Any]:
    doc: Dict[str, Any] = {
        'parent': model.parent or "item/generated",
        'textures': {layer: qualify_texture(ref) for layer, ref in model.textures.items()},
    }
    if model.elements:
        doc['elements'] = model.elements
    if model.display:
        doc['display'] = model.display
    return doc


# ============================================================================
# 字体
# ============================================================================

def _bitmap_file_name(font: FontDefinition, provider: BitmapProvider) -> str:
    if provider.source is not None:
        return provider.source.stem
    if provider.file:
        match = re.search(r'minecraft:font/(.+)\.png', provider.file)
        if match:
            return match.group(1)
    return font.name


def _ttf_file_name(font: FontDefinition, provider: TtfProvider) -> Tuple[str, str]:
    if provider.source is not None:
        return provider.source.stem, provider.source.extension or 'ttf'
    if provider.file:
        match = re.search(r'minecraft:font/(.+)\.(.+)$', provider.file)
        if match:
            return match.group(1), match.group(2)
    if font.source is not None and font.source.extension in ('ttf', 'otf'):
        return font.name, font.source.extension
    return font.name, 'ttf'


def provider_document(font: FontDefinition, provider: FontProvider, writer: ArchiveWriter) -> Dict[str, Any]:
    """单个 provider 的 JSON；bitmap/ttf 的源文件顺带写入压缩包"""
    doc: Dict[str, Any] = {'type': provider.type}

    if isinstance(provider, BitmapProvider):
        file_name = _bitmap_file_name(font, provider)
        doc['file'] = f"{NAMESPACE}:font/{file_name}.png"
        doc['ascent'] = provider.ascent if provider.ascent is not None else 8
        doc['height'] = provider.height if provider.height is not None else 8
        if provider.chars:
            doc['chars'] = list(provider.chars)
        # 源文件：provider 自带的优先，其次字体级后备
        if provider.source is not None:
            writer.write_bytes(f"{ASSETS_ROOT}/textures/font/{provider.source.name}", provider.source.data)
        elif font.source is not None and font.source.extension == 'png':
            writer.write_bytes(f"{ASSETS_ROOT}/textures/font/{file_name}.png", font.source.data)

    elif isinstance(provider, TtfProvider):
        file_name, extension = _ttf_file_name(font, provider)
        doc['file'] = f"{NAMESPACE}:font/{file_name}.{extension}"
        doc['size'] = provider.size or 11
        doc['oversample'] = provider.oversample or 1.0
        if provider.shift:
            doc['shift'] = provider.shift
        if provider.skip:
            doc['skip'] = provider.skip
        if provider.source is not None:
            writer.write_bytes(f"{ASSETS_ROOT}/font/{provider.source.name}", provider.source.data)
        elif font.source is not None and font.source.extension in ('ttf', 'otf'):
            writer.write_bytes(f"{ASSETS_ROOT}/font/{file_name}.{extension}", font.source.data)

    elif isinstance(provider, SpaceProvider):
        doc['advances'] = dict(provider.advances)

    elif isinstance(provider, UnihexProvider):
        doc['hex_file'] = provider.hex_file or f"{NAMESPACE}:font/unifont.hex"
        doc['size_overrides'] = []

    return doc


# ============================================================================
# 导出器
# ============================================================================

class JavaPackExporter:
    """
    Java 版导出器

    Usage:
        exporter = JavaPackExporter(pack)
        exporter.export(Path("out/pack.zip"))
    """

    def __init__(self, pack: AssetModel, config: Optional[TranscoderConfig] = None):
        self.pack = pack
        self.config = config or TranscoderConfig()

    def build(self) -> ArchiveWriter:
        """在内存中构建全部条目"""
        writer = ArchiveWriter(self.config.compression_level)
        models = exportable_models(self.pack)

        self._write_metadata(writer)
        self._write_item_definitions(writer, models)
        self._write_models(writer, models)
        self._write_textures(writer)
        self._write_fonts(writer)
        self._write_sounds(writer)
        self._write_languages(writer)
        self._write_particles(writer)
        self._write_shaders(writer)
        if self.config.write_readme:
            writer.write_text("README.md", self.readme(models))
        if self.config.write_mapping:
            writer.write_text("geyser_mappings.json", render_geyser_mapping(self.pack))

        logger.debug(f"Built Java pack '{self.pack.name}' (format {self.pack.format}): {len(writer.entries)} entries")
        return writer

    def export(self, output_path: Path) -> Path:
        return self.build().save(output_path)

    def _write_metadata(self, writer: ArchiveWriter) -> None:
        writer.write_json("pack.mcmeta", {
            'pack': {
                'pack_format': self.pack.format,
                'description': self.pack.description or self.config.fallback_description,
            }
        })
        if self.pack.icon:
            writer.write_bytes("pack.png", self.pack.icon)

    def _write_item_definitions(self, writer: ArchiveWriter, models: List[ModelDefinition]) -> None:
        groups: Dict[str, List[ModelDefinition]] = {}
        for model in models:
            groups.setdefault(model.target_item, []).append(model)

        dispatch = uses_dispatch_documents(self.pack.format)
        for item, group in groups.items():
            if dispatch:
                writer.write_json(f"{ASSETS_ROOT}/items/{item}.json", dispatch_document(item, group))
            else:
                writer.write_json(f"{ASSETS_ROOT}/models/item/{item}.json", override_document(item, group))

    def _write_models(self, writer: ArchiveWriter, models: List[ModelDefinition]) -> None:
        for model in models:
            writer.write_json(f"{ASSETS_ROOT}/models/item/{model.name}.json", model_document(model))

    def _write_textures(self, writer: ArchiveWriter) -> None:
        for texture in self.pack.textures:
            base = f"{ASSETS_ROOT}/textures/{texture.path}.png"
            writer.write_bytes(base, texture.data)
            if texture.animation.enabled:
                writer.write_json(f"{base}.mcmeta", texture.animation.to_mcmeta())

    def _write_fonts(self, writer: ArchiveWriter) -> None:
        for font in self.pack.fonts:
            doc = {'providers': [provider_document(font, p, writer) for p in font.providers]}
            writer.write_json(f"{ASSETS_ROOT}/font/{font.name}.json", doc)

    def _write_sounds(self, writer: ArchiveWriter) -> None:
        if not self.pack.sounds:
            return
        writer.write_json(f"{ASSETS_ROOT}/sounds.json", sounds_to_java(self.pack.sounds))
        for sound in self.pack.sounds:
            if sound.source is not None:
                writer.write_bytes(f"{ASSETS_ROOT}/sounds/{sound.name}.{sound.source.extension}", sound.source.data)

    def _write_languages(self, writer: ArchiveWriter) -> None:
        for lang in self.pack.languages:
            writer.write_json(f"{ASSETS_ROOT}/lang/{lang.code}.json", dict(lang.content))

    def _write_particles(self, writer: ArchiveWriter) -> None:
        for particle in self.pack.particles:
            writer.write_json(
                f"{ASSETS_ROOT}/particles/{particle.name}.json",
                {'textures': [f"{NAMESPACE}:particle/{t}" for t in particle.textures]},
            )
            if particle.source is not None:
                writer.write_bytes(f"{ASSETS_ROOT}/textures/particle/{particle.name}.png", particle.source.data)

    def _write_shaders(self, writer: ArchiveWriter) -> None:
        for shader in self.pack.shaders:
            path = f"{ASSETS_ROOT}/shaders/{shader.folder}/{shader.name}{shader.extension}"
            if shader.source is not None:
                writer.write_bytes(path, shader.source.data)
            elif shader.content is not None:
                writer.write_text(path, shader.content)

    def readme(self, models: List[ModelDefinition]) -> str:
        pack = self.pack
        mc_version = minecraft_version_for(pack.format)
        lines = [
            f"# {pack.name or 'Resource Pack'}",
            "",
            "## Pack Information",
            f"- **Version**: {pack.version}",
            f"- **Pack Format**: {pack.format} (Minecraft {mc_version})",
            f"- **Description**: {pack.description}",
        ]
        if pack.author:
            lines.append(f"- **Author**: {pack.author}")
        if pack.website:
            lines.append(f"- **Website**: {pack.website}")
        if pack.license:
            lines.append(f"- **License**: {pack.license}")
        lines += [
            "",
            "## Contents",
            f"- **Models**: {len(models)}",
            f"- **Textures**: {len(pack.textures)}",
            f"- **Fonts**: {len(pack.fonts)}",
            f"- **Sounds**: {len(pack.sounds)}",
            f"- **Particles**: {len(pack.particles)}",
            f"- **Shaders**: {len(pack.shaders)}",
            "",
            "## Custom Model Data Reference",
            "",
        ]
        for m in models:
            lines += [
                f"### {m.name}",
                f"- **Item**: minecraft:{m.target_item}",
                f"- **Custom Model Data**: {m.custom_model_data}",
                "- **Give Command** (1.21.4+ item_model):",
                f"  `/give @p minecraft:{m.target_item}[minecraft:item_model=\"{m.name}\"]`",
                "- **Give Command** (1.21.4+ custom_model_data):",
                f"  `/give @p minecraft:{m.target_item}[minecraft:custom_model_data={{floats:[{m.custom_model_data}.0f]}}]`",
                "- **Legacy Command** (pre-1.21.4):",
                f"  `/give @p minecraft:{m.target_item}{{CustomModelData:{m.custom_model_data}}}`",
                "",
            ]
        family = "1.21.4+ (item_model with range_dispatch)" if uses_dispatch_documents(pack.format) else "Legacy (overrides)"
        lines += [
            "---",
            f"Generated on {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            f"Format: {family}",
            "",
        ]
        return "\n".join(lines)
