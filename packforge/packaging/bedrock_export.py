"""
Bedrock Pack Exporter - Bedrock 版资源包导出

输出结构:
    manifest.json / pack_icon.png / README.txt / geyser_mappings.json
    models/entity/{model}.geo.json
    attachables/{model}.attachable.json
    textures/entity/{texture}.png
    textures/particle/{particle}.png
    sounds/sound_definitions.json + sounds/*
    texts/{xx_YY}.lang
    particles/{particle}.json
    shaders/glsl/{shader}.{ext}

模型几何体优先取缓存，其次由通用网格现场转换；两者都没有的模型
不输出 geometry / attachable，也不报错。
"""
from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import TranscoderConfig
from ..model.assets import AssetModel, ModelDefinition
from .archive import ArchiveWriter
from .codecs import bedrock_lang_code, lang_to_bedrock, sounds_to_bedrock
from .geometry import GeometryConverter
from .mapping import exportable_models, mapping_icon, render_geyser_mapping

logger = logging.getLogger(__name__)

MIN_ENGINE_VERSION = [1, 21, 0]


def manifest_version(version: str) -> List[int]:
    """'1.21.6' -> [1, 21, 6]；解析不了时用 [1, 0, 0]"""
    parts = re.findall(r'\d+', version or "")
    if not parts:
        return [1, 0, 0]
    numbers = [int(p) for p in parts[:3]]
    return numbers + [0] * (3 - len(numbers))


def manifest_document(pack: AssetModel) -> Dict[str, Any]:
    version = manifest_version(pack.version)
    return {
        'format_version': 2,
        'header': {
            'name': pack.name,
            'description': pack.description,
            'uuid': str(uuid.uuid4()),
            'version': version,
            'min_engine_version': list(MIN_ENGINE_VERSION),
        },
        'modules': [{
            'type': "resources",
            'uuid': str(uuid.uuid4()),
            'version': version,
        }],
    }


def attachable_document(model: ModelDefinition) -> Dict[str, Any]:
    """把 identifier / geometry / 纹理绑在一起"""
    return {
        'format_version': "1.10.0",
        'minecraft:attachable': {
            'description': {
                'identifier': f"custom:{model.name}",
                'materials': {'default': "entity_alphatest"},
                'textures': {'default': f"textures/entity/{mapping_icon(model)}"},
                'geometry': {'default': f"geometry.{model.name}"},
                'render_controllers': ["controller.render.default"],
                'scripts': {'parent_setup': "variable.item_slot = 0;"},
            }
        },
    }


def particle_document(name: str) -> Dict[str, Any]:
    return {
        'format_version': "1.10.0",
        'particle_effect': {
            'description': {
                'identifier': f"custom:{name}",
                'basic_render_parameters': {
                    'material': "particles_alpha",
                    'texture': f"textures/particle/{name}",
                },
            },
            'components': {},
        },
    }


class BedrockPackExporter:
    """Bedrock 版导出器"""

    def __init__(
        self,
        pack: AssetModel,
        config: Optional[TranscoderConfig] = None,
        converter: Optional[GeometryConverter] = None,
    ):
        self.pack = pack
        self.config = config or TranscoderConfig()
        self.converter = converter or GeometryConverter()

    def build(self) -> ArchiveWriter:
        writer = ArchiveWriter(self.config.compression_level)
        models = exportable_models(self.pack)

        writer.write_json("manifest.json", manifest_document(self.pack))
        if self.pack.icon:
            writer.write_bytes("pack_icon.png", self.pack.icon)

        emitted = self._write_models(writer, models)
        for texture in self.pack.textures:
            writer.write_bytes(f"textures/entity/{texture.name}.png", texture.data)
        self._write_sounds(writer)
        for lang in self.pack.languages:
            writer.write_text(f"texts/{bedrock_lang_code(lang.code)}.lang", lang_to_bedrock(lang.content))
        for particle in self.pack.particles:
            if particle.source is not None:
                writer.write_bytes(f"textures/particle/{particle.name}.png", particle.source.data)
            writer.write_json(f"particles/{particle.name}.json", particle_document(particle.name))
        for shader in self.pack.shaders:
            # 只有上传了二进制的着色器才会输出
            if shader.source is not None:
                extension = shader.source.extension or 'bin'
                writer.write_bytes(f"shaders/glsl/{shader.name}.{extension}", shader.source.data)

        if self.config.write_readme:
            writer.write_text("README.txt", self.readme(models))
        if self.config.write_mapping:
            writer.write_text("geyser_mappings.json", render_geyser_mapping(self.pack))

        logger.debug(f"Built Bedrock pack '{self.pack.name}': {emitted} geometries, {len(writer.entries)} entries")
        return writer

    def export(self, output_path: Path) -> Path:
        return self.build().save(output_path)

    def geometry_for(self, model: ModelDefinition) -> Optional[Dict[str, Any]]:
        if model.bedrock_geometry:
            return model.bedrock_geometry
        if model.has_mesh:
            return self.converter.convert(
                {'outliner': model.outliner, 'elements': model.elements, 'resolution': model.resolution},
                model.name,
            )
        return None

    def _write_models(self, writer: ArchiveWriter, models: List[ModelDefinition]) -> int:
        emitted = 0
        for model in models:
            geometry = self.geometry_for(model)
            if geometry is None:
                logger.debug(f"No Bedrock geometry for {model.name}, skipped")
                continue
            writer.write_json(f"models/entity/{model.name}.geo.json", geometry)
            writer.write_json(f"attachables/{model.name}.attachable.json", attachable_document(model))
            emitted += 1
        return emitted

    def _write_sounds(self, writer: ArchiveWriter) -> None:
        if not self.pack.sounds:
            return
        writer.write_json("sounds/sound_definitions.json", sounds_to_bedrock(self.pack.sounds))
        for sound in self.pack.sounds:
            if sound.source is not None:
                writer.write_bytes(f"sounds/{sound.name}.{sound.source.extension}", sound.source.data)

    def readme(self, models: List[ModelDefinition]) -> str:
        pack = self.pack
        lines = [
            f"# {pack.name}",
            "",
            pack.description,
            "",
            "## Minecraft Bedrock Edition Resource Pack",
            "",
            "### Installation",
            "1. Copy this pack to your resource_packs folder",
            "2. Activate in Settings > Global Resources",
            "3. Join a world to see custom models",
            "",
            "### Models Included",
        ]
        lines += [f"- {m.name} (Custom Model Data: {m.custom_model_data})" for m in models]
        lines += [
            "",
            "### Technical Details",
            "- Format Version: 2",
            f"- Min Engine Version: {'.'.join(str(n) for n in MIN_ENGINE_VERSION)}",
            f"- Total Models: {len(models)}",
            f"- Total Textures: {len(pack.textures)}",
            "",
            f"Generated on {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            "",
        ]
        return "\n".join(lines)
