"""
Mesh Import - 通用网格文档导入

读入 Blockbench 风格的网格文档（name / resolution / elements / outliner /
textures），生成一个 ModelDefinition，并把内嵌的 base64 纹理解码成 TextureAsset。
"""
from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Dict, List, Optional, Tuple

from ..errors import StructuralParseError
from ..model.assets import ExtendedIdentifier, ModelDefinition, TextureAsset
from .geometry import GeometryConverter

logger = logging.getLogger(__name__)

MESH_SUFFIX = ".bbmodel"


def validate_mesh_document(data: Any) -> List[str]:
    """返回错误列表；空列表表示可以导入"""
    if not isinstance(data, dict):
        return ["Mesh document must be a JSON object"]
    errors: List[str] = []
    if not data.get('name'):
        errors.append("Missing model name")
    if not data.get('resolution'):
        errors.append("Missing resolution data")
    if not isinstance(data.get('elements'), list):
        errors.append("Missing or invalid elements")
    if not isinstance(data.get('outliner'), list):
        errors.append("Missing or invalid outliner")
    return errors


def next_free_identifier(existing: List[ModelDefinition]) -> int:
    used = {m.custom_model_data for m in existing}
    candidate = 1
    while candidate in used:
        candidate += 1
    return candidate


def decode_data_uri(uri: str) -> bytes:
    """data:image/png;base64,xxxx -> bytes"""
    _, _, payload = uri.partition(',')
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise StructuralParseError(f"Bad embedded texture: {e}")


def model_from_mesh(
    data: Dict[str, Any],
    existing_models: List[ModelDefinition],
    file_name: str = "",
    convert_geometry: bool = False,
    probe=None,
) -> Tuple[ModelDefinition, List[TextureAsset]]:
    """
    从网格文档创建模型

    Args:
        data: 已解析的网格 JSON
        existing_models: 当前包里的模型，用于挑选未占用的 custom_model_data
        file_name: 上传文件名，文档没有 name 时使用
        convert_geometry: 是否立即转换并缓存 Bedrock 几何体
        probe: 图片尺寸探测函数 (bytes, name) -> (w, h)

    Returns:
        (model, textures)
    """
    name = data.get('name') or (file_name[:-len(MESH_SUFFIX)] if file_name.endswith(MESH_SUFFIX) else file_name)
    meta = data.get('meta') or {}
    target_item = meta.get('model_identifier') or "stick"
    identifier = next_free_identifier(existing_models)

    layers: Dict[str, str] = {}
    textures: List[TextureAsset] = []
    for i, entry in enumerate(data.get('textures') or []):
        if not isinstance(entry, dict):
            continue
        source = entry.get('source')
        if not isinstance(source, str) or not source.startswith("data:image"):
            continue
        texture_name = entry.get('name') or f"texture_{i}"
        if texture_name.endswith('.png'):
            texture_name = texture_name[:-4]
        payload = decode_data_uri(source)
        width, height = probe(payload, f"{texture_name}.png") if probe else (0, 0)
        textures.append(TextureAsset(name=texture_name, data=payload, width=width, height=height))
        layers[f"layer{i}"] = texture_name

    geometry = GeometryConverter().convert(data, name) if convert_geometry else None

    model = ModelDefinition(
        name=name,
        custom_model_data=identifier,
        textures=layers,
        target_item=target_item,
        extended=ExtendedIdentifier(floats=[float(identifier)]),
        elements=data.get('elements'),
        outliner=data.get('outliner'),
        resolution=data.get('resolution'),
        bedrock_geometry=geometry,
    )
    logger.debug(f"Imported mesh {name}: {len(textures)} textures, custom_model_data={identifier}")
    return model, textures
