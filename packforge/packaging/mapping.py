"""
Geyser Mapping - 跨客户端物品映射

把 (目标物品, custom_model_data) 翻译成 Geyser 用的图标/显示名映射，
与导出平台无关，两种导出都会附带一份。
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, List

from ..model.assets import AssetModel, ModelDefinition


def mapping_icon(model: ModelDefinition) -> str:
    """第一个纹理的文件名（去目录、去扩展名），没有纹理时用模型名"""
    first = next(iter(model.textures.values()), "")
    icon = re.sub(r'\.[^/.]+$', '', re.sub(r'^.*/', '', first))
    return icon or model.name


def exportable_models(pack: AssetModel) -> List[ModelDefinition]:
    """有目标物品且 custom_model_data 为非负整数的模型（0 也算）"""
    return [
        m for m in pack.models
        if m.target_item
        and isinstance(m.custom_model_data, int)
        and not isinstance(m.custom_model_data, bool)
        and m.custom_model_data >= 0
    ]


def build_geyser_mapping(pack: AssetModel) -> Dict[str, Any]:
    items: Dict[str, List[Dict[str, Any]]] = {}
    for model in exportable_models(pack):
        items.setdefault(f"minecraft:{model.target_item}", []).append({
            'custom_model_data': model.custom_model_data,
            'display_name': model.name,
            'icon': mapping_icon(model),
            'allow_offhand': True,
            'texture_size': 16,
            'creative_category': 1,
            'creative_group': "custom_items",
            'tags': ["custom_item"],
        })
    return {'format_version': 1, 'items': items}


def render_geyser_mapping(pack: AssetModel) -> str:
    return json.dumps(build_geyser_mapping(pack), ensure_ascii=False, indent=2)
