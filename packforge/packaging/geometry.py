"""
Geometry Converter - 通用网格 → Bedrock 几何体

通用网格 = outliner 节点树 + 扁平 elements 列表（Blockbench 风格）。
每个节点变成一根 bone，节点下引用的元素变成该 bone 的 cube，
嵌套节点变成带 parent 的 bone（Bedrock 的 bone 列表本身是扁平的）。
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

GEOMETRY_FORMAT_VERSION = "1.16.0"


def _num(value: Any) -> float:
    """缺失或非数字的分量按 0 处理"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def _vec3(value: Any) -> List[float]:
    if not isinstance(value, (list, tuple)):
        return [0, 0, 0]
    return [_num(value[i]) if i < len(value) else 0 for i in range(3)]


class GeometryConverter:
    """
    通用网格 → bone/cube 转换器

    Usage:
        geometry = GeometryConverter().convert(mesh, "ruby_sword")
        if geometry is None:
            ...  # 该模型没有几何体，其余模型不受影响
    """

    def __init__(self, default_texture_size: int = 16):
        self.default_texture_size = default_texture_size

    def convert(self, mesh: Dict[str, Any], name: str) -> Optional[Dict[str, Any]]:
        try:
            return self._convert(mesh, name)
        except (TypeError, KeyError, AttributeError, IndexError) as e:
            logger.warning(f"Geometry conversion failed for {name}: {e}")
            return None

    def _convert(self, mesh: Dict[str, Any], name: str) -> Dict[str, Any]:
        resolution = mesh.get('resolution') or {}
        bones: List[Dict[str, Any]] = []
        elements = {
            e.get('uuid'): e for e in (mesh.get('elements') or []) if isinstance(e, dict)
        }

        outliner = mesh.get('outliner')
        if isinstance(outliner, list):
            for node in outliner:
                if isinstance(node, dict):
                    self._walk(node, None, elements, bones)

        return {
            'format_version': GEOMETRY_FORMAT_VERSION,
            'minecraft:geometry': [{
                'description': {
                    'identifier': f"geometry.{name}",
                    'texture_width': resolution.get('width') or self.default_texture_size,
                    'texture_height': resolution.get('height') or self.default_texture_size,
                    'visible_bounds_width': 2,
                    'visible_bounds_height': 1.5,
                    'visible_bounds_offset': [0, 0.25, 0],
                },
                'bones': bones,
            }],
        }

    def _walk(
        self,
        node: Dict[str, Any],
        parent: Optional[str],
        elements: Dict[Any, Dict[str, Any]],
        bones: List[Dict[str, Any]],
    ) -> None:
        bone: Dict[str, Any] = {
            'name': node.get('name') or f"bone_{len(bones)}",
            'pivot': _vec3(node['origin']) if node.get('origin') else [0, 0, 0],
            'cubes': [],
        }
        if parent:
            bone['parent'] = parent
        if node.get('rotation'):
            bone['rotation'] = node['rotation']
        bones.append(bone)

        children = node.get('children')
        if not isinstance(children, list):
            return
        for child in children:
            if isinstance(child, dict):
                # 子节点
                self._walk(child, bone['name'], elements, bones)
            else:
                element = elements.get(child)
                if element is not None:
                    bone['cubes'].append(self.convert_element(element))

    @staticmethod
    def convert_element(element: Dict[str, Any]) -> Dict[str, Any]:
        """单个元素 → cube"""
        start = _vec3(element.get('from'))
        end = _vec3(element.get('to'))
        cube: Dict[str, Any] = {
            'origin': start,
            'size': [end[i] - start[i] for i in range(3)],
            'uv': {},
        }
        if element.get('rotation'):
            cube['rotation'] = element['rotation']
            cube['pivot'] = _vec3(element.get('origin') or element.get('from'))
        if element.get('inflate'):
            cube['inflate'] = element['inflate']

        faces = element.get('faces')
        if isinstance(faces, dict):
            for face, data in faces.items():
                if not isinstance(data, dict) or not data.get('uv'):
                    continue
                x0, y0, x1, y1 = (_num(data['uv'][i]) if i < len(data['uv']) else 0 for i in range(4))
                uv: Dict[str, Any] = {'uv': [x0, y0], 'uv_size': [x1 - x0, y1 - y0]}
                if data.get('texture') is not None:
                    uv['texture'] = data['texture']
                cube['uv'][face] = uv
        return cube


def convert_to_bedrock(mesh: Dict[str, Any], name: str) -> Optional[Dict[str, Any]]:
    return GeometryConverter().convert(mesh, name)
