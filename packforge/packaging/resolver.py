"""
Texture Resolver - 纹理引用解析

模型文档里的纹理引用写法很随意（带/不带命名空间、带/不带类型目录、
只写文件名）。按固定顺序尝试一组纯函数策略，第一个命中者胜出：

    1. 去掉命名空间后精确匹配
    2. 再去掉开头的类型目录 (item/ block/ entity/) 后匹配
    3. 只按最后一段文件名做后缀匹配

找不到时仍返回一个清理过的猜测值，并报告 "unresolved"，导入不会中止。

写回模型的引用只去掉 item/，其他类型目录保留：
    item/gem -> gem,  block/stone -> block/stone
Java 导出按 texture_location() 把引用和纹理文件放到同一个位置。
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import NAMESPACE
from ..errors import Diagnostics, UnresolvedReference

logger = logging.getLogger(__name__)

TYPE_FOLDERS = ('item', 'block', 'entity')

# 纹理根目录下的顶层目录；引用以其开头时不再补 item/
TEXTURE_FOLDERS = TYPE_FOLDERS + (
    'font', 'particle', 'gui', 'misc', 'environment', 'painting', 'mob_effect', 'models', 'colormap',
)


def strip_namespace(reference: str) -> str:
    """minecraft:item/gem -> item/gem"""
    return reference.split(':', 1)[1] if ':' in reference else reference


def strip_type_folder(path: str) -> str:
    """item/gem -> gem（只去掉一层）"""
    head, sep, rest = path.partition('/')
    if sep and head in TYPE_FOLDERS:
        return rest
    return path


def texture_reference(path: str) -> str:
    """
    纹理路径 → 模型里的引用

        item/gem -> gem,  block/stone -> block/stone,  custom/gem -> minecraft:custom/gem
    """
    if path.startswith('item/'):
        return path[len('item/'):]
    head, sep, _ = path.partition('/')
    if sep and head in TEXTURE_FOLDERS:
        return path
    # 其他位置只能用带命名空间的完整路径表示
    return f"{NAMESPACE}:{path}"


def texture_location(reference: str) -> str:
    """模型引用 → 纹理根目录下的路径；带命名空间的引用本身就是完整路径，其余没有类型目录的落在 item/ 下"""
    if ':' in reference:
        return strip_namespace(reference)
    head, sep, _ = reference.partition('/')
    if sep and head in TEXTURE_FOLDERS:
        return reference
    return f"item/{reference}"


class TextureIndex:
    """已知纹理路径（纹理根目录下，不含扩展名），保持插入顺序"""

    def __init__(self, paths: Iterable[str] = ()):
        self._ordered: List[str] = []
        self._set = set()
        for p in paths:
            self.add(p)

    def add(self, path: str) -> None:
        if path not in self._set:
            self._set.add(path)
            self._ordered.append(path)

    def __contains__(self, path: str) -> bool:
        return path in self._set

    def __iter__(self):
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)


# ============================================================================
# 策略（纯函数）：返回命中的索引路径或 None
# ============================================================================

def match_exact(reference: str, index: TextureIndex) -> Optional[str]:
    path = strip_namespace(reference)
    return path if path in index else None


def match_without_type_folder(reference: str, index: TextureIndex) -> Optional[str]:
    bare = strip_type_folder(strip_namespace(reference))
    for candidate in (f"item/{bare}", bare):
        if candidate in index:
            return candidate
    return None


def match_by_file_name(reference: str, index: TextureIndex) -> Optional[str]:
    bare = strip_type_folder(strip_namespace(reference))
    file_name = bare.rsplit('/', 1)[-1]
    for key in index:
        if key.endswith(f"/{file_name}") or key == file_name:
            return key
    return None


Strategy = Callable[[str, TextureIndex], Optional[str]]

DEFAULT_STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ('exact', match_exact),
    ('type_folder', match_without_type_folder),
    ('file_name', match_by_file_name),
)


@dataclass
class ResolvedTexture:
    reference: str
    value: str                          # 写回模型的清理后名称
    matched_path: Optional[str] = None
    strategy: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.matched_path is not None


class TextureResolver:
    """按顺序执行策略链的纹理解析器"""

    def __init__(
        self,
        known_paths: Iterable[str],
        strategies: Sequence[Tuple[str, Strategy]] = DEFAULT_STRATEGIES,
    ):
        self.index = known_paths if isinstance(known_paths, TextureIndex) else TextureIndex(known_paths)
        self.strategies = tuple(strategies)

    def resolve(self, reference: str) -> ResolvedTexture:
        for name, strategy in self.strategies:
            hit = strategy(reference, self.index)
            if hit is not None:
                return ResolvedTexture(reference, texture_reference(hit), hit, name)
        if ':' in reference:
            guess = texture_reference(strip_namespace(reference))
        else:
            guess = reference[len('item/'):] if reference.startswith('item/') else reference
        return ResolvedTexture(reference, guess)

    def resolve_layers(
        self,
        layers: Dict[str, object],
        diagnostics: Optional[Diagnostics] = None,
        context: Optional[str] = None,
    ) -> Dict[str, str]:
        """解析模型的 layer -> 引用映射；非字符串的值被忽略"""
        out: Dict[str, str] = {}
        for layer, reference in layers.items():
            if not isinstance(reference, str):
                continue
            result = self.resolve(reference)
            out[layer] = result.value
            if result.resolved:
                logger.debug(f"Linked texture layer {layer}: {result.value} ({result.strategy})")
            elif diagnostics is not None:
                diagnostics.unresolved(UnresolvedReference(reference, result.value, context))
            else:
                logger.warning(f"Texture reference not found in pack: {layer} -> {result.value}")
        return out
