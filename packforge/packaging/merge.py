"""
Merge Engine - 多资源包合并

analyze(): 扫描所有输入包中路径含 "textures/" 的文件条目，同一路径被多个包
提供时生成 MergeConflict（默认 overwrite）。

execute(): 依次扫描各包并按冲突设置处理：
    overwrite - 后扫描的覆盖先扫描的
    skip      - 只保留第一个
    rename    - 每个提供者改名为 name_{包名}.ext，全部保留

模型文档（路径含 "models/"）按路径收集，后者直接覆盖前者，没有冲突处理。
包之间顺序处理；同一个包内的条目读取并发进行。
"""
from __future__ import annotations

import json
import logging
import posixpath
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..errors import Diagnostics
from ..imaging import ImageProbe
from ..model.assets import AssetModel, MergeConflict, Resolution, TextureAsset
from .archive import ArchiveReader, ArchiveSource

logger = logging.getLogger(__name__)

TEXTURE_MARKER = "textures/"
MODEL_MARKER = "models/"
IMAGE_SUFFIXES = ('.png', '.jpg', '.jpeg')

# (包名, 压缩包路径或内容)
MergeSource = Tuple[str, ArchiveSource]


def renamed_path(path: str, package_name: str) -> str:
    """textures/item/gem.png -> textures/item/gem_{package}.png"""
    return re.sub(r'(\.[^.]+)$', lambda m: f"_{package_name}{m.group(1)}", path, count=1)


def is_texture_entry(path: str) -> bool:
    return TEXTURE_MARKER in path


def is_model_entry(path: str) -> bool:
    return MODEL_MARKER in path and not is_texture_entry(path)


def is_merge_entry(path: str) -> bool:
    return is_texture_entry(path) or (is_model_entry(path) and path.endswith('.json'))


@dataclass
class MergeResult:
    textures: Dict[str, bytes] = field(default_factory=dict)
    models: Dict[str, Any] = field(default_factory=dict)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    def texture_assets(self, probe: Optional[ImageProbe] = None) -> List[TextureAsset]:
        """合并后的图片条目 → TextureAsset（路径取最后一个 textures/ 之后的部分）"""
        assets: List[TextureAsset] = []
        for path, data in self.textures.items():
            lower = path.lower()
            if not lower.endswith(IMAGE_SUFFIXES):
                continue
            rel = path[path.rfind(TEXTURE_MARKER) + len(TEXTURE_MARKER):]
            rel = rel.rsplit('.', 1)[0]
            width, height = probe(data, posixpath.basename(path)) if probe else (0, 0)
            assets.append(TextureAsset(
                name=posixpath.basename(rel), data=data, path=rel, width=width, height=height,
            ))
        return assets

    def apply_to(self, pack: AssetModel, probe: Optional[ImageProbe] = None) -> AssetModel:
        """返回追加了合并纹理的新 AssetModel（同路径纹理被替换）"""
        merged = {t.path: t for t in pack.textures}
        for texture in self.texture_assets(probe):
            merged[texture.path] = texture
        return replace(pack, textures=list(merged.values()))


class MergeEngine:
    """
    合并引擎

    Usage:
        engine = MergeEngine()
        conflicts = engine.analyze(sources)
        for c in conflicts:
            c.resolution = Resolution.RENAME
        result = engine.execute(sources, conflicts)
    """

    def __init__(self, max_workers: int = 4):
        self.max_workers = max(1, max_workers)

    def _read_entries(self, source: ArchiveSource, name: str, wanted) -> List[Tuple[str, bytes]]:
        """按压缩包索引顺序读取满足条件的条目（并发读取，按序汇合）"""
        with ArchiveReader(source, name) as archive:
            paths = [p for p in archive.files() if wanted(p)]
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                return list(zip(paths, pool.map(archive.read, paths)))

    def analyze(self, sources: Sequence[MergeSource]) -> List[MergeConflict]:
        contributors: Dict[str, List[Tuple[str, bytes]]] = {}
        for name, source in sources:
            logger.debug(f"Analyzing {name}")
            for path, data in self._read_entries(source, name, is_texture_entry):
                contributors.setdefault(path, []).append((name, data))

        conflicts = [
            MergeConflict(path=path, contributors=items, resolution=Resolution.OVERWRITE)
            for path, items in contributors.items()
            if len(items) > 1
        ]
        logger.info(f"Found {len(conflicts)} conflicting texture paths across {len(sources)} packs")
        return conflicts

    def execute(self, sources: Sequence[MergeSource], conflicts: Sequence[MergeConflict] = ()) -> MergeResult:
        resolutions = {c.path: c.resolution for c in conflicts}
        result = MergeResult()

        for name, source in sources:
            logger.debug(f"Merging {name}")
            for path, data in self._read_entries(source, name, is_merge_entry):
                if is_texture_entry(path):
                    self._merge_texture(result, path, name, data, resolutions.get(path))
                else:
                    self._merge_model(result, path, data)

        logger.info(f"Merged {len(sources)} packs: {len(result.textures)} textures, {len(result.models)} models")
        return result

    @staticmethod
    def _merge_texture(result: MergeResult, path: str, package: str, data: bytes,
                       resolution: Optional[Resolution]) -> None:
        if resolution is Resolution.SKIP and path in result.textures:
            return
        if resolution is Resolution.RENAME:
            result.textures[renamed_path(path, package)] = data
            return
        # overwrite，或没有冲突
        result.textures[path] = data

    @staticmethod
    def _merge_model(result: MergeResult, path: str, data: bytes) -> None:
        try:
            result.models[path] = json.loads(data.decode('utf-8-sig'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            result.diagnostics.add("parse_error", path, f"Failed to parse model: {e}")
