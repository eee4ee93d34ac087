"""
Asset Model - 资源包内存模型

一个资源包在内存中的完整表示：模型、纹理、字体、音效、粒子、着色器、语言表
以及包元数据。导出/导入/合并都以整个 AssetModel 为单位读取或替换，
字段修改一律通过 dataclasses.replace 整体替换。
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type, Union

from ..errors import StructuralParseError


def new_id(kind: str) -> str:
    return f"{kind}_{uuid.uuid4()}"


# ============================================================================
# 枚举
# ============================================================================

class Edition(Enum):
    JAVA = "java"           # override 表 / items 分发定义
    BEDROCK = "bedrock"     # attachable + geometry


class Resolution(Enum):
    """合并冲突处理方式"""
    OVERWRITE = "overwrite"
    SKIP = "skip"
    RENAME = "rename"


# ============================================================================
# 基础结构
# ============================================================================

@dataclass
class SourceFile:
    """上传的二进制文件（字体源、音频、粒子贴图、着色器）"""
    name: str
    data: bytes = b""

    @property
    def stem(self) -> str:
        return self.name.rsplit('.', 1)[0] if '.' in self.name else self.name

    @property
    def extension(self) -> str:
        return self.name.rsplit('.', 1)[-1].lower() if '.' in self.name else ""


@dataclass
class TextureAnimation:
    """纹理动画 (.png.mcmeta)"""
    enabled: bool = False
    frametime: Optional[int] = None
    interpolate: Optional[bool] = None
    frames: List[Any] = field(default_factory=list)

    def to_mcmeta(self) -> Dict[str, Any]:
        # 只写出显式设置的字段
        animation: Dict[str, Any] = {}
        if self.frametime is not None:
            animation['frametime'] = self.frametime
        if self.interpolate is not None:
            animation['interpolate'] = self.interpolate
        if self.frames:
            animation['frames'] = list(self.frames)
        return {'animation': animation}

    @classmethod
    def from_mcmeta(cls, data: Dict[str, Any]) -> 'TextureAnimation':
        anim = data.get('animation')
        if not isinstance(anim, dict):
            return cls()
        return cls(
            enabled=True,
            frametime=anim.get('frametime'),
            interpolate=anim.get('interpolate'),
            frames=list(anim.get('frames') or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'enabled': self.enabled,
            'frametime': self.frametime,
            'interpolate': self.interpolate,
            'frames': list(self.frames),
        }

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> 'TextureAnimation':
        if not d:
            return cls()
        return cls(
            enabled=bool(d.get('enabled', False)),
            frametime=d.get('frametime'),
            interpolate=d.get('interpolate'),
            frames=list(d.get('frames') or []),
        )


@dataclass
class TextureAsset:
    """纹理"""
    name: str                           # 不含扩展名
    data: bytes = b""
    path: str = ""                      # 纹理根目录下的逻辑路径，不含扩展名 (item/gem)
    size: int = 0
    width: int = 0
    height: int = 0
    optimized: bool = False
    animation: TextureAnimation = field(default_factory=TextureAnimation)
    id: str = field(default_factory=lambda: new_id("texture"))

    def __post_init__(self) -> None:
        if not self.path:
            self.path = f"item/{self.name}"
        if not self.size and self.data:
            self.size = len(self.data)

    @property
    def dimensions(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def to_dict(self) -> Dict[str, Any]:
        """快照用：不含二进制内容"""
        return {
            'id': self.id,
            'name': self.name,
            'path': self.path,
            'size': self.size,
            'dimensions': {'width': self.width, 'height': self.height},
            'optimized': self.optimized,
            'animation': self.animation.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'TextureAsset':
        dims = d.get('dimensions') or {}
        return cls(
            id=d.get('id') or new_id("texture"),
            name=d.get('name', ''),
            path=d.get('path', ''),
            size=d.get('size', 0),
            width=dims.get('width', 0),
            height=dims.get('height', 0),
            optimized=d.get('optimized', False),
            animation=TextureAnimation.from_dict(d.get('animation')),
        )


@dataclass
class ExtendedIdentifier:
    """扩展 custom_model_data（floats / flags / strings / colors 并行数组）"""
    floats: List[float] = field(default_factory=list)
    flags: List[bool] = field(default_factory=list)
    strings: List[str] = field(default_factory=list)
    colors: List[Any] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.floats or self.flags or self.strings or self.colors)

    def to_predicate(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for key in ('floats', 'flags', 'strings', 'colors'):
            values = getattr(self, key)
            if values:
                out[key] = list(values)
        return out

    @classmethod
    def from_predicate(cls, d: Dict[str, Any]) -> 'ExtendedIdentifier':
        def arr(key: str) -> list:
            v = d.get(key)
            return list(v) if isinstance(v, list) else []
        return cls(floats=arr('floats'), flags=arr('flags'), strings=arr('strings'), colors=arr('colors'))

    @staticmethod
    def is_predicate(value: Any) -> bool:
        return isinstance(value, dict) and any(
            isinstance(value.get(k), list) for k in ('floats', 'flags', 'strings', 'colors')
        )


@dataclass
class ModelDefinition:
    """自定义模型"""
    name: str
    custom_model_data: int = 1
    parent: str = "item/generated"
    textures: Dict[str, str] = field(default_factory=dict)   # layer -> 纹理引用
    target_item: str = "stick"
    extended: Optional[ExtendedIdentifier] = None
    elements: Optional[List[Any]] = None
    display: Optional[Dict[str, Any]] = None
    # 通用网格（节点树 + 元素），Bedrock 几何体由此转换
    outliner: Optional[List[Any]] = None
    resolution: Optional[Dict[str, Any]] = None
    bedrock_geometry: Optional[Dict[str, Any]] = None
    id: str = field(default_factory=lambda: new_id("model"))

    @property
    def has_mesh(self) -> bool:
        return bool(self.outliner) and self.elements is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'custom_model_data': self.custom_model_data,
            'parent': self.parent,
            'textures': dict(self.textures),
            'target_item': self.target_item,
            'extended': self.extended.to_predicate() if self.extended else None,
            'elements': self.elements,
            'display': self.display,
            'outliner': self.outliner,
            'resolution': self.resolution,
            'bedrock_geometry': self.bedrock_geometry,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'ModelDefinition':
        ext = d.get('extended')
        return cls(
            id=d.get('id') or new_id("model"),
            name=d.get('name', ''),
            custom_model_data=d.get('custom_model_data', 1),
            parent=d.get('parent') or "item/generated",
            textures=dict(d.get('textures') or {}),
            target_item=d.get('target_item', 'stick'),
            extended=ExtendedIdentifier.from_predicate(ext) if isinstance(ext, dict) else None,
            elements=d.get('elements'),
            display=d.get('display'),
            outliner=d.get('outliner'),
            resolution=d.get('resolution'),
            bedrock_geometry=d.get('bedrock_geometry'),
        )


# ============================================================================
# 字体 provider（按 type 区分的变体）
# ============================================================================

@dataclass
class BitmapProvider:
    type: ClassVar[str] = "bitmap"
    file: str = ""
    ascent: int = 7
    height: int = 8
    chars: List[str] = field(default_factory=list)
    source: Optional[SourceFile] = None
    id: str = field(default_factory=lambda: new_id("provider"))


@dataclass
class SpaceProvider:
    type: ClassVar[str] = "space"
    advances: Dict[str, int] = field(default_factory=dict)
    id: str = field(default_factory=lambda: new_id("provider"))


@dataclass
class TtfProvider:
    """ttf / otf 共用"""
    type: ClassVar[str] = "ttf"
    file: str = ""
    size: Optional[float] = None
    oversample: Optional[float] = None
    shift: Optional[List[float]] = None
    skip: Optional[Any] = None
    source: Optional[SourceFile] = None
    id: str = field(default_factory=lambda: new_id("provider"))


@dataclass
class UnihexProvider:
    type: ClassVar[str] = "unihex"
    hex_file: str = ""
    size_overrides: List[Any] = field(default_factory=list)
    id: str = field(default_factory=lambda: new_id("provider"))


FontProvider = Union[BitmapProvider, SpaceProvider, TtfProvider, UnihexProvider]

PROVIDER_TYPES: Dict[str, Type] = {
    'bitmap': BitmapProvider,
    'space': SpaceProvider,
    'ttf': TtfProvider,
    'unihex': UnihexProvider,
}


_NUMBER = (int, float)


def _field(d: Dict[str, Any], key: str, kinds: Tuple[type, ...], default: Any = None) -> Any:
    """取 provider 字段并检查类型；缺失或 null 返回默认值"""
    value = d.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, kinds):
        raise StructuralParseError(f"Font provider field '{key}' has the wrong type: {value!r}")
    return value


def provider_from_dict(d: Dict[str, Any]) -> FontProvider:
    """从 provider JSON 解码；缺省 type 视为 bitmap，字段类型不对时抛 StructuralParseError"""
    kind = _field(d, 'type', (str,), 'bitmap') or 'bitmap'
    pid = _field(d, 'id', (str,)) or new_id("provider")
    if kind == 'bitmap':
        chars = _field(d, 'chars', (list,), [])
        if not all(isinstance(row, str) for row in chars):
            raise StructuralParseError("Font provider field 'chars' must be a list of strings")
        return BitmapProvider(
            id=pid,
            file=_field(d, 'file', (str,), ""),
            ascent=_field(d, 'ascent', _NUMBER, 7),
            height=_field(d, 'height', _NUMBER, 8),
            chars=list(chars),
        )
    if kind == 'space':
        return SpaceProvider(id=pid, advances=dict(_field(d, 'advances', (dict,), {})))
    if kind in ('ttf', 'otf'):
        shift = _field(d, 'shift', (list,))
        return TtfProvider(
            id=pid,
            file=_field(d, 'file', (str,), ""),
            size=_field(d, 'size', _NUMBER),
            oversample=_field(d, 'oversample', _NUMBER),
            shift=list(shift) if shift is not None else None,
            skip=_field(d, 'skip', (str, list)),
        )
    if kind == 'unihex':
        return UnihexProvider(
            id=pid,
            hex_file=_field(d, 'hex_file', (str,)) or _field(d, 'file', (str,), ""),
            size_overrides=list(_field(d, 'size_overrides', (list,), [])),
        )
    raise StructuralParseError(f"Unknown font provider type: {kind}")


def provider_to_dict(provider: FontProvider) -> Dict[str, Any]:
    """快照用的 provider 字典（不含源文件内容）"""
    d: Dict[str, Any] = {'id': provider.id, 'type': provider.type}
    if isinstance(provider, BitmapProvider):
        d.update(file=provider.file, ascent=provider.ascent, height=provider.height, chars=list(provider.chars))
    elif isinstance(provider, SpaceProvider):
        d.update(advances=dict(provider.advances))
    elif isinstance(provider, TtfProvider):
        d.update(file=provider.file, size=provider.size, oversample=provider.oversample,
                 shift=provider.shift, skip=provider.skip)
    elif isinstance(provider, UnihexProvider):
        d.update(hex_file=provider.hex_file, size_overrides=list(provider.size_overrides))
    return d


@dataclass
class FontDefinition:
    name: str
    providers: List[FontProvider] = field(default_factory=list)
    source: Optional[SourceFile] = None         # 字体级后备源文件
    id: str = field(default_factory=lambda: new_id("font"))


# ============================================================================
# 其他资源
# ============================================================================

@dataclass
class SoundDefinition:
    name: str
    category: str = "master"
    sounds: List[str] = field(default_factory=list)
    subtitle: Optional[str] = None
    replace: Optional[bool] = None
    source: Optional[SourceFile] = None
    id: str = field(default_factory=lambda: new_id("sound"))


@dataclass
class ParticleDefinition:
    name: str
    textures: List[str] = field(default_factory=list)
    source: Optional[SourceFile] = None
    id: str = field(default_factory=lambda: new_id("particle"))


@dataclass
class ShaderAsset:
    name: str                                   # 不含扩展名
    type: str = "fragment"                      # vertex / fragment / program
    content: Optional[str] = None
    source: Optional[SourceFile] = None
    id: str = field(default_factory=lambda: new_id("shader"))

    @property
    def extension(self) -> str:
        return {'program': '.json', 'vertex': '.vsh'}.get(self.type, '.fsh')

    @property
    def folder(self) -> str:
        return "program" if self.type == "program" else "core"


@dataclass
class LanguageTable:
    code: str
    name: str = ""
    content: Dict[str, str] = field(default_factory=dict)


# ============================================================================
# 聚合
# ============================================================================

@dataclass
class AssetModel:
    """资源包聚合根"""
    name: str = ""
    description: str = ""
    version: str = "1.21.6"
    format: int = 63
    author: str = ""
    website: str = ""
    license: str = "All Rights Reserved"
    models: List[ModelDefinition] = field(default_factory=list)
    textures: List[TextureAsset] = field(default_factory=list)
    fonts: List[FontDefinition] = field(default_factory=list)
    sounds: List[SoundDefinition] = field(default_factory=list)
    particles: List[ParticleDefinition] = field(default_factory=list)
    shaders: List[ShaderAsset] = field(default_factory=list)
    languages: List[LanguageTable] = field(default_factory=list)
    icon: Optional[bytes] = None

    def with_format(self, pack_format: int) -> 'AssetModel':
        """返回仅 format 不同的新快照"""
        return replace(self, format=pack_format)

    def texture_index(self) -> Dict[str, TextureAsset]:
        return {t.path: t for t in self.textures}

    def models_by_target(self) -> Dict[str, List[ModelDefinition]]:
        groups: Dict[str, List[ModelDefinition]] = {}
        for model in self.models:
            groups.setdefault(model.target_item, []).append(model)
        return groups


@dataclass
class MergeConflict:
    path: str
    contributors: List[Tuple[str, bytes]] = field(default_factory=list)   # (包名, 内容)
    resolution: Resolution = Resolution.OVERWRITE

    @property
    def package_names(self) -> List[str]:
        return [name for name, _ in self.contributors]


@dataclass
class VersionConfig:
    version: str
    format: int
    enabled: bool = True
