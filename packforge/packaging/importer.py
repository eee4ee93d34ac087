"""
Package Importer - 资源包导入

从已有的 Java / Bedrock 资源包（zip）重建 AssetModel。

流程:
    1. 判断版本：有 manifest.json → Bedrock；有 pack.mcmeta → Java；默认 Java
    2. 各子扫描（纹理、字体、音效、粒子、语言、着色器）并发提交，最后统一汇合
    3. Java 模型扫描依赖纹理索引，在纹理扫描完成后进行
    4. 单个条目解析失败只记录诊断并跳过；压缩包本身读不了则整体失败

汇合时保持每个子扫描内部的提交顺序，而提交顺序就是压缩包索引顺序，
不保证排序。
"""
from __future__ import annotations

import json
import logging
import math
import posixpath
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from ..config import KNOWN_BASE_ITEMS, NAMESPACE, TranscoderConfig
from ..errors import Diagnostics, PackIOError, StructuralParseError
from ..imaging import ImageProbe, probe_image_size
from ..model.assets import (
    AssetModel,
    Edition,
    ExtendedIdentifier,
    FontDefinition,
    LanguageTable,
    ModelDefinition,
    ParticleDefinition,
    ShaderAsset,
    SoundDefinition,
    SourceFile,
    TextureAnimation,
    TextureAsset,
    provider_from_dict,
)
from ..model.settings import import_settings
from .archive import ArchiveReader, ArchiveSource
from .codecs import internal_lang_code, lang_from_bedrock, sounds_from_bedrock, sounds_from_java
from .resolver import TextureResolver, strip_namespace, texture_reference

logger = logging.getLogger(__name__)

T = TypeVar('T')

ASSETS_ROOT = f"assets/{NAMESPACE}"
IMAGE_SUFFIXES = ('.png', '.jpg', '.jpeg')
SHADER_TYPES = {'.json': 'program', '.vsh': 'vertex', '.fsh': 'fragment'}


# ============================================================================
# 工具函数
# ============================================================================

def detect_edition(archive: ArchiveReader) -> Edition:
    if archive.exists("manifest.json"):
        return Edition.BEDROCK
    if archive.exists("pack.mcmeta"):
        return Edition.JAVA
    return Edition.JAVA


def synthetic_identifier(predicate: Any) -> int:
    """
    扩展 custom_model_data 的展示用整数 (1..10000)

    对紧凑 JSON 的 UTF-16 码元做 ((h << 5) - h + c) 的 32 位有符号滚动哈希。
    只用于排序/展示，不同的扩展值可能撞到同一个数。
    """
    text = json.dumps(_js_value(predicate), separators=(',', ':'), ensure_ascii=False)
    encoded = text.encode('utf-16-le')
    h = 0
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h) % 10000 + 1


def _js_value(value: Any) -> Any:
    """整数值的 float 按整数输出，与 JS 的 JSON 文本一致 (1.0 -> 1)"""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {k: _js_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_js_value(v) for v in value]
    return value


def parse_pack_format(value: Any) -> Optional[int]:
    """pack_format 接受整数或纯数字字符串，其他返回 None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _stem(path: str) -> str:
    base = posixpath.basename(path)
    return base.rsplit('.', 1)[0] if '.' in base else base


def _strip_image_suffix(path: str) -> str:
    for suffix in IMAGE_SUFFIXES:
        if path.endswith(suffix):
            return path[:-len(suffix)]
    return path


def model_reference(raw: str) -> str:
    """minecraft:item/custom_food/apple_pie -> custom_food/apple_pie"""
    ref = strip_namespace(raw)
    return ref[len('item/'):] if ref.startswith('item/') else ref


@dataclass
class ItemBinding:
    """物品定义里的一项：目标物品 + 模型引用 + 原始 custom_model_data"""
    target_item: str
    reference: str
    value: Any


@dataclass
class ImportStats:
    textures: int = 0
    models: int = 0
    fonts: int = 0
    sounds: int = 0
    particles: int = 0
    languages: int = 0
    shaders: int = 0
    texture_layers: int = 0
    matched_layers: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add_layers(self, total: int, matched: int) -> None:
        with self._lock:
            self.texture_layers += total
            self.matched_layers += matched

    @property
    def match_rate(self) -> float:
        if self.texture_layers == 0:
            return 100.0
        return self.matched_layers / self.texture_layers * 100.0


@dataclass
class ImportResult:
    pack: AssetModel
    edition: Edition
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    stats: ImportStats = field(default_factory=ImportStats)


# ============================================================================
# 导入器
# ============================================================================

class PackageImporter:
    """
    资源包导入器

    Usage:
        importer = PackageImporter(max_workers=4)
        result = importer.import_path(Path("pack.zip"))
        for warning in result.diagnostics.warnings():
            print(warning)
    """

    def __init__(
        self,
        max_workers: int = 4,
        probe: ImageProbe = probe_image_size,
        config: Optional[TranscoderConfig] = None,
    ):
        self.max_workers = max(1, max_workers)
        self.probe = probe
        self.config = config or TranscoderConfig(max_workers=self.max_workers)

    # ---------------- 入口 ----------------

    def import_path(self, path: Path) -> ImportResult:
        """按扩展名分派：.json 设置快照，.zip 资源包"""
        path = Path(path)
        suffix = path.suffix.lower()
        if suffix == '.json':
            try:
                text = path.read_text(encoding='utf-8')
            except OSError as e:
                raise PackIOError(f"Cannot read settings: {e}", str(path))
            pack = import_settings(text, default_name=path.stem)
            result = ImportResult(pack=pack, edition=Edition(self.config.default_edition))
            result.stats.models = len(pack.models)
            return result
        if suffix == '.zip':
            return self.import_archive(path)
        raise PackIOError(f"Unsupported package type: {suffix or '(none)'}", str(path))

    def import_archive(self, source: ArchiveSource, name: Optional[str] = None) -> ImportResult:
        with ArchiveReader(source, name) as archive:
            edition = detect_edition(archive)
            pack_name = archive.name[:-4] if archive.name.lower().endswith('.zip') else archive.name
            result = ImportResult(pack=AssetModel(name=pack_name), edition=edition)
            logger.info(f"Importing {archive.name} as {edition.value} pack")

            with ThreadPoolExecutor(max_workers=self.max_workers) as scans, \
                    ThreadPoolExecutor(max_workers=self.max_workers) as entries:
                if edition is Edition.BEDROCK:
                    self._import_bedrock(archive, result, scans, entries)
                else:
                    self._import_java(archive, result, scans, entries)

        stats = result.stats
        logger.info(
            f"Imported {stats.models} models, {stats.textures} textures "
            f"({stats.matched_layers}/{stats.texture_layers} layers linked), "
            f"{len(result.diagnostics)} warnings"
        )
        return result

    # ---------------- 并发工具 ----------------

    def _map_entries(
        self,
        pool: ThreadPoolExecutor,
        fn: Callable[[str], Optional[T]],
        paths: Iterable[str],
        diagnostics: Diagnostics,
    ) -> List[T]:
        """每个条目一个任务，按提交顺序汇合；解析失败的条目跳过"""
        futures: List[Tuple[str, Future]] = [(p, pool.submit(fn, p)) for p in paths]
        results: List[T] = []
        for path, future in futures:
            try:
                value = future.result()
            except StructuralParseError as e:
                if not e.path:
                    e.path = path
                diagnostics.parse_error(e)
                continue
            except (TypeError, AttributeError, ValueError, KeyError) as e:
                # 文档结构不对（字段类型错误等），按解析失败处理
                diagnostics.parse_error(StructuralParseError(f"Unexpected document shape: {e}", path))
                continue
            if value is not None:
                results.append(value)
        return results

    def _read_json_or_none(self, archive: ArchiveReader, path: str, diagnostics: Diagnostics) -> Any:
        if not archive.exists(path):
            return None
        try:
            return archive.read_json(path)
        except StructuralParseError as e:
            diagnostics.parse_error(e)
            return None

    def _load_texture(
        self, archive: ArchiveReader, entry: str, root: str, diagnostics: Optional[Diagnostics] = None,
    ) -> TextureAsset:
        data = archive.read(entry)
        base = posixpath.basename(entry)
        width, height = self.probe(data, base)
        animation = TextureAnimation()
        # 动画描述文件损坏时纹理照常导入
        meta = self._read_json_or_none(archive, f"{entry}.mcmeta", diagnostics) if diagnostics is not None else None
        if isinstance(meta, dict):
            animation = TextureAnimation.from_mcmeta(meta)
        return TextureAsset(
            name=_strip_image_suffix(base),
            data=data,
            path=_strip_image_suffix(entry[len(root):]),
            width=width,
            height=height,
            animation=animation,
        )

    def _sound_sources(self, archive: ArchiveReader, root: str, sounds: List[SoundDefinition]) -> List[SoundDefinition]:
        """为音效挂上 {root}{name}.{ext} 音频文件"""
        files = [p for p in archive.files() if p.startswith(root)]
        for sound in sounds:
            prefix = f"{root}{sound.name}."
            for path in files:
                rest = path[len(prefix):] if path.startswith(prefix) else None
                if rest and '.' not in rest and '/' not in rest and rest != 'json':
                    sound.source = SourceFile(posixpath.basename(path), archive.read(path))
                    break
        return sounds

    # ========================================================================
    # Java
    # ========================================================================

    def _import_java(self, archive: ArchiveReader, result: ImportResult,
                     scans: ThreadPoolExecutor, entries: ThreadPoolExecutor) -> None:
        diag = result.diagnostics
        pack = result.pack
        names = list(archive.files())

        meta = self._read_json_or_none(archive, "pack.mcmeta", diag)
        if isinstance(meta, dict) and isinstance(meta.get('pack'), dict):
            info = meta['pack']
            description = info.get('description')
            pack.description = description if isinstance(description, str) else ""
            raw_format = info.get('pack_format')
            pack_format = parse_pack_format(raw_format)
            if pack_format is None:
                if raw_format is not None:
                    diag.parse_error(StructuralParseError(f"Invalid pack_format: {raw_format!r}", "pack.mcmeta"))
                pack_format = 63
            pack.format = pack_format
        if archive.exists("pack.png"):
            pack.icon = archive.read("pack.png")

        texture_root = f"{ASSETS_ROOT}/textures/"
        texture_paths = [
            p for p in names if p.startswith(texture_root) and p.lower().endswith(IMAGE_SUFFIXES)
        ]
        textures_f = scans.submit(
            self._map_entries, entries,
            lambda p: self._load_texture(archive, p, texture_root, diag),
            texture_paths, diag,
        )
        fonts_f = scans.submit(self._scan_java_fonts, archive, names, entries, diag)
        sounds_f = scans.submit(self._scan_java_sounds, archive, diag)
        particles_f = scans.submit(self._scan_java_particles, archive, names, entries, diag)
        langs_f = scans.submit(self._scan_java_languages, archive, names, entries, diag)
        shaders_f = scans.submit(self._scan_java_shaders, archive, names, entries, diag)

        pack.textures = textures_f.result()
        pack.models = self._scan_java_models(archive, names, pack.textures, entries, result)
        pack.fonts = fonts_f.result()
        pack.sounds = sounds_f.result()
        pack.particles = particles_f.result()
        pack.languages = langs_f.result()
        pack.shaders = shaders_f.result()
        self._count(result)

    def item_bindings(self, archive: ArchiveReader, names: List[str], diagnostics: Diagnostics) -> List[ItemBinding]:
        """从两种物品定义中收集 (目标物品, 模型引用, 值)"""
        bindings: List[ItemBinding] = []

        items_root = f"{ASSETS_ROOT}/items/"
        for path in names:
            if not (path.startswith(items_root) and path.endswith('.json')):
                continue
            doc = self._read_json_or_none(archive, path, diagnostics)
            model = doc.get('model') if isinstance(doc, dict) else None
            if not isinstance(model, dict):
                continue
            item = _stem(path)
            kind = model.get('type')
            if kind == "minecraft:range_dispatch":
                field_name, value_key = 'entries', 'threshold'
            elif kind == "minecraft:select":
                field_name, value_key = 'cases', 'when'
            else:
                continue
            raw_cases = model.get(field_name)
            if raw_cases is None:
                continue
            if not isinstance(raw_cases, list):
                diagnostics.parse_error(StructuralParseError(f"'{field_name}' must be a list", path))
                continue
            cases = [(c.get(value_key), c.get('model')) for c in raw_cases if isinstance(c, dict)]
            for value, target in cases:
                ref = target.get('model') if isinstance(target, dict) else None
                if isinstance(ref, str):
                    bindings.append(ItemBinding(item, model_reference(ref), value))

        # 旧版 overrides 只在已知基础物品上查找
        for item in KNOWN_BASE_ITEMS:
            doc = self._read_json_or_none(archive, f"{ASSETS_ROOT}/models/item/{item}.json", diagnostics)
            overrides = doc.get('overrides') if isinstance(doc, dict) else None
            if not isinstance(overrides, list):
                continue
            for override in overrides:
                if not isinstance(override, dict) or not isinstance(override.get('model'), str):
                    continue
                predicate = override.get('predicate')
                value = predicate.get('custom_model_data') if isinstance(predicate, dict) else None
                bindings.append(ItemBinding(item, model_reference(override['model']), value))

        return bindings

    def _scan_java_models(self, archive: ArchiveReader, names: List[str], textures: List[TextureAsset],
                          entries: ThreadPoolExecutor, result: ImportResult) -> List[ModelDefinition]:
        diag = result.diagnostics
        resolver = TextureResolver(t.path for t in textures)

        seen = set()
        todo: List[ItemBinding] = []
        for binding in self.item_bindings(archive, names, diag):
            # 0 是合法值，只有缺失才跳过
            if binding.value is None or isinstance(binding.value, bool) or binding.reference in seen:
                continue
            seen.add(binding.reference)
            todo.append(binding)

        by_path = {f"{ASSETS_ROOT}/models/item/{b.reference}.json": b for b in todo}

        def load(path: str) -> Optional[ModelDefinition]:
            if not archive.exists(path):
                diag.add("unresolved", path, f"model document for '{by_path[path].reference}' not found")
                return None
            return self._java_model(archive.read_json(path), by_path[path], resolver, result)

        return self._map_entries(entries, load, list(by_path), diag)

    def _java_model(self, doc: Any, binding: ItemBinding, resolver: TextureResolver,
                    result: ImportResult) -> ModelDefinition:
        if not isinstance(doc, dict):
            raise StructuralParseError("Model document must be a JSON object")
        model = ModelDefinition(
            name=binding.reference.rsplit('/', 1)[-1],
            parent=doc.get('parent') or "item/generated",
            target_item=binding.target_item,
            elements=doc.get('elements'),
            display=doc.get('display'),
        )

        value = binding.value
        if isinstance(value, (int, float)):
            if not math.isfinite(value):
                raise StructuralParseError(f"Unsupported custom_model_data value: {value!r}")
            model.custom_model_data = int(value)
        elif ExtendedIdentifier.is_predicate(value):
            model.extended = ExtendedIdentifier.from_predicate(value)
            model.custom_model_data = synthetic_identifier(value)
        else:
            raise StructuralParseError(f"Unsupported custom_model_data value: {value!r}")

        layers = doc.get('textures')
        if isinstance(layers, dict):
            model.textures = resolver.resolve_layers(layers, result.diagnostics, context=model.name)
            refs = [r for r in layers.values() if isinstance(r, str)]
            matched = sum(1 for r in refs if resolver.resolve(r).resolved)
            result.stats.add_layers(len(refs), matched)
        return model

    def _scan_java_fonts(self, archive: ArchiveReader, names: List[str],
                         entries: ThreadPoolExecutor, diag: Diagnostics) -> List[FontDefinition]:
        root = f"{ASSETS_ROOT}/font/"

        def load(path: str) -> FontDefinition:
            doc = archive.read_json(path)
            font = FontDefinition(name=_stem(path))
            providers = doc.get('providers') if isinstance(doc, dict) else None
            if providers is not None and not isinstance(providers, list):
                raise StructuralParseError("'providers' must be a list", path)
            for raw in providers or []:
                if not isinstance(raw, dict):
                    continue
                try:
                    provider = provider_from_dict(raw)
                except StructuralParseError as e:
                    e.path = path
                    diag.parse_error(e)
                    continue
                self._attach_font_source(archive, provider)
                font.providers.append(provider)
            return font

        paths = [p for p in names if p.startswith(root) and p.endswith('.json')]
        return self._map_entries(entries, load, paths, diag)

    def _attach_font_source(self, archive: ArchiveReader, provider: Any) -> None:
        file_ref = getattr(provider, 'file', "")
        if not file_ref or not hasattr(provider, 'source'):
            return
        rel = strip_namespace(file_ref)                  # font/name.png
        sub = rel[len('font/'):] if rel.startswith('font/') else rel
        folder = "textures/font" if provider.type == 'bitmap' else "font"
        path = f"{ASSETS_ROOT}/{folder}/{sub}"
        if archive.exists(path):
            provider.source = SourceFile(posixpath.basename(sub), archive.read(path))

    def _scan_java_sounds(self, archive: ArchiveReader, diag: Diagnostics) -> List[SoundDefinition]:
        doc = self._read_json_or_none(archive, f"{ASSETS_ROOT}/sounds.json", diag)
        if not isinstance(doc, dict):
            return []
        return self._sound_sources(archive, f"{ASSETS_ROOT}/sounds/", sounds_from_java(doc))

    def _scan_java_particles(self, archive: ArchiveReader, names: List[str],
                             entries: ThreadPoolExecutor, diag: Diagnostics) -> List[ParticleDefinition]:
        root = f"{ASSETS_ROOT}/particles/"

        def load(path: str) -> ParticleDefinition:
            doc = archive.read_json(path)
            name = _stem(path)
            raw = doc.get('textures') if isinstance(doc, dict) else None
            textures = [
                strip_namespace(t)[len('particle/'):] if strip_namespace(t).startswith('particle/') else strip_namespace(t)
                for t in raw or [] if isinstance(t, str)
            ]
            particle = ParticleDefinition(name=name, textures=textures)
            png = f"{ASSETS_ROOT}/textures/particle/{name}.png"
            if archive.exists(png):
                particle.source = SourceFile(f"{name}.png", archive.read(png))
            return particle

        paths = [p for p in names if p.startswith(root) and p.endswith('.json')]
        return self._map_entries(entries, load, paths, diag)

    def _scan_java_languages(self, archive: ArchiveReader, names: List[str],
                             entries: ThreadPoolExecutor, diag: Diagnostics) -> List[LanguageTable]:
        root = f"{ASSETS_ROOT}/lang/"

        def load(path: str) -> LanguageTable:
            doc = archive.read_json(path)
            if not isinstance(doc, dict):
                raise StructuralParseError("Language file must be a JSON object", path)
            code = _stem(path)
            return LanguageTable(code=code, name=code, content={k: str(v) for k, v in doc.items()})

        paths = [p for p in names if p.startswith(root) and p.endswith('.json')]
        return self._map_entries(entries, load, paths, diag)

    def _scan_java_shaders(self, archive: ArchiveReader, names: List[str],
                           entries: ThreadPoolExecutor, diag: Diagnostics) -> List[ShaderAsset]:
        root = f"{ASSETS_ROOT}/shaders/"

        def load(path: str) -> ShaderAsset:
            ext = posixpath.splitext(path)[1]
            return ShaderAsset(name=_stem(path), type=SHADER_TYPES[ext], content=archive.read_text(path))

        paths = [p for p in names if p.startswith(root) and posixpath.splitext(p)[1] in SHADER_TYPES]
        return self._map_entries(entries, load, paths, diag)

    # ========================================================================
    # Bedrock
    # ========================================================================

    def _import_bedrock(self, archive: ArchiveReader, result: ImportResult,
                        scans: ThreadPoolExecutor, entries: ThreadPoolExecutor) -> None:
        diag = result.diagnostics
        pack = result.pack
        pack.version = "1.21.0"
        names = list(archive.files())

        manifest = self._read_json_or_none(archive, "manifest.json", diag)
        header = manifest.get('header') if isinstance(manifest, dict) else None
        if isinstance(header, dict):
            if isinstance(header.get('name'), str) and header['name']:
                pack.name = header['name']
            description = header.get('description')
            pack.description = description if isinstance(description, str) else ""
            if isinstance(header.get('version'), list):
                pack.version = ".".join(str(v) for v in header['version'])
        if archive.exists("pack_icon.png"):
            pack.icon = archive.read("pack_icon.png")

        texture_paths = [p for p in names if p.startswith("textures/") and p.lower().endswith(IMAGE_SUFFIXES)]
        textures_f = scans.submit(
            self._map_entries, entries,
            lambda p: self._load_texture(archive, p, "textures/"),
            texture_paths, diag,
        )
        models_f = scans.submit(self._scan_bedrock_models, archive, names, entries, diag)
        sounds_f = scans.submit(self._scan_bedrock_sounds, archive, diag)
        particles_f = scans.submit(self._scan_bedrock_particles, archive, names, entries, diag)
        langs_f = scans.submit(self._scan_bedrock_languages, archive, names, entries, diag)

        pack.textures = textures_f.result()
        pack.models = models_f.result()
        pack.sounds = sounds_f.result()
        pack.particles = particles_f.result()
        pack.languages = langs_f.result()
        pack.shaders = [
            ShaderAsset(name=_stem(p), source=SourceFile(posixpath.basename(p), archive.read(p)))
            for p in names if p.startswith("shaders/glsl/")
        ]

        # attachable 只给出文件名，换成纹理的实际位置，entity/ 下的优先
        by_name: Dict[str, TextureAsset] = {}
        for texture in pack.textures:
            current = by_name.get(texture.name)
            if current is None or (texture.path.startswith("entity/") and not current.path.startswith("entity/")):
                by_name[texture.name] = texture
        for model in pack.models:
            matched = 0
            for layer, ref in list(model.textures.items()):
                texture = by_name.get(ref)
                if texture is not None:
                    model.textures[layer] = texture_reference(texture.path)
                    matched += 1
            result.stats.add_layers(len(model.textures), matched)
        self._count(result)

    def attachable_bindings(self, archive: ArchiveReader, names: List[str], diag: Diagnostics) -> Dict[str, str]:
        """geometry 标识 → 纹理名"""
        bindings: Dict[str, str] = {}
        for path in names:
            if not path.endswith('.attachable.json'):
                continue
            doc = self._read_json_or_none(archive, path, diag)
            if doc is None:
                continue
            body = doc.get('minecraft:attachable') if isinstance(doc, dict) else None
            desc = body.get('description') if isinstance(body, dict) else None
            geometries = desc.get('geometry') if isinstance(desc, dict) else None
            textures = desc.get('textures') if isinstance(desc, dict) else None
            if not (isinstance(geometries, dict) and isinstance(textures, dict)):
                diag.parse_error(StructuralParseError("Attachable description has the wrong shape", path))
                continue
            geometry = geometries.get('default')
            texture = textures.get('default')
            if isinstance(geometry, str) and isinstance(texture, str):
                bindings[geometry] = posixpath.basename(texture)
        return bindings

    def _scan_bedrock_models(self, archive: ArchiveReader, names: List[str],
                             entries: ThreadPoolExecutor, diag: Diagnostics) -> List[ModelDefinition]:
        bindings = self.attachable_bindings(archive, names, diag)

        def load(path: str) -> ModelDefinition:
            geometry = archive.read_json(path)
            name = posixpath.basename(path)[:-len('.geo.json')]
            model = ModelDefinition(name=name, custom_model_data=1, target_item="stick", bedrock_geometry=geometry)
            texture = bindings.get(f"geometry.{name}")
            if texture:
                model.textures = {'layer0': texture}
            return model

        paths = [p for p in names if p.startswith("models/") and p.endswith('.geo.json')]
        return self._map_entries(entries, load, paths, diag)

    def _scan_bedrock_sounds(self, archive: ArchiveReader, diag: Diagnostics) -> List[SoundDefinition]:
        doc = self._read_json_or_none(archive, "sounds/sound_definitions.json", diag)
        if not isinstance(doc, dict):
            return []
        return self._sound_sources(archive, "sounds/", sounds_from_bedrock(doc))

    def _scan_bedrock_particles(self, archive: ArchiveReader, names: List[str],
                                entries: ThreadPoolExecutor, diag: Diagnostics) -> List[ParticleDefinition]:
        def load(path: str) -> ParticleDefinition:
            archive.read_json(path)
            name = _stem(path)
            particle = ParticleDefinition(name=name, textures=[name])
            png = f"textures/particle/{name}.png"
            if archive.exists(png):
                particle.source = SourceFile(f"{name}.png", archive.read(png))
            return particle

        paths = [p for p in names if p.startswith("particles/") and p.endswith('.json')]
        return self._map_entries(entries, load, paths, diag)

    def _scan_bedrock_languages(self, archive: ArchiveReader, names: List[str],
                                entries: ThreadPoolExecutor, diag: Diagnostics) -> List[LanguageTable]:
        def load(path: str) -> LanguageTable:
            code = _stem(path)
            return lang_from_bedrock(archive.read_text(path), internal_lang_code(code), code)

        paths = [p for p in names if p.startswith("texts/") and p.endswith('.lang')]
        return self._map_entries(entries, load, paths, diag)

    # ---------------- 统计 ----------------

    @staticmethod
    def _count(result: ImportResult) -> None:
        pack, stats = result.pack, result.stats
        stats.textures = len(pack.textures)
        stats.models = len(pack.models)
        stats.fonts = len(pack.fonts)
        stats.sounds = len(pack.sounds)
        stats.particles = len(pack.particles)
        stats.languages = len(pack.languages)
        stats.shaders = len(pack.shaders)
