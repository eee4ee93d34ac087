"""
Settings Snapshot - 设置快照

把整个 AssetModel（除二进制内容外）写成一个 JSON 文档，供以后重新导入。
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from ..errors import StructuralParseError
from .assets import (
    AssetModel,
    FontDefinition,
    LanguageTable,
    ModelDefinition,
    ParticleDefinition,
    ShaderAsset,
    SoundDefinition,
    TextureAsset,
    new_id,
    provider_from_dict,
    provider_to_dict,
)


def settings_dict(pack: AssetModel) -> Dict[str, Any]:
    return {
        'pack': {
            'name': pack.name,
            'description': pack.description,
            'version': pack.version,
            'pack_format': pack.format,
            'author': pack.author,
            'website': pack.website,
            'license': pack.license,
        },
        'models': [m.to_dict() for m in pack.models],
        'textures': [t.to_dict() for t in pack.textures],
        'fonts': [
            {'id': f.id, 'name': f.name, 'providers': [provider_to_dict(p) for p in f.providers]}
            for f in pack.fonts
        ],
        'sounds': [
            {'id': s.id, 'name': s.name, 'category': s.category, 'sounds': list(s.sounds),
             'subtitle': s.subtitle, 'replace': s.replace}
            for s in pack.sounds
        ],
        'particles': [{'id': p.id, 'name': p.name, 'textures': list(p.textures)} for p in pack.particles],
        'shaders': [{'id': sh.id, 'name': sh.name, 'type': sh.type, 'content': sh.content} for sh in pack.shaders],
        'languages': [{'code': l.code, 'name': l.name, 'content': dict(l.content)} for l in pack.languages],
    }


def export_settings(pack: AssetModel) -> str:
    return json.dumps(settings_dict(pack), ensure_ascii=False, indent=2)


def import_settings(text: str, default_name: str = "") -> AssetModel:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StructuralParseError(f"Invalid settings JSON: {e}")
    if not isinstance(data, dict) or 'pack' not in data or 'models' not in data:
        raise StructuralParseError("Invalid settings file format. Expected 'pack' and 'models' properties.")
    try:
        return _pack_from_settings(data, default_name)
    except (TypeError, ValueError, AttributeError, KeyError) as e:
        # 字段类型不对（例如 models 不是列表）
        raise StructuralParseError(f"Invalid settings file: {e}")


def _pack_from_settings(data: Dict[str, Any], default_name: str) -> AssetModel:
    meta = data['pack'] or {}
    return AssetModel(
        name=meta.get('name') or default_name,
        description=meta.get('description', ''),
        version=meta.get('version', '1.21.6'),
        format=meta.get('pack_format', 63),
        author=meta.get('author', ''),
        website=meta.get('website', ''),
        license=meta.get('license', 'All Rights Reserved'),
        models=[ModelDefinition.from_dict(m) for m in data.get('models') or []],
        textures=[TextureAsset.from_dict(t) for t in data.get('textures') or []],
        fonts=[
            FontDefinition(
                id=f.get('id') or new_id("font"),
                name=f.get('name', ''),
                providers=[provider_from_dict(p) for p in f.get('providers') or []],
            )
            for f in data.get('fonts') or []
        ],
        sounds=[
            SoundDefinition(
                id=s.get('id') or new_id("sound"),
                name=s.get('name', ''),
                category=s.get('category', 'master'),
                sounds=list(s.get('sounds') or []),
                subtitle=s.get('subtitle'),
                replace=s.get('replace'),
            )
            for s in data.get('sounds') or []
        ],
        particles=[
            ParticleDefinition(id=p.get('id') or new_id("particle"), name=p.get('name', ''),
                               textures=list(p.get('textures') or []))
            for p in data.get('particles') or []
        ],
        shaders=[
            ShaderAsset(id=sh.get('id') or new_id("shader"), name=sh.get('name', ''),
                        type=sh.get('type', 'fragment'), content=sh.get('content'))
            for sh in data.get('shaders') or []
        ],
        languages=[
            LanguageTable(code=l.get('code', ''), name=l.get('name', ''), content=dict(l.get('content') or {}))
            for l in data.get('languages') or []
        ],
    )


def save_settings(pack: AssetModel, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(export_settings(pack), encoding='utf-8')
    return path


def load_settings(path: Path) -> AssetModel:
    path = Path(path)
    return import_settings(path.read_text(encoding='utf-8'), default_name=path.stem)
