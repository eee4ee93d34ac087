"""
Document Codecs - 音效 / 语言文档编解码

两种平台对同一份 SoundDefinition / LanguageTable 的不同写法。
"""
from __future__ import annotations

import re
from typing import Any, Dict, List

from ..model.assets import LanguageTable, SoundDefinition, new_id


# ============================================================================
# 音效
# ============================================================================

def sounds_to_java(sounds: List[SoundDefinition]) -> Dict[str, Any]:
    doc: Dict[str, Any] = {}
    for sound in sounds:
        entry: Dict[str, Any] = {
            'category': sound.category,
            'sounds': [{'name': s, 'type': 'sound'} for s in sound.sounds],
        }
        if sound.subtitle:
            entry['subtitle'] = sound.subtitle
        if sound.replace is not None:
            entry['replace'] = sound.replace
        doc[sound.name] = entry
    return doc


def sounds_to_bedrock(sounds: List[SoundDefinition]) -> Dict[str, Any]:
    definitions: Dict[str, Any] = {}
    for sound in sounds:
        entry: Dict[str, Any] = {
            'category': sound.category,
            'sounds': [
                {'name': f"sounds/{s}", 'volume': 1.0, 'pitch': 1.0, 'load_on_low_memory': True}
                for s in sound.sounds
            ],
        }
        if sound.subtitle:
            # Bedrock 没有字幕字段，保留在私有键里以便回读
            entry['__subtitle'] = sound.subtitle
        definitions[sound.name] = entry
    return {'format_version': "1.14.0", 'sound_definitions': definitions}


def _sound_name(item: Any, strip_prefix: str = "") -> str:
    if isinstance(item, str):
        name = item
    elif isinstance(item, dict):
        name = item.get('name') or ""
    else:
        return ""
    if strip_prefix and name.startswith(strip_prefix):
        name = name[len(strip_prefix):]
    return name


def sounds_from_java(doc: Dict[str, Any]) -> List[SoundDefinition]:
    sounds: List[SoundDefinition] = []
    for name, config in (doc or {}).items():
        if not isinstance(config, dict):
            continue
        raw = config.get('sounds')
        sounds.append(SoundDefinition(
            id=new_id("sound"),
            name=name,
            category=config.get('category') or "master",
            sounds=[_sound_name(s) for s in raw] if isinstance(raw, list) else [],
            subtitle=config.get('subtitle'),
            replace=config.get('replace'),
        ))
    return sounds


def sounds_from_bedrock(doc: Dict[str, Any]) -> List[SoundDefinition]:
    sounds: List[SoundDefinition] = []
    if not isinstance(doc, dict) or not isinstance(doc.get('sound_definitions'), dict):
        return sounds
    for name, config in doc['sound_definitions'].items():
        if not isinstance(config, dict):
            continue
        raw = config.get('sounds')
        sounds.append(SoundDefinition(
            id=new_id("sound"),
            name=name,
            category=config.get('category') or "master",
            sounds=[_sound_name(s, 'sounds/') for s in raw] if isinstance(raw, list) else [],
            subtitle=config.get('__subtitle'),
        ))
    return sounds


# ============================================================================
# 语言
# ============================================================================

def lang_to_bedrock(content: Dict[str, str]) -> str:
    return "\n".join(f"{k}={v}" for k, v in content.items())


def lang_from_bedrock(text: str, code: str, name: str = "") -> LanguageTable:
    content: Dict[str, str] = {}
    for line in text.split('\n'):
        line = line.strip()
        if not line or line.startswith('#') or line.startswith('//'):
            continue
        eq = line.find('=')
        if eq > 0:
            content[line[:eq].strip()] = line[eq + 1:].strip()
    return LanguageTable(code=code, name=name or code, content=content)


def bedrock_lang_code(code: str) -> str:
    """en_us -> en_US"""
    return re.sub(r'_(\w+)', lambda m: f"_{m.group(1).upper()}", code, count=1)


def internal_lang_code(code: str) -> str:
    """en_US -> en_us"""
    return code.lower()
