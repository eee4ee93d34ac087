"""
Transcoder Configuration - 转换配置

常量表（pack format / 版本 / 基础物品目录）以及可持久化的运行配置
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, List, Optional, Any, Tuple

from .model.assets import VersionConfig


# ============================================================================
# 常量
# ============================================================================

# pack_format 从该值起使用 items/ 目录下的 range_dispatch 定义
DISPATCH_FORMAT_THRESHOLD = 48

NAMESPACE = "minecraft"

# (版本标签, pack_format)，从新到旧；版本标签和默认多版本配置都由此生成
PACK_FORMATS: List[Tuple[str, int]] = [
    ("1.21.6+", 63),
    ("1.21.4-1.21.5", 48),
    ("1.21.0-1.21.3", 34),
    ("1.20.5-1.20.6", 32),
    ("1.20.3-1.20.4", 22),
    ("1.20.0-1.20.2", 18),
    ("1.19.4", 15),
    ("1.19.3", 13),
    ("1.19.0-1.19.2", 12),
    ("1.18.2", 9),
    ("1.18.0-1.18.1", 8),
    ("1.17.0-1.17.1", 7),
    ("1.16.2-1.16.5", 6),
    ("1.15.0-1.16.1", 5),
    ("1.13.0-1.14.4", 4),
]

_VERSION_LABELS: Dict[int, str] = {fmt: label for label, fmt in PACK_FORMATS}

# 旧版 overrides 结构只在这些基础物品上搜索
KNOWN_BASE_ITEMS: List[str] = [
    "stick",
    "diamond_sword", "iron_sword", "golden_sword", "stone_sword", "wooden_sword", "netherite_sword",
    "diamond_pickaxe", "iron_pickaxe", "golden_pickaxe", "stone_pickaxe", "wooden_pickaxe", "netherite_pickaxe",
    "diamond_axe", "iron_axe", "golden_axe", "stone_axe", "wooden_axe", "netherite_axe",
    "diamond_shovel", "iron_shovel", "golden_shovel", "stone_shovel", "wooden_shovel", "netherite_shovel",
    "diamond_hoe", "iron_hoe", "golden_hoe", "stone_hoe", "wooden_hoe", "netherite_hoe",
    "bow", "crossbow", "trident", "shield", "fishing_rod",
    "apple", "bread", "cooked_beef", "cooked_porkchop", "cooked_chicken",
    "diamond", "emerald", "gold_ingot", "iron_ingot", "coal",
    "stone", "cobblestone", "dirt", "grass_block", "oak_log",
    "enchanted_book", "book", "paper", "map", "compass", "clock",
    "carrot_on_a_stick", "warped_fungus_on_a_stick", "flint_and_steel",
    "shears", "spyglass", "brush", "goat_horn",
]


def default_version_configs() -> List[VersionConfig]:
    """默认多版本配置（仅最新版启用）"""
    latest = PACK_FORMATS[0][1]
    return [VersionConfig(label, fmt, fmt == latest) for label, fmt in PACK_FORMATS]


def minecraft_version_for(pack_format: int) -> str:
    return _VERSION_LABELS.get(pack_format, "Unknown")


def uses_dispatch_documents(pack_format: int) -> bool:
    return pack_format >= DISPATCH_FORMAT_THRESHOLD


# ============================================================================
# 运行配置
# ============================================================================

@dataclass
class TranscoderConfig:
    """导出/导入运行配置"""
    compression_level: int = 9
    max_workers: int = 4
    version_delay: float = 0.0              # 多版本导出间隔（秒）
    default_edition: str = "java"
    fallback_description: str = "Generated Resource Pack"
    log_level: str = "INFO"
    write_readme: bool = True
    write_mapping: bool = True
    version_configs: List[VersionConfig] = field(default_factory=default_version_configs)

    def to_json(self) -> str:
        data = asdict(self)
        return json.dumps(data, ensure_ascii=False, indent=2)

    def save(self, path: Path) -> None:
        """保存到文件"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(), encoding='utf-8')

    @classmethod
    def from_json(cls, json_str: str) -> 'TranscoderConfig':
        data: Dict[str, Any] = json.loads(json_str)
        config = cls()
        for key in ('compression_level', 'max_workers', 'version_delay', 'default_edition',
                    'fallback_description', 'log_level', 'write_readme', 'write_mapping'):
            if key in data:
                setattr(config, key, data[key])
        if 'version_configs' in data:
            config.version_configs = [VersionConfig(**v) for v in data['version_configs']]
        return config

    @classmethod
    def load(cls, path: Path) -> 'TranscoderConfig':
        """从文件加载"""
        path = Path(path)
        return cls.from_json(path.read_text(encoding='utf-8'))


def load_config(path: Optional[Path]) -> TranscoderConfig:
    """加载配置，未指定路径时返回默认值"""
    if path is None:
        return TranscoderConfig()
    return TranscoderConfig.load(path)
