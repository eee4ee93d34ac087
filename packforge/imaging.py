"""
Image helpers: dimension probing and the texture "optimization" placeholder.
"""
from __future__ import annotations

import io
import logging
import math
from dataclasses import replace
from typing import Callable, Tuple

import pygame

from .model.assets import TextureAsset

logger = logging.getLogger(__name__)

ImageProbe = Callable[[bytes, str], Tuple[int, int]]


def probe_image_size(data: bytes, name_hint: str = "image.png") -> Tuple[int, int]:
    """返回 (width, height)；无法解码时返回 (0, 0)"""
    if not data:
        return (0, 0)
    try:
        surface = pygame.image.load(io.BytesIO(data), name_hint)
    except (pygame.error, ValueError) as e:
        logger.warning(f"Cannot probe image {name_hint}: {e}")
        return (0, 0)
    return surface.get_size()


def optimize_texture(texture: TextureAsset) -> TextureAsset:
    # 占位实现：只标记并估算体积，不改动像素数据
    if texture.optimized:
        return texture
    return replace(texture, optimized=True, size=int(math.floor((texture.size or 0) * 0.7)))
