"""
Validation - 资源包校验

校验结果只是一组可读的错误信息，从不抛异常，也不阻止导出。
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .assets import AssetModel, BitmapProvider, FontDefinition, ModelDefinition


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)

    @classmethod
    def of(cls, errors: List[str]) -> 'ValidationResult':
        return cls(is_valid=not errors, errors=list(errors))


def validate_model(model: ModelDefinition) -> ValidationResult:
    errors: List[str] = []
    if not model.name.strip():
        errors.append("Model name is required")
    cmd = model.custom_model_data
    # 0 表示覆盖基础外观，同样有效
    if not isinstance(cmd, int) or isinstance(cmd, bool) or cmd < 0:
        errors.append("Valid custom model data is required")
    if not model.target_item.strip():
        errors.append("Target item is required")
    if not model.textures:
        errors.append("At least one texture is required")
    return ValidationResult.of(errors)


def validate_font(font: FontDefinition) -> List[str]:
    errors: List[str] = []
    for index, provider in enumerate(font.providers):
        if isinstance(provider, BitmapProvider) and (provider.ascent or 0) >= (provider.height or 0):
            errors.append(
                f"Font {font.name}: bitmap provider {index} ascent ({provider.ascent}) "
                f"must be less than height ({provider.height})"
            )
    return errors


def validate_pack(pack: AssetModel) -> ValidationResult:
    errors: List[str] = []
    if not pack.name.strip():
        errors.append("Pack name is required")
    if not pack.description.strip():
        errors.append("Pack description is required")
    if not pack.models:
        errors.append("At least one model is required")

    # 同一目标物品内 custom_model_data 不可重复
    for item, models in pack.models_by_target().items():
        values = [m.custom_model_data for m in models]
        duplicates = [v for i, v in enumerate(values) if values.index(v) != i]
        if duplicates:
            errors.append(f"Duplicate custom model data for {item}: {', '.join(str(v) for v in duplicates)}")

    for font in pack.fonts:
        errors.extend(validate_font(font))

    return ValidationResult.of(errors)


def validate_all(pack: AssetModel) -> ValidationResult:
    """包级错误 + 每个模型的错误（带模型名前缀）"""
    errors = list(validate_pack(pack).errors)
    for model in pack.models:
        errors.extend(f"{model.name}: {e}" for e in validate_model(model).errors)
    return ValidationResult.of(errors)


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {units[i]}"


def pack_statistics(pack: AssetModel) -> Dict[str, Any]:
    valid = [m for m in pack.models if validate_model(m).is_valid]
    total_size = sum(t.size or 0 for t in pack.textures)
    return {
        'total_models': len(pack.models),
        'valid_models': len(valid),
        'invalid_models': len(pack.models) - len(valid),
        'total_textures': len(pack.textures),
        'optimized_textures': sum(1 for t in pack.textures if t.optimized),
        'total_size': total_size,
        'formatted_size': format_file_size(total_size),
    }
