"""
In-memory asset model: aggregate types, validation and settings snapshots.
"""

from .assets import (
    Edition,
    Resolution,
    SourceFile,
    TextureAnimation,
    TextureAsset,
    ExtendedIdentifier,
    ModelDefinition,
    BitmapProvider,
    SpaceProvider,
    TtfProvider,
    UnihexProvider,
    FontProvider,
    FontDefinition,
    SoundDefinition,
    ParticleDefinition,
    ShaderAsset,
    LanguageTable,
    AssetModel,
    MergeConflict,
    VersionConfig,
    new_id,
    provider_from_dict,
    provider_to_dict,
)

from .validation import (
    ValidationResult,
    validate_model,
    validate_font,
    validate_pack,
    validate_all,
    pack_statistics,
    format_file_size,
)

from .settings import (
    export_settings,
    import_settings,
    save_settings,
    load_settings,
)

__all__ = [
    'Edition',
    'Resolution',
    'SourceFile',
    'TextureAnimation',
    'TextureAsset',
    'ExtendedIdentifier',
    'ModelDefinition',
    'BitmapProvider',
    'SpaceProvider',
    'TtfProvider',
    'UnihexProvider',
    'FontProvider',
    'FontDefinition',
    'SoundDefinition',
    'ParticleDefinition',
    'ShaderAsset',
    'LanguageTable',
    'AssetModel',
    'MergeConflict',
    'VersionConfig',
    'new_id',
    'provider_from_dict',
    'provider_to_dict',
    'ValidationResult',
    'validate_model',
    'validate_font',
    'validate_pack',
    'validate_all',
    'pack_statistics',
    'format_file_size',
    'export_settings',
    'import_settings',
    'save_settings',
    'load_settings',
]
