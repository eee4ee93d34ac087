"""
Tests for the in-memory asset model
"""
import pytest


class TestTextureAsset:
    """TextureAsset defaults and snapshots."""

    def test_default_path_and_size(self):
        from packforge.model.assets import TextureAsset

        texture = TextureAsset(name="gem", data=b"12345")
        assert texture.path == "item/gem"
        assert texture.size == 5
        assert texture.id.startswith("texture_")

    def test_to_dict_drops_binary(self):
        from packforge.model.assets import TextureAsset

        d = TextureAsset(name="gem", data=b"\x89PNG", width=16, height=32).to_dict()
        assert 'data' not in d
        assert d['dimensions'] == {'width': 16, 'height': 32}

        restored = TextureAsset.from_dict(d)
        assert restored.path == "item/gem"
        assert restored.height == 32
        assert restored.data == b""


class TestTextureAnimation:
    """Animation sidecar only carries explicitly set fields."""

    def test_unset_fields_are_omitted(self):
        from packforge.model.assets import TextureAnimation

        anim = TextureAnimation(enabled=True, frametime=4)
        assert anim.to_mcmeta() == {'animation': {'frametime': 4}}

    def test_all_fields(self):
        from packforge.model.assets import TextureAnimation

        anim = TextureAnimation(enabled=True, frametime=2, interpolate=False, frames=[0, 1, 0])
        assert anim.to_mcmeta() == {'animation': {'frametime': 2, 'interpolate': False, 'frames': [0, 1, 0]}}

    def test_from_mcmeta(self):
        from packforge.model.assets import TextureAnimation

        anim = TextureAnimation.from_mcmeta({'animation': {'interpolate': True}})
        assert anim.enabled
        assert anim.interpolate is True
        assert anim.frametime is None

        assert not TextureAnimation.from_mcmeta({}).enabled


class TestExtendedIdentifier:
    """Extended custom_model_data arrays."""

    def test_predicate_round_trip(self):
        from packforge.model.assets import ExtendedIdentifier

        ext = ExtendedIdentifier(floats=[1.5], strings=["red"], colors=[[255, 0, 0]])
        predicate = ext.to_predicate()
        assert predicate == {'floats': [1.5], 'strings': ["red"], 'colors': [[255, 0, 0]]}
        assert ExtendedIdentifier.from_predicate(predicate) == ext

    def test_is_predicate(self):
        from packforge.model.assets import ExtendedIdentifier

        assert ExtendedIdentifier.is_predicate({'flags': [True]})
        assert not ExtendedIdentifier.is_predicate(5)
        assert not ExtendedIdentifier.is_predicate({'floats': 1.0})
        assert ExtendedIdentifier().is_empty


class TestFontProviders:
    """Tagged union decoding."""

    def test_missing_type_is_bitmap(self):
        from packforge.model.assets import BitmapProvider, provider_from_dict

        provider = provider_from_dict({'file': "minecraft:font/icons.png", 'chars': [""]})
        assert isinstance(provider, BitmapProvider)
        assert provider.ascent == 7
        assert provider.chars == [""]

    def test_otf_uses_ttf_variant(self):
        from packforge.model.assets import TtfProvider, provider_from_dict

        provider = provider_from_dict({'type': 'otf', 'file': "minecraft:font/x.otf", 'size': 9})
        assert isinstance(provider, TtfProvider)
        assert provider.size == 9

    def test_space_and_unihex(self):
        from packforge.model.assets import SpaceProvider, UnihexProvider, provider_from_dict, provider_to_dict

        space = provider_from_dict({'type': 'space', 'advances': {' ': 4, '‌': -1}})
        assert isinstance(space, SpaceProvider)
        assert provider_to_dict(space)['advances'] == {' ': 4, '‌': -1}

        unihex = provider_from_dict({'type': 'unihex', 'hex_file': "minecraft:font/unifont.zip"})
        assert isinstance(unihex, UnihexProvider)
        assert unihex.hex_file == "minecraft:font/unifont.zip"

    def test_unknown_type_raises(self):
        from packforge.errors import StructuralParseError
        from packforge.model.assets import provider_from_dict

        with pytest.raises(StructuralParseError):
            provider_from_dict({'type': 'legacy_unicode'})

    @pytest.mark.parametrize("raw", [
        {'type': 'space', 'advances': "oops"},
        {'type': 'bitmap', 'chars': "abc"},
        {'type': 'bitmap', 'chars': [1]},
        {'type': 'bitmap', 'ascent': "7"},
        {'type': 'ttf', 'shift': 3},
        {'type': 'ttf', 'size': True},
        {'type': 'unihex', 'size_overrides': {}},
        {'type': 5},
    ])
    def test_wrong_field_types_raise(self, raw):
        from packforge.errors import StructuralParseError
        from packforge.model.assets import provider_from_dict

        with pytest.raises(StructuralParseError):
            provider_from_dict(raw)


class TestAssetModel:
    """Aggregate helpers."""

    def test_with_format_returns_new_snapshot(self):
        from packforge.model.assets import AssetModel, ModelDefinition

        pack = AssetModel(name="p", format=63, models=[ModelDefinition(name="a")])
        older = pack.with_format(34)
        assert older.format == 34
        assert pack.format == 63
        assert older.models == pack.models

    def test_models_by_target(self):
        from packforge.model.assets import AssetModel, ModelDefinition

        pack = AssetModel(models=[
            ModelDefinition(name="a", target_item="stick"),
            ModelDefinition(name="b", target_item="bow"),
            ModelDefinition(name="c", target_item="stick"),
        ])
        groups = pack.models_by_target()
        assert [m.name for m in groups['stick']] == ["a", "c"]
        assert [m.name for m in groups['bow']] == ["b"]

    def test_shader_paths(self):
        from packforge.model.assets import ShaderAsset

        assert ShaderAsset(name="glow", type="program").extension == ".json"
        assert ShaderAsset(name="glow", type="program").folder == "program"
        assert ShaderAsset(name="glow", type="vertex").extension == ".vsh"
        assert ShaderAsset(name="glow").folder == "core"
