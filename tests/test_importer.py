"""
Tests for package import
"""
import json
import tempfile
from pathlib import Path

import pytest

from test_geometry import sample_mesh


def fake_probe(data, name):
    return (16, 16)


def make_importer():
    from packforge.packaging.importer import PackageImporter
    return PackageImporter(max_workers=2, probe=fake_probe)


def java_pack(pack_format=63):
    from packforge.model.assets import (
        AssetModel, BitmapProvider, FontDefinition, LanguageTable, ModelDefinition, SoundDefinition, SourceFile,
        TextureAnimation, TextureAsset,
    )
    return AssetModel(
        name="Gems",
        description="shiny things",
        format=pack_format,
        icon=b"icon",
        models=[
            ModelDefinition(name="sapphire", custom_model_data=30, textures={'layer0': "sapphire"}),
            ModelDefinition(name="plain", custom_model_data=0, textures={'layer0': "item/plain"}),
            ModelDefinition(name="ruby", custom_model_data=10, textures={'layer0': "minecraft:item/ruby"}),
            ModelDefinition(name="bow_skin", custom_model_data=5, target_item="bow",
                            textures={'layer0': "entity/bow_skin"}),
        ],
        textures=[TextureAsset(name="ruby", data=b"png", animation=TextureAnimation(enabled=True, frametime=2))],
        fonts=[FontDefinition(name="icons", providers=[
            BitmapProvider(chars=[""], source=SourceFile("glyphs.png", b"sheet")),
        ])],
        sounds=[SoundDefinition(name="zap", sounds=["custom/zap"], source=SourceFile("zap.ogg", b"ogg"))],
        languages=[LanguageTable(code="en_us", content={'item.ruby': "Ruby"})],
    )


def archive_bytes(entries):
    from packforge.packaging.archive import ArchiveWriter
    writer = ArchiveWriter()
    for path, value in entries.items():
        if isinstance(value, bytes):
            writer.write_bytes(path, value)
        elif isinstance(value, str):
            writer.write_text(path, value)
        else:
            writer.write_json(path, value)
    return writer.to_bytes()


class TestHelpers:
    """Module level helpers."""

    def test_detect_edition(self):
        from packforge.model.assets import Edition
        from packforge.packaging.archive import ArchiveReader
        from packforge.packaging.importer import detect_edition

        both = archive_bytes({'manifest.json': {}, 'pack.mcmeta': {}})
        with ArchiveReader(both) as archive:
            assert detect_edition(archive) is Edition.BEDROCK
        with ArchiveReader(archive_bytes({'pack.mcmeta': {}})) as archive:
            assert detect_edition(archive) is Edition.JAVA
        with ArchiveReader(archive_bytes({'readme.txt': "hi"})) as archive:
            assert detect_edition(archive) is Edition.JAVA

    def test_synthetic_identifier(self):
        from packforge.packaging.importer import synthetic_identifier

        value = synthetic_identifier({'strings': ["red"]})
        assert 1 <= value <= 10000
        assert synthetic_identifier({'strings': ["red"]}) == value
        for predicate in ({'floats': [1.0]}, {'flags': [True, False]}, {'colors': [[1, 2, 3]]}, {}):
            assert 1 <= synthetic_identifier(predicate) <= 10000

    def test_synthetic_identifier_known_value(self):
        from packforge.packaging.importer import synthetic_identifier

        # "{}" hashes to 123 * 31 + 125 = 3938
        assert synthetic_identifier({}) == 3939

    def test_synthetic_identifier_whole_floats_match_integers(self):
        from packforge.packaging.importer import synthetic_identifier

        # JSON text of 1.0 is "1", so both spellings hash the same
        assert synthetic_identifier({'floats': [1.0]}) == synthetic_identifier({'floats': [1]})

    def test_parse_pack_format(self):
        from packforge.packaging.importer import parse_pack_format

        assert parse_pack_format(63) == 63
        assert parse_pack_format("48") == 48
        assert parse_pack_format(34.0) == 34
        assert parse_pack_format("abc") is None
        assert parse_pack_format(True) is None
        assert parse_pack_format([63]) is None

    def test_model_reference(self):
        from packforge.packaging.importer import model_reference

        assert model_reference("minecraft:item/custom_food/apple_pie") == "custom_food/apple_pie"
        assert model_reference("item/gem") == "gem"
        assert model_reference("block/stone") == "block/stone"


class TestJavaImport:
    """Java archives, both item definition families."""

    def test_dispatch_round_trip(self):
        from packforge.model.assets import Edition
        from packforge.packaging.java_export import JavaPackExporter

        data = JavaPackExporter(java_pack(63)).build().to_bytes()
        result = make_importer().import_archive(data, "gems.zip")
        pack = result.pack

        assert result.edition is Edition.JAVA
        assert pack.name == "gems"
        assert pack.format == 63
        assert pack.description == "shiny things"
        assert pack.icon == b"icon"

        models = {m.name: m for m in pack.models}
        assert [m.name for m in pack.models] == ["plain", "ruby", "sapphire", "bow_skin"]
        assert models['plain'].custom_model_data == 0
        assert models['sapphire'].custom_model_data == 30
        assert models['bow_skin'].target_item == "bow"
        assert models['ruby'].textures == {'layer0': "ruby"}
        assert models['plain'].textures == {'layer0': "plain"}

        assert result.stats.texture_layers == 4
        assert result.stats.matched_layers == 1
        assert result.stats.match_rate == 25.0
        assert len(result.diagnostics.by_kind()['unresolved']) == 3

    def test_legacy_round_trip(self):
        from packforge.packaging.java_export import JavaPackExporter

        data = JavaPackExporter(java_pack(34)).build().to_bytes()
        result = make_importer().import_archive(data, "old.zip")
        assert result.pack.format == 34
        cmds = {m.name: (m.target_item, m.custom_model_data) for m in result.pack.models}
        assert cmds == {'plain': ("stick", 0), 'ruby': ("stick", 10), 'sapphire': ("stick", 30),
                        'bow_skin': ("bow", 5)}

    def test_other_assets(self):
        from packforge.model.assets import BitmapProvider
        from packforge.packaging.java_export import JavaPackExporter

        data = JavaPackExporter(java_pack()).build().to_bytes()
        pack = make_importer().import_archive(data, "gems.zip").pack

        texture = pack.textures[0]
        assert texture.path == "item/ruby"
        assert texture.name == "ruby"
        assert texture.dimensions == (16, 16)
        assert texture.animation.enabled
        assert texture.animation.frametime == 2

        provider = pack.fonts[0].providers[0]
        assert isinstance(provider, BitmapProvider)
        assert provider.chars == [""]
        assert provider.source.data == b"sheet"

        assert pack.sounds[0].name == "zap"
        assert pack.sounds[0].sounds == ["custom/zap"]
        assert pack.sounds[0].source.data == b"ogg"
        assert pack.languages[0].content == {'item.ruby': "Ruby"}

    def test_extended_identifier_round_trip(self):
        from packforge.model.assets import AssetModel, ExtendedIdentifier, ModelDefinition
        from packforge.packaging.importer import synthetic_identifier
        from packforge.packaging.java_export import JavaPackExporter

        model = ModelDefinition(name="tagged", custom_model_data=4, textures={'layer0': "tagged"},
                                extended=ExtendedIdentifier(strings=["red"], flags=[True]))
        data = JavaPackExporter(AssetModel(name="p", format=34, models=[model])).build().to_bytes()

        imported = make_importer().import_archive(data, "p.zip").pack.models[0]
        assert imported.extended == ExtendedIdentifier(strings=["red"], flags=[True])
        assert imported.custom_model_data == synthetic_identifier({'flags': [True], 'strings': ["red"]})

    def test_select_shape(self):
        data = archive_bytes({
            'pack.mcmeta': {'pack': {'pack_format': 55, 'description': "d"}},
            'assets/minecraft/items/carrot_on_a_stick.json': {'model': {
                'type': "minecraft:select",
                'property': "minecraft:custom_model_data",
                'cases': [
                    {'when': 7, 'model': {'type': "minecraft:model", 'model': "minecraft:item/lure"}},
                    {'when': "red", 'model': {'type': "minecraft:model", 'model': "minecraft:item/red"}},
                ],
            }},
            'assets/minecraft/models/item/lure.json': {'parent': "item/handheld", 'textures': {'layer0': "item/lure"}},
            'assets/minecraft/models/item/red.json': {'textures': {}},
        })
        result = make_importer().import_archive(data, "select.zip")
        assert [(m.name, m.target_item, m.custom_model_data) for m in result.pack.models] == [
            ("lure", "carrot_on_a_stick", 7),
        ]
        assert result.pack.models[0].parent == "item/handheld"
        assert len(result.diagnostics.by_kind()['parse_error']) == 1

    def test_duplicate_references_imported_once(self):
        entry = {'threshold': 1, 'model': {'type': "minecraft:model", 'model': "minecraft:item/gem"}}
        data = archive_bytes({
            'pack.mcmeta': {'pack': {'pack_format': 63}},
            'assets/minecraft/items/stick.json': {'model': {'type': "minecraft:range_dispatch", 'entries': [entry]}},
            'assets/minecraft/items/bow.json': {'model': {'type': "minecraft:range_dispatch", 'entries': [entry]}},
            'assets/minecraft/models/item/gem.json': {'textures': {'layer0': "item/gem"}},
        })
        models = make_importer().import_archive(data, "dup.zip").pack.models
        assert [(m.name, m.target_item) for m in models] == [("gem", "stick")]

    def test_malformed_entries_are_skipped(self):
        data = archive_bytes({
            'pack.mcmeta': {'pack': {'pack_format': 63}},
            'assets/minecraft/items/stick.json': {'model': {'type': "minecraft:range_dispatch", 'entries': [
                {'threshold': 1, 'model': {'type': "minecraft:model", 'model': "minecraft:item/broken"}},
                {'threshold': 2, 'model': {'type': "minecraft:model", 'model': "minecraft:item/good"}},
                {'threshold': 3, 'model': {'type': "minecraft:model", 'model': "minecraft:item/missing"}},
            ]}},
            'assets/minecraft/models/item/broken.json': "{not json",
            'assets/minecraft/models/item/good.json': {'textures': {'layer0': "item/good"}},
            'assets/minecraft/lang/en_us.json': "[oops",
            'assets/minecraft/textures/item/good.png': b"png",
            'assets/minecraft/textures/item/good.png.mcmeta': "{bad",
        })
        result = make_importer().import_archive(data, "mixed.zip")

        assert [m.name for m in result.pack.models] == ["good"]
        assert result.pack.models[0].textures == {'layer0': "good"}
        assert result.pack.languages == []
        assert len(result.pack.textures) == 1
        assert not result.pack.textures[0].animation.enabled

        kinds = result.diagnostics.by_kind()
        paths = {d.path for d in kinds['parse_error']}
        assert "assets/minecraft/models/item/broken.json" in paths
        assert "assets/minecraft/lang/en_us.json" in paths
        assert "assets/minecraft/textures/item/good.png.mcmeta" in paths
        assert any("missing" in d.message for d in kinds['unresolved'])

    def test_wrong_shapes_are_skipped(self):
        data = archive_bytes({
            'pack.mcmeta': {'pack': {'pack_format': "63", 'description': 5}},
            'assets/minecraft/items/stick.json': {'model': {'type': "minecraft:range_dispatch", 'entries': 5}},
            'assets/minecraft/items/bow.json': {'model': {'type': "minecraft:select", 'cases': [
                {'when': 2, 'model': {'type': "minecraft:model", 'model': "minecraft:item/good"}},
            ]}},
            'assets/minecraft/items/shield.json': {'model': {'type': "minecraft:range_dispatch", 'entries': [
                {'threshold': float('inf'), 'model': {'type': "minecraft:model", 'model': "minecraft:item/huge"}},
            ]}},
            'assets/minecraft/models/item/good.json': {'textures': {'layer0': "item/good"}},
            'assets/minecraft/models/item/huge.json': {'textures': {}},
            'assets/minecraft/font/icons.json': {'providers': [
                {'type': "space", 'advances': "oops"},
                {'type': "bitmap", 'file': "minecraft:font/a.png", 'chars': [1, 2]},
                {'type': "space", 'advances': {' ': 4}},
            ]},
            'assets/minecraft/font/broken.json': {'providers': "nope"},
            'assets/minecraft/lang/en_us.json': {'item.good': "Good"},
        })
        result = make_importer().import_archive(data, "shapes.zip")
        pack = result.pack

        assert pack.format == 63
        assert pack.description == ""
        assert [(m.name, m.target_item, m.custom_model_data) for m in pack.models] == [("good", "bow", 2)]
        assert [f.name for f in pack.fonts] == ["icons"]
        assert [p.advances for p in pack.fonts[0].providers] == [{' ': 4}]
        assert pack.languages[0].content == {'item.good': "Good"}

        errors = result.diagnostics.by_kind()['parse_error']
        paths = [d.path for d in errors]
        assert "assets/minecraft/items/stick.json" in paths
        assert "assets/minecraft/models/item/huge.json" in paths
        assert "assets/minecraft/font/broken.json" in paths
        assert paths.count("assets/minecraft/font/icons.json") == 2

    def test_invalid_pack_format_falls_back(self):
        data = archive_bytes({'pack.mcmeta': {'pack': {'pack_format': "abc", 'description': "d"}}})
        result = make_importer().import_archive(data, "fmt.zip")
        assert result.pack.format == 63
        assert result.pack.description == "d"
        assert [d.path for d in result.diagnostics.by_kind()['parse_error']] == ["pack.mcmeta"]

    def test_other_type_folders_survive_round_trip(self):
        from packforge.packaging.java_export import JavaPackExporter

        data = archive_bytes({
            'pack.mcmeta': {'pack': {'pack_format': 63}},
            'assets/minecraft/items/stick.json': {'model': {'type': "minecraft:range_dispatch", 'entries': [
                {'threshold': 1, 'model': {'type': "minecraft:model", 'model': "minecraft:item/stone"}},
                {'threshold': 2, 'model': {'type': "minecraft:model", 'model': "minecraft:item/odd"}},
            ]}},
            'assets/minecraft/models/item/stone.json': {'textures': {'layer0': "minecraft:block/stone"}},
            'assets/minecraft/models/item/odd.json': {'textures': {'layer0': "minecraft:custom/odd"}},
            'assets/minecraft/textures/block/stone.png': b"stone",
            'assets/minecraft/textures/custom/odd.png': b"odd",
        })
        pack = make_importer().import_archive(data, "blocks.zip").pack
        models = {m.name: m for m in pack.models}
        assert models['stone'].textures == {'layer0': "block/stone"}
        assert models['odd'].textures == {'layer0': "minecraft:custom/odd"}
        assert sorted(t.path for t in pack.textures) == ["block/stone", "custom/odd"]

        writer = JavaPackExporter(pack).build()
        model = json.loads(writer.entries["assets/minecraft/models/item/stone.json"].decode('utf-8'))
        assert model['textures'] == {'layer0': "minecraft:block/stone"}
        assert writer.entries["assets/minecraft/textures/block/stone.png"] == b"stone"
        assert "assets/minecraft/textures/item/stone.png" not in writer
        odd = json.loads(writer.entries["assets/minecraft/models/item/odd.json"].decode('utf-8'))
        assert odd['textures'] == {'layer0': "minecraft:custom/odd"}
        assert writer.entries["assets/minecraft/textures/custom/odd.png"] == b"odd"

    def test_unreadable_archive_is_fatal(self):
        from packforge.errors import PackIOError

        with pytest.raises(PackIOError):
            make_importer().import_archive(b"definitely not a zip", "bad.zip")


class TestBedrockImport:
    """Bedrock archives."""

    def test_round_trip(self):
        from packforge.model.assets import AssetModel, Edition, LanguageTable, ModelDefinition, TextureAsset
        from packforge.packaging.bedrock_export import BedrockPackExporter

        mesh = sample_mesh()
        pack = AssetModel(
            name="Swords", description="pointy", version="2.3.1",
            models=[ModelDefinition(name="ruby_sword", custom_model_data=12, target_item="diamond_sword",
                                    textures={'layer0': "ruby_sword"}, elements=mesh['elements'],
                                    outliner=mesh['outliner'], resolution=mesh['resolution'])],
            textures=[TextureAsset(name="ruby_sword", data=b"png")],
            languages=[LanguageTable(code="en_us", content={'item.ruby_sword': "Ruby Sword"})],
        )
        data = BedrockPackExporter(pack).build().to_bytes()
        result = make_importer().import_archive(data, "upload.zip")
        imported = result.pack

        assert result.edition is Edition.BEDROCK
        assert imported.name == "Swords"
        assert imported.description == "pointy"
        assert imported.version == "2.3.1"

        model = imported.models[0]
        assert model.name == "ruby_sword"
        assert model.custom_model_data == 1
        assert model.target_item == "stick"
        assert model.textures == {'layer0': "entity/ruby_sword"}
        assert model.bedrock_geometry['minecraft:geometry'][0]['description']['identifier'] == "geometry.ruby_sword"

        texture = imported.textures[0]
        assert texture.path == "entity/ruby_sword"
        assert result.stats.matched_layers == 1

        lang = imported.languages[0]
        assert lang.code == "en_us"
        assert lang.name == "en_US"
        assert lang.content == {'item.ruby_sword': "Ruby Sword"}

    def test_lang_comments_and_version_default(self):
        data = archive_bytes({
            'manifest.json': {'format_version': 2, 'header': {'name': "L"}},
            'texts/pt_BR.lang': "## comment\n// other\n\nitem.gem=Gema = boa\n=orphan\nnoequals\n",
            'particles/spark.json': {'particle_effect': {}},
            'textures/particle/spark.png': b"spark",
            'shaders/glsl/glow.frag': b"glsl",
        })
        result = make_importer().import_archive(data, "l.zip")
        pack = result.pack
        assert pack.version == "1.21.0"
        assert pack.languages[0].code == "pt_br"
        assert pack.languages[0].content == {'item.gem': "Gema = boa"}
        assert pack.particles[0].textures == ["spark"]
        assert pack.particles[0].source.data == b"spark"
        assert pack.shaders[0].name == "glow"
        assert pack.shaders[0].source.data == b"glsl"

    def test_wrong_shapes_are_skipped(self):
        good = {'minecraft:attachable': {'description': {
            'identifier': "custom:good",
            'geometry': {'default': "geometry.good"},
            'textures': {'default': "textures/entity/good"},
        }}}
        data = archive_bytes({
            'manifest.json': {'format_version': 2, 'header': {'name': ["not", "text"], 'description': 7}},
            'attachables/bad.attachable.json': {'minecraft:attachable': {'description': {
                'geometry': "geometry.bad", 'textures': {'default': "textures/entity/bad"},
            }}},
            'attachables/list.attachable.json': [1, 2],
            'attachables/good.attachable.json': good,
            'models/entity/good.geo.json': {'format_version': "1.16.0", 'minecraft:geometry': []},
            'textures/entity/good.png': b"png",
        })
        result = make_importer().import_archive(data, "upload.zip")
        pack = result.pack

        assert pack.name == "upload"
        assert pack.description == ""
        assert [m.name for m in pack.models] == ["good"]
        assert pack.models[0].textures == {'layer0': "entity/good"}
        paths = {d.path for d in result.diagnostics.by_kind()['parse_error']}
        assert paths == {"attachables/bad.attachable.json", "attachables/list.attachable.json"}

    def test_bedrock_pack_exports_to_consistent_java_pack(self):
        from packforge.model.assets import AssetModel, ModelDefinition, TextureAsset
        from packforge.packaging.bedrock_export import BedrockPackExporter
        from packforge.packaging.java_export import JavaPackExporter

        mesh = sample_mesh()
        pack = AssetModel(
            name="Swords",
            models=[ModelDefinition(name="ruby_sword", custom_model_data=12, textures={'layer0': "ruby_sword"},
                                    elements=mesh['elements'], outliner=mesh['outliner'],
                                    resolution=mesh['resolution'])],
            textures=[TextureAsset(name="ruby_sword", data=b"png")],
        )
        bedrock = BedrockPackExporter(pack).build().to_bytes()
        imported = make_importer().import_archive(bedrock, "swords.zip").pack

        writer = JavaPackExporter(imported).build()
        doc = json.loads(writer.entries["assets/minecraft/models/item/ruby_sword.json"].decode('utf-8'))
        assert doc['textures'] == {'layer0': "minecraft:entity/ruby_sword"}
        assert writer.entries["assets/minecraft/textures/entity/ruby_sword.png"] == b"png"


class TestImportPath:
    """Dispatch on file type."""

    def test_settings_json(self):
        from packforge.model.assets import AssetModel, Edition, ModelDefinition
        from packforge.model.settings import save_settings

        with tempfile.TemporaryDirectory() as tmpdir:
            path = save_settings(AssetModel(name="snap", models=[ModelDefinition(name="a")]),
                                 Path(tmpdir) / "snap.json")
            result = make_importer().import_path(path)
            assert result.edition is Edition.JAVA
            assert result.pack.models[0].name == "a"
            assert result.stats.models == 1

    def test_zip(self):
        from packforge.packaging.java_export import JavaPackExporter

        with tempfile.TemporaryDirectory() as tmpdir:
            path = JavaPackExporter(java_pack()).export(Path(tmpdir) / "Gems.zip")
            result = make_importer().import_path(path)
            assert result.pack.name == "Gems"
            assert len(result.pack.models) == 4

    def test_unsupported_suffix(self):
        from packforge.errors import PackIOError

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "pack.rar"
            path.write_bytes(b"rar")
            with pytest.raises(PackIOError):
                make_importer().import_path(path)

    def test_bad_settings_json(self):
        from packforge.errors import StructuralParseError

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "broken.json"
            path.write_text(json.dumps({'pack': {}}), encoding='utf-8')
            with pytest.raises(StructuralParseError):
                make_importer().import_path(path)
