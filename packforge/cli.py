from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .config import TranscoderConfig, load_config
from .errors import PackError
from .imaging import probe_image_size
from .model.assets import AssetModel, Edition, Resolution, VersionConfig
from .model.settings import save_settings
from .model.validation import pack_statistics, validate_all
from .packaging.export import export_pack
from .packaging.importer import ImportResult, PackageImporter
from .packaging.mapping import render_geyser_mapping
from .packaging.merge import MergeEngine
from .packaging.multi_version import MultiVersionExporter

logger = logging.getLogger(__name__)

COMMANDS = ("export", "import", "merge", "versions", "mapping", "validate")


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="packforge", description="Minecraft resource pack transcoder")
    parser.add_argument("--config", type=str, default=None, help="Path to a transcoder config JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd")

    # export: settings 快照或已有资源包 -> 指定版本的资源包
    p_export = sub.add_parser("export", help="Export a pack (settings .json or .zip) for one edition")
    p_export.add_argument("source", type=str, help="Settings snapshot (.json) or pack archive (.zip)")
    p_export.add_argument("--edition", type=str, choices=["java", "bedrock"], default=None, help="Target edition")
    p_export.add_argument("--output", type=str, required=True, help="Output .zip path or directory")
    p_export.add_argument("--format", type=int, default=None, help="Override pack_format")
    p_export.add_argument("--strict", action="store_true", help="Refuse to export when validation fails")

    p_import = sub.add_parser("import", help="Import a pack archive into a settings snapshot")
    p_import.add_argument("archive", type=str, help="Pack archive (.zip)")
    p_import.add_argument("--output", type=str, required=True, help="Settings snapshot (.json) to write")

    p_merge = sub.add_parser("merge", help="Merge the textures of several pack archives")
    p_merge.add_argument("archives", nargs="+", help="Pack archives, later ones scanned later")
    p_merge.add_argument("--resolution", type=str, choices=[r.value for r in Resolution], default="overwrite",
                         help="How to resolve texture paths provided by more than one pack")
    p_merge.add_argument("--into", type=str, default=None, help="Base pack (.json or .zip) to merge into")
    p_merge.add_argument("--output", type=str, required=True, help="Output settings (.json) or pack (.zip)")
    p_merge.add_argument("--edition", type=str, choices=["java", "bedrock"], default=None,
                         help="Edition used when the output is a .zip")

    p_versions = sub.add_parser("versions", help="Export one Java pack per enabled pack_format")
    p_versions.add_argument("source", type=str, help="Settings snapshot (.json) or pack archive (.zip)")
    p_versions.add_argument("--output-dir", type=str, required=True, help="Directory for the generated packs")
    p_versions.add_argument("--format", type=int, action="append", default=[],
                            help="pack_format to export (repeatable); default: enabled formats from config")

    p_mapping = sub.add_parser("mapping", help="Write the Geyser mapping for a pack")
    p_mapping.add_argument("source", type=str, help="Settings snapshot (.json) or pack archive (.zip)")
    p_mapping.add_argument("--output", type=str, required=True, help="Mapping JSON to write")

    p_validate = sub.add_parser("validate", help="Validate a pack and print statistics")
    p_validate.add_argument("source", type=str, help="Settings snapshot (.json) or pack archive (.zip)")
    p_validate.add_argument("--strict", action="store_true", help="Exit with 1 when validation fails")

    args = parser.parse_args(argv)
    if args.cmd not in COMMANDS:
        parser.print_help()
        return 2

    try:
        config = load_config(Path(args.config) if args.config else None)
    except (OSError, ValueError, TypeError) as e:
        print(f"Cannot load config: {e}")
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, str(config.log_level).upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )

    handlers = {
        "export": _cmd_export,
        "import": _cmd_import,
        "merge": _cmd_merge,
        "versions": _cmd_versions,
        "mapping": _cmd_mapping,
        "validate": _cmd_validate,
    }
    try:
        return handlers[args.cmd](args, config)
    except PackError as e:
        logger.error(f"{args.cmd} failed: {e}")
        print(f"Error: {e}")
        return 2


def _load(source: str, config: TranscoderConfig) -> ImportResult:
    path = Path(source)
    if not path.exists():
        raise PackError("Source not found", str(path))
    importer = PackageImporter(max_workers=config.max_workers, probe=probe_image_size, config=config)
    result = importer.import_path(path)
    for warning in result.diagnostics.warnings():
        print(f"warning: {warning}")
    return result


def _edition(value: Optional[str], config: TranscoderConfig) -> Edition:
    return Edition(value or config.default_edition)


def _print_errors(errors: List[str]) -> None:
    for error in errors:
        print(f"  - {error}")


def _cmd_export(args, config: TranscoderConfig) -> int:
    pack = _load(args.source, config).pack
    if args.format is not None:
        pack = pack.with_format(args.format)

    validation = validate_all(pack)
    if not validation.is_valid:
        print(f"Validation found {len(validation.errors)} problem(s):")
        _print_errors(validation.errors)
        if args.strict:
            return 1

    path = export_pack(pack, _edition(args.edition, config), Path(args.output), config)
    print(f"Exported: {path}")
    return 0


def _cmd_import(args, config: TranscoderConfig) -> int:
    result = _load(args.archive, config)
    stats = result.stats
    path = save_settings(result.pack, Path(args.output))
    print(f"Imported {result.edition.value} pack: {stats.models} models, {stats.textures} textures, "
          f"{stats.matched_layers}/{stats.texture_layers} texture layers linked")
    print(f"Settings written: {path}")
    return 0


def _cmd_merge(args, config: TranscoderConfig) -> int:
    base = _load(args.into, config).pack if args.into else AssetModel(name="merged")
    sources = []
    for archive in args.archives:
        path = Path(archive)
        if not path.exists():
            raise PackError("Archive not found", str(path))
        sources.append((path.stem, path))

    engine = MergeEngine(max_workers=config.max_workers)
    conflicts = engine.analyze(sources)
    resolution = Resolution(args.resolution)
    for conflict in conflicts:
        conflict.resolution = resolution
        print(f"conflict: {conflict.path} <- {', '.join(conflict.package_names)} ({resolution.value})")

    result = engine.execute(sources, conflicts)
    for warning in result.diagnostics.warnings():
        print(f"warning: {warning}")
    merged = result.apply_to(base, probe_image_size)

    output = Path(args.output)
    if output.suffix.lower() == '.zip':
        path = export_pack(merged, _edition(args.edition, config), output, config)
    else:
        path = save_settings(merged, output)
    print(f"Merged {len(sources)} packs ({len(conflicts)} conflicts, {len(result.textures)} textures): {path}")
    return 0


def _cmd_versions(args, config: TranscoderConfig) -> int:
    pack = _load(args.source, config).pack
    versions = None
    if args.format:
        versions = [VersionConfig(str(fmt), fmt, True) for fmt in args.format]

    exporter = MultiVersionExporter(config)
    results = exporter.export_all(pack, Path(args.output_dir), Edition.JAVA, versions)
    if not results:
        print("No enabled versions.")
        return 2
    for item in results:
        print(f"{item.version} (format {item.format}): {item.path}")
    return 0


def _cmd_mapping(args, config: TranscoderConfig) -> int:
    pack = _load(args.source, config).pack
    output = Path(args.output)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(render_geyser_mapping(pack), encoding='utf-8')
    except OSError as e:
        raise PackError(f"Cannot write mapping: {e}", str(output))
    print(f"Mapping written: {output}")
    return 0


def _cmd_validate(args, config: TranscoderConfig) -> int:
    pack = _load(args.source, config).pack
    validation = validate_all(pack)
    stats = pack_statistics(pack)

    print(f"Pack: {pack.name} (format {pack.format})")
    print(f"Models: {stats['valid_models']}/{stats['total_models']} valid")
    print(f"Textures: {stats['total_textures']} ({stats['formatted_size']}, {stats['optimized_textures']} optimized)")
    if validation.is_valid:
        print("Validation passed.")
        return 0
    print(f"Validation failed with {len(validation.errors)} error(s):")
    _print_errors(validation.errors)
    return 1 if args.strict else 0


if __name__ == "__main__":
    raise SystemExit(main())
