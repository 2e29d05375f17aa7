"""
Command line entry point: export a mesh file into an FBX template.
"""

import argparse
import json
import logging
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from .errors import FbxExportError
from .exporter import Exporter
from .identity import ExportIdentity, HostDefaults
from .mesh_loader import MeshLoader
from .template import load_template


logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export a mesh into a binary FBX template")
    parser.add_argument("mesh", type=Path, help="Input mesh (STL, OBJ, PLY, ...)")
    parser.add_argument("output", type=Path, help="Output .fbx path")
    parser.add_argument("--template", type=Path, default=None,
                        help="Binary FBX template (default: built-in single-mesh template)")
    parser.add_argument("--name", default=None, help="Scene object name (default: mesh file stem)")
    parser.add_argument("--identity", type=Path, default=None,
                        help="JSON file with vendor / creator_name / application_name / version")
    parser.add_argument("--vendor", default=None)
    parser.add_argument("--creator", default=None)
    parser.add_argument("--application-name", default=None)
    parser.add_argument("--application-version", default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _build_identity(args: argparse.Namespace) -> ExportIdentity:
    data = {}
    if args.identity is not None:
        data = json.loads(args.identity.read_text("utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Identity JSON root must be an object: {args.identity}")
    overrides = {
        "vendor": args.vendor,
        "creator_name": args.creator,
        "application_name": args.application_name,
        "version": args.application_version,
    }
    data.update({key: value for key, value in overrides.items() if value is not None})
    return ExportIdentity.from_mapping(data)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        mesh = MeshLoader.load_mesh(str(args.mesh))
        template = load_template(args.template)
        identity = _build_identity(args)
    except (OSError, ValueError, FbxExportError) as exc:
        logger.error("%s", exc)
        return 1

    host = HostDefaults(company_name="", product_name="fbx_export", version=_package_version())
    report = Exporter.export(args.name or args.mesh.stem, mesh, template, identity, args.output, host=host)
    return 0 if report.written else 1


def _package_version() -> str:
    try:
        return version("fbx-export")
    except PackageNotFoundError:
        return "0.0.0"


if __name__ == "__main__":
    raise SystemExit(main())
