from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from src.errors import DevEnvError
from src.frameworks.adapter import FrameworkAdapter
from src.frameworks.config import log_level
from src.frameworks.neos_flow import neos_flow_adapter
from src.projects.descriptor import ProjectDescriptor, descriptor_from_mapping

logger = logging.getLogger(__name__)


def _add_project_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--app-root", default=".", help="Project root directory")
    p.add_argument("--composer-root", default="", help="Framework tree, relative to the app root")
    p.add_argument("--docroot", default="")
    p.add_argument(
        "--database-type",
        default="mariadb",
        choices=["mysql", "mariadb", "postgres"],
    )
    p.add_argument("--name", default="")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devenv-flow",
        description="Configure Neos Flow projects for the local development environment.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_detect = sub.add_parser("detect", help="Exit 0 if the project is a Neos Flow app")
    _add_project_args(p_detect)

    p_prov = sub.add_parser("provision", help="Generate the database settings file")
    _add_project_args(p_prov)

    p_imp = sub.add_parser("import-files", help="Replace the upload dir with a directory or archive")
    _add_project_args(p_imp)
    p_imp.add_argument("source", help="Directory, tar or zip archive")
    p_imp.add_argument("--upload-dir", default=None)
    p_imp.add_argument("--extract-path", default="", help="Sub path inside the archive")
    return parser


def _descriptor(args: argparse.Namespace) -> ProjectDescriptor:
    return descriptor_from_mapping(
        {
            "app_root": args.app_root,
            "composer_root": args.composer_root,
            "docroot": args.docroot,
            "database_type": args.database_type,
            "name": args.name,
        }
    )


def _run(args: argparse.Namespace, adapter: FrameworkAdapter) -> int:
    desc = _descriptor(args)
    if args.command == "detect":
        if adapter.detect(desc):
            print(adapter.framework_id)
            return 0
        return 1

    if args.command == "provision":
        result = adapter.configure(desc)
        print(result.settings_file)
        return 0

    desc = adapter.normalize_docroot(desc)
    upload_dir = args.upload_dir or adapter.spec.upload_dir
    dest = adapter.import_files(desc, upload_dir, args.source, args.extract_path)
    print(dest)
    return 0


def main(argv: list[str] | None = None, *, adapter: FrameworkAdapter | None = None) -> int:
    load_dotenv()
    logging.basicConfig(level=log_level(), format="%(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    try:
        return _run(args, adapter or neos_flow_adapter())
    except DevEnvError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
