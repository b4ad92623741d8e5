"""analyticdefs CLI: fetch, deploy and inspect analytic definitions."""

import argparse
import json
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path
from typing import Any, List, Optional

from analyticdefs import api
from analyticdefs._internal.canonical_json import from_jsonable, pretty_dumps
from analyticdefs.analytics import DOCUMENT_KINDS, get_document_kind
from analyticdefs.config import DEFAULT_CONFIG, TransformConfig, load_config
from analyticdefs.errors import AnalyticsError
from analyticdefs.kernel.elements import Change, InstanceElement


def _load_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return from_jsonable(json.load(f))


def _load_instance_value(path: Path) -> dict:
    """Instance value from a JSON file, or from a bare XML definition (scriptid = file stem)."""
    if path.suffix.lower() == ".xml":
        return {"scriptid": path.stem, "definition": path.read_text(encoding="utf-8")}
    data = _load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in '{path}'")
    return data


def _load_translations(path: Optional[Path]) -> List[Any]:
    """Translation collections from ``{"<collectionId>": {"strings": ...}, ...}``."""
    if path is None:
        return []
    data = _load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object of translation collections in '{path}'")
    return [api.translation_collection(name, value) for name, value in data.items()]


def _write_output(content: str, output: Optional[Path]) -> None:
    if output is None:
        print(content)
    else:
        output.write_text(content + "\n", encoding="utf-8")


def _configure_logging(args: argparse.Namespace) -> None:
    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _build_parser(analyticdefs_version: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="analyticdefs",
        description="analyticdefs: schema-driven transforms for NetSuite workbook and dataset definitions"
    )
    parser.add_argument("--version", action="version", version=f"analyticdefs {analyticdefs_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log unexpected shapes and unresolved references."
    )
    parent_parser.add_argument(
        "--kind",
        choices=sorted(DOCUMENT_KINDS),
        required=True,
        help="Document kind"
    )
    parent_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a transform config JSON file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    fetch_parser = subparsers.add_parser(
        "fetch",
        help="Parse a definition into its canonical value",
        parents=[parent_parser]
    )
    fetch_parser.add_argument("input", type=Path, help="Instance JSON file, or a bare definition .xml file")
    fetch_parser.add_argument("--name", default=None, help="Instance name (defaults to the scriptid)")
    fetch_parser.add_argument(
        "--translations",
        type=Path,
        default=None,
        help="JSON object of translation collections, keyed by collection id"
    )
    fetch_parser.add_argument("--output", type=Path, default=None, help="Write JSON here instead of stdout")

    deploy_parser = subparsers.add_parser(
        "deploy",
        help="Rebuild the deployable value (XML definition included) from a canonical value",
        parents=[parent_parser]
    )
    deploy_parser.add_argument("input", type=Path, help="Canonical instance value JSON file")
    deploy_parser.add_argument("--name", default=None, help="Instance name (defaults to the scriptid)")
    deploy_parser.add_argument(
        "--xml-only",
        action="store_true",
        help="Print only the XML definition"
    )
    deploy_parser.add_argument("--output", type=Path, default=None, help="Write output here instead of stdout")

    roundtrip_parser = subparsers.add_parser(
        "roundtrip",
        help="Fetch, deploy and fetch again; exit 1 if the canonical value changes",
        parents=[parent_parser]
    )
    roundtrip_parser.add_argument("input", type=Path, help="Instance JSON file, or a bare definition .xml file")
    roundtrip_parser.add_argument(
        "--translations",
        type=Path,
        default=None,
        help="JSON object of translation collections, keyed by collection id"
    )

    validate_parser = subparsers.add_parser(
        "validate",
        help="Report change errors for a canonical value about to be deployed",
        parents=[parent_parser]
    )
    validate_parser.add_argument("input", type=Path, help="Canonical instance value JSON file")

    subparsers.add_parser(
        "schema",
        help="Print the schema graph of a document kind",
        parents=[parent_parser]
    )
    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point for analyticdefs commands."""
    try:
        analyticdefs_version = get_version("analyticdefs")
    except PackageNotFoundError:
        analyticdefs_version = "dev"

    parser = _build_parser(analyticdefs_version)
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    _configure_logging(args)

    try:
        config: TransformConfig = load_config(args.config) if args.config else DEFAULT_CONFIG

        if args.command == "fetch":
            value = api.fetch_definition(
                _load_instance_value(args.input),
                args.kind,
                name=args.name,
                elements=_load_translations(args.translations),
                config=config,
            )
            _write_output(pretty_dumps(value), args.output)

        elif args.command == "deploy":
            deployed = api.deploy_definition(_load_instance_value(args.input), args.kind, args.name, config)
            content = deployed["definition"] if args.xml_only else pretty_dumps(deployed)
            _write_output(content, args.output)

        elif args.command == "roundtrip":
            result = api.roundtrip_definition(
                _load_instance_value(args.input),
                args.kind,
                elements=_load_translations(args.translations),
                config=config,
            )
            if not args.quiet:
                print(result.deployed.get("definition", ""))
                print(f"[{'OK' if result.stable else 'CHANGED'}] Round trip complete")
            if not result.stable:
                sys.exit(1)

        elif args.command == "validate":
            value = _load_instance_value(args.input)
            kind = get_document_kind(args.kind)
            instance = InstanceElement(
                name=str(value.get("scriptid") or kind.name),
                type_name=kind.name,
                value=value,
            )
            errors = api.validate_changes([Change(action="modify", after=instance)])
            if not args.quiet:
                for error in errors:
                    print(f"[{error.severity.value}] {error.elem_id}: {error.message}")
                print(f"[OK] Validation complete ({len(errors)} issue(s))")

        elif args.command == "schema":
            print(pretty_dumps(get_document_kind(args.kind).schema.describe()))

    except (AnalyticsError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
