from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed namespace into
configuration overrides.
"""

import argparse
from typing import Any, Dict, List, Optional

from repometa.domain import constants as const


def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the repometa CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="repometa",
        description="Inspect the type hierarchy and object dumps of a repository via its bridge.",
    )

    # --- Connection ---
    p.add_argument(
        "-s", "--session",
        dest="session_id",
        default=None,
        help="Session id of an already established bridge session.",
    )
    p.add_argument(
        "--bridge-url",
        dest="bridge_url",
        default=None,
        help="Bridge base URL (overrides the configured one).",
    )
    p.add_argument(
        "--rest",
        action="store_true",
        help="Use the REST bridge instead of the DFC bridge.",
    )
    p.add_argument(
        "--detail-source",
        dest="detail_source",
        choices=[const.DETAIL_SOURCE_STRUCTURED, const.DETAIL_SOURCE_DUMP],
        default=None,
        help="Fetch type attributes from the details endpoint or from dump text.",
    )

    # --- Diagnostics ---
    p.add_argument(
        "-c", "--config",
        dest="config_path",
        default=None,
        help="Path to a config.json file.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging on stderr.",
    )

    sub = p.add_subparsers(dest="command", required=True)

    types_p = sub.add_parser("types", help="List type names.")
    types_p.add_argument("--search", default=None, help="Case-insensitive substring filter.")

    tree_p = sub.add_parser("tree", help="Print the type hierarchy.")
    tree_p.add_argument("root", nargs="?", default=None, help="Start from this type.")

    type_p = sub.add_parser("type", help="Show the attributes of one type.")
    type_p.add_argument("name")
    type_p.add_argument("--own-only", action="store_true", help="Hide inherited attributes.")

    dump_p = sub.add_parser("dump-object", help="Dump an object instance.")
    dump_p.add_argument("object_id")

    return p


def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Map CLI flags onto configuration keys.

    Only options actually given on the command line produce an override.
    """
    overrides: Dict[str, Any] = {}
    if args.rest:
        overrides["connection_type"] = "rest"
    if args.bridge_url:
        key = "rest_bridge_url" if args.rest else "bridge_url"
        overrides[key] = args.bridge_url
    if args.detail_source:
        overrides["detail_source"] = args.detail_source
    if args.debug:
        overrides["log_level"] = "DEBUG"
    return overrides


def parse(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
