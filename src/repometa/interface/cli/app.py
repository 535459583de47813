from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Bootstraps logging, merges configuration (defaults, config.json, CLI
flags), wires the bridge client, session holder and type cache together
and runs one sub-command.
"""

import argparse
import asyncio
import sys
from typing import Dict, List, Optional

from repometa.core.processing.categorizer import group_by_category
from repometa.core.services.object_dumps import fetch_object_dump
from repometa.core.services.type_cache import TypeCache
from repometa.domain.attribute_models import AttributeCategory, AttributeRecord
from repometa.domain.config import load_config, resolve_bridge_url, validate_config
from repometa.domain.errors import CacheError
from repometa.infra.logging import LoggingConfig, configure_logging, get_logger
from repometa.infra.network import BridgeClient
from repometa.infra.session import SessionHolder
from repometa.interface.cli import args as cli_args

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# ENTRYPOINT
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional argument list. Defaults to sys.argv.

    Returns:
        int: 0 on success, 1 when the cache or bridge reported an error.
    """
    args = cli_args.parse(argv)

    config = load_config(args.config_path)
    config.update(cli_args.args_to_overrides(args))
    for w in validate_config(config):
        logger.warning(f"Configuration: {w}")

    configure_logging(LoggingConfig(level=config["log_level"], console=True, log_file=config["log_file"]))
    logger.debug(f"CLI: Running '{args.command}' against {resolve_bridge_url(config)}.")

    bridge = BridgeClient(resolve_bridge_url(config), timeout=config["timeout"])
    sessions = SessionHolder()
    if args.session_id:
        sessions.activate(args.session_id)
    cache = TypeCache(bridge, sessions, detail_source=config["detail_source"])

    try:
        lines = asyncio.run(run_command(args, cache, bridge, sessions))
    except CacheError as e:
        logger.error(f"CLI: {e}")
        return 1
    finally:
        bridge.close()

    for line in lines:
        print(line)
    return 0


async def run_command(
        args: argparse.Namespace,
        cache: TypeCache,
        bridge: BridgeClient,
        sessions: SessionHolder,
) -> List[str]:
    """Execute one sub-command and return the lines to print."""
    if args.command == "dump-object":
        session = sessions.get_active_session()
        dump = await fetch_object_dump(bridge, session.session_id if session else "", args.object_id)
        lines = [f"{dump.object_name} ({dump.type_name}) [{dump.object_id}]"]
        lines.extend(_format_grouped(group_by_category(dump.attributes)))
        return lines

    await cache.refresh()

    if args.command == "types":
        names = cache.search_types(args.search) if args.search else cache.get_type_names()
        return [cache.get_type(n).display_name for n in names]

    if args.command == "tree":
        roots = [args.root] if args.root else cache.get_root_types()
        lines: List[str] = []
        for root in roots:
            if cache.is_type_name(root):
                _render_subtree(cache, root, 0, lines)
        return lines

    node = await cache.fetch_details(args.name)
    if node is None:
        return [f"Unknown type: {args.name}"]
    lines = [node.display_name]
    if node.super_type:
        lines.append(f"  super type: {node.super_type}")
    attributes = cache.get_attributes(node.name, include_inherited=not args.own_only)
    lines.extend(_format_grouped(group_by_category(attributes)))
    return lines


# -----------------------------------------------------------------------------
# FORMATTING
# -----------------------------------------------------------------------------

def _render_subtree(cache: TypeCache, name: str, depth: int, lines: List[str]) -> None:
    lines.append("  " * depth + cache.get_type(name).display_name)
    for child in cache.get_child_types(name):
        _render_subtree(cache, child, depth + 1, lines)


def _format_grouped(groups: Dict[AttributeCategory, List[AttributeRecord]]) -> List[str]:
    lines: List[str] = []
    for category, records in groups.items():
        if not records:
            continue
        lines.append(f"[{category.value}]")
        for r in records:
            value = ", ".join(r.value) if isinstance(r.value, tuple) else r.value
            suffix = f" = {value}" if value is not None else ""
            lines.append(f"  {r.name} ({r.data_type}){suffix}")
    return lines


if __name__ == "__main__":
    sys.exit(main())
