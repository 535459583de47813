from __future__ import annotations

"""
Object Dump Service.

Fetches the dump text of an object instance through the bridge and parses
it as an instance dump, with the type and object names falling back to
"unknown" and the requested id.
"""

import logging
import time
from typing import Protocol

from repometa.core.processing.dump_parser import parse_dump
from repometa.domain.attribute_models import DumpContext, DumpKind, ObjectDump
from repometa.domain.errors import CacheError, NoActiveConnection
from repometa.infra.network.common import extract_bridge_error

logger = logging.getLogger(__name__)


class DumpBridge(Protocol):
    async def execute_dump_command(self, session_id: str, target_id: str) -> str: ...


async def fetch_object_dump(bridge: DumpBridge, session_id: str, object_id: str) -> ObjectDump:
    """
    Dump one object and parse the result.

    Args:
        bridge: Collaborator able to run the server dump command.
        session_id: Active session; empty means not connected.
        object_id: Identifier of the object to dump.

    Returns:
        ObjectDump: Parsed attributes, with ``type_name`` falling back to
        "unknown" and ``object_name`` to ``object_id``.

    Raises:
        NoActiveConnection: ``session_id`` is empty.
        BridgeError: The dump command failed.
    """
    if not session_id:
        raise NoActiveConnection()

    started = time.monotonic()
    try:
        text = await bridge.execute_dump_command(session_id, object_id)
    except CacheError:
        raise
    except Exception as e:
        raise extract_bridge_error(e) from e
    fetch_time_ms = int((time.monotonic() - started) * 1000)

    parsed = parse_dump(text, DumpContext(kind=DumpKind.OBJECT, target_id=object_id))
    logger.info(
        f"ObjectDump: {object_id} ({parsed.type_name}) parsed with "
        f"{len(parsed.attributes)} attributes in {fetch_time_ms} ms."
    )
    return ObjectDump(
        object_id=object_id,
        type_name=parsed.type_name,
        object_name=parsed.object_name,
        attributes=parsed.attributes,
        fetch_time_ms=fetch_time_ms,
    )
