from __future__ import annotations

"""
Network Communication Infrastructure.

Facade over the bridge client and its error translation helpers.
"""

from repometa.infra.network.bridge_client import BridgeClient
from repometa.infra.network.common import USER_AGENT, extract_bridge_error

__all__ = [
    "BridgeClient",
    "USER_AGENT",
    "extract_bridge_error",
]
