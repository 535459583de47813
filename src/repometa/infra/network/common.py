from __future__ import annotations

"""
Shared Network Helpers.

Client identification and the translation of ``requests`` failures into
BridgeError, preserving the structured error payload the bridge returns
for 4xx/5xx responses: ``{status, code?, message, details?}``.
"""

import logging
from typing import Any, Optional

import requests

from repometa.domain.errors import BridgeError

logger = logging.getLogger(__name__)

USER_AGENT = "RepoMeta-Client/1.0.0"


def extract_bridge_error(error: Exception) -> BridgeError:
    """
    Build a BridgeError carrying the most meaningful message available.

    Args:
        error: Exception raised by ``requests`` (or any other failure).

    Returns:
        BridgeError: Error ready to be raised across the cache boundary.
    """
    if isinstance(error, BridgeError):
        return error

    response: Optional[requests.Response] = getattr(error, "response", None)
    if response is not None:
        status = response.status_code
        data = _json_or_none(response)

        if isinstance(data, dict) and isinstance(data.get("message"), str):
            if isinstance(data.get("status"), int):
                logger.error(
                    f"Network: Bridge error status={data['status']} "
                    f"code={data.get('code')} message={data['message']}"
                )
                return BridgeError(
                    data["message"],
                    http_status=data["status"],
                    code=data.get("code"),
                    details=data.get("details"),
                )
            return BridgeError(data["message"], http_status=status)

        text = response.text if isinstance(response.text, str) else ""
        if text:
            return BridgeError(text, http_status=status)

    if isinstance(error, requests.exceptions.Timeout):
        return BridgeError("Bridge request timed out")
    if isinstance(error, requests.exceptions.ConnectionError):
        return BridgeError("Cannot connect to bridge. Is it running?")

    return BridgeError(str(error) or error.__class__.__name__)


def _json_or_none(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
