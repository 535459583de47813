from __future__ import annotations

"""
Error Types.

Only network-layer failures cross the cache boundary. Dump parsing never
raises: unparsable lines are skipped.
"""

from typing import Optional


class CacheError(Exception):
    """Base class for failures surfaced by the type metadata cache."""


class NoActiveConnection(CacheError):
    """No repository session is available for the requested operation."""

    def __init__(self, message: str = "No active connection") -> None:
        super().__init__(message)


class BridgeError(CacheError):
    """
    Failure reported by, or while talking to, the bridge service.

    Attributes:
        http_status: HTTP status of the failed response, 0 when none was received.
        code: Optional machine-readable error code sent by the bridge.
        details: Optional extended diagnostic text.
    """

    def __init__(
            self,
            message: str,
            *,
            http_status: int = 0,
            code: Optional[str] = None,
            details: Optional[str] = None,
    ) -> None:
        full_message = message
        if code:
            full_message = f"[{code}] {full_message}"
        if details:
            full_message += f"\n\nDetails: {details}"
        super().__init__(full_message)
        self.message = message
        self.http_status = http_status
        self.code = code
        self.details = details
