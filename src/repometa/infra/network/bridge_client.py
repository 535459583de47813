from __future__ import annotations

"""
Bridge HTTP Client.

Talks to the bridge microservice that fronts the repository server (DFC or
REST flavour). Requests are blocking ``requests`` calls executed in a
worker thread, so every public coroutine is a cooperative suspension point
for the asyncio event loop driving the cache.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from repometa.domain import constants as const
from repometa.domain.errors import BridgeError
from repometa.infra.network.common import USER_AGENT, extract_bridge_error

logger = logging.getLogger(__name__)


class BridgeClient:
    """
    Client for the type and dump endpoints of the bridge.

    Args:
        base_url: Root URL of the bridge, e.g. ``http://localhost:9876``.
        timeout: Per-request timeout in seconds.
        session: Optional pre-configured ``requests.Session``.
    """

    def __init__(
            self,
            base_url: str,
            timeout: float = const.DEFAULT_TIMEOUT,
            session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http = session or requests.Session()
        self._http.headers.update({
            "User-Agent": USER_AGENT,
            "Content-Type": "application/json",
        })

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        self._http.close()

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------

    async def health(self) -> bool:
        """Return True when the bridge answers its health probe."""
        try:
            response = await asyncio.to_thread(
                self._http.get, self._url(const.HEALTH_ENDPOINT), timeout=self._timeout
            )
        except requests.exceptions.RequestException as e:
            logger.debug(f"Network: Health probe failed: {e}")
            return False
        return response.status_code == 200

    async def get_types(self, session_id: str) -> List[Dict[str, Any]]:
        """
        Fetch the flat list of repository types.

        Returns:
            List[Dict[str, Any]]: Entries shaped ``{name, superType, isInternal}``.

        Raises:
            BridgeError: On transport failure or a payload that is not a list.
        """
        data = await self._request("GET", const.TYPES_ENDPOINT, params={"sessionId": session_id})
        if not isinstance(data, list):
            raise BridgeError("Malformed type list (root is not a list).")
        logger.info(f"Network: Received {len(data)} type entries.")
        return data

    async def get_type_details(self, session_id: str, type_name: str) -> Dict[str, Any]:
        """
        Fetch one type with its attribute list.

        Returns:
            Dict[str, Any]: ``{name, superType, attributes: [{name, dataType,
            length, isRepeating, isInherited}]}``.
        """
        path = f"{const.TYPES_ENDPOINT}/{quote(type_name, safe='')}"
        data = await self._request("GET", path, params={"sessionId": session_id})
        if not isinstance(data, dict):
            raise BridgeError(f"Malformed details for type '{type_name}'.")
        return data

    async def execute_dump_command(self, session_id: str, target_id: str) -> str:
        """
        Run the server ``dump`` API command and return its raw text.

        Args:
            session_id: Active session.
            target_id: Object id (or type name) to dump.
        """
        body = {
            "sessionId": session_id,
            "apiType": "get",
            "command": f"dump,{session_id},{target_id}",
        }
        data = await self._request("POST", const.DMAPI_ENDPOINT, json=body)
        if isinstance(data, dict):
            result = data.get("result")
            return "" if result is None else str(result)
        return "" if data is None else str(data)

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        return await asyncio.to_thread(self._request_sync, method, path, **kwargs)

    def _request_sync(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._url(path)
        logger.debug(f"Network: {method} {url}")
        try:
            response = self._http.request(method, url, timeout=self._timeout, **kwargs)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise extract_bridge_error(e) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise BridgeError(f"Bridge returned non-JSON body for {path}.",
                              http_status=response.status_code) from e
