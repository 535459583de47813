from __future__ import annotations

"""
Refresh Listener Registry.

In-process publish mechanism used by the type cache to tell UI
collaborators that a new snapshot is visible. Callbacks run synchronously,
in registration order.
"""

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

RefreshListener = Callable[[], None]


class RefreshListenerRegistry:
    """Ordered collection of zero-argument callbacks."""

    def __init__(self) -> None:
        self._listeners: List[RefreshListener] = []

    def add(self, listener: RefreshListener) -> Callable[[], None]:
        """
        Register a callback.

        The same callable may be registered more than once; it is then
        invoked once per registration.

        Args:
            listener: Callback invoked after every successful refresh.

        Returns:
            Callable[[], None]: Function removing this registration.
        """
        self._listeners.append(listener)

        def _remove() -> None:
            self.remove(listener)

        return _remove

    def remove(self, listener: RefreshListener) -> bool:
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        return True

    def notify(self) -> int:
        """
        Invoke every listener in registration order.

        A failing listener is logged and does not prevent the remaining
        ones from running.

        Returns:
            int: Number of listeners that completed without raising.
        """
        delivered = 0
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception(f"Listeners: Refresh callback {listener!r} failed.")
                continue
            delivered += 1
        return delivered

    def __len__(self) -> int:
        return len(self._listeners)
