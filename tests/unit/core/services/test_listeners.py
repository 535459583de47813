from __future__ import annotations

"""
Unit tests for the refresh listener registry.
"""

import logging
from typing import List

from repometa.core.services.listeners import RefreshListenerRegistry


def test_notify_in_registration_order() -> None:
    registry = RefreshListenerRegistry()
    calls: List[str] = []
    registry.add(lambda: calls.append("a"))
    registry.add(lambda: calls.append("b"))
    registry.add(lambda: calls.append("c"))

    assert registry.notify() == 3
    assert calls == ["a", "b", "c"]
    assert len(registry) == 3


def test_failing_listener_does_not_block_others(caplog) -> None:
    registry = RefreshListenerRegistry()
    calls: List[str] = []

    def broken() -> None:
        raise RuntimeError("render failed")

    registry.add(broken)
    registry.add(lambda: calls.append("after"))

    with caplog.at_level(logging.ERROR):
        delivered = registry.notify()

    assert delivered == 1
    assert calls == ["after"]
    assert "Refresh callback" in caplog.text
    # The failing listener stays registered
    assert len(registry) == 2


def test_remove_registration() -> None:
    registry = RefreshListenerRegistry()
    calls: List[int] = []

    def listener() -> None:
        calls.append(1)

    unsubscribe = registry.add(listener)
    unsubscribe()
    registry.notify()

    assert calls == []
    assert registry.remove(listener) is False
