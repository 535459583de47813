from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the QueueListener architecture, idempotency of configuration and
that only our own handlers are removed on re-configuration.
"""

import logging
from logging.handlers import QueueHandler
from pathlib import Path
from unittest.mock import patch

import pytest

from repometa.infra.logging import (
    _HANDLER_TAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    LoggingConfig,
    configure_logging,
    shutdown_logging,
)


@pytest.fixture(autouse=True)
def reset_logging(capsys):
    """Detach our handlers before and after each test, while stderr capture is open."""
    shutdown_logging()
    yield
    shutdown_logging()


def _our_handlers():
    return [h for h in logging.getLogger().handlers if getattr(h, _HANDLER_TAG_ATTR, False)]


def test_logging_idempotency() -> None:
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    first = _our_handlers()
    configure_logging(cfg)

    assert _our_handlers() == first
    assert len(first) == 1
    assert isinstance(first[0], QueueHandler)


def test_force_reconfigures(tmp_path: Path) -> None:
    configure_logging(LoggingConfig(level="INFO"))
    configure_logging(LoggingConfig(level="DEBUG", log_file=str(tmp_path / "a.log")), force=True)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(_our_handlers()) == 1
    listener = getattr(root, _QUEUE_LISTENER_ATTR)
    assert len(listener.handlers) == 2


def test_file_logging_writes_records(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "repometa.log"
    configure_logging(LoggingConfig(level="DEBUG", console=False, log_file=str(log_file)))

    logging.getLogger("repometa.test").info("TypeCache: hello")
    shutdown_logging()

    assert "TypeCache: hello" in log_file.read_text(encoding="utf-8")


def test_foreign_handlers_are_kept() -> None:
    root = logging.getLogger()
    foreign = logging.NullHandler()
    root.addHandler(foreign)
    try:
        configure_logging(LoggingConfig(level="INFO"), force=True)
        shutdown_logging()
        assert foreign in root.handlers
    finally:
        root.removeHandler(foreign)


def test_parse_level() -> None:
    assert LoggingConfig.parse_level("warn") == logging.WARNING
    assert LoggingConfig.parse_level("nonsense") == logging.INFO
    assert LoggingConfig.parse_level(None) == logging.INFO


def test_emergency_console_fallback() -> None:
    with patch("repometa.infra.logging.core.QueueListener", side_effect=RuntimeError("no thread")):
        root = configure_logging(LoggingConfig(level="DEBUG"), force=True)

    handlers = _our_handlers()
    assert len(handlers) == 1
    assert not isinstance(handlers[0], QueueHandler)
    assert handlers[0].formatter._fmt.startswith("CRITICAL FALLBACK")
    assert root.level == logging.INFO


def test_shutdown_stops_listener_and_detaches_handlers() -> None:
    configure_logging(LoggingConfig(level="INFO", console=True))
    root = logging.getLogger()
    listener = getattr(root, _QUEUE_LISTENER_ATTR)

    shutdown_logging()

    assert _our_handlers() == []
    assert getattr(root, _QUEUE_LISTENER_ATTR) is None
    assert getattr(listener, "_thread", None) is None
