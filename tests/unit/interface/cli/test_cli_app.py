from __future__ import annotations

"""
Unit tests for the CLI application controller.

Sub-commands run against the in-memory bridge; main() is exercised with
the HTTP client replaced so no network access happens.
"""

import asyncio
from unittest.mock import patch

import pytest

from conftest import FakeBridge
from repometa.core.services.type_cache import TypeCache
from repometa.domain.errors import BridgeError
from repometa.infra.logging import shutdown_logging
from repometa.infra.session import SessionHolder
from repometa.interface.cli import app
from repometa.interface.cli.args import parse

OBJECT_ID = "0900000180001234"


class ClosableBridge(FakeBridge):
    closed = False

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def reset_logging(capsys):
    """Detach our handlers while the captured streams are still open."""
    shutdown_logging()
    yield
    shutdown_logging()


def _run(argv, bridge, sessions):
    cache = TypeCache(bridge, sessions)
    return asyncio.run(app.run_command(parse(argv), cache, bridge, sessions))


def test_tree_command(fake_bridge, active_sessions):
    lines = _run(["tree"], fake_bridge, active_sessions)

    assert lines == [
        "dm_sysobject",
        "  dm_document",
        "    My_Document",
        "  dm_folder",
        "    dm_cabinet",
        "dmi_queue_item",
    ]


def test_tree_from_given_root(fake_bridge, active_sessions):
    assert _run(["tree", "DM_FOLDER"], fake_bridge, active_sessions) == ["dm_folder", "  dm_cabinet"]
    assert _run(["tree", "nope"], fake_bridge, active_sessions) == []


def test_types_command_with_search(fake_bridge, active_sessions):
    assert _run(["types", "--search", "DOC"], fake_bridge, active_sessions) == ["dm_document", "My_Document"]


def test_type_command_own_only(fake_bridge, active_sessions):
    lines = _run(["type", "my_document", "--own-only"], fake_bridge, active_sessions)

    assert lines[0] == "My_Document"
    assert lines[1] == "  super type: dm_document"
    assert lines[2:] == [
        "[custom]",
        "  contract_no (STRING)",
        "  r_reviewers (STRING)",
    ]


def test_type_command_unknown(fake_bridge, active_sessions):
    assert _run(["type", "dm_nope"], fake_bridge, active_sessions) == ["Unknown type: dm_nope"]


def test_dump_object_command(active_sessions, object_dump_text):
    bridge = FakeBridge(dumps={OBJECT_ID: object_dump_text})

    lines = _run(["dump-object", OBJECT_ID], bridge, active_sessions)

    assert lines[0] == f"Quarterly Report (my_document) [{OBJECT_ID}]"
    assert "[standard]" in lines
    assert "  keywords (string) = finance, q3" in lines
    assert "  i_chronicle_id (string) = 0900000180001234" in lines
    assert bridge.count("get_types") == 0


def test_main_success(tmp_path, capsys, sample_types, sample_details):
    bridge = ClosableBridge(types=sample_types, details=sample_details)
    config_path = str(tmp_path / "config.json")

    with patch.object(app, "BridgeClient", return_value=bridge) as factory:
        code = app.main(["-c", config_path, "-s", "s-1", "--bridge-url", "http://h:1", "types"])

    shutdown_logging()
    assert code == 0
    assert factory.call_args.args[0] == "http://h:1"
    assert bridge.closed is True
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "dm_cabinet"
    assert "My_Document" in out


def test_main_without_session_fails(tmp_path, sample_types):
    bridge = ClosableBridge(types=sample_types)

    with patch.object(app, "BridgeClient", return_value=bridge):
        code = app.main(["-c", str(tmp_path / "config.json"), "types"])

    assert code == 1
    assert bridge.calls == []
    assert bridge.closed is True


def test_main_bridge_failure(tmp_path):
    bridge = ClosableBridge()
    bridge.fail_with = BridgeError("Cannot connect to bridge. Is it running?")

    with patch.object(app, "BridgeClient", return_value=bridge):
        code = app.main(["-c", str(tmp_path / "config.json"), "-s", "s-1", "types"])

    assert code == 1
