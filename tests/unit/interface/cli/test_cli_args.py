from __future__ import annotations

"""
Unit tests for CLI Argument Parsing.

Verifies:
1. Sub-command and positional argument parsing.
2. Mapping of CLI flags to configuration keys.
3. Only flags actually given produce overrides.
"""

import pytest

from repometa.interface.cli.args import args_to_overrides, build_parser


def parse_args(arg_list):
    """Helper to simulate CLI argument parsing."""
    parser = build_parser()
    return parser.parse_args(arg_list)


def test_cli_subcommands():
    args = parse_args(["-s", "s-1", "type", "dm_document", "--own-only"])
    assert args.command == "type"
    assert args.name == "dm_document"
    assert args.own_only is True
    assert args.session_id == "s-1"

    args = parse_args(["tree"])
    assert args.command == "tree"
    assert args.root is None

    args = parse_args(["types", "--search", "doc"])
    assert args.search == "doc"

    args = parse_args(["dump-object", "0900000180001234"])
    assert args.object_id == "0900000180001234"


def test_cli_requires_command():
    with pytest.raises(SystemExit):
        parse_args([])


def test_cli_rejects_unknown_detail_source():
    with pytest.raises(SystemExit):
        parse_args(["--detail-source", "xml", "types"])


def test_cli_no_flags_no_overrides():
    assert args_to_overrides(parse_args(["types"])) == {}


def test_cli_flag_mapping():
    args = parse_args(["--bridge-url", "http://h:1", "--detail-source", "dump", "--debug", "types"])
    overrides = args_to_overrides(args)

    assert overrides == {
        "bridge_url": "http://h:1",
        "detail_source": "dump",
        "log_level": "DEBUG",
    }


def test_cli_rest_flag_targets_rest_url():
    args = parse_args(["--rest", "--bridge-url", "http://h:2", "types"])
    overrides = args_to_overrides(args)

    assert overrides["connection_type"] == "rest"
    assert overrides["rest_bridge_url"] == "http://h:2"
    assert "bridge_url" not in overrides
