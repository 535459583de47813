from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. An in-memory bridge double recording every call it receives.
3. Shared session and dump-text fixtures.
"""

import os
import sys
from typing import Any, Dict, List, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from repometa.infra.session import SessionHolder  # noqa: E402


# -----------------------------------------------------------------------------
# Bridge Double
# -----------------------------------------------------------------------------
class FakeBridge:
    """
    In-memory stand-in for the bridge client.

    ``types`` feeds get_types, ``details`` maps a lower-cased type name to
    its details payload, ``dumps`` maps a target id to dump text. Setting
    ``fail_with`` makes every call raise that exception.
    """

    def __init__(
            self,
            types: Optional[List[Dict[str, Any]]] = None,
            details: Optional[Dict[str, Dict[str, Any]]] = None,
            dumps: Optional[Dict[str, str]] = None,
    ) -> None:
        self.types = types or []
        self.details = details or {}
        self.dumps = dumps or {}
        self.fail_with: Optional[Exception] = None
        self.calls: List[tuple] = []

    async def get_types(self, session_id: str) -> List[Dict[str, Any]]:
        self.calls.append(("get_types", session_id))
        if self.fail_with:
            raise self.fail_with
        return list(self.types)

    async def get_type_details(self, session_id: str, type_name: str) -> Dict[str, Any]:
        self.calls.append(("get_type_details", session_id, type_name))
        if self.fail_with:
            raise self.fail_with
        return self.details[type_name.lower()]

    async def execute_dump_command(self, session_id: str, target_id: str) -> str:
        self.calls.append(("execute_dump_command", session_id, target_id))
        if self.fail_with:
            raise self.fail_with
        return self.dumps[target_id]

    def count(self, method: str) -> int:
        return sum(1 for c in self.calls if c[0] == method)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def sample_types() -> List[Dict[str, Any]]:
    """Small dm_* hierarchy with one custom subtype."""
    return [
        {"name": "dm_sysobject", "superType": None, "isInternal": False},
        {"name": "dm_document", "superType": "dm_sysobject", "isInternal": False},
        {"name": "dm_folder", "superType": "dm_sysobject", "isInternal": False},
        {"name": "dm_cabinet", "superType": "dm_folder", "isInternal": False},
        {"name": "My_Document", "superType": "DM_DOCUMENT", "isInternal": False},
        {"name": "dmi_queue_item", "superType": None, "isInternal": True},
    ]


@pytest.fixture
def sample_details() -> Dict[str, Dict[str, Any]]:
    return {
        "my_document": {
            "name": "my_document",
            "superType": "dm_document",
            "attributes": [
                {"name": "object_name", "dataType": "STRING", "length": 255,
                 "isRepeating": False, "isInherited": True},
                {"name": "r_object_id", "dataType": "ID", "length": 16,
                 "isRepeating": False, "isInherited": True},
                {"name": "keywords", "dataType": "STRING", "length": 48,
                 "isRepeating": True, "isInherited": True},
                {"name": "contract_no", "dataType": "STRING", "length": 32,
                 "isRepeating": False, "isInherited": False},
                {"name": "r_reviewers", "dataType": "STRING", "length": 32,
                 "isRepeating": True, "isInherited": False},
            ],
        },
    }


@pytest.fixture
def fake_bridge(sample_types, sample_details) -> FakeBridge:
    return FakeBridge(types=sample_types, details=sample_details)


@pytest.fixture
def active_sessions() -> SessionHolder:
    holder = SessionHolder()
    holder.activate("s-0001", "docbase01")
    return holder


@pytest.fixture
def object_dump_text() -> str:
    """Instance dump as printed by the server, with a repeating group."""
    return "\n".join([
        "USER ATTRIBUTES",
        "",
        "  object_name                     : Quarterly Report",
        "  title                           : Q3",
        "  keywords[0]                     : finance",
        "  keywords[1]                     : q3",
        "  contract_no                     : C-42",
        "",
        "SYSTEM ATTRIBUTES",
        "",
        "  r_object_id                     : 0900000180001234",
        "  r_object_type                   : my_document",
        "  r_creation_date                 : 1/2/2024 10:11:12",
        "",
        "APPLICATION ATTRIBUTES",
        "",
        "  a_status                        : draft",
        "",
        "INTERNAL ATTRIBUTES",
        "",
        "  i_chronicle_id                  : 0900000180001234",
        "---",
    ])
