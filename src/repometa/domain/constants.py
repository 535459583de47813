from __future__ import annotations

"""
Domain Constants.

Attribute naming conventions of the repository server, bridge endpoint
defaults and the numeric attribute-type codes found in type dumps.
"""

from typing import Dict, Tuple

# -----------------------------------------------------------------------------
# ATTRIBUTE NAMING CONVENTIONS
# -----------------------------------------------------------------------------
SYSTEM_PREFIX = "r_"
INTERNAL_PREFIX = "i_"
APPLICATION_PREFIX = "a_"
RESERVED_PREFIXES: Tuple[str, ...] = (SYSTEM_PREFIX, INTERNAL_PREFIX, APPLICATION_PREFIX)

START_POS_ATTR = "start_pos"
OBJECT_TYPE_ATTR = "r_object_type"
OBJECT_NAME_ATTR = "object_name"

# Parallel repeating groups of a dm_type dump
TYPE_DUMP_ATTR_NAME = "attr_name"
TYPE_DUMP_ATTR_TYPE = "attr_type"
TYPE_DUMP_ATTR_LENGTH = "attr_length"
TYPE_DUMP_ATTR_REPEATING = "attr_repeating"

DEFAULT_DUMP_DATA_TYPE = "string"
UNKNOWN_TYPE_NAME = "unknown"
DUMP_SEPARATOR = "---"

# dm_type.attr_type codes
ATTRIBUTE_TYPE_CODES: Dict[str, str] = {
    "0": "BOOLEAN",
    "1": "INT",
    "2": "STRING",
    "3": "ID",
    "4": "TIME",
    "5": "DOUBLE",
    "6": "UNDEFINED",
}

# -----------------------------------------------------------------------------
# BRIDGE DEFAULTS
# -----------------------------------------------------------------------------
DEFAULT_DFC_PORT = 9876
DEFAULT_REST_PORT = 9877
DEFAULT_BRIDGE_HOST = "localhost"
DEFAULT_TIMEOUT = 30

TYPES_ENDPOINT = "/api/v1/types"
DMAPI_ENDPOINT = "/api/v1/dmapi"
HEALTH_ENDPOINT = "/health"

DETAIL_SOURCE_STRUCTURED = "structured"
DETAIL_SOURCE_DUMP = "dump"
