from __future__ import annotations

"""
Type and Attribute Data Models.

Value types shared by the dump parser and the type metadata cache. All of
them are frozen: collaborators receive these objects directly and can
never reach the cache's internal storage through them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union

from repometa.domain.constants import UNKNOWN_TYPE_NAME

# A scalar dump value, or the ordered values of a repeating attribute
AttributeValue = Union[None, str, Tuple[str, ...]]


class AttributeCategory(str, Enum):
    """Display grouping of an attribute."""
    CUSTOM = "custom"
    STANDARD = "standard"
    SYSTEM = "system"
    APPLICATION = "application"
    INTERNAL = "internal"


# Order in which grouped attributes are presented
CATEGORY_ORDER: Tuple[AttributeCategory, ...] = (
    AttributeCategory.CUSTOM,
    AttributeCategory.STANDARD,
    AttributeCategory.APPLICATION,
    AttributeCategory.SYSTEM,
    AttributeCategory.INTERNAL,
)


@dataclass(frozen=True)
class AttributeRecord:
    """
    One attribute of a type definition or of an object instance.

    Attributes:
        name: Attribute name as reported by the server.
        data_type: Semantic type string (e.g. "STRING", "ID", "INT").
        length: Declared length; 0 means not applicable or unbounded.
        is_repeating: Whether the attribute holds an ordered list of values.
        is_inherited: Whether the attribute is defined on a super-type.
        category: Display grouping derived from the name (and context).
        value: Raw dump value; a tuple for repeating attributes, None for
            records that come from a type definition.
    """
    name: str
    data_type: str
    length: int = 0
    is_repeating: bool = False
    is_inherited: bool = False
    category: AttributeCategory = AttributeCategory.STANDARD
    value: AttributeValue = None


@dataclass(frozen=True)
class TypeSummary:
    """Entry of the flat type list returned by the bridge."""
    name: str
    super_type: Optional[str]
    is_internal: bool = False


@dataclass(frozen=True)
class TypeNode:
    """
    One type of the hierarchy.

    Attributes:
        name: Canonical (lower-cased) identifier.
        display_name: Name with the casing the server reported.
        super_type: Canonical name of the parent type, None for a root.
        is_internal: Classification flag from the server.
        attributes: Attribute records, empty until fetched on demand.
        children: Canonical names of direct subtypes, sorted.
    """
    name: str
    display_name: str
    super_type: Optional[str]
    is_internal: bool = False
    attributes: Tuple[AttributeRecord, ...] = ()
    children: Tuple[str, ...] = ()

    @property
    def attributes_loaded(self) -> bool:
        return bool(self.attributes)


@dataclass(frozen=True)
class CacheStats:
    type_count: int
    last_refresh: Optional[datetime]
    generation: int
    loaded_detail_count: int


# -----------------------------------------------------------------------------
# DUMP MODELS
# -----------------------------------------------------------------------------

class DumpKind(str, Enum):
    """Whether a dump describes an object instance or a type definition."""
    OBJECT = "object"
    TYPE = "type"


@dataclass(frozen=True)
class DumpContext:
    """
    Caller-supplied context for parsing one dump.

    Attributes:
        kind: Whether the dump describes an object instance or a type.
        target_id: Identifier the dump was requested for; fallback object name.
        fallback_type_name: Type name used when the dump carries no r_object_type.
    """
    kind: DumpKind = DumpKind.OBJECT
    target_id: str = ""
    fallback_type_name: str = UNKNOWN_TYPE_NAME


@dataclass(frozen=True)
class ParsedDump:
    attributes: Tuple[AttributeRecord, ...]
    type_name: str
    object_name: str
    start_pos: int = -1


@dataclass(frozen=True)
class ObjectDump:
    """Parsed dump of an object instance together with fetch timing."""
    object_id: str
    type_name: str
    object_name: str
    attributes: Tuple[AttributeRecord, ...] = field(default_factory=tuple)
    fetch_time_ms: int = 0
