from __future__ import annotations

"""
Attribute Categorization Rules.

Pure functions deriving an AttributeCategory. Type definitions categorize
by the inherited flag; dumps categorize by name prefix, followed by a
positional pass driven by the start_pos marker.
"""

from dataclasses import replace
from typing import Dict, List, Sequence, Tuple

from repometa.domain.attribute_models import CATEGORY_ORDER, AttributeCategory, AttributeRecord
from repometa.domain.constants import (
    APPLICATION_PREFIX,
    INTERNAL_PREFIX,
    RESERVED_PREFIXES,
    SYSTEM_PREFIX,
)


def category_from_prefix(name: str) -> AttributeCategory:
    """
    Categorize an attribute by its name prefix alone.

    Args:
        name: Attribute name.

    Returns:
        AttributeCategory: SYSTEM for ``r_``, INTERNAL for ``i_``,
        APPLICATION for ``a_``, STANDARD otherwise.
    """
    if name.startswith(SYSTEM_PREFIX):
        return AttributeCategory.SYSTEM
    if name.startswith(INTERNAL_PREFIX):
        return AttributeCategory.INTERNAL
    if name.startswith(APPLICATION_PREFIX):
        return AttributeCategory.APPLICATION
    return AttributeCategory.STANDARD


def category_for_type_attribute(name: str, is_inherited: bool) -> AttributeCategory:
    """Attributes defined directly on the inspected type are always CUSTOM."""
    if not is_inherited:
        return AttributeCategory.CUSTOM
    return category_from_prefix(name)


def is_reserved_name(name: str) -> bool:
    return name.startswith(RESERVED_PREFIXES)


def custom_ordinals(names: Sequence[str], start_pos: int) -> List[bool]:
    """
    Decide, per position, whether a prefix-STANDARD attribute is custom.

    Walks ``names`` in order keeping an ordinal that counts only
    non-reserved names. A name whose ordinal (before counting it) is at or
    beyond ``start_pos`` is flagged. Reserved-prefix names are never flagged.

    Args:
        names: Attribute names in dump order.
        start_pos: Positional threshold; values <= 0 disable the pass.

    Returns:
        List[bool]: One flag per name.
    """
    flags: List[bool] = []
    ordinal = 0
    for name in names:
        reserved = is_reserved_name(name)
        flags.append(start_pos > 0 and not reserved and ordinal >= start_pos)
        if not reserved:
            ordinal += 1
    return flags


def recategorize_by_position(
        records: Sequence[AttributeRecord],
        start_pos: int,
) -> Tuple[AttributeRecord, ...]:
    """
    Reclassify STANDARD records at or beyond ``start_pos`` as CUSTOM.

    Args:
        records: Records in dump order, categorized by prefix.
        start_pos: Threshold read from the dump.

    Returns:
        Tuple[AttributeRecord, ...]: New records; the input is untouched.
    """
    if start_pos <= 0:
        return tuple(records)

    flags = custom_ordinals([r.name for r in records], start_pos)
    result: List[AttributeRecord] = []
    for record, is_custom in zip(records, flags):
        if is_custom and record.category is AttributeCategory.STANDARD:
            record = replace(record, category=AttributeCategory.CUSTOM)
        result.append(record)
    return tuple(result)


def group_by_category(
        records: Sequence[AttributeRecord],
) -> Dict[AttributeCategory, List[AttributeRecord]]:
    """
    Group records in display order, each group sorted by name.

    Every category is present in the result, possibly with an empty list.
    """
    groups: Dict[AttributeCategory, List[AttributeRecord]] = {c: [] for c in CATEGORY_ORDER}
    for record in records:
        groups[record.category].append(record)
    for members in groups.values():
        members.sort(key=lambda r: r.name)
    return groups
