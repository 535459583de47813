from __future__ import annotations

"""
Dump Text Parser.

Turns the line-oriented dump produced by the repository server into an
ordered list of AttributeRecords. Parsing is split in two steps:

1. A line scanner feeding a small state machine that merges the values of
   repeating attributes (``name[i]``) into one record and remembers the
   ``start_pos`` threshold.
2. When a positive threshold was seen, a positional pass (see categorizer)
   that moves STANDARD attributes at or beyond it to CUSTOM.

Lines that do not look like ``name[idx] [type] : value`` are skipped; the
parser never raises on malformed input.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from repometa.core.processing.categorizer import (
    category_for_type_attribute,
    category_from_prefix,
    recategorize_by_position,
)
from repometa.domain import constants as const
from repometa.domain.attribute_models import (
    AttributeCategory,
    AttributeRecord,
    DumpContext,
    DumpKind,
    ParsedDump,
)

logger = logging.getLogger(__name__)

# name, optional numeric repeat index, optional declared type, ":" or "=", value
_ATTRIBUTE_LINE = re.compile(r"^(\S+?)(?:\[(\d+)\])?\s*(?:\[([^\]]+)\])?\s*[:=]\s*(.*)$")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_OBJECT_ID = re.compile(r"^[0-9a-f]{16}$", re.IGNORECASE)
_TRUE_VALUES = ("t", "true", "1", "y", "yes")


# -----------------------------------------------------------------------------
# LINE MATCHING
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DumpLine:
    """One matched attribute line."""
    name: str
    index: Optional[int]
    declared_type: Optional[str]
    raw_value: str

    @property
    def is_repeating(self) -> bool:
        return self.index is not None


def match_line(line: str) -> Optional[DumpLine]:
    """
    Match a single dump line.

    Args:
        line: Raw line, surrounding whitespace allowed.

    Returns:
        Optional[DumpLine]: None for blank lines, separators and noise.
    """
    trimmed = line.strip()
    if not trimmed or trimmed.startswith(const.DUMP_SEPARATOR):
        return None

    match = _ATTRIBUTE_LINE.match(trimmed)
    if not match:
        return None

    name, index_str, declared_type, raw_value = match.groups()
    return DumpLine(
        name=name,
        index=int(index_str) if index_str is not None else None,
        declared_type=declared_type,
        raw_value=raw_value,
    )


def iter_dump_lines(raw_text: str) -> Iterable[DumpLine]:
    for line in raw_text.splitlines():
        matched = match_line(line)
        if matched is not None:
            yield matched


# -----------------------------------------------------------------------------
# STATE MACHINE
# -----------------------------------------------------------------------------

@dataclass
class _PendingAttribute:
    name: str
    data_type: str
    category: AttributeCategory
    is_repeating: bool
    values: List[str] = field(default_factory=list)

    def freeze(self) -> AttributeRecord:
        value = tuple(self.values) if self.is_repeating else self.values[0]
        return AttributeRecord(
            name=self.name,
            data_type=self.data_type,
            is_repeating=self.is_repeating,
            category=self.category,
            value=value,
        )


@dataclass
class DumpState:
    """
    Accumulator for one dump.

    Attributes:
        pending: Records in first-seen order.
        repeating_groups: Name of each open repeating group -> its record.
        start_pos: Threshold from the last start_pos line, -1 when absent or invalid.
    """
    pending: List[_PendingAttribute] = field(default_factory=list)
    repeating_groups: Dict[str, _PendingAttribute] = field(default_factory=dict)
    start_pos: int = -1

    def feed(self, line: DumpLine) -> None:
        if line.is_repeating:
            group = self.repeating_groups.get(line.name)
            if group is not None:
                # Later occurrences only contribute their value
                group.values.append(line.raw_value)
                return

        if line.name == const.START_POS_ATTR:
            # The last start_pos line wins
            self.start_pos = _parse_start_pos(line.raw_value)

        record = _PendingAttribute(
            name=line.name,
            data_type=line.declared_type or const.DEFAULT_DUMP_DATA_TYPE,
            category=category_from_prefix(line.name),
            is_repeating=line.is_repeating,
            values=[line.raw_value],
        )
        self.pending.append(record)
        if line.is_repeating:
            self.repeating_groups[line.name] = record

    def records(self) -> Tuple[AttributeRecord, ...]:
        return tuple(p.freeze() for p in self.pending)


def _parse_start_pos(raw_value: str) -> int:
    match = _LEADING_INT.match(raw_value)
    if not match:
        return -1
    # A zero threshold disables the positional pass
    return int(match.group(1)) or -1


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def parse_dump(raw_text: str, context: Optional[DumpContext] = None) -> ParsedDump:
    """
    Parse raw dump text into categorized attribute records.

    Args:
        raw_text: Dump text as returned by the server.
        context: Dump kind and name fallbacks; defaults to an object dump.

    Returns:
        ParsedDump: Records in dump order plus the derived type and object names.
    """
    context = context or DumpContext()
    state = DumpState()
    for line in iter_dump_lines(raw_text or ""):
        state.feed(line)

    records = state.records()
    if state.start_pos > 0:
        records = recategorize_by_position(records, state.start_pos)

    logger.debug(
        f"DumpParser: {len(records)} attributes parsed "
        f"(kind={context.kind.value}, start_pos={state.start_pos})."
    )

    type_name = _first_value(records, const.OBJECT_TYPE_ATTR)
    object_name = _first_value(records, const.OBJECT_NAME_ATTR)
    return ParsedDump(
        attributes=records,
        type_name=context.fallback_type_name if type_name is None else type_name,
        object_name=context.target_id if object_name is None else object_name,
        start_pos=state.start_pos,
    )


def parse_attributes(raw_text: str, kind: DumpKind = DumpKind.OBJECT) -> List[AttributeRecord]:
    return list(parse_dump(raw_text, DumpContext(kind=kind)).attributes)


def type_attributes_from_dump(parsed: ParsedDump) -> Tuple[AttributeRecord, ...]:
    """
    Convert a parsed type dump into type-definition attribute records.

    A dm_type dump lists its attributes through the parallel repeating
    groups attr_name / attr_type / attr_length / attr_repeating, where
    indexes below start_pos are inherited. When those groups are absent
    every parsed record is taken as an attribute of the type, inherited
    unless the positional pass marked it CUSTOM.

    Args:
        parsed: Result of parse_dump on a type dump.

    Returns:
        Tuple[AttributeRecord, ...]: Records without values.
    """
    by_name = {r.name: r for r in parsed.attributes}
    names_record = by_name.get(const.TYPE_DUMP_ATTR_NAME)

    if names_record is None:
        return tuple(
            AttributeRecord(
                name=r.name,
                data_type=r.data_type,
                is_repeating=r.is_repeating,
                is_inherited=r.category is not AttributeCategory.CUSTOM,
                category=r.category,
            )
            for r in parsed.attributes
        )

    names = _as_values(names_record)
    types = _as_values(by_name.get(const.TYPE_DUMP_ATTR_TYPE))
    lengths = _as_values(by_name.get(const.TYPE_DUMP_ATTR_LENGTH))
    repeating = _as_values(by_name.get(const.TYPE_DUMP_ATTR_REPEATING))

    result: List[AttributeRecord] = []
    for i, name in enumerate(names):
        is_inherited = i < parsed.start_pos
        type_code = _at(types, i).strip()
        result.append(AttributeRecord(
            name=name,
            data_type=const.ATTRIBUTE_TYPE_CODES.get(type_code, type_code.upper() or "UNDEFINED"),
            length=_to_int(_at(lengths, i)),
            is_repeating=_at(repeating, i).strip().lower() in _TRUE_VALUES,
            is_inherited=is_inherited,
            category=category_for_type_attribute(name, is_inherited),
        ))
    return tuple(result)


def is_object_id(value: object) -> bool:
    """True for 16-character hexadecimal repository object identifiers."""
    return isinstance(value, str) and bool(_OBJECT_ID.match(value))


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _first_value(records: Iterable[AttributeRecord], name: str) -> Optional[str]:
    for record in records:
        if record.name == name:
            values = _as_values(record)
            return values[0] if values else ""
    return None


def _as_values(record: Optional[AttributeRecord]) -> Tuple[str, ...]:
    if record is None or record.value is None:
        return ()
    if isinstance(record.value, tuple):
        return record.value
    return (record.value,)


def _at(values: Tuple[str, ...], i: int) -> str:
    return values[i] if i < len(values) else ""


def _to_int(raw: str) -> int:
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else 0
