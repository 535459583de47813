from __future__ import annotations

"""
Type Metadata Cache.

Holds an in-memory, inheritance-aware snapshot of the repository type
hierarchy. The snapshot is rebuilt from the flat type list on refresh()
and swapped in with a single reference assignment, so readers never see a
half-built hierarchy. Attribute detail is fetched lazily per type and
memoized for the lifetime of the snapshot (one cache generation).

Only two operations suspend: the type-list fetch of refresh() and the
detail fetch of fetch_details(). Everything else is a synchronous read.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import (
    Any,
    Awaitable,
    Dict,
    Iterable,
    List,
    Optional,
    Protocol,
    Set,
    Tuple,
    TypeVar,
)

from repometa.core.processing.categorizer import category_for_type_attribute, group_by_category
from repometa.core.processing.dump_parser import parse_dump, type_attributes_from_dump
from repometa.core.services.listeners import RefreshListener, RefreshListenerRegistry
from repometa.domain import constants as const
from repometa.domain.attribute_models import (
    AttributeCategory,
    AttributeRecord,
    CacheStats,
    DumpContext,
    DumpKind,
    TypeNode,
    TypeSummary,
)
from repometa.domain.errors import BridgeError, CacheError, NoActiveConnection
from repometa.infra.network.common import extract_bridge_error
from repometa.infra.session import ActiveSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


# -----------------------------------------------------------------------------
# COLLABORATOR CONTRACTS
# -----------------------------------------------------------------------------

class TypeBridge(Protocol):
    async def get_types(self, session_id: str) -> List[Dict[str, Any]]: ...

    async def get_type_details(self, session_id: str, type_name: str) -> Dict[str, Any]: ...

    async def execute_dump_command(self, session_id: str, target_id: str) -> str: ...


class SessionProvider(Protocol):
    def get_active_session(self) -> Optional[ActiveSession]: ...


def canonical_name(name: str) -> str:
    """Lookup key for type names; applied on every map write and read."""
    return name.lower()


# -----------------------------------------------------------------------------
# SNAPSHOT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class _Snapshot:
    """
    One generation of the hierarchy.

    ``nodes`` is only ever updated one key at a time, to memoize fetched
    attributes into an otherwise finished snapshot.
    """
    nodes: Dict[str, TypeNode] = field(default_factory=dict)
    roots: Tuple[str, ...] = ()
    generation: int = 0
    refreshed_at: Optional[datetime] = None


def build_hierarchy(summaries: Iterable[TypeSummary]) -> Tuple[Dict[str, TypeNode], Tuple[str, ...]]:
    """
    Build hierarchy nodes from the flat type list.

    One pass records each node and its parent edge in a parent -> children
    multimap; a fold then attaches the sorted children to their parents.
    Types without a super-type, with themselves as super-type, or whose
    super-type is not in the list become roots. Each super-type cycle is
    broken by detaching its lexicographically smallest member, which then
    becomes a root.

    Args:
        summaries: Flat type list as reported by the bridge.

    Returns:
        Tuple: Canonical name -> node, and the sorted root names.
    """
    bare: Dict[str, TypeNode] = {}
    children_map: Dict[str, List[str]] = defaultdict(list)
    roots: List[str] = []

    for summary in summaries:
        key = canonical_name(summary.name)
        if key in bare:
            logger.warning(f"TypeCache: Duplicate type '{summary.name}' ignored.")
            continue

        parent = canonical_name(summary.super_type) if summary.super_type else None
        if parent == key:
            parent = None

        bare[key] = TypeNode(
            name=key,
            display_name=summary.name,
            super_type=parent,
            is_internal=summary.is_internal,
        )
        if parent:
            children_map[parent].append(key)
        else:
            roots.append(key)

    nodes = dict(bare)
    for parent, children in children_map.items():
        if parent in bare:
            nodes[parent] = replace(bare[parent], children=tuple(sorted(children)))
        else:
            # Super-type not part of the list
            roots.extend(children)

    roots.extend(_break_cycles(nodes, roots))
    return nodes, tuple(sorted(roots))


def _break_cycles(nodes: Dict[str, TypeNode], roots: Iterable[str]) -> List[str]:
    """Detach one member of every super-type cycle; returns the detached names."""
    reached: Set[str] = set()

    def visit(start: str) -> None:
        stack = [start]
        while stack:
            key = stack.pop()
            if key not in reached:
                reached.add(key)
                stack.extend(nodes[key].children)

    for root in roots:
        visit(root)

    detached: List[str] = []
    for key in sorted(nodes):
        if key in reached:
            continue
        # Unreached nodes always have a known parent, so the walk ends on a cycle
        path: List[str] = []
        current = key
        while current not in path:
            path.append(current)
            current = nodes[current].super_type
        head = min(path[path.index(current):])

        parent = nodes[head].super_type
        nodes[parent] = replace(
            nodes[parent],
            children=tuple(c for c in nodes[parent].children if c != head),
        )
        logger.warning(f"TypeCache: Super-type cycle through '{head}'; treating it as a root.")
        detached.append(head)
        visit(head)
    return detached


# -----------------------------------------------------------------------------
# CACHE SERVICE
# -----------------------------------------------------------------------------

class TypeCache:
    """
    Client-side cache of the repository type system.

    Args:
        bridge: Network collaborator providing the type list and details.
        sessions: Provider of the active repository session.
        detail_source: ``"structured"`` to use the type-details endpoint,
            ``"dump"`` to parse the server's dump text instead.
    """

    def __init__(
            self,
            bridge: TypeBridge,
            sessions: SessionProvider,
            detail_source: str = const.DETAIL_SOURCE_STRUCTURED,
    ) -> None:
        self._bridge = bridge
        self._sessions = sessions
        self._detail_source = detail_source
        self._snapshot = _Snapshot()
        self._generation = 0
        self._refreshing = False
        self._listeners = RefreshListenerRegistry()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing

    @property
    def generation(self) -> int:
        return self._snapshot.generation

    def on_refresh(self, listener: RefreshListener) -> None:
        """Register a callback run after every successful refresh()."""
        self._listeners.add(listener)

    async def refresh(self) -> None:
        """
        Replace the whole hierarchy with a fresh one from the bridge.

        A call made while another refresh is in flight returns immediately
        without fetching. On failure the previous snapshot stays in place.

        Raises:
            NoActiveConnection: No session is active.
            BridgeError: The type list could not be fetched or was malformed.
        """
        if self._refreshing:
            logger.debug("TypeCache: Refresh already in progress, skipping.")
            return

        session = self._require_session()
        self._refreshing = True
        logger.info("TypeCache: Refreshing type hierarchy...")
        try:
            payload = await self._call_bridge(self._bridge.get_types(session.session_id))
            nodes, roots = build_hierarchy(_to_summaries(payload))

            self._generation += 1
            self._snapshot = _Snapshot(
                nodes=nodes,
                roots=roots,
                generation=self._generation,
                refreshed_at=datetime.now(),
            )
        finally:
            self._refreshing = False

        logger.info(
            f"TypeCache: Loaded {len(nodes)} types ({len(roots)} roots), "
            f"generation {self._generation}."
        )
        self._listeners.notify()

    def clear(self) -> None:
        """Drop all cached data and start a new generation."""
        self._generation += 1
        self._snapshot = _Snapshot(generation=self._generation)
        logger.debug("TypeCache: Cleared.")

    # -------------------------------------------------------------------------
    # Lazy detail
    # -------------------------------------------------------------------------

    async def fetch_details(self, type_name: str) -> Optional[TypeNode]:
        """
        Return a type with its attributes, fetching them on first use.

        Bridge failures degrade to the node without attributes. A result
        that arrives after the cache was refreshed or cleared is returned
        but not memoized.

        Args:
            type_name: Type name, any casing.

        Returns:
            Optional[TypeNode]: None for unknown types.

        Raises:
            NoActiveConnection: Attributes are not loaded and no session is active.
        """
        key = canonical_name(type_name)
        snapshot = self._snapshot
        node = snapshot.nodes.get(key)
        if node is None:
            return None
        if node.attributes_loaded:
            logger.debug(f"TypeCache: Attributes of '{key}' served from memory.")
            return node

        session = self._require_session()
        try:
            records = await self._load_attributes(session.session_id, node)
        except BridgeError as e:
            logger.warning(f"TypeCache: Could not fetch details of '{key}': {e}")
            return node

        if snapshot is not self._snapshot:
            logger.debug(f"TypeCache: Discarding details of '{key}' from stale generation.")
            return replace(node, attributes=records)

        updated = replace(snapshot.nodes[key], attributes=records)
        snapshot.nodes[key] = updated
        return updated

    async def _load_attributes(self, session_id: str, node: TypeNode) -> Tuple[AttributeRecord, ...]:
        if self._detail_source == const.DETAIL_SOURCE_DUMP:
            text = await self._call_bridge(
                self._bridge.execute_dump_command(session_id, node.display_name)
            )
            parsed = parse_dump(text, DumpContext(kind=DumpKind.TYPE, target_id=node.display_name))
            return type_attributes_from_dump(parsed)

        payload = await self._call_bridge(
            self._bridge.get_type_details(session_id, node.display_name)
        )
        return _to_attribute_records(payload)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def has_data(self) -> bool:
        return bool(self._snapshot.nodes)

    def get_type(self, type_name: str) -> Optional[TypeNode]:
        return self._snapshot.nodes.get(canonical_name(type_name))

    def get_child_types(self, type_name: str) -> List[str]:
        node = self.get_type(type_name)
        return list(node.children) if node else []

    def get_root_types(self) -> List[str]:
        return list(self._snapshot.roots)

    def get_type_names(self) -> List[str]:
        return sorted(self._snapshot.nodes)

    def is_type_name(self, name: str) -> bool:
        return canonical_name(name) in self._snapshot.nodes

    def get_attributes(self, type_name: str, include_inherited: bool = True) -> List[AttributeRecord]:
        """
        Return the loaded attributes of a type.

        Empty when the type is unknown or fetch_details() has not loaded it.
        """
        node = self.get_type(type_name)
        if node is None:
            return []
        if include_inherited:
            return list(node.attributes)
        return [a for a in node.attributes if not a.is_inherited]

    def group_attributes(self, type_name: str) -> Dict[AttributeCategory, List[AttributeRecord]]:
        return group_by_category(self.get_attributes(type_name))

    def search_types(self, pattern: str) -> List[str]:
        """Case-insensitive substring search over all type names, sorted."""
        needle = canonical_name(pattern)
        return sorted(name for name in self._snapshot.nodes if needle in name)

    def get_type_hierarchy(self, type_name: str) -> List[str]:
        """Ancestor chain from the type itself up to its root."""
        nodes = self._snapshot.nodes
        chain: List[str] = []
        node = nodes.get(canonical_name(type_name))
        while node is not None and node.name not in chain:
            chain.append(node.name)
            node = nodes.get(node.super_type) if node.super_type else None
        return chain

    def get_last_refresh_time(self) -> Optional[datetime]:
        return self._snapshot.refreshed_at

    def get_stats(self) -> CacheStats:
        snapshot = self._snapshot
        return CacheStats(
            type_count=len(snapshot.nodes),
            last_refresh=snapshot.refreshed_at,
            generation=snapshot.generation,
            loaded_detail_count=sum(1 for n in snapshot.nodes.values() if n.attributes_loaded),
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _require_session(self) -> ActiveSession:
        session = self._sessions.get_active_session()
        if session is None:
            raise NoActiveConnection()
        return session

    @staticmethod
    async def _call_bridge(call: Awaitable[T]) -> T:
        try:
            return await call
        except CacheError:
            raise
        except Exception as e:
            raise extract_bridge_error(e) from e


# -----------------------------------------------------------------------------
# PAYLOAD CONVERSION
# -----------------------------------------------------------------------------

def _to_summaries(payload: Any) -> List[TypeSummary]:
    if not isinstance(payload, list):
        raise BridgeError("Malformed type list (root is not a list).")

    summaries: List[TypeSummary] = []
    for entry in payload:
        if not isinstance(entry, dict) or not entry.get("name"):
            raise BridgeError(f"Malformed type entry: {entry!r}")
        summaries.append(TypeSummary(
            name=str(entry["name"]),
            super_type=str(entry["superType"]) if entry.get("superType") else None,
            is_internal=bool(entry.get("isInternal", False)),
        ))
    return summaries


def _to_attribute_records(payload: Any) -> Tuple[AttributeRecord, ...]:
    attributes = payload.get("attributes") if isinstance(payload, dict) else None
    if not isinstance(attributes, list):
        raise BridgeError("Malformed type details (attributes is not a list).")

    records: List[AttributeRecord] = []
    for item in attributes:
        if not isinstance(item, dict) or not item.get("name"):
            raise BridgeError(f"Malformed attribute entry: {item!r}")
        name = str(item["name"])
        is_inherited = bool(item.get("isInherited", False))
        records.append(AttributeRecord(
            name=name,
            data_type=str(item.get("dataType") or ""),
            length=_to_length(item.get("length")),
            is_repeating=bool(item.get("isRepeating", False)),
            is_inherited=is_inherited,
            category=category_for_type_attribute(name, is_inherited),
        ))
    return tuple(records)


def _to_length(raw: Any) -> int:
    try:
        return max(int(raw), 0)
    except (TypeError, ValueError):
        return 0
