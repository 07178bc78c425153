"""Layered lookup of emitted nodes by id, declared name, suffix, label or substring.

References in a declaration (diversion targets, interface types, override
entries) name entities, not node ids. ``NodeIndex.resolve`` tries the lookup
layers in a fixed order and the first layer that matches wins; within a layer
the earliest emitted node wins.

The substring layer scans every id and can match unrelated nodes whose id
merely contains the reference (``"db"`` matches ``device-lan-db2``). It is a
last resort and callers opt into it explicitly.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from netlayout.model.diagram import Node


class Lookup(str, Enum):
    """Lookup layers in precedence order."""

    EXACT = "exact"
    NAME = "name"
    SUFFIX = "suffix"
    LABEL = "label"
    SUBSTRING = "substring"


#: Strict layers: never scan ids for fragments.
STRICT_LOOKUPS: Tuple[Lookup, ...] = (Lookup.EXACT, Lookup.NAME, Lookup.SUFFIX)
#: Every layer, ending with the fragile substring scan.
ALL_LOOKUPS: Tuple[Lookup, ...] = (
    Lookup.EXACT,
    Lookup.NAME,
    Lookup.SUFFIX,
    Lookup.LABEL,
    Lookup.SUBSTRING,
)


class NodeIndex:
    """Indices over the nodes of one synthesis run."""

    def __init__(self) -> None:
        self._order: List[str] = []
        self._by_id: Dict[str, Node] = {}
        self._by_name: Dict[str, str] = {}
        self._by_suffix: Dict[str, List[str]] = {}
        self._by_label: Dict[str, List[str]] = {}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    def __len__(self) -> int:
        return len(self._order)

    def add(self, node: Node) -> None:
        """Index a freshly emitted node."""
        self._order.append(node.id)
        self._by_id[node.id] = node
        for pos, char in enumerate(node.id):
            if char == "-" and pos + 1 < len(node.id):
                self._by_suffix.setdefault(node.id[pos + 1 :], []).append(node.id)
        if node.label is not None:
            self._by_label.setdefault(node.label, []).append(node.id)

    def register_name(self, name: str, node_id: str) -> None:
        """Map a declared entity name to its node id; later scopes overwrite."""
        self._by_name[name] = node_id

    def id_for_name(self, name: str) -> Optional[str]:
        return self._by_name.get(name)

    def _candidates(self, ref: str, lookup: Lookup) -> Sequence[str]:
        if lookup is Lookup.EXACT:
            return (ref,) if ref in self._by_id else ()
        if lookup is Lookup.NAME:
            node_id = self._by_name.get(ref)
            return (node_id,) if node_id is not None else ()
        if lookup is Lookup.SUFFIX:
            return self._by_suffix.get(ref, ())
        if lookup is Lookup.LABEL:
            return self._by_label.get(ref, ())
        return [node_id for node_id in self._order if ref in node_id]

    def resolve(
        self,
        ref: str,
        lookups: Iterable[Lookup] = STRICT_LOOKUPS,
        exclude: Iterable[str] = (),
    ) -> Optional[Tuple[str, Lookup]]:
        """Return ``(node_id, lookup)`` for the first matching layer, or None.

        Args:
            ref: Node id or declared name.
            lookups: Layers to try, in order.
            exclude: Node ids that may not be returned.
        """
        if not ref:
            return None
        excluded = set(exclude)
        for lookup in lookups:
            for node_id in self._candidates(ref, lookup):
                if node_id not in excluded:
                    return node_id, lookup
        return None

    def find_by_fragments(
        self, fragments: Sequence[str], exclude: Iterable[str] = ()
    ) -> Optional[str]:
        """Return the first node whose id or label contains any fragment."""
        excluded = set(exclude)
        for node_id in self._order:
            if node_id in excluded:
                continue
            label = self._by_id[node_id].label or ""
            if any(f and (f in node_id or f in label) for f in fragments):
                return node_id
        return None
