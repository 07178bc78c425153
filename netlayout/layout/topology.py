"""Subnet nesting inferred from gateway interface types.

A private network becomes a subnet of another declared network when one of
its gateway interfaces has that network's name as its ``type``. Only the first
such interface counts, so every network has at most one parent. The result is
validated as a forest before any recursive layout runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping

import networkx as nx

from netlayout.errors import TopologyCycleError
from netlayout.layout.depth import max_depth
from netlayout.logging import get_logger
from netlayout.model.declaration import PrivateNetwork

LOGGER = get_logger(__name__)


@dataclass
class SubnetTopology:
    """Parent/child relation between private networks.

    Attributes:
        parent_of: Network name -> inferred parent network name.
        children_of: Network name -> child network names in declaration order.
        device_counts: Network name -> device slots (devices + gateway).
        roots: Networks without a parent, in declaration order.
        graph: Directed parent -> child graph over all network names.
    """

    parent_of: Dict[str, str] = field(default_factory=dict)
    children_of: Dict[str, List[str]] = field(default_factory=dict)
    device_counts: Dict[str, int] = field(default_factory=dict)
    roots: List[str] = field(default_factory=list)
    graph: nx.DiGraph = field(default_factory=nx.DiGraph)

    def is_root(self, name: str) -> bool:
        return name not in self.parent_of

    def has_children(self, name: str) -> bool:
        return bool(self.children_of.get(name))

    def level(self, name: str) -> int:
        """Number of ancestors of ``name``."""
        level = 0
        current = name
        while current in self.parent_of:
            level += 1
            current = self.parent_of[current]
        return level

    def depth(self, name: str) -> int:
        """Maximum depth of the subnet tree below ``name``."""
        return max_depth(name, self.children_of)

    def subtree_device_count(self, name: str) -> int:
        """Device slots of ``name`` plus those of every nested subnet."""
        return self.device_counts.get(name, 0) + sum(
            self.device_counts.get(d, 0) for d in nx.descendants(self.graph, name)
        )


def resolve_topology(networks: Mapping[str, PrivateNetwork]) -> SubnetTopology:
    """Build the subnet relation and per-network device counts.

    Args:
        networks: Private networks keyed by name, in declaration order.

    Returns:
        The resolved topology.

    Raises:
        TopologyCycleError: If the inferred nesting is cyclic.
    """
    topology = SubnetTopology()
    topology.graph.add_nodes_from(networks)

    for name, network in networks.items():
        topology.device_counts[name] = network.device_slots
        for intf in network.gateway.interfaces:
            if intf.type and intf.type != name and intf.type in networks:
                parent = intf.type
                topology.parent_of[name] = parent
                topology.children_of.setdefault(parent, []).append(name)
                topology.graph.add_edge(parent, name)
                LOGGER.debug(
                    "Network '%s' nests under '%s' via interface '%s'",
                    name,
                    parent,
                    intf.name,
                )
                break

    try:
        cycle = nx.find_cycle(topology.graph)
    except nx.NetworkXNoCycle:
        cycle = None
    if cycle:
        raise TopologyCycleError([u for u, _v in cycle])

    topology.roots = [name for name in networks if topology.is_root(name)]
    LOGGER.debug(
        "Resolved %d root network(s) and %d subnet(s)",
        len(topology.roots),
        len(topology.parent_of),
    )
    return topology
