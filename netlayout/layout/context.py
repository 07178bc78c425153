"""Builder state owned by a single synthesis run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from netlayout.config import LayoutConfig
from netlayout.errors import DuplicateIdentifierError
from netlayout.layout.index import NodeIndex
from netlayout.layout.overrides import StructuralOverrides
from netlayout.layout.topology import SubnetTopology
from netlayout.model.declaration import Declaration, Diversion
from netlayout.model.diagram import Diagram, Edge, Node


@dataclass(frozen=True)
class PendingRouterDiversion:
    """A gateway diversion recorded during placement and resolved afterwards."""

    router_id: str
    target_name: str
    diversion: Diversion


@dataclass
class SynthesisContext:
    """Nodes, edges and lookup maps of one ``synthesize`` call.

    The context is created per call and never shared, so a failed run leaves
    nothing behind. Edges are keyed by id; ``replace_edge`` is the only way to
    overwrite one and keeps the replaced edge's position in the output.

    Attributes:
        declaration: The declaration being rendered.
        topology: Resolved subnet relation.
        config: Layout constants.
        overrides: Structural override table.
        index: Layered node lookup.
        network_container: Network name -> container node id.
        network_gateway: Network name -> gateway node id.
        handled: Node ids whose diversion already has its overlay edge.
        diversions: Node id -> diversion rule, in emission order.
        pending_router_diversions: Gateway diversions awaiting resolution.
    """

    declaration: Declaration
    topology: SubnetTopology
    config: LayoutConfig
    overrides: StructuralOverrides
    index: NodeIndex = field(default_factory=NodeIndex)
    network_container: Dict[str, str] = field(default_factory=dict)
    network_gateway: Dict[str, str] = field(default_factory=dict)
    handled: Set[str] = field(default_factory=set)
    diversions: Dict[str, Diversion] = field(default_factory=dict)
    pending_router_diversions: List[PendingRouterDiversion] = field(default_factory=list)
    _nodes: Dict[str, Node] = field(default_factory=dict, repr=False)
    _edges: Dict[str, Edge] = field(default_factory=dict, repr=False)

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges.values())

    def node(self, node_id: str) -> Node:
        return self._nodes[node_id]

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def add_node(
        self,
        node: Node,
        name: Optional[str] = None,
        diversion: Optional[Diversion] = None,
    ) -> Node:
        """Append a node, registering its declared ``name`` and ``diversion``.

        Raises:
            DuplicateIdentifierError: If the id is already taken.
        """
        if node.id in self._nodes:
            raise DuplicateIdentifierError("node", node.id)
        self._nodes[node.id] = node
        self.index.add(node)
        if name is not None:
            self.index.register_name(name, node.id)
        if diversion is not None:
            self.diversions[node.id] = diversion
        return node

    def has_edge(self, edge_id: str) -> bool:
        return edge_id in self._edges

    def connects(self, source: str, target: str) -> bool:
        """Whether any edge already runs from ``source`` to ``target``."""
        return any(e.source == source and e.target == target for e in self._edges.values())

    def add_edge(self, edge: Edge) -> Edge:
        """Append an edge.

        Raises:
            DuplicateIdentifierError: If the id is already taken.
        """
        if edge.id in self._edges:
            raise DuplicateIdentifierError("edge", edge.id)
        self._edges[edge.id] = edge
        return edge

    def replace_edge(self, old_id: str, edge: Edge) -> Edge:
        """Swap the provisional edge ``old_id`` for ``edge`` in place.

        Raises:
            KeyError: If ``old_id`` was never emitted.
            DuplicateIdentifierError: If ``edge.id`` belongs to another edge.
        """
        if old_id not in self._edges:
            raise KeyError(old_id)
        if edge.id != old_id and edge.id in self._edges:
            raise DuplicateIdentifierError("edge", edge.id)
        self._edges = {
            (edge.id if key == old_id else key): (edge if key == old_id else value)
            for key, value in self._edges.items()
        }
        return edge

    def to_diagram(self) -> Diagram:
        return Diagram(nodes=self.nodes, edges=self.edges)
