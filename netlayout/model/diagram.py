"""Positioned nodes and typed edges produced by the layout engine.

A :class:`Diagram` is pure data: it performs no drawing. ``to_dict`` gives the
JSON-ready form consumed by a canvas, ``to_networkx`` a graph for analysis.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import networkx as nx


class NodeKind(str, Enum):
    """Visual kind of a node."""

    #: Domestic or international internet.
    CLOUD = "cloud"
    #: Container for an autonomous system.
    BACKBONE_GROUP = "backbone-group"
    #: Container for a private network or subnet.
    NETWORK_CONTAINER = "network-container"
    #: Gateway or sub-gateway.
    ROUTER_DEVICE = "router-device"
    #: Any other device.
    PLAIN_DEVICE = "plain-device"


class EdgeCategory(str, Enum):
    """Role of an edge in the diagram."""

    UPLINK = "uplink"
    PEERING = "peering"
    GATEWAY_LINK = "gateway-link"
    SUBNET_LINK = "subnet-link"
    INTERFACE_LINK = "interface-link"
    DIVERSION = "diversion"
    CDN = "cdn"


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass
class Node:
    """A positioned node.

    Attributes:
        id: Identifier derived from entity kind, owning scope and name.
        kind: Visual kind.
        position: Position relative to the parent container, or absolute.
        size: Width/height for containers and internet nodes.
        parent_container_id: Id of the enclosing container, if any.
        data: Label, entity fields and inferred flags such as ``is_cdn_origin``.
    """

    id: str
    kind: NodeKind
    position: Position
    size: Optional[Size] = None
    parent_container_id: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def label(self) -> Optional[str]:
        value = self.data.get("label")
        return None if value is None else str(value)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "kind": self.kind.value,
            "position": {"x": self.position.x, "y": self.position.y},
        }
        if self.size is not None:
            out["size"] = {"width": self.size.width, "height": self.size.height}
        if self.parent_container_id is not None:
            out["parentContainerId"] = self.parent_container_id
        out["data"] = dict(self.data)
        return out


@dataclass(frozen=True)
class Edge:
    """A directed edge from ``source`` to ``target``."""

    id: str
    source: str
    target: str
    category: EdgeCategory
    animated: bool = False
    source_anchor: Optional[str] = None
    target_anchor: Optional[str] = None
    style: Dict[str, Any] = field(default_factory=dict, hash=False)
    label: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
        }
        if self.source_anchor is not None:
            out["sourceAnchor"] = self.source_anchor
        if self.target_anchor is not None:
            out["targetAnchor"] = self.target_anchor
        out["animated"] = self.animated
        out["category"] = self.category.value
        out["style"] = dict(self.style)
        if self.label is not None:
            out["label"] = self.label
        return out


@dataclass
class Diagram:
    """Ordered node and edge lists of one synthesis run."""

    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    def node(self, node_id: str) -> Node:
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(node_id)

    def nodes_of_kind(self, kind: NodeKind) -> List[Node]:
        return [n for n in self.nodes if n.kind == kind]

    def edges_of_category(self, category: EdgeCategory) -> List[Edge]:
        return [e for e in self.edges if e.category == category]

    def to_dict(self) -> Dict[str, Any]:
        """Return ``{"nodes": [...], "edges": [...]}`` ready for JSON encoding."""
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    def to_networkx(self) -> nx.MultiDiGraph:
        """Return the diagram as a MultiDiGraph keyed by edge id.

        Node attributes are ``kind``, ``parent`` and ``label``; edge attributes
        are ``category`` and ``label``.
        """
        graph = nx.MultiDiGraph()
        for node in self.nodes:
            graph.add_node(
                node.id,
                kind=node.kind.value,
                parent=node.parent_container_id,
                label=node.label,
            )
        for edge in self.edges:
            graph.add_edge(
                edge.source,
                edge.target,
                key=edge.id,
                category=edge.category.value,
                label=edge.label,
            )
        return graph
