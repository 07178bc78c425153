"""Export a diagram in the node/edge dialect of xyflow (React Flow) canvases.

The canvas wants a few things the neutral diagram leaves open:

* a node ``type`` naming the renderer (``cloudNode``, ``group``,
  ``routerNode``, ``deviceNode``);
* ``parentId`` plus ``extent: "parent"`` for nested nodes, with every parent
  listed before its children;
* container sizes as ``style.width`` / ``style.height``;
* ``sourceHandle`` / ``targetHandle`` and an edge ``type``.

Node data flags are renamed to camelCase (``is_gateway`` -> ``isGateway``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from netlayout.model.diagram import Diagram, Edge, EdgeCategory, Node, NodeKind

NODE_TYPES: Dict[NodeKind, str] = {
    NodeKind.CLOUD: "cloudNode",
    NodeKind.BACKBONE_GROUP: "group",
    NodeKind.NETWORK_CONTAINER: "group",
    NodeKind.ROUTER_DEVICE: "routerNode",
    NodeKind.PLAIN_DEVICE: "deviceNode",
}

DATA_KEYS: Dict[str, str] = {
    "is_gateway": "isGateway",
    "is_cdn_origin": "isCdnOrigin",
    "is_cdn_edge": "isCdnEdge",
    "has_cdn_backsource": "hasCdnBacksource",
}


def _parents_first(nodes: List[Node]) -> List[Node]:
    """Stable reorder so that each node follows its parent container."""
    by_id = {n.id: n for n in nodes}
    placed: Dict[str, None] = {}

    def place(node: Node, trail: Tuple[str, ...]) -> None:
        if node.id in placed:
            return
        parent_id = node.parent_container_id
        if parent_id in by_id and parent_id not in trail:
            place(by_id[parent_id], trail + (node.id,))
        placed[node.id] = None

    for node in nodes:
        place(node, ())
    return [by_id[node_id] for node_id in placed]


def node_to_xyflow(node: Node) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": node.id,
        "type": NODE_TYPES[node.kind],
        "data": {DATA_KEYS.get(k, k): v for k, v in node.data.items()},
        "position": {"x": node.position.x, "y": node.position.y},
    }
    if node.size is not None:
        out["style"] = {"width": node.size.width, "height": node.size.height}
    if node.parent_container_id is not None:
        out["parentId"] = node.parent_container_id
        out["extent"] = "parent"
    return out


def edge_to_xyflow(edge: Edge) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "animated": edge.animated,
        "type": "straight" if edge.category is EdgeCategory.CDN else "bezier",
        "style": dict(edge.style),
    }
    if edge.source_anchor is not None:
        out["sourceHandle"] = edge.source_anchor
    if edge.target_anchor is not None:
        out["targetHandle"] = edge.target_anchor
    if edge.label is not None:
        out["label"] = edge.label
    return out


def to_xyflow(diagram: Diagram) -> Dict[str, Any]:
    """Return ``{"nodes": [...], "edges": [...]}`` in xyflow form."""
    return {
        "nodes": [node_to_xyflow(n) for n in _parents_first(diagram.nodes)],
        "edges": [edge_to_xyflow(e) for e in diagram.edges],
    }
