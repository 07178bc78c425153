"""Tests for the per-run synthesis context."""

import pytest

from netlayout.config import LAYOUT_CONFIG
from netlayout.errors import DuplicateIdentifierError
from netlayout.layout.context import SynthesisContext
from netlayout.layout.overrides import StructuralOverrides
from netlayout.layout.topology import SubnetTopology
from netlayout.model.declaration import Declaration, Diversion
from netlayout.model.diagram import Edge, EdgeCategory, Node, NodeKind, Position


@pytest.fixture
def ctx() -> SynthesisContext:
    return SynthesisContext(
        declaration=Declaration(),
        topology=SubnetTopology(),
        config=LAYOUT_CONFIG,
        overrides=StructuralOverrides(),
    )


def _node(node_id: str) -> Node:
    return Node(id=node_id, kind=NodeKind.PLAIN_DEVICE, position=Position(0, 0))


def _edge(edge_id: str, source: str = "a", target: str = "b") -> Edge:
    return Edge(id=edge_id, source=source, target=target, category=EdgeCategory.GATEWAY_LINK)


class TestNodes:
    def test_add_node_registers_name_and_diversion(self, ctx) -> None:
        diversion = Diversion(targets=("srv",), target_type="innerserver")
        ctx.add_node(_node("device-lan-pc"), name="pc", diversion=diversion)
        assert ctx.has_node("device-lan-pc")
        assert ctx.index.id_for_name("pc") == "device-lan-pc"
        assert ctx.diversions == {"device-lan-pc": diversion}

    def test_duplicate_node_id_is_an_error(self, ctx) -> None:
        ctx.add_node(_node("n"))
        with pytest.raises(DuplicateIdentifierError) as exc_info:
            ctx.add_node(_node("n"))
        assert exc_info.value.kind == "node"
        assert exc_info.value.identifier == "n"


class TestEdges:
    def test_duplicate_edge_id_is_an_error(self, ctx) -> None:
        ctx.add_edge(_edge("e1"))
        with pytest.raises(DuplicateIdentifierError):
            ctx.add_edge(_edge("e1", "x", "y"))

    def test_connects_checks_direction(self, ctx) -> None:
        ctx.add_edge(_edge("e1", "a", "b"))
        assert ctx.connects("a", "b")
        assert not ctx.connects("b", "a")

    def test_replace_edge_keeps_position(self, ctx) -> None:
        for edge_id in ("e1", "e2", "e3"):
            ctx.add_edge(_edge(edge_id))
        upgraded = Edge(id="e2-upgraded", source="a", target="b", category=EdgeCategory.DIVERSION)
        ctx.replace_edge("e2", upgraded)
        assert [e.id for e in ctx.edges] == ["e1", "e2-upgraded", "e3"]
        assert not ctx.has_edge("e2")

    def test_replace_edge_with_same_id(self, ctx) -> None:
        ctx.add_edge(_edge("e1"))
        ctx.replace_edge("e1", Edge(id="e1", source="a", target="b", category=EdgeCategory.UPLINK))
        assert ctx.edges[0].category is EdgeCategory.UPLINK

    def test_replace_unknown_edge_raises_key_error(self, ctx) -> None:
        with pytest.raises(KeyError):
            ctx.replace_edge("missing", _edge("e1"))

    def test_replace_onto_taken_id_raises(self, ctx) -> None:
        ctx.add_edge(_edge("e1"))
        ctx.add_edge(_edge("e2"))
        with pytest.raises(DuplicateIdentifierError):
            ctx.replace_edge("e1", _edge("e2"))


def test_to_diagram_preserves_order(ctx) -> None:
    ctx.add_node(_node("n1"))
    ctx.add_node(_node("n2"))
    ctx.add_edge(_edge("e1", "n1", "n2"))
    diagram = ctx.to_diagram()
    assert [n.id for n in diagram.nodes] == ["n1", "n2"]
    assert [e.id for e in diagram.edges] == ["e1"]
