"""Tests for diversion overlay edges."""

import logging

import pytest

from netlayout.model.diagram import EdgeCategory


def _group(*names: str, as_number: str = "AS1") -> dict:
    return {"as_number": as_number, "devices": [{"name": n} for n in names]}


def _device(name: str, **diversion) -> dict:
    return {"name": name, "diversion": diversion}


class TestSingleTarget:
    """A plain internal-server diversion."""

    def test_exactly_one_edge_from_target(self, render, make_lan) -> None:
        diagram = render(
            {"lan": make_lan(devices=[_device("A", target="B", target_type="innerserver")])},
            groups=[_group("B")],
        )
        diversions = diagram.edges_of_category(EdgeCategory.DIVERSION)
        assert len(diversions) == 1
        edge = diversions[0]
        assert edge.id == "edge-diversion-device-lan-lan-A-device-as-AS1-B"
        assert (edge.source, edge.target) == ("device-as-AS1-B", "device-lan-lan-A")
        assert edge.animated
        assert edge.label == "Diversion"

    def test_missing_uplink_is_added(self, render, make_lan) -> None:
        diagram = render(
            {"lan": make_lan(devices=[_device("A", target="B", target_type="innerserver")])},
            groups=[_group("B")],
        )
        # B sits in the domestic group; the diversion region defaults to international
        edge = [e for e in diagram.edges if e.id == "edge-cloud-global-device-as-AS1-B"]
        assert len(edge) == 1
        assert edge[0].category is EdgeCategory.UPLINK
        assert edge[0].label == "Dedicated line"

    def test_existing_uplink_is_not_duplicated(self, render, make_lan) -> None:
        diagram = render(
            {
                "lan": make_lan(
                    devices=[
                        _device("A", target="B", target_type="innerserver", internet_type="domestic")
                    ]
                )
            },
            groups=[_group("B")],
        )
        into_b = [e for e in diagram.edges if e.target == "device-as-AS1-B"]
        assert [e.id for e in into_b] == ["edge-cloud-inwalls-device-as-AS1-B"]

    def test_target_inside_private_network(self, render, make_lan) -> None:
        diagram = render(
            {
                "lan": make_lan(
                    devices=[{"name": "srv"}, _device("A", target="srv", target_type="innerserver")]
                )
            }
        )
        edge = diagram.edges_of_category(EdgeCategory.DIVERSION)[0]
        assert (edge.source, edge.target) == ("device-lan-lan-srv", "device-lan-lan-A")
        assert any(e.id == "edge-cloud-global-device-lan-lan-srv" for e in diagram.edges)

    def test_custom_label(self, render, make_lan) -> None:
        diagram = render(
            {"lan": make_lan(devices=[_device("A", target="B", target_type="innerserver", label="Game VPN")])},
            groups=[_group("B")],
        )
        assert diagram.edges_of_category(EdgeCategory.DIVERSION)[0].label == "Game VPN"

    def test_cdn_with_single_target_is_plain(self, render, make_lan) -> None:
        diagram = render(
            {"lan": make_lan(devices=[_device("A", target="X", target_type="innerserver", traffic_type="cdn")])},
            groups=[_group("X")],
        )
        assert diagram.edges_of_category(EdgeCategory.CDN) == []
        assert len(diagram.edges_of_category(EdgeCategory.DIVERSION)) == 1


class TestExternalDetour:
    def test_device_detour_emits_one_edge(self, render, make_lan) -> None:
        diagram = render(
            {
                "lan": make_lan(
                    devices=[_device("A", target="B", target_type="innerserver", traffic_type="external")]
                )
            },
            groups=[_group("B")],
        )
        edges = diagram.edges_of_category(EdgeCategory.DIVERSION)
        assert [(e.source, e.target, e.label) for e in edges] == [
            ("device-as-AS1-B", "device-lan-lan-A", "External diversion")
        ]
        # No dedicated uplink for detours
        assert not any(e.id == "edge-cloud-global-device-as-AS1-B" for e in diagram.edges)

    def test_router_detour_is_not_emitted_twice(self, render, make_lan) -> None:
        diagram = render(
            {
                "lan": make_lan(
                    gateway_diversion={
                        "target": "B",
                        "target_type": "innerserver",
                        "traffic_type": "external",
                    }
                )
            },
            groups=[_group("B")],
        )
        edges = diagram.edges_of_category(EdgeCategory.DIVERSION)
        assert [e.id for e in edges] == ["edge-diversion-router-device-lan-lan-gw-device-as-AS1-B"]
        assert (edges[0].source, edges[0].target) == ("device-as-AS1-B", "device-lan-lan-gw")
        assert edges[0].label == "External diversion"


class TestRouterDiversions:
    def test_plain_router_diversion_runs_both_passes(self, render, make_lan) -> None:
        diagram = render(
            {"lan": make_lan(gateway_diversion={"target": "B", "target_type": "innerserver"})},
            groups=[_group("B")],
        )
        edges = diagram.edges_of_category(EdgeCategory.DIVERSION)
        assert [(e.id, e.label) for e in edges] == [
            ("edge-diversion-router-device-lan-lan-gw-device-as-AS1-B", "Router diversion"),
            ("edge-diversion-device-lan-lan-gw-device-as-AS1-B", "Diversion"),
        ]
        assert all((e.source, e.target) == ("device-as-AS1-B", "device-lan-lan-gw") for e in edges)
        uplinks = [e for e in diagram.edges if e.id == "edge-cloud-global-device-as-AS1-B"]
        assert len(uplinks) == 1
        assert uplinks[0].label == "Dedicated line"

    def test_router_resolves_devices_declared_later(self, render, make_lan) -> None:
        diagram = render(
            {
                "first": make_lan(gateway="g1", gateway_diversion={"target": "late", "target_type": "innerserver"}),
                "second": make_lan(gateway="g2", devices=[{"name": "late"}]),
            }
        )
        edges = diagram.edges_of_category(EdgeCategory.DIVERSION)
        assert [(e.source, e.target) for e in edges] == [
            ("device-lan-second-late", "device-lan-first-g1"),
            ("device-lan-second-late", "device-lan-first-g1"),
        ]
        assert "edge-cloud-global-device-lan-second-late" in [e.id for e in diagram.edges]

    def test_router_cdn_fanout_keeps_both_passes(self, render, make_lan) -> None:
        diagram = render(
            {
                "lan": make_lan(
                    gateway_diversion={
                        "target": ["X", "Y"],
                        "target_type": "innerserver",
                        "traffic_type": "cdn",
                    }
                )
            },
            groups=[_group("X", "Y")],
        )
        assert [e.id for e in diagram.edges_of_category(EdgeCategory.DIVERSION)] == [
            "edge-diversion-router-device-lan-lan-gw-device-as-AS1-X"
        ]
        assert len(diagram.edges_of_category(EdgeCategory.CDN)) == 2


class TestCdnFanOut:
    """Origin-to-edge fan-out for list targets."""

    @pytest.fixture
    def diagram(self, render, make_lan):
        return render(
            {
                "lan": make_lan(
                    devices=[
                        _device(
                            "A",
                            target=["X", "Y", "Z"],
                            target_type="innerserver",
                            traffic_type="cdn",
                        )
                    ]
                )
            },
            groups=[_group("X", "Y", "Z")],
        )

    def test_one_edge_per_target(self, diagram) -> None:
        edges = diagram.edges_of_category(EdgeCategory.CDN)
        assert [(e.source, e.target) for e in edges] == [
            ("device-lan-lan-A", "device-as-AS1-X"),
            ("device-lan-lan-A", "device-as-AS1-Y"),
            ("device-lan-lan-A", "device-as-AS1-Z"),
        ]
        assert [e.id for e in edges] == [
            "edge-cdn-regular-device-lan-lan-A-device-as-AS1-X-0",
            "edge-cdn-regular-device-lan-lan-A-device-as-AS1-Y-1",
            "edge-cdn-regular-device-lan-lan-A-device-as-AS1-Z-2",
        ]
        assert all((e.source_anchor, e.target_anchor) == ("top", "bottom-target") for e in edges)
        assert diagram.edges_of_category(EdgeCategory.DIVERSION) == []

    def test_role_flags(self, diagram) -> None:
        origin = diagram.node("device-lan-lan-A")
        assert origin.data["is_cdn_origin"] is True
        assert origin.data["has_cdn_backsource"] is True
        for name in ("X", "Y", "Z"):
            assert diagram.node(f"device-as-AS1-{name}").data["is_cdn_edge"] is True
        assert "is_cdn_edge" not in origin.data

    def test_partial_resolution(self, render, make_lan) -> None:
        diagram = render(
            {
                "lan": make_lan(
                    devices=[
                        _device("A", target=["X", "ghost"], target_type="innerserver", traffic_type="cdn")
                    ]
                )
            },
            groups=[_group("X")],
        )
        assert [e.target for e in diagram.edges_of_category(EdgeCategory.CDN)] == ["device-as-AS1-X"]

    def test_keyword_fallback_is_loose(self, render, make_lan) -> None:
        private = {
            "lan": make_lan(
                devices=[
                    _device("A", target=["oracle-tokyo"], target_type="innerserver", traffic_type="cdn")
                ]
            )
        }
        groups = [_group("tokyo_pop")]

        diagram = render(private, groups=groups, overrides={"cdn_fallback_keywords": ["tokyo"]})
        edges = diagram.edges_of_category(EdgeCategory.CDN)
        assert [e.id for e in edges] == ["edge-cdn-loose-device-lan-lan-A-device-as-AS1-tokyo_pop-0"]
        assert edges[0].style["stroke"] == "#888888"

        diagram = render(private, groups=groups)
        assert diagram.edges_of_category(EdgeCategory.CDN) == []


class TestUnresolved:
    def test_missing_target_adds_nothing_and_warns(self, render, make_lan, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="netlayout"):
            diagram = render(
                {"lan": make_lan(devices=[_device("A", target="ghost", target_type="innerserver")])}
            )
        assert diagram.edges_of_category(EdgeCategory.DIVERSION) == []
        assert [e.id for e in diagram.edges] == [
            "global-to-inwalls-connection",
            "edge-device-lan-lan-gw-device-lan-lan-A",
        ]
        assert any("ghost" in r.message for r in caplog.records)

    def test_device_never_diverts_to_itself(self, render, make_lan) -> None:
        diagram = render(
            {"lan": make_lan(devices=[_device("A", target="A", target_type="innerserver")])}
        )
        assert diagram.edges_of_category(EdgeCategory.DIVERSION) == []

    def test_outer_server_is_not_resolved(self, render, make_lan) -> None:
        diagram = render(
            {"lan": make_lan(devices=[_device("A", target="B", target_type="outerserver")])},
            groups=[_group("B")],
        )
        assert not any(e.source == "device-as-AS1-B" and e.target == "device-lan-lan-A" for e in diagram.edges)
