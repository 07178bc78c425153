"""Shared fixtures: declaration builders and the sample document."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pytest

from netlayout.layout.overrides import StructuralOverrides
from netlayout.layout.synthesizer import synthesize
from netlayout.model.declaration import Declaration
from netlayout.model.diagram import Diagram

SAMPLE_DATA = Path(__file__).parent / "sample_data"


def _lan(
    gateway: str = "gw",
    interfaces: Iterable[Any] = (),
    devices: Iterable[Mapping[str, Any]] = (),
    subnet: Optional[str] = None,
    gateway_diversion: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Private network dict; plain strings in ``interfaces`` are interface types."""
    intfs: List[Dict[str, Any]] = []
    for i, entry in enumerate(interfaces):
        if isinstance(entry, str):
            intfs.append({"name": f"eth{i}", "type": entry})
        else:
            intfs.append(dict(entry))
    gw: Dict[str, Any] = {"name": gateway, "interfaces": intfs}
    if gateway_diversion is not None:
        gw["diversion"] = dict(gateway_diversion)
    data: Dict[str, Any] = {"gateway": gw, "devices": [dict(d) for d in devices]}
    if subnet is not None:
        data["subnet"] = subnet
    return data


def _declare(
    private: Optional[Mapping[str, Any]] = None,
    groups: Optional[List[Mapping[str, Any]]] = None,
) -> Declaration:
    return Declaration.from_dict(
        {"public": {"autonomous_systems": list(groups or [])}, "private": dict(private or {})}
    )


@pytest.fixture
def make_lan():
    """Factory for private network dicts."""
    return _lan


@pytest.fixture
def declare():
    """Factory building a Declaration from private networks and backbone groups."""
    return _declare


@pytest.fixture
def render():
    """Factory synthesizing a diagram from raw declaration parts."""

    def _render(
        private: Optional[Mapping[str, Any]] = None,
        groups: Optional[List[Mapping[str, Any]]] = None,
        overrides: Any = None,
        config: Any = None,
    ) -> Diagram:
        table = (
            overrides
            if isinstance(overrides, StructuralOverrides)
            else StructuralOverrides.from_dict(overrides)
        )
        return synthesize(_declare(private, groups), config=config, overrides=table)

    return _render


@pytest.fixture
def scenario_parts() -> Dict[str, Any]:
    """One international backbone group with two devices and one LAN with a domestic uplink."""
    return {
        "groups": [
            {
                "as_number": "AS1",
                "network_type": "international",
                "devices": [{"name": "s1", "ip": "1.1.1.1"}, {"name": "s2", "ip": "1.1.1.2"}],
            }
        ],
        "private": {
            "home": _lan(
                gateway="gw",
                interfaces=[{"name": "wan", "type": "domestic", "ip": "10.0.0.2"}],
                devices=[{"name": "pc", "ip": "192.168.1.10"}],
                subnet="192.168.1.0/24",
            )
        },
    }


@pytest.fixture
def sample_yaml_path() -> Path:
    return SAMPLE_DATA / "network.yaml"
