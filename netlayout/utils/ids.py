"""Deterministic node and edge identifiers.

Every identifier is a pure function of entity kind, owning scope and name, so
rendering the same declaration twice yields the same ids. Device and gateway
ids have the form ``device-<kind>-<scope>-<name>`` where ``kind`` is ``as`` for
backbone groups and ``lan`` for private networks. Dashes and percent signs in
the scope are percent-encoded, so the first dash after the scope always ends
it and two different (kind, scope, name) triples never share an id. The name
is kept verbatim; diversion targets are looked up by the ``-<name>`` suffix.
"""

from __future__ import annotations

from netlayout.model.declaration import DOMESTIC

DOMESTIC_INTERNET_ID = "cloud-inwalls"
INTERNATIONAL_INTERNET_ID = "cloud-global"
INTERNET_PEERING_EDGE_ID = "global-to-inwalls-connection"

# Scope kinds inside device ids
BACKBONE_SCOPE = "as"
NETWORK_SCOPE = "lan"


def internet_id(region: str) -> str:
    """Return the internet node id for ``region``; anything but domestic is international."""
    return DOMESTIC_INTERNET_ID if region == DOMESTIC else INTERNATIONAL_INTERNET_ID


def backbone_group_id(as_number: str) -> str:
    return f"as-{as_number}"


def network_id(name: str) -> str:
    return f"network-{name}"


def _escape_scope(scope: str) -> str:
    return scope.replace("%", "%25").replace("-", "%2D")


def device_id(network: str, name: str) -> str:
    """Id of a device or gateway ``name`` of private network ``network``."""
    return f"device-{NETWORK_SCOPE}-{_escape_scope(network)}-{name}"


def backbone_device_id(as_number: str, name: str) -> str:
    """Id of a device ``name`` of backbone group ``as_number``."""
    return f"device-{BACKBONE_SCOPE}-{_escape_scope(as_number)}-{name}"


def link_id(source: str, target: str, role: str = "") -> str:
    """Id of a structural edge; ``role`` disambiguates parallel edges."""
    base = f"edge-{source}-{target}"
    return f"{base}-{role}" if role else base


def subnet_link_id(parent_gateway: str, child_gateway: str) -> str:
    return f"edge-subnet-{parent_gateway}-{child_gateway}"


def diversion_edge_id(owner: str, other: str) -> str:
    return f"edge-diversion-{owner}-{other}"


def router_diversion_edge_id(router: str, target: str) -> str:
    return f"edge-diversion-router-{router}-{target}"


def cdn_edge_id(origin: str, edge_node: str, index: int, loose: bool = False) -> str:
    kind = "loose" if loose else "regular"
    return f"edge-cdn-{kind}-{origin}-{edge_node}-{index}"


def override_edge_id(source: str, target: str) -> str:
    return f"edge-override-{source}-{target}"
