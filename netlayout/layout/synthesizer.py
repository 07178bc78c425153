"""Turn a network declaration into a positioned diagram.

Processing order matters because later phases look up nodes emitted earlier:

1. the two internet nodes and the edge between them;
2. backbone groups left to right, each with its devices and uplinks;
3. root private networks left to right, each recursively with its gateway,
   sub-gateways, devices and nested subnets;
4. edges inferred from gateway interfaces that name other nodes;
5. structural overrides;
6. gateway diversions, then device diversions.

Positions of nested nodes are relative to their parent container.
"""

from __future__ import annotations

from dataclasses import asdict, replace
from typing import Any, Dict, Optional

from netlayout.config import LAYOUT_CONFIG, LayoutConfig
from netlayout.layout import styles
from netlayout.layout.context import PendingRouterDiversion, SynthesisContext
from netlayout.layout.diversion import resolve_device_diversions, resolve_router_diversions
from netlayout.layout.index import Lookup
from netlayout.layout.overrides import StructuralOverrides, apply_structural_overrides
from netlayout.layout.sizing import container_size
from netlayout.layout.topology import resolve_topology
from netlayout.logging import get_logger
from netlayout.model.declaration import (
    DOMESTIC,
    INTERNATIONAL,
    REGIONS,
    BackboneGroup,
    Declaration,
    Device,
    Gateway,
    PrivateNetwork,
)
from netlayout.model.diagram import Diagram, Edge, EdgeCategory, Node, NodeKind, Position, Size
from netlayout.utils.ids import (
    DOMESTIC_INTERNET_ID,
    INTERNATIONAL_INTERNET_ID,
    INTERNET_PEERING_EDGE_ID,
    backbone_device_id,
    backbone_group_id,
    device_id,
    diversion_edge_id,
    internet_id,
    link_id,
    network_id,
    subnet_link_id,
)

LOGGER = get_logger(__name__)

# Interface matching for inferred links never scans for exact node ids
INTERFACE_LOOKUPS = (Lookup.NAME, Lookup.LABEL, Lookup.SUBSTRING)


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def _device_data(device: Device) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "label": device.name,
        "ip": device.ip,
        "interface": device.interface,
        "details": dict(device.raw),
        "is_gateway": False,
    }
    if device.interfaces is not None:
        data["interfaces"] = [asdict(i) for i in device.interfaces]
    if device.diversion is not None:
        data["diversion"] = device.diversion.to_dict()
        if device.diversion.is_cdn_fanout:
            data["has_cdn_backsource"] = True
    return data


def _gateway_data(gateway: Gateway) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "label": gateway.name,
        "ip": gateway.ip,
        "interfaces": [asdict(i) for i in gateway.interfaces],
        "details": dict(gateway.raw),
        "is_gateway": True,
    }
    if gateway.diversion is not None:
        data["diversion"] = gateway.diversion.to_dict()
        if gateway.diversion.is_cdn_fanout:
            data["has_cdn_backsource"] = True
    return data


class DiagramSynthesizer:
    """Builds one diagram; create a new instance (or call :func:`synthesize`) per run."""

    def __init__(
        self,
        declaration: Declaration,
        config: Optional[LayoutConfig] = None,
        overrides: Optional[StructuralOverrides] = None,
    ) -> None:
        self.declaration = declaration
        self.config = config or LAYOUT_CONFIG
        self.overrides = overrides or StructuralOverrides()

    def build(self) -> Diagram:
        """Run every phase and return the finished diagram.

        Raises:
            TopologyCycleError: If subnet nesting is cyclic.
            DuplicateIdentifierError: If two nodes or edges collide.
        """
        topology = resolve_topology(self.declaration.private)
        ctx = SynthesisContext(
            declaration=self.declaration,
            topology=topology,
            config=self.config,
            overrides=self.overrides,
        )

        self._emit_internet(ctx)
        self._emit_backbone_groups(ctx)
        LOGGER.debug("Backbone phase: %d nodes, %d edges", len(ctx.nodes), len(ctx.edges))

        self._emit_private_networks(ctx)
        LOGGER.debug("Private network phase: %d nodes, %d edges", len(ctx.nodes), len(ctx.edges))

        self._emit_interface_links(ctx)
        apply_structural_overrides(ctx)
        resolve_router_diversions(ctx)
        resolve_device_diversions(ctx)

        diagram = ctx.to_diagram()
        LOGGER.info(
            "Synthesized diagram with %d nodes and %d edges",
            len(diagram.nodes),
            len(diagram.edges),
        )
        return diagram

    # ------------------------------------------------------------------ #
    # Internet
    # ------------------------------------------------------------------ #

    def _emit_internet(self, ctx: SynthesisContext) -> None:
        cfg = self.config
        size = Size(cfg.internet_width, cfg.internet_height)
        ctx.add_node(
            Node(
                id=DOMESTIC_INTERNET_ID,
                kind=NodeKind.CLOUD,
                position=Position(cfg.domestic_internet_x, cfg.internet_y),
                size=size,
                data={"label": "Inwalls Internet", "type": DOMESTIC},
            )
        )
        ctx.add_node(
            Node(
                id=INTERNATIONAL_INTERNET_ID,
                kind=NodeKind.CLOUD,
                position=Position(cfg.international_internet_x, cfg.internet_y),
                size=size,
                data={"label": "Global Internet", "type": INTERNATIONAL},
            )
        )
        ctx.add_edge(
            Edge(
                id=INTERNET_PEERING_EDGE_ID,
                source=INTERNATIONAL_INTERNET_ID,
                target=DOMESTIC_INTERNET_ID,
                category=EdgeCategory.PEERING,
                animated=True,
                style=styles.peering(),
                label="International link",
            )
        )

    # ------------------------------------------------------------------ #
    # Backbone groups
    # ------------------------------------------------------------------ #

    def _emit_backbone_groups(self, ctx: SynthesisContext) -> None:
        cfg = self.config
        groups = self.declaration.backbone_groups
        if not groups:
            return
        spacing = _clamp(
            cfg.backbone_spread / len(groups), cfg.backbone_min_spacing, cfg.backbone_max_spacing
        )
        current_x = cfg.backbone_start_x
        for index, group in enumerate(groups):
            width = self._emit_backbone_group(ctx, group, index, current_x)
            current_x += width + spacing

    def _emit_backbone_group(
        self, ctx: SynthesisContext, group: BackboneGroup, index: int, x: float
    ) -> float:
        cfg = self.config
        region = group.region(index)
        device_count = len(group.devices)
        size = container_size(device_count, is_backbone_group=True, config=cfg)
        width = max(
            size.width, device_count * cfg.backbone_width_per_device + cfg.backbone_width_padding
        )
        group_id = backbone_group_id(group.as_number)
        ctx.add_node(
            Node(
                id=group_id,
                kind=NodeKind.BACKBONE_GROUP,
                position=Position(x, cfg.backbone_y),
                size=Size(width, size.height),
                data={
                    "label": group.as_number,
                    "subnet": "",
                    "type": "as",
                    "network_type": region,
                },
            )
        )

        cloud = internet_id(region)
        device_spacing = _clamp(
            width / (device_count + 1),
            cfg.backbone_device_min_spacing,
            cfg.backbone_device_max_spacing,
        )
        for i, device in enumerate(group.devices):
            dev_id = backbone_device_id(group.as_number, device.name)
            ctx.add_node(
                Node(
                    id=dev_id,
                    kind=NodeKind.ROUTER_DEVICE if device.is_sub_gateway else NodeKind.PLAIN_DEVICE,
                    position=Position(cfg.backbone_device_x + i * device_spacing, cfg.backbone_device_y),
                    parent_container_id=group_id,
                    data=_device_data(device),
                ),
                name=device.name,
                diversion=device.diversion,
            )
            ctx.add_edge(
                Edge(
                    id=link_id(cloud, dev_id),
                    source=cloud,
                    target=dev_id,
                    category=EdgeCategory.UPLINK,
                    animated=True,
                    source_anchor=styles.ANCHOR_BOTTOM_SOURCE,
                    target_anchor=styles.ANCHOR_TOP,
                    style={**styles.uplink(), "opacity": 0.7},
                    label="Internet",
                )
            )

            diversion = device.diversion
            if diversion is not None and diversion.is_external_server:
                other_cloud = internet_id(diversion.region)
                if other_cloud != cloud:
                    ctx.add_edge(
                        Edge(
                            id=diversion_edge_id(other_cloud, dev_id),
                            source=other_cloud,
                            target=dev_id,
                            category=EdgeCategory.UPLINK,
                            animated=True,
                            source_anchor=styles.ANCHOR_BOTTOM_SOURCE,
                            target_anchor=styles.ANCHOR_TOP,
                            style=styles.external_server(),
                            label=diversion.label or "External server",
                        )
                    )
        return width

    # ------------------------------------------------------------------ #
    # Private networks
    # ------------------------------------------------------------------ #

    def _emit_private_networks(self, ctx: SynthesisContext) -> None:
        cfg = self.config
        roots = ctx.topology.roots
        if not roots:
            return
        spacing = _clamp(
            cfg.network_spread / len(roots), cfg.network_min_spacing, cfg.network_max_spacing
        )
        current_x = cfg.network_start_x
        for name in roots:
            container = self._emit_network(
                ctx, self.declaration.private[name], Position(current_x, cfg.network_y)
            )
            current_x += container.size.width + spacing

    def _emit_network(
        self,
        ctx: SynthesisContext,
        network: PrivateNetwork,
        position: Position,
        parent_id: Optional[str] = None,
        level: int = 0,
    ) -> Node:
        cfg = self.config
        topology = ctx.topology
        name = network.name
        has_children = topology.has_children(name)
        device_count = topology.subtree_device_count(name) if has_children else network.device_slots
        size = container_size(
            device_count,
            has_children=has_children,
            level=level,
            max_child_depth=topology.depth(name) if has_children else 0,
            is_backbone_group=False,
            config=cfg,
        )

        container = ctx.add_node(
            Node(
                id=network_id(name),
                kind=NodeKind.NETWORK_CONTAINER,
                position=position,
                size=size,
                parent_container_id=parent_id,
                data={
                    "label": name.replace("_", " "),
                    "subnet": network.subnet,
                    "type": "lan",
                    "level": level,
                },
            )
        )
        ctx.network_container[name] = container.id

        gateway_id = self._emit_gateway(ctx, network, container.id)
        if network.devices:
            self._emit_devices(ctx, network, container, gateway_id)

        children = topology.children_of.get(name, [])
        if children:
            child_spacing = (size.width - 2 * cfg.subnet_margin) / (len(children) + 1)
            for i, child_name in enumerate(children):
                self._emit_network(
                    ctx,
                    self.declaration.private[child_name],
                    Position(i * child_spacing + cfg.subnet_margin, cfg.subnet_y),
                    parent_id=container.id,
                    level=level + 1,
                )
                child_gateway = ctx.network_gateway.get(child_name)
                if gateway_id is not None and child_gateway is not None:
                    ctx.add_edge(
                        Edge(
                            id=subnet_link_id(gateway_id, child_gateway),
                            source=gateway_id,
                            target=child_gateway,
                            category=EdgeCategory.SUBNET_LINK,
                            animated=True,
                            source_anchor=styles.ANCHOR_BOTTOM_SOURCE,
                            target_anchor=styles.ANCHOR_TOP,
                            style=styles.subnet_link(),
                            label="Subnet link",
                        )
                    )
        return container

    def _emit_gateway(
        self, ctx: SynthesisContext, network: PrivateNetwork, container_id: str
    ) -> Optional[str]:
        cfg = self.config
        gateway = network.gateway
        if self.overrides.is_omitted(network.name, gateway.name):
            LOGGER.debug("Gateway '%s' of '%s' omitted by override", gateway.name, network.name)
            return None

        gateway_id = device_id(network.name, gateway.name)
        ctx.add_node(
            Node(
                id=gateway_id,
                kind=NodeKind.ROUTER_DEVICE,
                position=Position(cfg.gateway_x, cfg.gateway_y),
                parent_container_id=container_id,
                data=_gateway_data(gateway),
            ),
            name=gateway.name,
            diversion=gateway.diversion,
        )
        ctx.network_gateway[network.name] = gateway_id

        for region in gateway.region_interfaces():
            cloud = internet_id(region)
            ctx.add_edge(
                Edge(
                    id=link_id(cloud, gateway_id, region),
                    source=cloud,
                    target=gateway_id,
                    category=EdgeCategory.UPLINK,
                    animated=True,
                    source_anchor=styles.ANCHOR_BOTTOM_SOURCE,
                    target_anchor=styles.ANCHOR_TOP,
                    style=styles.uplink(),
                    label="Domestic uplink" if region == DOMESTIC else "International uplink",
                )
            )

        diversion = gateway.diversion
        if diversion is not None and diversion.is_internal:
            ctx.pending_router_diversions.append(
                PendingRouterDiversion(gateway_id, diversion.first_target, diversion)
            )
        return gateway_id

    def _emit_devices(
        self,
        ctx: SynthesisContext,
        network: PrivateNetwork,
        container: Node,
        gateway_id: Optional[str],
    ) -> None:
        cfg = self.config
        scope = network.name
        visible = [
            (i, d)
            for i, d in enumerate(network.devices)
            if not self.overrides.is_omitted(scope, d.name)
        ]

        # Second row: ordinary devices, the first one beside the gateway
        regular = [d for _, d in visible if not d.is_sub_gateway]
        usable_width = container.size.width - cfg.device_row_offset - cfg.device_row_right_margin
        step = usable_width / max(1, len(regular) - 1)
        for i, device in enumerate(regular):
            dev_id = device_id(scope, device.name)
            x = cfg.device_row_offset + i * step
            ctx.add_node(
                Node(
                    id=dev_id,
                    kind=NodeKind.PLAIN_DEVICE,
                    position=Position(x, cfg.device_row_y),
                    parent_container_id=container.id,
                    data=_device_data(device),
                ),
                name=device.name,
                diversion=device.diversion,
            )
            if gateway_id is None:
                continue
            provisional = self._gateway_link(ctx, gateway_id, dev_id)
            diversion = device.diversion
            if diversion is not None and diversion.is_external_server:
                self._upgrade_to_external(ctx, provisional, dev_id, gateway_id, device)

        # First row: sub-gateways beside the main gateway
        for i, device in visible:
            if not device.is_sub_gateway:
                continue
            dev_id = device_id(scope, device.name)
            ctx.add_node(
                Node(
                    id=dev_id,
                    kind=NodeKind.ROUTER_DEVICE,
                    position=Position(cfg.gateway_x + i * cfg.sub_gateway_spacing, cfg.gateway_y),
                    parent_container_id=container.id,
                    data=_device_data(device),
                ),
                name=device.name,
                diversion=device.diversion,
            )
            if gateway_id is not None:
                self._gateway_link(ctx, gateway_id, dev_id)

    @staticmethod
    def _gateway_link(ctx: SynthesisContext, gateway_id: str, dev_id: str) -> Edge:
        return ctx.add_edge(
            Edge(
                id=link_id(gateway_id, dev_id),
                source=gateway_id,
                target=dev_id,
                category=EdgeCategory.GATEWAY_LINK,
                animated=False,
                style=styles.gateway_link(),
            )
        )

    def _upgrade_to_external(
        self,
        ctx: SynthesisContext,
        provisional: Edge,
        dev_id: str,
        gateway_id: str,
        device: Device,
    ) -> None:
        diversion = device.diversion
        if diversion.is_external_detour:
            style = styles.external_detour()
            label = diversion.label or "External diversion"
            anchors = (styles.ANCHOR_BOTTOM_SOURCE, styles.ANCHOR_TOP)
            ctx.handled.add(dev_id)
        else:
            style = styles.external_server()
            label = diversion.label or "External server"
            anchors = (None, None)
        ctx.replace_edge(
            provisional.id,
            replace(
                provisional,
                id=diversion_edge_id(dev_id, gateway_id),
                category=EdgeCategory.DIVERSION,
                animated=True,
                source_anchor=anchors[0],
                target_anchor=anchors[1],
                style=style,
                label=label,
            ),
        )
        LOGGER.debug("Gateway link to '%s' upgraded to external diversion", dev_id)

    # ------------------------------------------------------------------ #
    # Inferred interface links
    # ------------------------------------------------------------------ #

    def _emit_interface_links(self, ctx: SynthesisContext) -> None:
        networks = self.declaration.private
        for name, network in networks.items():
            gateway_id = ctx.network_gateway.get(name)
            if gateway_id is None:
                continue
            seen = set()
            for intf in network.gateway.interfaces:
                kind = intf.type
                if not kind or kind in REGIONS or kind in networks or kind in seen:
                    continue
                seen.add(kind)
                found = ctx.index.resolve(kind, INTERFACE_LOOKUPS, exclude=(gateway_id,))
                if found is None:
                    LOGGER.debug("Interface type '%s' of '%s' matches no node", kind, gateway_id)
                    continue
                target_id, lookup = found
                if lookup is Lookup.SUBSTRING:
                    LOGGER.debug(
                        "Interface type '%s' of '%s' matched '%s' by substring",
                        kind,
                        gateway_id,
                        target_id,
                    )
                ctx.add_edge(
                    Edge(
                        id=link_id(target_id, gateway_id, kind),
                        source=target_id,
                        target=gateway_id,
                        category=EdgeCategory.INTERFACE_LINK,
                        animated=True,
                        source_anchor=styles.ANCHOR_BOTTOM_SOURCE,
                        target_anchor=styles.ANCHOR_TOP,
                        style=styles.subnet_link(),
                        label=f"{kind.replace('_', ' ')} internal link",
                    )
                )


def synthesize(
    declaration: Declaration,
    config: Optional[LayoutConfig] = None,
    overrides: Optional[StructuralOverrides] = None,
) -> Diagram:
    """Compute the positioned diagram of ``declaration``.

    The computation is deterministic: the same declaration, config and
    overrides always produce the same ids, positions, sizes and order.

    Args:
        declaration: Parsed network declaration.
        config: Layout constants; defaults to ``LAYOUT_CONFIG``.
        overrides: Structural override table; defaults to none.

    Returns:
        The finished diagram.

    Raises:
        TopologyCycleError: If subnet nesting is cyclic.
        DuplicateIdentifierError: If two nodes or edges collide.
    """
    return DiagramSynthesizer(declaration, config, overrides).build()
