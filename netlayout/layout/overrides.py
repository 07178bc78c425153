"""Structural overrides: declared corrections layered on top of the generic layout.

Some declarations need fixes the generic rules cannot infer: a network that
should sit inside another one although no interface says so, an uplink or a
cross-network link that is not implied by any interface, extra room for a
busy network, a router declared in two scopes that must be drawn only once,
and the keyword fragments used to find CDN edge servers that are not named
exactly. These are data, read from the ``overrides`` section of a document:

.. code-block:: yaml

    overrides:
      nest:
        - {child: test_network, parent: internal_network,
           position: {x: 80, y: 300}, width_padding: 200, min_parent_height: 650}
      uplinks:
        - {node: internal_router, internet: domestic, label: Internet Connection}
      links:
        - {source: internal_router, target: testnet_router, label: LAN link}
      min_sizes:
        - {network: home_server_network, width: 800, height: 500}
      omit:
        - {network: test_network, name: testnet_router}
      cdn_fallback_keywords: [oracle, dubai, osaka]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from netlayout.dsl.parser import check_no_extra_keys
from netlayout.errors import DeclarationError
from netlayout.layout import styles
from netlayout.layout.index import STRICT_LOOKUPS
from netlayout.logging import get_logger
from netlayout.model.declaration import DOMESTIC, REGIONS
from netlayout.model.diagram import Edge, EdgeCategory, Position, Size
from netlayout.utils.ids import internet_id, override_edge_id

if TYPE_CHECKING:
    from netlayout.layout.context import SynthesisContext

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class NestOverride:
    child: str
    parent: str
    position: Optional[Position] = None
    width_padding: float = 200
    min_parent_height: float = 0


@dataclass(frozen=True)
class UplinkOverride:
    node: str
    internet: str = DOMESTIC
    id: Optional[str] = None
    label: Optional[str] = None


@dataclass(frozen=True)
class LinkOverride:
    source: str
    target: str
    id: Optional[str] = None
    label: Optional[str] = None


@dataclass(frozen=True)
class MinSizeOverride:
    network: str
    width: float = 0
    height: float = 0


@dataclass(frozen=True)
class OmitOverride:
    network: str
    name: str


def _entries(data: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    value = data.get(key) or []
    if not isinstance(value, list) or not all(isinstance(v, Mapping) for v in value):
        raise DeclarationError(f"'overrides.{key}' must be a list of mappings.")
    return value


def _required(entry: Mapping[str, Any], key: str, context: str) -> str:
    if not entry.get(key):
        raise DeclarationError(f"{context} is missing required field '{key}'.")
    return str(entry[key])


def _number(entry: Mapping[str, Any], key: str, default: float, context: str) -> float:
    value = entry.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DeclarationError(f"'{key}' in {context} must be a number.")
    return value


@dataclass(frozen=True)
class StructuralOverrides:
    """The override table; empty by default."""

    nest: Tuple[NestOverride, ...] = ()
    uplinks: Tuple[UplinkOverride, ...] = ()
    links: Tuple[LinkOverride, ...] = ()
    min_sizes: Tuple[MinSizeOverride, ...] = ()
    omit: Tuple[OmitOverride, ...] = ()
    cdn_fallback_keywords: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> StructuralOverrides:
        """Parse an ``overrides`` section.

        Raises:
            DeclarationError: On unknown keys or missing required fields.
        """
        if not data:
            return cls()
        check_no_extra_keys(
            data,
            allowed={"nest", "uplinks", "links", "min_sizes", "omit", "cdn_fallback_keywords"},
            context="overrides",
        )

        nest = []
        for i, entry in enumerate(_entries(data, "nest")):
            ctx = f"overrides.nest[{i}]"
            check_no_extra_keys(
                entry,
                {"child", "parent", "position", "width_padding", "min_parent_height"},
                ctx,
            )
            position = None
            if entry.get("position") is not None:
                pos = entry["position"]
                if not isinstance(pos, Mapping):
                    raise DeclarationError(f"'position' in {ctx} must be a mapping.")
                position = Position(
                    x=_number(pos, "x", 0, ctx), y=_number(pos, "y", 0, ctx)
                )
            nest.append(
                NestOverride(
                    child=_required(entry, "child", ctx),
                    parent=_required(entry, "parent", ctx),
                    position=position,
                    width_padding=_number(entry, "width_padding", 200, ctx),
                    min_parent_height=_number(entry, "min_parent_height", 0, ctx),
                )
            )

        uplinks = []
        for i, entry in enumerate(_entries(data, "uplinks")):
            ctx = f"overrides.uplinks[{i}]"
            check_no_extra_keys(entry, {"node", "internet", "id", "label"}, ctx)
            internet = str(entry.get("internet", DOMESTIC))
            if internet not in REGIONS:
                raise DeclarationError(
                    f"'internet' in {ctx} must be one of {list(REGIONS)}."
                )
            uplinks.append(
                UplinkOverride(
                    node=_required(entry, "node", ctx),
                    internet=internet,
                    id=entry.get("id"),
                    label=entry.get("label"),
                )
            )

        links = []
        for i, entry in enumerate(_entries(data, "links")):
            ctx = f"overrides.links[{i}]"
            check_no_extra_keys(entry, {"source", "target", "id", "label"}, ctx)
            links.append(
                LinkOverride(
                    source=_required(entry, "source", ctx),
                    target=_required(entry, "target", ctx),
                    id=entry.get("id"),
                    label=entry.get("label"),
                )
            )

        min_sizes = []
        for i, entry in enumerate(_entries(data, "min_sizes")):
            ctx = f"overrides.min_sizes[{i}]"
            check_no_extra_keys(entry, {"network", "width", "height"}, ctx)
            min_sizes.append(
                MinSizeOverride(
                    network=_required(entry, "network", ctx),
                    width=_number(entry, "width", 0, ctx),
                    height=_number(entry, "height", 0, ctx),
                )
            )

        omit = []
        for i, entry in enumerate(_entries(data, "omit")):
            ctx = f"overrides.omit[{i}]"
            check_no_extra_keys(entry, {"network", "name"}, ctx)
            omit.append(
                OmitOverride(
                    network=_required(entry, "network", ctx),
                    name=_required(entry, "name", ctx),
                )
            )

        keywords = data.get("cdn_fallback_keywords") or []
        if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
            raise DeclarationError("'overrides.cdn_fallback_keywords' must be a list of strings.")

        return cls(
            nest=tuple(nest),
            uplinks=tuple(uplinks),
            links=tuple(links),
            min_sizes=tuple(min_sizes),
            omit=tuple(omit),
            cdn_fallback_keywords=tuple(k for k in keywords if k),
        )

    def is_omitted(self, network: str, name: str) -> bool:
        return any(o.network == network and o.name == name for o in self.omit)


def apply_structural_overrides(ctx: SynthesisContext) -> None:
    """Apply nesting, sizing, uplink and link overrides to the context.

    Overrides referencing entities that were not emitted are skipped with a
    warning. Container nodes are adjusted in place before the diagram is
    finalized.
    """
    table = ctx.overrides
    for nest in table.nest:
        _apply_nest(ctx, nest)
    for min_size in table.min_sizes:
        container_id = ctx.network_container.get(min_size.network)
        if container_id is None:
            LOGGER.warning("Size override for unknown network '%s' skipped", min_size.network)
            continue
        _grow(ctx, container_id, min_size.width, min_size.height)
    for uplink in table.uplinks:
        _apply_uplink(ctx, uplink)
    for link in table.links:
        _apply_link(ctx, link)


def _grow(ctx: SynthesisContext, container_id: str, width: float, height: float) -> None:
    node = ctx.node(container_id)
    size = node.size or Size(0, 0)
    node.size = Size(width=max(size.width, width), height=max(size.height, height))
    LOGGER.debug("Container '%s' grown to %.0fx%.0f", container_id, node.size.width, node.size.height)


def _apply_nest(ctx: SynthesisContext, nest: NestOverride) -> None:
    child_id = ctx.network_container.get(nest.child)
    parent_id = ctx.network_container.get(nest.parent)
    if child_id is None or parent_id is None:
        LOGGER.warning(
            "Nesting override '%s' under '%s' skipped: network not rendered",
            nest.child,
            nest.parent,
        )
        return

    # Refuse to place a container inside its own subtree
    ancestor: Optional[str] = parent_id
    while ancestor is not None:
        if ancestor == child_id:
            LOGGER.warning(
                "Nesting override '%s' under '%s' skipped: would nest a container in itself",
                nest.child,
                nest.parent,
            )
            return
        ancestor = ctx.node(ancestor).parent_container_id

    child = ctx.node(child_id)
    child.parent_container_id = parent_id
    if nest.position is not None:
        child.position = nest.position
    child_width = child.size.width if child.size else 0
    _grow(ctx, parent_id, child_width + nest.width_padding, nest.min_parent_height)
    LOGGER.debug("Network '%s' nested under '%s' by override", nest.child, nest.parent)


def _resolve_ref(ctx: SynthesisContext, ref: str, what: str) -> Optional[str]:
    found = ctx.index.resolve(ref, STRICT_LOOKUPS)
    if found is None:
        LOGGER.warning("%s override references unknown node '%s'; skipped", what, ref)
        return None
    return found[0]


def _apply_uplink(ctx: SynthesisContext, uplink: UplinkOverride) -> None:
    node_id = _resolve_ref(ctx, uplink.node, "Uplink")
    if node_id is None:
        return
    cloud = internet_id(uplink.internet)
    ctx.add_edge(
        Edge(
            id=uplink.id or override_edge_id(cloud, node_id),
            source=cloud,
            target=node_id,
            category=EdgeCategory.UPLINK,
            animated=True,
            source_anchor=styles.ANCHOR_BOTTOM_SOURCE,
            target_anchor=styles.ANCHOR_TOP,
            style=styles.uplink(),
            label=uplink.label or "Internet Connection",
        )
    )


def _apply_link(ctx: SynthesisContext, link: LinkOverride) -> None:
    source = _resolve_ref(ctx, link.source, "Link")
    target = _resolve_ref(ctx, link.target, "Link")
    if source is None or target is None:
        return
    ctx.add_edge(
        Edge(
            id=link.id or override_edge_id(source, target),
            source=source,
            target=target,
            category=EdgeCategory.PEERING,
            animated=True,
            style={"stroke": styles.PURPLE, "strokeWidth": 2},
            label=link.label or "LAN link",
        )
    )


def overrides_summary(table: StructuralOverrides) -> Dict[str, int]:
    """Count entries per override kind (for ``netlayout inspect``)."""
    return {
        "nest": len(table.nest),
        "uplinks": len(table.uplinks),
        "links": len(table.links),
        "min_sizes": len(table.min_sizes),
        "omit": len(table.omit),
        "cdn_fallback_keywords": len(table.cdn_fallback_keywords),
    }
