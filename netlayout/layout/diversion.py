"""Overlay edges for declared traffic diversions.

Two passes run after every structural node exists:

1. :func:`resolve_router_diversions` handles the diversions recorded for
   gateways during placement. The edge runs from the serving target back to
   the requesting router.
2. :func:`resolve_device_diversions` handles every remaining node whose
   diversion points at an internal server:

   * ``traffic_type: cdn`` with a target list fans out one CDN edge per
     target, origin to edge, flagging ``is_cdn_origin`` / ``is_cdn_edge``.
     Targets without a match fall back to the override keywords.
   * ``traffic_type: external`` draws a single edge target -> node.
   * anything else draws a single edge target -> node and, when the target
     has no uplink from the diversion's internet region yet, adds one.

Unresolved targets are logged and skipped.
"""

from __future__ import annotations

from typing import Optional

from netlayout.layout import styles
from netlayout.layout.context import SynthesisContext
from netlayout.layout.index import ALL_LOOKUPS, STRICT_LOOKUPS
from netlayout.logging import get_logger
from netlayout.model.declaration import Diversion
from netlayout.model.diagram import Edge, EdgeCategory
from netlayout.utils.ids import (
    cdn_edge_id,
    diversion_edge_id,
    internet_id,
    link_id,
    router_diversion_edge_id,
)

LOGGER = get_logger(__name__)


def _resolve_single(ctx: SynthesisContext, node_id: str, name: str) -> Optional[str]:
    found = ctx.index.resolve(name, STRICT_LOOKUPS, exclude=(node_id,))
    if found is None:
        LOGGER.warning("Diversion target '%s' of '%s' not found; edge omitted", name, node_id)
        return None
    target_id, lookup = found
    LOGGER.debug("Diversion target '%s' of '%s' -> '%s' (%s)", name, node_id, target_id, lookup.value)
    return target_id


def _overlay_edge(edge_id: str, target_id: str, node_id: str, diversion: Diversion, default_label: str) -> Edge:
    return Edge(
        id=edge_id,
        source=target_id,
        target=node_id,
        category=EdgeCategory.DIVERSION,
        animated=True,
        source_anchor=styles.ANCHOR_BOTTOM_SOURCE,
        target_anchor=styles.ANCHOR_TOP,
        style=styles.external_detour(),
        label=diversion.label or default_label,
    )


def ensure_uplink(ctx: SynthesisContext, target_id: str, region: str) -> None:
    """Add an internet uplink to ``target_id`` unless one already exists."""
    cloud = internet_id(region)
    if ctx.connects(cloud, target_id):
        return
    ctx.add_edge(
        Edge(
            id=link_id(cloud, target_id),
            source=cloud,
            target=target_id,
            category=EdgeCategory.UPLINK,
            animated=True,
            source_anchor=styles.ANCHOR_BOTTOM_SOURCE,
            target_anchor=styles.ANCHOR_TOP,
            style=styles.uplink(),
            label="Dedicated line",
        )
    )


def resolve_router_diversions(ctx: SynthesisContext) -> None:
    """Emit the overlay edges for gateway diversions recorded during placement.

    Only an external detour marks the router handled. Every other router
    diversion also goes through the device pass, which adds the plain
    diversion edge with its missing uplink, or the CDN fan-out.
    """
    for pending in ctx.pending_router_diversions:
        diversion = pending.diversion
        if diversion.is_external_detour and pending.router_id in ctx.handled:
            continue
        target_id = _resolve_single(ctx, pending.router_id, pending.target_name)
        if target_id is None:
            continue
        ctx.add_edge(
            _overlay_edge(
                router_diversion_edge_id(pending.router_id, target_id),
                target_id,
                pending.router_id,
                diversion,
                "External diversion" if diversion.is_external_detour else "Router diversion",
            )
        )
        if diversion.is_external_detour:
            ctx.handled.add(pending.router_id)


def resolve_device_diversions(ctx: SynthesisContext) -> None:
    """Emit overlay edges for every unhandled internal-server diversion."""
    for node_id, diversion in list(ctx.diversions.items()):
        if not diversion.is_internal or node_id in ctx.handled:
            continue
        if diversion.is_cdn_fanout:
            _fan_out_cdn(ctx, node_id, diversion)
        elif diversion.is_external_detour:
            target_id = _resolve_single(ctx, node_id, diversion.first_target)
            if target_id is None:
                continue
            ctx.add_edge(
                _overlay_edge(
                    diversion_edge_id(node_id, target_id),
                    target_id,
                    node_id,
                    diversion,
                    "External diversion",
                )
            )
            ctx.handled.add(node_id)
        else:
            target_id = _resolve_single(ctx, node_id, diversion.first_target)
            if target_id is None:
                continue
            ctx.add_edge(
                _overlay_edge(
                    diversion_edge_id(node_id, target_id),
                    target_id,
                    node_id,
                    diversion,
                    "Diversion",
                )
            )
            ensure_uplink(ctx, target_id, diversion.region)


def _fan_out_cdn(ctx: SynthesisContext, origin_id: str, diversion: Diversion) -> None:
    keywords = ctx.overrides.cdn_fallback_keywords
    for index, name in enumerate(diversion.targets):
        loose = False
        found = ctx.index.resolve(name, ALL_LOOKUPS, exclude=(origin_id,))
        if found is not None:
            target_id, lookup = found
            LOGGER.debug("CDN target '%s' of '%s' -> '%s' (%s)", name, origin_id, target_id, lookup.value)
        else:
            target_id = (
                ctx.index.find_by_fragments(keywords, exclude=(origin_id,)) if keywords else None
            )
            if target_id is None:
                LOGGER.warning("CDN target '%s' of '%s' not found; edge omitted", name, origin_id)
                continue
            loose = True
            LOGGER.debug("CDN target '%s' of '%s' -> '%s' (keyword fallback)", name, origin_id, target_id)

        ctx.add_edge(
            Edge(
                id=cdn_edge_id(origin_id, target_id, index, loose=loose),
                source=origin_id,
                target=target_id,
                category=EdgeCategory.CDN,
                animated=True,
                source_anchor=styles.ANCHOR_TOP,
                target_anchor=styles.ANCHOR_BOTTOM_TARGET,
                style=styles.cdn_loose() if loose else styles.cdn(),
                label=diversion.label or "CDN origin pull",
            )
        )
        ctx.node(origin_id).data["is_cdn_origin"] = True
        ctx.node(target_id).data["is_cdn_edge"] = True
