"""Content-driven size of backbone-group and network containers."""

from __future__ import annotations

import math
from typing import Optional

from netlayout.config import LAYOUT_CONFIG, LayoutConfig
from netlayout.model.diagram import Size


def packing_grid(device_count: int, config: LayoutConfig = LAYOUT_CONFIG) -> tuple[int, int]:
    """Return ``(rows, columns)`` of the device grid.

    At most ``max_devices_per_row`` devices share a row and a row is never
    narrower than ``min_devices_per_row``.
    """
    per_row = max(
        config.min_devices_per_row, min(config.max_devices_per_row, device_count)
    )
    rows = math.ceil(device_count / per_row)
    columns = min(per_row, device_count)
    return rows, columns


def container_size(
    device_count: int,
    has_children: bool = False,
    level: int = 0,
    max_child_depth: int = 0,
    is_backbone_group: bool = False,
    config: Optional[LayoutConfig] = None,
) -> Size:
    """Compute the width and height of a container.

    Args:
        device_count: Devices to fit (for networks, the gateway counts as one).
        has_children: Whether subnets are nested inside.
        level: Nesting level of the container itself; 0 for roots.
        max_child_depth: Depth of the subnet tree below the container.
        is_backbone_group: Backbone groups are wide and shallow, networks
            narrower and taller with room for a header row of sub-gateways.
        config: Layout constants; defaults to ``LAYOUT_CONFIG``.

    Returns:
        Strictly positive size.
    """
    cfg = config or LAYOUT_CONFIG
    profile = cfg.sizing_for(is_backbone_group)

    rows, columns = packing_grid(device_count, cfg)
    width = max(profile.base_width, (columns + cfg.slack_columns) * profile.width_per_device)
    height = max(
        profile.base_height,
        rows * profile.height_per_device + profile.vertical_margin,
    )

    if has_children:
        width = max(width * cfg.nested_width_multiplier, profile.nested_width_floor)
        depth_factor = (
            profile.nested_height_factor + max_child_depth * profile.nested_depth_increment
        )
        height = max(
            height * depth_factor,
            profile.nested_height_floor + max_child_depth * profile.nested_height_per_level,
        )

    if level > 0:
        width *= max(cfg.level_width_floor, 1 - level * cfg.level_width_step)
        height *= max(cfg.level_height_floor, 1 - level * cfg.level_height_step)

    return Size(width=width, height=height)
