"""Visual hints attached to edges.

The canvas owns theming; these are only defaults so that edge categories stay
distinguishable when the canvas applies no theme of its own.
"""

from __future__ import annotations

from typing import Any, Dict

BLUE = "#4285F4"
PURPLE = "#9C27B0"
GREEN = "#4CAF50"
ORANGE = "#FF5722"
GREY = "#888888"
SILVER = "#b1b1b7"

# Anchor names understood by the canvas
ANCHOR_TOP = "top"
ANCHOR_BOTTOM_SOURCE = "bottom-source"
ANCHOR_BOTTOM_TARGET = "bottom-target"


def uplink() -> Dict[str, Any]:
    return {"stroke": BLUE, "strokeWidth": 2}


def peering() -> Dict[str, Any]:
    return {"stroke": PURPLE, "strokeWidth": 3, "strokeDasharray": "10,5"}


def gateway_link() -> Dict[str, Any]:
    return {"stroke": SILVER}


def subnet_link() -> Dict[str, Any]:
    return {"stroke": GREEN, "strokeWidth": 2}


def external_server() -> Dict[str, Any]:
    return {"stroke": BLUE, "strokeWidth": 2}


def external_detour() -> Dict[str, Any]:
    return {"stroke": PURPLE, "strokeWidth": 2, "strokeDasharray": "5, 5"}


def cdn() -> Dict[str, Any]:
    return {"stroke": ORANGE, "strokeWidth": 6, "strokeDasharray": "8,4"}


def cdn_loose() -> Dict[str, Any]:
    return {"stroke": GREY, "strokeWidth": 2, "strokeDasharray": "5,2,2,2"}
