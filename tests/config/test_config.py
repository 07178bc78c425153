"""Tests for layout configuration defaults."""

import dataclasses

import pytest

from netlayout.config import LAYOUT_CONFIG, ContainerSizing, LayoutConfig


def test_default_instance_matches_fresh_config() -> None:
    assert LAYOUT_CONFIG == LayoutConfig()


def test_sizing_for_selects_profile() -> None:
    config = LayoutConfig()
    assert config.sizing_for(True) is config.backbone_sizing
    assert config.sizing_for(False) is config.network_sizing
    assert config.backbone_sizing.base_width == 300
    assert config.network_sizing.base_height == 400


def test_packing_grid_defaults() -> None:
    assert LAYOUT_CONFIG.max_devices_per_row == 4
    assert LAYOUT_CONFIG.min_devices_per_row == 2
    assert LAYOUT_CONFIG.slack_columns == 2


def test_config_is_frozen() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        LAYOUT_CONFIG.network_y = 0  # type: ignore[misc]


def test_custom_profile_does_not_touch_default() -> None:
    small = ContainerSizing(
        base_width=100,
        base_height=100,
        width_per_device=50,
        height_per_device=50,
        vertical_margin=10,
        nested_width_floor=200,
        nested_height_factor=1.0,
        nested_depth_increment=0.0,
        nested_height_floor=100,
        nested_height_per_level=50,
    )
    config = dataclasses.replace(LAYOUT_CONFIG, network_sizing=small)
    assert config.sizing_for(False).base_width == 100
    assert LAYOUT_CONFIG.sizing_for(False).base_width == 400
