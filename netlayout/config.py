"""Tunable constants of the layout engine.

The values set the proportions of the drawing. Changing them
rescales the drawing but never the shape of the sizing or placement policy.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ContainerSizing:
    """Sizing profile for one category of container (backbone group or network)."""

    # Size of an empty container
    base_width: float
    base_height: float

    # Room taken by one device in the packing grid
    width_per_device: float
    height_per_device: float

    # Vertical room reserved above and below the device grid
    vertical_margin: float

    # Growth applied when the container holds nested subnets
    nested_width_floor: float
    nested_height_factor: float
    nested_depth_increment: float
    nested_height_floor: float
    nested_height_per_level: float


@dataclass(frozen=True)
class LayoutConfig:
    """Constants for container sizing and node placement."""

    backbone_sizing: ContainerSizing = field(
        default_factory=lambda: ContainerSizing(
            base_width=300,
            base_height=250,
            width_per_device=130,
            height_per_device=140,
            vertical_margin=100,
            nested_width_floor=500,
            nested_height_factor=1.3,
            nested_depth_increment=0.2,
            nested_height_floor=350,
            nested_height_per_level=150,
        )
    )
    network_sizing: ContainerSizing = field(
        default_factory=lambda: ContainerSizing(
            base_width=400,
            base_height=400,
            width_per_device=180,
            height_per_device=100,
            vertical_margin=220,
            nested_width_floor=600,
            nested_height_factor=1.4,
            nested_depth_increment=0.3,
            nested_height_floor=600,
            nested_height_per_level=150,
        )
    )

    # Packing grid
    max_devices_per_row: int = 4
    min_devices_per_row: int = 2
    # Columns of slack added to every container width
    slack_columns: int = 2
    nested_width_multiplier: float = 1.2

    # Shrinking of nested subnets: factor = max(floor, 1 - level * step)
    level_width_step: float = 0.08
    level_width_floor: float = 0.85
    level_height_step: float = 0.05
    level_height_floor: float = 0.9

    # Internet nodes
    domestic_internet_x: float = 200
    international_internet_x: float = 600
    internet_y: float = 20
    internet_width: float = 300
    internet_height: float = 120

    # Backbone groups
    backbone_start_x: float = 50
    backbone_y: float = 280
    backbone_width_per_device: float = 120
    backbone_width_padding: float = 60
    backbone_spread: float = 900
    backbone_min_spacing: float = 40
    backbone_max_spacing: float = 80
    backbone_device_x: float = 25
    backbone_device_y: float = 100
    backbone_device_min_spacing: float = 150
    backbone_device_max_spacing: float = 200

    # Root private networks
    network_start_x: float = 50
    network_y: float = 560
    network_spread: float = 900
    network_min_spacing: float = 250
    network_max_spacing: float = 400

    # Inside a network container
    gateway_x: float = 30
    gateway_y: float = 30
    sub_gateway_spacing: float = 200
    device_row_y: float = 160
    device_row_offset: float = 180
    device_row_right_margin: float = 100
    subnet_margin: float = 50
    subnet_y: float = 280

    def sizing_for(self, is_backbone_group: bool) -> ContainerSizing:
        """Return the sizing profile for a backbone group or an ordinary network."""
        return self.backbone_sizing if is_backbone_group else self.network_sizing


# Default configuration instance
LAYOUT_CONFIG = LayoutConfig()
