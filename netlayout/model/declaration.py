"""Immutable network declaration: backbone groups, private networks and their devices.

The declaration is parsed once from a plain mapping (usually loaded from YAML
by :mod:`netlayout.dsl.loader`). Unknown keys inside entities are ignored and
kept in ``raw`` so they reach the node metadata unchanged; missing required
keys raise :class:`~netlayout.errors.DeclarationError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

from netlayout.errors import DeclarationError

# Internet regions (interface types, backbone classification, diversion region)
DOMESTIC = "domestic"
INTERNATIONAL = "international"
REGIONS = (DOMESTIC, INTERNATIONAL)

# Diversion target categories
INNER_SERVER = "innerserver"
OUTER_SERVER = "outerserver"

# Diversion traffic categories; any other value is a plain diversion
TRAFFIC_EXTERNAL = "external"
TRAFFIC_CDN = "cdn"

Region = Literal["domestic", "international"]


def _require_mapping(value: Any, context: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise DeclarationError(f"{context} must be a mapping, got {type(value).__name__}.")
    return value


def _require_name(data: Mapping[str, Any], key: str, context: str) -> str:
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise DeclarationError(f"{context} is missing required field '{key}'.")
    return str(value)


def _optional_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    return None if value is None else str(value)


def _entity_list(data: Mapping[str, Any], key: str, context: str) -> List[Mapping[str, Any]]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DeclarationError(f"'{key}' in {context} must be a list.")
    return [
        _require_mapping(entry, f"Entry {i} of '{key}' in {context}")
        for i, entry in enumerate(value)
    ]


@dataclass(frozen=True)
class Interface:
    """A gateway interface. ``type`` is a region, a network name, or a device name."""

    name: str
    type: Optional[str] = None
    ip: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, context: str) -> Interface:
        data = _require_mapping(data, context)
        return cls(
            name=str(data.get("name", "")),
            type=_optional_str(data, "type"),
            ip=_optional_str(data, "ip"),
        )


@dataclass(frozen=True)
class Diversion:
    """A traffic-redirection rule attached to a device or gateway.

    Attributes:
        targets: Target names in declaration order.
        target_is_list: Whether the target was declared as a list.
        target_type: ``innerserver`` or ``outerserver``.
        traffic_type: ``external``, ``cdn`` or any other marker.
        internet_type: Optional region of the diverted traffic.
        label: Optional display label for the overlay edge.
    """

    targets: Tuple[str, ...]
    target_is_list: bool = False
    target_type: Optional[str] = None
    traffic_type: Optional[str] = None
    internet_type: Optional[str] = None
    label: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, context: str) -> Diversion:
        data = _require_mapping(data, context)
        if "target" not in data:
            raise DeclarationError(f"{context} is missing required field 'target'.")
        target = data["target"]
        if isinstance(target, list):
            if not target or not all(isinstance(t, str) and t for t in target):
                raise DeclarationError(
                    f"{context}: 'target' list must hold non-empty names."
                )
            targets = tuple(target)
            is_list = True
        elif isinstance(target, str) and target:
            targets = (target,)
            is_list = False
        else:
            raise DeclarationError(
                f"{context}: 'target' must be a name or a list of names."
            )
        return cls(
            targets=targets,
            target_is_list=is_list,
            target_type=_optional_str(data, "target_type"),
            traffic_type=_optional_str(data, "traffic_type"),
            internet_type=_optional_str(data, "internet_type"),
            label=_optional_str(data, "label"),
        )

    @property
    def first_target(self) -> str:
        return self.targets[0]

    @property
    def is_internal(self) -> bool:
        return self.target_type == INNER_SERVER

    @property
    def is_external_server(self) -> bool:
        return self.target_type == OUTER_SERVER

    @property
    def is_external_detour(self) -> bool:
        return self.traffic_type == TRAFFIC_EXTERNAL

    @property
    def is_cdn_fanout(self) -> bool:
        return self.traffic_type == TRAFFIC_CDN and self.target_is_list

    @property
    def region(self) -> str:
        """Internet region the diversion reaches; international unless domestic."""
        return DOMESTIC if self.internet_type == DOMESTIC else INTERNATIONAL

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "target": list(self.targets) if self.target_is_list else self.targets[0],
        }
        for key in ("target_type", "traffic_type", "internet_type", "label"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        return out


def _parse_diversion(data: Mapping[str, Any], context: str) -> Optional[Diversion]:
    raw = data.get("diversion")
    if raw is None:
        return None
    return Diversion.from_dict(raw, f"Diversion of {context}")


def _parse_interfaces(data: Mapping[str, Any], context: str) -> Tuple[Interface, ...]:
    return tuple(
        Interface.from_dict(entry, f"Interface {i} of {context}")
        for i, entry in enumerate(_entity_list(data, "interfaces", context))
    )


@dataclass(frozen=True)
class Device:
    """A device. One that declares ``interfaces`` is a sub-gateway."""

    name: str
    ip: Optional[str] = None
    interface: Optional[str] = None
    interfaces: Optional[Tuple[Interface, ...]] = None
    diversion: Optional[Diversion] = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], context: str) -> Device:
        name = _require_name(data, "name", context)
        context = f"device '{name}' in {context}"
        interfaces = (
            _parse_interfaces(data, context) if data.get("interfaces") is not None else None
        )
        return cls(
            name=name,
            ip=_optional_str(data, "ip"),
            interface=_optional_str(data, "interface"),
            interfaces=interfaces,
            diversion=_parse_diversion(data, context),
            raw=dict(data),
        )

    @property
    def is_sub_gateway(self) -> bool:
        return self.interfaces is not None


@dataclass(frozen=True)
class Gateway:
    """The gateway of a private network."""

    name: str
    ip: Optional[str] = None
    interfaces: Tuple[Interface, ...] = ()
    diversion: Optional[Diversion] = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Any, context: str) -> Gateway:
        data = _require_mapping(data, f"Gateway of {context}")
        name = _require_name(data, "name", f"Gateway of {context}")
        context = f"gateway '{name}' of {context}"
        return cls(
            name=name,
            ip=_optional_str(data, "ip"),
            interfaces=_parse_interfaces(data, context),
            diversion=_parse_diversion(data, context),
            raw=dict(data),
        )

    def region_interfaces(self) -> List[str]:
        """Regions reached through this gateway's interfaces, without repeats."""
        regions: List[str] = []
        for intf in self.interfaces:
            if intf.type in REGIONS and intf.type not in regions:
                regions.append(intf.type)
        return regions


@dataclass(frozen=True)
class BackboneGroup:
    """An autonomous-system-like group of publicly reachable devices."""

    as_number: str
    devices: Tuple[Device, ...] = ()
    network_type: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Any, context: str) -> BackboneGroup:
        data = _require_mapping(data, context)
        as_number = _require_name(data, "as_number", context)
        context = f"autonomous system '{as_number}'"
        return cls(
            as_number=as_number,
            devices=tuple(
                Device.from_dict(entry, context)
                for entry in _entity_list(data, "devices", context)
            ),
            network_type=_optional_str(data, "network_type"),
            raw=dict(data),
        )

    def region(self, index: int) -> str:
        """Declared region, or domestic for the first group and international after."""
        if self.network_type:
            return self.network_type
        return DOMESTIC if index == 0 else INTERNATIONAL


@dataclass(frozen=True)
class PrivateNetwork:
    """A LAN with one gateway and an ordered device list."""

    name: str
    gateway: Gateway
    devices: Tuple[Device, ...] = ()
    subnet: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, name: str, data: Any) -> PrivateNetwork:
        context = f"private network '{name}'"
        data = _require_mapping(data, context)
        if data.get("gateway") is None:
            raise DeclarationError(f"{context} is missing required field 'gateway'.")
        return cls(
            name=name,
            gateway=Gateway.from_dict(data["gateway"], context),
            devices=tuple(
                Device.from_dict(entry, context)
                for entry in _entity_list(data, "devices", context)
            ),
            subnet=_optional_str(data, "subnet"),
            raw=dict(data),
        )

    @property
    def device_slots(self) -> int:
        """Devices plus one slot for the gateway itself."""
        return len(self.devices) + 1


@dataclass(frozen=True)
class Declaration:
    """The whole declared topology.

    Attributes:
        backbone_groups: Backbone groups in declaration order.
        private: Private networks keyed by name, in declaration order.
    """

    backbone_groups: Tuple[BackboneGroup, ...] = ()
    private: Mapping[str, PrivateNetwork] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Declaration:
        """Build a declaration from ``{"public": {...}, "private": {...}}``.

        Raises:
            DeclarationError: If a required field is missing or has the wrong shape.
        """
        data = _require_mapping(data, "Declaration")
        public = data.get("public") or {}
        public = _require_mapping(public, "'public'")
        groups = tuple(
            BackboneGroup.from_dict(entry, f"Autonomous system {i}")
            for i, entry in enumerate(
                _entity_list(public, "autonomous_systems", "'public'")
            )
        )
        seen_groups = set()
        for group in groups:
            if group.as_number in seen_groups:
                raise DeclarationError(
                    f"Autonomous system '{group.as_number}' is declared twice."
                )
            seen_groups.add(group.as_number)
            _check_unique_names([d.name for d in group.devices], f"'{group.as_number}'")

        private_data = data.get("private") or {}
        private_data = _require_mapping(private_data, "'private'")
        private: Dict[str, PrivateNetwork] = {}
        for name, network_data in private_data.items():
            network = PrivateNetwork.from_dict(str(name), network_data)
            _check_unique_names(
                [network.gateway.name] + [d.name for d in network.devices],
                f"private network '{network.name}'",
            )
            private[network.name] = network
        return cls(backbone_groups=groups, private=private)

    @property
    def network_names(self) -> List[str]:
        return list(self.private.keys())


def _check_unique_names(names: List[str], scope: str) -> None:
    seen = set()
    duplicates = []
    for name in names:
        if name in seen and name not in duplicates:
            duplicates.append(name)
        seen.add(name)
    if duplicates:
        raise DeclarationError(
            f"Names must be unique within {scope}; duplicated: {', '.join(duplicates)}."
        )
