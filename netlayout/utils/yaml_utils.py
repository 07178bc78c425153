"""Helpers for YAML parsing quirks."""

from typing import Any, Dict, TypeVar

V = TypeVar("V")


def normalize_yaml_dict_keys(data: Dict[Any, V]) -> Dict[str, V]:
    """Return ``data`` with every key converted to a string.

    YAML 1.1 turns keys such as ``yes``, ``no``, ``on`` or ``off`` into
    booleans and bare numbers into ints. Network names are always strings, so
    ``{True: ..., 10: ...}`` becomes ``{"True": ..., "10": ...}``.

    Args:
        data: Mapping loaded from YAML.

    Returns:
        New dictionary with string keys, in the original order.

    Examples:
        >>> normalize_yaml_dict_keys({True: "lan", 10: "dmz", "home": "wifi"})
        {'True': 'lan', '10': 'dmz', 'home': 'wifi'}
    """
    return {str(key): value for key, value in data.items()}
