"""Parsing helpers shared by the declaration loader and the override table."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

from netlayout.errors import DeclarationError

__all__ = [
    "check_no_extra_keys",
    "split_document",
]

# Top-level keys of a document that wraps the declaration
DOCUMENT_KEYS = {"network", "overrides"}


def check_no_extra_keys(
    data_dict: Mapping[str, Any], allowed: set[str], context: str
) -> None:
    """Raise if ``data_dict`` contains keys outside ``allowed``.

    Args:
        data_dict: The mapping to check.
        allowed: Set of recognized keys.
        context: Short description used in error messages.
    """
    extra_keys = set(data_dict.keys()) - allowed
    if extra_keys:
        raise DeclarationError(
            f"Unrecognized key(s) in {context}: {', '.join(sorted(map(str, extra_keys)))}. "
            f"Allowed keys are: {sorted(allowed)}"
        )


def split_document(
    data: Mapping[str, Any],
) -> Tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
    """Split a loaded document into ``(declaration, overrides)``.

    A document either nests the declaration under ``network`` or is the
    declaration itself; in both cases an ``overrides`` section may sit at the
    top level.
    """
    overrides = data.get("overrides")
    if overrides is not None and not isinstance(overrides, Mapping):
        raise DeclarationError("'overrides' must be a mapping.")
    if "network" in data:
        check_no_extra_keys(data, DOCUMENT_KEYS, "document")
        network = data.get("network") or {}
        if not isinstance(network, Mapping):
            raise DeclarationError("'network' must be a mapping.")
        declaration = dict(network)
    else:
        declaration = {k: v for k, v in data.items() if k != "overrides"}
    return declaration, (dict(overrides) if overrides is not None else None)
