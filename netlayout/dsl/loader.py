"""YAML loader and schema validation for network declarations.

Parses a YAML (or JSON) document, normalizes network names, validates the
declaration against the packaged JSON schema and returns the typed
:class:`~netlayout.model.declaration.Declaration` together with the parsed
override table.
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import jsonschema
import yaml

from netlayout.dsl.parser import split_document
from netlayout.errors import DeclarationError
from netlayout.layout.overrides import StructuralOverrides
from netlayout.logging import get_logger
from netlayout.model.declaration import Declaration
from netlayout.utils.yaml_utils import normalize_yaml_dict_keys

LOGGER = get_logger(__name__)

SCHEMA_PACKAGE = "netlayout.schemas"
SCHEMA_FILE = "declaration.json"


def _load_schema() -> Dict[str, Any]:
    with (
        resources.files(SCHEMA_PACKAGE).joinpath(SCHEMA_FILE).open("r", encoding="utf-8")
    ) as f:
        return json.load(f)


def _check_shape(declaration: Dict[str, Any]) -> None:
    """Early shape checks that give clearer messages than the schema."""
    public = declaration.get("public")
    if public is not None:
        if not isinstance(public, dict):
            raise DeclarationError("'public' must be a mapping")
        systems = public.get("autonomous_systems")
        if systems is not None and not isinstance(systems, list):
            raise DeclarationError("'autonomous_systems' must be a list")
        for entry in systems or []:
            if not isinstance(entry, dict) or "as_number" not in entry:
                raise DeclarationError(
                    "Each autonomous system must be a mapping with 'as_number'"
                )

    private = declaration.get("private")
    if private is not None:
        if not isinstance(private, dict):
            raise DeclarationError("'private' must be a mapping of network name to network")
        for name, network in private.items():
            if not isinstance(network, dict):
                raise DeclarationError(f"Private network '{name}' must be a mapping")
            if not isinstance(network.get("gateway"), dict):
                raise DeclarationError(
                    f"Private network '{name}' must define a 'gateway' mapping"
                )


def load_document(yaml_str: str) -> Tuple[Declaration, StructuralOverrides]:
    """Load, normalize and validate a declaration document.

    Args:
        yaml_str: YAML or JSON text. The declaration sits either at the top
            level or under ``network``; ``overrides`` is optional.

    Returns:
        ``(declaration, overrides)``.

    Raises:
        DeclarationError: If the document is malformed or fails validation.
    """
    try:
        data = yaml.safe_load(yaml_str)
    except yaml.YAMLError as exc:
        raise DeclarationError(f"Invalid YAML: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise DeclarationError("The provided YAML must map to a dictionary at top-level.")

    declaration_data, overrides_data = split_document(data)

    # Network names are keys; YAML may have turned some into bools or ints
    if isinstance(declaration_data.get("private"), dict):
        declaration_data["private"] = normalize_yaml_dict_keys(declaration_data["private"])

    _check_shape(declaration_data)

    try:
        jsonschema.validate(declaration_data, _load_schema())
    except jsonschema.ValidationError as exc:
        location = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise DeclarationError(
            f"Declaration does not match schema at '{location}': {exc.message}"
        ) from exc

    declaration = Declaration.from_dict(declaration_data)
    overrides = StructuralOverrides.from_dict(overrides_data)
    LOGGER.debug(
        "Loaded declaration: %d backbone group(s), %d private network(s)",
        len(declaration.backbone_groups),
        len(declaration.private),
    )
    return declaration, overrides


def load_declaration_yaml(yaml_str: str) -> Declaration:
    """Load a declaration, discarding any ``overrides`` section."""
    declaration, _overrides = load_document(yaml_str)
    return declaration


def load_document_file(path: Union[str, Path]) -> Tuple[Declaration, StructuralOverrides]:
    """Read ``path`` and load it with :func:`load_document`."""
    return load_document(Path(path).read_text(encoding="utf-8"))
