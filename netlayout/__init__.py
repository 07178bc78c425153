"""netlayout: diagrams of declared network topologies.

A declaration lists backbone groups (autonomous systems), private networks
with their gateways and devices, and traffic diversions. netlayout infers the
subnet nesting from gateway interfaces, sizes every container from its
contents, places all nodes deterministically and emits typed edges, ready for
an interactive canvas.

Example:
    from netlayout import load_document, synthesize, to_xyflow

    declaration, overrides = load_document(yaml_text)
    diagram = synthesize(declaration, overrides=overrides)
    payload = diagram.to_dict()        # neutral form
    canvas = to_xyflow(diagram)        # xyflow / React Flow form
"""

from __future__ import annotations

from netlayout import cli, logging
from netlayout._version import __version__
from netlayout.config import LAYOUT_CONFIG, LayoutConfig
from netlayout.dsl.loader import load_declaration_yaml, load_document, load_document_file
from netlayout.errors import DeclarationError, DuplicateIdentifierError, TopologyCycleError
from netlayout.export.xyflow import to_xyflow
from netlayout.layout.overrides import StructuralOverrides
from netlayout.layout.sizing import container_size
from netlayout.layout.synthesizer import synthesize
from netlayout.layout.topology import resolve_topology
from netlayout.model.declaration import Declaration
from netlayout.model.diagram import Diagram, Edge, EdgeCategory, Node, NodeKind

__all__ = [
    # Version
    "__version__",
    # Model
    "Declaration",
    "Diagram",
    "Node",
    "Edge",
    "NodeKind",
    "EdgeCategory",
    # Loading
    "load_document",
    "load_document_file",
    "load_declaration_yaml",
    # Layout (primary API)
    "synthesize",
    "resolve_topology",
    "container_size",
    "StructuralOverrides",
    "LayoutConfig",
    "LAYOUT_CONFIG",
    # Export
    "to_xyflow",
    # Errors
    "DeclarationError",
    "TopologyCycleError",
    "DuplicateIdentifierError",
    # Utilities
    "cli",
    "logging",
]
