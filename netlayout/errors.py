"""Terminal errors raised while loading a declaration or synthesizing a diagram.

Unresolvable references (a diversion target or interface type that matches no
node) are not errors; they are logged and the edge is omitted.
"""

from __future__ import annotations

from typing import Sequence


class DeclarationError(ValueError):
    """The declaration is structurally malformed and cannot be rendered."""


class TopologyCycleError(DeclarationError):
    """The inferred subnet parent/child relation contains a cycle.

    Attributes:
        cycle: Network names along the cycle, first element not repeated.
    """

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = list(cycle)
        path = " -> ".join(self.cycle + self.cycle[:1])
        super().__init__(
            f"Circular subnet nesting inferred from gateway interfaces:\n"
            f"  {path}\n\n"
            f"A network becomes a subnet of the network named by the first "
            f"interface type of its gateway. Rename or reorder the interfaces "
            f"so the nesting forms a tree."
        )


class DuplicateIdentifierError(ValueError):
    """Two nodes or two edges were given the same identifier during synthesis."""

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"Duplicate {kind} identifier '{identifier}' in diagram.")
