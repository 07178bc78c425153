"""Maximum nesting depth of a subnet tree."""

from __future__ import annotations

from typing import Mapping, Sequence, Tuple

from netlayout.errors import TopologyCycleError


def max_depth(
    name: str,
    children_of: Mapping[str, Sequence[str]],
    _path: Tuple[str, ...] = (),
) -> int:
    """Return how many subnet levels hang below ``name``.

    A network without children has depth 0; otherwise the depth is one more
    than the deepest child.

    Args:
        name: Network name.
        children_of: Network name -> ordered child network names.

    Returns:
        Depth of the subtree rooted at ``name``.

    Raises:
        TopologyCycleError: If ``name`` is reachable from itself.
    """
    if name in _path:
        raise TopologyCycleError(_path[_path.index(name) :])
    children = children_of.get(name) or ()
    if not children:
        return 0
    path = _path + (name,)
    return 1 + max(max_depth(child, children_of, path) for child in children)
