"""Reference prerequisite ruleset.

Provides:
- ``DEFAULT_DEPENDENCIES``: permission → direct prerequisites.
- ``build_default_graph()``: a :class:`DependencyGraph` over it.
"""

from __future__ import annotations

from .constants import Permissions
from .graph import DependencyGraph

# ── Prerequisites ───────────────────────────────────────
# A permission may only be held while its prerequisites are held.

DEFAULT_DEPENDENCIES: dict[str, tuple[str, ...]] = {
    Permissions.VIEW: (),
    Permissions.EDIT: (Permissions.VIEW,),
    Permissions.ALTER_TAGS: (Permissions.EDIT,),
    Permissions.CREATE: (Permissions.VIEW,),
    Permissions.DELETE: (Permissions.EDIT,),
}


def build_default_graph() -> DependencyGraph:
    """Build a graph over :data:`DEFAULT_DEPENDENCIES`.

    Example::

        >>> build_default_graph().topological_order()
        ('view', 'edit', 'alter_tags', 'create', 'delete')
    """
    return DependencyGraph(DEFAULT_DEPENDENCIES)


__all__ = [
    "DEFAULT_DEPENDENCIES",
    "build_default_graph",
]
