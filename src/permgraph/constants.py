"""Permission constants for the reference document-access ruleset.

Provides:
- ``Permissions``: permission identifiers used by :data:`DEFAULT_DEPENDENCIES`.
"""

from __future__ import annotations


class Permissions:
    """Canonical permission identifiers for the reference ruleset.

    Identifiers are plain, case-sensitive strings. Services with their own
    ruleset declare their own identifiers and pass them to
    :class:`~permgraph.graph.DependencyGraph` directly::

        DependencyGraph({"report:read": [], "report:export": ["report:read"]})
    """

    VIEW = "view"
    EDIT = "edit"
    ALTER_TAGS = "alter_tags"
    CREATE = "create"
    DELETE = "delete"

    ALL = frozenset({"view", "edit", "alter_tags", "create", "delete"})


__all__ = [
    "Permissions",
]
