"""Permission dependency graph and grant/revoke decisions.

Provides:
- ``DependencyGraph``: immutable prerequisite DAG with a deterministic
  topological order and the ``validate`` / ``can_grant`` / ``can_deny``
  decisions built on it.
- ``filter_order()``: project an arbitrary permission set onto an order.

Example::

    graph = DependencyGraph({
        "view": [],
        "edit": ["view"],
        "alter_tags": ["edit"],
        "create": ["view"],
        "delete": ["edit"],
    })
    graph.can_grant(["view"], "edit")          # True
    graph.can_grant(["view"], "alter_tags")    # False, edit not held
    graph.can_deny(["view", "edit"], "view")   # False, edit needs view
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from .exceptions import CycleError, InvalidBasePermissionsError, UnknownPermissionError
from .logging import safe_preview

logger = logging.getLogger(__name__)

# Traversal marks
_UNVISITED = 0
_IN_PROGRESS = 1
_DONE = 2


def filter_order(order: Iterable[str], subset: Iterable[str]) -> tuple[str, ...]:
    """Return the elements of ``order`` that are members of ``subset``.

    Relative order of ``order`` is preserved and nothing outside ``order``
    is introduced, so duplicates in ``subset`` collapse and members that
    ``order`` does not contain are dropped.

    Example::

        >>> filter_order(("view", "create", "edit"), ["edit", "view", "edit"])
        ('view', 'edit')
    """
    wanted = set(subset)
    return tuple(perm for perm in order if perm in wanted)


def _canonicalize(dependencies: Mapping[str, Iterable[str]]) -> dict[str, tuple[str, ...]]:
    canonical: dict[str, tuple[str, ...]] = {}
    for perm in sorted(dependencies):
        prereqs = dependencies[perm]
        if isinstance(prereqs, str):
            raise TypeError(
                f"Prerequisites of '{perm}' must be a collection of permissions, got string {prereqs!r}"
            )
        canonical[perm] = tuple(sorted(set(prereqs)))
    return canonical


def _check_closed(dependencies: Mapping[str, tuple[str, ...]]) -> None:
    for perm in sorted(dependencies):
        for prereq in dependencies[perm]:
            if prereq not in dependencies:
                raise UnknownPermissionError(prereq, referenced_by=perm)


def _topological_sort(dependencies: Mapping[str, tuple[str, ...]]) -> tuple[str, ...]:
    """Depth-first post-order over ``dependencies``.

    Roots and children are visited lexicographically, so permissions with
    no ordering constraint between them always come out in the same order.
    Iterative, so long prerequisite chains do not hit the recursion limit.

    Raises:
        CycleError: A permission was reached again while still in progress.
    """
    state: dict[str, int] = {}
    order: list[str] = []

    for root in sorted(dependencies):
        if state.get(root, _UNVISITED) == _DONE:
            continue

        state[root] = _IN_PROGRESS
        path = [root]
        children = [iter(dependencies[root])]

        while children:
            child = next(children[-1], None)
            if child is None:
                node = path.pop()
                children.pop()
                state[node] = _DONE
                order.append(node)
                continue

            mark = state.get(child, _UNVISITED)
            if mark == _DONE:
                continue
            if mark == _IN_PROGRESS:
                start = path.index(child)
                raise CycleError(child, cycle=path[start:] + [child])

            state[child] = _IN_PROGRESS
            path.append(child)
            children.append(iter(dependencies[child]))

    return tuple(order)


class DependencyGraph:
    """Immutable graph of permission prerequisites.

    Built once from a complete mapping of permission → direct prerequisites.
    Prerequisite lists are deduplicated and sorted, and the topological
    order is computed during construction, so an instance is read-only and
    safe to share between threads.

    Args:
        dependencies: Mapping of every declared permission to the
            permissions it directly requires.

    Raises:
        UnknownPermissionError: A prerequisite is not itself declared.
        CycleError: The mapping contains a dependency cycle.
    """

    __slots__ = ("_dependencies", "_dependents", "_order")

    def __init__(self, dependencies: Mapping[str, Iterable[str]]) -> None:
        canonical = _canonicalize(dependencies)
        _check_closed(canonical)
        order = _topological_sort(canonical)

        dependents: dict[str, list[str]] = {perm: [] for perm in canonical}
        for perm, prereqs in canonical.items():
            for prereq in prereqs:
                dependents[prereq].append(perm)

        self._dependencies: Mapping[str, tuple[str, ...]] = MappingProxyType(canonical)
        self._dependents: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {perm: tuple(children) for perm, children in dependents.items()}
        )
        self._order = order

        logger.debug("Built dependency graph with %d permissions", len(order))

    # ── Structure ───────────────────────────────────────

    @property
    def dependencies(self) -> Mapping[str, tuple[str, ...]]:
        """Read-only view of the canonical prerequisite lists."""
        return self._dependencies

    def topological_order(self) -> tuple[str, ...]:
        """Every permission, each one after all of its transitive prerequisites."""
        return self._order

    def prerequisites(self, permission: str) -> tuple[str, ...]:
        """Direct prerequisites of ``permission``, sorted."""
        self._require_known(permission)
        return self._dependencies[permission]

    def dependents(self, permission: str) -> tuple[str, ...]:
        """Permissions that list ``permission`` as a direct prerequisite, sorted."""
        self._require_known(permission)
        return self._dependents[permission]

    def expand(self, permissions: Iterable[str]) -> tuple[str, ...]:
        """Resolve the transitive prerequisite closure of ``permissions``.

        The result includes the given permissions themselves and is in
        topological order, i.e. a valid order in which to grant them.

        Example::

            >>> graph.expand(["alter_tags"])
            ('view', 'edit', 'alter_tags')

        Raises:
            UnknownPermissionError: A permission is not declared.
        """
        expanded: set[str] = set()
        queue = list(permissions)
        for perm in queue:
            self._require_known(perm)

        while queue:
            perm = queue.pop()
            if perm in expanded:
                continue
            expanded.add(perm)
            queue.extend(self._dependencies[perm])

        return filter_order(self._order, expanded)

    # ── Ordering & validation ───────────────────────────

    def sort(self, permissions: Iterable[str]) -> tuple[str, ...]:
        """Reorder ``permissions`` to follow the topological order.

        Duplicates collapse. Permissions the graph does not declare are
        dropped with a warning.

        Raises:
            TypeError: ``permissions`` is a bare string.
        """
        if isinstance(permissions, str):
            raise TypeError(f"Held permissions must be a collection of permissions, got string {permissions!r}")
        held = set(permissions)
        unknown = held.difference(self._dependencies)
        if unknown:
            logger.warning(
                "Ignoring %d undeclared permission(s): %s",
                len(unknown),
                safe_preview(sorted(unknown)),
            )
        return filter_order(self._order, held)

    def validate(self, existing: Iterable[str]) -> tuple[str, ...]:
        """Check that every held permission has its prerequisites held.

        Each permission's direct prerequisites must appear before it in the
        sorted held set.

        Returns:
            The held set in canonical (topologically sorted) form.

        Raises:
            InvalidBasePermissionsError: A held permission is missing a
                prerequisite.
        """
        ordered = self.sort(existing)
        seen: set[str] = set()
        for perm in ordered:
            for prereq in self._dependencies[perm]:
                if prereq not in seen:
                    raise InvalidBasePermissionsError(perm, prereq)
            seen.add(perm)
        return ordered

    # ── Decisions ───────────────────────────────────────

    def missing_prerequisites(self, existing: Iterable[str], target: str) -> tuple[str, ...]:
        """Direct prerequisites of ``target`` that are not held."""
        self._require_known(target)
        held = set(self.validate(existing))
        return tuple(prereq for prereq in self._dependencies[target] if prereq not in held)

    def can_grant(self, existing: Iterable[str], target: str) -> bool:
        """Whether ``target`` may be granted on top of ``existing``.

        Only direct prerequisites are checked; validation of ``existing``
        already guarantees the transitive ones.

        Raises:
            UnknownPermissionError: ``target`` is not declared.
            InvalidBasePermissionsError: ``existing`` is inconsistent.
        """
        missing = self.missing_prerequisites(existing, target)
        if missing:
            logger.debug("Grant of '%s' refused, missing %s", target, safe_preview(list(missing)))
            return False
        return True

    def blocking_dependents(self, existing: Iterable[str], target: str) -> tuple[str, ...]:
        """Held permissions that directly require ``target``, in topological order."""
        self._require_known(target)
        return tuple(perm for perm in self.validate(existing) if target in self._dependencies[perm])

    def can_deny(self, existing: Iterable[str], target: str) -> bool:
        """Whether ``target`` may be revoked from ``existing``.

        Revoking is refused while a held permission directly requires
        ``target``. Permissions that are not held never block.

        Raises:
            UnknownPermissionError: ``target`` is not declared.
            InvalidBasePermissionsError: ``existing`` is inconsistent.
        """
        blocking = self.blocking_dependents(existing, target)
        if blocking:
            logger.debug("Revoke of '%s' refused, required by %s", target, safe_preview(list(blocking)))
            return False
        return True

    # ── Helpers ─────────────────────────────────────────

    def _require_known(self, permission: str) -> None:
        if permission not in self._dependencies:
            raise UnknownPermissionError(permission)

    def __contains__(self, permission: object) -> bool:
        return permission in self._dependencies

    def __iter__(self) -> Iterator[str]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencyGraph):
            return NotImplemented
        return dict(self._dependencies) == dict(other._dependencies)

    def __hash__(self) -> int:
        return hash(tuple((perm, self._dependencies[perm]) for perm in self._order))

    def __repr__(self) -> str:
        return f"DependencyGraph(permissions={len(self._order)})"


__all__ = [
    "DependencyGraph",
    "filter_order",
]
