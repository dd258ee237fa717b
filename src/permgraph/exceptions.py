"""Exception hierarchy for permgraph.

All errors inherit from PermissionGraphError. This module provides:
- Base exception with stable error codes
- Graph construction errors (cycles, dangling prerequisites)
- Decision errors (unknown targets, inconsistent held sets)
- ErrorRegistry for mapping codes back to classes

Usage:
    from permgraph.exceptions import (
        CycleError,
        InvalidBasePermissionsError,
        UnknownPermissionError,
    )

    try:
        graph.can_grant(held, "edit")
    except InvalidBasePermissionsError as e:
        log.error("corrupt grant store: %s", e.message, extra=e.details)
        raise
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence, TypeVar, cast

__all__ = [
    # Base hierarchy
    "PermissionGraphError",
    "ConfigurationError",
    "CycleError",
    "UnknownPermissionError",
    "InvalidBasePermissionsError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]


# ---- Exception Hierarchy ----------------------------------------------------


class PermissionGraphError(Exception):
    """Base exception for permgraph.

    Attributes:
        code: Stable error code string (e.g. "CYCLE_ERROR").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(PermissionGraphError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class CycleError(PermissionGraphError):
    """The prerequisite mapping contains a dependency cycle.

    Attributes:
        permission: One permission that lies on the cycle.
        cycle: The cycle path, first element repeated at the end
               (e.g. ``("a", "b", "a")``).
    """

    code: str = "CYCLE_ERROR"
    message: str = "Permission dependencies contain a cycle"

    def __init__(self, permission: str, cycle: Sequence[str] = (), message: str | None = None) -> None:
        self.permission = permission
        self.cycle = tuple(cycle)
        if message is None:
            path = " -> ".join(self.cycle) if self.cycle else permission
            message = f"Dependency cycle detected at '{permission}': {path}"
        super().__init__(message, permission=permission, cycle=self.cycle)


class UnknownPermissionError(PermissionGraphError):
    """A referenced permission is not declared in the graph.

    Attributes:
        permission: The undeclared permission.
        referenced_by: The declared permission listing it as a prerequisite,
                       or None when the lookup came from a query.
    """

    code: str = "UNKNOWN_PERMISSION"
    message: str = "Unknown permission"

    def __init__(
        self,
        permission: str,
        referenced_by: Optional[str] = None,
        message: str | None = None,
    ) -> None:
        self.permission = permission
        self.referenced_by = referenced_by
        if message is None:
            if referenced_by is None:
                message = f"Unknown permission '{permission}'"
            else:
                message = f"Unknown permission '{permission}' required by '{referenced_by}'"
        super().__init__(message, permission=permission, referenced_by=referenced_by)


class InvalidBasePermissionsError(PermissionGraphError):
    """The held permission set is missing a prerequisite of a held permission.

    Signals that the caller's persisted grants are inconsistent; the graph
    never repairs them.

    Attributes:
        permission: The held permission whose prerequisite is missing.
        missing: The prerequisite that is not held.
    """

    code: str = "INVALID_BASE_PERMISSIONS"
    message: str = "Existing permissions violate prerequisite ordering"

    def __init__(self, permission: str, missing: str, message: str | None = None) -> None:
        self.permission = permission
        self.missing = missing
        if message is None:
            message = f"Held permission '{permission}' is missing prerequisite '{missing}'"
        super().__init__(message, permission=permission, missing=missing)


# ---- Error Registry ---------------------------------------------------------

_E = TypeVar("_E", bound=type[PermissionGraphError])


class ErrorRegistry:
    """Registry for mapping error codes to exception classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[PermissionGraphError]] = {}

    def register(self, code: str, error_cls: type[PermissionGraphError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[PermissionGraphError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[PermissionGraphError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("STALE_GRANT")
        class StaleGrantError(PermissionGraphError):
            code = "STALE_GRANT"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", PermissionGraphError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("CYCLE_ERROR", CycleError)
error_registry.register("UNKNOWN_PERMISSION", UnknownPermissionError)
error_registry.register("INVALID_BASE_PERMISSIONS", InvalidBasePermissionsError)
