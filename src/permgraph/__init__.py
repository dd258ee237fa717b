"""Permission prerequisite graph and grant/revoke decisions.

Defines:
- DependencyGraph: immutable prerequisite DAG with validate/can_grant/can_deny
- filter_order(): project a permission set onto a topological order
- Permissions / DEFAULT_DEPENDENCIES: reference ruleset
- ResolverConfig: configuration and graph loading
"""

from .config import LogLevel, ResolverConfig, load_config_from_env
from .constants import Permissions
from .exceptions import (
    ConfigurationError,
    CycleError,
    ErrorRegistry,
    InvalidBasePermissionsError,
    PermissionGraphError,
    UnknownPermissionError,
    error_registry,
    register_error,
)
from .graph import DependencyGraph, filter_order
from .logging import (
    PermissionLoggerAdapter,
    ResolverFormatter,
    get_resolver_logger,
    safe_preview,
    setup_logging,
)
from .rulesets import DEFAULT_DEPENDENCIES, build_default_graph

__all__ = [
    "DEFAULT_DEPENDENCIES",
    "ConfigurationError",
    "CycleError",
    "DependencyGraph",
    "ErrorRegistry",
    "InvalidBasePermissionsError",
    "LogLevel",
    "PermissionGraphError",
    "PermissionLoggerAdapter",
    "Permissions",
    "ResolverConfig",
    "ResolverFormatter",
    "UnknownPermissionError",
    "build_default_graph",
    "error_registry",
    "filter_order",
    "get_resolver_logger",
    "load_config_from_env",
    "register_error",
    "safe_preview",
    "setup_logging",
]
