"""Configuration contract for services embedding permgraph.

This module provides Pydantic-validated configuration for logging and for
the prerequisite ruleset a service loads its DependencyGraph from.

The ruleset is supplied whole: either inline via ``dependencies`` or, from
the environment, as a JSON object in ``PERMISSION_DEPENDENCIES``. An empty
ruleset builds an empty graph, so every decision query raises
UnknownPermissionError until a ruleset is configured.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field, field_validator

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .graph import DependencyGraph


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _check_permission_id(value: str) -> str:
    if not value:
        raise ValueError("Permission identifiers must be non-empty")
    if value != value.strip():
        raise ValueError(f"Permission identifier {value!r} has surrounding whitespace")
    return value


class ResolverConfig(BaseModel):
    """Configuration for a service that resolves permission grants.

    The graph itself is validated (cycles, dangling prerequisites) when
    :meth:`build_graph` is called; this model only checks the shape of
    the identifiers.
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level for the service",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    # Service identification
    service_name: Optional[str] = Field(
        default=None,
        description="Service name used as the package logger name",
    )

    # Ruleset
    dependencies: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Permission → direct prerequisites. Empty = no permissions declared.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    @field_validator("dependencies")
    @classmethod
    def validate_dependencies(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        """Reject empty or padded permission identifiers."""
        for perm, prereqs in v.items():
            _check_permission_id(perm)
            for prereq in prereqs:
                _check_permission_id(prereq)
        return v

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",  # Prevent accidental extra fields
    }

    def build_graph(self) -> DependencyGraph:
        """Build the DependencyGraph this configuration describes.

        Raises:
            CycleError: The configured ruleset contains a cycle.
            UnknownPermissionError: A prerequisite is not declared.
        """
        from .graph import DependencyGraph

        return DependencyGraph(self.dependencies)


def load_config_from_env() -> ResolverConfig:
    """Load configuration from environment variables.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SERVICE_NAME: Service name
    - PERMISSION_DEPENDENCIES: JSON object of permission → prerequisite list

    Returns:
        ResolverConfig instance with values from environment or defaults.

    Raises:
        ConfigurationError: PERMISSION_DEPENDENCIES is not a JSON object.
    """
    import os

    raw = os.getenv("PERMISSION_DEPENDENCIES", "")
    dependencies: dict[str, list[str]] = {}
    if raw.strip():
        try:
            dependencies = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"PERMISSION_DEPENDENCIES is not valid JSON: {e}",
                variable="PERMISSION_DEPENDENCIES",
            ) from e
        if not isinstance(dependencies, dict):
            raise ConfigurationError(
                "PERMISSION_DEPENDENCIES must be a JSON object",
                variable="PERMISSION_DEPENDENCIES",
            )

    return ResolverConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
        service_name=os.getenv("SERVICE_NAME"),
        dependencies=dependencies,
    )


__all__ = [
    "LogLevel",
    "ResolverConfig",
    "load_config_from_env",
]
