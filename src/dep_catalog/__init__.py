"""Named dependency coordinates resolved against a version table."""

__version__ = "1.0.0"

from .coordinate import Coordinate, parse_coordinate
from .definitions import DEFAULT_DEFINITIONS, DependencyDefinition
from .error_handling import (
    CatalogError,
    ConfigurationError,
    CoordinateFormatError,
    InvalidVersionError,
    UnknownDependencyError,
    UnresolvedVersionError,
)
from .registry import DependencyRegistry, build_registry, get_registry, reset_registry
from .versions import VersionTable, default_version_table, load_version_table

__all__ = [
    "CatalogError",
    "ConfigurationError",
    "Coordinate",
    "CoordinateFormatError",
    "DEFAULT_DEFINITIONS",
    "DependencyDefinition",
    "DependencyRegistry",
    "InvalidVersionError",
    "UnknownDependencyError",
    "UnresolvedVersionError",
    "VersionTable",
    "build_registry",
    "default_version_table",
    "get_registry",
    "load_version_table",
    "parse_coordinate",
    "reset_registry",
]
