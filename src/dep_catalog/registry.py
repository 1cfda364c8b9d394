"""
Dependency coordinate registry.

Maps each identifier to its formatted ``group:artifact:version`` coordinate.
Versions are resolved eagerly from a version table when the registry is
constructed; a registry that exists is complete and never changes.
"""

from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .cli_config import get_config
from .coordinate import Coordinate
from .definitions import DEFAULT_DEFINITIONS, DependencyDefinition
from .error_handling import (
    ConfigurationError,
    UnknownDependencyError,
    UnresolvedVersionError,
    log_configuration_error,
)
from .structured_logging import log_registry_built, log_unresolved_versions
from .versions import VersionTable, default_version_table, resolve_version_table


class DependencyRegistry:
    """Immutable mapping from identifier to formatted coordinate string."""

    __slots__ = ("_definitions", "_coordinates", "_entries", "version_source")

    def __init__(
        self,
        version_table: Mapping[str, str],
        definitions: Iterable[DependencyDefinition] = DEFAULT_DEFINITIONS,
        strict: bool = False,
    ):
        """
        Build the registry, resolving every version up front.

        Args:
            version_table: Identifier to version mapping
            definitions: Group/artifact definitions, one per identifier
            strict: Also reject version table entries no definition uses

        Raises:
            UnresolvedVersionError: If any definition has no version table entry
            InvalidVersionError: If a version table entry is not a usable version
            ConfigurationError: On duplicate definitions, or unused entries in
                strict mode
        """
        if not isinstance(version_table, VersionTable):
            version_table = VersionTable(version_table)
        definitions = tuple(definitions)
        source = version_table.source

        seen = set()
        duplicates = []
        for definition in definitions:
            if definition.name in seen:
                duplicates.append(definition.name)
            seen.add(definition.name)
        if duplicates:
            raise ConfigurationError(
                f"Duplicate dependency definitions: {', '.join(duplicates)}"
            )

        missing = [d.name for d in definitions if d.name not in version_table]
        if missing:
            log_unresolved_versions(missing, source)
            log_configuration_error(
                "Version table is missing entries",
                "registry",
                "DependencyRegistry.__init__",
                identifiers=missing,
                source=source,
            )
            raise UnresolvedVersionError(missing)

        if strict:
            unused = sorted(set(version_table) - seen)
            if unused:
                log_configuration_error(
                    "Version table has unused entries",
                    "registry",
                    "DependencyRegistry.__init__",
                    identifiers=unused,
                    source=source,
                )
                raise ConfigurationError(
                    f"Version table entries not used by any dependency: {', '.join(unused)}"
                )

        coordinates: Dict[str, Coordinate] = {}
        for definition in definitions:
            coordinates[definition.name] = Coordinate(
                definition.group, definition.artifact, version_table[definition.name]
            )

        self._definitions = MappingProxyType({d.name: d for d in definitions})
        self._coordinates = MappingProxyType(coordinates)
        self._entries = MappingProxyType(
            {name: str(coordinate) for name, coordinate in coordinates.items()}
        )
        self.version_source = source

        log_registry_built(len(self._entries), source)

    def get(self, name: str) -> str:
        """Return the ``group:artifact:version`` string for an identifier."""
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownDependencyError(name, self._entries) from None

    def coordinate(self, name: str) -> Coordinate:
        """Return the structured coordinate for an identifier."""
        try:
            return self._coordinates[name]
        except KeyError:
            raise UnknownDependencyError(name, self._entries) from None

    def definition(self, name: str) -> DependencyDefinition:
        try:
            return self._definitions[name]
        except KeyError:
            raise UnknownDependencyError(name, self._entries) from None

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def by_configuration(self, configuration: str) -> List[Tuple[str, str]]:
        """(identifier, coordinate) pairs attached with the given Gradle configuration."""
        return [
            (name, self._entries[name])
            for name, definition in self._definitions.items()
            if definition.configuration == configuration
        ]

    def as_dict(self) -> Dict[str, str]:
        return dict(self._entries)

    def to_mapping(self) -> Mapping[str, str]:
        return self._entries

    def __getitem__(self, name: str) -> str:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DependencyRegistry):
            return self._entries == other._entries
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(sorted(self._entries.items())))

    def __repr__(self) -> str:
        return f"DependencyRegistry({dict(self._entries)!r})"


def build_registry(
    version_table: Optional[Mapping[str, str]] = None,
    definitions: Optional[Iterable[DependencyDefinition]] = None,
    strict: bool = False,
) -> DependencyRegistry:
    """Build a registry, defaulting to the packaged version table and definitions."""
    if version_table is None:
        version_table = default_version_table()
    return DependencyRegistry(
        version_table,
        DEFAULT_DEFINITIONS if definitions is None else definitions,
        strict=strict,
    )


# Global registry instance
_global_registry: Optional[DependencyRegistry] = None


def get_registry() -> DependencyRegistry:
    """Get the process-wide registry built from the loaded configuration."""
    global _global_registry
    if _global_registry is None:
        config = get_config()
        _global_registry = build_registry(
            resolve_version_table(config.catalog.versions_file),
            strict=config.catalog.strict,
        )
    return _global_registry


def reset_registry() -> None:
    """Reset the global registry (useful for testing)."""
    global _global_registry
    _global_registry = None
