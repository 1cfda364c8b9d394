"""
Version table: the mapping from dependency identifier to version string.

The table is immutable once built. It is normally loaded from the packaged
defaults, or from an external TOML/JSON file.
"""

import json
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Union

import toml

from .coordinate import is_valid_component
from .error_handling import ConfigurationError, ErrorCategory, InvalidVersionError, get_error_handler

DEFAULT_VERSIONS: Mapping[str, str] = MappingProxyType(
    {
        "core-library": "1.9.0",
        "app-compat-library": "1.6.1",
        "material-library": "1.8.0",
        "constraint-layout-library": "2.1.4",
        "test-framework": "4.13.2",
        "test-framework-extension": "1.1.5",
        "ui-test-library": "3.5.1",
    }
)

SUPPORTED_SUFFIXES = (".toml", ".json")


class VersionTable(Mapping[str, str]):
    """Read-only mapping from identifier to version string."""

    def __init__(self, versions: Mapping[str, str], source: str = "<memory>"):
        checked: Dict[str, str] = {}
        for identifier, version in versions.items():
            if not isinstance(identifier, str) or not identifier:
                raise ConfigurationError(
                    f"Version table keys must be non-empty strings, got {identifier!r}"
                )
            if not is_valid_component(version):
                raise InvalidVersionError(identifier, version)
            checked[identifier] = version

        self._versions = MappingProxyType(checked)
        self.source = source

    def __getitem__(self, identifier: str) -> str:
        return self._versions[identifier]

    def __iter__(self) -> Iterator[str]:
        return iter(self._versions)

    def __len__(self) -> int:
        return len(self._versions)

    def __repr__(self) -> str:
        return f"VersionTable({dict(self._versions)!r}, source={self.source!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self._versions) == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]


def default_version_table() -> VersionTable:
    """The version table shipped with the package."""
    return VersionTable(DEFAULT_VERSIONS, source="<defaults>")


def _extract_versions(data: object, path: Path) -> Mapping[str, str]:
    if not isinstance(data, dict):
        raise ConfigurationError(f"Versions file {path.name} must contain a table")

    # Gradle version catalogs keep versions under [versions]
    if isinstance(data.get("versions"), dict):
        return data["versions"]

    nested = [key for key, value in data.items() if isinstance(value, dict)]
    if nested:
        raise ConfigurationError(
            f"Versions file {path.name} has unexpected tables: {', '.join(nested)}"
        )
    return data


def load_version_table(path: Union[str, Path]) -> VersionTable:
    """
    Load a version table from a TOML or JSON file.

    Args:
        path: Path to the versions file

    Returns:
        VersionTable: Table whose source is the file path

    Raises:
        ConfigurationError: If the file is missing, unreadable or malformed
    """
    file_path = Path(path)
    if file_path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise ConfigurationError(
            f"Unsupported versions file type: {file_path.suffix or file_path.name} "
            f"(expected one of {', '.join(SUPPORTED_SUFFIXES)})"
        )
    if not file_path.is_file():
        raise ConfigurationError(f"Versions file does not exist: {file_path}")

    try:
        with open(file_path, encoding="utf-8") as f:
            if file_path.suffix.lower() == ".toml":
                data = toml.load(f)
            else:
                data = json.load(f)
    except (OSError, ValueError, toml.TomlDecodeError) as e:
        get_error_handler().error(
            ErrorCategory.CONFIGURATION,
            f"Error reading versions file: {e}",
            "versions",
            "load_version_table",
            exception=e,
            details={"file_path": file_path.name},
        )
        raise ConfigurationError(f"Error reading versions file {file_path.name}: {e}") from e

    return VersionTable(_extract_versions(data, file_path), source=str(file_path))


def resolve_version_table(path: Optional[Union[str, Path]] = None) -> VersionTable:
    """Load from path when given, otherwise return the packaged defaults."""
    if path:
        return load_version_table(path)
    return default_version_table()
