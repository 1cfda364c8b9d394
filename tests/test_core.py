"""
Core functionality tests for dep-catalog.
Tests coordinates, version tables and registry construction.
"""

import json
import re

import pytest

from dep_catalog.cli_config import (
    ComprehensiveConfig,
    get_config,
    load_environment_overrides,
    validate_config_values,
)
from dep_catalog.coordinate import Coordinate, parse_coordinate
from dep_catalog.definitions import (
    ANDROID_TEST_IMPLEMENTATION,
    DEFAULT_DEFINITIONS,
    IMPLEMENTATION,
    TEST_IMPLEMENTATION,
    DependencyDefinition,
)
from dep_catalog.error_handling import (
    ConfigurationError,
    CoordinateFormatError,
    ErrorCategory,
    InvalidVersionError,
    UnknownDependencyError,
    UnresolvedVersionError,
    get_error_handler,
)
from dep_catalog.registry import DependencyRegistry, build_registry, get_registry
from dep_catalog.versions import (
    DEFAULT_VERSIONS,
    VersionTable,
    default_version_table,
    load_version_table,
)

COORDINATE_PATTERN = re.compile(r"^[^\s:]+:[^\s:]+:[^\s:]+$")


class TestCoordinate:
    """Test coordinate formatting and parsing."""

    def test_format(self):
        """Test coordinate string formatting."""
        coordinate = Coordinate("androidx.core", "core-ktx", "1.9.0")
        assert str(coordinate) == "androidx.core:core-ktx:1.9.0"
        assert coordinate.module == "androidx.core:core-ktx"

    def test_parse(self):
        """Test parsing a coordinate string."""
        coordinate = parse_coordinate("junit:junit:4.13.2")
        assert coordinate == Coordinate("junit", "junit", "4.13.2")

    @pytest.mark.parametrize(
        "text",
        [
            "androidx.core:core-ktx",
            "androidx.core:core-ktx:1.9.0:aar",
            "androidx.core::1.9.0",
            ":core-ktx:1.9.0",
            "androidx.core:core ktx:1.9.0",
            "",
        ],
    )
    def test_parse_rejects_malformed(self, text):
        """Test parsing malformed coordinate strings."""
        with pytest.raises(CoordinateFormatError):
            parse_coordinate(text)

    def test_empty_version_rejected(self):
        """Test that an empty version is rejected."""
        with pytest.raises(CoordinateFormatError):
            Coordinate("androidx.core", "core-ktx", "")

    def test_format_error_is_value_error(self):
        """Test that format errors are ValueErrors."""
        with pytest.raises(ValueError):
            parse_coordinate("not-a-coordinate")


class TestVersionTable:
    """Test version table construction and loading."""

    def test_default_table_covers_default_definitions(self):
        """Test that the packaged table has an entry per definition."""
        table = default_version_table()
        for definition in DEFAULT_DEFINITIONS:
            assert definition.name in table

    def test_table_is_read_only(self):
        """Test that version tables cannot be modified."""
        table = VersionTable({"core-library": "1.9.0"})
        with pytest.raises(TypeError):
            table["core-library"] = "2.0.0"  # type: ignore[index]

    def test_table_copies_input(self):
        """Test that later changes to the source mapping are not seen."""
        source = {"core-library": "1.9.0"}
        table = VersionTable(source)
        source["core-library"] = "2.0.0"
        assert table["core-library"] == "1.9.0"

    @pytest.mark.parametrize("version", ["", "1.0 beta", "1:0", 1.0, None])
    def test_invalid_versions_rejected(self, version):
        """Test rejection of unusable version values."""
        with pytest.raises(InvalidVersionError) as exc_info:
            VersionTable({"core-library": version})
        assert "core-library" in str(exc_info.value)

    def test_load_toml_version_catalog(self, versions_toml, android_versions):
        """Test loading a Gradle version catalog."""
        table = load_version_table(versions_toml)
        assert dict(table) == android_versions
        assert table.source == str(versions_toml)

    def test_load_flat_toml(self, temp_dir):
        """Test loading a flat TOML table."""
        path = temp_dir / "versions.toml"
        path.write_text('core-library = "1.9.0"\nmaterial-library = "1.8.0"\n')
        table = load_version_table(path)
        assert table == {"core-library": "1.9.0", "material-library": "1.8.0"}

    def test_load_json(self, versions_json, android_versions):
        """Test loading a JSON table."""
        assert dict(load_version_table(str(versions_json))) == android_versions

    def test_load_missing_file(self, temp_dir):
        """Test loading a file that does not exist."""
        with pytest.raises(ConfigurationError, match="does not exist"):
            load_version_table(temp_dir / "missing.toml")

    def test_load_unsupported_suffix(self, temp_dir):
        """Test loading a file with an unsupported extension."""
        path = temp_dir / "versions.yaml"
        path.write_text("core-library: 1.9.0\n")
        with pytest.raises(ConfigurationError, match="Unsupported"):
            load_version_table(path)

    def test_load_malformed_json(self, temp_dir):
        """Test loading invalid JSON."""
        path = temp_dir / "versions.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="versions.json"):
            load_version_table(path)

    def test_load_rejects_unexpected_tables(self, temp_dir):
        """Test rejection of nested tables other than [versions]."""
        path = temp_dir / "versions.toml"
        path.write_text('[plugins]\nandroid = "8.0.0"\n')
        with pytest.raises(ConfigurationError, match="plugins"):
            load_version_table(path)


class TestDefinitions:
    """Test coordinate definitions."""

    def test_default_definitions(self):
        """Test the packaged dependency definitions."""
        by_name = {d.name: d for d in DEFAULT_DEFINITIONS}
        assert len(by_name) == 7
        assert by_name["material-library"].group == "com.google.android.material"
        assert by_name["test-framework"].configuration == TEST_IMPLEMENTATION
        assert by_name["ui-test-library"].configuration == ANDROID_TEST_IMPLEMENTATION
        assert by_name["core-library"].configuration == IMPLEMENTATION

    def test_unknown_configuration_rejected(self):
        """Test rejection of an unknown Gradle configuration."""
        with pytest.raises(ConfigurationError, match="configuration"):
            DependencyDefinition("lib", "com.example", "lib", "kaptTest")

    def test_invalid_group_rejected(self):
        """Test rejection of an invalid group."""
        with pytest.raises(ConfigurationError):
            DependencyDefinition("lib", "com.example:bad", "lib")


class TestDependencyRegistry:
    """Test registry construction, lookup and failure modes."""

    def test_example_coordinate(self):
        """Test the core-library coordinate."""
        registry = DependencyRegistry(
            {"core-library": "1.9.0"},
            [DependencyDefinition("core-library", "androidx.core", "core-ktx")],
        )
        assert registry.get("core-library") == "androidx.core:core-ktx:1.9.0"

    def test_default_registry(self):
        """Test the registry built from packaged defaults."""
        registry = build_registry()
        assert registry.get("core-library") == "androidx.core:core-ktx:1.9.0"
        assert registry.get("material-library") == "com.google.android.material:material:1.8.0"
        assert registry.get("test-framework") == "junit:junit:4.13.2"
        assert registry.get("test-framework-extension") == "androidx.test.ext:junit:1.1.5"
        assert registry.get("ui-test-library") == "androidx.test.espresso:espresso-core:3.5.1"
        assert len(registry) == len(DEFAULT_DEFINITIONS)

    def test_every_entry_is_well_formed(self, android_versions):
        """Test that every entry has three components."""
        registry = build_registry(android_versions)
        for name in registry:
            value = registry.get(name)
            assert COORDINATE_PATTERN.match(value)
            assert value.rsplit(":", 1)[1] == android_versions[name]

    def test_repeated_lookups_are_equal(self):
        """Test that lookups are stable."""
        registry = build_registry()
        assert registry.get("app-compat-library") == registry.get("app-compat-library")
        assert registry["app-compat-library"] == registry.get("app-compat-library")

    def test_missing_version_names_identifier(self):
        """Test that a missing entry names the identifier."""
        versions = dict(DEFAULT_VERSIONS)
        del versions["material-library"]

        with pytest.raises(UnresolvedVersionError) as exc_info:
            build_registry(versions)

        assert exc_info.value.identifiers == ("material-library",)
        assert "material-library" in str(exc_info.value)
        assert isinstance(exc_info.value, ConfigurationError)

    def test_all_missing_identifiers_reported(self):
        """Test that every missing entry is reported at once."""
        with pytest.raises(UnresolvedVersionError) as exc_info:
            build_registry({"core-library": "1.9.0"})
        assert len(exc_info.value.identifiers) == len(DEFAULT_DEFINITIONS) - 1
        assert "core-library" not in exc_info.value.identifiers

    def test_unresolved_version_recorded_by_error_handler(self):
        """Test error handler callbacks and stats for missing entries."""
        captured = []
        get_error_handler().register_callback(captured.append, ErrorCategory.CONFIGURATION)

        with pytest.raises(UnresolvedVersionError):
            build_registry({})

        assert len(captured) == 1
        assert "ui-test-library" in captured[0].details["identifiers"]
        assert get_error_handler().get_error_stats()["CONFIGURATION_ERROR"] == 1

    def test_unknown_name(self):
        """Test lookup of an unknown identifier."""
        registry = build_registry()
        with pytest.raises(UnknownDependencyError, match="kotlin-stdlib") as exc_info:
            registry.get("kotlin-stdlib")
        assert isinstance(exc_info.value, KeyError)
        assert "core-library" in exc_info.value.known

    def test_strict_rejects_unused_entries(self):
        """Test strict mode with unused entries."""
        versions = dict(DEFAULT_VERSIONS, **{"kotlin-stdlib": "1.8.20"})

        assert "kotlin-stdlib" not in build_registry(versions)
        with pytest.raises(ConfigurationError, match="kotlin-stdlib"):
            build_registry(versions, strict=True)

    def test_duplicate_definitions_rejected(self):
        """Test rejection of duplicate definitions."""
        definitions = [
            DependencyDefinition("core-library", "androidx.core", "core-ktx"),
            DependencyDefinition("core-library", "androidx.core", "core"),
        ]
        with pytest.raises(ConfigurationError, match="Duplicate"):
            DependencyRegistry({"core-library": "1.9.0"}, definitions)

    def test_constructor_rejects_invalid_version(self):
        """Test that a malformed table entry is a configuration error, not a format error."""
        versions = dict(DEFAULT_VERSIONS, **{"core-library": "1.9.0 beta"})

        with pytest.raises(InvalidVersionError, match="core-library") as exc_info:
            DependencyRegistry(versions, DEFAULT_DEFINITIONS)
        assert isinstance(exc_info.value, ConfigurationError)
        assert not isinstance(exc_info.value, CoordinateFormatError)

    def test_registry_is_read_only(self):
        """Test that the registry cannot be modified."""
        registry = build_registry()
        with pytest.raises(TypeError):
            registry["core-library"] = "x:y:z"  # type: ignore[index]
        with pytest.raises(TypeError):
            registry.to_mapping()["core-library"] = "x:y:z"  # type: ignore[index]
        with pytest.raises(AttributeError):
            registry.extra = 1  # type: ignore[attr-defined]

    def test_as_dict_is_a_copy(self):
        """Test that as_dict returns an independent copy."""
        registry = build_registry()
        entries = registry.as_dict()
        entries["core-library"] = "tampered"
        assert registry.get("core-library") == "androidx.core:core-ktx:1.9.0"

    def test_by_configuration(self):
        """Test grouping by Gradle configuration."""
        registry = build_registry()
        test_entries = registry.by_configuration(TEST_IMPLEMENTATION)
        assert test_entries == [("test-framework", "junit:junit:4.13.2")]
        assert len(registry.by_configuration(ANDROID_TEST_IMPLEMENTATION)) == 2

    def test_equality_by_value(self, android_versions):
        """Test registry equality."""
        assert build_registry() == build_registry()
        assert build_registry() != build_registry(android_versions)

    def test_coordinate_lookup(self):
        """Test structured coordinate lookup."""
        coordinate = build_registry().coordinate("constraint-layout-library")
        assert coordinate.group == "androidx.constraintlayout"
        assert coordinate.version == "2.1.4"


class TestGlobalRegistry:
    """Test the configuration-driven process-wide registry."""

    def test_defaults(self):
        """Test the global registry with no configuration."""
        assert get_registry() is get_registry()
        assert get_registry().version_source == "<defaults>"

    def test_versions_file_from_environment(self, monkeypatch, versions_json):
        """Test DEP_CATALOG_VERSIONS_FILE."""
        monkeypatch.setenv("DEP_CATALOG_VERSIONS_FILE", str(versions_json))
        assert get_registry().get("core-library") == "androidx.core:core-ktx:1.10.1"

    def test_versions_file_from_config_file(self, temp_dir, versions_toml):
        """Test versions_file in a project config file."""
        (temp_dir / ".dep-catalog.json").write_text(
            '{"catalog": {"versions_file": "libs.versions.toml"}}'
        )
        assert get_registry().get("material-library").endswith(":1.9.0")

    def test_incomplete_table_fails(self, monkeypatch, incomplete_versions_json):
        """Test the global registry with an incomplete table."""
        monkeypatch.setenv("DEP_CATALOG_VERSIONS_FILE", str(incomplete_versions_json))
        with pytest.raises(UnresolvedVersionError, match="material-library"):
            get_registry()

    def test_quoted_strict_flag_does_not_enable_strict_mode(self, temp_dir, android_versions):
        """Test that a string strict value in a config file is rejected, not treated as true."""
        (temp_dir / "versions.json").write_text(json.dumps(dict(android_versions, extra="1.0")))
        (temp_dir / ".dep-catalog.json").write_text(
            json.dumps({"catalog": {"versions_file": "versions.json", "strict": "false"}})
        )

        assert get_config().catalog.strict is False
        assert len(get_registry()) == len(DEFAULT_DEFINITIONS)


class TestConfiguration:
    """Test configuration validation and environment overrides."""

    def test_non_boolean_strict_is_invalid(self):
        """Test validation of the catalog.strict type."""
        config = ComprehensiveConfig()
        config.catalog.strict = "false"

        assert validate_config_values(config) == ["catalog.strict must be a boolean"]

    def test_zero_timeout_from_environment_is_validated(self, monkeypatch):
        """Test that DEP_CATALOG_TIMEOUT=0 is applied and then reported."""
        monkeypatch.setenv("DEP_CATALOG_TIMEOUT", "0")
        config = ComprehensiveConfig()

        load_environment_overrides(config)

        assert config.network.timeout_seconds == 0
        assert "network.timeout_seconds must be positive" in validate_config_values(config)

    def test_zero_timeout_falls_back_to_default(self, monkeypatch):
        """Test that an invalid timeout override leaves the default in place."""
        monkeypatch.setenv("DEP_CATALOG_TIMEOUT", "0")

        assert get_config().network.timeout_seconds == 15.0
