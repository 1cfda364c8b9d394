"""
Shared fixtures for dep-catalog tests.
"""

import json

import pytest

from dep_catalog.cli_config import reset_config
from dep_catalog.error_handling import setup_error_handling
from dep_catalog.registry import reset_registry


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run each test in an empty directory with no user config or overrides."""
    home = tmp_path / "home"
    home.mkdir()
    workdir = tmp_path / "work"
    workdir.mkdir()

    monkeypatch.setenv("HOME", str(home))
    for key in (
        "DEP_CATALOG_VERSIONS_FILE",
        "DEP_CATALOG_STRICT",
        "DEP_CATALOG_LOG_LEVEL",
        "DEP_CATALOG_TIMEOUT",
        "DEP_CATALOG_USER_AGENT",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(workdir)

    reset_config()
    reset_registry()
    setup_error_handling()
    yield workdir
    reset_config()
    reset_registry()


@pytest.fixture
def temp_dir(isolated_environment):
    """The working directory of the current test."""
    return isolated_environment


@pytest.fixture
def android_versions():
    return {
        "core-library": "1.10.1",
        "app-compat-library": "1.6.1",
        "material-library": "1.9.0",
        "constraint-layout-library": "2.1.4",
        "test-framework": "4.13.2",
        "test-framework-extension": "1.1.5",
        "ui-test-library": "3.5.1",
    }


@pytest.fixture
def versions_toml(temp_dir, android_versions):
    """A Gradle-style version catalog with a [versions] table."""
    lines = ["[versions]"]
    lines.extend(f'{name} = "{version}"' for name, version in android_versions.items())
    lines.append("")
    lines.append("[libraries]")
    lines.append('core-library = { module = "androidx.core:core-ktx" }')
    path = temp_dir / "libs.versions.toml"
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def versions_json(temp_dir, android_versions):
    path = temp_dir / "versions.json"
    path.write_text(json.dumps(android_versions, indent=2))
    return path


@pytest.fixture
def incomplete_versions_json(temp_dir, android_versions):
    """Version table lacking material-library."""
    versions = dict(android_versions)
    del versions["material-library"]
    path = temp_dir / "incomplete.json"
    path.write_text(json.dumps(versions))
    return path


@pytest.fixture
def sample_build_gradle_kts(temp_dir):
    """App module build file with one outdated and one unmanaged dependency."""
    content = """plugins {
    id("com.android.application")
}

dependencies {
    implementation("androidx.core:core-ktx:1.9.0")
    implementation("androidx.appcompat:appcompat:1.5.0")
    implementation("com.squareup.retrofit2:retrofit:2.9.0")
    testImplementation("junit:junit:${Versions.jUnit}")
    // implementation("androidx.constraintlayout:constraintlayout:2.0.0")
    androidTestImplementation("androidx.test.espresso:espresso-core:3.5.1")
}
"""
    path = temp_dir / "build.gradle.kts"
    path.write_text(content)
    return path
