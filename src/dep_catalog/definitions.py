# Coordinate definitions: which library each identifier names.
from dataclasses import dataclass
from typing import Tuple

from .coordinate import is_valid_component
from .error_handling import ConfigurationError

IMPLEMENTATION = "implementation"
TEST_IMPLEMENTATION = "testImplementation"
ANDROID_TEST_IMPLEMENTATION = "androidTestImplementation"

CONFIGURATIONS = (IMPLEMENTATION, TEST_IMPLEMENTATION, ANDROID_TEST_IMPLEMENTATION)


@dataclass(frozen=True)
class DependencyDefinition:
    """Group and artifact for an identifier; the version comes from the version table."""

    name: str
    group: str
    artifact: str
    configuration: str = IMPLEMENTATION

    def __post_init__(self):
        if not self.name:
            raise ConfigurationError("Dependency definition requires a name")
        for part in ("group", "artifact"):
            if not is_valid_component(getattr(self, part)):
                raise ConfigurationError(
                    f"Invalid {part} for '{self.name}': {getattr(self, part)!r}"
                )
        if self.configuration not in CONFIGURATIONS:
            raise ConfigurationError(
                f"Unknown configuration for '{self.name}': {self.configuration} "
                f"(expected one of {', '.join(CONFIGURATIONS)})"
            )


DEFAULT_DEFINITIONS: Tuple[DependencyDefinition, ...] = (
    DependencyDefinition("core-library", "androidx.core", "core-ktx"),
    DependencyDefinition("app-compat-library", "androidx.appcompat", "appcompat"),
    DependencyDefinition("material-library", "com.google.android.material", "material"),
    DependencyDefinition(
        "constraint-layout-library", "androidx.constraintlayout", "constraintlayout"
    ),
    DependencyDefinition("test-framework", "junit", "junit", TEST_IMPLEMENTATION),
    DependencyDefinition(
        "test-framework-extension", "androidx.test.ext", "junit", ANDROID_TEST_IMPLEMENTATION
    ),
    DependencyDefinition(
        "ui-test-library", "androidx.test.espresso", "espresso-core", ANDROID_TEST_IMPLEMENTATION
    ),
)
