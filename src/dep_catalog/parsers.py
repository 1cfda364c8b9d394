import re
from pathlib import Path
from typing import List, Optional

from .coordinate import Coordinate
from .error_handling import ErrorCallback, ErrorCategory, get_error_handler

MAX_BUILD_FILE_BYTES = 5 * 1024 * 1024

DEPENDENCY_PATTERNS = [
    re.compile(
        r"(?P<configuration>implementation|api|compileOnly|runtimeOnly|testImplementation"
        r"|androidTestImplementation|debugImplementation|kapt|ksp)"
        r"\s*\(?\s*['\"](?P<coordinate>[^'\"]+)['\"]"
    ),
]

DEPENDENCIES_BLOCK = re.compile(r"dependencies\s*\{")


class DeclaredDependency:
    """A string coordinate found in a build file's dependencies block."""

    __slots__ = ("configuration", "coordinate", "line_number")

    def __init__(self, configuration: str, coordinate: Coordinate, line_number: int):
        self.configuration = configuration
        self.coordinate = coordinate
        self.line_number = line_number

    def __repr__(self) -> str:
        return (
            f"DeclaredDependency({self.configuration!r}, '{self.coordinate}', "
            f"line={self.line_number})"
        )


def _validate_build_file(file_path: str) -> Path:
    """
    Validate that a path names a readable Gradle build file.

    Raises:
        ValueError: If the path is missing, not a file, too large, or not a
            build.gradle / build.gradle.kts file
    """
    if not file_path or not isinstance(file_path, str):
        raise ValueError("File path must be a non-empty string")

    path = Path(file_path).resolve()
    if not path.exists():
        raise ValueError(f"File does not exist: {path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    if not (
        (path.name.endswith(".gradle") or path.name.endswith(".gradle.kts"))
        and "build" in path.name.lower()
    ):
        raise ValueError(
            "File must be a Gradle build file (containing 'build' and ending with '.gradle' or '.gradle.kts')"
        )

    if path.stat().st_size > MAX_BUILD_FILE_BYTES:
        raise ValueError(f"File too large: {path.stat().st_size} bytes")

    return path


def parse_gradle_build(
    file_path: str, error_callback: Optional[ErrorCallback] = None
) -> List[DeclaredDependency]:
    """
    Parses a Gradle build.gradle or build.gradle.kts file for string coordinates.

    Only literal ``group:artifact:version`` strings inside ``dependencies``
    blocks are reported. Declarations without a version, or built from
    variables, are skipped.

    Args:
        file_path: Path to the build file
        error_callback: Optional callback for handling parsing errors

    Returns:
        List[DeclaredDependency]: Declarations in file order

    Raises:
        ValueError: If the file cannot be read
    """
    error_handler = get_error_handler()
    validated_path = _validate_build_file(file_path)

    if error_callback:
        error_handler.register_callback(error_callback, ErrorCategory.PARSING)
    try:
        return _scan_dependencies(validated_path, error_handler)
    finally:
        if error_callback:
            error_handler.unregister_callback(error_callback, ErrorCategory.PARSING)


def _skip_declaration(error_handler, path: Path, line_number: int, reason: str) -> None:
    error_handler.warning(
        ErrorCategory.PARSING,
        reason,
        "parsers",
        "parse_gradle_build",
        details={"line_number": line_number, "file_path": path.name},
    )


def _scan_dependencies(validated_path: Path, error_handler) -> List[DeclaredDependency]:
    dependencies: List[DeclaredDependency] = []

    try:
        with open(validated_path, encoding="utf-8", errors="replace") as f:
            lines = f.read().splitlines()
    except OSError as e:
        error_handler.error(
            ErrorCategory.PARSING,
            f"Error reading Gradle build file: {e}",
            "parsers",
            "parse_gradle_build",
            exception=e,
            details={"file_path": validated_path.name},
        )
        raise ValueError(f"Error reading Gradle build file: {e}") from e

    depth = 0
    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()

        if not line or line.startswith("//") or line.startswith("/*") or line.startswith("*"):
            continue

        if depth == 0:
            opening = DEPENDENCIES_BLOCK.match(line)
            if not opening:
                continue
            # Declarations may share the line with the block opening
            body = line[opening.end():]
            depth = 1
        else:
            body = line

        for pattern in DEPENDENCY_PATTERNS:
            match = pattern.search(body)
            if not match:
                continue

            text = match.group("coordinate")
            parts = text.split(":")
            # Interpolated strings such as "${Versions.core}" have no literal version
            if len(parts) != 3 or not all(parts) or "$" in text:
                _skip_declaration(
                    error_handler, validated_path, line_number,
                    "Skipping declaration without a literal version",
                )
                break
            try:
                coordinate = Coordinate(*parts)
            except ValueError:
                _skip_declaration(
                    error_handler, validated_path, line_number,
                    f"Skipping malformed coordinate: {text}",
                )
                break
            dependencies.append(
                DeclaredDependency(match.group("configuration"), coordinate, line_number)
            )
            break

        depth += body.count("{") - body.count("}")
        depth = max(depth, 0)

    return dependencies
