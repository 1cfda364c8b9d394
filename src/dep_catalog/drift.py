"""
Compare the coordinates a Gradle build file declares with a registry.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from .parsers import DeclaredDependency, parse_gradle_build
from .registry import DependencyRegistry


@dataclass(frozen=True)
class VersionMismatch:
    """A declared coordinate whose version differs from the registry."""

    name: str
    declared: str
    expected: str
    line_number: int


@dataclass
class DriftReport:
    """Differences between a build file and the registry."""

    file_path: str
    matched: List[str] = field(default_factory=list)
    mismatched: List[VersionMismatch] = field(default_factory=list)
    undeclared: List[str] = field(default_factory=list)
    unmanaged: List[str] = field(default_factory=list)

    @property
    def has_drift(self) -> bool:
        return bool(self.mismatched)

    def to_dict(self) -> Dict[str, object]:
        return {
            "file_path": self.file_path,
            "matched": self.matched,
            "mismatched": [
                {
                    "name": m.name,
                    "declared": m.declared,
                    "expected": m.expected,
                    "line_number": m.line_number,
                }
                for m in self.mismatched
            ],
            "undeclared": self.undeclared,
            "unmanaged": self.unmanaged,
            "has_drift": self.has_drift,
        }


def compare_declarations(
    registry: DependencyRegistry, declared: List[DeclaredDependency], file_path: str = ""
) -> DriftReport:
    """
    Match declarations to registry entries by group and artifact.

    ``unmanaged`` lists declared coordinates the registry does not know;
    ``undeclared`` lists registry identifiers the build file never uses.
    """
    by_module = {registry.coordinate(name).module: name for name in registry}
    report = DriftReport(file_path=file_path)
    used = set()

    for declaration in declared:
        name = by_module.get(declaration.coordinate.module)
        if name is None:
            report.unmanaged.append(str(declaration.coordinate))
            continue

        used.add(name)
        expected = registry.get(name)
        if str(declaration.coordinate) == expected:
            report.matched.append(name)
        else:
            report.mismatched.append(
                VersionMismatch(
                    name=name,
                    declared=str(declaration.coordinate),
                    expected=expected,
                    line_number=declaration.line_number,
                )
            )

    report.undeclared = [name for name in registry if name not in used]
    return report


def check_build_file(registry: DependencyRegistry, file_path: str) -> DriftReport:
    """Parse a build file and compare it with the registry."""
    return compare_declarations(registry, parse_gradle_build(file_path), file_path)
