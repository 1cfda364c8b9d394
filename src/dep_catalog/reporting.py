"""
Output formatting for registries and drift reports.

Provides machine-readable exports (JSON, Gradle version catalog TOML,
Gradle Kotlin DSL) and color-coded console output using Rich.
"""

import json
from typing import Dict, List, Optional

import toml
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .definitions import CONFIGURATIONS
from .drift import DriftReport
from .registry import DependencyRegistry
from .repository_clients import CoordinateCheckResult

EXPORT_FORMATS = ("json", "toml", "gradle")


class _InlineTable(dict, toml.decoder.InlineTableDict):
    """Dict rendered as a TOML inline table."""


def export_json(registry: DependencyRegistry) -> str:
    """Identifier to coordinate mapping as a JSON object."""
    return json.dumps(registry.as_dict(), indent=2, ensure_ascii=False)


def export_version_catalog(registry: DependencyRegistry) -> str:
    """Render the registry as a Gradle version catalog (libs.versions.toml)."""
    versions: Dict[str, str] = {}
    libraries: Dict[str, _InlineTable] = {}
    for name in registry:
        coordinate = registry.coordinate(name)
        versions[name] = coordinate.version
        libraries[name] = _InlineTable({"module": coordinate.module, "version.ref": name})

    return toml.dumps(
        {"versions": versions, "libraries": libraries},
        encoder=toml.TomlPreserveInlineDictEncoder(),
    )


def export_gradle(registry: DependencyRegistry) -> str:
    """Render a Kotlin DSL dependencies block, grouped by configuration."""
    lines = ["dependencies {"]
    for configuration in CONFIGURATIONS:
        for _, coordinate in registry.by_configuration(configuration):
            lines.append(f'    {configuration}("{coordinate}")')
    lines.append("}")
    return "\n".join(lines) + "\n"


def export_registry(registry: DependencyRegistry, output_format: str) -> str:
    """
    Export a registry in one of EXPORT_FORMATS.

    Raises:
        ValueError: If the format is unknown
    """
    exporters = {
        "json": export_json,
        "toml": export_version_catalog,
        "gradle": export_gradle,
    }
    exporter = exporters.get(output_format)
    if exporter is None:
        raise ValueError(
            f"Unsupported export format: {output_format} "
            f"(expected one of {', '.join(EXPORT_FORMATS)})"
        )
    return exporter(registry)


class CatalogReporter:
    """Formats and displays registry contents and check results."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_registry(self, registry: DependencyRegistry) -> None:
        """Print every registry entry in a table."""
        table = Table(
            title=f"📦 Dependency Registry ({registry.version_source})",
            box=box.ROUNDED,
            title_style="bold cyan",
        )
        table.add_column("Identifier", style="bold")
        table.add_column("Coordinate", style="green")
        table.add_column("Configuration", style="dim")

        for name in registry:
            table.add_row(
                name, registry.get(name), registry.definition(name).configuration
            )

        self.console.print(table)

    def print_drift_report(self, report: DriftReport) -> None:
        """Print build file drift grouped by kind."""
        self.console.print(
            Panel(
                f"🔍 Build file: {report.file_path}",
                title="[bold blue]Dependency Drift[/bold blue]",
                border_style="blue",
            )
        )

        if report.mismatched:
            table = Table(title="⚠️  Version Mismatches", box=box.ROUNDED)
            table.add_column("Identifier", style="bold")
            table.add_column("Line", justify="right")
            table.add_column("Declared", style="red")
            table.add_column("Expected", style="green")
            for mismatch in report.mismatched:
                table.add_row(
                    mismatch.name,
                    str(mismatch.line_number),
                    mismatch.declared,
                    mismatch.expected,
                )
            self.console.print(table)

        self._print_names("✅ Matching", report.matched, "green")
        self._print_names("ℹ️  Not declared in build file", report.undeclared, "yellow")
        self._print_names("ℹ️  Not managed by registry", report.unmanaged, "dim")

        if report.has_drift:
            self.console.print(
                f"❌ {len(report.mismatched)} coordinate(s) differ from the registry",
                style="bold red",
            )
        else:
            self.console.print("✅ No version drift found", style="bold green")

    def print_repository_results(self, results: List[CoordinateCheckResult]) -> None:
        """Print repository availability for each coordinate."""
        table = Table(title="🌐 Repository Verification", box=box.ROUNDED)
        table.add_column("Identifier", style="bold")
        table.add_column("Coordinate")
        table.add_column("Status", justify="center")
        table.add_column("Repository", style="dim")

        for result in results:
            if result.error:
                status = "[yellow]ERROR[/yellow]"
                where = result.error
            elif result.exists:
                status = "[green]FOUND[/green]"
                where = result.repository or ""
            else:
                status = "[bold red]MISSING[/bold red]"
                where = ""
            table.add_row(result.name, result.coordinate, status, where)

        self.console.print(table)

    def _print_names(self, title: str, names: List[str], style: str) -> None:
        if names:
            self.console.print(f"{title}: {', '.join(names)}", style=style)
