import asyncio
import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from . import __version__
from .cli_config import (
    apply_config_data,
    ComprehensiveConfig,
    create_sample_config,
    get_config,
    load_config_file,
    validate_config_values,
)
from .drift import check_build_file
from .error_handling import CatalogError
from .registry import DependencyRegistry, build_registry, get_registry
from .reporting import EXPORT_FORMATS, CatalogReporter, export_registry
from .repository_clients import verify_registry
from .structured_logging import configure_logging
from .versions import resolve_version_table

console = Console()


def load_registry(versions_file: Optional[str] = None, strict: bool = False) -> DependencyRegistry:
    """Build the registry for a command, turning configuration defects into CLI errors."""
    config = get_config()
    strict = strict or config.catalog.strict
    try:
        if versions_file or strict != config.catalog.strict:
            return build_registry(
                resolve_version_table(versions_file or config.catalog.versions_file),
                strict=strict,
            )
        return get_registry()
    except CatalogError as e:
        raise click.ClickException(str(e))


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version information")
@click.option(
    "--versions",
    "versions_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Version table file (.toml or .json)",
)
@click.pass_context
def cli(ctx, version, versions_file):
    """
    📦 Dep-Catalog: named dependency coordinates for builds

    Resolves a fixed set of library identifiers against a version table
    and exposes them as group:artifact:version coordinates.
    """
    if version:
        console.print(f"Dep-Catalog version {__version__}", style="bold blue")
        ctx.exit()

    configure_logging(get_config().logging.log_level)
    ctx.ensure_object(dict)
    ctx.obj["versions_file"] = versions_file

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print the registry as JSON")
@click.pass_context
def show(ctx, as_json: bool):
    """Show every identifier and its coordinate."""
    registry = load_registry(ctx.obj["versions_file"])
    if as_json:
        click.echo(export_registry(registry, "json"))
    else:
        CatalogReporter(console).print_registry(registry)


@cli.command()
@click.argument("name")
@click.pass_context
def get(ctx, name: str):
    """Print the coordinate for NAME."""
    registry = load_registry(ctx.obj["versions_file"])
    try:
        click.echo(registry.get(name))
    except CatalogError as e:
        raise click.ClickException(str(e))


@cli.command()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(EXPORT_FORMATS),
    default="json",
    show_default=True,
    help="Export format",
)
@click.option("--output-file", "-o", type=click.Path(dir_okay=False), help="Write to file instead of stdout")
@click.pass_context
def export(ctx, output_format: str, output_file: Optional[str]):
    """Export the registry as JSON, a Gradle version catalog, or a Kotlin DSL block."""
    registry = load_registry(ctx.obj["versions_file"])
    content = export_registry(registry, output_format)

    if output_file:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(content)
        console.print(f"✅ Registry exported to {output_file}", style="green")
    else:
        click.echo(content, nl=False)


@cli.command()
@click.option("--strict", is_flag=True, help="Also reject unused version table entries")
@click.pass_context
def check(ctx, strict: bool):
    """Check that every identifier resolves against the version table."""
    registry = load_registry(ctx.obj["versions_file"], strict=strict)
    console.print(
        f"✅ {len(registry)} coordinates resolved from {registry.version_source}",
        style="green",
    )


@cli.command()
@click.argument("build_file", type=click.Path(exists=True, readable=True, dir_okay=False))
@click.option(
    "--output-format",
    type=click.Choice(["console", "json"]),
    default="console",
    show_default=True,
    help="Output format",
)
@click.option("--fail-on-drift", is_flag=True, help="Exit with code 1 when versions differ")
@click.pass_context
def drift(ctx, build_file: str, output_format: str, fail_on_drift: bool):
    """Compare the coordinates declared in BUILD_FILE with the registry."""
    registry = load_registry(ctx.obj["versions_file"])
    try:
        report = check_build_file(registry, build_file)
    except ValueError as e:
        raise click.ClickException(f"Failed to parse build file: {e}")

    if output_format == "json":
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        CatalogReporter(console).print_drift_report(report)

    if fail_on_drift and report.has_drift:
        ctx.exit(1)


@cli.command()
@click.option("--max-concurrent", type=click.IntRange(min=1), default=4, show_default=True, help="Parallel repository checks")
@click.option("--fail-on-missing", is_flag=True, help="Exit with code 1 when a coordinate is missing")
@click.pass_context
def verify(ctx, max_concurrent: int, fail_on_missing: bool):
    """Check that every coordinate is published in the configured repositories."""
    registry = load_registry(ctx.obj["versions_file"])
    results = asyncio.run(verify_registry(registry, max_concurrent=max_concurrent))
    CatalogReporter(console).print_repository_results(results)

    missing = [r for r in results if not r.exists and not r.error]
    if missing:
        console.print(f"❌ {len(missing)} coordinate(s) not found", style="bold red")
        if fail_on_missing:
            ctx.exit(1)


@cli.command()
def info():
    """Show information about configuration and usage."""
    info_text = """
[bold blue]📋 Version Table Files:[/bold blue]

• [green]versions.toml[/green] - flat table, or a Gradle catalog \\[versions] table
• [green]versions.json[/green] - JSON object of identifier to version

[bold blue]🌍 Environment Variables:[/bold blue]

• [cyan]DEP_CATALOG_VERSIONS_FILE[/cyan] - Version table to load
• [cyan]DEP_CATALOG_STRICT[/cyan] - Reject unused version table entries
• [cyan]DEP_CATALOG_LOG_LEVEL[/cyan] - Log level for structured logs
• [cyan]DEP_CATALOG_TIMEOUT[/cyan] - Repository request timeout

[bold blue]📄 Configuration Files:[/bold blue]

• [green].dep-catalog.json[/green] / [green].dep-catalog.toml[/green] - Project-level config
• [green]~/.config/dep-catalog/config.json[/green] - User-level config

[bold blue]💡 Usage Examples:[/bold blue]

  dep-catalog show
  dep-catalog get core-library
  dep-catalog --versions versions.toml check --strict
  dep-catalog export --format toml -o gradle/libs.versions.toml
  dep-catalog drift app/build.gradle.kts --fail-on-drift
  dep-catalog verify
"""
    console.print(
        Panel(
            info_text,
            title="[bold]Dep-Catalog Information[/bold]",
            border_style="blue",
        )
    )


@cli.group()
def config():
    """Configuration management commands."""
    pass


@config.command("init")
@click.option(
    "--path",
    type=click.Path(),
    default=".dep-catalog.json",
    help="Path where to create the config file",
    show_default=True,
)
@click.option("--force", is_flag=True, help="Overwrite existing config file")
def config_init(path: str, force: bool):
    """Create a sample configuration file."""
    config_path = Path(path)

    if config_path.exists() and not force:
        console.print(f"⚠️  Config file already exists at {config_path}", style="yellow")
        console.print("Use --force to overwrite", style="dim")
        return

    try:
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_sample_config())
    except OSError as e:
        raise click.ClickException(f"Failed to create config file: {e}")

    console.print(f"✅ Created configuration file at {config_path}", style="green")
    console.print("Edit this file to customize your settings", style="dim")


@config.command("show")
def config_show():
    """Show current configuration settings."""
    current_config = get_config()

    console.print(Panel("[bold blue]🔧 Configuration[/bold blue]", border_style="blue"))

    console.print("\n[bold cyan]📦 Catalog Settings:[/bold cyan]")
    console.print(f"  Versions File: {current_config.catalog.versions_file or '<packaged defaults>'}")
    console.print(f"  Strict: {current_config.catalog.strict}")

    console.print("\n[bold cyan]🌐 Network Settings:[/bold cyan]")
    for repository, url in current_config.network.repository_urls.items():
        console.print(f"  {repository}: {url}")
    console.print(f"  Timeout: {current_config.network.timeout_seconds}s")
    console.print(f"  Rate Limit: {current_config.network.rate_limit} req/s")
    console.print(f"  User Agent: {current_config.network.user_agent}")

    console.print("\n[bold cyan]📝 Logging Settings:[/bold cyan]")
    console.print(f"  Log Level: {current_config.logging.log_level}")


@config.command("validate")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
def config_validate(config_file: str):
    """Validate a configuration file."""
    config_data = load_config_file(Path(config_file))

    if config_data is None:
        raise click.ClickException(f"Could not load config from {config_file}")

    candidate = ComprehensiveConfig()
    apply_config_data(candidate, config_data)
    errors = validate_config_values(candidate)

    if errors:
        console.print("❌ Configuration validation failed:", style="red")
        for error in errors:
            console.print(f"  • {error}", style="red")
        raise click.ClickException("Configuration validation failed")

    console.print(f"✅ Configuration file {config_file} is valid", style="green")


if __name__ == "__main__":
    cli()
