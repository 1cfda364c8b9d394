"""
Configuration management for dep-catalog.

Provides configurable settings for the registry, repository checks and
logging, loaded from defaults, a config file and environment variables.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml
from rich.console import Console

from .structured_logging import log_config_loaded

console = Console(stderr=True)

ENV_PREFIX = "DEP_CATALOG_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class CatalogConfig:
    """Registry construction configuration."""

    versions_file: Optional[str] = None
    # Reject version table entries that no definition uses
    strict: bool = False


@dataclass
class NetworkConfig:
    """Maven repository configuration."""

    user_agent: str = "dep-catalog/1.0.0"
    repository_urls: Dict[str, str] = field(
        default_factory=lambda: {
            "google": "https://dl.google.com/dl/android/maven2",
            "central": "https://repo.maven.apache.org/maven2",
        }
    )
    timeout_seconds: float = 15.0
    rate_limit: float = 10.0


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = "WARNING"


@dataclass
class ComprehensiveConfig:
    """Main configuration containing all subsections."""

    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Global configuration instance
_global_config: Optional[ComprehensiveConfig] = None


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def validate_config_values(config: ComprehensiveConfig) -> List[str]:
    """
    Validate configuration values and return any errors.

    Args:
        config: Configuration to validate

    Returns:
        List[str]: List of validation errors (empty if valid)
    """
    errors = []

    if config.catalog.versions_file is not None:
        suffix = Path(str(config.catalog.versions_file)).suffix.lower()
        if suffix not in (".toml", ".json"):
            errors.append("catalog.versions_file must be a .toml or .json file")
    if not isinstance(config.catalog.strict, bool):
        errors.append("catalog.strict must be a boolean")

    if not _is_positive_number(config.network.timeout_seconds):
        errors.append("network.timeout_seconds must be positive")
    if not _is_positive_number(config.network.rate_limit):
        errors.append("network.rate_limit must be positive")
    if not isinstance(config.network.repository_urls, dict) or not config.network.repository_urls:
        errors.append("network.repository_urls must be a non-empty table")
    urls = config.network.repository_urls if isinstance(config.network.repository_urls, dict) else {}
    for name, url in urls.items():
        if not str(url).startswith(("http://", "https://")):
            errors.append(f"network.repository_urls.{name} must be an http(s) URL")

    if str(config.logging.log_level).upper() not in LOG_LEVELS:
        errors.append(f"logging.log_level must be one of {', '.join(LOG_LEVELS)}")

    return errors


def load_config_file(config_path: Path) -> Optional[Dict[str, Any]]:
    """Load config from file."""
    if not config_path.exists():
        return None

    try:
        with open(config_path, encoding="utf-8") as f:
            if config_path.suffix.lower() == ".toml":
                return toml.load(f)
            elif config_path.suffix.lower() == ".json":
                return json.load(f)
    except (OSError, ValueError) as e:
        console.print(f"⚠️  Error loading config from {config_path}: {e}", style="yellow")

    return None


def find_config_file() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [
        Path.cwd() / ".dep-catalog.json",
        Path.cwd() / ".dep-catalog.toml",
        Path.home() / ".config" / "dep-catalog" / "config.json",
        Path.home() / ".config" / "dep-catalog" / "config.toml",
    ]

    for location in locations:
        if location.exists():
            return location

    return None


def load_environment_overrides(config: ComprehensiveConfig) -> None:
    """Load environment variable overrides."""

    def get_env_bool(key: str, default: bool = False) -> bool:
        value = os.environ.get(key, "").lower()
        return value in ["true", "1", "yes", "on"] if value else default

    def get_env_float(key: str, default: Optional[float] = None) -> Optional[float]:
        try:
            return float(os.environ[key]) if key in os.environ else default
        except ValueError:
            console.print(f"⚠️  Invalid float value for {key}, using default", style="yellow")
            return default

    if versions_file := os.environ.get(f"{ENV_PREFIX}VERSIONS_FILE"):
        config.catalog.versions_file = versions_file
    config.catalog.strict = get_env_bool(f"{ENV_PREFIX}STRICT", config.catalog.strict)

    if log_level := os.environ.get(f"{ENV_PREFIX}LOG_LEVEL"):
        config.logging.log_level = log_level.upper()

    timeout = get_env_float(f"{ENV_PREFIX}TIMEOUT")
    if timeout is not None:
        config.network.timeout_seconds = timeout
    if user_agent := os.environ.get(f"{ENV_PREFIX}USER_AGENT"):
        config.network.user_agent = user_agent


def apply_config_section(
    config: Any, section_data: Dict[str, Any], section_name: str
) -> None:
    """Apply configuration from dictionary to config section."""
    for key, value in section_data.items():
        if hasattr(config, key):
            if isinstance(getattr(config, key), dict) and isinstance(value, dict):
                getattr(config, key).update(value)
            else:
                setattr(config, key, value)
        else:
            console.print(
                f"⚠️  Unknown config key in {section_name}: {key}", style="yellow"
            )


def apply_config_data(config: ComprehensiveConfig, file_config: Dict[str, Any]) -> None:
    """Apply every known section of a loaded config file."""
    for section in ("catalog", "network", "logging"):
        if isinstance(file_config.get(section), dict):
            apply_config_section(getattr(config, section), file_config[section], section)


def load_config(config_file: Optional[Path] = None) -> ComprehensiveConfig:
    """Load configuration from file and environment."""
    global _global_config

    config = ComprehensiveConfig()
    defaults = ComprehensiveConfig()

    config_file = config_file or find_config_file()
    if config_file:
        file_config = load_config_file(config_file)
        if file_config:
            apply_config_data(config, file_config)
            # Relative versions paths are relative to the config file
            versions_file = config.catalog.versions_file
            if isinstance(versions_file, str) and not Path(versions_file).is_absolute():
                config.catalog.versions_file = str(config_file.parent / versions_file)
    log_config_loaded(str(config_file) if config_file else None)

    load_environment_overrides(config)

    validation_errors = validate_config_values(config)
    if validation_errors:
        console.print("⚠️  Configuration validation errors:", style="red")
        for error in validation_errors:
            console.print(f"  • {error}", style="red")
        console.print("Using default values for invalid settings.", style="yellow")
        if any(e.startswith("catalog.") for e in validation_errors):
            config.catalog = defaults.catalog
        if any(e.startswith("network.") for e in validation_errors):
            config.network = defaults.network
        if any(e.startswith("logging.") for e in validation_errors):
            config.logging = defaults.logging

    _global_config = config
    return config


def get_config() -> ComprehensiveConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = load_config()
    return _global_config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _global_config
    _global_config = None


def create_sample_config() -> str:
    """Generate sample configuration."""
    defaults = ComprehensiveConfig()
    sample_config = {
        "catalog": {
            "versions_file": "versions.toml",
            "strict": defaults.catalog.strict,
        },
        "network": {
            "user_agent": defaults.network.user_agent,
            "repository_urls": defaults.network.repository_urls,
            "timeout_seconds": defaults.network.timeout_seconds,
            "rate_limit": defaults.network.rate_limit,
        },
        "logging": {
            "log_level": defaults.logging.log_level,
        },
    }

    return json.dumps(sample_config, indent=2)
