"""
Configuration management for dep-requires.

Settings come from dataclass defaults, then an optional config file
(JSON, YAML or TOML), then DEP_REQUIRES_* environment variables.
"""

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml
import yaml
from rich.console import Console

console = Console(stderr=True)

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_OUTPUT_FORMATS = ["console", "json"]


@dataclass
class ProbeConfig:
    """Version probing configuration."""

    timeout_seconds: Optional[float] = None  # None waits for the tool to exit
    merge_stderr: bool = True
    encoding: str = "utf-8"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = "WARNING"
    enable_json: bool = True


@dataclass
class OutputConfig:
    """Command-line output configuration."""

    output_format: str = "console"
    quiet: bool = False
    fail_on_missing: bool = True


@dataclass
class RequiresConfig:
    """Main configuration containing all subsections."""

    probe: ProbeConfig = field(default_factory=ProbeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Global configuration instance
_global_config: Optional[RequiresConfig] = None


def validate_config_values(config: RequiresConfig) -> List[str]:
    """
    Validate configuration values and return any errors.

    Args:
        config: Configuration to validate

    Returns:
        List[str]: List of validation errors (empty if valid)
    """
    errors = []

    timeout = config.probe.timeout_seconds
    if timeout is not None and (
        isinstance(timeout, bool)
        or not isinstance(timeout, (int, float))
        or timeout <= 0
    ):
        errors.append("probe.timeout_seconds must be positive or null")
    if not config.probe.encoding or not isinstance(config.probe.encoding, str):
        errors.append("probe.encoding must be a non-empty string")

    log_level = config.logging.log_level
    if not isinstance(log_level, str) or log_level.upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"logging.log_level must be one of {', '.join(VALID_LOG_LEVELS)}"
        )

    if config.output.output_format not in VALID_OUTPUT_FORMATS:
        errors.append(
            f"output.output_format must be one of {', '.join(VALID_OUTPUT_FORMATS)}"
        )

    return errors


def load_config_file(config_path: Path) -> Optional[Dict[str, Any]]:
    """Load config from file."""
    if not config_path.exists():
        return None

    suffix = config_path.suffix.lower()
    try:
        with open(config_path, encoding="utf-8") as f:
            if suffix in [".yaml", ".yml"]:
                return yaml.safe_load(f)
            elif suffix == ".toml":
                return toml.load(f)
            elif suffix == ".json":
                return json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        console.print(
            f"⚠️  Error loading config from {config_path}: {e}", style="yellow"
        )

    return None


def find_config_file() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [
        Path.cwd() / ".dep-requires.json",
        Path.cwd() / ".dep-requires.yaml",
        Path.cwd() / ".dep-requires.yml",
        Path.cwd() / ".dep-requires.toml",
        Path.home() / ".config" / "dep-requires" / "config.json",
        Path.home() / ".config" / "dep-requires" / "config.yaml",
        Path.home() / ".config" / "dep-requires" / "config.toml",
        Path.home() / ".dep-requires.json",
    ]

    for location in locations:
        if location.exists():
            return location

    return None


def load_environment_overrides(config: RequiresConfig) -> None:
    """Load environment variable overrides."""

    def get_env_bool(key: str, default: bool = False) -> bool:
        value = os.environ.get(key, "").lower()
        return value in ["true", "1", "yes", "on"] if value else default

    def get_env_float(key: str, default: Optional[float] = None) -> Optional[float]:
        try:
            return float(os.environ[key]) if key in os.environ else default
        except ValueError:
            console.print(
                f"⚠️  Invalid float value for {key}, using default", style="yellow"
            )
            return default

    timeout = get_env_float("DEP_REQUIRES_TIMEOUT")
    if timeout is not None:
        config.probe.timeout_seconds = timeout
    config.probe.merge_stderr = get_env_bool(
        "DEP_REQUIRES_MERGE_STDERR", config.probe.merge_stderr
    )

    if log_level := os.environ.get("DEP_REQUIRES_LOG_LEVEL"):
        config.logging.log_level = log_level.upper()
    config.logging.enable_json = get_env_bool(
        "DEP_REQUIRES_LOG_JSON", config.logging.enable_json
    )

    if output_format := os.environ.get("DEP_REQUIRES_OUTPUT_FORMAT"):
        config.output.output_format = output_format.lower()


def apply_config_section(
    config: Any, section_data: Dict[str, Any], section_name: str
) -> None:
    """Apply configuration from dictionary to config section."""
    for key, value in section_data.items():
        if hasattr(config, key):
            setattr(config, key, value)
        else:
            console.print(
                f"⚠️  Unknown config key in {section_name}: {key}", style="yellow"
            )


def apply_config_data(config: RequiresConfig, file_config: Dict[str, Any]) -> None:
    """Apply every known section of a loaded config mapping."""
    for section_name in ("probe", "logging", "output"):
        section_data = file_config.get(section_name)
        if isinstance(section_data, dict):
            apply_config_section(
                getattr(config, section_name), section_data, section_name
            )


def load_config() -> RequiresConfig:
    """Load configuration from file and environment."""
    global _global_config

    if _global_config is not None:
        return _global_config

    config = RequiresConfig()

    config_file = find_config_file()
    if config_file:
        file_config = load_config_file(config_file)
        if file_config:
            apply_config_data(config, file_config)

    load_environment_overrides(config)

    validation_errors = validate_config_values(config)
    if validation_errors:
        console.print("⚠️  Configuration validation errors:", style="red")
        for error in validation_errors:
            console.print(f"  • {error}", style="red")
        console.print("Using default values for invalid settings.", style="yellow")
        config = _replace_invalid_sections(config, validation_errors)

    _global_config = config
    return config


def _replace_invalid_sections(
    config: RequiresConfig, validation_errors: List[str]
) -> RequiresConfig:
    defaults = RequiresConfig()
    for section_name in ("probe", "logging", "output"):
        if any(error.startswith(f"{section_name}.") for error in validation_errors):
            setattr(config, section_name, getattr(defaults, section_name))
    return config


def get_config() -> RequiresConfig:
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
    return json.dumps(RequiresConfig().to_dict(), indent=2)
