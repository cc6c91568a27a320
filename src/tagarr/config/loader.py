"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (TAGARR_*)
3. Config file (~/.tagarr/config.toml)
4. Default values

Environment variables:
- TAGARR_CONFIG_PATH: Path to config file (overrides default location)
- TAGARR_PRIMARY_URL / TAGARR_PRIMARY_API_KEY: Primary Radarr connection
- TAGARR_SECONDARY_URL / TAGARR_SECONDARY_API_KEY: Secondary Radarr connection
- TAGARR_RULES_FILE: Release-group rule file
- TAGARR_FFMPEG_PATH / TAGARR_DOVI_TOOL_PATH: Analyzer tool paths
- TAGARR_DISCORD_WEBHOOK_URL: Discord webhook
- TAGARR_LOG_LEVEL / TAGARR_LOG_FILE: Logging overrides
- TAGARR_DEBUG / TAGARR_DRY_RUN: Run toggles
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from tagarr.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from tagarr.config.env import EnvReader
from tagarr.config.models import ConfigurationError, TagarrConfig

logger = logging.getLogger(__name__)

# Default config location
DEFAULT_CONFIG_DIR = Path.home() / ".tagarr"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"


def get_default_config_path() -> Path:
    """Get the default config file path.

    Can be overridden by TAGARR_CONFIG_PATH environment variable.

    Returns:
        Path to config file.
    """
    env_path = os.environ.get("TAGARR_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        path: Path to config file. If None, uses default location.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.

    Raises:
        ConfigurationError: If the file exists but cannot be parsed.
    """
    if path is None:
        path = get_default_config_path()

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with open(path, "rb") as f:
            config = tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as e:
        raise ConfigurationError(f"Failed to load config file {path}: {e}") from e

    logger.debug("Loaded TOML config from %s", path)
    return config


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    dry_run: bool | None = None,
    debug: bool | None = None,
    rules_file: Path | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
) -> TagarrConfig:
    """Get Tagarr configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides TAGARR_CONFIG_PATH).
        dry_run: CLI override for dry-run mode.
        debug: CLI override for the per-movie decision trail.
        rules_file: CLI override for the release-group rule file.
        env_reader: Optional EnvReader for testing (uses os.environ if None).

    Returns:
        TagarrConfig with merged configuration.

    Raises:
        ConfigurationError: If the config file or any value is invalid.
    """
    reader = env_reader or EnvReader()

    file_config = load_config_file(config_path)

    cli_source = ConfigSource(
        dry_run=dry_run,
        debug=debug,
        rules_file=rules_file,
    )

    # Build with precedence: file < env < cli
    builder = ConfigBuilder()
    builder.apply(source_from_file(file_config))
    builder.apply(source_from_env(reader))
    builder.apply(cli_source)
    return builder.build()


def validate_config(config: TagarrConfig) -> list[str]:
    """Validate cross-field configuration constraints.

    Checks beyond what individual __post_init__ methods validate,
    such as relationships between different config sections.

    Args:
        config: The configuration to validate.

    Returns:
        List of error strings. Empty list means configuration is valid.
    """
    errors: list[str] = []

    if config.primary is None:
        errors.append("Primary Radarr url and api_key are not set")
    elif not config.primary.enabled:
        errors.append("Primary Radarr cannot be disabled")

    if config.release_groups.enabled:
        rules_file = config.release_groups.rules_file
        if rules_file is None:
            errors.append("Release-group tagging is enabled but rules_file is not set")
        elif not rules_file.exists():
            errors.append(f"Rule file does not exist: {rules_file}")

    if not config.hdr.enabled and not config.release_groups.enabled:
        errors.append("Both HDR and release-group tagging are disabled")

    if config.discovery.enabled and not config.release_groups.enabled:
        errors.append("Discovery requires release-group tagging to be enabled")

    if config.secondary is not None and config.primary is not None:
        if config.secondary.url.rstrip("/") == config.primary.url.rstrip("/"):
            errors.append("Secondary Radarr url must differ from the primary url")

    return errors
