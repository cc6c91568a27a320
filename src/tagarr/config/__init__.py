"""Configuration management for Tagarr.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (TAGARR_*)
3. Config file (~/.tagarr/config.toml)
4. Default values (lowest priority)
"""

from tagarr.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from tagarr.config.env import EnvReader
from tagarr.config.loader import (
    get_config,
    get_default_config_path,
    load_config_file,
    validate_config,
)
from tagarr.config.logging_factory import build_logging_config
from tagarr.config.models import (
    AnalyzerConfig,
    AudioFilterConfig,
    CleanupConfig,
    ConfigurationError,
    DiscordConfig,
    DiscoveryConfig,
    HdrConfig,
    LoggingConfig,
    QualityFilterConfig,
    RegistryConnectionConfig,
    ReleaseGroupConfig,
    TagarrConfig,
)

__all__ = [
    "AnalyzerConfig",
    "AudioFilterConfig",
    "CleanupConfig",
    "ConfigBuilder",
    "ConfigSource",
    "ConfigurationError",
    "DiscordConfig",
    "DiscoveryConfig",
    "EnvReader",
    "HdrConfig",
    "LoggingConfig",
    "QualityFilterConfig",
    "RegistryConnectionConfig",
    "ReleaseGroupConfig",
    "TagarrConfig",
    "build_logging_config",
    "get_config",
    "get_default_config_path",
    "load_config_file",
    "source_from_env",
    "source_from_file",
    "validate_config",
]
