"""Configuration builder with explicit layering.

This module provides ConfigBuilder for building TagarrConfig by composing
multiple configuration sources with explicit precedence handling.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from tagarr.config.env import EnvReader
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


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None values indicate "not specified in this source" and will not
    override values from lower-precedence sources.
    """

    # Primary instance
    primary_url: str | None = None
    primary_api_key: str | None = None
    primary_name: str | None = None
    primary_timeout: int | None = None

    # Secondary instance
    secondary_url: str | None = None
    secondary_api_key: str | None = None
    secondary_name: str | None = None
    secondary_timeout: int | None = None
    secondary_enabled: bool | None = None

    # HDR / Dolby Vision groups
    hdr_enabled: bool | None = None
    hdr_formats: bool | None = None
    hdr_no_dv: bool | None = None
    hdr_profile: bool | None = None
    hdr_profile8: bool | None = None
    hdr_cm: bool | None = None
    hdr_dv_supersedes_hdr: bool | None = None

    # Quality filter
    quality_enabled: bool | None = None
    quality_ma_webdl: bool | None = None
    quality_play_webdl: bool | None = None

    # Audio filter
    audio_enabled: bool | None = None
    audio_truehd_atmos: bool | None = None
    audio_truehd: bool | None = None
    audio_dts_x: bool | None = None
    audio_dts_hd_ma: bool | None = None

    # Release groups
    release_groups_enabled: bool | None = None
    rules_file: Path | None = None

    # Discovery and cleanup
    discovery_enabled: bool | None = None
    discovery_log_file: Path | None = None
    cleanup_enabled: bool | None = None

    # Analyzer
    ffmpeg_path: Path | None = None
    dovi_tool_path: Path | None = None
    extraction_timeout: int | None = None
    analysis_timeout: int | None = None
    max_frames: int | None = None
    path_mappings: dict[str, str] | None = None

    # Discord
    discord_enabled: bool | None = None
    discord_webhook_url: str | None = None

    # Logging config
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None

    # Run toggles
    debug: bool | None = None
    dry_run: bool | None = None


class ConfigBuilder:
    """Builds TagarrConfig by layering ConfigSources with precedence.

    Later sources override earlier ones (for non-None values).

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config))
        builder.apply(source_from_env(reader))
        builder.apply(cli_source)
        config = builder.build()
    """

    def __init__(self) -> None:
        """Initialize the builder with no values set."""
        self._values: dict[str, Any] = {}

    def apply(self, source: ConfigSource) -> None:
        """Apply configuration source, overriding existing values.

        Args:
            source: Configuration source to apply.
        """
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value

    def _get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def _connection(
        self, prefix: str, default_name: str, default_enabled: bool = True
    ) -> RegistryConnectionConfig | None:
        url = self._get(f"{prefix}_url", None)
        api_key = self._get(f"{prefix}_api_key", None)
        if url is None and api_key is None:
            return None
        if not url:
            raise ConfigurationError(f"[{prefix}] url is required")
        try:
            return RegistryConnectionConfig(
                url=url,
                api_key=api_key or "",
                name=self._get(f"{prefix}_name", default_name),
                enabled=self._get(f"{prefix}_enabled", default_enabled),
                timeout_seconds=self._get(f"{prefix}_timeout", 30),
            )
        except ValueError as e:
            raise ConfigurationError(f"[{prefix}] {e}") from e

    def build(self) -> TagarrConfig:
        """Build the final TagarrConfig with defaults for unset values.

        Returns:
            Complete TagarrConfig with all values resolved.

        Raises:
            ConfigurationError: If any section fails validation.
        """
        primary = self._connection("primary", "Primary")
        secondary = self._connection("secondary", "Secondary")

        hdr = HdrConfig(
            enabled=self._get("hdr_enabled", True),
            formats=self._get("hdr_formats", True),
            no_dv=self._get("hdr_no_dv", False),
            profile=self._get("hdr_profile", True),
            profile8=self._get("hdr_profile8", False),
            cm=self._get("hdr_cm", True),
            dv_supersedes_hdr=self._get("hdr_dv_supersedes_hdr", True),
        )

        quality = QualityFilterConfig(
            enabled=self._get("quality_enabled", True),
            ma_webdl=self._get("quality_ma_webdl", True),
            play_webdl=self._get("quality_play_webdl", False),
        )

        audio = AudioFilterConfig(
            enabled=self._get("audio_enabled", True),
            truehd_atmos=self._get("audio_truehd_atmos", True),
            truehd=self._get("audio_truehd", True),
            dts_x=self._get("audio_dts_x", True),
            dts_hd_ma=self._get("audio_dts_hd_ma", True),
        )

        release_groups = ReleaseGroupConfig(
            enabled=self._get("release_groups_enabled", True),
            rules_file=self._get("rules_file", None),
        )

        try:
            analyzer = AnalyzerConfig(
                ffmpeg_path=self._get("ffmpeg_path", None),
                dovi_tool_path=self._get("dovi_tool_path", None),
                extraction_timeout=self._get("extraction_timeout", 30),
                analysis_timeout=self._get("analysis_timeout", 10),
                max_frames=self._get("max_frames", 100),
                path_mappings=dict(self._get("path_mappings", {})),
            )
            discord = DiscordConfig(
                enabled=self._get("discord_enabled", False),
                webhook_url=self._get("discord_webhook_url", None),
            )
            logging_config = LoggingConfig(
                level=self._get("logging_level", "info"),
                file=self._get("logging_file", None),
                format=self._get("logging_format", "text"),
                include_stderr=self._get("logging_include_stderr", False),
                max_bytes=self._get("logging_max_bytes", 2_097_152),
                backup_count=self._get("logging_backup_count", 1),
            )
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        return TagarrConfig(
            primary=primary,
            secondary=secondary,
            hdr=hdr,
            quality=quality,
            audio=audio,
            release_groups=release_groups,
            discovery=DiscoveryConfig(
                enabled=self._get("discovery_enabled", False),
                log_file=self._get("discovery_log_file", None),
            ),
            cleanup=CleanupConfig(enabled=self._get("cleanup_enabled", False)),
            analyzer=analyzer,
            discord=discord,
            logging=logging_config,
            debug=self._get("debug", False),
            dry_run=self._get("dry_run", False),
        )


def _path(value: str | None) -> Path | None:
    return Path(value).expanduser() if value else None


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Create ConfigSource from parsed TOML config file.

    Args:
        file_config: Parsed configuration dictionary from TOML file.

    Returns:
        ConfigSource with values from the config file.
    """
    primary = file_config.get("primary", {})
    secondary = file_config.get("secondary", {})
    hdr = file_config.get("hdr", {})
    filters = file_config.get("filters", {})
    quality = filters.get("quality", {})
    audio = filters.get("audio", {})
    release_groups = file_config.get("release_groups", {})
    discovery = file_config.get("discovery", {})
    cleanup = file_config.get("cleanup", {})
    analyzer = file_config.get("analyzer", {})
    discord = file_config.get("notifications", {}).get("discord", {})
    logging_conf = file_config.get("logging", {})

    return ConfigSource(
        # Primary
        primary_url=primary.get("url"),
        primary_api_key=primary.get("api_key"),
        primary_name=primary.get("name"),
        primary_timeout=primary.get("timeout_seconds"),
        # Secondary
        secondary_url=secondary.get("url"),
        secondary_api_key=secondary.get("api_key"),
        secondary_name=secondary.get("name"),
        secondary_timeout=secondary.get("timeout_seconds"),
        secondary_enabled=secondary.get("enabled"),
        # HDR
        hdr_enabled=hdr.get("enabled"),
        hdr_formats=hdr.get("formats"),
        hdr_no_dv=hdr.get("no_dv"),
        hdr_profile=hdr.get("profile"),
        hdr_profile8=hdr.get("profile8"),
        hdr_cm=hdr.get("cm"),
        hdr_dv_supersedes_hdr=hdr.get("dv_supersedes_hdr"),
        # Filters
        quality_enabled=quality.get("enabled"),
        quality_ma_webdl=quality.get("ma_webdl"),
        quality_play_webdl=quality.get("play_webdl"),
        audio_enabled=audio.get("enabled"),
        audio_truehd_atmos=audio.get("truehd_atmos"),
        audio_truehd=audio.get("truehd"),
        audio_dts_x=audio.get("dts_x"),
        audio_dts_hd_ma=audio.get("dts_hd_ma"),
        # Release groups
        release_groups_enabled=release_groups.get("enabled"),
        rules_file=_path(release_groups.get("rules_file")),
        # Discovery / cleanup
        discovery_enabled=discovery.get("enabled"),
        discovery_log_file=_path(discovery.get("log_file")),
        cleanup_enabled=cleanup.get("enabled"),
        # Analyzer
        ffmpeg_path=_path(analyzer.get("ffmpeg_path")),
        dovi_tool_path=_path(analyzer.get("dovi_tool_path")),
        extraction_timeout=analyzer.get("extraction_timeout"),
        analysis_timeout=analyzer.get("analysis_timeout"),
        max_frames=analyzer.get("max_frames"),
        path_mappings=analyzer.get("path_mappings"),
        # Discord
        discord_enabled=discord.get("enabled"),
        discord_webhook_url=discord.get("webhook_url"),
        # Logging
        logging_level=logging_conf.get("level"),
        logging_file=_path(logging_conf.get("file")),
        logging_format=logging_conf.get("format"),
        logging_include_stderr=logging_conf.get("include_stderr"),
        logging_max_bytes=logging_conf.get("max_bytes"),
        logging_backup_count=logging_conf.get("backup_count"),
        # Toggles
        debug=file_config.get("debug"),
        dry_run=file_config.get("dry_run"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create ConfigSource from environment variables.

    Args:
        reader: EnvReader instance for reading environment variables.

    Returns:
        ConfigSource with values from environment variables.
    """
    return ConfigSource(
        primary_url=reader.get_str("TAGARR_PRIMARY_URL"),
        primary_api_key=reader.get_str("TAGARR_PRIMARY_API_KEY"),
        secondary_url=reader.get_str("TAGARR_SECONDARY_URL"),
        secondary_api_key=reader.get_str("TAGARR_SECONDARY_API_KEY"),
        rules_file=reader.get_path("TAGARR_RULES_FILE"),
        ffmpeg_path=reader.get_path("TAGARR_FFMPEG_PATH"),
        dovi_tool_path=reader.get_path("TAGARR_DOVI_TOOL_PATH"),
        discord_webhook_url=reader.get_str("TAGARR_DISCORD_WEBHOOK_URL"),
        logging_level=reader.get_str("TAGARR_LOG_LEVEL"),
        logging_file=reader.get_path("TAGARR_LOG_FILE"),
        debug=reader.get_bool("TAGARR_DEBUG"),
        dry_run=reader.get_bool("TAGARR_DRY_RUN"),
    )
