"""Configuration data models.

This module defines dataclasses for Tagarr configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""


@dataclass(frozen=True)
class RegistryConnectionConfig:
    """Configuration for connecting to a Radarr instance.

    Used for both the primary instance and the optional secondary
    instance that tags are mirrored to.
    """

    url: str
    """Base URL of the instance (e.g., "http://localhost:7878")."""

    api_key: str
    """API key for authentication (found in Settings > General > Security)."""

    name: str = "Radarr"
    """Display name used in logs and notifications."""

    enabled: bool = True
    """Whether this instance takes part in the run."""

    timeout_seconds: int = 30
    """Request timeout in seconds (1-300)."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.url.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        if not self.api_key or not self.api_key.strip():
            raise ValueError("API key is required")
        if " " in self.api_key:
            raise ValueError("API key must not contain whitespace")
        if not 1 <= self.timeout_seconds <= 300:
            raise ValueError("Timeout must be between 1 and 300 seconds")


@dataclass
class HdrConfig:
    """Configuration for HDR / Dolby Vision tagging.

    Each flag enables one tag group. Disabling a group removes every
    tag of that group from every movie on the next run.
    """

    enabled: bool = True

    # sdr, pq, hdr10, hdr10plus, dv
    formats: bool = True

    # no-dv
    no_dv: bool = False

    # mel, fel
    profile: bool = True

    # dvprofile8
    profile8: bool = False

    # cm2, cm4
    cm: bool = True

    dv_supersedes_hdr: bool = True
    """Confirmed Dolby Vision replaces the base HDR format tag.

    When False, a DV file carries both its base format tag (e.g. hdr10)
    and the dv tag.
    """


@dataclass
class QualityFilterConfig:
    """Quality source filter used by filtered release-group rules."""

    enabled: bool = True
    ma_webdl: bool = True
    play_webdl: bool = False


@dataclass
class AudioFilterConfig:
    """Lossless audio filter used by filtered release-group rules."""

    enabled: bool = True
    truehd_atmos: bool = True
    truehd: bool = True
    dts_x: bool = True
    dts_hd_ma: bool = True


@dataclass
class ReleaseGroupConfig:
    """Configuration for release-group tagging."""

    enabled: bool = True

    # YAML rule file (None = release-group tagging has no rules)
    rules_file: Path | None = None


@dataclass
class DiscoveryConfig:
    """Configuration for release-group discovery."""

    enabled: bool = False

    # Human-readable report of discovered groups (None = not written)
    log_file: Path | None = None

    # Rotation threshold for the report
    max_bytes: int = 2_097_152


@dataclass
class CleanupConfig:
    """Configuration for removing tags with no movies at end of run."""

    enabled: bool = False


@dataclass
class AnalyzerConfig:
    """Configuration for the Dolby Vision metadata analyzer.

    Tool paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg_path: Path | None = None
    dovi_tool_path: Path | None = None

    # Seconds allowed for demux + RPU extraction
    extraction_timeout: int = 30

    # Seconds allowed for the RPU summary
    analysis_timeout: int = 10

    # Video frames handed to dovi_tool
    max_frames: int = 100

    # Container path prefix -> host path prefix
    path_mappings: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.extraction_timeout < 1:
            raise ValueError("extraction_timeout must be at least 1 second")
        if self.analysis_timeout < 1:
            raise ValueError("analysis_timeout must be at least 1 second")
        if self.max_frames < 1:
            raise ValueError("max_frames must be at least 1")


@dataclass
class DiscordConfig:
    """Configuration for Discord webhook notifications."""

    enabled: bool = False
    webhook_url: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.enabled and not self.webhook_url:
            raise ValueError("webhook_url is required when Discord is enabled")


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 2MiB)
    max_bytes: int = 2_097_152

    # Number of rotated files to keep
    backup_count: int = 1

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class TagarrConfig:
    """Main configuration container for Tagarr."""

    primary: RegistryConnectionConfig | None = None
    secondary: RegistryConnectionConfig | None = None
    hdr: HdrConfig = field(default_factory=HdrConfig)
    quality: QualityFilterConfig = field(default_factory=QualityFilterConfig)
    audio: AudioFilterConfig = field(default_factory=AudioFilterConfig)
    release_groups: ReleaseGroupConfig = field(default_factory=ReleaseGroupConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    cleanup: CleanupConfig = field(default_factory=CleanupConfig)
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    discord: DiscordConfig = field(default_factory=DiscordConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Per-movie decision trail in the end-of-run log
    debug: bool = False

    # Compute and log every change without writing anything
    dry_run: bool = False

    @property
    def sync_enabled(self) -> bool:
        """Whether tags are mirrored to a secondary instance."""
        return self.secondary is not None and self.secondary.enabled
