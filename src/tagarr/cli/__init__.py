"""CLI module for Tagarr."""

import logging
from pathlib import Path

import click

from tagarr import __version__
from tagarr.config import (
    ConfigurationError,
    LoggingConfig,
    build_logging_config,
    get_config,
)
from tagarr.logging import configure_logging

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from the config file and CLI options.

    Args:
        config_path: Config file given with --config.
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.
    """
    global _logging_configured
    if _logging_configured:
        return

    try:
        base = get_config(config_path).logging
    except ConfigurationError:
        # Reported properly by the subcommand
        base = LoggingConfig()

    configure_logging(
        build_logging_config(
            base,
            level=log_level,
            file=log_file,
            format="json" if log_json else None,
        )
    )
    _logging_configured = True


@click.group()
@click.version_option(version=__version__, prog_name="tagarr")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Config file (default: ~/.tagarr/config.toml or TAGARR_CONFIG_PATH).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Tagarr - Tag Radarr movies by HDR format and release group."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    _configure_logging(config_path, log_level, log_file, log_json)
    logger.debug("tagarr %s starting: %s", __version__, ctx.invoked_subcommand)


# Defer import to avoid circular dependency
def _register_commands():
    from tagarr.cli.check import check_command
    from tagarr.cli.event import event_command
    from tagarr.cli.run import run_command

    main.add_command(check_command)
    main.add_command(event_command)
    main.add_command(run_command)


_register_commands()
