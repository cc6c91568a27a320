"""Helpers shared by tagarr subcommands."""

from __future__ import annotations

from pathlib import Path

import click

from tagarr.cli.exit_codes import ExitCode
from tagarr.config import ConfigurationError, TagarrConfig, get_config, validate_config


def load_config(
    ctx: click.Context,
    *,
    dry_run: bool = False,
    debug: bool = False,
) -> TagarrConfig:
    """Load and validate configuration, exiting with CONFIG_ERROR on failure.

    Flags that are not set on the command line leave the config file and
    environment values in place.
    """
    config_path: Path | None = ctx.obj.get("config_path") if ctx.obj else None
    try:
        config = get_config(
            config_path,
            dry_run=True if dry_run else None,
            debug=True if debug else None,
        )
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(ExitCode.CONFIG_ERROR)

    errors = validate_config(config)
    if errors:
        for error in errors:
            click.echo(f"Error: {error}", err=True)
        ctx.exit(ExitCode.CONFIG_ERROR)

    return config
