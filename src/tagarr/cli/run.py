"""tagarr run command: classify and tag the whole library."""

from __future__ import annotations

import json
import logging

import click

from tagarr.cli.common import load_config
from tagarr.cli.exit_codes import ExitCode
from tagarr.config import ConfigurationError
from tagarr.registry import RegistryUnavailable
from tagarr.workflow import BatchRunner, RunSummary, build_runtime

logger = logging.getLogger(__name__)


@click.command("run")
@click.option(
    "--dry-run",
    is_flag=True,
    help="Compute and log every change without writing anything.",
)
@click.option(
    "--category",
    "categories",
    multiple=True,
    help="Only process this release-group category (repeatable).",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Log the per-movie decision trail at the end of the run.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output the run summary as JSON.",
)
@click.pass_context
def run_command(
    ctx: click.Context,
    dry_run: bool,
    categories: tuple[str, ...],
    debug: bool,
    json_output: bool,
) -> None:
    """Classify every movie and reconcile tags on all instances.

    Exit codes:
      0  - Run completed
      11 - Configuration or rule file invalid
      31 - Primary Radarr unavailable
      40 - Run completed but some movies failed
    """
    config = load_config(ctx, dry_run=dry_run, debug=debug)

    try:
        with build_runtime(config, categories) as runtime:
            summary = BatchRunner(runtime).run()
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(ExitCode.CONFIG_ERROR)
    except RegistryUnavailable as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(ExitCode.REGISTRY_UNAVAILABLE)
    except KeyboardInterrupt:
        click.echo("Interrupted", err=True)
        ctx.exit(ExitCode.INTERRUPTED)

    _output(summary, json_output)

    if summary.items_failed:
        ctx.exit(ExitCode.OPERATION_FAILED)


def _output(summary: RunSummary, json_output: bool) -> None:
    if json_output:
        click.echo(json.dumps(summary.to_dict(), indent=2))
        return
    for line in summary.format_lines():
        click.echo(line)
