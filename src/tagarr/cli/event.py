"""tagarr event command: handle a Radarr custom-script event."""

from __future__ import annotations

import logging

import click

from tagarr.cli.common import load_config
from tagarr.cli.exit_codes import ExitCode
from tagarr.config import ConfigurationError
from tagarr.registry import RegistryUnavailable
from tagarr.workflow import EventHandler, EventRequest, UnknownEventError, build_runtime

logger = logging.getLogger(__name__)


@click.command("event")
@click.option(
    "--event-type",
    envvar="radarr_eventtype",
    default="Test",
    show_default=True,
    help="Radarr event type (env: radarr_eventtype).",
)
@click.option(
    "--movie-id",
    envvar="radarr_movie_id",
    type=int,
    default=None,
    help="Radarr movie id (env: radarr_movie_id).",
)
@click.option(
    "--file-path",
    envvar="radarr_moviefile_path",
    default=None,
    help="Imported file path (env: radarr_moviefile_path).",
)
@click.option(
    "--relative-path",
    envvar="radarr_moviefile_relativepath",
    default=None,
    help="Imported file relative path (env: radarr_moviefile_relativepath).",
)
@click.option(
    "--scene-name",
    envvar="radarr_moviefile_scenename",
    default=None,
    help="Imported release scene name (env: radarr_moviefile_scenename).",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Compute and log every change without writing anything.",
)
@click.pass_context
def event_command(
    ctx: click.Context,
    event_type: str,
    movie_id: int | None,
    file_path: str | None,
    relative_path: str | None,
    scene_name: str | None,
    dry_run: bool,
) -> None:
    """Handle one Radarr event (add as a Custom Script connection).

    Exit codes:
      0  - Event handled
      1  - Event is missing its movie id
      11 - Configuration or rule file invalid
      13 - Unknown event type
      31 - Primary Radarr unavailable
    """
    config = load_config(ctx, dry_run=dry_run)
    request = EventRequest(
        event_type=event_type,
        movie_id=movie_id,
        file_path=file_path,
        relative_path=relative_path,
        scene_name=scene_name,
    )

    try:
        with build_runtime(config) as runtime:
            result = EventHandler(runtime).handle(request)
    except UnknownEventError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(ExitCode.UNKNOWN_EVENT)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(ExitCode.CONFIG_ERROR)
    except RegistryUnavailable as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(ExitCode.REGISTRY_UNAVAILABLE)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(ExitCode.GENERAL_ERROR)

    if result.title:
        tags = ", ".join(result.tags) or "none"
        click.echo(f"{result.event_type.value}: {result.title} (tags: {tags})")
    else:
        click.echo(f"{result.event_type.value}: OK")
