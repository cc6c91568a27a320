"""tagarr check command for verifying configuration and dependencies.

Checks the configuration, both Radarr connections, the rule file and the
external tools needed for Dolby Vision analysis before a first run.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from tagarr.analyzer.tools import ToolInfo, detect_tool
from tagarr.cli.exit_codes import ExitCode
from tagarr.config import (
    ConfigurationError,
    RegistryConnectionConfig,
    TagarrConfig,
    get_config,
    validate_config,
)
from tagarr.registry.client import RadarrClient, RegistryUnavailable
from tagarr.rules.loader import load_rules

_INSTALL_HINTS = {
    "ffmpeg": "Install ffmpeg: https://ffmpeg.org/download.html",
    "dovi_tool": "Install dovi_tool: https://github.com/quietvoid/dovi_tool/releases",
}


def _format_status(ok: bool) -> str:
    """Format status for display."""
    return "✓" if ok else "✗"


def _check_connection(config: RegistryConnectionConfig) -> dict[str, Any]:
    with RadarrClient(config) as client:
        try:
            client.validate_connection()
        except RegistryUnavailable as e:
            return {"name": config.name, "ok": False, "error": str(e)}
    return {"name": config.name, "ok": True, "error": None}


def _check_rules(path: Path) -> dict[str, Any]:
    try:
        rules = load_rules(path)
    except ConfigurationError as e:
        return {"path": str(path), "ok": False, "error": str(e)}
    return {
        "path": str(path),
        "ok": True,
        "error": None,
        "rules": len(rules.rules),
        "active": len(rules.active),
    }


def _tool_dict(tool: ToolInfo) -> dict[str, Any]:
    return {
        "name": tool.name,
        "ok": tool.is_available,
        "status": tool.status.value,
        "version": tool.version,
        "path": str(tool.path) if tool.path else None,
        "error": tool.status_message,
    }


def run_checks(config: TagarrConfig) -> dict[str, Any]:
    """Run every check against a loaded configuration.

    Returns:
        Check results keyed by area; each entry carries an ``ok`` flag.
    """
    results: dict[str, Any] = {
        "config": {"ok": True, "errors": validate_config(config)},
        "connections": [],
        "rules": None,
        "tools": [],
    }
    results["config"]["ok"] = not results["config"]["errors"]

    if config.primary is not None:
        results["connections"].append(_check_connection(config.primary))
    if config.sync_enabled and config.secondary is not None:
        results["connections"].append(_check_connection(config.secondary))

    rules_file = config.release_groups.rules_file
    if config.release_groups.enabled and rules_file is not None and rules_file.exists():
        results["rules"] = _check_rules(rules_file)

    if config.hdr.enabled:
        results["tools"] = [
            _tool_dict(detect_tool("ffmpeg", config.analyzer.ffmpeg_path)),
            _tool_dict(detect_tool("dovi_tool", config.analyzer.dovi_tool_path)),
        ]

    return results


def _exit_code(results: dict[str, Any]) -> ExitCode:
    rules = results["rules"]
    if not results["config"]["ok"] or (rules is not None and not rules["ok"]):
        return ExitCode.CONFIG_ERROR
    if not all(c["ok"] for c in results["connections"]):
        return ExitCode.REGISTRY_UNAVAILABLE
    if not all(t["ok"] for t in results["tools"]):
        return ExitCode.TOOL_NOT_AVAILABLE
    return ExitCode.SUCCESS


def _output_text(results: dict[str, Any]) -> None:
    click.echo("Tagarr Health Check")
    click.echo("=" * 40)
    click.echo()

    click.echo("Configuration:")
    click.echo("-" * 20)
    errors = results["config"]["errors"]
    if errors:
        for error in errors:
            click.echo(f"  ✗ {error}")
    else:
        click.echo("  ✓ Configuration valid")
    click.echo()

    if results["connections"]:
        click.echo("Radarr:")
        click.echo("-" * 20)
        for conn in results["connections"]:
            click.echo(f"  {_format_status(conn['ok'])} {conn['name']}")
            if conn["error"]:
                click.echo(f"    └─ {conn['error']}")
        click.echo()

    rules = results["rules"]
    if rules is not None:
        click.echo("Release-group rules:")
        click.echo("-" * 20)
        if rules["ok"]:
            click.echo(
                f"  ✓ {rules['path']}: {rules['active']} active of {rules['rules']}"
            )
        else:
            click.echo(f"  ✗ {rules['path']}")
            click.echo(f"    └─ {rules['error']}")
        click.echo()

    if results["tools"]:
        click.echo("Dolby Vision tools:")
        click.echo("-" * 20)
        for tool in results["tools"]:
            version = tool["version"] or ("unknown version" if tool["ok"] else "not found")
            click.echo(f"  {_format_status(tool['ok'])} {tool['name']}: {version}")
            if not tool["ok"]:
                click.echo(f"    └─ {_INSTALL_HINTS[tool['name']]}")
        click.echo()


@click.command("check")
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output results as JSON",
)
@click.pass_context
def check_command(ctx: click.Context, json_output: bool) -> None:
    """Check configuration, Radarr connections and external tools.

    Exit codes:
      0  - Everything is ready
      11 - Configuration or rule file invalid
      30 - ffmpeg or dovi_tool missing
      31 - A Radarr instance is unreachable
    """
    config_path = ctx.obj.get("config_path") if ctx.obj else None
    try:
        config = get_config(config_path)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(ExitCode.CONFIG_ERROR)

    results = run_checks(config)
    code = _exit_code(results)

    if json_output:
        click.echo(json.dumps(results, indent=2))
    else:
        _output_text(results)
        if code is ExitCode.SUCCESS:
            click.echo("✓ Ready to tag.")

    ctx.exit(code)
