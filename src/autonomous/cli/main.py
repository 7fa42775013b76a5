"""
autonomous CLI entry point.

Commands:
  autonomous rank                 — rank cached issue evaluations (hybrid score)
  autonomous breakdown <issue>    — show the weighted score decomposition of one issue
  autonomous run <tool>           — run an agent CLI session with a work prompt
  autonomous analyze <log>        — report completion / PR / idleness for a transcript
  autonomous adapters             — list available agent CLI adapters
"""

from __future__ import annotations

import click
from rich.console import Console

from autonomous import __version__

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", "-V", message="autonomous %(version)s")
@click.option("--log-level", default="WARNING", help="Log level for structured logging.")
@click.option("--log-json", is_flag=True, default=False, help="Emit JSON log lines.")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Config file (default: $AUTONOMOUS_CONFIG or ~/.autonomous/config.toml).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str, log_json: bool, config_path: str | None) -> None:
    """autonomous — rank issues and drive agent CLIs through them."""
    from autonomous.core.logging import configure_logging

    configure_logging(level=log_level, json_output=log_json)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# ---------------------------------------------------------------------------
# rank / breakdown
# ---------------------------------------------------------------------------

_evaluations_option = click.option(
    "--evaluations",
    "evaluations_path",
    default="",
    type=click.Path(dir_okay=False),
    help="Evaluation cache JSON (default: ~/.autonomous/evaluation-cache.json).",
)
_metadata_option = click.option(
    "--metadata",
    "metadata_path",
    default="",
    type=click.Path(dir_okay=False),
    help="Project-board metadata snapshot JSON.",
)


@cli.command()
@_evaluations_option
@_metadata_option
@click.option("--ready-only", is_flag=True, default=False, help="Only issues in a ready status.")
@click.option("--blocked", "blocked_only", is_flag=True, default=False, help="Only blocked issues.")
@click.option("--limit", default=0, show_default=True, help="Max issues to show (0 = all).")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
@click.pass_context
def rank(
    ctx: click.Context,
    evaluations_path: str,
    metadata_path: str,
    ready_only: bool,
    blocked_only: bool,
    limit: int,
    as_json: bool,
) -> None:
    """Rank evaluated issues by hybrid priority score."""
    from autonomous.cli._rank import cmd_rank

    cmd_rank(
        evaluations_path=evaluations_path,
        metadata_path=metadata_path,
        ready_only=ready_only,
        blocked_only=blocked_only,
        limit=limit,
        as_json=as_json,
        console=console,
        config_path=ctx.obj.get("config_path"),
    )


@cli.command()
@click.argument("issue_number", type=int)
@_evaluations_option
@_metadata_option
@click.pass_context
def breakdown(
    ctx: click.Context, issue_number: int, evaluations_path: str, metadata_path: str
) -> None:
    """Show how one issue's hybrid score is composed."""
    from autonomous.cli._rank import cmd_breakdown

    cmd_breakdown(
        issue_number=issue_number,
        evaluations_path=evaluations_path,
        metadata_path=metadata_path,
        console=console,
        config_path=ctx.obj.get("config_path"),
    )


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("log_file", type=click.Path(dir_okay=False))
@click.option("--max-age", "max_age_s", default=600.0, show_default=True, help="Seconds.")
@click.option(
    "--idle-threshold", "idle_threshold_s", default=1800.0, show_default=True, help="Seconds."
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
def analyze(log_file: str, max_age_s: float, idle_threshold_s: float, as_json: bool) -> None:
    """Report whether a session transcript shows finished work."""
    from autonomous.cli._analyze import cmd_analyze

    cmd_analyze(
        log_file=log_file,
        max_age_s=max_age_s,
        idle_threshold_s=idle_threshold_s,
        as_json=as_json,
        console=console,
    )


# ---------------------------------------------------------------------------
# adapters
# ---------------------------------------------------------------------------


@cli.command("adapters")
@click.option("--json", "as_json", is_flag=True, default=False, help="Machine-readable JSON output")
def adapters_cmd(as_json: bool) -> None:
    """List available agent CLI adapters."""
    import autonomous.adapters  # noqa: F401  registers all built-in adapters
    from autonomous.adapters.base import AdapterRegistry

    adapters = AdapterRegistry.list_all()
    if as_json:
        import json

        rows = [
            {
                "name": name,
                "tool_name": cls.tool_name,
                "description": cls.description,
                "command": cls.default_command,
                "args": list(cls.default_args),
                "readiness": str(cls.readiness),
            }
            for name, cls in sorted(adapters.items())
        ]
        click.echo(json.dumps(rows, indent=2))
    else:
        console.print("\n[bold]Available Adapters[/bold]\n")
        for name, cls in sorted(adapters.items()):
            console.print(
                f"  [cyan]{name:<12}[/cyan] {cls.description or '-'}"
                f"  [dim]({cls.readiness})[/dim]"
            )
        console.print()


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------

from autonomous.cli._run import run_cmd  # noqa: E402

cli.add_command(run_cmd)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
