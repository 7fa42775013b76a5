"""autonomous run — drive one agent CLI session to completion."""

from __future__ import annotations

import asyncio
import os
import signal
import sys
import uuid

import click
from rich.console import Console

from autonomous.cli._common import config_path_from_context, load_config_or_exit
from autonomous.core.constants import ExitCode
from autonomous.core.session import SessionConfig, SessionExecutor

# Agent output owns stdout; status lines go to stderr.
console = Console(stderr=True)


@click.command("run")
@click.argument("tool", default="claude")
@click.option("--prompt", "-p", default="", help="Work prompt to inject once the agent is ready.")
@click.option(
    "--prompt-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Read the work prompt from a file.",
)
@click.option("--cwd", default="", help="Working directory for the agent (default: current).")
@click.option("--log-file", default="", help="Transcript path (default: <logs dir>/<id>.log).")
@click.option("--instance-id", default="", help="Instance identifier (default: <tool>-<random>).")
def run_cmd(
    tool: str,
    prompt: str,
    prompt_file: str | None,
    cwd: str,
    log_file: str,
    instance_id: str,
) -> None:
    """Run an agent CLI in a PTY, inject the prompt, and wait for it to exit."""
    if prompt_file:
        with open(prompt_file, encoding="utf-8") as f:
            prompt = f.read()
    if not prompt.strip():
        console.print("[red]Error:[/red] a prompt is required (--prompt or --prompt-file).")
        sys.exit(ExitCode.ERROR)

    code = cmd_run(
        tool=tool,
        prompt=prompt,
        cwd=cwd or os.getcwd(),
        log_file=log_file,
        instance_id=instance_id,
        console=console,
        config_path=config_path_from_context(),
    )
    sys.exit(code)


def cmd_run(
    *,
    tool: str,
    prompt: str,
    cwd: str,
    console: Console,
    log_file: str = "",
    instance_id: str = "",
    config_path: str | None = None,
) -> int:
    """Resolve the adapter and config, run the session, and map its outcome to an exit code."""
    import autonomous.adapters  # noqa: F401  registers all built-in adapters
    from autonomous.adapters.base import AdapterRegistry
    from autonomous.core.exceptions import AdapterError, SessionKilledError, SpawnError

    try:
        adapter = AdapterRegistry.get(tool)()
    except AdapterError as exc:
        console.print(f"[red]{exc}[/red]")
        return ExitCode.CONFIG_ERROR

    config = load_config_or_exit(config_path, console)
    llm = config.llm(adapter.tool_name)

    health = adapter.healthcheck(llm)
    if health["status"] != "ok":
        console.print(f"[red]{health['command']!r} not found on PATH.[/red]")
        return ExitCode.DEPENDENCY_MISSING

    instance_id = instance_id or f"{adapter.tool_name}-{uuid.uuid4().hex[:8]}"
    log_file = log_file or str(config.logs_dir / f"{instance_id}.log")
    session_config = adapter.build_session_config(
        prompt=prompt,
        cwd=cwd,
        log_file=log_file,
        instance_id=instance_id,
        llm=llm,
        settings=config.session,
    )

    console.print(
        f"[bold]autonomous[/bold] running [cyan]{' '.join(session_config.argv)}[/cyan]"
        f" in {cwd}"
    )
    console.print(f"[dim]Transcript: {log_file}[/dim]")

    try:
        return asyncio.run(_run_async(session_config))
    except SpawnError as exc:
        console.print(f"[red]Could not start agent:[/red] {exc}")
        return ExitCode.ENV_ERROR
    except SessionKilledError as exc:
        console.print(f"[yellow]Agent terminated by {exc.signal}.[/yellow]")
        return ExitCode.SESSION_KILLED


async def _run_async(session_config: SessionConfig) -> int:
    executor = SessionExecutor()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, lambda: asyncio.ensure_future(executor.stop()))
    try:
        return await executor.start(session_config)
    finally:
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(signum)
