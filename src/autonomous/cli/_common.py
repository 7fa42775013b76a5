"""Helpers shared by CLI command implementations."""

from __future__ import annotations

import sys

import click
from rich.console import Console

from autonomous.core.config import AutonomousConfig
from autonomous.core.constants import ExitCode


def config_path_from_context() -> str | None:
    """Return the ``--config`` value given to the root group, if any."""
    ctx = click.get_current_context(silent=True)
    if ctx is None:
        return None
    obj = ctx.find_root().obj or {}
    return obj.get("config_path")


def load_config_or_exit(path: str | None, console: Console) -> AutonomousConfig:
    from autonomous.core.config import load_config
    from autonomous.core.exceptions import ConfigError, ConfigNotFoundError

    try:
        return load_config(path)
    except ConfigNotFoundError as exc:
        console.print(f"[red]Not configured:[/red] {exc}")
        sys.exit(ExitCode.CONFIG_ERROR)
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(ExitCode.CONFIG_ERROR)
