"""
Session domain models.

A session is one run of an agent CLI inside a PTY: spawned, fed a prompt
once its interface is ready, and observed until it exits.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from enum import StrEnum

from autonomous.core.constants import (
    DEFAULT_COLS,
    DEFAULT_ROWS,
    DEFAULT_STRIP_ENV,
    PROMPT_DELAY_S,
    READINESS_BUFFER_CHARS,
    SETTLE_DELAY_S,
    SUBMIT_DELAY_S,
)


class SessionPhase(StrEnum):
    STARTING = "starting"
    AWAITING_READINESS = "awaiting_readiness"
    PROMPT_INJECTED = "prompt_injected"
    RUNNING = "running"
    EXITED = "exited"


class ReadinessMode(StrEnum):
    DETECT = "detect"  # wait for cwd + prompt marker / banner in the output
    DELAY = "delay"  # inject a fixed delay after spawn


@dataclass(frozen=True)
class ReadyMarkers:
    """Output substrings that show the agent is accepting input."""

    prompts: tuple[str, ...] = ("❯", "> ")
    banners: tuple[str, ...] = ()


def _terminal_size() -> tuple[int, int]:
    size = shutil.get_terminal_size(fallback=(DEFAULT_COLS, DEFAULT_ROWS))
    return size.columns, size.lines


@dataclass
class SessionConfig:
    """Everything needed to run one agent session."""

    command: str
    cwd: str
    prompt: str
    log_file: str
    instance_id: str
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    strip_env: tuple[str, ...] = DEFAULT_STRIP_ENV
    cols: int = 0  # 0 → caller's terminal width
    rows: int = 0  # 0 → caller's terminal height
    readiness: ReadinessMode = ReadinessMode.DETECT
    ready_markers: ReadyMarkers = field(default_factory=ReadyMarkers)
    settle_delay_s: float = SETTLE_DELAY_S
    submit_delay_s: float = SUBMIT_DELAY_S
    prompt_delay_s: float = PROMPT_DELAY_S
    buffer_limit: int = READINESS_BUFFER_CHARS

    def __post_init__(self) -> None:
        if not self.cols or not self.rows:
            cols, rows = _terminal_size()
            self.cols = self.cols or cols
            self.rows = self.rows or rows

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]


@dataclass(frozen=True)
class SessionExit:
    """Structured exit event: ``signal`` is set only for signal-killed children."""

    exit_code: int | None
    signal: str | None = None

    @property
    def killed(self) -> bool:
        return self.signal is not None
