"""autonomous constants: filesystem layout, session timings, and limits."""

from __future__ import annotations

import os
from enum import IntEnum
from pathlib import Path

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    ENV_ERROR = 3
    SESSION_KILLED = 4
    DEPENDENCY_MISSING = 7


# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------


def _default_data_dir() -> Path:
    """Return the autonomous data directory (``~/.autonomous`` unless overridden)."""
    if override := os.environ.get("AUTONOMOUS_HOME"):
        return Path(override).expanduser()
    return Path.home() / ".autonomous"


CONFIG_FILENAME = "config.toml"
EVALUATION_CACHE_FILENAME = "evaluation-cache.json"
LOGS_DIR_NAME = "logs"

# ---------------------------------------------------------------------------
# Session timings and limits
# ---------------------------------------------------------------------------

SETTLE_DELAY_S = 1.0  # wait after readiness before writing the prompt
SUBMIT_DELAY_S = 0.25  # wait between prompt text and the submit keystroke
PROMPT_DELAY_S = 1.5  # fixed injection delay for CLIs without a ready banner
READINESS_BUFFER_CHARS = 8192  # rolling readiness window
READ_CHUNK_BYTES = 4096  # max bytes per PTY read
STOP_GRACE_S = 5.0  # SIGTERM → SIGKILL escalation window
DEFAULT_COLS = 120
DEFAULT_ROWS = 40

SUBMIT_KEY = b"\r"

# ---------------------------------------------------------------------------
# Transcript trailer
# ---------------------------------------------------------------------------

SESSION_ENDED_SENTINEL = "=== Session Ended ==="

# ---------------------------------------------------------------------------
# Child environment
# ---------------------------------------------------------------------------

ENV_INSTANCE_ID = "AUTONOMOUS_INSTANCE_ID"
ENV_PARENT_PID = "AUTONOMOUS_PARENT_PID"
DEFAULT_STRIP_ENV: tuple[str, ...] = ("ANTHROPIC_API_KEY",)

# ---------------------------------------------------------------------------
# Prioritization
# ---------------------------------------------------------------------------

SPRINT_BOOST_SCORE = 10.0
NEUTRAL_SIZE_SCORE = 5.0
DEFAULT_SPRINT_DURATION_DAYS = 14
