"""PTY supervisor dispatch — macOS and Linux only."""

from __future__ import annotations

import sys


def get_pty_class() -> type:
    """Return the appropriate PTY class for the current platform."""
    if sys.platform == "darwin" or sys.platform.startswith("linux"):
        from autonomous.os.tty.posix import PosixPTY

        return PosixPTY
    raise RuntimeError(
        f"Unsupported platform: {sys.platform}. autonomous supports macOS and Linux only."
    )
