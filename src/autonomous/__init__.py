"""
autonomous — assign GitHub issues to coding agents and drive them to completion.

The package ranks candidate issues from cached AI evaluations and live
project-board fields, then runs an interactive agent CLI inside a
pseudo-terminal, injecting the work prompt once the agent is ready.

Package layout (src/autonomous/):
  core/prioritization/ — hybrid scoring, field mapping, cache loading
  core/session/        — readiness detection, transcript, session executor
  os/tty/              — PTY supervisor (macOS, Linux)
  adapters/            — agent CLI adapters (Claude Code, Gemini, Codex)
  cli/                 — Click CLI entry point
"""

__version__ = "0.4.0"
__all__ = ["__version__"]
