"""
Claude Code adapter.

Claude Code draws a boxed input area once it is interactive.  The box
shows the working directory (often as ``~/...``) and a ``❯`` or ``>``
prompt, with a footer hint such as ``? for shortcuts`` or, when launched
with --dangerously-skip-permissions, ``bypass permissions on``.  The
executor injects the prompt only when the cwd and one of those appear
together.

ANTHROPIC_API_KEY is stripped so the CLI uses the user's interactive
login rather than billing an inherited API key.
"""

from __future__ import annotations

from autonomous.adapters.base import AdapterRegistry, BaseAdapter
from autonomous.core.session.models import ReadinessMode, ReadyMarkers


@AdapterRegistry.register("claude")
@AdapterRegistry.register("claude-code")
class ClaudeCodeAdapter(BaseAdapter):
    """Adapter for the `claude` CLI (Claude Code by Anthropic)."""

    tool_name = "claude"
    description = "Claude Code by Anthropic (claude CLI)"
    default_command = "claude"
    default_args = ("--dangerously-skip-permissions",)
    strip_env = ("ANTHROPIC_API_KEY",)
    readiness = ReadinessMode.DETECT
    ready_markers = ReadyMarkers(
        prompts=("❯", "> "),
        banners=("? for shortcuts", "bypass permissions"),
    )
