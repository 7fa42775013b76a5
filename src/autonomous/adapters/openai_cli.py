"""
OpenAI Codex CLI adapter.

Wraps the OpenAI Codex CLI (``codex`` binary).  Like Gemini, it is driven
in fixed-delay mode.

Registration keys: "codex", "openai" (``autonomous run codex``)
"""

from __future__ import annotations

from autonomous.adapters.base import AdapterRegistry, BaseAdapter
from autonomous.core.session.models import ReadinessMode


@AdapterRegistry.register("codex")
@AdapterRegistry.register("openai")
class CodexAdapter(BaseAdapter):
    tool_name = "codex"
    description = "OpenAI Codex CLI (codex)"
    default_command = "codex"
    default_args = ("--dangerously-bypass-approvals-and-sandbox",)
    strip_env = ("OPENAI_API_KEY",)
    readiness = ReadinessMode.DELAY
