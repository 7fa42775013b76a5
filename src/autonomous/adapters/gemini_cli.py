"""
Gemini CLI adapter.

Wraps the Google Gemini CLI (``gemini`` binary).  Its start-up screen has
no stable banner, so the prompt is injected a fixed delay after spawn
rather than on detected readiness.

Registration key: "gemini" (``autonomous run gemini``)
"""

from __future__ import annotations

from autonomous.adapters.base import AdapterRegistry, BaseAdapter
from autonomous.core.session.models import ReadinessMode


@AdapterRegistry.register("gemini")
class GeminiAdapter(BaseAdapter):
    tool_name = "gemini"
    description = "Google Gemini CLI (gemini)"
    default_command = "gemini"
    default_args = ("--yolo",)
    strip_env = ("GEMINI_API_KEY", "GOOGLE_API_KEY")
    readiness = ReadinessMode.DELAY
