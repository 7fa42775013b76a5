"""
BaseAdapter — per-CLI launch profile for agent sessions.

An adapter knows, for one agent CLI:
  1. Which binary and default flags launch it non-interactively trusted
  2. Which inherited credentials must be stripped from its environment
  3. How to tell that its interface is ready for the work prompt

It turns that knowledge plus user config into a SessionConfig for the
SessionExecutor.  Adapters hold no per-session state.

Adapter registry:
  Use @AdapterRegistry.register("name") to register an adapter class.
  Retrieve with: AdapterRegistry.get("name")

Naming convention: <ToolName>Adapter (e.g. ClaudeCodeAdapter, GeminiAdapter)
"""

from __future__ import annotations

import shutil
from typing import Any

from autonomous.core.config import LLMConfig, SessionSettings
from autonomous.core.exceptions import AdapterError
from autonomous.core.session.models import ReadinessMode, ReadyMarkers, SessionConfig


class BaseAdapter:
    """Launch profile for one agent CLI."""

    #: Short identifier used in config files and CLI output (e.g. "claude")
    tool_name: str = ""

    #: Human-readable description shown in `autonomous run --help`
    description: str = ""

    #: Binary looked up on PATH when the config leaves cli_path empty
    default_command: str = ""

    #: Flags passed when the config leaves cli_args empty
    default_args: tuple[str, ...] = ()

    #: Environment variables removed from the child unless config overrides
    strip_env: tuple[str, ...] = ()

    readiness: ReadinessMode = ReadinessMode.DETECT
    ready_markers: ReadyMarkers = ReadyMarkers()

    def resolve_command(self, llm: LLMConfig | None = None) -> str:
        if llm is not None and llm.cli_path:
            return llm.cli_path
        return self.default_command

    def resolve_args(self, llm: LLMConfig | None = None) -> list[str]:
        if llm is not None and llm.cli_args:
            return list(llm.cli_args)
        return list(self.default_args)

    def resolve_strip_env(self, llm: LLMConfig | None = None) -> tuple[str, ...]:
        if llm is not None and llm.strip_env is not None:
            return tuple(llm.strip_env)
        return self.strip_env

    def build_session_config(
        self,
        *,
        prompt: str,
        cwd: str,
        log_file: str,
        instance_id: str,
        llm: LLMConfig | None = None,
        settings: SessionSettings | None = None,
        env: dict[str, str] | None = None,
        cols: int = 0,
        rows: int = 0,
    ) -> SessionConfig:
        """Merge adapter defaults with user config into a SessionConfig."""
        settings = settings or SessionSettings()
        return SessionConfig(
            command=self.resolve_command(llm),
            cwd=cwd,
            prompt=prompt,
            log_file=log_file,
            instance_id=instance_id,
            args=self.resolve_args(llm),
            env=dict(env or {}),
            strip_env=self.resolve_strip_env(llm),
            cols=cols,
            rows=rows,
            readiness=self.readiness,
            ready_markers=self.ready_markers,
            settle_delay_s=settings.settle_delay_s,
            submit_delay_s=settings.submit_delay_s,
            prompt_delay_s=settings.prompt_delay_s,
            buffer_limit=settings.readiness_buffer_chars,
        )

    # ------------------------------------------------------------------
    # Health check
    # ------------------------------------------------------------------

    def healthcheck(self, llm: LLMConfig | None = None) -> dict[str, Any]:
        """Return whether the CLI binary can be found on PATH."""
        command = self.resolve_command(llm)
        path = shutil.which(command)
        return {
            "status": "ok" if path else "missing",
            "adapter": self.tool_name,
            "command": command,
            "path": path,
        }


class _AdapterRegistryMeta(type):
    """Metaclass that maintains the adapter registry."""

    _registry: dict[str, type[BaseAdapter]] = {}


class AdapterRegistry(metaclass=_AdapterRegistryMeta):
    """Global registry of available agent CLI adapters."""

    @classmethod
    def register(cls, name: str) -> Any:
        """Decorator: @AdapterRegistry.register("claude")"""

        def decorator(adapter_cls: type[BaseAdapter]) -> type[BaseAdapter]:
            cls._registry[name] = adapter_cls
            return adapter_cls

        return decorator

    @classmethod
    def get(cls, name: str) -> type[BaseAdapter]:
        if name not in cls._registry:
            available = ", ".join(sorted(cls._registry.keys())) or "(none)"
            raise AdapterError(f"Unknown adapter: {name!r}. Available: {available}")
        return cls._registry[name]

    @classmethod
    def list_all(cls) -> dict[str, type[BaseAdapter]]:
        return dict(cls._registry)
