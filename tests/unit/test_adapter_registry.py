"""
Unit tests for the adapter registry and built-in adapter profiles.

Regression coverage for:
- Registry is non-empty in a clean import (no manual imports required)
- "claude" and "claude-code" both resolve to ClaudeCodeAdapter
- Unknown adapter error includes available adapter ids
- Adapter defaults and config overrides flow into SessionConfig
"""

from __future__ import annotations

import pytest

from autonomous.core.config import LLMConfig, SessionSettings
from autonomous.core.exceptions import AdapterError
from autonomous.core.session.models import ReadinessMode

# ---------------------------------------------------------------------------
# Registry bootstrap: importing autonomous.adapters fills the registry
# ---------------------------------------------------------------------------


class TestRegistryBootstrap:
    def test_all_builtin_adapters_present(self) -> None:
        import autonomous.adapters  # noqa: F401
        from autonomous.adapters.base import AdapterRegistry

        registered = AdapterRegistry.list_all()
        for expected in ("claude", "claude-code", "gemini", "codex", "openai"):
            assert expected in registered, f"Expected adapter {expected!r} to be registered"

    def test_claude_code_alias_resolves_to_same_class(self) -> None:
        import autonomous.adapters  # noqa: F401
        from autonomous.adapters.base import AdapterRegistry
        from autonomous.adapters.claude_code import ClaudeCodeAdapter

        assert AdapterRegistry.get("claude") is ClaudeCodeAdapter
        assert AdapterRegistry.get("claude-code") is ClaudeCodeAdapter

    def test_unknown_adapter_lists_available(self) -> None:
        import autonomous.adapters  # noqa: F401
        from autonomous.adapters.base import AdapterRegistry

        with pytest.raises(AdapterError, match="claude"):
            AdapterRegistry.get("cursor")


# ---------------------------------------------------------------------------
# Built-in profiles
# ---------------------------------------------------------------------------


class TestBuiltinProfiles:
    def test_claude_profile(self) -> None:
        from autonomous.adapters.claude_code import ClaudeCodeAdapter

        adapter = ClaudeCodeAdapter()
        assert adapter.resolve_command() == "claude"
        assert adapter.resolve_args() == ["--dangerously-skip-permissions"]
        assert adapter.resolve_strip_env() == ("ANTHROPIC_API_KEY",)
        assert adapter.readiness == ReadinessMode.DETECT
        assert "❯" in adapter.ready_markers.prompts
        assert "? for shortcuts" in adapter.ready_markers.banners

    def test_gemini_profile(self) -> None:
        from autonomous.adapters.gemini_cli import GeminiAdapter

        adapter = GeminiAdapter()
        assert adapter.resolve_args() == ["--yolo"]
        assert "GEMINI_API_KEY" in adapter.resolve_strip_env()
        assert adapter.readiness == ReadinessMode.DELAY

    def test_codex_profile(self) -> None:
        from autonomous.adapters.openai_cli import CodexAdapter

        adapter = CodexAdapter()
        assert adapter.resolve_command() == "codex"
        assert adapter.resolve_args() == ["--dangerously-bypass-approvals-and-sandbox"]
        assert adapter.resolve_strip_env() == ("OPENAI_API_KEY",)
        assert adapter.readiness == ReadinessMode.DELAY


# ---------------------------------------------------------------------------
# Session config construction
# ---------------------------------------------------------------------------


class TestBuildSessionConfig:
    def _build(self, llm: LLMConfig | None = None, settings: SessionSettings | None = None):
        from autonomous.adapters.claude_code import ClaudeCodeAdapter

        return ClaudeCodeAdapter().build_session_config(
            prompt="Fix #1",
            cwd="/work/repo",
            log_file="/tmp/claude-1.log",
            instance_id="claude-1",
            llm=llm,
            settings=settings,
            cols=90,
            rows=30,
        )

    def test_defaults(self) -> None:
        cfg = self._build()
        assert cfg.argv == ["claude", "--dangerously-skip-permissions"]
        assert cfg.strip_env == ("ANTHROPIC_API_KEY",)
        assert cfg.readiness == ReadinessMode.DETECT
        assert cfg.settle_delay_s == 1.0
        assert cfg.submit_delay_s == 0.25
        assert (cfg.cols, cfg.rows) == (90, 30)

    def test_config_overrides(self) -> None:
        llm = LLMConfig(cli_path="/opt/claude", cli_args=["--verbose"], strip_env=[])
        settings = SessionSettings(settle_delay_s=2.5, readiness_buffer_chars=4096)
        cfg = self._build(llm, settings)
        assert cfg.argv == ["/opt/claude", "--verbose"]
        assert cfg.strip_env == ()
        assert cfg.settle_delay_s == 2.5
        assert cfg.buffer_limit == 4096


class TestHealthcheck:
    def test_found_on_path(self) -> None:
        from autonomous.adapters.claude_code import ClaudeCodeAdapter

        health = ClaudeCodeAdapter().healthcheck(LLMConfig(cli_path="sh"))
        assert health["status"] == "ok"
        assert health["path"]

    def test_missing(self) -> None:
        from autonomous.adapters.claude_code import ClaudeCodeAdapter

        health = ClaudeCodeAdapter().healthcheck(LLMConfig(cli_path="no-such-agent-cli"))
        assert health["status"] == "missing"
        assert health["adapter"] == "claude"
