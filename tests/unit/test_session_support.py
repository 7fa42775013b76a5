"""Unit tests for session support modules: environment, transcript, lifecycle, models."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from autonomous.core.constants import ENV_INSTANCE_ID, ENV_PARENT_PID
from autonomous.core.session.environment import build_child_env
from autonomous.core.session.models import SessionConfig, SessionExit, SessionPhase
from autonomous.core.session.state import SessionLifecycle
from autonomous.core.session.transcript import TranscriptWriter, format_trailer

# ---------------------------------------------------------------------------
# Child environment
# ---------------------------------------------------------------------------


class TestBuildChildEnv:
    BASE = {"PATH": "/usr/bin", "ANTHROPIC_API_KEY": "sk-secret", "TERM": "dumb", "HOME": "/h"}

    def test_strips_named_variables(self) -> None:
        env = build_child_env(
            self.BASE, instance_id="claude-1", parent_pid=99, strip=("ANTHROPIC_API_KEY",)
        )
        assert "ANTHROPIC_API_KEY" not in env
        assert env["PATH"] == "/usr/bin"

    def test_stamps_instance_variables(self) -> None:
        env = build_child_env(self.BASE, instance_id="claude-1", parent_pid=99)
        assert env[ENV_INSTANCE_ID] == "claude-1"
        assert env[ENV_PARENT_PID] == "99"

    def test_forces_term(self) -> None:
        env = build_child_env(self.BASE, instance_id="x", parent_pid=1)
        assert env["TERM"] == "xterm-256color"

    def test_overrides_applied_but_cannot_replace_identity(self) -> None:
        env = build_child_env(
            self.BASE,
            instance_id="x",
            parent_pid=1,
            overrides={"FOO": "bar", ENV_INSTANCE_ID: "spoofed"},
        )
        assert env["FOO"] == "bar"
        assert env[ENV_INSTANCE_ID] == "x"

    def test_base_is_not_mutated(self) -> None:
        base = dict(self.BASE)
        build_child_env(base, instance_id="x", parent_pid=1, strip=("ANTHROPIC_API_KEY",))
        assert base == self.BASE


# ---------------------------------------------------------------------------
# Transcript
# ---------------------------------------------------------------------------


class TestTranscript:
    def test_trailer_format(self) -> None:
        ended = datetime(2026, 10, 18, 9, 0, tzinfo=UTC)
        assert format_trailer(0, None, ended) == (
            "\n\n=== Session Ended ===\n"
            "Exit code: 0\n"
            "Signal: undefined\n"
            "Ended: 2026-10-18T09:00:00+00:00\n"
        )

    def test_trailer_for_signal(self) -> None:
        text = format_trailer(None, "SIGTERM")
        assert "Exit code: undefined\n" in text
        assert "Signal: SIGTERM\n" in text

    def test_chunks_then_trailer_then_closed(self, tmp_path: Path) -> None:
        path = tmp_path / "logs" / "session.log"
        writer = TranscriptWriter(path)
        writer.open()
        writer.write(b"hello ")
        writer.write(b"\x1b[1mworld\x1b[0m")
        writer.finish(3, None)

        assert not writer.is_open
        data = path.read_bytes()
        assert data.startswith(b"hello \x1b[1mworld\x1b[0m\n\n=== Session Ended ===\n")
        assert b"Exit code: 3\n" in data

    def test_finish_runs_once(self, tmp_path: Path) -> None:
        path = tmp_path / "session.log"
        writer = TranscriptWriter(path)
        writer.open()
        writer.finish(0, None)
        writer.finish(1, "SIGKILL")
        assert path.read_text().count("=== Session Ended ===") == 1

    def test_appends_to_existing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "session.log"
        path.write_bytes(b"previous run\n")
        writer = TranscriptWriter(path)
        writer.open()
        writer.write(b"next run\n")
        writer.close()
        assert path.read_bytes() == b"previous run\nnext run\n"

    def test_write_after_close_is_ignored(self, tmp_path: Path) -> None:
        writer = TranscriptWriter(tmp_path / "session.log")
        writer.open()
        writer.close()
        writer.write(b"late")
        writer.close()
        assert (tmp_path / "session.log").read_bytes() == b""


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestSessionLifecycle:
    def test_happy_path(self) -> None:
        seen: list[tuple[SessionPhase, SessionPhase]] = []
        lc = SessionLifecycle(on_transition=lambda old, new: seen.append((old, new)))
        for phase in (
            SessionPhase.AWAITING_READINESS,
            SessionPhase.PROMPT_INJECTED,
            SessionPhase.RUNNING,
            SessionPhase.EXITED,
        ):
            lc.transition(phase)
        assert lc.is_terminal
        assert len(lc.history) == 4
        assert seen[0] == (SessionPhase.STARTING, SessionPhase.AWAITING_READINESS)

    def test_exit_allowed_from_any_live_phase(self) -> None:
        lc = SessionLifecycle()
        lc.transition(SessionPhase.AWAITING_READINESS)
        lc.transition(SessionPhase.EXITED)
        assert lc.phase == SessionPhase.EXITED

    def test_cannot_skip_injection(self) -> None:
        lc = SessionLifecycle()
        lc.transition(SessionPhase.AWAITING_READINESS)
        with pytest.raises(ValueError):
            lc.transition(SessionPhase.RUNNING)

    def test_exited_is_terminal(self) -> None:
        lc = SessionLifecycle()
        lc.transition(SessionPhase.EXITED)
        with pytest.raises(ValueError):
            lc.transition(SessionPhase.AWAITING_READINESS)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class TestSessionModels:
    def test_argv(self) -> None:
        cfg = SessionConfig(
            command="claude",
            args=["--dangerously-skip-permissions"],
            cwd="/tmp",
            prompt="hi",
            log_file="/tmp/x.log",
            instance_id="c-1",
            cols=80,
            rows=24,
        )
        assert cfg.argv == ["claude", "--dangerously-skip-permissions"]
        assert (cfg.cols, cfg.rows) == (80, 24)

    def test_dimensions_default_to_terminal_size(self) -> None:
        cfg = SessionConfig(command="sh", cwd="/", prompt="", log_file="x", instance_id="i")
        assert cfg.cols > 0
        assert cfg.rows > 0

    def test_session_exit_killed(self) -> None:
        assert SessionExit(exit_code=None, signal="SIGTERM").killed
        assert not SessionExit(exit_code=1).killed
