"""
End-to-end session tests against a real PTY (ptyprocess) using /bin/sh.

The shell prints its physical cwd and a "> " prompt, reads one line,
echoes it, and exits; the executor must detect readiness, type the prompt
and submit it.
"""

from __future__ import annotations

import shutil
import sys
from pathlib import Path

import pytest

from autonomous.core.exceptions import SessionKilledError, SpawnError
from autonomous.core.session import ReadyMarkers, SessionConfig, SessionExecutor
from autonomous.os.tty import get_pty_class
from autonomous.os.tty.base import PTYConfig
from autonomous.os.tty.posix import PosixPTY

pytestmark = pytest.mark.skipif(
    sys.platform not in ("linux", "darwin") or shutil.which("sh") is None,
    reason="POSIX PTY required",
)

READ_ONE_LINE = 'pwd -P; printf "> "; read line; echo "got:$line"; exit 3'


def _config(tmp_path: Path, script: str, prompt: str = "hello") -> SessionConfig:
    workdir = tmp_path / "work"
    workdir.mkdir(exist_ok=True)
    return SessionConfig(
        command="sh",
        args=["-c", script],
        cwd=str(workdir),
        prompt=prompt,
        log_file=str(tmp_path / "session.log"),
        instance_id="sh-1",
        cols=80,
        rows=24,
        ready_markers=ReadyMarkers(prompts=("> ",)),
        settle_delay_s=0.05,
        submit_delay_s=0.05,
    )


class TestPosixSession:
    @pytest.mark.asyncio
    async def test_prompt_reaches_child(self, tmp_path: Path) -> None:
        chunks: list[bytes] = []
        config = _config(tmp_path, READ_ONE_LINE)
        code = await SessionExecutor(on_output=chunks.append).start(config)

        assert code == 3
        output = b"".join(chunks).decode(errors="replace")
        assert "got:hello" in output
        text = Path(config.log_file).read_text(errors="replace")
        assert "got:hello" in text
        assert text.rstrip().splitlines()[-3:-1] == ["Exit code: 3", "Signal: undefined"]

    @pytest.mark.asyncio
    async def test_killed_by_signal(self, tmp_path: Path) -> None:
        config = _config(tmp_path, "kill -TERM $$")
        with pytest.raises(SessionKilledError) as excinfo:
            await SessionExecutor(on_output=lambda _: None).start(config)
        assert excinfo.value.signal == "SIGTERM"
        assert "Signal: SIGTERM" in Path(config.log_file).read_text()

    @pytest.mark.asyncio
    async def test_handle_released_after_exit(self, tmp_path: Path) -> None:
        ptys: list[PosixPTY] = []

        def factory(config: PTYConfig, instance_id: str) -> PosixPTY:
            ptys.append(PosixPTY(config, instance_id))
            return ptys[-1]

        executor = SessionExecutor(on_output=lambda _: None, pty_factory=factory)
        assert await executor.start(_config(tmp_path, "exit 0")) == 0
        assert ptys[0].closed

    @pytest.mark.asyncio
    async def test_observer_error_does_not_kill_child(self, tmp_path: Path) -> None:
        def observer(_: bytes) -> None:
            raise RuntimeError("render failed")

        config = _config(tmp_path, "echo hi; sleep 0.2; exit 0")
        assert await SessionExecutor(on_output=observer).start(config) == 0
        text = Path(config.log_file).read_text()
        assert "hi" in text
        assert "Signal: undefined" in text

    @pytest.mark.asyncio
    async def test_missing_executable(self, tmp_path: Path) -> None:
        config = _config(tmp_path, "true")
        config.command = "definitely-not-an-agent-cli"
        with pytest.raises(SpawnError):
            await SessionExecutor(on_output=lambda _: None).start(config)


class TestPosixPTY:
    @pytest.mark.asyncio
    async def test_pid_before_and_after_start(self, tmp_path: Path) -> None:
        pty = get_pty_class()(PTYConfig(command=["sh", "-c", "exit 0"], cwd=str(tmp_path)), "t")
        assert pty.pid() == -1
        await pty.start()
        assert pty.pid() > 0
        async for _ in pty.read_output():
            pass
        assert await pty.wait() == (0, None)
        pty.terminate()  # already exited: no error
        pty.close()
        assert pty.closed
        pty.close()
