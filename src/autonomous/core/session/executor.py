"""
Session executor: run one interactive agent CLI to completion in a PTY.

Lifecycle::

    start(config)
      ├─ open transcript (append)
      ├─ spawn child on a new PTY (stripped env + instance variables)
      ├─ pty reader task ── for each chunk, in order:
      │     transcript.write → observer (or stdout) → readiness.feed
      │                                                 │ first match only
      │                                                 ▼
      │                          sleep(settle) → write prompt
      │                          sleep(submit) → write "\\r"
      └─ EOF → wait() → transcript trailer → close → exit event → settle result

Exit classification:
  signal-free exit   → start() returns the exit code, whatever its value
  killed by signal   → start() raises SessionKilledError
  spawn failure      → start() raises SpawnError

The executor never retries and imposes no timeout of its own.  A caller
that gives up on a session calls ``stop()``.
"""

from __future__ import annotations

import asyncio
import os
import signal
import sys
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

import structlog

from autonomous.core.constants import STOP_GRACE_S, SUBMIT_KEY
from autonomous.core.exceptions import SessionError, SessionKilledError, SpawnError
from autonomous.core.session.environment import build_child_env
from autonomous.core.session.models import (
    ReadinessMode,
    SessionConfig,
    SessionExit,
    SessionPhase,
)
from autonomous.core.session.readiness import ReadinessTracker
from autonomous.core.session.state import SessionLifecycle
from autonomous.core.session.transcript import TranscriptWriter
from autonomous.os.tty.base import BasePTY, PTYConfig

logger = structlog.get_logger()

OutputCallback = Callable[[bytes], None]
ExitCallback = Callable[[SessionExit], None]


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)


class SessionExecutor:
    """
    Owns one PTY-backed agent process for its whole life.

    One executor runs one session.  Several executors may run concurrently
    on the same event loop; they share nothing but a read-only view of
    ``os.environ`` at spawn time.
    """

    def __init__(
        self,
        on_output: OutputCallback | None = None,
        *,
        pty_factory: Callable[[PTYConfig, str], BasePTY] | None = None,
        stdout: BinaryIO | None = None,
    ) -> None:
        self._on_output = on_output
        self._exit_listeners: list[ExitCallback] = []
        self._pty_factory = pty_factory
        self._stdout = stdout

        self._config: SessionConfig | None = None
        self._pty: BasePTY | None = None
        self._transcript: TranscriptWriter | None = None
        self._tracker: ReadinessTracker | None = None
        self._lifecycle = SessionLifecycle()
        self._reader: asyncio.Task[None] | None = None
        self._inject_task: asyncio.Task[None] | None = None
        self._done: asyncio.Future[int] | None = None

        self._active = False
        self._prompt_sent = False
        self._finalized = False
        self._stop_requested = False
        self._spawned = asyncio.Event()
        self._log = logger

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def on_exit(self, cb: ExitCallback) -> None:
        """Register a listener for the structured exit event."""
        self._exit_listeners.append(cb)

    def pid(self) -> int | None:
        return self._pty.pid() if self._pty is not None else None

    def is_running(self) -> bool:
        return self._active and self._pty is not None

    @property
    def phase(self) -> SessionPhase:
        return self._lifecycle.phase

    @property
    def prompt_sent(self) -> bool:
        return self._prompt_sent

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, config: SessionConfig) -> int:
        """
        Spawn the agent and run it to completion.

        Returns the exit code of a signal-free exit.  Raises SpawnError if
        the process cannot be started and SessionKilledError if it was
        terminated by a signal.
        """
        if self._done is not None:
            raise SessionError("SessionExecutor.start() may only be called once")

        loop = asyncio.get_running_loop()
        self._done = loop.create_future()
        self._config = config
        self._log = logger.bind(instance_id=config.instance_id)

        cwd = Path(config.cwd)
        if not cwd.is_dir():
            self._finalized = True
            raise SpawnError(f"Working directory does not exist: {cwd}")

        transcript = TranscriptWriter(config.log_file)
        try:
            transcript.open()
        except OSError as exc:
            self._finalized = True
            raise SpawnError(f"Cannot open transcript {config.log_file}: {exc}") from exc

        env = build_child_env(
            os.environ,
            instance_id=config.instance_id,
            parent_pid=os.getpid(),
            strip=config.strip_env,
            overrides=config.env,
        )
        pty_config = PTYConfig(
            command=config.argv,
            env=env,
            cwd=str(cwd),
            cols=config.cols,
            rows=config.rows,
        )
        pty = self._make_pty(pty_config, config.instance_id)
        try:
            await pty.start()
        except (OSError, RuntimeError) as exc:
            transcript.close()
            self._finalized = True
            self._log.error("session_spawn_failed", command=config.command, error=str(exc))
            raise SpawnError(f"Cannot start {config.command!r}: {exc}") from exc
        finally:
            self._spawned.set()

        self._pty = pty
        self._transcript = transcript
        self._tracker = ReadinessTracker(
            cwd=str(cwd), markers=config.ready_markers, limit=config.buffer_limit
        )
        self._active = not self._stop_requested
        self._lifecycle.transition(SessionPhase.AWAITING_READINESS)
        self._log.info(
            "session_spawned",
            pid=pty.pid(),
            command=config.command,
            cwd=str(cwd),
            readiness=str(config.readiness),
        )

        if (
            self._active
            and config.readiness == ReadinessMode.DELAY
            and self._tracker.trigger()
        ):
            self._schedule_injection(config.prompt_delay_s)

        self._reader = asyncio.create_task(
            self._pump(pty), name=f"pty_reader:{config.instance_id}"
        )
        return await self._done

    async def stop(self, timeout_s: float = STOP_GRACE_S) -> None:
        """
        Terminate the agent: SIGTERM, then SIGKILL after *timeout_s*.

        Safe to call repeatedly, before start, and after the process exited.
        A stop issued while the child is still being spawned takes effect as
        soon as the spawn completes.
        """
        if self._finalized or self._done is None:
            return
        if self._pty is None:
            self._stop_requested = True
            await self._spawned.wait()
        pty = self._pty
        if self._finalized or pty is None:
            return

        self._active = False
        self._cancel_injection()
        self._log.info("session_stop_requested", pid=pty.pid())

        pty.terminate(force=False)
        if await self._wait_finalized(timeout_s):
            return
        self._log.warning("session_stop_escalated", pid=pty.pid())
        pty.terminate(force=True)
        if not await self._wait_finalized(timeout_s):
            if self._reader is not None:
                self._reader.cancel()
            self._finalize(None, signal.SIGKILL)

    # ------------------------------------------------------------------
    # Output pump
    # ------------------------------------------------------------------

    async def _pump(self, pty: BasePTY) -> None:
        """Consume PTY output in order until EOF, then reap and finalize."""
        try:
            async for chunk in pty.read_output():
                self._handle_chunk(chunk)
        except Exception as exc:  # noqa: BLE001
            self._log.error("session_output_failed", error=str(exc))
            pty.terminate(force=True)
        exit_code, signum = await pty.wait()
        self._finalize(exit_code, signum)

    def _handle_chunk(self, chunk: bytes) -> None:
        if self._transcript is not None:
            self._transcript.write(chunk)

        if self._on_output is not None:
            try:
                self._on_output(chunk)
            except Exception as exc:  # noqa: BLE001
                self._log.warning("output_observer_failed", error=str(exc))
        else:
            out = self._stdout or sys.stdout.buffer
            out.write(chunk)
            out.flush()

        if self._tracker is not None and self._tracker.feed(chunk):
            self._log.info("readiness_detected", buffered_chars=len(self._tracker.snapshot()))
            assert self._config is not None
            self._schedule_injection(self._config.settle_delay_s)

    # ------------------------------------------------------------------
    # Prompt injection
    # ------------------------------------------------------------------

    def _schedule_injection(self, delay_s: float) -> None:
        self._inject_task = asyncio.create_task(self._inject(delay_s))

    async def _inject(self, delay_s: float) -> None:
        config = self._config
        assert config is not None

        await asyncio.sleep(delay_s)
        if not self._active or self._pty is None or self._prompt_sent:
            return
        self._prompt_sent = True
        try:
            await self._pty.write(config.prompt.encode("utf-8"))
            if not self._active:
                return
            self._lifecycle.transition(SessionPhase.PROMPT_INJECTED)
            self._log.info("prompt_injected", chars=len(config.prompt))

            # Submit key is its own write, never appended to the prompt.
            await asyncio.sleep(config.submit_delay_s)
            if not self._active or self._pty is None:
                return
            await self._pty.write(SUBMIT_KEY)
            if self._active:
                self._lifecycle.transition(SessionPhase.RUNNING)
        except OSError as exc:
            self._log.warning("prompt_injection_failed", error=str(exc))

    def _cancel_injection(self) -> None:
        task = self._inject_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    async def _wait_finalized(self, timeout_s: float) -> bool:
        if self._reader is not None and not self._reader.done():
            await asyncio.wait({self._reader}, timeout=timeout_s)
        return self._finalized

    def _finalize(self, exit_code: int | None, signum: int | None) -> None:
        """Trailer, close, exit event, settle.  Runs exactly once."""
        if self._finalized:
            return
        self._finalized = True
        self._active = False
        self._cancel_injection()

        signal_name = _signal_name(signum) if signum else None
        if self._transcript is not None:
            self._transcript.finish(exit_code, signal_name)
        self._lifecycle.transition(SessionPhase.EXITED)
        pid = None
        if self._pty is not None:
            pid = self._pty.pid()
            try:
                self._pty.close()
            except OSError as exc:
                self._log.warning("pty_close_failed", error=str(exc))
            self._pty = None

        event = SessionExit(exit_code=exit_code, signal=signal_name)
        self._log.info(
            "session_exited",
            pid=pid,
            exit_code=exit_code,
            signal=signal_name,
            prompt_sent=self._prompt_sent,
        )
        for cb in self._exit_listeners:
            try:
                cb(event)
            except Exception as exc:  # noqa: BLE001
                self._log.warning("exit_listener_failed", error=str(exc))
        self._settle(event)

    def _settle(self, event: SessionExit) -> None:
        done = self._done
        if done is None or done.done():
            return
        if event.signal is not None:
            done.set_exception(SessionKilledError(event.signal, event.exit_code))
        else:
            done.set_result(event.exit_code if event.exit_code is not None else 0)

    def _make_pty(self, config: PTYConfig, instance_id: str) -> BasePTY:
        if self._pty_factory is not None:
            return self._pty_factory(config, instance_id)
        from autonomous.os.tty import get_pty_class

        return get_pty_class()(config, instance_id)
