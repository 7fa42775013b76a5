"""
POSIX PTY supervisor using ptyprocess.

ptyprocess handles fork+exec, PTY allocation, and window size.  Blocking
reads and writes on the master fd run in the default executor so the
event loop stays free for the other sessions.
"""

from __future__ import annotations

import asyncio
import os
import signal
from collections.abc import AsyncIterator

import ptyprocess

from autonomous.os.tty.base import BasePTY, PTYConfig


class PosixPTY(BasePTY):
    """PTY supervisor for macOS and Linux."""

    def __init__(self, config: PTYConfig, instance_id: str) -> None:
        super().__init__(config, instance_id)
        self._proc: ptyprocess.PtyProcess | None = None

    async def start(self) -> None:
        self._proc = ptyprocess.PtyProcess.spawn(
            self.config.command,
            cwd=self.config.cwd or None,
            env=self.config.env or None,
            dimensions=(self.config.rows, self.config.cols),
        )

    def terminate(self, force: bool = False) -> None:
        if self._proc is None or self._proc.terminated:
            return
        try:
            os.kill(self._proc.pid, signal.SIGKILL if force else signal.SIGTERM)
        except ProcessLookupError:
            pass  # exited between the check and the signal

    def close(self) -> None:
        if self._proc is None or self._proc.closed:
            return
        if self._proc.terminated:
            self._proc.delayafterclose = 0  # already reaped
        try:
            self._proc.close(force=True)
        except ptyprocess.PtyProcessError as exc:
            raise OSError(f"Could not release PTY for pid {self._proc.pid}: {exc}") from exc

    @property
    def closed(self) -> bool:
        return self._proc is None or self._proc.closed

    def is_alive(self) -> bool:
        return self._proc is not None and self._proc.isalive()

    def pid(self) -> int:
        if self._proc is None:
            return -1
        return self._proc.pid

    async def wait(self) -> tuple[int | None, int | None]:
        if self._proc is None:
            return None, None
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._proc.wait)
        if self._proc.signalstatus is not None:
            return None, self._proc.signalstatus
        return self._proc.exitstatus, None

    async def read_output(self) -> AsyncIterator[bytes]:
        if self._proc is None:
            return
        loop = asyncio.get_running_loop()
        while True:
            try:
                chunk = await loop.run_in_executor(None, self._read_chunk)
            except EOFError:
                break
            if chunk:
                yield chunk

    def _read_chunk(self) -> bytes:
        """Blocking read — run in executor to avoid blocking the event loop."""
        if self._proc is None:
            raise EOFError
        return self._proc.read(self.config.read_chunk_bytes)

    async def write(self, data: bytes) -> None:
        if self._proc is None:
            return
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._proc.write, data)
