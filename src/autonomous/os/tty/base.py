"""
Abstract PTY supervisor interface.

Concrete implementations:
  PosixPTY — ptyprocess (macOS, Linux)

A supervisor owns exactly one child process and its PTY master fd.  The
session executor drives it from a single asyncio task:

  read_output() — async stream of raw chunks, in OS delivery order, ending at EOF
  write()       — write bytes to the child's stdin
  wait()        — reap the child and return (exit_code, signal_number)
  close()       — release the master fd once the child has been reaped
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from autonomous.core.constants import DEFAULT_COLS, DEFAULT_ROWS, READ_CHUNK_BYTES


@dataclass
class PTYConfig:
    """Configuration for a PTY session."""

    command: list[str]  # argv to exec
    env: dict[str, str] = field(default_factory=dict)  # complete child environment
    cwd: str = ""
    cols: int = DEFAULT_COLS
    rows: int = DEFAULT_ROWS
    read_chunk_bytes: int = READ_CHUNK_BYTES


class BasePTY(ABC):
    """
    Abstract PTY supervisor.

    Subclasses wrap a concrete PTY implementation and expose a uniform
    async interface to the session executor.
    """

    def __init__(self, config: PTYConfig, instance_id: str) -> None:
        self.config = config
        self.instance_id = instance_id

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @abstractmethod
    async def start(self) -> None:
        """Spawn the child process on a new PTY.  Raises OSError on failure."""

    @abstractmethod
    def terminate(self, force: bool = False) -> None:
        """Send SIGTERM (or SIGKILL when *force*) without waiting."""

    @abstractmethod
    def close(self) -> None:
        """Release the PTY master fd.  Safe to call more than once."""

    @abstractmethod
    def is_alive(self) -> bool:
        """Return True if the child process is still running."""

    @abstractmethod
    def pid(self) -> int:
        """Return the PID of the child process, or -1 before start."""

    @abstractmethod
    async def wait(self) -> tuple[int | None, int | None]:
        """
        Wait for the child to exit.

        Returns ``(exit_code, None)`` for a normal exit and
        ``(None, signal_number)`` when the child was killed by a signal.
        """

    # ------------------------------------------------------------------
    # I/O
    # ------------------------------------------------------------------

    @abstractmethod
    def read_output(self) -> AsyncIterator[bytes]:
        """
        Yield raw byte chunks from the PTY master fd.

        The iterator exits when the PTY reports EOF (child exited).
        """
        ...

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Write *data* to the PTY master fd (child's stdin)."""
