"""
Append-only session transcript.

Raw PTY bytes are appended verbatim as they arrive.  When the session ends
a trailer block is appended, flushed, and only then is the file closed::

    === Session Ended ===
    Exit code: 0
    Signal: undefined
    Ended: 2026-10-18T09:12:44.120391+00:00

Log scanners (see ``analyzer.py``) treat the sentinel line as proof that
the session is over, so the trailer must never be missing from a closed
transcript of an exited session.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO

import structlog

from autonomous.core.constants import SESSION_ENDED_SENTINEL

logger = structlog.get_logger()


def format_trailer(
    exit_code: int | None,
    signal: str | None,
    ended: datetime | None = None,
) -> str:
    """Render the end-of-session block appended to every transcript."""
    ended = ended or datetime.now(UTC)
    return (
        f"\n\n{SESSION_ENDED_SENTINEL}\n"
        f"Exit code: {exit_code if exit_code is not None else 'undefined'}\n"
        f"Signal: {signal or 'undefined'}\n"
        f"Ended: {ended.isoformat()}\n"
    )


class TranscriptWriter:
    """Binary append-mode transcript for one session."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._fh: BinaryIO | None = None
        self._finished = False

    @property
    def is_open(self) -> bool:
        return self._fh is not None

    def open(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = open(self.path, "ab")

    def write(self, chunk: bytes) -> None:
        """Append raw output.  Flushed per chunk so tailing readers see it live."""
        if self._fh is None:
            return
        self._fh.write(chunk)
        self._fh.flush()

    def finish(self, exit_code: int | None, signal: str | None) -> None:
        """Append the trailer, flush, then close.  Runs at most once."""
        if self._finished:
            return
        self._finished = True
        if self._fh is None:
            return
        try:
            self._fh.write(format_trailer(exit_code, signal).encode("utf-8"))
            self._fh.flush()
        except OSError as exc:
            logger.error("transcript_trailer_failed", path=str(self.path), error=str(exc))
        finally:
            self.close()

    def close(self) -> None:
        if self._fh is None:
            return
        fh, self._fh = self._fh, None
        fh.close()
