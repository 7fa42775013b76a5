"""
Transcript analysis: did a session finish its work?

The orchestrator runs these scans over a transcript written by
TranscriptWriter to decide whether an assignment can move on, even when
the session ran in a process that has since gone away.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import structlog

from autonomous.core.constants import SESSION_ENDED_SENTINEL
from autonomous.core.session.sanitize import strip_ansi

logger = structlog.get_logger()

COMPLETION_INDICATORS: tuple[str, ...] = (
    r"pull request created",
    r"pr created",
    r"pr #\d+ is (open|ready)",
    r"work.*complete",
    r"task.*complete",
    r"phase.*complete",
    r"documentation.*complete",
    r"implementation.*complete",
    r"all.*requirements.*met",
    r"acceptance criteria.*met",
    r"✅.*complete",
    r"ready for review",
    r"awaiting.*review",
    r"merged to",
    r"successfully merged",
)

_PR_PATTERNS = (
    re.compile(r"\bpr\s+#(\d+)", re.IGNORECASE),
    re.compile(r"pull request\s+#(\d+)", re.IGNORECASE),
    re.compile(r"github\.com/[^/\s]+/[^/\s]+/pull/(\d+)", re.IGNORECASE),
)

_SENTINEL_RE = re.compile(re.escape(SESSION_ENDED_SENTINEL), re.IGNORECASE)
_TAIL_LINES = 1000


@dataclass(frozen=True)
class CompletionReport:
    is_complete: bool
    has_recent_activity: bool
    session_ended: bool = False
    indicators: list[str] = field(default_factory=list)
    last_activity: datetime | None = None


def _read_text(path: Path) -> str:
    return strip_ansi(path.read_bytes().decode("utf-8", errors="replace"))


def _tail(text: str, lines: int = _TAIL_LINES) -> str:
    return "\n".join(text.split("\n")[-lines:])


def has_session_ended(log_path: Path | str) -> bool:
    """Return True if the transcript carries the end-of-session sentinel."""
    path = Path(log_path)
    if not path.exists():
        return False
    return bool(_SENTINEL_RE.search(_tail(_read_text(path))))


def detect_session_completion(log_path: Path | str, max_age_s: float = 600.0) -> CompletionReport:
    """
    Scan the last lines of a transcript for completion signals.

    Complete means: the sentinel is present, at least one completion
    indicator matches, and the file has not been written to for
    *max_age_s* seconds.
    """
    path = Path(log_path)
    try:
        if not path.exists():
            return CompletionReport(is_complete=False, has_recent_activity=False)

        mtime = path.stat().st_mtime
        has_recent_activity = (time.time() - mtime) < max_age_s
        recent = _tail(_read_text(path)).lower()
    except OSError as exc:
        logger.warning("transcript_scan_failed", path=str(path), error=str(exc))
        return CompletionReport(is_complete=False, has_recent_activity=False)

    indicators = [p for p in COMPLETION_INDICATORS if re.search(p, recent, re.IGNORECASE)]
    ended = bool(_SENTINEL_RE.search(recent))

    return CompletionReport(
        is_complete=ended and bool(indicators) and not has_recent_activity,
        has_recent_activity=has_recent_activity,
        session_ended=ended,
        indicators=indicators,
        last_activity=datetime.fromtimestamp(mtime, UTC),
    )


def extract_pr_number(log_path: Path | str) -> int | None:
    """Return the first pull request number mentioned in the transcript."""
    path = Path(log_path)
    try:
        if not path.exists():
            return None
        text = _read_text(path)
    except OSError as exc:
        logger.warning("transcript_scan_failed", path=str(path), error=str(exc))
        return None

    for pattern in _PR_PATTERNS:
        if match := pattern.search(text):
            return int(match.group(1))
    return None


def is_session_idle(log_path: Path | str, idle_threshold_s: float = 1800.0) -> bool:
    """Return True if the transcript is missing or untouched for *idle_threshold_s*."""
    path = Path(log_path)
    try:
        mtime = path.stat().st_mtime
    except OSError:
        return True
    return (time.time() - mtime) > idle_threshold_s
