"""PTY-backed agent sessions: spawn, readiness, prompt injection, transcript."""

from autonomous.core.session.executor import SessionExecutor
from autonomous.core.session.models import (
    ReadinessMode,
    ReadyMarkers,
    SessionConfig,
    SessionExit,
    SessionPhase,
)

__all__ = [
    "ReadinessMode",
    "ReadyMarkers",
    "SessionConfig",
    "SessionExecutor",
    "SessionExit",
    "SessionPhase",
]
