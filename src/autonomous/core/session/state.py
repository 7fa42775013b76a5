"""
Session lifecycle state machine.

  STARTING → AWAITING_READINESS → PROMPT_INJECTED → RUNNING → EXITED

Any non-terminal phase may jump to EXITED (the child can die at any time).
EXITED is terminal.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from autonomous.core.session.models import SessionPhase

VALID_TRANSITIONS: dict[SessionPhase, set[SessionPhase]] = {
    SessionPhase.STARTING: {SessionPhase.AWAITING_READINESS, SessionPhase.EXITED},
    SessionPhase.AWAITING_READINESS: {SessionPhase.PROMPT_INJECTED, SessionPhase.EXITED},
    SessionPhase.PROMPT_INJECTED: {SessionPhase.RUNNING, SessionPhase.EXITED},
    SessionPhase.RUNNING: {SessionPhase.EXITED},
    SessionPhase.EXITED: set(),
}


@dataclass
class SessionLifecycle:
    """Tracks the phase of a single session."""

    phase: SessionPhase = SessionPhase.STARTING
    history: list[tuple[SessionPhase, datetime]] = field(default_factory=list)
    on_transition: Callable[[SessionPhase, SessionPhase], None] | None = None

    @property
    def is_terminal(self) -> bool:
        return self.phase == SessionPhase.EXITED

    def transition(self, new_phase: SessionPhase) -> None:
        """Advance phase; raise ValueError on invalid transition."""
        if new_phase not in VALID_TRANSITIONS[self.phase]:
            raise ValueError(f"Invalid session transition {self.phase!r} → {new_phase!r}")
        old = self.phase
        self.phase = new_phase
        self.history.append((new_phase, datetime.now(UTC)))
        if self.on_transition:
            self.on_transition(old, new_phase)
