"""
Readiness detection for interactive agent CLIs.

An agent is considered ready to accept the work prompt when its recent
output contains BOTH:

  1. the working directory, literally or in ``~/`` home-relative form, AND
  2. an input-prompt marker (e.g. ``❯``) or a known ready banner.

Either signal alone is ambiguous: the path shows up in startup banners
before the interface is interactive, and a bare prompt character can
appear in transient output.

``is_ready()`` is a pure predicate over a buffer snapshot.
``ReadinessTracker`` feeds it a bounded rolling window of decoded output
and latches on the first match: ``feed()`` returns True at most once per
tracker, however many later chunks still satisfy the predicate.
"""

from __future__ import annotations

import codecs
import os
from collections.abc import Sequence
from pathlib import Path

from autonomous.core.constants import READINESS_BUFFER_CHARS
from autonomous.core.session.models import ReadyMarkers
from autonomous.core.session.sanitize import strip_ansi


def cwd_forms(cwd: str, home: str | None = None) -> tuple[str, ...]:
    """
    Return every spelling of *cwd* an agent banner might print.

    Includes the path as given, its resolved form (symlinks such as macOS
    ``/var`` → ``/private/var``), and the ``~/`` shorthand of each when
    the path lies under *home*.
    """
    home_dir = (home if home is not None else str(Path.home())).rstrip("/")
    literal = cwd.rstrip("/") or "/"
    candidates = [literal, os.path.realpath(literal)]

    forms: list[str] = []
    for path in candidates:
        if path not in forms:
            forms.append(path)
        if home_dir and (path == home_dir or path.startswith(home_dir + "/")):
            short = "~" + path[len(home_dir) :]
            if short not in forms:
                forms.append(short)
    return tuple(forms)


def is_ready(buffer: str, forms: Sequence[str], markers: ReadyMarkers) -> bool:
    """Return True when *buffer* shows the cwd and an input marker or banner."""
    if not any(form and form in buffer for form in forms):
        return False
    if any(marker and marker in buffer for marker in markers.prompts):
        return True
    lowered = buffer.lower()
    return any(banner and banner.lower() in lowered for banner in markers.banners)


class ReadinessTracker:
    """
    Rolling-window readiness detector with a one-shot latch.

    Usage::

        tracker = ReadinessTracker(cwd="/work/repo", markers=ReadyMarkers())
        for chunk in output:
            if tracker.feed(chunk):
                schedule_prompt_injection()
    """

    def __init__(
        self,
        cwd: str,
        markers: ReadyMarkers,
        limit: int = READINESS_BUFFER_CHARS,
        home: str | None = None,
    ) -> None:
        self._forms = cwd_forms(cwd, home=home)
        self._markers = markers
        self._limit = limit
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._raw = ""
        self._latched = False

    @property
    def latched(self) -> bool:
        return self._latched

    @property
    def forms(self) -> tuple[str, ...]:
        return self._forms

    def snapshot(self) -> str:
        """ANSI-stripped view of the current window."""
        return strip_ansi(self._raw)

    def feed(self, chunk: bytes) -> bool:
        """
        Append *chunk* to the window and evaluate the predicate.

        Returns True only for the first chunk that makes the predicate hold.
        Once latched, further chunks are ignored.
        """
        if self._latched:
            return False
        # Bound the raw window; ANSI stripping happens on the snapshot.
        self._raw = (self._raw + self._decoder.decode(chunk))[-self._limit :]
        if is_ready(self.snapshot(), self._forms, self._markers):
            self._latched = True
            return True
        return False

    def trigger(self) -> bool:
        """Latch without the predicate (fixed-delay mode).  True if this call latched."""
        if self._latched:
            return False
        self._latched = True
        return True
