"""Unit tests for agent readiness detection — predicate, cwd forms, and the latch."""

from __future__ import annotations

import pytest

from autonomous.core.session.models import ReadyMarkers
from autonomous.core.session.readiness import ReadinessTracker, cwd_forms, is_ready

HOME = "/home/dev"
CWD = "/home/dev/work/repo"
MARKERS = ReadyMarkers(prompts=("❯", "> "), banners=("? for shortcuts",))


# ---------------------------------------------------------------------------
# cwd_forms
# ---------------------------------------------------------------------------


class TestCwdForms:
    def test_literal_and_home_relative(self) -> None:
        forms = cwd_forms(CWD, home=HOME)
        assert CWD in forms
        assert "~/work/repo" in forms

    def test_outside_home_has_no_tilde_form(self) -> None:
        forms = cwd_forms("/srv/checkout", home=HOME)
        assert "/srv/checkout" in forms
        assert not any(f.startswith("~") for f in forms)

    def test_sibling_prefix_is_not_home(self) -> None:
        forms = cwd_forms("/home/developer/repo", home=HOME)
        assert not any(f.startswith("~") for f in forms)

    def test_trailing_slash_ignored(self) -> None:
        assert cwd_forms(CWD + "/", home=HOME)[0] == CWD

    def test_resolves_symlinks(self, tmp_path) -> None:
        real = tmp_path / "real"
        real.mkdir()
        link = tmp_path / "link"
        link.symlink_to(real)
        forms = cwd_forms(str(link), home="/nonexistent-home")
        assert str(link) in forms
        assert str(real.resolve()) in forms


# ---------------------------------------------------------------------------
# is_ready
# ---------------------------------------------------------------------------


class TestIsReady:
    forms = cwd_forms(CWD, home=HOME)

    def test_cwd_and_prompt_marker(self) -> None:
        assert is_ready(f"Welcome\n cwd: {CWD}\n❯ ", self.forms, MARKERS)

    def test_tilde_cwd_and_prompt_marker(self) -> None:
        assert is_ready("│ ~/work/repo │\n│ > │", self.forms, MARKERS)

    def test_cwd_and_banner(self) -> None:
        assert is_ready(f"{CWD}\n  ? For Shortcuts", self.forms, MARKERS)

    def test_cwd_alone_is_not_ready(self) -> None:
        assert not is_ready(f"Loading project {CWD}...", self.forms, MARKERS)

    def test_marker_alone_is_not_ready(self) -> None:
        assert not is_ready("❯ ? for shortcuts", self.forms, MARKERS)

    def test_empty_buffer(self) -> None:
        assert not is_ready("", self.forms, MARKERS)


# ---------------------------------------------------------------------------
# ReadinessTracker
# ---------------------------------------------------------------------------


class TestReadinessTracker:
    def _tracker(self, limit: int = 8192) -> ReadinessTracker:
        return ReadinessTracker(cwd=CWD, markers=MARKERS, limit=limit, home=HOME)

    def test_signals_split_across_chunks(self) -> None:
        tracker = self._tracker()
        assert tracker.feed(b"Claude Code v2\n") is False
        assert tracker.feed(b"~/work/repo\n") is False
        assert tracker.feed("❯ ".encode()) is True

    def test_latches_exactly_once(self) -> None:
        tracker = self._tracker()
        assert tracker.feed(f"{CWD}\n❯ ".encode()) is True
        assert tracker.latched
        assert tracker.feed(f"{CWD}\n❯ ".encode()) is False
        assert tracker.feed(b"> ") is False

    def test_ansi_sequences_do_not_hide_signals(self) -> None:
        tracker = self._tracker()
        chunk = b"\x1b[2m~/work/\x1b[0mrepo\r\n\x1b[1m\xe2\x9d\xaf\x1b[0m "
        assert tracker.feed(chunk) is True
        assert "\x1b" not in tracker.snapshot()

    def test_multibyte_marker_split_between_chunks(self) -> None:
        tracker = self._tracker()
        marker = "❯".encode()
        assert tracker.feed(CWD.encode() + b"\n" + marker[:1]) is False
        assert tracker.feed(marker[1:] + b" ") is True

    def test_window_is_bounded(self) -> None:
        tracker = self._tracker(limit=256)
        tracker.feed(f"{CWD}\n".encode())
        tracker.feed(b"x" * 1000)
        assert len(tracker.snapshot()) <= 256
        # The cwd scrolled out of the window, so a marker alone is not enough
        assert tracker.feed("❯ ".encode()) is False

    def test_trigger_latches_without_predicate(self) -> None:
        tracker = self._tracker()
        assert tracker.trigger() is True
        assert tracker.trigger() is False
        assert tracker.feed(f"{CWD}\n❯ ".encode()) is False

    @pytest.mark.parametrize("chunk", [b"", b"\x1b[?25l", b"\r\n"])
    def test_noise_chunks_never_ready(self, chunk: bytes) -> None:
        assert self._tracker().feed(chunk) is False
