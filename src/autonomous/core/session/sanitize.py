"""Terminal output sanitization for readiness matching and transcript scans."""

from __future__ import annotations

import re

# Matches:
#   CSI sequences   \x1b[ ... final_byte  (including private mode ? > !)
#   OSC sequences   \x1b] ... BEL  or  \x1b] ... ST
#   Charset desig.  \x1b( or \x1b) followed by designator
#   Other ESC seqs  \x1b + intermediate + final
#   Carriage return  \r
_ANSI_RE = re.compile(
    r"\x1b\[[0-9;?]*[ -/]*[@-~]"
    r"|\x1b\][^\x07]*(?:\x07|\x1b\\)"
    r"|\x1b[()][A-Z0-9]"
    r"|\x1b[ -/]*[@-~]"
    r"|\r"
)


def strip_ansi(text: str) -> str:
    """Remove all ANSI escape codes and carriage returns from terminal output."""
    return _ANSI_RE.sub("", text)
