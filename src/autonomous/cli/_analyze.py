"""autonomous analyze — report on a session transcript."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from rich.console import Console

from autonomous.core.constants import ExitCode


def cmd_analyze(
    *,
    log_file: str,
    max_age_s: float,
    idle_threshold_s: float,
    as_json: bool,
    console: Console,
) -> None:
    from autonomous.core.session.analyzer import (
        detect_session_completion,
        extract_pr_number,
        is_session_idle,
    )

    path = Path(log_file)
    if not path.exists():
        console.print(f"[red]Transcript not found:[/red] {path}")
        sys.exit(ExitCode.ERROR)

    report = detect_session_completion(path, max_age_s=max_age_s)
    pr_number = extract_pr_number(path)
    idle = is_session_idle(path, idle_threshold_s=idle_threshold_s)

    if as_json:
        data = {
            "logFile": str(path),
            "isComplete": report.is_complete,
            "sessionEnded": report.session_ended,
            "hasRecentActivity": report.has_recent_activity,
            "isIdle": idle,
            "indicators": report.indicators,
            "prNumber": pr_number,
            "lastActivity": report.last_activity.isoformat() if report.last_activity else None,
        }
        print(json.dumps(data, indent=2))
        return

    def yes_no(flag: bool) -> str:
        return "[green]yes[/green]" if flag else "[dim]no[/dim]"

    console.print(f"[bold]Transcript:[/bold] {path}")
    console.print(f"  Complete:        {yes_no(report.is_complete)}")
    console.print(f"  Session ended:   {yes_no(report.session_ended)}")
    console.print(f"  Recent activity: {yes_no(report.has_recent_activity)}")
    console.print(f"  Idle:            {yes_no(idle)}")
    console.print(f"  Pull request:    {f'#{pr_number}' if pr_number else '-'}")
    if report.last_activity:
        console.print(f"  Last activity:   {report.last_activity.isoformat()}")
    if report.indicators:
        console.print("  Indicators:")
        for indicator in report.indicators:
            console.print(f"    - {indicator}", markup=False)
