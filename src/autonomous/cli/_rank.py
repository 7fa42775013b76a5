"""autonomous rank / breakdown — hybrid issue ranking from cached evaluations."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from autonomous.cli._common import load_config_or_exit
from autonomous.core.config import AutonomousConfig, autonomous_dir
from autonomous.core.constants import EVALUATION_CACHE_FILENAME, ExitCode
from autonomous.core.exceptions import CacheError
from autonomous.core.prioritization import (
    IssueEvaluation,
    ProjectAwarePrioritizer,
    ProjectFieldMapper,
    ProjectItemMetadata,
)


def default_evaluations_path() -> Path:
    return autonomous_dir() / EVALUATION_CACHE_FILENAME


def _load_inputs(
    config: AutonomousConfig,
    evaluations_path: str,
    metadata_path: str,
    console: Console,
) -> tuple[ProjectAwarePrioritizer, list[IssueEvaluation], dict[int, ProjectItemMetadata]]:
    from autonomous.core.prioritization.cache import load_evaluation_cache, load_metadata_map

    mapper = ProjectFieldMapper(config.project.fields)
    prioritizer = ProjectAwarePrioritizer(config.project, mapper)
    try:
        evaluations = load_evaluation_cache(evaluations_path or default_evaluations_path())
        metadata_map = load_metadata_map(metadata_path, mapper) if metadata_path else {}
    except CacheError as exc:
        console.print(f"[red]Cannot load issue data:[/red] {exc}")
        sys.exit(ExitCode.ERROR)
    return prioritizer, evaluations, metadata_map


def cmd_rank(
    *,
    evaluations_path: str,
    metadata_path: str,
    ready_only: bool,
    blocked_only: bool,
    limit: int,
    as_json: bool,
    console: Console,
    config_path: str | None = None,
) -> None:
    config = load_config_or_exit(config_path, console)
    prioritizer, evaluations, metadata_map = _load_inputs(
        config, evaluations_path, metadata_path, console
    )

    ranked = prioritizer.prioritize_issues(evaluations, metadata_map)
    if ready_only:
        ranked = prioritizer.filter_ready_issues(ranked, metadata_map)
    if blocked_only:
        ranked = prioritizer.filter_blocked_issues(ranked, metadata_map)
    if limit > 0:
        ranked = ranked[:limit]

    if as_json:
        print(json.dumps([issue.to_dict() for issue in ranked], indent=2))
        return

    if not ranked:
        console.print("[dim]No issues to rank.[/dim]")
        return

    table = Table(title="Ranked issues", show_lines=False)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Issue", justify="right", style="cyan")
    table.add_column("Title")
    table.add_column("Score", justify="right", style="bold")
    table.add_column("AI", justify="right")
    table.add_column("Priority")
    table.add_column("Sprint")
    table.add_column("Size")
    table.add_column("Status")

    for rank, issue in enumerate(ranked, start=1):
        ctx = issue.context
        table.add_row(
            str(rank),
            f"#{issue.issue_number}",
            issue.issue_title[:60],
            f"{issue.hybrid_score:.2f}",
            f"{ctx.ai_score:.1f}",
            ctx.project_priority or "-",
            ctx.project_sprint.title if ctx.project_sprint else "-",
            ctx.project_size or "-",
            ctx.project_status or "-",
        )

    console.print(table)


def cmd_breakdown(
    *,
    issue_number: int,
    evaluations_path: str,
    metadata_path: str,
    console: Console,
    config_path: str | None = None,
) -> None:
    config = load_config_or_exit(config_path, console)
    prioritizer, evaluations, metadata_map = _load_inputs(
        config, evaluations_path, metadata_path, console
    )

    evaluation = next((e for e in evaluations if e.issue_number == issue_number), None)
    if evaluation is None:
        console.print(f"[red]Issue #{issue_number} has no cached evaluation.[/red]")
        sys.exit(ExitCode.ERROR)

    context = prioritizer.calculate_priority(evaluation, metadata_map.get(issue_number))
    console.print(prioritizer.get_prioritization_breakdown(context), markup=False)
