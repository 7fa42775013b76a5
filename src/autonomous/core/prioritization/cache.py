"""
Loaders for the evaluation cache and project metadata snapshots.

Evaluation cache (written by the issue evaluator)::

    {"version": "1", "projectName": "...", "lastUpdated": "...",
     "evaluations": {"42": {"issueNumber": 42, "scores": {...}, ...}}}

Metadata snapshot: a JSON list of either raw project items
(``{"id", "content": {"number", "title"}, "fieldValues": {...}}``) or
flat records (``{"issueNumber", "status", "priority", ...}``).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from autonomous.core.exceptions import CacheError
from autonomous.core.prioritization.field_mapper import ProjectFieldMapper
from autonomous.core.prioritization.models import (
    IssueEvaluation,
    ProjectItemMetadata,
    SprintFieldValue,
)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise CacheError(f"File not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise CacheError(f"Cannot read {path}: {exc}") from exc


def load_evaluation_cache(path: Path | str) -> list[IssueEvaluation]:
    """Read every evaluation in the cache file, ordered by issue number."""
    data = _read_json(Path(path))
    records = data.get("evaluations") if isinstance(data, dict) else None
    if not isinstance(records, dict):
        raise CacheError(f"{path}: expected an object with an 'evaluations' map")
    try:
        evaluations = [IssueEvaluation.from_dict(r) for r in records.values()]
    except (KeyError, TypeError, ValueError) as exc:
        raise CacheError(f"{path}: malformed evaluation record: {exc}") from exc
    return sorted(evaluations, key=lambda e: e.issue_number)


def load_metadata_map(
    path: Path | str, mapper: ProjectFieldMapper
) -> dict[int, ProjectItemMetadata]:
    """Read a metadata snapshot into an issue-number keyed map."""
    data = _read_json(Path(path))
    if not isinstance(data, list):
        raise CacheError(f"{path}: expected a JSON list of project items")
    out: dict[int, ProjectItemMetadata] = {}
    try:
        for record in data:
            if "fieldValues" in record:
                meta = mapper.map_item_to_metadata(record)
            else:
                meta = _metadata_from_record(record)
            out[meta.issue_number] = meta
    except (KeyError, TypeError, ValueError) as exc:
        raise CacheError(f"{path}: malformed project item: {exc}") from exc
    return out


def _metadata_from_record(record: dict[str, Any]) -> ProjectItemMetadata:
    sprint = record.get("sprint")
    return ProjectItemMetadata(
        issue_number=int(record["issueNumber"]),
        issue_title=record.get("issueTitle"),
        project_item_id=str(record.get("projectItemId", "")),
        status=record.get("status"),
        priority=record.get("priority"),
        size=record.get("size"),
        type=record.get("type"),
        area=record.get("area"),
        sprint=(
            SprintFieldValue(
                title=sprint["title"],
                start_date=sprint["startDate"],
                duration=sprint.get("duration"),
                id=str(sprint.get("id") or sprint["title"]),
            )
            if sprint
            else None
        ),
        blocked_by=record.get("blockedBy"),
        effort_estimate=record.get("effortEstimate"),
    )
