"""
Project field mapper: board field values → typed metadata and 0-10 scores.

The mapper never talks to GitHub.  Callers hand it raw project items (the
``fieldValues`` dict shape returned by the Projects v2 client) and it turns
them into ProjectItemMetadata, or scores individual field values for the
prioritizer.

Scoring table:
  Priority  configured option weight (case-insensitive), 0 when unset/unknown
  Size      10 for a preferred size, else XS=10 S=8 M=6 L=4 XL=2, 5 when unset
  Sprint    current if the title matches the configured current sprint; with
            no configured sprint, current if today falls in its date window
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from typing import Any

from autonomous.core.config import ProjectFieldsConfig
from autonomous.core.constants import DEFAULT_SPRINT_DURATION_DAYS, NEUTRAL_SIZE_SCORE
from autonomous.core.prioritization.models import (
    ProjectItemMetadata,
    SprintFieldValue,
    SprintMetadata,
)

_SIZE_ORDER = ("XS", "S", "M", "L", "XL")


class ProjectFieldMapper:
    """Maps project-board field values to metadata and scores."""

    def __init__(self, fields: ProjectFieldsConfig, today: date | None = None) -> None:
        self.fields = fields
        self._today = today

    @property
    def today(self) -> date:
        return self._today or datetime.now(UTC).date()

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------

    def get_priority_weight(self, priority: str | None) -> float:
        if not priority or self.fields.priority is None:
            return 0.0
        value = self.fields.priority.values.get(priority.lower())
        return value.weight if value else 0.0

    def get_size_preference_score(self, size: str | None) -> float:
        if not size or self.fields.size is None:
            return NEUTRAL_SIZE_SCORE
        if size in self.fields.size.preferred_sizes:
            return 10.0
        try:
            index = _SIZE_ORDER.index(size.upper())
        except ValueError:
            return NEUTRAL_SIZE_SCORE
        return 10.0 - index * 2

    def is_in_current_sprint(self, sprint: SprintFieldValue | None) -> bool:
        if sprint is None or self.fields.sprint is None:
            return False
        current = self.fields.sprint.current_sprint
        if current:
            return sprint.title == current or (bool(sprint.id) and sprint.id == current)
        try:
            return self.get_sprint_metadata(sprint).is_current
        except ValueError:
            return False

    def get_sprint_metadata(self, sprint: SprintFieldValue) -> SprintMetadata:
        """Derive the sprint window relative to today.  Raises ValueError on a bad date."""
        start = date.fromisoformat(sprint.start_date[:10])
        duration = sprint.duration or DEFAULT_SPRINT_DURATION_DAYS
        end = start + timedelta(days=duration)
        today = self.today

        is_current = start <= today <= end
        return SprintMetadata(
            id=sprint.id or sprint.title,
            title=sprint.title,
            start_date=sprint.start_date,
            duration=duration,
            end_date=end.isoformat(),
            is_current=is_current,
            is_upcoming=today < start,
            is_past=today > end,
            days_remaining=(end - today).days if is_current else None,
        )

    # ------------------------------------------------------------------
    # Raw item mapping
    # ------------------------------------------------------------------

    def map_item_to_metadata(self, item: dict[str, Any]) -> ProjectItemMetadata:
        """Map a raw project item (``id``, ``content``, ``fieldValues``) to metadata."""
        values: dict[str, Any] = item.get("fieldValues") or {}
        content: dict[str, Any] = item.get("content") or {}
        f = self.fields
        return ProjectItemMetadata(
            issue_number=int(content["number"]),
            issue_title=content.get("title"),
            project_item_id=str(item.get("id", "")),
            status=_text(values, f.status.field_name),
            priority=_text(values, f.priority.field_name if f.priority else None),
            size=_text(values, f.size.field_name if f.size else None),
            type=_text(values, "Type") or _text(values, "Issue Type"),
            area=_text(values, "Area"),
            sprint=_sprint(values, f.sprint.field_name if f.sprint else None),
            blocked_by=_text(values, "Blocked By"),
            effort_estimate=_number(values, "Effort Estimate"),
        )

    def map_items(self, items: list[dict[str, Any]]) -> dict[int, ProjectItemMetadata]:
        """Map many raw items into an issue-number keyed metadata map."""
        out: dict[int, ProjectItemMetadata] = {}
        for item in items:
            meta = self.map_item_to_metadata(item)
            out[meta.issue_number] = meta
        return out


def _text(values: dict[str, Any], name: str | None) -> str | None:
    if not name:
        return None
    value = values.get(name)
    return value if isinstance(value, str) else None


def _number(values: dict[str, Any], name: str) -> float | None:
    value = values.get(name)
    if isinstance(value, bool):
        return None
    return float(value) if isinstance(value, (int, float)) else None


def _sprint(values: dict[str, Any], name: str | None) -> SprintFieldValue | None:
    if not name:
        return None
    value = values.get(name)
    if not isinstance(value, dict) or not value.get("title") or not value.get("startDate"):
        return None
    return SprintFieldValue(
        title=value["title"],
        start_date=value["startDate"],
        duration=value.get("duration") or None,
        id=str(value.get("id") or value["title"]),
    )
