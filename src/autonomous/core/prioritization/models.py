"""
Prioritization domain models.

Two kinds of input feed the ranking:

  IssueEvaluation      — AI assessment, cached on disk by the evaluator and
                         read-only here.  Invalidated externally when the
                         issue content changes.
  ProjectItemMetadata  — project-board field values, read fresh for every
                         ranking call and never cached.  An issue that is
                         not on the board simply has no metadata.

The output, PrioritizationContext, is an immutable snapshot of every input
score plus the weighted total.  It is recomputed on each call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from autonomous.core.config import PriorityWeights


class Complexity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Impact(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class IssueScores:
    clarity: float  # 1-10
    importance: float  # 1-10
    feasibility: float  # 1-10
    ai_priority_score: float  # derived, 0-10


@dataclass(frozen=True)
class IssueClassification:
    complexity: Complexity = Complexity.MEDIUM
    impact: Impact = Impact.MEDIUM


@dataclass(frozen=True)
class IssueEvaluation:
    """Cached AI evaluation of a single issue."""

    issue_number: int
    issue_title: str
    scores: IssueScores
    classification: IssueClassification = field(default_factory=IssueClassification)
    last_modified: str = ""
    last_evaluated: str = ""
    content_hash: str = ""
    has_enough_detail: bool = True
    reasoning: str = ""
    suggested_questions: tuple[str, ...] = ()
    estimated_effort: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IssueEvaluation:
        """
        Build from the evaluator's camelCase cache record.

        Older records carry ``scores.priority`` instead of
        ``scores.aiPriorityScore``; both are accepted.
        """
        raw_scores = data.get("scores") or {}
        ai_score = raw_scores.get("aiPriorityScore", raw_scores.get("priority", 0))
        raw_cls = data.get("classification") or {}
        return cls(
            issue_number=int(data["issueNumber"]),
            issue_title=str(data.get("issueTitle", "")),
            scores=IssueScores(
                clarity=float(raw_scores.get("clarity", 0)),
                importance=float(raw_scores.get("importance", 0)),
                feasibility=float(raw_scores.get("feasibility", 0)),
                ai_priority_score=float(ai_score),
            ),
            classification=IssueClassification(
                complexity=Complexity(raw_cls.get("complexity", "medium")),
                impact=Impact(raw_cls.get("impact", "medium")),
            ),
            last_modified=str(data.get("lastModified", "")),
            last_evaluated=str(data.get("lastEvaluated", "")),
            content_hash=str(data.get("contentHash", "")),
            has_enough_detail=bool(data.get("hasEnoughDetail", True)),
            reasoning=str(data.get("reasoning", "")),
            suggested_questions=tuple(data.get("suggestedQuestions") or ()),
            estimated_effort=data.get("estimatedEffort"),
        )


@dataclass(frozen=True)
class SprintFieldValue:
    """Iteration field value from the project board."""

    title: str
    start_date: str  # ISO date
    duration: int | None = None  # days
    id: str = ""


@dataclass(frozen=True)
class SprintMetadata:
    id: str
    title: str
    start_date: str
    duration: int
    end_date: str
    is_current: bool
    is_upcoming: bool
    is_past: bool
    days_remaining: int | None = None


@dataclass(frozen=True)
class ProjectItemMetadata:
    """Board state of one issue at the moment of a ranking call."""

    issue_number: int
    issue_title: str | None = None
    project_item_id: str = ""
    status: str | None = None
    priority: str | None = None
    size: str | None = None
    type: str | None = None
    area: str | None = None
    sprint: SprintFieldValue | None = None
    blocked_by: str | None = None
    effort_estimate: float | None = None


@dataclass(frozen=True)
class PrioritizationContext:
    """Every input score for one issue, plus the weighted sum."""

    issue_number: int
    issue_title: str

    # AI evaluation (cached)
    ai_priority_score: float
    clarity: float
    importance: float
    feasibility: float
    complexity: Complexity
    impact: Impact

    # Project metadata (fresh)
    project_priority: str | None
    project_size: str | None
    project_sprint: SprintFieldValue | None
    project_status: str | None

    # Component scores (0-10) and the weights they were multiplied by
    ai_score: float
    project_priority_score: float
    sprint_score: float
    size_score: float
    weights: PriorityWeights

    hybrid_score: float


@dataclass(frozen=True)
class PrioritizedIssue:
    issue_number: int
    issue_title: str
    hybrid_score: float
    context: PrioritizationContext

    def to_dict(self) -> dict[str, Any]:
        ctx = self.context
        return {
            "issueNumber": self.issue_number,
            "issueTitle": self.issue_title,
            "hybridScore": round(self.hybrid_score, 4),
            "components": {
                "ai": ctx.ai_score,
                "projectPriority": ctx.project_priority_score,
                "sprint": ctx.sprint_score,
                "size": ctx.size_score,
            },
            "projectStatus": ctx.project_status,
            "projectPriority": ctx.project_priority,
            "projectSize": ctx.project_size,
            "projectSprint": ctx.project_sprint.title if ctx.project_sprint else None,
        }
