"""
Hybrid prioritizer: AI evaluation + project-board signals → ranked issues.

    hybrid = ai·w_ai + project_priority·w_proj + sprint·w_sprint + size·w_size

Component defaults when an issue has no board metadata:
  project priority  0   (no priority signal)
  sprint            0   (not in the current sprint)
  size              5   (neutral: a missing estimate must not penalise)

The prioritizer is a pure function of its inputs.  It performs no I/O,
holds no state across calls, and never raises on missing data.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol

import structlog

from autonomous.core.config import DEFAULT_WEIGHTS, PriorityWeights, ProjectConfig
from autonomous.core.constants import NEUTRAL_SIZE_SCORE, SPRINT_BOOST_SCORE
from autonomous.core.prioritization.models import (
    IssueEvaluation,
    PrioritizationContext,
    PrioritizedIssue,
    ProjectItemMetadata,
    SprintFieldValue,
)

logger = structlog.get_logger()


class FieldScorer(Protocol):
    """The part of ProjectFieldMapper the prioritizer depends on."""

    def get_priority_weight(self, priority: str | None) -> float: ...

    def get_size_preference_score(self, size: str | None) -> float: ...

    def is_in_current_sprint(self, sprint: SprintFieldValue | None) -> bool: ...


class ProjectAwarePrioritizer:
    """Ranks evaluated issues with the hybrid scoring policy."""

    def __init__(self, config: ProjectConfig, field_mapper: FieldScorer) -> None:
        self.config = config
        self.field_mapper = field_mapper

    @property
    def weights(self) -> PriorityWeights:
        return self.config.prioritization.weights or DEFAULT_WEIGHTS

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def calculate_priority(
        self,
        evaluation: IssueEvaluation,
        metadata: ProjectItemMetadata | None,
    ) -> PrioritizationContext:
        """Compute the hybrid score and its components for one issue."""
        w = self.weights
        mapper = self.field_mapper

        ai_score = evaluation.scores.ai_priority_score
        if metadata is None:
            project_priority_score = 0.0
            sprint_score = 0.0
            size_score = NEUTRAL_SIZE_SCORE
        else:
            project_priority_score = mapper.get_priority_weight(metadata.priority)
            sprint_score = (
                SPRINT_BOOST_SCORE if mapper.is_in_current_sprint(metadata.sprint) else 0.0
            )
            size_score = mapper.get_size_preference_score(metadata.size)

        hybrid_score = (
            ai_score * w.ai_evaluation
            + project_priority_score * w.project_priority
            + sprint_score * w.sprint_boost
            + size_score * w.size_preference
        )

        return PrioritizationContext(
            issue_number=evaluation.issue_number,
            issue_title=evaluation.issue_title,
            ai_priority_score=evaluation.scores.ai_priority_score,
            clarity=evaluation.scores.clarity,
            importance=evaluation.scores.importance,
            feasibility=evaluation.scores.feasibility,
            complexity=evaluation.classification.complexity,
            impact=evaluation.classification.impact,
            project_priority=metadata.priority if metadata else None,
            project_size=metadata.size if metadata else None,
            project_sprint=metadata.sprint if metadata else None,
            project_status=metadata.status if metadata else None,
            ai_score=ai_score,
            project_priority_score=project_priority_score,
            sprint_score=sprint_score,
            size_score=size_score,
            weights=w,
            hybrid_score=hybrid_score,
        )

    def prioritize_issues(
        self,
        evaluations: Iterable[IssueEvaluation],
        metadata_map: Mapping[int, ProjectItemMetadata],
    ) -> list[PrioritizedIssue]:
        """
        Score every evaluation and sort by descending hybrid score.

        Equal scores are ordered by ascending issue number, so the result
        does not depend on the iteration order of the inputs.
        """
        prioritized = []
        for evaluation in evaluations:
            context = self.calculate_priority(
                evaluation, metadata_map.get(evaluation.issue_number)
            )
            prioritized.append(
                PrioritizedIssue(
                    issue_number=evaluation.issue_number,
                    issue_title=evaluation.issue_title,
                    hybrid_score=context.hybrid_score,
                    context=context,
                )
            )

        prioritized.sort(key=lambda p: (-p.hybrid_score, p.issue_number))
        logger.debug(
            "issues_prioritized",
            count=len(prioritized),
            top=prioritized[0].issue_number if prioritized else None,
        )
        return prioritized

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def get_prioritization_breakdown(self, context: PrioritizationContext) -> str:
        """Render the weighted decomposition of *context* as plain text."""
        w = context.weights

        def row(label: str, score: float, weight: float) -> str:
            return f"  {label:<18}{score:.1f}/10 × {weight} = {score * weight:.2f}"

        sprint = context.project_sprint
        lines = [
            f"Issue #{context.issue_number}: {context.issue_title}",
            "",
            f"Hybrid Score: {context.hybrid_score:.2f}",
            "",
            "Breakdown:",
            row("AI Evaluation:", context.ai_score, w.ai_evaluation),
            f"    - Clarity:      {context.clarity:.1f}/10",
            f"    - Importance:   {context.importance:.1f}/10",
            f"    - Feasibility:  {context.feasibility:.1f}/10",
            f"    - Complexity:   {context.complexity}",
            f"    - Impact:       {context.impact}",
            "",
            row("Project Priority:", context.project_priority_score, w.project_priority),
            f"    - Value:        {context.project_priority or 'Not set'}",
            "",
            row("Sprint Boost:", context.sprint_score, w.sprint_boost),
            f"    - Sprint:       {sprint.title if sprint else 'Not assigned'}",
            "",
            row("Size Preference:", context.size_score, w.size_preference),
            f"    - Size:         {context.project_size or 'Not set'}",
        ]
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def filter_ready_issues(
        self,
        issues: Iterable[PrioritizedIssue],
        metadata_map: Mapping[int, ProjectItemMetadata],
    ) -> list[PrioritizedIssue]:
        """Keep issues whose board status is one of the configured ready values."""
        ready = set(self.config.fields.status.ready_values)
        out = []
        for issue in issues:
            metadata = metadata_map.get(issue.issue_number)
            if metadata is None or not metadata.status:
                continue
            if metadata.status in ready:
                out.append(issue)
        return out

    def filter_blocked_issues(
        self,
        issues: Iterable[PrioritizedIssue],
        metadata_map: Mapping[int, ProjectItemMetadata],
    ) -> list[PrioritizedIssue]:
        """Keep issues with the blocked status or a non-empty Blocked By field."""
        blocked_value = self.config.fields.status.blocked_value
        out = []
        for issue in issues:
            metadata = metadata_map.get(issue.issue_number)
            if metadata is None:
                continue
            if metadata.status == blocked_value or bool(metadata.blocked_by):
                out.append(issue)
        return out
