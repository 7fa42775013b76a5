"""Hybrid issue prioritization: AI evaluations + project-board fields."""

from autonomous.core.prioritization.engine import ProjectAwarePrioritizer
from autonomous.core.prioritization.field_mapper import ProjectFieldMapper
from autonomous.core.prioritization.models import (
    IssueEvaluation,
    PrioritizationContext,
    PrioritizedIssue,
    ProjectItemMetadata,
    SprintFieldValue,
)

__all__ = [
    "IssueEvaluation",
    "PrioritizationContext",
    "PrioritizedIssue",
    "ProjectAwarePrioritizer",
    "ProjectFieldMapper",
    "ProjectItemMetadata",
    "SprintFieldValue",
]
