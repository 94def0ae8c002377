"""Guardrail engine for taskmatrix."""

from taskmatrix.engine.keywords import match_category, min_importance
from taskmatrix.engine.urgency import min_urgency, due_delta, due_status
from taskmatrix.engine.quadrant import classify_quadrant, quadrant_label
from taskmatrix.engine.guardrails import correct
from taskmatrix.engine.explanations import render_explanation
from taskmatrix.engine.ranking import display_sort, group_by_quadrant
from taskmatrix.engine.store import TaskStore

__all__ = [
    "match_category",
    "min_importance",
    "min_urgency",
    "due_delta",
    "due_status",
    "classify_quadrant",
    "quadrant_label",
    "correct",
    "render_explanation",
    "display_sort",
    "group_by_quadrant",
    "TaskStore",
]
