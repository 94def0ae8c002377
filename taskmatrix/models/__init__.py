"""Data models for taskmatrix."""

from taskmatrix.models.task import (
    ClassificationRecord,
    CorrectionReason,
    CorrectionTarget,
    DueDelta,
    DueStatus,
    Explanation,
    KeywordCategory,
    Quadrant,
    ScoreCorrection,
    TaskStatus,
)
from taskmatrix.models.classification import RawClassification

__all__ = [
    "ClassificationRecord",
    "CorrectionReason",
    "CorrectionTarget",
    "DueDelta",
    "DueStatus",
    "Explanation",
    "KeywordCategory",
    "Quadrant",
    "ScoreCorrection",
    "TaskStatus",
    "RawClassification",
]
