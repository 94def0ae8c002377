"""Classification record data model for taskmatrix."""

from enum import Enum
from typing import List, Optional, Union
from pydantic import BaseModel, Field, field_validator, model_validator


Score = Union[int, float]


class Quadrant(str, Enum):
    """Eisenhower quadrant enumeration."""
    Q1 = "Q1"  # urgent and important
    Q2 = "Q2"  # important, not urgent
    Q3 = "Q3"  # urgent, not important
    Q4 = "Q4"  # neither


class TaskStatus(str, Enum):
    """Task status enumeration."""
    OPEN = "open"
    DONE = "done"


class KeywordCategory(str, Enum):
    """Domain keyword categories that raise the importance floor."""
    HIGH_RISK = "high_risk"
    PACKAGING = "packaging"
    REVIEWS = "reviews"


class CorrectionTarget(str, Enum):
    """Score corrected by a guardrail."""
    URGENCY = "urgency"
    IMPORTANCE = "importance"


class CorrectionReason(str, Enum):
    """Rule that triggered a guardrail correction."""
    DUE_PROXIMITY = "due_proximity"
    KEYWORD_CATEGORY = "keyword_category"


class DueStatus(str, Enum):
    """Due-date status relative to the current time."""
    OVERDUE = "overdue"
    TODAY = "today"
    LT24H = "lt24h"
    LT72H = "lt72h"
    NONE = "none"


class Explanation(BaseModel):
    """Classifier explanation texts."""

    urgency: str = Field("", description="Urgency analysis")
    importance: str = Field("", description="Importance analysis")
    next_action: str = Field("", description="Suggested next action")


class DueDelta(BaseModel):
    """Floor decomposition of the distance between a due time and now."""

    days: int = Field(..., ge=0)
    hours: int = Field(..., ge=0, lt=24)
    minutes: int = Field(..., ge=0, lt=60)
    overdue: bool = Field(..., description="True if the due time is already in the past")


class ScoreCorrection(BaseModel):
    """A guardrail correction applied to a classifier score.

    Keeps the full information (original text, applied floor, reason) so that
    rendering the correction notice is left to the presentation layer.
    """

    target: CorrectionTarget = Field(..., description="Which score was raised")
    raw_score: Score = Field(..., description="Score returned by the classifier (non-finite coerced to 0)")
    applied_floor: int = Field(..., description="Minimum score enforced by the rule")
    reason: CorrectionReason = Field(..., description="Rule that triggered the correction")
    original_text: str = Field("", description="Classifier explanation for the corrected score")
    due_delta: Optional[DueDelta] = Field(None, description="Due proximity (due-date corrections only)")
    category: Optional[KeywordCategory] = Field(None, description="Matched keyword category (keyword corrections only)")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class ClassificationRecord(BaseModel):
    """A classified task as kept in the task store."""

    id: str = Field(..., description="Unique record identifier (UUID v4)")
    original_text: str = Field(..., description="Submitted task description")
    quadrant: Quadrant = Field(..., description="Quadrant derived from the corrected scores")
    quadrant_label: str = Field(..., description="Quadrant code plus localized name")
    u_score: Score = Field(..., description="Corrected urgency score")
    i_score: Score = Field(..., description="Corrected importance score")
    due_at: Optional[int] = Field(None, description="Due timestamp (ms since epoch)")
    status: TaskStatus = Field(TaskStatus.OPEN, description="Task status")
    completed_at: Optional[int] = Field(None, description="Completion timestamp (ms since epoch), set iff done")
    explanation: Explanation = Field(default_factory=Explanation, description="Classifier explanation texts")
    corrections: List[ScoreCorrection] = Field(default_factory=list, description="Guardrail corrections applied")
    timestamp: int = Field(..., description="Creation timestamp (ms since epoch)")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @field_validator("original_text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("original_text must not be empty")
        return value

    @model_validator(mode="after")
    def _check_invariants(self):
        from taskmatrix.engine.quadrant import classify_quadrant

        if (self.completed_at is not None) != (self.status == TaskStatus.DONE):
            raise ValueError("completed_at must be set exactly when status is done")
        expected = classify_quadrant(self.u_score, self.i_score)
        if self.quadrant != expected:
            raise ValueError(f"quadrant {self.quadrant} inconsistent with scores (expected {expected.value})")
        return self

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE
