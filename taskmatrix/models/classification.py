"""Raw classifier response model.

The remote classifier is an LLM, so its output is validated leniently:
missing or non-finite scores become 0 and missing explanation texts become
empty strings instead of rejecting the response.
"""

import logging
import math
from typing import Any
from pydantic import BaseModel, Field, field_validator

from taskmatrix.models.task import Explanation, Score

logger = logging.getLogger(__name__)


def coerce_score(value: Any) -> Score:
    """Coerce a classifier score to a finite number.

    Anything that is not a finite int/float (None, strings, booleans, NaN,
    infinities) becomes 0. Integral floats are normalized to int.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class RawClassification(BaseModel):
    """Classifier output before guardrail correction."""

    quadrant: str = Field("", description="Quadrant as reported by the classifier (informational only)")
    u: Score = Field(0, description="Urgency score")
    i: Score = Field(0, description="Importance score")
    explanation: Explanation = Field(default_factory=Explanation)

    @field_validator("quadrant", mode="before")
    @classmethod
    def _coerce_quadrant(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("u", "i", mode="before")
    @classmethod
    def _coerce_scores(cls, value: Any) -> Score:
        return coerce_score(value)

    @field_validator("explanation", mode="before")
    @classmethod
    def _coerce_explanation(cls, value: Any) -> Any:
        if isinstance(value, Explanation):
            return value
        if not isinstance(value, dict):
            return {}
        # Accept the camelCase key used by the classifier schema
        data = dict(value)
        if "nextAction" in data and "next_action" not in data:
            data["next_action"] = data.pop("nextAction")
        return {
            key: (data.get(key) if isinstance(data.get(key), str) else "")
            for key in ("urgency", "importance", "next_action")
        }

    @classmethod
    def from_payload(cls, payload: Any) -> "RawClassification":
        """Build from a decoded JSON payload, defaulting anything malformed."""
        if not isinstance(payload, dict):
            logger.warning(f"Classifier payload is {type(payload).__name__}, not an object. Using defaults.")
            return cls()
        missing = [key for key in ("u", "i", "explanation") if key not in payload]
        if missing:
            logger.warning(f"Classifier payload missing fields {missing}. Using defaults.")
        return cls.model_validate(payload)
