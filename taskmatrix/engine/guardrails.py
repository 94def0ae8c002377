"""Deterministic guardrails over classifier output.

The LLM may mishandle absolute dates or underrate obviously important
categories. These rules raise its scores to fixed minimums and recompute the
quadrant from the corrected scores, recording every correction.

1. Non-finite or missing scores are treated as 0 (never rejected)
2. A due date enforces a minimum urgency (see `urgency.min_urgency`)
3. Domain keywords enforce a minimum importance (see `keywords.min_importance`)
4. Scores are only ever raised, never lowered or clamped to 100
5. The quadrant is always derived from the corrected scores
"""

import logging
import uuid
from typing import Optional

from taskmatrix.engine.keywords import match_category, importance_floor
from taskmatrix.engine.quadrant import classify_quadrant, quadrant_label
from taskmatrix.engine.urgency import min_urgency, due_delta
from taskmatrix.models.classification import RawClassification, coerce_score
from taskmatrix.models.constants import DEFAULT_LOCALE
from taskmatrix.models.task import (
    ClassificationRecord,
    CorrectionReason,
    CorrectionTarget,
    Explanation,
    ScoreCorrection,
    TaskStatus,
)

logger = logging.getLogger(__name__)


def correct_urgency(u, urgency_text: str, due_at: Optional[int], now: int):
    """Apply the due-date urgency floor.

    Returns:
        Tuple of (urgency score, ScoreCorrection or None)
    """
    if due_at is None:
        return u, None
    floor = min_urgency(due_at, now)
    if u >= floor:
        return u, None
    correction = ScoreCorrection(
        target=CorrectionTarget.URGENCY,
        raw_score=u,
        applied_floor=floor,
        reason=CorrectionReason.DUE_PROXIMITY,
        original_text=urgency_text,
        due_delta=due_delta(due_at, now),
    )
    return floor, correction


def correct_importance(i, importance_text: str, text: str):
    """Apply the keyword importance floor.

    Returns:
        Tuple of (importance score, ScoreCorrection or None)
    """
    category = match_category(text)
    floor = importance_floor(category)
    if floor <= 0 or i >= floor:
        return i, None
    correction = ScoreCorrection(
        target=CorrectionTarget.IMPORTANCE,
        raw_score=i,
        applied_floor=floor,
        reason=CorrectionReason.KEYWORD_CATEGORY,
        original_text=importance_text,
        category=category,
    )
    return floor, correction


def correct(
    raw: RawClassification,
    text: str,
    due_at: Optional[int],
    now: int,
    locale: str = DEFAULT_LOCALE,
) -> ClassificationRecord:
    """Correct a raw classification and build the final record.

    Both floors are independent: the due date only affects urgency and the
    keywords only affect importance. Performs no I/O and never raises for
    malformed classifier output.

    Args:
        raw: Classifier output
        text: Submitted task description
        due_at: Due timestamp (ms) or None
        now: Current timestamp (ms), also used as the record timestamp
        locale: Locale for the quadrant label

    Returns:
        New open ClassificationRecord with a fresh id
    """
    u = coerce_score(raw.u)
    i = coerce_score(raw.i)
    explanation = raw.explanation or Explanation()
    corrections = []

    u, urgency_correction = correct_urgency(u, explanation.urgency, due_at, now)
    if urgency_correction is not None:
        corrections.append(urgency_correction)
        logger.info(
            f"Urgency raised from {urgency_correction.raw_score} to {u} (due proximity)"
        )

    i, importance_correction = correct_importance(i, explanation.importance, text)
    if importance_correction is not None:
        corrections.append(importance_correction)
        logger.info(
            f"Importance raised from {importance_correction.raw_score} to {i} "
            f"(keyword category {importance_correction.category})"
        )

    quadrant = classify_quadrant(u, i)
    if raw.quadrant and not raw.quadrant.startswith(quadrant.value):
        logger.debug(f"Classifier reported quadrant '{raw.quadrant}', corrected to {quadrant.value}")

    return ClassificationRecord(
        id=str(uuid.uuid4()),
        original_text=text,
        quadrant=quadrant,
        quadrant_label=quadrant_label(quadrant, locale),
        u_score=u,
        i_score=i,
        due_at=due_at,
        status=TaskStatus.OPEN,
        completed_at=None,
        explanation=explanation,
        corrections=corrections,
        timestamp=now,
    )
