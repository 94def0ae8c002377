"""Quadrant classification for taskmatrix.

Maps (urgency, importance) scores onto the Eisenhower matrix. Thresholds are
inclusive and match the scoring model the remote classifier is prompted with.
"""

from taskmatrix.models.constants import (
    URGENCY_THRESHOLD,
    IMPORTANCE_THRESHOLD,
    QUADRANT_NAMES,
    DEFAULT_LOCALE,
)
from taskmatrix.models.task import Quadrant, Score


def classify_quadrant(u: Score, i: Score) -> Quadrant:
    """Assign a quadrant from urgency and importance scores.

    Args:
        u: Urgency score
        i: Importance score

    Returns:
        Q1 (urgent & important), Q2 (important), Q3 (urgent) or Q4
    """
    urgent = u >= URGENCY_THRESHOLD
    important = i >= IMPORTANCE_THRESHOLD
    if urgent and important:
        return Quadrant.Q1
    if important:
        return Quadrant.Q2
    if urgent:
        return Quadrant.Q3
    return Quadrant.Q4


def get_quadrant_name(quadrant: Quadrant, locale: str = DEFAULT_LOCALE) -> str:
    """Localized quadrant name (falls back to the default locale)."""
    names = QUADRANT_NAMES.get(locale, QUADRANT_NAMES[DEFAULT_LOCALE])
    return names[Quadrant(quadrant).value]


def quadrant_label(quadrant: Quadrant, locale: str = DEFAULT_LOCALE) -> str:
    """Display label such as "Q1 - 立即执行"."""
    return f"{Quadrant(quadrant).value} - {get_quadrant_name(quadrant, locale)}"
