"""Render guardrail corrections into explanation text.

Records keep the classifier's own analysis plus structured corrections; the
human-readable notice is produced here, at display time, in the requested
locale. The notice comes first and the original analysis is kept as a
trailing clause.
"""

from typing import Optional

from taskmatrix.models.constants import DEFAULT_LOCALE
from taskmatrix.models.task import (
    ClassificationRecord,
    CorrectionReason,
    CorrectionTarget,
    DueDelta,
    Explanation,
    ScoreCorrection,
)


_TEMPLATES = {
    "zh": {
        "days": "{days}天 ",
        "delta": "{days}{hours}小时 {minutes}分钟",
        "overdue": "已逾期",
        "approaching": "临近",
        "due_proximity": "截止时间{state}（{delta}），按规则时间信号至少应为 +{floor}；已进行系统校正。",
        "keyword_category": "根据跨境电商行业规则，该类任务重要性通常较高（最低建议 {floor}）；已进行系统校正。",
        "original": " 原分析：{text}",
    },
    "en": {
        "days": "{days}d ",
        "delta": "{days}{hours}h {minutes}m",
        "overdue": "overdue",
        "approaching": "approaching",
        "due_proximity": "Due time {state} ({delta}); the due-time rule requires urgency of at least {floor}. Corrected by the system.",
        "keyword_category": "Cross-border e-commerce rules rate this kind of task as important (minimum {floor}). Corrected by the system.",
        "original": " Original analysis: {text}",
    },
}


def _templates(locale: str) -> dict:
    return _TEMPLATES.get(locale, _TEMPLATES[DEFAULT_LOCALE])


def format_due_delta(delta: DueDelta, locale: str = DEFAULT_LOCALE) -> str:
    """Format a due delta, e.g. "1天 2小时 5分钟" (days omitted when zero)."""
    templates = _templates(locale)
    days = templates["days"].format(days=delta.days) if delta.days > 0 else ""
    return templates["delta"].format(days=days, hours=delta.hours, minutes=delta.minutes)


def render_correction(correction: ScoreCorrection, locale: str = DEFAULT_LOCALE) -> str:
    """Render one correction as notice plus trailing original analysis."""
    templates = _templates(locale)
    if correction.reason == CorrectionReason.DUE_PROXIMITY and correction.due_delta is not None:
        notice = templates["due_proximity"].format(
            state=templates["overdue"] if correction.due_delta.overdue else templates["approaching"],
            delta=format_due_delta(correction.due_delta, locale),
            floor=correction.applied_floor,
        )
    else:
        notice = templates["keyword_category"].format(floor=correction.applied_floor)
    if correction.original_text:
        notice += templates["original"].format(text=correction.original_text)
    return notice


def _find(record: ClassificationRecord, target: CorrectionTarget) -> Optional[ScoreCorrection]:
    for correction in record.corrections:
        if correction.target == target:
            return correction
    return None


def render_explanation(record: ClassificationRecord, locale: str = DEFAULT_LOCALE) -> Explanation:
    """Explanation texts for display, with correction notices applied.

    Fields without a correction are returned unchanged.
    """
    urgency = _find(record, CorrectionTarget.URGENCY)
    importance = _find(record, CorrectionTarget.IMPORTANCE)
    return Explanation(
        urgency=render_correction(urgency, locale) if urgency else record.explanation.urgency,
        importance=render_correction(importance, locale) if importance else record.explanation.importance,
        next_action=record.explanation.next_action,
    )
