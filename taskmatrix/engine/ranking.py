"""Display ordering for taskmatrix.

Open tasks are ordered per quadrant, never globally:
1. Overdue tasks first
2. Then tasks due today
3. Then by ascending due time (tasks with a due time before those without)
4. Ties broken by descending urgency score

Done tasks are ordered by completion time, most recent first.
This module is deterministic - same inputs always produce same outputs.
"""

from typing import Dict, List

from taskmatrix.engine.urgency import due_status
from taskmatrix.models.task import ClassificationRecord, DueStatus, Quadrant


_STATUS_RANK = {
    DueStatus.OVERDUE: 0,
    DueStatus.TODAY: 1,
}


def _display_sort_key(record: ClassificationRecord, now: int, time_zone: str) -> tuple:
    """Sort key: (due status rank, has due, due time, -urgency)."""
    status = due_status(record.due_at, now, time_zone)
    status_rank = _STATUS_RANK.get(status, 2)
    if record.due_at is not None:
        return (status_rank, 0, record.due_at, -record.u_score)
    return (status_rank, 1, 0, -record.u_score)


def display_sort(records: List[ClassificationRecord], now: int, time_zone: str = "UTC") -> List[ClassificationRecord]:
    """Sort open tasks for display within one quadrant.

    Args:
        records: Records to sort (typically one quadrant's open tasks)
        now: Current timestamp (ms)
        time_zone: Zone used to decide what "today" means

    Returns:
        New sorted list
    """
    return sorted(records, key=lambda record: _display_sort_key(record, now, time_zone))


def group_by_quadrant(
    records: List[ClassificationRecord], now: int, time_zone: str = "UTC"
) -> Dict[str, List[ClassificationRecord]]:
    """Group open records by quadrant, each group display-sorted.

    Every quadrant is present in the result, possibly empty.
    """
    groups: Dict[str, List[ClassificationRecord]] = {quadrant.value: [] for quadrant in Quadrant}
    for record in records:
        if not record.is_done:
            groups[Quadrant(record.quadrant).value].append(record)
    return {quadrant: display_sort(items, now, time_zone) for quadrant, items in groups.items()}


def sort_done(records: List[ClassificationRecord]) -> List[ClassificationRecord]:
    """Order done records by completion time, most recent first."""
    return sorted(records, key=lambda record: record.completed_at or 0, reverse=True)
