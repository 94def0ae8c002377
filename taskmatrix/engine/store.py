"""In-memory task store for taskmatrix.

Holds classification records newest first. The store is the only place
records are mutated; persistence is handled by the caller through a
load/save collaborator.
"""

import logging
from typing import Callable, Iterator, List, Optional, Set, Tuple

from taskmatrix.engine.ranking import sort_done
from taskmatrix.models.task import ClassificationRecord, TaskStatus

logger = logging.getLogger(__name__)


class TaskStore:
    """Ordered collection of classification records."""

    def __init__(self, records: Optional[List[ClassificationRecord]] = None):
        self._records: List[ClassificationRecord] = []
        self._seen_ids: Set[str] = set()
        if records:
            self.load(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ClassificationRecord]:
        return iter(list(self._records))

    @property
    def records(self) -> List[ClassificationRecord]:
        """Records in store order (newest first)."""
        return list(self._records)

    def load(self, records: List[ClassificationRecord]) -> None:
        """Replace the contents with the given records, dropping duplicate ids."""
        self._records = []
        unique_ids: Set[str] = set()
        for record in records:
            if record.id in unique_ids:
                logger.warning(f"Dropping duplicate record {record.id} on load")
                continue
            unique_ids.add(record.id)
            self._records.append(record)
        self._seen_ids |= unique_ids

    def get(self, record_id: str) -> Optional[ClassificationRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def add(self, record: ClassificationRecord) -> ClassificationRecord:
        """Prepend a record (newest first).

        Raises:
            ValueError: If the id was already used in this store
        """
        if record.id in self._seen_ids:
            raise ValueError(f"Record id {record.id} already used")
        self._seen_ids.add(record.id)
        self._records.insert(0, record)
        logger.debug(f"Added record {record.id}: {record.original_text[:50]}")
        return record

    def remove(self, record_id: str) -> bool:
        """Delete a record by id. Returns False (no-op) if absent."""
        before = len(self._records)
        self._records = [record for record in self._records if record.id != record_id]
        removed = len(self._records) != before
        if removed:
            logger.debug(f"Removed record {record_id}")
        return removed

    def toggle_status(self, record_id: str, now: int) -> Optional[ClassificationRecord]:
        """Flip a record between open and done.

        open -> done sets completed_at to now; done -> open clears it.

        Returns:
            Updated record, or None (no-op) if the id is absent
        """
        for index, record in enumerate(self._records):
            if record.id != record_id:
                continue
            if record.is_done:
                updated = record.model_copy(update={"status": TaskStatus.OPEN.value, "completed_at": None})
            else:
                updated = record.model_copy(update={"status": TaskStatus.DONE.value, "completed_at": now})
            self._records[index] = updated
            logger.debug(f"Record {record_id} status -> {updated.status}")
            return updated
        return None

    def clear(self) -> int:
        """Remove all records. Returns the number removed."""
        count = len(self._records)
        self._records = []
        logger.info(f"Cleared {count} records")
        return count

    def filter(self, predicate: Callable[[ClassificationRecord], bool]) -> List[ClassificationRecord]:
        return [record for record in self._records if predicate(record)]

    def search(self, query: Optional[str]) -> List[ClassificationRecord]:
        """Case-insensitive substring search on the task text. Blank query returns all."""
        if not query or not query.strip():
            return self.records
        needle = query.lower()
        return self.filter(lambda record: needle in record.original_text.lower())

    def partition(self, query: Optional[str] = None) -> Tuple[List[ClassificationRecord], List[ClassificationRecord]]:
        """Split (optionally searched) records into open and done.

        Open records keep store order (display sorting is per quadrant);
        done records are ordered by completion time, most recent first.
        """
        matching = self.search(query)
        open_records = [record for record in matching if not record.is_done]
        done_records = sort_done([record for record in matching if record.is_done])
        return open_records, done_records
