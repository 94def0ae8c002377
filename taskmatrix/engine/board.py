"""Application state for taskmatrix.

`TaskBoard` owns the task store together with the presentation state (busy
flag, last error, search query, current time). Every state change goes
through a board method; each mutation of the store is saved through the
persistence collaborator.

Blocking work runs off the event loop: `submit` awaits the remote
classification and the following save in worker threads, and at most one
classification may be outstanding at a time. The synchronous mutations
(`remove`, `toggle_status`, `clear`) block on persistence and are called
from worker threads by the API; a lock keeps each mutation and its save
together.
"""

import asyncio
import logging
import threading
import time
from typing import Callable, Dict, List, Optional, Protocol

from pydantic import BaseModel, Field

from taskmatrix.config import LOCALE, TIME_ZONE
from taskmatrix.engine.guardrails import correct
from taskmatrix.engine.ranking import group_by_quadrant
from taskmatrix.engine.store import TaskStore
from taskmatrix.integrations.openai_client import ClassificationError, DEFAULT_ERROR_MESSAGE
from taskmatrix.models.classification import RawClassification
from taskmatrix.models.task import ClassificationRecord

logger = logging.getLogger(__name__)


class BoardBusyError(Exception):
    """A classification is already in progress."""


class Classifier(Protocol):
    def classify(self, text: str, due_at: Optional[int], now: int) -> RawClassification:
        ...


class Persistence(Protocol):
    def load(self) -> Optional[List[ClassificationRecord]]:
        ...

    def save(self, records: List[ClassificationRecord]) -> None:
        ...


def now_ms() -> int:
    """Current time in ms since the epoch."""
    return int(time.time() * 1000)


class BoardSnapshot(BaseModel):
    """Read-only view of the board for the presentation layer."""

    open_by_quadrant: Dict[str, List[ClassificationRecord]] = Field(..., description="Open tasks per quadrant, display-sorted")
    done: List[ClassificationRecord] = Field(..., description="Done tasks, most recently completed first")
    open_count: int
    done_count: int
    quadrant_counts: Dict[str, int] = Field(..., description="Open task count per quadrant")
    busy: bool
    last_error: Optional[str] = None
    query: str = ""
    now: int


class TaskBoard:
    """Task store plus presentation state, mutated only through its methods."""

    def __init__(
        self,
        classifier: Classifier,
        persistence: Optional[Persistence] = None,
        clock: Callable[[], int] = now_ms,
        time_zone: str = TIME_ZONE,
        locale: str = LOCALE,
    ):
        self.classifier = classifier
        self.persistence = persistence
        self.clock = clock
        self.time_zone = time_zone
        self.locale = locale
        self.store = TaskStore()
        self.busy = False
        self.last_error: Optional[str] = None
        self.query = ""
        self.now = clock()
        # Serializes store mutations with their saves; mutations may run in worker threads
        self._lock = threading.RLock()

    def load(self) -> int:
        """Load records from persistence. Returns the number loaded."""
        records = self.persistence.load() if self.persistence else None
        self.store.load(records or [])
        logger.info(f"Loaded {len(self.store)} records")
        return len(self.store)

    def _save(self) -> None:
        if self.persistence:
            self.persistence.save(self.store.records)

    def _add_and_save(self, record: ClassificationRecord) -> None:
        with self._lock:
            self.store.add(record)
            self._save()

    def tick(self, now: Optional[int] = None) -> int:
        """Refresh the current time used for due-status display."""
        self.now = now if now is not None else self.clock()
        return self.now

    async def submit(self, text: str, due_at: Optional[int] = None) -> ClassificationRecord:
        """Classify a task, correct the result and add it to the store.

        Args:
            text: Task description (must not be blank)
            due_at: Due timestamp (ms) or None

        Returns:
            The new record

        Raises:
            ValueError: If the text is blank
            BoardBusyError: If another classification is in progress
            ClassificationError: If the classifier fails (store unchanged,
                message kept in last_error)
        """
        if not text or not text.strip():
            raise ValueError("Task text must not be empty")
        if self.busy:
            raise BoardBusyError("A classification is already in progress")

        self.busy = True
        self.last_error = None
        now = self.tick()
        try:
            try:
                raw = await asyncio.to_thread(self.classifier.classify, text, due_at, now)
            except ClassificationError as e:
                self.last_error = str(e) or DEFAULT_ERROR_MESSAGE
                raise
            except Exception as e:
                logger.error(f"Classifier failed: {type(e).__name__}")
                self.last_error = DEFAULT_ERROR_MESSAGE
                raise ClassificationError(self.last_error) from e

            record = correct(raw, text, due_at, now, locale=self.locale)
            await asyncio.to_thread(self._add_and_save, record)
            logger.info(f"Classified task {record.id} as {record.quadrant} (u={record.u_score}, i={record.i_score})")
            return record
        finally:
            self.busy = False

    def remove(self, record_id: str) -> bool:
        with self._lock:
            removed = self.store.remove(record_id)
            if removed:
                self._save()
        return removed

    def toggle_status(self, record_id: str) -> Optional[ClassificationRecord]:
        """Toggle open/done using the current time as completion time."""
        with self._lock:
            updated = self.store.toggle_status(record_id, self.tick())
            if updated is not None:
                self._save()
        return updated

    def clear(self, confirm: bool = False) -> int:
        """Remove every record. Destructive, so the caller must confirm.

        Raises:
            ValueError: If confirm is not True
        """
        if not confirm:
            raise ValueError("Clearing all tasks requires confirmation")
        with self._lock:
            count = self.store.clear()
            self._save()
        return count

    def set_query(self, query: Optional[str]) -> str:
        self.query = (query or "").strip()
        return self.query

    def dismiss_error(self) -> None:
        self.last_error = None

    def snapshot(self) -> BoardSnapshot:
        """Build the presentation view for the current query and time."""
        open_records, done_records = self.store.partition(self.query)
        groups = group_by_quadrant(open_records, self.now, self.time_zone)
        return BoardSnapshot(
            open_by_quadrant=groups,
            done=done_records,
            open_count=len(open_records),
            done_count=len(done_records),
            quadrant_counts={quadrant: len(items) for quadrant, items in groups.items()},
            busy=self.busy,
            last_error=self.last_error,
            query=self.query,
            now=self.now,
        )
