"""Repository layer for database operations."""

import logging
from typing import Callable, List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskmatrix.models.task import ClassificationRecord
from taskmatrix.database.models import ClassificationRecordDB

logger = logging.getLogger(__name__)


class TaskRecordRepository:
    """Persists the task store as an ordered list of records."""

    def __init__(self, db: Session):
        self.db = db

    def load(self) -> List[ClassificationRecord]:
        """Load all records in store order (newest first).

        Corrupted stored data is discarded: if any row cannot be converted,
        the whole list is treated as empty.
        """
        try:
            rows = self.db.query(ClassificationRecordDB).order_by(ClassificationRecordDB.position).all()
            return [row.to_pydantic() for row in rows]
        except (ValueError, TypeError, SQLAlchemyError) as e:
            # Stored JSON that does not decode fails inside the query itself
            self.db.rollback()
            logger.warning(f"Discarding corrupted stored tasks: {type(e).__name__}")
            return []

    def save(self, records: List[ClassificationRecord]) -> None:
        """Replace the stored list with the given records, preserving order."""
        try:
            self.db.query(ClassificationRecordDB).delete()
            for position, record in enumerate(records):
                self.db.add(ClassificationRecordDB.from_pydantic(record, position))
            self.db.commit()
            logger.debug(f"Saved {len(records)} records")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save records: {type(e).__name__}: {str(e)}")
            raise


class SessionScopedRepository:
    """Load/save collaborator that opens a fresh session per call."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def load(self) -> List[ClassificationRecord]:
        db = self.session_factory()
        try:
            return TaskRecordRepository(db).load()
        finally:
            db.close()

    def save(self, records: List[ClassificationRecord]) -> None:
        db = self.session_factory()
        try:
            TaskRecordRepository(db).save(records)
        finally:
            db.close()
