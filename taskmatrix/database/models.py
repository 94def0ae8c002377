"""SQLAlchemy database models for taskmatrix."""

from typing import TypeVar, Union
from sqlalchemy import Column, String, Integer, Float, BigInteger, JSON

from taskmatrix.database.database import Base
from taskmatrix.models.classification import coerce_score
from taskmatrix.models.task import ClassificationRecord, TaskStatus

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance or string value

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


class ClassificationRecordDB(Base):
    """Database model for ClassificationRecord."""

    __tablename__ = "classification_records"

    # Primary key
    id = Column(String, primary_key=True)

    # Store order (0 = newest)
    position = Column(Integer, nullable=False, index=True)

    original_text = Column(String, nullable=False)

    # Classification
    quadrant = Column(String, nullable=False)
    quadrant_label = Column(String, nullable=False)
    u_score = Column(Float, nullable=False, default=0)
    i_score = Column(Float, nullable=False, default=0)

    # Timestamps (ms since epoch)
    due_at = Column(BigInteger, nullable=True)
    completed_at = Column(BigInteger, nullable=True)
    timestamp = Column(BigInteger, nullable=False)

    status = Column(String, nullable=False, default=TaskStatus.OPEN.value)

    # Explanation texts and guardrail corrections (stored as JSON)
    explanation = Column(JSON, nullable=False, default=dict)
    corrections = Column(JSON, nullable=False, default=list)

    def to_pydantic(self) -> ClassificationRecord:
        """Convert database model to Pydantic model.

        Raises:
            ValueError: If the stored row does not form a valid record
        """
        return ClassificationRecord.model_validate({
            "id": self.id,
            "original_text": self.original_text,
            "quadrant": self.quadrant,
            "quadrant_label": self.quadrant_label,
            "u_score": coerce_score(self.u_score),
            "i_score": coerce_score(self.i_score),
            "due_at": self.due_at,
            "status": self.status,
            "completed_at": self.completed_at,
            "explanation": self.explanation,
            "corrections": self.corrections,
            "timestamp": self.timestamp,
        })

    @classmethod
    def from_pydantic(cls, record: ClassificationRecord, position: int) -> "ClassificationRecordDB":
        """Create database model from Pydantic model."""
        return cls(
            id=record.id,
            position=position,
            original_text=record.original_text,
            quadrant=enum_to_value(record.quadrant),
            quadrant_label=record.quadrant_label,
            u_score=record.u_score,
            i_score=record.i_score,
            due_at=record.due_at,
            status=enum_to_value(record.status),
            completed_at=record.completed_at,
            explanation=record.explanation.model_dump(),
            corrections=[correction.model_dump() for correction in record.corrections],
            timestamp=record.timestamp,
        )
