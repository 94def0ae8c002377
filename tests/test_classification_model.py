"""Tests for the record and raw classification models."""

import pytest
from pydantic import ValidationError

from taskmatrix.models.classification import RawClassification, coerce_score
from taskmatrix.models.task import ClassificationRecord, Explanation, TaskStatus


class TestCoerceScore:
    """Test coerce_score()."""

    @pytest.mark.parametrize("value, expected", [
        (42, 42),
        (42.0, 42),
        (42.5, 42.5),
        (-5, -5),
        (float("nan"), 0),
        (float("inf"), 0),
        (float("-inf"), 0),
        (None, 0),
        ("80", 0),
        (True, 0),
    ])
    def test_coercion(self, value, expected):
        assert coerce_score(value) == expected

    def test_integral_float_becomes_int(self):
        assert isinstance(coerce_score(60.0), int)


class TestRawClassification:
    """Test RawClassification.from_payload()."""

    def test_full_payload(self):
        raw = RawClassification.from_payload({
            "quadrant": "Q2 - 制定计划",
            "u": 40,
            "i": 70,
            "explanation": {"urgency": "a", "importance": "b", "nextAction": "c"},
        })

        assert raw.u == 40
        assert raw.explanation == Explanation(urgency="a", importance="b", next_action="c")

    def test_non_object_payload(self):
        raw = RawClassification.from_payload(["not", "an", "object"])
        assert (raw.u, raw.i, raw.quadrant) == (0, 0, "")

    def test_malformed_fields(self):
        raw = RawClassification.from_payload({
            "quadrant": 3,
            "u": "high",
            "i": None,
            "explanation": {"urgency": 5, "importance": None},
        })

        assert raw.quadrant == ""
        assert (raw.u, raw.i) == (0, 0)
        assert raw.explanation == Explanation()

    def test_explanation_not_object(self):
        raw = RawClassification.from_payload({"u": 1, "i": 2, "explanation": "text"})
        assert raw.explanation == Explanation()


class TestClassificationRecord:
    """Test ClassificationRecord validation."""

    def test_blank_text_rejected(self, make_record):
        with pytest.raises(ValidationError):
            make_record(original_text="   ")

    def test_done_requires_completed_at(self, make_record):
        with pytest.raises(ValidationError):
            make_record(status=TaskStatus.DONE, completed_at=None)

    def test_open_rejects_completed_at(self, make_record, now):
        with pytest.raises(ValidationError):
            make_record(status=TaskStatus.OPEN, completed_at=now)

    def test_quadrant_must_match_scores(self, make_record):
        with pytest.raises(ValidationError):
            make_record(u_score=10, i_score=10, quadrant="Q1")

    def test_enum_values_stored_as_strings(self, make_record):
        record = make_record(status=TaskStatus.OPEN)
        assert record.status == "open"
        assert record.model_dump()["quadrant"] == "Q4"

    def test_is_done(self, make_record, now):
        assert make_record(status=TaskStatus.DONE, completed_at=now).is_done is True
        assert make_record().is_done is False

    def test_model_validate_from_dict(self, now):
        record = ClassificationRecord.model_validate({
            "id": "abc",
            "original_text": "写周报",
            "quadrant": "Q2",
            "quadrant_label": "Q2 - 制定计划",
            "u_score": 20,
            "i_score": 70,
            "timestamp": now,
        })
        assert record.status == TaskStatus.OPEN
        assert record.corrections == []
