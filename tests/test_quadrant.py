"""Tests for quadrant classification (deterministic, inclusive thresholds)."""

import pytest

from taskmatrix.engine.quadrant import classify_quadrant, quadrant_label, get_quadrant_name
from taskmatrix.models.task import Quadrant


class TestClassifyQuadrant:
    """Test classify_quadrant() thresholds."""

    @pytest.mark.parametrize("u, i, expected", [
        (60, 60, Quadrant.Q1),
        (100, 100, Quadrant.Q1),
        (59, 60, Quadrant.Q2),
        (0, 100, Quadrant.Q2),
        (60, 59, Quadrant.Q3),
        (100, 0, Quadrant.Q3),
        (59, 59, Quadrant.Q4),
        (0, 0, Quadrant.Q4),
    ])
    def test_thresholds(self, u, i, expected):
        assert classify_quadrant(u, i) == expected

    def test_fractional_scores_below_threshold(self):
        assert classify_quadrant(59.9, 60) == Quadrant.Q2

    def test_out_of_range_scores(self):
        """Out-of-range scores are classified as-is, not clamped."""
        assert classify_quadrant(150, -5) == Quadrant.Q3

    def test_every_high_pair_is_q1(self):
        for u in range(60, 101, 10):
            for i in range(60, 101, 10):
                assert classify_quadrant(u, i) == Quadrant.Q1


class TestQuadrantLabel:
    """Test quadrant_label() and localized names."""

    def test_zh_labels(self):
        assert quadrant_label(Quadrant.Q1) == "Q1 - 立即执行"
        assert quadrant_label(Quadrant.Q2) == "Q2 - 制定计划"
        assert quadrant_label(Quadrant.Q3) == "Q3 - 授权他人"
        assert quadrant_label(Quadrant.Q4) == "Q4 - 暂不处理"

    def test_en_labels(self):
        assert quadrant_label(Quadrant.Q3, "en") == "Q3 - Delegate"

    def test_accepts_plain_code(self):
        assert quadrant_label("Q2", "en") == "Q2 - Plan"

    def test_unknown_locale_falls_back(self):
        assert get_quadrant_name(Quadrant.Q4, "fr") == "暂不处理"
