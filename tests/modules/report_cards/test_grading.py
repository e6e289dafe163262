"""
Tests for the report card grading scale.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from edutrack.modules.report_cards.grading import (
    grade_for_percentage,
    overall_result,
    percentage_of,
)


@pytest.mark.parametrize(
    ("percentage", "grade", "point"),
    [
        (100, "A+", "4.0"),
        (90, "A+", "4.0"),
        ("89.99", "A", "3.5"),
        (80, "A", "3.5"),
        (75, "B+", "3.0"),
        (60, "B", "2.5"),
        (50, "C+", "2.0"),
        (40, "C", "1.5"),
        (30, "D", "1.0"),
        ("29.99", "F", "0.0"),
        (0, "F", "0.0"),
    ],
)
def test_grade_boundaries(percentage, grade, point):
    """Map each percentage band to its grade and grade point."""
    result = grade_for_percentage(percentage)
    assert result.grade == grade
    assert result.grade_point == Decimal(point)


class TestPercentageOf:
    def test_rounds_to_two_places(self):
        """Round the percentage to two decimal places."""
        assert percentage_of(2, 3) == Decimal("66.67")

    def test_full_marks(self):
        """Full marks give one hundred percent."""
        assert percentage_of(Decimal("50"), Decimal("50")) == Decimal("100.00")

    def test_zero_total_rejected(self):
        """Reject a subject with zero total marks."""
        with pytest.raises(ValueError):
            percentage_of(0, 0)


class TestOverallResult:
    """Overall percentage is marks-weighted; GPA is the mean grade point."""

    def _report(self, obtained, total, point):
        return SimpleNamespace(
            obtained_marks=Decimal(obtained), total_marks=Decimal(total), grade_point=Decimal(point)
        )

    def test_empty_card_has_no_result(self):
        """A card without subjects has no overall result."""
        assert overall_result([]) == (None, None, None)

    def test_aggregates_subjects(self):
        """Combine subject results into the overall percentage, grade and GPA."""
        result = overall_result(
            [
                self._report("90", "100", "4.0"),
                self._report("30", "50", "2.5"),
            ]
        )

        # 120 / 150
        assert result.percentage == Decimal("80.00")
        assert result.grade == "A"
        assert result.gpa == Decimal("3.25")
