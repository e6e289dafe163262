"""
Grading scale used by report cards.

    >= 90  A+  4.0
    >= 80  A   3.5
    >= 70  B+  3.0
    >= 60  B   2.5
    >= 50  C+  2.0
    >= 40  C   1.5
    >= 30  D   1.0
     else  F   0.0
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

TWO_PLACES = Decimal("0.01")


class GradeResult(NamedTuple):
    grade: str
    grade_point: Decimal


GRADE_SCALE: tuple[tuple[Decimal, str, Decimal], ...] = (
    (Decimal("90"), "A+", Decimal("4.0")),
    (Decimal("80"), "A", Decimal("3.5")),
    (Decimal("70"), "B+", Decimal("3.0")),
    (Decimal("60"), "B", Decimal("2.5")),
    (Decimal("50"), "C+", Decimal("2.0")),
    (Decimal("40"), "C", Decimal("1.5")),
    (Decimal("30"), "D", Decimal("1.0")),
)

FAIL = GradeResult("F", Decimal("0.0"))


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def grade_for_percentage(percentage: Decimal | float | int | str) -> GradeResult:
    value = Decimal(str(percentage))
    for threshold, grade, point in GRADE_SCALE:
        if value >= threshold:
            return GradeResult(grade, point)
    return FAIL


def percentage_of(obtained: Decimal | int, total: Decimal | int) -> Decimal:
    """Obtained over total as a percentage, to 2 decimal places."""
    total = Decimal(str(total))
    if total <= 0:
        raise ValueError("total must be positive")
    return _quantize(Decimal(str(obtained)) / total * 100)


class OverallResult(NamedTuple):
    percentage: Decimal | None
    grade: str | None
    gpa: Decimal | None


def overall_result(reports: Iterable) -> OverallResult:
    """
    Aggregate subject reports into the card's overall result.

    The percentage is total obtained over total available marks; the GPA is
    the mean grade point. A card with no subject reports has no result.
    """
    reports = list(reports)
    if not reports:
        return OverallResult(None, None, None)

    total = sum((Decimal(str(r.total_marks)) for r in reports), Decimal(0))
    obtained = sum((Decimal(str(r.obtained_marks)) for r in reports), Decimal(0))
    percentage = percentage_of(obtained, total)
    gpa = _quantize(sum((Decimal(str(r.grade_point)) for r in reports), Decimal(0)) / len(reports))
    return OverallResult(percentage, grade_for_percentage(percentage).grade, gpa)
