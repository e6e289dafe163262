"""
Tests for partial updates of the academic structure.
"""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from edutrack.core.errors import (
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from edutrack.modules.academics.models import AcademicYear, Grade, Lesson, Subject, Term
from edutrack.modules.academics.schemas import (
    AcademicYearUpdate,
    GradeUpdate,
    LessonUpdate,
    SubjectUpdate,
    TermUpdate,
)
from edutrack.modules.academics.service import (
    update_academic_year,
    update_grade,
    update_lesson,
    update_subject,
    update_term,
)
from edutrack.modules.classes.models import SchoolClass
from edutrack.modules.teachers.models import Teacher

SERVICE = "edutrack.modules.academics.service"
SCHOOL_ID = "11111111-1111-1111-1111-111111111111"


def _year():
    year = MagicMock(spec=AcademicYear)
    year.id = "year-1"
    year.school_id = SCHOOL_ID
    year.name = "2025/2026"
    year.start_date = date(2025, 9, 1)
    year.end_date = date(2026, 7, 31)
    year.is_current = False
    year.created_at = datetime(2025, 8, 1, tzinfo=UTC)
    return year


def _term():
    term = MagicMock(spec=Term)
    term.id = "term-1"
    term.school_id = SCHOOL_ID
    term.academic_year_id = "year-1"
    term.start_date = date(2025, 9, 1)
    term.end_date = date(2025, 12, 15)
    return term


def _entity(model, entity_id):
    entity = MagicMock(spec=model)
    entity.id = entity_id
    entity.school_id = SCHOOL_ID
    return entity


# ============================================
# Academic years
# ============================================


class TestUpdateAcademicYear:
    """Academic year patches keep a valid range and a unique name."""

    @pytest.mark.asyncio
    async def test_end_before_existing_start(self, mock_db, principal):
        """Reject moving the end date before the stored start date."""
        with (
            patch(f"{SERVICE}.shared_repository") as mock_shared,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_shared.get_scoped = AsyncMock(return_value=_year())

            with pytest.raises(BusinessRuleError) as exc_info:
                await update_academic_year(
                    mock_db, principal, "year-1", AcademicYearUpdate(end_date=date(2025, 8, 1))
                )

            assert exc_info.value.error_code == "INVALID_DATE_RANGE"
            mock_shared.apply_changes.assert_not_called()
            mock_repo.clear_current_year.assert_not_called()

    @pytest.mark.asyncio
    async def test_name_taken_by_another_year(self, mock_db, principal):
        """Reject a name used by a different year in the school."""
        year = _year()

        with (
            patch(f"{SERVICE}.shared_repository") as mock_shared,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_shared.get_scoped = AsyncMock(return_value=year)
            mock_repo.year_name_taken = AsyncMock(return_value=True)

            with pytest.raises(ConflictError):
                await update_academic_year(
                    mock_db, principal, "year-1", AcademicYearUpdate(name="2026/2027")
                )

            mock_repo.year_name_taken.assert_awaited_once_with(
                mock_db, SCHOOL_ID, "2026/2027", exclude_id="year-1"
            )

    @pytest.mark.asyncio
    async def test_marking_current_clears_other_years(self, mock_db, school_admin):
        """Unset the current flag on the school's other years first."""
        year = _year()

        with (
            patch(f"{SERVICE}.shared_repository") as mock_shared,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_shared.get_scoped = AsyncMock(return_value=year)
            mock_shared.apply_changes = MagicMock(return_value=["is_current"])
            mock_repo.clear_current_year = AsyncMock()

            result = await update_academic_year(
                mock_db, school_admin, "year-1", AcademicYearUpdate(is_current=True)
            )

            assert result is year
            mock_repo.clear_current_year.assert_awaited_once_with(mock_db, SCHOOL_ID)
            mock_shared.apply_changes.assert_called_once_with(year, {"is_current": True})
            mock_db.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_teacher_cannot_update(self, mock_db, teacher):
        """Only academic managers may change a year."""
        with pytest.raises(PermissionDeniedError):
            await update_academic_year(mock_db, teacher, "year-1", AcademicYearUpdate(name="x"))


# ============================================
# Terms
# ============================================


class TestUpdateTerm:
    """Term patches re-check the range and the academic year's school."""

    @pytest.mark.asyncio
    async def test_start_after_existing_end(self, mock_db, principal):
        """Reject a start date that passes the stored end date."""
        with patch(f"{SERVICE}.shared_repository") as mock_shared:
            mock_shared.get_scoped = AsyncMock(return_value=_term())

            with pytest.raises(BusinessRuleError) as exc_info:
                await update_term(
                    mock_db, principal, "term-1", TermUpdate(start_date=date(2026, 1, 10))
                )

            assert exc_info.value.error_code == "INVALID_DATE_RANGE"

    @pytest.mark.asyncio
    async def test_year_from_another_school(self, mock_db, principal):
        """Reject moving a term into an academic year outside its school."""
        with patch(f"{SERVICE}.shared_repository") as mock_shared:
            mock_shared.get_scoped = AsyncMock(return_value=_term())
            mock_shared.get_in_school = AsyncMock(return_value=None)

            with pytest.raises(NotFoundError) as exc_info:
                await update_term(
                    mock_db, principal, "term-1", TermUpdate(academic_year_id="year-other")
                )

            assert exc_info.value.message == "Academic year not found"
            mock_shared.get_in_school.assert_awaited_once_with(
                mock_db, AcademicYear, "year-other", SCHOOL_ID
            )

    @pytest.mark.asyncio
    async def test_rename_keeps_dates(self, mock_db, principal):
        """Apply only the fields that were sent."""
        term = _term()

        with patch(f"{SERVICE}.shared_repository") as mock_shared:
            mock_shared.get_scoped = AsyncMock(return_value=term)
            mock_shared.apply_changes = MagicMock(return_value=["name"])

            await update_term(mock_db, principal, "term-1", TermUpdate(name="First Term"))

            mock_shared.apply_changes.assert_called_once_with(term, {"name": "First Term"})


# ============================================
# Grades and subjects
# ============================================


@pytest.mark.asyncio
async def test_grade_level_taken(mock_db, principal):
    """Reject a level already used by another grade in the school."""
    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.repository") as mock_repo,
    ):
        mock_shared.get_scoped = AsyncMock(return_value=_entity(Grade, "grade-1"))
        mock_repo.grade_level_taken = AsyncMock(return_value=True)

        with pytest.raises(ConflictError):
            await update_grade(mock_db, principal, "grade-1", GradeUpdate(level=4))

        mock_repo.grade_level_taken.assert_awaited_once_with(
            mock_db, SCHOOL_ID, 4, exclude_id="grade-1"
        )


@pytest.mark.asyncio
async def test_grade_rename_skips_level_check(mock_db, principal):
    """A rename does not look at level uniqueness."""
    grade = _entity(Grade, "grade-1")

    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.repository") as mock_repo,
    ):
        mock_shared.get_scoped = AsyncMock(return_value=grade)
        mock_shared.apply_changes = MagicMock(return_value=["name"])
        mock_repo.grade_level_taken = AsyncMock()

        await update_grade(mock_db, principal, "grade-1", GradeUpdate(name="Grade Four"))

        mock_repo.grade_level_taken.assert_not_called()
        mock_shared.apply_changes.assert_called_once_with(grade, {"name": "Grade Four"})


@pytest.mark.asyncio
async def test_subject_code_can_be_cleared(mock_db, principal):
    """An explicit null clears the optional subject code."""
    subject = _entity(Subject, "subject-1")

    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.repository") as mock_repo,
    ):
        mock_shared.get_scoped = AsyncMock(return_value=subject)
        mock_shared.apply_changes = MagicMock(return_value=["code"])
        mock_repo.subject_name_taken = AsyncMock()

        await update_subject(mock_db, principal, "subject-1", SubjectUpdate(code=None))

        mock_repo.subject_name_taken.assert_not_called()
        mock_shared.apply_changes.assert_called_once_with(subject, {"code": None})


@pytest.mark.asyncio
async def test_subject_name_taken(mock_db, principal):
    """Reject a subject name already used in the school."""
    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.repository") as mock_repo,
    ):
        mock_shared.get_scoped = AsyncMock(return_value=_entity(Subject, "subject-1"))
        mock_repo.subject_name_taken = AsyncMock(return_value=True)

        with pytest.raises(ConflictError):
            await update_subject(mock_db, principal, "subject-1", SubjectUpdate(name="Maths"))


# ============================================
# Lessons
# ============================================


class TestUpdateLesson:
    """A lesson's class, subject and teacher stay in the lesson's school."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("field", "model", "name"),
        [
            ("class_id", SchoolClass, "Class"),
            ("subject_id", Subject, "Subject"),
            ("teacher_id", Teacher, "Teacher"),
        ],
    )
    async def test_reference_outside_school(self, mock_db, principal, field, model, name):
        """Reject each reference that is not in the lesson's school."""
        with patch(f"{SERVICE}.shared_repository") as mock_shared:
            mock_shared.get_scoped = AsyncMock(return_value=_entity(Lesson, "lesson-1"))
            mock_shared.get_in_school = AsyncMock(return_value=None)

            with pytest.raises(NotFoundError) as exc_info:
                await update_lesson(
                    mock_db, principal, "lesson-1", LessonUpdate(**{field: "foreign-id"})
                )

            assert exc_info.value.message == f"{name} not found"
            mock_shared.get_in_school.assert_awaited_once_with(
                mock_db, model, "foreign-id", SCHOOL_ID
            )
            mock_shared.apply_changes.assert_not_called()

    @pytest.mark.asyncio
    async def test_reassign_teacher(self, mock_db, principal):
        """Apply a new teacher from the same school."""
        lesson = _entity(Lesson, "lesson-1")

        with patch(f"{SERVICE}.shared_repository") as mock_shared:
            mock_shared.get_scoped = AsyncMock(return_value=lesson)
            mock_shared.get_in_school = AsyncMock(return_value=_entity(Teacher, "teacher-2"))
            mock_shared.apply_changes = MagicMock(return_value=["teacher_id"])

            result = await update_lesson(
                mock_db, principal, "lesson-1", LessonUpdate(teacher_id="teacher-2")
            )

            assert result is lesson
            mock_shared.apply_changes.assert_called_once_with(lesson, {"teacher_id": "teacher-2"})
