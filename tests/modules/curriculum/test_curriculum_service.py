"""
Tests for curricula, curriculum subjects and student progress.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from edutrack.core.errors import (
    ConflictError,
    DependentRecordsError,
    NotFoundError,
    PermissionDeniedError,
)
from edutrack.modules.curriculum.models import (
    Curriculum,
    LearningObjective,
    ProgressStatus,
    StudentProgress,
)
from edutrack.modules.curriculum.schemas import CurriculumSubjectCreate, ProgressUpdate
from edutrack.modules.curriculum.service import (
    add_subject,
    delete_curriculum,
    progress_statistics,
    update_progress,
)
from edutrack.modules.students.models import Student

SERVICE = "edutrack.modules.curriculum.service"
SCHOOL_ID = "11111111-1111-1111-1111-111111111111"


def _curriculum():
    curriculum = MagicMock(spec=Curriculum)
    curriculum.id = "cur-1"
    curriculum.school_id = SCHOOL_ID
    return curriculum


def _progress(status, score=None):
    row = MagicMock(spec=StudentProgress)
    row.status = status
    row.assessment_score = score
    return row


# ============================================
# Curricula
# ============================================


@pytest.mark.asyncio
async def test_curriculum_with_subjects_cannot_be_deleted(mock_db, principal):
    """Refuse to delete a curriculum that still has subjects."""
    with patch(f"{SERVICE}.shared_repository") as mock_shared:
        mock_shared.get_scoped = AsyncMock(return_value=_curriculum())
        mock_shared.exists_where = AsyncMock(return_value=True)
        mock_shared.remove = AsyncMock()

        with pytest.raises(DependentRecordsError):
            await delete_curriculum(mock_db, principal, "cur-1")

        mock_shared.remove.assert_not_called()


@pytest.mark.asyncio
async def test_subject_added_once_per_grade(mock_db, school_admin):
    """Test that the same subject cannot be attached twice for one grade."""
    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.repository") as mock_repo,
    ):
        mock_shared.get_scoped = AsyncMock(return_value=_curriculum())
        mock_shared.get_in_school = AsyncMock(return_value=MagicMock())
        mock_repo.subject_entry_exists = AsyncMock(return_value=True)

        with pytest.raises(ConflictError):
            await add_subject(
                mock_db,
                school_admin,
                CurriculumSubjectCreate(curriculum_id="cur-1", subject_id="math", grade_id="g1"),
            )

        mock_repo.subject_entry_exists.assert_awaited_once_with(mock_db, "cur-1", "math", "g1")


@pytest.mark.asyncio
async def test_subject_from_another_school_rejected(mock_db, principal):
    """Reject a subject outside the curriculum's school."""
    with patch(f"{SERVICE}.shared_repository") as mock_shared:
        mock_shared.get_scoped = AsyncMock(return_value=_curriculum())
        mock_shared.get_in_school = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await add_subject(
                mock_db,
                principal,
                CurriculumSubjectCreate(curriculum_id="cur-1", subject_id="x", grade_id="g1"),
            )


# ============================================
# Progress
# ============================================


class TestUpdateProgress:
    """Upsert of a student's progress on one objective."""

    def _student(self):
        student = MagicMock(spec=Student)
        student.id = "student-1"
        student.school_id = SCHOOL_ID
        return student

    def _objective(self):
        objective = MagicMock(spec=LearningObjective)
        objective.id = "obj-1"
        return objective

    @pytest.mark.asyncio
    async def test_parents_cannot_edit_progress(self, mock_db, parent):
        """Parents cannot record progress."""
        with pytest.raises(PermissionDeniedError):
            await update_progress(
                mock_db,
                parent,
                ProgressUpdate(student_id="s", objective_id="o", status=ProgressStatus.COMPLETED),
            )

    @pytest.mark.asyncio
    async def test_new_progress_stamps_dates(self, mock_db, teacher):
        """New progress records its assessment and completion dates."""
        with (
            patch(f"{SERVICE}.get_scoped_student", new_callable=AsyncMock) as mock_student,
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.shared_repository") as mock_shared,
        ):
            mock_student.return_value = self._student()
            mock_repo.get_objective_in_school = AsyncMock(return_value=self._objective())
            mock_repo.get_progress = AsyncMock(return_value=None)
            mock_shared.add = AsyncMock(side_effect=lambda db, row: row)

            progress = await update_progress(
                mock_db,
                teacher,
                ProgressUpdate(
                    student_id="student-1",
                    objective_id="obj-1",
                    status=ProgressStatus.MASTERED,
                    assessment_score=Decimal("92.5"),
                ),
            )

            assert progress.student_id == "student-1"
            assert progress.objective_id == "obj-1"
            assert progress.assessment_date is not None
            assert progress.completed_at is not None

    @pytest.mark.asyncio
    async def test_existing_progress_is_replaced(self, mock_db, teacher):
        """Recording progress again updates the existing row."""
        existing = _progress(ProgressStatus.IN_PROGRESS)

        with (
            patch(f"{SERVICE}.get_scoped_student", new_callable=AsyncMock) as mock_student,
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.shared_repository") as mock_shared,
        ):
            mock_student.return_value = self._student()
            mock_repo.get_objective_in_school = AsyncMock(return_value=self._objective())
            mock_repo.get_progress = AsyncMock(return_value=existing)

            result = await update_progress(
                mock_db,
                teacher,
                ProgressUpdate(
                    student_id="student-1", objective_id="obj-1", status=ProgressStatus.IN_PROGRESS
                ),
            )

            assert result is existing
            mock_shared.add.assert_not_called()
            values = mock_shared.apply_changes.call_args.args[1]
            assert values["status"] == ProgressStatus.IN_PROGRESS
            assert "assessment_date" not in values
            assert "completed_at" not in values

    @pytest.mark.asyncio
    async def test_objective_outside_school(self, mock_db, teacher):
        """Reject an objective outside the student's school."""
        with (
            patch(f"{SERVICE}.get_scoped_student", new_callable=AsyncMock) as mock_student,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_student.return_value = self._student()
            mock_repo.get_objective_in_school = AsyncMock(return_value=None)

            with pytest.raises(NotFoundError):
                await update_progress(
                    mock_db,
                    teacher,
                    ProgressUpdate(
                        student_id="student-1", objective_id="x", status=ProgressStatus.COMPLETED
                    ),
                )


def test_progress_statistics():
    """Count statuses and average the scores."""
    stats = progress_statistics(
        [
            _progress(ProgressStatus.COMPLETED, Decimal("80")),
            _progress(ProgressStatus.MASTERED, Decimal("95")),
            _progress(ProgressStatus.IN_PROGRESS),
            _progress(ProgressStatus.NOT_STARTED),
        ]
    )

    assert stats == {
        "total": 4,
        "not_started": 1,
        "in_progress": 1,
        "completed": 1,
        "mastered": 1,
        "average_score": 87.5,
    }


def test_progress_statistics_without_scores():
    """Report a zero average when nothing is scored."""
    assert progress_statistics([])["average_score"] == 0.0
