"""
Tests for the attendance service.

Covers:
- Only teachers may record attendance
- Enrollment checks against the lesson's class
- Parents are alerted on absences
- Bulk recording is all-or-nothing
- Attendance summaries
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from edutrack.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from edutrack.modules.academics.models import Lesson
from edutrack.modules.attendance.models import Attendance, AttendanceStatus
from edutrack.modules.attendance.schemas import (
    AttendanceRecord,
    BulkAttendanceEntry,
    BulkAttendanceRecord,
)
from edutrack.modules.attendance.service import (
    attendance_summary,
    get_student_attendance,
    record_attendance,
    record_bulk_attendance,
)
from edutrack.modules.students.models import Student

SERVICE = "edutrack.modules.attendance.service"
LESSON_DATE = date(2026, 3, 2)


@pytest.fixture
def lesson():
    lesson = MagicMock(spec=Lesson)
    lesson.id = "lesson-1"
    lesson.name = "Mathematics"
    lesson.class_id = "class-1"
    lesson.school_id = "11111111-1111-1111-1111-111111111111"
    return lesson


def _student(student_id: str, class_id: str = "class-1"):
    student = MagicMock(spec=Student)
    student.id = student_id
    student.class_id = class_id
    student.parent_id = f"parent-of-{student_id}"
    student.first_name = "Ama"
    student.last_name = "Mensah"
    return student


def _record(status: AttendanceStatus):
    record = MagicMock(spec=Attendance)
    record.id = "attendance-1"
    record.status = status
    record.date = LESSON_DATE
    return record


# ============================================
# record_attendance
# ============================================


@pytest.mark.asyncio
async def test_non_teacher_cannot_record(mock_db, principal):
    """Test that principals are refused before any lookup."""
    with patch(f"{SERVICE}.repository") as mock_repo:
        with pytest.raises(PermissionDeniedError) as exc_info:
            await record_attendance(
                mock_db,
                principal,
                AttendanceRecord(
                    student_id="s-1",
                    lesson_id="lesson-1",
                    date=LESSON_DATE,
                    status=AttendanceStatus.PRESENT,
                ),
            )

        assert exc_info.value.message == "Only teachers can record attendance"
        mock_repo.get_teacher_lesson.assert_not_called()


@pytest.mark.asyncio
async def test_lesson_not_taught_by_caller(mock_db, teacher):
    """Test that another teacher's lesson looks missing."""
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_teacher_lesson = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await record_attendance(
                mock_db,
                teacher,
                AttendanceRecord(
                    student_id="s-1",
                    lesson_id="lesson-1",
                    date=LESSON_DATE,
                    status=AttendanceStatus.PRESENT,
                ),
            )

        mock_repo.get_teacher_lesson.assert_awaited_once_with(
            mock_db, "lesson-1", teacher.id, teacher.school_id
        )


@pytest.mark.asyncio
async def test_student_outside_lesson_class(mock_db, teacher, lesson):
    """Test that a student from another class is rejected."""
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_teacher_lesson = AsyncMock(return_value=lesson)
        mock_repo.students_in_school = AsyncMock(return_value={"s-1": _student("s-1", "class-9")})

        with pytest.raises(BusinessRuleError) as exc_info:
            await record_attendance(
                mock_db,
                teacher,
                AttendanceRecord(
                    student_id="s-1",
                    lesson_id="lesson-1",
                    date=LESSON_DATE,
                    status=AttendanceStatus.PRESENT,
                ),
            )

        assert exc_info.value.error_code == "NOT_ENROLLED"


@pytest.mark.asyncio
async def test_absence_creates_record_and_alerts_parent(mock_db, teacher, lesson):
    """Test that a new ABSENT record notifies the student's parent."""
    created = _record(AttendanceStatus.ABSENT)

    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.notify", new_callable=AsyncMock) as mock_notify,
    ):
        mock_repo.get_teacher_lesson = AsyncMock(return_value=lesson)
        mock_repo.students_in_school = AsyncMock(return_value={"s-1": _student("s-1")})
        mock_repo.get_record = AsyncMock(return_value=None)
        mock_shared.add = AsyncMock(return_value=created)

        result = await record_attendance(
            mock_db,
            teacher,
            AttendanceRecord(
                student_id="s-1",
                lesson_id="lesson-1",
                date=LESSON_DATE,
                status=AttendanceStatus.ABSENT,
            ),
        )

        assert result is created
        new_row = mock_shared.add.call_args.args[1]
        assert new_row.recorded_by_id == teacher.id
        assert new_row.school_id == lesson.school_id

        mock_notify.assert_awaited_once()
        args = mock_notify.call_args.args
        assert args[1] == "parent-of-s-1"
        assert args[2] == "Attendance Alert"
        assert "2026-03-02" in args[3]


@pytest.mark.asyncio
async def test_recording_again_overwrites(mock_db, teacher, lesson):
    """Test that an existing record for the day is updated in place."""
    existing = _record(AttendanceStatus.ABSENT)

    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.notify", new_callable=AsyncMock) as mock_notify,
    ):
        mock_repo.get_teacher_lesson = AsyncMock(return_value=lesson)
        mock_repo.students_in_school = AsyncMock(return_value={"s-1": _student("s-1")})
        mock_repo.get_record = AsyncMock(return_value=existing)

        result = await record_attendance(
            mock_db,
            teacher,
            AttendanceRecord(
                student_id="s-1",
                lesson_id="lesson-1",
                date=LESSON_DATE,
                status=AttendanceStatus.LATE,
                notes="Bus delay",
            ),
        )

        assert result is existing
        assert existing.status == AttendanceStatus.LATE
        assert existing.notes == "Bus delay"
        mock_shared.add.assert_not_called()
        mock_notify.assert_not_called()
        mock_db.flush.assert_awaited()


# ============================================
# record_bulk_attendance
# ============================================


@pytest.mark.asyncio
async def test_bulk_rejects_whole_batch_on_unknown_student(mock_db, teacher, lesson):
    """Test that nothing is written when one student is invalid."""
    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.shared_repository") as mock_shared,
    ):
        mock_repo.get_teacher_lesson = AsyncMock(return_value=lesson)
        mock_repo.students_in_school = AsyncMock(return_value={"s-1": _student("s-1")})

        with pytest.raises(NotFoundError):
            await record_bulk_attendance(
                mock_db,
                teacher,
                BulkAttendanceRecord(
                    lesson_id="lesson-1",
                    date=LESSON_DATE,
                    records=[
                        BulkAttendanceEntry(student_id="s-1", status=AttendanceStatus.PRESENT),
                        BulkAttendanceEntry(student_id="s-2", status=AttendanceStatus.ABSENT),
                    ],
                ),
            )

        mock_repo.get_record.assert_not_called()
        mock_shared.add.assert_not_called()


@pytest.mark.asyncio
async def test_bulk_counts_absences(mock_db, teacher, lesson):
    """Test the recorded and absent counts of a bulk call."""
    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.notify", new_callable=AsyncMock) as mock_notify,
    ):
        mock_repo.get_teacher_lesson = AsyncMock(return_value=lesson)
        mock_repo.students_in_school = AsyncMock(
            return_value={"s-1": _student("s-1"), "s-2": _student("s-2")}
        )
        mock_repo.get_record = AsyncMock(return_value=None)
        mock_shared.add = AsyncMock(
            side_effect=[_record(AttendanceStatus.PRESENT), _record(AttendanceStatus.ABSENT)]
        )

        result = await record_bulk_attendance(
            mock_db,
            teacher,
            BulkAttendanceRecord(
                lesson_id="lesson-1",
                date=LESSON_DATE,
                records=[
                    BulkAttendanceEntry(student_id="s-1", status=AttendanceStatus.PRESENT),
                    BulkAttendanceEntry(student_id="s-2", status=AttendanceStatus.ABSENT),
                ],
            ),
        )

        assert result["recorded"] == 2
        assert result["absent"] == 1
        assert len(result["items"]) == 2
        assert mock_notify.await_count == 1


def test_bulk_rejects_duplicate_students():
    """Reject a bulk submission listing a student twice."""
    with pytest.raises(ValueError, match="Each student may appear only once"):
        BulkAttendanceRecord(
            lesson_id="lesson-1",
            date=LESSON_DATE,
            records=[
                BulkAttendanceEntry(student_id="s-1", status=AttendanceStatus.PRESENT),
                BulkAttendanceEntry(student_id="s-1", status=AttendanceStatus.ABSENT),
            ],
        )


# ============================================
# Reading
# ============================================


def test_attendance_summary_counts_late_as_attended():
    """Count late arrivals as attended in the rate."""
    records = [
        _record(AttendanceStatus.PRESENT),
        _record(AttendanceStatus.LATE),
        _record(AttendanceStatus.ABSENT),
        _record(AttendanceStatus.EXCUSED),
    ]

    summary = attendance_summary(records)

    assert summary == {
        "total": 4,
        "present": 1,
        "absent": 1,
        "late": 1,
        "excused": 1,
        "attendance_rate": 50.0,
    }


def test_attendance_summary_empty():
    """Report a zero rate when nothing is recorded."""
    assert attendance_summary([])["attendance_rate"] == 0.0


@pytest.mark.asyncio
async def test_student_attendance_rejects_inverted_range(mock_db, parent):
    """Reject an end date before the start date."""
    with pytest.raises(BusinessRuleError) as exc_info:
        await get_student_attendance(
            mock_db, parent, "s-1", start_date=date(2026, 3, 5), end_date=date(2026, 3, 1)
        )

    assert exc_info.value.error_code == "INVALID_DATE_RANGE"
