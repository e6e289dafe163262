"""
Academics Service Layer

Academic years, terms, grades, subjects and lessons. Every entity belongs to a
school; references between them must stay within that school.
"""

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.errors import (
    BusinessRuleError,
    ConflictError,
    DependentRecordsError,
    NotFoundError,
)
from edutrack.core.pagination import PageParams, paginate
from edutrack.core.permissions import ACADEMIC_MANAGERS, ensure_role
from edutrack.core.tenancy import (
    parent_school_ids,
    resolve_school_id,
    resolve_scope,
    tenant_clause,
)
from edutrack.modules.academics import repository
from edutrack.modules.academics.models import AcademicYear, Grade, Lesson, Subject, Term
from edutrack.modules.academics.schemas import (
    AcademicYearCreate,
    AcademicYearUpdate,
    GradeCreate,
    GradeUpdate,
    LessonCreate,
    LessonUpdate,
    SubjectCreate,
    SubjectUpdate,
    TermCreate,
    TermUpdate,
)
from edutrack.modules.shared import repository as shared_repository
from edutrack.modules.shared.models import BaseModel

logger = logging.getLogger(__name__)

_NAMES = {
    AcademicYear: "Academic year",
    Term: "Term",
    Grade: "Grade",
    Subject: "Subject",
    Lesson: "Lesson",
}


def _scope_clause(actor: Actor, model: type[BaseModel]):
    return tenant_clause(
        resolve_scope(actor),
        school_column=model.school_id,
        parent=lambda parent_id: model.school_id.in_(parent_school_ids(parent_id)),
    )


async def _get(db: AsyncSession, actor: Actor, model: type[BaseModel], entity_id: str):
    entity = await shared_repository.get_scoped(db, model, entity_id, _scope_clause(actor, model))
    if entity is None:
        logger.warning(f"{_NAMES[model]} {entity_id} not found for {actor}")
        raise NotFoundError(_NAMES[model])
    return entity


async def _require_in_school(db: AsyncSession, model: type[BaseModel], entity_id: str, school_id: str):
    entity = await shared_repository.get_in_school(db, model, entity_id, school_id)
    if entity is None:
        raise NotFoundError(_NAMES.get(model, model.__name__))
    return entity


async def _list(db: AsyncSession, actor: Actor, model: type[BaseModel], params: PageParams, *criteria):
    query = repository.list_query(model, _scope_clause(actor, model), *criteria)
    return await paginate(db, query, params)


def _check_range(start_date: date, end_date: date) -> None:
    """Checked on the merged values, since a patch may move only one end."""
    if end_date <= start_date:
        raise BusinessRuleError(
            "end_date must be after start_date", error_code="INVALID_DATE_RANGE"
        )


async def _save(
    db: AsyncSession, actor: Actor, model: type[BaseModel], entity: BaseModel, changes: dict
):
    fields = shared_repository.apply_changes(entity, changes)
    await db.flush()
    logger.info(f"{actor} updated {_NAMES[model].lower()} {entity.id}: {fields}")
    return entity


# ============================================
# Academic years
# ============================================


async def create_academic_year(
    db: AsyncSession, actor: Actor, data: AcademicYearCreate
) -> AcademicYear:
    ensure_role(actor, ACADEMIC_MANAGERS)
    school_id = resolve_school_id(actor, data.school_id)

    if await repository.year_name_taken(db, school_id, data.name):
        raise ConflictError("Academic year with this name already exists in this school")

    if data.is_current:
        await repository.clear_current_year(db, school_id)

    year = await shared_repository.add(
        db,
        AcademicYear(
            school_id=school_id,
            name=data.name,
            start_date=data.start_date,
            end_date=data.end_date,
            is_current=data.is_current,
        ),
    )
    logger.info(f"{actor} created academic year {year.id} in school {school_id}")
    return year


async def list_academic_years(db: AsyncSession, actor: Actor, params: PageParams):
    return await _list(db, actor, AcademicYear, params)


async def get_academic_year(db: AsyncSession, actor: Actor, year_id: str) -> AcademicYear:
    return await _get(db, actor, AcademicYear, year_id)


async def update_academic_year(
    db: AsyncSession, actor: Actor, year_id: str, data: AcademicYearUpdate
) -> AcademicYear:
    """
    Partially update an academic year. Marking it current unsets the flag on
    the school's other years.

    Raises:
        NotFoundError: Year outside the caller's scope
        ConflictError: New name already used in the school
        BusinessRuleError: Resulting end date not after the start date
    """
    ensure_role(actor, ACADEMIC_MANAGERS)
    year = await _get(db, actor, AcademicYear, year_id)
    changes = data.model_dump(exclude_unset=True)

    _check_range(
        changes.get("start_date", year.start_date), changes.get("end_date", year.end_date)
    )

    if "name" in changes and await repository.year_name_taken(
        db, year.school_id, changes["name"], exclude_id=year.id
    ):
        raise ConflictError("Academic year with this name already exists in this school")

    if changes.get("is_current"):
        await repository.clear_current_year(db, year.school_id)

    return await _save(db, actor, AcademicYear, year, changes)


async def delete_academic_year(db: AsyncSession, actor: Actor, year_id: str) -> None:
    from edutrack.modules.timetables.models import Timetable

    ensure_role(actor, ACADEMIC_MANAGERS)
    year = await _get(db, actor, AcademicYear, year_id)

    has_terms = await shared_repository.exists_where(db, Term, Term.academic_year_id == year.id)
    has_timetables = await shared_repository.exists_where(
        db, Timetable, Timetable.academic_year_id == year.id
    )
    if has_terms or has_timetables:
        raise DependentRecordsError(
            "Cannot delete academic year with existing terms or timetables"
        )

    await shared_repository.remove(db, year)
    logger.info(f"{actor} deleted academic year {year_id}")


# ============================================
# Terms
# ============================================


async def create_term(db: AsyncSession, actor: Actor, data: TermCreate) -> Term:
    ensure_role(actor, ACADEMIC_MANAGERS)
    year = await _get(db, actor, AcademicYear, data.academic_year_id)

    term = await shared_repository.add(
        db,
        Term(
            school_id=year.school_id,
            academic_year_id=year.id,
            name=data.name,
            start_date=data.start_date,
            end_date=data.end_date,
        ),
    )
    logger.info(f"{actor} created term {term.id} in academic year {year.id}")
    return term


async def list_terms(
    db: AsyncSession, actor: Actor, params: PageParams, academic_year_id: str | None = None
):
    criteria = [Term.academic_year_id == academic_year_id] if academic_year_id else []
    return await _list(db, actor, Term, params, *criteria)


async def get_term(db: AsyncSession, actor: Actor, term_id: str) -> Term:
    return await _get(db, actor, Term, term_id)


async def update_term(db: AsyncSession, actor: Actor, term_id: str, data: TermUpdate) -> Term:
    """A term may move to another academic year of the same school."""
    ensure_role(actor, ACADEMIC_MANAGERS)
    term = await _get(db, actor, Term, term_id)
    changes = data.model_dump(exclude_unset=True)

    if "academic_year_id" in changes:
        await _require_in_school(db, AcademicYear, changes["academic_year_id"], term.school_id)

    _check_range(
        changes.get("start_date", term.start_date), changes.get("end_date", term.end_date)
    )

    return await _save(db, actor, Term, term, changes)


async def delete_term(db: AsyncSession, actor: Actor, term_id: str) -> None:
    from edutrack.modules.timetables.models import Timetable

    ensure_role(actor, ACADEMIC_MANAGERS)
    term = await _get(db, actor, Term, term_id)

    if await shared_repository.exists_where(db, Timetable, Timetable.term_id == term.id):
        raise DependentRecordsError("Cannot delete term with existing timetables")

    await shared_repository.remove(db, term)
    logger.info(f"{actor} deleted term {term_id}")


# ============================================
# Grades
# ============================================


async def create_grade(db: AsyncSession, actor: Actor, data: GradeCreate) -> Grade:
    ensure_role(actor, ACADEMIC_MANAGERS)
    school_id = resolve_school_id(actor, data.school_id)

    if await repository.grade_level_taken(db, school_id, data.level):
        raise ConflictError("Grade with this level already exists in this school")

    grade = await shared_repository.add(
        db, Grade(school_id=school_id, name=data.name, level=data.level)
    )
    logger.info(f"{actor} created grade {grade.id} in school {school_id}")
    return grade


async def list_grades(db: AsyncSession, actor: Actor, params: PageParams):
    return await _list(db, actor, Grade, params)


async def get_grade(db: AsyncSession, actor: Actor, grade_id: str) -> Grade:
    return await _get(db, actor, Grade, grade_id)


async def update_grade(db: AsyncSession, actor: Actor, grade_id: str, data: GradeUpdate) -> Grade:
    ensure_role(actor, ACADEMIC_MANAGERS)
    grade = await _get(db, actor, Grade, grade_id)
    changes = data.model_dump(exclude_unset=True)

    if "level" in changes and await repository.grade_level_taken(
        db, grade.school_id, changes["level"], exclude_id=grade.id
    ):
        raise ConflictError("Grade with this level already exists in this school")

    return await _save(db, actor, Grade, grade, changes)


async def delete_grade(db: AsyncSession, actor: Actor, grade_id: str) -> None:
    from edutrack.modules.classes.models import SchoolClass

    ensure_role(actor, ACADEMIC_MANAGERS)
    grade = await _get(db, actor, Grade, grade_id)

    if await shared_repository.exists_where(db, SchoolClass, SchoolClass.grade_id == grade.id):
        raise DependentRecordsError("Cannot delete grade with existing classes")

    await shared_repository.remove(db, grade)
    logger.info(f"{actor} deleted grade {grade_id}")


# ============================================
# Subjects
# ============================================


async def create_subject(db: AsyncSession, actor: Actor, data: SubjectCreate) -> Subject:
    ensure_role(actor, ACADEMIC_MANAGERS)
    school_id = resolve_school_id(actor, data.school_id)

    if await repository.subject_name_taken(db, school_id, data.name):
        raise ConflictError("Subject with this name already exists in this school")

    subject = await shared_repository.add(
        db, Subject(school_id=school_id, name=data.name, code=data.code)
    )
    logger.info(f"{actor} created subject {subject.id} in school {school_id}")
    return subject


async def list_subjects(db: AsyncSession, actor: Actor, params: PageParams):
    return await _list(db, actor, Subject, params)


async def get_subject(db: AsyncSession, actor: Actor, subject_id: str) -> Subject:
    return await _get(db, actor, Subject, subject_id)


async def update_subject(
    db: AsyncSession, actor: Actor, subject_id: str, data: SubjectUpdate
) -> Subject:
    ensure_role(actor, ACADEMIC_MANAGERS)
    subject = await _get(db, actor, Subject, subject_id)
    changes = data.model_dump(exclude_unset=True)

    if "name" in changes and await repository.subject_name_taken(
        db, subject.school_id, changes["name"], exclude_id=subject.id
    ):
        raise ConflictError("Subject with this name already exists in this school")

    return await _save(db, actor, Subject, subject, changes)


async def delete_subject(db: AsyncSession, actor: Actor, subject_id: str) -> None:
    ensure_role(actor, ACADEMIC_MANAGERS)
    subject = await _get(db, actor, Subject, subject_id)

    if await shared_repository.exists_where(db, Lesson, Lesson.subject_id == subject.id):
        raise DependentRecordsError("Cannot delete subject with existing lessons")

    await shared_repository.remove(db, subject)
    logger.info(f"{actor} deleted subject {subject_id}")


# ============================================
# Lessons
# ============================================


async def create_lesson(db: AsyncSession, actor: Actor, data: LessonCreate) -> Lesson:
    """The lesson's school is the class's school; subject and teacher must match it."""
    from edutrack.modules.classes.models import SchoolClass
    from edutrack.modules.teachers.models import Teacher

    ensure_role(actor, ACADEMIC_MANAGERS)

    school_class = await shared_repository.get_scoped(
        db,
        SchoolClass,
        data.class_id,
        tenant_clause(resolve_scope(actor), school_column=SchoolClass.school_id),
    )
    if school_class is None:
        raise NotFoundError("Class")

    await _require_in_school(db, Subject, data.subject_id, school_class.school_id)
    teacher = await shared_repository.get_in_school(
        db, Teacher, data.teacher_id, school_class.school_id
    )
    if teacher is None:
        raise NotFoundError("Teacher")

    lesson = await shared_repository.add(
        db,
        Lesson(
            school_id=school_class.school_id,
            name=data.name,
            subject_id=data.subject_id,
            class_id=school_class.id,
            teacher_id=teacher.id,
        ),
    )
    logger.info(f"{actor} created lesson {lesson.id} for class {school_class.id}")
    return lesson


async def list_lessons(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    class_id: str | None = None,
    teacher_id: str | None = None,
):
    criteria = []
    if class_id:
        criteria.append(Lesson.class_id == class_id)
    if teacher_id:
        criteria.append(Lesson.teacher_id == teacher_id)
    return await _list(db, actor, Lesson, params, *criteria)


async def get_lesson(db: AsyncSession, actor: Actor, lesson_id: str) -> Lesson:
    return await _get(db, actor, Lesson, lesson_id)


async def update_lesson(
    db: AsyncSession, actor: Actor, lesson_id: str, data: LessonUpdate
) -> Lesson:
    """
    Partially update a lesson. A new class, subject or teacher must belong to
    the lesson's school.

    Raises:
        NotFoundError: Lesson outside the caller's scope, or a reference in
            another school
    """
    from edutrack.modules.classes.models import SchoolClass
    from edutrack.modules.teachers.models import Teacher

    ensure_role(actor, ACADEMIC_MANAGERS)
    lesson = await _get(db, actor, Lesson, lesson_id)
    changes = data.model_dump(exclude_unset=True)

    references = (
        ("class_id", SchoolClass, "Class"),
        ("subject_id", Subject, "Subject"),
        ("teacher_id", Teacher, "Teacher"),
    )
    for field, model, name in references:
        if field in changes and await shared_repository.get_in_school(
            db, model, changes[field], lesson.school_id
        ) is None:
            raise NotFoundError(name)

    return await _save(db, actor, Lesson, lesson, changes)


async def delete_lesson(db: AsyncSession, actor: Actor, lesson_id: str) -> None:
    from edutrack.modules.attendance.models import Attendance
    from edutrack.modules.timetables.models import TimetableSlot

    ensure_role(actor, ACADEMIC_MANAGERS)
    lesson = await _get(db, actor, Lesson, lesson_id)

    has_slots = await shared_repository.exists_where(
        db, TimetableSlot, TimetableSlot.lesson_id == lesson.id
    )
    has_attendance = await shared_repository.exists_where(
        db, Attendance, Attendance.lesson_id == lesson.id
    )
    if has_slots or has_attendance:
        raise DependentRecordsError(
            "Cannot delete lesson with existing timetable slots or attendance records"
        )

    await shared_repository.remove(db, lesson)
    logger.info(f"{actor} deleted lesson {lesson_id}")
