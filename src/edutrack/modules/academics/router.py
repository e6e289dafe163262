"""
Academics Router

Academic years, terms, grades, subjects and lessons. Each resource supports
create, list, get, partial update and delete.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta
from edutrack.modules.academics import service
from edutrack.modules.academics.schemas import (
    AcademicYearCreate,
    AcademicYearResponse,
    AcademicYearUpdate,
    GradeCreate,
    GradeResponse,
    GradeUpdate,
    LessonCreate,
    LessonResponse,
    LessonUpdate,
    SubjectCreate,
    SubjectResponse,
    SubjectUpdate,
    TermCreate,
    TermResponse,
    TermUpdate,
)
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse

router = APIRouter()


def _page(message: str, rows, total: int, params: PageParams) -> dict:
    return {"message": message, "items": rows, "pagination": pagination_meta(params, total)}


# Academic years


@router.post(
    "/academic-years",
    response_model=ItemResponse[AcademicYearResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_academic_year(
    body: AcademicYearCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    year = await service.create_academic_year(db, actor, body)
    return {"message": "Academic year created successfully", "item": year}


@router.get("/academic-years", response_model=ListResponse[AcademicYearResponse])
async def list_academic_years(
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_academic_years(db, actor, params)
    return _page("Academic years retrieved successfully", rows, total, params)


@router.get("/academic-years/{year_id}", response_model=ItemResponse[AcademicYearResponse])
async def get_academic_year(
    year_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    year = await service.get_academic_year(db, actor, year_id)
    return {"message": "Academic year retrieved successfully", "item": year}


@router.patch("/academic-years/{year_id}", response_model=ItemResponse[AcademicYearResponse])
async def update_academic_year(
    year_id: str,
    body: AcademicYearUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    year = await service.update_academic_year(db, actor, year_id, body)
    return {"message": "Academic year updated successfully", "item": year}


@router.delete("/academic-years/{year_id}", response_model=MessageResponse)
async def delete_academic_year(
    year_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_academic_year(db, actor, year_id)
    return {"message": "Academic year deleted successfully"}


# Terms


@router.post("/terms", response_model=ItemResponse[TermResponse], status_code=status.HTTP_201_CREATED)
async def create_term(
    body: TermCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    term = await service.create_term(db, actor, body)
    return {"message": "Term created successfully", "item": term}


@router.get("/terms", response_model=ListResponse[TermResponse])
async def list_terms(
    academic_year_id: str | None = Query(None),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_terms(db, actor, params, academic_year_id=academic_year_id)
    return _page("Terms retrieved successfully", rows, total, params)


@router.get("/terms/{term_id}", response_model=ItemResponse[TermResponse])
async def get_term(
    term_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    term = await service.get_term(db, actor, term_id)
    return {"message": "Term retrieved successfully", "item": term}


@router.patch("/terms/{term_id}", response_model=ItemResponse[TermResponse])
async def update_term(
    term_id: str,
    body: TermUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    term = await service.update_term(db, actor, term_id, body)
    return {"message": "Term updated successfully", "item": term}


@router.delete("/terms/{term_id}", response_model=MessageResponse)
async def delete_term(
    term_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_term(db, actor, term_id)
    return {"message": "Term deleted successfully"}


# Grades


@router.post("/grades", response_model=ItemResponse[GradeResponse], status_code=status.HTTP_201_CREATED)
async def create_grade(
    body: GradeCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    grade = await service.create_grade(db, actor, body)
    return {"message": "Grade created successfully", "item": grade}


@router.get("/grades", response_model=ListResponse[GradeResponse])
async def list_grades(
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_grades(db, actor, params)
    return _page("Grades retrieved successfully", rows, total, params)


@router.get("/grades/{grade_id}", response_model=ItemResponse[GradeResponse])
async def get_grade(
    grade_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    grade = await service.get_grade(db, actor, grade_id)
    return {"message": "Grade retrieved successfully", "item": grade}


@router.patch("/grades/{grade_id}", response_model=ItemResponse[GradeResponse])
async def update_grade(
    grade_id: str,
    body: GradeUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    grade = await service.update_grade(db, actor, grade_id, body)
    return {"message": "Grade updated successfully", "item": grade}


@router.delete("/grades/{grade_id}", response_model=MessageResponse)
async def delete_grade(
    grade_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_grade(db, actor, grade_id)
    return {"message": "Grade deleted successfully"}


# Subjects


@router.post(
    "/subjects", response_model=ItemResponse[SubjectResponse], status_code=status.HTTP_201_CREATED
)
async def create_subject(
    body: SubjectCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    subject = await service.create_subject(db, actor, body)
    return {"message": "Subject created successfully", "item": subject}


@router.get("/subjects", response_model=ListResponse[SubjectResponse])
async def list_subjects(
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_subjects(db, actor, params)
    return _page("Subjects retrieved successfully", rows, total, params)


@router.get("/subjects/{subject_id}", response_model=ItemResponse[SubjectResponse])
async def get_subject(
    subject_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    subject = await service.get_subject(db, actor, subject_id)
    return {"message": "Subject retrieved successfully", "item": subject}


@router.patch("/subjects/{subject_id}", response_model=ItemResponse[SubjectResponse])
async def update_subject(
    subject_id: str,
    body: SubjectUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    subject = await service.update_subject(db, actor, subject_id, body)
    return {"message": "Subject updated successfully", "item": subject}


@router.delete("/subjects/{subject_id}", response_model=MessageResponse)
async def delete_subject(
    subject_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_subject(db, actor, subject_id)
    return {"message": "Subject deleted successfully"}


# Lessons


@router.post("/lessons", response_model=ItemResponse[LessonResponse], status_code=status.HTTP_201_CREATED)
async def create_lesson(
    body: LessonCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    lesson = await service.create_lesson(db, actor, body)
    return {"message": "Lesson created successfully", "item": lesson}


@router.get("/lessons", response_model=ListResponse[LessonResponse])
async def list_lessons(
    class_id: str | None = Query(None),
    teacher_id: str | None = Query(None),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_lessons(
        db, actor, params, class_id=class_id, teacher_id=teacher_id
    )
    return _page("Lessons retrieved successfully", rows, total, params)


@router.get("/lessons/{lesson_id}", response_model=ItemResponse[LessonResponse])
async def get_lesson(
    lesson_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    lesson = await service.get_lesson(db, actor, lesson_id)
    return {"message": "Lesson retrieved successfully", "item": lesson}


@router.patch("/lessons/{lesson_id}", response_model=ItemResponse[LessonResponse])
async def update_lesson(
    lesson_id: str,
    body: LessonUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    lesson = await service.update_lesson(db, actor, lesson_id, body)
    return {"message": "Lesson updated successfully", "item": lesson}


@router.delete("/lessons/{lesson_id}", response_model=MessageResponse)
async def delete_lesson(
    lesson_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_lesson(db, actor, lesson_id)
    return {"message": "Lesson deleted successfully"}
