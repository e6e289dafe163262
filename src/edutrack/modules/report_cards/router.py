"""
Report Cards Router

Endpoints:
- POST /report-cards - Create a report card
- GET /report-cards - List report cards visible to the caller
- POST /report-cards/generate - Generate cards for a whole class
- PUT /report-cards/subjects/{id} - Update a subject report
- DELETE /report-cards/subjects/{id} - Remove a subject report
- GET /report-cards/{id} - Get a report card
- PUT /report-cards/{id} - Update a report card
- DELETE /report-cards/{id} - Delete a report card
- POST /report-cards/{id}/approve - Approve a generated card
- POST /report-cards/{id}/publish - Publish an approved card
- POST /report-cards/{id}/subjects - Add a subject report
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta
from edutrack.modules.report_cards import service
from edutrack.modules.report_cards.models import ReportCardStatus
from edutrack.modules.report_cards.schemas import (
    GenerateReportCards,
    GenerationResponse,
    ReportCardCreate,
    ReportCardResponse,
    ReportCardUpdate,
    SubjectReportCreate,
    SubjectReportUpdate,
)
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse

router = APIRouter()


@router.post(
    "", response_model=ItemResponse[ReportCardResponse], status_code=status.HTTP_201_CREATED
)
async def create_report_card(
    body: ReportCardCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    card = await service.create_report_card(db, actor, body)
    return {"message": "Report card created successfully", "item": card}


@router.get("", response_model=ListResponse[ReportCardResponse])
async def list_report_cards(
    student_id: str | None = Query(None),
    card_status: ReportCardStatus | None = Query(None, alias="status"),
    academic_year_id: str | None = Query(None),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_report_cards(
        db,
        actor,
        params,
        student_id=student_id,
        status=card_status,
        academic_year_id=academic_year_id,
    )
    return {
        "message": "Report cards retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


@router.post("/generate", response_model=GenerationResponse, status_code=status.HTTP_201_CREATED)
async def generate_report_cards(
    body: GenerateReportCards,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    result = await service.generate_report_cards(db, actor, body)
    return {
        "message": f"Generated {result['created']} report cards, skipped {result['skipped']}",
        "item": result,
    }


@router.put("/subjects/{subject_report_id}", response_model=ItemResponse[ReportCardResponse])
async def update_subject_report(
    subject_report_id: str,
    body: SubjectReportUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    card = await service.update_subject_report(db, actor, subject_report_id, body)
    return {"message": "Subject report updated successfully", "item": card}


@router.delete("/subjects/{subject_report_id}", response_model=ItemResponse[ReportCardResponse])
async def delete_subject_report(
    subject_report_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    card = await service.delete_subject_report(db, actor, subject_report_id)
    return {"message": "Subject report deleted successfully", "item": card}


@router.get("/{report_card_id}", response_model=ItemResponse[ReportCardResponse])
async def get_report_card(
    report_card_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    card = await service.get_report_card(db, actor, report_card_id)
    return {"message": "Report card retrieved successfully", "item": card}


@router.put("/{report_card_id}", response_model=ItemResponse[ReportCardResponse])
async def update_report_card(
    report_card_id: str,
    body: ReportCardUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    card = await service.update_report_card(db, actor, report_card_id, body)
    return {"message": "Report card updated successfully", "item": card}


@router.delete("/{report_card_id}", response_model=MessageResponse)
async def delete_report_card(
    report_card_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_report_card(db, actor, report_card_id)
    return {"message": "Report card deleted successfully"}


@router.post("/{report_card_id}/approve", response_model=ItemResponse[ReportCardResponse])
async def approve_report_card(
    report_card_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    card = await service.approve_report_card(db, actor, report_card_id)
    return {"message": "Report card approved successfully", "item": card}


@router.post("/{report_card_id}/publish", response_model=ItemResponse[ReportCardResponse])
async def publish_report_card(
    report_card_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    card = await service.publish_report_card(db, actor, report_card_id)
    return {"message": "Report card published successfully", "item": card}


@router.post(
    "/{report_card_id}/subjects",
    response_model=ItemResponse[ReportCardResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_subject_report(
    report_card_id: str,
    body: SubjectReportCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    card = await service.add_subject_report(db, actor, report_card_id, body)
    return {"message": "Subject report created successfully", "item": card}
