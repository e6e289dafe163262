"""
Notifications Router

Endpoints:
- GET /notifications - List my notifications (filters: is_read, type)
- GET /notifications/stats - Totals, unread and per-type counts
- POST /notifications/read - Mark the given notifications as read
- POST /notifications/read-all - Mark all my notifications as read
- DELETE /notifications/{id} - Delete one of my notifications
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta
from edutrack.modules.notifications import service
from edutrack.modules.notifications.models import NotificationType
from edutrack.modules.notifications.schemas import (
    MarkReadRequest,
    MarkReadResponse,
    NotificationResponse,
    NotificationStats,
)
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse

router = APIRouter()


@router.get("", response_model=ListResponse[NotificationResponse])
async def list_notifications(
    is_read: bool | None = Query(None),
    type: NotificationType | None = Query(None),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_notifications(db, actor, params, is_read=is_read, type=type)
    return {
        "message": "Notifications retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


@router.get("/stats", response_model=ItemResponse[NotificationStats])
async def notification_stats(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    stats = await service.get_stats(db, actor)
    return {"message": "Notification statistics retrieved successfully", "item": stats}


@router.post("/read", response_model=MarkReadResponse)
async def mark_read(
    body: MarkReadRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    updated = await service.mark_read(db, actor, body.notification_ids)
    return {"message": "Notifications marked as read", "updated": updated}


@router.post("/read-all", response_model=MarkReadResponse)
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    updated = await service.mark_all_read(db, actor)
    return {"message": "All notifications marked as read", "updated": updated}


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_notification(db, actor, notification_id)
    return {"message": "Notification deleted successfully"}
