"""
Notification Repository

Database operations for in-app notifications.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.notifications.models import Notification, NotificationType


async def create(
    db: AsyncSession,
    *,
    user_id: str,
    title: str,
    content: str,
    type: NotificationType,
    data: dict[str, Any] | None = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        title=title,
        content=content,
        type=type,
        data=data,
        is_read=False,
    )
    db.add(notification)
    await db.flush()
    return notification


def list_query(
    user_id: str,
    is_read: bool | None = None,
    type: NotificationType | None = None,
) -> Select:
    """Newest first."""
    query = select(Notification).where(Notification.user_id == user_id)
    if is_read is not None:
        query = query.where(Notification.is_read.is_(is_read))
    if type is not None:
        query = query.where(Notification.type == type)
    return query.order_by(Notification.created_at.desc())


async def get_for_user(db: AsyncSession, notification_id: str, user_id: str) -> Notification | None:
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def mark_read(db: AsyncSession, user_id: str, ids: list[str] | None = None) -> int:
    """Mark the caller's unread notifications as read; all of them when ``ids`` is None."""
    stmt = (
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True, read_at=datetime.now(UTC))
    )
    if ids is not None:
        stmt = stmt.where(Notification.id.in_(ids))

    result = await db.execute(stmt)
    return result.rowcount or 0


async def delete_notification(db: AsyncSession, notification: Notification) -> None:
    await db.delete(notification)
    await db.flush()


async def stats(db: AsyncSession, user_id: str) -> dict[str, Any]:
    result = await db.execute(
        select(
            Notification.type,
            func.count(Notification.id),
            func.count(Notification.id).filter(Notification.is_read.is_(False)),
        )
        .where(Notification.user_id == user_id)
        .group_by(Notification.type)
    )

    by_type: dict[str, int] = {}
    total = 0
    unread = 0
    for type_, count, unread_count in result.all():
        by_type[type_.value] = count
        total += count
        unread += unread_count

    return {"total": total, "unread": unread, "by_type": by_type}


async def purge_read_before(db: AsyncSession, cutoff: datetime) -> int:
    result = await db.execute(
        delete(Notification).where(
            Notification.is_read.is_(True),
            Notification.created_at < cutoff,
        )
    )
    return result.rowcount or 0
