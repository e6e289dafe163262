"""
Notification Service

``notify`` is the side-effect emitter used by every other module. It writes
inside a SAVEPOINT so that a failed notification never rolls back the
operation that triggered it, and it never raises.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.errors import NotFoundError
from edutrack.core.pagination import PageParams, paginate
from edutrack.modules.notifications import repository
from edutrack.modules.notifications.models import Notification, NotificationType

logger = logging.getLogger(__name__)


async def notify(
    db: AsyncSession,
    user_id: str,
    title: str,
    content: str,
    type: NotificationType = NotificationType.GENERAL,
    data: dict[str, Any] | None = None,
) -> Notification | None:
    """
    Best-effort in-app notification.

    Returns:
        The created Notification, or None if it could not be stored
    """
    try:
        async with db.begin_nested():
            notification = await repository.create(
                db,
                user_id=user_id,
                title=title,
                content=content,
                type=type,
                data=data,
            )
        logger.debug(f"Notified user {user_id}: {title}")
        return notification
    except Exception as e:
        logger.error(f"Failed to create notification for user {user_id}: {e}", exc_info=True)
        return None


async def notify_many(
    db: AsyncSession,
    user_ids: list[str],
    title: str,
    content: str,
    type: NotificationType = NotificationType.GENERAL,
    data: dict[str, Any] | None = None,
) -> int:
    """Notify each distinct user; returns how many notifications were stored."""
    sent = 0
    for user_id in dict.fromkeys(user_ids):
        if await notify(db, user_id, title, content, type, data) is not None:
            sent += 1
    return sent


async def list_notifications(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    is_read: bool | None = None,
    type: NotificationType | None = None,
) -> tuple[list[Notification], int]:
    query = repository.list_query(actor.id, is_read=is_read, type=type)
    return await paginate(db, query, params)


async def mark_read(db: AsyncSession, actor: Actor, notification_ids: list[str]) -> int:
    updated = await repository.mark_read(db, actor.id, notification_ids)
    logger.info(f"User {actor.id} marked {updated} notification(s) as read")
    return updated


async def mark_all_read(db: AsyncSession, actor: Actor) -> int:
    updated = await repository.mark_read(db, actor.id)
    logger.info(f"User {actor.id} marked all notifications as read ({updated})")
    return updated


async def delete_notification(db: AsyncSession, actor: Actor, notification_id: str) -> None:
    """Users may only delete their own notifications."""
    notification = await repository.get_for_user(db, notification_id, actor.id)
    if notification is None:
        logger.warning(f"Notification {notification_id} not found for user {actor.id}")
        raise NotFoundError("Notification")

    await repository.delete_notification(db, notification)
    logger.info(f"User {actor.id} deleted notification {notification_id}")


async def get_stats(db: AsyncSession, actor: Actor) -> dict[str, Any]:
    return await repository.stats(db, actor.id)
