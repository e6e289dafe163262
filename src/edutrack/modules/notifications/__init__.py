"""Notifications module - in-app notifications and the notify side-effect."""

from edutrack.modules.notifications.models import Notification, NotificationType
from edutrack.modules.notifications.service import notify, notify_many

__all__ = ["Notification", "NotificationType", "notify", "notify_many"]
