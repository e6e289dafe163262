"""
Role Allow-Lists

Each operation that is restricted by role names its allow-list here. Services
call ``ensure_role`` before touching storage, so a forbidden caller never
learns whether the target row exists.
"""

import logging

from edutrack.core.auth import Actor
from edutrack.core.errors import PermissionDeniedError
from edutrack.modules.users.models import UserRole

logger = logging.getLogger(__name__)

SUPER_ADMIN = UserRole.SUPER_ADMIN
SCHOOL_ADMIN = UserRole.SCHOOL_ADMIN
PRINCIPAL = UserRole.PRINCIPAL
TEACHER = UserRole.TEACHER
PARENT = UserRole.PARENT

SCHOOL_MANAGERS = frozenset({PRINCIPAL, SCHOOL_ADMIN, SUPER_ADMIN})

# Classes, rooms, curricula
CLASS_MANAGERS = SCHOOL_MANAGERS
ROOM_MANAGERS = SCHOOL_MANAGERS
CURRICULUM_MANAGERS = SCHOOL_MANAGERS

EVENT_CREATORS = frozenset({PRINCIPAL})
SCHOOL_VERIFIERS = frozenset({SUPER_ADMIN})
SCHOOL_DELETERS = frozenset({SUPER_ADMIN})
TEACHER_VERIFIERS = SCHOOL_MANAGERS
ATTENDANCE_RECORDERS = frozenset({TEACHER})

REPORT_CARD_EDITORS = frozenset({PRINCIPAL, SCHOOL_ADMIN, TEACHER})
REPORT_CARD_APPROVERS = frozenset({PRINCIPAL, SCHOOL_ADMIN})

# Students, teachers, parents
PEOPLE_MANAGERS = frozenset({SUPER_ADMIN, PRINCIPAL, SCHOOL_ADMIN})

TIMETABLE_MANAGERS = SCHOOL_MANAGERS
TIMETABLE_SLOT_EDITORS = frozenset({PRINCIPAL, SCHOOL_ADMIN, TEACHER, SUPER_ADMIN})
ACADEMIC_MANAGERS = SCHOOL_MANAGERS
OBJECTIVE_CREATORS = TIMETABLE_SLOT_EDITORS
PROGRESS_EDITORS = TIMETABLE_SLOT_EDITORS

# Materials, order status, school payment account
COMMERCE_MANAGERS = SCHOOL_MANAGERS
SHOPPERS = frozenset({PARENT})
STAFF_ACCOUNT_CREATORS = frozenset({SUPER_ADMIN, SCHOOL_ADMIN})

# Fee structures, breakdown items and overrides
FEE_MANAGERS = SCHOOL_MANAGERS
FEE_VIEWERS = frozenset({PARENT, PRINCIPAL, SCHOOL_ADMIN, SUPER_ADMIN})


def has_role(actor: Actor, allowed: frozenset[UserRole]) -> bool:
    return actor.role in allowed


def ensure_role(
    actor: Actor,
    allowed: frozenset[UserRole],
    message: str | None = None,
) -> None:
    """
    Raise ``PermissionDeniedError`` unless the caller's role is allowed.

    Raises:
        PermissionDeniedError: 403 with a generic (or the given) message
    """
    if actor.role not in allowed:
        logger.warning(f"Access denied for {actor}: role not in {sorted(r.value for r in allowed)}")
        if message:
            raise PermissionDeniedError(message)
        raise PermissionDeniedError()
