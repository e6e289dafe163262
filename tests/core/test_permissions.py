"""
Tests for role allow-lists.
"""

import pytest

from edutrack.core.errors import PermissionDeniedError
from edutrack.core.permissions import (
    ATTENDANCE_RECORDERS,
    EVENT_CREATORS,
    REPORT_CARD_APPROVERS,
    SCHOOL_MANAGERS,
    ensure_role,
    has_role,
)


def test_has_role(principal, parent):
    assert has_role(principal, SCHOOL_MANAGERS)
    assert not has_role(parent, SCHOOL_MANAGERS)


def test_ensure_role_allows_listed_role(teacher):
    ensure_role(teacher, ATTENDANCE_RECORDERS)


def test_ensure_role_generic_message(school_admin):
    with pytest.raises(PermissionDeniedError) as exc_info:
        ensure_role(school_admin, EVENT_CREATORS)

    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "You do not have permission to perform this action"


def test_ensure_role_custom_message(principal):
    with pytest.raises(PermissionDeniedError) as exc_info:
        ensure_role(principal, ATTENDANCE_RECORDERS, "Only teachers can record attendance")

    assert exc_info.value.message == "Only teachers can record attendance"


def test_teacher_cannot_approve_report_cards(teacher):
    with pytest.raises(PermissionDeniedError):
        ensure_role(teacher, REPORT_CARD_APPROVERS)
