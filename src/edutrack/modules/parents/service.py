"""
Parents Service Layer

Parents are not bound to one school. Staff see a parent once the parent has a
child in their school; a parent only ever sees their own profile.
"""

import logging
from itertools import groupby

from sqlalchemy import false, true
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.errors import (
    BusinessRuleError,
    ConflictError,
    DependentRecordsError,
    NotFoundError,
    PermissionDeniedError,
)
from edutrack.core.pagination import PageParams, paginate
from edutrack.core.permissions import PEOPLE_MANAGERS, ensure_role, has_role
from edutrack.core.tenancy import ParentScope, Unrestricted, resolve_scope, scope_school_id
from edutrack.modules.parents import repository
from edutrack.modules.parents.models import Parent
from edutrack.modules.parents.schemas import ParentCreate, ParentFromUser, ParentUpdate
from edutrack.modules.shared import repository as shared_repository
from edutrack.modules.students.models import Student
from edutrack.modules.users import service as user_service
from edutrack.modules.users.models import UserRole
from edutrack.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


def _scope_clause(actor: Actor):
    scope = resolve_scope(actor)
    if isinstance(scope, Unrestricted):
        return true()
    if isinstance(scope, ParentScope):
        return Parent.id == scope.parent_id
    school_id = scope_school_id(scope)
    if school_id:
        return Parent.id.in_(repository.school_parent_ids(school_id))
    return false()


async def _get_parent(db: AsyncSession, actor: Actor, parent_id: str) -> Parent:
    parent = await shared_repository.get_scoped(db, Parent, parent_id, _scope_clause(actor))
    if parent is None:
        logger.warning(f"Parent {parent_id} not found for {actor}")
        raise NotFoundError("Parent")
    return parent


async def create_parent(db: AsyncSession, actor: Actor, data: ParentCreate) -> Parent:
    """
    Create a parent profile for an existing PARENT user or from new details.

    Raises:
        NotFoundError: Existing user not found
        BusinessRuleError: Existing user is not a parent
        ConflictError: Email taken, or the user already has a profile
    """
    ensure_role(actor, PEOPLE_MANAGERS)

    if isinstance(data, ParentFromUser):
        user = await UserRepository.get_by_id(db, data.user_id)
        if user is None:
            raise NotFoundError("User")
        if user.role != UserRole.PARENT:
            raise BusinessRuleError("User must have PARENT role", error_code="INVALID_ROLE")
        if await repository.get_by_id(db, user.id) is not None:
            raise ConflictError("Parent profile already exists for this user")
        password = None
    else:
        user, password = await user_service.create_account(
            db,
            email_address=data.email,
            first_name=data.first_name,
            last_name=data.last_name,
            role=UserRole.PARENT,
            phone=data.phone,
            password=data.password,
        )

    parent = await repository.create(
        db, user=user, address=data.address, occupation=data.occupation
    )
    logger.info(f"{actor} created parent profile {parent.id}")

    if password is not None:
        await user_service.send_welcome_email(db, user, password)
    return parent


async def list_parents(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    search: str | None = None,
) -> tuple[list[Parent], int]:
    return await paginate(db, repository.list_query(_scope_clause(actor), search=search), params)


async def get_parent(db: AsyncSession, actor: Actor, parent_id: str) -> Parent:
    return await _get_parent(db, actor, parent_id)


async def update_parent(
    db: AsyncSession,
    actor: Actor,
    parent_id: str,
    data: ParentUpdate,
) -> Parent:
    is_self = actor.role == UserRole.PARENT and actor.id == parent_id
    if not is_self and not has_role(actor, PEOPLE_MANAGERS):
        raise PermissionDeniedError()

    parent = await _get_parent(db, actor, parent_id)
    fields = shared_repository.apply_changes(parent, data.model_dump(exclude_unset=True))
    await db.flush()

    logger.info(f"{actor} updated parent {parent.id}: {fields}")
    return parent


async def delete_parent(db: AsyncSession, actor: Actor, parent_id: str) -> None:
    """Delete the parent's user account; the profile goes with it."""
    ensure_role(actor, PEOPLE_MANAGERS)
    parent = await _get_parent(db, actor, parent_id)

    if await shared_repository.exists_where(db, Student, Student.parent_id == parent.id):
        raise DependentRecordsError("Cannot delete parent with registered students")

    user = await UserRepository.get_by_id(db, parent.id)
    await shared_repository.remove(db, parent)
    if user is not None:
        await UserRepository.delete(db, user)

    logger.info(f"{actor} deleted parent {parent_id}")


async def get_children(db: AsyncSession, actor: Actor, parent_id: str) -> list[dict]:
    """The parent's children grouped by school."""
    parent = await _get_parent(db, actor, parent_id)
    rows = await repository.children_with_schools(db, parent.id)

    grouped = []
    for school, pairs in groupby(rows, key=lambda row: row[1]):
        grouped.append(
            {
                "school_id": school.id,
                "school_name": school.name,
                "students": [student for student, _ in pairs],
            }
        )
    return grouped
