"""
Tenant Scoping

Every read and write is confined to what the caller may see. The caller's
``Actor`` is first reduced to a ``TenantScope`` by ``resolve_scope`` and the
scope is then turned into a SQLAlchemy clause by ``tenant_clause``:

    scope = resolve_scope(actor)
    query = select(Student).where(
        Student.id == student_id,
        tenant_clause(
            scope,
            school_column=Student.school_id,
            teacher=lambda teacher_id: Student.class_id.in_(teacher_class_ids(teacher_id)),
            parent=lambda parent_id: Student.parent_id == parent_id,
        ),
    )

The clause is always combined with the row filter, so a row outside the
caller's scope looks exactly like a missing row.
"""

from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy import ColumnElement, Select, and_, false, select, true, union

from edutrack.core.auth import Actor
from edutrack.core.errors import BusinessRuleError
from edutrack.modules.users.models import UserRole


@dataclass(frozen=True)
class Unrestricted:
    """Platform-wide access (super admin)."""


@dataclass(frozen=True)
class SchoolScope:
    school_id: str


@dataclass(frozen=True)
class TeacherScope:
    teacher_id: str
    school_id: str


@dataclass(frozen=True)
class ParentScope:
    parent_id: str


@dataclass(frozen=True)
class NoAccess:
    """Unknown role, or a school role with no school assigned."""


TenantScope = Unrestricted | SchoolScope | TeacherScope | ParentScope | NoAccess

ClauseFactory = Callable[[str], ColumnElement[bool]]


def resolve_scope(actor: Actor) -> TenantScope:
    """Map a caller to the data they may reach. Pure; touches no storage."""
    role = actor.role

    if role == UserRole.SUPER_ADMIN:
        return Unrestricted()

    if role in (UserRole.SCHOOL_ADMIN, UserRole.PRINCIPAL):
        return SchoolScope(actor.school_id) if actor.school_id else NoAccess()

    if role == UserRole.TEACHER:
        if not actor.school_id:
            return NoAccess()
        return TeacherScope(teacher_id=actor.id, school_id=actor.school_id)

    if role == UserRole.PARENT:
        return ParentScope(actor.id)

    return NoAccess()


def tenant_clause(
    scope: TenantScope,
    school_column: ColumnElement | None = None,
    teacher: ClauseFactory | None = None,
    parent: ClauseFactory | None = None,
) -> ColumnElement[bool]:
    """
    Build the WHERE clause restricting an entity to ``scope``.

    Args:
        scope: The caller's tenant scope
        school_column: The entity's owning-school column, if it has one
        teacher: Builds the teacher-relationship clause from a teacher id.
            When omitted, teachers see the whole school.
        parent: Builds the guardianship clause from a parent id.
            When omitted, parents see nothing.
    """
    if isinstance(scope, Unrestricted):
        return true()

    if isinstance(scope, SchoolScope):
        if school_column is None:
            return false()
        return school_column == scope.school_id

    if isinstance(scope, TeacherScope):
        if school_column is None:
            return teacher(scope.teacher_id) if teacher is not None else false()
        school_clause = school_column == scope.school_id
        if teacher is None:
            return school_clause
        return and_(school_clause, teacher(scope.teacher_id))

    if isinstance(scope, ParentScope):
        return parent(scope.parent_id) if parent is not None else false()

    return false()


def scope_school_id(scope: TenantScope) -> str | None:
    """The single school a scope is pinned to, if any."""
    if isinstance(scope, (SchoolScope, TeacherScope)):
        return scope.school_id
    return None


def resolve_school_id(actor: Actor, requested_school_id: str | None = None) -> str:
    """
    Pick the school a new record belongs to.

    Super admins must name the school; everyone else always writes into their
    own school, whatever they requested.
    """
    if actor.role == UserRole.SUPER_ADMIN:
        if not requested_school_id:
            raise BusinessRuleError("school_id is required", error_code="SCHOOL_REQUIRED")
        return requested_school_id

    if not actor.school_id:
        raise BusinessRuleError(
            "Your account is not associated with a school", error_code="NO_SCHOOL"
        )
    return actor.school_id


def parent_school_ids(parent_id: str) -> Select:
    """Distinct schools in which the parent has at least one child."""
    from edutrack.modules.students.models import Student

    return select(Student.school_id).where(Student.parent_id == parent_id).distinct()


def parent_class_ids(parent_id: str) -> Select:
    from edutrack.modules.students.models import Student

    return (
        select(Student.class_id)
        .where(Student.parent_id == parent_id, Student.class_id.is_not(None))
        .distinct()
    )


def teacher_class_ids(teacher_id: str) -> Select:
    """Classes the teacher supervises or teaches at least one lesson in."""
    from edutrack.modules.academics.models import Lesson
    from edutrack.modules.classes.models import SchoolClass

    supervised = select(SchoolClass.id).where(SchoolClass.supervisor_id == teacher_id)
    taught = select(Lesson.class_id).where(Lesson.teacher_id == teacher_id)
    return select(union(supervised, taught).subquery().c[0])


__all__ = [
    "Unrestricted",
    "SchoolScope",
    "TeacherScope",
    "ParentScope",
    "NoAccess",
    "TenantScope",
    "resolve_scope",
    "tenant_clause",
    "scope_school_id",
    "resolve_school_id",
    "parent_school_ids",
    "parent_class_ids",
    "teacher_class_ids",
]
