"""
School Repository

Database operations for school management.
"""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.schools.models import RegistrationStatus, School, SchoolType

logger = logging.getLogger(__name__)


class SchoolRepository:
    """Repository for school database operations."""

    @staticmethod
    async def create(db: AsyncSession, **fields: Any) -> School:
        """
        Create a new school record in PENDING state.

        Args:
            db: Database session
            **fields: Column values (name, address, city, state, country, ...)

        Returns:
            Created School instance
        """
        school = School(
            **fields,
            registration_status=RegistrationStatus.PENDING,
            is_verified=False,
        )

        db.add(school)
        await db.flush()
        await db.refresh(school)

        logger.info(f"Created school: {school.id} - {school.name}")
        return school

    @staticmethod
    async def get_by_id(db: AsyncSession, school_id: str) -> School | None:
        result = await db.execute(select(School).where(School.id == str(school_id)))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_scoped(
        db: AsyncSession,
        school_id: str,
        scope_clause: ColumnElement[bool],
    ) -> School | None:
        """Get a school only if it lies inside the caller's tenant scope."""
        result = await db.execute(select(School).where(School.id == str(school_id), scope_clause))
        return result.scalar_one_or_none()

    @staticmethod
    async def find_by_location(
        db: AsyncSession,
        name: str,
        city: str,
        state: str,
    ) -> School | None:
        """Case-insensitive match on name within the same city and state."""
        result = await db.execute(
            select(School).where(
                func.lower(School.name) == name.lower(),
                func.lower(School.city) == city.lower(),
                func.lower(School.state) == state.lower(),
            )
        )
        return result.scalars().first()

    @staticmethod
    def list_query(
        scope_clause: ColumnElement[bool],
        registration_status: RegistrationStatus | None = None,
        school_type: SchoolType | None = None,
        search: str | None = None,
    ) -> Select:
        query = select(School).where(scope_clause)

        if registration_status:
            query = query.where(School.registration_status == registration_status)
        if school_type:
            query = query.where(School.school_type == school_type)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    School.name.ilike(pattern),
                    School.city.ilike(pattern),
                    School.state.ilike(pattern),
                    School.country.ilike(pattern),
                )
            )

        return query.order_by(School.created_at.desc())

    @staticmethod
    async def has_classes_or_students(db: AsyncSession, school_id: str) -> bool:
        from edutrack.modules.classes.models import SchoolClass
        from edutrack.modules.students.models import Student

        classes = await db.scalar(
            select(func.count(SchoolClass.id)).where(SchoolClass.school_id == school_id)
        )
        students = await db.scalar(
            select(func.count(Student.id)).where(Student.school_id == school_id)
        )
        return bool(classes) or bool(students)

    @staticmethod
    async def delete(db: AsyncSession, school: School) -> None:
        await db.delete(school)
        await db.flush()
        logger.info(f"Deleted school: {school.id}")

    @staticmethod
    async def stats(db: AsyncSession, school_id: str) -> dict[str, Any]:
        """Headline counts and revenue for a school dashboard."""
        from edutrack.modules.classes.models import SchoolClass
        from edutrack.modules.orders.models import MaterialOrder, OrderStatus
        from edutrack.modules.payments.models import OrderPayment, PaymentStatus
        from edutrack.modules.students.models import Student
        from edutrack.modules.teachers.models import Teacher

        async def count(query: Select) -> int:
            return (await db.scalar(query)) or 0

        students = await count(select(func.count(Student.id)).where(Student.school_id == school_id))
        teachers = await count(select(func.count(Teacher.id)).where(Teacher.school_id == school_id))
        classes = await count(
            select(func.count(SchoolClass.id)).where(SchoolClass.school_id == school_id)
        )
        parents = await count(
            select(func.count(func.distinct(Student.parent_id))).where(
                Student.school_id == school_id
            )
        )
        pending_orders = await count(
            select(func.count(MaterialOrder.id)).where(
                MaterialOrder.school_id == school_id,
                MaterialOrder.status == OrderStatus.PENDING,
            )
        )
        revenue = await db.scalar(
            select(func.coalesce(func.sum(OrderPayment.school_amount), 0)).where(
                OrderPayment.school_id == school_id,
                OrderPayment.status == PaymentStatus.COMPLETED,
            )
        )

        return {
            "students": students,
            "teachers": teachers,
            "classes": classes,
            "parents": parents,
            "revenue": Decimal(revenue or 0),
            "pending_orders": pending_orders,
        }
