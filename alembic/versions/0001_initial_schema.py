"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 09:00:00.000000

Creates the whole EduTrack schema:
1. Enum types
2. Tenants and identities (schools, users, parents, teachers)
3. Academic structure (years, terms, grades, subjects, classes, students, lessons)
4. Scheduling (rooms, timetables, timetable slots, events)
5. Curriculum and progress tracking
6. Material shop, orders and payments
7. Notifications, attendance and report cards

Enum labels are the Python enum member names, which is what SQLAlchemy
stores for ``ENUM(PyEnum)`` columns.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


ENUMS: dict[str, tuple[str, ...]] = {
    "user_role": ("SUPER_ADMIN", "SCHOOL_ADMIN", "PRINCIPAL", "TEACHER", "PARENT"),
    "sex": ("MALE", "FEMALE", "OTHER"),
    "school_type": (
        "PRIMARY",
        "SECONDARY",
        "MONTESSORI",
        "INTERNATIONAL",
        "TECHNICAL",
        "UNIVERSITY",
        "OTHER",
    ),
    "registration_status": ("PENDING", "APPROVED", "REJECTED"),
    "approval_status": ("PENDING", "APPROVED", "REJECTED"),
    "room_type": (
        "CLASSROOM",
        "LABORATORY",
        "LIBRARY",
        "AUDITORIUM",
        "GYMNASIUM",
        "COMPUTER_LAB",
        "ART_ROOM",
        "MUSIC_ROOM",
        "CAFETERIA",
        "OFFICE",
        "STORAGE",
        "OTHER",
    ),
    "day_of_week": (
        "MONDAY",
        "TUESDAY",
        "WEDNESDAY",
        "THURSDAY",
        "FRIDAY",
        "SATURDAY",
        "SUNDAY",
    ),
    "event_type": (
        "ACADEMIC",
        "SPORTS",
        "CULTURAL",
        "MEETING",
        "EXAMINATION",
        "HOLIDAY",
        "GENERAL",
    ),
    "rsvp_status": ("ATTENDING", "NOT_ATTENDING", "MAYBE"),
    "objective_type": ("KNOWLEDGE", "SKILL", "ATTITUDE", "COMPETENCY"),
    "blooms_level": ("REMEMBER", "UNDERSTAND", "APPLY", "ANALYZE", "EVALUATE", "CREATE"),
    "progress_status": ("NOT_STARTED", "IN_PROGRESS", "COMPLETED", "MASTERED"),
    "mastery_level": ("BEGINNER", "DEVELOPING", "PROFICIENT", "ADVANCED", "EXPERT"),
    "order_status": (
        "PENDING",
        "CONFIRMED",
        "PREPARING",
        "READY_FOR_PICKUP",
        "OUT_FOR_DELIVERY",
        "DELIVERED",
        "CANCELLED",
    ),
    "delivery_method": ("SCHOOL_PICKUP", "HOME_DELIVERY"),
    "payment_status": ("PENDING", "COMPLETED", "FAILED", "REFUNDED"),
    "notification_type": (
        "GENERAL",
        "APPROVAL",
        "ATTENDANCE",
        "EVENT",
        "PAYMENT",
        "REPORT_CARD",
        "ORDER",
        "ENROLLMENT",
    ),
    "attendance_status": ("PRESENT", "ABSENT", "LATE", "EXCUSED"),
    "report_card_status": ("DRAFT", "GENERATED", "APPROVED", "PUBLISHED", "ARCHIVED"),
}

# Tables in dependency order; downgrade drops them in reverse
TABLES = (
    "schools",
    "users",
    "parents",
    "teachers",
    "academic_years",
    "terms",
    "grades",
    "subjects",
    "classes",
    "students",
    "lessons",
    "rooms",
    "timetables",
    "timetable_slots",
    "events",
    "event_rsvps",
    "curricula",
    "curriculum_subjects",
    "learning_objectives",
    "student_progress",
    "material_categories",
    "materials",
    "carts",
    "cart_items",
    "material_orders",
    "order_items",
    "order_payments",
    "school_payment_accounts",
    "notifications",
    "attendance",
    "report_cards",
    "subject_reports",
)


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _uuid() -> postgresql.UUID:
    return postgresql.UUID(as_uuid=False)


def _base_columns() -> list[sa.Column]:
    """Primary key and timestamps (from BaseModel)."""
    return [
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _fk(name: str, target: str, ondelete: str, nullable: bool = False, **kw) -> sa.Column:
    return sa.Column(
        name, _uuid(), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable, **kw
    )


def _school_fk() -> sa.Column:
    """Tenant reference (from TenantMixin)."""
    return _fk("school_id", "schools.id", "CASCADE", index=True)


def _create_table(name: str, *columns, tenant: bool = False) -> None:
    head = _base_columns() + ([_school_fk()] if tenant else [])
    op.create_table(name, *head, *columns)


def upgrade() -> None:
    bind = op.get_bind()
    for name, labels in ENUMS.items():
        postgresql.ENUM(*labels, name=name, create_type=False).create(bind, checkfirst=True)

    # ---------------------------------------------------------------
    # Tenants and identities
    # ---------------------------------------------------------------
    _create_table(
        "schools",
        sa.Column("name", sa.String(200), nullable=False, index=True),
        sa.Column("school_type", _enum("school_type"), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("country", sa.String(100), nullable=False, index=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("mission_statement", sa.Text(), nullable=True),
        sa.Column("virtual_tour_url", sa.String(500), nullable=True),
        sa.Column(
            "registration_status", _enum("registration_status"), nullable=False, index=True
        ),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verification_comments", sa.Text(), nullable=True),
    )

    _create_table(
        "users",
        _fk("school_id", "schools.id", "SET NULL", nullable=True, index=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("role", _enum("user_role"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("must_change_password", sa.Boolean(), nullable=False),
    )

    # Profiles share the user's id
    op.create_table(
        "parents",
        sa.Column("id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        *_base_columns()[1:],
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("occupation", sa.String(100), nullable=True),
    )

    op.create_table(
        "teachers",
        sa.Column("id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        *_base_columns()[1:],
        _school_fk(),
        sa.Column("blood_type", sa.String(5), nullable=True),
        sa.Column("sex", _enum("sex"), nullable=True),
        sa.Column("birthday", sa.Date(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("qualifications", sa.Text(), nullable=True),
        sa.Column("approval_status", _enum("approval_status"), nullable=False),
        sa.Column("approval_comments", sa.Text(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
    )

    # ---------------------------------------------------------------
    # Academic structure
    # ---------------------------------------------------------------
    _create_table(
        "academic_years",
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("is_current", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("school_id", "name", name="uq_academic_years_school_name"),
        tenant=True,
    )

    _create_table(
        "terms",
        _fk("academic_year_id", "academic_years.id", "RESTRICT", index=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        tenant=True,
    )

    _create_table(
        "grades",
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.UniqueConstraint("school_id", "level", name="uq_grades_school_level"),
        tenant=True,
    )

    _create_table(
        "subjects",
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("code", sa.String(20), nullable=True),
        sa.UniqueConstraint("school_id", "name", name="uq_subjects_school_name"),
        tenant=True,
    )

    _create_table(
        "classes",
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        _fk("grade_id", "grades.id", "RESTRICT", index=True),
        _fk("supervisor_id", "teachers.id", "SET NULL", nullable=True, index=True),
        sa.UniqueConstraint("school_id", "name", name="uq_classes_school_name"),
        sa.CheckConstraint("capacity >= 1", name="ck_classes_capacity_positive"),
        tenant=True,
    )

    _create_table(
        "students",
        sa.Column("registration_number", sa.String(50), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("blood_type", sa.String(5), nullable=True),
        sa.Column("sex", _enum("sex"), nullable=True),
        sa.Column("birthday", sa.Date(), nullable=True),
        _fk("parent_id", "parents.id", "RESTRICT", index=True),
        _fk("class_id", "classes.id", "SET NULL", nullable=True, index=True),
        _fk("grade_id", "grades.id", "SET NULL", nullable=True, index=True),
        sa.UniqueConstraint(
            "school_id", "registration_number", name="uq_students_school_registration_number"
        ),
        tenant=True,
    )

    _create_table(
        "lessons",
        sa.Column("name", sa.String(200), nullable=False),
        _fk("subject_id", "subjects.id", "RESTRICT", index=True),
        _fk("class_id", "classes.id", "RESTRICT", index=True),
        _fk("teacher_id", "teachers.id", "RESTRICT", index=True),
        tenant=True,
    )

    # ---------------------------------------------------------------
    # Scheduling
    # ---------------------------------------------------------------
    _create_table(
        "rooms",
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("code", sa.String(20), nullable=True),
        sa.Column("room_type", _enum("room_type"), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("floor", sa.Integer(), nullable=True),
        sa.Column("building", sa.String(100), nullable=True),
        sa.Column("facilities", postgresql.ARRAY(sa.String(100)), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("school_id", "code", name="uq_rooms_school_code"),
        sa.CheckConstraint("capacity >= 1", name="ck_rooms_capacity_positive"),
        tenant=True,
    )

    _create_table(
        "timetables",
        sa.Column("name", sa.String(200), nullable=False),
        _fk("academic_year_id", "academic_years.id", "RESTRICT", index=True),
        _fk("term_id", "terms.id", "RESTRICT", nullable=True, index=True),
        sa.Column("effective_from", sa.Date(), nullable=False),
        sa.Column("effective_to", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        tenant=True,
    )

    _create_table(
        "timetable_slots",
        _fk("timetable_id", "timetables.id", "RESTRICT", index=True),
        sa.Column("day", _enum("day_of_week"), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("period", sa.Integer(), nullable=False),
        _fk("lesson_id", "lessons.id", "RESTRICT", index=True),
        _fk("room_id", "rooms.id", "RESTRICT", nullable=True, index=True),
        _fk("teacher_id", "teachers.id", "RESTRICT", index=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
    )

    _create_table(
        "events",
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("location", sa.String(200), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("event_type", _enum("event_type"), nullable=False),
        sa.Column("rsvp_required", sa.Boolean(), nullable=False),
        _fk("class_id", "classes.id", "CASCADE", nullable=True, index=True),
        _fk("room_id", "rooms.id", "RESTRICT", nullable=True, index=True),
        _fk("created_by_id", "users.id", "CASCADE"),
        tenant=True,
    )

    _create_table(
        "event_rsvps",
        _fk("event_id", "events.id", "CASCADE", index=True),
        _fk("user_id", "users.id", "CASCADE"),
        sa.Column("response", _enum("rsvp_status"), nullable=False),
        sa.UniqueConstraint("event_id", "user_id", name="uq_event_rsvps_event_user"),
    )

    # ---------------------------------------------------------------
    # Curriculum
    # ---------------------------------------------------------------
    _create_table(
        "curricula",
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("version", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.UniqueConstraint(
            "school_id", "name", "version", name="uq_curricula_school_name_version"
        ),
        tenant=True,
    )

    _create_table(
        "curriculum_subjects",
        _fk("curriculum_id", "curricula.id", "CASCADE", index=True),
        _fk("subject_id", "subjects.id", "RESTRICT"),
        _fk("grade_id", "grades.id", "RESTRICT"),
        sa.Column("hours_per_week", sa.Integer(), nullable=True),
        sa.Column("is_core", sa.Boolean(), nullable=False),
        sa.Column("prerequisites", postgresql.ARRAY(sa.String(36)), nullable=False),
        sa.UniqueConstraint(
            "curriculum_id", "subject_id", "grade_id", name="uq_curriculum_subjects_entry"
        ),
    )

    _create_table(
        "learning_objectives",
        _fk("curriculum_subject_id", "curriculum_subjects.id", "RESTRICT", index=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("objective_type", _enum("objective_type"), nullable=False),
        sa.Column("blooms_level", _enum("blooms_level"), nullable=False),
    )

    _create_table(
        "student_progress",
        _fk("student_id", "students.id", "RESTRICT", index=True),
        _fk("objective_id", "learning_objectives.id", "CASCADE"),
        sa.Column("status", _enum("progress_status"), nullable=False),
        sa.Column("mastery_level", _enum("mastery_level"), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("assessment_score", sa.Numeric(5, 2), nullable=True),
        sa.Column("assessment_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("student_id", "objective_id", name="uq_student_progress_objective"),
    )

    # ---------------------------------------------------------------
    # Material shop, orders and payments
    # ---------------------------------------------------------------
    _create_table(
        "material_categories",
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.UniqueConstraint("school_id", "name", name="uq_material_categories_school_name"),
        tenant=True,
    )

    _create_table(
        "materials",
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("stock_quantity", sa.Integer(), nullable=False),
        sa.Column("min_order_qty", sa.Integer(), nullable=False),
        sa.Column("max_order_qty", sa.Integer(), nullable=True),
        _fk("category_id", "material_categories.id", "RESTRICT", index=True),
        sa.Column("brand", sa.String(100), nullable=True),
        sa.Column("model", sa.String(100), nullable=True),
        sa.Column("specifications", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("image_urls", postgresql.ARRAY(sa.String(500)), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.CheckConstraint("price > 0", name="ck_materials_price_positive"),
        sa.CheckConstraint("stock_quantity >= 0", name="ck_materials_stock_non_negative"),
        tenant=True,
    )

    _create_table(
        "carts",
        _fk("parent_id", "parents.id", "CASCADE"),
        sa.UniqueConstraint("parent_id", "school_id", name="uq_carts_parent_school"),
        tenant=True,
    )

    _create_table(
        "cart_items",
        _fk("cart_id", "carts.id", "CASCADE", index=True),
        _fk("material_id", "materials.id", "CASCADE"),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.UniqueConstraint("cart_id", "material_id", name="uq_cart_items_cart_material"),
    )

    _create_table(
        "material_orders",
        sa.Column("order_number", sa.String(40), nullable=False, unique=True, index=True),
        _fk("parent_id", "parents.id", "RESTRICT", index=True),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("processing_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("gateway_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("school_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", _enum("order_status"), nullable=False, index=True),
        sa.Column("delivery_method", _enum("delivery_method"), nullable=False),
        sa.Column("delivery_address", sa.Text(), nullable=True),
        sa.Column("delivery_notes", sa.Text(), nullable=True),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("prepared_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        tenant=True,
    )

    _create_table(
        "order_items",
        _fk("order_id", "material_orders.id", "CASCADE", index=True),
        _fk("material_id", "materials.id", "RESTRICT", index=True),
        sa.Column("material_name", sa.String(200), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
    )

    _create_table(
        "order_payments",
        _fk("order_id", "material_orders.id", "CASCADE", index=True),
        sa.Column("reference", sa.String(100), nullable=False, unique=True, index=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("school_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", _enum("payment_status"), nullable=False, index=True),
        sa.Column("transaction_id", sa.String(100), nullable=True),
        sa.Column("authorization_code", sa.String(100), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("gateway_response", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("transfer_code", sa.String(100), nullable=True, index=True),
        sa.Column("transfer_reference", sa.String(100), nullable=True),
        sa.Column("transfer_status", sa.String(20), nullable=True),
        sa.Column("transferred_at", sa.DateTime(timezone=True), nullable=True),
        tenant=True,
    )

    _create_table(
        "school_payment_accounts",
        _fk("school_id", "schools.id", "CASCADE", unique=True),
        sa.Column("account_name", sa.String(200), nullable=False),
        sa.Column("account_number", sa.String(30), nullable=False),
        sa.Column("bank_code", sa.String(20), nullable=False),
        sa.Column("bank_name", sa.String(200), nullable=True),
        sa.Column("subaccount_code", sa.String(100), nullable=True),
        sa.Column("recipient_code", sa.String(100), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )

    # ---------------------------------------------------------------
    # Notifications, attendance and report cards
    # ---------------------------------------------------------------
    _create_table(
        "notifications",
        _fk("user_id", "users.id", "CASCADE", index=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("type", _enum("notification_type"), nullable=False),
        sa.Column("data", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, index=True),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
    )

    _create_table(
        "attendance",
        _fk("student_id", "students.id", "RESTRICT", index=True),
        _fk("lesson_id", "lessons.id", "RESTRICT", index=True),
        sa.Column("date", sa.Date(), nullable=False, index=True),
        sa.Column("status", _enum("attendance_status"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _fk("recorded_by_id", "users.id", "SET NULL", nullable=True),
        sa.UniqueConstraint(
            "student_id", "lesson_id", "date", name="uq_attendance_student_lesson_date"
        ),
        tenant=True,
    )

    _create_table(
        "report_cards",
        sa.Column("title", sa.String(200), nullable=False),
        _fk("student_id", "students.id", "RESTRICT", index=True),
        _fk("academic_year_id", "academic_years.id", "RESTRICT", index=True),
        _fk("term_id", "terms.id", "RESTRICT", nullable=True),
        sa.Column("status", _enum("report_card_status"), nullable=False, index=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("teacher_comments", sa.Text(), nullable=True),
        sa.Column("principal_comments", sa.Text(), nullable=True),
        sa.Column("overall_percentage", sa.Numeric(5, 2), nullable=True),
        sa.Column("overall_grade", sa.String(2), nullable=True),
        sa.Column("gpa", sa.Numeric(3, 2), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        _fk("approved_by_id", "users.id", "SET NULL", nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        tenant=True,
    )

    _create_table(
        "subject_reports",
        _fk("report_card_id", "report_cards.id", "CASCADE", index=True),
        _fk("subject_id", "subjects.id", "RESTRICT"),
        sa.Column("total_marks", sa.Numeric(6, 2), nullable=False),
        sa.Column("obtained_marks", sa.Numeric(6, 2), nullable=False),
        sa.Column("percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("grade", sa.String(2), nullable=False),
        sa.Column("grade_point", sa.Numeric(3, 2), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.UniqueConstraint("report_card_id", "subject_id", name="uq_subject_reports_card_subject"),
    )


def downgrade() -> None:
    for table in reversed(TABLES):
        op.drop_table(table)

    bind = op.get_bind()
    for name in reversed(ENUMS):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
