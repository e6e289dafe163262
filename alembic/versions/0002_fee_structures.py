"""fee structures

Revision ID: 0002_fee_structures
Revises: 0001_initial_schema
Create Date: 2026-10-17 12:00:00.000000

Adds fee billing: fee structures per academic year, their breakdown items and
per-student overrides.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0002_fee_structures"
down_revision: str | Sequence[str] | None = "0001_initial_schema"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


ENUMS: dict[str, tuple[str, ...]] = {
    "fee_type": (
        "TUITION",
        "EXAMINATION",
        "TRANSPORT",
        "FEEDING",
        "UNIFORM",
        "BOOKS",
        "OTHER",
    ),
    "fee_frequency": ("ONE_TIME", "MONTHLY", "TERMLY", "YEARLY"),
}

TABLES = ("fee_structures", "fee_breakdown_items", "fee_overrides")


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _uuid() -> postgresql.UUID:
    return postgresql.UUID(as_uuid=False)


def _fk(name: str, target: str, ondelete: str, **kw) -> sa.Column:
    return sa.Column(name, _uuid(), sa.ForeignKey(target, ondelete=ondelete), nullable=False, **kw)


def _base_columns(tenant: bool = False) -> list[sa.Column]:
    columns = [
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
    if tenant:
        columns.append(_fk("school_id", "schools.id", "CASCADE", index=True))
    return columns


def upgrade() -> None:
    bind = op.get_bind()
    for name, labels in ENUMS.items():
        postgresql.ENUM(*labels, name=name, create_type=False).create(bind, checkfirst=True)

    op.create_table(
        "fee_structures",
        *_base_columns(tenant=True),
        _fk("academic_year_id", "academic_years.id", "RESTRICT", index=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("fee_type", _enum("fee_type"), nullable=False, index=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("grace_period_days", sa.Integer(), nullable=True),
        sa.Column("late_fee", sa.Numeric(12, 2), nullable=True),
    )

    op.create_table(
        "fee_breakdown_items",
        *_base_columns(tenant=True),
        _fk("fee_structure_id", "fee_structures.id", "CASCADE", index=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("is_mandatory", sa.Boolean(), nullable=False),
        sa.Column("is_recurring", sa.Boolean(), nullable=False),
        sa.Column("frequency", _enum("fee_frequency"), nullable=True),
    )

    op.create_table(
        "fee_overrides",
        *_base_columns(),
        _fk("fee_item_id", "fee_breakdown_items.id", "CASCADE", index=True),
        _fk("student_id", "students.id", "CASCADE", index=True),
        sa.Column("override_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("is_exempt", sa.Boolean(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.UniqueConstraint("fee_item_id", "student_id", name="uq_fee_overrides_item_student"),
    )


def downgrade() -> None:
    for table in reversed(TABLES):
        op.drop_table(table)

    bind = op.get_bind()
    for name in reversed(ENUMS):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
