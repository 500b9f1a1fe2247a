"""Create catalog, staff and session tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000+00:00
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _aggregate_columns() -> list[sa.Column]:  # type: ignore[type-arg]
    return [
        sa.Column("rating", sa.Float(), nullable=False),
        sa.Column("review_count", sa.Integer(), nullable=False),
    ]


def _aggregate_checks(table: str) -> list[sa.CheckConstraint]:
    return [
        sa.CheckConstraint("review_count >= 0", name=op.f(f"ck_{table}_review_count_non_negative")),
        sa.CheckConstraint("rating >= 0", name=op.f(f"ck_{table}_rating_non_negative")),
    ]


def _created_at() -> sa.Column:  # type: ignore[type-arg]
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )


def upgrade() -> None:
    op.create_table(
        "businesses",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        *_aggregate_columns(),
        sa.Column("admin_id", sa.String(64), nullable=True),
        sa.Column("subscription_id", sa.String(64), nullable=True),
        _created_at(),
        *_aggregate_checks("businesses"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_businesses")),
    )

    op.create_table(
        "services",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("business_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        *_aggregate_columns(),
        _created_at(),
        *_aggregate_checks("services"),
        sa.ForeignKeyConstraint(
            ["business_id"], ["businesses.id"], name=op.f("fk_services_business_id_businesses")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_services")),
    )
    op.create_index(op.f("ix_services_business_id"), "services", ["business_id"])

    op.create_table(
        "items",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("business_id", sa.String(36), nullable=False),
        sa.Column("service_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("category", sa.String(60), nullable=False),
        *_aggregate_columns(),
        _created_at(),
        *_aggregate_checks("items"),
        sa.CheckConstraint("price >= 0", name=op.f("ck_items_price_non_negative")),
        sa.ForeignKeyConstraint(
            ["business_id"], ["businesses.id"], name=op.f("fk_items_business_id_businesses")
        ),
        sa.ForeignKeyConstraint(
            ["service_id"], ["services.id"], name=op.f("fk_items_service_id_services")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_items")),
    )
    op.create_index(op.f("ix_items_business_id"), "items", ["business_id"])
    op.create_index(op.f("ix_items_service_id"), "items", ["service_id"])

    op.create_table(
        "staff",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("business_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("pin", sa.String(12), nullable=False),
        *_aggregate_columns(),
        _created_at(),
        *_aggregate_checks("staff"),
        sa.ForeignKeyConstraint(
            ["business_id"], ["businesses.id"], name=op.f("fk_staff_business_id_businesses")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_staff")),
        sa.UniqueConstraint("pin", name=op.f("uq_staff_pin")),
    )
    op.create_index(op.f("ix_staff_business_id"), "staff", ["business_id"])

    op.create_table(
        "sessions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("staff_id", sa.String(36), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("rated", sa.Boolean(), nullable=False),
        sa.Column("ratings", sa.JSON(none_as_null=True), nullable=True),
        sa.Column("rated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.CheckConstraint("total_amount > 0", name=op.f("ck_sessions_total_amount_positive")),
        sa.ForeignKeyConstraint(["staff_id"], ["staff.id"], name=op.f("fk_sessions_staff_id_staff")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_sessions")),
    )
    op.create_index(op.f("ix_sessions_staff_id"), "sessions", ["staff_id"])


def downgrade() -> None:
    op.drop_index(op.f("ix_sessions_staff_id"), table_name="sessions")
    op.drop_table("sessions")
    op.drop_index(op.f("ix_staff_business_id"), table_name="staff")
    op.drop_table("staff")
    op.drop_index(op.f("ix_items_service_id"), table_name="items")
    op.drop_index(op.f("ix_items_business_id"), table_name="items")
    op.drop_table("items")
    op.drop_index(op.f("ix_services_business_id"), table_name="services")
    op.drop_table("services")
    op.drop_table("businesses")
