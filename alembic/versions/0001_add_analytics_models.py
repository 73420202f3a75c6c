"""add analytics models

Revision ID: 0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "medicine",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("price", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("stock_quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("low_stock_threshold", sa.Integer(), nullable=False, server_default=sa.text("10")),
        sa.Column("manufacturer_id", sa.String(length=64), nullable=True),
        sa.Column("retailer_id", sa.String(length=64), nullable=True),
    )

    op.create_table(
        "medicine_demand",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("medicine_id", sa.Integer(), sa.ForeignKey("medicine.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False, server_default=sa.text("0")),
    )
    op.create_index("ix_medicine_demand_medicine_id", "medicine_demand", ["medicine_id"])
    op.create_index("ix_medicine_demand_date", "medicine_demand", ["date"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("consumer_id", sa.String(length=64), nullable=False),
        sa.Column("retailer_id", sa.String(length=64), nullable=False),
        sa.Column("total_amount", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("shipping_state", sa.String(length=100), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column(
            "order_date",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "order_id",
            sa.Integer(),
            sa.ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("medicine_id", sa.Integer(), sa.ForeignKey("medicine.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
    )

    op.create_table(
        "analytics_reports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("report_type", sa.String(length=20), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("predictions", sa.JSON(), nullable=True),
        sa.Column("recommendations", sa.JSON(), nullable=False),
        sa.Column("related_entities", sa.JSON(), nullable=False),
        sa.Column("model_version", sa.String(length=20), nullable=True),
        sa.Column(
            "last_updated",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint("year", "month", "report_type", name="uq_analytics_reports_year_month_type"),
    )
    op.create_index("ix_analytics_reports_id", "analytics_reports", ["id"])

    op.create_table(
        "forecast_models",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("scope", sa.String(length=64), nullable=False, unique=True),
        sa.Column("observations", sa.JSON(), nullable=False),
        sa.Column("mean", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("stddev", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("trained", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )


def downgrade() -> None:
    op.drop_table("forecast_models")
    op.drop_index("ix_analytics_reports_id", table_name="analytics_reports")
    op.drop_table("analytics_reports")
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_index("ix_medicine_demand_date", table_name="medicine_demand")
    op.drop_index("ix_medicine_demand_medicine_id", table_name="medicine_demand")
    op.drop_table("medicine_demand")
    op.drop_table("medicine")
