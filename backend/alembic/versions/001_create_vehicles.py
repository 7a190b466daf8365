"""Create vehicles table.

Revision ID: 001_create_vehicles
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_create_vehicles"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "vehicles",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("vin", sa.String(17), nullable=False, unique=True),
        sa.Column("manufacturer_name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("horse_power", sa.Integer, nullable=False),
        sa.Column("model_name", sa.String(255), nullable=False),
        sa.Column("model_year", sa.Integer, nullable=False),
        sa.Column("purchase_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("fuel_type", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("length(vin) = 17", name="ck_vehicles_vin_length"),
        sa.CheckConstraint("horse_power BETWEEN 1 AND 2000", name="ck_vehicles_horse_power_range"),
        sa.CheckConstraint("model_year >= 1886", name="ck_vehicles_model_year_min"),
        sa.CheckConstraint("purchase_price >= 0", name="ck_vehicles_purchase_price_non_negative"),
    )
    op.create_index(
        "uq_vehicles_vin_upper", "vehicles", [sa.text("upper(vin)")], unique=True,
    )
    op.create_index(
        "ix_vehicles_listing_order", "vehicles",
        ["manufacturer_name", sa.text("model_year DESC"), "vin"],
    )


def downgrade() -> None:
    op.drop_index("ix_vehicles_listing_order", table_name="vehicles")
    op.drop_index("uq_vehicles_vin_upper", table_name="vehicles")
    op.drop_table("vehicles")
