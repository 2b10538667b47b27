"""create catalog and parts tables

Revision ID: 5c0e2a91d7b4
Revises:
Create Date: 2026-10-12 09:14:22.481930

Initial schema: parts (geometry store) plus the four catalog tables the
pricing engine reads. Skips any table that already exists so databases
bootstrapped by create_all() upgrade cleanly.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c0e2a91d7b4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_exists(table_name):
    """Check if a table exists."""
    bind = op.get_bind()
    insp = sa.inspect(bind)
    return table_name in insp.get_table_names()


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    if not _table_exists("parts"):
        op.create_table(
            "parts",
            sa.Column("id", sa.String(), primary_key=True),
            sa.Column("file_name", sa.String(), nullable=True),
            sa.Column("file_url", sa.String(), nullable=False),
            sa.Column("file_ext", sa.String(), nullable=True),
            sa.Column("size_bytes", sa.Integer(), nullable=True),
            sa.Column("volume_mm3", sa.Float(), nullable=True),
            sa.Column("surface_area_mm2", sa.Float(), nullable=True),
            sa.Column("bbox", sa.JSON(), nullable=True),
            sa.Column("status", sa.String(), nullable=True),
            *_timestamps(),
        )

    if not _table_exists("materials"):
        op.create_table(
            "materials",
            sa.Column("id", sa.String(), primary_key=True),
            sa.Column("name", sa.String(), nullable=False, unique=True),
            sa.Column("density_kg_m3", sa.Float(), nullable=False),
            sa.Column("cost_per_kg", sa.Float(), nullable=False),
            sa.Column("machinability_factor", sa.Float(), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False),
            sa.Column("meta", sa.JSON(), nullable=True),
            *_timestamps(),
        )

    if not _table_exists("finishes"):
        op.create_table(
            "finishes",
            sa.Column("id", sa.String(), primary_key=True),
            sa.Column("name", sa.String(), nullable=False, unique=True),
            sa.Column("type", sa.String(), nullable=True),
            sa.Column("cost_per_m2", sa.Float(), nullable=False),
            sa.Column("setup_fee", sa.Float(), nullable=False),
            sa.Column("lead_time_days", sa.Integer(), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False),
            sa.Column("meta", sa.JSON(), nullable=True),
            *_timestamps(),
        )

    if not _table_exists("tolerances"):
        op.create_table(
            "tolerances",
            sa.Column("id", sa.String(), primary_key=True),
            sa.Column("name", sa.String(), nullable=False, unique=True),
            sa.Column("tol_min_mm", sa.Float(), nullable=True),
            sa.Column("tol_max_mm", sa.Float(), nullable=True),
            sa.Column("cost_multiplier", sa.Float(), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False),
            sa.Column("meta", sa.JSON(), nullable=True),
            *_timestamps(),
        )

    if not _table_exists("rate_cards"):
        op.create_table(
            "rate_cards",
            sa.Column("id", sa.String(), primary_key=True),
            sa.Column("region", sa.String(), nullable=False, unique=True),
            sa.Column("currency", sa.String(), nullable=False),
            sa.Column("three_axis_rate_per_min", sa.Float(), nullable=True),
            sa.Column("five_axis_rate_per_min", sa.Float(), nullable=True),
            sa.Column("turning_rate_per_min", sa.Float(), nullable=True),
            sa.Column("machine_setup_fee", sa.Float(), nullable=False),
            sa.Column("tax_rate", sa.Float(), nullable=False),
            sa.Column("shipping_flat", sa.Float(), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False),
            sa.Column("meta", sa.JSON(), nullable=True),
            *_timestamps(),
        )


def downgrade() -> None:
    for table in ("rate_cards", "tolerances", "finishes", "materials", "parts"):
        if _table_exists(table):
            op.drop_table(table)
