"""initial schema — journal tables read by the badge engine

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- travel_entries ---
    op.create_table(
        "travel_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("memory_type", sa.String(64), nullable=False, server_default="other"),
        sa.Column("location_name", sa.String(255), nullable=True),
        sa.Column("latitude", sa.Numeric(10, 8), nullable=True),
        sa.Column("longitude", sa.Numeric(11, 8), nullable=True),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_travel_entries_id", "travel_entries", ["id"])
    op.create_index("ix_travel_entries_user_id", "travel_entries", ["user_id"])
    op.create_index("ix_travel_entries_memory_type", "travel_entries", ["memory_type"])

    # --- entry_tags ---
    op.create_table(
        "entry_tags",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("entry_id", sa.Integer(), nullable=False),
        sa.Column("tag", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["entry_id"], ["travel_entries.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("entry_id", "tag", name="uq_entry_tags_entry_tag"),
    )
    op.create_index("ix_entry_tags_id", "entry_tags", ["id"])
    op.create_index("ix_entry_tags_entry_id", "entry_tags", ["entry_id"])
    op.create_index("ix_entry_tags_tag", "entry_tags", ["tag"])

    # --- journeys ---
    op.create_table(
        "journeys",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("destination", sa.String(255), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False, server_default="planning"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_journeys_id", "journeys", ["id"])
    op.create_index("ix_journeys_user_id", "journeys", ["user_id"])

    # --- journey_experiences ---
    op.create_table(
        "journey_experiences",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("journey_id", sa.Integer(), nullable=False),
        sa.Column("day", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("type", sa.String(32), nullable=False, server_default="other"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["journey_id"], ["journeys.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_journey_experiences_id", "journey_experiences", ["id"])
    op.create_index("ix_journey_experiences_journey_id", "journey_experiences", ["journey_id"])


def downgrade() -> None:
    op.drop_table("journey_experiences")
    op.drop_table("journeys")
    op.drop_table("entry_tags")
    op.drop_table("travel_entries")
