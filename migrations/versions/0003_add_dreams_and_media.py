"""add dreams and media_files — replay inputs for retroactive evaluation

Revision ID: 0003
Revises: 0002
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = "0003"
down_revision = "0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "dreams",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location_name", sa.String(255), nullable=True),
        sa.Column("latitude", sa.Numeric(10, 8), nullable=True),
        sa.Column("longitude", sa.Numeric(11, 8), nullable=True),
        sa.Column("dream_type", sa.String(32), nullable=False, server_default="destination"),
        sa.Column("priority", sa.String(16), nullable=False, server_default="medium"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_dreams_id", "dreams", ["id"])
    op.create_index("ix_dreams_user_id", "dreams", ["user_id"])

    op.create_table(
        "media_files",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("entry_id", sa.Integer(), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_type", sa.String(16), nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["entry_id"], ["travel_entries.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_media_files_id", "media_files", ["id"])
    op.create_index("ix_media_files_entry_id", "media_files", ["entry_id"])
    op.create_index("ix_media_files_file_type", "media_files", ["file_type"])


def downgrade() -> None:
    op.drop_table("media_files")
    op.drop_table("dreams")
