"""add badges, user_badges and badge_progress

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

Unique (user_id, badge_id) on user_badges is the at-most-once award guard.
Unique (user_id, badge_id) on badge_progress backs the progress upsert.
"""
from alembic import op
import sqlalchemy as sa

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "badges",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("icon_url", sa.String(512), nullable=True),
        sa.Column("badge_type", sa.String(32), nullable=False, server_default="achievement"),
        sa.Column("criteria_type", sa.String(32), nullable=False),
        sa.Column("criteria_payload", sa.Text(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_badges_id", "badges", ["id"])

    op.create_table(
        "user_badges",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column(
            "badge_id", sa.Integer(),
            sa.ForeignKey("badges.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("progress_snapshot", sa.Text(), nullable=True),
        sa.Column(
            "awarded_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_user_badges_id", "user_badges", ["id"])
    op.create_index("ix_user_badges_user_id", "user_badges", ["user_id"])
    op.create_index("ix_user_badges_badge_id", "user_badges", ["badge_id"])
    op.create_unique_constraint(
        "uq_user_badges_user_badge",
        "user_badges",
        ["user_id", "badge_id"],
    )

    op.create_table(
        "badge_progress",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column(
            "badge_id", sa.Integer(),
            sa.ForeignKey("badges.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("current_value", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("progress_payload", sa.Text(), nullable=True),
        sa.Column(
            "last_updated",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_badge_progress_id", "badge_progress", ["id"])
    op.create_index("ix_badge_progress_user_id", "badge_progress", ["user_id"])
    op.create_index("ix_badge_progress_badge_id", "badge_progress", ["badge_id"])
    op.create_unique_constraint(
        "uq_badge_progress_user_badge",
        "badge_progress",
        ["user_id", "badge_id"],
    )


def downgrade() -> None:
    op.drop_constraint("uq_badge_progress_user_badge", "badge_progress", type_="unique")
    op.drop_table("badge_progress")
    op.drop_constraint("uq_user_badges_user_badge", "user_badges", type_="unique")
    op.drop_table("user_badges")
    op.drop_table("badges")
