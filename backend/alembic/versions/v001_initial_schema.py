"""Initial schema — all tables.

Revision ID: v001
Revises:
Create Date: 2026-10-01 00:00:00.000000

Creates every gym portal table.  Runs against both SQLite (dev) and
PostgreSQL (production) without changes.

To apply:
    cd backend/
    alembic upgrade head
"""
from __future__ import annotations
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "v001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # ── users ───────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(256), nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("provider", sa.String(16), nullable=False, server_default="email"),
        sa.Column("provider_id", sa.String(256), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column("role", sa.String(16), nullable=False, server_default="user"),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("height_cm", sa.Float(), nullable=True),
        sa.Column("goal", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("provider", "provider_id", name="uq_users_provider"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ── health_logs ─────────────────────────────────────────────────────────
    op.create_table(
        "health_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("log_date", sa.Date(), nullable=False),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("body_fat_percentage", sa.Float(), nullable=True),
        sa.Column("body_temperature", sa.Float(), nullable=True),
        sa.Column("sleep_hours", sa.Float(), nullable=True),
        sa.Column("exercise_minutes", sa.Integer(), nullable=True),
        sa.Column("condition_rating", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("condition_note", sa.Text(), nullable=True),
        sa.Column("meal_photo_url", sa.Text(), nullable=True),
        sa.Column("meal_analysis_json", sa.Text(), nullable=True),
        sa.Column("meal_calories", sa.Float(), nullable=True),
        sa.Column("meal_protein", sa.Float(), nullable=True),
        sa.Column("meal_carbs", sa.Float(), nullable=True),
        sa.Column("meal_fat", sa.Float(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_health_logs_user_id", "health_logs", ["user_id"])
    op.create_index("ix_health_logs_log_date", "health_logs", ["log_date"])

    # ── meals / meal_photos ─────────────────────────────────────────────────
    op.create_table(
        "meals",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "health_log_id",
            sa.Integer(),
            sa.ForeignKey("health_logs.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("meal_type", sa.String(16), nullable=False),
        sa.Column("calories", sa.Float(), nullable=False, server_default="0"),
        sa.Column("protein", sa.Float(), nullable=False, server_default="0"),
        sa.Column("carbs", sa.Float(), nullable=False, server_default="0"),
        sa.Column("fat", sa.Float(), nullable=False, server_default="0"),
        sa.Column("ai_analysis_text", sa.Text(), nullable=True),
        sa.Column("ai_confidence", sa.Float(), nullable=True),
        sa.Column("input_method", sa.String(16), nullable=False, server_default="manual"),
    )
    op.create_index("ix_meals_health_log_id", "meals", ["health_log_id"])

    op.create_table(
        "meal_photos",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "meal_id",
            sa.Integer(),
            sa.ForeignKey("meals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("photo_url", sa.Text(), nullable=False),
        sa.Column("photo_order", sa.Integer(), nullable=False, server_default="1"),
    )
    op.create_index("ix_meal_photos_meal_id", "meal_photos", ["meal_id"])

    # ── advices ─────────────────────────────────────────────────────────────
    op.create_table(
        "advices",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("log_date", sa.Date(), nullable=True),
        sa.Column("advice_type", sa.String(32), nullable=False, server_default="general"),
        sa.Column("title", sa.String(256), nullable=False, server_default=""),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("advice_source", sa.String(16), nullable=False, server_default="staff"),
        sa.Column("ai_analysis_json", sa.Text(), nullable=True),
        sa.Column("confidence_score", sa.Float(), nullable=True),
        sa.Column("staff_name", sa.String(256), nullable=False, server_default=""),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_advices_user_id", "advices", ["user_id"])
    op.create_index("ix_advices_log_date", "advices", ["log_date"])

    # ── inquiries ───────────────────────────────────────────────────────────
    op.create_table(
        "inquiries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("email", sa.String(256), nullable=False),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("subject", sa.String(512), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("admin_reply", sa.Text(), nullable=True),
        *_timestamps(),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_inquiries_user_id", "inquiries", ["user_id"])

    # ── opinion_box ─────────────────────────────────────────────────────────
    op.create_table(
        "opinion_box",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("answered_by", sa.String(256), nullable=True),
        sa.Column("answered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_opinion_box_user_id", "opinion_box", ["user_id"])

    # ── announcements ───────────────────────────────────────────────────────
    op.create_table(
        "announcements",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    # ── blogs ───────────────────────────────────────────────────────────────
    op.create_table(
        "blogs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column(
            "author_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("author_name", sa.String(256), nullable=False, server_default=""),
        sa.Column("featured_image", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="draft"),
        sa.Column("slug", sa.String(128), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_blogs_slug", "blogs", ["slug"], unique=True)

    # ── staff_comments ──────────────────────────────────────────────────────
    op.create_table(
        "staff_comments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("staff_name", sa.String(256), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_staff_comments_user_id", "staff_comments", ["user_id"])

    # ── site_settings ───────────────────────────────────────────────────────
    op.create_table(
        "site_settings",
        sa.Column("setting_key", sa.String(128), primary_key=True),
        sa.Column("setting_value", sa.Text(), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("site_settings")
    op.drop_index("ix_staff_comments_user_id", table_name="staff_comments")
    op.drop_table("staff_comments")
    op.drop_index("ix_blogs_slug", table_name="blogs")
    op.drop_table("blogs")
    op.drop_table("announcements")
    op.drop_index("ix_opinion_box_user_id", table_name="opinion_box")
    op.drop_table("opinion_box")
    op.drop_index("ix_inquiries_user_id", table_name="inquiries")
    op.drop_table("inquiries")
    op.drop_index("ix_advices_log_date", table_name="advices")
    op.drop_index("ix_advices_user_id", table_name="advices")
    op.drop_table("advices")
    op.drop_index("ix_meal_photos_meal_id", table_name="meal_photos")
    op.drop_table("meal_photos")
    op.drop_index("ix_meals_health_log_id", table_name="meals")
    op.drop_table("meals")
    op.drop_index("ix_health_logs_log_date", table_name="health_logs")
    op.drop_index("ix_health_logs_user_id", table_name="health_logs")
    op.drop_table("health_logs")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
