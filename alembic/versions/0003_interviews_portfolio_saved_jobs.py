"""interviews, portfolio items and saved jobs

Revision ID: 0003_interviews_portfolio
Revises: 0002_audit_references
Create Date: 2026-10-18 15:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0003_interviews_portfolio"
down_revision = "0002_audit_references"
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "interviews",
        *_timestamps(),
        sa.Column(
            "application_id", sa.Integer(), sa.ForeignKey("applications.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("applicant_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("interview_type", sa.String(length=32), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("meeting_link", sa.String(length=500), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.CheckConstraint("duration_minutes > 0", name="ck_interview_duration_positive"),
    )
    op.create_index("ix_interviews_application_id", "interviews", ["application_id"])
    op.create_index("ix_interviews_company_scheduled", "interviews", ["company_id", "scheduled_at"])
    op.create_index("ix_interviews_applicant_scheduled", "interviews", ["applicant_id", "scheduled_at"])

    op.create_table(
        "portfolio_items",
        *_timestamps(),
        sa.Column("freelancer_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("slug", sa.String(length=140), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("cover_image", sa.String(length=500), nullable=False),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("video_url", sa.String(length=500), nullable=True),
        sa.Column("link", sa.String(length=500), nullable=True),
        sa.Column("completion_date", sa.Date(), nullable=True),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False),
        sa.UniqueConstraint("slug"),
        sa.CheckConstraint("views >= 0", name="ck_portfolio_views_non_negative"),
    )
    op.create_index("ix_portfolio_items_freelancer_id", "portfolio_items", ["freelancer_id"])

    op.create_table(
        "portfolio_likes",
        *_timestamps(),
        sa.Column(
            "item_id", sa.Integer(), sa.ForeignKey("portfolio_items.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("item_id", "user_id", name="uq_portfolio_likes_item_user"),
    )
    op.create_index("ix_portfolio_likes_user_id", "portfolio_likes", ["user_id"])

    op.create_table(
        "saved_jobs",
        *_timestamps(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("user_id", "job_id", name="uq_saved_jobs_user_job"),
    )
    op.create_index("ix_saved_jobs_user_id", "saved_jobs", ["user_id"])


def downgrade() -> None:
    for table in ("saved_jobs", "portfolio_likes", "portfolio_items", "interviews"):
        op.drop_table(table)
