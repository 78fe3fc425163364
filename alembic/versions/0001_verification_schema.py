"""Verification pipeline schema

Revision ID: 0001_verification_schema
Revises: None
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_verification_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "educator_profiles",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=False),
        sa.Column("phone", sa.String(40)),
        sa.Column("profession_type", sa.String(50), nullable=False),
        sa.Column("verification_status", sa.String(40), nullable=False),
        sa.Column("verification_badge", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("profile_visible", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("admin_notes", sa.Text),
        sa.Column("interview_scheduled_date", sa.DateTime),
        sa.Column("diploma_url", sa.String(512)),
        sa.Column("diploma_verification_status", sa.String(20)),
        sa.Column("diploma_rejected_reason", sa.Text),
        sa.Column("diploma_submitted_at", sa.DateTime),
        sa.Column("diploma_verified_at", sa.DateTime),
        sa.Column("diploma_number", sa.String(64)),
        sa.Column("diploma_delivery_date", sa.String(64)),
        sa.Column("region", sa.String(80)),
        sa.Column("diploma_ocr_text", sa.Text),
        sa.Column("diploma_ocr_confidence", sa.Float),
        sa.Column("diploma_ocr_analysis", sa.Text),
        sa.Column("dreets_verification_sent_at", sa.DateTime),
        sa.Column("dreets_verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("dreets_response_date", sa.DateTime),
        *_timestamps(),
    )
    op.create_index("ix_educator_profiles_verification_status", "educator_profiles", ["verification_status"])

    op.create_table(
        "family_profiles",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=False),
        sa.Column("phone", sa.String(40)),
        sa.Column("location", sa.String(200)),
        *_timestamps(),
    )

    op.create_table(
        "verification_documents",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("educator_id", sa.Integer, sa.ForeignKey("educator_profiles.id"), nullable=False),
        sa.Column("document_type", sa.String(30), nullable=False),
        sa.Column("file_path", sa.String(512), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("uploaded_at", sa.DateTime, nullable=False),
        sa.Column("verified_at", sa.DateTime),
        sa.Column("rejection_reason", sa.Text),
        sa.UniqueConstraint("educator_id", "document_type", name="uq_verification_documents_educator_type"),
    )
    op.create_index("ix_verification_documents_educator_id", "verification_documents", ["educator_id"])

    op.create_table(
        "criminal_record_verifications",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("educator_id", sa.Integer, sa.ForeignKey("educator_profiles.id"), nullable=False),
        sa.Column("verified_at", sa.DateTime, nullable=False),
        sa.Column("is_clean", sa.Boolean, nullable=False),
        sa.Column("notes", sa.Text),
    )
    op.create_index("ix_criminal_record_verifications_educator_id", "criminal_record_verifications", ["educator_id"])

    op.create_table(
        "video_interviews",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("educator_id", sa.Integer, sa.ForeignKey("educator_profiles.id"), nullable=False),
        sa.Column("scheduled_at", sa.DateTime),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("overall_result", sa.String(20)),
        sa.Column("failure_reason", sa.Text),
        sa.Column("completed_at", sa.DateTime),
        *_timestamps(),
    )
    op.create_index("ix_video_interviews_educator_id", "video_interviews", ["educator_id"])

    op.create_table(
        "diploma_verification_history",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("educator_id", sa.Integer, sa.ForeignKey("educator_profiles.id"), nullable=False),
        sa.Column("action", sa.String(30), nullable=False),
        sa.Column("reason", sa.Text),
        sa.Column("dreets_verification_sent", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_diploma_verification_history_educator_id", "diploma_verification_history", ["educator_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("educator_id", sa.Integer, sa.ForeignKey("educator_profiles.id")),
        sa.Column("type", sa.String(50)),
        sa.Column("sent_to", sa.String(255)),
        sa.Column("subject", sa.String(255)),
        sa.Column("provider_message_id", sa.String(255)),
        sa.Column("sent_at", sa.DateTime),
        *_timestamps(),
    )
    op.create_index("ix_notifications_educator_id", "notifications", ["educator_id"])

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("educator_id", sa.Integer, sa.ForeignKey("educator_profiles.id"), nullable=False),
        sa.Column("provider_subscription_id", sa.String(255), unique=True),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("current_period_end", sa.DateTime),
        *_timestamps(),
    )
    op.create_index("ix_subscriptions_educator_id", "subscriptions", ["educator_id"])


def downgrade():
    for name in ("subscriptions", "notifications", "diploma_verification_history", "video_interviews",
                 "criminal_record_verifications", "verification_documents", "family_profiles",
                 "educator_profiles", "users"):
        op.drop_table(name)
