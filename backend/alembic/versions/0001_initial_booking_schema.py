"""initial booking schema

Revision ID: 0001
Revises:
Create Date: 2026-10-16 00:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def upgrade() -> None:
    op.create_table(
        "availability_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("slot_duration_minutes", sa.Integer(), nullable=False, server_default=sa.text("60")),
        sa.Column("break_minutes", sa.Integer(), nullable=False, server_default=sa.text("15")),
        sa.Column("timezone", sa.Text(), nullable=False, server_default=sa.text("'Asia/Karachi'")),
        sa.Column("session_price", sa.Float()),
        sa.Column("currency", sa.Text(), nullable=False, server_default=sa.text("'PKR'")),
        *_timestamps(),
    )
    op.create_index(
        "ix_availability_settings_provider_id", "availability_settings", ["provider_id"], unique=True
    )

    op.create_table(
        "availability_rules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("day_of_week", sa.Text(), nullable=False),
        sa.Column("start_time", sa.Text(), nullable=False),
        sa.Column("end_time", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
    )
    op.create_index("ix_availability_rules_provider_id", "availability_rules", ["provider_id"])
    op.create_index(
        "ix_availability_rules_provider_day", "availability_rules", ["provider_id", "day_of_week"]
    )

    op.create_table(
        "availability_overrides",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("start_time", sa.Text()),
        sa.Column("end_time", sa.Text()),
        sa.Column("reason", sa.Text()),
        *_timestamps(),
    )
    op.create_index("ix_availability_overrides_provider_id", "availability_overrides", ["provider_id"])
    op.create_index(
        "uq_availability_overrides_provider_date",
        "availability_overrides",
        ["provider_id", "date"],
        unique=True,
    )

    op.create_table(
        "session_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("requester_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("start_time", sa.Text(), nullable=False),
        sa.Column("end_time", sa.Text(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'PENDING_PAYMENT'")),
        sa.Column("payment_proof_ref", sa.Text()),
        sa.Column("expires_at", sa.DateTime()),
        sa.Column("rejection_reason", sa.Text()),
        sa.Column("confirmed_at", sa.DateTime()),
        sa.Column("blocked_slot_id", sa.Integer()),
        sa.Column("session_title", sa.Text(), nullable=False),
        sa.Column("session_type", sa.Text()),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
    )
    op.create_index(
        "ix_session_requests_provider_date",
        "session_requests",
        ["provider_id", "date", "start_time"],
    )
    op.create_index(
        "ix_session_requests_requester_status", "session_requests", ["requester_id", "status"]
    )
    op.create_index(
        "ix_session_requests_status_expires", "session_requests", ["status", "expires_at"]
    )

    op.create_table(
        "blocked_slots",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("start_time", sa.Text(), nullable=False),
        sa.Column("end_time", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column(
            "session_request_id",
            sa.Integer(),
            sa.ForeignKey("session_requests.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_blocked_slots_expires_at", "blocked_slots", ["expires_at"])
    op.create_index(
        "uq_blocked_slots_interval",
        "blocked_slots",
        ["provider_id", "date", "start_time", "end_time"],
        unique=True,
    )

    op.create_table(
        "sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("requester_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("start_time", sa.Text(), nullable=False),
        sa.Column("end_time", sa.Text(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'CONFIRMED'")),
        sa.Column(
            "session_request_id",
            sa.Integer(),
            sa.ForeignKey("session_requests.id", ondelete="RESTRICT"),
            nullable=False,
            unique=True,
        ),
        sa.Column("notes", sa.Text()),
        sa.Column("session_title", sa.Text()),
        sa.Column("session_type", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_sessions_provider_id", "sessions", ["provider_id"])
    op.create_index("ix_sessions_requester_date", "sessions", ["requester_id", "date"])
    op.create_index("ix_sessions_status_date", "sessions", ["status", "date"])
    # Double-booking guard: one live session per exact interval
    op.create_index(
        "uq_sessions_interval",
        "sessions",
        ["provider_id", "date", "start_time", "end_time"],
        unique=True,
        sqlite_where=sa.text("status != 'CANCELLED'"),
        postgresql_where=sa.text("status != 'CANCELLED'"),
    )


def downgrade() -> None:
    op.drop_table("sessions")
    op.drop_table("blocked_slots")
    op.drop_table("session_requests")
    op.drop_table("availability_overrides")
    op.drop_table("availability_rules")
    op.drop_table("availability_settings")
