"""0001 - Initial schema: employee directory, balances, requests, ledger, audit.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000+00:00
"""

import sqlalchemy as sa
from alembic import op

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "employee",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False, server_default="EMPLOYEE"),
        sa.Column("designation", sa.String(length=255), nullable=True),
        sa.Column("department", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_employee_email", "employee", ["email"], unique=True)

    op.create_table(
        "leave_balance",
        sa.Column(
            "employee_id",
            sa.Uuid(),
            sa.ForeignKey("employee.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("current_balance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("used_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pending_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("available_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.CheckConstraint("current_balance >= 0", name="ck_leave_balance_current_non_negative"),
        sa.CheckConstraint("used_days >= 0", name="ck_leave_balance_used_non_negative"),
        sa.CheckConstraint("pending_days >= 0", name="ck_leave_balance_pending_non_negative"),
        sa.CheckConstraint("available_days >= 0", name="ck_leave_balance_available_non_negative"),
        sa.CheckConstraint(
            "available_days = current_balance - used_days - pending_days",
            name="ck_leave_balance_identity",
        ),
    )

    op.create_table(
        "leave_request",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("employee_id", sa.Uuid(), sa.ForeignKey("employee.id", ondelete="CASCADE"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(length=2000), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="PENDING"),
        sa.Column("applied_on", sa.DateTime(timezone=True), nullable=False),
        sa.Column("decided_by", sa.Uuid(), sa.ForeignKey("employee.id"), nullable=True),
        sa.Column("decided_on", sa.DateTime(timezone=True), nullable=True),
        sa.Column("comments", sa.String(length=1000), nullable=True),
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_request_date_order"),
        sa.CheckConstraint(
            "(status = 'PENDING') = (decided_on IS NULL)"
            " AND (status = 'PENDING') = (decided_by IS NULL)"
            " AND (status = 'PENDING') = (comments IS NULL)",
            name="ck_leave_request_decision_recorded",
        ),
    )
    op.create_index("ix_leave_request_employee_id", "leave_request", ["employee_id"])
    op.create_index("ix_leave_request_status", "leave_request", ["status"])
    op.create_index("ix_leave_request_applied_on", "leave_request", ["applied_on"])
    op.create_index("ix_leave_request_employee_status", "leave_request", ["employee_id", "status"])

    op.create_table(
        "leave_ledger_entry",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("employee_id", sa.Uuid(), sa.ForeignKey("employee.id", ondelete="CASCADE"), nullable=False),
        sa.Column("entry_type", sa.String(length=50), nullable=False),
        sa.Column("days", sa.Integer(), nullable=False),
        sa.Column("source_type", sa.String(length=50), nullable=False),
        sa.Column("source_id", sa.String(length=255), nullable=False),
        sa.Column("metadata_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("source_type", "source_id", "entry_type", name="uq_leave_ledger_idempotency"),
        sa.CheckConstraint("days <> 0", name="ck_leave_ledger_days_non_zero"),
    )
    op.create_index("ix_leave_ledger_entry_employee_id", "leave_ledger_entry", ["employee_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("actor_id", sa.Uuid(), sa.ForeignKey("employee.id"), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])
    op.create_index("ix_audit_log_actor_id", "audit_log", ["actor_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("leave_ledger_entry")
    op.drop_table("leave_request")
    op.drop_table("leave_balance")
    op.drop_table("employee")
