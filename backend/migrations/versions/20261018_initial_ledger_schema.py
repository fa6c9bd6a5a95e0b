"""Initial admin ledger schema

Revision ID: 20261018_initial_ledger
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_initial_ledger"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
    ]


def upgrade():
    op.create_table(
        "admin_users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("admin_users", schema=None) as batch_op:
        batch_op.create_index("ix_admin_users_username", ["username"], unique=True)

    op.create_table(
        "admin_sessions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("admin_id", sa.Integer(), nullable=False),
        sa.Column("token_hash", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_revoked", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_reason", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["admin_id"], ["admin_users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("admin_sessions", schema=None) as batch_op:
        batch_op.create_index("ix_admin_sessions_admin_id", ["admin_id"], unique=False)
        batch_op.create_index("ix_admin_sessions_token_hash", ["token_hash"], unique=True)

    op.create_table(
        "orders",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("total_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("tracking_number", sa.String(64), nullable=True),
        sa.Column("estimated_delivery", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("orders", schema=None) as batch_op:
        batch_op.create_index("ix_orders_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_orders_status_created", ["status", "created_at"], unique=False)

    op.create_table(
        "order_items",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("order_id", sa.String(36), nullable=False),
        sa.Column("medicine_id", sa.String(36), nullable=False),
        sa.Column("medicine_name", sa.String(255), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("unit_price_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("order_items", schema=None) as batch_op:
        batch_op.create_index("ix_order_items_order_id", ["order_id"], unique=False)

    op.create_table(
        "order_status_history",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("order_id", sa.String(36), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("status_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("order_status_history", schema=None) as batch_op:
        batch_op.create_index("ix_order_status_history_order_id", ["order_id"], unique=False)

    op.create_table(
        "doctor_verification_requests",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("applicant_user_id", sa.String(64), nullable=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("specialization", sa.String(128), nullable=False),
        sa.Column("years_experience", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("hospital_affiliation", sa.String(255), nullable=True),
        sa.Column("medical_license", sa.String(128), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.String(255), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("doctor_verification_requests", schema=None) as batch_op:
        batch_op.create_index("ix_doctor_verification_requests_applicant_user_id", ["applicant_user_id"], unique=False)
        batch_op.create_index("ix_doctor_verification_requests_status", ["status"], unique=False)

    op.create_table(
        "doctor_profiles",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("doctor_name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("specialization", sa.String(128), nullable=False),
        sa.Column("hospital_name", sa.String(255), nullable=True),
        sa.Column("clinic_name", sa.String(255), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("years_experience", sa.Integer(), nullable=True),
        sa.Column("consultation_fee", sa.Integer(), nullable=True),
        sa.Column("medical_license", sa.String(128), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("profile_image_url", sa.Text(), nullable=True),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("doctor_profiles", schema=None) as batch_op:
        batch_op.create_index("ix_doctor_profiles_is_approved", ["is_approved"], unique=False)

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(16), nullable=False, server_default="patient"),
        sa.Column("is_approved", sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "hospital_beds",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("bed_type", sa.String(64), nullable=False),
        sa.Column("total_beds", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("available_beds", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.CheckConstraint("available_beds >= 0", name="ck_hospital_beds_available_nonneg"),
        sa.CheckConstraint("total_beds >= 0", name="ck_hospital_beds_total_nonneg"),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("hospital_beds", schema=None) as batch_op:
        batch_op.create_index("ix_hospital_beds_bed_type", ["bed_type"], unique=False)

    op.create_table(
        "operation_theater",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("operation_theater", schema=None) as batch_op:
        batch_op.create_index("ix_operation_theater_name", ["name"], unique=False)

    op.create_table(
        "bed_bookings",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("booking_id", sa.String(32), nullable=False),
        sa.Column("patient_user_id", sa.String(64), nullable=True),
        sa.Column("patient_name", sa.String(255), nullable=False),
        sa.Column("patient_age", sa.Integer(), nullable=False),
        sa.Column("patient_gender", sa.String(16), nullable=False),
        sa.Column("disease", sa.String(255), nullable=False),
        sa.Column("preferred_bed_type", sa.String(64), nullable=False),
        sa.Column("is_emergency", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("admission_status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("payment_status", sa.String(16), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("booking_id", name="uq_bed_bookings_booking_id"),
    )
    with op.batch_alter_table("bed_bookings", schema=None) as batch_op:
        batch_op.create_index("ix_bed_bookings_patient_user_id", ["patient_user_id"], unique=False)
        batch_op.create_index("ix_bed_bookings_admission_status", ["admission_status"], unique=False)

    op.create_table(
        "blood_donors",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("blood_group", sa.String(8), nullable=False),
        sa.Column("mobile_number", sa.String(32), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("admin_response", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("blood_donors", schema=None) as batch_op:
        batch_op.create_index("ix_blood_donors_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_blood_donors_status", ["status"], unique=False)

    op.create_table(
        "blood_requests",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("blood_group", sa.String(8), nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("emergency_level", sa.String(16), nullable=False, server_default="normal"),
        sa.Column("delivery_instructions", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("admin_response", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("blood_requests", schema=None) as batch_op:
        batch_op.create_index("ix_blood_requests_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_blood_requests_status", ["status"], unique=False)

    op.create_table(
        "support_tickets",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("priority", sa.String(8), nullable=False, server_default="medium"),
        sa.Column("status", sa.String(16), nullable=False, server_default="open"),
        sa.Column("admin_response", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("support_tickets", schema=None) as batch_op:
        batch_op.create_index("ix_support_tickets_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_support_tickets_status", ["status"], unique=False)

    op.create_table(
        "system_alerts",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(16), nullable=False, server_default="info"),
        sa.Column("severity", sa.String(8), nullable=False, server_default="medium"),
        sa.Column("is_resolved", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "ledger_audit_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("entity_type", sa.String(32), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=False),
        sa.Column("new_status", sa.String(32), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("actor", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("ledger_audit_entries", schema=None) as batch_op:
        batch_op.create_index("ix_ledger_audit_entity", ["entity_type", "entity_id"], unique=False)
        batch_op.create_index("ix_ledger_audit_entries_created_at", ["created_at"], unique=False)


def downgrade():
    for table in [
        "ledger_audit_entries",
        "system_alerts",
        "support_tickets",
        "blood_requests",
        "blood_donors",
        "bed_bookings",
        "operation_theater",
        "hospital_beds",
        "profiles",
        "doctor_profiles",
        "doctor_verification_requests",
        "order_status_history",
        "order_items",
        "orders",
        "admin_sessions",
        "admin_users",
    ]:
        op.drop_table(table)
