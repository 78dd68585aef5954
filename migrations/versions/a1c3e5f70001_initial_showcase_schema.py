"""initial_showcase_schema

Creates the portal tables:
  - users        — portal accounts (one per registering organization contact)
  - submissions  — one showcase submission per user, created lazily

Tables created conditionally (IF NOT EXISTS semantics) to support idempotent
execution against databases that already received these tables via
db.create_all() in a development environment.

Revision ID: a1c3e5f70001
Revises:
Create Date: 2026-10-19 09:12:44.218311
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = 'a1c3e5f70001'
down_revision = None
branch_labels = None
depends_on = None

_TEXT_FIELDS = (
    "project_name", "project_location", "project_address",
    "contact_name", "contact_title", "contact_phone", "contact_email", "contact_role",
    "project_type", "project_category",
    "total_construction_cost", "total_gross_sqft", "seating_capacity",
    "cost_per_sqft", "primary_funding",
    "facility_rep_name", "facility_rep_title", "facility_rep_phone",
    "facility_rep_email", "facility_rep_address",
    "project_summary", "project_description", "special_instructions",
    "photo_credits", "photo_special_instructions",
)


def upgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing = set(inspector.get_table_names())

    # ── User ──────────────────────────────────────────────────────────────
    if "users" not in existing:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False),
            sa.Column("password_hash", sa.String(length=256), nullable=False),
            sa.Column("firm_name", sa.String(length=255), nullable=True),
            sa.Column("contact_name", sa.String(length=255), nullable=True),
            sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ── Submission ────────────────────────────────────────────────────────
    if "submissions" not in existing:
        op.create_table(
            "submissions",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column(
                "owner_id", sa.Integer(), nullable=False,
                comment="One submission per user",
            ),
            sa.Column(
                "status", sa.String(length=20), nullable=False,
                server_default="draft",
                comment="draft | in_progress | completed",
            ),
            *[sa.Column(name, sa.Text(), nullable=True) for name in _TEXT_FIELDS],
            sa.Column("authorization", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("date_of_occupancy", sa.Date(), nullable=True),
            sa.Column("architects", sa.JSON(), nullable=False),
            sa.Column("manufacturers_suppliers", sa.JSON(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column(
                "updated_at", sa.DateTime(timezone=True), nullable=True,
                comment="Set by the store on every successful persist",
            ),
            sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
            sa.CheckConstraint(
                "status IN ('draft', 'in_progress', 'completed')",
                name="ck_submission_status",
            ),
            sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_submissions_owner_id", "submissions", ["owner_id"], unique=True)
        op.create_index("ix_submissions_status", "submissions", ["status"])


def downgrade():
    op.drop_index("ix_submissions_status", table_name="submissions")
    op.drop_index("ix_submissions_owner_id", table_name="submissions")
    op.drop_table("submissions")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
