"""Create users, agents, packages, candidates, employers and documents tables

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19

Back-office schema: accounts, agent profiles, package catalogue,
candidates (with the cached balance columns) and employer placements.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261019_000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

USER_ROLES = ("super_admin", "admin", "agent", "accountant", "data_entry")
PLACEMENT_STATUSES = ("applied", "selected", "working", "completed", "terminated")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("role", sa.Enum(*USER_ROLES, name="user_role"), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_is_deleted", "users", ["is_deleted"])

    op.create_table(
        "agents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("commission_rate", sa.Numeric(5, 2), server_default="0", nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_agents_user_id", ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", name="uq_agents_user_id"),
    )

    op.create_table(
        "packages",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_packages_name", "packages", ["name"], unique=True)
    op.create_index("ix_packages_is_deleted", "packages", ["is_deleted"])

    op.create_table(
        "candidates",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("agent_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("passport_number", sa.String(50), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("package_amount", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("total_paid", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("due_amount", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("status", sa.String(50), server_default="pending", nullable=False),
        sa.Column("passport_copy_url", sa.String(500), nullable=True),
        sa.Column("cv_url", sa.String(500), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["agent_id"], ["users.id"], name="fk_candidates_agent_id", ondelete="SET NULL"),
    )
    op.create_index("ix_candidates_agent_id", "candidates", ["agent_id"])
    op.create_index("ix_candidates_passport_number", "candidates", ["passport_number"], unique=True)
    op.create_index("ix_candidates_status", "candidates", ["status"])
    op.create_index("ix_candidates_is_deleted", "candidates", ["is_deleted"])

    op.create_table(
        "candidate_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("candidate_id", sa.Integer(), nullable=False),
        sa.Column("document_name", sa.String(255), nullable=False),
        sa.Column("document_url", sa.String(500), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("mime_type", sa.String(100), nullable=True),
        sa.Column("uploaded_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["candidate_id"], ["candidates.id"], name="fk_candidate_documents_candidate_id", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["uploaded_by"], ["users.id"], name="fk_candidate_documents_uploaded_by", ondelete="SET NULL"
        ),
    )
    op.create_index("ix_candidate_documents_candidate_id", "candidate_documents", ["candidate_id"])

    op.create_table(
        "employers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("company_address", sa.Text(), nullable=True),
        sa.Column("contact_person", sa.String(255), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("contact_phone", sa.String(20), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("industry", sa.String(100), nullable=True),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_employers_company_name", "employers", ["company_name"])
    op.create_index("ix_employers_country", "employers", ["country"])
    op.create_index("ix_employers_is_deleted", "employers", ["is_deleted"])

    op.create_table(
        "employer_candidates",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("employer_id", sa.Integer(), nullable=False),
        sa.Column("candidate_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.String(255), nullable=True),
        sa.Column("joining_date", sa.Date(), nullable=True),
        sa.Column("salary", sa.Numeric(12, 2), nullable=True),
        sa.Column("status", sa.Enum(*PLACEMENT_STATUSES, name="placement_status"), server_default="applied", nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["employer_id"], ["employers.id"], name="fk_employer_candidates_employer_id", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["candidate_id"], ["candidates.id"], name="fk_employer_candidates_candidate_id", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("employer_id", "candidate_id", name="uq_employer_candidate"),
    )
    op.create_index("ix_employer_candidates_employer_id", "employer_candidates", ["employer_id"])
    op.create_index("ix_employer_candidates_candidate_id", "employer_candidates", ["candidate_id"])


def downgrade() -> None:
    op.drop_index("ix_employer_candidates_candidate_id", table_name="employer_candidates")
    op.drop_index("ix_employer_candidates_employer_id", table_name="employer_candidates")
    op.drop_table("employer_candidates")
    op.drop_index("ix_employers_is_deleted", table_name="employers")
    op.drop_index("ix_employers_country", table_name="employers")
    op.drop_index("ix_employers_company_name", table_name="employers")
    op.drop_table("employers")
    op.drop_index("ix_candidate_documents_candidate_id", table_name="candidate_documents")
    op.drop_table("candidate_documents")
    op.drop_index("ix_candidates_is_deleted", table_name="candidates")
    op.drop_index("ix_candidates_status", table_name="candidates")
    op.drop_index("ix_candidates_passport_number", table_name="candidates")
    op.drop_index("ix_candidates_agent_id", table_name="candidates")
    op.drop_table("candidates")
    op.drop_index("ix_packages_is_deleted", table_name="packages")
    op.drop_index("ix_packages_name", table_name="packages")
    op.drop_table("packages")
    op.drop_table("agents")
    op.drop_index("ix_users_is_deleted", table_name="users")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
