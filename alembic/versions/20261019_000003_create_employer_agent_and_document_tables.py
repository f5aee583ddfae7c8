"""Create employer_agents, employer_documents and agent_documents tables

Revision ID: 20261019_000003
Revises: 20261019_000002
Create Date: 2026-10-19

Agent links for employers, files an employer shares with its agents or
candidates, and extra files attached to agent profiles.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261019_000003"
down_revision: Union[str, None] = "20261019_000002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

EMPLOYER_AGENT_STATUSES = ("active", "inactive")
DOCUMENT_TARGETS = ("agent", "candidate", "all")


def upgrade() -> None:
    op.create_table(
        "employer_agents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("employer_id", sa.Integer(), nullable=False),
        sa.Column("agent_id", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*EMPLOYER_AGENT_STATUSES, name="employer_agent_status"),
            server_default="active",
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["employer_id"], ["employers.id"], name="fk_employer_agents_employer_id", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["agent_id"], ["users.id"], name="fk_employer_agents_agent_id", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("employer_id", "agent_id", name="uq_employer_agent"),
    )
    op.create_index("ix_employer_agents_employer_id", "employer_agents", ["employer_id"])
    op.create_index("ix_employer_agents_agent_id", "employer_agents", ["agent_id"])

    op.create_table(
        "employer_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("employer_id", sa.Integer(), nullable=False),
        sa.Column("document_name", sa.String(255), nullable=False),
        sa.Column("document_url", sa.String(500), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("mime_type", sa.String(100), nullable=True),
        sa.Column("target_type", sa.Enum(*DOCUMENT_TARGETS, name="document_target"), nullable=False),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("uploaded_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["employer_id"], ["employers.id"], name="fk_employer_documents_employer_id", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["uploaded_by"], ["users.id"], name="fk_employer_documents_uploaded_by", ondelete="SET NULL"
        ),
    )
    op.create_index("ix_employer_documents_employer_id", "employer_documents", ["employer_id"])
    op.create_index("ix_employer_documents_target_type", "employer_documents", ["target_type"])
    op.create_index("ix_employer_documents_target_id", "employer_documents", ["target_id"])

    op.create_table(
        "agent_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("agent_id", sa.Integer(), nullable=False),
        sa.Column("document_name", sa.String(255), nullable=False),
        sa.Column("document_url", sa.String(500), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("mime_type", sa.String(100), nullable=True),
        sa.Column("uploaded_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["agent_id"], ["users.id"], name="fk_agent_documents_agent_id", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["uploaded_by"], ["users.id"], name="fk_agent_documents_uploaded_by", ondelete="SET NULL"
        ),
    )
    op.create_index("ix_agent_documents_agent_id", "agent_documents", ["agent_id"])


def downgrade() -> None:
    op.drop_index("ix_agent_documents_agent_id", table_name="agent_documents")
    op.drop_table("agent_documents")
    op.drop_index("ix_employer_documents_target_id", table_name="employer_documents")
    op.drop_index("ix_employer_documents_target_type", table_name="employer_documents")
    op.drop_index("ix_employer_documents_employer_id", table_name="employer_documents")
    op.drop_table("employer_documents")
    op.drop_index("ix_employer_agents_agent_id", table_name="employer_agents")
    op.drop_index("ix_employer_agents_employer_id", table_name="employer_agents")
    op.drop_table("employer_agents")
