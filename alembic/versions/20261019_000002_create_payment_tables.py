"""Create payments and ssl_transactions tables

Revision ID: 20261019_000002
Revises: 20261019_000001
Create Date: 2026-10-19

Append-only payment ledger plus the SSLCommerz handshake table.
payments.transaction_id is UNIQUE so one gateway tran_id can only be
credited once.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261019_000002"
down_revision: Union[str, None] = "20261019_000001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("candidate_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_type", sa.String(50), nullable=False),
        sa.Column("payment_method", sa.Enum("cash", "sslcommerz", name="payment_method"), nullable=False),
        sa.Column("transaction_id", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("recorded_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["candidate_id"], ["candidates.id"], name="fk_payments_candidate_id", ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(
            ["recorded_by"], ["users.id"], name="fk_payments_recorded_by", ondelete="SET NULL"
        ),
    )
    op.create_index("ix_payments_candidate_id", "payments", ["candidate_id"])
    op.create_index("ix_payments_payment_type", "payments", ["payment_type"])
    op.create_index("ix_payments_transaction_id", "payments", ["transaction_id"], unique=True)

    op.create_table(
        "ssl_transactions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("candidate_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_type", sa.String(50), nullable=False),
        sa.Column("tran_id", sa.String(64), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "success", "failed", "cancelled", name="ssl_transaction_status"),
            server_default="pending",
            nullable=False,
        ),
        sa.Column("val_id", sa.String(255), nullable=True),
        sa.Column("initiated_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["candidate_id"], ["candidates.id"], name="fk_ssl_transactions_candidate_id", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["initiated_by"], ["users.id"], name="fk_ssl_transactions_initiated_by", ondelete="SET NULL"
        ),
    )
    op.create_index("ix_ssl_transactions_candidate_id", "ssl_transactions", ["candidate_id"])
    op.create_index("ix_ssl_transactions_tran_id", "ssl_transactions", ["tran_id"], unique=True)
    op.create_index("ix_ssl_transactions_status", "ssl_transactions", ["status"])


def downgrade() -> None:
    op.drop_index("ix_ssl_transactions_status", table_name="ssl_transactions")
    op.drop_index("ix_ssl_transactions_tran_id", table_name="ssl_transactions")
    op.drop_index("ix_ssl_transactions_candidate_id", table_name="ssl_transactions")
    op.drop_table("ssl_transactions")
    op.drop_index("ix_payments_transaction_id", table_name="payments")
    op.drop_index("ix_payments_payment_type", table_name="payments")
    op.drop_index("ix_payments_candidate_id", table_name="payments")
    op.drop_table("payments")
