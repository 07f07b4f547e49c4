"""opportunities table

Revision ID: 001_opportunities
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_opportunities"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_SLOTS = ("discovery1", "discovery2", "discovery3", "closing1", "closing2", "closing3")


def upgrade() -> None:
    slot_columns = []
    for slot in _SLOTS:
        slot_columns += [
            sa.Column(f"{slot}_date", sa.Date()),
            sa.Column(f"{slot}_duration", sa.Integer()),
            sa.Column(f"{slot}_recording", sa.Text()),
        ]

    op.create_table(
        "opportunities",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("lead_source", sa.String(100), nullable=False, server_default="Referrals"),
        sa.Column("salesperson", sa.String(255), nullable=False, server_default="Unknown"),
        *slot_columns,
        sa.Column("proposal_status", sa.String(20), nullable=False, server_default="N/A"),
        sa.Column("revenue", sa.Numeric(12, 2), server_default="0"),
        sa.Column("cash_collected", sa.Numeric(12, 2), server_default="0"),
        sa.Column("deal_status", sa.String(10), nullable=False, server_default="Open"),
        sa.Column("is_won", sa.Boolean(), server_default=sa.false()),
        sa.Column("is_lost", sa.Boolean(), server_default=sa.false()),
        sa.Column("contacts", sa.JSON()),
        sa.Column("files", sa.JSON()),
        sa.Column("notes", sa.Text()),
        sa.Column("conversation", sa.JSON()),
        sa.Column("created_at", sa.Date(), nullable=False, server_default=sa.func.current_date()),
    )
    op.create_index("ix_opportunities_created_at", "opportunities", ["created_at"])
    op.create_index("ix_opportunities_salesperson", "opportunities", ["salesperson"])
    op.create_index("ix_opportunities_lead_source", "opportunities", ["lead_source"])


def downgrade() -> None:
    """Drop the table. ⚠️ DESTRUCTIVE — only for dev/test environments."""
    op.drop_index("ix_opportunities_lead_source", table_name="opportunities")
    op.drop_index("ix_opportunities_salesperson", table_name="opportunities")
    op.drop_index("ix_opportunities_created_at", table_name="opportunities")
    op.drop_table("opportunities")
