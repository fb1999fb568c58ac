"""Ticket and queue stores."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20261019_000001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tickets",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("owner_id", sa.BigInteger(), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("valid_until", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("remaining_uses", sa.Integer(), nullable=True),
        sa.CheckConstraint("kind IN ('limited', 'daily', 'annual')", name="ck_tickets_kind"),
        sa.CheckConstraint("remaining_uses IS NULL OR remaining_uses >= 0", name="ck_tickets_remaining_uses"),
        sa.CheckConstraint(
            "(kind = 'limited' AND remaining_uses IS NOT NULL AND valid_until IS NULL) "
            "OR (kind <> 'limited' AND remaining_uses IS NULL AND valid_until IS NOT NULL)",
            name="ck_tickets_entitlement",
        ),
    )
    op.create_index("ix_tickets_id", "tickets", ["id"])
    op.create_index("ix_tickets_owner_id", "tickets", ["owner_id"])

    op.create_table(
        "queue_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("attraction_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("entered_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.UniqueConstraint("attraction_id", "user_id", name="uq_queue_entries_attraction_user"),
    )
    op.create_index("ix_queue_entries_attraction_id", "queue_entries", ["attraction_id"])
    op.create_index("ix_queue_entries_user_id", "queue_entries", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_queue_entries_user_id", table_name="queue_entries")
    op.drop_index("ix_queue_entries_attraction_id", table_name="queue_entries")
    op.drop_table("queue_entries")
    op.drop_index("ix_tickets_owner_id", table_name="tickets")
    op.drop_index("ix_tickets_id", table_name="tickets")
    op.drop_table("tickets")
