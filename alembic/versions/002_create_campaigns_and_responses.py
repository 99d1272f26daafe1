"""Add campaigns and NPS responses."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "002_create_campaigns_and_responses"
down_revision = "001_create_accounts_and_subscriptions"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "campaigns",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "account_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column(
            "start_date",
            sa.Date(),
            nullable=False,
            server_default=sa.func.current_date(),
        ),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_campaigns_account_id", "campaigns", ["account_id"])

    op.create_table(
        "responses",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "campaign_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("campaigns.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("source", sa.String(), nullable=True),
        sa.Column("idempotency_key", sa.String(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint("score >= 0 AND score <= 10", name="ck_responses_score_range"),
    )
    op.create_index("ix_responses_campaign_id", "responses", ["campaign_id"])
    op.create_index("ix_responses_idempotency_key", "responses", ["idempotency_key"])
    # Monthly usage counts filter responses by campaign and creation time
    op.create_index(
        "ix_responses_campaign_id_created_at", "responses", ["campaign_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_responses_campaign_id_created_at", table_name="responses")
    op.drop_index("ix_responses_idempotency_key", table_name="responses")
    op.drop_index("ix_responses_campaign_id", table_name="responses")
    op.drop_table("responses")
    op.drop_index("ix_campaigns_account_id", table_name="campaigns")
    op.drop_table("campaigns")
