"""Create users and processed_webhook_event tables.

Revision ID: a7c3e9d1b2f4
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "a7c3e9d1b2f4"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create the user table with usage counters and the webhook dedupe ledger."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        # Daily quota
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("usage_limit", sa.Integer(), nullable=False, server_default=sa.text("10")),
        sa.Column("last_reset_date", sa.Date(), nullable=True),
        # Entitlement
        sa.Column(
            "subscription_status", sa.String(32), nullable=False, server_default="freemium"
        ),
        sa.Column("stripe_customer_id", sa.String(255), nullable=True),
        sa.Column("stripe_subscription_id", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("modified_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("usage_count >= 0", name="ck_users_usage_count_non_negative"),
        sa.CheckConstraint("usage_limit > 0", name="ck_users_usage_limit_positive"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_stripe_customer_id", "users", ["stripe_customer_id"])

    op.create_table(
        "processed_webhook_event",
        sa.Column("event_id", sa.String(255), primary_key=True),
        sa.Column("event_type", sa.String(128), nullable=False),
        sa.Column("seen_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    # Retention pruning keeps the newest N rows by seen_at
    op.create_index(
        "ix_processed_webhook_event_seen_at", "processed_webhook_event", ["seen_at"]
    )


def downgrade():
    """Drop both tables."""
    op.drop_index("ix_processed_webhook_event_seen_at", table_name="processed_webhook_event")
    op.drop_table("processed_webhook_event")
    op.drop_index("ix_users_stripe_customer_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
