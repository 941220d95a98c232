"""initial schema: staff, prizes, campaigns, finance, alert dismissals

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

# Enum columns store member NAMES, matching SQLAlchemy's Enum default.
PRIZE_TYPE = sa.Enum("CASH", "MERCH", "TOKENS", name="prizetype")
PRIZE_PAYOUT_STATUS = sa.Enum("PENDING", "VERIFIED", "PAID", "REJECTED", name="prizepayoutstatus")
PAYOUT_QUEUE_STATUS = sa.Enum("PENDING", "PAID", "REJECTED", name="payoutqueuestatus")
CAMPAIGN_STATUS = sa.Enum(
    "PENDING_PAYMENT", "ACTIVE", "QUEUED", "COMPLETED", "CANCELLED", name="campaignstatus"
)
EXPENSE_FREQUENCY = sa.Enum("MONTHLY", "YEARLY", name="expensefrequency")


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        *_base_columns(),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("role", sa.String(length=32), nullable=True),
        sa.Column("payout_method", sa.String(length=50), nullable=True),
        sa.Column("payout_handle", sa.String(length=255), nullable=True),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "api_keys",
        *_base_columns(),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("prefix", sa.String(length=32), nullable=False),
        sa.Column("key_hash", sa.String(length=128), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("name"),
        sa.UniqueConstraint("key_hash"),
    )
    op.create_index("ix_api_keys_user_id", "api_keys", ["user_id"])

    op.create_table(
        "audit_logs",
        *_base_columns(),
        sa.Column("actor", sa.String(length=100), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.String(length=191), nullable=False),
        sa.Column("data_json", sa.JSON(), nullable=False),
        sa.Column("at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity", "entity_id"])

    op.create_table(
        "admin_settings",
        *_base_columns(),
        sa.Column("setting_key", sa.String(length=100), nullable=False),
        sa.Column("setting_value", sa.Text(), nullable=True),
        sa.UniqueConstraint("setting_key"),
    )

    op.create_table(
        "admin_alert_dismissals",
        *_base_columns(),
        sa.Column("alert_type", sa.String(length=64), nullable=False),
        sa.Column("alert_key", sa.String(length=191), nullable=False),
        sa.Column("dismissed_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("dismissed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.UniqueConstraint("alert_type", "alert_key", name="uq_admin_alert_dismissals_type_key"),
    )

    op.create_table(
        "weekly_prizes",
        *_base_columns(),
        sa.Column("game_type", sa.String(length=32), nullable=False),
        sa.Column("week_start", sa.Date(), nullable=False),
        sa.Column("week_end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total_prize_pool", sa.Numeric(18, 2), nullable=False),
        sa.Column("prize_type", PRIZE_TYPE, nullable=False),
        sa.Column("winner_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("game_type", "week_start", name="uq_weekly_prizes_game_week"),
        sa.CheckConstraint("total_prize_pool >= 0", name="ck_weekly_prize_non_negative_pool"),
    )
    op.create_index("ix_weekly_prizes_week_end_time", "weekly_prizes", ["week_end_time"])

    op.create_table(
        "prize_payouts",
        *_base_columns(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("prize_id", sa.Integer(), sa.ForeignKey("weekly_prizes.id"), nullable=False),
        sa.Column("status", PRIZE_PAYOUT_STATUS, nullable=False),
        sa.Column("email_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_prize_payouts_status", "prize_payouts", ["status"])
    op.create_index("ix_prize_payouts_user_id", "prize_payouts", ["user_id"])
    op.create_index("ix_prize_payouts_prize_id", "prize_payouts", ["prize_id"])

    op.create_table(
        "payout_queue",
        *_base_columns(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=True),
        sa.Column("status", PAYOUT_QUEUE_STATUS, nullable=False),
        sa.CheckConstraint("amount >= 0", name="ck_payout_queue_non_negative_amount"),
    )
    op.create_index("ix_payout_queue_status", "payout_queue", ["status"])
    op.create_index("ix_payout_queue_user_id", "payout_queue", ["user_id"])

    op.create_table(
        "business_cards",
        *_base_columns(),
        sa.Column("business_name", sa.String(length=200), nullable=True),
        sa.Column("full_business_name", sa.String(length=255), nullable=True),
    )

    op.create_table(
        "ad_campaigns",
        *_base_columns(),
        sa.Column("business_card_id", sa.Integer(), sa.ForeignKey("business_cards.id"), nullable=True),
        sa.Column("amount_paid", sa.Numeric(18, 2), nullable=False),
        sa.Column("status", CAMPAIGN_STATUS, nullable=False),
        sa.Column("contracted_views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bonus_views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("amount_paid >= 0", name="ck_ad_campaign_non_negative_amount"),
        sa.CheckConstraint(
            "contracted_views >= 0 AND bonus_views >= 0 AND total_views >= 0",
            name="ck_ad_campaign_non_negative_views",
        ),
    )
    op.create_index("ix_ad_campaigns_status", "ad_campaigns", ["status"])
    op.create_index("ix_ad_campaigns_created_at", "ad_campaigns", ["created_at"])

    op.create_table(
        "recurring_expenses",
        *_base_columns(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("frequency", EXPENSE_FREQUENCY, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.CheckConstraint("amount >= 0", name="ck_recurring_expense_non_negative"),
    )

    op.create_table(
        "expenses",
        *_base_columns(),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("expense_date", sa.Date(), nullable=False),
        sa.CheckConstraint("amount >= 0", name="ck_expense_non_negative"),
    )
    op.create_index("ix_expenses_expense_date", "expenses", ["expense_date"])

    op.create_table(
        "token_balances",
        *_base_columns(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("balance", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("lifetime_spent", sa.BigInteger(), nullable=False, server_default="0"),
        sa.UniqueConstraint("user_id"),
        sa.CheckConstraint("balance >= 0 AND lifetime_spent >= 0", name="ck_token_balance_non_negative"),
    )


def downgrade() -> None:
    op.drop_table("token_balances")
    op.drop_index("ix_expenses_expense_date", table_name="expenses")
    op.drop_table("expenses")
    op.drop_table("recurring_expenses")
    op.drop_index("ix_ad_campaigns_created_at", table_name="ad_campaigns")
    op.drop_index("ix_ad_campaigns_status", table_name="ad_campaigns")
    op.drop_table("ad_campaigns")
    op.drop_table("business_cards")
    op.drop_index("ix_payout_queue_user_id", table_name="payout_queue")
    op.drop_index("ix_payout_queue_status", table_name="payout_queue")
    op.drop_table("payout_queue")
    op.drop_index("ix_prize_payouts_prize_id", table_name="prize_payouts")
    op.drop_index("ix_prize_payouts_user_id", table_name="prize_payouts")
    op.drop_index("ix_prize_payouts_status", table_name="prize_payouts")
    op.drop_table("prize_payouts")
    op.drop_index("ix_weekly_prizes_week_end_time", table_name="weekly_prizes")
    op.drop_table("weekly_prizes")
    op.drop_table("admin_alert_dismissals")
    op.drop_table("admin_settings")
    op.drop_index("ix_audit_logs_entity", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_api_keys_user_id", table_name="api_keys")
    op.drop_table("api_keys")
    op.drop_table("users")

    bind = op.get_bind()
    for enum in (EXPENSE_FREQUENCY, CAMPAIGN_STATUS, PAYOUT_QUEUE_STATUS, PRIZE_PAYOUT_STATUS, PRIZE_TYPE):
        enum.drop(bind, checkfirst=True)
