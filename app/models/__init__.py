"""ORM models package."""
from .admin_setting import AdminSetting
from .alert_dismissal import AlertDismissal
from .api_key import ApiKey
from .audit import AuditLog
from .base import Base
from .campaign import AdCampaign, BusinessCard, CampaignStatus
from .finance import Expense, ExpenseFrequency, RecurringExpense, TokenBalance
from .payout_queue import PayoutQueueItem, PayoutQueueStatus
from .prize import GameType, PrizePayout, PrizePayoutStatus, PrizeType, WeeklyPrize
from .user import AdminRole, User

__all__ = [
    "AdCampaign",
    "AdminRole",
    "AdminSetting",
    "AlertDismissal",
    "ApiKey",
    "AuditLog",
    "Base",
    "BusinessCard",
    "CampaignStatus",
    "Expense",
    "ExpenseFrequency",
    "GameType",
    "PayoutQueueItem",
    "PayoutQueueStatus",
    "PrizePayout",
    "PrizePayoutStatus",
    "PrizeType",
    "RecurringExpense",
    "TokenBalance",
    "User",
    "WeeklyPrize",
]
