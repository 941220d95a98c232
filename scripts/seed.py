"""Seed sample data so every alert collector has something to report."""
from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from app import models
from app.config import get_settings
from app.db import create_all, init_engine, session_scope
from app.utils.time import local_midnight, to_site_time, upcoming_week_starts, utcnow


def main() -> None:
    settings = get_settings()
    print(f"Using database: {settings.database_url}")

    init_engine()
    create_all()
    now = utcnow()
    tz_name = settings.SITE_TIMEZONE

    with session_scope() as session:
        staff = [
            models.User(username=role.value, email=f"{role.value}@example.com", is_admin=True, role=role.value)
            for role in models.AdminRole
        ]
        player = models.User(
            username="lucky_player",
            email="player@example.com",
            payout_method="PayPal",
            payout_handle="player@example.com",
        )
        session.add_all([*staff, player])
        session.flush()

        # A finished week with no winner picked yet.
        this_week = upcoming_week_starts(now, tz_name, 7)[0] - timedelta(days=7)
        last_week = this_week - timedelta(days=7)
        ended = models.WeeklyPrize(
            game_type=models.GameType.SLOTS.value,
            week_start=last_week,
            week_end_time=local_midnight(this_week, tz_name),
            total_prize_pool=Decimal("50.00"),
        )
        won = models.WeeklyPrize(
            game_type=models.GameType.SOLITAIRE.value,
            week_start=last_week,
            week_end_time=local_midnight(this_week, tz_name),
            total_prize_pool=Decimal("25.00"),
            winner_user_id=player.id,
        )
        session.add_all([ended, won])
        session.flush()
        session.add(
            models.PrizePayout(user_id=player.id, prize_id=won.id, status=models.PrizePayoutStatus.VERIFIED)
        )

        card = models.BusinessCard(business_name="Corner Bakery")
        session.add(card)
        session.flush()
        session.add_all(
            [
                models.AdCampaign(
                    business_card_id=card.id,
                    amount_paid=Decimal("99.00"),
                    status=models.CampaignStatus.ACTIVE,
                    contracted_views=1000,
                    total_views=920,
                ),
                models.AdCampaign(
                    business_card_id=card.id,
                    amount_paid=Decimal("49.00"),
                    status=models.CampaignStatus.ACTIVE,
                    contracted_views=1000,
                    total_views=780,
                ),
            ]
        )

        session.add_all(
            [
                models.RecurringExpense(name="Hosting", amount=Decimal("40.00")),
                models.RecurringExpense(
                    name="Domain", amount=Decimal("24.00"), frequency=models.ExpenseFrequency.YEARLY
                ),
                models.Expense(
                    description="Launch flyers",
                    amount=Decimal("15.00"),
                    expense_date=to_site_time(now, tz_name).date(),
                ),
                models.TokenBalance(user_id=player.id, balance=400, lifetime_spent=0),
                models.PayoutQueueItem(user_id=player.id, amount=Decimal("10.00"), reason="Cash out"),
                models.AdminSetting(setting_key="email_test_mode", setting_value="true"),
            ]
        )
    print("Seed data inserted.")


if __name__ == "__main__":
    main()
