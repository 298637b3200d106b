"""Tests for notification rules, read/dismiss states and settings."""

from datetime import datetime

import pytest

from models.notification import NotificationSettings
from services.notification_service import (
    bill_due_message,
    bill_overdue_message,
    card_limit_message,
    is_quiet_time,
    low_balance_message,
)

# Noon on the mock reference day
NOW = datetime(2024, 3, 20, 12, 0)


def _keys(notifications):
    return [n.key for n in notifications]


class TestMessages:
    """Test pt-BR push message texts."""

    @pytest.mark.parametrize("days,when", [(0, "hoje"), (1, "amanhã"), (3, "em 3 dias")])
    def test_bill_due(self, days, when):
        title, message = bill_due_message("Nubank", 2800.0, days)
        assert title == "Fatura vencendo"
        assert message == f"A fatura do Nubank de R$ 2.800,00 vence {when}."

    def test_bill_overdue_plural(self):
        assert bill_overdue_message("Itaú", 350.0, 1)[1].endswith("há 1 dia.")
        assert bill_overdue_message("Itaú", 350.0, 3)[1].endswith("há 3 dias.")

    @pytest.mark.parametrize("usage,level", [(96, "quase esgotado"), (85, "alto"), (50, "em uso")])
    def test_card_limit_levels(self, usage, level):
        assert f"está {level}: {usage}% utilizado" in card_limit_message("Visa", usage)[1]

    def test_low_balance_levels(self):
        assert "muito baixo" in low_balance_message("Conta", 200.0, 500.0)[1]
        assert "está baixo" in low_balance_message("Conta", 300.0, 500.0)[1]


class TestQuietHours:
    """Test the quiet window, which wraps past midnight by default."""

    @pytest.mark.parametrize("hour,minute,quiet", [
        (23, 0, True), (7, 59, True), (8, 0, False), (12, 0, False), (22, 0, True),
    ])
    def test_wrapping_window(self, hour, minute, quiet):
        settings = NotificationSettings(quiet_hours_enabled=True)
        assert is_quiet_time(settings, datetime(2024, 3, 20, hour, minute)) is quiet

    def test_same_day_window(self):
        settings = NotificationSettings(quiet_hours_enabled=True,
                                        quiet_start="12:00", quiet_end="14:00")
        assert is_quiet_time(settings, datetime(2024, 3, 20, 13, 0))
        assert not is_quiet_time(settings, datetime(2024, 3, 20, 14, 0))

    def test_disabled(self):
        assert not is_quiet_time(NotificationSettings(), datetime(2024, 3, 20, 23, 0))


@pytest.mark.notifications
class TestGeneration:
    """Test rules against the mock fixtures."""

    def test_default_rules(self, mock_services):
        notifications = mock_services.notifications.get_notifications(NOW)
        assert _keys(notifications) == [
            "bill:3:overdue", "bill:2:due", "budget:2:threshold",
        ]
        assert [n.priority for n in notifications] == ["critical", "medium", "medium"]
        assert notifications[0].message == (
            "A fatura do Itaú Click de R$ 350,00 está vencida há 3 dias."
        )
        assert notifications[2].metadata == {"budget_id": 2, "percentage": 80.4}

    def test_low_balance_rule(self, mock_services):
        mock_services.notifications.save_settings(NotificationSettings(low_balance_minimum=6000.0))
        notifications = mock_services.notifications.get_notifications(NOW)
        low = [n for n in notifications if n.type == "low_balance"]
        assert _keys(low) == ["account:1:low_balance"]
        assert low[0].priority == "medium"

    def test_card_limit_rule(self, mock_services):
        mock_services.notifications.save_settings(NotificationSettings(card_limit_threshold=30.0))
        cards = [n for n in mock_services.notifications.get_notifications(NOW)
                 if n.type == "card_limit"]
        assert _keys(cards) == ["card:1:limit"]
        assert cards[0].priority == "high"
        assert cards[0].metadata["usage_percentage"] == 35.0

    def test_spending_rule(self, mock_services):
        mock_services.notifications.save_settings(NotificationSettings(weekly_spending_limit=500.0))
        spending = [n for n in mock_services.notifications.get_notifications(NOW)
                    if n.type == "spending_alert"]
        assert _keys(spending) == ["spending:2024-03-20"]

    def test_disabled_groups(self, mock_services):
        mock_services.notifications.save_settings(NotificationSettings(
            bill_reminders_enabled=False, budget_alerts_enabled=False,
        ))
        assert mock_services.notifications.get_notifications(NOW) == []

    def test_bill_window(self, mock_services):
        mock_services.notifications.save_settings(NotificationSettings(bill_days_before=1))
        assert "bill:2:due" not in _keys(mock_services.notifications.get_notifications(NOW))


@pytest.mark.notifications
class TestStates:
    """Test read/dismissed states and their expiry."""

    def test_mark_read(self, mock_services):
        notifications = mock_services.notifications
        assert notifications.unread_count(NOW) == 3
        notifications.mark_read("bill:2:due", NOW)
        assert notifications.unread_count(NOW) == 2
        read = [n for n in notifications.get_notifications(NOW) if n.key == "bill:2:due"]
        assert read[0].status == "read"

    def test_mark_all_read(self, mock_services):
        mock_services.notifications.mark_all_read(NOW)
        assert mock_services.notifications.unread_count(NOW) == 0
        assert len(mock_services.notifications.get_notifications(NOW)) == 3

    def test_dismiss_until_next_month(self, mock_services):
        notifications = mock_services.notifications
        notifications.dismiss("bill:3:overdue", NOW)
        assert "bill:3:overdue" not in _keys(notifications.get_notifications(NOW))
        assert "bill:3:overdue" in _keys(notifications.get_notifications(datetime(2024, 4, 2, 9, 0)))

    def test_clear_all(self, mock_services):
        mock_services.notifications.clear_all(NOW)
        assert mock_services.notifications.get_notifications(NOW) == []


@pytest.mark.notifications
class TestSettings:
    """Test persisted notification settings."""

    def test_defaults(self, mock_services):
        settings = mock_services.notifications.load_settings()
        assert settings == NotificationSettings()
        assert (settings.quiet_start, settings.quiet_end) == ("22:00", "08:00")

    def test_round_trip(self, mock_services):
        mock_services.notifications.save_settings(
            NotificationSettings(bill_days_before=5, quiet_hours_enabled=True)
        )
        loaded = mock_services.notifications.load_settings()
        assert loaded.bill_days_before == 5
        assert loaded.quiet_hours_enabled

    @pytest.mark.parametrize("overrides,message", [
        ({"bill_days_before": -1}, "antecedência"),
        ({"budget_threshold": 0}, "orçamento"),
        ({"card_limit_threshold": 120}, "cartão"),
        ({"low_balance_minimum": -10.0}, "mínimos"),
        ({"quiet_start": "25:00"}, "Horário inválido"),
        ({"quiet_end": "tarde"}, "Horário inválido"),
    ])
    def test_invalid_settings(self, mock_services, overrides, message):
        with pytest.raises(ValueError, match=message):
            mock_services.notifications.save_settings(NotificationSettings(**overrides))

    def test_corrupt_settings_fall_back(self, mock_services, db, user_id):
        db.set_setting(f"notification_settings:{user_id}", "{broken")
        assert mock_services.notifications.load_settings() == NotificationSettings()
