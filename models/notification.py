from dataclasses import dataclass, field

from utils.constants import (
    BILL_DUE_SOON_DAYS,
    BUDGET_ALERT_PERCENTAGE,
    CARD_LIMIT_ALERT_PCT,
    LOW_BALANCE_MINIMUM,
    WEEKLY_SPENDING_LIMIT,
)

NOTIFICATION_TYPES = (
    "bill_due",
    "bill_overdue",
    "spending_alert",
    "budget_exceeded",
    "goal_progress",
    "low_balance",
    "card_limit",
    "system",
)
NOTIFICATION_PRIORITIES = ("low", "medium", "high", "critical")
NOTIFICATION_STATUSES = ("unread", "read", "dismissed", "archived")


@dataclass
class Notification:
    key: str                # stable id, e.g. "bill:3"; persisted states hang off it
    type: str
    priority: str
    title: str
    message: str
    created_at: str         # 'YYYY-MM-DD HH:MM:SS'
    status: str = "unread"
    metadata: dict = field(default_factory=dict)
    action_url: str = ""

    @property
    def is_unread(self) -> bool:
        return self.status == "unread"


@dataclass
class NotificationSettings:
    bill_reminders_enabled: bool = True
    bill_days_before: int = BILL_DUE_SOON_DAYS
    budget_alerts_enabled: bool = True
    budget_threshold: float = BUDGET_ALERT_PERCENTAGE
    low_balance_enabled: bool = True
    low_balance_minimum: float = LOW_BALANCE_MINIMUM
    card_limit_enabled: bool = True
    card_limit_threshold: float = CARD_LIMIT_ALERT_PCT
    spending_alert_enabled: bool = True
    weekly_spending_limit: float = WEEKLY_SPENDING_LIMIT
    quiet_hours_enabled: bool = False
    quiet_start: str = "22:00"
    quiet_end: str = "08:00"
