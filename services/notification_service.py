import json
import logging
from dataclasses import asdict, fields
from datetime import datetime, time
from models.notification import Notification, NotificationSettings
from models.transaction import TransactionFilters, EXPENSE_TYPES
from services.budget_service import BudgetService
from utils.constants import CRITICAL_BALANCE
from utils.currency import format_currency
from utils.date_helpers import (
    format_date, parse_date, start_of_next_month, week_ago, DATETIME_FORMAT,
)

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3}


# ── Push message helpers ──────────────────────────────────────────────────────

def bill_due_message(card_name: str, amount: float, days: int) -> tuple[str, str]:
    when = "hoje" if days == 0 else ("amanhã" if days == 1 else f"em {days} dias")
    return (
        "Fatura vencendo",
        f"A fatura do {card_name} de {format_currency(amount)} vence {when}.",
    )


def bill_overdue_message(card_name: str, amount: float, days_late: int) -> tuple[str, str]:
    return (
        "Fatura vencida",
        f"A fatura do {card_name} de {format_currency(amount)} está vencida há "
        f"{days_late} dia{'s' if days_late != 1 else ''}.",
    )


def card_limit_message(card_name: str, usage_pct: float) -> tuple[str, str]:
    if usage_pct >= 95:
        level = "quase esgotado"
    elif usage_pct >= 80:
        level = "alto"
    else:
        level = "em uso"
    return (
        "Limite do cartão",
        f"O limite do {card_name} está {level}: {usage_pct:.0f}% utilizado.",
    )


def low_balance_message(account_name: str, balance: float, minimum: float) -> tuple[str, str]:
    level = "muito baixo" if balance < minimum / 2 else "baixo"
    return (
        "Saldo baixo",
        f"O saldo da conta {account_name} está {level}: {format_currency(balance)}.",
    )


def is_quiet_time(settings: NotificationSettings, now: datetime) -> bool:
    """True inside the quiet window; the window may wrap past midnight."""
    if not settings.quiet_hours_enabled:
        return False
    start = time.fromisoformat(settings.quiet_start)
    end = time.fromisoformat(settings.quiet_end)
    current = now.time()
    if start <= end:
        return start <= current < end
    return current >= start or current < end


class NotificationService:
    """Derives notifications from already-loaded data on every refresh.

    Only the user's read/dismissed reactions are persisted (NotificationStateDAO).
    """

    def __init__(
        self,
        account_repo,
        card_repo,
        bill_repo,
        tx_repo,
        budget_service: BudgetService,
        state_dao,
        settings_store,
        user_id: int,
    ):
        self._accounts = account_repo
        self._cards = card_repo
        self._bills = bill_repo
        self._tx = tx_repo
        self._budgets = budget_service
        self._states = state_dao
        self._settings_store = settings_store
        self._settings_key = f"notification_settings:{user_id}"

    # ── Settings ─────────────────────────────────────────────────────────────

    def load_settings(self) -> NotificationSettings:
        raw = self._settings_store.get_setting(self._settings_key, "")
        if not raw:
            return NotificationSettings()
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring corrupt notification settings")
            return NotificationSettings()
        names = {f.name for f in fields(NotificationSettings)}
        return NotificationSettings(**{k: v for k, v in data.items() if k in names})

    def save_settings(self, settings: NotificationSettings):
        if settings.bill_days_before < 0:
            raise ValueError("Os dias de antecedência devem ser 0 ou mais.")
        if not 1 <= settings.budget_threshold <= 100:
            raise ValueError("O limite de alerta do orçamento deve estar entre 1 e 100.")
        if not 1 <= settings.card_limit_threshold <= 100:
            raise ValueError("O limite de alerta do cartão deve estar entre 1 e 100.")
        if settings.low_balance_minimum < 0 or settings.weekly_spending_limit < 0:
            raise ValueError("Os valores mínimos devem ser 0 ou maiores.")
        for value in (settings.quiet_start, settings.quiet_end):
            try:
                time.fromisoformat(value)
            except ValueError:
                raise ValueError(f"Horário inválido: '{value}'. Use HH:MM.") from None
        self._settings_store.set_setting(self._settings_key, json.dumps(asdict(settings)))

    # ── Generation ───────────────────────────────────────────────────────────

    def generate(self, now: datetime | None = None) -> list[Notification]:
        """All notifications for the moment `now`, ignoring persisted states."""
        now = now or datetime.now()
        settings = self.load_settings()
        stamp = now.strftime(DATETIME_FORMAT)
        items: list[Notification] = []
        if settings.bill_reminders_enabled:
            items += self._check_bills(now, stamp, settings)
        if settings.card_limit_enabled:
            items += self._check_cards(stamp, settings)
        if settings.low_balance_enabled:
            items += self._check_balances(stamp, settings)
        if settings.spending_alert_enabled:
            items += self._check_spending(now, stamp, settings)
        if settings.budget_alerts_enabled:
            items += self._check_budgets(now, stamp, settings)
        return items

    def get_notifications(self, now: datetime | None = None) -> list[Notification]:
        """Generated notifications with states applied; dismissed ones dropped.

        Newest first, then by priority.
        """
        now = now or datetime.now()
        states = self._states.get_active_states(format_date(now.date()))
        visible = []
        for n in self.generate(now):
            status = states.get(n.key)
            if status in ("dismissed", "archived"):
                continue
            if status:
                n.status = status
            visible.append(n)
        visible.sort(key=lambda n: PRIORITY_ORDER[n.priority])
        visible.sort(key=lambda n: n.created_at, reverse=True)
        return visible

    def unread_count(self, now: datetime | None = None) -> int:
        return sum(1 for n in self.get_notifications(now) if n.is_unread)

    # ── State changes ────────────────────────────────────────────────────────

    def mark_read(self, key: str, now: datetime | None = None):
        self._states.set_state(key, "read", self._expiry(now))

    def mark_all_read(self, now: datetime | None = None):
        for n in self.get_notifications(now):
            if n.is_unread:
                self.mark_read(n.key, now)

    def dismiss(self, key: str, now: datetime | None = None):
        self._states.set_state(key, "dismissed", self._expiry(now))
        logger.debug("Notification dismissed: %s", key)

    def clear_all(self, now: datetime | None = None):
        for n in self.get_notifications(now):
            self.dismiss(n.key, now)

    @staticmethod
    def _expiry(now: datetime | None) -> str:
        """States expire at the start of next month so recurring problems resurface."""
        ref = (now or datetime.now()).date()
        return format_date(start_of_next_month(ref))

    # ── Rules ────────────────────────────────────────────────────────────────

    def _check_bills(self, now: datetime, stamp: str, settings) -> list[Notification]:
        ref = now.date()
        items = []
        for bill in self._bills.get_all():
            if bill.is_paid:
                continue
            days = bill.days_until_due(ref)
            card_name = bill.card_name or f"cartão {bill.card_id}"
            meta = {"bill_id": bill.id, "card_id": bill.card_id,
                    "amount": bill.total_amount, "due_date": bill.due_date}
            if days < 0:
                title, message = bill_overdue_message(card_name, bill.total_amount, -days)
                items.append(Notification(
                    key=f"bill:{bill.id}:overdue", type="bill_overdue", priority="critical",
                    title=title, message=message, created_at=stamp, metadata=meta,
                    action_url=f"/cards/{bill.card_id}/bills/{bill.id}",
                ))
            elif days <= settings.bill_days_before:
                title, message = bill_due_message(card_name, bill.total_amount, days)
                items.append(Notification(
                    key=f"bill:{bill.id}:due", type="bill_due",
                    priority="high" if days == 0 else "medium",
                    title=title, message=message, created_at=stamp, metadata=meta,
                    action_url=f"/cards/{bill.card_id}/bills/{bill.id}",
                ))
        return items

    def _check_cards(self, stamp: str, settings) -> list[Notification]:
        items = []
        for card in self._cards.get_all():
            if not card.has_credit_function or card.credit_limit <= 0:
                continue
            usage = card.usage_percentage
            if usage > settings.card_limit_threshold:
                title, message = card_limit_message(card.name, usage)
                items.append(Notification(
                    key=f"card:{card.id}:limit", type="card_limit", priority="high",
                    title=title, message=message, created_at=stamp,
                    metadata={"card_id": card.id, "usage_percentage": round(usage, 1)},
                    action_url=f"/cards/{card.id}",
                ))
        return items

    def _check_balances(self, stamp: str, settings) -> list[Notification]:
        items = []
        for account in self._accounts.get_all():
            if account.account_type != "checking":
                continue
            if account.balance < settings.low_balance_minimum:
                title, message = low_balance_message(
                    account.name, account.balance, settings.low_balance_minimum
                )
                items.append(Notification(
                    key=f"account:{account.id}:low_balance", type="low_balance",
                    priority="high" if account.balance < CRITICAL_BALANCE else "medium",
                    title=title, message=message, created_at=stamp,
                    metadata={"account_id": account.id, "balance": account.balance},
                    action_url=f"/accounts/{account.id}",
                ))
        return items

    def _check_spending(self, now: datetime, stamp: str, settings) -> list[Notification]:
        ref = now.date()
        start = format_date(week_ago(ref))
        recent = self._tx.get_all(TransactionFilters(start_date=start, end_date=format_date(ref)))
        # Strictly after the start day: the last seven days including today
        total = sum(t.amount for t in recent if t.type in EXPENSE_TYPES and t.date > start)
        if total <= settings.weekly_spending_limit:
            return []
        return [Notification(
            key=f"spending:{format_date(ref)}", type="spending_alert", priority="medium",
            title="Gastos elevados",
            message=(
                f"Você gastou {format_currency(total)} nos últimos 7 dias, acima de "
                f"{format_currency(settings.weekly_spending_limit)}."
            ),
            created_at=stamp, metadata={"total": round(total, 2)},
            action_url="/transactions",
        )]

    def _check_budgets(self, now: datetime, stamp: str, settings) -> list[Notification]:
        items = []
        for summary in self._budgets.get_summaries(now.date()):
            budget = summary.budget
            if parse_date(budget.end_date) < now.date():
                continue
            pct = summary.percentage_used
            if summary.is_over_budget:
                items.append(Notification(
                    key=f"budget:{budget.id}:exceeded", type="budget_exceeded", priority="high",
                    title="Orçamento excedido",
                    message=(
                        f"'{budget.name}' está em {pct:.0f}%: "
                        f"{format_currency(summary.total_spent)} de {format_currency(budget.amount)}."
                    ),
                    created_at=stamp, metadata={"budget_id": budget.id, "percentage": round(pct, 1)},
                    action_url="/budgets",
                ))
            elif pct >= settings.budget_threshold:
                items.append(Notification(
                    key=f"budget:{budget.id}:threshold", type="budget_exceeded", priority="medium",
                    title="Orçamento perto do limite",
                    message=f"'{budget.name}' já usou {pct:.0f}% do valor planejado.",
                    created_at=stamp, metadata={"budget_id": budget.id, "percentage": round(pct, 1)},
                    action_url="/budgets",
                ))
        return items
