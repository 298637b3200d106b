import logging
from datetime import date, timedelta
from models.bill import CreditCardBill
from models.credit_card import CreditCard
from services.transaction_service import TransactionService
from utils.constants import BILL_DUE_OFFSET_DAYS, MAX_INSTALLMENTS
from utils.currency import split_in_cents
from utils.date_helpers import (
    today, format_date, format_month, parse_date, add_months, clamp_day_to_month, now_str,
)

logger = logging.getLogger(__name__)


class BillService:
    def __init__(self, bill_repo, card_repo, account_repo, tx_service: TransactionService):
        self._repo = bill_repo
        self._cards = card_repo
        self._accounts = account_repo
        self._tx = tx_service

    # ── Queries ──────────────────────────────────────────────────────────────

    def get_all(self) -> list[CreditCardBill]:
        return self._repo.get_all()

    def get_by_id(self, bill_id: int) -> CreditCardBill | None:
        return self._repo.get_by_id(bill_id)

    def get_by_card(self, card_id: int) -> list[CreditCardBill]:
        """Newest reference month first."""
        return self._repo.get_by_card(card_id)

    def get_open(self) -> list[CreditCardBill]:
        return [b for b in self._repo.get_all() if not b.is_paid]

    def get_paid(self) -> list[CreditCardBill]:
        return [b for b in self._repo.get_all() if b.is_paid]

    def get_by_period(self, start: str, end: str) -> list[CreditCardBill]:
        """Bills whose due date falls within [start, end] (YYYY-MM-DD)."""
        return [b for b in self._repo.get_all() if start <= b.due_date <= end]

    def get_current(self, card_id: int, ref: date | None = None) -> CreditCardBill | None:
        return self._repo.get_by_card_month(card_id, format_month(ref or today()))

    def get_next_due(self, card_id: int, ref: date | None = None) -> CreditCardBill | None:
        """Earliest unpaid bill of the card due today or later."""
        ref_str = format_date(ref or today())
        upcoming = [
            b for b in self._repo.get_by_card(card_id)
            if not b.is_paid and b.due_date >= ref_str
        ]
        return min(upcoming, key=lambda b: b.due_date) if upcoming else None

    def get_overdue(self, ref: date | None = None) -> list[CreditCardBill]:
        ref = ref or today()
        return [b for b in self._repo.get_all() if b.is_overdue(ref)]

    def total_open(self) -> float:
        return round(sum(b.total_amount for b in self.get_open()), 2)

    def total_paid_in_period(self, start: str, end: str) -> float:
        """Sum of bills paid with paid_at within [start, end]."""
        total = 0.0
        for b in self.get_paid():
            paid_on = (b.paid_at or "")[:10]
            if paid_on and start <= paid_on <= end:
                total += b.total_amount
        return round(total, 2)

    # ── Generation ───────────────────────────────────────────────────────────

    def generate_future_bills(
        self, card: CreditCard, months: int = 3, ref: date | None = None
    ) -> list[CreditCardBill]:
        """Create the next `months` bills of a card, skipping months that exist.

        Closing date is the card's closing day clamped to the month length;
        the due date follows BILL_DUE_OFFSET_DAYS later.
        """
        if not card.has_credit_function or not card.closing_day:
            raise ValueError("O cartão não possui ciclo de fatura.")
        if months < 1:
            raise ValueError("Informe ao menos 1 mês.")
        first = (ref or today()).replace(day=1)
        created = []
        for i in range(months):
            month_start = add_months(first, i)
            reference_month = format_month(month_start)
            if self._repo.get_by_card_month(card.id, reference_month):
                continue
            day = clamp_day_to_month(month_start.year, month_start.month, card.closing_day)
            closing = month_start.replace(day=day)
            bill = CreditCardBill(
                id=None,
                card_id=card.id,
                reference_month=reference_month,
                closing_date=format_date(closing),
                due_date=format_date(closing + timedelta(days=BILL_DUE_OFFSET_DAYS)),
                card_name=card.name,
            )
            created.append(self._repo.create(bill))
        if created:
            logger.info("Generated %d bill(s) for card %s", len(created), card.id)
        return created

    def recalculate_total(self, bill_id: int) -> CreditCardBill:
        """Reset the bill total to the sum of the card charges linked to it."""
        bill = self._require(bill_id)
        charges = [t for t in self._tx.get_by_bill(bill_id) if t.is_expense]
        bill.total_amount = round(sum(t.amount for t in charges), 2)
        return self._repo.update(bill)

    # ── Payment ──────────────────────────────────────────────────────────────

    def pay_bill(
        self,
        bill_id: int,
        account_id: int,
        installments: int = 1,
        payment_date: str | None = None,
    ) -> CreditCardBill:
        """Pay a bill from an account, optionally in monthly installments.

        Installment payments create one dated expense per month, each booked
        against the account now; the bill is marked paid immediately and points
        at the first payment.
        """
        bill = self._require(bill_id)
        if bill.is_paid:
            raise ValueError("Esta fatura já foi paga.")
        if not 1 <= installments <= MAX_INSTALLMENTS:
            raise ValueError(f"O número de parcelas deve estar entre 1 e {MAX_INSTALLMENTS}.")
        if bill.total_amount <= 0:
            raise ValueError("A fatura não possui valor a pagar.")
        account = self._accounts.get_by_id(account_id)
        if account is None or not account.is_active:
            raise ValueError("Selecione uma conta ativa para o pagamento.")
        card = self._cards.get_by_id(bill.card_id)
        card_name = card.name if card else bill.card_name
        start = parse_date(payment_date) if payment_date else today()
        if start is None:
            raise ValueError("Data de pagamento inválida.")

        payments = []
        if installments == 1:
            payments.append(self._tx.create(
                description=f"Pagamento Fatura {card_name}",
                amount=bill.total_amount,
                type_="expense",
                date=format_date(start),
                account_id=account_id,
            ))
        else:
            for i, amount in enumerate(split_in_cents(bill.total_amount, installments), start=1):
                payments.append(self._tx.create(
                    description=f"Fatura {card_name} ({i}/{installments})",
                    amount=amount,
                    type_="expense",
                    date=format_date(add_months(start, i - 1)),
                    account_id=account_id,
                    installment_number=i,
                    installment_total=installments,
                ))

        bill.is_paid = True
        bill.paid_at = now_str()
        bill.payment_transaction_id = payments[0].id
        paid = self._repo.update(bill)
        if card is not None:
            self._cards.adjust_available_limit(card.id, bill.total_amount)
        logger.info("Bill %s paid from account %s in %d installment(s)",
                    bill_id, account_id, installments)
        return paid

    def _require(self, bill_id: int) -> CreditCardBill:
        bill = self._repo.get_by_id(bill_id)
        if bill is None:
            raise LookupError(f"Fatura {bill_id} não encontrada.")
        return bill
