import logging
from dataclasses import replace
from models.transaction import (
    Transaction,
    TransactionFilters,
    TRANSACTION_TYPES,
    EXPENSE_TYPES,
)
from utils.constants import MAX_INSTALLMENTS
from utils.date_helpers import parse_date, format_date

logger = logging.getLogger(__name__)


class TransactionService:
    def __init__(self, tx_repo, account_repo, card_repo, bill_repo):
        self._repo = tx_repo
        self._accounts = account_repo
        self._cards = card_repo
        self._bills = bill_repo

    def get_all(self, filters: TransactionFilters | None = None) -> list[Transaction]:
        """Newest first."""
        return self._repo.get_all(filters)

    def get_by_id(self, tx_id: int) -> Transaction | None:
        return self._repo.get_by_id(tx_id)

    def get_by_bill(self, bill_id: int) -> list[Transaction]:
        return self._repo.get_by_bill(bill_id)

    def get_totals(self, filters: TransactionFilters | None = None) -> dict:
        """Income, expenses (account and card) and balance; transfers excluded."""
        income = expenses = 0.0
        for tx in self._repo.get_all(filters):
            if tx.type == "income":
                income += tx.amount
            elif tx.type in EXPENSE_TYPES:
                expenses += tx.amount
        return {
            "income": round(income, 2),
            "expenses": round(expenses, 2),
            "balance": round(income - expenses, 2),
        }

    def create(
        self,
        description: str,
        amount: float,
        type_: str,
        date: str,
        account_id: int | None = None,
        category_id: int | None = None,
        credit_card_id: int | None = None,
        transfer_to_account_id: int | None = None,
        competence_month: int | None = None,
        competence_year: int | None = None,
        bill_id: int | None = None,
        installment_number: int | None = None,
        installment_total: int | None = None,
        is_paid: bool = True,
        notes: str = "",
    ) -> Transaction:
        tx = Transaction(
            id=None,
            description=description.strip(),
            amount=round(amount, 2),
            type=type_,
            date=date,
            competence_month=competence_month,
            competence_year=competence_year,
            account_id=account_id,
            category_id=category_id,
            credit_card_id=credit_card_id,
            bill_id=bill_id,
            transfer_to_account_id=transfer_to_account_id,
            installment_number=installment_number,
            installment_total=installment_total,
            is_paid=is_paid,
            notes=notes.strip(),
        )
        tx = self._prepare(tx)
        created = self._repo.create(tx)
        self._apply(created, sign=1)
        logger.info("Transaction created: %s %.2f (id=%s)", created.type, created.amount, created.id)
        return created

    def create_transfer(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: float,
        date: str,
        description: str = "Transferência",
    ) -> Transaction:
        return self.create(
            description=description,
            amount=amount,
            type_="transfer",
            date=date,
            account_id=from_account_id,
            transfer_to_account_id=to_account_id,
        )

    def update(self, tx_id: int, **changes) -> Transaction:
        """Reverse the old side effects, then apply the new ones."""
        current = self._require(tx_id)
        if "type_" in changes:
            changes["type"] = changes.pop("type_")
        unknown = set(changes) - set(Transaction.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Campo(s) desconhecido(s): {', '.join(sorted(unknown))}.")
        updated = replace(current, **changes)
        if isinstance(updated.description, str):
            updated.description = updated.description.strip()
        if "date" in changes and "competence_month" not in changes:
            updated.competence_month = None
            updated.competence_year = None
        if "credit_card_id" in changes and "bill_id" not in changes:
            updated.bill_id = None
        updated = self._prepare(updated)
        self._apply(current, sign=-1)
        result = self._repo.update(updated)
        self._apply(result, sign=1)
        logger.info("Transaction updated: id=%s", tx_id)
        return result

    def delete(self, tx_id: int):
        tx = self._require(tx_id)
        self._repo.delete(tx_id)
        self._apply(tx, sign=-1)
        logger.info("Transaction deleted: id=%s", tx_id)

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _require(self, tx_id: int) -> Transaction:
        tx = self._repo.get_by_id(tx_id)
        if tx is None:
            raise LookupError(f"Transação {tx_id} não encontrada.")
        return tx

    def _prepare(self, tx: Transaction) -> Transaction:
        """Validate, fill competence from the date and attach card charges to a bill."""
        self._validate(tx)
        d = parse_date(tx.date)
        tx.date = format_date(d)
        if not tx.competence_month or not tx.competence_year:
            tx.competence_month = d.month
            tx.competence_year = d.year
        if tx.credit_card_id and tx.bill_id is None and tx.type in EXPENSE_TYPES:
            bill = self._bills.get_by_card_month(tx.credit_card_id, tx.competence)
            if bill is not None and not bill.is_paid:
                tx.bill_id = bill.id
        return tx

    def _validate(self, tx: Transaction):
        if not tx.description:
            raise ValueError("A descrição é obrigatória.")
        if tx.type not in TRANSACTION_TYPES:
            raise ValueError(
                f"Tipo de transação inválido '{tx.type}'. "
                f"Use um de: {', '.join(TRANSACTION_TYPES)}."
            )
        if tx.amount is None or tx.amount < 0.01:
            raise ValueError("O valor deve ser de pelo menos R$ 0,01.")
        if not parse_date(tx.date):
            raise ValueError("Data inválida.")
        if tx.competence_month is not None and not 1 <= tx.competence_month <= 12:
            raise ValueError("O mês de competência deve estar entre 1 e 12.")

        if tx.type == "income" and not tx.account_id:
            raise ValueError("Receitas precisam de uma conta.")
        if tx.type == "expense" and not (tx.account_id or tx.credit_card_id):
            raise ValueError("Despesas precisam de uma conta ou de um cartão.")
        if tx.type == "credit_card_expense" and not tx.credit_card_id:
            raise ValueError("Despesas no cartão precisam de um cartão.")
        if tx.type == "transfer":
            if not tx.account_id or not tx.transfer_to_account_id:
                raise ValueError("Transferências precisam das contas de origem e destino.")
            if tx.account_id == tx.transfer_to_account_id:
                raise ValueError("A conta de origem e a de destino devem ser diferentes.")

        for account_id in (tx.account_id, tx.transfer_to_account_id):
            if account_id and self._accounts.get_by_id(account_id) is None:
                raise ValueError(f"Conta {account_id} não encontrada.")
        if tx.credit_card_id and self._cards.get_by_id(tx.credit_card_id) is None:
            raise ValueError(f"Cartão {tx.credit_card_id} não encontrado.")

        if tx.installment_total is not None:
            if not 1 <= tx.installment_total <= MAX_INSTALLMENTS:
                raise ValueError(f"O número de parcelas deve estar entre 1 e {MAX_INSTALLMENTS}.")
            if tx.installment_number is None or not 1 <= tx.installment_number <= tx.installment_total:
                raise ValueError("Parcela inválida.")

    def _apply(self, tx: Transaction, sign: int):
        """Book (sign=1) or reverse (sign=-1) a transaction's effect on balances.

        Unpaid account movements do not touch the balance; card charges
        always consume limit and feed the open bill.
        """
        amount = tx.amount * sign
        if tx.type == "income":
            if tx.is_paid:
                self._accounts.adjust_balance(tx.account_id, amount)
        elif tx.type == "transfer":
            self._accounts.adjust_balance(tx.account_id, -amount)
            self._accounts.adjust_balance(tx.transfer_to_account_id, amount)
        elif tx.type == "expense" and tx.account_id:
            if tx.is_paid:
                self._accounts.adjust_balance(tx.account_id, -amount)
        elif tx.credit_card_id:
            self._cards.adjust_available_limit(tx.credit_card_id, -amount)
            if tx.bill_id:
                bill = self._bills.get_by_id(tx.bill_id)
                if bill is not None and not bill.is_paid:
                    bill.total_amount = max(0.0, round(bill.total_amount + amount, 2))
                    self._bills.update(bill)
