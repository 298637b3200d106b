"""Tests for bill generation and payment."""

from datetime import date

import pytest

from models.bill import CreditCardBill


class TestBillModel:
    """Test due-date arithmetic on the bill itself."""

    def _bill(self, **kw):
        return CreditCardBill(id=1, card_id=1, reference_month="2024-03",
                              closing_date="2024-03-05", due_date="2024-03-15", **kw)

    def test_days_until_due_is_signed(self):
        bill = self._bill()
        assert bill.days_until_due(date(2024, 3, 10)) == 5
        assert bill.days_until_due(date(2024, 3, 18)) == -3

    def test_overdue_only_when_unpaid(self):
        assert self._bill().is_overdue(date(2024, 3, 16))
        assert not self._bill().is_overdue(date(2024, 3, 15))
        assert not self._bill(is_paid=True).is_overdue(date(2024, 3, 16))


@pytest.mark.integration
class TestGeneration:
    """Test generate_future_bills."""

    def test_closing_day_clamped(self, services):
        card = services.cards.create("Fim do mês", last_digits="3131",
                                     credit_limit=1000.0, closing_day=31, due_day=10)
        bills = services.bills.generate_future_bills(card, months=3, ref=date(2024, 2, 10))
        assert [(b.reference_month, b.closing_date, b.due_date) for b in bills] == [
            ("2024-02", "2024-02-29", "2024-03-10"),
            ("2024-03", "2024-03-31", "2024-04-10"),
            ("2024-04", "2024-04-30", "2024-05-10"),
        ]

    def test_existing_months_skipped(self, services, credit_card):
        services.bills.generate_future_bills(credit_card, months=2, ref=date(2024, 3, 1))
        again = services.bills.generate_future_bills(credit_card, months=3, ref=date(2024, 3, 1))
        assert [b.reference_month for b in again] == ["2024-05"]
        assert len(services.bills.get_by_card(credit_card.id)) == 3

    def test_card_without_cycle_rejected(self, services):
        debit = services.cards.create("Débito", card_type="debit", last_digits="1111")
        with pytest.raises(ValueError, match="ciclo"):
            services.bills.generate_future_bills(debit)

    def test_queries(self, services, credit_card):
        services.bills.generate_future_bills(credit_card, months=3, ref=date(2024, 3, 1))
        assert services.bills.get_current(credit_card.id, date(2024, 4, 2)).reference_month == "2024-04"
        assert services.bills.get_next_due(credit_card.id, date(2024, 3, 16)).due_date == "2024-04-15"
        overdue = services.bills.get_overdue(date(2024, 4, 16))
        assert [b.reference_month for b in overdue] == ["2024-03", "2024-04"]
        in_april = services.bills.get_by_period("2024-04-01", "2024-04-30")
        assert [b.reference_month for b in in_april] == ["2024-04"]


@pytest.mark.integration
class TestPayment:
    """Test pay_bill in one go and in installments."""

    @pytest.fixture
    def charged_bill(self, services, credit_card):
        bill = services.bills.generate_future_bills(credit_card, months=1,
                                                    ref=date(2024, 3, 1))[0]
        services.transactions.create("Mercado", 100.0, "credit_card_expense",
                                     "2024-03-03", credit_card_id=credit_card.id)
        return services.bills.get_by_id(bill.id)

    def test_single_payment(self, services, checking, credit_card, charged_bill):
        assert charged_bill.total_amount == 100.0
        paid = services.bills.pay_bill(charged_bill.id, checking.id, payment_date="2024-03-15")

        assert paid.is_paid
        assert paid.paid_at
        payment = services.transactions.get_by_id(paid.payment_transaction_id)
        assert payment.description == "Pagamento Fatura Cartão Roxo"
        assert payment.amount == 100.0
        assert payment.date == "2024-03-15"
        assert services.accounts.get_by_id(checking.id).balance == 4900.0
        assert services.cards.get_by_id(credit_card.id).available_limit == 3000.0
        assert services.bills.total_open() == 0.0
        assert services.bills.total_paid_in_period("2000-01-01", "2999-12-31") == 100.0

    def test_installments(self, services, checking, charged_bill):
        services.bills.pay_bill(charged_bill.id, checking.id, installments=3,
                                payment_date="2024-03-15")
        payments = sorted(
            (t for t in services.transactions.get_all() if t.installment_total == 3),
            key=lambda t: t.installment_number,
        )
        assert [t.amount for t in payments] == [33.33, 33.33, 33.34]
        assert [t.description for t in payments] == [
            "Fatura Cartão Roxo (1/3)",
            "Fatura Cartão Roxo (2/3)",
            "Fatura Cartão Roxo (3/3)",
        ]
        assert [t.date for t in payments] == ["2024-03-15", "2024-04-15", "2024-05-15"]
        assert all(t.is_paid for t in payments)
        assert services.accounts.get_by_id(checking.id).balance == 4900.0
        assert services.cards.get_by_id(charged_bill.card_id).available_limit == 3000.0

    def test_already_paid(self, services, checking, charged_bill):
        services.bills.pay_bill(charged_bill.id, checking.id)
        with pytest.raises(ValueError, match="já foi paga"):
            services.bills.pay_bill(charged_bill.id, checking.id)

    @pytest.mark.parametrize("installments", [0, 37])
    def test_installment_bounds(self, services, checking, charged_bill, installments):
        with pytest.raises(ValueError, match="parcelas"):
            services.bills.pay_bill(charged_bill.id, checking.id, installments=installments)

    def test_unknown_account(self, services, charged_bill):
        with pytest.raises(ValueError, match="conta ativa"):
            services.bills.pay_bill(charged_bill.id, 999)

    def test_unknown_bill(self, services, checking):
        with pytest.raises(LookupError):
            services.bills.pay_bill(999, checking.id)

    def test_recalculate_total(self, services, charged_bill):
        # Manual drift gets corrected from the linked charges
        bill = services.bills.get_by_id(charged_bill.id)
        bill.total_amount = 5.0
        services.bills._repo.update(bill)
        assert services.bills.recalculate_total(charged_bill.id).total_amount == 100.0
