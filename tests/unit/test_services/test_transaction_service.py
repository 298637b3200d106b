"""Tests for transaction validation and balance bookkeeping."""

from datetime import date

import pytest

from models.transaction import TransactionFilters


@pytest.mark.integration
class TestValidation:
    """Test rejected transactions."""

    @pytest.mark.parametrize("overrides,message", [
        ({"amount": 0.0}, "R\\$ 0,01"),
        ({"amount": 0.004}, "R\\$ 0,01"),
        ({"type_": "refund"}, "Tipo de transação"),
        ({"date": "31/02/2024"}, "Data inválida"),
        ({"date": ""}, "Data inválida"),
        ({"description": "   "}, "descrição"),
        ({"account_id": None}, "Receitas precisam"),
    ])
    def test_income_validation(self, services, checking, overrides, message):
        kwargs = dict(description="Salário", amount=100.0, type_="income",
                      date="2024-03-05", account_id=checking.id)
        kwargs.update(overrides)
        with pytest.raises(ValueError, match=message):
            services.transactions.create(**kwargs)

    def test_expense_needs_account_or_card(self, services):
        with pytest.raises(ValueError, match="conta ou de um cartão"):
            services.transactions.create("Mercado", 10.0, "expense", "2024-03-05")

    def test_card_expense_needs_card(self, services, checking):
        with pytest.raises(ValueError, match="precisam de um cartão"):
            services.transactions.create("Mercado", 10.0, "credit_card_expense",
                                         "2024-03-05", account_id=checking.id)

    def test_transfer_needs_distinct_accounts(self, services, checking):
        with pytest.raises(ValueError, match="diferentes"):
            services.transactions.create_transfer(checking.id, checking.id, 10.0, "2024-03-05")

    def test_unknown_account(self, services):
        with pytest.raises(ValueError, match="não encontrada"):
            services.transactions.create("Salário", 10.0, "income", "2024-03-05", account_id=99)


@pytest.mark.integration
class TestBalances:
    """Test side effects on accounts and cards."""

    def _balance(self, services, account_id):
        return services.accounts.get_by_id(account_id).balance

    def test_income_credits(self, services, checking):
        services.transactions.create("Salário", 1000.0, "income", "2024-03-05",
                                     account_id=checking.id)
        assert self._balance(services, checking.id) == 6000.0

    def test_expense_debits(self, services, checking):
        services.transactions.create("Aluguel", 1800.0, "expense", "2024-03-05",
                                     account_id=checking.id)
        assert self._balance(services, checking.id) == 3200.0

    def test_unpaid_expense_leaves_balance(self, services, checking):
        services.transactions.create("Luz", 200.0, "expense", "2024-03-05",
                                     account_id=checking.id, is_paid=False)
        assert self._balance(services, checking.id) == 5000.0

    def test_transfer_moves_money(self, services, checking):
        savings = services.accounts.create("Poupança", account_type="savings")
        services.transactions.create_transfer(checking.id, savings.id, 500.0, "2024-03-05")
        assert self._balance(services, checking.id) == 4500.0
        assert self._balance(services, savings.id) == 500.0

    def test_delete_reverses(self, services, checking):
        tx = services.transactions.create("Aluguel", 1800.0, "expense", "2024-03-05",
                                          account_id=checking.id)
        services.transactions.delete(tx.id)
        assert self._balance(services, checking.id) == 5000.0
        assert services.transactions.get_by_id(tx.id) is None

    def test_update_reverses_then_applies(self, services, checking):
        tx = services.transactions.create("Aluguel", 1800.0, "expense", "2024-03-05",
                                          account_id=checking.id)
        services.transactions.update(tx.id, amount=1500.0)
        assert self._balance(services, checking.id) == 3500.0
        services.transactions.update(tx.id, type_="income")
        assert self._balance(services, checking.id) == 6500.0

    def test_card_expense_uses_limit_and_bill(self, services, credit_card):
        bill = services.bills.generate_future_bills(credit_card, months=1,
                                                    ref=date(2024, 3, 1))[0]
        tx = services.transactions.create("Restaurante", 120.0, "credit_card_expense",
                                          "2024-03-08", credit_card_id=credit_card.id)
        assert tx.bill_id == bill.id
        assert services.cards.get_by_id(credit_card.id).available_limit == 2880.0
        assert services.bills.get_by_id(bill.id).total_amount == 120.0

        services.transactions.delete(tx.id)
        assert services.cards.get_by_id(credit_card.id).available_limit == 3000.0
        assert services.bills.get_by_id(bill.id).total_amount == 0.0


@pytest.mark.integration
class TestQueries:
    """Test defaults, ordering, filters and totals."""

    def test_competence_defaults_from_date(self, services, checking):
        tx = services.transactions.create("Salário", 10.0, "income", "2024-03-05",
                                          account_id=checking.id)
        assert (tx.competence_month, tx.competence_year) == (3, 2024)
        assert tx.competence == "2024-03"

    def test_explicit_competence_kept(self, services, checking):
        tx = services.transactions.create("13º", 10.0, "income", "2024-12-20",
                                          account_id=checking.id,
                                          competence_month=1, competence_year=2025)
        assert tx.competence == "2025-01"

    def test_newest_first(self, services, checking):
        first = services.transactions.create("A", 1.0, "income", "2024-03-01",
                                             account_id=checking.id)
        second = services.transactions.create("B", 1.0, "income", "2024-03-01",
                                              account_id=checking.id)
        third = services.transactions.create("C", 1.0, "income", "2024-03-10",
                                             account_id=checking.id)
        ids = [t.id for t in services.transactions.get_all()]
        assert ids == [third.id, second.id, first.id]

    def test_filters(self, services, checking, category_ids):
        services.transactions.create("Supermercado Extra", 300.0, "expense", "2024-03-05",
                                     account_id=checking.id,
                                     category_id=category_ids["Alimentação"])
        services.transactions.create("Uber", 40.0, "expense", "2024-03-06",
                                     account_id=checking.id,
                                     category_id=category_ids["Transporte"])
        services.transactions.create("Salário", 7000.0, "income", "2024-04-05",
                                     account_id=checking.id)

        march = TransactionFilters(start_date="2024-03-01", end_date="2024-03-31")
        assert len(services.transactions.get_all(march)) == 2
        search = services.transactions.get_all(TransactionFilters(search="extra"))
        assert [t.description for t in search] == ["Supermercado Extra"]
        assert search[0].category_name == "Alimentação"
        by_amount = services.transactions.get_all(TransactionFilters(min_amount=100.0,
                                                                     max_amount=500.0))
        assert [t.description for t in by_amount] == ["Supermercado Extra"]

    def test_totals_exclude_transfers(self, services, checking):
        savings = services.accounts.create("Poupança", account_type="savings")
        services.transactions.create("Salário", 7000.0, "income", "2024-03-05",
                                     account_id=checking.id)
        services.transactions.create("Aluguel", 1800.0, "expense", "2024-03-06",
                                     account_id=checking.id)
        services.transactions.create_transfer(checking.id, savings.id, 500.0, "2024-03-07")
        assert services.transactions.get_totals() == {
            "income": 7000.0, "expenses": 1800.0, "balance": 5200.0,
        }
