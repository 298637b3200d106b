"""Tests for the in-memory fixture store."""

from datetime import date

from datasource.mock_store import MockStore
from models.account import Account


class TestMockStore:
    """Test fixture content and copy semantics."""

    def test_stats(self, mock_store):
        assert mock_store.stats() == {
            "total_balance": 20770.5,
            "total_credit_limit": 13000.0,
            "total_available_limit": 9850.0,
            "total_open_bills": 3150.0,
            "account_count": 4,
            "card_count": 3,
            "transaction_count": 10,
        }

    def test_dates_follow_reference_day(self, mock_store):
        bills = mock_store.bill_repository()
        assert bills.get_by_id(2).due_date == "2024-03-22"
        assert bills.get_by_id(2).card_name == "Nubank Roxinho"
        budgets = mock_store.budget_repository().get_all()
        assert {(b.start_date, b.end_date) for b in budgets} == {("2024-03-01", "2024-03-31")}

    def test_returned_models_are_copies(self, mock_store):
        repo = mock_store.account_repository()
        account = repo.get_by_id(1)
        account.balance = 0.0
        assert repo.get_by_id(1).balance == 5420.5

    def test_inactive_hidden_by_default(self, mock_store):
        repo = mock_store.account_repository()
        assert [a.id for a in repo.get_all()] == [1, 3, 4, 2]
        assert len(repo.get_all(include_inactive=True)) == 5

    def test_create_assigns_next_id(self, mock_store):
        created = mock_store.account_repository().create(
            Account(id=None, name="Nova", account_type="cash")
        )
        assert created.id == 6

    def test_reset_restores_fixtures(self):
        store = MockStore(ref_date=date(2024, 3, 20))
        store.account_repository().adjust_balance(1, -420.5)
        assert store.account_repository().get_by_id(1).balance == 5000.0
        store.reset()
        assert store.account_repository().get_by_id(1).balance == 5420.5

    def test_transactions_carry_category_names(self, mock_store):
        tx = mock_store.transaction_repository().get_by_id(3)
        assert tx.category_name == "Alimentação"
