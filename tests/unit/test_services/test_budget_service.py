"""Tests for budget math, alerts and persistence rules."""

from datetime import date

import pytest

from models.budget import Budget
from models.category import Category
from models.transaction import Transaction
from services.budget_service import calculate_summary, generate_alerts, period_end

CATEGORIES = [
    Category(id=1, name="Alimentação", type="expense"),
    Category(id=2, name="Transporte", type="expense"),
]


def _budget(amount=1000.0, category_ids=(1, 2), **kw):
    return Budget(id=1, name="Março", amount=amount, start_date="2024-03-01",
                  end_date="2024-03-31", category_ids=list(category_ids), **kw)


def _expense(tx_id, amount, category_id, day="2024-03-05", type_="expense", account_id=1):
    return Transaction(id=tx_id, description=f"Gasto {tx_id}", amount=amount, type=type_,
                       date=day, category_id=category_id, account_id=account_id)


class TestPeriodEnd:
    """Test end-date derivation."""

    @pytest.mark.parametrize("start,period,expected", [
        (date(2024, 3, 1), "monthly", date(2024, 3, 31)),
        (date(2024, 1, 31), "monthly", date(2024, 2, 28)),
        (date(2024, 3, 1), "quarterly", date(2024, 5, 31)),
        (date(2024, 1, 1), "yearly", date(2024, 12, 31)),
    ])
    def test_periods(self, start, period, expected):
        assert period_end(start, period) == expected

    def test_custom_has_no_derived_end(self):
        with pytest.raises(ValueError, match="data final"):
            period_end(date(2024, 3, 1), "custom")


@pytest.mark.unit
class TestCalculateSummary:
    """Test the pure budget roll-up."""

    def test_spending_and_projection(self):
        transactions = [
            _expense(1, 300.0, 1),
            _expense(2, 200.0, 2, type_="credit_card_expense", account_id=None),
        ]
        summary = calculate_summary(_budget(), transactions, CATEGORIES, date(2024, 3, 11))

        assert summary.total_spent == 500.0
        assert summary.total_remaining == 500.0
        assert summary.percentage_used == 50.0
        assert summary.days_remaining == 20
        assert summary.daily_budget_remaining == 25.0
        assert summary.projected_spending == pytest.approx(15500.0 / 11)
        assert not summary.is_over_budget
        assert [(c.category_name, c.budgeted, c.spent) for c in summary.categories] == [
            ("Alimentação", 500.0, 300.0),
            ("Transporte", 500.0, 200.0),
        ]

    def test_irrelevant_transactions_ignored(self):
        transactions = [
            _expense(1, 100.0, 1),
            _expense(2, 999.0, 1, day="2024-04-01"),
            _expense(3, 999.0, 7),
            _expense(4, 999.0, 1, type_="income"),
            _expense(5, 999.0, 1, type_="transfer"),
        ]
        summary = calculate_summary(_budget(), transactions, CATEGORIES, date(2024, 3, 11))
        assert summary.total_spent == 100.0
        assert summary.categories[0].transaction_count == 1
        assert summary.categories[0].last_transaction_date == "2024-03-05"

    def test_account_filter(self):
        transactions = [_expense(1, 100.0, 1, account_id=1), _expense(2, 50.0, 1, account_id=2)]
        summary = calculate_summary(_budget(account_ids=[2]), transactions, CATEGORIES,
                                    date(2024, 3, 11))
        assert summary.total_spent == 50.0

    def test_unknown_category_name(self):
        summary = calculate_summary(_budget(category_ids=[42]), [], CATEGORIES, date(2024, 3, 11))
        assert summary.categories[0].category_name == "Categoria desconhecida"

    def test_no_days_remaining_after_end(self):
        summary = calculate_summary(_budget(), [], CATEGORIES, date(2024, 4, 10))
        assert summary.days_remaining == 0
        assert summary.daily_budget_remaining == 0.0

    def test_on_pace_projects_the_amount(self):
        transactions = [_expense(day, 10.0, 1, day=f"2024-03-{day:02d}") for day in range(1, 11)]
        summary = calculate_summary(_budget(amount=310.0), transactions, CATEGORIES,
                                    date(2024, 3, 10))
        assert summary.projected_spending == pytest.approx(310.0)

    def test_projection_after_end_is_the_spend(self):
        summary = calculate_summary(_budget(), [_expense(1, 250.0, 1)], CATEGORIES,
                                    date(2024, 5, 20))
        assert summary.projected_spending == pytest.approx(250.0)

    def test_first_day_counts(self):
        summary = calculate_summary(_budget(), [_expense(1, 20.0, 1, day="2024-03-01")],
                                    CATEGORIES, date(2024, 3, 1))
        assert summary.projected_spending == pytest.approx(620.0)


@pytest.mark.unit
class TestGenerateAlerts:
    """Test alert kinds derived from a summary."""

    def _alerts(self, budget, transactions, ref):
        return generate_alerts(calculate_summary(budget, transactions, CATEGORIES, ref))

    def test_projected_overspending(self):
        alerts = self._alerts(_budget(), [_expense(1, 300.0, 1), _expense(2, 200.0, 2)],
                              date(2024, 3, 11))
        assert [a.type for a in alerts] == ["projected_overspending"]
        assert alerts[0].amount_over == 409.09

    def test_threshold_reached(self):
        alerts = self._alerts(_budget(category_ids=[1]), [_expense(1, 850.0, 1)],
                              date(2024, 3, 31))
        assert [a.type for a in alerts] == ["threshold_reached"]
        assert "85%" in alerts[0].message

    def test_exceeded_with_category(self):
        alerts = self._alerts(_budget(), [_expense(1, 700.0, 1), _expense(2, 400.0, 2)],
                              date(2024, 3, 20))
        assert [a.type for a in alerts] == ["budget_exceeded", "category_exceeded"]
        assert alerts[0].amount_over == 100.0
        assert "R$ 100,00" in alerts[0].message
        assert alerts[1].category_id == 1
        assert alerts[1].amount_over == 200.0

    def test_quiet_budget(self):
        assert self._alerts(_budget(), [_expense(1, 10.0, 1)], date(2024, 3, 20)) == []

    def test_on_pace_spending_is_quiet(self):
        transactions = [_expense(day, 10.0, 1, day=f"2024-03-{day:02d}") for day in range(1, 11)]
        assert self._alerts(_budget(amount=310.0), transactions, date(2024, 3, 10)) == []

    def test_zero_amount_with_spending_is_exceeded(self):
        alerts = self._alerts(_budget(amount=0.0), [_expense(1, 50.0, 1)], date(2024, 3, 20))
        assert [a.type for a in alerts] == ["budget_exceeded"]
        assert alerts[0].amount_over == 50.0

    def test_spending_exactly_the_amount_is_not_exceeded(self):
        alerts = self._alerts(_budget(amount=100.0, category_ids=[1]), [_expense(1, 100.0, 1)],
                              date(2024, 3, 31))
        assert [a.type for a in alerts] == ["threshold_reached"]
        assert "100%" in alerts[0].message


@pytest.mark.integration
class TestBudgetService:
    """Test validation and persistence through sqlite."""

    def test_end_date_derived(self, services, category_ids):
        budget = services.budgets.create("Janeiro", 500.0, "2024-01-31",
                                         [category_ids["Lazer"]])
        assert budget.end_date == "2024-02-28"
        quarter = services.budgets.create("Trimestre", 1500.0, "2024-03-01",
                                          [category_ids["Lazer"]], period="quarterly")
        assert quarter.end_date == "2024-05-31"

    @pytest.mark.parametrize("kwargs,message", [
        ({"name": " "}, "nome"),
        ({"amount": -1.0}, "0 ou maior"),
        ({"period": "weekly"}, "Período inválido"),
        ({"period": "custom"}, "data final"),
        ({"start_date": "2024-13-01"}, "Data inicial"),
        ({"end_date": "2024-02-01"}, "posterior"),
        ({"alert_percentage": 0}, "percentual"),
        ({"category_ids": []}, "ao menos uma categoria"),
        ({"category_ids": [4, 4]}, "repetidas"),
        ({"color": "laranja"}, "#RRGGBB"),
    ])
    def test_validation(self, services, kwargs, message):
        args = dict(name="Mês", amount=100.0, start_date="2024-03-01", category_ids=[4])
        args.update(kwargs)
        with pytest.raises(ValueError, match=message):
            services.budgets.create(**args)

    def test_custom_period_with_end(self, services):
        budget = services.budgets.create("Viagem", 4000.0, "2024-06-10", [9],
                                         period="custom", end_date="2024-06-25")
        assert (budget.start_date, budget.end_date) == ("2024-06-10", "2024-06-25")

    def test_update_start_rederives_end(self, services):
        budget = services.budgets.create("Mês", 100.0, "2024-03-01", [4])
        updated = services.budgets.update(budget.id, start_date="2024-04-01")
        assert updated.end_date == "2024-04-30"

    def test_delete_deactivates(self, services):
        budget = services.budgets.create("Mês", 100.0, "2024-03-01", [4])
        services.budgets.delete(budget.id)
        assert services.budgets.get_all() == []
        assert not services.budgets.get_all(include_inactive=True)[0].is_active

    def test_summary_uses_stored_transactions(self, services, checking, category_ids):
        food = category_ids["Alimentação"]
        budget = services.budgets.create("Mês", 400.0, "2024-03-01", [food])
        services.transactions.create("Feira", 100.0, "expense", "2024-03-02",
                                     account_id=checking.id, category_id=food)
        summary = services.budgets.get_summary(budget.id, date(2024, 3, 2))
        assert summary.total_spent == 100.0
        assert summary.percentage_used == 25.0

    def test_refresh_statuses(self, services, checking, category_ids):
        food = category_ids["Alimentação"]
        old = services.budgets.create("Janeiro", 100.0, "2024-01-01", [food])
        current = services.budgets.create("Março", 100.0, "2024-03-01", [food])
        services.transactions.create("Feira", 150.0, "expense", "2024-03-02",
                                     account_id=checking.id, category_id=food)

        assert services.budgets.refresh_statuses(date(2024, 3, 20)) == 2
        assert services.budgets.get_by_id(old.id).status == "completed"
        assert services.budgets.get_by_id(current.id).status == "exceeded"
        assert services.budgets.refresh_statuses(date(2024, 3, 20)) == 0

    def test_missing_budget(self, services):
        with pytest.raises(LookupError):
            services.budgets.get_summary(404)
