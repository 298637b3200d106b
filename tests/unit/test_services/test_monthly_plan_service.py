"""Tests for monthly spending plans."""

import pytest

from models.category import Category
from models.monthly_plan import CategoryPlan, MonthlyPlan
from models.transaction import Transaction
from services.monthly_plan_service import MonthlyPlanService, plan_status


@pytest.mark.parametrize("spent,planned,expected", [
    (0.0, 100.0, "safe"),
    (69.99, 100.0, "safe"),
    (70.0, 100.0, "warning"),
    (89.99, 100.0, "warning"),
    (90.0, 100.0, "danger"),
    (100.0, 100.0, "danger"),
    (100.01, 100.0, "exceeded"),
    (0.0, 0.0, "safe"),
    (5.0, 0.0, "exceeded"),
])
def test_plan_status(spent, planned, expected):
    assert plan_status(spent, planned) == expected


@pytest.mark.unit
class TestCalculateSummary:
    """Test the pure plan-versus-actual comparison."""

    def test_statuses_and_alerts(self):
        plan = MonthlyPlan(id=1, month=3, year=2024, total_budget=400.0, category_budgets=[
            CategoryPlan(1, 100.0), CategoryPlan(2, 200.0),
        ])
        categories = [Category(id=1, name="Lazer", type="expense"),
                      Category(id=2, name="Alimentação", type="expense")]
        transactions = [
            Transaction(id=1, description="Cinema", amount=95.0, type="expense",
                        date="2024-03-02", category_id=1),
            Transaction(id=2, description="Mercado", amount=250.0,
                        type="credit_card_expense", date="2024-03-03", category_id=2),
            Transaction(id=3, description="Abril", amount=500.0, type="expense",
                        date="2024-04-01", category_id=1),
            Transaction(id=4, description="Salário", amount=900.0, type="income",
                        date="2024-03-05", category_id=1),
        ]
        summary = MonthlyPlanService.calculate_summary(plan, transactions, categories)

        assert [(s.category_name, s.status) for s in summary.categories] == [
            ("Lazer", "danger"), ("Alimentação", "exceeded"),
        ]
        assert [a.type for a in summary.alerts] == ["approaching_limit", "exceeded"]
        assert summary.total_planned == 300.0
        assert summary.total_spent == 345.0
        assert summary.total_remaining == -45.0


@pytest.mark.unit
class TestTransactionAlert:
    """Test the pre-save warning for a new expense."""

    PLAN = MonthlyPlan(id=1, month=3, year=2024, total_budget=100.0,
                       category_budgets=[CategoryPlan(1, 100.0)])

    def test_no_plan_for_category(self):
        alert = MonthlyPlanService.check_transaction_alert(self.PLAN, 9, 10.0, 0.0, "Saúde")
        assert alert.type == "no_budget"
        assert "Saúde" in alert.message

    def test_no_plan_at_all(self):
        assert MonthlyPlanService.check_transaction_alert(None, 1, 10.0, 0.0).type == "no_budget"

    @pytest.mark.parametrize("amount,expected", [
        (60.0, "exceeded"),
        (40.0, "approaching_limit"),
        (10.0, None),
    ])
    def test_levels(self, amount, expected):
        alert = MonthlyPlanService.check_transaction_alert(self.PLAN, 1, amount, 50.0, "Lazer")
        assert (alert.type if alert else None) == expected


@pytest.mark.integration
class TestMonthlyPlanService:
    """Test saving and copying plans through sqlite."""

    def test_missing_plan(self, services):
        assert services.plans.get(3, 2024) is None
        assert services.plans.get_summary(3, 2024) is None

    def test_save_and_replace(self, services):
        services.plans.save(3, 2024, 1000.0, [CategoryPlan(4, 600.0)])
        saved = services.plans.save(3, 2024, 1200.0, [CategoryPlan(4, 700.0),
                                                      CategoryPlan(6, 300.0)])
        assert saved.total_budget == 1200.0
        assert [(c.category_id, c.planned_amount) for c in saved.category_budgets] == [
            (4, 700.0), (6, 300.0),
        ]
        assert services.plans.get(3, 2024).total_budget == 1200.0

    @pytest.mark.parametrize("month,year,total,budgets,message", [
        (13, 2024, 100.0, [], "mês"),
        (3, 1800, 100.0, [], "Ano"),
        (3, 2024, -1.0, [], "orçamento total"),
        (3, 2024, 100.0, [CategoryPlan(4, -5.0)], "planejados"),
        (3, 2024, 100.0, [CategoryPlan(4, 10.0), CategoryPlan(4, 20.0)], "repetida"),
        (3, 2024, 100.0, [CategoryPlan(4, 80.0), CategoryPlan(5, 30.0)], "ultrapassa"),
    ])
    def test_validation(self, services, month, year, total, budgets, message):
        with pytest.raises(ValueError, match=message):
            services.plans.save(month, year, total, budgets)

    def test_copy_across_year(self, services):
        services.plans.save(12, 2023, 900.0, [CategoryPlan(4, 500.0)])
        copied = services.plans.copy_from_previous(1, 2024)
        assert (copied.month, copied.year) == (1, 2024)
        assert copied.created_from_previous
        assert copied.total_budget == 900.0
        assert copied.category_budgets[0].planned_amount == 500.0

    def test_copy_without_previous(self, services):
        with pytest.raises(ValueError, match="mês anterior"):
            services.plans.copy_from_previous(3, 2024)

    def test_summary_reads_transactions(self, services, checking, category_ids):
        food = category_ids["Alimentação"]
        services.plans.save(3, 2024, 500.0, [CategoryPlan(food, 200.0)])
        services.transactions.create("Feira", 150.0, "expense", "2024-03-10",
                                     account_id=checking.id, category_id=food)
        summary = services.plans.get_summary(3, 2024)
        assert summary.categories[0].spent == 150.0
        assert summary.categories[0].status == "warning"
        assert summary.alerts == []
