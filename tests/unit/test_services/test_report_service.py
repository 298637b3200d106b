"""Tests for report aggregation and CSV export rows."""

import pytest

from models.transaction import TransactionFilters


@pytest.fixture
def sample(services, checking, category_ids):
    """Salary, two categorized expenses, one uncategorized and a transfer."""
    savings = services.accounts.create("Poupança", account_type="savings")
    tx = services.transactions
    tx.create("Salário", 7000.0, "income", "2024-03-05", account_id=checking.id,
              category_id=category_ids["Salário"])
    tx.create("Supermercado", 300.0, "expense", "2024-03-06", account_id=checking.id,
              category_id=category_ids["Alimentação"])
    tx.create("Ônibus", 40.0, "expense", "2024-04-02", account_id=checking.id,
              category_id=category_ids["Transporte"])
    tx.create("Diversos", 10.0, "expense", "2024-04-03", account_id=checking.id,
              is_paid=False)
    tx.create_transfer(checking.id, savings.id, 500.0, "2024-04-04")
    return services


@pytest.mark.integration
class TestReport:
    """Test get_report totals and breakdowns."""

    def test_totals_exclude_transfers(self, sample):
        report = sample.reports.get_report()
        assert report["total_income"] == 7000.0
        assert report["total_expenses"] == 350.0
        assert report["balance"] == 6650.0
        assert report["transaction_count"] == 5
        assert report["average_income"] == 7000.0
        assert report["average_expense"] == 116.67

    def test_expenses_by_category(self, sample):
        rows = sample.reports.get_report()["expenses_by_category"]
        assert [(r["category"], r["total"], r["count"]) for r in rows] == [
            ("Alimentação", 300.0, 1),
            ("Transporte", 40.0, 1),
            ("Sem categoria", 10.0, 1),
        ]
        assert rows[0]["percentage"] == 85.71
        assert rows[2]["category_id"] is None

    def test_monthly_trend(self, sample):
        assert sample.reports.get_report()["monthly_trend"] == [
            {"month": "2024-03", "income": 7000.0, "expenses": 300.0, "balance": 6700.0},
            {"month": "2024-04", "income": 0.0, "expenses": 50.0, "balance": -50.0},
        ]

    def test_filtered_report(self, sample):
        april = TransactionFilters(start_date="2024-04-01", end_date="2024-04-30")
        report = sample.reports.get_report(april)
        assert report["total_income"] == 0.0
        assert report["average_income"] == 0.0
        assert report["total_expenses"] == 50.0

    def test_empty_report(self, services):
        report = services.reports.get_report()
        assert report["transaction_count"] == 0
        assert report["expenses_by_category"] == []
        assert report["monthly_trend"] == []


@pytest.mark.integration
class TestExport:
    """Test CSV export rows."""

    def test_rows_oldest_first(self, sample):
        rows = sample.reports.export_rows()
        assert rows[0] == ["Data", "Tipo", "Categoria", "Descrição", "Valor", "Pago", "Conta"]
        assert rows[1] == ["2024-03-05", "Receita", "Salário", "Salário", "7000.00", "Sim",
                           "Conta Corrente"]
        assert [r[0] for r in rows[1:]] == [
            "2024-03-05", "2024-03-06", "2024-04-02", "2024-04-03", "2024-04-04",
        ]
        assert rows[4][5] == "Não"
        assert rows[5][1] == "Transferência"
