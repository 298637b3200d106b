"""Tests for account validation and default-account rules."""

import pytest


@pytest.mark.integration
class TestAccountCreation:
    """Test creating accounts through the sqlite store."""

    def test_first_account_becomes_default(self, services):
        account = services.accounts.create("Nubank", initial_balance=150.0)
        assert account.is_default
        assert account.balance == 150.0
        assert account.initial_balance == 150.0

    def test_second_account_not_default(self, services, checking):
        other = services.accounts.create("Poupança", account_type="savings")
        assert not other.is_default
        assert services.accounts.get_default().id == checking.id

    def test_is_default_moves_the_flag(self, services, checking):
        other = services.accounts.create("Itaú", is_default=True)
        assert other.is_default
        assert not services.accounts.get_by_id(checking.id).is_default

    @pytest.mark.parametrize("kwargs,message", [
        ({"name": ""}, "obrigatório"),
        ({"name": "x" * 101}, "100"),
        ({"name": "Conta", "account_type": "crypto"}, "Tipo de conta inválido"),
        ({"name": "Conta", "initial_balance": -1.0}, "saldo inicial"),
        ({"name": "Conta", "bank_code": "12"}, "código do banco"),
        ({"name": "Conta", "agency_number": "12"}, "Agência"),
        ({"name": "Conta", "account_number": "12a45"}, "Número da conta"),
        ({"name": "Conta", "account_number": "1" * 21}, "Número da conta"),
        ({"name": "Conta", "color": "blue"}, "#RRGGBB"),
    ])
    def test_validation(self, services, kwargs, message):
        """Test every invalid field is rejected with a readable message."""
        with pytest.raises(ValueError, match=message):
            services.accounts.create(**kwargs)

    @pytest.mark.parametrize("agency", ["1234", "12345", "1234-5", "12345-6", "12346"])
    def test_valid_agencies(self, services, agency):
        account = services.accounts.create("Conta", agency_number=agency, bank_code="260")
        assert account.agency_number == agency

    def test_duplicate_name_case_insensitive(self, services, checking):
        with pytest.raises(ValueError, match="Já existe"):
            services.accounts.create("CONTA CORRENTE")

    def test_name_is_trimmed(self, services):
        assert services.accounts.create("  Carteira  ").name == "Carteira"


@pytest.mark.integration
class TestAccountChanges:
    """Test updates, soft delete and totals."""

    def test_update_initial_balance_shifts_balance(self, services, checking):
        services.accounts.update(checking.id, initial_balance=6000.0)
        assert services.accounts.get_by_id(checking.id).balance == 6000.0

    def test_update_unknown_field(self, services, checking):
        with pytest.raises(ValueError, match="desconhecido"):
            services.accounts.update(checking.id, saldo=10)

    def test_update_missing_account(self, services):
        with pytest.raises(LookupError):
            services.accounts.update(999, name="Nada")

    def test_delete_is_soft(self, services, checking):
        services.accounts.delete(checking.id)
        assert services.accounts.get_all() == []
        inactive = services.accounts.get_all(include_inactive=True)
        assert [a.id for a in inactive] == [checking.id]
        assert not inactive[0].is_active

    def test_delete_default_promotes_next(self, services, checking):
        b = services.accounts.create("B Conta")
        services.accounts.create("C Conta")
        services.accounts.delete(checking.id)
        assert services.accounts.get_default().id == b.id
        assert services.accounts.get_by_id(b.id).is_default

    def test_inactive_account_cannot_be_default(self, services, checking):
        other = services.accounts.create("Outra")
        services.accounts.delete(other.id)
        with pytest.raises(ValueError):
            services.accounts.set_default(other.id)

    def test_total_balance_respects_include_in_total(self, services, checking):
        services.accounts.create("Investimentos", account_type="investment",
                                 initial_balance=1000.0, include_in_total=False)
        services.accounts.create("Carteira", account_type="cash", initial_balance=250.5)
        assert services.accounts.get_total_balance() == 5250.5
