"""Tests for credit card validation and limits."""

import pytest

from models.credit_card import CreditCard


class TestCardModel:
    """Test derived limit properties."""

    def test_usage(self):
        card = CreditCard(id=1, name="X", credit_limit=1000.0, available_limit=250.0)
        assert card.used_limit == 750.0
        assert card.usage_percentage == 75.0

    def test_usage_without_limit(self):
        assert CreditCard(id=1, name="X").usage_percentage == 0.0

    @pytest.mark.parametrize("card_type,expected", [
        ("credit", True), ("credit_debit", True), ("debit", False),
        ("prepaid", False), ("virtual", False),
    ])
    def test_has_credit_function(self, card_type, expected):
        assert CreditCard(id=1, name="X", card_type=card_type).has_credit_function is expected


@pytest.mark.integration
class TestCardService:
    """Test card rules through the sqlite store."""

    def test_available_defaults_to_limit(self, credit_card):
        assert credit_card.available_limit == 3000.0
        assert credit_card.is_default

    @pytest.mark.parametrize("kwargs,message", [
        ({"name": "", "last_digits": "1234"}, "obrigatório"),
        ({"name": "C", "last_digits": "123"}, "4 últimos"),
        ({"name": "C", "last_digits": "12a4"}, "4 últimos"),
        ({"name": "C", "last_digits": "1234", "brand": "diners"}, "Bandeira"),
        ({"name": "C", "last_digits": "1234", "card_type": "gold"}, "Tipo de cartão"),
        ({"name": "C", "last_digits": "1234", "credit_limit": -1.0}, "limites"),
        ({"name": "C", "last_digits": "1234", "credit_limit": 100.0,
          "available_limit": 200.0}, "disponível"),
        ({"name": "C", "last_digits": "1234", "closing_day": 32}, "fechamento"),
        ({"name": "C", "last_digits": "1234", "due_day": 0}, "vencimento"),
        ({"name": "C", "last_digits": "1234", "card_type": "debit",
          "credit_limit": 500.0}, "Apenas cartões de crédito"),
        ({"name": "C", "last_digits": "1234", "card_type": "virtual",
          "is_virtual": True}, "cartão principal"),
    ])
    def test_validation(self, services, kwargs, message):
        with pytest.raises(ValueError, match=message):
            services.cards.create(**kwargs)

    def test_virtual_card_with_parent(self, services, credit_card):
        virtual = services.cards.create(
            "Virtual", card_type="virtual", last_digits="0001",
            is_virtual=True, parent_card_id=credit_card.id,
        )
        assert virtual.parent_card_id == credit_card.id
        assert not virtual.is_default

    def test_virtual_parent_must_not_be_virtual(self, services, credit_card):
        virtual = services.cards.create(
            "Virtual", card_type="virtual", last_digits="0001",
            is_virtual=True, parent_card_id=credit_card.id,
        )
        with pytest.raises(ValueError, match="principal"):
            services.cards.create(
                "Virtual 2", card_type="virtual", last_digits="0002",
                is_virtual=True, parent_card_id=virtual.id,
            )

    def test_limit_change_keeps_used_amount(self, services, credit_card):
        services.cards.update(credit_card.id, available_limit=1800.0)
        updated = services.cards.update(credit_card.id, credit_limit=5000.0)
        assert updated.available_limit == 3800.0

    def test_totals(self, services, credit_card):
        services.cards.create("Outro", last_digits="9999",
                              credit_limit=1000.0, available_limit=400.0)
        assert services.cards.totals() == {
            "total_credit_limit": 4000.0,
            "total_available_limit": 3400.0,
            "total_used": 600.0,
        }

    def test_delete_is_soft(self, services, credit_card):
        services.cards.delete(credit_card.id)
        assert services.cards.get_all() == []
        assert services.cards.get_all(include_inactive=True)[0].id == credit_card.id
