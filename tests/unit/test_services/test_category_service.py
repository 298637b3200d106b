"""Tests for category rules."""

import pytest


@pytest.mark.integration
class TestCategoryService:
    """Test system categories and user CRUD through sqlite."""

    def test_seeded_system_categories(self, services):
        categories = services.categories.get_all()
        assert len(categories) == 11
        assert all(c.is_system for c in categories)
        assert [c.name for c in services.categories.get_by_type("income")] == [
            "Freelance", "Investimentos", "Salário",
        ]

    def test_invalid_type(self, services):
        with pytest.raises(ValueError, match="Tipo de categoria"):
            services.categories.get_by_type("transfer")
        with pytest.raises(ValueError, match="Tipo de categoria"):
            services.categories.create("Pets", "other")

    def test_duplicate_name_case_insensitive(self, services):
        with pytest.raises(ValueError, match="Já existe"):
            services.categories.create("salário", "income")

    def test_blank_name(self, services):
        with pytest.raises(ValueError, match="obrigatório"):
            services.categories.create("  ", "expense")

    def test_user_category_crud(self, services):
        pets = services.categories.create(" Pets ", "expense", color="#795548", icon="🐶")
        assert pets.name == "Pets"
        assert not pets.is_system

        renamed = services.categories.update(pets.id, "Animais", "expense", color="#795548")
        assert renamed.name == "Animais"
        assert services.categories.name_map()[pets.id] == "Animais"

        services.categories.delete(pets.id)
        assert services.categories.get_by_id(pets.id) is None

    def test_system_categories_are_locked(self, services, category_ids):
        salary = category_ids["Salário"]
        with pytest.raises(ValueError, match="não podem ser alteradas"):
            services.categories.update(salary, "Ordenado", "income")
        with pytest.raises(ValueError, match="não podem ser excluídas"):
            services.categories.delete(salary)

    def test_category_in_use_cannot_be_deleted(self, services, checking):
        pets = services.categories.create("Pets", "expense")
        services.transactions.create("Ração", 80.0, "expense", "2024-03-05",
                                     account_id=checking.id, category_id=pets.id)
        with pytest.raises(ValueError, match="com transações"):
            services.categories.delete(pets.id)

    def test_missing_category(self, services):
        with pytest.raises(LookupError):
            services.categories.delete(999)
