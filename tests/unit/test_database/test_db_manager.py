"""Tests for schema setup, seeding and the DAOs' storage rules."""

import os

import pytest

from database.account_dao import AccountDAO
from database.category_dao import CategoryDAO
from database.credit_card_dao import CreditCardDAO
from database.db_manager import DatabaseManager
from database.user_dao import UserDAO
from models.account import Account
from models.category import Category
from models.credit_card import CreditCard
from utils.constants import DB_FILE


@pytest.mark.integration
class TestDatabaseManager:
    """Test initialization and settings."""

    def test_initialize_is_idempotent(self, db):
        db.initialize()
        db.initialize()
        conn = db.get_connection()
        assert conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0] == 11
        assert conn.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 1

    def test_seeded_settings(self, db):
        assert db.get_setting("date_format") == "DD/MM/YYYY"
        assert db.get_setting("appearance_mode") == "system"
        assert db.get_setting("missing", "padrão") == "padrão"

    def test_set_setting_overwrites(self, db):
        db.set_setting("date_format", "YYYY-MM-DD")
        db.set_setting("date_format", "MM/DD/YYYY")
        assert db.get_setting("date_format") == "MM/DD/YYYY"

    def test_migration_columns_present(self, db):
        conn = db.get_connection()
        account_cols = {row[1] for row in conn.execute("PRAGMA table_info(accounts)")}
        tx_cols = {row[1] for row in conn.execute("PRAGMA table_info(transactions)")}
        assert "icon" in account_cols
        assert "notes" in tx_cols

    def test_open_default_creates_folder(self, tmp_path):
        folder = tmp_path / "dados" / "financas"
        db = DatabaseManager.open_default(db_folder=str(folder))
        try:
            assert os.path.exists(folder / DB_FILE)
            assert db.local_user_id() >= 1
        finally:
            db.close()

    def test_close_then_reopen(self, db):
        db.close()
        assert db.get_setting("date_format") == "DD/MM/YYYY"


@pytest.mark.integration
class TestDaoRules:
    """Test ordering, caching, user scoping and clamping in the DAOs."""

    def test_accounts_default_first(self, db, user_id):
        dao = AccountDAO(db, user_id)
        dao.create(Account(id=None, name="Zeta"))
        dao.create(Account(id=None, name="Alfa"))
        main = dao.create(Account(id=None, name="Principal"))
        dao.set_default(main.id)
        assert [a.name for a in dao.get_all()] == ["Principal", "Alfa", "Zeta"]

    def test_account_cache_invalidated_on_write(self, db, user_id):
        dao = AccountDAO(db, user_id)
        created = dao.create(Account(id=None, name="Carteira", balance=10.0))
        assert dao.get_all()[0].balance == 10.0
        dao.adjust_balance(created.id, 5.25)
        assert dao.get_all()[0].balance == 15.25

    def test_accounts_scoped_by_user(self, db, user_id):
        other = UserDAO(db).create("ana@exemplo.com", "Ana", "hash")
        AccountDAO(db, user_id).create(Account(id=None, name="Minha"))
        assert AccountDAO(db, other.id).get_all() == []

    def test_user_categories_are_private(self, db, user_id):
        other = UserDAO(db).create("ana@exemplo.com", "Ana", "hash")
        CategoryDAO(db, user_id).create(Category(id=None, name="Pets", type="expense"))
        assert len(CategoryDAO(db, user_id).get_all()) == 12
        assert len(CategoryDAO(db, other.id).get_all()) == 11

    def test_card_limit_clamped(self, db, user_id):
        dao = CreditCardDAO(db, user_id)
        card = dao.create(CreditCard(id=None, name="Visa", last_digits="1111",
                                     credit_limit=1000.0, available_limit=900.0))
        dao.adjust_available_limit(card.id, 500.0)
        assert dao.get_by_id(card.id).available_limit == 1000.0
        dao.adjust_available_limit(card.id, -5000.0)
        assert dao.get_by_id(card.id).available_limit == 0.0
