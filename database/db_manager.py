import logging
import os
import sqlite3
from utils.constants import DB_FILE, DEFAULT_CATEGORIES, LOCAL_USER_EMAIL, LOCAL_USER_NAME

logger = logging.getLogger(__name__)


class DatabaseManager:
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._conn: sqlite3.Connection | None = None

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            if self.db_path != ":memory:":
                self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    def initialize(self):
        """Create schema and seed defaults."""
        conn = self.get_connection()
        self._create_schema(conn)
        self._migrate_schema(conn)
        self._seed_defaults(conn)
        conn.commit()
        logger.debug("Database ready at %s", self.db_path)

    def _migrate_schema(self, conn: sqlite3.Connection):
        """Idempotent ALTER TABLE for columns added after initial release."""
        cols = {row[1] for row in conn.execute("PRAGMA table_info(accounts)").fetchall()}
        if "icon" not in cols:
            conn.execute("ALTER TABLE accounts ADD COLUMN icon TEXT NOT NULL DEFAULT ''")
        cols = {row[1] for row in conn.execute("PRAGMA table_info(transactions)").fetchall()}
        if "notes" not in cols:
            conn.execute("ALTER TABLE transactions ADD COLUMN notes TEXT NOT NULL DEFAULT ''")

    def _create_schema(self, conn: sqlite3.Connection):
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS users (
                id            INTEGER PRIMARY KEY AUTOINCREMENT,
                email         TEXT NOT NULL UNIQUE,
                full_name     TEXT NOT NULL DEFAULT '',
                password_hash TEXT NOT NULL DEFAULT '',
                created_at    TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS accounts (
                id               INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id          INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                name             TEXT    NOT NULL,
                account_type     TEXT    NOT NULL DEFAULT 'checking',
                balance          REAL    NOT NULL DEFAULT 0.0,
                initial_balance  REAL    NOT NULL DEFAULT 0.0 CHECK(initial_balance >= 0),
                bank_name        TEXT    NOT NULL DEFAULT '',
                bank_code        TEXT    NOT NULL DEFAULT '',
                agency_number    TEXT    NOT NULL DEFAULT '',
                account_number   TEXT    NOT NULL DEFAULT '',
                color            TEXT    NOT NULL DEFAULT '#2196F3',
                icon             TEXT    NOT NULL DEFAULT '',
                is_default       INTEGER NOT NULL DEFAULT 0,
                include_in_total INTEGER NOT NULL DEFAULT 1,
                is_active        INTEGER NOT NULL DEFAULT 1,
                created_at       TEXT    NOT NULL DEFAULT (datetime('now')),
                updated_at       TEXT    NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS credit_cards (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id         INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                name            TEXT    NOT NULL,
                brand           TEXT    NOT NULL DEFAULT 'visa',
                card_type       TEXT    NOT NULL DEFAULT 'credit',
                last_digits     TEXT    NOT NULL DEFAULT '',
                credit_limit    REAL    NOT NULL DEFAULT 0.0 CHECK(credit_limit >= 0),
                available_limit REAL    NOT NULL DEFAULT 0.0,
                closing_day     INTEGER CHECK(closing_day BETWEEN 1 AND 31),
                due_day         INTEGER CHECK(due_day BETWEEN 1 AND 31),
                color           TEXT    NOT NULL DEFAULT '#6B7280',
                is_default      INTEGER NOT NULL DEFAULT 0,
                is_active       INTEGER NOT NULL DEFAULT 1,
                is_virtual      INTEGER NOT NULL DEFAULT 0,
                parent_card_id  INTEGER REFERENCES credit_cards(id) ON DELETE SET NULL,
                created_at      TEXT    NOT NULL DEFAULT (datetime('now')),
                updated_at      TEXT    NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS credit_card_bills (
                id                     INTEGER PRIMARY KEY AUTOINCREMENT,
                card_id                INTEGER NOT NULL REFERENCES credit_cards(id) ON DELETE CASCADE,
                reference_month        TEXT    NOT NULL,
                closing_date           TEXT    NOT NULL,
                due_date               TEXT    NOT NULL,
                total_amount           REAL    NOT NULL DEFAULT 0.0 CHECK(total_amount >= 0),
                is_paid                INTEGER NOT NULL DEFAULT 0,
                paid_at                TEXT,
                payment_transaction_id INTEGER,
                UNIQUE(card_id, reference_month)
            );

            CREATE TABLE IF NOT EXISTS categories (
                id         INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id    INTEGER REFERENCES users(id) ON DELETE CASCADE,
                name       TEXT NOT NULL,
                type       TEXT NOT NULL CHECK(type IN ('income','expense')),
                color      TEXT NOT NULL DEFAULT '#888888',
                icon       TEXT NOT NULL DEFAULT '',
                is_system  INTEGER NOT NULL DEFAULT 0
            );

            CREATE UNIQUE INDEX IF NOT EXISTS idx_categories_system_name
                ON categories(name) WHERE user_id IS NULL;

            CREATE TABLE IF NOT EXISTS transactions (
                id                     INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id                INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                description            TEXT NOT NULL,
                amount                 REAL NOT NULL CHECK(amount > 0),
                type                   TEXT NOT NULL CHECK(type IN
                                           ('income','expense','transfer','credit_card_expense')),
                date                   TEXT NOT NULL,
                competence_month       INTEGER,
                competence_year        INTEGER,
                account_id             INTEGER REFERENCES accounts(id),
                category_id            INTEGER REFERENCES categories(id) ON DELETE RESTRICT,
                credit_card_id         INTEGER REFERENCES credit_cards(id),
                bill_id                INTEGER REFERENCES credit_card_bills(id) ON DELETE SET NULL,
                transfer_to_account_id INTEGER REFERENCES accounts(id),
                installment_number     INTEGER,
                installment_total      INTEGER,
                is_paid                INTEGER NOT NULL DEFAULT 1,
                notes                  TEXT NOT NULL DEFAULT '',
                created_at             TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at             TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE INDEX IF NOT EXISTS idx_transactions_user_date   ON transactions(user_id, date);
            CREATE INDEX IF NOT EXISTS idx_transactions_account_id  ON transactions(account_id);
            CREATE INDEX IF NOT EXISTS idx_transactions_category_id ON transactions(category_id);
            CREATE INDEX IF NOT EXISTS idx_transactions_card_id     ON transactions(credit_card_id);

            CREATE TABLE IF NOT EXISTS budgets (
                id               INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id          INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                name             TEXT NOT NULL,
                description      TEXT NOT NULL DEFAULT '',
                amount           REAL NOT NULL CHECK(amount >= 0),
                period           TEXT NOT NULL DEFAULT 'monthly',
                start_date       TEXT NOT NULL,
                end_date         TEXT NOT NULL,
                status           TEXT NOT NULL DEFAULT 'active',
                category_ids     TEXT NOT NULL DEFAULT '[]',
                account_ids      TEXT NOT NULL DEFAULT '[]',
                alert_percentage REAL NOT NULL DEFAULT 80,
                is_active        INTEGER NOT NULL DEFAULT 1,
                color            TEXT NOT NULL DEFAULT '#FF9800',
                created_at       TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS monthly_plans (
                id                    INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id               INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                month                 INTEGER NOT NULL CHECK(month BETWEEN 1 AND 12),
                year                  INTEGER NOT NULL,
                total_budget          REAL NOT NULL DEFAULT 0.0,
                created_from_previous INTEGER NOT NULL DEFAULT 0,
                created_at            TEXT NOT NULL DEFAULT (datetime('now')),
                UNIQUE(user_id, month, year)
            );

            CREATE TABLE IF NOT EXISTS monthly_plan_categories (
                plan_id        INTEGER NOT NULL REFERENCES monthly_plans(id) ON DELETE CASCADE,
                category_id    INTEGER NOT NULL REFERENCES categories(id) ON DELETE CASCADE,
                planned_amount REAL NOT NULL CHECK(planned_amount >= 0),
                PRIMARY KEY (plan_id, category_id)
            );

            CREATE TABLE IF NOT EXISTS app_settings (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS notification_states (
                user_id INTEGER NOT NULL,
                key     TEXT NOT NULL,
                status  TEXT NOT NULL CHECK(status IN ('read','dismissed','archived')),
                expires TEXT NOT NULL,
                PRIMARY KEY (user_id, key)
            );
        """)

    def _seed_defaults(self, conn: sqlite3.Connection):
        # Default settings
        defaults = [
            ("appearance_mode", "system"),
            ("date_format", "DD/MM/YYYY"),
            ("last_account_id", ""),
        ]
        for key, value in defaults:
            conn.execute(
                "INSERT OR IGNORE INTO app_settings(key, value) VALUES (?, ?)",
                (key, value),
            )

        # System categories (shared by every user)
        for cat in DEFAULT_CATEGORIES:
            conn.execute(
                """INSERT OR IGNORE INTO categories(user_id, name, type, color, icon, is_system)
                   VALUES (NULL, ?, ?, ?, ?, 1)""",
                (cat["name"], cat["type"], cat["color"], cat["icon"]),
            )

        # Local desktop user; REST clients register their own
        conn.execute(
            "INSERT OR IGNORE INTO users(email, full_name) VALUES (?, ?)",
            (LOCAL_USER_EMAIL, LOCAL_USER_NAME),
        )

    def local_user_id(self) -> int:
        row = self.get_connection().execute(
            "SELECT id FROM users WHERE email = ?", (LOCAL_USER_EMAIL,)
        ).fetchone()
        return row["id"]

    def get_setting(self, key: str, default: str = "") -> str:
        conn = self.get_connection()
        row = conn.execute(
            "SELECT value FROM app_settings WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else default

    def set_setting(self, key: str, value: str):
        conn = self.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO app_settings(key, value) VALUES (?, ?)",
            (key, value),
        )
        conn.commit()

    @staticmethod
    def open_default(db_folder: str | None = None) -> "DatabaseManager":
        """Startup factory: open (and initialize) the DB in db_folder or the CWD."""
        if db_folder:
            os.makedirs(db_folder, exist_ok=True)
            path = os.path.join(db_folder, DB_FILE)
        else:
            path = DB_FILE
        db = DatabaseManager(path)
        db.initialize()
        return db

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None
