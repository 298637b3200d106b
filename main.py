import logging
import os
import sys
import customtkinter as ctk

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from database.db_manager import DatabaseManager
from datasource.api_client import ApiClient
from datasource.feature_flags import FeatureFlagManager
from datasource.mock_store import MockStore
from datasource.sources import DataSources

from ui.app_window import AppWindow
from utils.app_config import get_api_base_url, get_db_folder, get_log_level
from utils.log_setup import setup_logging

logger = logging.getLogger(__name__)


def main():
    # ── Bootstrap: flags and logging from pre-DB config ──────────────────────
    flags = FeatureFlagManager()
    setup_logging("DEBUG" if flags.is_enabled("debug_mode") else get_log_level())

    # ── Database ─────────────────────────────────────────────────────────────
    db = DatabaseManager.open_default(db_folder=get_db_folder())

    # ── Data sources ─────────────────────────────────────────────────────────
    api_url = get_api_base_url()
    api_client = ApiClient(api_url) if api_url else None
    sources = DataSources(flags, MockStore(), db, db.local_user_id(), api_client)
    logger.info("Starting with data sources %s", sources.describe())

    # ── Appearance ───────────────────────────────────────────────────────────
    appearance = db.get_setting("appearance_mode", "system")
    date_format = db.get_setting("date_format", "DD/MM/YYYY")
    ctk.set_appearance_mode(appearance)
    ctk.set_default_color_theme("blue")

    # ── Launch UI ────────────────────────────────────────────────────────────
    app = AppWindow(
        sources=sources,
        flags=flags,
        db=db,
        api_client=api_client,
        date_format=date_format,
    )

    def on_close():
        db.close()
        app.destroy()

    app.protocol("WM_DELETE_WINDOW", on_close)
    app.mainloop()


if __name__ == "__main__":
    main()
