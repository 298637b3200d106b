import logging
from datetime import datetime

import customtkinter as ctk
from database.db_manager import DatabaseManager
from datasource.api_client import ApiClient
from datasource.feature_flags import FeatureFlagManager
from datasource.sources import DataSources
from services.notification_service import is_quiet_time
from services.registry import Services, build_services
from ui.components.alert_banner import AlertBanner
from ui.components.errors import FORM_ERRORS, error_message
from ui.components.notification_dialog import NotificationDialog
from ui.tabs.dashboard_tab import DashboardTab
from ui.tabs.transactions_tab import TransactionsTab
from ui.tabs.accounts_tab import AccountsTab
from ui.tabs.cards_tab import CardsTab
from ui.tabs.budgets_tab import BudgetsTab
from ui.tabs.reports_tab import ReportsTab
from ui.tabs.categories_tab import CategoriesTab
from ui.tabs.settings_tab import SettingsTab
from utils.constants import APP_NAME, APP_WIDTH, APP_HEIGHT

logger = logging.getLogger(__name__)

NOTIFICATION_POLL_MS = 5 * 60 * 1000

_REFRESH_SCOPES: dict[str, set[str]] = {
    "transaction": {"dashboard", "transactions", "accounts", "cards", "budgets", "reports"},
    "account":     {"dashboard", "transactions", "accounts", "reports"},
    "card":        {"dashboard", "transactions", "cards"},
    "budget":      {"dashboard", "budgets"},
    "category":    {"transactions", "budgets", "reports", "categories"},
    "full":        {"dashboard", "transactions", "accounts", "cards", "budgets",
                    "reports", "categories", "settings"},
}


class AppWindow(ctk.CTk):
    def __init__(
        self,
        sources: DataSources,
        flags: FeatureFlagManager,
        db: DatabaseManager,
        api_client: ApiClient | None = None,
        date_format: str = "DD/MM/YYYY",
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._sources = sources
        self._flags = flags
        self._db = db
        self._api = api_client
        self._date_format = date_format
        self._services: Services = build_services(sources)
        self._banner_key: str | None = None
        self._closed_banners: set[str] = set()

        self.title(APP_NAME)
        self.minsize(APP_WIDTH, APP_HEIGHT)
        self.geometry(f"{APP_WIDTH}x{APP_HEIGHT}")

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._build_top_bar()
        self._build_banner_area()
        self._build_tabs()

        self.after(300, self._check_notifications)

    def get_services(self) -> Services:
        return self._services

    def get_sources(self) -> DataSources:
        return self._sources

    # ── Top bar ──────────────────────────────────────────────────────────────
    def _build_top_bar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray85", "gray15"), corner_radius=0, height=44)
        bar.grid(row=0, column=0, sticky="ew")
        bar.grid_propagate(False)

        ctk.CTkLabel(
            bar, text=f"🔎 {APP_NAME}",
            font=ctk.CTkFont(size=16, weight="bold"),
        ).pack(side="left", padx=(12, 8), pady=8)

        self._mode_label = ctk.CTkLabel(bar, text="", text_color="gray60")
        self._mode_label.pack(side="left", padx=8)
        self._update_mode_label()

        self._bell_btn = ctk.CTkButton(
            bar, text="🔔", width=70,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._open_notifications,
        )
        self._bell_btn.pack(side="right", padx=12)

    def _update_mode_label(self):
        described = self._sources.describe()
        if all(s == "mock" for s in described.values()):
            text = "[dados simulados]"
        elif any(s == "mock" for s in described.values()):
            text = "[modo misto]"
        elif any(s == "remote" for s in described.values()):
            text = "[servidor]"
        else:
            text = "[banco local]"
        self._mode_label.configure(text=text)

    def _build_banner_area(self):
        self._banner_frame = ctk.CTkFrame(self, fg_color="transparent", height=0)
        self._banner_frame.grid(row=1, column=0, sticky="ew", padx=8)

    def _build_tabs(self):
        self._tabview = ctk.CTkTabview(self)
        self._tabview.grid(row=2, column=0, sticky="nsew", padx=8, pady=(0, 8))

        tab_names = [
            "Painel", "Transações", "Contas", "Cartões",
            "Orçamentos", "Relatórios", "Categorias", "Configurações",
        ]
        for tab_name in tab_names:
            self._tabview.add(tab_name)
            self._tabview.tab(tab_name).grid_columnconfigure(0, weight=1)
            self._tabview.tab(tab_name).grid_rowconfigure(0, weight=1)

        self._dashboard_tab = DashboardTab(
            self._tabview.tab("Painel"),
            get_services=self.get_services,
            date_format=self._date_format,
        )
        self._dashboard_tab.grid(row=0, column=0, sticky="nsew")

        self._transactions_tab = TransactionsTab(
            self._tabview.tab("Transações"),
            get_services=self.get_services,
            notify_refresh=self.notify_tabs_refresh,
            date_format=self._date_format,
        )
        self._transactions_tab.grid(row=0, column=0, sticky="nsew")

        self._accounts_tab = AccountsTab(
            self._tabview.tab("Contas"),
            get_services=self.get_services,
            notify_refresh=self.notify_tabs_refresh,
        )
        self._accounts_tab.grid(row=0, column=0, sticky="nsew")

        self._cards_tab = CardsTab(
            self._tabview.tab("Cartões"),
            get_services=self.get_services,
            notify_refresh=self.notify_tabs_refresh,
            date_format=self._date_format,
        )
        self._cards_tab.grid(row=0, column=0, sticky="nsew")

        self._budgets_tab = BudgetsTab(
            self._tabview.tab("Orçamentos"),
            get_services=self.get_services,
            notify_refresh=self.notify_tabs_refresh,
            date_format=self._date_format,
        )
        self._budgets_tab.grid(row=0, column=0, sticky="nsew")

        self._reports_tab = ReportsTab(
            self._tabview.tab("Relatórios"),
            get_services=self.get_services,
        )
        self._reports_tab.grid(row=0, column=0, sticky="nsew")

        self._categories_tab = CategoriesTab(
            self._tabview.tab("Categorias"),
            get_services=self.get_services,
            notify_refresh=self.notify_tabs_refresh,
        )
        self._categories_tab.grid(row=0, column=0, sticky="nsew")

        self._settings_tab = SettingsTab(
            self._tabview.tab("Configurações"),
            db=self._db,
            flags=self._flags,
            get_services=self.get_services,
            get_sources=self.get_sources,
            on_flags_changed=self._on_flags_changed,
            api_client=self._api,
        )
        self._settings_tab.grid(row=0, column=0, sticky="nsew")

    # ── Data sources ─────────────────────────────────────────────────────────
    def _on_flags_changed(self):
        """Feature flags changed: rewire every service and reload all tabs."""
        self._services = build_services(self._sources)
        logger.info("Data sources now %s", self._sources.describe())
        self._update_mode_label()
        self.notify_tabs_refresh("full")

    # ── Refresh ──────────────────────────────────────────────────────────────
    def notify_tabs_refresh(self, scope: str = "full"):
        tabs = _REFRESH_SCOPES.get(scope, _REFRESH_SCOPES["full"])
        try:
            if "dashboard"    in tabs: self._dashboard_tab.refresh()
            if "transactions" in tabs: self._transactions_tab.refresh()
            if "accounts"     in tabs: self._accounts_tab.refresh()
            if "cards"        in tabs: self._cards_tab.refresh()
            if "budgets"      in tabs: self._budgets_tab.refresh()
            if "reports"      in tabs: self._reports_tab.refresh()
            if "categories"   in tabs: self._categories_tab.refresh()
            if "settings"     in tabs: self._settings_tab.refresh()
        except FORM_ERRORS as e:
            logger.warning("Refresh failed: %s", e)
            self._show_error_banner(error_message(e))
            return
        self._check_notifications(reschedule=False)

    # ── Notifications ────────────────────────────────────────────────────────
    def _check_notifications(self, reschedule: bool = True):
        try:
            notifications = self._services.notifications.get_notifications()
            settings = self._services.notifications.load_settings()
        except FORM_ERRORS as e:
            logger.warning("Could not load notifications: %s", e)
            notifications, settings = [], None
        unread = [n for n in notifications if n.is_unread]
        self._bell_btn.configure(text=f"🔔 {len(unread)}" if unread else "🔔")

        visible = [n for n in unread if n.key not in self._closed_banners]
        quiet = settings is not None and is_quiet_time(settings, datetime.now())
        if visible and not quiet:
            top = visible[0]
            if top.key != self._banner_key:
                self._show_notification_banner(top, len(visible) - 1)
        elif not visible:
            self._clear_banner()

        if reschedule:
            self.after(NOTIFICATION_POLL_MS, self._check_notifications)

    def _clear_banner(self):
        for w in self._banner_frame.winfo_children():
            w.destroy()
        self._banner_key = None

    def _show_notification_banner(self, notification, extra: int):
        self._clear_banner()
        self._banner_key = notification.key

        def on_close(key=notification.key):
            self._closed_banners.add(key)
            self._banner_key = None

        AlertBanner.for_notification(
            self._banner_frame, notification, extra=extra,
            action_cmd=self._open_notifications, on_close=on_close,
        ).pack(fill="x", pady=2)

    def _show_error_banner(self, message: str):
        self._clear_banner()
        AlertBanner(self._banner_frame, message=message, color="#F44336").pack(fill="x", pady=2)

    def _open_notifications(self):
        dlg = NotificationDialog(self, self._services.notifications)
        self.wait_window(dlg)
        if dlg.changed:
            self._clear_banner()
        self._check_notifications(reschedule=False)
