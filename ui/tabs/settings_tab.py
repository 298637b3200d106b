import customtkinter as ctk
from dataclasses import replace
from tkinter import filedialog

from database.db_manager import DatabaseManager
from datasource.api_client import ApiClient, ApiError
from datasource.feature_flags import FeatureFlagManager, FLAG_LABELS
from ui.components.errors import FORM_ERRORS, error_message
from utils.app_config import get_api_base_url, get_db_folder, set_db_folder, set_value
from utils.currency import parse_currency
from utils.date_helpers import DATE_FORMAT_OPTIONS

_SOURCE_LABELS = {"mock": "simulado", "local": "banco local", "remote": "servidor"}
_DOMAIN_LABELS = {
    "accounts": "Contas",
    "categories": "Categorias",
    "transactions": "Transações",
    "credit_cards": "Cartões",
    "bills": "Faturas",
    "budgets": "Orçamentos",
    "reports": "Relatórios",
}
_APPEARANCE_LABELS = {"system": "Sistema", "light": "Claro", "dark": "Escuro"}


class SettingsTab(ctk.CTkFrame):
    """Settings tab: data sources, server login, notifications, app preferences."""

    def __init__(
        self,
        master,
        db: DatabaseManager,
        flags: FeatureFlagManager,
        get_services,         # callable → Services
        get_sources,          # callable → DataSources
        on_flags_changed,     # callable; rebuilds the services bundle
        api_client: ApiClient | None = None,
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._db = db
        self._flags = flags
        self._get_services = get_services
        self._get_sources = get_sources
        self._on_flags_changed = on_flags_changed
        self._api = api_client

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)

        scroll = ctk.CTkScrollableFrame(self, fg_color="transparent")
        scroll.grid(row=0, column=0, sticky="nsew")
        scroll.grid_columnconfigure(0, weight=1)

        self._build_flags_section(scroll)
        self._build_server_section(scroll)
        self._build_notifications_section(scroll)
        self._build_app_settings_section(scroll)

    def refresh(self):
        """Re-read flags and settings and update the displayed values."""
        for name, var in self._flag_vars.items():
            var.set(self._flags.is_enabled(name))
        self._sources_var.set(self._describe_sources())
        self._load_notification_settings()

        appearance = self._db.get_setting("appearance_mode", "system")
        self._appearance_var.set(_APPEARANCE_LABELS.get(appearance, "Sistema"))
        date_fmt = self._db.get_setting("date_format", "DD/MM/YYYY")
        if date_fmt in DATE_FORMAT_OPTIONS:
            self._date_fmt_var.set(date_fmt)

    # ── Section 1: Data sources ───────────────────────────────────────────────

    def _build_flags_section(self, parent):
        section = self._make_section(parent, "Fontes de dados", row=0)

        self._flag_vars: dict[str, ctk.BooleanVar] = {}
        for i, (name, label) in enumerate(FLAG_LABELS.items()):
            var = ctk.BooleanVar(value=self._flags.is_enabled(name))
            ctk.CTkSwitch(
                section, text=label, variable=var,
                command=lambda n=name, v=var: self._on_flag_toggle(n, v),
            ).grid(row=i // 3, column=i % 3, padx=8, pady=4, sticky="w")
            self._flag_vars[name] = var

        row = (len(FLAG_LABELS) + 2) // 3
        self._sources_var = ctk.StringVar(value=self._describe_sources())
        ctk.CTkLabel(
            section, textvariable=self._sources_var,
            text_color="gray60", font=ctk.CTkFont(size=11),
            anchor="w", justify="left", wraplength=700,
        ).grid(row=row, column=0, columnspan=3, sticky="w", padx=8, pady=(6, 4))

        btn_frame = ctk.CTkFrame(section, fg_color="transparent")
        btn_frame.grid(row=row + 1, column=0, columnspan=3, sticky="w", padx=4, pady=(2, 6))
        ctk.CTkButton(
            btn_frame, text="Usar todos os dados reais", width=190,
            command=self._enable_all_real,
        ).pack(side="left", padx=4)
        ctk.CTkButton(
            btn_frame, text="Restaurar padrões", width=140,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._reset_flags,
        ).pack(side="left", padx=4)

    def _describe_sources(self) -> str:
        described = self._get_sources().describe()
        return "  ·  ".join(
            f"{_DOMAIN_LABELS.get(d, d)}: {_SOURCE_LABELS.get(s, s)}" for d, s in described.items()
        )

    def _on_flag_toggle(self, name: str, var: ctk.BooleanVar):
        self._flags.update(**{name: var.get()})
        self._on_flags_changed()

    def _enable_all_real(self):
        self._flags.enable_all_real_features()
        self._on_flags_changed()

    def _reset_flags(self):
        self._flags.reset_to_defaults()
        self._on_flags_changed()

    # ── Section 2: Server ─────────────────────────────────────────────────────

    def _build_server_section(self, parent):
        section = self._make_section(parent, "Servidor", row=1)
        section.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(section, text="Endereço da API:", anchor="e", width=120).grid(
            row=0, column=0, padx=(8, 4), pady=4, sticky="e"
        )
        self._api_url_var = ctk.StringVar(value=get_api_base_url() or "")
        ctk.CTkEntry(
            section, textvariable=self._api_url_var,
            placeholder_text="http://localhost:5000", width=260,
        ).grid(row=0, column=1, padx=4, pady=4, sticky="w")
        ctk.CTkButton(section, text="Salvar endereço", width=130, command=self._save_api_url).grid(
            row=0, column=2, padx=(4, 8)
        )

        ctk.CTkLabel(section, text="E-mail:", anchor="e", width=120).grid(
            row=1, column=0, padx=(8, 4), pady=4, sticky="e"
        )
        self._email_var = ctk.StringVar()
        ctk.CTkEntry(section, textvariable=self._email_var, width=260).grid(
            row=1, column=1, padx=4, pady=4, sticky="w"
        )
        ctk.CTkLabel(section, text="Senha:", anchor="e", width=120).grid(
            row=2, column=0, padx=(8, 4), pady=4, sticky="e"
        )
        self._password_var = ctk.StringVar()
        ctk.CTkEntry(section, textvariable=self._password_var, show="•", width=260).grid(
            row=2, column=1, padx=4, pady=4, sticky="w"
        )

        btn_frame = ctk.CTkFrame(section, fg_color="transparent")
        btn_frame.grid(row=3, column=0, columnspan=3, sticky="w", padx=4, pady=(4, 4))
        state = "normal" if self._api else "disabled"
        ctk.CTkButton(btn_frame, text="Entrar", width=90, state=state, command=self._login).pack(
            side="left", padx=4
        )
        ctk.CTkButton(
            btn_frame, text="Sair", width=90, state=state,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._logout,
        ).pack(side="left", padx=4)

        self._server_status_var = ctk.StringVar(
            value="Nenhum servidor configurado; os dados reais ficam no banco local."
            if self._api is None else ""
        )
        ctk.CTkLabel(
            section, textvariable=self._server_status_var,
            text_color="gray60", font=ctk.CTkFont(size=11), anchor="w",
        ).grid(row=4, column=0, columnspan=3, sticky="w", padx=8, pady=(0, 6))
        if self._api is not None:
            self.after(100, self._check_session)

    def _save_api_url(self):
        url = self._api_url_var.get().strip()
        set_value("api_base_url", url or None)
        self._server_status_var.set("Reinicie o aplicativo para usar o novo endereço.")

    def _check_session(self):
        user = self._api.current_user() if self._api.health() else None
        if user:
            self._server_status_var.set(f"Conectado como {user.get('email', '')}.")
        else:
            self._server_status_var.set("Não autenticado no servidor.")

    def _login(self):
        try:
            user = self._api.login(self._email_var.get().strip(), self._password_var.get())
        except ApiError as e:
            self._server_status_var.set(error_message(e))
            return
        self._password_var.set("")
        self._server_status_var.set(f"Conectado como {user.get('email', '')}.")
        self._on_flags_changed()

    def _logout(self):
        try:
            self._api.logout()
        except ApiError as e:
            self._server_status_var.set(error_message(e))
            return
        self._server_status_var.set("Sessão encerrada.")

    # ── Section 3: Notifications ──────────────────────────────────────────────

    def _build_notifications_section(self, parent):
        section = self._make_section(parent, "Notificações", row=2)

        self._notif_bools = {
            "bill_reminders_enabled": ctk.BooleanVar(),
            "budget_alerts_enabled": ctk.BooleanVar(),
            "low_balance_enabled": ctk.BooleanVar(),
            "card_limit_enabled": ctk.BooleanVar(),
            "spending_alert_enabled": ctk.BooleanVar(),
            "quiet_hours_enabled": ctk.BooleanVar(),
        }
        self._notif_values = {
            "bill_days_before": ctk.StringVar(),
            "budget_threshold": ctk.StringVar(),
            "low_balance_minimum": ctk.StringVar(),
            "card_limit_threshold": ctk.StringVar(),
            "weekly_spending_limit": ctk.StringVar(),
            "quiet_start": ctk.StringVar(),
            "quiet_end": ctk.StringVar(),
        }
        rows = [
            ("bill_reminders_enabled", "Lembrar faturas", "bill_days_before", "dias antes"),
            ("budget_alerts_enabled", "Alertas de orçamento", "budget_threshold", "% do orçamento"),
            ("low_balance_enabled", "Saldo baixo", "low_balance_minimum", "saldo mínimo (R$)"),
            ("card_limit_enabled", "Limite do cartão", "card_limit_threshold", "% do limite"),
            ("spending_alert_enabled", "Gastos da semana", "weekly_spending_limit", "limite semanal (R$)"),
        ]
        for i, (flag, label, value, hint) in enumerate(rows):
            ctk.CTkCheckBox(section, text=label, variable=self._notif_bools[flag], width=200).grid(
                row=i, column=0, padx=8, pady=3, sticky="w"
            )
            ctk.CTkEntry(section, textvariable=self._notif_values[value], width=90).grid(
                row=i, column=1, padx=4, pady=3, sticky="w"
            )
            ctk.CTkLabel(section, text=hint, text_color="gray60", anchor="w").grid(
                row=i, column=2, padx=4, sticky="w"
            )

        r = len(rows)
        ctk.CTkCheckBox(
            section, text="Horário silencioso", variable=self._notif_bools["quiet_hours_enabled"],
            width=200,
        ).grid(row=r, column=0, padx=8, pady=3, sticky="w")
        quiet = ctk.CTkFrame(section, fg_color="transparent")
        quiet.grid(row=r, column=1, columnspan=2, sticky="w")
        ctk.CTkEntry(quiet, textvariable=self._notif_values["quiet_start"], width=70).pack(side="left", padx=4)
        ctk.CTkLabel(quiet, text="até").pack(side="left")
        ctk.CTkEntry(quiet, textvariable=self._notif_values["quiet_end"], width=70).pack(side="left", padx=4)

        ctk.CTkButton(
            section, text="Salvar notificações", width=160,
            command=self._save_notification_settings,
        ).grid(row=r + 1, column=0, padx=8, pady=(8, 4), sticky="w")
        self._notif_status_var = ctk.StringVar()
        self._notif_status = ctk.CTkLabel(
            section, textvariable=self._notif_status_var,
            font=ctk.CTkFont(size=11), anchor="w",
        )
        self._notif_status.grid(row=r + 1, column=1, columnspan=2, sticky="w", padx=4)

        self._load_notification_settings()

    def _load_notification_settings(self):
        settings = self._get_services().notifications.load_settings()
        for name, var in self._notif_bools.items():
            var.set(getattr(settings, name))
        for name, var in self._notif_values.items():
            value = getattr(settings, name)
            if isinstance(value, float):
                value = f"{value:.2f}".replace(".", ",").replace(",00", "")
            var.set(str(value))

    def _save_notification_settings(self):
        svc = self._get_services().notifications
        v = {name: var.get().strip() for name, var in self._notif_values.items()}
        try:
            settings = replace(
                svc.load_settings(),
                **{name: var.get() for name, var in self._notif_bools.items()},
                bill_days_before=int(v["bill_days_before"]),
                budget_threshold=parse_currency(v["budget_threshold"]),
                low_balance_minimum=parse_currency(v["low_balance_minimum"]),
                card_limit_threshold=parse_currency(v["card_limit_threshold"]),
                weekly_spending_limit=parse_currency(v["weekly_spending_limit"]),
                quiet_start=v["quiet_start"],
                quiet_end=v["quiet_end"],
            )
            svc.save_settings(settings)
        except FORM_ERRORS as e:
            self._notif_status.configure(text_color="#F44336")
            self._notif_status_var.set(error_message(e))
            return
        self._notif_status.configure(text_color="#4CAF50")
        self._notif_status_var.set("Configurações de notificação salvas.")

    # ── Section 4: App settings ───────────────────────────────────────────────

    def _build_app_settings_section(self, parent):
        section = self._make_section(parent, "Aplicativo", row=3)

        ctk.CTkLabel(section, text="Aparência:", anchor="e", width=120).grid(
            row=0, column=0, padx=(8, 4), pady=6, sticky="e"
        )
        appearance_raw = self._db.get_setting("appearance_mode", "system")
        self._appearance_var = ctk.StringVar(value=_APPEARANCE_LABELS.get(appearance_raw, "Sistema"))
        ctk.CTkComboBox(
            section,
            values=list(_APPEARANCE_LABELS.values()),
            variable=self._appearance_var,
            width=180,
            state="readonly",
        ).grid(row=0, column=1, padx=4, pady=6, sticky="w")

        ctk.CTkLabel(section, text="Formato de data:", anchor="e", width=120).grid(
            row=1, column=0, padx=(8, 4), pady=6, sticky="e"
        )
        self._date_fmt_var = ctk.StringVar(
            value=self._db.get_setting("date_format", "DD/MM/YYYY")
        )
        ctk.CTkComboBox(
            section,
            values=DATE_FORMAT_OPTIONS,
            variable=self._date_fmt_var,
            width=180,
            state="readonly",
        ).grid(row=1, column=1, padx=4, pady=6, sticky="w")

        ctk.CTkLabel(section, text="Pasta do banco:", anchor="e", width=120).grid(
            row=2, column=0, padx=(8, 4), pady=6, sticky="e"
        )
        folder_row = ctk.CTkFrame(section, fg_color="transparent")
        folder_row.grid(row=2, column=1, sticky="w")
        self._db_folder_var = ctk.StringVar(value=get_db_folder() or "(padrão: pasta do app)")
        ctk.CTkEntry(folder_row, textvariable=self._db_folder_var, state="readonly", width=280).pack(
            side="left", padx=4
        )
        ctk.CTkButton(folder_row, text="Escolher…", width=90, command=self._browse_db_folder).pack(
            side="left", padx=4
        )
        ctk.CTkButton(
            folder_row, text="Padrão", width=70,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._reset_db_folder,
        ).pack(side="left", padx=4)

        ctk.CTkLabel(
            section,
            text="Formato de data e pasta do banco valem a partir do próximo início do app.",
            text_color="gray60",
            font=ctk.CTkFont(size=11),
            anchor="w",
        ).grid(row=3, column=0, columnspan=2, sticky="w", padx=8)

        ctk.CTkButton(
            section, text="Salvar", width=140,
            command=self._save_settings,
        ).grid(row=4, column=0, columnspan=2, pady=(10, 8))

        self._settings_status_var = ctk.StringVar()
        ctk.CTkLabel(
            section,
            textvariable=self._settings_status_var,
            text_color="#4CAF50",
            font=ctk.CTkFont(size=11),
        ).grid(row=5, column=0, columnspan=2, pady=(0, 8))

    def _browse_db_folder(self):
        path = filedialog.askdirectory(title="Escolha a pasta do banco")
        if path:
            set_db_folder(path)
            self._db_folder_var.set(path)
            self._settings_status_var.set("Reinicie o aplicativo para usar a nova pasta.")

    def _reset_db_folder(self):
        set_db_folder(None)
        self._db_folder_var.set("(padrão: pasta do app)")
        self._settings_status_var.set("Reinicie o aplicativo para usar a pasta padrão.")

    def _save_settings(self):
        appearance_key = next(
            (k for k, v in _APPEARANCE_LABELS.items() if v == self._appearance_var.get()), "system"
        )
        self._db.set_setting("appearance_mode", appearance_key)
        self._db.set_setting("date_format", self._date_fmt_var.get())
        ctk.set_appearance_mode(appearance_key)
        self._settings_status_var.set("Configurações salvas.")

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _make_section(self, parent, title: str, row: int) -> ctk.CTkFrame:
        """Create a labelled card section and return its inner frame."""
        outer = ctk.CTkFrame(parent, corner_radius=8)
        outer.grid(row=row, column=0, sticky="ew", padx=12, pady=8)
        outer.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            outer,
            text=title,
            font=ctk.CTkFont(size=14, weight="bold"),
            anchor="w",
        ).grid(row=0, column=0, sticky="w", padx=12, pady=(10, 4))

        inner = ctk.CTkFrame(outer, fg_color="transparent")
        inner.grid(row=1, column=0, sticky="ew", padx=4, pady=(0, 8))
        return inner
