import customtkinter as ctk
from tkinter import messagebox
from models.account import Account
from ui.components.account_form import AccountForm
from ui.components.errors import FORM_ERRORS, error_message
from utils.currency import format_currency


class AccountsTab(ctk.CTkFrame):
    """Account cards with balances; the default account is starred."""

    def __init__(
        self,
        master,
        get_services,     # callable → Services
        notify_refresh,   # callable
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._get_services = get_services
        self._notify_refresh = notify_refresh

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        toolbar = ctk.CTkFrame(self, fg_color="transparent")
        toolbar.grid(row=0, column=0, sticky="ew", padx=12, pady=(12, 4))
        self._total_var = ctk.StringVar()
        ctk.CTkLabel(
            toolbar, textvariable=self._total_var,
            font=ctk.CTkFont(size=15, weight="bold"),
        ).pack(side="left")
        self._show_inactive_var = ctk.BooleanVar(value=False)
        ctk.CTkCheckBox(
            toolbar, text="Mostrar inativas", variable=self._show_inactive_var,
            command=self._load,
        ).pack(side="right", padx=(8, 0))
        ctk.CTkButton(toolbar, text="+ Nova conta", width=120, command=self._open_add).pack(side="right")

        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=8, pady=(0, 8))
        self._scroll.grid_columnconfigure((0, 1, 2), weight=1)

        self._load()

    def refresh(self):
        self._load()

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()
        accounts = self._get_services().accounts
        self._total_var.set(f"Saldo total: {format_currency(accounts.get_total_balance())}")
        rows = accounts.get_all(include_inactive=self._show_inactive_var.get())
        if not rows:
            ctk.CTkLabel(
                self._scroll, text="Nenhuma conta cadastrada.", text_color="gray60",
            ).grid(row=0, column=0, columnspan=3, pady=20)
            return
        for i, account in enumerate(rows):
            self._add_card(account, i // 3, i % 3)

    def _add_card(self, account: Account, r: int, c: int):
        card = ctk.CTkFrame(self._scroll, fg_color=("gray90", "gray20"), corner_radius=10)
        card.grid(row=r, column=c, padx=6, pady=6, sticky="nsew")
        card.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(card, text="", width=8, height=48, corner_radius=4, fg_color=account.color).grid(
            row=0, column=0, rowspan=3, padx=(10, 8), pady=10, sticky="ns"
        )
        title = f"★ {account.name}" if account.is_default else account.name
        if not account.is_active:
            title += " (inativa)"
        ctk.CTkLabel(card, text=title, font=ctk.CTkFont(size=14, weight="bold"), anchor="w").grid(
            row=0, column=1, sticky="ew", pady=(10, 0)
        )
        subtitle = account.type_label
        if account.bank_name:
            subtitle += f" · {account.bank_name}"
        if not account.include_in_total:
            subtitle += " · fora do total"
        ctk.CTkLabel(card, text=subtitle, text_color="gray60", anchor="w").grid(
            row=1, column=1, sticky="ew"
        )
        ctk.CTkLabel(
            card, text=format_currency(account.balance),
            font=ctk.CTkFont(size=18, weight="bold"),
            text_color="#4CAF50" if account.balance >= 0 else "#F44336",
            anchor="w",
        ).grid(row=2, column=1, sticky="ew", pady=(0, 6))

        acts = ctk.CTkFrame(card, fg_color="transparent")
        acts.grid(row=3, column=0, columnspan=2, sticky="e", padx=10, pady=(0, 10))
        if account.is_active and not account.is_default:
            ctk.CTkButton(
                acts, text="Tornar padrão", width=100, height=24,
                fg_color="transparent", border_width=1,
                text_color=("gray10", "gray90"),
                command=lambda a=account: self._set_default(a),
            ).pack(side="left", padx=2)
        ctk.CTkButton(
            acts, text="Editar", width=60, height=24,
            command=lambda a=account: self._open_edit(a),
        ).pack(side="left", padx=2)

    def _open_add(self):
        form = AccountForm(self.winfo_toplevel(), self._get_services().accounts)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("account")

    def _open_edit(self, account: Account):
        form = AccountForm(self.winfo_toplevel(), self._get_services().accounts, account=account)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("account")

    def _set_default(self, account: Account):
        try:
            self._get_services().accounts.set_default(account.id)
        except FORM_ERRORS as e:
            messagebox.showerror("Erro", error_message(e))
            return
        self._notify_refresh("account")
