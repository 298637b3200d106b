import customtkinter as ctk
from tkinter import messagebox
from models.transaction import Transaction, TransactionFilters, TRANSACTION_TYPE_LABELS
from ui.components.transaction_form import TransactionForm
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.errors import FORM_ERRORS, error_message
from utils.currency import format_currency
from utils.date_helpers import (
    current_month_str, friendly_month, prev_month, next_month,
    format_display_date, month_range,
)


_MAX_RENDERED_ROWS = 100
_ALL = "Todas"
_ALL_ACCOUNTS = "Todas as contas"
_TYPE_FILTERS = {_ALL: None, **{v: k for k, v in TRANSACTION_TYPE_LABELS.items()}}
_TYPE_COLORS = {
    "income": "#4CAF50",
    "expense": "#F44336",
    "credit_card_expense": "#9C27B0",
    "transfer": "#2196F3",
}


class TransactionsTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        get_services,     # callable → Services
        notify_refresh,   # callable
        date_format: str = "DD/MM/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._get_services = get_services
        self._notify_refresh = notify_refresh
        self._date_format = date_format

        self._month = current_month_str()
        self._month_var = ctk.StringVar(value=friendly_month(self._month))
        self._type_var = ctk.StringVar(value=_ALL)
        self._account_var = ctk.StringVar(value=_ALL_ACCOUNTS)
        self._search_var = ctk.StringVar()
        self._search_var.trace_add("write", lambda *_: self._load())
        self._accounts = []

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(3, weight=1)

        self._build_filter_bar()
        self._build_totals()
        self._build_header()
        self._build_list()
        self._load()

    def refresh(self):
        self._load()

    # ── Filter bar ──────────────────────────────────────────────────────────
    def _build_filter_bar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))
        bar.grid_columnconfigure(6, weight=1)

        ctk.CTkButton(bar, text="◀", width=28, command=self._prev_month).grid(
            row=0, column=0, padx=(8, 0), pady=6
        )
        ctk.CTkLabel(bar, textvariable=self._month_var, width=130, anchor="center").grid(
            row=0, column=1, padx=4
        )
        ctk.CTkButton(bar, text="▶", width=28, command=self._next_month).grid(
            row=0, column=2, padx=(0, 8)
        )

        ctk.CTkSegmentedButton(
            bar,
            values=list(_TYPE_FILTERS),
            variable=self._type_var,
            command=lambda _: self._load(),
        ).grid(row=0, column=3, padx=8)

        self._account_combo = ctk.CTkComboBox(
            bar, values=[_ALL_ACCOUNTS], variable=self._account_var,
            width=170, state="readonly", command=lambda _: self._load(),
        )
        self._account_combo.grid(row=0, column=4, padx=8)

        ctk.CTkEntry(
            bar, textvariable=self._search_var,
            placeholder_text="Buscar…", width=160,
        ).grid(row=0, column=5, padx=8)

        btn_frame = ctk.CTkFrame(bar, fg_color="transparent")
        btn_frame.grid(row=0, column=7, padx=(0, 8))
        for label, type_ in [
            ("+ Receita", "income"),
            ("+ Despesa", "expense"),
            ("+ Cartão", "credit_card_expense"),
            ("+ Transferência", "transfer"),
        ]:
            ctk.CTkButton(
                btn_frame, text=label, width=96,
                command=lambda t=type_: self._open_add_form(t),
            ).pack(side="left", padx=2)

    def _prev_month(self):
        self._month = prev_month(self._month)
        self._load()

    def _next_month(self):
        self._month = next_month(self._month)
        self._load()

    def _build_totals(self):
        self._totals_var = ctk.StringVar()
        ctk.CTkLabel(self, textvariable=self._totals_var, text_color="gray60", anchor="w").grid(
            row=1, column=0, sticky="ew", padx=16, pady=(4, 0)
        )

    # ── Column headers ───────────────────────────────────────────────────────
    def _build_header(self):
        hdr = ctk.CTkFrame(self, fg_color=("gray82", "gray22"), corner_radius=0)
        hdr.grid(row=2, column=0, sticky="ew", padx=8, pady=(4, 0))
        cols = [("✓", 30), ("Data", 85), ("Tipo", 120), ("Categoria", 130),
                ("Descrição", 220), ("Conta / Cartão", 150), ("Valor", 100), ("Ações", 110)]
        for i, (label, width) in enumerate(cols):
            ctk.CTkLabel(
                hdr, text=label, width=width, anchor="w",
                font=ctk.CTkFont(weight="bold"),
            ).grid(row=0, column=i, padx=4, pady=4, sticky="w")

    def _build_list(self):
        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=3, column=0, sticky="nsew", padx=8, pady=(0, 8))
        self._scroll.grid_columnconfigure(0, weight=1)

    def _filters(self) -> TransactionFilters:
        start, end = month_range(self._month)
        account = next((a for a in self._accounts if a.name == self._account_var.get()), None)
        return TransactionFilters(
            type=_TYPE_FILTERS.get(self._type_var.get()),
            account_id=account.id if account else None,
            start_date=start,
            end_date=end,
            search=self._search_var.get().strip() or None,
        )

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()
        services = self._get_services()
        self._month_var.set(friendly_month(self._month))

        self._accounts = services.accounts.get_all()
        self._account_combo.configure(values=[_ALL_ACCOUNTS] + [a.name for a in self._accounts])
        if self._account_var.get() not in [a.name for a in self._accounts]:
            self._account_var.set(_ALL_ACCOUNTS)
        account_names = {a.id: a.name for a in self._accounts}
        card_names = {c.id: c.display_name for c in services.cards.get_all(include_inactive=True)}

        filters = self._filters()
        rows = services.transactions.get_all(filters)
        totals = services.transactions.get_totals(filters)
        self._totals_var.set(
            f"Receitas {format_currency(totals['income'])}  ·  "
            f"Despesas {format_currency(totals['expenses'])}  ·  "
            f"Saldo {format_currency(totals['balance'])}"
        )

        if not rows:
            ctk.CTkLabel(
                self._scroll, text="Nenhuma transação neste período.",
                text_color="gray60",
            ).grid(row=0, column=0, pady=20)
            return

        for idx, tx in enumerate(rows[:_MAX_RENDERED_ROWS]):
            if tx.credit_card_id:
                where = card_names.get(tx.credit_card_id, "—")
            elif tx.type == "transfer":
                where = (f"{account_names.get(tx.account_id, '?')} → "
                         f"{account_names.get(tx.transfer_to_account_id, '?')}")
            else:
                where = account_names.get(tx.account_id, "—")
            self._add_row(idx, tx, where)

        if len(rows) > _MAX_RENDERED_ROWS:
            ctk.CTkLabel(
                self._scroll,
                text=f"Mostrando {_MAX_RENDERED_ROWS} de {len(rows)} transações. "
                     "Use os filtros ou a busca para refinar.",
                text_color="gray60",
                font=ctk.CTkFont(size=11),
            ).grid(row=_MAX_RENDERED_ROWS, column=0, pady=8)

    def _add_row(self, idx: int, tx: Transaction, where: str):
        bg = ("gray92", "gray17") if idx % 2 == 0 else ("gray88", "gray21")
        row = ctk.CTkFrame(self._scroll, fg_color=bg, corner_radius=4)
        row.grid(row=idx, column=0, sticky="ew", pady=1, padx=2)

        paid_var = ctk.BooleanVar(value=tx.is_paid)
        ctk.CTkCheckBox(
            row, text="", variable=paid_var, width=30,
            command=lambda t=tx, v=paid_var: self._toggle_paid(t, v),
        ).grid(row=0, column=0, padx=(6, 0), pady=4)

        ctk.CTkLabel(
            row, text=format_display_date(tx.date, self._date_format), width=85, anchor="w"
        ).grid(row=0, column=1, padx=4, pady=4)

        color = _TYPE_COLORS.get(tx.type, "gray")
        ctk.CTkLabel(
            row, text=TRANSACTION_TYPE_LABELS.get(tx.type, tx.type), width=120, anchor="w",
            text_color=color,
        ).grid(row=0, column=2, padx=4)

        ctk.CTkLabel(row, text=tx.category_name or "—", width=130, anchor="w").grid(
            row=0, column=3, padx=4
        )

        description = tx.description or "—"
        if tx.installment_total:
            description += f" ({tx.installment_number}/{tx.installment_total})"
        ctk.CTkLabel(row, text=description, width=220, anchor="w").grid(
            row=0, column=4, padx=4
        )
        ctk.CTkLabel(row, text=where, width=150, anchor="w").grid(row=0, column=5, padx=4)

        sign = "+" if tx.type == "income" else ("" if tx.type == "transfer" else "-")
        ctk.CTkLabel(
            row, text=f"{sign}{format_currency(tx.amount)}", width=100, anchor="e",
            text_color=color,
        ).grid(row=0, column=6, padx=4)

        acts = ctk.CTkFrame(row, fg_color="transparent")
        acts.grid(row=0, column=7, padx=(4, 6))
        ctk.CTkButton(
            acts, text="Editar", width=52, height=24,
            command=lambda t=tx: self._open_edit_form(t),
        ).pack(side="left", padx=2)
        ctk.CTkButton(
            acts, text="Excluir", width=52, height=24,
            fg_color="#F44336", hover_color="#D32F2F",
            command=lambda t=tx: self._delete_tx(t),
        ).pack(side="left")

    def _toggle_paid(self, tx: Transaction, var: ctk.BooleanVar):
        try:
            self._get_services().transactions.update(tx.id, is_paid=var.get())
        except FORM_ERRORS as e:
            var.set(not var.get())
            messagebox.showerror("Erro", error_message(e))
            return
        self._notify_refresh("transaction")

    def _open_add_form(self, type_: str):
        account = next((a for a in self._accounts if a.name == self._account_var.get()), None)
        form = TransactionForm(
            self.winfo_toplevel(),
            self._get_services(),
            initial_type=type_,
            default_account_id=account.id if account else None,
            date_format=self._date_format,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("transaction")

    def _open_edit_form(self, tx: Transaction):
        form = TransactionForm(
            self.winfo_toplevel(),
            self._get_services(),
            transaction=tx,
            date_format=self._date_format,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("transaction")

    def _delete_tx(self, tx: Transaction):
        dlg = ConfirmDialog(
            self.winfo_toplevel(),
            "Excluir transação",
            f"Excluir '{tx.description}' de {format_currency(tx.amount)}?",
            confirm_text="Excluir",
        )
        if not dlg.result:
            return
        try:
            self._get_services().transactions.delete(tx.id)
        except FORM_ERRORS as e:
            messagebox.showerror("Erro", error_message(e))
            return
        self._notify_refresh("transaction")
