import customtkinter as ctk
from models.transaction import Transaction, TRANSACTION_TYPE_LABELS, EXPENSE_TYPES
from services.monthly_plan_service import MonthlyPlanService
from services.registry import Services
from ui.components.date_picker import DatePickerWidget
from ui.components.errors import FORM_ERRORS, error_message
from utils.constants import NO_CATEGORY_NAME
from utils.currency import parse_currency
from utils.date_helpers import today_str, parse_date


class TransactionForm(ctk.CTkToplevel):
    """Add or edit a transaction of any type.

    Expenses are checked against the month's plan first: the first Save shows
    the warning, a second Save confirms.
    """

    _last_date: str = today_str()  # reset to today on each app launch
    _LABEL_TO_TYPE = {v: k for k, v in TRANSACTION_TYPE_LABELS.items()}

    def __init__(
        self,
        master,
        services: Services,
        initial_type: str = "expense",
        transaction: Transaction | None = None,
        default_account_id: int | None = None,
        date_format: str = "DD/MM/YYYY",
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._services = services
        self._transaction = transaction
        self._date_format = date_format
        self._plan_warned = False
        self.saved = False

        if transaction:
            initial_type = transaction.type
        self.title(f"{'Editar' if transaction else 'Nova'} transação")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        self._accounts = services.accounts.get_all()
        self._cards = services.cards.get_all()
        self._account_names = [a.name for a in self._accounts]
        self._card_names = [c.display_name for c in self._cards]

        default_account = next(
            (a for a in self._accounts if a.id == default_account_id), None
        ) or services.accounts.get_default()

        r = 0
        # Type selector, only for new transactions
        self._type_var = ctk.StringVar(value=TRANSACTION_TYPE_LABELS[initial_type])
        if not transaction:
            self._label("Tipo:", r)
            ctk.CTkSegmentedButton(
                self, values=list(TRANSACTION_TYPE_LABELS.values()),
                variable=self._type_var,
                command=lambda _: self._on_type_change(),
            ).grid(row=r, column=1, padx=(0, 16), pady=(16, 4), sticky="ew")
            r += 1

        self._desc_var = self._entry_row(r, "Descrição:", transaction.description if transaction else "")
        r += 1
        self._amount_var = self._entry_row(
            r, "Valor (R$):",
            f"{transaction.amount:.2f}".replace(".", ",") if transaction else "",
        )
        r += 1

        self._label("Data:", r)
        self._date_picker = DatePickerWidget(
            self,
            initial_date=transaction.date if transaction else TransactionForm._last_date,
            date_format=date_format,
        )
        self._date_picker.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="w")
        r += 1

        # Account / card / destination rows are shown according to the type
        account_name = ""
        if transaction and transaction.account_id:
            account_name = next((a.name for a in self._accounts if a.id == transaction.account_id), "")
        elif default_account:
            account_name = default_account.name
        self._account_var, self._account_widgets = self._combo_row(
            r, "Conta:", self._account_names, account_name
        )
        r += 1

        card_name = self._card_names[0] if self._card_names else ""
        if transaction and transaction.credit_card_id:
            card_name = next(
                (c.display_name for c in self._cards if c.id == transaction.credit_card_id), ""
            )
        self._card_var, self._card_widgets = self._combo_row(r, "Cartão:", self._card_names, card_name)
        r += 1

        to_name = ""
        if transaction and transaction.transfer_to_account_id:
            to_name = next(
                (a.name for a in self._accounts if a.id == transaction.transfer_to_account_id), ""
            )
        self._to_var, self._to_widgets = self._combo_row(r, "Conta destino:", self._account_names, to_name)
        r += 1

        self._cat_var, self._cat_widgets = self._combo_row(r, "Categoria:", [], "")
        self._cat_combo = self._cat_widgets[1]
        r += 1

        self._paid_var = ctk.BooleanVar(value=transaction.is_paid if transaction else True)
        ctk.CTkCheckBox(self, text="Pago / recebido", variable=self._paid_var).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="w"
        )
        r += 1
        self._notes_var = self._entry_row(r, "Observações:", transaction.notes if transaction else "")
        r += 1

        # Error / plan warning
        self._error_var = ctk.StringVar()
        self._error_label = ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=320, anchor="w"
        )
        self._error_label.grid(row=r, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")
        r += 1

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=r, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancelar", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        ctk.CTkButton(btn_frame, text="Salvar", width=110, command=self._on_save).pack(side="right")

        self._on_type_change(initial_category=transaction.category_id if transaction else None)
        self.transient(master)
        self.grab_set()
        self._center()

    # ── Layout helpers ───────────────────────────────────────────────────────

    def _label(self, text, row) -> ctk.CTkLabel:
        label = ctk.CTkLabel(self, text=text)
        label.grid(row=row, column=0, padx=(16, 8), pady=4, sticky="e")
        return label

    def _entry_row(self, row, label, value) -> ctk.StringVar:
        self._label(label, row)
        var = ctk.StringVar(value=value)
        ctk.CTkEntry(self, textvariable=var, width=240).grid(
            row=row, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        return var

    def _combo_row(self, row, label, values, value):
        lbl = self._label(label, row)
        var = ctk.StringVar(value=value)
        combo = ctk.CTkComboBox(self, values=values, variable=var, width=240, state="readonly")
        combo.grid(row=row, column=1, padx=(0, 16), pady=4, sticky="ew")
        return var, (lbl, combo)

    @staticmethod
    def _show(widgets, visible: bool):
        for w in widgets:
            if visible:
                w.grid()
            else:
                w.grid_remove()

    @property
    def _type(self) -> str:
        return self._LABEL_TO_TYPE.get(self._type_var.get(), "expense")

    def _on_type_change(self, initial_category: int | None = None):
        t = self._type
        self._plan_warned = False
        self._show(self._account_widgets, t in ("income", "expense", "transfer"))
        self._show(self._card_widgets, t == "credit_card_expense")
        self._show(self._to_widgets, t == "transfer")
        self._show(self._cat_widgets, t != "transfer")

        cat_type = "income" if t == "income" else "expense"
        self._cats = self._services.categories.get_by_type(cat_type)
        names = [NO_CATEGORY_NAME] + [c.name for c in self._cats]
        self._cat_combo.configure(values=names)
        current = next((c.name for c in self._cats if c.id == initial_category), None)
        self._cat_var.set(current or NO_CATEGORY_NAME)

    # ── Save ─────────────────────────────────────────────────────────────────

    def _selected_category_id(self) -> int | None:
        return next((c.id for c in self._cats if c.name == self._cat_var.get()), None)

    def _plan_warning(self, category_id: int, amount: float, date_str: str) -> str | None:
        d = parse_date(date_str)
        plans = self._services.plans
        plan = plans.get(d.month, d.year)
        if plan is None:
            return None
        summary = plans.get_summary(d.month, d.year)
        spent = next((c.spent for c in summary.categories if c.category_id == category_id), 0.0)
        if self._transaction and self._transaction.category_id == category_id:
            spent -= self._transaction.amount
        alert = MonthlyPlanService.check_transaction_alert(
            plan, category_id, amount, spent, self._cat_var.get()
        )
        return alert.message if alert else None

    def _on_save(self):
        try:
            amount = parse_currency(self._amount_var.get())
        except ValueError:
            self._error_var.set("Valor inválido.")
            return
        if not self._date_picker.is_valid():
            self._error_var.set("Data inválida.")
            return

        type_ = self._type
        date_str = self._date_picker.get()
        account = next((a for a in self._accounts if a.name == self._account_var.get()), None)
        card = next((c for c in self._cards if c.display_name == self._card_var.get()), None)
        to_account = next((a for a in self._accounts if a.name == self._to_var.get()), None)
        category_id = self._selected_category_id() if type_ != "transfer" else None

        if type_ in EXPENSE_TYPES and category_id and not self._plan_warned:
            warning = self._plan_warning(category_id, amount, date_str)
            if warning:
                self._plan_warned = True
                self._error_label.configure(text_color="#FF9800")
                self._error_var.set(f"{warning} Clique em Salvar novamente para confirmar.")
                return

        fields = dict(
            description=self._desc_var.get(),
            amount=amount,
            date=date_str,
            account_id=account.id if account and type_ != "credit_card_expense" else None,
            category_id=category_id,
            credit_card_id=card.id if card and type_ == "credit_card_expense" else None,
            transfer_to_account_id=to_account.id if to_account and type_ == "transfer" else None,
            is_paid=self._paid_var.get(),
            notes=self._notes_var.get(),
        )
        try:
            if self._transaction:
                self._services.transactions.update(self._transaction.id, type=type_, **fields)
            else:
                self._services.transactions.create(type_=type_, **fields)
            TransactionForm._last_date = date_str
            self.saved = True
            self.destroy()
        except FORM_ERRORS as e:
            self._error_label.configure(text_color="#F44336")
            self._error_var.set(error_message(e))

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
