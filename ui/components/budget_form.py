import customtkinter as ctk
from services.budget_service import BudgetService
from services.category_service import CategoryService
from models.budget import Budget, BUDGET_PERIOD_LABELS
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.date_picker import DatePickerWidget
from ui.components.errors import FORM_ERRORS, error_message
from utils.currency import parse_currency
from utils.date_helpers import month_range


class BudgetForm(ctk.CTkToplevel):
    """Add or edit a budget over one or more expense categories."""

    _LABEL_TO_PERIOD = {v: k for k, v in BUDGET_PERIOD_LABELS.items()}

    def __init__(
        self,
        master,
        budget_service: BudgetService,
        category_service: CategoryService,
        month: str,
        budget: Budget | None = None,
        date_format: str = "DD/MM/YYYY",
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._svc = budget_service
        self._budget = budget
        self.saved = False

        self.title("Editar Orçamento" if budget else "Novo Orçamento")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        self._categories = category_service.get_expense_categories()

        r = 0
        ctk.CTkLabel(self, text="Nome:").grid(row=r, column=0, padx=(16, 8), pady=(16, 4), sticky="e")
        self._name_var = ctk.StringVar(value=budget.name if budget else "")
        ctk.CTkEntry(self, textvariable=self._name_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=(16, 4), sticky="ew"
        )
        r += 1

        self._label("Valor (R$):", r)
        self._amount_var = ctk.StringVar(
            value=f"{budget.amount:.2f}".replace(".", ",") if budget else ""
        )
        ctk.CTkEntry(self, textvariable=self._amount_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        self._label("Período:", r)
        self._period_var = ctk.StringVar(
            value=BUDGET_PERIOD_LABELS[budget.period if budget else "monthly"]
        )
        ctk.CTkComboBox(
            self, values=list(BUDGET_PERIOD_LABELS.values()), variable=self._period_var,
            width=220, state="readonly", command=lambda _: self._on_period_change(),
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        start, end = month_range(month)
        self._label("Início:", r)
        self._start_picker = DatePickerWidget(
            self, initial_date=budget.start_date if budget else start, date_format=date_format
        )
        self._start_picker.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="w")
        r += 1

        self._end_label = self._label("Fim:", r)
        self._end_picker = DatePickerWidget(
            self, initial_date=budget.end_date if budget else end, date_format=date_format
        )
        self._end_picker.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="w")
        r += 1

        self._label("Alerta em (%):", r)
        self._alert_var = ctk.StringVar(
            value=f"{budget.alert_percentage:.0f}" if budget else "80"
        )
        ctk.CTkEntry(self, textvariable=self._alert_var, width=80).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="w"
        )
        r += 1

        # Categories
        self._label("Categorias:", r)
        cat_frame = ctk.CTkScrollableFrame(self, height=140, width=220)
        cat_frame.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        selected = set(budget.category_ids) if budget else set()
        self._cat_vars: dict[int, ctk.BooleanVar] = {}
        for cat in self._categories:
            var = ctk.BooleanVar(value=cat.id in selected)
            ctk.CTkCheckBox(cat_frame, text=cat.name, variable=var).pack(anchor="w", pady=1)
            self._cat_vars[cat.id] = var
        r += 1

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=300, anchor="w",
        ).grid(row=r, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")
        r += 1

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=r, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancelar", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        if budget:
            ctk.CTkButton(
                btn_frame, text="Excluir", width=80,
                fg_color="#F44336", hover_color="#D32F2F",
                command=self._on_delete,
            ).pack(side="left", padx=8)
        ctk.CTkButton(btn_frame, text="Salvar", width=90, command=self._on_save).pack(side="right")

        self._on_period_change()
        self.transient(master)
        self.grab_set()
        self._center()

    def _label(self, text, row) -> ctk.CTkLabel:
        label = ctk.CTkLabel(self, text=text)
        label.grid(row=row, column=0, padx=(16, 8), pady=4, sticky="e")
        return label

    def _on_period_change(self):
        # Only custom budgets take an explicit end date; the others derive it
        if self._LABEL_TO_PERIOD.get(self._period_var.get()) == "custom":
            self._end_label.grid()
            self._end_picker.grid()
        else:
            self._end_label.grid_remove()
            self._end_picker.grid_remove()

    def _on_save(self):
        try:
            amount = parse_currency(self._amount_var.get())
            alert = float(self._alert_var.get().replace(",", "."))
        except ValueError:
            self._error_var.set("Valor ou percentual de alerta inválido.")
            return
        if not self._start_picker.is_valid():
            self._error_var.set("Data inicial inválida.")
            return
        period = self._LABEL_TO_PERIOD.get(self._period_var.get(), "monthly")
        end_date = self._end_picker.get() if period == "custom" else None
        category_ids = [cid for cid, var in self._cat_vars.items() if var.get()]

        try:
            if self._budget:
                changes = dict(
                    name=self._name_var.get(),
                    amount=amount,
                    period=period,
                    start_date=self._start_picker.get(),
                    category_ids=category_ids,
                    alert_percentage=alert,
                )
                if end_date:
                    changes["end_date"] = end_date
                self._svc.update(self._budget.id, **changes)
            else:
                self._svc.create(
                    name=self._name_var.get(),
                    amount=amount,
                    start_date=self._start_picker.get(),
                    category_ids=category_ids,
                    end_date=end_date,
                    period=period,
                    alert_percentage=alert,
                )
            self.saved = True
            self.destroy()
        except FORM_ERRORS as e:
            self._error_var.set(error_message(e))

    def _on_delete(self):
        dlg = ConfirmDialog(self, "Excluir orçamento", f"Excluir o orçamento '{self._budget.name}'?")
        if not dlg.result:
            return
        try:
            self._svc.delete(self._budget.id)
            self.saved = True
            self.destroy()
        except FORM_ERRORS as e:
            self._error_var.set(error_message(e))

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
