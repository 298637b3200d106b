import customtkinter as ctk
from models.monthly_plan import CategoryPlan
from services.category_service import CategoryService
from services.monthly_plan_service import MonthlyPlanService
from ui.components.errors import FORM_ERRORS, error_message
from utils.currency import format_currency, parse_currency
from utils.date_helpers import friendly_month, month_str


class MonthlyPlanForm(ctk.CTkToplevel):
    """Edit the spending plan of one month: a total plus per-category amounts."""

    def __init__(
        self,
        master,
        plan_service: MonthlyPlanService,
        category_service: CategoryService,
        month: int,
        year: int,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._svc = plan_service
        self._month = month
        self._year = year
        self.saved = False

        self.title(f"Planejamento · {friendly_month(month_str(month, year))}")
        self.geometry("460x560")
        self.resizable(False, True)
        self.grid_columnconfigure(1, weight=1)
        self.grid_rowconfigure(2, weight=1)

        plan = plan_service.get(month, year)
        self._categories = category_service.get_expense_categories()

        ctk.CTkLabel(self, text="Orçamento total (R$):").grid(
            row=0, column=0, padx=(16, 8), pady=(16, 4), sticky="e"
        )
        self._total_var = ctk.StringVar(
            value=self._fmt(plan.total_budget) if plan else ""
        )
        ctk.CTkEntry(self, textvariable=self._total_var, width=160).grid(
            row=0, column=1, padx=(0, 16), pady=(16, 4), sticky="w"
        )

        self._planned_var = ctk.StringVar()
        ctk.CTkLabel(self, textvariable=self._planned_var, text_color="gray60", anchor="w").grid(
            row=1, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew"
        )

        scroll = ctk.CTkScrollableFrame(self)
        scroll.grid(row=2, column=0, columnspan=2, padx=12, pady=4, sticky="nsew")
        scroll.grid_columnconfigure(0, weight=1)

        self._amount_vars: dict[int, ctk.StringVar] = {}
        for i, cat in enumerate(self._categories):
            ctk.CTkLabel(scroll, text=f"{cat.icon} {cat.name}".strip(), anchor="w").grid(
                row=i, column=0, padx=(8, 4), pady=2, sticky="ew"
            )
            planned = plan.planned_for(cat.id) if plan else None
            var = ctk.StringVar(value=self._fmt(planned) if planned else "")
            var.trace_add("write", lambda *_: self._update_planned())
            ctk.CTkEntry(scroll, textvariable=var, width=120).grid(
                row=i, column=1, padx=(4, 8), pady=2
            )
            self._amount_vars[cat.id] = var

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=400, anchor="w",
        ).grid(row=3, column=0, columnspan=2, padx=16, pady=(4, 4), sticky="ew")

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=4, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancelar", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        ctk.CTkButton(
            btn_frame, text="Copiar mês anterior", width=150,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._on_copy_previous,
        ).pack(side="left", padx=8)
        ctk.CTkButton(btn_frame, text="Salvar", width=90, command=self._on_save).pack(side="right")

        self._update_planned()
        self.transient(master)
        self.grab_set()
        self._center()

    @staticmethod
    def _fmt(value: float) -> str:
        return f"{value:.2f}".replace(".", ",")

    def _category_plans(self) -> list[CategoryPlan]:
        plans = []
        for cat_id, var in self._amount_vars.items():
            text = var.get().strip()
            if not text:
                continue
            amount = parse_currency(text)
            if amount > 0:
                plans.append(CategoryPlan(category_id=cat_id, planned_amount=amount))
        return plans

    def _update_planned(self):
        try:
            total = sum(cp.planned_amount for cp in self._category_plans())
        except ValueError:
            self._planned_var.set("Valor inválido em alguma categoria.")
            return
        self._planned_var.set(f"Distribuído entre categorias: {format_currency(total)}")

    def _on_save(self):
        try:
            total = parse_currency(self._total_var.get())
            category_plans = self._category_plans()
        except ValueError:
            self._error_var.set("Informe valores numéricos válidos.")
            return
        try:
            self._svc.save(self._month, self._year, total, category_plans)
            self.saved = True
            self.destroy()
        except FORM_ERRORS as e:
            self._error_var.set(error_message(e))

    def _on_copy_previous(self):
        try:
            self._svc.copy_from_previous(self._month, self._year)
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
