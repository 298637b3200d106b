import customtkinter as ctk
from models.budget import BudgetSummary, BUDGET_PERIOD_LABELS
from services.budget_service import generate_alerts
from ui.components.budget_form import BudgetForm
from ui.components.monthly_plan_form import MonthlyPlanForm
from utils.constants import PLAN_STATUS_COLORS
from utils.currency import format_currency
from utils.date_helpers import (
    current_month_str, friendly_month, prev_month, next_month,
    format_display_date, parse_month,
)

_PLAN_STATUS_LABELS = {
    "safe": "Tranquilo",
    "warning": "Atenção",
    "danger": "Perigo",
    "exceeded": "Estourado",
}


def _pct_color(pct: float) -> str:
    return "#4CAF50" if pct < 80 else ("#FF9800" if pct <= 100 else "#F44336")


class BudgetsTab(ctk.CTkFrame):
    """Monthly plan of the selected month on top, period budgets below."""

    def __init__(
        self,
        master,
        get_services,     # callable → Services
        notify_refresh,
        date_format: str = "DD/MM/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._get_services = get_services
        self._notify_refresh = notify_refresh
        self._date_format = date_format
        self._month = current_month_str()
        self._month_var = ctk.StringVar(value=friendly_month(self._month))

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._build_toolbar()
        self._build_list()
        self._load()

    def refresh(self):
        self._get_services().budgets.refresh_statuses()
        self._load()

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))

        ctk.CTkButton(bar, text="◀", width=28, command=self._prev_month).pack(side="left", padx=(8, 0), pady=6)
        ctk.CTkLabel(
            bar, textvariable=self._month_var, width=150, anchor="center",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(side="left", padx=4)
        ctk.CTkButton(bar, text="▶", width=28, command=self._next_month).pack(side="left", padx=(0, 12))

        ctk.CTkButton(bar, text="Planejamento do mês", command=self._open_plan).pack(side="left", padx=4)
        ctk.CTkButton(
            bar, text="+ Novo orçamento",
            command=self._open_add,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
        ).pack(side="left", padx=4)

    def _prev_month(self):
        self._month = prev_month(self._month)
        self._load()

    def _next_month(self):
        self._month = next_month(self._month)
        self._load()

    def _build_list(self):
        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)

    def _section(self, row: int, text: str):
        ctk.CTkLabel(
            self._scroll, text=text, anchor="w",
            font=ctk.CTkFont(size=14, weight="bold"),
        ).grid(row=row, column=0, sticky="ew", padx=6, pady=(10, 2))

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()
        services = self._get_services()
        self._month_var.set(friendly_month(self._month))
        r = 0

        # ── Monthly plan ──
        self._section(r, "Planejamento mensal")
        r += 1
        d = parse_month(self._month)
        summary = services.plans.get_summary(d.month, d.year)
        if summary is None:
            ctk.CTkLabel(
                self._scroll,
                text="Nenhum planejamento para este mês. Clique em 'Planejamento do mês' para criar.",
                text_color="gray60",
            ).grid(row=r, column=0, pady=12)
            r += 1
        else:
            r = self._add_plan(r, summary)

        # ── Budgets ──
        self._section(r, "Orçamentos")
        r += 1
        summaries = services.budgets.get_summaries()
        if not summaries:
            ctk.CTkLabel(
                self._scroll,
                text="Nenhum orçamento ativo. Clique em '+ Novo orçamento' para criar.",
                text_color="gray60",
            ).grid(row=r, column=0, pady=12)
            return
        for s in summaries:
            self._add_budget_card(r, s)
            r += 1

    def _add_plan(self, r: int, summary) -> int:
        card = ctk.CTkFrame(self._scroll, fg_color=("gray90", "gray20"), corner_radius=8)
        card.grid(row=r, column=0, sticky="ew", padx=4, pady=4)
        card.grid_columnconfigure(1, weight=1)
        r += 1

        text = (f"Planejado {format_currency(summary.total_planned)}  ·  "
                f"Gasto {format_currency(summary.total_spent)}  ·  "
                f"Restante {format_currency(summary.total_remaining)}")
        if summary.plan.created_from_previous:
            text += "  ·  copiado do mês anterior"
        ctk.CTkLabel(card, text=text, anchor="w").grid(
            row=0, column=0, columnspan=3, sticky="ew", padx=12, pady=(10, 4)
        )

        for i, status in enumerate(summary.categories, start=1):
            color = PLAN_STATUS_COLORS[status.status]
            ctk.CTkLabel(card, text=status.category_name, width=160, anchor="w").grid(
                row=i, column=0, padx=(12, 4), pady=2, sticky="w"
            )
            bar = ctk.CTkProgressBar(card, progress_color=color)
            bar.grid(row=i, column=1, padx=4, sticky="ew")
            bar.set(min(status.percentage / 100, 1.0))
            ctk.CTkLabel(
                card,
                text=f"{format_currency(status.spent)} / {format_currency(status.planned)}  "
                     f"{_PLAN_STATUS_LABELS[status.status]}",
                text_color=color, width=230, anchor="e",
            ).grid(row=i, column=2, padx=(4, 12), pady=2)

        for j, alert in enumerate(summary.alerts, start=len(summary.categories) + 1):
            ctk.CTkLabel(
                card, text=f"⚠ {alert.message}", text_color="#FF9800", anchor="w",
            ).grid(row=j, column=0, columnspan=3, sticky="ew", padx=12)
        ctk.CTkFrame(card, fg_color="transparent", height=8).grid(row=999, column=0)
        return r

    def _add_budget_card(self, r: int, s: BudgetSummary):
        b = s.budget
        card = ctk.CTkFrame(self._scroll, fg_color=("gray90", "gray20"), corner_radius=8)
        card.grid(row=r, column=0, sticky="ew", padx=4, pady=4)
        card.grid_columnconfigure(0, weight=1)

        hdr = ctk.CTkFrame(card, fg_color="transparent")
        hdr.grid(row=0, column=0, sticky="ew", padx=12, pady=(10, 4))
        hdr.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            hdr, text=f"{b.name}  ·  {BUDGET_PERIOD_LABELS.get(b.period, b.period)}",
            font=ctk.CTkFont(size=13, weight="bold"), anchor="w",
        ).grid(row=0, column=0, sticky="w")

        pct_color = _pct_color(s.percentage_used)
        ctk.CTkLabel(hdr, text=f"{s.percentage_used:.1f}%", text_color=pct_color).grid(
            row=0, column=1, padx=(8, 0)
        )
        ctk.CTkButton(
            hdr, text="Editar", width=60, height=24,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda budget=b: self._open_edit(budget),
        ).grid(row=0, column=2, padx=(8, 0))

        ctk.CTkLabel(
            card,
            text=(f"{format_display_date(b.start_date, self._date_format)} a "
                  f"{format_display_date(b.end_date, self._date_format)}  |  "
                  f"Gasto: {format_currency(s.total_spent)} / {format_currency(b.amount)}  |  "
                  f"Restante: {format_currency(s.total_remaining)}  |  "
                  f"{s.days_remaining} dia(s), {format_currency(s.daily_budget_remaining)}/dia"),
            text_color="gray60", anchor="w",
        ).grid(row=1, column=0, padx=12, sticky="ew")

        bar = ctk.CTkProgressBar(card, progress_color=pct_color)
        bar.grid(row=2, column=0, padx=12, pady=(4, 4), sticky="ew")
        bar.set(min(s.percentage_used / 100, 1.0))

        for i, alert in enumerate(generate_alerts(s), start=3):
            ctk.CTkLabel(
                card, text=f"⚠ {alert.message}", text_color="#FF9800", anchor="w",
            ).grid(row=i, column=0, padx=12, sticky="ew")
        ctk.CTkFrame(card, fg_color="transparent", height=6).grid(row=99, column=0)

    def _open_plan(self):
        services = self._get_services()
        d = parse_month(self._month)
        form = MonthlyPlanForm(
            self.winfo_toplevel(), services.plans, services.categories, d.month, d.year
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("budget")

    def _open_add(self):
        services = self._get_services()
        form = BudgetForm(
            self.winfo_toplevel(), services.budgets, services.categories,
            month=self._month, date_format=self._date_format,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("budget")

    def _open_edit(self, budget):
        services = self._get_services()
        form = BudgetForm(
            self.winfo_toplevel(), services.budgets, services.categories,
            month=self._month, budget=budget, date_format=self._date_format,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("budget")
