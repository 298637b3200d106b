import customtkinter as ctk
from matplotlib.figure import Figure
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from models.transaction import TransactionFilters
from ui.components.charts import draw_trend, style_ax
from utils.constants import PLAN_STATUS_COLORS
from utils.currency import format_currency
from utils.date_helpers import (
    current_month_str, friendly_month, prev_month, next_month,
    format_display_date, month_range, parse_month,
)

_TREND_MONTHS = 6


class DashboardTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        get_services,     # callable → Services
        date_format: str = "DD/MM/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._get_services = get_services
        self._date_format = date_format
        self._month = current_month_str()
        self._month_var = ctk.StringVar(value=friendly_month(self._month))

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._build_month_nav()
        self._build_summary_cards()
        self._build_bottom_section()
        self._load()

    def refresh(self):
        self._load()

    def _build_month_nav(self):
        nav = ctk.CTkFrame(self, fg_color="transparent")
        nav.grid(row=0, column=0, sticky="ew", padx=16, pady=(12, 0))
        ctk.CTkButton(nav, text="◀", width=28, command=self._prev_month).pack(side="left")
        ctk.CTkLabel(
            nav, textvariable=self._month_var,
            font=ctk.CTkFont(size=15, weight="bold"), width=160, anchor="center"
        ).pack(side="left", padx=8)
        ctk.CTkButton(nav, text="▶", width=28, command=self._next_month).pack(side="left")

    def _prev_month(self):
        self._month = prev_month(self._month)
        self._load()

    def _next_month(self):
        self._month = next_month(self._month)
        self._load()

    def _build_summary_cards(self):
        self._card_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._card_frame.grid(row=1, column=0, sticky="ew", padx=16, pady=12)
        self._card_frame.grid_columnconfigure((0, 1, 2, 3), weight=1)

    def _build_bottom_section(self):
        bottom = ctk.CTkFrame(self, fg_color="transparent")
        bottom.grid(row=2, column=0, sticky="nsew", padx=16, pady=(0, 12))
        bottom.grid_columnconfigure((0, 1, 2), weight=1)
        bottom.grid_rowconfigure(0, weight=1)

        self._recent_frame = ctk.CTkScrollableFrame(
            bottom, label_text="Transações recentes", height=260
        )
        self._recent_frame.grid(row=0, column=0, sticky="nsew", padx=(0, 8))

        self._plan_frame = ctk.CTkScrollableFrame(
            bottom, label_text="Planejamento do mês", height=260
        )
        self._plan_frame.grid(row=0, column=1, sticky="nsew", padx=8)

        chart_outer = ctk.CTkFrame(bottom, fg_color=("gray90", "gray20"), corner_radius=8)
        chart_outer.grid(row=0, column=2, sticky="nsew", padx=(8, 0))
        ctk.CTkLabel(
            chart_outer, text="Receitas x Despesas",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(pady=(10, 0))
        self._fig = Figure(figsize=(4, 3), dpi=80, tight_layout=True)
        self._ax = self._fig.add_subplot(111)
        self._mpl = FigureCanvasTkAgg(self._fig, master=chart_outer)
        self._mpl.get_tk_widget().pack(fill="both", expand=True, padx=8, pady=(4, 10))

    def _load(self):
        services = self._get_services()
        self._month_var.set(friendly_month(self._month))
        start, end = month_range(self._month)
        month_filters = TransactionFilters(start_date=start, end_date=end)

        # Summary cards
        for w in self._card_frame.winfo_children():
            w.destroy()
        totals = services.transactions.get_totals(month_filters)
        balance = services.accounts.get_total_balance()
        open_bills = services.bills.total_open()
        card_data = [
            ("Saldo total", balance, "#2196F3" if balance >= 0 else "#F44336"),
            ("Receitas", totals["income"], "#4CAF50"),
            ("Despesas", totals["expenses"], "#F44336"),
            ("Faturas em aberto", open_bills, "#FF9800"),
        ]
        for i, (label, value, color) in enumerate(card_data):
            self._make_card(self._card_frame, i, label, value, color)

        # Recent transactions
        for w in self._recent_frame.winfo_children():
            w.destroy()
        recent = services.transactions.get_all(month_filters)[:10]
        if not recent:
            ctk.CTkLabel(
                self._recent_frame, text="Nenhuma transação neste mês.",
                text_color="gray60",
            ).pack(pady=20)
        for idx, tx in enumerate(recent):
            bg = ("gray90", "gray20") if idx % 2 == 0 else ("gray86", "gray24")
            f = ctk.CTkFrame(self._recent_frame, fg_color=bg, corner_radius=4)
            f.pack(fill="x", pady=1)
            f.grid_columnconfigure(1, weight=1)
            color = "#4CAF50" if tx.type == "income" else (
                "#2196F3" if tx.type == "transfer" else "#F44336"
            )
            sign = "+" if tx.type == "income" else ("~" if tx.type == "transfer" else "-")
            ctk.CTkLabel(
                f, text=format_display_date(tx.date, self._date_format), width=85, anchor="w"
            ).grid(row=0, column=0, padx=6, pady=3)
            ctk.CTkLabel(f, text=tx.description or tx.category_name, anchor="w").grid(
                row=0, column=1, padx=4, sticky="ew"
            )
            ctk.CTkLabel(
                f, text=f"{sign}{format_currency(tx.amount)}",
                text_color=color, anchor="e", width=100,
            ).grid(row=0, column=2, padx=6)

        # Plan progress
        for w in self._plan_frame.winfo_children():
            w.destroy()
        d = parse_month(self._month)
        summary = services.plans.get_summary(d.month, d.year)
        if summary is None or not summary.categories:
            ctk.CTkLabel(
                self._plan_frame, text="Sem planejamento para este mês.",
                text_color="gray60",
            ).pack(pady=20)
        else:
            for status in summary.categories:
                f = ctk.CTkFrame(self._plan_frame, fg_color="transparent")
                f.pack(fill="x", pady=4, padx=4)
                top_row = ctk.CTkFrame(f, fg_color="transparent")
                top_row.pack(fill="x")
                ctk.CTkLabel(top_row, text=status.category_name, anchor="w").pack(side="left")
                ctk.CTkLabel(
                    top_row,
                    text=f"{format_currency(status.spent)} / {format_currency(status.planned)}",
                    anchor="e", text_color="gray60",
                ).pack(side="right")
                bar = ctk.CTkProgressBar(f, progress_color=PLAN_STATUS_COLORS[status.status])
                bar.pack(fill="x", pady=2)
                bar.set(min(status.percentage / 100, 1.0))

        trend_start, _ = month_range(self._trend_start())
        report = services.reports.get_report(
            TransactionFilters(start_date=trend_start, end_date=end)
        )
        self.after(50, lambda t=report["monthly_trend"]: self._draw_chart(t))

    def _trend_start(self) -> str:
        month = self._month
        for _ in range(_TREND_MONTHS - 1):
            month = prev_month(month)
        return month

    def _draw_chart(self, trend):
        self._ax.clear()
        style_ax(self._ax, self._fig)
        draw_trend(self._ax, trend)
        self._mpl.draw_idle()

    def _make_card(self, parent, col, label, value, color):
        card = ctk.CTkFrame(parent, fg_color=("gray90", "gray20"), corner_radius=10)
        card.grid(row=0, column=col, padx=6, sticky="ew")
        card.grid_columnconfigure(0, weight=1)
        ctk.CTkLabel(
            card, text=label, font=ctk.CTkFont(size=12),
            text_color="gray60",
        ).grid(row=0, column=0, pady=(12, 0), padx=16)
        ctk.CTkLabel(
            card,
            text=format_currency(value),
            font=ctk.CTkFont(size=20, weight="bold"),
            text_color=color,
        ).grid(row=1, column=0, pady=(4, 12), padx=16)
