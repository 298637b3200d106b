import customtkinter as ctk
import tkinter as tk
import csv
from tkinter import filedialog
from matplotlib.figure import Figure
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from models.transaction import TransactionFilters
from ui.components.charts import draw_trend, style_ax
from utils.currency import format_currency
from utils.date_helpers import current_month_str, friendly_month, month_range, prev_month, next_month

_ALL_ACCOUNTS = "Todas as contas"
_PERIOD_SPANS = {"Mês": 1, "Trimestre": 3, "Ano": 12}


class ReportsTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        get_services,     # callable → Services
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._get_services = get_services
        self._accounts = []
        self._acct_var = ctk.StringVar(value=_ALL_ACCOUNTS)
        self._period_var = ctk.StringVar(value="Mês")
        self._month = current_month_str()
        self._month_var = ctk.StringVar(value=friendly_month(self._month))

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._build_toolbar()
        self._build_summary()
        self._build_charts()
        self._load()

    def refresh(self):
        self._load()

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))

        ctk.CTkLabel(bar, text="Conta:").pack(side="left", padx=(12, 4), pady=8)
        self._acct_combo = ctk.CTkComboBox(
            bar, values=[_ALL_ACCOUNTS], variable=self._acct_var,
            width=170, state="readonly",
            command=lambda _: self._load(),
        )
        self._acct_combo.pack(side="left", padx=(0, 12))

        ctk.CTkSegmentedButton(
            bar, values=list(_PERIOD_SPANS), variable=self._period_var,
            command=lambda _: self._load(),
        ).pack(side="left", padx=(0, 12))

        ctk.CTkButton(bar, text="◀", width=28, command=self._prev_month).pack(side="left")
        ctk.CTkLabel(bar, textvariable=self._month_var, width=140, anchor="center").pack(side="left", padx=4)
        ctk.CTkButton(bar, text="▶", width=28, command=self._next_month).pack(side="left", padx=(0, 12))

        ctk.CTkButton(bar, text="Exportar CSV", command=self._export_csv).pack(side="right", padx=8)

    def _prev_month(self):
        self._month = prev_month(self._month)
        self._load()

    def _next_month(self):
        self._month = next_month(self._month)
        self._load()

    def _build_summary(self):
        self._summary_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._summary_frame.grid(row=1, column=0, sticky="ew", padx=16, pady=10)
        self._summary_frame.grid_columnconfigure((0, 1, 2, 3), weight=1)

    def _build_charts(self):
        charts = ctk.CTkFrame(self, fg_color="transparent")
        charts.grid(row=2, column=0, sticky="nsew", padx=16, pady=(0, 12))
        charts.grid_columnconfigure(0, weight=3)
        charts.grid_columnconfigure(1, weight=2)
        charts.grid_rowconfigure(0, weight=1)

        bar_outer = ctk.CTkFrame(charts, fg_color=("gray90", "gray20"), corner_radius=8)
        bar_outer.grid(row=0, column=0, sticky="nsew", padx=(0, 8))
        ctk.CTkLabel(
            bar_outer, text="Receitas x Despesas por mês",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(pady=(10, 0))
        self._bar_fig = Figure(figsize=(5, 3), dpi=80, tight_layout=True)
        self._bar_ax = self._bar_fig.add_subplot(111)
        self._bar_mpl = FigureCanvasTkAgg(self._bar_fig, master=bar_outer)
        self._bar_mpl.get_tk_widget().pack(fill="both", expand=True, padx=8, pady=(4, 10))

        pie_outer = ctk.CTkFrame(charts, fg_color=("gray90", "gray20"), corner_radius=8)
        pie_outer.grid(row=0, column=1, sticky="nsew")
        ctk.CTkLabel(
            pie_outer, text="Despesas por categoria",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(pady=(10, 0))
        self._pie_fig = Figure(figsize=(3, 3), dpi=80, tight_layout=True)
        self._pie_ax = self._pie_fig.add_subplot(111)
        self._pie_mpl = FigureCanvasTkAgg(self._pie_fig, master=pie_outer)
        self._pie_mpl.get_tk_widget().pack(fill="both", expand=True, padx=8, pady=(4, 10))
        self._legend_frame = ctk.CTkFrame(pie_outer, fg_color="transparent")
        self._legend_frame.pack(fill="x", padx=8, pady=(0, 8))

    def _period_start(self) -> str:
        """First month of the selected period; the period ends at the shown month."""
        month = self._month
        for _ in range(_PERIOD_SPANS[self._period_var.get()] - 1):
            month = prev_month(month)
        return month

    def _filters(self) -> TransactionFilters:
        start, _ = month_range(self._period_start())
        _, end = month_range(self._month)
        acct = next((a for a in self._accounts if a.name == self._acct_var.get()), None)
        return TransactionFilters(
            start_date=start, end_date=end, account_id=acct.id if acct else None
        )

    def _load(self):
        services = self._get_services()
        self._accounts = services.accounts.get_all()
        self._acct_combo.configure(values=[_ALL_ACCOUNTS] + [a.name for a in self._accounts])
        if self._acct_var.get() not in [a.name for a in self._accounts]:
            self._acct_var.set(_ALL_ACCOUNTS)
        first = self._period_start()
        self._month_var.set(
            friendly_month(self._month) if first == self._month
            else f"{friendly_month(first)} a {friendly_month(self._month)}"
        )

        report = services.reports.get_report(self._filters())

        for w in self._summary_frame.winfo_children():
            w.destroy()
        for i, (label, value, color) in enumerate([
            ("Receitas", report["total_income"], "#4CAF50"),
            ("Despesas", report["total_expenses"], "#F44336"),
            ("Saldo", report["balance"], "#2196F3" if report["balance"] >= 0 else "#FF9800"),
            ("Despesa média", report["average_expense"], "#9C27B0"),
        ]):
            card = ctk.CTkFrame(
                self._summary_frame, fg_color=("gray90", "gray20"), corner_radius=10
            )
            card.grid(row=0, column=i, padx=6, sticky="ew")
            ctk.CTkLabel(card, text=label, text_color="gray60").pack(pady=(10, 0), padx=16)
            ctk.CTkLabel(
                card, text=format_currency(value),
                font=ctk.CTkFont(size=18, weight="bold"),
                text_color=color,
            ).pack(pady=(4, 10), padx=16)

        self.after(50, lambda t=report["monthly_trend"]: self._draw_bar_chart(t))

        breakdown = report["expenses_by_category"]
        self.after(50, lambda b=breakdown: self._draw_pie_chart(b))
        for w in self._legend_frame.winfo_children():
            w.destroy()
        for item in breakdown[:8]:
            row = ctk.CTkFrame(self._legend_frame, fg_color="transparent")
            row.pack(fill="x", pady=1)
            tk.Label(row, bg=item["color_hex"], width=2).pack(side="left", padx=(0, 4))
            ctk.CTkLabel(
                row,
                text=f"{item['category']}: {format_currency(item['total'])} ({item['percentage']:.0f}%)",
                anchor="w", font=ctk.CTkFont(size=11),
            ).pack(side="left")

    def _draw_bar_chart(self, trend):
        ax = self._bar_ax
        ax.clear()
        style_ax(ax, self._bar_fig)
        draw_trend(ax, trend)
        self._bar_mpl.draw_idle()

    def _draw_pie_chart(self, breakdown):
        ax = self._pie_ax
        ax.clear()
        style_ax(ax, self._pie_fig)

        total = sum(d["total"] for d in breakdown) if breakdown else 0
        if not breakdown or total == 0:
            ax.text(0.5, 0.5, "Sem despesas", ha="center", va="center",
                    transform=ax.transAxes, color="gray")
            self._pie_mpl.draw_idle()
            return

        ax.pie(
            [d["total"] for d in breakdown],
            colors=[d["color_hex"] for d in breakdown],
            startangle=90,
        )
        ax.set_aspect("equal")
        self._pie_mpl.draw_idle()

    def _export_csv(self):
        rows = self._get_services().reports.export_rows(self._filters())
        path = filedialog.asksaveasfilename(
            defaultextension=".csv",
            filetypes=[("Arquivos CSV", "*.csv")],
            initialfile=f"detetive_{self._period_start()}_{self._month}.csv",
        )
        if not path:
            return
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, delimiter=";")
            writer.writerows(rows)
