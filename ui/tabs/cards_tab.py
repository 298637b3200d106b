import customtkinter as ctk
from tkinter import messagebox
from models.bill import CreditCardBill
from models.credit_card import CreditCard, CARD_TYPE_LABELS
from ui.components.bill_payment_dialog import BillPaymentDialog
from ui.components.card_form import CardForm
from ui.components.errors import FORM_ERRORS, error_message
from utils.currency import format_currency
from utils.date_helpers import format_display_date, friendly_month, today


class CardsTab(ctk.CTkFrame):
    """Card list on the left, bills of the selected card on the right."""

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
        self._selected_id: int | None = None

        self.grid_columnconfigure(0, weight=2)
        self.grid_columnconfigure(1, weight=3)
        self.grid_rowconfigure(1, weight=1)

        toolbar = ctk.CTkFrame(self, fg_color="transparent")
        toolbar.grid(row=0, column=0, columnspan=2, sticky="ew", padx=12, pady=(12, 4))
        self._totals_var = ctk.StringVar()
        ctk.CTkLabel(toolbar, textvariable=self._totals_var, text_color="gray60").pack(side="left")
        ctk.CTkButton(toolbar, text="+ Novo cartão", width=120, command=self._open_add).pack(side="right")

        self._card_list = ctk.CTkScrollableFrame(self, label_text="Cartões")
        self._card_list.grid(row=1, column=0, sticky="nsew", padx=(8, 4), pady=(0, 8))
        self._card_list.grid_columnconfigure(0, weight=1)

        right = ctk.CTkFrame(self, fg_color="transparent")
        right.grid(row=1, column=1, sticky="nsew", padx=(4, 8), pady=(0, 8))
        right.grid_columnconfigure(0, weight=1)
        right.grid_rowconfigure(1, weight=1)

        bill_bar = ctk.CTkFrame(right, fg_color=("gray88", "gray18"), corner_radius=8)
        bill_bar.grid(row=0, column=0, sticky="ew")
        self._bills_title_var = ctk.StringVar(value="Faturas")
        ctk.CTkLabel(
            bill_bar, textvariable=self._bills_title_var,
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(side="left", padx=12, pady=8)
        self._generate_btn = ctk.CTkButton(
            bill_bar, text="Gerar próximas faturas", width=170, command=self._generate_bills,
        )
        self._generate_btn.pack(side="right", padx=8)

        self._bill_list = ctk.CTkScrollableFrame(right)
        self._bill_list.grid(row=1, column=0, sticky="nsew", pady=(4, 0))
        self._bill_list.grid_columnconfigure(0, weight=1)

        self._load()

    def refresh(self):
        self._load()

    def _load(self):
        services = self._get_services()
        totals = services.cards.totals()
        self._totals_var.set(
            f"Limite total {format_currency(totals['total_credit_limit'])}  ·  "
            f"Disponível {format_currency(totals['total_available_limit'])}  ·  "
            f"Em aberto {format_currency(services.bills.total_open())}"
        )

        for w in self._card_list.winfo_children():
            w.destroy()
        cards = services.cards.get_all()
        if not cards:
            ctk.CTkLabel(self._card_list, text="Nenhum cartão cadastrado.", text_color="gray60").grid(
                row=0, column=0, pady=20
            )
        if self._selected_id not in [c.id for c in cards]:
            self._selected_id = cards[0].id if cards else None
        for i, card in enumerate(cards):
            self._add_card_row(card, i)
        self._load_bills(next((c for c in cards if c.id == self._selected_id), None))

    def _add_card_row(self, card: CreditCard, index: int):
        selected = card.id == self._selected_id
        f = ctk.CTkFrame(
            self._card_list,
            fg_color=("gray80", "gray28") if selected else ("gray90", "gray20"),
            corner_radius=8,
        )
        f.grid(row=index, column=0, sticky="ew", pady=3, padx=2)
        f.grid_columnconfigure(0, weight=1)
        f.bind("<Button-1>", lambda _e, c=card: self._select(c))

        title = f"★ {card.display_name}" if card.is_default else card.display_name
        ctk.CTkLabel(f, text=title, font=ctk.CTkFont(size=13, weight="bold"), anchor="w").grid(
            row=0, column=0, sticky="ew", padx=10, pady=(8, 0)
        )
        ctk.CTkLabel(
            f, text=CARD_TYPE_LABELS.get(card.card_type, card.card_type),
            text_color="gray60", anchor="w",
        ).grid(row=1, column=0, sticky="ew", padx=10)

        if card.has_credit_function and card.credit_limit > 0:
            pct = card.usage_percentage
            color = "#4CAF50" if pct < 70 else ("#FF9800" if pct < 90 else "#F44336")
            bar = ctk.CTkProgressBar(f, progress_color=color)
            bar.grid(row=2, column=0, sticky="ew", padx=10, pady=(4, 0))
            bar.set(min(pct / 100, 1.0))
            ctk.CTkLabel(
                f,
                text=f"Usado {format_currency(card.used_limit)} de {format_currency(card.credit_limit)}",
                text_color="gray60", anchor="w", font=ctk.CTkFont(size=11),
            ).grid(row=3, column=0, sticky="ew", padx=10)

        acts = ctk.CTkFrame(f, fg_color="transparent")
        acts.grid(row=0, column=1, rowspan=4, padx=8, pady=8)
        ctk.CTkButton(acts, text="Ver", width=50, height=24,
                      command=lambda c=card: self._select(c)).pack(pady=2)
        ctk.CTkButton(acts, text="Editar", width=50, height=24,
                      command=lambda c=card: self._open_edit(c)).pack(pady=2)

    def _select(self, card: CreditCard):
        self._selected_id = card.id
        self._load()

    def _load_bills(self, card: CreditCard | None):
        for w in self._bill_list.winfo_children():
            w.destroy()
        if card is None:
            self._bills_title_var.set("Faturas")
            self._generate_btn.configure(state="disabled")
            return
        self._bills_title_var.set(f"Faturas · {card.name}")
        can_generate = card.has_credit_function and bool(card.closing_day)
        self._generate_btn.configure(state="normal" if can_generate else "disabled")

        bills = sorted(
            self._get_services().bills.get_by_card(card.id),
            key=lambda b: b.reference_month, reverse=True,
        )
        if not bills:
            ctk.CTkLabel(self._bill_list, text="Nenhuma fatura para este cartão.", text_color="gray60").grid(
                row=0, column=0, pady=20
            )
        ref = today()
        for i, bill in enumerate(bills):
            self._add_bill_row(bill, i, ref)

    def _add_bill_row(self, bill: CreditCardBill, index: int, ref):
        bg = ("gray92", "gray17") if index % 2 == 0 else ("gray88", "gray21")
        row = ctk.CTkFrame(self._bill_list, fg_color=bg, corner_radius=4)
        row.grid(row=index, column=0, sticky="ew", pady=1, padx=2)
        row.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(row, text=friendly_month(bill.reference_month), width=130, anchor="w").grid(
            row=0, column=0, padx=8, pady=4
        )
        ctk.CTkLabel(
            row,
            text=f"Fecha {format_display_date(bill.closing_date, self._date_format)}  ·  "
                 f"Vence {format_display_date(bill.due_date, self._date_format)}",
            text_color="gray60", anchor="w",
        ).grid(row=0, column=1, padx=4, sticky="ew")

        if bill.is_paid:
            status, color = "Paga", "#4CAF50"
        elif bill.is_overdue(ref):
            status, color = "Vencida", "#F44336"
        else:
            status, color = "Aberta", "#FF9800"
        ctk.CTkLabel(row, text=status, text_color=color, width=70).grid(row=0, column=2, padx=4)
        ctk.CTkLabel(row, text=format_currency(bill.total_amount), width=100, anchor="e").grid(
            row=0, column=3, padx=4
        )
        if not bill.is_paid and bill.total_amount > 0:
            ctk.CTkButton(
                row, text="Pagar", width=60, height=24,
                command=lambda b=bill: self._open_payment(b),
            ).grid(row=0, column=4, padx=(4, 8))

    def _open_add(self):
        form = CardForm(self.winfo_toplevel(), self._get_services().cards)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("card")

    def _open_edit(self, card: CreditCard):
        form = CardForm(self.winfo_toplevel(), self._get_services().cards, card=card)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("card")

    def _open_payment(self, bill: CreditCardBill):
        services = self._get_services()
        dlg = BillPaymentDialog(
            self.winfo_toplevel(), bill, services.bills, services.accounts,
            date_format=self._date_format,
        )
        self.wait_window(dlg)
        if dlg.saved:
            self._notify_refresh("transaction")

    def _generate_bills(self):
        services = self._get_services()
        card = services.cards.get_by_id(self._selected_id) if self._selected_id else None
        if card is None:
            return
        try:
            created = services.bills.generate_future_bills(card)
        except FORM_ERRORS as e:
            messagebox.showerror("Erro", error_message(e))
            return
        if not created:
            messagebox.showinfo("Faturas", "As próximas faturas já existem.")
        self._notify_refresh("card")
