import customtkinter as ctk
from models.bill import CreditCardBill
from services.account_service import AccountService
from services.bill_service import BillService
from ui.components.date_picker import DatePickerWidget
from ui.components.errors import FORM_ERRORS, error_message
from utils.constants import MAX_INSTALLMENTS
from utils.currency import format_currency, split_in_cents
from utils.date_helpers import today_str


class BillPaymentDialog(ctk.CTkToplevel):
    """Pay a card bill from an account, optionally in installments."""

    def __init__(
        self,
        master,
        bill: CreditCardBill,
        bill_service: BillService,
        account_service: AccountService,
        date_format: str = "DD/MM/YYYY",
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._bill = bill
        self._svc = bill_service
        self._accounts = account_service.get_all()
        self.saved = False

        self.title("Pagar fatura")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(
            self,
            text=f"{bill.card_name} · {bill.reference_month}\nTotal: {format_currency(bill.total_amount)}",
            font=ctk.CTkFont(size=14, weight="bold"), justify="left",
        ).grid(row=0, column=0, columnspan=2, padx=16, pady=(16, 8), sticky="w")

        ctk.CTkLabel(self, text="Conta:").grid(row=1, column=0, padx=(16, 8), pady=4, sticky="e")
        default = account_service.get_default()
        self._account_var = ctk.StringVar(value=default.name if default else "")
        ctk.CTkComboBox(
            self, values=[a.name for a in self._accounts], variable=self._account_var,
            width=220, state="readonly",
        ).grid(row=1, column=1, padx=(0, 16), pady=4, sticky="ew")

        ctk.CTkLabel(self, text="Parcelas:").grid(row=2, column=0, padx=(16, 8), pady=4, sticky="e")
        self._installments_var = ctk.StringVar(value="1")
        ctk.CTkComboBox(
            self, values=[str(i) for i in range(1, MAX_INSTALLMENTS + 1)],
            variable=self._installments_var, width=80, state="readonly",
            command=lambda _: self._update_preview(),
        ).grid(row=2, column=1, padx=(0, 16), pady=4, sticky="w")

        ctk.CTkLabel(self, text="Data:").grid(row=3, column=0, padx=(16, 8), pady=4, sticky="e")
        self._date_picker = DatePickerWidget(self, initial_date=today_str(), date_format=date_format)
        self._date_picker.grid(row=3, column=1, padx=(0, 16), pady=4, sticky="w")

        self._preview_var = ctk.StringVar()
        ctk.CTkLabel(self, textvariable=self._preview_var, text_color="gray60", anchor="w").grid(
            row=4, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew"
        )

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var, text_color="#F44336",
            wraplength=300, anchor="w",
        ).grid(row=5, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=6, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancelar", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        ctk.CTkButton(btn_frame, text="Pagar", width=90, command=self._on_pay).pack(side="right")

        self._update_preview()
        self.transient(master)
        self.grab_set()
        self._center()

    def _update_preview(self):
        n = int(self._installments_var.get())
        if n == 1 or self._bill.total_amount <= 0:
            self._preview_var.set("")
            return
        parts = split_in_cents(self._bill.total_amount, n)
        self._preview_var.set(f"{n}x de {format_currency(parts[0])}")

    def _on_pay(self):
        account = next((a for a in self._accounts if a.name == self._account_var.get()), None)
        if account is None:
            self._error_var.set("Selecione a conta de pagamento.")
            return
        if not self._date_picker.is_valid():
            self._error_var.set("Data inválida.")
            return
        try:
            self._svc.pay_bill(
                self._bill.id,
                account.id,
                installments=int(self._installments_var.get()),
                payment_date=self._date_picker.get(),
            )
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
