import customtkinter as ctk
from services.credit_card_service import CreditCardService
from models.credit_card import CreditCard, CARD_BRAND_LABELS, CARD_TYPE_LABELS
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.errors import FORM_ERRORS, error_message
from utils.constants import DEFAULT_CARD_COLOR
from utils.currency import parse_currency


class CardForm(ctk.CTkToplevel):
    """Add or edit a credit card. Sets self.saved = True on success."""

    _BRAND_TO_KEY = {v: k for k, v in CARD_BRAND_LABELS.items()}
    _TYPE_TO_KEY = {v: k for k, v in CARD_TYPE_LABELS.items()}

    def __init__(
        self,
        master,
        card_service: CreditCardService,
        card: CreditCard | None = None,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._svc = card_service
        self._card = card
        self.saved = False

        self.title("Editar Cartão" if card else "Novo Cartão")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        r = 0
        self._name_var = self._entry_row(r, "Nome:", card.name if card else "", first=True)
        r += 1

        self._brand_var = self._combo_row(
            r, "Bandeira:", list(CARD_BRAND_LABELS.values()),
            CARD_BRAND_LABELS[card.brand if card else "visa"],
        )
        r += 1
        self._type_var = self._combo_row(
            r, "Tipo:", list(CARD_TYPE_LABELS.values()),
            CARD_TYPE_LABELS[card.card_type if card else "credit"],
        )
        r += 1

        self._digits_var = self._entry_row(r, "Últimos 4 dígitos:", card.last_digits if card else "")
        r += 1
        self._limit_var = self._entry_row(
            r, "Limite (R$):",
            f"{card.credit_limit:.2f}".replace(".", ",") if card else "",
        )
        r += 1
        self._closing_var = self._entry_row(
            r, "Dia de fechamento:", str(card.closing_day or "") if card else ""
        )
        r += 1
        self._due_var = self._entry_row(
            r, "Dia de vencimento:", str(card.due_day or "") if card else ""
        )
        r += 1

        self._default_var = ctk.BooleanVar(value=card.is_default if card else False)
        ctk.CTkCheckBox(self, text="Cartão padrão", variable=self._default_var).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="w"
        )
        r += 1

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var, text_color="#F44336",
            wraplength=300, anchor="w"
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
        if card:
            ctk.CTkButton(
                btn_frame, text="Desativar", width=100,
                fg_color="#F44336", hover_color="#D32F2F",
                command=self._on_delete_click,
            ).pack(side="left", padx=8)
        ctk.CTkButton(btn_frame, text="Salvar", width=90, command=self._on_save).pack(side="right")

        self.transient(master)
        self.grab_set()
        self._center()

    def _label(self, text, row, first=False):
        ctk.CTkLabel(self, text=text).grid(
            row=row, column=0, padx=(16, 8), pady=(16, 4) if first else 4, sticky="e"
        )

    def _entry_row(self, row, label, value, first=False) -> ctk.StringVar:
        self._label(label, row, first)
        var = ctk.StringVar(value=value)
        ctk.CTkEntry(self, textvariable=var, width=220).grid(
            row=row, column=1, padx=(0, 16), pady=(16, 4) if first else 4, sticky="ew"
        )
        return var

    def _combo_row(self, row, label, values, value) -> ctk.StringVar:
        self._label(label, row)
        var = ctk.StringVar(value=value)
        ctk.CTkComboBox(self, values=values, variable=var, width=220, state="readonly").grid(
            row=row, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        return var

    @staticmethod
    def _optional_day(text: str) -> int | None:
        text = text.strip()
        if not text:
            return None
        if not text.isdigit():
            raise ValueError("Os dias de fechamento e vencimento devem ser números.")
        return int(text)

    def _on_save(self):
        try:
            limit_text = self._limit_var.get().strip()
            credit_limit = parse_currency(limit_text) if limit_text else 0.0
            closing_day = self._optional_day(self._closing_var.get())
            due_day = self._optional_day(self._due_var.get())
        except ValueError as e:
            self._error_var.set(str(e))
            return

        fields = dict(
            name=self._name_var.get(),
            brand=self._BRAND_TO_KEY.get(self._brand_var.get(), "other"),
            card_type=self._TYPE_TO_KEY.get(self._type_var.get(), "credit"),
            last_digits=self._digits_var.get().strip(),
            credit_limit=credit_limit,
            closing_day=closing_day,
            due_day=due_day,
            color=self._card.color if self._card else DEFAULT_CARD_COLOR,
            is_default=self._default_var.get(),
        )
        try:
            if self._card:
                self._svc.update(self._card.id, **fields)
            else:
                self._svc.create(**fields)
            self.saved = True
            self.destroy()
        except FORM_ERRORS as e:
            self._error_var.set(error_message(e))

    def _on_delete_click(self):
        dlg = ConfirmDialog(
            self, "Desativar cartão",
            f"Desativar o cartão '{self._card.name}'? Faturas e transações são mantidas.",
        )
        if not dlg.result:
            return
        try:
            self._svc.delete(self._card.id)
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
