import customtkinter as ctk
from tkinter import colorchooser
from services.account_service import AccountService
from models.account import Account, ACCOUNT_TYPE_LABELS
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.errors import FORM_ERRORS, error_message
from utils.constants import DEFAULT_ACCOUNT_COLOR
from utils.currency import parse_currency


class AccountForm(ctk.CTkToplevel):
    """Add or edit an account. Sets self.saved = True on success."""

    # Maps display label → internal key
    _TYPE_OPTIONS = list(ACCOUNT_TYPE_LABELS.values())
    _LABEL_TO_KEY = {v: k for k, v in ACCOUNT_TYPE_LABELS.items()}

    def __init__(
        self,
        master,
        account_service: AccountService,
        account: Account | None = None,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._svc = account_service
        self._account = account
        self.saved = False

        self.title("Editar Conta" if account else "Nova Conta")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        r = 0
        self._name_var = self._entry_row(r, "Nome:", account.name if account else "", first=True)
        r += 1

        self._label("Tipo:", r)
        self._type_var = ctk.StringVar(
            value=ACCOUNT_TYPE_LABELS.get(account.account_type if account else "checking")
        )
        ctk.CTkComboBox(
            self, values=self._TYPE_OPTIONS, variable=self._type_var,
            width=240, state="readonly",
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        self._initial_var = self._entry_row(
            r, "Saldo inicial (R$):",
            f"{account.initial_balance:.2f}".replace(".", ",") if account else "0,00",
        )
        r += 1
        self._bank_var = self._entry_row(r, "Banco:", account.bank_name if account else "")
        r += 1
        self._code_var = self._entry_row(r, "Código do banco:", account.bank_code if account else "")
        r += 1
        self._agency_var = self._entry_row(r, "Agência:", account.agency_number if account else "")
        r += 1
        self._number_var = self._entry_row(r, "Número da conta:", account.account_number if account else "")
        r += 1

        # Color
        self._label("Cor:", r)
        color_row = ctk.CTkFrame(self, fg_color="transparent")
        color_row.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        self._color_var = ctk.StringVar(value=account.color if account else DEFAULT_ACCOUNT_COLOR)
        ctk.CTkEntry(color_row, textvariable=self._color_var, width=100).pack(side="left")
        self._swatch = ctk.CTkLabel(
            color_row, text="", width=32, height=24, corner_radius=4,
            fg_color=self._color_var.get(),
        )
        self._swatch.pack(side="left", padx=(8, 0))
        ctk.CTkButton(
            color_row, text="Escolher", width=70,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._pick_color,
        ).pack(side="left", padx=(8, 0))
        r += 1

        self._include_var = ctk.BooleanVar(value=account.include_in_total if account else True)
        ctk.CTkCheckBox(self, text="Incluir no saldo total", variable=self._include_var).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="w"
        )
        r += 1
        self._default_var = ctk.BooleanVar(value=account.is_default if account else False)
        ctk.CTkCheckBox(self, text="Conta padrão", variable=self._default_var).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="w"
        )
        r += 1

        # Error label
        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var, text_color="#F44336",
            wraplength=300, anchor="w"
        ).grid(row=r, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")
        r += 1

        # Buttons
        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=r, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancelar", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        if account:
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
        ctk.CTkEntry(self, textvariable=var, width=240).grid(
            row=row, column=1, padx=(0, 16), pady=(16, 4) if first else 4, sticky="ew"
        )
        return var

    def _pick_color(self):
        result = colorchooser.askcolor(
            color=self._color_var.get(), parent=self, title="Cor da conta"
        )
        if result and result[1]:
            self._color_var.set(result[1].upper())
            self._swatch.configure(fg_color=result[1])

    def _on_save(self):
        try:
            initial_balance = parse_currency(self._initial_var.get())
        except ValueError:
            self._error_var.set("O saldo inicial deve ser um valor numérico.")
            return

        fields = dict(
            name=self._name_var.get(),
            account_type=self._LABEL_TO_KEY.get(self._type_var.get(), "checking"),
            initial_balance=initial_balance,
            bank_name=self._bank_var.get(),
            bank_code=self._code_var.get(),
            agency_number=self._agency_var.get(),
            account_number=self._number_var.get(),
            color=self._color_var.get().strip(),
            include_in_total=self._include_var.get(),
            is_default=self._default_var.get(),
        )
        try:
            if self._account:
                self._svc.update(self._account.id, **fields)
            else:
                self._svc.create(**fields)
            self.saved = True
            self.destroy()
        except FORM_ERRORS as e:
            self._error_var.set(error_message(e))

    def _on_delete_click(self):
        dlg = ConfirmDialog(
            self,
            "Desativar conta",
            f"Desativar a conta '{self._account.name}'? As transações são mantidas.",
        )
        if not dlg.result:
            return
        try:
            self._svc.delete(self._account.id)
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
