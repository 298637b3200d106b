import customtkinter as ctk
from tkinter import colorchooser
from services.category_service import CategoryService
from models.category import Category
from ui.components.errors import FORM_ERRORS, error_message

_TYPE_LABELS = {"expense": "Despesa", "income": "Receita"}


class CategoryForm(ctk.CTkToplevel):
    """Add or edit a category."""

    def __init__(
        self,
        master,
        category_service: CategoryService,
        category: Category | None = None,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._svc = category_service
        self._category = category
        self.saved = False

        self.title("Editar Categoria" if category else "Nova Categoria")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        r = 0

        # Name
        ctk.CTkLabel(self, text="Nome:").grid(
            row=r, column=0, padx=(16, 8), pady=(16, 4), sticky="e"
        )
        self._name_var = ctk.StringVar(value=category.name if category else "")
        ctk.CTkEntry(self, textvariable=self._name_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=(16, 4), sticky="ew"
        )
        r += 1

        # Type
        ctk.CTkLabel(self, text="Tipo:").grid(
            row=r, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        self._type_var = ctk.StringVar(value=_TYPE_LABELS[category.type if category else "expense"])
        ctk.CTkComboBox(
            self, values=list(_TYPE_LABELS.values()), variable=self._type_var,
            width=220, state="readonly",
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        # Icon
        ctk.CTkLabel(self, text="Ícone:").grid(
            row=r, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        self._icon_var = ctk.StringVar(value=category.icon if category else "")
        ctk.CTkEntry(self, textvariable=self._icon_var, width=60).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="w"
        )
        r += 1

        # Color
        ctk.CTkLabel(self, text="Cor:").grid(
            row=r, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        color_row = ctk.CTkFrame(self, fg_color="transparent")
        color_row.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")

        self._color_var = ctk.StringVar(value=category.color if category else "#888888")
        self._color_entry = ctk.CTkEntry(color_row, textvariable=self._color_var, width=100)
        self._color_entry.pack(side="left")
        self._color_entry.bind("<FocusOut>", self._sync_swatch)

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

        # Error
        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=300, anchor="w",
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
        ctk.CTkButton(btn_frame, text="Salvar", width=90, command=self._on_save).pack(side="right")

        self.transient(master)
        self.grab_set()
        self._center()

    def _pick_color(self):
        result = colorchooser.askcolor(
            color=self._color_var.get(), parent=self, title="Cor da categoria"
        )
        if result and result[1]:
            self._color_var.set(result[1].upper())
            self._swatch.configure(fg_color=result[1])

    def _sync_swatch(self, _event=None):
        color = self._color_var.get().strip()
        if color.startswith("#") and len(color) == 7:
            self._swatch.configure(fg_color=color)

    def _on_save(self):
        name = self._name_var.get()
        type_ = next((k for k, v in _TYPE_LABELS.items() if v == self._type_var.get()), "expense")
        color = self._color_var.get().strip()
        if not color.startswith("#"):
            color = "#" + color
        icon = self._icon_var.get().strip()
        try:
            if self._category:
                self._svc.update(self._category.id, name, type_, color, icon)
            else:
                self._svc.create(name, type_, color, icon)
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
