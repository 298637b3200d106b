import customtkinter as ctk
from tkinter import messagebox
from ui.components.category_form import CategoryForm
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.errors import FORM_ERRORS, error_message

_FILTERS = {"Todas": None, "Despesas": "expense", "Receitas": "income"}
_TYPE_BADGES = {
    "expense": ("Despesa", "#F44336"),
    "income": ("Receita", "#4CAF50"),
}


class CategoriesTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        get_services,     # callable → Services
        notify_refresh,
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._get_services = get_services
        self._notify_refresh = notify_refresh
        self._filter_var = ctk.StringVar(value="Todas")

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._build_toolbar()
        self._build_list()
        self._load()

    def refresh(self):
        self._load()

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))

        ctk.CTkLabel(
            bar, text="Categorias",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(side="left", padx=(12, 16), pady=8)

        ctk.CTkSegmentedButton(
            bar, values=list(_FILTERS), variable=self._filter_var,
            command=lambda _: self._load(),
        ).pack(side="left", padx=4)

        ctk.CTkButton(
            bar, text="+ Nova categoria", command=self._open_add,
        ).pack(side="left", padx=8, pady=6)

    def _build_list(self):
        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()

        svc = self._get_services().categories
        type_ = _FILTERS.get(self._filter_var.get())
        categories = svc.get_by_type(type_) if type_ else svc.get_all()
        if not categories:
            ctk.CTkLabel(
                self._scroll,
                text="Nenhuma categoria encontrada.",
                text_color="gray60",
            ).grid(row=0, column=0, pady=40)
            return

        hdr = ctk.CTkFrame(self._scroll, fg_color="transparent")
        hdr.grid(row=0, column=0, sticky="ew", padx=4, pady=(0, 2))
        hdr.grid_columnconfigure(1, weight=1)
        ctk.CTkLabel(hdr, text="Cor", width=44, anchor="center", text_color="gray60",
                     font=ctk.CTkFont(size=11)).grid(row=0, column=0, padx=(4, 0))
        ctk.CTkLabel(hdr, text="Nome", anchor="w", text_color="gray60",
                     font=ctk.CTkFont(size=11)).grid(row=0, column=1, padx=8, sticky="w")
        ctk.CTkLabel(hdr, text="Tipo", width=70, anchor="center", text_color="gray60",
                     font=ctk.CTkFont(size=11)).grid(row=0, column=2)
        ctk.CTkLabel(hdr, text="", width=140).grid(row=0, column=3)

        for idx, cat in enumerate(categories):
            self._add_row(idx + 1, cat)

    def _add_row(self, idx, cat):
        row = ctk.CTkFrame(
            self._scroll, fg_color=("gray90", "gray20"), corner_radius=8
        )
        row.grid(row=idx, column=0, sticky="ew", padx=4, pady=3)
        row.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(
            row, text=cat.icon, width=28, height=28, corner_radius=4,
            fg_color=cat.color,
        ).grid(row=0, column=0, padx=(10, 0), pady=8)

        name_frame = ctk.CTkFrame(row, fg_color="transparent")
        name_frame.grid(row=0, column=1, padx=8, sticky="w")
        ctk.CTkLabel(
            name_frame, text=cat.name,
            font=ctk.CTkFont(size=13, weight="bold"), anchor="w",
        ).pack(side="left")
        if cat.is_system:
            ctk.CTkLabel(
                name_frame, text="sistema",
                text_color="gray60", font=ctk.CTkFont(size=10),
            ).pack(side="left", padx=(6, 0))

        label, color = _TYPE_BADGES.get(cat.type, (cat.type, "#888888"))
        ctk.CTkLabel(
            row, text=label, width=70, anchor="center",
            text_color=color,
            font=ctk.CTkFont(size=11, weight="bold"),
        ).grid(row=0, column=2, padx=4)

        btn_frame = ctk.CTkFrame(row, fg_color="transparent")
        btn_frame.grid(row=0, column=3, padx=(4, 10), pady=6)

        edit_btn = ctk.CTkButton(
            btn_frame, text="Editar", width=60, height=26,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda c=cat: self._open_edit(c),
        )
        del_btn = ctk.CTkButton(
            btn_frame, text="Excluir", width=65, height=26,
            fg_color="#F44336", hover_color="#D32F2F",
            command=lambda c=cat: self._on_delete(c),
        )
        if cat.is_system:
            edit_btn.configure(state="disabled")
            del_btn.configure(state="disabled", fg_color="gray50")
        edit_btn.pack(side="left", padx=(0, 4))
        del_btn.pack(side="left")

    def _open_add(self):
        form = CategoryForm(self.winfo_toplevel(), self._get_services().categories)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("category")

    def _open_edit(self, cat):
        form = CategoryForm(self.winfo_toplevel(), self._get_services().categories, category=cat)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("category")

    def _on_delete(self, cat):
        dlg = ConfirmDialog(
            self.winfo_toplevel(),
            title="Excluir categoria",
            message=f"Excluir a categoria '{cat.name}'?",
            confirm_text="Excluir",
        )
        if not dlg.result:
            return
        try:
            self._get_services().categories.delete(cat.id)
        except FORM_ERRORS as e:
            messagebox.showerror("Não foi possível excluir", error_message(e))
            return
        self._notify_refresh("category")
