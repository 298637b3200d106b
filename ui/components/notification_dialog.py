import customtkinter as ctk
from models.notification import Notification
from services.notification_service import NotificationService
from utils.constants import PRIORITY_COLORS, PRIORITY_ICONS
from utils.date_helpers import format_datetime_display


class NotificationDialog(ctk.CTkToplevel):
    """Notification center: per-row read/dismiss and a read-all button."""

    def __init__(
        self,
        master,
        notification_service: NotificationService,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._svc = notification_service
        self.changed = False

        self.title("Notificações")
        self.geometry("600x460")
        self.resizable(False, True)
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._header_var = ctk.StringVar()
        ctk.CTkLabel(
            self,
            textvariable=self._header_var,
            font=ctk.CTkFont(size=16, weight="bold"),
            pady=12,
        ).grid(row=0, column=0, sticky="ew", padx=16)

        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=12, pady=(0, 8))
        self._scroll.grid_columnconfigure(0, weight=1)

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=2, column=0, padx=16, pady=(0, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Marcar todas como lidas", command=self._read_all,
        ).pack(side="left")
        ctk.CTkButton(
            btn_frame, text="Limpar todas", width=110,
            fg_color="#F44336", hover_color="#D32F2F",
            command=self._clear_all,
        ).pack(side="left", padx=8)
        ctk.CTkButton(
            btn_frame, text="Fechar", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="right")

        self._load()
        self.transient(master)
        self.grab_set()
        self._center()

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()
        notifications = self._svc.get_notifications()
        unread = sum(1 for n in notifications if n.is_unread)
        self._header_var.set(
            f"Notificações ({unread} não lida{'s' if unread != 1 else ''})"
        )
        if not notifications:
            ctk.CTkLabel(
                self._scroll, text="Nenhuma notificação no momento.",
                text_color="gray60",
            ).grid(row=0, column=0, pady=20)
            return
        for i, notification in enumerate(notifications):
            self._add_row(notification, i)

    def _add_row(self, notification: Notification, index: int):
        color = PRIORITY_COLORS.get(notification.priority, "#888888")
        icon = PRIORITY_ICONS.get(notification.priority, "·")

        row_frame = ctk.CTkFrame(
            self._scroll,
            fg_color=("gray90", "gray20") if notification.is_unread else ("gray95", "gray16"),
            corner_radius=6,
        )
        row_frame.grid(row=index, column=0, sticky="ew", pady=3, padx=2)
        row_frame.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(
            row_frame, text=icon, text_color=color,
            font=ctk.CTkFont(size=18), width=30,
        ).grid(row=0, column=0, rowspan=2, padx=(8, 4), pady=6)

        weight = "bold" if notification.is_unread else "normal"
        ctk.CTkLabel(
            row_frame,
            text=f"{notification.title}  ·  {format_datetime_display(notification.created_at)}",
            font=ctk.CTkFont(size=13, weight=weight),
            text_color=color, anchor="w",
        ).grid(row=0, column=1, sticky="ew", padx=(0, 4), pady=(6, 0))

        ctk.CTkLabel(
            row_frame, text=notification.message,
            font=ctk.CTkFont(size=11),
            text_color=("gray40", "gray70"),
            anchor="w", justify="left", wraplength=400,
        ).grid(row=1, column=1, sticky="ew", padx=(0, 4), pady=(0, 6))

        actions = ctk.CTkFrame(row_frame, fg_color="transparent")
        actions.grid(row=0, column=2, rowspan=2, padx=(4, 8), pady=6)
        if notification.is_unread:
            ctk.CTkButton(
                actions, text="✓", width=28, height=28,
                fg_color="transparent",
                text_color=("gray10", "gray90"),
                hover_color=("gray80", "gray30"),
                command=lambda k=notification.key: self._mark_read(k),
            ).pack(side="left")
        ctk.CTkButton(
            actions, text="✕", width=28, height=28,
            fg_color="transparent",
            text_color=("gray10", "gray90"),
            hover_color=("gray80", "gray30"),
            command=lambda k=notification.key: self._dismiss(k),
        ).pack(side="left")

    def _mark_read(self, key: str):
        self._svc.mark_read(key)
        self.changed = True
        self._load()

    def _dismiss(self, key: str):
        self._svc.dismiss(key)
        self.changed = True
        self._load()

    def _read_all(self):
        self._svc.mark_all_read()
        self.changed = True
        self._load()

    def _clear_all(self):
        self._svc.clear_all()
        self.changed = True
        self._load()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
