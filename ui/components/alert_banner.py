import customtkinter as ctk
from models.notification import Notification
from utils.constants import PRIORITY_COLORS, PRIORITY_ICONS


class AlertBanner(ctk.CTkFrame):
    """A dismissible colored banner for non-blocking notifications."""

    def __init__(self, master, message: str, color: str = "#2196F3",
                 action_text: str | None = None, action_cmd=None,
                 on_close=None, **kwargs):
        super().__init__(master, fg_color=color, corner_radius=6, **kwargs)
        self._on_close = on_close
        self.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            self, text=message, text_color="white",
            anchor="w", padx=10, pady=6
        ).grid(row=0, column=0, sticky="ew")

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=0, column=1, padx=(0, 4))

        if action_text and action_cmd:
            ctk.CTkButton(
                btn_frame, text=action_text, width=60, height=24,
                fg_color="transparent", border_width=1, border_color="white",
                hover_color="#ffffff",
                text_color="white", command=action_cmd,
            ).pack(side="left", padx=2)

        ctk.CTkButton(
            btn_frame, text="✕", width=28, height=24,
            fg_color="transparent",
            hover_color="#ffffff",
            text_color="white",
            command=self._close,
        ).pack(side="left")

    @classmethod
    def for_notification(cls, master, notification: Notification, extra: int = 0,
                         action_cmd=None, on_close=None):
        """Banner for the most urgent notification; `extra` counts the others."""
        icon = PRIORITY_ICONS.get(notification.priority, "·")
        text = f"{icon} {notification.title}: {notification.message}"
        if extra:
            text += f"  (+{extra})"
        return cls(
            master,
            message=text,
            color=PRIORITY_COLORS.get(notification.priority, "#2196F3"),
            action_text="Ver" if action_cmd else None,
            action_cmd=action_cmd,
            on_close=on_close,
        )

    def _close(self):
        if self._on_close:
            self._on_close()
        self.destroy()
