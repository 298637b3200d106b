import customtkinter as ctk
from tkcalendar import Calendar
import tkinter as tk
from tkinter import ttk
from utils.date_helpers import (
    parse_date, format_date, format_display_date, parse_display_date, today,
)
from datetime import date


class DatePickerWidget(ctk.CTkFrame):
    """Date entry in the display format plus a calendar popup button.

    .get() always returns a YYYY-MM-DD string for storage.
    .set(date_str) accepts YYYY-MM-DD and converts to the display format.
    """

    def __init__(
        self,
        master,
        initial_date: str | None = None,
        date_format: str = "DD/MM/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self.grid_columnconfigure(0, weight=1)

        self._date_format = date_format
        self._popup: ctk.CTkToplevel | None = None

        display_val = format_display_date(initial_date, date_format) if initial_date else ""
        self._var = tk.StringVar(value=display_val)

        self._entry = ctk.CTkEntry(self, textvariable=self._var, width=110)
        self._entry.grid(row=0, column=0, sticky="ew")
        self._entry.bind("<FocusOut>", self._on_focus_out)
        self._entry.bind("<Return>", self._on_focus_out)

        self._btn = ctk.CTkButton(
            self, text="📅", width=32, command=self._open_popup
        )
        self._btn.grid(row=0, column=1, padx=(4, 0))

    def _parse_raw(self) -> date | None:
        raw = self._var.get().strip()
        if not raw:
            return None
        d = parse_display_date(raw, self._date_format)
        if d is None:
            d = parse_date(raw.replace(".", "/"))
        return d

    def get(self) -> str:
        """Return date as YYYY-MM-DD for storage, or the raw text if it does not parse."""
        d = self._parse_raw()
        return format_date(d) if d else self._var.get().strip()

    def set(self, date_str: str):
        """Accept a YYYY-MM-DD string and display it in the chosen format."""
        d = parse_date(date_str) if date_str else None
        if d:
            self._var.set(format_display_date(format_date(d), self._date_format))
        else:
            self._var.set(date_str or "")
        self._reset_border()

    def is_valid(self) -> bool:
        return self._parse_raw() is not None

    def _on_focus_out(self, _event=None):
        if not self._var.get().strip():
            self._reset_border()
            return
        d = self._parse_raw()
        if d:
            self._var.set(format_display_date(format_date(d), self._date_format))
            self._reset_border()
        else:
            self._entry.configure(border_color="#F44336")

    def _reset_border(self):
        self._entry.configure(border_color=("gray65", "gray35"))

    def _open_popup(self):
        if self._popup and self._popup.winfo_exists():
            self._popup.destroy()
            self._popup = None
            return

        popup = ctk.CTkToplevel(self)
        popup.overrideredirect(True)
        popup.resizable(False, False)
        self._popup = popup

        # Theme the calendar to match CTk appearance
        if ctk.get_appearance_mode() == "Dark":
            bg, fg = "#2b2b2b", "#ffffff"
        else:
            bg, fg = "#ffffff", "#000000"
        sel_bg = "#1f6aa5"
        style = ttk.Style(popup)
        style.theme_use("default")
        style.configure(
            "Calendar.Treeview",
            background=bg, foreground=fg,
            fieldbackground=bg,
        )

        current = self._parse_raw() or today()
        # Calendar always uses yyyy-mm-dd internally; we format the result ourselves
        cal = Calendar(
            popup,
            selectmode="day",
            year=current.year,
            month=current.month,
            day=current.day,
            locale="pt_BR",
            date_pattern="yyyy-mm-dd",
            background=bg,
            foreground=fg,
            headersbackground=bg,
            headersforeground=fg,
            selectbackground=sel_bg,
            weekendbackground=bg,
            weekendforeground=fg,
            othermonthforeground="gray60",
            bordercolor=bg,
        )
        cal.pack(padx=4, pady=4)
        cal.bind("<<CalendarSelected>>", lambda e: self._on_date_selected(cal, popup))

        # Position below the entry
        self._entry.update_idletasks()
        x = self._entry.winfo_rootx()
        y = self._entry.winfo_rooty() + self._entry.winfo_height() + 2
        popup.geometry(f"+{x}+{y}")

        popup.bind("<FocusOut>", lambda e: self._maybe_close(popup))

    def _on_date_selected(self, cal, popup):
        self.set(cal.get_date())
        popup.destroy()
        self._popup = None

    def _maybe_close(self, popup):
        # focus_get raises KeyError while a ttk combobox dropdown holds focus
        try:
            focused = popup.focus_get()
        except KeyError:
            focused = None
        if focused is None or not str(focused).startswith(str(popup)):
            popup.destroy()
            self._popup = None
