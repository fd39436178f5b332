import customtkinter as ctk
from tkcalendar import Calendar
import tkinter as tk
from tkinter import ttk
from datetime import date
from utils.date_helpers import (
    parse_date, format_date, format_display_date, parse_display_date,
)


class DatePickerWidget(ctk.CTkFrame):
    """Date entry shown in the user's display format with a calendar popup.

    .get() returns a YYYY-MM-DD string for storage; .get_date() the date itself.
    """

    def __init__(
        self,
        master,
        initial_date: date | str | None = None,
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self.grid_columnconfigure(0, weight=1)

        self._date_format = date_format
        self._popup: ctk.CTkToplevel | None = None
        self._var = tk.StringVar(
            value=format_display_date(initial_date, date_format) if initial_date else ""
        )

        self._entry = ctk.CTkEntry(self, textvariable=self._var, width=120)
        self._entry.grid(row=0, column=0, sticky="ew")
        self._entry.bind("<FocusOut>", self._on_focus_out)
        self._entry.bind("<Return>", self._on_focus_out)

        ctk.CTkButton(self, text="📅", width=32, command=self._toggle_popup).grid(
            row=0, column=1, padx=(4, 0)
        )

    def _parse_entry(self) -> date | None:
        raw = self._var.get().strip()
        if not raw:
            return None
        d = parse_display_date(raw, self._date_format)
        if d is None:
            d = parse_date(raw.replace("/", "-").replace(".", "-"))
        return d

    def get_date(self) -> date | None:
        return self._parse_entry()

    def get(self) -> str:
        """YYYY-MM-DD, or the raw text when it does not parse (services reject it)."""
        d = self._parse_entry()
        return format_date(d) if d else self._var.get().strip()

    def set(self, value: date | str | None):
        d = value if isinstance(value, date) else parse_date(value or "")
        self._var.set(format_display_date(d, self._date_format) if d else (value or ""))
        self._reset_border()

    def is_valid(self) -> bool:
        return self._parse_entry() is not None

    def _on_focus_out(self, _event=None):
        if not self._var.get().strip():
            self._reset_border()
            return
        d = self._parse_entry()
        if d:
            self.set(d)
        else:
            self._entry.configure(border_color="#F44336")

    def _reset_border(self):
        self._entry.configure(border_color=("gray65", "gray35"))

    def _toggle_popup(self):
        if self._popup and self._popup.winfo_exists():
            self._close_popup()
            return

        popup = ctk.CTkToplevel(self)
        popup.overrideredirect(True)
        popup.resizable(False, False)
        self._popup = popup

        # Match the calendar to the CTk appearance mode
        if ctk.get_appearance_mode() == "Dark":
            bg, fg = "#2b2b2b", "#ffffff"
        else:
            bg, fg = "#ffffff", "#000000"
        style = ttk.Style(popup)
        style.theme_use("default")
        style.configure("Calendar.Treeview", background=bg, foreground=fg, fieldbackground=bg)

        current = self._parse_entry() or date.today()
        cal = Calendar(
            popup,
            selectmode="day",
            year=current.year,
            month=current.month,
            day=current.day,
            date_pattern="yyyy-mm-dd",
            background=bg,
            foreground=fg,
            headersbackground=bg,
            headersforeground=fg,
            selectbackground="#1f6aa5",
            weekendbackground=bg,
            weekendforeground=fg,
            othermonthforeground="gray60",
            bordercolor=bg,
        )
        cal.pack(padx=4, pady=4)
        cal.bind("<<CalendarSelected>>", lambda e: self._on_date_selected(cal))

        self._entry.update_idletasks()
        x = self._entry.winfo_rootx()
        y = self._entry.winfo_rooty() + self._entry.winfo_height() + 2
        popup.geometry(f"+{x}+{y}")
        popup.bind("<FocusOut>", lambda e: self._maybe_close(popup))

    def _on_date_selected(self, cal):
        # Calendar always reports yyyy-mm-dd
        self.set(cal.get_date())
        self._close_popup()

    def _close_popup(self):
        if self._popup is not None:
            self._popup.destroy()
            self._popup = None

    def _maybe_close(self, popup):
        if not popup.winfo_exists():
            return
        focused = popup.focus_get()
        if focused is None or not str(focused).startswith(str(popup)):
            self._close_popup()
