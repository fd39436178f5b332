import json
import logging
import sqlite3
import zipfile
import customtkinter as ctk
from tkinter import filedialog, messagebox

from models.preferences import APPEARANCE_MODES, UserPreferences
from services.data_service import DataService
from services.preferences_service import PreferencesService
from utils.app_config import get_db_folder, set_db_folder
from utils.currency import CURRENCIES, LOCALES, MoneyFormat
from utils.date_helpers import DATE_FORMAT_OPTIONS, format_display_date, today

logger = logging.getLogger(__name__)

_IO_ERRORS = (OSError, ValueError, zipfile.BadZipFile, sqlite3.Error)


class SettingsTab(ctk.CTkFrame):
    """Settings tab: preferences, DB folder, export/import."""

    def __init__(
        self,
        master,
        preferences_service: PreferencesService,
        data_service: DataService,
        on_preferences_saved,   # callable(UserPreferences)
        notify_refresh,
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._prefs_svc = preferences_service
        self._data_svc = data_service
        self._on_preferences_saved = on_preferences_saved
        self._notify_refresh = notify_refresh

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)

        scroll = ctk.CTkScrollableFrame(self, fg_color="transparent")
        scroll.grid(row=0, column=0, sticky="nsew")
        scroll.grid_columnconfigure(0, weight=1)

        self._build_preferences_section(scroll)
        self._build_export_import_section(scroll)
        self._build_db_folder_section(scroll)
        self.refresh()

    def refresh(self):
        """Re-read preferences from the DB and update displayed values."""
        prefs = self._prefs_svc.load()
        self._appearance_var.set(prefs.appearance_mode.title())
        self._currency_var.set(prefs.currency_code)
        self._locale_var.set(prefs.locale)
        self._date_fmt_var.set(prefs.date_format)
        self._auto_save_var.set(prefs.auto_save)
        self._backup_var.set(prefs.backup_location)
        self._update_preview()

    # ── Section 1: Preferences ────────────────────────────────────────────────

    def _build_preferences_section(self, parent):
        section = self._make_section(parent, "Preferences", row=0)

        self._appearance_var = ctk.StringVar()
        self._currency_var = ctk.StringVar()
        self._locale_var = ctk.StringVar()
        self._date_fmt_var = ctk.StringVar()
        self._auto_save_var = ctk.BooleanVar()
        self._backup_var = ctk.StringVar()
        self._preview_var = ctk.StringVar()

        rows = [
            ("Appearance:", [m.title() for m in APPEARANCE_MODES], self._appearance_var),
            ("Currency:", sorted(CURRENCIES), self._currency_var),
            ("Number Format:", sorted(LOCALES), self._locale_var),
            ("Date Format:", DATE_FORMAT_OPTIONS, self._date_fmt_var),
        ]
        for r, (label, values, var) in enumerate(rows):
            ctk.CTkLabel(section, text=label, anchor="e", width=120).grid(
                row=r, column=0, padx=(8, 4), pady=6, sticky="e"
            )
            ctk.CTkComboBox(
                section, values=values, variable=var, width=180, state="readonly",
                command=lambda _: self._update_preview(),
            ).grid(row=r, column=1, padx=4, pady=6, sticky="w")

        r = len(rows)
        ctk.CTkLabel(section, text="Preview:", anchor="e", width=120).grid(
            row=r, column=0, padx=(8, 4), pady=6, sticky="e"
        )
        ctk.CTkLabel(section, textvariable=self._preview_var, anchor="w", text_color="gray60").grid(
            row=r, column=1, padx=4, pady=6, sticky="w"
        )
        r += 1

        ctk.CTkLabel(section, text="Backup Folder:", anchor="e", width=120).grid(
            row=r, column=0, padx=(8, 4), pady=6, sticky="e"
        )
        backup_row = ctk.CTkFrame(section, fg_color="transparent")
        backup_row.grid(row=r, column=1, padx=4, pady=6, sticky="ew")
        ctk.CTkEntry(backup_row, textvariable=self._backup_var, state="readonly", width=280).pack(side="left")
        ctk.CTkButton(backup_row, text="Browse…", width=80, command=self._browse_backup).pack(
            side="left", padx=(6, 0)
        )
        r += 1

        ctk.CTkCheckBox(
            section, text="Save a JSON backup to the backup folder on exit",
            variable=self._auto_save_var,
        ).grid(row=r, column=1, padx=4, pady=6, sticky="w")
        r += 1

        ctk.CTkButton(
            section, text="Save Preferences", width=140,
            command=self._save_preferences,
        ).grid(row=r, column=0, columnspan=2, pady=(10, 8))
        r += 1

        self._settings_status_var = ctk.StringVar()
        ctk.CTkLabel(
            section, textvariable=self._settings_status_var,
            text_color="#4CAF50", font=ctk.CTkFont(size=11),
        ).grid(row=r, column=0, columnspan=2, pady=(0, 8))

    def _update_preview(self):
        money = MoneyFormat.create(self._currency_var.get(), self._locale_var.get())
        sample = format_display_date(today(), self._date_fmt_var.get())
        self._preview_var.set(f"{money.money(1234.56)}   {money.signed(-50)}   {sample}")

    def _browse_backup(self):
        path = filedialog.askdirectory(title="Choose backup folder")
        if path:
            self._backup_var.set(path)

    def _save_preferences(self):
        prefs = self._prefs_svc.save(UserPreferences(
            currency_code=self._currency_var.get(),
            locale=self._locale_var.get(),
            date_format=self._date_fmt_var.get(),
            appearance_mode=self._appearance_var.get().lower(),
            auto_save=self._auto_save_var.get(),
            backup_location=self._backup_var.get(),
        ))
        ctk.set_appearance_mode(prefs.appearance_mode)
        self._on_preferences_saved(prefs)
        self._settings_status_var.set("Preferences saved.")

    # ── Section 2: Export / Import ────────────────────────────────────────────

    def _build_export_import_section(self, parent):
        section = self._make_section(parent, "Export / Import", row=1)

        self._io_status_var = ctk.StringVar()

        btn_frame = ctk.CTkFrame(section, fg_color="transparent")
        btn_frame.grid(row=0, column=0, sticky="w", padx=8, pady=6)

        buttons = [
            ("Export as JSON", self._export_json, True),
            ("Export as CSV ZIP", self._export_csv, True),
            ("Import JSON…", self._import_json, False),
            ("Import CSV ZIP…", self._import_csv, False),
        ]
        for text, cmd, primary in buttons:
            style = {} if primary else {
                "fg_color": "transparent", "border_width": 1, "text_color": ("gray10", "gray90"),
            }
            ctk.CTkButton(btn_frame, text=text, width=130, command=cmd, **style).pack(side="left", padx=4)

        ctk.CTkLabel(
            section, textvariable=self._io_status_var,
            text_color="#4CAF50", font=ctk.CTkFont(size=11), anchor="w",
        ).grid(row=1, column=0, sticky="w", padx=8, pady=(0, 6))

    def _export_json(self):
        path = filedialog.asksaveasfilename(
            title="Export as JSON",
            defaultextension=".json",
            filetypes=[("JSON files", "*.json"), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            data = self._data_svc.export_json()
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, default=str)
            self._io_status_var.set(f"Exported to {path}")
        except _IO_ERRORS as e:
            logger.error("JSON export to %s failed: %s", path, e)
            messagebox.showerror("Export Failed", str(e))

    def _export_csv(self):
        path = filedialog.asksaveasfilename(
            title="Export as CSV ZIP",
            defaultextension=".zip",
            filetypes=[("ZIP files", "*.zip"), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            self._data_svc.export_csv_zip(path)
            self._io_status_var.set(f"Exported to {path}")
        except _IO_ERRORS as e:
            logger.error("CSV export to %s failed: %s", path, e)
            messagebox.showerror("Export Failed", str(e))

    def _import_json(self):
        path = filedialog.askopenfilename(
            title="Import JSON",
            filetypes=[("JSON files", "*.json"), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            messagebox.showerror("Import Failed", f"Could not read file:\n{e}")
            return
        self._run_import(lambda mode: self._data_svc.import_json(data, mode))

    def _import_csv(self):
        path = filedialog.askopenfilename(
            title="Import CSV ZIP",
            filetypes=[("ZIP files", "*.zip"), ("All files", "*.*")],
        )
        if not path:
            return
        self._run_import(lambda mode: self._data_svc.import_csv_zip(path, mode))

    def _run_import(self, do_import):
        dlg = _ImportModeDialog(self.winfo_toplevel())
        self.wait_window(dlg)
        if not dlg.mode:
            return
        try:
            stats = do_import(dlg.mode)
        except _IO_ERRORS as e:
            logger.error("Import failed: %s", e)
            messagebox.showerror("Import Failed", str(e))
            return
        self._notify_refresh("full")
        self._io_status_var.set(self._format_stats(stats))

    def _format_stats(self, stats: dict) -> str:
        parts = [f"{v} {k}" for k, v in stats.items() if v > 0 and k != "skipped"]
        text = "Imported: " + ", ".join(parts) if parts else "Nothing new imported."
        if stats.get("skipped"):
            text += f" ({stats['skipped']} invalid rows skipped)"
        return text

    # ── Section 3: DB folder ──────────────────────────────────────────────────

    def _build_db_folder_section(self, parent):
        section = self._make_section(parent, "Database Folder", row=2)

        ctk.CTkLabel(
            section,
            text="The database file (finance.db) is stored in this folder.",
            text_color="gray60", font=ctk.CTkFont(size=11), anchor="w",
        ).grid(row=0, column=0, columnspan=3, sticky="w", padx=8, pady=(4, 6))

        self._db_folder_var = ctk.StringVar(value=get_db_folder() or "(default: app folder)")
        ctk.CTkEntry(
            section, textvariable=self._db_folder_var, state="readonly", width=340,
        ).grid(row=1, column=0, padx=(8, 4), pady=4, sticky="ew")
        section.grid_columnconfigure(0, weight=1)

        ctk.CTkButton(
            section, text="Browse…", width=90, command=self._browse_db_folder,
        ).grid(row=1, column=1, padx=4)
        ctk.CTkButton(
            section, text="Reset to Default", width=120,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._reset_db_folder,
        ).grid(row=1, column=2, padx=(4, 8))

        self._db_restart_label = ctk.CTkLabel(
            section, text="", text_color="#FF9800", font=ctk.CTkFont(size=11), anchor="w",
        )
        self._db_restart_label.grid(row=2, column=0, columnspan=3, sticky="w", padx=8, pady=(0, 6))

    def _browse_db_folder(self):
        path = filedialog.askdirectory(title="Choose DB folder")
        if path:
            self._set_db_folder(path, path)

    def _reset_db_folder(self):
        self._set_db_folder(None, "(default: app folder)")

    def _set_db_folder(self, path: str | None, shown: str):
        set_db_folder(path)
        self._db_folder_var.set(shown)
        self._db_restart_label.configure(text="Restart the app for the change to take effect.")

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _make_section(self, parent, title: str, row: int) -> ctk.CTkFrame:
        """Create a labelled card section and return its inner frame."""
        outer = ctk.CTkFrame(parent, corner_radius=8)
        outer.grid(row=row, column=0, sticky="ew", padx=12, pady=8)
        outer.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            outer, text=title, font=ctk.CTkFont(size=14, weight="bold"), anchor="w",
        ).grid(row=0, column=0, sticky="w", padx=12, pady=(10, 4))

        inner = ctk.CTkFrame(outer, fg_color="transparent")
        inner.grid(row=1, column=0, sticky="ew", padx=4, pady=(0, 8))
        inner.grid_columnconfigure(0, weight=1)
        return inner


class _ImportModeDialog(ctk.CTkToplevel):
    """Modal asking whether an import merges into or replaces existing data."""

    def __init__(self, master):
        super().__init__(master)
        self.mode: str | None = None

        self.title("Choose Import Mode")
        self.resizable(False, False)
        self.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            self, text="How should existing data be handled?",
            font=ctk.CTkFont(size=13), wraplength=300,
        ).grid(row=0, column=0, padx=24, pady=(20, 8), sticky="ew")

        ctk.CTkButton(
            self, text="Merge: add new records, skip duplicates",
            command=lambda: self._choose("merge"),
        ).grid(row=1, column=0, padx=24, pady=4, sticky="ew")
        ctk.CTkButton(
            self, text="Replace: wipe transactions, budgets and categories",
            fg_color="#F44336", hover_color="#D32F2F",
            command=lambda: self._choose("replace"),
        ).grid(row=2, column=0, padx=24, pady=(4, 8), sticky="ew")
        ctk.CTkButton(
            self, text="Cancel",
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).grid(row=3, column=0, padx=24, pady=(0, 16), sticky="ew")

        self.transient(master)
        self.grab_set()
        self._center()

    def _choose(self, mode: str):
        self.mode = mode
        self.destroy()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
