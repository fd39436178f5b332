import customtkinter as ctk
import tkinter as tk
import csv
import logging
from tkinter import filedialog
from matplotlib.figure import Figure
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from services.report_service import ReportService
from ui.components.date_picker import DatePickerWidget
from utils.constants import REPORT_CASHFLOW, REPORT_MONTHLY, REPORT_YEARLY, TOP_CATEGORY_COUNT, TYPE_COLORS
from utils.date_helpers import (
    MONTH_ABBRS, current_month_str, friendly_month, month_bounds, next_month, prev_month, today, year_bounds,
)

logger = logging.getLogger(__name__)

_KIND_LABELS = {"Monthly": REPORT_MONTHLY, "Yearly": REPORT_YEARLY, "Cash Flow": REPORT_CASHFLOW}


class ReportsTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        report_service: ReportService,
        get_money,        # callable → MoneyFormat
        get_date_format,  # callable → str
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._report_svc = report_service
        self._get_money = get_money
        self._get_date_format = get_date_format

        self._kind_var = ctk.StringVar(value="Monthly")
        self._month = current_month_str()
        self._year = today().year
        self._period_var = ctk.StringVar()
        self._error_var = ctk.StringVar()

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._build_toolbar()
        self._build_summary()
        self._build_body()
        self._load()

    def refresh(self):
        self._load()

    # ── Toolbar ─────────────────────────────────────────────────────────────
    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))

        ctk.CTkSegmentedButton(
            bar, values=list(_KIND_LABELS), variable=self._kind_var,
            command=lambda _: self._on_kind_change(),
        ).pack(side="left", padx=(12, 12), pady=8)

        # Period navigation (monthly / yearly)
        self._nav_frame = ctk.CTkFrame(bar, fg_color="transparent")
        ctk.CTkButton(self._nav_frame, text="◀", width=28, command=lambda: self._shift(-1)).pack(side="left")
        ctk.CTkLabel(self._nav_frame, textvariable=self._period_var, width=130, anchor="center").pack(
            side="left", padx=4
        )
        ctk.CTkButton(self._nav_frame, text="▶", width=28, command=lambda: self._shift(1)).pack(side="left")

        # Date range (cash flow)
        self._range_frame = ctk.CTkFrame(bar, fg_color="transparent")
        start, end = month_bounds(self._month)
        ctk.CTkLabel(self._range_frame, text="From:").pack(side="left", padx=(0, 4))
        self._start_picker = DatePickerWidget(self._range_frame, start, self._get_date_format())
        self._start_picker.pack(side="left")
        ctk.CTkLabel(self._range_frame, text="To:").pack(side="left", padx=(8, 4))
        self._end_picker = DatePickerWidget(self._range_frame, end, self._get_date_format())
        self._end_picker.pack(side="left")
        ctk.CTkButton(self._range_frame, text="Run", width=50, command=self._load).pack(side="left", padx=8)

        ctk.CTkButton(bar, text="Export CSV", command=self._export_csv).pack(side="right", padx=8)
        ctk.CTkButton(
            bar, text="Save Report", command=self._save_report,
            fg_color="transparent", border_width=1, text_color=("gray10", "gray90"),
        ).pack(side="right", padx=4)

        ctk.CTkLabel(bar, textvariable=self._error_var, text_color="#F44336").pack(side="left", padx=8)
        self._on_kind_change(load=False)

    def _kind(self) -> str:
        return _KIND_LABELS[self._kind_var.get()]

    def _on_kind_change(self, load: bool = True):
        kind = self._kind()
        if kind == REPORT_CASHFLOW:
            self._nav_frame.pack_forget()
            self._range_frame.pack(side="left", padx=4)
        else:
            self._range_frame.pack_forget()
            self._nav_frame.pack(side="left", padx=4)
        self._update_period_label()
        if load:
            self._load()

    def _shift(self, step: int):
        if self._kind() == REPORT_YEARLY:
            self._year += step
        else:
            self._month = next_month(self._month) if step > 0 else prev_month(self._month)
        self._update_period_label()
        self._load()

    def _update_period_label(self):
        if self._kind() == REPORT_YEARLY:
            self._period_var.set(str(self._year))
        else:
            self._period_var.set(friendly_month(self._month))

    def _date_range(self):
        kind = self._kind()
        if kind == REPORT_MONTHLY:
            return month_bounds(self._month)
        if kind == REPORT_YEARLY:
            return year_bounds(self._year)
        start, end = self._start_picker.get_date(), self._end_picker.get_date()
        if start is None or end is None:
            raise ValueError("Enter a valid start and end date.")
        if start > end:
            raise ValueError("Start date must not be after the end date.")
        return start, end

    # ── Layout ──────────────────────────────────────────────────────────────
    def _build_summary(self):
        self._summary_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._summary_frame.grid(row=1, column=0, sticky="ew", padx=16, pady=10)
        self._summary_frame.grid_columnconfigure((0, 1, 2, 3), weight=1)

    def _build_body(self):
        body = ctk.CTkFrame(self, fg_color="transparent")
        body.grid(row=2, column=0, sticky="nsew", padx=16, pady=(0, 12))
        body.grid_columnconfigure(0, weight=3)
        body.grid_columnconfigure(1, weight=2)
        body.grid_rowconfigure(0, weight=1)
        body.grid_rowconfigure(1, weight=1)

        self._report_box = ctk.CTkTextbox(
            body, font=ctk.CTkFont(family="Courier", size=12), wrap="none",
        )
        self._report_box.grid(row=0, column=0, rowspan=2, sticky="nsew", padx=(0, 8))

        bar_outer = ctk.CTkFrame(body, fg_color=("gray90", "gray20"), corner_radius=8)
        bar_outer.grid(row=0, column=1, sticky="nsew", pady=(0, 4))
        self._bar_title = ctk.CTkLabel(
            bar_outer, text="", font=ctk.CTkFont(size=13, weight="bold"),
        )
        self._bar_title.pack(pady=(10, 0))
        self._bar_fig = Figure(figsize=(4, 2.5), dpi=80, tight_layout=True)
        self._bar_ax = self._bar_fig.add_subplot(111)
        self._bar_mpl = FigureCanvasTkAgg(self._bar_fig, master=bar_outer)
        self._bar_mpl.get_tk_widget().pack(fill="both", expand=True, padx=8, pady=(4, 10))

        pie_outer = ctk.CTkFrame(body, fg_color=("gray90", "gray20"), corner_radius=8)
        pie_outer.grid(row=1, column=1, sticky="nsew", pady=(4, 0))
        ctk.CTkLabel(
            pie_outer, text="Expense Breakdown",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(pady=(10, 0))
        self._pie_fig = Figure(figsize=(3, 2.5), dpi=80, tight_layout=True)
        self._pie_ax = self._pie_fig.add_subplot(111)
        self._pie_mpl = FigureCanvasTkAgg(self._pie_fig, master=pie_outer)
        self._pie_mpl.get_tk_widget().pack(fill="both", expand=True, padx=8, pady=(4, 4))
        self._legend_frame = ctk.CTkFrame(pie_outer, fg_color="transparent")
        self._legend_frame.pack(fill="x", padx=8, pady=(0, 8))

    def _style_ax(self, ax, fig):
        is_dark = ctk.get_appearance_mode() == "Dark"
        bg = "#2b2b2b" if is_dark else "#e4e4e4"
        fg = "#aaaaaa" if is_dark else "#444444"
        fig.patch.set_facecolor(bg)
        ax.set_facecolor(bg)
        ax.tick_params(colors=fg, labelsize=8)
        for spine in ax.spines.values():
            spine.set_edgecolor(fg)

    # ── Data ────────────────────────────────────────────────────────────────
    def _load(self):
        self._error_var.set("")
        try:
            start, end = self._date_range()
            text = self._report_svc.get_report(
                self._kind(), period=self._month, year=self._year, start=start, end=end,
            )
        except ValueError as e:
            self._error_var.set(str(e))
            return

        self._report_box.configure(state="normal")
        self._report_box.delete("1.0", "end")
        self._report_box.insert("1.0", text)
        self._report_box.configure(state="disabled")

        money = self._get_money()
        summary = self._report_svc.get_period_summary(start, end)
        insights = self._report_svc.get_insights(start, end)

        for w in self._summary_frame.winfo_children():
            w.destroy()
        net = summary.net
        cards = [
            ("Income", money.money(summary.income), TYPE_COLORS["income"]),
            ("Expenses", money.money(summary.expenses), TYPE_COLORS["expense"]),
            ("Net", money.money(net), "#2196F3" if net >= 0 else "#FF9800"),
            ("Avg / Day", money.money(insights.average_daily_expense), "gray60"),
        ]
        for i, (label, value, color) in enumerate(cards):
            card = ctk.CTkFrame(self._summary_frame, fg_color=("gray90", "gray20"), corner_radius=10)
            card.grid(row=0, column=i, padx=6, sticky="ew")
            ctk.CTkLabel(card, text=label, text_color="gray60").pack(pady=(10, 0), padx=16)
            ctk.CTkLabel(
                card, text=value, font=ctk.CTkFont(size=18, weight="bold"), text_color=color,
            ).pack(pady=(4, 10), padx=16)

        year = {REPORT_MONTHLY: int(self._month[:4]), REPORT_YEARLY: self._year}.get(self._kind(), start.year)
        self._bar_title.configure(text=f"Income vs Expenses {year}")
        self.after(50, lambda y=year: self._draw_bar_chart(y))

        breakdown = self._report_svc.get_top_categories(start, end, limit=TOP_CATEGORY_COUNT + 3)
        self.after(50, lambda b=breakdown: self._draw_pie_chart(b))
        for w in self._legend_frame.winfo_children():
            w.destroy()
        colors = self._pie_colors(len(breakdown))
        for item, color in zip(breakdown, colors):
            row = ctk.CTkFrame(self._legend_frame, fg_color="transparent")
            row.pack(fill="x", pady=1)
            tk.Label(row, bg=color, width=2).pack(side="left", padx=(0, 4))
            ctk.CTkLabel(
                row, text=f"{item.name}: {money.money(item.total)}",
                anchor="w", font=ctk.CTkFont(size=11),
            ).pack(side="left")

    @staticmethod
    def _pie_colors(n: int) -> list[str]:
        palette = ["#E91E63", "#9C27B0", "#2196F3", "#03A9F4", "#FF5722",
                   "#607D8B", "#3F51B5", "#CDDC39"]
        return [palette[i % len(palette)] for i in range(n)]

    def _draw_bar_chart(self, year: int):
        ax = self._bar_ax
        ax.clear()
        self._style_ax(ax, self._bar_fig)

        data = self._report_svc.get_monthly_totals(year)
        if not any(m.income or m.expenses for m in data):
            ax.text(0.5, 0.5, "No data", ha="center", va="center",
                    transform=ax.transAxes, color="gray")
            self._bar_mpl.draw_idle()
            return

        x = list(range(len(data)))
        w = 0.35
        ax.bar([i - w / 2 for i in x], [float(m.income) for m in data], w, color=TYPE_COLORS["income"])
        ax.bar([i + w / 2 for i in x], [float(m.expenses) for m in data], w, color=TYPE_COLORS["expense"])
        ax.set_xticks(x)
        ax.set_xticklabels([a[0] for a in MONTH_ABBRS])
        ax.yaxis.set_major_formatter(
            lambda v, _: f"{v/1000:.0f}k" if abs(v) >= 1000 else f"{v:.0f}"
        )
        self._bar_mpl.draw_idle()

    def _draw_pie_chart(self, breakdown):
        ax = self._pie_ax
        ax.clear()
        self._style_ax(ax, self._pie_fig)

        if not breakdown:
            ax.text(0.5, 0.5, "No expense data", ha="center", va="center",
                    transform=ax.transAxes, color="gray")
            self._pie_mpl.draw_idle()
            return

        ax.pie(
            [float(ct.total) for ct in breakdown],
            colors=self._pie_colors(len(breakdown)),
            startangle=90,
        )
        ax.set_aspect("equal")
        self._pie_mpl.draw_idle()

    # ── Export ──────────────────────────────────────────────────────────────
    def _save_report(self):
        text = self._report_box.get("1.0", "end").strip()
        if not text:
            return
        path = filedialog.asksaveasfilename(
            defaultextension=".txt",
            filetypes=[("Text files", "*.txt")],
            initialfile=f"{self._kind()}_report.txt",
        )
        if not path:
            return
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(text + "\n")
        except OSError as e:
            logger.error("Could not save report to %s: %s", path, e)
            self._error_var.set(f"Could not save report: {e}")

    def _export_csv(self):
        try:
            start, end = self._date_range()
        except ValueError as e:
            self._error_var.set(str(e))
            return
        rows = self._report_svc.export_csv(start, end)

        path = filedialog.asksaveasfilename(
            defaultextension=".csv",
            filetypes=[("CSV files", "*.csv")],
            initialfile=f"transactions_{start.isoformat()}_{end.isoformat()}.csv",
        )
        if not path:
            return
        try:
            with open(path, "w", newline="", encoding="utf-8") as f:
                csv.writer(f).writerows(rows)
        except OSError as e:
            logger.error("Could not export CSV to %s: %s", path, e)
            self._error_var.set(f"Could not export: {e}")
