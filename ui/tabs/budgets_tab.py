import customtkinter as ctk
from models.report import BudgetStatus
from services.budget_service import BudgetService
from ui.components.budget_form import BudgetForm
from utils.constants import BUDGET_WARNING_THRESHOLD
from utils.date_helpers import current_month_str, friendly_month, prev_month, next_month


def _status_color(ratio: float) -> str:
    if ratio < BUDGET_WARNING_THRESHOLD:
        return "#4CAF50"
    return "#FF9800" if ratio <= 1.0 else "#F44336"


class BudgetsTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        budget_service: BudgetService,
        get_money,        # callable → MoneyFormat
        notify_refresh,
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = budget_service
        self._get_money = get_money
        self._notify_refresh = notify_refresh
        self._month = current_month_str()
        self._month_var = ctk.StringVar(value=friendly_month(self._month))
        self._message_var = ctk.StringVar()

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._build_toolbar()
        ctk.CTkLabel(self, textvariable=self._message_var, text_color="gray60", anchor="w").grid(
            row=1, column=0, sticky="ew", padx=16
        )
        self._build_list()
        self._load()

    def refresh(self):
        self._load()

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))

        ctk.CTkButton(bar, text="◀", width=28, command=lambda: self._shift_month(prev_month)).pack(
            side="left", padx=(8, 0), pady=6
        )
        ctk.CTkLabel(
            bar, textvariable=self._month_var, width=130, anchor="center",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(side="left", padx=4)
        ctk.CTkButton(bar, text="▶", width=28, command=lambda: self._shift_month(next_month)).pack(
            side="left", padx=(0, 12)
        )

        ctk.CTkButton(bar, text="+ Add Budget", command=self._open_add).pack(side="left", padx=4)
        ctk.CTkButton(
            bar, text="Copy from Previous Month",
            command=self._copy_prev,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
        ).pack(side="left", padx=4)

    def _shift_month(self, step):
        self._month = step(self._month)
        self._month_var.set(friendly_month(self._month))
        self._message_var.set("")
        self._load()

    def _build_list(self):
        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=2, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()

        statuses = self._svc.get_budget_status(self._month)
        if not statuses:
            ctk.CTkLabel(
                self._scroll,
                text="No budgets set for this month. Click '+ Add Budget' to create one.",
                text_color="gray60",
            ).grid(row=0, column=0, pady=40)
            return

        money = self._get_money()
        for idx, status in enumerate(statuses):
            self._add_budget_card(idx, status, money)

    def _add_budget_card(self, idx, status: BudgetStatus, money):
        card = ctk.CTkFrame(self._scroll, fg_color=("gray90", "gray20"), corner_radius=8)
        card.grid(row=idx, column=0, sticky="ew", padx=4, pady=4)
        card.grid_columnconfigure(0, weight=1)

        hdr = ctk.CTkFrame(card, fg_color="transparent")
        hdr.grid(row=0, column=0, sticky="ew", padx=12, pady=(10, 4))
        hdr.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            hdr, text=status.category_name,
            font=ctk.CTkFont(size=13, weight="bold"), anchor="w",
        ).grid(row=0, column=0, sticky="w")

        ratio = float(status.percent_spent)
        color = _status_color(ratio)
        ctk.CTkLabel(hdr, text=money.percent(status.percent_spent), text_color=color).grid(
            row=0, column=1, padx=(8, 0)
        )
        ctk.CTkButton(
            hdr, text="Edit", width=50, height=24,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda b=status.budget: self._open_edit(b),
        ).grid(row=0, column=2, padx=(8, 0))

        if status.is_over_budget:
            tail = f"Over by {money.money(-status.remaining)}"
        else:
            tail = f"Remaining: {money.money(status.remaining)}"
        ctk.CTkLabel(
            card,
            text=f"Spent: {money.money(status.actual_spent)}  /  Planned: {money.money(status.planned)}  |  {tail}",
            text_color=color if status.is_over_budget else "gray60", anchor="w",
        ).grid(row=1, column=0, padx=12, sticky="ew")

        bar = ctk.CTkProgressBar(card, progress_color=color)
        bar.grid(row=2, column=0, padx=12, pady=(4, 10), sticky="ew")
        bar.set(min(ratio, 1.0))

    def _open_add(self):
        form = BudgetForm(
            self.winfo_toplevel(), self._svc, month=self._month,
            currency_symbol=self._get_money().symbol,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("budget")

    def _open_edit(self, budget):
        form = BudgetForm(
            self.winfo_toplevel(), self._svc, month=self._month,
            currency_symbol=self._get_money().symbol, budget=budget,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("budget")

    def _copy_prev(self):
        count = self._svc.copy_from_previous_month(self._month)
        if count == 0:
            self._message_var.set("Nothing to copy: every budget from last month is already here.")
        else:
            self._message_var.set(f"Copied {count} budget{'s' if count != 1 else ''} from {friendly_month(prev_month(self._month))}.")
        self._notify_refresh("budget")
