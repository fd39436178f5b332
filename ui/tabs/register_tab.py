import customtkinter as ctk
from decimal import Decimal
from services.transaction_service import TransactionService
from services.category_service import CategoryService
from models.transaction import Transaction
from ui.components.transaction_form import TransactionForm
from ui.components.confirm_dialog import ConfirmDialog
from utils.constants import TYPE_COLORS, UNKNOWN_CATEGORY_NAME
from utils.date_helpers import current_month_str, format_display_date, friendly_month, next_month, prev_month


_MAX_RENDERED_ROWS = 100


class RegisterTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        tx_service: TransactionService,
        category_service: CategoryService,
        get_money,        # callable → MoneyFormat
        get_date_format,  # callable → str
        notify_refresh,   # callable
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._tx_svc = tx_service
        self._cat_svc = category_service
        self._get_money = get_money
        self._get_date_format = get_date_format
        self._notify_refresh = notify_refresh

        self._month = current_month_str()
        self._month_var = ctk.StringVar(value=friendly_month(self._month))
        self._type_var = ctk.StringVar(value="all")
        self._search_var = ctk.StringVar()
        self._search_var.trace_add("write", lambda *_: self._load())

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(3, weight=1)

        self._build_filter_bar()
        self._build_totals_bar()
        self._build_header()
        self._build_register()
        self._load()

    def refresh(self):
        self._load()

    # ── Filter bar ──────────────────────────────────────────────────────────
    def _build_filter_bar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))
        bar.grid_columnconfigure(4, weight=1)

        # Month nav
        ctk.CTkButton(bar, text="◀", width=28, command=lambda: self._shift_month(prev_month)).grid(
            row=0, column=0, padx=(8, 0), pady=6
        )
        ctk.CTkLabel(bar, textvariable=self._month_var, width=120, anchor="center").grid(
            row=0, column=1, padx=4
        )
        ctk.CTkButton(bar, text="▶", width=28, command=lambda: self._shift_month(next_month)).grid(
            row=0, column=2, padx=(0, 8)
        )

        ctk.CTkSegmentedButton(
            bar,
            values=["all", "income", "expense"],
            variable=self._type_var,
            command=lambda _: self._load(),
            width=220,
        ).grid(row=0, column=3, padx=8)

        ctk.CTkEntry(
            bar, textvariable=self._search_var,
            placeholder_text="Search…", width=180,
        ).grid(row=0, column=4, padx=8, sticky="w")

        btn_frame = ctk.CTkFrame(bar, fg_color="transparent")
        btn_frame.grid(row=0, column=5, padx=(0, 8))
        for label, type_ in (("+ Income", "income"), ("+ Expense", "expense")):
            ctk.CTkButton(
                btn_frame, text=label, width=88,
                command=lambda t=type_: self._open_add_form(t),
            ).pack(side="left", padx=2)

    def _shift_month(self, step):
        self._month = step(self._month)
        self._month_var.set(friendly_month(self._month))
        self._load()

    def _build_totals_bar(self):
        bar = ctk.CTkFrame(self, fg_color="transparent")
        bar.grid(row=1, column=0, sticky="ew", padx=8, pady=(4, 0))
        self._totals_labels = {}
        for key, title in (("income", "Income"), ("expense", "Expenses"), ("net", "Net")):
            ctk.CTkLabel(bar, text=f"{title}:", text_color="gray60").pack(side="left", padx=(12, 2))
            lbl = ctk.CTkLabel(bar, text="", font=ctk.CTkFont(weight="bold"))
            lbl.pack(side="left", padx=(0, 12))
            self._totals_labels[key] = lbl

    # ── Column headers ───────────────────────────────────────────────────────
    def _build_header(self):
        hdr = ctk.CTkFrame(self, fg_color=("gray82", "gray22"), corner_radius=0)
        hdr.grid(row=2, column=0, sticky="ew", padx=8, pady=(4, 0))
        cols = [("Date", 90), ("Type", 72), ("Category", 130), ("Description", 200),
                ("Amount", 100), ("Balance", 100), ("Actions", 100)]
        for i, (label, width) in enumerate(cols):
            ctk.CTkLabel(
                hdr, text=label, width=width, anchor="w",
                font=ctk.CTkFont(weight="bold"),
            ).grid(row=0, column=i, padx=4, pady=4, sticky="w")

    # ── Scrollable register ──────────────────────────────────────────────────
    def _build_register(self):
        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=3, column=0, sticky="nsew", padx=8, pady=(0, 8))
        self._scroll.grid_columnconfigure(0, weight=1)

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()

        money = self._get_money()
        totals = self._tx_svc.get_totals(self._month)
        self._totals_labels["income"].configure(text=money.money(totals["income"]), text_color=TYPE_COLORS["income"])
        self._totals_labels["expense"].configure(text=money.money(totals["expense"]), text_color=TYPE_COLORS["expense"])
        self._totals_labels["net"].configure(
            text=money.money(totals["net"]),
            text_color=TYPE_COLORS["income"] if totals["net"] >= 0 else TYPE_COLORS["expense"],
        )

        rows = self._tx_svc.get_with_running_balance(
            self._month, self._type_var.get(), self._search_var.get().strip()
        )
        if not rows:
            ctk.CTkLabel(
                self._scroll, text="No transactions for this period.",
                text_color="gray60",
            ).grid(row=0, column=0, pady=20)
            return

        total = len(rows)
        for idx, (tx, balance) in enumerate(rows[:_MAX_RENDERED_ROWS]):
            self._add_row(idx, tx, balance, money)

        if total > _MAX_RENDERED_ROWS:
            ctk.CTkLabel(
                self._scroll,
                text=f"Showing {_MAX_RENDERED_ROWS} of {total} transactions. Use filters or search to narrow results.",
                text_color="gray60",
                font=ctk.CTkFont(size=11),
            ).grid(row=_MAX_RENDERED_ROWS, column=0, pady=8)

    def _add_row(self, idx: int, tx: Transaction, balance: Decimal, money):
        bg = ("gray92", "gray17") if idx % 2 == 0 else ("gray88", "gray21")
        row = ctk.CTkFrame(self._scroll, fg_color=bg, corner_radius=4)
        row.grid(row=idx, column=0, sticky="ew", pady=1, padx=2)

        color = TYPE_COLORS[tx.type.value]
        ctk.CTkLabel(
            row, text=format_display_date(tx.date, self._get_date_format()), width=90, anchor="w"
        ).grid(row=0, column=0, padx=4, pady=4)
        ctk.CTkLabel(row, text=tx.type.label, width=72, anchor="w", text_color=color).grid(
            row=0, column=1, padx=4
        )

        category = tx.category_name or UNKNOWN_CATEGORY_NAME
        if tx.is_expense and tx.essential:
            category += " ★"
        ctk.CTkLabel(row, text=category, width=130, anchor="w").grid(row=0, column=2, padx=4)
        ctk.CTkLabel(row, text=tx.description, width=200, anchor="w").grid(row=0, column=3, padx=4)
        ctk.CTkLabel(
            row, text=money.signed(tx.signed_amount), width=100, anchor="e", text_color=color
        ).grid(row=0, column=4, padx=4)
        ctk.CTkLabel(
            row, text=money.money(balance), width=100, anchor="e",
            text_color=TYPE_COLORS["income"] if balance >= 0 else TYPE_COLORS["expense"],
        ).grid(row=0, column=5, padx=4)

        acts = ctk.CTkFrame(row, fg_color="transparent")
        acts.grid(row=0, column=6, padx=(4, 6))
        ctk.CTkButton(
            acts, text="Edit", width=44, height=24,
            command=lambda t=tx: self._open_edit_form(t),
        ).pack(side="left", padx=2)
        ctk.CTkButton(
            acts, text="Del", width=38, height=24,
            fg_color="#F44336", hover_color="#D32F2F",
            command=lambda t=tx: self._delete_tx(t, money),
        ).pack(side="left")

    def _open_form(self, **kwargs):
        form = TransactionForm(
            self.winfo_toplevel(),
            self._tx_svc, self._cat_svc,
            date_format=self._get_date_format(),
            **kwargs,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("transaction")

    def _open_add_form(self, type_: str):
        self._open_form(initial_type=type_)

    def _open_edit_form(self, tx: Transaction):
        self._open_form(transaction=tx)

    def _delete_tx(self, tx: Transaction, money):
        dlg = ConfirmDialog(
            self.winfo_toplevel(),
            "Delete Transaction",
            f"Delete this {tx.type.value} of {money.money(tx.amount)}?",
        )
        if dlg.result:
            self._tx_svc.delete(tx.id)
            self._notify_refresh("transaction")
