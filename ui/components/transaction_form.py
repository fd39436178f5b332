import customtkinter as ctk
from services.transaction_service import TransactionService
from services.category_service import CategoryService
from models.transaction import IncomeSource, PaymentMethod, Transaction, TransactionType
from ui.components.date_picker import DatePickerWidget
from utils.date_helpers import today_str


def _label_for(value: str) -> str:
    return value.replace("_", " ").title()


_PAYMENT_LABELS = {_label_for(m.value): m.value for m in PaymentMethod}
_SOURCE_LABELS = {_label_for(s.value): s.value for s in IncomeSource}


class TransactionForm(ctk.CTkToplevel):
    """Add or edit an income or expense."""

    _last_date: str = today_str()  # reset to today on each app launch

    def __init__(
        self,
        master,
        tx_service: TransactionService,
        category_service: CategoryService,
        initial_type: str = "expense",
        transaction: Transaction | None = None,
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._tx_svc = tx_service
        self._cat_svc = category_service
        self._transaction = transaction
        self._date_format = date_format
        self.saved = False

        if transaction:
            initial_type = transaction.type.value

        self.title(f"{'Edit' if transaction else 'Add'} {initial_type.title()}")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        self._build_form(initial_type, transaction)

        self.transient(master)
        self.grab_set()
        self._center()

    def _label(self, text, row):
        ctk.CTkLabel(self, text=text).grid(
            row=row, column=0, padx=(16, 8), pady=4, sticky="e"
        )

    def _build_form(self, type_: str, tx: Transaction | None):
        r = 0

        # Type selector (income/expense) only for new transactions; type is fixed afterwards
        self._type_var = ctk.StringVar(value=type_)
        if not tx:
            self._label("Type:", r)
            type_frame = ctk.CTkFrame(self, fg_color="transparent")
            type_frame.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="w")
            for t in TransactionType:
                ctk.CTkRadioButton(
                    type_frame, text=t.label,
                    variable=self._type_var, value=t.value,
                    command=self._on_type_change,
                ).pack(side="left", padx=4)
            r += 1

        # Description
        self._label("Description:", r)
        self._desc_var = ctk.StringVar(value=tx.description if tx else "")
        ctk.CTkEntry(self, textvariable=self._desc_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        # Amount
        self._label("Amount:", r)
        self._amount_var = ctk.StringVar(value=str(tx.amount) if tx else "")
        ctk.CTkEntry(self, textvariable=self._amount_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        # Date
        self._label("Date:", r)
        self._date_picker = DatePickerWidget(
            self,
            initial_date=tx.date if tx else TransactionForm._last_date,
            date_format=self._date_format,
        )
        self._date_picker.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="w")
        r += 1

        # Category
        self._label("Category:", r)
        self._cats = self._cat_svc.get_for_transaction_type(type_)
        self._cat_names = [c.name for c in self._cats]
        current_cat = ""
        if tx and tx.category_name:
            current_cat = tx.category_name
        elif self._cat_names:
            current_cat = self._cat_names[0]
        self._cat_var = ctk.StringVar(value=current_cat)
        self._cat_combo = ctk.CTkComboBox(
            self, values=self._cat_names,
            variable=self._cat_var, width=220, state="readonly"
        )
        self._cat_combo.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        # Notes
        self._label("Notes:", r)
        self._notes_var = ctk.StringVar(value=tx.notes if tx else "")
        ctk.CTkEntry(self, textvariable=self._notes_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        # Variant fields; both sets are built and shown per type
        self._variant_row = r
        self._source_label = ctk.CTkLabel(self, text="Source:")
        source = _label_for(tx.income_source.value) if tx and tx.income_source else ""
        self._source_var = ctk.StringVar(value=source)
        self._source_combo = ctk.CTkComboBox(
            self, values=[""] + list(_SOURCE_LABELS), variable=self._source_var,
            width=220, state="readonly",
        )

        self._payment_label = ctk.CTkLabel(self, text="Paid with:")
        method = _label_for(tx.payment_method.value) if tx and tx.payment_method else ""
        self._payment_var = ctk.StringVar(value=method)
        self._payment_combo = ctk.CTkComboBox(
            self, values=[""] + list(_PAYMENT_LABELS), variable=self._payment_var,
            width=220, state="readonly",
        )
        self._essential_var = ctk.BooleanVar(value=tx.essential if tx else False)
        self._essential_check = ctk.CTkCheckBox(
            self, text="Essential expense", variable=self._essential_var
        )
        r += 2

        self._show_variant_fields(type_)
        self._build_footer(r)

    def _show_variant_fields(self, type_: str):
        r = self._variant_row
        for w in (self._source_label, self._source_combo, self._payment_label,
                  self._payment_combo, self._essential_check):
            w.grid_forget()
        if type_ == TransactionType.INCOME.value:
            self._source_label.grid(row=r, column=0, padx=(16, 8), pady=4, sticky="e")
            self._source_combo.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        else:
            self._payment_label.grid(row=r, column=0, padx=(16, 8), pady=4, sticky="e")
            self._payment_combo.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
            self._essential_check.grid(row=r + 1, column=1, padx=(0, 16), pady=4, sticky="w")

    def _build_footer(self, r):
        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=300, anchor="w"
        ).grid(row=r, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")
        r += 1

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=r, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        ctk.CTkButton(
            btn_frame, text="Save", width=110,
            command=self._on_save,
        ).pack(side="right")

    def _on_type_change(self):
        t = self._type_var.get()
        self._cats = self._cat_svc.get_for_transaction_type(t)
        self._cat_names = [c.name for c in self._cats]
        self._cat_combo.configure(values=self._cat_names)
        if self._cat_names:
            self._cat_var.set(self._cat_names[0])
            self._cat_combo.set(self._cat_names[0])
        self._show_variant_fields(t)

    def _on_save(self):
        if not self._date_picker.is_valid():
            self._error_var.set("Invalid date.")
            return

        date_str = self._date_picker.get()
        cat = next((c for c in self._cats if c.name == self._cat_var.get()), None)
        cat_id = cat.id if cat else None
        amount = self._amount_var.get()
        desc = self._desc_var.get()
        notes = self._notes_var.get()
        type_ = self._type_var.get()
        source = _SOURCE_LABELS.get(self._source_var.get())
        method = _PAYMENT_LABELS.get(self._payment_var.get())

        try:
            if self._transaction:
                self._tx_svc.update(
                    self._transaction.id, amount, date_str, desc, cat_id, notes,
                    essential=self._essential_var.get(),
                    payment_method=method,
                    income_source=source,
                )
            elif type_ == TransactionType.INCOME.value:
                self._tx_svc.create_income(amount, date_str, desc, cat_id, notes, income_source=source)
            else:
                self._tx_svc.create_expense(
                    amount, date_str, desc, cat_id, notes,
                    essential=self._essential_var.get(),
                    payment_method=method,
                )
            TransactionForm._last_date = date_str
            self.saved = True
            self.destroy()
        except ValueError as e:
            self._error_var.set(str(e))

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
