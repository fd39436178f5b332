import customtkinter as ctk
from models.category import Category
from services.category_service import CategoryService
from ui.components.category_form import CategoryForm
from ui.components.confirm_dialog import ConfirmDialog
from utils.constants import TYPE_COLORS, UNCATEGORIZED_NAME

_TYPE_COLORS = {**TYPE_COLORS, "both": "#2196F3"}


class CategoriesTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        category_service: CategoryService,
        notify_refresh,
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = category_service
        self._notify_refresh = notify_refresh
        self._filter_var = ctk.StringVar(value="all")
        self._error_var = ctk.StringVar()

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
            bar, text="Categories",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(side="left", padx=(12, 16), pady=8)

        ctk.CTkSegmentedButton(
            bar, values=["all", "income", "expense"],
            variable=self._filter_var, command=lambda _: self._load(),
        ).pack(side="left", padx=4)

        ctk.CTkButton(
            bar, text="+ Add Category", command=self._open_add,
        ).pack(side="left", padx=8, pady=6)

        ctk.CTkLabel(bar, textvariable=self._error_var, text_color="#F44336").pack(side="left", padx=8)

    def _build_list(self):
        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()

        categories = self._svc.get_for_transaction_type(self._filter_var.get())
        if not categories:
            ctk.CTkLabel(
                self._scroll, text="No categories found.", text_color="gray60",
            ).grid(row=0, column=0, pady=40)
            return

        hdr = ctk.CTkFrame(self._scroll, fg_color="transparent")
        hdr.grid(row=0, column=0, sticky="ew", padx=4, pady=(0, 2))
        hdr.grid_columnconfigure(1, weight=1)
        for col, (text, width, anchor) in enumerate([
            ("Color", 44, "center"), ("Name", 0, "w"), ("Type", 70, "center"), ("", 130, "w"),
        ]):
            ctk.CTkLabel(
                hdr, text=text, width=width, anchor=anchor, text_color="gray60",
                font=ctk.CTkFont(size=11),
            ).grid(row=0, column=col, padx=8 if col == 1 else 0, sticky="w" if col == 1 else "")

        for idx, cat in enumerate(categories):
            self._add_row(idx + 1, cat)

    def _add_row(self, idx, cat: Category):
        row = ctk.CTkFrame(self._scroll, fg_color=("gray90", "gray20"), corner_radius=8)
        row.grid(row=idx, column=0, sticky="ew", padx=4, pady=3)
        row.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(
            row, text="", width=28, height=28, corner_radius=4, fg_color=cat.color_hex,
        ).grid(row=0, column=0, padx=(10, 0), pady=8)

        name_frame = ctk.CTkFrame(row, fg_color="transparent")
        name_frame.grid(row=0, column=1, padx=8, sticky="w")
        ctk.CTkLabel(
            name_frame, text=cat.name,
            font=ctk.CTkFont(size=13, weight="bold"), anchor="w",
        ).pack(side="left")
        if cat.description:
            ctk.CTkLabel(
                name_frame, text=cat.description,
                text_color="gray60", font=ctk.CTkFont(size=11),
            ).pack(side="left", padx=(8, 0))

        ctk.CTkLabel(
            row, text=cat.type.value, width=70, anchor="center",
            text_color=_TYPE_COLORS.get(cat.type.value, "#888888"),
            font=ctk.CTkFont(size=11, weight="bold"),
        ).grid(row=0, column=2, padx=4)

        btn_frame = ctk.CTkFrame(row, fg_color="transparent")
        btn_frame.grid(row=0, column=3, padx=(4, 10), pady=6)
        ctk.CTkButton(
            btn_frame, text="Edit", width=60, height=26,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda c=cat: self._open_edit(c),
        ).pack(side="left", padx=(0, 4))
        del_btn = ctk.CTkButton(
            btn_frame, text="Delete", width=65, height=26,
            fg_color="#F44336", hover_color="#D32F2F",
            command=lambda c=cat: self._on_delete(c),
        )
        if cat.is_system:
            del_btn.configure(state="disabled", fg_color="gray50")
        del_btn.pack(side="left")

    def _open_add(self):
        form = CategoryForm(self.winfo_toplevel(), self._svc)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("category")

    def _open_edit(self, cat):
        form = CategoryForm(self.winfo_toplevel(), self._svc, category=cat)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("category")

    def _on_delete(self, cat):
        dlg = ConfirmDialog(
            self.winfo_toplevel(),
            title="Delete Category",
            message=(
                f"Delete '{cat.name}'? Its transactions move to '{UNCATEGORIZED_NAME}' "
                "and its budgets will show as Unknown."
            ),
        )
        if not dlg.result:
            return
        try:
            self._svc.delete(cat.id)
            self._error_var.set("")
            self._notify_refresh("category")
        except ValueError as e:
            self._error_var.set(str(e))
