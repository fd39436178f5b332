import customtkinter as ctk
from tkinter import colorchooser
from services.category_service import COLOR_HEX_RE, CategoryService
from models.category import Category, CategoryType
from utils.constants import UNCATEGORIZED_NAME


class CategoryForm(ctk.CTkToplevel):
    """Add or edit a category."""

    TYPES = [t.value for t in CategoryType]

    def __init__(
        self,
        master,
        category_service: CategoryService,
        category: Category | None = None,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._svc = category_service
        self._category = category
        self.saved = False
        is_system = bool(category and category.is_system)

        self.title("Edit Category" if category else "New Category")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        r = 0
        ctk.CTkLabel(self, text="Name:").grid(
            row=r, column=0, padx=(16, 8), pady=(16, 4), sticky="e"
        )
        self._name_var = ctk.StringVar(value=category.name if category else "")
        ctk.CTkEntry(
            self, textvariable=self._name_var, width=220,
            state="disabled" if is_system else "normal",
        ).grid(row=r, column=1, padx=(0, 16), pady=(16, 4), sticky="ew")
        r += 1

        ctk.CTkLabel(self, text="Type:").grid(
            row=r, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        self._type_var = ctk.StringVar(value=category.type.value if category else "expense")
        ctk.CTkComboBox(
            self, values=self.TYPES, variable=self._type_var,
            width=220, state="disabled" if is_system else "readonly",
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        ctk.CTkLabel(self, text="Description:").grid(
            row=r, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        self._desc_var = ctk.StringVar(value=category.description if category else "")
        ctk.CTkEntry(self, textvariable=self._desc_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        ctk.CTkLabel(self, text="Color:").grid(
            row=r, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        color_row = ctk.CTkFrame(self, fg_color="transparent")
        color_row.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")

        self._color_var = ctk.StringVar(value=category.color_hex if category else "#888888")
        color_entry = ctk.CTkEntry(color_row, textvariable=self._color_var, width=100)
        color_entry.pack(side="left")
        color_entry.bind("<FocusOut>", self._sync_swatch)

        self._swatch = ctk.CTkLabel(
            color_row, text="", width=32, height=24, corner_radius=4,
            fg_color=self._color_var.get(),
        )
        self._swatch.pack(side="left", padx=(8, 0))

        ctk.CTkButton(
            color_row, text="Pick", width=60,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._pick_color,
        ).pack(side="left", padx=(8, 0))
        r += 1

        if is_system:
            ctk.CTkLabel(
                self, text=f"'{UNCATEGORIZED_NAME}' holds transactions of deleted categories and cannot be removed.",
                text_color="gray60", anchor="w", wraplength=300,
            ).grid(row=r, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")
            r += 1

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=300, anchor="w",
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
        ctk.CTkButton(btn_frame, text="Save", width=90, command=self._on_save).pack(side="right")

        self.transient(master)
        self.grab_set()
        self._center()

    def _pick_color(self):
        result = colorchooser.askcolor(
            color=self._color_var.get(), parent=self, title="Pick Category Color"
        )
        if result and result[1]:
            self._color_var.set(result[1])
            self._swatch.configure(fg_color=result[1])

    def _sync_swatch(self, _event=None):
        color = self._color_var.get().strip()
        if COLOR_HEX_RE.match(color):
            self._swatch.configure(fg_color=color)

    def _on_save(self):
        args = (
            self._name_var.get(), self._type_var.get(),
            self._desc_var.get(), self._color_var.get(),
        )
        try:
            if self._category:
                self._svc.update(self._category.id, *args)
            else:
                self._svc.create(*args)
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
