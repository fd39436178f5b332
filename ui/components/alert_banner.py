import customtkinter as ctk

SEVERITY_COLORS = {
    "info": "#2196F3",
    "warning": "#FF9800",
    "danger": "#F44336",
}


class AlertBanner(ctk.CTkFrame):
    """Dismissible banner with a headline and optional detail lines."""

    def __init__(self, master, message: str, severity: str = "info",
                 details: list[str] | None = None,
                 action_text: str | None = None, action_cmd=None, **kwargs):
        super().__init__(master, fg_color=SEVERITY_COLORS.get(severity, SEVERITY_COLORS["info"]),
                         corner_radius=6, **kwargs)
        self.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            self, text=message, text_color="white", anchor="w", padx=10, pady=6,
            font=ctk.CTkFont(weight="bold"),
        ).grid(row=0, column=0, sticky="ew")

        for i, line in enumerate(details or [], start=1):
            ctk.CTkLabel(
                self, text=f"  {line}", text_color="white", anchor="w", padx=10,
            ).grid(row=i, column=0, sticky="ew")

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=0, column=1, padx=(0, 4), pady=4, sticky="n")

        if action_text and action_cmd:
            ctk.CTkButton(
                btn_frame, text=action_text, width=60, height=24,
                fg_color="transparent", border_width=1, border_color="white",
                text_color="white", command=action_cmd,
            ).pack(side="left", padx=2)

        ctk.CTkButton(
            btn_frame, text="✕", width=28, height=24,
            fg_color="transparent", text_color="white",
            command=self.destroy,
        ).pack(side="left")
