from dataclasses import dataclass, field
from pathlib import Path

from utils.constants import DEFAULT_CURRENCY_CODE, DEFAULT_DATE_FORMAT, DEFAULT_LOCALE

APPEARANCE_MODES = ("system", "light", "dark")


@dataclass
class UserPreferences:
    currency_code: str = DEFAULT_CURRENCY_CODE
    locale: str = DEFAULT_LOCALE
    date_format: str = DEFAULT_DATE_FORMAT
    appearance_mode: str = "system"
    auto_save: bool = True
    backup_location: str = field(default_factory=lambda: str(Path.home()))

    @property
    def dark_mode(self) -> bool:
        return self.appearance_mode == "dark"
