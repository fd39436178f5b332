"""Currency and number formatting for reports and the UI.

Formatting is table driven so that output depends only on the currency code
and locale key passed in, never on the process locale.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN

from utils.constants import DEFAULT_CURRENCY_CODE, DEFAULT_LOCALE

logger = logging.getLogger(__name__)

# code -> (symbol, decimal places)
CURRENCIES = {
    "USD": ("$", 2),
    "CAD": ("CA$", 2),
    "AUD": ("A$", 2),
    "EUR": ("€", 2),
    "GBP": ("£", 2),
    "CHF": ("CHF ", 2),
    "JPY": ("¥", 0),
    "CNY": ("CN¥", 2),
    "INR": ("₹", 2),
    "KRW": ("₩", 0),
    "SEK": ("kr ", 2),
    "BRL": ("R$", 2),
    "MXN": ("MX$", 2),
}

# locale -> (group separator, decimal separator, symbol before amount)
LOCALES = {
    "en_US": (",", ".", True),
    "en_GB": (",", ".", True),
    "en_CA": (",", ".", True),
    "en_AU": (",", ".", True),
    "en_IN": (",", ".", True),
    "ja_JP": (",", ".", True),
    "de_DE": (".", ",", False),
    "es_ES": (".", ",", False),
    "it_IT": (".", ",", False),
    "pt_BR": (".", ",", True),
    "fr_FR": (" ", ",", False),
    "sv_SE": (" ", ",", False),
}


def resolve_currency_code(code: str | None) -> str:
    """Return a supported ISO code, falling back to USD for unknown input."""
    normalized = (code or "").strip().upper()
    if normalized in CURRENCIES:
        return normalized
    logger.warning("Unsupported currency code %r, falling back to %s", code, DEFAULT_CURRENCY_CODE)
    return DEFAULT_CURRENCY_CODE


def resolve_locale(locale: str | None) -> str:
    key = (locale or "").strip().replace("-", "_")
    if key in LOCALES:
        return key
    logger.warning("Unsupported locale %r, falling back to %s", locale, DEFAULT_LOCALE)
    return DEFAULT_LOCALE


@dataclass(frozen=True)
class MoneyFormat:
    currency_code: str = DEFAULT_CURRENCY_CODE
    locale: str = DEFAULT_LOCALE

    @classmethod
    def create(cls, currency_code: str | None, locale: str | None) -> "MoneyFormat":
        return cls(resolve_currency_code(currency_code), resolve_locale(locale))

    @property
    def symbol(self) -> str:
        return CURRENCIES[self.currency_code][0]

    @property
    def decimals(self) -> int:
        return CURRENCIES[self.currency_code][1]

    def number(self, value, places: int) -> str:
        """Group and round an unsigned number using the locale separators."""
        group, point, _ = LOCALES[self.locale]
        quantum = Decimal(1).scaleb(-places)
        q = abs(_to_decimal(value)).quantize(quantum, rounding=ROUND_HALF_EVEN)
        text = f"{q:,.{places}f}"
        return text.translate(str.maketrans({",": group, ".": point}))

    def money(self, amount) -> str:
        value = _to_decimal(amount)
        quantum = Decimal(1).scaleb(-self.decimals)
        negative = value.quantize(quantum, rounding=ROUND_HALF_EVEN) < 0
        digits = self.number(value, self.decimals)
        symbol_first = LOCALES[self.locale][2]
        body = f"{self.symbol}{digits}" if symbol_first else f"{digits} {self.symbol.strip()}"
        return f"-{body}" if negative else body

    def signed(self, amount) -> str:
        value = _to_decimal(amount)
        sign = "+" if value >= 0 else "-"
        return f"{sign}{self.money(abs(value))}"

    def percent(self, ratio, places: int = 1) -> str:
        """Format a ratio (0.25) as a percentage ('25.0%')."""
        value = _to_decimal(ratio) * 100
        sign = "-" if value.quantize(Decimal(1).scaleb(-places)) < 0 else ""
        return f"{sign}{self.number(value, places)}%"


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
