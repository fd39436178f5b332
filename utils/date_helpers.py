from datetime import date, datetime
import calendar
from utils.constants import DATE_FORMAT, MONTH_FORMAT

# ── Display date format options ───────────────────────────────────────────────

DATE_FORMAT_OPTIONS = [
    "MM/DD/YYYY", "DD/MM/YYYY", "YYYY-MM-DD", "DD.MM.YYYY", "MM-DD-YYYY", "MMM D, YYYY",
]

_STRFTIME_MAP = {
    "MM/DD/YYYY": "%m/%d/%Y",
    "DD/MM/YYYY": "%d/%m/%Y",
    "YYYY-MM-DD": "%Y-%m-%d",
    "DD.MM.YYYY": "%d.%m.%Y",
    "MM-DD-YYYY": "%m-%d-%Y",
}

# Fixed English names so report text does not depend on the process locale.
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
MONTH_ABBRS = tuple(name[:3] for name in MONTH_NAMES)


def today() -> date:
    return date.today()


def today_str() -> str:
    return date.today().strftime(DATE_FORMAT)


def current_month_str() -> str:
    return date.today().strftime(MONTH_FORMAT)


def parse_date(date_str: str) -> date | None:
    """Parse a date string in YYYY-MM-DD format, returning None on failure."""
    if not date_str:
        return None
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%Y.%m.%d"):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue
    return None


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def format_month(d: date) -> str:
    return d.strftime(MONTH_FORMAT)


def parse_month(month_str: str) -> date | None:
    """Return the first day of the given YYYY-MM month string."""
    if not month_str:
        return None
    try:
        return datetime.strptime(month_str, MONTH_FORMAT).date()
    except ValueError:
        return None


def month_bounds(month_str: str) -> tuple[date, date]:
    """Return (first_day, last_day) for a YYYY-MM month."""
    d = parse_month(month_str)
    if d is None:
        raise ValueError(f"Invalid month: {month_str}")
    last_day = calendar.monthrange(d.year, d.month)[1]
    return d, d.replace(day=last_day)


def year_bounds(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def year_months(year: int) -> list[str]:
    """All twelve YYYY-MM periods of a calendar year, in order."""
    return [f"{year:04d}-{m:02d}" for m in range(1, 13)]


def days_inclusive(start: date, end: date) -> int:
    return (end - start).days + 1


def months_spanned(start: date, end: date) -> int:
    """Inclusive count of calendar months touched by [start, end]."""
    return (end.year - start.year) * 12 + (end.month - start.month) + 1


def prev_month(month_str: str) -> str:
    d = parse_month(month_str)
    if d is None:
        raise ValueError(f"Invalid month: {month_str}")
    if d.month == 1:
        return format_month(d.replace(year=d.year - 1, month=12))
    return format_month(d.replace(month=d.month - 1))


def next_month(month_str: str) -> str:
    d = parse_month(month_str)
    if d is None:
        raise ValueError(f"Invalid month: {month_str}")
    if d.month == 12:
        return format_month(d.replace(year=d.year + 1, month=1))
    return format_month(d.replace(month=d.month + 1))


def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp day to valid range for the given year/month."""
    max_day = calendar.monthrange(year, month)[1]
    return min(day, max_day)


def add_months(d: date, n: int) -> date:
    """Add n months to date d, clamping day to month end."""
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = clamp_day_to_month(year, month, d.day)
    return d.replace(year=year, month=month, day=day)


def friendly_month(month_str: str) -> str:
    """Convert YYYY-MM to e.g. 'February 2026'."""
    d = parse_month(month_str)
    if d is None:
        return month_str
    return f"{MONTH_NAMES[d.month - 1]} {d.year}"


def short_date(d: date) -> str:
    """e.g. 'Mar 5, 2024'."""
    return f"{MONTH_ABBRS[d.month - 1]} {d.day}, {d.year}"


def format_display_date(value: date | str, fmt_key: str = "MM/DD/YYYY") -> str:
    """Convert a date (or YYYY-MM-DD storage string) to the user-facing display format."""
    if not value:
        return value
    d = value if isinstance(value, date) else parse_date(value)
    if d is None:
        return value
    if fmt_key == "MMM D, YYYY":
        return short_date(d)
    return d.strftime(_STRFTIME_MAP.get(fmt_key, "%m/%d/%Y"))


def parse_display_date(display_str: str, fmt_key: str) -> date | None:
    """Parse a date in the given display format. Returns None on failure.

    Falls back to ISO 8601 parse if the display format doesn't match.
    """
    if not display_str:
        return None
    raw = display_str.strip()
    if fmt_key == "MMM D, YYYY":
        try:
            return datetime.strptime(raw, "%b %d, %Y").date()
        except ValueError:
            return parse_date(raw)
    fmt = _STRFTIME_MAP.get(fmt_key, "%m/%d/%Y")
    try:
        return datetime.strptime(raw, fmt).date()
    except ValueError:
        return parse_date(raw)
