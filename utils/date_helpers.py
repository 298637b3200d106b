from datetime import date, datetime, timedelta
import calendar
from utils.constants import DATE_FORMAT, MONTH_FORMAT, DATETIME_FORMAT, PT_BR_MONTHS

# ── Display date format options ───────────────────────────────────────────────

DATE_FORMAT_OPTIONS = ["DD/MM/YYYY", "YYYY-MM-DD", "DD.MM.YYYY", "MM/DD/YYYY"]

_STRFTIME_MAP = {
    "DD/MM/YYYY": "%d/%m/%Y",
    "YYYY-MM-DD": "%Y-%m-%d",
    "DD.MM.YYYY": "%d.%m.%Y",
    "MM/DD/YYYY": "%m/%d/%Y",
}


def today() -> date:
    return date.today()


def today_str() -> str:
    return date.today().strftime(DATE_FORMAT)


def now_str() -> str:
    return datetime.now().strftime(DATETIME_FORMAT)


def current_month_str() -> str:
    return date.today().strftime(MONTH_FORMAT)


def parse_date(date_str: str | date | None) -> date | None:
    """Parse a YYYY-MM-DD string (or a datetime-ish prefix), returning None on failure."""
    if isinstance(date_str, datetime):
        return date_str.date()
    if isinstance(date_str, date):
        return date_str
    if not date_str:
        return None
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(date_str[:10], fmt).date()
        except ValueError:
            continue
    return None


def parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", ""))
    except ValueError:
        d = parse_date(value)
        return datetime(d.year, d.month, d.day) if d else None


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def format_month(d: date) -> str:
    return d.strftime(MONTH_FORMAT)


def month_str(month: int, year: int) -> str:
    return f"{year:04d}-{month:02d}"


def parse_month(month_str_: str) -> date | None:
    """Return the first day of the given YYYY-MM month string."""
    if not month_str_:
        return None
    try:
        return datetime.strptime(month_str_, MONTH_FORMAT).date()
    except ValueError:
        return None


def month_range(month: str) -> tuple[str, str]:
    """Return (first_day_str, last_day_str) for a YYYY-MM month."""
    d = parse_month(month)
    if d is None:
        raise ValueError(f"Invalid month: {month}")
    last_day = calendar.monthrange(d.year, d.month)[1]
    return (
        format_date(d),
        format_date(d.replace(day=last_day)),
    )


def prev_month(month: str) -> str:
    d = parse_month(month)
    if d is None:
        raise ValueError(f"Invalid month: {month}")
    if d.month == 1:
        return format_month(d.replace(year=d.year - 1, month=12))
    return format_month(d.replace(month=d.month - 1))


def next_month(month: str) -> str:
    d = parse_month(month)
    if d is None:
        raise ValueError(f"Invalid month: {month}")
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


def friendly_month(month: str) -> str:
    """Convert YYYY-MM to e.g. 'Fevereiro 2026'."""
    d = parse_month(month)
    if d is None:
        return month
    return f"{PT_BR_MONTHS[d.month - 1]} {d.year}"


def format_display_date(date_str: str, fmt_key: str = "DD/MM/YYYY") -> str:
    """Convert a YYYY-MM-DD storage string to the user-facing display format."""
    if not date_str:
        return date_str
    d = parse_date(date_str)
    if d is None:
        return date_str
    return d.strftime(_STRFTIME_MAP.get(fmt_key, "%d/%m/%Y"))


def parse_display_date(display_str: str, fmt_key: str) -> date | None:
    """Parse a date in the given display format. Returns None on failure.

    Falls back to ISO 8601 parse if the display format doesn't match.
    """
    if not display_str:
        return None
    fmt = _STRFTIME_MAP.get(fmt_key, "%d/%m/%Y")
    try:
        return datetime.strptime(display_str.strip(), fmt).date()
    except ValueError:
        return parse_date(display_str)


def start_of_next_month(ref: date) -> date:
    return add_months(ref.replace(day=1), 1)


def week_ago(ref: date) -> date:
    return ref - timedelta(days=7)


def format_datetime_display(value: str, fmt_key: str = "DD/MM/YYYY") -> str:
    """'YYYY-MM-DD HH:MM:SS' -> display date plus HH:MM."""
    dt = parse_datetime(value)
    if dt is None:
        return value or ""
    return f"{dt.strftime(_STRFTIME_MAP.get(fmt_key, '%d/%m/%Y'))} {dt.strftime('%H:%M')}"
