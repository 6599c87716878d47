import calendar
import os
import re
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from labreport.constants import DATE_FORMAT_ENV, DEFAULT_DATE_FORMAT

# Slash date anywhere inside a token, e.g. "01/01/2023" or "(1/12/2023)"
SLASH_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")

SUPPORTED_FORMATS = ("%d/%m/%Y", "%m/%d/%Y")


def to_iso(y: int, m: int, d: int) -> str:
    return f"{y:04d}-{m:02d}-{d:02d}"


def check_date_format(fmt: str, source: str = "date format") -> str:
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported {source} {fmt!r}; expected one of {SUPPORTED_FORMATS}")
    return fmt


def configured_date_format() -> str:
    fmt = os.getenv(DATE_FORMAT_ENV) or DEFAULT_DATE_FORMAT
    return check_date_format(fmt, DATE_FORMAT_ENV)


def _day_first(fmt: str) -> bool:
    return fmt.index("%d") < fmt.index("%m")


def find_slash_date(token: str) -> Optional[re.Match]:
    return SLASH_DATE_RE.search(token)


def parse_slash_date(text: str, fmt: str = DEFAULT_DATE_FORMAT) -> Tuple[Optional[str], bool]:
    """
    Parse the first D/M/YYYY-shaped date in `text` to an ISO date string.

    Returns (iso, exact). `exact` is False when the date is not a valid
    calendar date under `fmt` and the ISO value is a best-effort guess:
    - swapped day/month when only the other order is valid (13/02 vs 02/13);
    - day overflow rolled into the next month (31/02/2023 -> 2023-03-03).
    When no guess is possible (month and day both out of range) iso is None.
    """
    m = SLASH_DATE_RE.search(text)
    if not m:
        return None, False
    try:
        return datetime.strptime(m.group(0), fmt).date().isoformat(), True
    except ValueError:
        pass

    a, b, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
    day, month = (a, b) if _day_first(fmt) else (b, a)

    # Other order is a real date
    if year >= 1 and 1 <= day <= 12 and 1 <= month <= calendar.monthrange(year, day)[1]:
        return to_iso(year, day, month), False

    if 1 <= month <= 12 and day >= 1 and year >= 1:
        try:
            rolled = date(year, month, 1) + timedelta(days=day - 1)
        except OverflowError:
            return None, False
        return rolled.isoformat(), False

    return None, False


def format_slash_date(iso: str, fmt: str = DEFAULT_DATE_FORMAT) -> str:
    """Render an ISO date back into the slash form `parse_slash_date` reads."""
    return date.fromisoformat(iso[:10]).strftime(fmt)


def format_timestamp(dt: datetime) -> str:
    return dt.isoformat(timespec="seconds")
