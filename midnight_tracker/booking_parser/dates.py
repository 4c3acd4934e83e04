"""
Date helpers: free-text date extraction and hotel night expansion.
"""
import re
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

_MONTH = (
    r'(Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?|'
    r'Aug(?:ust)?|Sep(?:tember)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)'
)

ISO_DATE_PATTERN = re.compile(r'(\d{4})-(\d{2})-(\d{2})')
DAY_MONTH_YEAR_PATTERN = re.compile(r'(\d{1,2})\s+' + _MONTH + r'\s+(\d{4})', re.IGNORECASE)
MONTH_DAY_YEAR_PATTERN = re.compile(_MONTH + r'\s+(\d{1,2}),?\s+(\d{4})', re.IGNORECASE)

ONE_DAY = timedelta(days=1)


def _parse_date(day: str, month: str, year: str) -> Optional[date]:
    """Build a date from matched parts; month may be a number or an English name."""
    fmt = '%d %m %Y' if month.isdigit() else '%d %b %Y'
    try:
        return datetime.strptime(f"{int(day)} {month[:3]} {year}", fmt).date()
    except ValueError:
        return None


def extract_dates_from_free_text(text: Optional[str], year_min: int, year_max: int) -> List[date]:
    """
    Find dates written as 2025-06-12, 12 June 2025 or June 12, 2025.

    Dates outside [year_min, year_max] and impossible dates (2025-02-30) are
    dropped. The result is sorted ascending and keeps duplicates.
    """
    if not text:
        return []

    found: List[date] = []
    for year, month, day in ISO_DATE_PATTERN.findall(text):
        found.append(_parse_date(day, month, year))
    for day, month, year in DAY_MONTH_YEAR_PATTERN.findall(text):
        found.append(_parse_date(day, month, year))
    for month, day, year in MONTH_DAY_YEAR_PATTERN.findall(text):
        found.append(_parse_date(day, month, year))

    return sorted(d for d in found if d is not None and year_min <= d.year <= year_max)


def expand_nights(check_in: date, check_out: date) -> List[date]:
    """
    Resident nights of a stay: check-in day up to, not including, check-out.
    """
    nights = []
    current = check_in
    while current < check_out:
        nights.append(current)
        current += ONE_DAY
    return nights


def stay_bounds(dates: List[date]) -> Optional[tuple]:
    """
    Check-in/check-out from dates found in an email.

    Earliest and latest are used; a single distinct date is taken as a
    one-night stay. Middle dates of a multi-leg itinerary are ignored.
    """
    if not dates:
        return None
    check_in, check_out = min(dates), max(dates)
    if check_out == check_in:
        check_out = check_in + ONE_DAY
    return check_in, check_out


def to_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Coerce an ISO string, datetime or date to a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except ValueError:
        return None
