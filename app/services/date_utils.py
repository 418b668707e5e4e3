from datetime import date, datetime, timedelta, timezone
from typing import Optional

def current_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with a ``Z`` suffix"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")

def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)

def diff_days(start: date, end: date) -> int:
    return (end - start).days

def format_long(value: date) -> str:
    """Render a date as e.g. ``January 1, 2024``"""
    return f"{value.strftime('%B')} {value.day}, {value.year}"

def is_weekend(value: date) -> bool:
    return value.weekday() >= 5

def is_due_soon(value: date, threshold_days: int = 3, today: Optional[date] = None) -> bool:
    """True when ``value`` falls between today and ``threshold_days`` from now, inclusive"""
    today = today or date.today()
    return 0 <= (value - today).days <= threshold_days
