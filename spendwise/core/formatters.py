"""Display formatting helpers for amounts, dates and labels."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union

from dateutil import parser as date_parser

DateLike = Union[str, date, datetime, None]

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "CA$",
    "AUD": "A$",
    "INR": "₹",
    "RUB": "₽",
}
ZERO_DECIMAL_CURRENCIES = {"JPY", "KRW"}

DEFAULT_DATE_FORMAT = "%b %d, %Y"
DATE_TIME_FORMAT = "%b %d, %Y, %I:%M %p"


def format_currency(amount: Optional[float], currency: str = "USD") -> str:
    """Format a number as money, e.g. ``-$1,234.50``."""
    code = (currency or "USD").upper()
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    if amount is None:
        amount = 0.0
    decimals = 0 if code in ZERO_DECIMAL_CURRENCIES else 2
    body = f"{abs(amount):,.{decimals}f}"
    sign = "-" if round(amount, decimals) < 0 else ""
    return f"{sign}{symbol}{body}"


def _to_datetime(value: DateLike) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return date_parser.isoparse(value)


def format_date(value: DateLike, fmt: str = DEFAULT_DATE_FORMAT) -> str:
    if not value:
        return "N/A"
    try:
        parsed = _to_datetime(value)
    except (TypeError, ValueError):
        return "Invalid Date"
    return parsed.strftime(fmt).replace(" 0", " ")


def format_date_time(value: DateLike) -> str:
    return format_date(value, DATE_TIME_FORMAT)


def format_relative_date(value: DateLike, now: Optional[datetime] = None) -> str:
    """Human friendly distance from ``now``: Today, Yesterday, 3 days ago, ..."""
    if not value:
        return "N/A"
    try:
        parsed = _to_datetime(value)
    except (TypeError, ValueError):
        return "Invalid Date"

    if now is None:
        now = datetime.now(timezone.utc) if parsed.tzinfo else datetime.now()
    elif (now.tzinfo is None) != (parsed.tzinfo is None):
        now = now.replace(tzinfo=parsed.tzinfo)

    days = int((now - parsed).total_seconds() // 86400)
    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        return f"{days // 7} weeks ago"
    if days < 365:
        return f"{days // 30} months ago"
    return f"{days // 365} years ago"


def format_number(value: Optional[float], decimals: Optional[int] = None) -> str:
    if value is None:
        return "0"
    if decimals is None:
        if float(value).is_integer():
            return f"{int(value):,}"
        return f"{value:,.3f}".rstrip("0").rstrip(".")
    return f"{value:,.{decimals}f}"


def format_percentage(value: Optional[float], decimals: int = 1) -> str:
    """Format a ratio (0.25) as a percentage string (25.0%)."""
    if value is None:
        return "0%"
    return f"{value * 100:.{decimals}f}%"


def truncate_text(text: Optional[str], max_length: int) -> Optional[str]:
    if not text or len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def capitalize_words(text: Optional[str]) -> str:
    if not text:
        return ""
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" "))


def mask_account_id(account_id: Union[int, str]) -> str:
    return f"••••{str(account_id)[-4:]}"
