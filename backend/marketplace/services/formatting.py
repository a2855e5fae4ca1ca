"""
Display strings for listings: price, age, listed date, and condition.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union


def format_price(price: Union[Decimal, int, float]) -> str:
    """
    Format a price in US dollars.

    At most two decimals, with trailing zeros dropped: "$1,500", "$12.5",
    "$12.35".
    """
    amount = Decimal(str(price)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    text = f"{amount:,.2f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"${text}"


def format_relative_age(created_at: datetime, now: Optional[datetime] = None) -> str:
    """
    Describe how long ago a listing was created.

    < 1 hour   -> "Just now"
    < 24 hours -> "N hours ago"
    < 7 days   -> "N days ago"
    otherwise  -> the calendar date (M/D/YYYY)
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)

    diff_in_hours = int((now - created_at).total_seconds() // 3600)

    if diff_in_hours < 1:
        return "Just now"
    if diff_in_hours < 24:
        return f"{diff_in_hours} hours ago"
    if diff_in_hours < 168:
        return f"{diff_in_hours // 24} days ago"
    return f"{created_at.month}/{created_at.day}/{created_at.year}"


def format_listed_date(created_at: datetime) -> str:
    """Long date for the detail view, e.g. "January 5, 2026"."""
    return f"{created_at.strftime('%B')} {created_at.day}, {created_at.year}"


def format_condition(condition: str) -> str:
    """Title-case a hyphenated condition id: "like-new" -> "Like New"."""
    return " ".join(word[:1].upper() + word[1:] for word in condition.split("-"))
