"""
Helper Utilities
Common helper functions
"""

from datetime import datetime, timezone
from decimal import Decimal


def utcnow() -> datetime:
    """
    Current UTC time as a naive datetime

    Stored timestamps are naive UTC, matching what SQLite hands back.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_currency(amount: Decimal) -> str:
    """
    Format amount for log messages

    Args:
        amount: Amount to format

    Returns:
        str: Formatted amount, e.g. 1,250.00
    """
    return f"{amount:,.2f}"
