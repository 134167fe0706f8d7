"""
Formatting Utilities
Rounding, currency, distance and time formatting functions
"""

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float, decimals: int = 2) -> float:
    """
    Round using arithmetic rounding (round half up) instead of banker's rounding.

    Examples:
        1.225 -> 1.23 (not 1.22)
        4.105 -> 4.11 (not 4.1)
    """
    if value is None:
        return 0.0

    decimal_value = Decimal(str(value))
    quantizer = Decimal(10) ** -decimals
    rounded = decimal_value.quantize(quantizer, rounding=ROUND_HALF_UP)

    return float(rounded)


def format_currency(amount, currency="AFc"):
    """Format currency amount"""
    try:
        return f"{amount:.2f} {currency}"
    except (TypeError, ValueError):
        return f"0.00 {currency}"


def format_distance(distance_km):
    """Format distance in kilometers"""
    try:
        return f"{distance_km:.1f} km"
    except (TypeError, ValueError):
        return "0.0 km"


def format_timestamp_ms(timestamp_ms):
    """Format an epoch-millisecond timestamp as UTC"""
    if not timestamp_ms:
        return "N/A"
    dt = datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)
    return dt.strftime("%d.%m.%Y %H:%M")
