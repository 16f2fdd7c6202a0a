"""Display formatting package."""

from cashtrack.formatting.currency import (
    CONVERSION_RATES,
    CURRENCY_SYMBOLS,
    convert_amount,
    format_amount,
    format_currency,
    get_currency_symbol,
    to_fixed,
)

__all__ = [
    "CONVERSION_RATES",
    "CURRENCY_SYMBOLS",
    "convert_amount",
    "format_amount",
    "format_currency",
    "get_currency_symbol",
    "to_fixed",
]
