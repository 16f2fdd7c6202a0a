"""
Currency Formatting

Deterministic rendering of amounts as display strings, e.g. 1234.5 -> "₹1,234.50".

DESIGN DECISION: Rounding is done on the exact binary value of the float,
half away from zero, via Decimal. Python's own float formatting rounds
half-to-even, which would render 0.125 as "0.12" instead of "0.13".

Sign handling belongs to the caller: format_currency never emits a minus.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Union

from cashtrack.config import DisplaySettings
from cashtrack.models.finance import Currency


CURRENCY_SYMBOLS = {
    Currency.INR.value: "₹",
    Currency.USD.value: "$",
    Currency.EUR.value: "€",
}

DEFAULT_SYMBOL = CURRENCY_SYMBOLS[Currency.INR.value]

# Approximate rates relative to INR
CONVERSION_RATES = {
    Currency.INR.value: 1.0,
    Currency.USD.value: 0.012,
    Currency.EUR.value: 0.011,
}

CurrencyCode = Union[Currency, str, None]


def _code(currency: CurrencyCode) -> str:
    if isinstance(currency, Currency):
        return currency.value
    if isinstance(currency, str):
        return currency.strip().upper()
    return Currency.INR.value


def _as_float(value: Any) -> float:
    """
    Coerce to float; anything non-numeric (booleans included) becomes NaN.

    Blank strings count as zero. Integers too large for a float become NaN.
    """
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, str) and not value.strip():
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return math.nan


def to_fixed(value: float, places: int = 2) -> str:
    """
    Render a finite float with a fixed number of decimals.

    Rounds half away from zero on the exact binary value and never
    renders a negative zero.
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = rounded.copy_abs()
    return format(rounded, "f")


def get_currency_symbol(currency: CurrencyCode) -> str:
    """Symbol for a currency code; unknown codes fall back to the rupee."""
    return CURRENCY_SYMBOLS.get(_code(currency), DEFAULT_SYMBOL)


def format_currency(amount: Any, currency: CurrencyCode = Currency.INR) -> str:
    """
    Format an amount for display.

    Args:
        amount: Any numeric-like value (numbers, numeric strings)
        currency: Currency code; unknown codes render with "₹"

    Returns:
        e.g. "₹1,234.50"; NaN or non-finite input renders as "<symbol>0"
    """
    symbol = get_currency_symbol(currency)
    num = _as_float(amount)
    if math.isnan(num) or math.isinf(num):
        return f"{symbol}0"

    rounded = Decimal(abs(num)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{symbol}{rounded:,.2f}"


def format_amount(amount: Any, display: Optional[DisplaySettings] = None) -> str:
    """Format an amount using the injected display settings."""
    display = display or DisplaySettings()
    return format_currency(amount, display.currency)


def convert_amount(
    amount: float,
    from_currency: CurrencyCode = Currency.INR,
    to_currency: CurrencyCode = Currency.INR,
) -> float:
    """
    Convert between currencies using the fixed approximate rate table.

    Unknown currency codes are treated as INR.
    """
    from_rate = CONVERSION_RATES.get(_code(from_currency), 1.0)
    to_rate = CONVERSION_RATES.get(_code(to_currency), 1.0)
    return (amount / from_rate) * to_rate
