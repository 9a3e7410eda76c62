"""
Numeric helpers shared by the calculator and the reconciler.

All amounts are handled as ``Decimal``. Anything that cannot be read as a
finite number is coerced to a default instead of raising, so a half-typed
cell never breaks a recalculation.
"""

import logging
import re
from decimal import Decimal, InvalidOperation, ROUND_CEILING, ROUND_HALF_UP
from typing import Any, Union

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

CURRENCY_SYMBOLS = {
    'INR': '₹',
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
    'JPY': '¥',
    'THB': '฿',
    'AED': 'AED ',
    'SGD': 'S$',
    'MYR': 'RM',
    'AUD': 'A$',
    'CAD': 'C$',
    'CHF': 'CHF ',
}


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce a loosely typed numeric input to a finite Decimal."""
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        # str() keeps the shortest repr, so 0.1 stays 0.1
        result = _parse(str(value))
    elif isinstance(value, str):
        clean_str = re.sub(r'[\s,]', '', value)
        clean_str = re.sub(r'^[^\d.\-+]+', '', clean_str)
        result = _parse(clean_str)
    else:
        result = None

    if result is None or not result.is_finite():
        return default
    return result


def _parse(text: str):
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def to_count(value: Any, default: int = 0) -> int:
    """Coerce to a non-negative whole count (passengers)."""
    number = to_decimal(value, Decimal(default))
    if number < 0:
        return 0
    return int(number.to_integral_value(rounding=ROUND_HALF_UP))


def percent(value: Any) -> Decimal:
    """Convert a percentage (``5`` for 5%) to a fraction."""
    return to_decimal(value) / HUNDRED


def round_up_to_step(amount: Decimal, step: Union[int, Decimal] = 100) -> Decimal:
    """Round up to the next multiple of ``step``; exact multiples and zero are kept."""
    if amount == 0:
        return ZERO
    step = Decimal(step)
    return (amount / step).to_integral_value(rounding=ROUND_CEILING) * step


def round_whole(amount: Decimal) -> Decimal:
    return amount.quantize(ONE, rounding=ROUND_HALF_UP)


def safe_divide(amount: Decimal, divisor: Any) -> Decimal:
    """Divide, returning zero instead of failing on a zero divisor."""
    divisor = to_decimal(divisor)
    if divisor == 0:
        return ZERO
    return amount / divisor


def to_json_number(value: Decimal) -> Union[int, float]:
    """Render a Decimal as a plain JSON number (int when integral)."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def currency_symbol(currency_code: str) -> str:
    """Get currency symbol from currency code."""
    return CURRENCY_SYMBOLS.get(currency_code.upper(), f"{currency_code.upper()} ")


def format_currency(amount: Decimal, currency_code: str = 'INR') -> str:
    """Format decimal amount as currency string."""
    symbol = currency_symbol(currency_code)
    if amount == 0:
        return f"{symbol}0.00"

    # Round to 2 decimal places
    rounded_amount = amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)

    # Format with commas for thousands
    formatted = f"{rounded_amount:,.2f}"

    if currency_code.upper() == 'EUR':
        return f"{formatted} {symbol}"
    return f"{symbol}{formatted}"
