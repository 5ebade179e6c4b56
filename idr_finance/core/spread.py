"""
IDR Finance — Spread enrichment calculator.

Pure functions, no I/O and no shared state.  All arithmetic is done with
``decimal.Decimal`` and ROUND_HALF_UP; floats never enter the calculation.

    factor = spread_factor("testuser")                 # Decimal('0.00895')
    buy    = usd_buy_spread_idr(Decimal("0.000064"), factor)
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional

from idr_finance.core.constants import (
    BUY_SPREAD_PLACES,
    SPREAD_DIVISOR,
    SPREAD_FACTOR_PLACES,
    SPREAD_MODULUS,
)
from idr_finance.errors import InvalidArgumentError


# ---------------------------------------------------------------------------
# Exact decimal helpers
# ---------------------------------------------------------------------------

def _decimal_from_scaled(value: int, places: int) -> Decimal:
    """Return ``value * 10**-places`` exactly, independent of context precision."""
    return Decimal(f"{value}E-{places}")


def divide_half_up(numerator: Decimal, denominator: Decimal, places: int) -> Decimal:
    """Divide exactly and round once to ``places`` fractional digits, half-up.

    The quotient is computed from the integer ratios of both operands, so no
    intermediate rounding happens at the context precision.
    """
    if denominator == 0:
        raise InvalidArgumentError("Division by zero")
    num_n, num_d = numerator.as_integer_ratio()
    den_n, den_d = denominator.as_integer_ratio()
    top = num_n * den_d * 10 ** places
    bottom = num_d * den_n
    negative = (top < 0) != (bottom < 0)
    quotient, remainder = divmod(abs(top), abs(bottom))
    if 2 * remainder >= abs(bottom):
        quotient += 1
    return _decimal_from_scaled(-quotient if negative else quotient, places)


def round_half_up(value: Decimal, places: int) -> Decimal:
    """Quantize ``value`` to ``places`` fractional digits, half-up."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(value.as_tuple().digits) + places + 2)
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def multiply_exact(a: Decimal, b: Decimal) -> Decimal:
    """Multiply without losing digits to the context precision."""
    with localcontext() as ctx:
        ctx.prec = len(a.as_tuple().digits) + len(b.as_tuple().digits) + 2
        return a * b


# ---------------------------------------------------------------------------
# Spread factor
# ---------------------------------------------------------------------------

def spread_factor(seed: Optional[str]) -> Decimal:
    """Derive the spread factor from ``seed``.

    Sum of the code points of the lower-cased seed, modulo 1000, divided by
    100000 and rounded to 5 places.  The result lies in [0.00000, 0.00999].
    """
    if not seed:
        raise InvalidArgumentError("Spread seed cannot be null or empty")

    code_point_sum = sum(ord(ch) for ch in seed.lower())
    modulo = code_point_sum % SPREAD_MODULUS
    return divide_half_up(Decimal(modulo), Decimal(SPREAD_DIVISOR), SPREAD_FACTOR_PLACES)


# ---------------------------------------------------------------------------
# Buy spread
# ---------------------------------------------------------------------------

def usd_buy_spread_idr(rate: Optional[Decimal], factor: Optional[Decimal]) -> Decimal:
    """Return ``(1 / rate) * (1 + factor)`` with two-stage rounding.

    The inverse is rounded to 10 places first, then the product is rounded
    to 10 places again.  Collapsing this into one division changes results.
    """
    if rate is None or rate == 0:
        raise InvalidArgumentError("USD rate cannot be null or zero")
    if factor is None:
        raise InvalidArgumentError("Spread factor cannot be null")

    inverse = divide_half_up(Decimal(1), rate, BUY_SPREAD_PLACES)
    product = multiply_exact(inverse, Decimal(1) + factor)
    return round_half_up(product, BUY_SPREAD_PLACES)
