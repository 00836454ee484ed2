"""
Monetary helpers for minor-unit arithmetic.

Key rules:
1. NEVER use float for money
2. Quantize Decimals BEFORE converting to minor units
3. Use ROUND_HALF_EVEN (banker's rounding) to avoid systematic bias
4. Allocations must sum exactly to the total (no +/-1 drift)
"""

from decimal import Decimal, ROUND_HALF_EVEN, getcontext
from typing import List, Union

getcontext().prec = 28

# Currency minor unit exponents (how many decimal places)
CURRENCY_EXPONENT = {
    "USD": 2,
    "EUR": 2,
    "GBP": 2,
    "CAD": 2,
    "AUD": 2,
    "PKR": 2,
    "INR": 2,
    "AED": 2,
    # Zero-decimal currencies
    "JPY": 0,
    "KRW": 0,
    "VND": 0,
    # Three-decimal currencies
    "KWD": 3,
    "BHD": 3,
    "OMR": 3,
}

Numeric = Union[Decimal, str, int]


def currency_exponent(currency: str) -> int:
    """
    >>> currency_exponent("USD")
    2
    >>> currency_exponent("JPY")
    0
    """
    return CURRENCY_EXPONENT.get(currency.upper(), 2)


def quantize(currency: str, amount: Numeric) -> Decimal:
    """
    Round to the currency's decimals with banker's rounding.

    >>> quantize("USD", "10.125")
    Decimal('10.12')
    >>> quantize("JPY", "1234.56")
    Decimal('1235')
    """
    if isinstance(amount, float):
        raise TypeError("float amounts are not accepted; pass Decimal or str")
    unit = Decimal(10) ** -currency_exponent(currency)
    return Decimal(amount).quantize(unit, rounding=ROUND_HALF_EVEN)


def to_minor(currency: str, amount: Numeric) -> int:
    """
    >>> to_minor("USD", "10.127")
    1013
    """
    quantized = quantize(currency, amount)
    return int((quantized * (10 ** currency_exponent(currency))).to_integral_value())


def from_minor(currency: str, minor: int) -> Decimal:
    """
    >>> from_minor("USD", 1013)
    Decimal('10.13')
    """
    return Decimal(minor) / (10 ** currency_exponent(currency))


def convert_minor(
    amount_minor: int, from_currency: str, to_currency: str, rate: Numeric
) -> int:
    """
    Convert an amount between currencies at a declared rate.

    ``rate`` is the price of one unit of ``from_currency`` in
    ``to_currency``. The result is rounded once, in the target currency.

    >>> convert_minor(12000, "PKR", "USD", "0.0036")
    43
    >>> convert_minor(9600, "USD", "USD", "1")
    9600
    """
    rate = Decimal(str(rate))
    if from_currency.upper() == to_currency.upper() and rate == 1:
        return amount_minor
    major = from_minor(from_currency, amount_minor) * rate
    return to_minor(to_currency, major)


def allocate_minor(weights: List[int], total_minor: int) -> List[int]:
    """
    Split ``total_minor`` across ``weights`` proportionally.

    Each share is floored, then the remainder goes one unit at a time to the
    largest residuals (ties broken by position). Integer-only, so the result
    always sums to ``total_minor``.

    >>> allocate_minor([100, 100, 100], 100)
    [34, 33, 33]
    >>> allocate_minor([1000, 1500, 2000], 100)
    [22, 33, 45]
    """
    total_weight = sum(weights)
    if total_weight == 0 or total_minor == 0:
        return [0] * len(weights)

    floors = []
    residuals = []
    for index, weight in enumerate(weights):
        share, residual = divmod(weight * total_minor, total_weight)
        floors.append(share)
        residuals.append((residual, index))

    remainder = total_minor - sum(floors)
    residuals.sort(key=lambda item: (-item[0], item[1]))

    result = floors[:]
    for _, index in residuals[:remainder]:
        result[index] += 1
    return result


def validate_minor_sum(components: List[int], expected_total: int, context: str = "") -> None:
    """Raise ValueError if ``components`` do not add up to ``expected_total``."""
    actual = sum(components)
    if actual != expected_total:
        diff = actual - expected_total
        raise ValueError(
            f"Minor unit sum mismatch{' ' + context if context else ''}: "
            f"expected {expected_total}, got {actual} (diff: {diff:+d})"
        )
