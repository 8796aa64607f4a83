"""Currency unit conversion.

Prices are integers in the smallest unit (wei).  Contracts never convert;
these helpers exist for callers that think in whole ether.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

WEI_PER_ETHER = 10**18


def parse_ether(amount: str | int) -> int:
    """Convert a decimal ether amount to wei.

    >>> parse_ether("1")
    1000000000000000000
    >>> parse_ether("0.5")
    500000000000000000
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid ether amount: {amount!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid ether amount: {amount!r}")
    wei = value.scaleb(18)
    if wei != wei.to_integral_value():
        raise ValueError(f"Ether amount has more than 18 decimals: {amount!r}")
    return int(wei)


def format_ether(wei: int) -> str:
    """Convert wei to a decimal ether string without trailing zeros.

    >>> format_ether(1500000000000000000)
    '1.5'
    """
    text = format(Decimal(wei).scaleb(-18), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
