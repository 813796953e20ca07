"""Number formatting and rounding helpers shared by estimators and the CLI."""

from __future__ import annotations

import math


def format_number(num: float) -> str:
    """Insert thousands separators into the integer portion of *num*.

    The fractional part is left exactly as ``str`` renders it, and integral
    floats drop their trailing ``.0``::

        >>> format_number(1234.56)
        '1,234.56'
        >>> format_number(1000000)
        '1,000,000'
    """
    if isinstance(num, float) and num.is_integer():
        num = int(num)
    text = str(num)
    sign = ""
    if text.startswith("-"):
        sign, text = "-", text[1:]
    integer, dot, fraction = text.partition(".")
    if integer.isdigit():
        integer = f"{int(integer):,}"
    return f"{sign}{integer}{dot}{fraction}"


def format_quantity(num: float) -> str:
    """Render *num* with separators and at most three decimals (``12,345.679``)."""
    text = f"{num:,.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def round_half_up(num: float, digits: int = 0) -> float:
    """Round halves toward positive infinity, unlike :func:`round`.

    NaN and infinities are returned unchanged.
    """
    if not math.isfinite(num):
        return num
    scale = 10**digits
    return math.floor(num * scale + 0.5) / scale


def ceil_to(num: float, digits: int = 1) -> float:
    """Round *num* up to *digits* decimal places; non-finite values pass through."""
    if not math.isfinite(num):
        return num
    scale = 10**digits
    return math.ceil(num * scale) / scale


def format_figure(num: float) -> str:
    """Render an already-rounded figure without a spurious ``.0``."""
    if float(num).is_integer():
        return str(int(num))
    return str(num)


def format_rounded(num: float, digits: int = 1) -> str:
    """Round half-up to *digits* places and render without a trailing ``.0``."""
    return format_figure(round_half_up(num, digits))
