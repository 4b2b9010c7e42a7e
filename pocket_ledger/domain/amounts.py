"""Locale-formatted amount parsing and rendering"""

import math
import re
from typing import Optional

from pocket_ledger.config import settings

_NON_DIGITS = re.compile(r"\D")


def round_amount(value: float) -> int:
    """Round half-up to whole currency units (2.5 -> 3, -2.5 -> -2)"""
    return int(math.floor(value + 0.5))


def format_amount(value: int, separator: Optional[str] = None) -> str:
    """
    Group digits with the thousands separator.

    Example:
        12000000 -> "12.000.000"
    """
    separator = separator or settings.thousands_separator
    grouped = f"{abs(int(value)):,}".replace(",", separator)
    return f"-{grouped}" if value < 0 else grouped


def format_currency(value: int) -> str:
    """Render an amount with the currency symbol, e.g. "Rp 1.500.000" """
    return f"{settings.currency_symbol} {format_amount(value)}"


def parse_amount(text: Optional[str]) -> int:
    """
    Parse user-entered amount text back to an integer.

    Every non-digit character (grouping separators, currency symbol, spaces)
    is dropped, so "Rp 1.500.000" and "1500000" both give 1500000.
    Empty or digit-less input gives 0.
    """
    if not text:
        return 0
    digits = _NON_DIGITS.sub("", text)
    return int(digits) if digits else 0
