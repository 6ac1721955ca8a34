# Presentation formatting - one decimal convention per report, kept out of the math
from __future__ import annotations

import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional


def format_decimal(value: Optional[float], decimals: int = 1, separator: str = ",") -> str:
    """Fixed-decimals string rounded half up, with the given separator, e.g. 5.25 -> "5,3"."""
    if value is None or not math.isfinite(value):
        value = 0.0
    rounded = Decimal(str(value)).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    text = f"{rounded:f}"
    if text.startswith("-") and rounded == 0:
        text = text[1:]
    return text.replace(".", separator)


def format_decimal_br(value: Optional[float], decimals: int = 1) -> str:
    """Brazilian convention: comma as decimal separator."""
    return format_decimal(value, decimals, ",")


def format_percent_br(value: Optional[float], decimals: int = 1) -> str:
    return f"{format_decimal_br(value, decimals)}%"


def month_label(month: date) -> str:
    """Chart label for a month: "08/24"."""
    return month.strftime("%m/%y")
