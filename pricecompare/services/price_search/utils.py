"""Utilities shared by price search providers."""

from __future__ import annotations

import math
import re
from typing import Optional


USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "Chrome/118 Safari/537.36"
)

UNAVAILABLE_LABEL = "Not available"


def parse_price(price_text: str | None) -> Optional[float]:
    """Best effort conversion from rendered price strings to a number.

    Everything but digits, dots and commas is noise (currency symbols
    included) and commas are always thousands separators.
    """
    if not price_text:
        return None

    cleaned = re.sub(r"[^\d.,]", "", price_text).replace(",", "").strip()
    if not cleaned:
        return None

    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def normalize_whitespace(value: str) -> str:
    """Collapse repeated spaces and newlines."""
    return re.sub(r"\s+", " ", value).strip()
