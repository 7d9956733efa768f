"""
Convert raw date and currency substrings into canonical typed values.

Dates:  strictly day-first DD/MM/YYYY (or with "-"), no matter the separator.
        If the text is absent or unusable we fall back to the ingestion time
        and say so in the status; the field is never left unset.
Values: a currency marker followed by digits and grouping commas
        ("Rs. 1,00,000", "ரூ.1,00,000") → 100000. Absence stays None,
        never 0: a missing value is not a zero-value transaction.

Neither function raises; malformed input degrades to the fallback.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from .models import FieldStatus, NormalizedDate, NormalizedValue
from .patterns import AMOUNT_DIGITS, CURRENCY_MARKERS, DATE_SHAPE, any_of

_DATE = re.compile(DATE_SHAPE)
_VALUE = re.compile(rf"{any_of(CURRENCY_MARKERS)}\s*({AMOUNT_DIGITS})", re.IGNORECASE)
_NON_DIGITS = re.compile(r"[^0-9]")


def normalize_date(raw: str | None, *, fallback: datetime | None = None) -> NormalizedDate:
    """Normalize a raw day-first date string.

    Args:
        raw: Substring matched by the extractor, e.g. "05/03/2020".
        fallback: Value used when `raw` is absent or invalid. Defaults to now (UTC).

    Returns:
        NormalizedDate: PARSED with midnight UTC of that day, or the fallback
        with status MISSING (nothing to parse) / MALFORMED (could not parse).
    """
    if fallback is None:
        fallback = datetime.now(timezone.utc)

    if raw is None or not raw.strip():
        return NormalizedDate(value=fallback, status=FieldStatus.MISSING)

    match = _DATE.fullmatch(raw.strip())
    if not match:
        return NormalizedDate(value=fallback, status=FieldStatus.MALFORMED)

    day, month, year = (int(part) for part in match.groups())
    try:
        value = datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        # 31/02/2020, 00/13/2021 …
        return NormalizedDate(value=fallback, status=FieldStatus.MALFORMED)

    return NormalizedDate(value=value, status=FieldStatus.PARSED)


def normalize_value(raw: str | None) -> NormalizedValue:
    """Normalize a raw currency string to whole currency units.

    Grouping commas may sit anywhere (South Asian 1,00,000 or Western 100,000);
    every non-digit is stripped before parsing. No fractional parsing.
    """
    if raw is None or not raw.strip():
        return NormalizedValue(value=None, status=FieldStatus.MISSING)

    match = _VALUE.search(raw)
    if not match:
        return NormalizedValue(value=None, status=FieldStatus.MALFORMED)

    digits = _NON_DIGITS.sub("", match.group(1))
    if not digits:
        return NormalizedValue(value=None, status=FieldStatus.MALFORMED)

    try:
        value = int(digits, 10)
    except ValueError:
        return NormalizedValue(value=None, status=FieldStatus.MALFORMED)

    return NormalizedValue(value=value, status=FieldStatus.PARSED)
