"""
Record assembly and filtering.

assemble_record() merges extractor, normalizer and translator output into a
TransactionRecord. matches_filters() is the one definition of what a filter
means; the SQLite store registers contains_casefold() as a SQL function so a
search over stored rows agrees with filtering at upload time.

Filter semantics (all optional, all must hold):
  - buyer_name / seller_name   case-insensitive substring of the TRANSLATED name
  - house / survey / document  exact match on the canonical token
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TypeVar

from .models import (
    ExtractedFields,
    FilterSpec,
    NormalizedDate,
    NormalizedValue,
    TransactionRecord,
)

R = TypeVar("R", bound=TransactionRecord)

# FilterSpec field → (record attribute, exact?)
FILTER_FIELDS: dict[str, tuple[str, bool]] = {
    "buyer_name": ("buyer_name_translated", False),
    "seller_name": ("seller_name_translated", False),
    "house_number": ("house_number", True),
    "survey_number": ("survey_number", True),
    "document_number": ("document_number", True),
}


def assemble_record(
    fields: ExtractedFields,
    *,
    transaction_date: NormalizedDate,
    transaction_value: NormalizedValue,
    buyer_name_translated: str | None = None,
    seller_name_translated: str | None = None,
) -> TransactionRecord:
    """Build the final record for one block.

    Missing translations fall back to the source-script names.
    """
    return TransactionRecord(
        **fields.model_dump(),
        buyer_name_translated=buyer_name_translated or fields.buyer_name,
        seller_name_translated=seller_name_translated or fields.seller_name,
        transaction_date=transaction_date.value,
        transaction_date_status=transaction_date.status,
        transaction_value=transaction_value.value,
        transaction_value_status=transaction_value.status,
    )


def contains_casefold(haystack: str | None, needle: str | None) -> bool:
    """Case-insensitive substring test (Unicode-aware)."""
    if haystack is None or needle is None:
        return False
    return needle.casefold() in haystack.casefold()


def matches_filters(record: TransactionRecord, spec: FilterSpec | None) -> bool:
    """True if `record` satisfies every supplied filter in `spec`."""
    if spec is None:
        return True

    for name, wanted in spec.active().items():
        attribute, exact = FILTER_FIELDS[name]
        actual = getattr(record, attribute)
        if exact:
            if actual != wanted:
                return False
        elif not contains_casefold(actual, wanted):
            return False
    return True


def apply_filters(records: Iterable[R], spec: FilterSpec | None) -> list[R]:
    """Keep the records matching `spec`, in their original order."""
    return [record for record in records if matches_filters(record, spec)]
