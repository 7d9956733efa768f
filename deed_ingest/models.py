"""
Pydantic models for register data: strict typing at every stage boundary.

Stages and their models:
    RawBlock          Segmenter output (transient)
    ExtractedFields   Field Extractor output (transient)
    NormalizedDate /  Normalizer output (transient)
    NormalizedValue
    TransactionRecord Assembled record, the durable unit
    StoredTransaction TransactionRecord + identity assigned by the store
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Placeholder for a required field that could not be extracted.
UNKNOWN = "UNKNOWN"


# ─── Enums ──────────────────────────────────────────────────────────


class Script(str, Enum):
    """Writing system a pattern alternative is written for."""

    TAMIL = "TAMIL"
    LATIN = "LATIN"
    ANY = "ANY"  # Script-neutral shapes (numeric dates, currency symbols)


class FieldStatus(str, Enum):
    """How a normalized value came to be."""

    PARSED = "PARSED"  # Raw text matched and converted
    MISSING = "MISSING"  # Nothing matched in the block
    MALFORMED = "MALFORMED"  # Something matched but could not be converted


# ─── Segmenter / Extractor ──────────────────────────────────────────


class RawBlock(BaseModel):
    """A contiguous span of document text believed to describe one transaction."""

    index: int  # 0-based position in the document
    text: str


class ExtractedFields(BaseModel):
    """What the regex rules pull out of one block.

    Required fields fall back to the UNKNOWN sentinel, optional ones to None.
    """

    buyer_name: str = UNKNOWN
    seller_name: str = UNKNOWN
    house_number: Optional[str] = None
    survey_number: str = UNKNOWN
    document_number: str = UNKNOWN
    raw_date_text: Optional[str] = None
    raw_value_text: Optional[str] = None
    district: Optional[str] = None
    source_text: str = ""

    @field_validator("buyer_name", "seller_name", "survey_number", "document_number")
    @classmethod
    def _blank_is_unknown(cls, value: str) -> str:
        value = value.strip()
        return value or UNKNOWN


# ─── Normalizer ─────────────────────────────────────────────────────


class NormalizedDate(BaseModel):
    """Canonical transaction date plus how it was obtained."""

    value: datetime
    status: FieldStatus


class NormalizedValue(BaseModel):
    """Canonical transaction value (whole currency units) plus how it was obtained."""

    value: Optional[int] = None
    status: FieldStatus


# ─── Records ────────────────────────────────────────────────────────


class TransactionRecord(ExtractedFields):
    """A finalized transaction, ready to be handed to persistence."""

    buyer_name_translated: str
    seller_name_translated: str
    transaction_date: datetime
    transaction_date_status: FieldStatus = FieldStatus.PARSED
    transaction_value: Optional[int] = None
    transaction_value_status: FieldStatus = FieldStatus.MISSING


class StoredTransaction(TransactionRecord):
    """A TransactionRecord as returned by the store."""

    id: int
    created_at: datetime


# ─── Filters ────────────────────────────────────────────────────────


class FilterSpec(BaseModel):
    """Optional, conjunctive record filters.

    Empty strings are treated the same as not supplying the filter.
    """

    buyer_name: Optional[str] = None
    seller_name: Optional[str] = None
    house_number: Optional[str] = None
    survey_number: Optional[str] = None
    document_number: Optional[str] = None

    def active(self) -> dict[str, str]:
        """Return only the filters that were actually supplied."""
        return {
            name: value
            for name, value in self.model_dump().items()
            if value
        }

    def is_empty(self) -> bool:
        return not self.active()


# ─── Pipeline Output ────────────────────────────────────────────────


class IngestResult(BaseModel):
    """The output of one ingestion run."""

    original_hash: str  # SHA-256 of the input text for audit trail
    block_count: int
    count: int
    transactions: list[StoredTransaction] = Field(default_factory=list)
    translation_failures: int = 0
