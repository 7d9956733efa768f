"""
Main ingestion pipeline: orchestrates the full workflow.

Flow:
  ┌──────────┐
  │ Raw text │
  └────┬─────┘
       │
  ┌────▼──────┐
  │ Segmenter │   ← Split on document-number anchors
  └────┬──────┘
       │  RawBlock × N
  ┌────▼──────┐
  │   Regex   │   ← Per block, pure
  │  Extract  │
  └────┬──────┘
       │
  ┌────▼───────┐
  │ Normalizer │   ← Day-first dates, currency → int
  └────┬───────┘
       │
  ┌────▼───────┐
  │ Translator │   ← One batch per document, best-effort
  └────┬───────┘
       │
  ┌────▼──────────────┐
  │ Assemble + Filter │
  └────┬──────────────┘
       │
  ┌────▼──────┐
  │   Store   │   ← Bulk insert, ids assigned
  └───────────┘

Design principles:
  - The only caller-visible failure is "no text to process".
  - Structural absence and malformed values become sentinels/fallbacks.
  - Translation failure leaves names untranslated and never aborts.
  - Nothing is persisted until every record of the document is assembled.
  - The original text is SHA-256 hashed for audit trail.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from .assembler import apply_filters, assemble_record
from .exceptions import EmptyDocumentError, StoreNotConfiguredError
from .extractor_regex import extract_fields
from .models import (
    FilterSpec,
    IngestResult,
    StoredTransaction,
    TransactionRecord,
)
from .normalizer import normalize_date, normalize_value
from .patterns import ANCHOR_PATTERNS, PatternTable
from .segmenter import segment_blocks
from .store import TransactionStore
from .translator import TranslatorAdapter

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IngestPipeline:
    """Orchestrates text → TransactionRecord → store.

    Usage:
        with TranslatorAdapter(client) as translator:
            pipeline = IngestPipeline(translator, TransactionStore("tx.db"))
            result = pipeline.ingest(document_text)
            print(result.count, "transactions stored")

    The pipeline holds no per-document state, so one instance can serve
    concurrent documents.
    """

    def __init__(
        self,
        translator: TranslatorAdapter,
        store: TransactionStore | None = None,
        *,
        anchors: PatternTable = ANCHOR_PATTERNS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.translator = translator
        self.store = store
        self.anchors = anchors
        self.clock = clock

    # ─── Extraction ─────────────────────────────────────────────────

    def process(self, raw_text: str | None, filters: FilterSpec | None = None) -> list[TransactionRecord]:
        """Turn document text into filtered, finalized records (not persisted).

        Raises:
            EmptyDocumentError: If there is no text to process.
        """
        records, _, _ = self._process(raw_text, filters)
        return records

    def _process(
        self, raw_text: str | None, filters: FilterSpec | None
    ) -> tuple[list[TransactionRecord], int, bool]:
        if raw_text is None or not raw_text.strip():
            raise EmptyDocumentError("No text to process: the document is empty or unreadable")

        ingested_at = self.clock()

        # ── Step 1: Segment + extract (pure, per block) ─────────────
        extracted = [extract_fields(block) for block in segment_blocks(raw_text, self.anchors)]
        logger.info("Segmented document into %d block(s)", len(extracted))

        # ── Step 2: Normalize date/value ────────────────────────────
        dates = [normalize_date(f.raw_date_text, fallback=ingested_at) for f in extracted]
        values = [normalize_value(f.raw_value_text) for f in extracted]

        # ── Step 3: Translate every name of the document at once ────
        names: list[str] = []
        for fields in extracted:
            names.extend((fields.buyer_name, fields.seller_name))
        outcome = self.translator.try_translate_batch(names)
        if outcome.failed:
            logger.warning("Translation unavailable for this document; storing source-script names")

        # ── Step 4: Assemble ────────────────────────────────────────
        records = [
            assemble_record(
                fields,
                transaction_date=dates[i],
                transaction_value=values[i],
                buyer_name_translated=outcome.translations[2 * i],
                seller_name_translated=outcome.translations[2 * i + 1],
            )
            for i, fields in enumerate(extracted)
        ]

        # ── Step 5: Filter ──────────────────────────────────────────
        kept = apply_filters(records, filters)
        if len(kept) != len(records):
            logger.info("Filters kept %d of %d record(s)", len(kept), len(records))
        return kept, len(records), outcome.failed

    # ─── Persistence ────────────────────────────────────────────────

    def ingest(self, raw_text: str | None, filters: FilterSpec | None = None) -> IngestResult:
        """Process a document and persist the records that pass `filters`.

        Raises:
            EmptyDocumentError: If there is no text to process.
            StoreNotConfiguredError: If the pipeline has no store.
        """
        store = self._require_store()
        doc_hash = hashlib.sha256((raw_text or "").encode("utf-8")).hexdigest()

        records, block_count, translation_failed = self._process(raw_text, filters)
        stored = store.insert_many(records)
        logger.info("Stored %d transaction(s) from document %s", len(stored), doc_hash[:12])

        return IngestResult(
            original_hash=doc_hash,
            block_count=block_count,
            count=len(stored),
            transactions=stored,
            translation_failures=1 if translation_failed else 0,
        )

    def search(self, filters: FilterSpec | None = None) -> list[StoredTransaction]:
        """Query already-persisted transactions with the same filter semantics."""
        return self._require_store().search(filters)

    def _require_store(self) -> TransactionStore:
        if self.store is None:
            raise StoreNotConfiguredError("This pipeline was built without a transaction store")
        return self.store
