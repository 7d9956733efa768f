#!/usr/bin/env python3
"""
Deed Ingest: Entry Point
==========================

Runs the ingestion pipeline on a register text file (or a built-in sample)
and prints the resulting transaction records.

Usage:
    python main.py                                  # Built-in bilingual sample
    python main.py register.txt --survey 12/3       # Ingest a file, filter by survey no.
    OPENAI_API_KEY=sk-... python main.py file.txt   # With name translation
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from deed_ingest.config import configure_logging, load_settings
from deed_ingest.exceptions import EmptyDocumentError
from deed_ingest.models import FieldStatus, FilterSpec, IngestResult
from deed_ingest.pipeline import IngestPipeline
from deed_ingest.store import TransactionStore
from deed_ingest.translator import build_translator


# ─── Sample Register Text, Mixed Scripts on Purpose ─────────────────

SAMPLE_TEXT = """\
வ.எண். 1234/2020
வாங்குபவர்: முருகன்
விற்பவர்: லட்சுமி
வீடு எண். 12A
சர்வே எண். 45/2
தேதி: 05/03/2020
மதிப்பு: ரூ.1,00,000
மாவட்டம்: சென்னை
Document No: 1235/2020
Buyer: Ravi Kumar
Seller: Senthil Nathan
House No: 7/B
Survey No: 12/3
Date: 17-11-2020
Value: Rs. 25,50,000
District: Coimbatore
Document No: 1236/2020
Buyer: Anitha
Survey No: 98
Date: 31/02/2021
"""


# ─── ANSI Color Constants ───────────────────────────────────────────

_YELLOW = "\033[93m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_RESET = "\033[0m"
_WIDTH = 72


# ─── Pretty Printer ─────────────────────────────────────────────────


def _flag(status: FieldStatus) -> str:
    if status == FieldStatus.PARSED:
        return ""
    return f" {_YELLOW}[{status.value}]{_RESET}"


def print_result(result: IngestResult) -> None:
    """Pretty-print the stored transactions with ANSI color codes."""
    print(f"\n{'=' * _WIDTH}")
    print(f"{_BOLD}{_CYAN}  INGESTION REPORT{_RESET}")
    print(f"{'=' * _WIDTH}")
    print(f"  Audit Hash:  {_DIM}{result.original_hash[:16]}...{_RESET}")
    print(f"  Blocks:      {result.block_count}")
    print(f"  Stored:      {result.count}")
    if result.translation_failures:
        print(f"  {_YELLOW}Translation failed; names kept in source script{_RESET}")

    for tx in result.transactions:
        value = f"{tx.transaction_value:,}" if tx.transaction_value is not None else "-"
        print(f"{'─' * _WIDTH}")
        print(f"  #{tx.id}  Document {_BOLD}{tx.document_number}{_RESET}  Survey {tx.survey_number}")
        print(f"  Buyer:       {tx.buyer_name} {_DIM}→{_RESET} {tx.buyer_name_translated}")
        print(f"  Seller:      {tx.seller_name} {_DIM}→{_RESET} {tx.seller_name_translated}")
        print(f"  House:       {tx.house_number or '-'}")
        print(f"  Date:        {tx.transaction_date.date()}{_flag(tx.transaction_date_status)}")
        print(f"  Value:       {value}{_flag(tx.transaction_value_status)}")
        print(f"  District:    {tx.district or '-'}")

    print(f"{'=' * _WIDTH}")
    print(f"  {_GREEN}{_BOLD}{result.count} TRANSACTION(S) STORED{_RESET}")
    print(f"{'=' * _WIDTH}\n")


# ─── Main ────────────────────────────────────────────────────────────


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest bilingual property register text.")
    parser.add_argument("file", nargs="?", type=Path, help="UTF-8 text file (default: built-in sample)")
    parser.add_argument("--buyer", help="Buyer name substring (translated name)")
    parser.add_argument("--seller", help="Seller name substring (translated name)")
    parser.add_argument("--house", help="Exact house number")
    parser.add_argument("--survey", help="Exact survey number")
    parser.add_argument("--document", help="Exact document number")
    parser.add_argument("--db", help="SQLite database path (overrides DEED_INGEST_DB_PATH)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the pipeline once and print the report."""
    args = _parse_args(argv)
    settings = load_settings(db_path=args.db)
    configure_logging(settings.log_level)

    raw_text = args.file.read_text(encoding="utf-8") if args.file else SAMPLE_TEXT
    filters = FilterSpec(
        buyer_name=args.buyer,
        seller_name=args.seller,
        house_number=args.house,
        survey_number=args.survey,
        document_number=args.document,
    )

    with build_translator(settings) as translator:
        pipeline = IngestPipeline(translator, TransactionStore(settings.db_path))
        try:
            result = pipeline.ingest(raw_text, filters)
        except EmptyDocumentError as e:
            print(f"  {e}", file=sys.stderr)
            return 1

    print_result(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
