"""
Deterministic regex-based field extraction from one transaction block.

Each field has its own FieldRule: an ordered set of (script, pattern)
alternatives taken from patterns.py. The first alternative that matches wins.

This module is a pure function of its input text (no I/O, no logging, no
shared state), so blocks can be extracted in any order or in parallel.

Absence policy:
  - Required fields (names, survey/document number) → UNKNOWN sentinel
  - Optional fields (house number, district, raw date/value) → None
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from . import patterns
from .models import UNKNOWN, ExtractedFields, RawBlock, Script


# ─── Rule Type ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class FieldRule:
    """One field's extraction rule.

    Attributes:
        field: Name of the ExtractedFields attribute this rule fills.
        alternatives: Ordered (script, compiled pattern) pairs.
        group: Capture group returned on a match (0 = the whole match).
    """

    field: str
    alternatives: tuple[tuple[Script, re.Pattern[str]], ...]
    group: int = 1

    def find(self, text: str) -> str | None:
        """Return the trimmed capture of the first matching alternative, or None."""
        for _script, pattern in self.alternatives:
            match = pattern.search(text)
            if match:
                value = match.group(self.group).strip()
                if value:
                    return value
        return None


def _rule(field: str, table: patterns.PatternTable, flags: int = re.IGNORECASE, group: int = 1) -> FieldRule:
    return FieldRule(field=field, alternatives=patterns.compile_table(table, flags), group=group)


# ─── Rule Set ────────────────────────────────────────────────────────

BUYER_RULE = _rule("buyer_name", patterns.labeled(patterns.BUYER_LABELS, patterns.FREE_TEXT_TOKEN))
SELLER_RULE = _rule("seller_name", patterns.labeled(patterns.SELLER_LABELS, patterns.FREE_TEXT_TOKEN))
DISTRICT_RULE = _rule("district", patterns.labeled(patterns.DISTRICT_LABELS, patterns.FREE_TEXT_TOKEN))
SURVEY_RULE = _rule("survey_number", patterns.labeled(patterns.SURVEY_LABELS, patterns.NUMBER_TOKEN))
DOCUMENT_RULE = _rule("document_number", patterns.labeled(patterns.DOCUMENT_LABELS, patterns.NUMBER_TOKEN))
# No IGNORECASE: the labels carry their own (?i:...) groups so that the token
# stays restricted to uppercase letters.
HOUSE_RULE = _rule("house_number", patterns.labeled(patterns.HOUSE_LABELS, patterns.HOUSE_TOKEN), flags=0)
DATE_RULE = _rule("raw_date_text", ((Script.ANY, patterns.DATE_SHAPE),), group=0)
VALUE_RULE = _rule(
    "raw_value_text",
    tuple(
        (script, marker + r"[^\S\n]*" + patterns.AMOUNT_DIGITS)
        for script, marker in patterns.CURRENCY_MARKERS
    ),
    group=0,
)

# Fields are independent, so evaluation order across rules is irrelevant.
FIELD_RULES: tuple[FieldRule, ...] = (
    BUYER_RULE,
    SELLER_RULE,
    HOUSE_RULE,
    SURVEY_RULE,
    DOCUMENT_RULE,
    DATE_RULE,
    VALUE_RULE,
    DISTRICT_RULE,
)

_SENTINEL_FIELDS = frozenset({"buyer_name", "seller_name", "survey_number", "document_number"})


# ─── Public API ──────────────────────────────────────────────────────


def extract_fields(block: RawBlock | str) -> ExtractedFields:
    """Extract transaction fields from one block of register text.

    Args:
        block: A RawBlock from the segmenter, or its plain text.

    Returns:
        ExtractedFields with every required field populated (possibly with
        the UNKNOWN sentinel) and optional fields set to None when absent.
    """
    text = block.text if isinstance(block, RawBlock) else block

    values: dict[str, str | None] = {}
    for rule in FIELD_RULES:
        found = rule.find(text)
        if found is None and rule.field in _SENTINEL_FIELDS:
            found = UNKNOWN
        values[rule.field] = found

    return ExtractedFields(source_text=text, **values)
