"""
Pattern tables for the bilingual (Tamil + Latin) register format.

Everything script-specific lives here as data: ordered (Script, regex) pairs.
The segmenter, extractor and normalizer only iterate these tables, so adding a
script or a label spelling is a one-line change with no new branching code.

Order matters: alternatives are tried top to bottom and the first one that
matches wins. Tamil labels come first because the registers are printed
Tamil-first with the English label as a secondary gloss.
"""

from __future__ import annotations

import re

from .models import Script

PatternTable = tuple[tuple[Script, str], ...]

# Secondary-script gloss printed right after a label: "/ Buyer" (only when a
# colon follows) or "(Seller)".
LABEL_GLOSS = r"(?:/[^:\n]*(?=:)|\([^)\n]*\))"

# Optional trailing punctuation after a label: "No.", "No:", "எண்.", "எண் :", "No -",
# with an optional gloss before it: "வாங்குபவர் / Buyer:", "விற்பவர் (Seller):"
LABEL_TAIL = r"\.?[^\S\n]*(?:" + LABEL_GLOSS + r"[^\S\n]*)?[:\-]?[^\S\n]*"

# Rest of the current line (never crosses a newline, never starts with punctuation)
FREE_TEXT_TOKEN = r"([^\s:.\-][^\n]*)"

# Digits with optional "/" or "-" separated parts: 123, 123/4, 1234/2020, 12-3
NUMBER_TOKEN = r"([0-9][0-9/\-]*)"

# Same, but uppercase letters are allowed too: 12A, 4/B-2. The token must end
# on a boundary, so "12a" is rejected rather than cut down to "12".
HOUSE_TOKEN = r"([0-9A-Z][0-9A-Z/\-]*)(?![0-9A-Za-z/\-])"


# ─── Block Anchors ───────────────────────────────────────────────────
# A line containing any of these starts a new transaction block.

ANCHOR_PATTERNS: PatternTable = (
    (Script.TAMIL, r"வ\.\s*எண்"),
    (Script.TAMIL, r"ஆவண\s*எண்"),
    (Script.TAMIL, r"ஆவணம்"),
    (Script.LATIN, r"\bDoc(?:ument)?\.?\s*(?:No|Number)\b"),
)


# ─── Field Labels ────────────────────────────────────────────────────

BUYER_LABELS: PatternTable = (
    (Script.TAMIL, r"வாங்குபவர்(?:\s*பெயர்)?"),
    (Script.LATIN, r"\bBuyer(?:'?s)?(?:\s+Name)?"),
    (Script.LATIN, r"\bPurchaser(?:\s+Name)?"),
)

SELLER_LABELS: PatternTable = (
    (Script.TAMIL, r"விற்பவர்(?:\s*பெயர்)?"),
    (Script.LATIN, r"\bSeller(?:'?s)?(?:\s+Name)?"),
    (Script.LATIN, r"\bVendor(?:\s+Name)?"),
)

DISTRICT_LABELS: PatternTable = (
    (Script.TAMIL, r"மாவட்டம்"),
    (Script.LATIN, r"\bDistrict"),
)

SURVEY_LABELS: PatternTable = (
    (Script.TAMIL, r"சர்வே\s*எண்"),
    (Script.LATIN, r"\bSurvey\s*(?:No|Number)"),
)

DOCUMENT_LABELS: PatternTable = (
    (Script.TAMIL, r"வ\.\s*எண்"),
    (Script.TAMIL, r"ஆவண\s*எண்"),
    (Script.TAMIL, r"ஆவணம்"),
    (Script.LATIN, r"\bDoc(?:ument)?\.?\s*(?:No|Number)"),
)

# Labels are matched case-insensitively, the token after them is not:
# house numbers only admit uppercase letters.
HOUSE_LABELS: PatternTable = (
    (Script.TAMIL, r"வீடு\s*எண்"),
    (Script.LATIN, r"\b(?i:House|Door)\s*(?i:No|Number)"),
)


# ─── Dates & Currency ────────────────────────────────────────────────

# Day-first numeric date; the separators may differ ("05/03-2020" is accepted).
DATE_SHAPE = r"(?<![0-9])([0-9]{1,2})[/\-]([0-9]{1,2})[/\-]([0-9]{4})(?![0-9])"

CURRENCY_MARKERS: PatternTable = (
    (Script.TAMIL, r"ரூபாய்"),
    (Script.TAMIL, r"ரூ\.?"),
    (Script.LATIN, r"\bRs\.?"),
    (Script.LATIN, r"\bINR\.?"),
    (Script.ANY, r"₹"),
)

# Digits with grouping commas in any position (1,00,000 or 100,000)
AMOUNT_DIGITS = r"[0-9][0-9,]*"


# ─── Builders ────────────────────────────────────────────────────────


def labeled(labels: PatternTable, token: str) -> PatternTable:
    """Attach a capturing token pattern to every label alternative."""
    return tuple((script, label + LABEL_TAIL + token) for script, label in labels)


def any_of(table: PatternTable) -> str:
    """Join the alternatives of a table into one non-capturing group."""
    return "(?:" + "|".join(pattern for _, pattern in table) + ")"


def compile_table(table: PatternTable, flags: int = re.IGNORECASE) -> tuple[tuple[Script, re.Pattern[str]], ...]:
    """Compile every alternative of a table, keeping its script tag and order."""
    return tuple((script, re.compile(pattern, flags)) for script, pattern in table)


