"""
Deed Ingest: Bilingual property-register text to structured transaction records.

Architecture: Segment → Regex Extract → Normalize → Translate → Assemble/Filter → Store
Philosophy:  Extract what the text says. Mark what it doesn't. Never abort a document.
"""

__version__ = "1.0.0"
