"""
Custom exception hierarchy for deed ingestion.

Only one of these ever reaches the caller of the pipeline: EmptyDocumentError.
Everything else is absorbed at the layer that raised it (see translator.py).
"""

from __future__ import annotations


class DeedIngestError(Exception):
    """Base exception for all deed ingestion failures."""

    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.details = details or {}
        super().__init__(message)


class EmptyDocumentError(DeedIngestError):
    """The upstream text extraction produced nothing to process."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("EMPTY_DOCUMENT", message, details)


class TranslationError(DeedIngestError):
    """The translation backend failed or returned an unusable response."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("TRANSLATION_FAILED", message, details)


class StoreNotConfiguredError(DeedIngestError):
    """A persistence operation was requested on a pipeline without a store."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("STORE_NOT_CONFIGURED", message, details)
