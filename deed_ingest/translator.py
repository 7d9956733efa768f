"""
Machine translation of source-script names, as best-effort enrichment.

The translation backend is untrusted infrastructure. Whatever it does (raise,
hang, return garbage, return the wrong number of items) the adapter hands back
the original strings unchanged, logs a warning and counts the failure. A
failed translation never blocks a record from being stored.

Design:
  - The backend client is injected and owned explicitly: build it, pass it to
    TranslatorAdapter, close() the adapter when done. No module-level client.
  - Every backend call runs on the adapter's own thread pool and is bounded by
    `timeout`. No retries: an untranslated record is an acceptable outcome.
  - Failure counters are the only shared mutable state and sit behind one lock.
  - No API key → no client → names pass through untranslated.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Protocol

from openai import OpenAI

from .config import Settings
from .exceptions import TranslationError
from .models import UNKNOWN

logger = logging.getLogger(__name__)


# ─── Backend Protocol ────────────────────────────────────────────────


class TranslationClient(Protocol):
    """Anything that can translate a batch of strings, order-preserving."""

    def translate_batch(self, texts: list[str]) -> list[str]: ...

    def close(self) -> None: ...


# ─── OpenAI Backend ──────────────────────────────────────────────────

SYSTEM_PROMPT = """\
You translate personal and company names found in {source} property registration
documents into {target}.

RULES:
1. Render each name the way it would be written in {target} official records.
   Transliterate proper names; do not translate their meaning.
2. Keep initials, honorifics and relationship markers (e.g. S/o, W/o) in order.
3. Return exactly one output string per input string, in the same order.
4. If an input is not a name or cannot be rendered, return it unchanged.

Return a JSON object: {{"translations": ["...", "..."]}}
"""


class OpenAITranslationClient:
    """Translates names with an OpenAI chat model in JSON mode."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-5",
        source_language: str = "Tamil",
        target_language: str = "English",
        timeout: float = 15.0,
    ):
        self.model = model
        self._system_prompt = SYSTEM_PROMPT.format(source=source_language, target=target_language)
        # Retries are disabled; the adapter treats any failure as final.
        self._client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def translate_batch(self, texts: list[str]) -> list[str]:
        response = self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": self._system_prompt},
                {
                    "role": "user",
                    "content": json.dumps({"texts": texts}, ensure_ascii=False),
                },
            ],
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content
        if content is None:
            raise TranslationError("Translation model returned empty content")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise TranslationError(
                "Translation model returned invalid JSON",
                details={"content": content[:200]},
            ) from e

        translations = data.get("translations") if isinstance(data, dict) else None
        if not isinstance(translations, list):
            raise TranslationError(
                "Translation response has no 'translations' list",
                details={"content": content[:200]},
            )
        return translations

    def close(self) -> None:
        self._client.close()


# ─── Side Channel ────────────────────────────────────────────────────


@dataclass
class TranslationStats:
    """Call/failure counters, safe to share across concurrent pipelines."""

    calls: int = 0
    failures: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(self, ok: bool) -> None:
        with self._lock:
            self.calls += 1
            if not ok:
                self.failures += 1

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return {"calls": self.calls, "failures": self.failures}


@dataclass
class TranslationOutcome:
    """Result of one adapter call: the strings to use, and whether the backend failed."""

    translations: list[str]
    failed: bool = False


# ─── Adapter ─────────────────────────────────────────────────────────


def _needs_translation(text: str) -> bool:
    stripped = text.strip()
    return bool(stripped) and stripped != UNKNOWN


class TranslatorAdapter:
    """Best-effort, bounded, order-preserving translation of name strings.

    Usage:
        with TranslatorAdapter(OpenAITranslationClient(api_key)) as translator:
            english = translator.translate_batch(["முருகன்", "லட்சுமி"])
    """

    def __init__(
        self,
        client: TranslationClient | None = None,
        *,
        timeout: float = 15.0,
        max_workers: int = 4,
    ):
        self._client = client
        self.timeout = timeout
        self.stats = TranslationStats()
        self._executor: ThreadPoolExecutor | None = None
        if client is not None:
            self._executor = ThreadPoolExecutor(
                max_workers=max_workers, thread_name_prefix="translator"
            )
        else:
            logger.info("No translation backend configured, names stay untranslated")

    @property
    def enabled(self) -> bool:
        return self._client is not None

    # ── Public API ──────────────────────────────────────────────────

    def translate(self, text: str) -> str:
        """Translate a single string; returns the original on any failure."""
        return self.translate_batch([text])[0]

    def translate_batch(self, texts: Sequence[str]) -> list[str]:
        """Translate many strings in one backend call; originals on any failure."""
        return self.try_translate_batch(texts).translations

    def try_translate_batch(self, texts: Sequence[str]) -> TranslationOutcome:
        """Like translate_batch(), but also reports whether the backend failed.

        Sentinels and blank strings are never sent to the backend and are
        returned as-is.
        """
        originals = list(texts)
        positions = [i for i, text in enumerate(originals) if _needs_translation(text)]

        if not positions or self._client is None:
            return TranslationOutcome(translations=originals)

        pending = [originals[i] for i in positions]
        try:
            translated = self._call_backend(pending)
        except Exception as e:
            self.stats.record(ok=False)
            logger.warning(
                "Translation of %d string(s) failed, keeping originals: %s",
                len(pending),
                e,
            )
            return TranslationOutcome(translations=originals, failed=True)

        self.stats.record(ok=True)
        result = list(originals)
        for i, value in zip(positions, translated):
            result[i] = value.strip() or originals[i]
        return TranslationOutcome(translations=result)

    # ── Lifecycle ───────────────────────────────────────────────────

    def close(self) -> None:
        """Shut down the worker pool and the backend client."""
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        if self._client is not None:
            try:
                self._client.close()
            except Exception as e:
                logger.warning("Error while closing translation backend: %s", e)

    def __enter__(self) -> TranslatorAdapter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── Internals ───────────────────────────────────────────────────

    def _call_backend(self, texts: list[str]) -> list[str]:
        if self._executor is None or self._client is None:
            raise TranslationError("Translator has been closed")

        future = self._executor.submit(self._client.translate_batch, list(texts))
        try:
            result = future.result(timeout=self.timeout)
        except FutureTimeoutError as e:
            future.cancel()
            raise TranslationError(
                f"Translation timed out after {self.timeout:g}s",
                details={"count": len(texts)},
            ) from e

        if not isinstance(result, list) or len(result) != len(texts):
            raise TranslationError(
                "Translation returned a different number of items",
                details={
                    "expected": len(texts),
                    "received": len(result) if isinstance(result, list) else None,
                },
            )
        if not all(isinstance(item, str) for item in result):
            raise TranslationError("Translation returned non-string items")
        return result


# ─── Factory ─────────────────────────────────────────────────────────


def build_translator(settings: Settings) -> TranslatorAdapter:
    """Construct the adapter described by `settings`.

    With an OpenAI API key the adapter wraps an OpenAITranslationClient;
    without one it runs in pass-through mode.
    """
    client: TranslationClient | None = None
    if settings.openai_api_key:
        client = OpenAITranslationClient(
            api_key=settings.openai_api_key,
            model=settings.translation_model,
            source_language=settings.source_language,
            target_language=settings.target_language,
            timeout=settings.translation_timeout,
        )
    return TranslatorAdapter(client, timeout=settings.translation_timeout)
