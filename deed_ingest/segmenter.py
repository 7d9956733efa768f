"""
Split a register's text into per-transaction blocks.

A line that contains a document-number anchor (in either script) closes the
block being built and opens a new one. Text with no anchors at all degrades
to a single catch-all block; this module never raises.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from .models import RawBlock
from .patterns import ANCHOR_PATTERNS, PatternTable, compile_table


def segment_blocks(text: str, anchors: PatternTable = ANCHOR_PATTERNS) -> Iterator[RawBlock]:
    """Yield the transaction blocks of `text` in document order.

    Args:
        text: The full extracted document text.
        anchors: Ordered (script, pattern) pairs marking the start of a block.

    Yields:
        RawBlock with trimmed text; empty and whitespace-only blocks are skipped.
    """
    compiled = [pattern for _, pattern in compile_table(anchors, re.IGNORECASE)]
    index = 0
    current: list[str] = []

    for line in (text or "").split("\n"):
        if current and any(pattern.search(line) for pattern in compiled):
            block = _finish(current, index)
            if block is not None:
                yield block
                index += 1
            current = []
        current.append(line)

    block = _finish(current, index)
    if block is not None:
        yield block


def _finish(lines: list[str], index: int) -> RawBlock | None:
    body = "\n".join(lines).strip()
    if not body:
        return None
    return RawBlock(index=index, text=body)
