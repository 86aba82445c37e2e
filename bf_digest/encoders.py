"""Item-to-bytes conversions used to feed a digest function.

An encoder must be deterministic and must produce identical bytes for items
the caller considers equal, otherwise the filter can report false negatives.
"""
from __future__ import annotations

from typing import Any


def text_bytes(item: Any) -> bytes:
    """Encode the canonical text form of ``item`` as UTF-8.

    Bytes-like items pass through unchanged, so ``"abc"`` and ``b"abc"`` map to
    the same bytes.
    """
    if isinstance(item, str):
        return item.encode("utf-8")
    if isinstance(item, (bytes, bytearray, memoryview)):
        return bytes(item)
    return str(item).encode("utf-8")


def repr_bytes(item: Any) -> bytes:
    """Encode ``repr(item)`` as UTF-8 (keeps ``1`` and ``"1"`` apart)."""
    return repr(item).encode("utf-8")
