"""Generic Bloom filter driven by a single pluggable digest per item.

Each item is converted to bytes, hashed once, and the ``num_hashes`` bit
positions are derived from that one digest by striding through its bytes:
hash function ``i`` folds bytes ``i, i + k, i + 2k, ...`` with a base-31
polynomial into a signed 32-bit accumulator, and the position is
``abs(acc) % size``.

When the digest is shorter than ``num_hashes`` bytes, some hash functions see
no input at all and always land on bit 0. That weakens the false positive
bound, so pick a digest at least ``num_hashes`` bytes long.

The filter is not thread safe; concurrent writers need external locking.
"""
from __future__ import annotations

import logging
import math
from typing import Callable, Generic, Iterable, Iterator, List, Optional, TypeVar

from .digests import DigestFn, digest_name, sha256
from .encoders import text_bytes
from .errors import DigestError, InvalidArgumentError
from .params import optimal_num_hashes, optimal_size

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DIGEST: DigestFn = sha256
DEFAULT_TO_BYTES: Callable[[object], bytes] = text_bytes

_BYTES_LIKE = (bytes, bytearray, memoryview)


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def derive_index(digest: bytes, hash_index: int, num_hashes: int, size: int) -> int:
    """Derive the bit position for hash function ``hash_index`` from ``digest``.

    The fold wraps like 32-bit two's-complement arithmetic. ``abs(h) % size``
    equals the absolute value of a truncating remainder, so the result is
    always in ``[0, size)``.
    """
    h = 0
    for i in range(hash_index, len(digest), num_hashes):
        h = _to_int32(h * 31 + digest[i])
    return abs(h) % size


class BloomFilter(Generic[T]):
    """Bloom filter backed by a packed bytearray bitset."""

    def __init__(
        self,
        size: int,
        num_hashes: int,
        digest: DigestFn = DEFAULT_DIGEST,
        *,
        to_bytes: Optional[Callable[[T], bytes]] = None,
    ) -> None:
        """Initialize a Bloom filter.

        Args:
            size: Number of bits in the filter.
            num_hashes: Number of positions derived per item.
            digest: Function reducing an item's bytes to a digest.
            to_bytes: Function converting an item to bytes. Defaults to the
                UTF-8 encoding of the item's text form.

        Raises:
            InvalidArgumentError: If size or num_hashes is not a positive
                integer, or a capability is not callable.
        """
        if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
            raise InvalidArgumentError("size must be a positive integer")
        if not isinstance(num_hashes, int) or isinstance(num_hashes, bool) or num_hashes <= 0:
            raise InvalidArgumentError("num_hashes must be a positive integer")
        if not callable(digest):
            raise InvalidArgumentError("digest must be callable")
        if to_bytes is None:
            to_bytes = DEFAULT_TO_BYTES
        elif not callable(to_bytes):
            raise InvalidArgumentError("to_bytes must be callable")

        self.size = size
        self.num_hashes = num_hashes
        self.digest = digest
        self.to_bytes = to_bytes
        self._bit_array = bytearray((size + 7) // 8)
        self._warned_short_digest = False
        logger.debug(
            "created bloom filter size=%d num_hashes=%d digest=%s",
            size,
            num_hashes,
            digest_name(digest),
        )

    @classmethod
    def for_capacity(
        cls,
        capacity: int,
        error_rate: float,
        digest: DigestFn = DEFAULT_DIGEST,
        *,
        to_bytes: Optional[Callable[[T], bytes]] = None,
    ) -> "BloomFilter[T]":
        """Size a filter for ``capacity`` items at the target ``error_rate``."""
        size = optimal_size(capacity, error_rate)
        return cls(size, optimal_num_hashes(size, capacity), digest, to_bytes=to_bytes)

    @classmethod
    def from_bit_array(
        cls,
        bit_array: bytes,
        size: int,
        num_hashes: int,
        digest: DigestFn = DEFAULT_DIGEST,
        *,
        to_bytes: Optional[Callable[[T], bytes]] = None,
    ) -> "BloomFilter[T]":
        """Rebuild a filter from a verbatim bit array and its (size, num_hashes)."""
        bloom = cls(size, num_hashes, digest, to_bytes=to_bytes)
        if isinstance(bit_array, int):
            raise InvalidArgumentError("bit array must be bytes-like, not int")
        try:
            data = bytes(bit_array)
        except (TypeError, ValueError) as err:
            raise InvalidArgumentError(f"bit array must be bytes-like: {err}") from err
        if len(data) != len(bloom._bit_array):
            raise InvalidArgumentError(
                f"bit array holds {len(data)} bytes, expected {len(bloom._bit_array)}"
            )
        # padding bits past size in the last byte must be clear
        if size & 7 and data[-1] >> (size & 7):
            raise InvalidArgumentError("bit array has bits set beyond size")
        bloom._bit_array[:] = data
        return bloom

    def add(self, item: T) -> None:
        """Insert ``item`` into the filter."""
        for bit_index in self._hashes(item):
            self._bit_array[bit_index >> 3] |= 1 << (bit_index & 7)

    def update(self, items: Iterable[T]) -> None:
        """Insert all ``items`` into the filter."""
        for item in items:
            self.add(item)

    def contains(self, item: T) -> bool:
        """Return False if ``item`` is definitely absent, True if it may be present."""
        for bit_index in self._hashes(item):
            if not (self._bit_array[bit_index >> 3] & (1 << (bit_index & 7))):
                return False
        return True

    def __contains__(self, item: T) -> bool:
        return self.contains(item)

    def positions(self, item: T) -> List[int]:
        """Return the ``num_hashes`` bit positions ``item`` maps to."""
        return list(self._hashes(item))

    def bits_set(self) -> int:
        return sum(bin(byte).count("1") for byte in self._bit_array)

    def fill_ratio(self) -> float:
        return self.bits_set() / self.size

    def estimated_false_positive_rate(self) -> float:
        """False positive rate implied by the current fill ratio."""
        return self.fill_ratio() ** self.num_hashes

    def approximate_count(self) -> float:
        """Estimate the number of distinct items added (Swamidass & Baldi)."""
        bits = self.bits_set()
        if bits >= self.size:
            return math.inf
        return -(self.size / self.num_hashes) * math.log(1 - bits / self.size)

    def _digest(self, item: T) -> bytes:
        if item is None:
            raise InvalidArgumentError("item must not be None")
        data = self.to_bytes(item)
        if not isinstance(data, _BYTES_LIKE):
            raise DigestError(f"to_bytes returned {type(data).__name__}, expected bytes")
        digest = self.digest(bytes(data))
        if not isinstance(digest, _BYTES_LIKE):
            raise DigestError(f"digest returned {type(digest).__name__}, expected bytes")
        if len(digest) < self.num_hashes and not self._warned_short_digest:
            self._warned_short_digest = True
            logger.warning(
                "digest %s produced %d bytes for %d hash functions; "
                "unfed hash functions always map to bit 0",
                digest_name(self.digest),
                len(digest),
                self.num_hashes,
            )
        return bytes(digest)

    def _hashes(self, item: T) -> Iterator[int]:
        """Generate the bit positions for ``item`` from a single digest."""
        digest = self._digest(item)
        for i in range(self.num_hashes):
            yield derive_index(digest, i, self.num_hashes, self.size)

    @property
    def bit_array(self) -> bytearray:
        """Expose the underlying bit array for inspection."""
        return self._bit_array

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(size={self.size}, num_hashes={self.num_hashes}, "
            f"digest={digest_name(self.digest)})"
        )
