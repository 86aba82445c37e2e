"""Digest functions that reduce an item's bytes to a fixed-length digest.

Each function takes ``bytes`` and returns ``bytes``. The filter derives all of
its bit positions from a single digest, so the digest length bounds the
number of hash functions that get independent input bytes.
"""
from __future__ import annotations

import hashlib
from typing import Callable, Dict

import mmh3
import xxhash

from .errors import InvalidArgumentError

DigestFn = Callable[[bytes], bytes]


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def sha1(data: bytes) -> bytes:
    return hashlib.sha1(data).digest()


def md5(data: bytes) -> bytes:
    return hashlib.md5(data).digest()


def blake2b(data: bytes) -> bytes:
    return hashlib.blake2b(data).digest()


def xxh64(data: bytes) -> bytes:
    """64-bit xxHash, 8 digest bytes."""
    return xxhash.xxh64(data).digest()


def xxh3_128(data: bytes) -> bytes:
    """128-bit XXH3, 16 digest bytes."""
    return xxhash.xxh3_128(data).digest()


def murmur3_128(data: bytes) -> bytes:
    """MurmurHash3 x64 128-bit via mmh3, 16 digest bytes."""
    return mmh3.hash_bytes(data)


def identity(data: bytes) -> bytes:
    """Return the input unchanged. Only useful for tests and examples."""
    return bytes(data)


DIGESTS: Dict[str, DigestFn] = {
    "sha256": sha256,
    "sha1": sha1,
    "md5": md5,
    "blake2b": blake2b,
    "xxh64": xxh64,
    "xxh3_128": xxh3_128,
    "murmur3_128": murmur3_128,
    "identity": identity,
}


def get_digest(name: str) -> DigestFn:
    """Look up a digest function by its registry name."""
    try:
        return DIGESTS[name]
    except KeyError:
        known = ", ".join(sorted(DIGESTS))
        raise InvalidArgumentError(f"unknown digest {name!r} (known: {known})") from None


def digest_size(digest: DigestFn) -> int:
    """Return the number of bytes ``digest`` produces for the empty input."""
    return len(digest(b""))


def digest_name(digest: DigestFn) -> str:
    for name, fn in DIGESTS.items():
        if fn is digest:
            return name
    return getattr(digest, "__name__", repr(digest))
