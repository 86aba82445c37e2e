"""Exceptions raised by the Bloom filter and its digest providers."""
from __future__ import annotations


class BloomFilterError(Exception):
    """Base class for all filter errors."""


class InvalidArgumentError(BloomFilterError, ValueError):
    """A ``None`` item, a bad filter configuration or an unknown digest name."""


class DigestError(BloomFilterError, TypeError):
    """The byte conversion or digest step returned something that is not bytes."""
