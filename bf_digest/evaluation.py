"""Bloom filter evaluation suite.

Performs a deterministic 80/20 split of unique tokens (sorted), builds one
filter per digest provider with the 80% training set, and runs five checks:

1. Membership on the training set (should be all present)
2. False positive rate on the held-out set, next to the theoretical bound
3. Collision analysis using simple modifications of held-out words
4. Filter properties and memory usage
5. Insertion and query throughput

Filter size is BITS_PER_ITEM bits per training item with NUM_HASHES hash
functions derived from a single digest. Tokens come from a CSV with a
``tokenized_text`` column when one is given, otherwise from dataset/brown.csv
in a source or editable checkout when it exists, otherwise from seeded
synthetic data. DATASET_DIR sits next to the package directory, so after a
regular install pass the CSV path explicitly.

Run with:

    python -m bf_digest.evaluation [path/to/brown.csv]
"""
from __future__ import annotations

import csv
import random
import sys
import time
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .bloom_filter import BloomFilter
from .digests import DigestFn, digest_size, get_digest
from .params import false_positive_rate

NUM_HASHES = 7
BITS_PER_ITEM = 10
SYNTHETIC_ITEMS = 100_000
SYNTHETIC_SEED = 1234
QUERY_OPS = 200_000
EVALUATED_DIGESTS = ("sha256", "xxh64", "murmur3_128")
DATASET_DIR = Path(__file__).parent.parent / "dataset"


def load_unique_tokens(csv_file: Optional[Path] = None) -> list[str]:
    """Load unique tokens from brown.csv and normalize them.

    Returns a sorted list of unique, normalized tokens.
    """
    if csv_file is None:
        csv_file = DATASET_DIR / "brown.csv"

    if not csv_file.exists():
        raise FileNotFoundError(f"Dataset file not found: {csv_file}")

    words = set()
    with open(csv_file, "r", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for row in reader:
            for token in row.get("tokenized_text", "").split():
                # Normalize: lowercase and keep tokens with an alphanumeric char
                normalized = token.lower()
                if normalized and any(c.isalnum() for c in normalized):
                    words.add(normalized)

    return sorted(words)


def generate_synthetic_data(n: int = SYNTHETIC_ITEMS, seed: int = SYNTHETIC_SEED) -> list[str]:
    """Generate ``n`` unique pseudo-random strings, reproducible for ``seed``."""
    rng = random.Random(seed)
    return sorted(str(uuid.UUID(int=rng.getrandbits(128))) for _ in range(n))


def build_split(
    words: Sequence[str], digest: DigestFn, num_hashes: int = NUM_HASHES
) -> Tuple[BloomFilter[str], list[str], list[str]]:
    """Create a deterministic 80/20 split and build the bloom filter.

    Returns (bloom_filter, training_words, test_words).
    """
    split = int(len(words) * 0.8)
    train = list(words[:split])
    test = list(words[split:])

    filter_size = max(1, len(train) * BITS_PER_ITEM)
    bloom: BloomFilter[str] = BloomFilter(filter_size, num_hashes, digest)
    bloom.update(train)

    return bloom, train, test


def check_membership(bloom: BloomFilter[str], train: list[str]) -> int:
    """Verify all training items are present; return the number missing."""
    print("TEST A: Membership on training set")
    missing = [w for w in train if w not in bloom]
    print(f"  Training items: {len(train)}")
    print(f"  Missing after insertion: {len(missing)} (expected 0)")
    if missing:
        print(f"  Example missing: {missing[:5]}")
    print()
    return len(missing)


def check_false_positives(bloom: BloomFilter[str], train: list[str], test: list[str]) -> Optional[float]:
    """Measure the empirical false positive rate on the held-out set."""
    print("TEST B: False positive rate on held-out words")
    train_set = set(train)
    held_out = [w for w in test if w not in train_set]

    if not held_out:
        print("  No held-out words available for testing.")
        print()
        return None

    false_positives = sum(1 for w in held_out if w in bloom)
    fpr = false_positives / len(held_out)
    expected = false_positive_rate(bloom.size, bloom.num_hashes, len(train))

    print(f"  Held-out words: {len(held_out)}")
    print(f"  False positives: {false_positives}")
    print(f"  Empirical FPR: {fpr:.6f} ({fpr*100:.4f}%)")
    print(f"  Theoretical FPR: {expected:.6f} ({expected*100:.4f}%)")
    print()
    return fpr


def check_collisions(bloom: BloomFilter[str], train: list[str], test: list[str]) -> Optional[float]:
    """Analyze collision rate using simple word modifications."""
    print("TEST C: Collision analysis with simple modifications of held-out words")
    modifications = []
    for word in test[:500]:
        modifications.append(word + "x")
        if len(word) > 1:
            modifications.append(word[:-1] + "z")
        modifications.append("x" + word)

    # Remove any accidental actual words
    known = set(train) | set(test)
    modifications = [m for m in modifications if m not in known]

    if not modifications:
        print("  No modifications available for testing.")
        print()
        return None

    false_positives = sum(1 for m in modifications if m in bloom)
    rate = false_positives / len(modifications)

    print(f"  Variants tested: {len(modifications)}")
    print(f"  False positives from variants: {false_positives}")
    print(f"  Collision rate: {rate:.6f} ({rate*100:.4f}%)")
    print()
    return rate


def show_properties(bloom: BloomFilter[str], train: list[str]) -> None:
    """Display filter memory and configuration properties."""
    print("TEST D: Filter properties")
    bytes_len = len(bloom.bit_array)
    mb = bytes_len / (1024 * 1024)

    print(f"  Filter size (bits): {bloom.size}")
    print(f"  Filter size (bytes): {bytes_len}")
    print(f"  Filter size (MB): {mb:.2f}")
    print(f"  Number of hash functions: {bloom.num_hashes}")
    print(f"  Digest length (bytes): {digest_size(bloom.digest)}")
    print(f"  Fill ratio: {bloom.fill_ratio():.4f}")
    print(f"  Estimated items: {bloom.approximate_count():,.0f}")
    print(f"  Words inserted: {len(train)}")
    if train:
        print(f"  Bytes per word: {bytes_len / len(train):.4f}")
    print()


def measure_performance(bloom: BloomFilter[str], train: list[str], test: list[str], query_ops: int = QUERY_OPS) -> Dict[str, float]:
    """Measure insertion and query throughput (ops/sec)."""
    print("TEST E: Performance benchmarking")

    # Fresh filter with the same configuration
    bench_filter: BloomFilter[str] = BloomFilter(bloom.size, bloom.num_hashes, bloom.digest)

    start_time = time.perf_counter()
    for word in train:
        bench_filter.add(word)
    insert_time = time.perf_counter() - start_time
    insert_ops = len(train) / insert_time if insert_time > 0 else float("inf")
    print(f"    - Inserted {len(train)} items in {insert_time:.4f} sec")
    print(f"    - Insertion Throughput: {insert_ops:,.0f} ops/sec")

    queries = (test * ((query_ops // len(test)) + 1))[:query_ops] if test else []
    start_time = time.perf_counter()
    for word in queries:
        _ = word in bench_filter
    query_time = time.perf_counter() - start_time
    query_rate = len(queries) / query_time if query_time > 0 else float("inf")
    print(f"    - Performed {len(queries)} queries in {query_time:.4f} sec")
    print(f"    - Query Throughput: {query_rate:,.0f} ops/sec")
    print()

    return {
        "insert_count": len(train),
        "insert_time": insert_time,
        "insert_ops_per_sec": insert_ops,
        "query_count": len(queries),
        "query_time": query_time,
        "query_ops_per_sec": query_rate,
    }


def compare_performance(metrics: Dict[str, Dict[str, float]]) -> None:
    """Print a compact side-by-side table of per-digest metrics."""
    def fmt(val: Optional[float]) -> str:
        if val is None:
            return "N/A"
        if isinstance(val, float):
            if val == float("inf"):
                return "inf"
            if abs(val) >= 1000:
                return f"{val:,.0f}"
            return f"{val:,.4f}"
        return str(val)

    names = list(metrics)
    header = f"{'Metric':<34}" + "".join(f"{name:>16}" for name in names)
    print(header)
    print("-" * len(header))

    rows = [
        ("Insertion Throughput (ops/sec)", "insert_ops_per_sec"),
        ("Query Throughput (ops/sec)", "query_ops_per_sec"),
        ("Empirical FPR", "fpr"),
        ("Collision rate", "collision_rate"),
        ("Missing members", "missing"),
    ]
    for label, key in rows:
        print(f"{label:<34}" + "".join(f"{fmt(metrics[name].get(key)):>16}" for name in names))
    print()


def evaluate_digest(name: str, words: Sequence[str], query_ops: int = QUERY_OPS) -> Dict[str, float]:
    """Run checks A-E for one digest provider and collect its metrics."""
    print("=" * 60)
    print(f"Running Bloom Filter Suite with {name} digest (80/20 split)")
    print("=" * 60)
    print()

    bloom, train, test = build_split(words, get_digest(name))
    result: Dict[str, float] = {"missing": check_membership(bloom, train)}
    fpr = check_false_positives(bloom, train, test)
    if fpr is not None:
        result["fpr"] = fpr
    collision_rate = check_collisions(bloom, train, test)
    if collision_rate is not None:
        result["collision_rate"] = collision_rate
    show_properties(bloom, train)
    result.update(measure_performance(bloom, train, test, query_ops))
    return result


def run_all(
    words: Optional[List[str]] = None,
    digests: Sequence[str] = EVALUATED_DIGESTS,
    query_ops: int = QUERY_OPS,
    csv_file: Optional[Path] = None,
) -> Dict[str, Dict[str, float]]:
    """Run the whole suite and return metrics keyed by digest name.

    Words come from ``words``, else from ``csv_file``, else from
    DATASET_DIR/brown.csv when it exists, else from synthetic data. An explicit
    ``csv_file`` that does not exist raises FileNotFoundError.
    """
    if words is None and csv_file is not None:
        words = load_unique_tokens(csv_file)
    if words is None:
        try:
            words = load_unique_tokens()
        except FileNotFoundError:
            words = generate_synthetic_data()
    print(f"Full dataset unique tokens: {len(words)}")
    print()

    metrics = {name: evaluate_digest(name, words, query_ops) for name in digests}

    print("=" * 60)
    print("COMPARISON: Digest Summary")
    print("=" * 60)
    compare_performance(metrics)

    print("=" * 60)
    print("Evaluation suite completed successfully!")
    print("=" * 60)
    return metrics


if __name__ == "__main__":
    run_all(csv_file=Path(sys.argv[1]) if len(sys.argv) > 1 else None)
