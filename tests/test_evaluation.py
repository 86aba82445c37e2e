"""Smoke tests for the evaluation suite."""
import pytest

from bf_digest import evaluation
from bf_digest.digests import sha256


def test_run_all_on_synthetic_words(capsys):
    words = evaluation.generate_synthetic_data(500)
    metrics = evaluation.run_all(words=words, digests=("sha256", "xxh64"), query_ops=1000)

    assert set(metrics) == {"sha256", "xxh64"}
    for result in metrics.values():
        assert result["missing"] == 0
        assert 0 <= result["fpr"] <= 1
        assert result["insert_count"] == 400
        assert result["query_count"] == 1000

    out = capsys.readouterr().out
    assert "TEST A: Membership on training set" in out
    assert "COMPARISON: Digest Summary" in out


def test_synthetic_data_is_reproducible():
    first = evaluation.generate_synthetic_data(50, seed=3)
    assert first == evaluation.generate_synthetic_data(50, seed=3)
    assert len(set(first)) == 50
    assert first == sorted(first)


def test_build_split():
    words = [f"w{i:03d}" for i in range(100)]
    bloom, train, test = evaluation.build_split(words, sha256, num_hashes=3)
    assert len(train) == 80 and len(test) == 20
    assert bloom.size == 80 * evaluation.BITS_PER_ITEM
    assert bloom.num_hashes == 3
    assert all(w in bloom for w in train)


def test_load_unique_tokens(tmp_path):
    csv_file = tmp_path / "brown.csv"
    csv_file.write_text(
        "tokenized_text\nThe cat sat .\nthe Dog ; ran\n", encoding="utf-8"
    )
    assert evaluation.load_unique_tokens(csv_file) == ["cat", "dog", "ran", "sat", "the"]


def test_load_unique_tokens_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        evaluation.load_unique_tokens(tmp_path / "absent.csv")


def test_run_all_reads_given_csv(tmp_path, capsys):
    csv_file = tmp_path / "words.csv"
    rows = " ".join(f"token{i}" for i in range(50))
    csv_file.write_text(f"tokenized_text\n{rows}\n", encoding="utf-8")

    metrics = evaluation.run_all(digests=("xxh64",), query_ops=100, csv_file=csv_file)

    assert metrics["xxh64"]["insert_count"] == 40
    assert "Full dataset unique tokens: 50" in capsys.readouterr().out


def test_run_all_missing_csv_is_an_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        evaluation.run_all(digests=("xxh64",), query_ops=10, csv_file=tmp_path / "absent.csv")
