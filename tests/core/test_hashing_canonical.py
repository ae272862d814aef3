from __future__ import annotations

from covex.core.hashing import hash_params, json_dumps_canonical


def test_canonical_json_is_key_order_insensitive() -> None:
    a = {"metric": "tests", "per_capita": 1000.0, "nested": {"y": 2, "x": 1}}
    b = {"nested": {"x": 1, "y": 2}, "per_capita": 1000.0, "metric": "tests"}
    assert json_dumps_canonical(a) == json_dumps_canonical(b)
    assert hash_params(a) == hash_params(b)


def test_hash_distinguishes_values() -> None:
    base = {"metric": "tests", "smoothing": 3}
    assert hash_params(base) != hash_params({**base, "smoothing": 0})
    assert len(hash_params(base)) == 64
