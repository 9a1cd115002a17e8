"""Tests for arg-extreme and pairwise helpers."""

import pytest

from rhmm.enumerable import (
    arg_and_max,
    arg_and_min,
    arg_max,
    arg_min,
    outer,
    pairwise,
    pairwise_do,
    repeat,
    zip_do,
)


class TestArgExtreme:
    def test_arg_and_max(self):
        result = arg_and_max(["a", "bbb", "cc"], len)
        assert result.argument == "bbb"
        assert result.value == 3

    def test_arg_and_min(self):
        result = arg_and_min([3, -1, 2], abs)
        assert result == (-1, 1)

    def test_ties_keep_earliest(self):
        scores = {"x": 1.0, "y": 2.0, "z": 2.0}
        assert arg_max(["x", "y", "z"], scores.get) == "y"
        assert arg_max(["z", "y", "x"], scores.get) == "z"
        assert arg_min(["y", "z"], scores.get) == "y"

    def test_single_pass_over_generator(self):
        calls = []

        def score(v):
            calls.append(v)
            return -v

        assert arg_max((v for v in [3, 1, 2]), score) == 1
        assert calls == [3, 1, 2]

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            arg_and_max([], lambda v: v)


class TestPairwise:
    def test_outer(self):
        assert outer([1, 2], "ab") == [(1, "a"), (1, "b"), (2, "a"), (2, "b")]

    def test_pairwise(self):
        assert pairwise([1, 4, 9, 16], lambda a, b: b - a) == [3, 5, 7]
        assert pairwise([1], lambda a, b: b - a) == []

    def test_pairwise_do(self):
        seen = []
        items = pairwise_do(iter("abc"), lambda a, b: seen.append(a + b))
        assert seen == ["ab", "bc"]
        assert items == ["a", "b", "c"]

    def test_zip_do_stops_at_shorter(self):
        seen = []
        zip_do([1, 2, 3], repeat("s"), lambda a, b: seen.append((a, b)))
        assert seen == [(1, "s"), (2, "s"), (3, "s")]
