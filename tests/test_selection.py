from collections import Counter

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st
from hypothesis.extra.numpy import arrays

from shesd.array_view import ArrayView
from shesd.exceptions import InvalidRankError
from shesd.selection import (
    PivotPolicy,
    find_k_in_place,
    first_pivot,
    median_of_three_pivot,
    middle_pivot,
    random_pivot,
)

PIVOT_POLICIES = [
    pytest.param(first_pivot, id="first"),
    pytest.param(middle_pivot, id="middle"),
    pytest.param(median_of_three_pivot, id="median of three"),
    pytest.param(random_pivot(np.random.default_rng(0)), id="random"),
]


def last_pivot(view: ArrayView) -> float:
    return view[len(view) - 1]


def max_pivot(view: ArrayView) -> float:
    """Adversarial policy: always the largest value of the window."""
    return max(view[index] for index in range(len(view)))


def min_pivot(view: ArrayView) -> float:
    """Adversarial policy: always the smallest value of the window."""
    return min(view[index] for index in range(len(view)))


class TestFindKInPlace:
    @pytest.mark.parametrize("choose_pivot", PIVOT_POLICIES)
    def test_ranks_are_descending(self, choose_pivot: PivotPolicy):
        values = [4.0, 9.0, 1.0, 7.0, 3.0]
        for k, expected in enumerate([9.0, 7.0, 4.0, 3.0, 1.0]):
            assert find_k_in_place(ArrayView.over(np.array(values)), k, choose_pivot) == expected

    @pytest.mark.parametrize("choose_pivot", PIVOT_POLICIES)
    def test_all_values_equal(self, choose_pivot: PivotPolicy):
        buffer = np.full(7, 2.5)
        for k in range(7):
            assert find_k_in_place(ArrayView.over(buffer), k, choose_pivot) == 2.5  # noqa: PLR2004

    def test_single_value_window(self):
        assert find_k_in_place(ArrayView.over(np.array([-3.0])), 0, first_pivot) == -3.0  # noqa: PLR2004

    def test_selects_inside_window_only(self):
        buffer = np.array([100.0, 5.0, 2.0, 8.0, -100.0])
        assert find_k_in_place(ArrayView(buffer, 1, 4), 0, first_pivot) == 8.0  # noqa: PLR2004
        assert buffer[0] == 100.0  # noqa: PLR2004
        assert buffer[4] == -100.0  # noqa: PLR2004

    def test_default_policy_is_random(self):
        buffer = np.array([3.0, 1.0, 2.0])
        assert find_k_in_place(ArrayView.over(buffer), 1) == 2.0  # noqa: PLR2004

    @pytest.mark.parametrize("k", [-1, 3])
    def test_invalid_rank_raises(self, k: int):
        with pytest.raises(InvalidRankError, match="out of range"):
            find_k_in_place(ArrayView.over(np.array([1.0, 2.0, 3.0])), k, first_pivot)

    def test_empty_window_raises(self):
        with pytest.raises(InvalidRankError):
            find_k_in_place(ArrayView.over(np.array([])), 0, first_pivot)

    @given(
        data=arrays(
            dtype=float,
            shape=st.integers(min_value=1, max_value=50),
            elements=st.floats(allow_nan=False, allow_infinity=False, min_value=-1e6, max_value=1e6),
        ),
        rank_fraction=st.floats(min_value=0, max_value=1, exclude_max=True),
        choose_pivot=st.sampled_from(
            [first_pivot, middle_pivot, last_pivot, median_of_three_pivot, max_pivot, min_pivot]
        ),
    )
    def test_matches_descending_sort(self, data: np.ndarray, rank_fraction: float, choose_pivot: PivotPolicy):
        k = int(rank_fraction * len(data))
        expected = sorted(data.tolist(), reverse=True)[k]
        original = Counter(data.tolist())

        result = find_k_in_place(ArrayView.over(data), k, choose_pivot)

        assert result == expected
        assert Counter(data.tolist()) == original

    @given(
        data=st.lists(st.integers(min_value=0, max_value=3).map(float), min_size=1, max_size=30),
        seed=st.integers(min_value=0, max_value=2**32 - 1),
    )
    def test_many_duplicates_with_random_pivot(self, data: list[float], seed: int):
        choose_pivot = random_pivot(np.random.default_rng(seed))
        expected = sorted(data, reverse=True)
        for k in range(len(data)):
            assert find_k_in_place(ArrayView.over(np.array(data)), k, choose_pivot) == expected[k]


class TestPivotPolicies:
    def test_first_and_middle(self):
        view = ArrayView(np.array([0.0, 4.0, 5.0, 6.0, 0.0]), 1, 4)
        assert first_pivot(view) == 4.0  # noqa: PLR2004
        assert middle_pivot(view) == 5.0  # noqa: PLR2004

    @pytest.mark.parametrize(
        ("values", "expected"),
        [
            pytest.param([1.0, 9.0, 5.0], 5.0, id="last is median"),
            pytest.param([9.0, 1.0, 5.0], 5.0, id="descending ends"),
            pytest.param([5.0, 2.0, 7.0, 1.0, 3.0], 5.0, id="first is median"),
            pytest.param([4.0], 4.0, id="single value"),
        ],
    )
    def test_median_of_three(self, values: list[float], expected: float):
        assert median_of_three_pivot(ArrayView.over(np.array(values))) == expected

    def test_random_pivot_is_reproducible_with_seed(self):
        view = ArrayView.over(np.arange(100, dtype=float))
        first = random_pivot(np.random.default_rng(7))
        second = random_pivot(np.random.default_rng(7))
        assert [first(view) for _ in range(10)] == [second(view) for _ in range(10)]

    def test_random_pivot_stays_inside_window(self):
        buffer = np.arange(10, dtype=float)
        view = ArrayView(buffer, 3, 6)
        choose_pivot = random_pivot(np.random.default_rng(1))
        assert {choose_pivot(view) for _ in range(50)} <= {3.0, 4.0, 5.0}
