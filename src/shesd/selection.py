"""
Order-statistic selection with pluggable pivot policies.

This module provides:

- find_k_in_place: quickselect for the k-th largest value of an `ArrayView`
- random_pivot: default policy, uniform random index from an explicit generator
- first_pivot, middle_pivot, median_of_three_pivot: deterministic policies

A pivot policy maps a non-empty view to one of the values inside that view.
The selected value never depends on the policy; only the number of
comparisons does.
"""

from collections.abc import Callable

import numpy as np

from shesd.array_view import ArrayView
from shesd.exceptions import InvalidRankError

type PivotPolicy = Callable[[ArrayView], float]


def random_pivot(rng: np.random.Generator | None = None) -> PivotPolicy:
    """
    Build a policy picking the value at a uniformly random index of the window.

    :param rng: Generator to draw indices from. A fresh, OS-seeded generator is
        created when omitted.
    :returns: The pivot policy.
    """
    generator = rng if rng is not None else np.random.default_rng()

    def choose_random_pivot(view: ArrayView) -> float:
        return view[int(generator.integers(len(view)))]

    return choose_random_pivot


def first_pivot(view: ArrayView) -> float:
    return view[0]


def middle_pivot(view: ArrayView) -> float:
    return view[len(view) // 2]


def median_of_three_pivot(view: ArrayView) -> float:
    """Median of the first, middle and last value of the window."""
    candidates = sorted((view[0], view[len(view) // 2], view[len(view) - 1]))
    return candidates[1]


def find_k_in_place(view: ArrayView, k: int, choose_pivot: PivotPolicy | None = None) -> float:
    """
    Find the value at rank `k` of the window sorted in descending order.

    Rank 0 is the largest value. The window is rearranged in place while
    searching; its multiset of values is left unchanged. NaN values are not
    supported.

    :param view: Window to select from.
    :param k: Zero-based descending rank.
    :param choose_pivot: Pivot policy, `random_pivot()` when omitted.
    :returns: The k-th largest value of the window.
    :raises InvalidRankError: If `k` is not a valid rank for the window.
    """
    if not 0 <= k < len(view):
        raise InvalidRankError(f"Rank {k} out of range for a window of size {len(view)}")
    if choose_pivot is None:
        choose_pivot = random_pivot()

    while True:
        pivot = choose_pivot(view)
        greater, rest = view.partition_in_place(lambda value: value > pivot)
        if len(greater) == k:
            return pivot
        if greater.is_empty:
            # pivot is the maximum; split off all of its copies to guarantee progress
            equal, rest = view.partition_in_place(lambda value: value == pivot)
            if len(equal) > k:
                return pivot
            view, k = rest, k - len(equal)
        elif len(greater) < k:
            view, k = rest, k - len(greater)
        else:
            view = greater
