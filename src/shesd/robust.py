"""Robust location and scale estimates based on order-statistic selection."""

from collections.abc import Iterable
from typing import Final

import numpy as np

from shesd.array_view import ArrayView, as_buffer
from shesd.data_types import FloatArray1D, MedianSigma
from shesd.selection import PivotPolicy, find_k_in_place, random_pivot

# Scales the MAD to a consistent estimator of the standard deviation under normality
MAD_CONSISTENCY_CONSTANT: Final[float] = 1.4826


def _midpoint(a: float, b: float) -> float:
    # overflow-free for any pair of finite values
    if (a < 0) == (b < 0):
        return a + (b - a) / 2
    return (a + b) / 2


def median_in_place(buffer: FloatArray1D, choose_pivot: PivotPolicy) -> float:
    """
    Compute the exact median of `buffer`, reordering it in place.

    The two central order statistics are averaged for an even number of values.

    :param buffer: Values to take the median of. Must not be empty.
    :param choose_pivot: Pivot policy used by the selection.
    :returns: The median.
    """
    n = len(buffer)
    if n == 0:
        raise ValueError("Cannot compute the median of an empty array")
    if n % 2 == 0:
        lower = find_k_in_place(ArrayView.over(buffer), (n - 1) // 2, choose_pivot)
        upper = find_k_in_place(ArrayView.over(buffer), n // 2, choose_pivot)
        return _midpoint(lower, upper)
    return find_k_in_place(ArrayView.over(buffer), (n - 1) // 2, choose_pivot)


def median_sigma(values: Iterable[float] | FloatArray1D, choose_pivot: PivotPolicy | None = None) -> MedianSigma:
    """
    Compute the median and the scaled median absolute deviation (MAD) of `values`.

    `sigma = 1.4826 * median(|x - median(x)|)`. A constant sample gives
    `sigma == 0`, which callers treat as "cannot normalize".

    The input is copied before selection, so it is never reordered.

    :param values: Sample to summarize.
    :param choose_pivot: Pivot policy for the selection. A random policy with a
        fresh generator is used when omitted.
    :returns: The median and the scaled MAD.
    :raises ValueError: If `values` is empty or contains NaN or infinite values.
    """
    buffer = as_buffer(values)
    if not np.isfinite(buffer).all():
        raise ValueError("Cannot compute robust statistics of non-finite values")
    if choose_pivot is None:
        choose_pivot = random_pivot()

    median = median_in_place(buffer, choose_pivot)
    deviations = np.abs(buffer - median)
    sigma = MAD_CONSISTENCY_CONSTANT * median_in_place(deviations, choose_pivot)
    return MedianSigma(median=median, sigma=sigma)
