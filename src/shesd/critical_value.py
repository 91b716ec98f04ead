"""
Critical values of the generalized ESD test.

The threshold of round `i` for a sample of `n` observations is

    lambda_i = t * (n - i) / sqrt((n - i + 1 + t^2) * (n - i + 1))

where `t` is the Student-t quantile with `n - i - 1` degrees of freedom at
`1 - alpha / (n - i + 1)`, with `alpha` halved for two-sided tests.

The quantile is located from its upper-tail mass `alpha / (n - i + 1)`, so
very small values of `alpha` do not round the probability to one.
"""

import math

from scipy import stats
from scipy.optimize import brentq

from shesd.data_types import Parameter, Tail


def student_t_upper_quantile(tail_probability: float, degrees_of_freedom: float, tolerance: float = 1e-3) -> float:
    """
    Find `x` such that `P(T > x)` equals `tail_probability`.

    The quantile is found by bracketing and root finding on the survival
    function, which lets callers trade accuracy for speed through `tolerance`.
    Tail masses too small to be reached by a finite float give `inf`.

    :param tail_probability: Upper-tail probability, in (0, 1).
    :param degrees_of_freedom: Degrees of freedom of the distribution, > 0.
    :param tolerance: Absolute tolerance on the returned quantile.
    :returns: The quantile, within tolerance.
    :raises ValueError: If the probability or the degrees of freedom are out of range.
    """
    if not 0 < tail_probability < 1:
        raise ValueError(f"Probability must be in (0, 1), got {tail_probability}")
    if degrees_of_freedom <= 0:
        raise ValueError(f"Degrees of freedom must be positive, got {degrees_of_freedom}")

    distribution = stats.t(df=degrees_of_freedom)
    lower, upper = -1.0, 1.0
    while distribution.sf(lower) < tail_probability:
        lower *= 2
    while distribution.sf(upper) > tail_probability:
        upper *= 2
    if math.isinf(lower):
        return lower
    if math.isinf(upper):
        return upper
    return float(brentq(lambda x: distribution.sf(x) - tail_probability, lower, upper, xtol=tolerance))


def student_t_quantile(probability: float, degrees_of_freedom: float, tolerance: float = 1e-3) -> float:
    """
    Invert the Student-t cumulative distribution function.

    :param probability: Cumulative probability, in (0, 1).
    :param degrees_of_freedom: Degrees of freedom of the distribution, > 0.
    :param tolerance: Absolute tolerance on the returned quantile.
    :returns: `x` such that `P(T <= x)` equals `probability` within tolerance.
    :raises ValueError: If the probability or the degrees of freedom are out of range.
    """
    if not 0 < probability < 1:
        raise ValueError(f"Probability must be in (0, 1), got {probability}")
    return student_t_upper_quantile(1 - probability, degrees_of_freedom, tolerance)


def critical_value(
    n_observations: int, round_index: int, parameter: Parameter, tolerance: float = 1e-3
) -> float | None:
    """
    Compute the threshold the test statistic of a round must exceed.

    :param n_observations: Size of the original sample.
    :param round_index: One-based index of the ESD round.
    :param parameter: Detection parameters, providing `alpha` and `tail`.
    :param tolerance: Absolute tolerance of the Student-t quantile.
    :returns: The critical value, or None when the round leaves no positive
        degrees of freedom.
    """
    remaining = n_observations - round_index + 1
    degrees_of_freedom = n_observations - round_index - 1
    if degrees_of_freedom <= 0:
        return None

    if parameter.tail is Tail.BOTH:
        tail_probability = parameter.alpha / (2 * remaining)
    else:
        tail_probability = parameter.alpha / remaining

    # t > 0; t == inf gives the limit (n - i) / sqrt(n - i + 1)
    t = student_t_upper_quantile(tail_probability, degrees_of_freedom, tolerance)
    return (remaining - 1) / math.sqrt(remaining * (remaining / t / t + 1))
