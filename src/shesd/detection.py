"""
Generalized ESD test on robust statistics (S-H-ESD).

The test repeatedly removes the observation deviating most from the median,
normalized by the scaled MAD, as long as that deviation exceeds the critical
value of the round. Seasonal and trend components are expected to have been
removed from the values by the caller.

- iterate_esd: yields the trace of every round
- detect: returns the labels of the anomalous observations
- try_detect: railway variant of `detect`, returning a `Result`
"""

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

import numpy as np
from loguru import logger
from returns.result import safe

from shesd.array_view import as_buffer
from shesd.critical_value import critical_value
from shesd.data_types import EsdRound, FloatArray1D, Parameter, RoundOutcome, Tail
from shesd.logger import FailureLevel, log_railway_function
from shesd.robust import median_sigma
from shesd.selection import PivotPolicy, random_pivot
from shesd.settings import Settings, get_settings


def _deviation_scores(values: FloatArray1D, median: float, sigma: float, tail: Tail) -> FloatArray1D:
    match tail:
        case Tail.UPPER:
            return (values - median) / sigma
        case Tail.LOWER:
            return (median - values) / sigma
        case Tail.BOTH:
            return np.abs(values - median) / sigma


def iterate_esd[L](
    observations: Iterable[tuple[L, float]],
    parameter: Parameter,
    *,
    choose_pivot: PivotPolicy | None = None,
    settings: Settings | None = None,
) -> Iterator[EsdRound[L]]:
    """
    Run the generalized ESD test round by round.

    Every round computes the median and scaled MAD of the remaining values,
    picks the remaining observation with the largest deviation score (the
    first one in input order on ties) and compares its score to the critical
    value of the round. The observation is removed from the working set only
    when the round continues. The generator stops after the first terminal
    round or after `parameter.max_outliers(n)` rounds.

    The observations are copied; removal is by position, so labels do not
    have to be unique for the iteration to be well defined.

    :param observations: `(label, value)` pairs, in input order.
    :param parameter: Detection parameters.
    :param choose_pivot: Pivot policy of the median selection. Defaults to a
        random policy seeded with `settings.random_seed`.
    :param settings: Numerical settings, `get_settings()` when omitted.
    :returns: An iterator over the rounds.
    """
    if settings is None:
        settings = get_settings()
    if choose_pivot is None:
        choose_pivot = random_pivot(np.random.default_rng(settings.random_seed))

    pairs = list(observations)
    labels = [label for label, _ in pairs]
    values = as_buffer([value for _, value in pairs])
    n_observations = len(labels)

    for round_index in range(1, parameter.max_outliers(n_observations) + 1):
        median, sigma = median_sigma(values, choose_pivot)
        if sigma <= 0:
            logger.warning(f"Round {round_index}: remaining values are constant, stopping")
            yield EsdRound(round_index, median, sigma, None, None, None, RoundOutcome.STOP_DEGENERATE)
            return

        scores = _deviation_scores(values, median, sigma, parameter.tail)
        position = int(np.argmax(scores))
        label, statistic = labels[position], float(scores[position])

        threshold = critical_value(n_observations, round_index, parameter, settings.quantile_tolerance)
        if threshold is None:
            logger.warning(f"Round {round_index}: no degrees of freedom left for the critical value, stopping")
            yield EsdRound(round_index, median, sigma, label, statistic, None, RoundOutcome.STOP_NO_CRITICAL_VALUE)
            return

        outcome = RoundOutcome.CONTINUE if statistic > threshold else RoundOutcome.STOP_BELOW_THRESHOLD
        logger.debug(
            f"Round {round_index}: label={label!r}, statistic={statistic:.4f}, "
            f"critical value={threshold:.4f}, outcome={outcome}"
        )
        yield EsdRound(round_index, median, sigma, label, statistic, threshold, outcome)
        if outcome.is_terminal:
            return

        values = np.delete(values, position)
        del labels[position]


def detect[L](
    observations: Iterable[tuple[L, float]],
    parameter: Parameter | None = None,
    *,
    choose_pivot: PivotPolicy | None = None,
    settings: Settings | None = None,
) -> list[L]:
    """
    Detect anomalies with the S-H-ESD test.

    :param observations: `(label, value)` pairs, in input order.
    :param parameter: Detection parameters, `Parameter()` when omitted.
    :param choose_pivot: Pivot policy of the median selection, see `iterate_esd`.
    :param settings: Numerical settings, see `iterate_esd`.
    :returns: Labels of the anomalous observations, most extreme first.
    """
    if parameter is None:
        parameter = Parameter()
    rounds = list(iterate_esd(observations, parameter, choose_pivot=choose_pivot, settings=settings))
    anomalies = [esd_round.label for esd_round in rounds if esd_round.outcome is RoundOutcome.CONTINUE]
    logger.info(
        f"S-H-ESD ({parameter.tail} tail, k={parameter.k}, alpha={parameter.alpha}) "
        f"found {len(anomalies)} anomalies in {len(rounds)} rounds"
    )
    return anomalies


@log_railway_function(
    "Failed to detect anomalies",
    "Detected anomalies: {value}",
    failure_level=FailureLevel.WARNING,
)
@safe
def try_detect[L](
    observations: Iterable[tuple[L, float]],
    parameter_values: Mapping[str, Any] | None = None,
    *,
    choose_pivot: PivotPolicy | None = None,
) -> list[L]:
    """
    Validate the parameters and detect anomalies without raising.

    :param observations: `(label, value)` pairs, in input order.
    :param parameter_values: Raw values for the `Parameter` fields.
    :param choose_pivot: Pivot policy of the median selection.
    :returns: `Success` with the anomalous labels, or `Failure` with the
        validation or computation error.
    """
    parameter = Parameter.model_validate(dict(parameter_values or {}))
    return detect(observations, parameter, choose_pivot=choose_pivot)
