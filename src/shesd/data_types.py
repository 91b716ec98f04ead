"""Data types for S-H-ESD anomaly detection.

The main types are:
- Tail: Which side(s) of the distribution count as anomalous
- Parameter: Immutable detection configuration
- Observation: A labeled value in the input sequence
- MedianSigma: Robust location and scale of a sample
- RoundOutcome / EsdRound: Trace of a single generalized ESD round
"""

from enum import StrEnum
from typing import Annotated, NamedTuple

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field

type FloatArray1D = NDArray[np.floating]


class Tail(StrEnum):
    UPPER = "upper"
    LOWER = "lower"
    BOTH = "both"


class Parameter(BaseModel):
    """
    Configuration of the generalized ESD test.

    Values outside the open interval (0, 1) are rejected on construction with a
    `pydantic.ValidationError`.

    :param k: Maximum fraction of the data that can be flagged as anomalous.
    :param alpha: Significance level; smaller values give fewer anomalies.
    :param tail: Which side(s) of the distribution are tested.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    k: Annotated[float, Field(default=0.49, gt=0, lt=1, description="Upper bound on the anomalous fraction")]
    alpha: Annotated[float, Field(default=0.05, gt=0, lt=1, description="Significance level of the test")]
    tail: Annotated[Tail, Field(default=Tail.BOTH, description="Tested side(s) of the distribution")]

    def max_outliers(self, n_observations: int) -> int:
        """Number of ESD rounds allowed for a sample of `n_observations`."""
        return int(n_observations * self.k)


class Observation[L](NamedTuple):
    label: L
    value: float


class MedianSigma(NamedTuple):
    median: float
    sigma: float


class RoundOutcome(StrEnum):
    CONTINUE = "continue"
    STOP_DEGENERATE = "stop_degenerate"
    STOP_BELOW_THRESHOLD = "stop_below_threshold"
    STOP_NO_CRITICAL_VALUE = "stop_no_critical_value"

    @property
    def is_terminal(self) -> bool:
        return self is not RoundOutcome.CONTINUE


class EsdRound[L](NamedTuple):
    """
    Trace of one round of the generalized ESD test.

    `label`, `statistic` and `critical_value` are `None` when the round stopped
    before they could be computed (degenerate data, no valid critical value).

    :param index: One-based round index.
    :param median: Median of the working set at the start of the round.
    :param sigma: Scaled MAD of the working set at the start of the round.
    :param label: Label of the most extreme remaining observation.
    :param statistic: Normalized deviation of that observation (R_i).
    :param critical_value: Threshold the statistic had to exceed (lambda_i).
    :param outcome: Transition taken by the round.
    """

    index: int
    median: float
    sigma: float
    label: L | None
    statistic: float | None
    critical_value: float | None
    outcome: RoundOutcome
