"""
S-H-ESD anomaly detection.

Iterative generalized ESD test on the median and the scaled median absolute
deviation, computed with an in-place quickselect.
"""

from shesd.array_view import ArrayView
from shesd.critical_value import critical_value, student_t_quantile, student_t_upper_quantile
from shesd.data_types import EsdRound, MedianSigma, Observation, Parameter, RoundOutcome, Tail
from shesd.detection import detect, iterate_esd, try_detect
from shesd.exceptions import InvalidRankError
from shesd.robust import MAD_CONSISTENCY_CONSTANT, median_in_place, median_sigma
from shesd.selection import (
    PivotPolicy,
    find_k_in_place,
    first_pivot,
    median_of_three_pivot,
    middle_pivot,
    random_pivot,
)
from shesd.settings import Settings, get_settings

__all__ = [
    "ArrayView",
    "EsdRound",
    "InvalidRankError",
    "MAD_CONSISTENCY_CONSTANT",
    "MedianSigma",
    "Observation",
    "Parameter",
    "PivotPolicy",
    "RoundOutcome",
    "Settings",
    "Tail",
    "critical_value",
    "detect",
    "find_k_in_place",
    "first_pivot",
    "get_settings",
    "iterate_esd",
    "median_in_place",
    "median_of_three_pivot",
    "median_sigma",
    "middle_pivot",
    "random_pivot",
    "student_t_quantile",
    "student_t_upper_quantile",
    "try_detect",
]
