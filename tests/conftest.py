import logging

import numpy as np
import pytest
from loguru import logger

from shesd import Observation, Settings


class PropagateHandler(logging.Handler):
    """Handler that propagates loguru records to standard logging."""

    def emit(self, record: logging.LogRecord) -> None:
        logging.getLogger(record.name).handle(record)


@pytest.fixture
def caplog(caplog):
    """Fixture to enable caplog to capture loguru logs."""
    handler_id = logger.add(PropagateHandler(), format="{message}")
    yield caplog
    logger.remove(handler_id)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def settings() -> Settings:
    """Seeded settings with a tight quantile tolerance."""
    return Settings(quantile_tolerance=1e-6, random_seed=42)


@pytest.fixture
def single_upper_outlier() -> list[Observation[str]]:
    return [
        Observation("a", 1.0),
        Observation("b", 2.0),
        Observation("c", 3.0),
        Observation("d", 4.0),
        Observation("e", 100.0),
    ]


@pytest.fixture
def uniform_with_upper_outliers() -> list[Observation[str]]:
    """Symmetric, evenly spaced values around zero followed by three large values."""
    baseline = [Observation(f"base_{index}", float(value)) for index, value in enumerate(np.linspace(-1, 1, 41))]
    return baseline + [Observation("low_spike", 10.0), Observation("mid_spike", 12.0), Observation("high_spike", 15.0)]
