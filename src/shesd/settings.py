"""Library configuration settings."""

from functools import lru_cache
from typing import Annotated

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Numerical settings of the detection.

    Settings can be configured via:

    1. Environment variables (e.g., SHESD_QUANTILE_TOLERANCE=1e-6)
    2. .env file in the working directory
    3. Default values defined below

    .. rubric:: Examples

    Reproduce the pivot choices of a previous run::

        export SHESD_RANDOM_SEED=42
    """

    quantile_tolerance: Annotated[
        float,
        Field(
            default=1e-3,
            gt=0,
            description="Absolute tolerance of the Student-t quantile root finding",
        ),
    ]

    random_seed: Annotated[
        int | None,
        Field(
            default=None,
            ge=0,
            description="Seed of the default pivot generator. If None, every detection draws fresh entropy.",
        ),
    ]

    model_config = SettingsConfigDict(
        env_prefix="SHESD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="forbid",
    )

    def log_config(self) -> None:
        logger.debug(
            f"Detection settings: quantile_tolerance={self.quantile_tolerance}, random_seed={self.random_seed}"
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    :return: The settings instance, read from the environment on first use.
    """
    settings = Settings()
    settings.log_config()
    return settings
