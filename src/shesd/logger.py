import logging
from collections.abc import Callable
from enum import Enum
from functools import wraps

from loguru import logger
from returns.result import Failure, Result, Success


class FailureLevel(Enum):
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


def log_failure(failure_message: str, failure_level: FailureLevel, error: Exception) -> None:
    logger.debug(f"{failure_message}: {type(error).__name__}: {error}")
    match failure_level:
        case FailureLevel.WARNING:
            logger.warning(failure_message)
        case FailureLevel.ERROR:
            logger.error(failure_message)
        case FailureLevel.CRITICAL:
            logger.critical(failure_message)


def log_railway_function[**P, T, E: Exception](
    failure_message: str,
    success_message: str | None = None,
    failure_level: FailureLevel = FailureLevel.ERROR,
) -> Callable[[Callable[P, Result[T, E]]], Callable[P, Result[T, E]]]:
    """
    Log the outcome of a function returning a `Result` container.

    :param failure_message: Message logged at `failure_level` on `Failure`.
    :param success_message: Message logged at INFO on `Success`; may refer to
        the wrapped value as `{value}`.
    :param failure_level: Severity of the failure log record.
    """

    def decorator(func: Callable[P, Result[T, E]]) -> Callable[P, Result[T, E]]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> Result[T, E]:
            result = func(*args, **kwargs)
            match result:
                case Success(value):
                    if success_message:
                        logger.info(success_message.format(value=value))
                case Failure(error):
                    log_failure(failure_message, failure_level, error)
            return result

        return wrapper

    return decorator
