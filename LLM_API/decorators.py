import functools
import logging
import time
from typing import Callable, TypeVar

from .exceptions import LLMError

T = TypeVar('T')

LOGGER = logging.getLogger(__name__)


def log_request(func: Callable[..., T]) -> Callable[..., T]:
    """Log provider calls with their duration and outcome"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> T:
        provider = args[0].__class__.__name__ if args else "Unknown"
        LOGGER.debug("[%s] Calling %s", provider, func.__name__)
        started = time.monotonic()

        try:
            result = func(*args, **kwargs)
        except LLMError as e:
            LOGGER.warning(
                "[%s] %s failed after %.2fs: %s",
                provider, func.__name__, time.monotonic() - started, e
            )
            raise
        LOGGER.debug(
            "[%s] %s succeeded in %.2fs",
            provider, func.__name__, time.monotonic() - started
        )
        return result

    return wrapper
