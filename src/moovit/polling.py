"""Generic polling and retry helpers."""

import logging
import time
from typing import Callable, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def poll(
    fn: Callable[[], T],
    is_complete: Callable[[T], bool],
    max_attempts: int = 30,
    initial_delay: float = 0.5,
    max_delay: float = 5.0,
    exponential_backoff: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call ``fn`` until ``is_complete`` accepts its result.

    After ``max_attempts`` incomplete results, ``fn`` is called one last
    time and that result is returned whether complete or not.
    """
    delay = initial_delay
    for attempt in range(max_attempts):
        result = fn()
        if is_complete(result):
            return result
        logger.debug(f"Poll attempt {attempt + 1}/{max_attempts} incomplete")
        sleep(delay)
        if exponential_backoff:
            delay = min(delay * 1.5, max_delay)
    return fn()


def retry(
    fn: Callable[[], T],
    max_retries: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call ``fn``, retrying on any exception with a doubling delay.

    Raises:
        Exception: The last error once ``max_retries`` retries are used up.
    """
    delay = base_delay
    for attempt in range(max_retries):
        try:
            return fn()
        except Exception as e:
            logger.debug(f"Attempt {attempt + 1} failed ({e}), retrying in {delay}s")
            sleep(delay)
            delay *= 2
    return fn()
