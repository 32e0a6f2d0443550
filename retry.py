# Retry helper for flaky file system operations
import random
import time
from typing import Callable, Tuple, Type

from loguru import logger


class Retry:
    """Synchronous retry with exponential backoff and optional jitter."""

    @staticmethod
    def run(
        func: Callable,
        *args,
        exceptions: Tuple[Type[Exception], ...] = (Exception,),
        max_attempts: int = 3,
        delay: float = 0.5,
        backoff: float = 2.0,
        jitter: bool = True,
        **kwargs,
    ):
        """Call func until it succeeds or max_attempts is reached, then re-raise."""
        attempt = 1
        while True:
            try:
                return func(*args, **kwargs)
            except exceptions as e:
                if attempt >= max_attempts:
                    logger.error(f"[Retry] {func.__name__} failed after {attempt} attempt(s)")
                    raise

                wait = delay * (backoff ** (attempt - 1))
                if jitter:
                    wait = wait * random.uniform(0.8, 1.2)

                logger.warning(
                    f"[Retry] {func.__name__} attempt {attempt}/{max_attempts} failed: {e}. "
                    f"Retrying in {wait:.2f}s..."
                )
                time.sleep(wait)
                attempt += 1

