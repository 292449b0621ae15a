"""Retry and fallback policies for provider calls."""

import logging
import random
import string
import time
from enum import Enum
from typing import Callable, Optional, TypeVar

from ..errors import is_rate_limited

logger = logging.getLogger(__name__)

T = TypeVar("T")

SEED_ALPHABET = string.ascii_lowercase + string.digits


class FallbackPolicy(str, Enum):
    """When an image that could not be generated is replaced by a placeholder."""
    ALWAYS = "always"
    RATE_LIMIT = "rate_limit"
    NEVER = "never"


def retry_on_rate_limit(
    func: Callable[[], T],
    retries: int = 1,
    backoff: float = 3.0,
    sleep: Callable[[float], None] = time.sleep,
    classify: Callable[[BaseException], bool] = is_rate_limited,
) -> T:
    """Call ``func``, retrying after ``backoff`` seconds on rate-limit errors.

    Errors that ``classify`` does not recognise, and the error of the last
    allowed attempt, propagate unchanged.
    """
    attempt = 0
    while True:
        try:
            return func()
        except Exception as e:
            if attempt >= retries or not classify(e):
                raise
            attempt += 1
            logger.warning(f"Rate limited ({e}). Retrying in {backoff:.1f}s...")
            sleep(backoff)


def should_fallback(policy: FallbackPolicy, exc: BaseException) -> bool:
    if policy == FallbackPolicy.ALWAYS:
        return True
    if policy == FallbackPolicy.RATE_LIMIT:
        return is_rate_limited(exc)
    return False


def placeholder_image(
    template: str = "https://picsum.photos/seed/{seed}/1280/720",
    rng: Optional[random.Random] = None,
) -> str:
    """Return a random stock image URL to stand in for a failed generation."""
    rng = rng or random.Random()
    seed = "".join(rng.choice(SEED_ALPHABET) for _ in range(11))
    return template.format(seed=seed)
