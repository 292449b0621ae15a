import random
import re

import pytest

from faceless.errors import ProviderError, RateLimited
from faceless.production.retry import (
    FallbackPolicy,
    placeholder_image,
    retry_on_rate_limit,
    should_fallback,
)


def _flaky(outcomes):
    calls = []

    def func():
        calls.append(1)
        outcome = outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    return func, calls


def test_retry_once_after_rate_limit() -> None:
    sleeps: list[float] = []
    func, calls = _flaky([RateLimited("429"), "ok"])

    assert retry_on_rate_limit(func, backoff=3.0, sleep=sleeps.append) == "ok"
    assert len(calls) == 2
    assert sleeps == [3.0]


def test_second_rate_limit_propagates() -> None:
    sleeps: list[float] = []
    func, calls = _flaky([RateLimited("429"), RateLimited("429 again"), "never"])

    with pytest.raises(RateLimited, match="again"):
        retry_on_rate_limit(func, sleep=sleeps.append)
    assert len(calls) == 2
    assert sleeps == [3.0]


def test_other_errors_are_not_retried() -> None:
    sleeps: list[float] = []
    func, calls = _flaky([ProviderError("500", status_code=500), "never"])

    with pytest.raises(ProviderError):
        retry_on_rate_limit(func, sleep=sleeps.append)
    assert len(calls) == 1
    assert sleeps == []


def test_should_fallback_policies() -> None:
    limited = RateLimited("429")
    broken = ProviderError("500")

    assert should_fallback(FallbackPolicy.ALWAYS, broken)
    assert should_fallback(FallbackPolicy.RATE_LIMIT, limited)
    assert not should_fallback(FallbackPolicy.RATE_LIMIT, broken)
    assert not should_fallback(FallbackPolicy.NEVER, limited)


def test_placeholder_image_uses_random_seed() -> None:
    url = placeholder_image(rng=random.Random(7))

    assert re.fullmatch(r"https://picsum\.photos/seed/[a-z0-9]{11}/1280/720", url)
    assert url == placeholder_image(rng=random.Random(7))
    assert placeholder_image("stock/{seed}.png", random.Random(1)).startswith("stock/")
