from types import SimpleNamespace

from faceless.errors import (
    ConfigError,
    FacelessError,
    ProviderError,
    RateLimited,
    UploadError,
    ValidationError,
    is_rate_limited,
)


def test_error_hierarchy_shares_base_class() -> None:
    for cls in (ConfigError, ProviderError, RateLimited, UploadError, ValidationError):
        assert issubclass(cls, FacelessError)
    assert issubclass(RateLimited, ProviderError)


def test_rate_limited_defaults_to_http_429() -> None:
    err = RateLimited("slow down", retry_after=3.0)

    assert err.status_code == 429
    assert err.code == "rate_limited"
    assert err.retry_after == 3.0
    assert str(err) == "slow down"


def test_is_rate_limited_recognises_type_status_and_message() -> None:
    assert is_rate_limited(RateLimited("x"))
    assert is_rate_limited(ProviderError("busy", status_code=429))
    assert is_rate_limited(RuntimeError("HTTP 429 returned"))
    assert is_rate_limited(RuntimeError("Quota exceeded for imagen"))

    err = RuntimeError("opaque")
    err.code = 429
    assert is_rate_limited(err)


def test_is_rate_limited_rejects_other_failures() -> None:
    assert not is_rate_limited(ProviderError("500 internal", status_code=500))
    assert not is_rate_limited(ValueError("bad prompt"))
    assert not is_rate_limited(SimpleNamespace())
