"""
Error handling.

Exception hierarchy shared by the services, the asset pipeline and the CLI.
"""

from typing import Optional


class FacelessError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        """
        Initialize engine error.

        Args:
            message: Error message
            code: Optional error code for categorization
        """
        self.message = message
        self.code = code
        super().__init__(self.message)


class ConfigError(FacelessError):
    """Configuration errors (missing env vars, invalid settings)."""
    pass


class ProviderError(FacelessError):
    """Script, image or speech generation failures."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None
    ):
        """
        Initialize provider error.

        Args:
            message: Error message
            status_code: HTTP status returned by the provider, if any
            code: Optional error code for categorization
        """
        self.status_code = status_code
        super().__init__(message, code=code)


class RateLimited(ProviderError):
    """Provider rejected the request because of rate limiting or quota."""

    def __init__(
        self,
        message: str,
        retry_after: Optional[float] = None,
        status_code: Optional[int] = 429,
        code: Optional[str] = "rate_limited"
    ):
        """
        Initialize rate limit error.

        Args:
            message: Error message
            retry_after: Seconds the provider asked us to wait, if given
            status_code: HTTP status (429 unless the provider said otherwise)
            code: Optional error code for categorization
        """
        self.retry_after = retry_after
        super().__init__(message, status_code=status_code, code=code)


class UploadError(FacelessError):
    """User-supplied file is missing, unreadable or of the wrong type."""
    pass


class ValidationError(FacelessError):
    """Input validation errors."""
    pass


def is_rate_limited(exc: BaseException) -> bool:
    """Return True if ``exc`` looks like a provider rate-limit or quota failure.

    Checks the exception type first, then any ``status``/``status_code``/``code``
    attribute equal to 429, then the message for ``429`` or ``quota``.
    """
    if isinstance(exc, RateLimited):
        return True

    for attr in ("status", "status_code", "code"):
        value = getattr(exc, attr, None)
        if value == 429 or value == "429":
            return True

    message = str(exc).lower()
    return "429" in message or "quota" in message
