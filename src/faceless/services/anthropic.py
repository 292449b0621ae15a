"""Claude client used for script writing."""

import logging
import time
from typing import Callable, Optional

from anthropic import Anthropic, APIError, APIConnectionError, APIStatusError, RateLimitError

from ..config import config
from ..errors import ConfigError, ProviderError, RateLimited

logger = logging.getLogger(__name__)

# Failures worth another attempt, mapped to the error raised once attempts run out.
TRANSIENT_ERRORS = (RateLimitError, APIConnectionError)


def _final_error(e: APIError) -> ProviderError:
    if isinstance(e, RateLimitError):
        return RateLimited(f"Claude rate limit: {e}")
    if isinstance(e, APIConnectionError):
        return ProviderError(f"Cannot reach Claude: {e}", code="connection")
    if isinstance(e, APIStatusError):
        return ProviderError(f"Claude API error: {e}", status_code=e.status_code)
    return ProviderError(f"Claude API error: {e}")


class AnthropicClient:
    """Thin wrapper over the Anthropic SDK that retries transient failures.

    Rate limits and connection errors are retried with exponential backoff;
    everything else fails immediately. SDK exceptions never leak: callers see
    ``RateLimited`` or ``ProviderError``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Anthropic API key. Defaults to ANTHROPIC_API_KEY env var.
            model: Model to use. Defaults to config.default_model.
            max_retries: Total attempts per message.
            retry_delay: First backoff delay in seconds, doubled per attempt.
            sleep: Called with each backoff delay.
        """
        self._api_key = api_key or config.anthropic_api_key
        if not self._api_key:
            raise ConfigError(
                "Anthropic API key not provided. Set ANTHROPIC_API_KEY env var.",
                code="missing_config",
            )

        self._client = Anthropic(api_key=self._api_key)
        self._model = model or config.default_model
        self._max_retries = max(1, max_retries)
        self._retry_delay = retry_delay
        self._sleep = sleep

    @property
    def model(self) -> str:
        return self._model

    def create_message(
        self,
        prompt: str,
        max_tokens: int = 8192,
        system: Optional[str] = None,
        temperature: float = 0.7,
    ) -> str:
        """Send one user turn and return the text of the reply.

        Raises:
            RateLimited: If still rate limited after the last attempt.
            ProviderError: On any other API failure.
        """
        request = {
            "model": self._model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if system:
            request["system"] = system

        attempt = 0
        while True:
            attempt += 1
            logger.debug(f"Claude request {attempt}/{self._max_retries} ({len(prompt)} chars)")
            try:
                response = self._client.messages.create(**request)
            except TRANSIENT_ERRORS as e:
                if attempt >= self._max_retries:
                    raise _final_error(e) from e
                delay = self._retry_delay * (2 ** (attempt - 1))
                logger.warning(f"{type(e).__name__} from Claude. Retrying in {delay:.1f}s...")
                self._sleep(delay)
                continue
            except APIError as e:
                logger.error(f"Claude API error: {e}")
                raise _final_error(e) from e

            return self._reply_text(response)

    @staticmethod
    def _reply_text(response) -> str:
        texts = [block.text for block in response.content if hasattr(block, "text")]
        if texts:
            return "".join(texts)
        return str(response.content[0]) if response.content else ""
