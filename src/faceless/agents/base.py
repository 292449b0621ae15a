"""Base agent abstraction."""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar, Optional

from ..errors import ProviderError
from ..services.anthropic import AnthropicClient
from ..config import config

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")

_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)
_decoder = json.JSONDecoder()


def extract_json(text: str) -> Any:
    """Decode the first JSON array or object in a model reply.

    Fenced code blocks are preferred; otherwise the reply is scanned for the
    first bracket that starts a valid JSON value, ignoring any prose around it.

    Raises:
        ValueError: If the reply holds no JSON value.
    """
    fenced = _FENCE.search(text)
    candidates = [fenced.group(1), text] if fenced else [text]

    for candidate in candidates:
        for match in re.finditer(r"[\[{]", candidate):
            try:
                value, _ = _decoder.raw_decode(candidate, match.start())
            except json.JSONDecodeError:
                continue
            return value

    raise ValueError("no JSON value found in reply")


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """Abstract base class for LLM-backed writing agents.

    Subclasses define their prompts and implement `run`; the base class owns the
    Claude client and turns its text replies into JSON.
    """

    def __init__(
        self,
        client: Optional[AnthropicClient] = None,
        model: Optional[str] = None,
    ) -> None:
        """Initialize the agent.

        Args:
            client: AnthropicClient instance. Created if not provided.
            model: Model to use. Defaults to config.default_model.
        """
        self._model = model or config.default_model
        self._client = client or AnthropicClient(model=self._model)
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the agent's name."""
        ...

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        """Return the system prompt for this agent."""
        ...

    @property
    def model(self) -> str:
        return self._model

    @abstractmethod
    def run(self, input_data: InputT) -> OutputT:
        """Execute the agent's main task."""
        ...

    def _create_message(
        self,
        prompt: str,
        max_tokens: int = 8192,
        temperature: float = 0.7,
    ) -> str:
        """Send ``prompt`` with the agent's system prompt and return the reply text."""
        try:
            reply = self._client.create_message(
                prompt=prompt,
                max_tokens=max_tokens,
                system=self.system_prompt,
                temperature=temperature,
            )
        except ProviderError as e:
            self._logger.error(f"{self.name} request failed: {e}")
            raise

        self._logger.debug(f"{self.name} reply: {len(reply)} chars")
        return reply

    def _parse_json(self, reply: str) -> Any:
        """Decode the JSON payload of a reply.

        Raises:
            ProviderError: If no valid JSON can be found.
        """
        try:
            return extract_json(reply)
        except ValueError as e:
            self._logger.debug(f"Unparseable reply: {reply[:500]}")
            raise ProviderError(f"Invalid JSON in response: {e}", code="bad_response") from e
