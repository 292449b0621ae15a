"""External service integrations."""

from .anthropic import AnthropicClient
from .imagen import ImagenClient, thumbnail_prompt
from .speech import SpeechClient

__all__ = [
    "AnthropicClient",
    "ImagenClient",
    "SpeechClient",
    "thumbnail_prompt",
]
