"""Gemini text-to-speech client via Vertex AI."""

import base64
import logging
import re
from typing import Optional

from ..audio.wav import DEFAULT_SAMPLE_RATE, pcm_to_wav
from ..config import config
from ..errors import ProviderError, ValidationError
from .vertex import VertexClient

logger = logging.getLogger(__name__)

PREVIEW_TEXT = (
    "Hello. This is a preview of the {name} voice. "
    "I am ready to generate your faceless video narration."
)


def _sample_rate(mime_type: str) -> int:
    # e.g. "audio/L16;codec=pcm;rate=24000"
    match = re.search(r"rate=(\d+)", mime_type or "")
    return int(match.group(1)) if match else DEFAULT_SAMPLE_RATE


class SpeechClient(VertexClient):
    """Narration synthesis with Gemini prebuilt voices."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        location: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(project_id=project_id, location=location, **kwargs)
        self._model = model or config.tts_model

    @property
    def model(self) -> str:
        return self._model

    def synthesize(self, text: str, voice_name: str) -> bytes:
        """Speak ``text`` with ``voice_name``.

        Returns:
            WAV bytes (16-bit mono PCM, 24 kHz unless the provider says otherwise).

        Raises:
            ValidationError: If the text is empty.
            RateLimited: If Vertex AI rejects the request for quota reasons.
            ProviderError: If the response carries no audio.
        """
        if not text or not text.strip():
            raise ValidationError("Narration text cannot be empty", code="empty_text")

        request_body = {
            "contents": [
                {"role": "user", "parts": [{"text": text}]}
            ],
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {
                        "prebuiltVoiceConfig": {"voiceName": voice_name}
                    }
                },
            },
        }

        logger.info(f"Synthesizing narration ({voice_name}): {text[:50]}...")
        data = self._post(self._model, "generateContent", request_body)

        try:
            inline = data["candidates"][0]["content"]["parts"][0]["inlineData"]
            pcm = base64.b64decode(inline["data"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"TTS output missing. Response keys: {list(data)}")
            raise ProviderError("No audio data returned from Gemini TTS") from e

        return pcm_to_wav(pcm, _sample_rate(inline.get("mimeType", "")))

    def preview(self, voice_display_name: str, voice_name: str) -> bytes:
        """Synthesize the short sample sentence used to audition a voice."""
        return self.synthesize(PREVIEW_TEXT.format(name=voice_display_name), voice_name)
