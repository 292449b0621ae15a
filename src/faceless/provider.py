"""Content provider: the script, image and speech generation capability."""

import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .agents import ScriptAgent, ScriptRequest
from .config import config
from .models import Scene

logger = logging.getLogger(__name__)


class ContentProvider(ABC):
    """The three generation operations the engine consumes.

    Asset references returned by ``generate_image`` and ``generate_speech`` are
    opaque strings (file paths or URLs).
    """

    @abstractmethod
    def generate_script(self, request: ScriptRequest) -> list[Scene]:
        """Write the scene list for a topic or pasted script."""
        ...

    @abstractmethod
    def generate_image(self, prompt: str, aspect_ratio: str) -> str:
        """Render scene imagery; raises RateLimited when throttled."""
        ...

    @abstractmethod
    def generate_speech(self, text: str, voice_name: str) -> str:
        """Synthesize narration audio for ``text``."""
        ...


class GoogleContentProvider(ContentProvider):
    """Claude for scripts, Vertex AI Imagen and Gemini TTS for assets.

    Generated files are written under ``<workspace>/assets`` and their paths are
    returned as asset references. Clients are created on first use so that a
    script-only run does not need Google credentials.
    """

    def __init__(
        self,
        workspace: Optional[Path] = None,
        script_agent: Optional[ScriptAgent] = None,
        imagen=None,
        speech=None,
    ) -> None:
        self._workspace = Path(workspace or config.workspace)
        self._script_agent = script_agent
        self._imagen = imagen
        self._speech = speech

    @property
    def images_dir(self) -> Path:
        return self._workspace / "assets" / "images"

    @property
    def audio_dir(self) -> Path:
        return self._workspace / "assets" / "audio"

    def _agent(self) -> ScriptAgent:
        if self._script_agent is None:
            config.validate_required()
            self._script_agent = ScriptAgent()
        return self._script_agent

    def _imagen_client(self):
        if self._imagen is None:
            from .services.imagen import ImagenClient

            config.validate_google_required()
            self._imagen = ImagenClient()
        return self._imagen

    def _speech_client(self):
        if self._speech is None:
            from .services.speech import SpeechClient

            config.validate_google_required()
            self._speech = SpeechClient()
        return self._speech

    def generate_script(self, request: ScriptRequest) -> list[Scene]:
        return self._agent().run(request)

    def generate_image(self, prompt: str, aspect_ratio: str) -> str:
        image = self._imagen_client().generate(prompt, aspect_ratio=aspect_ratio)
        path = self.images_dir / f"image-{uuid.uuid4().hex[:12]}.png"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(image)
        logger.debug(f"Saved image to {path}")
        return str(path)

    def generate_speech(self, text: str, voice_name: str) -> str:
        audio = self._speech_client().synthesize(text, voice_name)
        path = self.audio_dir / f"narration-{uuid.uuid4().hex[:12]}.wav"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(audio)
        logger.debug(f"Saved narration to {path}")
        return str(path)

    def preview_voice(self, display_name: str, voice_name: str) -> str:
        """Write a short audition clip for a voice and return its path."""
        audio = self._speech_client().preview(display_name, voice_name)
        path = self.audio_dir / f"preview-{voice_name.lower()}.wav"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(audio)
        return str(path)

    def generate_thumbnail(self, title: str, output_path: Path, channel_url: str = "") -> Path:
        return self._imagen_client().generate_thumbnail(title, output_path, channel_url=channel_url)
