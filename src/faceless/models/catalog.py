"""Static voice, music and visual style catalogs."""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Sequence

import yaml
from pydantic import BaseModel, Field

from ..errors import UploadError, ValidationError

CATALOG_PATH = Path(__file__).parent.parent / "data" / "catalog.yaml"

AUDIO_UPLOAD_SUFFIXES = {".mp3", ".wav", ".m4a", ".ogg", ".flac", ".aac", ".webm"}

CUSTOM_VOICE_ID = "cloned-1"
CUSTOM_MUSIC_ID = "custom"


class VoiceProfile(BaseModel):
    """A narrator voice."""

    id: str
    name: str
    gender: str = Field(default="Male")
    style: str = Field(default="")
    provider_voice: str = Field(..., description="Voice name understood by the TTS provider")
    is_cloned: bool = False

    class Config:
        """Pydantic config."""
        frozen = True


class MusicTrack(BaseModel):
    """A stock background music bed."""

    id: str
    name: str
    mood: str = ""
    url: str

    class Config:
        """Pydantic config."""
        frozen = True


class VisualStyle(BaseModel):
    """A visual style that can be layered onto image prompts."""

    id: str
    name: str
    description: str = ""

    class Config:
        """Pydantic config."""
        frozen = True


class Catalog(BaseModel):
    """All static catalog data."""

    voices: List[VoiceProfile]
    music: List[MusicTrack]
    styles: List[VisualStyle]
    languages: List[str]

    class Config:
        """Pydantic config."""
        frozen = True

    @classmethod
    def from_yaml(cls, path: Path) -> "Catalog":
        """Load catalog from YAML file."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls(**data)

    def voice(self, voice_id: str) -> Optional[VoiceProfile]:
        return next((v for v in self.voices if v.id == voice_id), None)

    def track(self, track_id: str) -> Optional[MusicTrack]:
        return next((t for t in self.music if t.id == track_id), None)

    def style(self, style_id: str) -> Optional[VisualStyle]:
        return next((s for s in self.styles if s.id == style_id), None)

    def resolve_voice(self, voice_id: Optional[str]) -> VoiceProfile:
        """Return the selected voice, falling back to the first catalog voice."""
        if voice_id == CUSTOM_VOICE_ID:
            return custom_voice_profile()
        return (voice_id and self.voice(voice_id)) or self.voices[0]

    def style_names(self, style_ids: Sequence[str]) -> list[str]:
        """Resolve style ids to display names, skipping unknown ids."""
        names = []
        for style_id in style_ids:
            style = self.style(style_id)
            if style:
                names.append(style.name)
        return names

    def style_suffix(self, style_ids: Sequence[str], intensity: str) -> str:
        """Build the suffix appended to every image prompt."""
        names = self.style_names(style_ids)
        if not names:
            return ""
        return f", {', '.join(names)} style, {intensity} intensity"

    def require_voice(self, voice_id: str) -> VoiceProfile:
        if voice_id == CUSTOM_VOICE_ID:
            return custom_voice_profile()
        voice = self.voice(voice_id)
        if voice is None:
            raise ValidationError(f"Unknown voice: {voice_id}", code="unknown_voice")
        return voice

    def require_track(self, track_id: str) -> MusicTrack:
        track = self.track(track_id)
        if track is None:
            raise ValidationError(f"Unknown music track: {track_id}", code="unknown_track")
        return track

    def require_style(self, style_id: str) -> VisualStyle:
        style = self.style(style_id)
        if style is None:
            raise ValidationError(f"Unknown visual style: {style_id}", code="unknown_style")
        return style


@lru_cache(maxsize=1)
def load_catalog(path: Path = CATALOG_PATH) -> Catalog:
    """Load the packaged catalog once."""
    return Catalog.from_yaml(path)


def custom_voice_profile() -> VoiceProfile:
    # Custom voices are narrated by a stock provider voice.
    return VoiceProfile(
        id=CUSTOM_VOICE_ID,
        name="Custom Clone",
        gender="Male",
        style="Matched from Audio",
        provider_voice="Fenrir",
        is_cloned=True,
    )


def validate_audio_upload(path: Path) -> Path:
    """Check that a user-supplied audio file exists and looks like audio.

    Raises:
        UploadError: If the file is missing, empty, unreadable or not audio.
    """
    if not path.exists() or not path.is_file():
        raise UploadError(f"File not found: {path}", code="upload_missing")
    if path.suffix.lower() not in AUDIO_UPLOAD_SUFFIXES:
        raise UploadError(
            f"Unsupported audio file type '{path.suffix}': {path.name}",
            code="upload_type",
        )
    try:
        with open(path, "rb") as f:
            head = f.read(16)
    except OSError as e:
        raise UploadError(f"Cannot read {path}: {e}", code="upload_unreadable") from e
    if not head:
        raise UploadError(f"File is empty: {path}", code="upload_empty")
    return path


def register_custom_voice(sample: Path) -> VoiceProfile:
    """Accept a voice sample and return the custom voice profile."""
    validate_audio_upload(sample)
    return custom_voice_profile()
