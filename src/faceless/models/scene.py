"""Scene data model."""

from typing import Optional
from pydantic import BaseModel, Field


class Scene(BaseModel):
    """One narrated beat of the video."""

    index: int = Field(..., description="Position in the scene sequence", ge=0)
    text: str = Field(..., description="Narration text, also used for captions")
    visual_prompt: str = Field(default="", description="Image generation prompt")
    estimated_duration_seconds: Optional[float] = Field(
        None, description="Narration duration estimate in seconds", gt=0, allow_inf_nan=False
    )
    image_asset: Optional[str] = Field(None, description="Generated image reference")
    audio_asset: Optional[str] = Field(None, description="Generated narration reference")

    # Transient generation status, never serialized
    image_pending: bool = Field(default=False, exclude=True)
    audio_pending: bool = Field(default=False, exclude=True)

    class Config:
        """Pydantic config."""
        frozen = False

    @property
    def is_complete(self) -> bool:
        """Return True once both image and narration exist."""
        return bool(self.image_asset) and bool(self.audio_asset)

    @property
    def missing_assets(self) -> list[str]:
        missing = []
        if not self.image_asset:
            missing.append("image")
        if not self.audio_asset:
            missing.append("audio")
        return missing
