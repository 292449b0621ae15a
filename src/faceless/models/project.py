"""Project state model and store."""

import logging
import math
from enum import Enum
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from .scene import Scene

logger = logging.getLogger(__name__)

MAX_STYLES = 3

VIDEO_DURATIONS = (
    "30s", "1min", "2min", "3min", "4min", "5min", "7min", "8min", "10min",
    "12min", "15min", "20min", "25min", "30min", "35min", "40min", "45min",
    "50min", "55min", "60min", "90min", "2h", "2h 30min",
)


class Step(str, Enum):
    """Wizard steps, in order."""
    SCRIPT = "script"
    VOICE = "voice"
    VISUALS = "visuals"
    PREVIEW = "preview"


class AspectRatio(str, Enum):
    """Output aspect ratios."""
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    SQUARE = "1:1"


class MusicIntensity(str, Enum):
    """Background music level relative to narration."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class StyleIntensity(str, Enum):
    """How strongly the visual styles are applied."""
    SOFT = "Soft"
    MEDIUM = "Medium"
    EXTREME = "Extreme"


class ProjectState(BaseModel):
    """Every user choice and generated asset of one project."""

    topic: str = Field(default="", description="Topic to write a script about")
    raw_script: str = Field(default="", description="User supplied script")
    language: str = Field(default="English US", description="Narration language")
    aspect_ratio: AspectRatio = Field(default=AspectRatio.PORTRAIT)
    target_duration: str = Field(default="1min", description="Duration bucket")
    scenes: List[Scene] = Field(default_factory=list)
    selected_voice_id: str = Field(default="", description="Narrator voice id")
    selected_music_track_id: Optional[str] = Field(None, description="Music id or 'custom'")
    custom_music_path: Optional[str] = Field(None, description="Uploaded music file")
    music_intensity: MusicIntensity = Field(default=MusicIntensity.MEDIUM)
    selected_styles: List[str] = Field(default_factory=list, max_length=MAX_STYLES)
    style_intensity: StyleIntensity = Field(default=StyleIntensity.MEDIUM)
    version: int = Field(default=0, ge=0)

    class Config:
        """Pydantic config."""
        frozen = False

    @field_validator("target_duration")
    @classmethod
    def _known_duration(cls, value: str) -> str:
        if value not in VIDEO_DURATIONS:
            raise ValueError(f"unknown duration bucket {value!r}")
        return value

    @property
    def is_production_complete(self) -> bool:
        return bool(self.scenes) and all(scene.is_complete for scene in self.scenes)


def can_enter(state: ProjectState, step: Step) -> bool:
    """Return True if the wizard may move to ``step``."""
    if step == Step.SCRIPT:
        return True
    if step == Step.VOICE:
        return len(state.scenes) > 0
    if step == Step.VISUALS:
        return len(state.scenes) > 0 and bool(state.selected_voice_id)
    if step == Step.PREVIEW:
        return state.is_production_complete
    return False


Subscriber = Callable[[ProjectState], None]


class ProjectStore:
    """Owns the current ProjectState and applies partial updates to it.

    Updates are shallow merges: only the named fields are replaced. Each update
    produces a new state with ``version`` incremented and notifies subscribers.
    A subscriber that raises is logged and skipped; the update still succeeds.
    """

    def __init__(self, state: Optional[ProjectState] = None) -> None:
        self._state = state or ProjectState()
        self._subscribers: list[Subscriber] = []

    @property
    def state(self) -> ProjectState:
        return self._state

    @property
    def scenes(self) -> list[Scene]:
        return list(self._state.scenes)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register an observer; returns a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def update(self, **changes: Any) -> ProjectState:
        """Replace the named fields and publish the new state.

        Raises:
            ValidationError: If a field is unknown or a value is invalid.
        """
        unknown = sorted(
            name for name in changes
            if name not in ProjectState.model_fields or name == "version"
        )
        if unknown:
            raise ValidationError(
                f"Cannot update field(s): {', '.join(unknown)}", code="unknown_field"
            )

        merged = dict(self._state)
        merged.update(changes)
        merged["version"] = self._state.version + 1

        try:
            new_state = ProjectState.model_validate(merged)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid project update: {e}", code="invalid_update") from e

        self._state = new_state
        logger.debug(f"Project state v{new_state.version}: updated {', '.join(changes)}")
        for callback in list(self._subscribers):
            try:
                callback(new_state)
            except Exception as e:
                # State is already committed; remaining subscribers still run.
                logger.error(f"Subscriber failed on project state v{new_state.version}: {e}")
        return new_state

    def replace_scenes(self, scenes: list[Scene]) -> ProjectState:
        """Publish a new scene list (always a fresh list object)."""
        return self.update(scenes=list(scenes))


def reindex(scenes: list[Scene]) -> list[Scene]:
    """Return copies of ``scenes`` whose index matches their position."""
    return [
        scene if scene.index == i else scene.model_copy(update={"index": i})
        for i, scene in enumerate(scenes)
    ]


def toggle_style(state: ProjectState, style_id: str) -> list[str]:
    """Return the style selection with ``style_id`` toggled.

    Selecting a fourth style is ignored.
    """
    current = list(state.selected_styles)
    if style_id in current:
        current.remove(style_id)
    elif len(current) < MAX_STYLES:
        current.append(style_id)
    else:
        logger.info(f"Ignoring style {style_id}: at most {MAX_STYLES} styles")
    return current


def _check_index(scenes: list[Scene], index: int) -> None:
    if index < 0 or index >= len(scenes):
        raise ValidationError(
            f"Scene {index} out of range (0-{len(scenes) - 1})", code="bad_scene_index"
        )


def move_scene(scenes: list[Scene], index: int, direction: str) -> list[Scene]:
    """Swap a scene with its neighbour ('up' or 'down').

    Moving past either end leaves the order unchanged.
    """
    if direction not in ("up", "down"):
        raise ValidationError(f"Unknown direction: {direction}", code="bad_direction")
    _check_index(scenes, index)
    target = index - 1 if direction == "up" else index + 1
    new_scenes = list(scenes)
    if 0 <= target < len(new_scenes):
        new_scenes[index], new_scenes[target] = new_scenes[target], new_scenes[index]
    return reindex(new_scenes)


def update_scene_text(scenes: list[Scene], index: int, text: str) -> list[Scene]:
    _check_index(scenes, index)
    new_scenes = list(scenes)
    new_scenes[index] = scenes[index].model_copy(update={"text": text})
    return new_scenes


def update_scene_duration(scenes: list[Scene], index: int, seconds: float) -> list[Scene]:
    """Set a manual duration estimate for one scene."""
    _check_index(scenes, index)
    if not math.isfinite(seconds) or seconds <= 0:
        raise ValidationError("Scene duration must be positive", code="bad_duration")
    new_scenes = list(scenes)
    new_scenes[index] = scenes[index].model_copy(
        update={"estimated_duration_seconds": float(seconds)}
    )
    return new_scenes
