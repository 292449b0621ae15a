"""Preview playback: scene-by-scene narration over a looping music bed."""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Dict, Optional, Sequence, Union

from ..errors import ValidationError
from ..models import MusicIntensity, Scene

logger = logging.getLogger(__name__)

MUSIC_VOLUME = {
    "Low": 0.1,
    "Medium": 0.25,
    "High": 0.5,
}
DEFAULT_MUSIC_VOLUME = 0.2


def music_volume(intensity: Union[MusicIntensity, str, None]) -> float:
    """Background music volume for a ducking level."""
    key = intensity.value if isinstance(intensity, MusicIntensity) else intensity
    return MUSIC_VOLUME.get(key, DEFAULT_MUSIC_VOLUME)


class PlaybackState(str, Enum):
    """Synchronizer states."""
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


class AudioChannel(ABC):
    """Minimal media element the synchronizer drives.

    Mirrors an HTML audio element: setting ``source`` and calling ``load``
    rewinds to the start; ``duration`` is None until known.
    """

    source: str = ""
    loop: bool = False
    volume: float = 1.0
    current_time: float = 0.0

    @property
    @abstractmethod
    def duration(self) -> Optional[float]:
        ...

    @abstractmethod
    def load(self) -> None:
        ...

    @abstractmethod
    def play(self) -> None:
        ...

    @abstractmethod
    def pause(self) -> None:
        ...


class MemoryAudioChannel(AudioChannel):
    """Headless channel whose clock is advanced explicitly.

    Args:
        durations: Known length in seconds per source.
        on_ended: Called when a non-looping source plays to its end.
    """

    def __init__(
        self,
        durations: Optional[Dict[str, float]] = None,
        on_ended: Optional[Callable[[], None]] = None,
    ) -> None:
        self.source = ""
        self.loop = False
        self.volume = 1.0
        self.current_time = 0.0
        self.playing = False
        self.on_ended = on_ended
        self._durations = dict(durations or {})

    @property
    def duration(self) -> Optional[float]:
        return self._durations.get(self.source)

    def load(self) -> None:
        self.current_time = 0.0

    def play(self) -> None:
        if self.source:
            self.playing = True

    def pause(self) -> None:
        self.playing = False

    def advance(self, seconds: float) -> None:
        """Move the clock forward while playing, firing ``on_ended`` at the end."""
        if not self.playing:
            return
        self.current_time += seconds
        duration = self.duration
        if duration is None or self.current_time < duration:
            return
        if self.loop and duration > 0:
            self.current_time %= duration
            return
        self.current_time = duration
        self.playing = False
        if self.on_ended:
            self.on_ended()


class PlaybackSynchronizer:
    """Plays scene narrations back to back with a continuous music bed.

    The narration channel holds the active scene's audio; when it ends the next
    scene starts automatically, and after the last scene playback finishes and
    rewinds to scene 0. The music channel loops independently and is only
    rewound when playback finishes or a scene is picked by hand.
    """

    def __init__(
        self,
        scenes: Sequence[Scene],
        narration: AudioChannel,
        music: AudioChannel,
        on_scene_change: Optional[Callable[[int], None]] = None,
    ) -> None:
        self._scenes = list(scenes)
        self._narration = narration
        self._music = music
        self._on_scene_change = on_scene_change
        self._state = PlaybackState.IDLE
        self._active = 0
        self._progress = 0.0
        self._has_music = False
        self._load_active()

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def active_index(self) -> int:
        return self._active

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def is_playing(self) -> bool:
        return self._state == PlaybackState.PLAYING

    @property
    def scenes(self) -> list[Scene]:
        return list(self._scenes)

    def set_scenes(self, scenes: Sequence[Scene]) -> None:
        """Swap in an edited scene list, keeping the active index in range."""
        self._scenes = list(scenes)
        if self._active >= len(self._scenes):
            self._active = 0
        self._load_active()

    def set_music(
        self,
        source: Optional[str],
        intensity: Union[MusicIntensity, str, None] = MusicIntensity.MEDIUM,
    ) -> None:
        """Replace the music bed and reapply loop and volume."""
        if not source:
            self.clear_music()
            return
        self._music.pause()
        self._music.source = source
        self._music.loop = True
        self._music.volume = music_volume(intensity)
        self._music.load()
        self._has_music = True
        if self.is_playing:
            self._music.play()

    def clear_music(self) -> None:
        self._music.pause()
        self._music.source = ""
        self._has_music = False

    def play(self) -> None:
        """Start or resume the active scene and the music bed."""
        if not self._scenes or self.is_playing:
            return
        self._state = PlaybackState.PLAYING
        self._narration.play()
        if self._has_music and self._music.source:
            self._music.play()
        logger.debug(f"Playing scene {self._active}")

    def pause(self) -> None:
        """Stop both channels, keeping their positions."""
        self._narration.pause()
        self._music.pause()
        if self.is_playing:
            self._state = PlaybackState.PAUSED

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def on_narration_ended(self) -> None:
        """Advance to the next scene, or finish after the last one."""
        if not self.is_playing:
            return
        if self._active < len(self._scenes) - 1:
            self._set_active(self._active + 1)
            return

        self._narration.pause()
        self._music.pause()
        self._music.current_time = 0.0
        self._state = PlaybackState.FINISHED
        self._set_active(0)
        logger.debug("Playback finished")

    def select_scene(self, index: int) -> None:
        """Jump to ``index``, pause, and rewind the music bed."""
        if index < 0 or index >= len(self._scenes):
            raise ValidationError(f"Scene {index} out of range", code="bad_scene_index")
        self._narration.pause()
        self._music.pause()
        self._music.current_time = 0.0
        self._state = PlaybackState.PAUSED
        self._set_active(index)

    def scene_moved(self, index: int, target: int) -> None:
        """Keep the active scene selected after two scenes swap places."""
        if self._active == index:
            self._active = target
        elif self._active == target:
            self._active = index

    def on_time_update(self) -> float:
        """Recompute narration progress as a percentage."""
        duration = self._narration.duration or 1
        self._progress = self._narration.current_time / duration * 100
        return self._progress

    def _set_active(self, index: int) -> None:
        self._active = index
        self._load_active()
        if self._on_scene_change:
            self._on_scene_change(index)

    def _load_active(self) -> None:
        scene = self._scenes[self._active] if self._scenes else None
        self._narration.source = (scene.audio_asset or "") if scene else ""
        self._narration.load()
        self._progress = 0.0
        if self.is_playing:
            self._narration.play()
