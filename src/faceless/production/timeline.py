"""Scene timeline and subtitle text."""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from ..audio.wav import wav_duration
from ..models import Scene

logger = logging.getLogger(__name__)

DEFAULT_SCENE_DURATION = 5.0


@dataclass(frozen=True)
class TimelineEntry:
    """One subtitle cue."""

    index: int
    start: float
    end: float
    text: str

    @property
    def duration(self) -> float:
        return self.end - self.start


def scene_duration(scene: Scene) -> float:
    """Duration used for timing; unset, non-finite or non-positive estimates count as 5s."""
    duration = getattr(scene, "estimated_duration_seconds", None)
    try:
        duration = float(duration)
    except (TypeError, ValueError):
        return DEFAULT_SCENE_DURATION
    if not math.isfinite(duration) or duration <= 0:
        return DEFAULT_SCENE_DURATION
    return duration


def build_timeline(scenes: Sequence[Scene]) -> list[TimelineEntry]:
    """Lay scenes end to end, in order, starting at 0."""
    entries: list[TimelineEntry] = []
    current = 0.0
    for i, scene in enumerate(scenes):
        end = current + scene_duration(scene)
        entries.append(TimelineEntry(index=i, start=current, end=end, text=scene.text))
        current = end
    return entries


def total_duration(scenes: Sequence[Scene]) -> float:
    return sum(scene_duration(scene) for scene in scenes)


def format_srt_timestamp(seconds: float) -> str:
    """Format seconds as ``HH:MM:SS,mmm``."""
    total_ms = int(round(max(0.0, seconds) * 1000))
    hours = total_ms // 3_600_000
    minutes = (total_ms % 3_600_000) // 60_000
    secs = (total_ms % 60_000) // 1000
    ms = total_ms % 1000
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{ms:03d}"


def to_srt(entries: Iterable[TimelineEntry]) -> str:
    """Render cues as SubRip text, numbered from 1, each followed by a blank line."""
    blocks = []
    for number, entry in enumerate(entries, start=1):
        start = format_srt_timestamp(entry.start)
        end = format_srt_timestamp(entry.end)
        blocks.append(f"{number}\n{start} --> {end}\n{entry.text}\n\n")
    return "".join(blocks)


def scenes_to_srt(scenes: Sequence[Scene]) -> str:
    return to_srt(build_timeline(scenes))


def to_transcript(scenes: Sequence[Scene]) -> str:
    """Narration texts separated by blank lines, without timing."""
    return "\n\n".join(scene.text for scene in scenes)


def _local_path(reference: Optional[str]) -> Optional[Path]:
    if not reference or "://" in reference:
        return None
    path = Path(reference)
    return path if path.exists() else None


def sync_durations_to_audio(scenes: Sequence[Scene]) -> list[Scene]:
    """Replace estimates with measured narration length where a local WAV exists.

    Scenes without a readable local narration keep their estimate.
    """
    synced: list[Scene] = []
    for scene in scenes:
        path = _local_path(scene.audio_asset)
        if path is None:
            synced.append(scene)
            continue
        try:
            measured = round(wav_duration(path), 3)
        except (OSError, ValueError) as e:
            logger.warning(f"Cannot measure narration for scene {scene.index}: {e}")
            synced.append(scene)
            continue
        if measured <= 0:
            synced.append(scene)
            continue
        synced.append(scene.model_copy(update={"estimated_duration_seconds": measured}))
    return synced
