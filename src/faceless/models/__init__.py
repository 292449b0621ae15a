"""Data models for the faceless video engine."""

from .scene import Scene
from .project import (
    AspectRatio,
    MusicIntensity,
    ProjectState,
    ProjectStore,
    Step,
    StyleIntensity,
    VIDEO_DURATIONS,
    can_enter,
)
from .catalog import Catalog, MusicTrack, VisualStyle, VoiceProfile, load_catalog

__all__ = [
    "Scene",
    "AspectRatio",
    "MusicIntensity",
    "ProjectState",
    "ProjectStore",
    "Step",
    "StyleIntensity",
    "VIDEO_DURATIONS",
    "can_enter",
    "Catalog",
    "MusicTrack",
    "VisualStyle",
    "VoiceProfile",
    "load_catalog",
]
