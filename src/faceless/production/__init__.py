"""Asset production, timing, playback and export."""

from .export import (
    default_snapshot_name,
    export_subtitles,
    load_snapshot,
    render_subtitles,
    save_snapshot,
)
from .pipeline import AssetPipeline, PassReport, needs_generation
from .playback import (
    AudioChannel,
    MemoryAudioChannel,
    PlaybackState,
    PlaybackSynchronizer,
    music_volume,
)
from .retry import FallbackPolicy, placeholder_image, retry_on_rate_limit
from .timeline import (
    TimelineEntry,
    build_timeline,
    format_srt_timestamp,
    scenes_to_srt,
    sync_durations_to_audio,
    to_srt,
    to_transcript,
    total_duration,
)

__all__ = [
    "default_snapshot_name",
    "export_subtitles",
    "load_snapshot",
    "render_subtitles",
    "save_snapshot",
    "AssetPipeline",
    "PassReport",
    "needs_generation",
    "AudioChannel",
    "MemoryAudioChannel",
    "PlaybackState",
    "PlaybackSynchronizer",
    "music_volume",
    "FallbackPolicy",
    "placeholder_image",
    "retry_on_rate_limit",
    "TimelineEntry",
    "build_timeline",
    "format_srt_timestamp",
    "scenes_to_srt",
    "sync_durations_to_audio",
    "to_srt",
    "to_transcript",
    "total_duration",
]
