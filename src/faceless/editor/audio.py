"""Soundtrack mixdown: narration over a ducked, looping music bed."""

import logging
from pathlib import Path
from typing import Optional, Sequence

from moviepy import AudioFileClip, CompositeAudioClip, concatenate_audioclips
from moviepy.audio.fx import AudioFadeOut

from ..errors import UploadError

logger = logging.getLogger(__name__)


def load_audio(audio_path: Path) -> AudioFileClip:
    """Load an audio file.

    Raises:
        UploadError: If the audio file doesn't exist.
    """
    if not audio_path.exists():
        raise UploadError(f"Audio file not found: {audio_path}", code="upload_missing")

    return AudioFileClip(str(audio_path))


def loop_audio(
    audio: AudioFileClip,
    target_duration: float
) -> CompositeAudioClip:
    """Loop audio to match a target duration.

    Args:
        audio: Audio clip to loop.
        target_duration: Target duration in seconds.

    Returns:
        Audio clip looped to target duration.
    """
    if audio.duration >= target_duration:
        return audio.subclipped(0, target_duration)

    loops_needed = int(target_duration / audio.duration) + 1
    clips = [audio.with_start(i * audio.duration) for i in range(loops_needed)]

    composite = CompositeAudioClip(clips)
    return composite.subclipped(0, target_duration)


def mix_soundtrack(
    narrations: Sequence[Path],
    output_path: Path,
    music_path: Optional[Path] = None,
    music_volume: float = 0.25,
    fade_out: float = 2.0,
) -> Path:
    """Concatenate narrations in order and lay the music bed under them.

    Args:
        narrations: Narration files in scene order.
        output_path: Audio file to write (format from the extension).
        music_path: Optional background music, looped to the narration length.
        music_volume: Volume factor for the music bed.
        fade_out: Music fade-out at the end (seconds).

    Returns:
        ``output_path``.
    """
    if not narrations:
        raise UploadError("No narration audio to mix", code="no_narration")

    clips = [load_audio(path) for path in narrations]
    voice = concatenate_audioclips(clips)
    tracks = [voice]
    music = None

    try:
        if music_path is not None:
            music = load_audio(music_path)
            bed = loop_audio(music, voice.duration).with_volume_scaled(music_volume)
            if fade_out > 0:
                bed = bed.with_effects([AudioFadeOut(min(fade_out, voice.duration))])
            tracks.append(bed)

        mix = CompositeAudioClip(tracks) if len(tracks) > 1 else voice
        output_path.parent.mkdir(parents=True, exist_ok=True)
        mix.write_audiofile(str(output_path), fps=44100, logger=None)
        logger.info(f"Wrote {voice.duration:.1f}s soundtrack to {output_path}")
    finally:
        for clip in clips:
            clip.close()
        if music is not None:
            music.close()

    return output_path
