"""Audio container helpers."""

from .wav import WAV_HEADER_SIZE, pcm_to_wav, wav_duration

__all__ = ["WAV_HEADER_SIZE", "pcm_to_wav", "wav_duration"]
