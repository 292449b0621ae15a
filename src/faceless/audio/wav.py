"""Wrap raw PCM narration in a RIFF/WAVE container."""

import io
import wave
from pathlib import Path
from typing import Union

WAV_HEADER_SIZE = 44

DEFAULT_SAMPLE_RATE = 24000
NUM_CHANNELS = 1
SAMPLE_WIDTH = 2  # 16-bit


def pcm_to_wav(pcm_data: bytes, sample_rate: int = DEFAULT_SAMPLE_RATE) -> bytes:
    """Prefix 16-bit mono PCM with a 44-byte WAV header.

    Args:
        pcm_data: Raw little-endian 16-bit mono samples.
        sample_rate: Samples per second.

    Returns:
        Playable WAV file bytes.
    """
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(NUM_CHANNELS)
        wf.setsampwidth(SAMPLE_WIDTH)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm_data)
    return buffer.getvalue()


def wav_duration(source: Union[bytes, Path, str]) -> float:
    """Return the playing time of a WAV file or WAV bytes.

    Raises:
        ValueError: If the data is not a readable RIFF/WAVE file.
    """
    target = str(source) if isinstance(source, (str, Path)) else io.BytesIO(source)
    try:
        with wave.open(target, "rb") as wf:
            frames = wf.getnframes()
            rate = wf.getframerate()
    except (wave.Error, EOFError) as e:
        raise ValueError(f"Not a WAV file: {e}") from e

    if rate <= 0:
        raise ValueError("WAV header has zero sample rate")
    return frames / rate
