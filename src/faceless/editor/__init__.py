"""Audio assembly."""

from .audio import (
    load_audio,
    loop_audio,
    mix_soundtrack,
)

__all__ = [
    "load_audio",
    "loop_audio",
    "mix_soundtrack",
]
