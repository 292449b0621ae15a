"""Tests for preview playback synchronisation."""
from __future__ import annotations

import pytest

from faceless.errors import ValidationError
from faceless.models import MusicIntensity
from faceless.production import (
    MemoryAudioChannel,
    PlaybackState,
    PlaybackSynchronizer,
    music_volume,
)

from conftest import make_scenes


def _player(count: int = 3, music: str = "bed.mp3"):
    scenes = [
        s.model_copy(update={"audio_asset": f"n{s.index}.wav", "image_asset": f"i{s.index}.png"})
        for s in make_scenes(count)
    ]
    narration = MemoryAudioChannel({f"n{i}.wav": 2.0 for i in range(count)})
    bed = MemoryAudioChannel({music: 5.0})
    changes: list[int] = []
    player = PlaybackSynchronizer(scenes, narration, bed, on_scene_change=changes.append)
    narration.on_ended = player.on_narration_ended
    player.set_music(music, MusicIntensity.HIGH)
    return player, narration, bed, changes


def test_music_volume_mapping() -> None:
    assert music_volume(MusicIntensity.LOW) == 0.1
    assert music_volume("Medium") == 0.25
    assert music_volume(MusicIntensity.HIGH) == 0.5
    assert music_volume("Deafening") == 0.2
    assert music_volume(None) == 0.2


def test_set_music_loops_at_intensity_volume() -> None:
    _, _, bed, _ = _player()

    assert bed.source == "bed.mp3"
    assert bed.loop
    assert bed.volume == 0.5


def test_scenes_advance_automatically_then_finish_at_scene_zero() -> None:
    player, narration, bed, changes = _player()
    player.play()

    narration.advance(2.0)
    assert player.active_index == 1
    assert narration.source == "n1.wav"
    assert narration.playing

    narration.advance(2.0)
    narration.advance(2.0)

    assert player.state == PlaybackState.FINISHED
    assert player.active_index == 0
    assert changes == [1, 2, 0]
    assert not narration.playing
    assert not bed.playing
    assert bed.current_time == 0


def test_music_keeps_looping_across_scene_changes() -> None:
    player, narration, bed, _ = _player()
    player.play()

    for _ in range(4):
        bed.advance(1.0)
    narration.advance(2.0)
    bed.advance(2.0)

    assert player.active_index == 1
    assert bed.playing
    assert bed.current_time == pytest.approx(1.0)


def test_pause_and_resume_keep_positions() -> None:
    player, narration, bed, _ = _player()
    player.play()
    narration.advance(0.5)
    bed.advance(0.5)

    player.toggle()
    assert player.state == PlaybackState.PAUSED
    assert not narration.playing and not bed.playing

    player.toggle()
    assert player.is_playing
    assert narration.current_time == 0.5
    assert bed.current_time == 0.5


def test_select_scene_pauses_and_rewinds_music() -> None:
    player, narration, bed, _ = _player()
    player.play()
    bed.advance(3.0)

    player.select_scene(2)

    assert player.state == PlaybackState.PAUSED
    assert player.active_index == 2
    assert narration.source == "n2.wav"
    assert narration.current_time == 0
    assert bed.current_time == 0
    with pytest.raises(ValidationError):
        player.select_scene(3)


def test_select_scene_from_idle_rewinds_music() -> None:
    player, narration, bed, changes = _player()
    bed.current_time = 2.0

    player.select_scene(1)

    assert player.state == PlaybackState.PAUSED
    assert player.active_index == 1
    assert changes == [1]
    assert narration.source == "n1.wav"
    assert bed.current_time == 0
    assert not bed.playing


def test_select_scene_from_paused_rewinds_music() -> None:
    player, narration, bed, _ = _player()
    player.play()
    bed.advance(4.0)
    player.pause()
    assert bed.current_time == 4.0

    player.select_scene(0)

    assert player.state == PlaybackState.PAUSED
    assert player.active_index == 0
    assert narration.current_time == 0
    assert bed.current_time == 0
    assert not narration.playing and not bed.playing


def test_progress_is_percentage_of_narration() -> None:
    player, narration, _, _ = _player()
    player.play()
    narration.advance(0.5)

    assert player.on_time_update() == pytest.approx(25.0)


def test_progress_with_unknown_duration_divides_by_one() -> None:
    narration = MemoryAudioChannel()
    player = PlaybackSynchronizer(make_scenes(1), narration, MemoryAudioChannel())
    narration.current_time = 0.4

    assert player.on_time_update() == pytest.approx(40.0)


def test_scene_moved_keeps_active_scene_selected() -> None:
    player, _, _, _ = _player()
    player.select_scene(1)

    player.scene_moved(1, 0)
    assert player.active_index == 0

    player.scene_moved(1, 0)
    assert player.active_index == 1


def test_clear_music_and_play_without_scenes() -> None:
    player, _, bed, _ = _player()
    player.clear_music()
    player.play()

    assert bed.source == ""
    assert not bed.playing

    empty = PlaybackSynchronizer([], MemoryAudioChannel(), MemoryAudioChannel())
    empty.play()
    assert empty.state == PlaybackState.IDLE
