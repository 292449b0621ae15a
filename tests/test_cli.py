"""Tests for the command line workflow."""
from __future__ import annotations

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from faceless import __version__
from faceless.audio.wav import pcm_to_wav
from faceless.cli import app
from faceless.config import config
from faceless.models import ProjectState
from faceless.production.export import load_snapshot, save_snapshot

from conftest import FakeProvider, make_scenes

runner = CliRunner()


@pytest.fixture
def project(tmp_path):
    path = tmp_path / "project.afve"
    save_snapshot(
        ProjectState(topic="Deep sea creatures", scenes=make_scenes(3), selected_voice_id="v2"),
        path,
    )
    return path


@pytest.fixture
def produced(tmp_path):
    scenes = []
    for scene in make_scenes(2):
        audio = tmp_path / f"n{scene.index}.wav"
        audio.write_bytes(pcm_to_wav(b"\x00" * 48000))
        scenes.append(scene.model_copy(update={"audio_asset": str(audio), "image_asset": "i.png"}))
    path = tmp_path / "produced.afve"
    save_snapshot(ProjectState(topic="Tides", scenes=scenes, selected_voice_id="v3"), path)
    return path


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_new_creates_project_with_styles(tmp_path) -> None:
    path = tmp_path / "p.afve"

    result = runner.invoke(app, [
        "new", "--topic", "Pyramids", "--duration", "5min", "--aspect-ratio", "16:9",
        "--style", "anime", "--style", "horror", "-p", str(path),
    ])

    assert result.exit_code == 0, result.output
    state = load_snapshot(path)
    assert state.topic == "Pyramids"
    assert state.target_duration == "5min"
    assert state.aspect_ratio.value == "16:9"
    assert state.selected_styles == ["anime", "horror"]


def test_new_refuses_to_overwrite_and_rejects_bad_input(project) -> None:
    assert runner.invoke(app, ["new", "-p", str(project)]).exit_code == 1

    result = runner.invoke(app, ["new", "--force", "--style", "watercolour", "-p", str(project)])
    assert result.exit_code == 1
    assert "Unknown visual style" in result.output

    result = runner.invoke(app, ["new", "--force", "--duration", "6min", "-p", str(project)])
    assert result.exit_code == 1


def test_missing_project_is_reported(tmp_path) -> None:
    result = runner.invoke(app, ["status", "-p", str(tmp_path / "nope.afve")])

    assert result.exit_code == 1
    assert "No project found" in result.output


def test_script_from_topic_stores_scenes(project) -> None:
    provider = FakeProvider(scenes=make_scenes(4))

    with patch("faceless.provider.GoogleContentProvider", return_value=provider):
        result = runner.invoke(app, ["script", "--topic", "Jellyfish", "-p", str(project)])

    assert result.exit_code == 0, result.output
    assert provider.script_calls[0].topic == "Jellyfish"
    assert not provider.script_calls[0].uses_raw_script
    assert len(load_snapshot(project).scenes) == 4


def test_script_from_file_uses_raw_script(project, tmp_path) -> None:
    script_file = tmp_path / "script.txt"
    script_file.write_text("My own words about the ocean.", encoding="utf-8")
    provider = FakeProvider(scenes=make_scenes(1))

    with patch("faceless.provider.GoogleContentProvider", return_value=provider):
        result = runner.invoke(app, ["script", "--script-file", str(script_file), "-p", str(project)])

    assert result.exit_code == 0, result.output
    assert provider.script_calls[0].raw_script == "My own words about the ocean."


def test_voice_and_music_selection(project, tmp_path) -> None:
    result = runner.invoke(app, [
        "voice", "--voice", "v4", "--music", "m2", "--intensity", "High", "-p", str(project),
    ])

    assert result.exit_code == 0, result.output
    state = load_snapshot(project)
    assert state.selected_voice_id == "v4"
    assert state.selected_music_track_id == "m2"
    assert state.music_intensity.value == "High"

    bed = tmp_path / "bed.mp3"
    bed.write_bytes(b"ID3")
    result = runner.invoke(app, ["voice", "--music-file", str(bed), "-p", str(project)])
    assert result.exit_code == 0, result.output
    assert load_snapshot(project).custom_music_path == str(bed)


def test_voice_rejects_unknown_voice(project) -> None:
    result = runner.invoke(app, ["voice", "--voice", "v9", "-p", str(project)])

    assert result.exit_code == 1
    assert "Unknown voice" in result.output


def test_produce_fills_assets_and_checkpoints(project, monkeypatch) -> None:
    monkeypatch.setattr(config, "google_cloud_project", "proj")
    monkeypatch.setattr(config, "image_throttle_delay", 0.0)
    monkeypatch.setattr(config, "image_retry_backoff", 0.0)
    provider = FakeProvider()

    with patch("faceless.provider.GoogleContentProvider", return_value=provider):
        result = runner.invoke(app, ["produce", "-p", str(project)])

    assert result.exit_code == 0, result.output
    state = load_snapshot(project)
    assert state.is_production_complete
    assert state.scenes[2].image_asset == "img-3.png"


def test_produce_reports_incomplete_scenes(project, monkeypatch) -> None:
    from faceless.errors import ProviderError

    monkeypatch.setattr(config, "google_cloud_project", "proj")
    monkeypatch.setattr(config, "image_throttle_delay", 0.0)
    provider = FakeProvider(speech_plan=[ProviderError("tts down")])

    with patch("faceless.provider.GoogleContentProvider", return_value=provider):
        result = runner.invoke(app, ["produce", "-p", str(project)])

    assert result.exit_code == 1
    assert "incomplete" in result.output
    assert load_snapshot(project).scenes[0].audio_asset is None


def test_produce_rejects_unknown_fallback_setting(project, monkeypatch) -> None:
    monkeypatch.setattr(config, "google_cloud_project", "proj")
    monkeypatch.setattr(config, "image_fallback", "sometimes")
    provider = FakeProvider()

    with patch("faceless.provider.GoogleContentProvider", return_value=provider):
        result = runner.invoke(app, ["produce", "-p", str(project)])

    assert result.exit_code == 1
    assert "FACELESS_IMAGE_FALLBACK" in result.output
    assert provider.image_calls == []


def test_produce_requires_voice(tmp_path) -> None:
    path = tmp_path / "p.afve"
    save_snapshot(ProjectState(scenes=make_scenes(1)), path)

    result = runner.invoke(app, ["produce", "-p", str(path)])

    assert result.exit_code == 1


def test_edit_moves_and_rewrites_scenes(project) -> None:
    result = runner.invoke(app, [
        "edit", "--move", "3", "up", "--text", "1", "Fresh opening", "--duration", "2", "9.5",
        "-p", str(project),
    ])

    assert result.exit_code == 0, result.output
    scenes = load_snapshot(project).scenes
    assert [s.text for s in scenes] == ["Fresh opening", "Scene 3 narration", "Scene 2 narration"]
    assert scenes[1].estimated_duration_seconds == 9.5
    assert [s.index for s in scenes] == [0, 1, 2]


def test_edit_rejects_bad_scene_number(project) -> None:
    result = runner.invoke(app, ["edit", "--move", "7", "up", "-p", str(project)])

    assert result.exit_code == 1


def test_edit_rejects_infinite_duration(project) -> None:
    before = load_snapshot(project).scenes[0].estimated_duration_seconds

    result = runner.invoke(app, ["edit", "--duration", "1", "inf", "-p", str(project)])

    assert result.exit_code == 1
    assert load_snapshot(project).scenes[0].estimated_duration_seconds == before


def test_export_formats(project, tmp_path) -> None:
    srt = tmp_path / "subs.srt"
    txt = tmp_path / "script.txt"
    snapshot = tmp_path / "copy.afve"

    assert runner.invoke(app, ["export", "-o", str(srt), "-p", str(project)]).exit_code == 0
    assert runner.invoke(app, ["export", "-f", "txt", "-o", str(txt), "-p", str(project)]).exit_code == 0
    assert runner.invoke(app, ["export", "-f", "afve", "-o", str(snapshot), "-p", str(project)]).exit_code == 0

    assert srt.read_text(encoding="utf-8").startswith("1\n00:00:00,000 --> 00:00:05,000\n")
    assert txt.read_text(encoding="utf-8").count("\n\n") == 2
    assert load_snapshot(snapshot).topic == "Deep sea creatures"


def test_status_lists_scenes(project) -> None:
    result = runner.invoke(app, ["status", "-p", str(project)])

    assert result.exit_code == 0
    assert "Deep sea creatures" in result.output
    assert "missing: image, audio" in result.output
    assert "Available steps: script, voice, visuals" in result.output


def test_preview_walks_every_scene(produced) -> None:
    result = runner.invoke(app, ["preview", "-p", str(produced)])

    assert result.exit_code == 0, result.output
    assert "Scene 1:" in result.output
    assert "Scene 2:" in result.output
    assert "Finished after 2.0s" in result.output


def test_preview_requires_produced_scenes(project) -> None:
    assert runner.invoke(app, ["preview", "-p", str(project)]).exit_code == 1


def test_catalog_lists_voices_and_styles() -> None:
    result = runner.invoke(app, ["catalog"])

    assert result.exit_code == 0
    assert "Fenrir" in result.output
    assert "Cyberpunk" in result.output
    assert "English US" in result.output
