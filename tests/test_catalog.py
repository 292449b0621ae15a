import pytest

from faceless.errors import UploadError, ValidationError
from faceless.models import load_catalog
from faceless.models.catalog import CUSTOM_VOICE_ID, register_custom_voice, validate_audio_upload


def test_packaged_catalog_has_expected_entries() -> None:
    catalog = load_catalog()

    assert [v.id for v in catalog.voices] == ["v2", "v3", "v4", "v5"]
    assert len(catalog.music) == 4
    assert len(catalog.styles) == 27
    assert "English US" in catalog.languages


def test_resolve_voice_falls_back_to_first_voice() -> None:
    catalog = load_catalog()

    assert catalog.resolve_voice("v4").provider_voice == "Charon"
    assert catalog.resolve_voice("").id == "v2"
    assert catalog.resolve_voice("missing").id == "v2"


def test_custom_voice_is_narrated_by_fenrir() -> None:
    profile = load_catalog().resolve_voice(CUSTOM_VOICE_ID)

    assert profile.is_cloned
    assert profile.name == "Custom Clone"
    assert profile.provider_voice == "Fenrir"


def test_style_suffix_joins_names_with_intensity() -> None:
    catalog = load_catalog()

    assert catalog.style_suffix(["anime", "horror"], "Extreme") == (
        ", Anime, Horror style, Extreme intensity"
    )
    assert catalog.style_suffix([], "Soft") == ""
    assert catalog.style_names(["anime", "unknown"]) == ["Anime"]


def test_require_helpers_reject_unknown_ids() -> None:
    catalog = load_catalog()

    with pytest.raises(ValidationError):
        catalog.require_voice("v9")
    with pytest.raises(ValidationError):
        catalog.require_track("m9")
    with pytest.raises(ValidationError):
        catalog.require_style("watercolour")


def test_validate_audio_upload(tmp_path) -> None:
    good = tmp_path / "bed.mp3"
    good.write_bytes(b"ID3\x03")
    empty = tmp_path / "empty.wav"
    empty.write_bytes(b"")
    text = tmp_path / "notes.txt"
    text.write_text("hi")

    assert validate_audio_upload(good) == good
    with pytest.raises(UploadError) as exc:
        validate_audio_upload(empty)
    assert exc.value.code == "upload_empty"
    with pytest.raises(UploadError) as exc:
        validate_audio_upload(text)
    assert exc.value.code == "upload_type"
    with pytest.raises(UploadError) as exc:
        validate_audio_upload(tmp_path / "missing.mp3")
    assert exc.value.code == "upload_missing"


def test_register_custom_voice_requires_a_valid_sample(tmp_path) -> None:
    sample = tmp_path / "me.wav"
    sample.write_bytes(b"RIFF....")

    assert register_custom_voice(sample).id == CUSTOM_VOICE_ID
    with pytest.raises(UploadError):
        register_custom_voice(tmp_path / "nobody.wav")
