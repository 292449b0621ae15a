"""Subtitle, transcript and project snapshot files."""

import logging
import re
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from ..errors import UploadError, ValidationError
from ..models import ProjectState
from .timeline import scenes_to_srt, to_transcript

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".afve"
SUBTITLE_FORMATS = ("srt", "txt")


def default_snapshot_name(state: ProjectState) -> str:
    """``project-<first 10 chars of topic>.afve``."""
    stem = re.sub(r"[^\w\- ]+", "", state.topic[:10]).strip()
    return f"project-{stem}{SNAPSHOT_SUFFIX}"


def render_subtitles(state: ProjectState, fmt: str = "srt") -> str:
    if fmt == "srt":
        return scenes_to_srt(state.scenes)
    if fmt == "txt":
        return to_transcript(state.scenes)
    raise ValidationError(
        f"Unknown subtitle format '{fmt}'. Use one of: {', '.join(SUBTITLE_FORMATS)}",
        code="bad_format",
    )


def export_subtitles(state: ProjectState, path: Path, fmt: str = "srt") -> Path:
    """Write ``.srt`` subtitles or a plain ``.txt`` transcript."""
    content = render_subtitles(state, fmt)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info(f"Wrote {fmt} subtitles for {len(state.scenes)} scenes to {path}")
    return path


def save_snapshot(state: ProjectState, path: Path) -> Path:
    """Serialize the full project state as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(state.model_dump_json(indent=2), encoding="utf-8")
    logger.debug(f"Saved project snapshot v{state.version} to {path}")
    return path


def load_snapshot(path: Path) -> ProjectState:
    """Read a snapshot written by :func:`save_snapshot`.

    Raises:
        UploadError: If the file is missing or not a valid snapshot.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise UploadError(f"Cannot read project snapshot {path}: {e}", code="upload_unreadable") from e

    try:
        return ProjectState.model_validate_json(raw)
    except PydanticValidationError as e:
        raise UploadError(f"Invalid project snapshot {path}: {e}", code="upload_invalid") from e
