"""CLI entry point for the faceless video engine."""

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

import typer

from . import __version__
from .config import config
from .errors import FacelessError
from .models import (
    AspectRatio,
    MusicIntensity,
    ProjectState,
    ProjectStore,
    Step,
    StyleIntensity,
    VIDEO_DURATIONS,
    can_enter,
    load_catalog,
)
from .models.catalog import CUSTOM_MUSIC_ID, register_custom_voice, validate_audio_upload
from .models.project import move_scene, toggle_style, update_scene_duration, update_scene_text
from .production import export as exporter
from .production.timeline import scene_duration, sync_durations_to_audio, total_duration

app = typer.Typer(
    name="faceless",
    help="AI-powered faceless narrated video builder",
    no_args_is_help=True
)

PROJECT_OPTION = typer.Option(
    Path("project.afve"),
    "--project",
    "-p",
    help="Project snapshot file",
    dir_okay=False,
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable verbose logging")


class ExportFormat(str, Enum):
    """Export file formats."""
    SRT = "srt"
    TXT = "txt"
    AFVE = "afve"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"faceless version {__version__}")
        raise typer.Exit()


def fail(message: str) -> None:
    typer.echo(f"❌ {message}")
    raise typer.Exit(1)


def load_store(project: Path) -> ProjectStore:
    if not project.exists():
        fail(f"No project found at {project}\n   Run 'faceless new' to create one")
    try:
        return ProjectStore(exporter.load_snapshot(project))
    except FacelessError as e:
        fail(e.message)


def save_store(store: ProjectStore, project: Path) -> None:
    exporter.save_snapshot(store.state, project)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """Faceless Video Engine - narrated videos from a topic or a script."""
    pass


@app.command()
def new(
    topic: str = typer.Option("", "--topic", "-t", help="What the video is about"),
    language: str = typer.Option("English US", "--language", "-l", help="Narration language"),
    aspect_ratio: AspectRatio = typer.Option(
        AspectRatio.PORTRAIT, "--aspect-ratio", "-a", help="Output aspect ratio"
    ),
    duration: str = typer.Option("1min", "--duration", "-d", help="Target duration bucket"),
    style: Optional[List[str]] = typer.Option(
        None, "--style", "-s", help="Visual style id (repeat, max 3)"
    ),
    style_intensity: StyleIntensity = typer.Option(
        StyleIntensity.MEDIUM, "--style-intensity", help="Visual style intensity"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing project"),
    project: Path = PROJECT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Create a new, empty project."""
    setup_logging(verbose)
    if project.exists() and not force:
        fail(f"{project} already exists (use --force to overwrite)")

    catalog = load_catalog()
    if language not in catalog.languages:
        fail(f"Unsupported language: {language}")
    if duration not in VIDEO_DURATIONS:
        fail(f"Unknown duration '{duration}'. Choose from: {', '.join(VIDEO_DURATIONS)}")

    store = ProjectStore()
    try:
        store.update(
            topic=topic,
            language=language,
            aspect_ratio=aspect_ratio,
            target_duration=duration,
            style_intensity=style_intensity,
        )
        for style_id in style or []:
            catalog.require_style(style_id)
            store.update(selected_styles=toggle_style(store.state, style_id))
    except FacelessError as e:
        fail(e.message)

    save_store(store, project)
    typer.echo(f"✅ Project created: {project}")
    if store.state.selected_styles:
        typer.echo(f"   Styles: {', '.join(catalog.style_names(store.state.selected_styles))}")


@app.command()
def script(
    topic: Optional[str] = typer.Option(None, "--topic", "-t", help="Write a script about this topic"),
    script_file: Optional[Path] = typer.Option(
        None, "--script-file", "-f", help="Adapt this script instead", exists=True, dir_okay=False
    ),
    duration: Optional[str] = typer.Option(None, "--duration", "-d", help="Target duration bucket"),
    project: Path = PROJECT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Generate the scene script from a topic or a pasted script."""
    from .agents import ScriptRequest
    from .provider import GoogleContentProvider

    setup_logging(verbose)
    store = load_store(project)
    catalog = load_catalog()

    changes = {}
    if topic is not None:
        changes["topic"] = topic
    if duration is not None:
        changes["target_duration"] = duration
    if script_file is not None:
        changes["raw_script"] = script_file.read_text(encoding="utf-8")

    try:
        if changes:
            store.update(**changes)
        request = ScriptRequest.from_state(
            store.state, catalog, use_raw_script=script_file is not None
        )
        request.validate()

        if request.uses_raw_script:
            typer.echo(f"📝 Adapting script ({len(request.raw_script.split())} words)")
        else:
            typer.echo(f"🎬 Writing script: {request.topic}")
            typer.echo(f"   Target duration: {request.target_duration}")
        typer.echo(f"   Language: {request.language}")

        scenes = GoogleContentProvider().generate_script(request)
        store.update(scenes=scenes)
    except FacelessError as e:
        fail(f"Failed to generate script: {e.message}")

    save_store(store, project)
    typer.echo(f"\n✅ {len(scenes)} scenes, ~{total_duration(scenes):.1f}s")
    for scene in scenes:
        preview = scene.text[:70] + "..." if len(scene.text) > 70 else scene.text
        typer.echo(f"   [{scene.index + 1}] {scene_duration(scene):.1f}s  {preview}")


@app.command()
def voice(
    voice_id: Optional[str] = typer.Option(None, "--voice", help="Narrator voice id"),
    clone_sample: Optional[Path] = typer.Option(
        None, "--clone-sample", help="Voice sample for a custom voice"
    ),
    music: Optional[str] = typer.Option(None, "--music", "-m", help="Music track id, or 'none'"),
    music_file: Optional[Path] = typer.Option(None, "--music-file", help="Custom music file"),
    intensity: Optional[MusicIntensity] = typer.Option(
        None, "--intensity", "-i", help="Background music level"
    ),
    preview: bool = typer.Option(False, "--preview", help="Synthesize a sample of the voice"),
    project: Path = PROJECT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Choose the narrator voice and background music."""
    setup_logging(verbose)
    store = load_store(project)
    catalog = load_catalog()

    changes = {}
    try:
        if clone_sample is not None:
            profile = register_custom_voice(clone_sample)
            changes["selected_voice_id"] = profile.id
        elif voice_id is not None:
            changes["selected_voice_id"] = catalog.require_voice(voice_id).id

        if music_file is not None:
            validate_audio_upload(music_file)
            changes["selected_music_track_id"] = CUSTOM_MUSIC_ID
            changes["custom_music_path"] = str(music_file)
        elif music == "none":
            changes["selected_music_track_id"] = None
        elif music is not None:
            changes["selected_music_track_id"] = catalog.require_track(music).id

        if intensity is not None:
            changes["music_intensity"] = intensity

        if changes:
            store.update(**changes)
    except FacelessError as e:
        fail(e.message)

    state = store.state
    selected = catalog.resolve_voice(state.selected_voice_id)
    typer.echo(f"🎙️  Voice: {selected.name} ({selected.style})")
    typer.echo(f"🎵 Music: {_music_label(state)} ({state.music_intensity.value})")

    if preview:
        from .provider import GoogleContentProvider

        try:
            path = GoogleContentProvider().preview_voice(selected.name, selected.provider_voice)
        except FacelessError as e:
            fail(f"Voice preview failed: {e.message}")
        typer.echo(f"   Preview: {path}")

    save_store(store, project)


def _music_label(state: ProjectState) -> str:
    if not state.selected_music_track_id:
        return "none"
    if state.selected_music_track_id == CUSTOM_MUSIC_ID:
        return f"custom ({state.custom_music_path})"
    track = load_catalog().track(state.selected_music_track_id)
    return track.name if track else state.selected_music_track_id


def _music_source(state: ProjectState) -> Optional[str]:
    if state.selected_music_track_id == CUSTOM_MUSIC_ID:
        return state.custom_music_path
    if state.selected_music_track_id:
        track = load_catalog().track(state.selected_music_track_id)
        return track.url if track else None
    return None


@app.command()
def produce(
    project: Path = PROJECT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Generate every missing scene image and narration (safe to re-run)."""
    from .production import AssetPipeline, needs_generation
    from .provider import GoogleContentProvider

    setup_logging(verbose)
    store = load_store(project)

    if not can_enter(store.state, Step.VISUALS):
        fail("Generate a script and choose a voice first")
    if not needs_generation(store.state.scenes):
        typer.echo("✅ All scenes already have images and narration")
        raise typer.Exit(0)

    try:
        config.validate_google_required()
        pipeline = AssetPipeline(GoogleContentProvider(), store)
    except FacelessError as e:
        fail(f"Configuration error: {e.message}")

    # Checkpoint after every asset so an interrupted run can resume.
    store.subscribe(lambda state: exporter.save_snapshot(state, project))

    typer.echo(f"⏳ Producing assets for {len(store.state.scenes)} scenes...")
    report = pipeline.run()

    typer.echo(f"\n📊 Summary:")
    typer.echo(f"   Images: {report.images_generated} generated, "
               f"{report.images_placeholder} placeholders, {report.images_failed} missing")
    typer.echo(f"   Narration: {report.audio_generated} generated, {report.audio_failed} failed")

    if not report.complete:
        typer.echo("\n⚠️  Some scenes are incomplete. Run 'faceless produce' again to retry them.")
        raise typer.Exit(1)
    typer.echo("\n✅ All scenes ready")


@app.command()
def status(project: Path = PROJECT_OPTION) -> None:
    """Show project status."""
    store = load_store(project)
    state = store.state
    catalog = load_catalog()

    typer.echo(f"📁 Project: {state.topic or '(no topic)'}")
    typer.echo(f"   Language: {state.language}")
    typer.echo(f"   Aspect ratio: {state.aspect_ratio.value}")
    typer.echo(f"   Target duration: {state.target_duration}")
    if state.selected_styles:
        typer.echo(f"   Styles: {', '.join(catalog.style_names(state.selected_styles))} "
                   f"({state.style_intensity.value})")
    if state.selected_voice_id:
        typer.echo(f"   Voice: {catalog.resolve_voice(state.selected_voice_id).name}")
    typer.echo(f"   Music: {_music_label(state)}")
    typer.echo(f"   Scenes: {len(state.scenes)} ({total_duration(state.scenes):.1f}s)")

    if state.scenes:
        typer.echo("\n📽️  Scenes:")
    for scene in state.scenes:
        icon = "✅" if scene.is_complete else "⏳"
        missing = f"  missing: {', '.join(scene.missing_assets)}" if scene.missing_assets else ""
        typer.echo(f"   {icon} {scene.index + 1}: {scene_duration(scene):.1f}s{missing}")

    ready = [step.value for step in Step if can_enter(state, step)]
    typer.echo(f"\n   Available steps: {', '.join(ready)}")


@app.command()
def edit(
    move: Optional[Tuple[int, str]] = typer.Option(
        None, "--move", help="Scene number and direction (up/down)"
    ),
    text: Optional[Tuple[int, str]] = typer.Option(
        None, "--text", help="Scene number and new narration text"
    ),
    duration: Optional[Tuple[int, float]] = typer.Option(
        None, "--duration", help="Scene number and duration in seconds"
    ),
    sync_audio: bool = typer.Option(
        False, "--sync-audio", help="Use measured narration lengths as durations"
    ),
    project: Path = PROJECT_OPTION,
) -> None:
    """Reorder scenes or change their text and timing."""
    store = load_store(project)
    scenes = store.scenes

    try:
        if move is not None:
            scenes = move_scene(scenes, move[0] - 1, move[1])
        if text is not None:
            scenes = update_scene_text(scenes, text[0] - 1, text[1])
        if duration is not None:
            scenes = update_scene_duration(scenes, duration[0] - 1, duration[1])
        if sync_audio:
            scenes = sync_durations_to_audio(scenes)
        store.replace_scenes(scenes)
    except FacelessError as e:
        fail(e.message)

    save_store(store, project)
    typer.echo(f"✅ Updated {len(scenes)} scenes ({total_duration(scenes):.1f}s)")


@app.command("export")
def export_command(
    output_format: ExportFormat = typer.Option(
        ExportFormat.SRT, "--format", "-f", help="Export format"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path"),
    project: Path = PROJECT_OPTION,
) -> None:
    """Export subtitles, a transcript or a shareable project snapshot."""
    store = load_store(project)
    state = store.state

    if output_format == ExportFormat.AFVE:
        path = output or Path(exporter.default_snapshot_name(state))
        exporter.save_snapshot(state, path)
    else:
        if not state.scenes:
            fail("Project has no scenes")
        path = output or Path(f"subtitles.{output_format.value}")
        exporter.export_subtitles(state, path, output_format.value)

    typer.echo(f"✅ Exported: {path}")


@app.command()
def preview(
    project: Path = PROJECT_OPTION,
    step: float = typer.Option(0.5, "--step", help="Simulation tick in seconds", min=0.01),
) -> None:
    """Walk through playback scene by scene without playing sound."""
    from .audio.wav import wav_duration
    from .production import MemoryAudioChannel, PlaybackState, PlaybackSynchronizer

    store = load_store(project)
    state = store.state
    if not can_enter(state, Step.PREVIEW):
        fail("Every scene needs an image and narration first (run 'faceless produce')")

    durations = {}
    for scene in state.scenes:
        try:
            durations[scene.audio_asset] = wav_duration(scene.audio_asset)
        except (OSError, ValueError):
            durations[scene.audio_asset] = scene_duration(scene)

    narration = MemoryAudioChannel(durations)
    music = MemoryAudioChannel()
    elapsed = 0.0

    def announce(index: int) -> None:
        if player.state == PlaybackState.PLAYING:
            scene = state.scenes[index]
            typer.echo(f"   {elapsed:7.1f}s ▶ Scene {index + 1}: {scene.text[:60]}")

    player = PlaybackSynchronizer(state.scenes, narration, music, on_scene_change=announce)
    narration.on_ended = player.on_narration_ended
    player.set_music(_music_source(state), state.music_intensity)

    typer.echo(f"🎞️  Preview ({len(state.scenes)} scenes, music: {_music_label(state)}, "
               f"volume {music.volume:.2f})")
    player.play()
    announce(0)
    while player.state == PlaybackState.PLAYING:
        elapsed += step
        narration.advance(step)
        music.advance(step)
        player.on_time_update()

    typer.echo(f"✅ Finished after {elapsed:.1f}s")


@app.command()
def mixdown(
    output: Path = typer.Option(Path("output/soundtrack.mp3"), "--output", "-o", help="Audio file"),
    music_file: Optional[Path] = typer.Option(None, "--music-file", help="Override music bed"),
    project: Path = PROJECT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Render narration and music into one audio file."""
    from .editor import mix_soundtrack
    from .production import music_volume

    setup_logging(verbose)
    state = load_store(project).state
    if not can_enter(state, Step.PREVIEW):
        fail("Every scene needs narration first (run 'faceless produce')")

    narrations = [Path(scene.audio_asset) for scene in state.scenes]
    music_path = music_file
    if music_path is None and state.selected_music_track_id == CUSTOM_MUSIC_ID:
        music_path = Path(state.custom_music_path)
    elif music_path is None and state.selected_music_track_id:
        typer.echo("⚠️  Stock music streams are not mixed; pass --music-file to include music")

    try:
        mix_soundtrack(
            narrations,
            output,
            music_path=music_path,
            music_volume=music_volume(state.music_intensity),
        )
    except FacelessError as e:
        fail(e.message)
    typer.echo(f"✅ Soundtrack: {output}")


@app.command()
def thumbnail(
    title: Optional[str] = typer.Option(None, "--title", help="Video title (defaults to topic)"),
    channel: str = typer.Option("", "--channel", help="Channel URL for style context"),
    output: Path = typer.Option(Path("output/thumbnail.png"), "--output", "-o"),
    project: Path = PROJECT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Generate a 16:9 thumbnail image."""
    from .provider import GoogleContentProvider

    setup_logging(verbose)
    state = load_store(project).state
    video_title = title or state.topic
    if not video_title:
        fail("No title given and the project has no topic")

    try:
        path = GoogleContentProvider().generate_thumbnail(video_title, output, channel_url=channel)
    except FacelessError as e:
        fail(f"Thumbnail generation failed: {e.message}")
    typer.echo(f"✅ Thumbnail: {path}")


@app.command()
def catalog() -> None:
    """List voices, music tracks, visual styles and languages."""
    data = load_catalog()
    typer.echo("🎙️  Voices:")
    for v in data.voices:
        typer.echo(f"   {v.id:<4} {v.name:<8} {v.gender:<7} {v.style}")
    typer.echo("\n🎵 Music:")
    for t in data.music:
        typer.echo(f"   {t.id:<4} {t.name:<22} {t.mood}")
    typer.echo("\n🎨 Styles:")
    for s in data.styles:
        typer.echo(f"   {s.id:<16} {s.name:<20} {s.description}")
    typer.echo(f"\n🌐 Languages: {', '.join(data.languages)}")


if __name__ == "__main__":
    app()
