"""Sequential per-scene image and narration generation."""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..config import config
from ..errors import ConfigError
from ..models import Catalog, ProjectStore, Scene, load_catalog
from ..provider import ContentProvider
from .retry import FallbackPolicy, placeholder_image, retry_on_rate_limit, should_fallback

logger = logging.getLogger(__name__)


def needs_generation(scenes: Sequence[Scene]) -> bool:
    """Return True if any scene is still missing an image or narration."""
    return any(not scene.is_complete for scene in scenes)


@dataclass
class PassReport:
    """Outcome of one generation pass."""

    scenes_visited: int = 0
    images_generated: int = 0
    images_placeholder: int = 0
    images_failed: int = 0
    audio_generated: int = 0
    audio_failed: int = 0
    skipped: bool = False
    complete: bool = False


class AssetPipeline:
    """Fills every missing scene image and narration, one request at a time.

    Scenes are visited strictly in order and assets that already exist are never
    regenerated, so a pass can be repeated after partial failure to fill only
    what is still missing. Each resolved asset is published to the store
    immediately as a fresh scene list. Provider failures never escape ``run``:

    - images are retried once after a rate limit, then replaced by a placeholder
      according to the fallback policy;
    - narration failures leave the scene without audio.

    A second call while a pass is running returns a skipped report.
    """

    def __init__(
        self,
        provider: ContentProvider,
        store: ProjectStore,
        catalog: Optional[Catalog] = None,
        retry_backoff: Optional[float] = None,
        throttle_delay: Optional[float] = None,
        fallback: Optional[FallbackPolicy] = None,
        placeholder_template: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._provider = provider
        self._store = store
        self._catalog = catalog or load_catalog()
        self._retry_backoff = config.image_retry_backoff if retry_backoff is None else retry_backoff
        self._throttle_delay = config.image_throttle_delay if throttle_delay is None else throttle_delay
        try:
            self._fallback = FallbackPolicy(fallback or config.image_fallback)
        except ValueError as e:
            raise ConfigError(f"Unknown image fallback policy: {e}", code="bad_config") from e
        self._placeholder_template = placeholder_template or config.placeholder_url_template
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def run(self) -> PassReport:
        """Run a pass with the voice and styles selected in the project."""
        state = self._store.state
        voice = self._catalog.resolve_voice(state.selected_voice_id)
        suffix = self._catalog.style_suffix(state.selected_styles, state.style_intensity.value)
        return self.generate_missing(voice.provider_voice, suffix)

    def generate_missing(self, voice_name: str, style_suffix: str = "") -> PassReport:
        """Fill missing assets of every scene once.

        Args:
            voice_name: Provider voice used for narration.
            style_suffix: Text appended to each visual prompt.

        Returns:
            Counts of what was generated, substituted or left missing.
        """
        if self._running:
            logger.warning("Asset generation already in progress; ignoring request")
            return PassReport(skipped=True)

        self._running = True
        try:
            return self._run_pass(voice_name, style_suffix)
        finally:
            self._running = False

    def _run_pass(self, voice_name: str, style_suffix: str) -> PassReport:
        report = PassReport()
        aspect_ratio = self._store.state.aspect_ratio.value

        scenes = [
            scene.model_copy(update={"image_pending": False, "audio_pending": False})
            for scene in self._store.scenes
        ]
        self._publish(scenes)

        todo = sum(1 for scene in scenes if not scene.is_complete)
        logger.info(f"Generating assets for {todo} of {len(scenes)} scenes")

        for i in range(len(scenes)):
            report.scenes_visited += 1
            scene = scenes[i]
            if scene.is_complete:
                continue

            scenes[i] = scene.model_copy(update={
                "image_pending": not scene.image_asset,
                "audio_pending": not scene.audio_asset,
            })
            self._publish(scenes)

            if not scene.image_asset:
                self._fill_image(scenes, i, style_suffix, aspect_ratio, report)
            if not scene.audio_asset:
                self._fill_audio(scenes, i, voice_name, report)

        report.complete = self._store.state.is_production_complete
        logger.info(
            f"Pass finished: {report.images_generated} images "
            f"({report.images_placeholder} placeholders, {report.images_failed} missing), "
            f"{report.audio_generated} narrations ({report.audio_failed} failed)"
        )
        return report

    def _publish(self, scenes: list[Scene]) -> None:
        self._store.replace_scenes(scenes)

    def _fill_image(
        self,
        scenes: list[Scene],
        i: int,
        style_suffix: str,
        aspect_ratio: str,
        report: PassReport,
    ) -> None:
        prompt = f"{scenes[i].visual_prompt}{style_suffix}"

        try:
            reference = retry_on_rate_limit(
                lambda: self._provider.generate_image(prompt, aspect_ratio),
                retries=1,
                backoff=self._retry_backoff,
                sleep=self._sleep,
            )
        except Exception as e:
            if should_fallback(self._fallback, e):
                placeholder = placeholder_image(self._placeholder_template, self._rng)
                logger.warning(f"Image generation failed for scene {i} ({e}); using {placeholder}")
                scenes[i] = scenes[i].model_copy(
                    update={"image_asset": placeholder, "image_pending": False}
                )
                report.images_placeholder += 1
            else:
                logger.error(f"Image generation failed for scene {i}: {e}")
                scenes[i] = scenes[i].model_copy(update={"image_pending": False})
                report.images_failed += 1
            self._publish(scenes)
            return

        scenes[i] = scenes[i].model_copy(update={"image_asset": reference, "image_pending": False})
        self._publish(scenes)
        report.images_generated += 1
        logger.info(f"Scene {i}: image ready")

        # Pace image requests to stay under the provider's rate limit
        self._sleep(self._throttle_delay)

    def _fill_audio(self, scenes: list[Scene], i: int, voice_name: str, report: PassReport) -> None:
        try:
            reference = self._provider.generate_speech(scenes[i].text, voice_name)
        except Exception as e:
            logger.error(f"Narration failed for scene {i}: {e}")
            scenes[i] = scenes[i].model_copy(update={"audio_pending": False})
            self._publish(scenes)
            report.audio_failed += 1
            return

        scenes[i] = scenes[i].model_copy(update={"audio_asset": reference, "audio_pending": False})
        self._publish(scenes)
        report.audio_generated += 1
        logger.info(f"Scene {i}: narration ready")
