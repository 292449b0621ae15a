"""Script agent: turns a topic or a pasted script into narrated scenes."""

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from ..errors import ProviderError, ValidationError
from ..models import Catalog, ProjectState, Scene
from .base import BaseAgent

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 150

SYSTEM_PROMPT = """You are a professional scriptwriter for faceless narrated videos.
You write punchy narration split into scenes and, for each scene, a detailed image prompt.

Output valid JSON only, with no additional text or markdown formatting.
The JSON must be an array of scene objects with the keys:
  "text"              - the narration for the scene,
  "visualPrompt"      - a detailed prompt for generating an image for the scene,
                        incorporating the requested visual style,
  "estimatedDuration" - estimated narration time in seconds (number)."""

DURATION_GUIDE = """- 30s: ~3-5 scenes, ~75 words
- 1min: ~6-8 scenes, ~150 words
- 5min: ~20-30 scenes, ~750 words
- 10min+: Scale scenes and word count accordingly."""


def estimate_duration(text: str, wpm: int = WORDS_PER_MINUTE) -> float:
    """Seconds needed to read ``text`` aloud at ``wpm`` words per minute."""
    words = len(text.split())
    return max(1.0, round(words * 60.0 / wpm, 1))


@dataclass
class ScriptRequest:
    """Input data for the script agent."""

    topic: str = ""
    raw_script: Optional[str] = None
    language: str = "English US"
    style_names: list[str] = field(default_factory=list)
    style_intensity: str = "Medium"
    target_duration: str = "1min"

    @property
    def uses_raw_script(self) -> bool:
        return self.raw_script is not None

    def validate(self) -> None:
        if self.uses_raw_script:
            if not self.raw_script.strip():
                raise ValidationError("Script text is empty", code="empty_script")
        elif not self.topic.strip():
            raise ValidationError("Topic is empty", code="empty_topic")

    @classmethod
    def from_state(
        cls, state: ProjectState, catalog: Catalog, use_raw_script: bool = False
    ) -> "ScriptRequest":
        return cls(
            topic=state.topic,
            raw_script=state.raw_script if use_raw_script else None,
            language=state.language,
            style_names=catalog.style_names(state.selected_styles),
            style_intensity=state.style_intensity.value,
            target_duration=state.target_duration,
        )


class ScriptAgent(BaseAgent[ScriptRequest, list[Scene]]):
    """Agent that writes the scene-by-scene script.

    With a topic it shapes scene count and word budget to the duration bucket.
    With a pasted script it translates and adapts the full text without cutting
    anything, timing scenes by reading speed.
    """

    @property
    def name(self) -> str:
        return "ScriptAgent"

    @property
    def system_prompt(self) -> str:
        return SYSTEM_PROMPT

    def run(self, input_data: ScriptRequest) -> list[Scene]:
        """Generate scenes for the request.

        Raises:
            ValidationError: If the topic or script is empty.
            ProviderError: If generation fails or the reply has no usable scenes.
        """
        input_data.validate()

        if input_data.uses_raw_script:
            self._logger.info(
                f"Adapting pasted script ({len(input_data.raw_script.split())} words) "
                f"into {input_data.language}"
            )
        else:
            self._logger.info(
                f"Writing script about '{input_data.topic}' "
                f"({input_data.target_duration}, {input_data.language})"
            )

        response = self._create_message(
            prompt=self._build_prompt(input_data),
            temperature=0.8,
        )

        scenes = self._parse_response(response, recompute_durations=input_data.uses_raw_script)
        self._logger.info(f"Generated {len(scenes)} scenes")
        return scenes

    def _style_description(self, input_data: ScriptRequest) -> str:
        if not input_data.style_names:
            return "VISUAL STYLE: Cinematic + Realistic."
        names = " + ".join(input_data.style_names)
        return (
            f"VISUAL STYLE: {names} ({input_data.style_intensity} Intensity).\n"
            f"IMPORTANT: The 'visualPrompt' for each scene MUST strictly reflect this style.\n"
            f"Describe lighting, textures, colors, and camera angles that match {names}."
        )

    def _duration_instruction(self, input_data: ScriptRequest) -> str:
        if input_data.uses_raw_script:
            return (
                "SCRIPT DURATION: The user has provided a manual script.\n"
                "RESPECT THE FULL LENGTH OF THE USER INPUT. Do NOT summarize, cut, or "
                "shorten the content to fit a target duration.\n"
                "Create as many scenes as necessary to cover the entire text provided.\n"
                "The 'estimatedDuration' for each scene should be calculated based on "
                f"reading speed (~{WORDS_PER_MINUTE} words per minute)."
            )
        return (
            f"TARGET VIDEO DURATION: {input_data.target_duration}.\n"
            "You MUST adjust the total script length and number of scenes to match this duration.\n"
            f"{DURATION_GUIDE}\n"
            "Ensure the script has a strong hook, progression, and ending suitable for a "
            f"{input_data.target_duration} video."
        )

    def _build_prompt(self, input_data: ScriptRequest) -> str:
        """Build the user prompt for script generation."""
        if input_data.uses_raw_script:
            prompt_parts = [
                "Act as a professional video script editor and translator.",
                "",
                "TASK: Translate and adapt the User Input into a production-ready video "
                f"script in {input_data.language}.",
                "",
                "USER INPUT:",
                f'"{input_data.raw_script}"',
                "",
                "CONSTRAINTS:",
                f"1. LANGUAGE: The output narration text MUST be in {input_data.language}. "
                "If the input is in another language, translate it accurately first.",
                "2. ADAPTATION: Optimize the pacing for a faceless video.",
                f"3. {self._duration_instruction(input_data)}",
                f"4. {self._style_description(input_data)}",
            ]
        else:
            prompt_parts = [
                f'Create a captivating faceless video script about "{input_data.topic}" '
                f"in {input_data.language}.",
                "The tone should be engaging and viral.",
                self._duration_instruction(input_data),
                "",
                self._style_description(input_data),
            ]
        return "\n".join(prompt_parts)

    def _parse_response(self, response: str, recompute_durations: bool = False) -> list[Scene]:
        """Parse Claude's reply into indexed Scene objects.

        Missing or non-positive durations are estimated from word count. With
        ``recompute_durations`` every duration comes from word count.
        """
        data = self._parse_json(response)
        scenes_data = data.get("scenes", data) if isinstance(data, dict) else data

        if not isinstance(scenes_data, list) or not scenes_data:
            raise ProviderError("Response does not contain a scenes array", code="bad_response")

        scenes: list[Scene] = []
        for item in scenes_data:
            if not isinstance(item, dict):
                continue
            text = str(item.get("text") or "").strip()
            if not text:
                continue

            duration = self._coerce_duration(item.get("estimatedDuration"))
            if recompute_durations or duration is None:
                duration = estimate_duration(text)

            scenes.append(Scene(
                index=len(scenes),
                text=text,
                visual_prompt=str(item.get("visualPrompt") or item.get("visual_prompt") or ""),
                estimated_duration_seconds=duration,
            ))

        if not scenes:
            raise ProviderError("Response contained no narrated scenes", code="bad_response")
        return scenes

    @staticmethod
    def _coerce_duration(value: object) -> Optional[float]:
        try:
            duration = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(duration) or duration <= 0:
            return None
        return duration
