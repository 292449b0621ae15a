"""Shared fixtures."""
from __future__ import annotations

import pytest

from faceless.errors import ProviderError, RateLimited
from faceless.models import ProjectState, ProjectStore, Scene
from faceless.provider import ContentProvider


class FakeProvider(ContentProvider):
    """Scripted provider: each call pops the next planned outcome.

    An outcome is either a reference string or an exception instance to raise.
    When a plan runs out, calls succeed with a generated reference.
    """

    def __init__(self, image_plan=None, speech_plan=None, scenes=None) -> None:
        self.image_plan = list(image_plan or [])
        self.speech_plan = list(speech_plan or [])
        self.scenes = scenes or []
        self.image_calls: list[tuple[str, str]] = []
        self.speech_calls: list[tuple[str, str]] = []
        self.script_calls = []

    def generate_script(self, request):
        self.script_calls.append(request)
        return self.scenes

    def generate_image(self, prompt: str, aspect_ratio: str) -> str:
        self.image_calls.append((prompt, aspect_ratio))
        return self._next(self.image_plan, f"img-{len(self.image_calls)}.png")

    def generate_speech(self, text: str, voice_name: str) -> str:
        self.speech_calls.append((text, voice_name))
        return self._next(self.speech_plan, f"audio-{len(self.speech_calls)}.wav")

    @staticmethod
    def _next(plan: list, default: str) -> str:
        outcome = plan.pop(0) if plan else default
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def make_scenes(count: int = 3, **overrides) -> list[Scene]:
    return [
        Scene(
            index=i,
            text=f"Scene {i + 1} narration",
            visual_prompt=f"prompt {i + 1}",
            estimated_duration_seconds=5.0,
            **overrides,
        )
        for i in range(count)
    ]


@pytest.fixture
def scenes() -> list[Scene]:
    return make_scenes()


@pytest.fixture
def store(scenes) -> ProjectStore:
    return ProjectStore(ProjectState(topic="Deep sea", scenes=scenes, selected_voice_id="v2"))


@pytest.fixture
def rate_limited() -> RateLimited:
    return RateLimited("429 Too Many Requests")


@pytest.fixture
def server_error() -> ProviderError:
    return ProviderError("500 internal", status_code=500)
