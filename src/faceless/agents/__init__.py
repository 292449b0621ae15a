"""LLM agents for script writing."""

from .base import BaseAgent
from .script import ScriptAgent, ScriptRequest, estimate_duration

__all__ = ["BaseAgent", "ScriptAgent", "ScriptRequest", "estimate_duration"]
