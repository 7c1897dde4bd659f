"""Gemini-backed collaborators: Veo video, Gemini TTS and the API key gate."""

from .client import GeminiGenerationService
from .credentials import EnvironmentCredentials

__all__ = ["GeminiGenerationService", "EnvironmentCredentials"]
