"""
Veo Studio - orchestrates Veo video generation, Gemini TTS narration and
video extension for a single interactive session.
"""

__version__ = "1.0.0"
