"""Story script parsing and aspect-ratio inference."""

import json

from pydantic import ValidationError

from veo_studio.config import LANDSCAPE_MARKERS, PORTRAIT_MARKERS
from veo_studio.core import InputParseError
from veo_studio.models import AspectRatio, StoryScript


def parse_story_script(prompt: str) -> StoryScript:
    """
    Parse the JSON story script carried in a story_to_video prompt.

    Raises:
        InputParseError: the prompt is not a JSON object with dialogue,
            voice_tone and image_prompt strings
    """
    try:
        raw = json.loads(prompt)
    except (json.JSONDecodeError, TypeError) as exc:
        raise InputParseError(f"Story script is not valid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise InputParseError("Story script must be a JSON object")

    try:
        return StoryScript.model_validate(raw)
    except ValidationError as exc:
        missing = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise InputParseError(f"Story script is missing or has invalid fields: {missing}") from exc


def infer_aspect_ratio(image_prompt: str, fallback: AspectRatio) -> AspectRatio:
    """Pick the aspect ratio hinted at by the image prompt.

    Portrait markers win over landscape markers when both appear.
    """
    if any(marker in image_prompt for marker in PORTRAIT_MARKERS):
        return AspectRatio.PORTRAIT
    if any(marker in image_prompt for marker in LANDSCAPE_MARKERS):
        return AspectRatio.LANDSCAPE
    return fallback
