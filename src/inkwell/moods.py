"""
Story mood presets and mood validation.
"""

import re
from typing import Any, Dict, Optional

from .utils.errors import ValidationError

MOOD_PRESETS: Dict[str, str] = {
    "happy": "Light and uplifting",
    "sad": "Thoughtful and introspective",
    "angry": "Intense and forceful",
    "peaceful": "Calm and serene",
    "tense": "Suspenseful and anxious",
    "mysterious": "Enigmatic and intriguing",
    "romantic": "Passionate and emotional",
    "adventurous": "Exciting and dynamic",
}

DEFAULT_MOOD = "peaceful"

CUSTOM_MOOD_MIN_LENGTH = 2
CUSTOM_MOOD_MAX_LENGTH = 50
_CUSTOM_MOOD_PATTERN = re.compile(r'^[a-zA-Z0-9\s-]+$')


def get_mood_presets() -> Dict[str, str]:
    """Preset mood names mapped to their descriptions."""
    return dict(MOOD_PRESETS)


def _preset_mood(name: Any) -> Dict[str, Any]:
    preset = name.strip().lower() if isinstance(name, str) else ""
    if preset not in MOOD_PRESETS:
        raise ValidationError(
            f"Invalid mood '{name}'. Valid moods: {', '.join(MOOD_PRESETS)}",
            details={"mood": name, "valid_moods": list(MOOD_PRESETS)}
        )
    return {"type": "preset", "preset": preset, "description": MOOD_PRESETS[preset]}


def validate_custom_mood(text: Any) -> str:
    """
    Validate a free-text mood.

    Args:
        text: Custom mood text

    Returns:
        The trimmed mood text

    Raises:
        ValidationError: If the text is the wrong length or has invalid characters
    """
    if not isinstance(text, str):
        raise ValidationError("Custom mood must be a string")
    value = text.strip()
    if not CUSTOM_MOOD_MIN_LENGTH <= len(value) <= CUSTOM_MOOD_MAX_LENGTH:
        raise ValidationError(
            f"Custom mood must be between {CUSTOM_MOOD_MIN_LENGTH} and {CUSTOM_MOOD_MAX_LENGTH} characters",
            details={"length": len(value)}
        )
    if not _CUSTOM_MOOD_PATTERN.match(value):
        raise ValidationError("Custom mood can only contain letters, numbers, spaces, and hyphens")
    return value


def normalize_mood(value: Any) -> Optional[Dict[str, Any]]:
    """
    Turn a mood from a request body into the stored mood shape.

    Accepts a preset name (``"tense"``), a preset object
    (``{"type": "preset", "preset": "tense"}``), a custom object
    (``{"type": "custom", "custom": "bittersweet", "description": "..."}``)
    or None to clear the mood.

    Returns:
        Stored mood dict, or None

    Raises:
        ValidationError: If the mood is not valid
    """
    if value is None:
        return None
    if isinstance(value, str):
        return _preset_mood(value)
    if not isinstance(value, dict):
        raise ValidationError("Mood must be a preset name or a mood object")

    mood_type = value.get("type", "preset")
    if mood_type == "preset":
        return _preset_mood(value.get("preset"))
    if mood_type == "custom":
        description = value.get("description") or ""
        if not isinstance(description, str):
            raise ValidationError("Mood description must be a string")
        return {
            "type": "custom",
            "custom": validate_custom_mood(value.get("custom")),
            "description": description.strip(),
        }
    raise ValidationError(
        f"Invalid mood type '{mood_type}'. Must be 'preset' or 'custom'",
        details={"type": mood_type}
    )


def describe_mood(mood: Optional[Dict[str, Any]]) -> str:
    """Short human-readable mood label for prompts and exports."""
    if not mood:
        return MOOD_PRESETS[DEFAULT_MOOD]
    if mood.get("type") == "custom":
        label = mood.get("custom", "")
        return f"{label} ({mood['description']})" if mood.get("description") else label
    return f"{mood.get('preset')} ({mood.get('description', '')})"
