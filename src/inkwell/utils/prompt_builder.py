"""
Prompt builders for AI rewriting and literary analysis.

Key Components:
- RewriteParams: parameter object for a rewrite request
- build_rewrite_prompt(): selection rewrite prompt (tone, style, pacing)
- build_story_analysis_prompt() / build_scene_analysis_prompt(): JSON analysis prompts
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

TONE_GUIDANCE: Dict[str, str] = {
    "whimsical": "light-hearted and playful, with a sense of wonder",
    "serious": "thoughtful and measured, with gravitas",
    "mysterious": "intriguing and suspenseful, building curiosity",
    "humorous": "witty and entertaining, with natural humor",
    "dramatic": "emotionally intense and impactful",
    "adventurous": "exciting and dynamic, full of energy",
    "neutral": "balanced and straightforward",
}

STYLE_GUIDANCE: Dict[str, str] = {
    "narrative": "flowing storytelling with strong narrative voice",
    "descriptive": "rich, vivid details that paint a clear picture",
    "dialogue-heavy": "natural conversations that reveal character and advance the story",
    "action-focused": "dynamic and engaging action sequences",
    "emotional": "deep emotional resonance and character insight",
    "minimalist": "concise and impactful, every word carefully chosen",
    "poetic": "lyrical and metaphorical, with artistic flair",
}

SLOW_PACING_THRESHOLD = 30
FAST_PACING_THRESHOLD = 70

ANALYSIS_SYSTEM_PROMPT = (
    "You are a literary analysis expert. Provide detailed, insightful analysis of stories and scenes."
)
SCENE_ANALYSIS_SYSTEM_PROMPT = (
    "You are a literary analysis expert. Provide detailed, insightful analysis of scenes."
)

STORY_ANALYSIS_SHAPE = """{
  "summary": "Overall story summary",
  "themes": ["Theme 1", "Theme 2"],
  "characterAnalysis": {"Character name": "Analysis"},
  "plotStructure": "Analysis of plot structure",
  "settingAnalysis": "Analysis of setting",
  "scenes": {
    "Scene title": {
      "summary": "Scene summary",
      "keyEvents": ["Event 1", "Event 2"],
      "characterDevelopment": "Analysis",
      "thematicElements": ["Element 1", "Element 2"]
    }
  }
}"""

SCENE_ANALYSIS_SHAPE = """{
  "summary": "Scene summary",
  "keyEvents": ["Event 1", "Event 2"],
  "characterDevelopment": "Analysis",
  "thematicElements": ["Element 1", "Element 2"],
  "settingImpact": "Analysis of setting's impact on the scene"
}"""


@dataclass
class RewriteParams:
    """Parameters for rewriting a passage."""
    text: str
    tone: str = "neutral"
    style: str = "narrative"
    audience: str = "general"
    pacing: int = 50
    keep_context: bool = True
    is_preview: bool = False
    mood: Optional[str] = None

    @classmethod
    def from_options(cls, text: str, options: Dict[str, Any], mood: Optional[str] = None) -> "RewriteParams":
        return cls(
            text=text,
            tone=options.get("tone", "neutral"),
            style=options.get("style", "narrative"),
            audience=options.get("audience", "general"),
            pacing=options.get("pacing", 50),
            keep_context=options.get("keepContext", True),
            is_preview=options.get("isPreview", False),
            mood=mood,
        )


def describe_pacing(pacing: int) -> str:
    """Map a 0-100 pacing slider value to prose guidance."""
    if pacing < SLOW_PACING_THRESHOLD:
        return "measured and detailed, taking time to explore moments"
    if pacing > FAST_PACING_THRESHOLD:
        return "swift and dynamic, maintaining forward momentum"
    return "balanced pacing, with natural flow"


def build_rewrite_prompt(params: RewriteParams) -> str:
    """
    Build the prompt for rewriting a selected passage.

    Args:
        params: Rewrite parameters

    Returns:
        Prompt string
    """
    requirements = [
        f"- Tone: {TONE_GUIDANCE.get(params.tone, TONE_GUIDANCE['neutral'])}",
        f"- Style: {STYLE_GUIDANCE.get(params.style, STYLE_GUIDANCE['narrative'])}",
        f"- Audience: {params.audience} readers",
        f"- Pacing: {describe_pacing(params.pacing)}",
    ]
    if params.mood:
        requirements.append(f"- Story mood: {params.mood}")
    if params.keep_context:
        requirements.append("- Maintain narrative continuity and context from the original")

    guidelines = [
        "1. Preserve the core message and key details",
        "2. Enhance readability and flow",
        "3. Match the requested style and tone",
        "4. Keep similar length and structure",
        "5. Maintain the original context and meaning",
    ]
    if params.is_preview:
        guidelines.append("6. This is a preview version - focus on demonstrating the style changes")

    return (
        "As a writing assistant, enhance this text while preserving its original meaning and intent.\n\n"
        "Key requirements:\n"
        + "\n".join(requirements)
        + f'\n\nOriginal text to enhance:\n"{params.text}"\n\n'
        "Guidelines:\n"
        + "\n".join(guidelines)
        + "\n\nResponse format: Provide only the enhanced text, without explanations or meta-text."
    )


def _format_scene(scene: Dict[str, Any]) -> str:
    characters = scene.get("characters") or []
    if isinstance(characters, list):
        characters = ", ".join(str(c) for c in characters)
    return (
        f"Scene: {scene.get('title', '')}\n"
        f"Location: {scene.get('location', '')}\n"
        f"Time: {scene.get('timeOfDay', '')}\n"
        f"Characters: {characters}\n"
        f"Description: {scene.get('description', '')}"
    )


def build_story_analysis_prompt(content: str, scenes: List[Dict[str, Any]]) -> str:
    """Build the prompt asking for a whole-story analysis as JSON."""
    scene_block = "\n\n".join(_format_scene(scene) for scene in scenes) or "(no scenes provided)"
    return (
        "Analyze the following story and its scenes. Provide a comprehensive analysis including:\n"
        "1. Overall story summary\n"
        "2. Main themes and motifs\n"
        "3. Character development\n"
        "4. Plot structure\n"
        "5. Setting analysis\n\n"
        f"Story Content:\n{content}\n\n"
        f"Scenes:\n{scene_block}\n\n"
        "Please provide a detailed analysis in JSON format with the following structure:\n"
        f"{STORY_ANALYSIS_SHAPE}"
    )


def build_scene_analysis_prompt(scene: Dict[str, Any], context: str = "") -> str:
    """Build the prompt asking for a single-scene analysis as JSON."""
    prompt = (
        "Analyze the following scene in detail. Provide insights about:\n"
        "1. Scene summary\n"
        "2. Key events\n"
        "3. Character development\n"
        "4. Thematic elements\n"
        "5. Setting impact\n\n"
        f"Scene Details:\n{_format_scene(scene)}\n\n"
    )
    if context:
        prompt += f"Surrounding story text:\n{context}\n\n"
    return prompt + (
        "Please provide a detailed analysis in JSON format with the following structure:\n"
        f"{SCENE_ANALYSIS_SHAPE}"
    )
