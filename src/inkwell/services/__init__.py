"""
Service layer for Inkwell.

Services hold the business rules (validation, access control, cascades)
and are independent of the HTTP layer, so routes, the CLI and tests can
share them.
"""

from typing import Any, Dict, TYPE_CHECKING

if TYPE_CHECKING:
    from src.inkwell.utils.repository import Database

from .document_service import DocumentService
from .story_service import StoryService
from .character_service import CharacterService
from .toolbox_service import ToolboxService, ItemList
from .plot_service import PlotService
from .setting_service import SettingService
from .theme_service import ThemeService
from .ai_service import AIService


def build_services(database: 'Database', config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create the service instances for one app.

    Args:
        database: Storage backend
        config: Flask config (provider names)

    Returns:
        Dictionary of services keyed by name
    """
    stories = StoryService(database)
    documents = DocumentService(database, story_service=stories)
    return {
        "documents": documents,
        "stories": stories,
        "characters": CharacterService(database, documents),
        "plots": PlotService(database, documents),
        "settings": SettingService(database, documents),
        "themes": ThemeService(database, documents),
        "ai": AIService(
            documents,
            stories,
            rewrite_provider=config.get("AI_REWRITE_PROVIDER", "gemini"),
            analysis_provider=config.get("AI_ANALYSIS_PROVIDER", "openai"),
        ),
    }


__all__ = [
    'DocumentService',
    'StoryService',
    'CharacterService',
    'ToolboxService',
    'ItemList',
    'PlotService',
    'SettingService',
    'ThemeService',
    'AIService',
    'build_services',
]
