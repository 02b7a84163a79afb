"""
Theme service: main themes, motifs and symbols.
"""

from typing import Any, Dict

from src.inkwell.models import (
    MainThemeInput, MainThemeUpdate, MotifInput, MotifUpdate, SymbolInput, SymbolUpdate, ThemeUpdate,
)
from .toolbox_service import ItemList, ToolboxService

MAIN_THEMES = "main-themes"
MOTIFS = "motifs"
SYMBOLS = "symbols"


class ThemeService(ToolboxService):
    """Theme record for a document."""

    collection_name = "themes"
    label = "Theme"
    update_model = ThemeUpdate
    item_lists = {
        MAIN_THEMES: ItemList("mainThemes", "Theme", MainThemeInput, MainThemeUpdate),
        MOTIFS: ItemList("motifs", "Motif", MotifInput, MotifUpdate),
        SYMBOLS: ItemList("symbols", "Symbol", SymbolInput, SymbolUpdate),
    }

    def default_record(self, document_id: str) -> Dict[str, Any]:
        return {
            "document": document_id,
            "mainThemes": [],
            "motifs": [],
            "symbols": [],
        }
