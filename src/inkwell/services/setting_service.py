"""
Setting service: main location, time period, locations and timeline.
"""

from typing import Any, Dict

from src.inkwell.models import (
    LocationInput, LocationUpdate, SettingUpdate, TimelineInput, TimelineUpdate,
)
from .toolbox_service import ItemList, ToolboxService

LOCATIONS = "locations"
TIMELINE = "timeline"


class SettingService(ToolboxService):
    """Setting record for a document."""

    collection_name = "settings"
    label = "Setting"
    update_model = SettingUpdate
    item_lists = {
        LOCATIONS: ItemList("locations", "Location", LocationInput, LocationUpdate),
        TIMELINE: ItemList("timeline", "Timeline period", TimelineInput, TimelineUpdate, ordered=True),
    }

    def default_record(self, document_id: str) -> Dict[str, Any]:
        return {
            "document": document_id,
            "mainLocation": "",
            "timePeriod": "",
            "locations": [],
            "timeline": [],
            "worldDetails": "",
        }
