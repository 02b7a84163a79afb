"""
Plot service: structure, conflict, synopsis and ordered plot points.
"""

from typing import Any, Dict

from src.inkwell.models import PlotPointInput, PlotPointUpdate, PlotUpdate
from src.inkwell.utils.errors import ValidationError
from .toolbox_service import ItemList, ToolboxService

POINTS = "points"


class PlotService(ToolboxService):
    """Plot record for a document."""

    collection_name = "plots"
    label = "Plot"
    update_model = PlotUpdate
    item_lists = {
        POINTS: ItemList("plotPoints", "Plot point", PlotPointInput, PlotPointUpdate, ordered=True),
    }

    def default_record(self, document_id: str) -> Dict[str, Any]:
        return {
            "document": document_id,
            "structure": "three_act",
            "plotPoints": [],
            "mainConflict": "",
            "mainConflictCharacters": [],
            "synopsis": "",
        }

    def validate_references(self, document_id: str, record: Dict[str, Any]) -> None:
        """Characters named by the plot must belong to the same document."""
        referenced = set(record.get("mainConflictCharacters", []))
        for point in record.get("plotPoints", []):
            referenced.update(point.get("involvedCharacters", []))
        if not referenced:
            return

        known = {c["_id"] for c in self.database["characters"].find({"document": document_id})}
        unknown = sorted(referenced - known)
        if unknown:
            raise ValidationError(
                "Plot references characters that are not in this document",
                details={"characters": unknown}
            )
