"""
Routes for the per-document toolbox records: plot, setting and themes.

Each record type exposes the same surface, so the rules are generated from
the service classes' embedded list definitions:

    GET|PUT  /api/<resource>/document/<document_id>
    POST     /api/<resource>/document/<document_id>/<list>
    PUT      /api/<resource>/document/<document_id>/<list>/order   (ordered lists)
    PUT      /api/<resource>/document/<document_id>/<list>/<item_id>
    DELETE   /api/<resource>/document/<document_id>/<list>/<item_id>
"""

import logging
from typing import Callable, Dict, Type, TYPE_CHECKING

if TYPE_CHECKING:
    from flask import Flask
    from flask_limiter import Limiter

from flask import jsonify, current_app

from src.inkwell.auth import require_auth, current_uid
from src.inkwell.services.plot_service import PlotService
from src.inkwell.services.setting_service import SettingService
from src.inkwell.services.theme_service import ThemeService
from src.inkwell.services.toolbox_service import ToolboxService
from .helpers import get_service, get_json_body

logger = logging.getLogger(__name__)

# URL prefix -> service class; the prefix is also the service name
TOOLBOX_RESOURCES: Dict[str, Type[ToolboxService]] = {
    "plots": PlotService,
    "settings": SettingService,
    "themes": ThemeService,
}


def _write_limit() -> str:
    return current_app.config["WRITE_RATE_LIMIT"]


def register_toolbox_routes(flask_app: 'Flask', limiter_instance: 'Limiter') -> None:
    """
    Register record and embedded item routes for every toolbox resource.

    Args:
        flask_app: Flask application instance
        limiter_instance: Limiter instance for rate limiting
    """

    def add_view(rule: str, endpoint: str, methods, view: Callable, limited: bool = False) -> None:
        # Flask-Limiter keys decorated limits by function name
        view.__name__ = endpoint
        view = require_auth(view)
        if limited:
            view = limiter_instance.limit(_write_limit)(view)
        flask_app.add_url_rule(rule, endpoint=endpoint, view_func=view, methods=methods)

    for resource, service_class in TOOLBOX_RESOURCES.items():
        base = f"/api/{resource}/document/<document_id>"

        add_view(base, f"get_{resource}", ['GET'], _record_view(resource))
        add_view(base, f"update_{resource}", ['PUT'], _update_view(resource), limited=True)

        for key, item_list in service_class.item_lists.items():
            slug = f"{resource}_{key.replace('-', '_')}"
            add_view(f"{base}/{key}", f"add_{slug}", ['POST'],
                     _add_item_view(resource, key), limited=True)
            if item_list.ordered:
                add_view(f"{base}/{key}/order", f"reorder_{slug}", ['PUT'],
                         _reorder_view(resource, key), limited=True)
            add_view(f"{base}/{key}/<item_id>", f"update_{slug}", ['PUT'],
                     _update_item_view(resource, key), limited=True)
            add_view(f"{base}/{key}/<item_id>", f"remove_{slug}", ['DELETE'],
                     _remove_item_view(resource, key))

        logger.debug(f"Registered toolbox routes for {resource}: {sorted(service_class.item_lists)}")


def _record_view(resource: str) -> Callable:
    def view(document_id: str):
        """Get the record for a readable document, creating defaults if missing."""
        return jsonify(get_service(resource).get(document_id, current_uid()))
    return view


def _update_view(resource: str) -> Callable:
    def view(document_id: str):
        """Partially update (upsert) the record. Owner only."""
        return jsonify(get_service(resource).update(document_id, current_uid(), get_json_body()))
    return view


def _add_item_view(resource: str, key: str) -> Callable:
    def view(document_id: str):
        """Add an item to an embedded list. Returns the updated record."""
        record = get_service(resource).add_item(document_id, current_uid(), key, get_json_body())
        return jsonify(record), 201
    return view


def _update_item_view(resource: str, key: str) -> Callable:
    def view(document_id: str, item_id: str):
        record = get_service(resource).update_item(document_id, current_uid(), key, item_id, get_json_body())
        return jsonify(record)
    return view


def _remove_item_view(resource: str, key: str) -> Callable:
    def view(document_id: str, item_id: str):
        return jsonify(get_service(resource).remove_item(document_id, current_uid(), key, item_id))
    return view


def _reorder_view(resource: str, key: str) -> Callable:
    def view(document_id: str):
        """Reorder an ordered list. Body: ``{"order": [item ids...]}``."""
        return jsonify(get_service(resource).reorder(document_id, current_uid(), key, get_json_body()))
    return view
