"""
Helper functions shared by the route modules.
"""

from typing import Any, Dict

from flask import current_app, request

from src.inkwell.utils.errors import ValidationError


def get_services() -> Dict[str, Any]:
    """Service instances built by create_app for the current app."""
    return current_app.extensions["inkwell"]["services"]


def get_service(name: str) -> Any:
    return get_services()[name]


def get_json_body() -> Dict[str, Any]:
    """
    Parse the request body as a JSON object.

    Returns:
        Request body dictionary (empty if the body is empty)

    Raises:
        ValidationError: If the body is not a JSON object
    """
    if not request.get_data(cache=True):
        return {}
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def get_pagination_args(default_per_page: int) -> Dict[str, int]:
    """Read ``page`` and ``per_page`` query arguments."""
    return {
        "page": request.args.get('page', 1, type=int),
        "per_page": request.args.get('per_page', default_per_page, type=int),
    }
