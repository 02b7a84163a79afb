"""
HTTP API for Inkwell.

Route modules expose ``register_*`` functions that attach views to a Flask
app; ``register_routes`` wires them all.
"""

from .routes import register_routes

__all__ = ["register_routes"]
