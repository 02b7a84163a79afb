"""
Utility modules for Inkwell.

Modules:
- repository: storage interfaces, ids and timestamps
- db_storage: SQLite backend
- mongo_storage: MongoDB backend
- errors: API error hierarchy and Flask handlers
- html_text: editor HTML to text/markdown, word counts
- llm: provider interface and response helpers
- prompt_builder: rewrite and analysis prompts
"""

from .repository import (
    ASCENDING,
    DESCENDING,
    CollectionRepository,
    Database,
    create_database,
    is_valid_id,
    validate_id,
    new_id,
    utc_now,
)
from .html_text import html_to_text, html_to_markdown, count_words

__all__ = [
    "ASCENDING",
    "DESCENDING",
    "CollectionRepository",
    "Database",
    "create_database",
    "is_valid_id",
    "validate_id",
    "new_id",
    "utc_now",
    "html_to_text",
    "html_to_markdown",
    "count_words",
]
