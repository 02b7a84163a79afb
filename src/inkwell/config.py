"""
Application configuration.

Values are read from the environment (populated from a .env file by
python-dotenv in app.py). Anything passed to create_app(config=...)
overrides these defaults.
"""

import os
from typing import Dict, Any, List

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:3000"


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def load_config() -> Dict[str, Any]:
    """
    Build the Flask config mapping from environment variables.

    Returns:
        Dictionary of configuration keys and values
    """
    return {
        # Storage
        "MONGODB_URI": os.getenv("MONGODB_URI", ""),
        "MONGODB_DB": os.getenv("MONGODB_DB", "inkwell"),
        "USE_MONGO_STORAGE": _env_flag("USE_MONGO_STORAGE", "true" if os.getenv("MONGODB_URI") else "false"),
        "SQLITE_PATH": os.getenv("SQLITE_PATH", os.path.join("data", "inkwell.db")),

        # HTTP
        "CORS_ORIGINS": _split_csv(os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)),
        "MAX_CONTENT_LENGTH": int(os.getenv("MAX_CONTENT_LENGTH", str(5 * 1024 * 1024))),

        # Rate limiting (Flask-Limiter)
        "RATELIMIT_ENABLED": _env_flag("RATELIMIT_ENABLED", "true"),
        "RATELIMIT_STORAGE_URI": os.getenv("REDIS_URL", "memory://"),
        "DEFAULT_RATE_LIMITS": _split_csv(os.getenv("DEFAULT_RATE_LIMITS", "2000 per day,300 per hour")),
        "AI_REWRITE_RATE_LIMIT": os.getenv("AI_REWRITE_RATE_LIMIT", "10 per minute"),
        "AI_ANALYSIS_RATE_LIMIT": os.getenv("AI_ANALYSIS_RATE_LIMIT", "5 per minute"),
        "EXPORT_RATE_LIMIT": os.getenv("EXPORT_RATE_LIMIT", "20 per hour"),
        "WRITE_RATE_LIMIT": os.getenv("WRITE_RATE_LIMIT", "120 per minute"),

        # AI providers
        "AI_REWRITE_PROVIDER": os.getenv("AI_REWRITE_PROVIDER", "gemini").lower(),
        "AI_ANALYSIS_PROVIDER": os.getenv("AI_ANALYSIS_PROVIDER", "openai").lower(),

        # Auth: tests inject a verifier object here
        "TOKEN_VERIFIER": None,
    }
