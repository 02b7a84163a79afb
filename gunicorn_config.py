"""
Gunicorn configuration for production deployment.

Usage:
    gunicorn -c gunicorn_config.py
    gunicorn -c gunicorn_config.py "app:create_app()"
"""

import os
import multiprocessing


def get_env_int(var_name: str, default: int, min_value: int = 1, max_value: int = 1000) -> int:
    """Read an integer environment variable and check its range."""
    value = os.getenv(var_name)
    if value is None:
        return default
    try:
        int_value = int(value)
    except ValueError:
        raise ValueError(f"{var_name} must be a valid integer, got '{value}'")
    if not min_value <= int_value <= max_value:
        raise ValueError(f"{var_name} must be between {min_value} and {max_value}, got {int_value}")
    return int_value


def get_env_str(var_name: str, default: str, allowed_values: list = None) -> str:
    value = os.getenv(var_name, default)
    if allowed_values and value not in allowed_values:
        raise ValueError(f"{var_name} must be one of {allowed_values}, got '{value}'")
    return value


def get_env_name(var_name: str):
    """User or group name; rejects values that look like paths."""
    value = os.getenv(var_name)
    if value is not None and (not value.strip() or '/' in value or '\\' in value):
        raise ValueError(f"Invalid {var_name} value: '{value}'")
    return value


# Application factory
wsgi_app = get_env_str('GUNICORN_APP', 'app:create_app()')

# Server socket
bind = get_env_str('GUNICORN_BIND', f"0.0.0.0:{os.getenv('PORT', '5000')}")
backlog = 2048

# Workers: AI calls block on the provider, so threads keep other requests moving
workers = get_env_int('GUNICORN_WORKERS', min(multiprocessing.cpu_count() * 2 + 1, 9), max_value=100)
worker_class = get_env_str('GUNICORN_WORKER_CLASS', 'gthread', allowed_values=['sync', 'gthread'])
threads = get_env_int('GUNICORN_THREADS', 4, max_value=64)
timeout = get_env_int('GUNICORN_TIMEOUT', 90, max_value=600)
graceful_timeout = 30
keepalive = 5

# Logging
accesslog = get_env_str('GUNICORN_ACCESS_LOG', '-')
errorlog = get_env_str('GUNICORN_ERROR_LOG', '-')
loglevel = get_env_str('GUNICORN_LOG_LEVEL', 'info', allowed_values=['debug', 'info', 'warning', 'error', 'critical'])
access_log_format = '%(h)s %(t)s "%(r)s" %(s)s %(b)s %(D)sus "%(a)s"'

proc_name = 'inkwell'
daemon = False
pidfile = os.getenv('GUNICORN_PIDFILE', None)
umask = 0
user = get_env_name('GUNICORN_USER')
group = get_env_name('GUNICORN_GROUP')

# TLS
keyfile = os.getenv('GUNICORN_KEYFILE', None)
if keyfile and not os.path.exists(keyfile):
    raise ValueError(f"GUNICORN_KEYFILE path does not exist: '{keyfile}'")

certfile = os.getenv('GUNICORN_CERTFILE', None)
if certfile and not os.path.exists(certfile):
    raise ValueError(f"GUNICORN_CERTFILE path does not exist: '{certfile}'")

# MongoClient is not fork-safe, so each worker builds its own app
preload_app = False
