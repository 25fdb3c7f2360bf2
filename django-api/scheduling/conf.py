"""Scheduling settings with defaults.

Override any key through the ``SCHEDULING`` dict in Django settings.
"""

from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "CANCELLATION_WINDOW_HOURS": 24,
    "DEFAULT_RECURRENCE_WEEKS": 12,
    "MAX_RECURRENCE_WEEKS": 52,
    "STORAGE_READ_ATTEMPTS": 3,
    "STORAGE_RETRY_BACKOFF_SECONDS": 0.05,
    "SESSION_TYPE_CACHE_TTL": 300,
}


def get_setting(name: str) -> Any:
    return getattr(settings, "SCHEDULING", {}).get(name, DEFAULTS[name])
