"""
Numberman configuration.

Usage in settings.py:
    NUMBERMAN = {
        "MAX_RANGE_SIZE": 10000,
        "DEFAULT_PAGE_SIZE": 50,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class NumbermanSettings:
    """Numberman configuration settings."""

    # Largest manual range accepted by the generator
    MAX_RANGE_SIZE: int = 10000

    # Listing pagination
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 500

    # DEASSIGNED events keep the client that held the number
    DEASSIGN_RECORDS_PREVIOUS_CLIENT: bool = True


def get_numberman_settings() -> NumbermanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "NUMBERMAN", {})
    return NumbermanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_numberman_settings(), name)


numberman_settings = _LazySettings()
