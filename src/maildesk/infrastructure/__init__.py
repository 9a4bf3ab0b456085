# src/maildesk/infrastructure/__init__.py
"""Infrastructure layer - AWS adapters, configuration, and wiring."""

from maildesk.infrastructure.settings import Settings, get_settings


def get_use_cases():
    """Get wired use cases (lazy import to avoid circular deps)."""
    from maildesk.infrastructure.container import get_use_cases as _get
    return _get()


__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Wiring
    "get_use_cases",
]
