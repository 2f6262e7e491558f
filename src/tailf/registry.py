"""Metadata provider registry, keyed by ``os.name``."""

from __future__ import annotations

from typing import Callable

# Populated by the @metadata_provider decorator in identity.py
PROVIDERS: dict[str, Callable] = {}


def metadata_provider(*platforms: str):
    """Decorator to register a provider class for one or more platforms."""
    def decorator(cls):
        for name in platforms:
            PROVIDERS[name] = cls
        return cls
    return decorator
