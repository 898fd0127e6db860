"""
Application wiring for the Localite auth client.

The host app builds one ServiceContainer at startup and reaches the
session controller and deep link handler through it.
"""

from .dependencies import ServiceContainer, get_container, reset_container

__all__ = ["ServiceContainer", "get_container", "reset_container"]
