"""FastAPI integration for receiving scrape callbacks.

This module contains:
- Callback router factory
- Callback receiver app factory
"""

from scrap_ai.api.callbacks import (
    DEFAULT_CALLBACK_PATH,
    EventHandler,
    create_app,
    create_callback_router,
)

__all__ = [
    "DEFAULT_CALLBACK_PATH",
    "EventHandler",
    "create_app",
    "create_callback_router",
]
