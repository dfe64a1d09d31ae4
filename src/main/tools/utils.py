"""Shared start-up for both servers.

Both the FastAPI HTTP server (`src/app_server.py`) and the FastMCP tool server
(`src/server.py`) need the same ``SubredditManager``: open the preference
store, seed the default subreddits and load the list.  This module provides
that one step so the two servers build the manager identically.
"""

from __future__ import annotations

from src.main.config import Settings
from src.main.db import open_store
from src.main.tools.registry import SubredditManager


def build_manager(settings: Settings) -> SubredditManager:
    """Open the store, seed defaults and construct the manager."""
    store = open_store(settings.db_path, settings.default_subreddits)
    return SubredditManager(
        store,
        host=settings.reddit_host,
        user_agent=settings.user_agent,
        timeout=settings.request_timeout,
    )
