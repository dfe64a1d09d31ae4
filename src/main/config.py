"""Runtime configuration.

Values come from the process environment, optionally populated from a
``.env`` file in the working directory.  Both servers build one ``Settings``
instance at start-up and pass the pieces on to the store and the manager.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

DEFAULT_DB_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "preferences.db"))
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _split_names(raw: str) -> List[str]:
    return [name.strip() for name in raw.split(",") if name.strip()]


@dataclass(frozen=True)
class Settings:
    db_path: str = DEFAULT_DB_PATH
    reddit_host: str = "www.reddit.com"
    user_agent: str = "subreddit-manager/0.1"
    request_timeout: float = 10.0
    default_subreddits: List[str] = field(default_factory=lambda: ["EarthPorn", "wallpaper", "wallpapers"])
    log_level: str = "INFO"
    api_host: str = "127.0.0.1"
    api_port: int = 8090

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (after loading ``.env``)."""
        load_dotenv()
        defaults = cls()
        raw_defaults = os.getenv("DEFAULT_SUBREDDITS")
        return cls(
            db_path=os.getenv("SUBREDDITS_DB_PATH", defaults.db_path),
            reddit_host=os.getenv("REDDIT_HOST", defaults.reddit_host),
            user_agent=os.getenv("REDDIT_USER_AGENT", defaults.user_agent),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", str(defaults.request_timeout))),
            default_subreddits=_split_names(raw_defaults) if raw_defaults is not None else defaults.default_subreddits,
            log_level=os.getenv("LOG_LEVEL", defaults.log_level),
            api_host=os.getenv("API_HOST", defaults.api_host),
            api_port=int(os.getenv("API_PORT", str(defaults.api_port))),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
