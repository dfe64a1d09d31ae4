"""The user's subreddit list.

``SubredditManager`` owns the ordered list of ``Subreddit`` records and
mirrors it to the preference store under two keys:

* ``subreddits`` – the names, in list order.
* ``enabledSubreddits`` – the enabled flags, index-aligned with the names.

Every mutation writes back immediately.  The manager is built once at
application start from an already seeded store and handed to whoever needs it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import httpx

from src.main.db import (
    ENABLED_SUBREDDITS_KEY,
    SUBREDDITS_KEY,
    PreferenceConfigurationError,
    PreferenceStore,
)
from src.main.tools.fetcher import (
    AddSubredditResponse,
    InvalidSubredditURL,
    check_new_listing,
    listing_url_for,
)

logger = logging.getLogger(__name__)


class DuplicateSubredditError(ValueError):
    """A subreddit with the same name (ignoring case) is already listed."""
    pass


@dataclass(frozen=True)
class Subreddit:
    name: str
    enabled: bool

    def to_dict(self) -> dict:
        return {"name": self.name, "enabled": self.enabled}


def _load(store: PreferenceStore) -> List[Subreddit]:
    names = store.get(SUBREDDITS_KEY)
    enabled = store.get(ENABLED_SUBREDDITS_KEY)
    if names is None or enabled is None:
        missing = SUBREDDITS_KEY if names is None else ENABLED_SUBREDDITS_KEY
        raise PreferenceConfigurationError(f"Preference {missing!r} has not been set")
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise PreferenceConfigurationError(f"Preference {SUBREDDITS_KEY!r} must be a list of strings")
    if not isinstance(enabled, list) or not all(isinstance(e, bool) for e in enabled):
        raise PreferenceConfigurationError(f"Preference {ENABLED_SUBREDDITS_KEY!r} must be a list of booleans")
    if len(names) != len(enabled):
        raise PreferenceConfigurationError(
            f"Preferences {SUBREDDITS_KEY!r} and {ENABLED_SUBREDDITS_KEY!r} differ in length "
            f"({len(names)} != {len(enabled)})"
        )
    return [Subreddit(name, flag) for name, flag in zip(names, enabled)]


class SubredditManager:
    """Manages the user's subreddits and their enabled states."""

    def __init__(
        self,
        store: PreferenceStore,
        *,
        host: str = "www.reddit.com",
        client: Optional[httpx.AsyncClient] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._store = store
        self._host = host
        self._client = client
        self._user_agent = user_agent
        self._timeout = timeout
        self._subreddits = _load(store)
        logger.info("Loaded %d subreddits", len(self._subreddits))

    def __len__(self) -> int:
        return len(self._subreddits)

    @property
    def subreddits(self) -> Tuple[Subreddit, ...]:
        return tuple(self._subreddits)

    def _contains(self, name: str) -> bool:
        lowered = name.lower()
        return any(s.name.lower() == lowered for s in self._subreddits)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._subreddits):
            raise IndexError(f"Subreddit index {index} out of range (0..{len(self._subreddits) - 1})")

    def _save_names(self) -> None:
        self._store.set(SUBREDDITS_KEY, [s.name for s in self._subreddits])

    def _save_enabled(self) -> None:
        self._store.set(ENABLED_SUBREDDITS_KEY, [s.enabled for s in self._subreddits])

    def add(self, name: str, enabled: bool = True) -> None:
        """Alphabetically add a subreddit to the list.

        The name must not already be listed (case-insensitively); run
        ``validate`` first to rule that out.
        """
        if self._contains(name):
            raise DuplicateSubredditError(f"Subreddit {name!r} is already listed")
        self._subreddits.append(Subreddit(name, enabled))
        self._subreddits.sort(key=lambda s: s.name)
        self._save_names()
        self._save_enabled()
        logger.info("Added subreddit %s (enabled=%s)", name, enabled)

    def remove(self, index: int) -> Subreddit:
        """Remove and return the subreddit at *index*."""
        self._check_index(index)
        removed = self._subreddits.pop(index)
        self._save_names()
        self._save_enabled()
        logger.info("Removed subreddit %s", removed.name)
        return removed

    def set_enabled(self, index: int, enabled: bool) -> None:
        """Enable/disable the subreddit at *index*; only the flags are re-saved."""
        self._check_index(index)
        current = self._subreddits[index]
        self._subreddits[index] = Subreddit(current.name, enabled)
        self._save_enabled()
        logger.info("Set subreddit %s enabled=%s", current.name, enabled)

    async def validate(self, candidate: str) -> AddSubredditResponse:
        """Check whether *candidate* can be added to the list.

        Local checks (empty, duplicate, URL safety) run first and never touch
        the network; otherwise the subreddit's "new" listing is fetched.  The
        candidate is not added.
        """
        logger.info("Validating subreddit: %s", candidate)

        if candidate == "":
            logger.info("No subreddit specified.")
            return AddSubredditResponse.EMPTY_STRING

        if self._contains(candidate):
            logger.info("This subreddit already exists.")
            return AddSubredditResponse.DUPLICATE

        try:
            url = listing_url_for(candidate, self._host)
        except InvalidSubredditURL as exc:
            logger.info("This subreddit produces an invalid URL: %s", exc)
            return AddSubredditResponse.INVALID_URL

        return await check_new_listing(
            url, self._client, user_agent=self._user_agent, timeout=self._timeout
        )

    def build_selector(self) -> str:
        """Return the enabled subreddits' names joined by ``+``."""
        return "+".join(s.name for s in self._subreddits if s.enabled)

    def listing_url(self, sort: str = "hot") -> Optional[str]:
        """URL of the combined listing for every enabled subreddit, if any."""
        selector = self.build_selector()
        if not selector:
            return None
        return listing_url_for(selector, self._host, sort=sort)
