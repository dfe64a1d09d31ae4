"""Durable key/value preference storage.

Preferences are kept in a single SQLite table of ``key`` -> JSON ``value``
rows.  The *SQL* lives in ``db_schema.sql`` next to this module so schema
changes do not have to touch the code that reads and writes values.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from queue import Queue
from threading import Lock
from typing import Any, Iterable, Iterator

logger = logging.getLogger(__name__)

SUBREDDITS_KEY = "subreddits"
ENABLED_SUBREDDITS_KEY = "enabledSubreddits"


class PreferenceConfigurationError(RuntimeError):
    """Persisted preferences are missing or have an unexpected shape."""
    pass


class PreferenceStore:
    """SQLite-backed store of JSON values keyed by name."""

    def __init__(self, db_path: str, pool_size: int = 5) -> None:
        self.db_path = db_path
        self._pool_size = pool_size
        self._pool: Queue | None = None
        self._pool_lock = Lock()

    def _init_pool(self) -> None:
        pool: Queue = Queue(maxsize=self._pool_size)
        for _ in range(self._pool_size):
            conn = sqlite3.connect(self.db_path, timeout=5, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            pool.put(conn)
        self._pool = pool

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """Return a pooled SQLite connection as a context manager.

        Usage:
            with store.get_connection() as conn:
                cur = conn.cursor()
                ...
        """
        if self._pool is None:
            with self._pool_lock:
                if self._pool is None:
                    self._init_pool()

        conn = self._pool.get()
        try:
            yield conn
        finally:
            self._pool.put(conn)

    def init_schema(self) -> None:
        """Create the ``preferences`` table if it does not exist."""
        schema_path = Path(__file__).with_name("db_schema.sql")
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            sql = f.read()

        # Fresh connection for schema initialisation (outside pool)
        conn = sqlite3.connect(self.db_path, timeout=5)
        try:
            conn.executescript(sql)
            conn.commit()
        finally:
            conn.close()
        logger.debug("Preference schema ready in %s", self.db_path)

    def contains(self, key: str) -> bool:
        with self.get_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT 1 FROM preferences WHERE key = ?", (key,))
            return cur.fetchone() is not None

    def get(self, key: str) -> Any | None:
        """Return the decoded value stored under *key*, or ``None`` when absent."""
        with self.get_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT value FROM preferences WHERE key = ?", (key,))
            row = cur.fetchone()
        if row is None:
            return None
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as exc:
            raise PreferenceConfigurationError(f"Preference {key!r} is not valid JSON: {exc}") from exc

    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, replacing any previous value."""
        encoded = json.dumps(value)
        with self.get_connection() as conn:
            conn.execute(
                "INSERT INTO preferences (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, encoded),
            )
            conn.commit()

    def close(self) -> None:
        if self._pool is None:
            return
        while not self._pool.empty():
            self._pool.get_nowait().close()
        self._pool = None


def seed_defaults(store: PreferenceStore, names: Iterable[str]) -> bool:
    """Register the default subreddit list for first use.

    Each key is only written when it is absent, so existing user state is
    never overwritten.  Returns ``True`` if anything was written.
    """
    names = sorted(names)
    seeded = False
    if not store.contains(SUBREDDITS_KEY):
        store.set(SUBREDDITS_KEY, names)
        logger.info("Seeded default subreddits: %s", ", ".join(names))
        seeded = True
    if not store.contains(ENABLED_SUBREDDITS_KEY):
        # Flags must line up with whatever names are stored, not the defaults.
        stored = store.get(SUBREDDITS_KEY)
        flags = [True] * (len(stored) if isinstance(stored, list) else 0)
        store.set(ENABLED_SUBREDDITS_KEY, flags)
        logger.info("Seeded %d enabled flags for the stored subreddits", len(flags))
        seeded = True
    return seeded


def open_store(db_path: str, default_subreddits: Iterable[str] = ()) -> PreferenceStore:
    """Open the store at *db_path*, create the schema and seed defaults."""
    store = PreferenceStore(db_path)
    store.init_schema()
    seed_defaults(store, default_subreddits)
    return store
