"""Tests for the FastMCP tool bodies, called directly with a manager."""

import asyncio
import json
import os
import tempfile
from unittest import IsolatedAsyncioTestCase, mock

from fastmcp import FastMCP

from src import server
from src.main.db import ENABLED_SUBREDDITS_KEY, SUBREDDITS_KEY, PreferenceStore
from src.main.tools.fetcher import AddSubredditResponse
from src.main.tools.registry import SubredditManager


class TestTools(IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.store = PreferenceStore(os.path.join(self.tmp.name, "prefs.db"))
        self.store.init_schema()
        self.store.set(SUBREDDITS_KEY, ["aww", "pics"])
        self.store.set(ENABLED_SUBREDDITS_KEY, [False, True])
        self.addCleanup(self.store.close)
        self.manager = SubredditManager(self.store)

    def test_create_server(self) -> None:
        self.assertIsInstance(server.create_server(self.manager), FastMCP)

    async def test_list(self) -> None:
        listed = json.loads(await server.list_subreddits(self.manager))
        self.assertEqual(listed[1], {"index": 1, "name": "pics", "enabled": True})

    async def test_list_empty(self) -> None:
        self.manager.remove(0)
        self.manager.remove(0)
        self.assertEqual(await server.list_subreddits(self.manager), "No subreddits registered.")

    async def test_add(self) -> None:
        with mock.patch.object(
            self.manager, "validate", mock.AsyncMock(return_value=AddSubredditResponse.SUCCESS)
        ):
            message = await server.add_subreddit(self.manager, "AskReddit")
        self.assertEqual(message, "Subreddit added: AskReddit")
        self.assertEqual(self.manager.subreddits[0].name, "AskReddit")

    async def test_add_rejected(self) -> None:
        message = await server.add_subreddit(self.manager, "")
        self.assertIn("emptyString", message)
        self.assertEqual(len(self.manager), 2)

    async def test_remove_and_toggle(self) -> None:
        self.assertEqual(await server.set_subreddit_enabled(self.manager, 0, True), "Subreddit aww enabled.")
        self.assertEqual(await server.subreddit_selector(self.manager), "aww+pics")
        self.assertEqual(await server.remove_subreddit(self.manager, 1), "Subreddit removed: pics")
        self.assertTrue((await server.remove_subreddit(self.manager, 5)).startswith("Error:"))

    async def test_overlapping_adds_of_same_name(self) -> None:
        async def slow_success(name):
            await asyncio.sleep(0.01)
            return AddSubredditResponse.SUCCESS

        with mock.patch.object(self.manager, "validate", side_effect=slow_success):
            first, second = await asyncio.gather(
                server.add_subreddit(self.manager, "AskReddit"),
                server.add_subreddit(self.manager, "askreddit"),
            )

        self.assertEqual(first, "Subreddit added: AskReddit")
        self.assertIn("duplicate", second)
        self.assertEqual([s.name for s in self.manager.subreddits], ["AskReddit", "aww", "pics"])
