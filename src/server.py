"""FastMCP server exposing the subreddit list as tools.

Available tools:
* ``list_subreddits() -> str`` – JSON list of ``{index, name, enabled}``.
* ``add_subreddit(name: str, enabled: bool) -> str`` – validate against Reddit and
  add the subreddit when the outcome is ``success``.
* ``remove_subreddit(index: int) -> str`` – remove the subreddit at *index*.
* ``set_subreddit_enabled(index: int, enabled: bool) -> str`` – toggle a subreddit.
* ``subreddit_selector() -> str`` – the enabled subreddits joined by ``+``.

The tool bodies are plain coroutines taking the manager so they can be reused
and tested without a transport; ``create_server`` binds them to one manager.
"""

import json

from fastmcp import FastMCP

from src.main.config import Settings, configure_logging
from src.main.tools.fetcher import AddSubredditResponse
from src.main.tools.registry import DuplicateSubredditError, SubredditManager
from src.main.tools.utils import build_manager


async def list_subreddits(manager: SubredditManager) -> str:
    if not len(manager):
        return "No subreddits registered."
    return json.dumps([
        {"index": i, **subreddit.to_dict()}
        for i, subreddit in enumerate(manager.subreddits)
    ])


async def add_subreddit(manager: SubredditManager, name: str, enabled: bool = True) -> str:
    outcome = await manager.validate(name)
    if outcome is not AddSubredditResponse.SUCCESS:
        return f"Not added ({outcome.value}): {outcome.message}"
    try:
        manager.add(name, enabled)
    except DuplicateSubredditError:
        outcome = AddSubredditResponse.DUPLICATE
        return f"Not added ({outcome.value}): {outcome.message}"
    return f"Subreddit added: {name}"


async def remove_subreddit(manager: SubredditManager, index: int) -> str:
    try:
        removed = manager.remove(index)
    except IndexError as exc:
        return f"Error: {exc}"
    return f"Subreddit removed: {removed.name}"


async def set_subreddit_enabled(manager: SubredditManager, index: int, enabled: bool) -> str:
    try:
        manager.set_enabled(index, enabled)
    except IndexError as exc:
        return f"Error: {exc}"
    name = manager.subreddits[index].name
    return f"Subreddit {name} {'enabled' if enabled else 'disabled'}."


async def subreddit_selector(manager: SubredditManager) -> str:
    return manager.build_selector()


def create_server(manager: SubredditManager) -> FastMCP:
    """Build a FastMCP server whose tools operate on *manager*."""
    mcp = FastMCP("subreddit-manager")

    @mcp.tool(name="list_subreddits")
    async def _list_subreddits() -> str:
        """Return every subreddit in order with its index and enabled state."""
        return await list_subreddits(manager)

    @mcp.tool(name="add_subreddit")
    async def _add_subreddit(name: str, enabled: bool = True) -> str:
        """Validate *name* against Reddit and add it when it has new posts."""
        return await add_subreddit(manager, name, enabled)

    @mcp.tool(name="remove_subreddit")
    async def _remove_subreddit(index: int) -> str:
        """Remove the subreddit at *index*."""
        return await remove_subreddit(manager, index)

    @mcp.tool(name="set_subreddit_enabled")
    async def _set_subreddit_enabled(index: int, enabled: bool) -> str:
        """Enable or disable the subreddit at *index*."""
        return await set_subreddit_enabled(manager, index, enabled)

    @mcp.tool(name="subreddit_selector")
    async def _subreddit_selector() -> str:
        """Return the enabled subreddits joined by ``+``."""
        return await subreddit_selector(manager)

    return mcp


def main() -> None:
    """Entry point – start the FastMCP server on stdio transport."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    mcp = create_server(build_manager(settings))
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
