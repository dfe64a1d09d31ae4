from fastapi import FastAPI, HTTPException, Request
from typing import List, Dict
from src.main.config import Settings, configure_logging
from src.main.tools.utils import build_manager
from src.main.tools.fetcher import AddSubredditResponse, InvalidSubredditURL
from src.main.tools.registry import DuplicateSubredditError, SubredditManager
import uvicorn

app = FastAPI(
    title="Subreddit Manager API",
    description="Manage the list of subreddits and their enabled states.",
    version="0.1.0",
    docs_url="/docs",        # Swagger UI
    redoc_url="/redoc",      # ReDoc UI
    openapi_url="/openapi.json",
)


def _manager(request: Request) -> SubredditManager:
    return request.app.state.manager


@app.get("/", tags=["Root"], summary="API root")
async def read_root():
    return {"message": "Welcome to the Subreddit Manager's FastAPI server!"}


@app.get(
    path="/listSubreddits",
    tags=["Subreddit"],
    summary="List subreddits",
    description="Return every subreddit in order with its index and enabled state.",
)
async def list_subreddits(request: Request) -> List[Dict]:
    return [
        {"index": i, **subreddit.to_dict()}
        for i, subreddit in enumerate(_manager(request).subreddits)
    ]


@app.post(
    "/addSubreddit",
    tags=["Subreddit"],
    summary="Validate and add a subreddit",
    description=(
        "Validate ``name`` against Reddit and add it to the list when the "
        "outcome is ``success``. The outcome is returned either way."
    ),
)
async def add_subreddit(request: Request, name: str, enabled: bool = True) -> dict:
    manager = _manager(request)
    outcome = await manager.validate(name)
    added = outcome is AddSubredditResponse.SUCCESS
    if added:
        try:
            manager.add(name, enabled)
        except DuplicateSubredditError:
            # Added by an overlapping request while this one was validating.
            outcome, added = AddSubredditResponse.DUPLICATE, False
    return {"outcome": outcome.value, "message": outcome.message, "added": added}


@app.delete("/removeSubreddit", tags=["Subreddit"], summary="Remove a subreddit by index")
async def remove_subreddit(request: Request, index: int) -> dict:
    try:
        removed = _manager(request).remove(index)
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"removed": removed.to_dict()}


@app.post("/setSubredditEnabled", tags=["Subreddit"], summary="Enable or disable a subreddit by index")
async def set_subreddit_enabled(request: Request, index: int, enabled: bool) -> dict:
    manager = _manager(request)
    try:
        manager.set_enabled(index, enabled)
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return manager.subreddits[index].to_dict()


@app.get(
    "/selector",
    tags=["Subreddit"],
    summary="Combined selector",
    description="The enabled subreddits joined by ``+`` and the combined listing URL.",
)
async def selector(request: Request, sort: str = "hot") -> dict:
    manager = _manager(request)
    try:
        url = manager.listing_url(sort)
    except InvalidSubredditURL as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"selector": manager.build_selector(), "url": url}


def main():
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    app.state.manager = build_manager(settings)
    # bind to localhost interface by default
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)

if __name__ == "__main__":
    main()
