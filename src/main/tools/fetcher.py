"""Remote check of a subreddit's "new" listing.

The module exposes ``listing_url_for`` to build the listing URL for a
candidate name and ``check_new_listing`` which fetches that URL and classifies
the response as an ``AddSubredditResponse``.  Transport and parsing failures
are mapped to outcomes rather than raised, so callers always get a definite
answer.  Nothing here retries.
"""

from __future__ import annotations

import logging
from enum import Enum
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

# Characters allowed verbatim in a URL path segment (RFC 3986 pchar).
_PATH_SEGMENT_SAFE = "-._~!$&'()*+,;=:@"


class AddSubredditResponse(str, Enum):
    """Outcome of validating a candidate subreddit name."""

    SUCCESS = "success"
    EMPTY_STRING = "emptyString"
    DUPLICATE = "duplicate"
    INVALID_URL = "invalidURL"
    NETWORK_ERROR = "networkError"
    NO_NEW_POSTS = "noNewPosts"
    UNKNOWN_ERROR = "unknownError"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    AddSubredditResponse.SUCCESS: "Subreddit is valid.",
    AddSubredditResponse.EMPTY_STRING: "No subreddit specified.",
    AddSubredditResponse.DUPLICATE: "This subreddit already exists.",
    AddSubredditResponse.INVALID_URL: "This subreddit produces an invalid URL.",
    AddSubredditResponse.NETWORK_ERROR: "There was a network error.",
    AddSubredditResponse.NO_NEW_POSTS: "Subreddit has no posts in \"new\".",
    AddSubredditResponse.UNKNOWN_ERROR: "An unknown error occurred.",
}


class InvalidSubredditURL(ValueError):
    """The name cannot be embedded in the listing URL unchanged."""
    pass


def listing_url_for(name: str, host: str, sort: str = "new") -> str:
    """Return ``https://<host>/r/<name>/<sort>.json``.

    Raises ``InvalidSubredditURL`` when *name* contains characters that would
    have to be escaped in a path segment, is a dot segment, or the resulting URL
    does not parse.
    """
    if quote(name, safe=_PATH_SEGMENT_SAFE) != name:
        raise InvalidSubredditURL(f"Subreddit name {name!r} is not URL safe")
    if not sort or quote(sort, safe="") != sort:
        raise InvalidSubredditURL(f"Listing sort {sort!r} is not URL safe")
    url = f"https://{host}/r/{name}/{sort}.json"
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise InvalidSubredditURL(str(exc)) from exc
    # Dot segments ("." or "..") are normalised away by the URL parser.
    if parsed.path != f"/r/{name}/{sort}.json":
        raise InvalidSubredditURL(f"Subreddit name {name!r} changes the listing path to {parsed.path!r}")
    return url


def _classify(payload: object) -> AddSubredditResponse:
    if not isinstance(payload, dict):
        logger.error("Error parsing JSON data: top level is %s", type(payload).__name__)
        return AddSubredditResponse.UNKNOWN_ERROR

    if "error" in payload:
        logger.error("The JSON data contains an error: %s", payload.get("error"))
        return AddSubredditResponse.UNKNOWN_ERROR

    data = payload.get("data")
    children = data.get("children") if isinstance(data, dict) else None
    if not isinstance(children, list):
        logger.error("Error parsing JSON data: no data.children listing")
        return AddSubredditResponse.UNKNOWN_ERROR

    if children:
        logger.info("Subreddit is valid.")
        return AddSubredditResponse.SUCCESS
    logger.info("Subreddit has no posts in \"new\".")
    return AddSubredditResponse.NO_NEW_POSTS


async def _fetch(url: str, client: httpx.AsyncClient, *, user_agent: str | None = None,
                 timeout: float | None = None) -> httpx.Response:
    headers: dict[str, str] = {}
    if user_agent:
        headers["User-Agent"] = user_agent
    kwargs = {"headers": headers, "follow_redirects": False}
    if timeout is not None:
        kwargs["timeout"] = timeout
    return await client.get(url, **kwargs)


async def check_new_listing(
    url: str,
    client: httpx.AsyncClient | None = None,
    *,
    user_agent: str | None = None,
    timeout: float | None = None,
) -> AddSubredditResponse:
    """Fetch the listing at *url* and classify it.

    When *client* is ``None`` a short-lived ``httpx.AsyncClient`` is opened
    for this one request.
    """
    try:
        if client is None:
            async with httpx.AsyncClient() as own_client:
                response = await _fetch(url, own_client, user_agent=user_agent, timeout=timeout)
        else:
            response = await _fetch(url, client, user_agent=user_agent, timeout=timeout)
    except httpx.TransportError as exc:
        logger.error("There was a network error fetching %s: %s", url, exc)
        return AddSubredditResponse.NETWORK_ERROR
    except httpx.RequestError as exc:
        # Decoding failures and other non-transport errors while reading the body.
        logger.error("Error reading response from %s: %s", url, exc)
        return AddSubredditResponse.UNKNOWN_ERROR

    try:
        payload = response.json()
    except (ValueError, RecursionError) as exc:
        logger.error("Error thrown while parsing JSON data from %s: %s", url, exc)
        return AddSubredditResponse.UNKNOWN_ERROR

    return _classify(payload)
