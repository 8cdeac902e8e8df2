from __future__ import annotations

import httpx

from app.models.errors import ProviderUnavailable
from app.models.research import SearchResult, SearchSource
from app.tools.web_utils import request_json

GITHUB_SEARCH_URL = "https://api.github.com/search/repositories"
GITHUB_USER_AGENT = "ResearchAssistant-Agent"


async def search(
    query: str,
    *,
    api_url: str = GITHUB_SEARCH_URL,
    token: str = "",
    limit: int = 5,
    max_results: int | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> list[SearchResult]:
    """Search GitHub repositories ordered by stars and normalize results."""
    headers = {
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": GITHUB_USER_AGENT,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"

    try:
        payload = await request_json(
            "GET",
            api_url,
            http_client=http_client,
            params={"q": query, "sort": "stars", "order": "desc"},
            headers=headers,
        )
    except (httpx.HTTPError, ValueError) as exc:
        raise ProviderUnavailable("github", f"GitHub request failed: {exc}") from exc

    if not isinstance(payload, dict):
        raise ProviderUnavailable("github", "GitHub returned a non-object payload")
    items = payload.get("items") or []
    if not isinstance(items, list):
        raise ProviderUnavailable("github", "GitHub 'items' is not a list")

    return [
        SearchResult(
            title=str(item.get("name") or ""),
            link=str(item.get("html_url") or ""),
            snippet=str(item.get("description") or ""),
            source=SearchSource.GITHUB,
            position=idx + 1,
        )
        for idx, item in enumerate(items[: max(limit, 0)])
    ]
