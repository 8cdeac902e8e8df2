from __future__ import annotations

from urllib.parse import quote

import httpx

from app.models.errors import ProviderUnavailable
from app.models.research import SearchResult, SearchSource
from app.tools.web_utils import request_json, strip_html_tags

WIKIPEDIA_API_URL = "https://en.wikipedia.org/w/api.php"
WIKIPEDIA_ARTICLE_BASE = "https://en.wikipedia.org/wiki/"


def article_url(title: str) -> str:
    # Matches JavaScript's encodeURIComponent on the underscored title.
    return WIKIPEDIA_ARTICLE_BASE + quote(title.replace(" ", "_"), safe="!~*'()")


async def search(
    query: str,
    *,
    api_url: str = WIKIPEDIA_API_URL,
    max_results: int | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> list[SearchResult]:
    """Search Wikipedia's full-text index and normalize results."""
    params = {
        "action": "query",
        "list": "search",
        "srsearch": query,
        "format": "json",
        "origin": "*",
    }
    try:
        payload = await request_json("GET", api_url, http_client=http_client, params=params)
    except (httpx.HTTPError, ValueError) as exc:
        raise ProviderUnavailable("wikipedia", f"Wikipedia request failed: {exc}") from exc

    if not isinstance(payload, dict):
        raise ProviderUnavailable("wikipedia", "Wikipedia returned a non-object payload")
    items = (payload.get("query") or {}).get("search") or []
    if not isinstance(items, list):
        raise ProviderUnavailable("wikipedia", "Wikipedia 'query.search' is not a list")

    results: list[SearchResult] = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        title = str(item.get("title") or "")
        results.append(
            SearchResult(
                title=title,
                link=article_url(title),
                snippet=strip_html_tags(str(item.get("snippet") or "")),
                source=SearchSource.WIKIPEDIA,
                position=idx + 1,
            )
        )
    return results
