from __future__ import annotations

from typing import Any

import httpx

from app.models.errors import ConfigurationMissing, ProviderUnavailable
from app.models.research import SearchResult, SearchSource
from app.tools.web_utils import request_json

SERPER_BASE_URL = "https://google.serper.dev"

# source -> (endpoint path, response list key, snippet fallback field)
SERPER_ENDPOINTS: dict[SearchSource, tuple[str, str, str | None]] = {
    SearchSource.WEB: ("search", "organic", None),
    SearchSource.SCHOLAR: ("scholar", "organic", "publication"),
    SearchSource.NEWS: ("news", "news", "description"),
}


def _map_results(items: list[Any], source: SearchSource, fallback_field: str | None) -> list[SearchResult]:
    mapped: list[SearchResult] = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        snippet = item.get("snippet") or ""
        if not snippet and fallback_field:
            snippet = item.get(fallback_field) or ""
        mapped.append(
            SearchResult(
                title=str(item.get("title") or ""),
                link=str(item.get("link") or ""),
                snippet=str(snippet),
                source=source,
                position=idx + 1,
            )
        )
    return mapped


async def search(
    query: str,
    *,
    source: SearchSource,
    api_key: str,
    base_url: str = SERPER_BASE_URL,
    max_results: int | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> list[SearchResult]:
    """Run a Serper web, scholar or news search and normalize results."""
    if source not in SERPER_ENDPOINTS:
        raise ValueError(f"Serper does not serve source: {source.value}")
    if not api_key:
        raise ConfigurationMissing("SERPER_API_KEY is not configured")

    path, list_key, fallback_field = SERPER_ENDPOINTS[source]
    body: dict[str, Any] = {"q": query}
    # Only the web endpoint honours a result count.
    if source is SearchSource.WEB and max_results:
        body["num"] = max_results

    try:
        payload = await request_json(
            "POST",
            f"{base_url.rstrip('/')}/{path}",
            http_client=http_client,
            json=body,
            headers={
                "X-API-KEY": api_key,
                "Content-Type": "application/json",
            },
        )
    except (httpx.HTTPError, ValueError) as exc:
        raise ProviderUnavailable(source.value, f"Serper request failed: {exc}") from exc

    if not isinstance(payload, dict):
        raise ProviderUnavailable(source.value, "Serper returned a non-object payload")
    items = payload.get(list_key) or []
    if not isinstance(items, list):
        raise ProviderUnavailable(source.value, f"Serper '{list_key}' is not a list")
    return _map_results(items, source, fallback_field)
