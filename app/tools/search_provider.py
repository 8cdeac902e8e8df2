from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Mapping, Protocol

import httpx

from app.config import Settings
from app.models.research import SearchResult, SearchSource
from app.tools import github_search, serper_search, wikipedia_search


class SearchAdapter(Protocol):
    async def __call__(self, query: str, *, max_results: int | None = None) -> list[SearchResult]: ...


@dataclass(frozen=True)
class SearchRegistry:
    """One adapter per SearchSource member; construction fails if any is missing."""

    adapters: Mapping[SearchSource, SearchAdapter]

    def __post_init__(self) -> None:
        missing = [s.value for s in SearchSource if s not in self.adapters]
        if missing:
            raise ValueError(f"Search registry is missing adapters for: {', '.join(missing)}")

    def adapter_for(self, source: SearchSource) -> SearchAdapter:
        return self.adapters[source]


def build_search_registry(
    config: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> SearchRegistry:
    """Bind each search backend to its credentials and shared HTTP client once."""
    serper = partial(
        serper_search.search,
        api_key=config.serper_api_key,
        base_url=config.serper_base_url,
        http_client=http_client,
    )
    return SearchRegistry(
        adapters={
            SearchSource.WEB: partial(serper, source=SearchSource.WEB),
            SearchSource.WIKIPEDIA: partial(
                wikipedia_search.search,
                api_url=config.wikipedia_api_url,
                http_client=http_client,
            ),
            SearchSource.SCHOLAR: partial(serper, source=SearchSource.SCHOLAR),
            SearchSource.GITHUB: partial(
                github_search.search,
                api_url=config.github_api_url,
                token=config.github_token,
                limit=config.github_max_results,
                http_client=http_client,
            ),
            SearchSource.NEWS: partial(serper, source=SearchSource.NEWS),
        }
    )
