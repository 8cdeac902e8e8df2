from __future__ import annotations

from typing import Iterable, Sequence

from app.models.research import SearchResult, SearchSource
from app.services import logger as log_service
from app.services.outcomes import gather_outcomes
from app.tools.search_provider import SearchRegistry

MAX_SOURCES = 5


def resolve_sources(
    sources: Iterable[SearchSource | str] | None,
    *,
    max_sources: int = MAX_SOURCES,
) -> list[SearchSource]:
    """Normalize caller-requested sources.

    Keeps caller order, drops repeats, caps at max_sources. None means all.
    Raises ValueError for names that are not a known source.
    """
    if sources is None:
        requested: list[SearchSource] = list(SearchSource)
    else:
        requested = [SearchSource(s.strip().lower() if isinstance(s, str) else s) for s in sources]

    resolved: list[SearchSource] = []
    for source in requested:
        if source in resolved:
            continue
        resolved.append(source)
    return resolved[: max(max_sources, 0)]


def dedupe_by_link(results: Iterable[SearchResult], *, limit: int) -> list[SearchResult]:
    """First occurrence of a link wins; stop once `limit` unique results are kept."""
    seen: set[str] = set()
    deduped: list[SearchResult] = []
    for result in results:
        if len(deduped) >= limit:
            break
        if result.link in seen:
            continue
        seen.add(result.link)
        deduped.append(result)
    return deduped


class SearchAggregator:
    """Fans a query out to the selected search backends and merges the results.

    A failing backend contributes an empty list; it never fails the whole call.
    """

    def __init__(
        self,
        registry: SearchRegistry,
        *,
        timeout: float | None = 20.0,
        max_sources: int = MAX_SOURCES,
    ):
        self.registry = registry
        self.timeout = timeout
        self.max_sources = max_sources

    async def aggregate(
        self,
        query: str,
        result_budget: int,
        sources: Sequence[SearchSource | str] | None = None,
        *,
        max_sources: int | None = None,
    ) -> list[SearchResult]:
        if result_budget <= 0:
            raise ValueError("result_budget must be a positive integer")

        selected = set(
            resolve_sources(
                sources,
                max_sources=self.max_sources if max_sources is None else max_sources,
            )
        )
        # Merge order is registration order, not the caller's order.
        ordered = [source for source in SearchSource if source in selected]

        outcomes = await gather_outcomes(
            [
                (
                    source.value,
                    self.registry.adapter_for(source)(query, max_results=result_budget),
                )
                for source in ordered
            ],
            timeout=self.timeout,
        )

        merged: list[SearchResult] = []
        for outcome in outcomes:
            if not outcome.ok:
                log_service.log_provider_failure(
                    outcome.label,
                    str(outcome.error),
                    error_type=type(outcome.error).__name__,
                    query=query[:100],
                )
                continue
            merged.extend(outcome.value or [])

        results = dedupe_by_link(merged, limit=result_budget)
        log_service.log_event(
            event_type="search_aggregated",
            message="Search aggregation complete",
            sources=[s.value for s in ordered],
            failed=[o.label for o in outcomes if not o.ok],
            merged_count=len(merged),
            results_count=len(results),
        )
        return results
