from __future__ import annotations

import asyncio
import time
import uuid
from typing import Iterable, Sequence

import httpx

from app.config import Settings
from app.llm_client import CompletionRequest, LLMRegistry, build_llm_registry
from app.models.errors import InvalidRequest
from app.models.research import (
    AggregatedContext,
    Depth,
    LLMProvider,
    ResearchParams,
    ResearchReport,
    ResearchStage,
    SearchResult,
    SearchSource,
)
from app.services import logger as log_service
from app.services.budgets import DepthBudget, resolve_budget
from app.services.outcomes import gather_outcomes
from app.services.prompt_builder import (
    ANALYSIS_TEMPERATURE,
    RELATED_TOPICS_TEMPERATURE,
    SUMMARY_TEMPERATURE,
    build_analysis_prompt,
    build_related_topics_prompt,
    build_research_prompt,
)
from app.services.search_aggregator import MAX_SOURCES, SearchAggregator, resolve_sources
from app.tools.content_fetcher import ContentFetcher
from app.tools.search_provider import build_search_registry


def _enum_value(enum_cls, raw, field_name: str):
    try:
        return enum_cls(raw.strip().lower() if isinstance(raw, str) else raw)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidRequest(f"Invalid {field_name} {raw!r}; expected one of: {allowed}") from None


def validate_request(
    *,
    topic: str | None,
    provider: str | LLMProvider | None,
    model: str | None,
    depth: str | Depth | None = Depth.BASIC,
    sources: Iterable[str | SearchSource] | None = None,
    include_sources: bool | None = True,
    max_results: int | None = None,
    max_sources: int = MAX_SOURCES,
) -> ResearchParams:
    """Check a raw research request and turn it into ResearchParams.

    Raises InvalidRequest before any provider is called.
    """
    missing = [
        name
        for name, value in (("topic", topic), ("provider", provider), ("model", model))
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise InvalidRequest(f"Missing required parameters: {', '.join(missing)}")
    for name, value in (("topic", topic), ("model", model)):
        if not isinstance(value, str):
            raise InvalidRequest(f"{name} must be a string")

    resolved_provider = _enum_value(LLMProvider, provider, "provider")
    resolved_depth = _enum_value(Depth, depth or Depth.BASIC, "depth")

    try:
        resolved_sources = resolve_sources(
            None if sources is None else list(sources),
            max_sources=max_sources,
        )
    except ValueError as exc:
        allowed = ", ".join(s.value for s in SearchSource)
        raise InvalidRequest(f"Unknown source in {list(sources or [])!r}; expected any of: {allowed}") from exc
    if not resolved_sources:
        raise InvalidRequest("At least one search source is required")

    if max_results is not None and max_results <= 0:
        raise InvalidRequest("max_results must be a positive integer")

    return ResearchParams(
        topic=topic.strip(),
        provider=resolved_provider,
        model=model.strip(),
        depth=resolved_depth,
        sources=tuple(resolved_sources),
        include_sources=True if include_sources is None else bool(include_sources),
        max_results=max_results,
    )


class ResearchOrchestrator:
    """Runs one research pass for a validated request.

    Flow (single linear pass):
      1. Aggregate search results across the requested sources
      2. Enrich the top results with fetched page text (skipped for basic)
      3. Build the depth-specific prompt and generate the summary
      4. For detailed/comprehensive, generate analysis and related topics
         concurrently
      5. Assemble the ResearchReport

    Search and fetch failures degrade per provider. LLM failures abort the pass.
    """

    def __init__(
        self,
        aggregator: SearchAggregator,
        fetcher: ContentFetcher,
        llm: LLMRegistry,
        *,
        fetch_timeout: float | None = 20.0,
        max_sources: int = MAX_SOURCES,
    ):
        self.aggregator = aggregator
        self.fetcher = fetcher
        self.llm = llm
        self.fetch_timeout = fetch_timeout
        self.max_sources = max_sources

    @classmethod
    def from_settings(
        cls,
        config: Settings,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> "ResearchOrchestrator":
        aggregator = SearchAggregator(
            build_search_registry(config, http_client=http_client),
            timeout=config.search_timeout_seconds,
            max_sources=config.max_search_sources,
        )
        fetcher = ContentFetcher(
            http_client=http_client,
            timeout=config.fetch_timeout_seconds,
            max_chars=config.fetch_max_chars,
            user_agent=config.fetch_user_agent,
        )
        return cls(
            aggregator,
            fetcher,
            build_llm_registry(config, http_client=http_client),
            fetch_timeout=config.fetch_timeout_seconds,
            max_sources=config.max_search_sources,
        )

    def validate(self, **raw) -> ResearchParams:
        raw.setdefault("max_sources", self.max_sources)
        return validate_request(**raw)

    async def _enrich(self, results: Sequence[SearchResult], budget: DepthBudget) -> str:
        if budget.enrich_count <= 0:
            return "\n\n".join(result.snippet for result in results)

        top = list(results[: budget.enrich_count])
        outcomes = await gather_outcomes(
            [(result.link, self.fetcher.fetch(result.link)) for result in top],
            timeout=self.fetch_timeout,
        )
        blocks: list[str] = []
        for result, outcome in zip(top, outcomes):
            if outcome.ok and outcome.value:
                blocks.append(outcome.value)
                continue
            if not outcome.ok:
                log_service.log_provider_failure(
                    "fetch",
                    str(outcome.error),
                    url=result.link,
                    fallback="snippet",
                )
            blocks.append(result.snippet)
        return "\n\n".join(blocks)

    async def _deep_content(
        self,
        params: ResearchParams,
        budget: DepthBudget,
    ) -> tuple[str, tuple[str, ...]]:
        analysis_request = CompletionRequest(
            model=params.model,
            prompt=build_analysis_prompt(params.topic, params.sources),
            temperature=ANALYSIS_TEMPERATURE,
            max_tokens=budget.analysis_tokens,
        )
        topics_request = CompletionRequest(
            model=params.model,
            prompt=build_related_topics_prompt(params.topic, params.sources),
            temperature=RELATED_TOPICS_TEMPERATURE,
            max_tokens=budget.related_topics_tokens,
        )
        # Both calls form one logical step; either failing fails the pass.
        analysis, topics = await asyncio.gather(
            self.llm.generate(params.provider, analysis_request, caller="analysis"),
            self.llm.generate(params.provider, topics_request, caller="related_topics"),
        )
        related = tuple(line.strip() for line in topics.content.split("\n") if line.strip())
        return analysis.content, related

    async def conduct_research(self, params: ResearchParams) -> ResearchReport:
        request_id = uuid.uuid4().hex
        started = time.monotonic()
        budget = resolve_budget(params.depth, params.model)
        result_budget = params.max_results or budget.result_budget

        log_service.log_research_step(
            request_id,
            ResearchStage.VALIDATED.value,
            "completed",
            {
                "topic": params.topic[:100],
                "provider": params.provider.value,
                "model": params.model,
                "depth": params.depth.value,
                "sources": [s.value for s in params.sources],
                "result_budget": result_budget,
            },
        )

        results = await self.aggregator.aggregate(
            params.topic,
            result_budget,
            params.sources,
            max_sources=self.max_sources,
        )
        log_service.log_research_step(
            request_id,
            ResearchStage.AGGREGATED.value,
            "completed",
            {"results_count": len(results)},
        )

        context = AggregatedContext(
            results=tuple(results),
            content=await self._enrich(results, budget),
        )
        log_service.log_research_step(
            request_id,
            ResearchStage.ENRICHED.value,
            "completed",
            {"enriched": min(budget.enrich_count, len(results)), "content_chars": len(context.content)},
        )

        summary = await self.llm.generate(
            params.provider,
            CompletionRequest(
                model=params.model,
                prompt=build_research_prompt(params.topic, context.content, params.depth, params.sources),
                temperature=SUMMARY_TEMPERATURE,
                max_tokens=budget.summary_tokens,
            ),
            caller="summary",
        )
        log_service.log_research_step(
            request_id,
            ResearchStage.SUMMARIZED.value,
            "completed",
            {"summary_chars": len(summary.content), "max_tokens": budget.summary_tokens},
        )

        detailed_analysis: str | None = None
        related_topics: tuple[str, ...] | None = None
        if budget.has_analysis:
            detailed_analysis, related_topics = await self._deep_content(params, budget)
            log_service.log_research_step(
                request_id,
                ResearchStage.ANALYZED.value,
                "completed",
                {"related_topics": len(related_topics)},
            )

        report = ResearchReport(
            summary=summary.content,
            sources=context.results if params.include_sources else (),
            detailed_analysis=detailed_analysis,
            related_topics=related_topics,
        )
        log_service.log_research_step(
            request_id,
            ResearchStage.TERMINAL.value,
            "completed",
            {
                "runtime_ms": int((time.monotonic() - started) * 1000),
                "sources_count": len(report.sources),
            },
        )
        return report
