from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from app.agents.orchestrator import ResearchOrchestrator
from app.api.deps import get_orchestrator
from app.models.errors import ResearchError
from app.models.research import SearchSource
from app.models.schemas import SearchResultsResponse, WebpageContentResponse

router = APIRouter(prefix="/api", tags=["search"])


@router.get("/search/{source}", response_model=SearchResultsResponse)
async def search_source(
    source: str,
    query: str | None = None,
    num: int = Query(default=5, ge=1, le=100),
    orchestrator: ResearchOrchestrator = Depends(get_orchestrator),
):
    """Query a single search backend without aggregation."""
    if not query:
        raise HTTPException(status_code=400, detail="Missing required parameter: query")
    try:
        search_source_enum = SearchSource(source.lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown search source: {source}")

    adapter = orchestrator.aggregator.registry.adapter_for(search_source_enum)
    try:
        results = await adapter(query, max_results=num)
    except ResearchError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return {"results": [r.to_dict() for r in results]}


@router.get("/fetch-webpage", response_model=WebpageContentResponse)
async def fetch_webpage(
    url: str | None = None,
    orchestrator: ResearchOrchestrator = Depends(get_orchestrator),
):
    """Return the sanitized visible text of a page."""
    if not url:
        raise HTTPException(status_code=400, detail="Missing required parameter: url")
    try:
        content = await orchestrator.fetcher.fetch(url)
    except ResearchError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return {"content": content}
