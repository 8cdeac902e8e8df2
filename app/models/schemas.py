from __future__ import annotations

from pydantic import BaseModel


# --- Requests ---


class ResearchRequest(BaseModel):
    # Presence/emptiness checks happen in the orchestrator so they surface as 400s.
    topic: str | None = None
    provider: str | None = None
    model: str | None = None
    depth: str | None = None
    include_sources: bool | None = None
    sources: list[str] | None = None
    max_results: int | None = None


class CompletionRequest(BaseModel):
    provider: str | None = None
    model: str | None = None
    prompt: str | None = None
    temperature: float = 0.7
    max_tokens: int = 10000


# --- Responses ---


class SearchResultModel(BaseModel):
    title: str
    link: str
    snippet: str
    source: str
    position: int


class ResearchReportResponse(BaseModel):
    summary: str
    sources: list[SearchResultModel]
    detailed_analysis: str | None = None
    related_topics: list[str] | None = None


class SearchResultsResponse(BaseModel):
    results: list[SearchResultModel]


class WebpageContentResponse(BaseModel):
    content: str


class UsageModel(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class CompletionResponseModel(BaseModel):
    content: str
    model: str
    provider: str
    usage: UsageModel


class ModelInfo(BaseModel):
    id: str
    name: str
    provider: str


class ModelsResponse(BaseModel):
    models: list[ModelInfo]


class OllamaModelsResponse(BaseModel):
    models: list[str]
