from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SearchSource(str, Enum):
    """Search backends, declared in registration order.

    The declaration order is the merge order used by the aggregator.
    """

    WEB = "web"
    WIKIPEDIA = "wikipedia"
    SCHOLAR = "scholar"
    GITHUB = "github"
    NEWS = "news"


class Depth(str, Enum):
    BASIC = "basic"
    DETAILED = "detailed"
    COMPREHENSIVE = "comprehensive"


class LLMProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"


class ResearchStage(str, Enum):
    VALIDATED = "validated"
    AGGREGATED = "aggregated"
    ENRICHED = "enriched"
    SUMMARIZED = "summarized"
    ANALYZED = "analyzed"
    TERMINAL = "terminal"


@dataclass(frozen=True, slots=True)
class SearchResult:
    title: str
    link: str
    snippet: str
    source: SearchSource
    position: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "snippet": self.snippet,
            "source": self.source.value,
            "position": self.position,
        }


@dataclass(frozen=True, slots=True)
class ResearchParams:
    """A validated research request. Build it with `orchestrator.validate_request`."""

    topic: str
    provider: LLMProvider
    model: str
    depth: Depth = Depth.BASIC
    sources: tuple[SearchSource, ...] = tuple(SearchSource)
    include_sources: bool = True
    max_results: int | None = None


@dataclass(frozen=True, slots=True)
class AggregatedContext:
    results: tuple[SearchResult, ...]
    content: str = ""


@dataclass(frozen=True, slots=True)
class ResearchReport:
    summary: str
    sources: tuple[SearchResult, ...] = field(default_factory=tuple)
    detailed_analysis: str | None = None
    related_topics: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "summary": self.summary,
            "sources": [s.to_dict() for s in self.sources],
        }
        if self.detailed_analysis is not None:
            data["detailed_analysis"] = self.detailed_analysis
        if self.related_topics is not None:
            data["related_topics"] = list(self.related_topics)
        return data
