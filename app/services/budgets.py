from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType

from app.models.research import Depth

_CLAUDE_GENERATION_RE = re.compile(r"claude-(?:(?:opus|sonnet|haiku|instant)-)?(\d+)")


@dataclass(frozen=True, slots=True)
class DepthBudget:
    """Token and fetch budgets for one (depth, model-class) pair."""

    result_budget: int
    enrich_count: int
    summary_tokens: int
    analysis_tokens: int | None = None
    related_topics_tokens: int | None = None

    @property
    def has_analysis(self) -> bool:
        return self.analysis_tokens is not None


# depth -> (standard model, large-context model)
BUDGETS: MappingProxyType[Depth, tuple[DepthBudget, DepthBudget]] = MappingProxyType(
    {
        Depth.BASIC: (
            DepthBudget(result_budget=3, enrich_count=0, summary_tokens=1500),
            DepthBudget(result_budget=3, enrich_count=0, summary_tokens=2000),
        ),
        Depth.DETAILED: (
            DepthBudget(5, 4, summary_tokens=3000, analysis_tokens=2000, related_topics_tokens=1500),
            DepthBudget(5, 4, summary_tokens=5000, analysis_tokens=3000, related_topics_tokens=2000),
        ),
        Depth.COMPREHENSIVE: (
            DepthBudget(8, 6, summary_tokens=8000, analysis_tokens=3000, related_topics_tokens=1500),
            DepthBudget(8, 6, summary_tokens=12000, analysis_tokens=5000, related_topics_tokens=2000),
        ),
    }
)


def is_large_context_model(model: str) -> bool:
    """True for model ids that signal an extended context window.

    Matches a 32k or turbo designation, or a third-or-later generation
    Claude id (claude-3-..., claude-sonnet-4-5, ...).
    """
    lowered = (model or "").lower()
    if "32k" in lowered or "turbo" in lowered:
        return True
    match = _CLAUDE_GENERATION_RE.search(lowered)
    return bool(match) and int(match.group(1)) >= 3


def resolve_budget(depth: Depth, model: str) -> DepthBudget:
    standard, large = BUDGETS[Depth(depth)]
    return large if is_large_context_model(model) else standard
