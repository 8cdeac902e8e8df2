from __future__ import annotations

import pytest

from app.models.research import Depth
from app.services.budgets import is_large_context_model, resolve_budget


@pytest.mark.parametrize(
    "model",
    [
        "gpt-4-32k",
        "gpt-4-turbo",
        "gpt-3.5-turbo",
        "claude-3-opus-20240229",
        "claude-3-5-sonnet-20240620",
        "claude-sonnet-4-5-20250929",
        "Claude-3-Haiku",
    ],
)
def test_large_context_models(model):
    assert is_large_context_model(model) is True


@pytest.mark.parametrize("model", ["gpt-4", "claude-2.1", "claude-instant-1", "llama3", ""])
def test_standard_context_models(model):
    assert is_large_context_model(model) is False


def test_basic_budget_has_no_analysis_or_enrichment():
    budget = resolve_budget(Depth.BASIC, "gpt-4")

    assert budget.result_budget == 3
    assert budget.enrich_count == 0
    assert budget.summary_tokens == 1500
    assert budget.has_analysis is False
    assert resolve_budget(Depth.BASIC, "gpt-4-turbo").summary_tokens == 2000


@pytest.mark.parametrize(
    ("depth", "model", "expected"),
    [
        (Depth.DETAILED, "gpt-4", (5, 4, 3000, 2000, 1500)),
        (Depth.DETAILED, "gpt-4-turbo", (5, 4, 5000, 3000, 2000)),
        (Depth.COMPREHENSIVE, "llama3", (8, 6, 8000, 3000, 1500)),
        (Depth.COMPREHENSIVE, "claude-3-opus-20240229", (8, 6, 12000, 5000, 2000)),
    ],
)
def test_deep_budgets(depth, model, expected):
    budget = resolve_budget(depth, model)

    assert (
        budget.result_budget,
        budget.enrich_count,
        budget.summary_tokens,
        budget.analysis_tokens,
        budget.related_topics_tokens,
    ) == expected
    assert budget.has_analysis is True


def test_resolve_budget_accepts_raw_depth_value():
    assert resolve_budget("detailed", "gpt-4").summary_tokens == 3000
