"""Fixed research prompt templates and the pure functions that render them.

Templates live in `app/prompts/prompts.json` and use `string.Template`
placeholders. Rendering depends only on the arguments, so identical inputs
always produce byte-identical prompts.
"""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from string import Template
from typing import Any, Iterable

from app.models.research import Depth, SearchSource

PROMPTS_PATH = Path(__file__).resolve().parents[1] / "prompts" / "prompts.json"

SUMMARY_TEMPERATURE = 0.5
ANALYSIS_TEMPERATURE = 0.7
RELATED_TOPICS_TEMPERATURE = 0.8


@lru_cache(maxsize=1)
def _load_catalog() -> dict[str, Any]:
    payload = json.loads(PROMPTS_PATH.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("Prompt catalog must be a JSON object.")
    return payload


def _resolve_prompt_entry(key: str) -> str:
    node: Any = _load_catalog()
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            raise KeyError(f"Prompt key not found: {key}")
        node = node[part]
    if not isinstance(node, str):
        raise TypeError(f"Prompt key must map to a string: {key}")
    return node


def render_prompt(key: str, **values: Any) -> str:
    template = Template(_resolve_prompt_entry(key))
    try:
        return template.substitute(**values)
    except KeyError as exc:
        missing = str(exc.args[0])
        raise KeyError(f"Missing template value '{missing}' for prompt '{key}'") from exc


def format_sources(sources: Iterable[SearchSource | str]) -> str:
    return ", ".join(s.value if isinstance(s, SearchSource) else str(s) for s in sources)


def build_research_prompt(
    topic: str,
    content: str,
    depth: Depth | str,
    sources: Iterable[SearchSource | str],
) -> str:
    """Render the summary prompt for one depth tier."""
    return render_prompt(
        f"research.{Depth(depth).value}",
        topic=topic,
        content=content,
        sources_list=format_sources(sources),
    )


def build_analysis_prompt(topic: str, sources: Iterable[SearchSource | str]) -> str:
    return render_prompt("research.analysis", topic=topic, sources_list=format_sources(sources))


def build_related_topics_prompt(topic: str, sources: Iterable[SearchSource | str]) -> str:
    return render_prompt(
        "research.related_topics",
        topic=topic,
        sources_list=format_sources(sources),
    )
