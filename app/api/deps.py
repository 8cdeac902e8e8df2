from __future__ import annotations

from fastapi import Request

from app.agents.orchestrator import ResearchOrchestrator
from app.llm_client import ANTHROPIC_MODELS, OPENAI_MODELS, OllamaAdapter
from app.models.research import LLMProvider


def get_orchestrator(request: Request) -> ResearchOrchestrator:
    """The orchestrator built once in the app lifespan."""
    return request.app.state.orchestrator


async def get_available_models(orchestrator: ResearchOrchestrator) -> list[dict[str, str]]:
    """Static OpenAI/Anthropic catalog plus whatever the local Ollama reports."""
    models = [
        {"id": model_id, "name": name, "provider": LLMProvider.OPENAI.value}
        for model_id, name in OPENAI_MODELS
    ]
    models.extend(
        {"id": model_id, "name": name, "provider": LLMProvider.ANTHROPIC.value}
        for model_id, name in ANTHROPIC_MODELS
    )
    ollama = orchestrator.llm.adapter_for(LLMProvider.OLLAMA)
    if isinstance(ollama, OllamaAdapter):
        models.extend(
            {"id": name, "name": name, "provider": LLMProvider.OLLAMA.value}
            for name in await ollama.list_models()
        )
    return models
