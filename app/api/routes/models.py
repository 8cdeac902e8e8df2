from __future__ import annotations

from fastapi import APIRouter, Depends

from app.agents.orchestrator import ResearchOrchestrator
from app.api.deps import get_available_models, get_orchestrator
from app.llm_client import OllamaAdapter
from app.models.research import LLMProvider
from app.models.schemas import ModelInfo, ModelsResponse, OllamaModelsResponse

router = APIRouter(prefix="/api/models", tags=["models"])


@router.get("", response_model=ModelsResponse)
async def list_models(orchestrator: ResearchOrchestrator = Depends(get_orchestrator)):
    """List models across providers."""
    models = await get_available_models(orchestrator)
    return ModelsResponse(models=[ModelInfo(**m) for m in models])


@router.get("/ollama", response_model=OllamaModelsResponse)
async def list_ollama_models(orchestrator: ResearchOrchestrator = Depends(get_orchestrator)):
    """Models installed in the local Ollama runtime; empty when it is unreachable."""
    adapter = orchestrator.llm.adapter_for(LLMProvider.OLLAMA)
    names = await adapter.list_models() if isinstance(adapter, OllamaAdapter) else []
    return OllamaModelsResponse(models=names)
