from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.agents.orchestrator import ResearchOrchestrator
from app.api.deps import get_orchestrator
from app.llm_client import CompletionRequest
from app.models.errors import ResearchError
from app.models.research import LLMProvider
from app.models.schemas import CompletionRequest as CompletionBody
from app.models.schemas import CompletionResponseModel

router = APIRouter(prefix="/api/completion", tags=["completion"])


@router.post("", response_model=CompletionResponseModel)
async def complete(
    body: CompletionBody,
    orchestrator: ResearchOrchestrator = Depends(get_orchestrator),
):
    """Pass one prompt straight through to the chosen LLM provider."""
    if not body.provider or not body.model or not body.prompt:
        raise HTTPException(
            status_code=400,
            detail="Missing required parameters: provider, model, prompt",
        )
    try:
        provider = LLMProvider(body.provider.strip().lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unsupported AI provider: {body.provider}")

    try:
        response = await orchestrator.llm.generate(
            provider,
            CompletionRequest(
                model=body.model,
                prompt=body.prompt,
                temperature=body.temperature,
                max_tokens=body.max_tokens,
            ),
        )
    except ResearchError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e
    return response.to_dict()
