from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from app.agents.orchestrator import ResearchOrchestrator
from app.api.deps import get_orchestrator
from app.models.errors import ResearchError
from app.models.research import ResearchParams, ResearchReport
from app.models.schemas import ResearchReportResponse, ResearchRequest
from app.services import logger as log_service
from app.services.pdf_export import render_report_pdf, report_filename

router = APIRouter(prefix="/api/research", tags=["research"])


def _failure(request: ResearchRequest, exc: Exception, status_code: int, prefix: str) -> HTTPException:
    log_service.log_event(
        event_type="research_failed",
        message="Research request failed",
        error=str(exc),
        error_type=type(exc).__name__,
        topic=(request.topic or "")[:100],
    )
    return HTTPException(status_code=status_code, detail=f"{prefix}: {exc}")


async def _run(orchestrator: ResearchOrchestrator, request: ResearchRequest) -> tuple[ResearchParams, ResearchReport]:
    try:
        params = orchestrator.validate(
            topic=request.topic,
            provider=request.provider,
            model=request.model,
            depth=request.depth,
            sources=request.sources,
            include_sources=request.include_sources,
            max_results=request.max_results,
        )
        report = await orchestrator.conduct_research(params)
    except ResearchError as e:
        raise _failure(request, e, e.status_code, "Research failed") from e
    except Exception as e:
        raise _failure(request, e, 500, "Research failed") from e
    return params, report


@router.post("", response_model=ResearchReportResponse, response_model_exclude_none=True)
async def conduct_research(
    request: ResearchRequest,
    orchestrator: ResearchOrchestrator = Depends(get_orchestrator),
):
    """Run one research pass and return the report."""
    _, report = await _run(orchestrator, request)
    return report.to_dict()


@router.post("/pdf")
async def export_research_pdf(
    request: ResearchRequest,
    orchestrator: ResearchOrchestrator = Depends(get_orchestrator),
):
    """Run one research pass and return it as a PDF attachment."""
    params, report = await _run(orchestrator, request)
    try:
        pdf_bytes = render_report_pdf(report, params.topic)
    except Exception as e:
        raise _failure(request, e, 500, "PDF generation failed") from e
    filename = report_filename(params.topic)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
