from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.agents.orchestrator import ResearchOrchestrator
from app.api.routes import completion, models, research, search
from app.config import settings
from app.services import logger as log_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: one shared HTTP client and one set of provider adapters per process.
    http_client = httpx.AsyncClient(timeout=settings.search_timeout_seconds)
    app.state.orchestrator = ResearchOrchestrator.from_settings(settings, http_client=http_client)
    log_service.log_event(event_type="startup", message="Research assistant started")
    yield
    # Shutdown
    await http_client.aclose()


app = FastAPI(
    title="Research Assistant",
    description="Multi-source research aggregation with LLM-written reports",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed bodies and query parameters as 400s."""
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"][1:]) or str(error["loc"][0])
        messages.append(f"{field}: {error['msg']}")
    log_service.log_event(
        event_type="invalid_request",
        message="Request validation failed",
        path=request.url.path,
        errors=messages,
    )
    return JSONResponse(
        status_code=400,
        content={"detail": f"Invalid request: {'; '.join(messages)}"},
    )


# Routes
app.include_router(research.router)
app.include_router(completion.router)
app.include_router(search.router)
app.include_router(models.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "research-assistant"}
