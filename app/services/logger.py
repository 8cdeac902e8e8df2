"""Centralized logging service for debugging and monitoring."""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from app.config import settings

APP_LOG_LEVEL = getattr(logging, settings.app_log_level.upper(), logging.INFO)
NOISY_LOG_LEVEL = getattr(logging, settings.noisy_log_level.upper(), logging.WARNING)

handlers: list[logging.Handler] = [logging.StreamHandler()]
if settings.log_to_file:
    LOG_DIR = Path(settings.log_dir)
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    handlers.append(logging.FileHandler(LOG_DIR / "research.log"))

logging.basicConfig(
    level=APP_LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=handlers,
)

# Reduce noise from framework/network libraries unless explicitly overridden.
for logger_name in (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "httpx",
    "httpcore",
    "hpack",
    "openai._base_client",
    "anthropic._base_client",
    "asyncio",
):
    logging.getLogger(logger_name).setLevel(NOISY_LOG_LEVEL)

logger = logging.getLogger("research")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def log_llm_call(
    model: str,
    caller: str,
    provider: str = "",
    input_tokens: int = 0,
    output_tokens: int = 0,
    duration_ms: int = 0,
    status: str = "success",
    error: Optional[str] = None,
) -> None:
    """Log an LLM API call."""
    call_data = {
        "timestamp": _now(),
        "provider": provider,
        "model": model,
        "caller": caller,
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "total_tokens": input_tokens + output_tokens,
        "duration_ms": duration_ms,
        "status": status,
        "error": error,
    }
    if status == "success":
        logger.info(f"LLM_CALL: {json.dumps(call_data)}")
    else:
        logger.error(f"LLM_CALL: {json.dumps(call_data)}")


def log_research_step(
    request_id: str,
    step_type: str,
    status: str,
    data: Optional[dict] = None,
) -> None:
    """Log an orchestrator state transition."""
    step_data = {
        "timestamp": _now(),
        "request_id": request_id,
        "step_type": step_type,
        "status": status,
        "data": data,
    }
    logger.info(f"RESEARCH_STEP: {json.dumps(step_data)}")


def log_provider_failure(
    provider: str,
    error: str,
    **kwargs: Any,
) -> None:
    """Log a search/fetch provider failure that the pipeline recovered from."""
    failure_data = {
        "timestamp": _now(),
        "provider": provider,
        "error": error,
        **kwargs,
    }
    logger.warning(f"PROVIDER_UNAVAILABLE: {json.dumps(failure_data)}")


def log_event(
    event_type: str,
    message: str,
    **kwargs: Any,
) -> None:
    """Log a generic event."""
    event_data = {
        "timestamp": _now(),
        "event_type": event_type,
        "message": message,
        **kwargs,
    }
    logger.info(f"EVENT: {json.dumps(event_data, default=str)}")
