"""
Health check endpoint.
"""

from datetime import datetime
from typing import Dict, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from app.utils.config import get_settings

router = APIRouter()


class ComponentHealth(BaseModel):
    """Health of one connector component."""
    enabled: bool
    running: bool
    last_error: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: datetime
    version: str
    components: Dict[str, ComponentHealth]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Health check endpoint.

    Verifies:
    - API is running
    - Enabled connectors have live threads
    """
    settings = get_settings()
    runtime = getattr(request.app.state, "runtime", None)

    components: Dict[str, ComponentHealth] = {}
    if runtime is not None:
        source = runtime.source
        components["source"] = ComponentHealth(
            enabled=source is not None,
            running=bool(source and source.running),
            last_error=source.last_error if source else None,
        )
        sink = runtime.sink
        components["sink"] = ComponentHealth(
            enabled=sink is not None,
            running=bool(sink and runtime.consumer.running),
            last_error=sink.last_error if sink else None,
        )

    healthy = bool(components) and all(
        c.running for c in components.values() if c.enabled
    )

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        timestamp=datetime.now(),
        version=settings.api_version,
        components=components,
    )
