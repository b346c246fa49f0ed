"""
Admin endpoints for connector management.

Includes:
- Immediate poll cycle trigger
- Seen-set reset
- Connector statistics
"""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel
from loguru import logger

router = APIRouter()


class PollResponse(BaseModel):
    """Poll operation response."""
    status: str
    message: str
    messages_sent: int


def _source(request: Request):
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None or runtime.source is None:
        raise HTTPException(status_code=404, detail="File source is not enabled")
    return runtime.source


@router.post("/source/poll", response_model=PollResponse)
def trigger_poll(request: Request):
    """
    Run a poll cycle now instead of waiting for the next trigger.

    Returns:
        Number of messages sent to the channel
    """
    source = _source(request)
    logger.info("Manual poll cycle triggered")

    sent = source.poll_once()

    return PollResponse(
        status="completed",
        message=f"Poll of {source.poller.root} completed",
        messages_sent=sent,
    )


@router.delete("/source/seen")
def reset_seen(request: Request):
    """
    Clear the source's seen-set so existing files are emitted again.

    Returns:
        Reset status
    """
    source = _source(request)
    cleared = source.poller.seen_count
    source.reset()

    return {
        "status": "completed",
        "message": f"Forgot {cleared} emitted file(s)",
        "cleared": cleared,
    }


@router.get("/stats")
async def get_stats(request: Request):
    """
    Get connector statistics.

    Returns:
        Channel, consumer, source and sink counters
    """
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise HTTPException(status_code=503, detail="Connector runtime not started")
    return runtime.stats()
