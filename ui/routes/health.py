"""Health and observability routes."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from core.errors import EntropyUnavailable
from core.health import Status
from utils.timestamp import format_timestamp

router = APIRouter(prefix="/api/v1", tags=["health"])

# These will be set by app.py
_codec = None
_health_checker = None


def init(codec, health_checker):
    """Initialize with codec and health checker references."""
    global _codec, _health_checker
    _codec = codec
    _health_checker = health_checker


@router.get("/health")
async def health():
    """Health check with component status."""
    report = _health_checker.check()
    status_code = 200 if report.status != Status.FAIL else 503
    return JSONResponse(content=report.to_dict(), status_code=status_code)


@router.get("/heartbeat")
async def heartbeat():
    """Lightweight heartbeat for frequent polling."""
    try:
        identifier = _codec.to_string(_codec.generate())
    except EntropyUnavailable as exc:
        return JSONResponse(content=exc.to_dict(), status_code=503)
    return {
        "status": "ok",
        "timestamp": format_timestamp(),
        "id": identifier,
    }
