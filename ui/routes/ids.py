"""Routes for minting and decoding flake IDs."""

from typing import Any

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.errors import BaseFlakeError, EntropyUnavailable
from internal.logging import get_logger

router = APIRouter(prefix="/api/v1/ids", tags=["ids"])

MAX_BATCH = 1000

# Set by app.py
_codec = None


def init(codec):
    """Initialize with the codec serving this app."""
    global _codec
    _codec = codec


class DecodeRequest(BaseModel):
    # numbers are accepted for clients that ignore the string convention
    id: Any


def _error_response(exc, status_code):
    get_logger().bind(component="ids").warn(
        "flake request rejected", error=exc, error_id=exc.error_id, kind=type(exc).__name__)
    return JSONResponse(content=exc.to_dict(), status_code=status_code)


@router.post("")
async def mint(count: int = Query(1, ge=1, le=MAX_BATCH)):
    """Generate ``count`` new IDs, returned as decimal strings."""
    try:
        ids = [_codec.to_string(_codec.generate()) for _ in range(count)]
    except EntropyUnavailable as exc:
        return _error_response(exc, 503)
    return {"ids": ids}


@router.post("/decode")
async def decode(request: DecodeRequest):
    """Decompose an ID given as a JSON string or number."""
    try:
        identifier = _codec.from_json_value(request.id)
    except BaseFlakeError as exc:
        return _error_response(exc, 400)
    return _codec.describe(identifier)


@router.get("/{identifier}")
async def inspect(identifier: str):
    """Decompose an ID given in its decimal form."""
    try:
        value = _codec.from_string(identifier)
    except BaseFlakeError as exc:
        return _error_response(exc, 400)
    return _codec.describe(value)
