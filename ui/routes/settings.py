"""Codec configuration routes."""

from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.errors import InvalidPrecision
from internal.logging import get_logger
from ui.auth import verify_basic_auth
from utils.timestamp import format_timestamp, parse_timestamp

router = APIRouter(prefix="/api/v1/config", tags=["config"])

# Set by app.py
_codec = None


def init(codec):
    """Initialize with the codec serving this app."""
    global _codec
    _codec = codec


class ConfigUpdate(BaseModel):
    epoch: Optional[str] = None
    # raw JSON value, type-checked by the codec
    timestamp_bits: Any = None


def _layout_dict(layout):
    return {**layout.to_dict(), "epoch": format_timestamp(layout.epoch_ms)}


@router.get("")
async def current():
    """Return the active epoch and bit split."""
    return _layout_dict(_codec.layout)


@router.put("")
async def update(body: ConfigUpdate, username=Depends(verify_basic_auth)):
    """Change epoch and/or precision (requires basic auth).

    Both settings are swapped in together. IDs minted before the change no
    longer decode correctly afterwards.
    """
    log = get_logger().bind(component="config", user=username)
    try:
        epoch = parse_timestamp(body.epoch) if body.epoch is not None else None
    except ValueError as exc:
        log.warn("epoch rejected", error=exc, epoch=body.epoch)
        return JSONResponse(content={"error": "InvalidEpoch", "msg": str(exc)}, status_code=422)
    try:
        layout = _codec.configure(epoch=epoch, timestamp_bits=body.timestamp_bits)
    except InvalidPrecision as exc:
        log.warn("precision rejected", error=exc, error_id=exc.error_id)
        return JSONResponse(content=exc.to_dict(), status_code=422)
    log.info("codec reconfigured", timestamp_bits=layout.timestamp_bits, epoch_ms=layout.epoch_ms)
    return _layout_dict(layout)
