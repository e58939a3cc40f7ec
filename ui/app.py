"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from config import load_config
from core.health import HealthChecker, check_headroom, check_round_trip
from flake.codec import get_codec
from internal.logging import get_logger, LogLevel, StructuredLogger
from ui.routes import health, ids, settings
from utils.timestamp import parse_timestamp

VERSION = "1.0.0"


def create_app(config=None, codec=None):
    """Create and configure the FastAPI application.

    Serves the process-wide codec unless ``codec`` is given.
    """
    config = config or load_config()

    StructuredLogger.configure(min_level=LogLevel.parse(config.logging.level))
    logger_instance = get_logger()

    codec = codec or get_codec()
    codec.configure(epoch=parse_timestamp(config.codec.epoch), timestamp_bits=config.codec.timestamp_bits)

    health_checker = HealthChecker(codec)
    health_checker.register(check_round_trip, critical=True)
    health_checker.register(check_headroom, critical=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        layout = codec.layout
        logger_instance.info("Application starting", version=VERSION,
                             epoch_ms=layout.epoch_ms, timestamp_bits=layout.timestamp_bits)
        yield
        logger_instance.info("Application shutdown complete")

    app = FastAPI(
        title="Flake ID service",
        version=VERSION,
        description="64-bit time-ordered random identifiers",
        lifespan=lifespan,
    )

    ids.init(codec)
    settings.init(codec)
    health.init(codec, health_checker)

    app.include_router(ids.router)
    app.include_router(settings.router)
    app.include_router(health.router)

    return app
