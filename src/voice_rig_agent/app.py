"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .errors import (
    ConfigurationError,
    MissingParameterError,
    NotConnectedError,
    ProviderError,
    RequestTimeoutError,
    RigError,
)
from .routes import cluster, providers, voice
from .runtime import RigRuntime, get_runtime, set_runtime

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
# paramiko logs every channel open at INFO.
logging.getLogger("paramiko").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def status_for(error: RigError) -> int:
    if isinstance(error, (ConfigurationError, MissingParameterError, ValueError)):
        return 400
    if isinstance(error, NotConnectedError):
        return 409
    if isinstance(error, RequestTimeoutError):
        return 504
    if isinstance(error, ProviderError):
        return 502
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - owns the cluster session."""
    runtime = RigRuntime.from_settings(settings)
    set_runtime(runtime)
    logger.info("Active LLM provider: %s", runtime.credentials.get_active_provider() or "none")
    if runtime.session.config is None:
        logger.info("No saved cluster connection. POST /cluster/config to add one.")

    yield

    await get_runtime().session.disconnect()
    logger.info("Cluster session closed")


app = FastAPI(lifespan=lifespan)


@app.exception_handler(RigError)
async def rig_error_handler(request: Request, exc: RigError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_for(exc), content={"error": exc.user_message, "action": exc.action})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"error": str(exc), "action": "ERROR_INVALID_REQUEST"})


# Include route modules
app.include_router(voice.router)
app.include_router(cluster.router)
app.include_router(providers.router)
