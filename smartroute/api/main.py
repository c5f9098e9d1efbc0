"""FastAPI application for the smart-route quote service.

Note: Rate limiting is intentionally not implemented at the application level.
It should be handled at the infrastructure layer (reverse proxy / load balancer).
"""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from smartroute import __version__
from smartroute.api.endpoints import router, shutdown_service

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("SMARTROUTE_HOST", "0.0.0.0")
PORT = int(os.environ.get("SMARTROUTE_PORT", "8000"))
DEBUG = os.environ.get("SMARTROUTE_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await shutdown_service()


app = FastAPI(
    title="Smart Route",
    description="Best-execution quotes across constant-product and concentrated-liquidity AMMs",
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - SMARTROUTE_HOST: Host to bind to (default: 0.0.0.0)
    - SMARTROUTE_PORT: Port to bind to (default: 8000)
    - SMARTROUTE_DEBUG: Enable debug/reload mode (default: false)
    """
    uvicorn.run(
        "smartroute.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
