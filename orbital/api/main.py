"""FastAPI application for the orbital pool.

Domain errors are reported as structured JSON bodies
(``{"category", "reason", "detail"}``); the status code follows the error
category.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from orbital import __version__
from orbital.api.endpoints import router
from orbital.errors import OrbitalError
from orbital.models.pool import ErrorResponse

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("ORBITAL_HOST", "0.0.0.0")
PORT = int(os.environ.get("ORBITAL_PORT", "8000"))
DEBUG = os.environ.get("ORBITAL_DEBUG", "false").lower() in ("true", "1", "yes")

# Error category -> HTTP status
STATUS_BY_CATEGORY = {
    "input_validation": 400,
    "arithmetic": 400,
    "ledger": 400,
    "geometry_infeasible": 409,
    "slippage": 409,
    "exhaustion": 409,
    "invariant_violation": 500,
}

app = FastAPI(
    title="Orbital AMM",
    description="n-token sphere/torus tick AMM pool",
    version=__version__,
)


@app.exception_handler(OrbitalError)
async def orbital_error_handler(request: Request, exc: OrbitalError) -> JSONResponse:
    """Turn a domain error into a structured failure response."""
    status_code = STATUS_BY_CATEGORY.get(exc.category, 500)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "operation_rejected",
        path=request.url.path,
        category=exc.category,
        reason=exc.reason,
        detail=str(exc),
    )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(category=exc.category, reason=exc.reason, detail=str(exc)).model_dump(),
    )


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the orbital pool API server.

    Configuration via environment variables:
    - ORBITAL_HOST: Host to bind to (default: 0.0.0.0)
    - ORBITAL_PORT: Port to bind to (default: 8000)
    - ORBITAL_DEBUG: Enable debug/reload mode (default: false)

    Pool settings (token count, fee, segment cap) come from
    ``PoolConfig.from_env()``.
    """
    uvicorn.run(
        "orbital.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
